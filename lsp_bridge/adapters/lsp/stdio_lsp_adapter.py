"""
Language server adapter speaking JSON-RPC over a subprocess's stdio.
"""

import json
import logging
import os
import subprocess
import threading
from typing import IO, Any, Optional

from typing_extensions import override

from lsp_bridge.entities.CodeLens import CodeLens, Command
from lsp_bridge.entities.Diagnostic import Diagnostic
from lsp_bridge.entities.Symbol import DocumentSymbol, Location, SymbolInfo
from lsp_bridge.entities.TextEdit import Position, Range
from lsp_bridge.exceptions import BackendRequestError, ConfigurationError
from lsp_bridge.ports.lsp.lsp_client_port import LSPClientPort
from lsp_bridge.utils.workspace import path_to_uri, uri_to_path

# Symbol kind mapping from the LSP specification
SYMBOL_KINDS: dict[int, str] = {
    1: "file",
    2: "module",
    3: "namespace",
    4: "package",
    5: "class",
    6: "method",
    7: "property",
    8: "field",
    9: "constructor",
    10: "enum",
    11: "interface",
    12: "function",
    13: "variable",
    14: "constant",
    15: "string",
    16: "number",
    17: "boolean",
    18: "array",
    19: "object",
    20: "key",
    21: "null",
    22: "enum_member",
    23: "struct",
    24: "event",
    25: "operator",
    26: "type_parameter",
}

METHOD_NOT_FOUND = -32601


# ------------------------- wire helpers -------------------------
def encode_message(message: dict[str, Any]) -> bytes:
    """Frame a JSON-RPC message with its Content-Length header (length in bytes)."""
    content = json.dumps(message, ensure_ascii=False).encode("utf-8")
    return f"Content-Length: {len(content)}\r\n\r\n".encode("ascii") + content


def read_message(stream: IO[bytes]) -> Optional[dict[str, Any]]:
    """Read one framed message, or None at end of stream."""
    content_length = -1
    while True:
        line = stream.readline()
        if not line:
            return None
        line = line.strip()
        if not line:
            if content_length >= 0:
                break
            continue
        name, _, value = line.decode("ascii", errors="replace").partition(":")
        if name.strip().lower() == "content-length":
            content_length = int(value.strip())
    body = b""
    while len(body) < content_length:
        chunk = stream.read(content_length - len(body))
        if not chunk:
            return None
        body += chunk
    return json.loads(body.decode("utf-8"))


def parse_position(data: Optional[dict[str, Any]]) -> Position:
    data = data or {}
    return Position(line=int(data.get("line", 0)), character=int(data.get("character", 0)))


def parse_range(data: Optional[dict[str, Any]]) -> Range:
    data = data or {}
    return Range(start=parse_position(data.get("start")), end=parse_position(data.get("end")))


def parse_locations(result: Any) -> list[Location]:
    """Parse Location | Location[] | LocationLink[]."""
    if not result:
        return []
    if isinstance(result, dict):
        result = [result]
    locations: list[Location] = []
    for item in result:
        if "targetUri" in item:
            uri = item["targetUri"]
            range_info = item.get("targetSelectionRange") or item.get("targetRange")
        else:
            uri = item.get("uri", "")
            range_info = item.get("range")
        if uri:
            locations.append(Location(path=uri_to_path(uri), range=parse_range(range_info)))
    return locations


def parse_workspace_symbols(result: Any) -> list[SymbolInfo]:
    symbols: list[SymbolInfo] = []
    for sym in result or []:
        location = sym.get("location") or {}
        uri = location.get("uri")
        if not uri:
            continue
        symbols.append(
            SymbolInfo(
                name=sym.get("name", ""),
                kind=SYMBOL_KINDS.get(sym.get("kind", 0), "unknown"),
                # WorkspaceSymbol may omit the range until resolved
                location=Location(path=uri_to_path(uri), range=parse_range(location.get("range"))),
                container_name=sym.get("containerName") or None,
            )
        )
    return symbols


def parse_document_symbols(result: Any) -> list[DocumentSymbol]:
    """Parse DocumentSymbol[] (hierarchical) or SymbolInformation[] (flat)."""
    symbols: list[DocumentSymbol] = []
    for sym in result or []:
        if "location" in sym:
            rng = parse_range(sym["location"].get("range"))
            symbols.append(
                DocumentSymbol(
                    name=sym.get("name", ""),
                    kind=SYMBOL_KINDS.get(sym.get("kind", 0), "unknown"),
                    range=rng,
                    selection_range=rng,
                )
            )
            continue
        rng = parse_range(sym.get("range"))
        symbols.append(
            DocumentSymbol(
                name=sym.get("name", ""),
                kind=SYMBOL_KINDS.get(sym.get("kind", 0), "unknown"),
                range=rng,
                selection_range=parse_range(sym.get("selectionRange")) if sym.get("selectionRange") else rng,
                children=tuple(parse_document_symbols(sym.get("children"))),
            )
        )
    return symbols


def parse_diagnostics(items: Any) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for diag in items or []:
        code = diag.get("code")
        diagnostics.append(
            Diagnostic(
                range=parse_range(diag.get("range")),
                message=diag.get("message", ""),
                severity=int(diag.get("severity") or 1),
                source=diag.get("source"),
                code=str(code) if code is not None else None,
            )
        )
    return diagnostics


def parse_code_lenses(result: Any) -> list[CodeLens]:
    return [parse_code_lens(item) for item in result or []]


def parse_code_lens(item: dict[str, Any]) -> CodeLens:
    command = item.get("command")
    return CodeLens(
        range=parse_range(item.get("range")),
        command=Command(
            title=command.get("title", ""),
            command=command.get("command", ""),
            arguments=list(command.get("arguments") or []),
        )
        if command
        else None,
        data=item.get("data"),
    )


def code_lens_to_wire(lens: CodeLens) -> dict[str, Any]:
    wire: dict[str, Any] = {"range": lens.range.to_dict()}
    if lens.command is not None:
        wire["command"] = {
            "title": lens.command.title,
            "command": lens.command.command,
            "arguments": list(lens.command.arguments),
        }
    if lens.data is not None:
        wire["data"] = lens.data
    return wire


class _PendingRequest:
    def __init__(self, method: str) -> None:
        self.method = method
        self.event = threading.Event()
        self.response: Optional[dict[str, Any]] = None


class StdioLanguageServerAdapter(LSPClientPort):
    """LSPClientPort implementation over a language server subprocess."""

    def __init__(
        self,
        command: list[str],
        workspace_root: str,
        request_timeout: float = 30.0,
        diagnostics_timeout: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the adapter. The server is started lazily on first use.

        Args:
            command: Server command line (e.g. ["gopls", "serve"])
            workspace_root: Absolute path of the workspace root
            request_timeout: Seconds to wait for each response
            diagnostics_timeout: Seconds to wait for published diagnostics
            logger: Logger instance to use for logging
        """
        self._command = list(command)
        self._workspace_root = os.path.abspath(workspace_root)
        self._request_timeout = request_timeout
        self._diagnostics_timeout = diagnostics_timeout
        self._logger = logger or logging.getLogger(__name__)

        self._process: Optional[subprocess.Popen] = None
        self._start_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._next_id = 0
        self._pending: dict[int, _PendingRequest] = {}
        self._published: dict[str, list[Diagnostic]] = {}
        self._published_events: dict[str, threading.Event] = {}
        self._capabilities: dict[str, Any] = {}
        # path -> language ID, for documents opened on the current process
        self._open_documents: dict[str, str] = {}
        self._language_ids: dict[str, str] = {}

    # ------------------------- lifecycle -------------------------
    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """
        Start the server process and perform the initialize handshake.

        Raises:
            ConfigurationError: If no server command is configured
            BackendRequestError: If the server cannot be started or initialized
        """
        with self._start_lock:
            if self.is_running:
                return
            if not self._command:
                raise ConfigurationError(
                    "No language server command configured (set LSP_BRIDGE_SERVER_COMMAND)"
                )
            self._logger.info(f"Starting language server: {' '.join(self._command)}")
            try:
                self._process = subprocess.Popen(
                    self._command,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=self._workspace_root,
                )
            except FileNotFoundError:
                raise BackendRequestError(f"Language server not found: {self._command[0]}")
            except OSError as e:
                raise BackendRequestError(f"Failed to start language server: {str(e)}")

            # State of a previous process means nothing to a fresh server
            with self._state_lock:
                self._published.clear()
                self._published_events.clear()
                self._open_documents.clear()

            threading.Thread(target=self._read_loop, name="lsp-reader", daemon=True).start()
            threading.Thread(target=self._drain_stderr, name="lsp-stderr", daemon=True).start()

            try:
                result = self._request("initialize", self._initialize_params())
                self._capabilities = (result or {}).get("capabilities") or {}
                self._notify("initialized", {})
            except BackendRequestError as e:
                self._logger.error(f"Language server initialization failed: {e}")
                self._discard_process()
                raise
            encoding = self._capabilities.get("positionEncoding", "utf-16")
            if encoding != "utf-32":
                self._logger.warning(
                    f"Server uses {encoding} positions; columns after characters "
                    "outside the Basic Multilingual Plane will be off"
                )
            self._logger.info("Language server initialized")

    def stop(self) -> None:
        """Shut the server down politely, then make sure the process is gone."""
        process = self._process
        if process is None:
            return
        if process.poll() is None:
            try:
                self._request("shutdown", None, timeout=min(self._request_timeout, 5.0))
                self._notify("exit", None)
            except BackendRequestError as e:
                self._logger.warning(f"Language server did not shut down cleanly: {e}")
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
        self._process = None
        self._logger.info("Language server stopped")

    def _discard_process(self) -> None:
        process = self._process
        self._process = None
        if process is not None and process.poll() is None:
            process.kill()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._logger.warning("Language server did not exit after kill")

    def _ensure_started(self) -> None:
        if not self.is_running:
            self.start()

    def _initialize_params(self) -> dict[str, Any]:
        root_uri = path_to_uri(self._workspace_root)
        return {
            "processId": os.getpid(),
            "rootUri": root_uri,
            "workspaceFolders": [
                {"uri": root_uri, "name": os.path.basename(self._workspace_root)}
            ],
            "capabilities": {
                "general": {"positionEncodings": ["utf-32", "utf-16"]},
                "workspace": {
                    "symbol": {},
                    "executeCommand": {},
                    "configuration": True,
                    "applyEdit": False,
                    "workspaceFolders": True,
                },
                "textDocument": {
                    "synchronization": {"didSave": False},
                    "definition": {"linkSupport": True},
                    "references": {},
                    "documentSymbol": {"hierarchicalDocumentSymbolSupport": True},
                    "publishDiagnostics": {"relatedInformation": True},
                    "diagnostic": {},
                    "codeLens": {},
                },
            },
        }

    # ------------------------- JSON-RPC -------------------------
    def _write_message(self, message: dict[str, Any]) -> None:
        process = self._process
        if process is None or process.stdin is None:
            raise BackendRequestError("Language server is not running")
        with self._write_lock:
            try:
                process.stdin.write(encode_message(message))
                process.stdin.flush()
            except (BrokenPipeError, OSError) as e:
                raise BackendRequestError(f"Failed to write to language server: {str(e)}")

    def _request(self, method: str, params: Any, timeout: Optional[float] = None) -> Any:
        with self._state_lock:
            self._next_id += 1
            request_id = self._next_id
            pending = _PendingRequest(method)
            self._pending[request_id] = pending
        try:
            self._write_message(
                {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
            )
            wait = timeout if timeout is not None else self._request_timeout
            if not pending.event.wait(wait):
                self._notify("$/cancelRequest", {"id": request_id})
                raise BackendRequestError(
                    f"Request {method} timed out after {wait:g}s", method=method
                )
        finally:
            with self._state_lock:
                self._pending.pop(request_id, None)

        response = pending.response or {}
        if "error" in response:
            error = response["error"] or {}
            raise BackendRequestError(
                f"Request {method} failed: {error.get('message', 'unknown error')} "
                f"(code {error.get('code')})",
                method=method,
            )
        return response.get("result")

    def _notify(self, method: str, params: Any) -> None:
        self._write_message({"jsonrpc": "2.0", "method": method, "params": params})

    def _read_loop(self) -> None:
        process = self._process
        if process is None or process.stdout is None:
            return
        try:
            while True:
                message = read_message(process.stdout)
                if message is None:
                    break
                self._handle_message(message)
        except (OSError, ValueError) as e:
            self._logger.error(f"Language server reader stopped: {e}")
        finally:
            self._fail_pending("Language server exited")

    def _drain_stderr(self) -> None:
        process = self._process
        if process is None or process.stderr is None:
            return
        for raw in iter(process.stderr.readline, b""):
            self._logger.debug(f"[server] {raw.decode('utf-8', errors='replace').rstrip()}")

    def _fail_pending(self, reason: str) -> None:
        with self._state_lock:
            pending = list(self._pending.values())
        for request in pending:
            request.response = {"error": {"code": -32099, "message": reason}}
            request.event.set()

    def _handle_message(self, message: dict[str, Any]) -> None:
        if "method" in message and "id" in message:
            self._handle_server_request(message)
        elif "id" in message:
            with self._state_lock:
                pending = self._pending.get(message["id"])
            if pending is not None:
                pending.response = message
                pending.event.set()
        elif "method" in message:
            self._handle_notification(message)

    def _handle_server_request(self, message: dict[str, Any]) -> None:
        method = message.get("method")
        params = message.get("params") or {}
        reply: dict[str, Any] = {"jsonrpc": "2.0", "id": message["id"]}
        if method == "workspace/configuration":
            reply["result"] = [None for _ in params.get("items", [])]
        elif method in (
            "window/workDoneProgress/create",
            "client/registerCapability",
            "client/unregisterCapability",
            "window/showMessageRequest",
        ):
            reply["result"] = None
        elif method == "workspace/applyEdit":
            reply["result"] = {
                "applied": False,
                "failureReason": "Server-initiated edits are not supported; use apply_text_edit",
            }
        else:
            reply["error"] = {"code": METHOD_NOT_FOUND, "message": f"Unsupported method: {method}"}
        try:
            self._write_message(reply)
        except BackendRequestError as e:
            self._logger.warning(f"Could not answer server request {method}: {e}")

    def _handle_notification(self, message: dict[str, Any]) -> None:
        method = message.get("method", "")
        params = message.get("params") or {}
        if method == "textDocument/publishDiagnostics":
            path = uri_to_path(params.get("uri", ""))
            diagnostics = parse_diagnostics(params.get("diagnostics"))
            self._logger.debug(f"Received {len(diagnostics)} diagnostics for {path}")
            with self._state_lock:
                self._published[path] = diagnostics
                event = self._published_events.setdefault(path, threading.Event())
            event.set()
        elif method == "window/logMessage":
            self._logger.debug(f"[server] {params.get('message', '')}")

    def _expect_fresh_diagnostics(self, path: str) -> None:
        with self._state_lock:
            self._published_events.setdefault(path, threading.Event()).clear()

    # ------------------------- LSPClientPort -------------------------
    @override
    def workspace_symbols(self, query: str) -> list[SymbolInfo]:
        self._ensure_started()
        return parse_workspace_symbols(self._request("workspace/symbol", {"query": query}))

    @override
    def definition(self, path: str, position: Position) -> list[Location]:
        self._ensure_started()
        result = self._request(
            "textDocument/definition",
            {"textDocument": {"uri": path_to_uri(path)}, "position": position.to_dict()},
        )
        return parse_locations(result)

    @override
    def references(
        self, path: str, position: Position, include_declaration: bool = False
    ) -> list[Location]:
        self._ensure_started()
        result = self._request(
            "textDocument/references",
            {
                "textDocument": {"uri": path_to_uri(path)},
                "position": position.to_dict(),
                "context": {"includeDeclaration": include_declaration},
            },
        )
        return parse_locations(result)

    @override
    def document_symbols(self, path: str) -> list[DocumentSymbol]:
        self._ensure_started()
        result = self._request(
            "textDocument/documentSymbol", {"textDocument": {"uri": path_to_uri(path)}}
        )
        return parse_document_symbols(result)

    @override
    def diagnostics(self, path: str) -> Optional[list[Diagnostic]]:
        self._ensure_started()
        if self._capabilities.get("diagnosticProvider") is not None:
            report = self._request(
                "textDocument/diagnostic", {"textDocument": {"uri": path_to_uri(path)}}
            )
            if report and report.get("kind") == "full":
                return parse_diagnostics(report.get("items"))

        with self._state_lock:
            event = self._published_events.setdefault(path, threading.Event())
        if not event.wait(self._diagnostics_timeout):
            self._logger.debug(
                f"No fresh diagnostics for {path} after {self._diagnostics_timeout:g}s"
            )
        with self._state_lock:
            published = self._published.get(path)
        return list(published) if published is not None else None

    @override
    def did_open(self, path: str, language_id: str, version: int, text: str) -> None:
        self._ensure_started()
        self._send_did_open(path, language_id, version, text)

    def _send_did_open(self, path: str, language_id: str, version: int, text: str) -> None:
        self._expect_fresh_diagnostics(path)
        with self._state_lock:
            self._open_documents[path] = language_id
            self._language_ids[path] = language_id
        self._notify(
            "textDocument/didOpen",
            {
                "textDocument": {
                    "uri": path_to_uri(path),
                    "languageId": language_id,
                    "version": version,
                    "text": text,
                }
            },
        )

    @override
    def did_change(self, path: str, version: int, text: str) -> None:
        self._ensure_started()
        with self._state_lock:
            opened = path in self._open_documents
            language_id = self._language_ids.get(path, "plaintext")
        if not opened:
            # The server was restarted since the document was opened
            self._logger.info(f"Reopening {path} on the restarted language server")
            self._send_did_open(path, language_id, version, text)
            return
        self._expect_fresh_diagnostics(path)
        self._notify(
            "textDocument/didChange",
            {
                "textDocument": {"uri": path_to_uri(path), "version": version},
                "contentChanges": [{"text": text}],
            },
        )

    @override
    def code_lenses(self, path: str) -> list[CodeLens]:
        self._ensure_started()
        result = self._request(
            "textDocument/codeLens", {"textDocument": {"uri": path_to_uri(path)}}
        )
        return parse_code_lenses(result)

    @override
    def resolve_code_lens(self, lens: CodeLens) -> CodeLens:
        self._ensure_started()
        provider = self._capabilities.get("codeLensProvider")
        if not isinstance(provider, dict) or not provider.get("resolveProvider"):
            return lens
        result = self._request("codeLens/resolve", code_lens_to_wire(lens))
        return parse_code_lens(result) if result else lens

    @override
    def execute_command(self, command: str, arguments: list[Any]) -> Any:
        self._ensure_started()
        return self._request(
            "workspace/executeCommand", {"command": command, "arguments": list(arguments)}
        )
