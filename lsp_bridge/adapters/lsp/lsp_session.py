"""
Process-wide session around the language server connection.

The session is handed to every use case by reference. It serializes all
traffic on the single backend connection, tracks which documents are open (and
their versions) and hands out per-file locks for mutations.
"""

import logging
import os
import threading
import weakref
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from typing_extensions import override

from lsp_bridge.entities.CodeLens import CodeLens
from lsp_bridge.entities.Diagnostic import Diagnostic
from lsp_bridge.entities.Symbol import DocumentSymbol, Location, SymbolInfo
from lsp_bridge.entities.TextEdit import Position
from lsp_bridge.exceptions import BackendRequestError, BaseAppError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.ports.lsp.lsp_client_port import LSPClientPort

LANGUAGE_IDS: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".java": "java",
    ".rb": "ruby",
    ".cs": "csharp",
}


def language_id_for(path: str) -> str:
    """Guess the LSP language ID from the file extension."""
    return LANGUAGE_IDS.get(os.path.splitext(path)[1].lower(), "plaintext")


class LspSession(LSPClientPort):
    """Serializing decorator over an LSPClientPort, plus document state."""

    def __init__(
        self,
        backend: LSPClientPort,
        files: TextFilePort,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the session.

        Args:
            backend: The actual language server connection
            files: Text file port used to read documents for synchronization
            logger: Logger instance to use for logging
        """
        self._backend = backend
        self._files = files
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._versions: dict[str, int] = {}
        # Entries vanish once no caller holds or waits on the lock
        self._file_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._file_locks_guard = threading.Lock()

    def _call(self, method: str, *args: Any) -> Any:
        with self._lock:
            try:
                return getattr(self._backend, method)(*args)
            except BaseAppError:
                raise
            except Exception as e:
                self._logger.error(f"Backend call {method} failed: {e}")
                raise BackendRequestError(
                    f"Language server request {method} failed: {str(e)}", method=method
                )

    # ------------------------- document state -------------------------
    def is_open(self, path: str) -> bool:
        with self._lock:
            return path in self._versions

    def version_of(self, path: str) -> Optional[int]:
        with self._lock:
            return self._versions.get(path)

    def synchronize(self, path: str, text: Optional[str] = None) -> None:
        """
        Make the server's copy of a document match ``text`` (or the file on disk).

        The first call opens the document; later calls send the full content
        with the next version number.
        """
        if text is None:
            text = self._files.read_text(path)
        with self._lock:
            version = self._versions.get(path)
            if version is None:
                self._call("did_open", path, language_id_for(path), 1, text)
                self._versions[path] = 1
                self._logger.debug(f"Opened {path} (version 1)")
            else:
                self._call("did_change", path, version + 1, text)
                self._versions[path] = version + 1
                self._logger.debug(f"Synchronized {path} (version {version + 1})")

    @contextmanager
    def file_lock(self, path: str) -> Iterator[None]:
        """Hold the mutation lock of one file."""
        with self._file_locks_guard:
            lock = self._file_locks.setdefault(path, threading.Lock())
        with lock:
            yield

    # ------------------------- LSPClientPort -------------------------
    @override
    def workspace_symbols(self, query: str) -> list[SymbolInfo]:
        return self._call("workspace_symbols", query)

    @override
    def definition(self, path: str, position: Position) -> list[Location]:
        return self._call("definition", path, position)

    @override
    def references(
        self, path: str, position: Position, include_declaration: bool = False
    ) -> list[Location]:
        return self._call("references", path, position, include_declaration)

    @override
    def document_symbols(self, path: str) -> list[DocumentSymbol]:
        return self._call("document_symbols", path)

    @override
    def diagnostics(self, path: str) -> Optional[list[Diagnostic]]:
        return self._call("diagnostics", path)

    @override
    def did_open(self, path: str, language_id: str, version: int, text: str) -> None:
        with self._lock:
            self._call("did_open", path, language_id, version, text)
            self._versions[path] = version

    @override
    def did_change(self, path: str, version: int, text: str) -> None:
        with self._lock:
            self._call("did_change", path, version, text)
            self._versions[path] = version

    @override
    def code_lenses(self, path: str) -> list[CodeLens]:
        return self._call("code_lenses", path)

    @override
    def resolve_code_lens(self, lens: CodeLens) -> CodeLens:
        return self._call("resolve_code_lens", lens)

    @override
    def execute_command(self, command: str, arguments: list[Any]) -> Any:
        return self._call("execute_command", command, arguments)
