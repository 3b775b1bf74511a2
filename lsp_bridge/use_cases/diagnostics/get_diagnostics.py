"""
Use case for retrieving and rendering the diagnostics of a file.
"""

import logging
import threading
from typing import Optional

from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.entities.Diagnostic import Diagnostic
from lsp_bridge.exceptions import (
    BackendRequestError,
    BaseAppError,
    DocumentNotSynchronizedError,
)
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.utils.cancellation import raise_if_cancelled
from lsp_bridge.utils.rendering import (
    context_window,
    format_range,
    render_snippet,
    split_lines,
)


class GetDiagnosticsUseCase:
    """Use case for getting diagnostics of one file from the language server."""

    def __init__(
        self,
        session: LspSession,
        files: TextFilePort,
        context_lines: int = 2,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            session: LSP session used to synchronize the document and query diagnostics
            files: Text file port used to read the document
            context_lines: Lines shown above and below each diagnostic with includeContext
            logger: Logger instance to use for logging
        """
        self._session = session
        self._files = files
        self._context_lines = context_lines
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        path: str,
        include_context: bool = False,
        show_line_numbers: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Synchronize the file with the server and render its diagnostics.

        Args:
            path: Absolute path of the file
            include_context: Attach surrounding source lines to each diagnostic
            show_line_numbers: Prefix context lines with their 1-based number
            cancel_event: Set by the caller to abandon the call

        Returns:
            Diagnostics ordered by severity then line, or "No diagnostics"

        Raises:
            DocumentNotSynchronizedError: If the server has no diagnostics state for the file
            FileIOError, BackendRequestError
        """
        try:
            self._logger.info(f"Getting diagnostics for {path}")
            text = self._files.read_text(path)
            self._session.synchronize(path, text)
            raise_if_cancelled(cancel_event, "get_diagnostics")

            diagnostics = self._session.diagnostics(path)
            if diagnostics is None:
                raise DocumentNotSynchronizedError(
                    f"Diagnostics unavailable for {path}: the language server has not "
                    "reported any state for this document yet"
                )
            self._logger.info(f"Found {len(diagnostics)} diagnostic(s) for {path}")
            if not diagnostics:
                return f"No diagnostics for {path}"
            return self._render(path, text, diagnostics, include_context, show_line_numbers)
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error getting diagnostics: {e}")
            raise BackendRequestError(f"Failed to get diagnostics for {path}: {str(e)}")

    def _render(
        self,
        path: str,
        text: str,
        diagnostics: list[Diagnostic],
        include_context: bool,
        show_line_numbers: bool,
    ) -> str:
        lines = split_lines(text)
        ordered = sorted(diagnostics, key=lambda d: d.sort_key())
        out = [f"{len(ordered)} diagnostic(s) for {path}:"]
        for diag in ordered:
            entry = f"[{diag.severity_name}] {format_range(diag.range)}: {diag.message}"
            extras = []
            if diag.source:
                extras.append(f"source: {diag.source}")
            if diag.code:
                extras.append(f"code: {diag.code}")
            if extras:
                entry += f" ({', '.join(extras)})"
            out.append("")
            out.append(entry)
            if include_context:
                first, last = context_window(
                    len(lines), diag.range.start.line, diag.range.end.line, self._context_lines
                )
                out.append(
                    render_snippet(
                        lines,
                        first,
                        last,
                        show_line_numbers,
                        marked=range(diag.range.start.line, diag.range.end.line + 1),
                        indent="    ",
                    )
                )
        return "\n".join(out)
