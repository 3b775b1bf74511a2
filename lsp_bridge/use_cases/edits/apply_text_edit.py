"""
Use case for applying a set of text edits to one file, all or nothing.
"""

import logging
import re
import threading
from typing import NamedTuple, Optional

from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.entities.TextEdit import Position, TextEdit
from lsp_bridge.exceptions import BaseAppError, FileIOError, InvalidEditRangeError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.utils.cancellation import raise_if_cancelled
from lsp_bridge.utils.rendering import format_range

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class _ResolvedEdit(NamedTuple):
    start: int
    end: int
    new_text: str
    number: int  # 1-based position in the caller's list


class _LineTable:
    """Offsets of every line start and the length of each line without its terminator."""

    def __init__(self, text: str):
        self.starts = [0]
        self.lengths: list[int] = []
        for m in _LINE_BREAK.finditer(text):
            self.lengths.append(m.start() - self.starts[-1])
            self.starts.append(m.end())
        self.lengths.append(len(text) - self.starts[-1])

    def offset(self, position: Position, label: str) -> int:
        if position.line >= len(self.starts):
            raise InvalidEditRangeError(
                f"{label}: line {position.line + 1} is beyond the end of the document "
                f"({len(self.starts)} lines)"
            )
        length = self.lengths[position.line]
        if position.character > length:
            raise InvalidEditRangeError(
                f"{label}: character {position.character + 1} is beyond the end of "
                f"line {position.line + 1} ({length} characters)"
            )
        return self.starts[position.line] + position.character


def resolve_edits(text: str, edits: list[TextEdit]) -> list[_ResolvedEdit]:
    """
    Map edits to offsets of ``text`` and check them.

    Returns:
        The edits sorted by ascending (start, end) offset

    Raises:
        InvalidEditRangeError: If an edit is out of bounds or two edits overlap
    """
    table = _LineTable(text)
    resolved = []
    for number, edit in enumerate(edits, start=1):
        label = f"edit {number} ({format_range(edit.range)})"
        start = table.offset(edit.range.start, label)
        end = table.offset(edit.range.end, label)
        if end < start:
            raise InvalidEditRangeError(f"{label}: range ends before it starts")
        resolved.append(_ResolvedEdit(start, end, edit.new_text, number))

    resolved.sort(key=lambda e: (e.start, e.end))
    for prev, cur in zip(resolved, resolved[1:]):
        # Two insertions at one point have no defined order, so they conflict too
        same_insertion = cur.start == prev.start and cur.end == prev.end
        if cur.start < prev.end or same_insertion:
            first, second = sorted((prev.number, cur.number))
            raise InvalidEditRangeError(f"Edits {first} and {second} overlap")
    return resolved


def apply_edits(text: str, edits: list[TextEdit]) -> str:
    """Apply validated edits from the end of the document towards its start."""
    result = text
    for edit in reversed(resolve_edits(text, edits)):
        result = result[: edit.start] + edit.new_text + result[edit.end :]
    return result


class ApplyTextEditUseCase:
    """Use case for applying a set of text edits to one file."""

    def __init__(
        self,
        session: LspSession,
        files: TextFilePort,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            session: LSP session notified after the file is rewritten
            files: Text file port used to read and write the file
            logger: Logger instance to use for logging
        """
        self._session = session
        self._files = files
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        path: str,
        edits: list[TextEdit],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Apply every edit to the file or none of them.

        Args:
            path: Absolute path of the file
            edits: Edits whose ranges refer to the current file content
            cancel_event: Set by the caller to abandon the call before the write

        Returns:
            Summary naming the number of edits applied

        Raises:
            InvalidEditRangeError: If edits overlap or fall outside the document
            FileIOError: If the file cannot be read or written
        """
        try:
            self._logger.info(f"Applying {len(edits)} edit(s) to {path}")
            if not edits:
                raise InvalidEditRangeError("At least one edit is required")

            with self._session.file_lock(path):
                original = self._files.read_text(path)
                updated = apply_edits(original, edits)
                raise_if_cancelled(cancel_event, "apply_text_edit")
                self._files.write_text_atomic(path, updated)
                # The server must only see the new content once it is on disk
                sync_error = self._notify_server(path, updated)

            self._logger.info(f"Applied {len(edits)} edit(s) to {path}")
            summary = self._summary(path, edits)
            if sync_error is not None:
                # The edits are committed; an error result would invite a second apply
                summary += (
                    f"\n\nWarning: the file was written but the language server could not "
                    f"be notified ({sync_error}). Other tools may see stale content."
                )
            return summary
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error applying edits: {e}")
            raise FileIOError(f"Failed to apply edits to {path}: {str(e)}")

    def _notify_server(self, path: str, text: str) -> Optional[BaseAppError]:
        try:
            self._session.synchronize(path, text)
        except BaseAppError as e:
            self._logger.warning(f"Edits to {path} were written but not synchronized: {e}")
            return e
        return None

    @staticmethod
    def _summary(path: str, edits: list[TextEdit]) -> str:
        noun = "edit" if len(edits) == 1 else "edits"
        lines = [f"Applied {len(edits)} {noun} to {path}:"]
        for number, edit in enumerate(edits, start=1):
            lines.append(
                f"  {number}. {format_range(edit.range)} replaced with "
                f"{len(edit.new_text)} character(s)"
            )
        return "\n".join(lines)
