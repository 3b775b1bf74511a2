"""
Use case for finding every reference to a symbol, grouped by file.
"""

import logging
import threading
from collections import defaultdict
from typing import Optional

from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.entities.Symbol import Location
from lsp_bridge.exceptions import BackendRequestError, BaseAppError, FileIOError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.use_cases.symbols.resolve_symbol import ResolveSymbolUseCase
from lsp_bridge.utils.cancellation import raise_if_cancelled
from lsp_bridge.utils.rendering import (
    context_window,
    format_position,
    render_snippet,
    split_lines,
)


def group_references(locations: list[Location]) -> list[tuple[str, list[Location]]]:
    """Group by path; paths sorted, entries by ascending line then column, duplicates dropped."""
    grouped: dict[str, dict[tuple[int, int], Location]] = defaultdict(dict)
    for loc in locations:
        key = (loc.range.start.line, loc.range.start.character)
        grouped[loc.path].setdefault(key, loc)
    return [
        (path, [refs[key] for key in sorted(refs)])
        for path, refs in sorted(grouped.items())
    ]


class FindReferencesUseCase:
    """Use case for listing references to a symbol with short snippets."""

    def __init__(
        self,
        session: LspSession,
        resolver: ResolveSymbolUseCase,
        files: TextFilePort,
        context_lines: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            session: LSP session used for the references request
            resolver: Symbol resolver
            files: Text file port used to read snippets
            context_lines: Lines shown above and below each reference
            logger: Logger instance to use for logging
        """
        self._session = session
        self._resolver = resolver
        self._files = files
        self._context_lines = context_lines
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        symbol_name: str,
        show_line_numbers: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Render every reference to a symbol.

        Args:
            symbol_name: Possibly-qualified symbol name
            show_line_numbers: Prefix snippet lines with their 1-based number
            cancel_event: Set by the caller to abandon the call

        Returns:
            References grouped by file, or a message saying there are none

        Raises:
            SymbolNotFoundError, AmbiguousSymbolError, BackendRequestError
        """
        try:
            resolved = self._resolver.execute(symbol_name, cancel_event)
            raise_if_cancelled(cancel_event, "find_references")
            name = resolved.symbol.qualified_name
            locations = self._session.references(
                resolved.declaration.path, resolved.declaration.range.start, False
            )
            groups = group_references(locations)
            self._logger.info(f"Found {len(locations)} reference(s) to {name}")
            if not groups:
                return f"No references found for {name}"

            total = sum(len(refs) for _, refs in groups)
            out = [f"Found {total} reference(s) to {name} in {len(groups)} file(s):"]
            for path, refs in groups:
                try:
                    lines: Optional[list[str]] = split_lines(self._files.read_text(path))
                except FileIOError as e:
                    self._logger.warning(f"Showing references in {path} without source: {e}")
                    lines = None
                out.append("")
                out.append(f"{path} ({len(refs)} reference(s))")
                if lines is None:
                    out.append("  (source unavailable)")
                for ref in refs:
                    out.append(f"  {format_position(ref.range.start)}")
                    if lines is None:
                        continue
                    first, last = context_window(
                        len(lines), ref.range.start.line, ref.range.end.line, self._context_lines
                    )
                    out.append(
                        render_snippet(
                            lines,
                            first,
                            last,
                            show_line_numbers,
                            marked=range(ref.range.start.line, ref.range.end.line + 1),
                            indent="    ",
                        )
                    )
            return "\n".join(out)
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error finding references: {e}")
            raise BackendRequestError(f"Failed to find references to {symbol_name}: {str(e)}")
