"""
Use case for reading the source code of a symbol's definition.
"""

import logging
import threading
from typing import Optional

from lsp_bridge.exceptions import BackendRequestError, BaseAppError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.use_cases.symbols.resolve_symbol import ResolveSymbolUseCase
from lsp_bridge.utils.rendering import add_line_numbers, extract_lines, format_range


class ReadDefinitionUseCase:
    """Use case for reading the full definition of a symbol."""

    def __init__(
        self,
        resolver: ResolveSymbolUseCase,
        files: TextFilePort,
        logger: Optional[logging.Logger] = None,
    ):
        self._resolver = resolver
        self._files = files
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        symbol_name: str,
        show_line_numbers: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Render the source text spanning a symbol's full definition.

        Args:
            symbol_name: Possibly-qualified symbol name
            show_line_numbers: Prefix each source line with its 1-based number
            cancel_event: Set by the caller to abandon the call

        Returns:
            Header describing the symbol followed by its source

        Raises:
            SymbolNotFoundError, AmbiguousSymbolError, BackendRequestError, FileIOError
        """
        try:
            resolved = self._resolver.execute(symbol_name, cancel_event)
            rng = resolved.definition_range
            text = self._files.read_text(resolved.path)
            source = extract_lines(text, rng.start.line, rng.end.line)
            if show_line_numbers:
                source = add_line_numbers(source, rng.start.line)

            symbol = resolved.symbol
            header = [f"Symbol: {symbol.qualified_name}", f"Kind: {symbol.kind}"]
            if symbol.container_name:
                header.append(f"Container: {symbol.container_name}")
            header.append(f"File: {resolved.path}")
            header.append(f"Range: {format_range(rng)}")
            self._logger.info(
                f"Read definition of {symbol.qualified_name} ({rng.line_span() + 1} line(s))"
            )
            return "\n".join(header) + "\n\n" + source
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error reading definition: {e}")
            raise BackendRequestError(f"Failed to read definition of {symbol_name}: {str(e)}")
