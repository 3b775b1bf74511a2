"""
Use case for resolving a symbol name to the full range of its definition.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.entities.Symbol import Location, SymbolInfo, SymbolQuery
from lsp_bridge.entities.TextEdit import Range
from lsp_bridge.exceptions import (
    AmbiguousSymbolError,
    BackendRequestError,
    BaseAppError,
    SchemaValidationError,
    SymbolNotFoundError,
)
from lsp_bridge.utils.cancellation import raise_if_cancelled


@dataclass(frozen=True)
class ResolvedSymbol:
    """A chosen symbol, where it is declared and the full range of its definition."""

    symbol: SymbolInfo
    declaration: Location
    definition_range: Range

    @property
    def path(self) -> str:
        return self.declaration.path


def _dedupe(candidates: list[SymbolInfo]) -> list[SymbolInfo]:
    seen = set()
    unique = []
    for c in candidates:
        key = (c.qualified_name, c.location.path, c.location.range.start)
        if key not in seen:
            seen.add(key)
            unique.append(c)
    return unique


def disambiguate(query: SymbolQuery, candidates: list[SymbolInfo]) -> SymbolInfo:
    """
    Pick the one candidate a query designates.

    An exact qualified-name match wins; otherwise the query must match the
    trailing segments of exactly one candidate.

    Raises:
        SymbolNotFoundError: If no candidate matches
        AmbiguousSymbolError: If several candidates match equally well
    """
    candidates = _dedupe(candidates)
    exact = [c for c in candidates if query.matches_exactly(c)]
    if len(exact) == 1:
        return exact[0]
    if len(exact) > 1:
        raise AmbiguousSymbolError(query.text, [str(c) for c in exact])

    suffix = [c for c in candidates if query.matches_suffix(c)]
    if len(suffix) == 1:
        return suffix[0]
    if not suffix:
        raise SymbolNotFoundError(f"Symbol not found: {query.text}")
    raise AmbiguousSymbolError(query.text, [str(c) for c in suffix])


class ResolveSymbolUseCase:
    """Use case for resolving a symbol name through workspace symbol search."""

    def __init__(self, session: LspSession, logger: Optional[logging.Logger] = None):
        """
        Initialize the use case.

        Args:
            session: LSP session used for every backend request
            logger: Logger instance to use for logging
        """
        self._session = session
        self._logger = logger or logging.getLogger(__name__)

    def select(self, query_text: str) -> SymbolInfo:
        """
        Search the workspace and apply the disambiguation policy.

        Raises:
            SchemaValidationError: If the query is empty
            SymbolNotFoundError: If nothing matches
            AmbiguousSymbolError: If several symbols match
        """
        query = SymbolQuery(query_text)
        if not query.segments():
            raise SchemaValidationError("'symbolName' must be a non-empty string", field="symbolName")
        candidates = self._session.workspace_symbols(query.text)
        self._logger.info(f"Workspace search for '{query.text}' returned {len(candidates)} candidate(s)")
        return disambiguate(query, candidates)

    def execute(
        self, query_text: str, cancel_event: Optional[threading.Event] = None
    ) -> ResolvedSymbol:
        """
        Resolve a symbol to its declaration and the full range of its definition.

        Args:
            query_text: Possibly-qualified symbol name (e.g. "Type.Method")
            cancel_event: Set by the caller to abandon the call between requests

        Returns:
            The resolved symbol

        Raises:
            SymbolNotFoundError, AmbiguousSymbolError, BackendRequestError
        """
        try:
            self._logger.info(f"Resolving symbol: {query_text}")
            symbol = self.select(query_text)
            raise_if_cancelled(cancel_event, "resolve symbol")

            declarations = self._session.definition(symbol.location.path, symbol.location.start)
            declaration = declarations[0] if declarations else symbol.location
            raise_if_cancelled(cancel_event, "resolve symbol")

            full_range = self._full_range(symbol, declaration)
            self._logger.info(f"Resolved {symbol.qualified_name} to {declaration}")
            return ResolvedSymbol(symbol=symbol, declaration=declaration, definition_range=full_range)
        except BaseAppError:
            raise
        except Exception as e:
            self._logger.error(f"Error resolving symbol: {e}")
            raise BackendRequestError(f"Failed to resolve symbol {query_text}: {str(e)}")

    def _full_range(self, symbol: SymbolInfo, declaration: Location) -> Range:
        """Innermost document symbol enclosing the declaration, preferring same-named ones."""
        start = declaration.range.start
        try:
            outline = self._session.document_symbols(declaration.path)
        except BackendRequestError as e:
            self._logger.warning(f"No document symbols for {declaration.path}: {e}")
            return declaration.range
        enclosing = [s for top in outline for s in top.walk() if s.range.contains(start)]
        if not enclosing:
            return declaration.range
        short_name = symbol.segments()[-1] if symbol.segments() else symbol.name
        named = [s for s in enclosing if s.name == symbol.name or s.name.split(".")[-1] == short_name]
        pool = named or enclosing
        best = min(
            pool,
            key=lambda s: (s.range.line_span(), s.range.end.character - s.range.start.character),
        )
        return best.range
