"""
Tests for symbol resolution and disambiguation.
"""

import threading

import pytest

from lsp_bridge.entities.Symbol import DocumentSymbol, Location, SymbolInfo, SymbolQuery
from lsp_bridge.entities.TextEdit import Position, Range
from lsp_bridge.exceptions import (
    AmbiguousSymbolError,
    OperationCancelledError,
    SchemaValidationError,
    SymbolNotFoundError,
)
from lsp_bridge.use_cases.symbols.resolve_symbol import (
    ResolveSymbolUseCase,
    disambiguate,
)


def _rng(sl, sc, el, ec):
    return Range(Position(sl, sc), Position(el, ec))


def _symbol(name, container=None, path="/ws/a.go", line=0):
    return SymbolInfo(name, "method", Location(path, _rng(line, 0, line, 1)), container)


class TestDisambiguate:
    """Test cases for the disambiguation policy."""

    def test_exact_match_beats_suffix_matches(self):
        """Test that an exact qualified name wins over partial matches."""
        candidates = [
            _symbol("Run", "Server", line=1),
            _symbol("Run", "Client", line=2),
            _symbol("Server.Run", "pkg", line=3),
        ]
        chosen = disambiguate(SymbolQuery("Server.Run"), candidates)
        assert chosen is candidates[0]

    def test_unique_suffix_match(self):
        candidates = [_symbol("Run", "Server"), _symbol("Runner", "Client", line=4)]
        assert disambiguate(SymbolQuery("Run"), candidates) is candidates[0]

    def test_several_suffix_matches_are_ambiguous(self):
        candidates = [_symbol("Run", "Server", line=1), _symbol("Run", "Client", line=2)]
        with pytest.raises(AmbiguousSymbolError) as exc_info:
            disambiguate(SymbolQuery("Run"), candidates)
        err = exc_info.value
        assert len(err.candidates) == 2
        assert "Server.Run (method) at /ws/a.go:2:1" in str(err)
        assert err.details()["query"] == "Run"

    def test_several_exact_matches_are_ambiguous(self):
        candidates = [
            _symbol("F", path="/ws/a.go"),
            _symbol("F", path="/ws/b.go"),
        ]
        with pytest.raises(AmbiguousSymbolError):
            disambiguate(SymbolQuery("F"), candidates)

    def test_duplicates_collapse(self):
        """Test that the same symbol reported twice is not ambiguous."""
        candidates = [_symbol("F"), _symbol("F")]
        assert disambiguate(SymbolQuery("F"), candidates).name == "F"

    def test_no_candidates(self):
        with pytest.raises(SymbolNotFoundError) as exc_info:
            disambiguate(SymbolQuery("Nope"), [])
        assert str(exc_info.value) == "Symbol not found: Nope"

    def test_partial_names_are_not_matches(self):
        with pytest.raises(SymbolNotFoundError):
            disambiguate(SymbolQuery("Ru"), [_symbol("Run", "Server")])


class TestResolveSymbolUseCase:
    """Test cases for ResolveSymbolUseCase."""

    def test_resolves_full_definition_range(self, session, fake_server_with_f, a_go, mock_logger):
        resolved = ResolveSymbolUseCase(session, mock_logger).execute("F")

        assert resolved.path == a_go
        assert resolved.declaration.range == _rng(1, 5, 1, 6)
        assert resolved.definition_range == _rng(1, 0, 1, 11)

    def test_innermost_enclosing_symbol(self, session, fake_server, mock_logger):
        """Test that a method inside a class resolves to the method's range."""
        decl = _rng(3, 8, 3, 11)
        fake_server.symbols = [
            SymbolInfo("Run", "method", Location("/ws/s.py", decl), "Server")
        ]
        method = DocumentSymbol("Run", "method", _rng(3, 4, 5, 0), decl)
        fake_server.document_symbols_by_path["/ws/s.py"] = [
            DocumentSymbol("Server", "class", _rng(0, 0, 10, 0), _rng(0, 6, 0, 12), (method,))
        ]

        resolved = ResolveSymbolUseCase(session, mock_logger).execute("Server.Run")

        assert resolved.definition_range == _rng(3, 4, 5, 0)

    def test_falls_back_to_symbol_location(self, session, fake_server, mock_logger):
        """Test that without definition or document symbols the symbol's own range is used."""
        fake_server.symbols = [_symbol("G", path="/ws/g.go", line=7)]

        resolved = ResolveSymbolUseCase(session, mock_logger).execute("G")

        assert resolved.declaration.path == "/ws/g.go"
        assert resolved.definition_range == _rng(7, 0, 7, 1)

    def test_not_found(self, session, fake_server, mock_logger):
        with pytest.raises(SymbolNotFoundError):
            ResolveSymbolUseCase(session, mock_logger).execute("Missing")

    def test_empty_query(self, session, mock_logger):
        with pytest.raises(SchemaValidationError):
            ResolveSymbolUseCase(session, mock_logger).execute("   ")

    def test_cancelled_after_search(self, session, fake_server_with_f, mock_logger):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelledError):
            ResolveSymbolUseCase(session, mock_logger).execute("F", cancel)
        assert "definition" not in fake_server_with_f.calls
