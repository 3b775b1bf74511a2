"""
Tests for the symbol entities.
"""

from lsp_bridge.entities.Symbol import (
    DocumentSymbol,
    Location,
    SymbolInfo,
    SymbolQuery,
    split_qualified_name,
)
from lsp_bridge.entities.TextEdit import Position, Range

RNG = Range(Position(0, 0), Position(0, 1))


def _symbol(name, container=None):
    return SymbolInfo(name, "function", Location("/ws/a.go", RNG), container)


class TestQualifiedNames:
    """Test cases for qualified name handling."""

    def test_split_separators(self):
        assert split_qualified_name("pkg/path.Type.Method") == ["pkg", "path", "Type", "Method"]
        assert split_qualified_name("ns::Type") == ["ns", "Type"]

    def test_qualified_name_adds_container(self):
        assert _symbol("Method", "Type").qualified_name == "Type.Method"

    def test_qualified_name_keeps_prefixed_name(self):
        """Test that a name already prefixed by its container is not prefixed twice."""
        assert _symbol("Type.Method", "Type").qualified_name == "Type.Method"

    def test_str_is_one_based(self):
        assert str(_symbol("F")) == "F (function) at /ws/a.go:1:1"


class TestSymbolQuery:
    """Test cases for SymbolQuery matching."""

    def test_exact_match(self):
        assert SymbolQuery("Type.Method").matches_exactly(_symbol("Method", "Type"))

    def test_suffix_match(self):
        query = SymbolQuery("Method")
        assert query.matches_suffix(_symbol("Method", "Type"))
        assert not query.matches_exactly(_symbol("Method", "Type"))

    def test_partial_segment_is_not_a_suffix(self):
        assert not SymbolQuery("thod").matches_suffix(_symbol("Method", "Type"))

    def test_whitespace_stripped(self):
        assert SymbolQuery("  F ").text == "F"


class TestDocumentSymbol:
    """Test cases for DocumentSymbol.walk."""

    def test_walk_is_depth_first(self):
        child = DocumentSymbol("m", "method", RNG, RNG)
        parent = DocumentSymbol("T", "class", RNG, RNG, (child,))
        assert [s.name for s in parent.walk()] == ["T", "m"]
