"""
Symbol and location domain entities.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from lsp_bridge.entities.TextEdit import Position, Range

_SEGMENT_SEPARATORS = re.compile(r"::|[./]")


def split_qualified_name(name: str) -> list[str]:
    """Split ``pkg/path.Type.Method`` or ``ns::Type`` into its segments."""
    return [s for s in _SEGMENT_SEPARATORS.split(name.strip()) if s]


@dataclass(frozen=True)
class Location:
    """A range inside a file on disk."""

    path: str
    range: Range

    @property
    def start(self) -> Position:
        return self.range.start

    def __str__(self) -> str:
        return (
            f"{self.path}:{self.range.start.line + 1}:{self.range.start.character + 1}"
        )


@dataclass(frozen=True)
class SymbolInfo:
    """A workspace symbol returned by the language server."""

    name: str
    kind: str
    location: Location
    container_name: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """Name prefixed by its container, unless the server already did so."""
        container = (self.container_name or "").strip()
        if not container or self.name.startswith(container + "."):
            return self.name
        return f"{container}.{self.name}"

    def segments(self) -> list[str]:
        return split_qualified_name(self.qualified_name)

    def __str__(self) -> str:
        return f"{self.qualified_name} ({self.kind}) at {self.location}"


@dataclass(frozen=True)
class DocumentSymbol:
    """A hierarchical symbol of a single document."""

    name: str
    kind: str
    range: Range
    selection_range: Range
    children: tuple["DocumentSymbol", ...] = field(default_factory=tuple)

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class SymbolQuery:
    """A possibly-qualified symbol name given by the caller."""

    text: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "text", self.text.strip())

    def segments(self) -> list[str]:
        return split_qualified_name(self.text)

    def matches_exactly(self, symbol: SymbolInfo) -> bool:
        return self.segments() == symbol.segments()

    def matches_suffix(self, symbol: SymbolInfo) -> bool:
        query = self.segments()
        candidate = symbol.segments()
        if not query or len(query) > len(candidate):
            return False
        return candidate[-len(query) :] == query
