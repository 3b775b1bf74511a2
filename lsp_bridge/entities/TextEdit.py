"""
Text position, range and edit domain entities.

Positions are zero-based (line, character) pairs as used on the LSP wire.
"""

from dataclasses import dataclass
from typing import Any

from lsp_bridge.exceptions import SchemaValidationError


def _non_negative_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaValidationError(f"'{field}' must be an integer", field=field)
    if isinstance(value, float):
        if not value.is_integer():
            raise SchemaValidationError(f"'{field}' must be an integer", field=field)
        value = int(value)
    if value < 0:
        raise SchemaValidationError(f"'{field}' must be >= 0", field=field)
    return value


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/character position."""

    line: int
    character: int

    @classmethod
    def from_dict(cls, data: Any, field: str = "position") -> "Position":
        if not isinstance(data, dict):
            raise SchemaValidationError(f"'{field}' must be an object", field=field)
        return cls(
            line=_non_negative_int(data.get("line"), f"{field}.line"),
            character=_non_negative_int(data.get("character"), f"{field}.character"),
        )

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    """Half-open range between two positions."""

    start: Position
    end: Position

    @classmethod
    def from_dict(cls, data: Any, field: str = "range") -> "Range":
        if not isinstance(data, dict):
            raise SchemaValidationError(f"'{field}' must be an object", field=field)
        start = Position.from_dict(data.get("start"), f"{field}.start")
        end = Position.from_dict(data.get("end"), f"{field}.end")
        if end < start:
            raise SchemaValidationError(
                f"'{field}' ends before it starts", field=field
            )
        return cls(start=start, end=end)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end

    def contains_range(self, other: "Range") -> bool:
        return self.start <= other.start and other.end <= self.end

    def line_span(self) -> int:
        return self.end.line - self.start.line


@dataclass(frozen=True)
class TextEdit:
    """Replacement of a range of the original document with new text."""

    range: Range
    new_text: str

    @classmethod
    def from_dict(cls, data: Any, field: str = "edit") -> "TextEdit":
        """
        Build an edit from its wire form ``{"range": {...}, "newText": "..."}``.

        Raises:
            SchemaValidationError: If the payload is malformed
        """
        if not isinstance(data, dict):
            raise SchemaValidationError(f"'{field}' must be an object", field=field)
        new_text = data.get("newText")
        if not isinstance(new_text, str):
            raise SchemaValidationError(
                f"'{field}.newText' must be a string", field=f"{field}.newText"
            )
        return cls(range=Range.from_dict(data.get("range"), f"{field}.range"), new_text=new_text)

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "newText": self.new_text}
