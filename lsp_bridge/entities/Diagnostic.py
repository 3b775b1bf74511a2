"""
Diagnostic domain entity.
"""

from dataclasses import dataclass
from typing import Optional

from lsp_bridge.entities.TextEdit import Range

SEVERITY_NAMES: dict[int, str] = {
    1: "Error",
    2: "Warning",
    3: "Information",
    4: "Hint",
}


@dataclass(frozen=True)
class Diagnostic:
    """An error, warning, information or hint reported for a file."""

    range: Range
    message: str
    severity: int = 1
    source: Optional[str] = None
    code: Optional[str] = None

    @property
    def severity_name(self) -> str:
        return SEVERITY_NAMES.get(self.severity, "Error")

    def sort_key(self) -> tuple[int, int, int]:
        """Severity first (errors on top), then position."""
        return (self.severity, self.range.start.line, self.range.start.character)
