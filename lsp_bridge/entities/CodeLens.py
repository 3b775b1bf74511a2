"""
Code lens domain entity.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from lsp_bridge.entities.TextEdit import Range


@dataclass(frozen=True)
class Command:
    """A server command bound to a code lens."""

    title: str
    command: str
    arguments: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class CodeLens:
    """
    An actionable annotation attached to a range of a file.

    ``data`` is opaque server state kept for ``codeLens/resolve``.
    """

    range: Range
    command: Optional[Command] = None
    data: Any = None

    @property
    def title(self) -> str:
        return self.command.title if self.command else "(unresolved)"

    @property
    def is_resolved(self) -> bool:
        return self.command is not None
