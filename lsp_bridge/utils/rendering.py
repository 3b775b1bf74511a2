"""Plain-text rendering shared by the read-oriented tools.

Everything here is a pure function of its arguments. Positions come in
zero-based and are printed one-based.
"""

from __future__ import annotations

import re
from typing import Iterable

from lsp_bridge.entities.TextEdit import Position, Range

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split on LSP line terminators (\\n, \\r\\n, \\r) without keeping them.

    A trailing terminator yields a final empty line, as LSP positions expect.
    """
    return _LINE_BREAK.split(text)


def format_position(position: Position) -> str:
    return f"L{position.line + 1}:C{position.character + 1}"


def format_range(rng: Range) -> str:
    return f"{format_position(rng.start)}-{format_position(rng.end)}"


def _number_width(last_line: int) -> int:
    return len(str(last_line + 1))


def add_line_numbers(text: str, start_line: int = 0) -> str:
    """Prefix every line of ``text`` with its one-based number.

    ``start_line`` is the zero-based line of the first line of ``text``.
    Numbers are right-aligned to the widest one and followed by ``|``.
    """
    lines = split_lines(text)
    width = _number_width(start_line + len(lines) - 1)
    return "\n".join(
        f"{start_line + i + 1:>{width}}|{line}" for i, line in enumerate(lines)
    )


def extract_lines(text: str, start_line: int, end_line: int) -> str:
    """Whole lines ``start_line..end_line`` (zero-based, inclusive), clamped to the text."""
    lines = split_lines(text)
    first = max(0, start_line)
    last = min(len(lines) - 1, end_line)
    if last < first:
        return ""
    return "\n".join(lines[first : last + 1])


def context_window(line_count: int, start_line: int, end_line: int, radius: int) -> tuple[int, int]:
    """Lines to show around ``start_line..end_line``, clamped to the document."""
    first = max(0, start_line - radius)
    last = min(line_count - 1, end_line + radius)
    return first, max(first, last)


def render_snippet(
    lines: list[str],
    first: int,
    last: int,
    show_line_numbers: bool = True,
    marked: Iterable[int] = (),
    indent: str = "",
) -> str:
    """Render ``lines[first..last]``, flagging the ``marked`` lines with ``>``."""
    marked_lines = set(marked)
    first = max(0, first)
    last = min(len(lines) - 1, last)
    width = _number_width(last)
    out: list[str] = []
    for i in range(first, last + 1):
        marker = ""
        if marked_lines:
            marker = ">" if i in marked_lines else " "
        if show_line_numbers:
            out.append(f"{indent}{marker}{i + 1:>{width}}|{lines[i]}")
        else:
            sep = " " if marker else ""
            out.append(f"{indent}{marker}{sep}{lines[i]}")
    return "\n".join(out)
