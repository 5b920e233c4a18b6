"""Renderer-agnostic report fragments.

Checkers never produce markup. They append structured blocks to a
:class:`Fragment` and the selected renderer turns the blocks into text,
Markdown or HTML once the run is aggregated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from . import symbols

HEADING = "heading"
PARAGRAPH = "paragraph"
TABLE = "table"
WARNING = "warning"
INFO = "info"
ERROR = "error"
OPEN_SECTION = "open_section"
CLOSE_SECTION = "close_section"

_MARKERS = {
    WARNING: symbols.WARNING,
    INFO: symbols.INFO,
    ERROR: symbols.ERROR,
}


@dataclass(frozen=True)
class Block:
    """A single structured renderer call."""

    kind: str
    text: str = ""
    level: int = 0
    headers: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()

    def plain_text(self) -> str:
        if self.kind == TABLE:
            lines = [" | ".join(self.headers)]
            lines.extend(" | ".join(row) for row in self.rows)
            return "\n".join(lines)
        marker = _MARKERS.get(self.kind, "")
        return f"{marker}{self.text}"


@dataclass
class Fragment:
    """Ordered blocks emitted by one checker for one module."""

    blocks: List[Block] = field(default_factory=list)

    def heading(self, text: str, level: int = 3) -> "Fragment":
        self.blocks.append(Block(HEADING, text=text, level=level))
        return self

    def paragraph(self, text: str) -> "Fragment":
        self.blocks.append(Block(PARAGRAPH, text=text))
        return self

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> "Fragment":
        normalised = tuple(tuple("" if cell is None else str(cell) for cell in row) for row in rows)
        self.blocks.append(Block(TABLE, headers=tuple(headers), rows=normalised))
        return self

    def warning(self, text: str) -> "Fragment":
        self.blocks.append(Block(WARNING, text=text))
        return self

    def info(self, text: str) -> "Fragment":
        self.blocks.append(Block(INFO, text=text))
        return self

    def error(self, text: str) -> "Fragment":
        self.blocks.append(Block(ERROR, text=text))
        return self

    def open_section(self) -> "Fragment":
        self.blocks.append(Block(OPEN_SECTION))
        return self

    def close_section(self) -> "Fragment":
        self.blocks.append(Block(CLOSE_SECTION))
        return self

    def extend(self, other: "Fragment") -> "Fragment":
        self.blocks.extend(other.blocks)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def plain_text(self) -> str:
        """Return the fragment's text with warning/error markers inlined."""
        return "\n".join(block.plain_text() for block in self.blocks)

    @property
    def has_issue(self) -> bool:
        return symbols.contains_issue(self.plain_text())


def warn_cell(value: str) -> str:
    """Flag a single table cell as problematic."""
    return f"{symbols.WARNING}{value}"


__all__ = ["Block", "Fragment", "warn_cell"]
