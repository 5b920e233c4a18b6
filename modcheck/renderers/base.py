"""Renderer contract shared by the text, Markdown and HTML backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..report import (
    CLOSE_SECTION,
    ERROR,
    HEADING,
    INFO,
    OPEN_SECTION,
    PARAGRAPH,
    TABLE,
    WARNING,
    Block,
    Fragment,
)


class ReportRenderer(ABC):
    """Turns structured report blocks into one output format.

    ``warning`` and ``error`` output must carry the markers from
    :mod:`modcheck.symbols` so issue detection works on any rendering.
    """

    format_name: str = ""
    extension: str = ""

    @abstractmethod
    def heading(self, text: str, level: int = 3) -> str:
        """Render a level 1-3 title."""

    @abstractmethod
    def paragraph(self, text: str) -> str:
        """Render plain text."""

    @abstractmethod
    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        """Render a table."""

    @abstractmethod
    def warning(self, text: str) -> str:
        """Render warning-styled text."""

    @abstractmethod
    def info(self, text: str) -> str:
        """Render informational text."""

    @abstractmethod
    def error(self, text: str) -> str:
        """Render error-styled text."""

    def open_section(self) -> str:
        return ""

    def close_section(self) -> str:
        return ""

    def wrap_document(self, title: str, body: str) -> str:
        """Return a complete document around an aggregated body."""
        return body

    def render_block(self, block: Block) -> str:
        if block.kind == HEADING:
            return self.heading(block.text, block.level or 3)
        if block.kind == PARAGRAPH:
            return self.paragraph(block.text)
        if block.kind == TABLE:
            return self.table(block.headers, block.rows)
        if block.kind == WARNING:
            return self.warning(block.text)
        if block.kind == INFO:
            return self.info(block.text)
        if block.kind == ERROR:
            return self.error(block.text)
        if block.kind == OPEN_SECTION:
            return self.open_section()
        if block.kind == CLOSE_SECTION:
            return self.close_section()
        raise ValueError(f"Unknown block kind '{block.kind}'")

    def render_fragment(self, fragment: Fragment) -> str:
        return "".join(self.render_block(block) for block in fragment.blocks)


__all__ = ["ReportRenderer"]
