"""Markdown renderer."""

from __future__ import annotations

from typing import Sequence

from .. import symbols
from .base import ReportRenderer


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\r", "").replace("\n", "<br/>")


class MarkdownReportRenderer(ReportRenderer):
    format_name = "markdown"
    extension = "md"

    def heading(self, text: str, level: int = 3) -> str:
        level = min(max(level, 1), 3)
        return f"{'#' * level} {text}\n\n"

    def paragraph(self, text: str) -> str:
        return f"{text}\n\n"

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        lines = [
            "| " + " | ".join(_cell(header) for header in headers) + " |",
            "|" + "|".join("---" for _ in headers) + "|",
        ]
        lines.extend("| " + " | ".join(_cell(cell) for cell in row) + " |" for row in rows)
        return "\n".join(lines) + "\n\n"

    def warning(self, text: str) -> str:
        return f"> {symbols.WARNING}**Warning:** {text}\n\n"

    def info(self, text: str) -> str:
        return f"> {symbols.INFO}{text}\n\n"

    def error(self, text: str) -> str:
        return f"> {symbols.ERROR}**Error:** {text}\n\n"
