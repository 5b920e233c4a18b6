"""Plain-text renderer."""

from __future__ import annotations

from typing import List, Sequence

from .. import symbols
from .base import ReportRenderer


class TextReportRenderer(ReportRenderer):
    format_name = "text"
    extension = "txt"

    def heading(self, text: str, level: int = 3) -> str:
        if level <= 1:
            return f"\n{'=' * 20} {text} {'=' * 20}\n\n"
        if level == 2:
            return f"\n{'-' * 20} {text} {'-' * 20}\n\n"
        return f"\n>>> {text.upper()} <<<\n\n"

    def paragraph(self, text: str) -> str:
        return f"{text}\n\n"

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        widths = [len(header) for header in headers]
        for row in rows:
            for index, cell in enumerate(row[: len(widths)]):
                widths[index] = max(widths[index], len(cell))

        def line(cells: Sequence[str]) -> str:
            padded = [f"| {cell:<{widths[index]}} " for index, cell in enumerate(cells[: len(widths)])]
            return "".join(padded) + "|"

        lines: List[str] = [line(headers), "".join(f"| {'-' * width} " for width in widths) + "|"]
        lines.extend(line(row) for row in rows)
        return "\n".join(lines) + "\n\n"

    def warning(self, text: str) -> str:
        return f"{symbols.WARNING}WARNING: {text}\n"

    def info(self, text: str) -> str:
        return f"{symbols.INFO}INFO: {text}\n"

    def error(self, text: str) -> str:
        return f"{symbols.ERROR}ERROR: {text}\n"
