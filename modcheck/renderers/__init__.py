"""Report renderers and the format lookup."""

from __future__ import annotations

from typing import Callable, Dict

from ..logging import get_logger
from .base import ReportRenderer
from .html import HtmlReportRenderer
from .markdown import MarkdownReportRenderer
from .text import TextReportRenderer

_RENDERERS: Dict[str, Callable[[], ReportRenderer]] = {
    "html": HtmlReportRenderer,
    "markdown": MarkdownReportRenderer,
    "md": MarkdownReportRenderer,
    "text": TextReportRenderer,
    "txt": TextReportRenderer,
}

logger = get_logger("renderers")


def create_renderer(format_name: str | None) -> ReportRenderer:
    """Return the renderer for ``format_name``; unknown names fall back to Markdown."""
    key = (format_name or "").strip().lower()
    factory = _RENDERERS.get(key)
    if factory is None:
        logger.warning("Unknown report format '%s'; falling back to markdown", format_name)
        factory = MarkdownReportRenderer
    return factory()


__all__ = [
    "HtmlReportRenderer",
    "MarkdownReportRenderer",
    "ReportRenderer",
    "TextReportRenderer",
    "create_renderer",
]
