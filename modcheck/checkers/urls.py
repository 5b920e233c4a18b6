"""Descriptor ``<url>`` must be present and use HTTPS."""

from __future__ import annotations

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

HTTPS_PREFIX = "https://"

logger = get_logger("checkers.urls")


class UrlChecker(Checker):
    id = "urls"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        url = module.url
        if not url:
            fragment.heading(f"Problem with the <url> element in `{module.name}`").open_section()
            fragment.error("No `<url>` element found in the descriptor.")
            return fragment.close_section()
        if not url.startswith(HTTPS_PREFIX):
            logger.warning("Insecure URL in %s: %s", module.name, url)
            fragment.heading(f"Insecure URL in `{module.name}`").open_section()
            fragment.error(f"The URL must start with `{HTTPS_PREFIX}`: {url}")
            return fragment.close_section()
        return fragment
