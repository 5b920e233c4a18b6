"""Required properties must be declared by the workspace root."""

from __future__ import annotations

from typing import Dict, Optional

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

KNOWN_VALUES: Dict[str, str] = {
    "project.build.sourceEncoding": "UTF-8",
    "maven.compiler.source": "11",
    "maven.compiler.target": "11",
    "java.version": "11",
}

logger = get_logger("checkers.property_presence")


def suggest_value(key: str) -> Optional[str]:
    return KNOWN_VALUES.get(key)


class PropertyPresenceChecker(Checker):
    id = "propertyPresence"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        rows = []
        for key in dict.fromkeys(context.properties_to_check):
            if key in module.properties:
                continue
            suggestion = suggest_value(key)
            logger.warning(
                "Missing property %s in %s%s",
                key,
                module.name,
                f" (suggestion: {suggestion})" if suggestion else "",
            )
            rows.append([key, "Missing", f"Suggestion: {suggestion}" if suggestion else ""])

        fragment = Fragment()
        if not rows:
            return fragment
        fragment.heading(f"Missing properties in `{module.name}`").open_section()
        fragment.error("The following properties are missing:")
        fragment.table(["Key", "Status", "Suggestion"], rows)
        fragment.close_section()
        return fragment
