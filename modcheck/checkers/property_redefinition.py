"""Properties overriding an ancestor's definition with a different value."""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

IGNORED_PROPERTIES = frozenset({"project.artifactId", "project.version", "project.name", "start-class"})

logger = get_logger("checkers.property_redefinition")


class PropertyRedefinitionChecker(Checker):
    id = "propertyRedefinition"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()

        # key -> (depth, source module, raw value); nearest ancestor wins
        inherited: Dict[str, Tuple[int, str, str]] = {}
        for depth, ancestor in enumerate(module.ancestors(), start=1):
            for key, value in ancestor.properties.items():
                inherited.setdefault(key, (depth, ancestor.name, value))
        if not inherited:
            return fragment

        findings: List[Tuple[int, str, str, str, str]] = []
        truncated: List[str] = []
        for key, (depth, source, parent_value) in inherited.items():
            if key in IGNORED_PROPERTIES or key not in module.properties:
                continue
            current = module.properties[key]
            if current == parent_value:
                continue
            logger.warning(
                "Property %s redefined in %s (declared in %s as '%s', now '%s')",
                key,
                module.name,
                source,
                parent_value,
                current,
            )
            findings.append((depth, key, source, parent_value, current))
            if context.resolver.resolve_detailed(current, module).truncated:
                truncated.append(key)

        if not findings:
            return fragment
        findings.sort(key=lambda item: (item[0], item[1]))

        fragment.heading(f"Redefined properties in `{module.name}`").open_section()
        fragment.warning("The following properties are redefined relative to the parent chain:")
        fragment.table(
            ["Key", "Parent source", "Original value", "Redefined value"],
            [[key, source, parent_value, current] for _, key, source, parent_value, current in findings],
        )
        if truncated:
            fragment.info(
                "Substitution stopped early (circular reference suspected) for: " + ", ".join(sorted(truncated))
            )
        return fragment.close_section()
