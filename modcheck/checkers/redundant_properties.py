"""Properties declared by a module but referenced by no descriptor in the workspace."""

from __future__ import annotations

from typing import List

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

logger = get_logger("checkers.redundant_properties")


class RedundantPropertiesChecker(Checker):
    id = "redundantProperties"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        if not module.properties:
            return fragment

        combined = _combined_descriptors(context)
        unused = sorted(name for name in module.properties if f"${{{name.strip()}}}" not in combined)
        if not unused:
            return fragment
        for name in unused:
            logger.warning("Unused property %s (declared in %s)", name, module.name)

        fragment.heading(f"Redundant properties in `{module.name}`").open_section()
        fragment.warning(
            "The following properties are declared in this module but referenced by no descriptor of the workspace:"
        )
        fragment.table(["Property"], [[name] for name in unused])
        return fragment.close_section()


def _combined_descriptors(context: AnalysisContext) -> str:
    contents: List[str] = []
    for module in context.root.iter_tree():
        if module.descriptor is None:
            continue
        try:
            contents.append(module.descriptor.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.warning("Cannot read %s: %s", module.descriptor, exc)
    return "\n".join(contents)
