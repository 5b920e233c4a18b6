"""Dependencies redeclared with a version that differs from the inherited one."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..context import AnalysisContext
from ..logging import get_logger
from ..models import Coordinate, Module
from ..properties import PropertyResolver
from ..report import Fragment
from .base import Checker

logger = get_logger("checkers.dependencies_redefinition")


class DependenciesRedefinitionChecker(Checker):
    id = "dependenciesRedefinition"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        resolver = context.resolver
        fragment = Fragment()
        if module.parent is None:
            return fragment

        rows: List[List[str]] = []
        for dep in module.dependencies:
            if not dep.version:
                continue
            inherited = _inherited_version(module, dep.coordinate, resolver)
            if inherited is None:
                continue
            source, inherited_version = inherited
            declared_version = resolver.resolve(dep.version, module) or dep.version
            if declared_version == inherited_version:
                continue
            logger.warning(
                "%s redefines %s: %s -> %s", module.name, dep.coordinate, inherited_version, declared_version
            )
            rows.append([dep.coordinate.key, source, inherited_version, declared_version])

        if not rows:
            return fragment
        fragment.heading(f"Redefined dependencies in `{module.name}`").open_section()
        fragment.warning("Some dependencies declare a version different from the inherited one:")
        fragment.table(["Dependency", "Declared in", "Inherited version", "Redefined version"], rows)
        return fragment.close_section()


def _inherited_version(
    module: Module, coordinate: Coordinate, resolver: PropertyResolver
) -> Optional[Tuple[str, str]]:
    """Nearest ancestor declaration of ``coordinate``, resolved in that ancestor."""
    for ancestor in module.ancestors():
        declared: Dict[Coordinate, str] = {}
        for dep in (*ancestor.managed_dependencies, *ancestor.dependencies):
            if dep.version and dep.coordinate not in declared:
                declared[dep.coordinate] = dep.version
        if coordinate in declared:
            resolved = resolver.resolve(declared[coordinate], ancestor) or declared[coordinate]
            return ancestor.name, resolved
    return None
