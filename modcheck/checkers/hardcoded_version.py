"""Dependency and plugin versions written as literals instead of properties."""

from __future__ import annotations

from typing import List

from .. import symbols
from ..context import AnalysisContext
from ..logging import get_logger
from ..models import Dependency
from ..report import Fragment, warn_cell
from .base import Checker

IGNORED_SCOPES = frozenset({"test", "provided", "system", "import"})

logger = get_logger("checkers.hardcoded_version")


class HardcodedVersionChecker(Checker):
    id = "hardcodedVersion"

    def __init__(self, *, check_plugins: bool = True, ignore_optional: bool = True) -> None:
        self.check_plugins = check_plugins
        self.ignore_optional = ignore_optional

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        resolver = context.resolver

        dependencies: List[Dependency] = []
        for dep in module.dependencies:
            if self.ignore_optional and dep.optional:
                continue
            if dep.scope and dep.scope in IGNORED_SCOPES:
                continue
            if resolver.is_hardcoded(dep.version):
                dependencies.append(dep)

        plugins: List[Dependency] = []
        if self.check_plugins:
            plugins = [plugin for plugin in module.plugins if resolver.is_hardcoded(plugin.version)]

        fragment = Fragment()
        if not dependencies and not plugins:
            return fragment

        fragment.heading(f"Hardcoded versions in `{module.name}`").open_section()
        if dependencies:
            for dep in dependencies:
                logger.warning(
                    "[%s] Hardcoded version %s:%s (scope %s)", module.name, dep.coordinate, dep.version, dep.effective_scope
                )
            fragment.error("The following dependencies declare a literal version:")
            fragment.table(
                ["Group ID", "Artifact ID", "Version", "Scope"],
                [[dep.group_id, dep.artifact_id, warn_cell(dep.version or ""), dep.effective_scope] for dep in dependencies],
            )
        if plugins:
            for plugin in plugins:
                logger.warning("[%s] Hardcoded plugin version %s:%s", module.name, plugin.coordinate, plugin.version)
            fragment.error("The following plugins declare a literal version:")
            fragment.table(
                ["Group ID", "Artifact ID", "Version"],
                [[plugin.group_id, plugin.artifact_id, warn_cell(plugin.version or "")] for plugin in plugins],
            )
        fragment.paragraph(
            f"{symbols.HINT}Replace literal versions with properties declared in the parent's <properties> section."
        )
        return fragment.close_section()
