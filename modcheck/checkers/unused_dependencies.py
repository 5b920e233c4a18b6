"""Dependencies that the module's main sources never appear to touch."""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..context import AnalysisContext
from ..logging import get_logger
from ..models import Dependency
from ..report import Fragment
from .base import Checker, iter_sources

SOURCE_DIR = "src/main/java"

USAGE_HINTS: Dict[str, Tuple[str, ...]] = {
    "commons-io:commons-io": ("org.apache.commons.io", "fileutils"),
    "org.apache.commons:commons-lang3": ("org.apache.commons.lang3", "stringutils"),
    "com.google.guava:guava": ("com.google.common", "lists", "immutablelist"),
    "org.slf4j:slf4j-api": ("org.slf4j", "logger", "loggerfactory"),
    "org.junit.jupiter:junit-jupiter": ("org.junit.jupiter", "test", "jupiter"),
    "org.mockito:mockito-core": ("org.mockito", "mock", "mockito"),
}

logger = get_logger("checkers.unused_dependencies")


class UnusedDependenciesChecker(Checker):
    id = "unusedDependencies"

    def __init__(self, usage_hints: Dict[str, Tuple[str, ...]] | None = None) -> None:
        self.usage_hints = dict(USAGE_HINTS if usage_hints is None else usage_hints)

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        source_dir = module.path / SOURCE_DIR
        if not source_dir.is_dir():
            return fragment

        content = _read_sources(context).lower()
        unused = [
            dep
            for dep in module.dependencies
            if dep.effective_scope.lower() != "test" and not self._is_used(dep, content)
        ]
        if not unused:
            return fragment
        for dep in unused:
            logger.warning("Possibly unused dependency %s in %s", dep.coordinate, module.name)

        fragment.heading(f"Unused dependencies in `{module.name}`").open_section()
        fragment.warning("Potentially unused dependencies detected:")
        fragment.table(
            ["Group ID", "Artifact ID", "Version"],
            [[dep.group_id, dep.artifact_id, dep.version or "unknown"] for dep in unused],
        )
        return fragment.close_section()

    def _is_used(self, dep: Dependency, content: str) -> bool:
        hints = self.usage_hints.get(dep.coordinate.key, (dep.group_id, dep.artifact_id))
        return any(hint.lower() in content for hint in hints)


def _read_sources(context: AnalysisContext) -> str:
    parts: List[str] = []
    for path in iter_sources(context.module.path / SOURCE_DIR):
        if context.cancelled:
            break
        try:
            parts.append(path.read_text(encoding="utf-8", errors="ignore"))
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
    return "\n".join(parts)
