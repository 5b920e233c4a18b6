"""Conventional child modules (``<root>-api``, ``<root>-impl``...) must exist and be declared."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from .. import symbols
from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from ..workspace import DESCRIPTOR_NAME
from .base import Checker

PROP_SUFFIXES = "modcheck.expectedModules.suffixes"
PROP_EXCLUDES = "modcheck.expectedModules.excludes"
PROP_OPTIONAL = "modcheck.expectedModules.optional"

DEFAULT_SUFFIXES = ("-api", "-impl", "-local")

_SECTIONS = (
    (
        "missing",
        "Expected modules missing (not declared and absent from disk):",
        "These modules are expected by convention. Create them and declare them in the parent descriptor.",
    ),
    (
        "not_declared",
        "Modules present on disk but not declared:",
        "These modules exist on disk but are missing from the parent's <modules> section.",
    ),
    (
        "declared_missing",
        "Modules declared but absent from disk:",
        "These modules are declared in the parent descriptor but do not exist on disk.",
    ),
    (
        "no_descriptor",
        f"Modules present on disk without a {DESCRIPTOR_NAME}:",
        f"These module directories exist but contain no {DESCRIPTOR_NAME}.",
    ),
)

logger = get_logger("checkers.expected_modules")


@dataclass
class _ModuleAudit:
    buckets: Dict[str, List[str]] = field(default_factory=lambda: {key: [] for key, _, _ in _SECTIONS})

    @property
    def has_issues(self) -> bool:
        return any(self.buckets.values())


class ExpectedModulesChecker(Checker):
    id = "expectedModules"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        base = module.name
        properties = module.properties

        suffixes = _split(properties.get(PROP_SUFFIXES)) or list(DEFAULT_SUFFIXES)
        excluded = _qualified(_split(properties.get(PROP_EXCLUDES)), base)
        optional = _qualified(_split(properties.get(PROP_OPTIONAL)), base)
        expected = [base + suffix for suffix in suffixes if base + suffix not in excluded]
        logger.debug("Expected modules for %s: %s", base, expected)

        audit = self._audit(context, expected, optional)
        declared = set(module.declared_modules)
        extra = sorted(name for name in declared if name not in expected and name not in excluded)

        fragment = Fragment()
        if not audit.has_issues and not extra:
            return fragment

        fragment.heading(f"Module layout of `{base}`").open_section()
        for key, header, hint in _SECTIONS:
            names = sorted(audit.buckets[key])
            if not names:
                continue
            for name in names:
                logger.warning("%s %s", header, name)
            fragment.error(header)
            fragment.table(["Module"], [[name] for name in names])
            fragment.paragraph(f"{symbols.HINT}{hint}")

        if extra:
            fragment.heading(f"{symbols.INFO}Additional modules")
            fragment.paragraph("These modules are declared but do not follow the naming convention.")
            fragment.table(["Additional module"], [[name] for name in extra])
        fragment.close_section()
        return fragment

    def _audit(self, context: AnalysisContext, expected: List[str], optional: Set[str]) -> _ModuleAudit:
        module = context.module
        declared = set(module.declared_modules)
        audit = _ModuleAudit()
        for name in expected:
            is_declared = name in declared
            location = module.path / name
            on_disk = location.exists()
            if not is_declared and not on_disk:
                if name not in optional:
                    audit.buckets["missing"].append(name)
            elif not is_declared:
                audit.buckets["not_declared"].append(name)
            elif not on_disk:
                audit.buckets["declared_missing"].append(name)
            elif not (location / DESCRIPTOR_NAME).exists():
                audit.buckets["no_descriptor"].append(name)
        return audit


def _split(value: str | None) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _qualified(entries: List[str], base: str) -> Set[str]:
    return {entry if entry.startswith(base) else base + entry for entry in entries}
