"""API interfaces must be exercised by a ``ClassInspector.logClassName`` test call."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Set

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker, iter_sources

MAIN_DIR = "src/main/java"
TEST_DIR = "src/test/java"

_LOGGED_CLASS = re.compile(r"ClassInspector\.logClassName\(([^)]+)\.class\)")
_GENERICS = re.compile(r"[<{].*")

logger = get_logger("checkers.interface_conformity")


class InterfaceConformityChecker(Checker):
    id = "interfaceConformity"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        interfaces = collect_interfaces(module.path / MAIN_DIR)
        if not interfaces:
            return fragment

        logged = collect_logged_classes(context)
        uncovered = [name for name in interfaces if name not in logged]
        if not uncovered:
            return fragment

        fragment.heading(f"Interface conformity of `{module.name}`").open_section()
        fragment.warning("Interfaces not covered by `ClassInspector.logClassName(...)`:")
        fragment.table(["Untested interface"], [[name] for name in uncovered])
        return fragment.close_section()


def collect_interfaces(source_dir: Path) -> List[str]:
    names: List[str] = []
    for path in iter_sources(source_dir):
        name = _interface_name(path)
        if name:
            names.append(name)
    return names


def _interface_name(path: Path) -> Optional[str]:
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return None
    for line in lines:
        tokens = line.strip().split()
        for index, token in enumerate(tokens[:-1]):
            if token == "interface":
                name = _GENERICS.sub("", tokens[index + 1])
                if name:
                    return name
    return None


def collect_logged_classes(context: AnalysisContext) -> Set[str]:
    """Class names passed to ``logClassName`` in any module's test sources."""
    found: Set[str] = set()
    for module in context.root.iter_tree():
        for path in iter_sources(module.path / TEST_DIR):
            try:
                content = path.read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.warning("Cannot read %s: %s", path, exc)
                continue
            found.update(match.strip() for match in _LOGGED_CLASS.findall(content))
    return found
