"""Checker implementations and the registry table that names them."""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Sequence, Set, Tuple

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .applicability import DEFAULT_RULES, ApplicabilityRules
from .base import Checker
from .commented_tags import CommentedTagsChecker
from .dependencies_redefinition import DependenciesRedefinitionChecker
from .expected_modules import ExpectedModulesChecker
from .hardcoded_version import HardcodedVersionChecker
from .interface_conformity import InterfaceConformityChecker
from .outdated_dependencies import OutdatedDependenciesChecker
from .parent_version import ParentVersionChecker
from .property_presence import PropertyPresenceChecker
from .property_redefinition import PropertyRedefinitionChecker
from .redundant_properties import RedundantPropertiesChecker
from .unused_dependencies import UnusedDependenciesChecker
from .urls import UrlChecker
from .yaml_schema import YamlSchemaChecker

CheckerFactory = Callable[[], Checker]

_BUILTIN_FACTORIES: dict[str, CheckerFactory] = {
    "expectedModules": ExpectedModulesChecker,
    "parentVersion": ParentVersionChecker,
    "propertyPresence": PropertyPresenceChecker,
    "urls": UrlChecker,
    "hardcodedVersion": HardcodedVersionChecker,
    "outdatedDependencies": OutdatedDependenciesChecker,
    "commentedTags": CommentedTagsChecker,
    "redundantProperties": RedundantPropertiesChecker,
    "unusedDependencies": UnusedDependenciesChecker,
    "dependenciesRedefinition": DependenciesRedefinitionChecker,
    "interfaceConformity": InterfaceConformityChecker,
    "propertyRedefinition": PropertyRedefinitionChecker,
    "yamlSchemaValidator": YamlSchemaChecker,
}

logger = get_logger("checkers")


class CheckerRegistry:
    """Maps checker ids to shared, stateless checker instances."""

    def __init__(self, factories: Dict[str, CheckerFactory] | None = None) -> None:
        self._lock = threading.Lock()
        self._checkers: Dict[str, Checker] = {}
        for checker_id, factory in (factories if factories is not None else _BUILTIN_FACTORIES).items():
            self.register(checker_id, factory)

    def register(self, checker_id: str, factory: CheckerFactory) -> None:
        instance = factory()
        if not isinstance(instance, Checker):
            raise TypeError(f"Checker factory for '{checker_id}' did not return a Checker instance")
        if instance.id and instance.id != checker_id:
            raise ValueError(f"Checker '{type(instance).__name__}' reports id '{instance.id}', registered as '{checker_id}'")
        with self._lock:
            if checker_id in self._checkers:
                raise ValueError(f"Checker id '{checker_id}' is already registered")
            self._checkers[checker_id] = instance

    def list_checkers(self) -> List[str]:
        with self._lock:
            return list(self._checkers)

    def get(self, checker_id: str) -> Checker:
        with self._lock:
            try:
                return self._checkers[checker_id]
            except KeyError:
                raise KeyError(f"Unknown checker '{checker_id}'") from None

    def run(self, checker_id: str, context: AnalysisContext) -> Fragment:
        fragment = self.get(checker_id).generate_report(context)
        return fragment if fragment is not None else Fragment()

    def select(self, requested: Sequence[str] | None) -> Tuple[List[str], List[str]]:
        """Return (known ids in registry order, warnings for unknown ids)."""
        available = self.list_checkers()
        if not requested:
            return available, []
        wanted: Set[str] = set(requested)
        selected = [checker_id for checker_id in available if checker_id in wanted]
        warnings: List[str] = []
        for checker_id in dict.fromkeys(requested):
            if checker_id not in available:
                message = f"Unknown checker id '{checker_id}' ignored"
                logger.warning(message)
                warnings.append(message)
        return selected, warnings


def default_registry() -> CheckerRegistry:
    return CheckerRegistry()


__all__ = [
    "ApplicabilityRules",
    "Checker",
    "CheckerRegistry",
    "DEFAULT_RULES",
    "default_registry",
]
