"""Declarative rules deciding which checker runs on which module."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Mapping, Optional

from ..models import Module

DEFAULT_ROOT_ONLY = frozenset({"expectedModules", "propertyPresence"})
DEFAULT_NAME_SUFFIXES: Mapping[str, str] = {"interfaceConformity": "-api"}


@dataclass(frozen=True)
class ApplicabilityRules:
    """Data-driven applicability table.

    ``root_only`` ids run on the workspace root alone, ``name_suffixes`` maps
    an id to the module-name suffix it is restricted to, and ``enabled``
    (when set) limits the run to a caller-selected subset. Ids in none of
    these tables apply to every module.
    """

    root_only: FrozenSet[str] = DEFAULT_ROOT_ONLY
    name_suffixes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_NAME_SUFFIXES))
    enabled: Optional[FrozenSet[str]] = None

    def restrict(self, checker_ids: Iterable[str] | None) -> "ApplicabilityRules":
        """Return a copy that only considers ``checker_ids`` applicable."""
        if checker_ids is None:
            return replace(self, enabled=None)
        return replace(self, enabled=frozenset(checker_ids))

    def applies(self, checker_id: str, module: Module, is_root: bool) -> bool:
        if self.enabled is not None and checker_id not in self.enabled:
            return False
        if checker_id in self.root_only and not is_root:
            return False
        suffix = self.name_suffixes.get(checker_id)
        if suffix is not None and not module.name.endswith(suffix):
            return False
        return True


DEFAULT_RULES = ApplicabilityRules()


__all__ = ["ApplicabilityRules", "DEFAULT_RULES", "DEFAULT_NAME_SUFFIXES", "DEFAULT_ROOT_ONLY"]
