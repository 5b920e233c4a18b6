"""Recursive ``${name}`` substitution against a module and its ancestors."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .logging import get_logger
from .models import Module

MAX_SUBSTITUTIONS = 10

_REFERENCE = re.compile(r"\$\{([^}]+)}")

logger = get_logger("properties")


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one value."""

    value: str
    substitutions: int
    truncated: bool = False
    unresolved: tuple[str, ...] = ()

    @property
    def had_reference(self) -> bool:
        return self.substitutions > 0 or bool(self.unresolved)


def environment_fallback(name: str) -> Optional[str]:
    """Process-wide fallback: ``env.X`` reads the environment variable ``X``."""
    if name.startswith("env."):
        return os.environ.get(name[4:])
    return None


class PropertyResolver:
    """Resolves indirect references.

    Lookup order for a ``${name}`` token: the owning module's model
    expressions and declared properties, then each ancestor nearest first,
    then the fallback source. Resolution restarts from the first remaining
    token after every substitution. Tokens that cannot be resolved are left
    verbatim and skipped. At most ``max_substitutions`` replacements
    are made; beyond that the last intermediate value is returned.

    The resolver holds no per-run state and is safe to share across threads.
    """

    def __init__(
        self,
        fallback: Callable[[str], Optional[str]] | Mapping[str, str] | None = environment_fallback,
        *,
        max_substitutions: int = MAX_SUBSTITUTIONS,
    ) -> None:
        if isinstance(fallback, Mapping):
            mapping = dict(fallback)
            self._fallback: Callable[[str], Optional[str]] = mapping.get
        elif fallback is None:
            self._fallback = lambda _name: None
        else:
            self._fallback = fallback
        self.max_substitutions = max_substitutions

    def lookup(self, name: str, module: Module) -> Optional[str]:
        """Return the raw (unsubstituted) value bound to ``name`` for ``module``."""
        if name in module.properties:
            return module.properties[name]
        builtin = module.builtin_properties().get(name)
        if builtin is not None:
            return builtin
        for ancestor in module.ancestors():
            if name in ancestor.properties:
                return ancestor.properties[name]
        return self._fallback(name)

    def resolve(self, value: Optional[str], module: Module) -> Optional[str]:
        if value is None:
            return None
        return self.resolve_detailed(value, module).value

    def resolve_detailed(self, value: str, module: Module) -> Resolution:
        current = value
        count = 0
        position = 0
        unresolved: list[str] = []
        while True:
            match = _REFERENCE.search(current, position)
            if match is None:
                return Resolution(current, count, unresolved=tuple(dict.fromkeys(unresolved)))
            name = match.group(1)
            replacement = self.lookup(name, module)
            if replacement is None:
                unresolved.append(name)
                position = match.end()
                continue
            if count >= self.max_substitutions:
                logger.warning(
                    "Stopped resolving '%s' in module %s after %d substitutions; "
                    "circular property reference suspected (last value '%s')",
                    value,
                    module.name,
                    count,
                    current,
                )
                return Resolution(current, count, truncated=True, unresolved=tuple(dict.fromkeys(unresolved)))
            current = current[: match.start()] + replacement + current[match.end():]
            count += 1

    def is_hardcoded(self, value: Optional[str]) -> bool:
        """A literal value never goes through indirection."""
        return bool(value) and "${" not in value


__all__ = ["MAX_SUBSTITUTIONS", "PropertyResolver", "Resolution", "environment_fallback"]
