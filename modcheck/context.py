"""Per-invocation analysis context handed to checkers."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .config import RunSettings
from .models import Module
from .properties import PropertyResolver
from .versions import VersionQueryService


@dataclass(frozen=True)
class AnalysisContext:
    """Immutable inputs for one (module, checker) execution.

    The scheduler builds a fresh instance per unit; checkers must keep any
    per-run state here rather than on the shared checker instance.
    """

    module: Module
    root: Module
    settings: RunSettings
    resolver: PropertyResolver
    versions: Optional[VersionQueryService] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False, repr=False)

    @property
    def is_root(self) -> bool:
        return self.module is self.root

    @property
    def properties_to_check(self) -> Tuple[str, ...]:
        return self.settings.properties_to_check

    @property
    def module_path(self) -> Path:
        return self.module.path

    @property
    def cancelled(self) -> bool:
        """True once the scheduler gave up on this unit; long checkers should stop early."""
        return self.cancel_event.is_set()


__all__ = ["AnalysisContext"]
