"""Base classes for checker plugins."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator

from ..context import AnalysisContext
from ..report import Fragment
from ..versions import STATUS_TIMED_OUT, VersionLookup


class Checker(ABC):
    """Contract for checkers that turn one module into a report fragment.

    A single instance serves every module of a run concurrently, so
    implementations must not keep per-run state on ``self``.
    """

    id: str = ""

    @abstractmethod
    def generate_report(self, context: AnalysisContext) -> Fragment:
        """Return the findings for ``context.module``; an empty fragment means no issue."""


def iter_sources(directory: Path, suffix: str = ".java") -> Iterator[Path]:
    """Yield source files below ``directory`` in a stable order."""
    if not directory.is_dir():
        return
    yield from sorted(path for path in directory.rglob(f"*{suffix}") if path.is_file())


def add_undetermined_versions(fragment: Fragment, lookups: Iterable[VersionLookup]) -> Fragment:
    """Append a warning table for lookups that failed or timed out."""
    unknown = sorted(
        (lookup for lookup in lookups if not lookup.ok),
        key=lambda item: (item.coordinate.group_id, item.coordinate.artifact_id),
    )
    if not unknown:
        return fragment
    fragment.heading("Could not determine latest version")
    fragment.warning(f"{len(unknown)} version lookup(s) failed or timed out:")
    fragment.table(
        ["Group ID", "Artifact ID", "Current version", "Status", "Detail"],
        [
            [
                item.coordinate.group_id,
                item.coordinate.artifact_id,
                item.current,
                "timed out" if item.status == STATUS_TIMED_OUT else "failed",
                item.detail or "",
            ]
            for item in unknown
        ],
    )
    return fragment


__all__ = ["Checker", "add_undetermined_versions", "iter_sources"]
