"""Core data models shared across modcheck components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .report import Fragment


@dataclass(frozen=True)
class Coordinate:
    """Version-independent identity of a dependency."""

    group_id: str
    artifact_id: str

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Dependency:
    """A declared dependency (or plugin) coordinate plus its raw version string."""

    coordinate: Coordinate
    version: Optional[str] = None
    scope: Optional[str] = None
    optional: bool = False

    @property
    def group_id(self) -> str:
        return self.coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def effective_scope(self) -> str:
        return self.scope or "compile"


@dataclass(frozen=True)
class ParentRef:
    """The parent coordinate a descriptor declares, as written on disk."""

    coordinate: Coordinate
    version: Optional[str] = None
    relative_path: Optional[str] = None


@dataclass(eq=False)
class Module:
    """One unit of the workspace tree.

    Instances are built once by the workspace provider and never mutated by
    checkers. Equality is identity so modules can key dictionaries.
    """

    name: str
    path: Path
    group_id: Optional[str] = None
    version: Optional[str] = None
    packaging: str = "jar"
    display_name: Optional[str] = None
    url: Optional[str] = None
    descriptor: Optional[Path] = None
    parent_ref: Optional[ParentRef] = None
    declared_modules: Tuple[str, ...] = ()
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: Tuple[Dependency, ...] = ()
    managed_dependencies: Tuple[Dependency, ...] = ()
    plugins: Tuple[Dependency, ...] = ()
    parent: Optional["Module"] = field(default=None, repr=False)
    children: List["Module"] = field(default_factory=list, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def ancestors(self) -> Iterator["Module"]:
        """Yield the parent chain, nearest ancestor first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def iter_tree(self) -> Iterator["Module"]:
        """Yield this module then every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def builtin_properties(self) -> Dict[str, str]:
        """Model expressions such as ``project.version`` available to references."""
        builtins: Dict[str, str] = {
            "project.artifactId": self.name,
            "project.basedir": str(self.path),
        }
        if self.group_id:
            builtins["project.groupId"] = self.group_id
        if self.version:
            builtins["project.version"] = self.version
        if self.display_name:
            builtins["project.name"] = self.display_name
        if self.parent_ref is not None and self.parent_ref.version:
            builtins["project.parent.version"] = self.parent_ref.version
        return builtins


class UnitState(str, Enum):
    """Lifecycle of one (module, checker) execution."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass
class AnalysisResult:
    """Fragment produced by one checker for one module."""

    module: Module
    checker_id: str
    fragment: Fragment
    state: UnitState = UnitState.COMPLETED
    elapsed: float = 0.0

    @property
    def has_issue(self) -> bool:
        return self.fragment.has_issue

    @property
    def is_empty(self) -> bool:
        return self.fragment.is_empty


__all__ = [
    "AnalysisResult",
    "Coordinate",
    "Dependency",
    "Module",
    "ParentRef",
    "UnitState",
]
