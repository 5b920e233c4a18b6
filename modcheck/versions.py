"""Version ordering and concurrent remote version lookups."""

from __future__ import annotations

import concurrent.futures
import functools
import re
import threading
import time
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .errors import VersionQueryError
from .logging import get_logger
from .models import Coordinate
from .pools import DaemonThreadPool
from .timeouts import TimedCall, UnitTimeoutError, await_call

logger = get_logger("versions")

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_TIMED_OUT = "timed_out"

_RELEASE = ""
_QUALIFIER_RANKS = {
    "alpha": 1,
    "beta": 2,
    "milestone": 3,
    "rc": 4,
    "snapshot": 5,
    _RELEASE: 6,
    "sp": 7,
}
_QUALIFIER_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "m": "milestone",
    "cr": "rc",
    "ga": _RELEASE,
    "final": _RELEASE,
    "release": _RELEASE,
}
_UNKNOWN_RANK = 8
_PRERELEASE_TAGS = {"alpha", "beta", "milestone", "rc", "snapshot", "preview", "ea", "dev"}
_TOKEN = re.compile(r"\d+|[a-z]+")

Token = Union[int, str]


def _tokenize(version: str) -> List[Token]:
    tokens: List[Token] = []
    for part in _TOKEN.findall(version.strip().lower()):
        if part.isdigit():
            tokens.append(int(part))
        else:
            tokens.append(_QUALIFIER_ALIASES.get(part, part))
    # trailing zeros and release markers do not change ordering: 1.0 == 1.0.0
    while tokens and tokens[-1] in (0, _RELEASE):
        tokens.pop()
    return tokens


def _compare_tokens(left: Optional[Token], right: Optional[Token]) -> int:
    if left is None:
        left = 0 if isinstance(right, int) else _RELEASE
    if right is None:
        right = 0 if isinstance(left, int) else _RELEASE
    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    left_rank = _QUALIFIER_RANKS.get(left, _UNKNOWN_RANK)
    right_rank = _QUALIFIER_RANKS.get(right, _UNKNOWN_RANK)
    if left_rank != right_rank:
        return (left_rank > right_rank) - (left_rank < right_rank)
    return (left > right) - (left < right)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1; numeric segments compare as integers."""
    left_tokens = _tokenize(left)
    right_tokens = _tokenize(right)
    for index in range(max(len(left_tokens), len(right_tokens))):
        a = left_tokens[index] if index < len(left_tokens) else None
        b = right_tokens[index] if index < len(right_tokens) else None
        result = _compare_tokens(a, b)
        if result:
            return result
    return 0


version_key = functools.cmp_to_key(compare_versions)


def is_prerelease(version: str) -> bool:
    return any(isinstance(token, str) and token in _PRERELEASE_TAGS for token in _tokenize(version))


def select_latest_stable(candidates: Iterable[str]) -> Optional[str]:
    """Highest version without a pre-release marker, or None."""
    stable = [version for version in candidates if version and not is_prerelease(version)]
    if not stable:
        return None
    return max(stable, key=version_key)


def select_latest(candidates: Iterable[str]) -> Optional[str]:
    versions = [version for version in candidates if version]
    if not versions:
        return None
    return max(versions, key=version_key)


class RemoteVersionSource(ABC):
    """Remote package source answering ``[minimum,)`` range queries."""

    @abstractmethod
    def available_versions(self, coordinate: Coordinate, minimum: Optional[str] = None) -> Sequence[str]:
        """Return known versions >= ``minimum`` in ascending order, or raise VersionQueryError."""


class MavenMetadataSource(RemoteVersionSource):
    """Reads ``maven-metadata.xml`` from one or more repository base URLs."""

    def __init__(
        self,
        repositories: Sequence[str],
        *,
        timeout: float = 30.0,
        opener: Callable[..., object] = urlopen,
    ) -> None:
        self.repositories = [repo.rstrip("/") for repo in repositories]
        self.timeout = timeout
        self._opener = opener

    def metadata_url(self, repository: str, coordinate: Coordinate) -> str:
        group_path = coordinate.group_id.replace(".", "/")
        return f"{repository}/{group_path}/{coordinate.artifact_id}/maven-metadata.xml"

    def available_versions(self, coordinate: Coordinate, minimum: Optional[str] = None) -> Sequence[str]:
        versions: Dict[str, None] = {}
        errors: List[str] = []
        for repository in self.repositories:
            try:
                for version in self._fetch(self.metadata_url(repository, coordinate)):
                    versions.setdefault(version, None)
            except VersionQueryError as exc:
                errors.append(str(exc))
        if not versions:
            detail = "; ".join(errors) or "no repositories configured"
            raise VersionQueryError(f"No versions found for {coordinate}: {detail}")
        ordered = sorted(versions, key=version_key)
        if minimum:
            ordered = [version for version in ordered if compare_versions(version, minimum) >= 0]
        return ordered

    def _fetch(self, url: str) -> List[str]:
        request = Request(url, headers={"Accept": "application/xml"})
        try:
            with self._opener(request, timeout=self.timeout) as response:  # type: ignore[attr-defined]
                raw = response.read()
        except HTTPError as exc:
            raise VersionQueryError(f"{url} returned HTTP {exc.code}") from exc
        except (URLError, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            raise VersionQueryError(f"{url} unreachable: {reason}") from exc

        try:
            root = ET.fromstring(raw)
        except ET.ParseError as exc:
            raise VersionQueryError(f"{url} returned malformed metadata") from exc
        found: List[str] = []
        for container in root.iter():
            if _local_name(container.tag) != "versions":
                continue
            for element in container:
                if _local_name(element.tag) == "version" and element.text and element.text.strip():
                    found.append(element.text.strip())
        return found


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


@dataclass(frozen=True)
class VersionLookup:
    """Result of one coordinate query. ``latest_stable`` None means "could not determine"."""

    coordinate: Coordinate
    current: Optional[str]
    latest_stable: Optional[str] = None
    latest: Optional[str] = None
    status: str = STATUS_OK
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def is_outdated(self) -> bool:
        if not self.ok or not self.latest_stable or not self.current:
            return False
        return compare_versions(self.latest_stable, self.current) > 0


LookupKey = Tuple[Coordinate, Optional[str]]


class VersionQueryService:
    """Runs remote queries on a bounded pool with a per-query timeout.

    Lookups are memoised by (coordinate, current version) for the lifetime of
    the service, which is one orchestration run. Failures never propagate:
    they come back as a :class:`VersionLookup` with a failed or timed-out
    status.
    """

    def __init__(
        self,
        source: RemoteVersionSource,
        *,
        max_workers: int = 8,
        timeout: float = 30.0,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.source = source
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor = DaemonThreadPool(max_workers, thread_name_prefix="modcheck-versions")
        self._lock = threading.Lock()
        self._pending: Dict[LookupKey, Tuple["concurrent.futures.Future[Sequence[str]]", TimedCall]] = {}
        self._results: Dict[LookupKey, VersionLookup] = {}
        self._closed = False

    def __enter__(self) -> "VersionQueryService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)

    def lookup(self, coordinate: Coordinate, current: Optional[str]) -> VersionLookup:
        return self.lookup_many([(coordinate, current)])[(coordinate, current)]

    def lookup_many(self, requests: Iterable[LookupKey]) -> Dict[LookupKey, VersionLookup]:
        """Query every (coordinate, current) pair concurrently."""
        keys = list(dict.fromkeys(requests))
        for key in keys:
            self._submit(key)

        # a unit waiting behind a full pool gets one timeout per wave ahead of it
        waves = max(1, -(-len(keys) // max(1, self.max_workers)))
        queue_deadline = time.monotonic() + self.timeout * waves
        results: Dict[LookupKey, VersionLookup] = {}
        for key in keys:
            results[key] = self._await(key, queue_deadline)
        return results

    def _submit(self, key: LookupKey) -> None:
        with self._lock:
            if key in self._results or key in self._pending:
                return
            if self._closed:
                raise RuntimeError("VersionQueryService is closed")
            coordinate, current = key
            call = TimedCall(self.source.available_versions, coordinate, current)
            future = self._executor.submit(call)
            self._pending[key] = (future, call)

    def _await(self, key: LookupKey, queue_deadline: float) -> VersionLookup:
        with self._lock:
            cached = self._results.get(key)
            pending = self._pending.get(key)
        if cached is not None:
            return cached
        if pending is None:  # pragma: no cover - _submit always registers the key first
            raise KeyError(key)

        coordinate, current = key
        future, call = pending
        try:
            versions = await_call(future, call, self.timeout, queue_deadline=queue_deadline)
        except UnitTimeoutError as exc:
            logger.warning("Version query for %s timed out after %.1fs", coordinate, self.timeout)
            lookup = VersionLookup(coordinate, current, status=STATUS_TIMED_OUT, detail=str(exc))
        except concurrent.futures.CancelledError:
            lookup = VersionLookup(coordinate, current, status=STATUS_FAILED, detail="query cancelled")
        except Exception as exc:
            logger.warning("Version query for %s failed: %s", coordinate, exc)
            lookup = VersionLookup(coordinate, current, status=STATUS_FAILED, detail=str(exc))
        else:
            candidates = list(versions or [])
            lookup = VersionLookup(
                coordinate,
                current,
                latest_stable=select_latest_stable(candidates),
                latest=select_latest(candidates),
            )

        with self._lock:
            existing = self._results.setdefault(key, lookup)
            self._pending.pop(key, None)
        return existing


__all__ = [
    "MavenMetadataSource",
    "RemoteVersionSource",
    "STATUS_FAILED",
    "STATUS_OK",
    "STATUS_TIMED_OUT",
    "VersionLookup",
    "VersionQueryService",
    "compare_versions",
    "is_prerelease",
    "select_latest",
    "select_latest_stable",
    "version_key",
]
