"""Bounded waits on pooled work whose clock starts when the work starts."""

from __future__ import annotations

import concurrent.futures
import threading
import time
from typing import Any, Callable, Optional

from .models import UnitState


class UnitTimeoutError(TimeoutError):
    """Raised by :func:`await_call` when a unit exceeded its time budget."""

    def __init__(self, message: str, *, started: bool) -> None:
        super().__init__(message)
        self.started = started


class TimedCall:
    """Callable submitted to a pool that records its own lifecycle.

    The waiter uses ``started_at`` so that time spent queued behind other
    work is not charged against the unit's timeout.
    """

    def __init__(self, func: Callable[..., Any], *args: Any) -> None:
        self._func = func
        self._args = args
        self._lock = threading.Lock()
        self.state = UnitState.QUEUED
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

    def __call__(self) -> Any:
        with self._lock:
            if self.state is not UnitState.QUEUED:
                return None
            self.state = UnitState.RUNNING
            self.started_at = time.monotonic()
        try:
            result = self._func(*self._args)
        except BaseException:
            self._finish(UnitState.FAILED)
            raise
        self._finish(UnitState.COMPLETED)
        return result

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    def expire(self, *, queued_only: bool = False) -> bool:
        """Mark the unit timed out unless it already finished."""
        allowed = (UnitState.QUEUED,) if queued_only else (UnitState.QUEUED, UnitState.RUNNING)
        with self._lock:
            if self.state in allowed:
                self.state = UnitState.TIMED_OUT
                self.finished_at = time.monotonic()
                return True
            return False

    def _finish(self, state: UnitState) -> None:
        with self._lock:
            if self.state is UnitState.RUNNING:
                self.state = state
                self.finished_at = time.monotonic()


def await_call(
    future: "concurrent.futures.Future[Any]",
    call: TimedCall,
    timeout: float,
    *,
    queue_deadline: Optional[float] = None,
) -> Any:
    """Wait for ``future`` and return its result.

    The unit gets ``timeout`` seconds from the moment it starts running. A
    unit still queued at ``queue_deadline`` (a ``time.monotonic()`` value)
    is abandoned. Exceptions raised by the call propagate unchanged.
    """
    while True:
        now = time.monotonic()
        if call.started_at is None:
            if queue_deadline is not None and now >= queue_deadline:
                future.cancel()
                call.expire(queued_only=True)
                if call.state is UnitState.TIMED_OUT:
                    raise UnitTimeoutError("unit never started before the queue deadline", started=False)
                continue
            wait = timeout if queue_deadline is None else min(timeout, queue_deadline - now)
        else:
            wait = call.started_at + timeout - now
            if wait <= 0:
                future.cancel()
                call.expire()
                if call.state is UnitState.TIMED_OUT:
                    raise UnitTimeoutError(f"unit exceeded {timeout:g}s", started=True)
                wait = 0
        try:
            return future.result(timeout=max(wait, 0))
        except concurrent.futures.TimeoutError:
            continue


__all__ = ["TimedCall", "UnitTimeoutError", "await_call"]
