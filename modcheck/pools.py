"""Bounded executor whose workers never hold up interpreter exit."""

from __future__ import annotations

import concurrent.futures
import queue
import threading
from typing import Any, Callable, List, Optional, Tuple

_WorkItem = Tuple["concurrent.futures.Future[Any]", Callable[..., Any], Tuple[Any, ...], dict]


class DaemonThreadPool(concurrent.futures.Executor):
    """Fixed-size pool of daemon worker threads.

    ``ThreadPoolExecutor`` joins its workers at interpreter exit, so one
    checker that ignores cancellation keeps the whole process alive. These
    workers are daemons and are never joined unless ``shutdown(wait=True)``
    is requested; an abandoned call simply dies with the process.
    """

    def __init__(self, max_workers: int, thread_name_prefix: str = "modcheck") -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be greater than 0")
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix
        self._queue: "queue.SimpleQueue[Optional[_WorkItem]]" = queue.SimpleQueue()
        self._idle = threading.Semaphore(0)
        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self._shutdown = False

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> "concurrent.futures.Future[Any]":
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot schedule new futures after shutdown")
            future: "concurrent.futures.Future[Any]" = concurrent.futures.Future()
            self._queue.put((future, fn, args, kwargs))
            self._spawn_if_needed()
            return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        with self._lock:
            if cancel_futures:
                while True:
                    try:
                        item = self._queue.get_nowait()
                    except queue.Empty:
                        break
                    if item is not None:
                        item[0].cancel()
            if not self._shutdown:
                self._shutdown = True
                self._queue.put(None)
            threads = list(self._threads)
        if wait:
            for thread in threads:
                thread.join()

    def _spawn_if_needed(self) -> None:
        if self._idle.acquire(timeout=0):
            return
        if len(self._threads) >= self.max_workers:
            return
        thread = threading.Thread(
            target=self._work,
            name=f"{self.thread_name_prefix}_{len(self._threads)}",
            daemon=True,
        )
        thread.start()
        self._threads.append(thread)

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                # wake the next worker so every thread sees the sentinel
                self._queue.put(None)
                return
            future, fn, args, kwargs = item
            if future.set_running_or_notify_cancel():
                try:
                    result = fn(*args, **kwargs)
                except BaseException as exc:
                    future.set_exception(exc)
                else:
                    future.set_result(result)
            del item, future
            self._idle.release()


__all__ = ["DaemonThreadPool"]
