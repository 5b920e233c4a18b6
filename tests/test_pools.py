"""Tests for modcheck.pools."""

from __future__ import annotations

import os
import subprocess
import sys
import textwrap
import threading
import time
from pathlib import Path

import pytest

from modcheck.pools import DaemonThreadPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_pool_returns_results_and_exceptions() -> None:
    pool = DaemonThreadPool(2, thread_name_prefix="test-pool")
    try:
        ok = pool.submit(lambda value: value * 2, 21)
        boom = pool.submit(lambda: {}["missing"])

        assert ok.result(timeout=5) == 42
        with pytest.raises(KeyError):
            boom.result(timeout=5)
    finally:
        pool.shutdown(wait=True)


def test_pool_workers_are_daemons_and_bounded() -> None:
    pool = DaemonThreadPool(2, thread_name_prefix="test-pool")
    release = threading.Event()
    try:
        futures = [pool.submit(release.wait, 5) for _ in range(4)]
        workers = [thread for thread in threading.enumerate() if thread.name.startswith("test-pool_")]

        assert len(workers) == 2
        assert all(thread.daemon for thread in workers)
        release.set()
        assert all(future.result(timeout=5) for future in futures)
    finally:
        release.set()
        pool.shutdown(wait=True)


def test_shutdown_cancels_queued_work() -> None:
    pool = DaemonThreadPool(1)
    started = threading.Event()
    release = threading.Event()

    def _block() -> bool:
        started.set()
        return release.wait(5)

    running = pool.submit(_block)
    assert started.wait(5)
    queued = pool.submit(lambda: "never")

    pool.shutdown(wait=False, cancel_futures=True)
    release.set()

    assert queued.cancelled()
    assert running.result(timeout=5) is True
    with pytest.raises(RuntimeError):
        pool.submit(lambda: None)


def test_hung_checker_does_not_delay_process_exit() -> None:
    script = textwrap.dedent(
        """
        import threading
        from pathlib import Path

        from modcheck.checkers import CheckerRegistry
        from modcheck.checkers.base import Checker
        from modcheck.config import ModcheckConfig, build_run_settings
        from modcheck.models import Module
        from modcheck.report import Fragment
        from modcheck.scheduler import ExecutionScheduler


        class StuckChecker(Checker):
            id = "stuck"

            def generate_report(self, context):
                threading.Event().wait(60)
                return Fragment()


        root = Module(name="shop", path=Path("."))
        settings = build_run_settings(ModcheckConfig(root=Path(".")), timeout=0.3, properties=["java.version"])
        aggregator = ExecutionScheduler(CheckerRegistry({"stuck": StuckChecker}), settings).run(root, ["stuck"])
        print(aggregator.issue_count)
        """
    )
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))

    started = time.monotonic()
    completed = subprocess.run(
        [sys.executable, "-c", script], capture_output=True, text=True, env=env, timeout=30
    )
    elapsed = time.monotonic() - started

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.strip() == "1"
    assert elapsed < 10
