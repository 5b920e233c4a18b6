"""Concurrent execution of applicable checkers across the module tree."""

from __future__ import annotations

import concurrent.futures
import time
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .aggregator import ResultAggregator
from .checkers import CheckerRegistry
from .checkers.applicability import DEFAULT_RULES, ApplicabilityRules
from .config import RunSettings
from .context import AnalysisContext
from .failsafe import build_error_fragment, build_timeout_fragment
from .logging import get_logger, log_exception
from .models import AnalysisResult, Module, UnitState
from .pools import DaemonThreadPool
from .properties import PropertyResolver
from .timeouts import TimedCall, UnitTimeoutError, await_call
from .versions import VersionQueryService

logger = get_logger("scheduler")

SCHEDULER_UNIT = "scheduler"


@dataclass(frozen=True)
class _Unit:
    checker_id: str
    context: AnalysisContext
    call: TimedCall
    future: "concurrent.futures.Future"


class ExecutionScheduler:
    """Runs every applicable (module, checker) unit with an independent timeout.

    Two long-lived pools are created per run: one fans out over modules, the
    other over the checkers of each module. A unit's timeout counts from the
    moment it starts running. Units still queued after their share of the
    checker pool's backlog are abandoned with a timeout fragment.
    """

    def __init__(
        self,
        registry: CheckerRegistry,
        settings: RunSettings,
        *,
        rules: ApplicabilityRules = DEFAULT_RULES,
        resolver: PropertyResolver | None = None,
        versions: VersionQueryService | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.rules = rules
        self.resolver = resolver or PropertyResolver()
        self.versions = versions

    def is_excluded(self, module: Module, root: Module) -> bool:
        if module is root:
            return False
        return any(module.name.startswith(prefix) for prefix in self.settings.exclude_modules)

    def plan(self, root: Module, checker_ids: Sequence[str]) -> List[Tuple[Module, List[str]]]:
        """Return the applicable checker ids per module, root first."""
        rules = self.rules.restrict(checker_ids)
        plan: List[Tuple[Module, List[str]]] = []
        for module in root.iter_tree():
            if self.is_excluded(module, root):
                logger.info("Skipping excluded module %s", module.name)
                continue
            is_root = module is root
            applicable = [checker_id for checker_id in checker_ids if rules.applies(checker_id, module, is_root)]
            plan.append((module, applicable))
        return plan

    def run(
        self,
        root: Module,
        checker_ids: Sequence[str],
        aggregator: ResultAggregator | None = None,
    ) -> ResultAggregator:
        aggregator = aggregator or ResultAggregator()
        plan = self.plan(root, checker_ids)
        total_units = sum(len(ids) for _, ids in plan)
        logger.info("Running %d checker unit(s) over %d module(s)", total_units, len(plan))

        waves = max(1, -(-total_units // max(1, self.settings.checker_workers)))
        queue_budget = self.settings.checker_timeout * waves

        module_pool = DaemonThreadPool(max(1, self.settings.module_workers), thread_name_prefix="modcheck-module")
        checker_pool = DaemonThreadPool(max(1, self.settings.checker_workers), thread_name_prefix="modcheck-checker")
        try:
            futures: Dict[concurrent.futures.Future, Module] = {}
            for module, ids in plan:
                aggregator.register_module(module)
                if not ids:
                    continue
                future = module_pool.submit(
                    self._run_module, module, root, ids, checker_pool, aggregator, queue_budget
                )
                futures[future] = module
            for future in concurrent.futures.as_completed(futures):
                module = futures[future]
                try:
                    future.result()
                except Exception as exc:  # pragma: no cover - defensive guard
                    log_exception(logger, f"Scheduling failed for module {module.name}", exc)
                    aggregator.record(
                        AnalysisResult(module, SCHEDULER_UNIT, build_error_fragment(SCHEDULER_UNIT, exc), UnitState.FAILED)
                    )
        finally:
            module_pool.shutdown(wait=False, cancel_futures=True)
            checker_pool.shutdown(wait=False, cancel_futures=True)

        logger.info("Completed run with %d issue(s)", aggregator.issue_count)
        return aggregator

    def _run_module(
        self,
        module: Module,
        root: Module,
        checker_ids: Sequence[str],
        checker_pool: DaemonThreadPool,
        aggregator: ResultAggregator,
        queue_budget: float,
    ) -> None:
        logger.debug("Checking module %s with %s", module.name, ", ".join(checker_ids))
        units: List[_Unit] = []
        for checker_id in checker_ids:
            context = AnalysisContext(
                module=module,
                root=root,
                settings=self.settings,
                resolver=self.resolver,
                versions=self.versions,
            )
            call = TimedCall(self.registry.run, checker_id, context)
            units.append(_Unit(checker_id, context, call, checker_pool.submit(call)))

        queue_deadline = time.monotonic() + queue_budget
        for unit in units:
            aggregator.record(self._collect(module, unit, queue_deadline))

    def _collect(self, module: Module, unit: _Unit, queue_deadline: float) -> AnalysisResult:
        timeout = self.settings.checker_timeout
        try:
            fragment = await_call(unit.future, unit.call, timeout, queue_deadline=queue_deadline)
        except UnitTimeoutError as exc:
            unit.context.cancel_event.set()
            logger.warning("Checker %s timed out on module %s: %s", unit.checker_id, module.name, exc)
            return AnalysisResult(
                module, unit.checker_id, build_timeout_fragment(unit.checker_id, timeout), UnitState.TIMED_OUT, unit.call.elapsed
            )
        except concurrent.futures.CancelledError as exc:
            unit.context.cancel_event.set()
            logger.warning("Checker %s cancelled on module %s", unit.checker_id, module.name)
            return AnalysisResult(
                module, unit.checker_id, build_error_fragment(unit.checker_id, exc), UnitState.FAILED, unit.call.elapsed
            )
        except Exception as exc:
            log_exception(logger, f"Checker {unit.checker_id} failed on module {module.name}", exc)
            return AnalysisResult(
                module, unit.checker_id, build_error_fragment(unit.checker_id, exc), UnitState.FAILED, unit.call.elapsed
            )
        logger.debug("Checker %s finished on %s in %.2fs", unit.checker_id, module.name, unit.call.elapsed)
        return AnalysisResult(module, unit.checker_id, fragment, UnitState.COMPLETED, unit.call.elapsed)


__all__ = ["ExecutionScheduler"]
