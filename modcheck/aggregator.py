"""Collects per-unit results and assembles the ordered report document."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, List, Sequence

from . import symbols
from .models import AnalysisResult, Module
from .renderers.base import ReportRenderer

REPORT_TITLE = "Module Verification Report"


class ResultAggregator:
    """Thread-safe sink for :class:`AnalysisResult` values.

    Results arrive in completion order; ordering (root first, then the other
    modules by name) is reconstructed when the document is built.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: Dict[Module, List[AnalysisResult]] = {}
        self._issue_count = 0

    def register_module(self, module: Module) -> None:
        with self._lock:
            self._results.setdefault(module, [])

    def record(self, result: AnalysisResult) -> None:
        has_issue = result.has_issue
        with self._lock:
            self._results.setdefault(result.module, []).append(result)
            if has_issue:
                self._issue_count += 1

    @property
    def issue_count(self) -> int:
        with self._lock:
            return self._issue_count

    def results_for(self, module: Module) -> List[AnalysisResult]:
        with self._lock:
            return list(self._results.get(module, []))

    def all_results(self) -> List[AnalysisResult]:
        with self._lock:
            return [result for results in self._results.values() for result in results]

    def ordered_modules(self, root: Module) -> List[Module]:
        with self._lock:
            modules = list(self._results)
        children = sorted((module for module in modules if module is not root), key=lambda module: module.name)
        return ([root] if root in modules else []) + children

    def build_document(
        self,
        renderer: ReportRenderer,
        root: Module,
        *,
        warnings: Sequence[str] = (),
        generated_at: datetime | None = None,
    ) -> str:
        """Render the full report body with ``renderer``."""
        generated_at = generated_at or datetime.now()
        issues = self.issue_count
        parts: List[str] = [
            renderer.heading(REPORT_TITLE, 1),
            renderer.paragraph(f"Date: {generated_at:%Y-%m-%d %H:%M:%S}"),
            renderer.paragraph(f"Project: {root.display_name or root.name} ({root.group_id or '?'}:{root.name})"),
            renderer.heading("Summary", 2),
        ]
        if issues:
            parts.append(renderer.warning(f"{issues} issue{'s' if issues != 1 else ''} detected"))
        else:
            parts.append(renderer.paragraph(f"{symbols.OK}No issues detected"))

        if warnings:
            parts.append(renderer.heading("Configuration warnings", 2))
            parts.extend(renderer.info(message) for message in warnings)

        for module in self.ordered_modules(root):
            parts.append(renderer.heading(f"Module: {module.name}", 2))
            fragments = [result.fragment for result in self.results_for(module) if not result.is_empty]
            if not fragments:
                parts.append(renderer.paragraph(f"{symbols.OK}No issues detected"))
                continue
            parts.extend(renderer.render_fragment(fragment) for fragment in fragments)
        return "".join(parts)


__all__ = ["REPORT_TITLE", "ResultAggregator"]
