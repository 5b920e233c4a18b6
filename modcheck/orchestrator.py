"""Run orchestration: config, discovery, scheduling, aggregation and report output."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from .aggregator import REPORT_TITLE, ResultAggregator
from .checkers import CheckerRegistry, default_registry
from .checkers.applicability import DEFAULT_RULES, ApplicabilityRules
from .config import RunSettings, build_run_settings, load_config
from .errors import ReportWriteError
from .logging import get_logger
from .models import AnalysisResult, Module
from .properties import PropertyResolver
from .renderers import create_renderer
from .scheduler import ExecutionScheduler
from .versions import MavenMetadataSource, RemoteVersionSource, VersionQueryService
from .workspace import WorkspaceLoader

VersionSourceFactory = Callable[[RunSettings], RemoteVersionSource]


@dataclass
class AuditOutcome:
    """Result of one orchestration run."""

    root: Module
    issue_count: int
    warnings: List[str] = field(default_factory=list)
    report_paths: Dict[str, Path] = field(default_factory=dict)
    results: List[AnalysisResult] = field(default_factory=list)
    failed: bool = False


def _default_version_source(settings: RunSettings) -> RemoteVersionSource:
    return MavenMetadataSource(settings.repositories, timeout=settings.version_timeout)


class Orchestrator:
    """Coordinates one audit run over a workspace."""

    def __init__(
        self,
        registry: CheckerRegistry | None = None,
        loader: WorkspaceLoader | None = None,
        *,
        rules: ApplicabilityRules = DEFAULT_RULES,
        resolver: PropertyResolver | None = None,
        version_source_factory: VersionSourceFactory = _default_version_source,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.registry = registry or default_registry()
        self.loader = loader or WorkspaceLoader()
        self.rules = rules
        self.resolver = resolver or PropertyResolver()
        self.version_source_factory = version_source_factory
        self.clock = clock
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        *,
        checkers: Sequence[str] | None = None,
        properties: Sequence[str] | None = None,
        formats: Sequence[str] | None = None,
        fail_on_issue: bool | None = None,
        output_dir: str | Path | None = None,
        timeout: float | None = None,
        verbose: bool | None = None,
    ) -> AuditOutcome:
        """Audit the workspace at ``path`` and write one report per format."""
        repo_path = Path(path).expanduser().resolve()
        workspace_dir = repo_path if repo_path.is_dir() else repo_path.parent
        self.logger.info("Starting audit of %s", workspace_dir)

        config = load_config(workspace_dir)
        settings = build_run_settings(
            config,
            checkers=checkers,
            properties=properties,
            formats=formats,
            output_dir=output_dir,
            timeout=timeout,
            fail_on_issue=fail_on_issue,
            verbose=verbose,
        )

        root = self.loader.load(repo_path)
        selected, warnings = self.registry.select(settings.checkers)
        if not selected:
            self.logger.warning("No checker selected; the report will be empty")
        self.logger.debug("Selected checkers: %s", ", ".join(selected))

        source = self.version_source_factory(settings)
        with VersionQueryService(
            source, max_workers=settings.version_workers, timeout=settings.version_timeout
        ) as versions:
            scheduler = ExecutionScheduler(
                self.registry,
                settings,
                rules=self.rules,
                resolver=self.resolver,
                versions=versions,
            )
            aggregator = scheduler.run(root, selected)

        generated_at = self.clock()
        report_paths = self._write_reports(aggregator, root, settings, warnings, generated_at)
        issues = aggregator.issue_count
        failed = settings.fail_on_issue and issues > 0
        if issues:
            self.logger.warning("%d issue(s) detected", issues)
        else:
            self.logger.info("No issues detected")

        return AuditOutcome(
            root=root,
            issue_count=issues,
            warnings=warnings,
            report_paths=report_paths,
            results=aggregator.all_results(),
            failed=failed,
        )

    def _write_reports(
        self,
        aggregator: ResultAggregator,
        root: Module,
        settings: RunSettings,
        warnings: Sequence[str],
        generated_at: datetime,
    ) -> Dict[str, Path]:
        try:
            settings.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReportWriteError(f"Cannot create report directory {settings.output_dir}: {exc}") from exc

        stamp = generated_at.strftime("%Y%m%d-%H%M%S")
        paths: Dict[str, Path] = {}
        for format_name in settings.formats:
            renderer = create_renderer(format_name)
            body = aggregator.build_document(renderer, root, warnings=warnings, generated_at=generated_at)
            document = renderer.wrap_document(REPORT_TITLE, body)
            target = settings.output_dir / f"{settings.file_name}-{stamp}.{renderer.extension}"
            try:
                target.write_text(document, encoding="utf-8")
            except OSError as exc:
                raise ReportWriteError(f"Cannot write report {target}: {exc}") from exc
            self.logger.info("%s report written to %s", format_name, target)
            paths[format_name] = target
        return paths


__all__ = ["AuditOutcome", "Orchestrator"]
