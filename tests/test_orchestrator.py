"""Tests for modcheck.orchestrator."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from modcheck.errors import ConfigError, ReportWriteError, WorkspaceError
from modcheck.models import UnitState
from modcheck.orchestrator import Orchestrator
from tests._fixtures.version_source import StaticVersionSource
from tests._fixtures.workspace_builder import WorkspaceBuilder

PARENT = ("com.example", "shop", "1.0.0")
FIXED_CLOCK = datetime(2024, 5, 1, 12, 30, 0)


def _orchestrator(source: StaticVersionSource | None = None) -> Orchestrator:
    source = source or StaticVersionSource()
    return Orchestrator(version_source_factory=lambda settings: source, clock=lambda: FIXED_CLOCK)


def _seed_workspace(workspace_builder: WorkspaceBuilder) -> Path:
    workspace_builder.pom(
        artifact_id="shop",
        modules=["shop-impl", "shop-local"],
        properties={"java.version": "17", "slf4j.version": "2.0.9"},
        managed=[("org.slf4j", "slf4j-api", "${slf4j.version}")],
    )
    workspace_builder.pom(
        "shop-impl",
        artifact_id="shop-impl",
        parent=PARENT,
        dependencies=[("org.slf4j", "slf4j-api", "1.7.36"), ("com.example", "widgets", "1.2.0")],
    )
    workspace_builder.pom("shop-local", artifact_id="shop-local", parent=PARENT)
    return workspace_builder.path()


def test_run_reports_missing_api_module_once(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)
    output_dir = tmp_path / "reports"

    outcome = _orchestrator().run(
        root, checkers=["expectedModules"], formats=["markdown"], output_dir=output_dir
    )

    report = output_dir / "module-check-report-20240501-123000.md"
    assert outcome.report_paths == {"markdown": report}
    content = report.read_text(encoding="utf-8")
    assert content.count("shop-api") == 1
    assert "Expected modules missing" in content
    assert outcome.issue_count == 1
    assert outcome.failed is False


def test_run_writes_one_report_per_format(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)
    output_dir = tmp_path / "reports"

    outcome = _orchestrator().run(
        root, checkers=["urls"], formats=["html", "text", "md"], output_dir=output_dir
    )

    assert sorted(outcome.report_paths) == ["html", "markdown", "text"]
    assert outcome.report_paths["html"].suffix == ".html"
    assert outcome.report_paths["text"].suffix == ".txt"
    for path in outcome.report_paths.values():
        assert path.exists()
        assert "Module Verification Report" in path.read_text(encoding="utf-8")
    assert outcome.issue_count == 0


def test_run_with_all_checkers_collects_results(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)
    source = StaticVersionSource({"com.example:widgets": ["1.2.0", "1.4.1"], "org.slf4j:slf4j-api": ["2.0.9"]})

    outcome = _orchestrator(source).run(
        root,
        properties=["java.version"],
        formats=["markdown"],
        output_dir=tmp_path / "reports",
        fail_on_issue=True,
    )

    assert outcome.failed is True
    assert all(result.state is UnitState.COMPLETED for result in outcome.results)
    ran = {(result.module.name, result.checker_id) for result in outcome.results}
    assert ("shop", "expectedModules") in ran
    assert ("shop-impl", "expectedModules") not in ran
    assert ("shop-impl", "interfaceConformity") not in ran
    content = outcome.report_paths["markdown"].read_text(encoding="utf-8")
    assert "| com.example | widgets | 1.2.0 | 1.4.1 |" in content
    assert "| org.slf4j:slf4j-api | shop | 2.0.9 | 1.7.36 |" in content


def test_run_reports_unknown_checker_ids(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)

    outcome = _orchestrator().run(
        root, checkers=["urls", "bogus"], formats=["markdown"], output_dir=tmp_path / "reports"
    )

    assert outcome.warnings == ["Unknown checker id 'bogus' ignored"]
    content = outcome.report_paths["markdown"].read_text(encoding="utf-8")
    assert "Unknown checker id 'bogus' ignored" in content


def test_run_reads_project_config(workspace_builder: WorkspaceBuilder) -> None:
    root = _seed_workspace(workspace_builder)
    workspace_builder.write(
        {
            ".modcheck.yml": """
            checkers:
              enabled: [urls]
            report:
              formats: [text]
              output_dir: out
              file_name: audit
            """,
        }
    )

    outcome = _orchestrator().run(root)

    assert outcome.report_paths == {"text": root.resolve() / "out" / "audit-20240501-123000.txt"}
    assert {result.checker_id for result in outcome.results} == {"urls"}


def test_run_raises_for_missing_workspace(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError):
        _orchestrator().run(tmp_path, output_dir=tmp_path / "reports")


def test_run_rejects_invalid_timeout(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)

    with pytest.raises(ConfigError):
        _orchestrator().run(root, timeout=0, output_dir=tmp_path / "reports")


def test_run_raises_when_output_dir_is_a_file(workspace_builder: WorkspaceBuilder, tmp_path: Path) -> None:
    root = _seed_workspace(workspace_builder)
    blocker = tmp_path / "reports"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ReportWriteError):
        _orchestrator().run(root, checkers=["urls"], output_dir=blocker)
