"""Tests for the dependency version checkers."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional, Sequence

from modcheck.checkers.dependencies_redefinition import DependenciesRedefinitionChecker
from modcheck.checkers.hardcoded_version import HardcodedVersionChecker
from modcheck.checkers.outdated_dependencies import OutdatedDependenciesChecker
from modcheck.config import ModcheckConfig, build_run_settings
from modcheck.models import Coordinate
from modcheck.versions import VersionQueryService
from tests._fixtures.version_source import StaticVersionSource
from tests._fixtures.workspace_builder import WorkspaceBuilder, make_context

PARENT = ("com.example", "shop", "1.0.0")


def test_hardcoded_version_reports_literal_dependencies_and_plugins(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        properties={"guava.version": "32.0.0-jre"},
        dependencies=[
            ("com.google.guava", "guava", "${guava.version}"),
            ("org.slf4j", "slf4j-api", "2.0.9"),
            ("junit", "junit", "4.13.2", "test"),
            ("javax.servlet", "servlet-api", "2.5", "provided"),
        ],
        plugins=[("org.apache.maven.plugins", "maven-surefire-plugin", "3.2.5")],
    )
    root = workspace_builder.load()

    fragment = HardcodedVersionChecker().generate_report(make_context(root, root))

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "org.slf4j | slf4j-api | ⚠️ 2.0.9 | compile" in text
    assert "maven-surefire-plugin | ⚠️ 3.2.5" in text
    assert "guava" not in text
    assert "junit" not in text
    assert "servlet-api" not in text


def test_hardcoded_version_is_empty_when_everything_uses_properties(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        properties={"slf4j.version": "2.0.9"},
        dependencies=[("org.slf4j", "slf4j-api", "${slf4j.version}"), ("org.example", "managed", None)],
    )
    root = workspace_builder.load()

    assert HardcodedVersionChecker().generate_report(make_context(root, root)).is_empty


def test_outdated_dependencies_lists_newer_stable_versions(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        dependencies=[
            ("com.example", "widgets", "1.2.0"),
            ("org.slf4j", "slf4j-api", "2.0.9"),
            ("junit", "junit", "4.12", "test"),
            ("com.example", "templated", "${templated.version}"),
        ],
    )
    root = workspace_builder.load()
    source = StaticVersionSource(
        {
            "com.example:widgets": ["1.1.0", "1.2.0", "1.3.0", "2.0.0-SNAPSHOT"],
            "org.slf4j:slf4j-api": ["2.0.9"],
            "junit:junit": ["4.12", "4.13.2"],
        }
    )

    with VersionQueryService(source, timeout=5) as versions:
        fragment = OutdatedDependenciesChecker().generate_report(make_context(root, root, versions=versions))

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "1 outdated dependency found:" in text
    assert "com.example | widgets | 1.2.0 | 1.3.0" in text
    assert sorted(source.queries) == ["com.example:widgets", "org.slf4j:slf4j-api"]


def test_outdated_dependencies_skips_ignored_groups(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        dependencies=[("com.internal.platform", "core", "1.0.0"), ("org.slf4j", "slf4j-api", "2.0.9")],
    )
    root = workspace_builder.load()
    config = ModcheckConfig(root=root.path)
    config.versions.ignore_groups = r"com\.internal\..*"
    settings = build_run_settings(config, properties=["java.version"])
    source = StaticVersionSource({"com.internal.platform:core": ["9.0.0"], "org.slf4j:slf4j-api": ["2.0.9"]})

    with VersionQueryService(source, timeout=5) as versions:
        fragment = OutdatedDependenciesChecker().generate_report(
            make_context(root, root, settings=settings, versions=versions)
        )

    assert fragment.is_empty
    assert source.queries == ["org.slf4j:slf4j-api"]


class _StallingSource(StaticVersionSource):
    """Blocks queries for ``com.example:slow`` until released."""

    def __init__(self, table: Dict[str, Iterable[str]]) -> None:
        super().__init__(table)
        self.release = threading.Event()

    def available_versions(self, coordinate: Coordinate, minimum: Optional[str] = None) -> Sequence[str]:
        if coordinate.key == "com.example:slow":
            self.release.wait(5)
        return super().available_versions(coordinate, minimum)


def test_outdated_dependencies_reports_failed_and_timed_out_lookups(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        dependencies=[
            ("com.example", "slow", "1.0.0"),
            ("com.example", "gone", "1.0.0"),
            ("com.example", "widgets", "1.2.0"),
        ],
    )
    root = workspace_builder.load()
    source = _StallingSource({"com.example:slow": ["1.0.0"], "com.example:widgets": ["1.2.0", "1.3.0"]})

    try:
        with VersionQueryService(source, timeout=0.2) as versions:
            fragment = OutdatedDependenciesChecker().generate_report(make_context(root, root, versions=versions))
    finally:
        source.release.set()

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "com.example | widgets | 1.2.0 | 1.3.0" in text
    assert "2 version lookup(s) failed or timed out:" in text
    assert "com.example | gone | 1.0.0 | failed | No versions found for com.example:gone" in text
    assert "com.example | slow | 1.0.0 | timed out | unit exceeded 0.2s" in text


def test_outdated_dependencies_lists_up_to_date_dependencies_when_show_all(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", dependencies=[("org.slf4j", "slf4j-api", "2.0.9")])
    root = workspace_builder.load()
    config = ModcheckConfig(root=root.path)
    source = StaticVersionSource({"org.slf4j:slf4j-api": ["2.0.9"]})
    checker = OutdatedDependenciesChecker()

    with VersionQueryService(source, timeout=5) as versions:
        quiet = checker.generate_report(make_context(root, root, versions=versions))
        config.versions.show_all = True
        settings = build_run_settings(config, properties=["java.version"])
        verbose = checker.generate_report(make_context(root, root, settings=settings, versions=versions))

    assert quiet.is_empty
    text = verbose.plain_text()
    assert not verbose.has_issue
    assert "1 dependency is up to date:" in text
    assert "org.slf4j | slf4j-api | 2.0.9" in text


def test_dependencies_redefinition_compares_resolved_versions(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        modules=["shop-impl"],
        properties={"slf4j.version": "2.0.9", "guava.version": "32.0.0-jre"},
        managed=[("org.slf4j", "slf4j-api", "${slf4j.version}"), ("com.google.guava", "guava", "${guava.version}")],
    )
    workspace_builder.pom(
        "shop-impl",
        artifact_id="shop-impl",
        parent=PARENT,
        properties={"local.guava": "32.0.0-jre"},
        dependencies=[
            ("org.slf4j", "slf4j-api", "1.7.36"),
            ("com.google.guava", "guava", "${local.guava}"),
            ("org.example", "standalone", "1.0"),
        ],
    )
    root = workspace_builder.load()
    impl = root.children[0]
    checker = DependenciesRedefinitionChecker()

    fragment = checker.generate_report(make_context(impl, root))

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "org.slf4j:slf4j-api | shop | 2.0.9 | 1.7.36" in text
    assert "guava" not in text
    assert "standalone" not in text
    assert checker.generate_report(make_context(root, root)).is_empty
