"""Tests for modcheck.workspace."""

from __future__ import annotations

from pathlib import Path

import pytest

from modcheck.errors import WorkspaceError
from modcheck.models import Coordinate
from modcheck.workspace import WorkspaceLoader
from tests._fixtures.workspace_builder import WorkspaceBuilder


def test_load_builds_tree_with_parent_links(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", modules=["shop-api", "shop-impl"])
    workspace_builder.pom("shop-api", artifact_id="shop-api", group_id=None, version=None, parent=("com.example", "shop", "1.0.0"))
    workspace_builder.pom("shop-impl", artifact_id="shop-impl", parent=("com.example", "shop", "1.0.0"))

    root = workspace_builder.load()

    assert root.name == "shop"
    assert root.is_root
    assert root.packaging == "pom"
    assert [child.name for child in root.children] == ["shop-api", "shop-impl"]
    api = root.children[0]
    assert api.parent is root
    assert api.group_id == "com.example"
    assert api.version == "1.0.0"
    assert api.parent_ref is not None
    assert api.parent_ref.coordinate == Coordinate("com.example", "shop")
    assert [module.name for module in root.iter_tree()] == ["shop", "shop-api", "shop-impl"]


def test_load_parses_properties_dependencies_and_plugins(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        properties={"guava.version": "32.0.0-jre", "java.version": "17"},
        dependencies=[("com.google.guava", "guava", "${guava.version}"), ("junit", "junit", "4.13", "test")],
        managed=[("org.slf4j", "slf4j-api", "2.0.9")],
        plugins=[("", "maven-compiler-plugin", "3.11.0")],
    )

    root = workspace_builder.load()

    assert root.properties == {"guava.version": "32.0.0-jre", "java.version": "17"}
    assert [dep.coordinate.key for dep in root.dependencies] == ["com.google.guava:guava", "junit:junit"]
    assert root.dependencies[1].scope == "test"
    assert root.dependencies[0].effective_scope == "compile"
    assert root.managed_dependencies[0].version == "2.0.9"
    assert root.plugins[0].coordinate == Coordinate("org.apache.maven.plugins", "maven-compiler-plugin")


def test_load_skips_declared_module_without_descriptor(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", modules=["shop-api", "shop-ghost"])
    workspace_builder.pom("shop-api", artifact_id="shop-api", parent=("com.example", "shop", "1.0.0"))

    root = workspace_builder.load()

    assert [child.name for child in root.children] == ["shop-api"]


def test_load_skips_unparsable_child(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", modules=["shop-api"])
    workspace_builder.write({"shop-api/pom.xml": "<project><artifactId>broken"})

    root = workspace_builder.load()

    assert root.children == []


def test_load_raises_when_root_descriptor_missing(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError):
        WorkspaceLoader().load(tmp_path)


def test_load_raises_when_root_descriptor_malformed(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"pom.xml": "<project>"})

    with pytest.raises(WorkspaceError):
        workspace_builder.load()


def test_builtin_properties_expose_model_values(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", version="2.1.0")

    root = workspace_builder.load()

    builtins = root.builtin_properties()
    assert builtins["project.artifactId"] == "shop"
    assert builtins["project.version"] == "2.1.0"
    assert builtins["project.groupId"] == "com.example"
