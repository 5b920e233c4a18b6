"""Tests for the property redefinition and redundancy checkers."""

from __future__ import annotations

from modcheck.checkers.property_redefinition import PropertyRedefinitionChecker
from modcheck.checkers.redundant_properties import RedundantPropertiesChecker
from tests._fixtures.workspace_builder import WorkspaceBuilder, make_context

PARENT = ("com.example", "shop", "1.0.0")


def _three_levels(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        modules=["shop-core"],
        properties={"java.version": "11", "encoding": "UTF-8", "project.version": "1.0.0"},
    )
    workspace_builder.pom(
        "shop-core",
        artifact_id="shop-core",
        parent=PARENT,
        modules=["shop-core-api"],
        properties={"java.version": "17"},
    )
    workspace_builder.pom(
        "shop-core/shop-core-api",
        artifact_id="shop-core-api",
        parent=("com.example", "shop-core", "1.0.0"),
        properties={"java.version": "21", "encoding": "ISO-8859-1", "project.version": "2.0.0"},
    )


def test_property_redefinition_uses_nearest_ancestor(workspace_builder: WorkspaceBuilder) -> None:
    _three_levels(workspace_builder)
    root = workspace_builder.load()
    leaf = root.children[0].children[0]

    fragment = PropertyRedefinitionChecker().generate_report(make_context(leaf, root))

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "java.version | shop-core | 17 | 21" in text
    assert "encoding | shop | UTF-8 | ISO-8859-1" in text
    assert text.index("java.version | shop-core") < text.index("encoding | shop")
    assert "project.version" not in text


def test_property_redefinition_ignores_identical_values_and_root(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", modules=["shop-api"], properties={"java.version": "17"})
    workspace_builder.pom("shop-api", artifact_id="shop-api", parent=PARENT, properties={"java.version": "17"})
    root = workspace_builder.load()
    checker = PropertyRedefinitionChecker()

    assert checker.generate_report(make_context(root.children[0], root)).is_empty
    assert checker.generate_report(make_context(root, root)).is_empty


def test_property_redefinition_notes_circular_values(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(artifact_id="shop", modules=["shop-api"], properties={"loop": "base"})
    workspace_builder.pom("shop-api", artifact_id="shop-api", parent=PARENT, properties={"loop": "${loop}"})
    root = workspace_builder.load()

    text = PropertyRedefinitionChecker().generate_report(make_context(root.children[0], root)).plain_text()

    assert "circular reference suspected) for: loop" in text


def test_redundant_properties_scans_every_descriptor(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.pom(
        artifact_id="shop",
        modules=["shop-api"],
        properties={"slf4j.version": "2.0.9", "unused.flag": "true"},
    )
    workspace_builder.pom(
        "shop-api",
        artifact_id="shop-api",
        parent=PARENT,
        dependencies=[("org.slf4j", "slf4j-api", "${slf4j.version}")],
    )
    root = workspace_builder.load()
    checker = RedundantPropertiesChecker()

    fragment = checker.generate_report(make_context(root, root))

    text = fragment.plain_text()
    assert fragment.has_issue
    assert "Property\nunused.flag" in text
    assert "slf4j.version" not in text
    assert checker.generate_report(make_context(root.children[0], root)).is_empty
