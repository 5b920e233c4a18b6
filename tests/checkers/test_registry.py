"""Tests for the checker registry and applicability rules."""

from __future__ import annotations

from pathlib import Path

import pytest

from modcheck.checkers import CheckerRegistry, default_registry
from modcheck.checkers.applicability import DEFAULT_RULES, ApplicabilityRules
from modcheck.checkers.base import Checker
from modcheck.context import AnalysisContext
from modcheck.models import Module
from modcheck.report import Fragment

ALL_IDS = [
    "expectedModules",
    "parentVersion",
    "propertyPresence",
    "urls",
    "hardcodedVersion",
    "outdatedDependencies",
    "commentedTags",
    "redundantProperties",
    "unusedDependencies",
    "dependenciesRedefinition",
    "interfaceConformity",
    "propertyRedefinition",
    "yamlSchemaValidator",
]


class _EchoChecker(Checker):
    id = "echo"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        return Fragment().paragraph(context.module.name)


def test_default_registry_lists_builtin_checkers() -> None:
    assert default_registry().list_checkers() == ALL_IDS


def test_select_keeps_registry_order_and_reports_unknown_ids() -> None:
    registry = default_registry()

    selected, warnings = registry.select(["urls", "bogus", "expectedModules", "bogus"])

    assert selected == ["expectedModules", "urls"]
    assert warnings == ["Unknown checker id 'bogus' ignored"]


def test_select_without_request_returns_everything() -> None:
    selected, warnings = default_registry().select(None)

    assert selected == ALL_IDS
    assert warnings == []


def test_register_rejects_duplicates_and_mismatched_ids() -> None:
    registry = CheckerRegistry({"echo": _EchoChecker})

    with pytest.raises(ValueError):
        registry.register("echo", _EchoChecker)
    with pytest.raises(ValueError):
        registry.register("other", _EchoChecker)
    with pytest.raises(TypeError):
        registry.register("thing", object)  # type: ignore[arg-type]


def test_get_unknown_checker_raises_key_error() -> None:
    with pytest.raises(KeyError):
        default_registry().get("nope")


def _module(name: str) -> Module:
    return Module(name=name, path=Path("/ws") / name)


def test_default_rules_restrict_root_only_checkers() -> None:
    child = _module("shop-impl")

    assert DEFAULT_RULES.applies("expectedModules", _module("shop"), True)
    assert not DEFAULT_RULES.applies("expectedModules", child, False)
    assert not DEFAULT_RULES.applies("propertyPresence", child, False)
    assert DEFAULT_RULES.applies("urls", child, False)


def test_default_rules_restrict_interface_conformity_to_api_modules() -> None:
    assert DEFAULT_RULES.applies("interfaceConformity", _module("shop-api"), False)
    assert not DEFAULT_RULES.applies("interfaceConformity", _module("shop-impl"), False)
    assert not DEFAULT_RULES.applies("interfaceConformity", _module("shop"), True)


def test_restrict_limits_rules_to_selection() -> None:
    rules = ApplicabilityRules().restrict(["urls"])

    assert rules.applies("urls", _module("shop"), True)
    assert not rules.applies("hardcodedVersion", _module("shop"), True)
    assert rules.restrict(None).applies("hardcodedVersion", _module("shop"), True)
