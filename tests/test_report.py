"""Tests for report fragments and failure substitutes."""

from __future__ import annotations

from modcheck.failsafe import build_error_fragment, build_timeout_fragment
from modcheck.report import Fragment, warn_cell


def test_fragment_plain_text_inlines_markers() -> None:
    fragment = Fragment().heading("Title").paragraph("body").info("note")

    assert fragment.plain_text() == "Title\nbody\nℹ️ note"
    assert not fragment.has_issue
    assert fragment.warning("careful").has_issue


def test_flagged_table_cell_is_an_issue() -> None:
    fragment = Fragment().table(["Version"], [[warn_cell("1.0")]])

    assert fragment.has_issue
    assert fragment.plain_text() == "Version\n⚠️ 1.0"


def test_empty_fragment() -> None:
    fragment = Fragment()

    assert fragment.is_empty
    assert not fragment.has_issue
    assert not Fragment().open_section().is_empty


def test_timeout_fragment_names_checker() -> None:
    fragment = build_timeout_fragment("outdatedDependencies", 30)

    assert fragment.has_issue
    assert fragment.plain_text() == "⚠️ ⏱️ Checker timeout: outdatedDependencies (exceeded 30s)"


def test_error_fragment_falls_back_to_exception_type() -> None:
    assert "Checker error in urls: KeyError" in build_error_fragment("urls", KeyError()).plain_text()
    long_reason = build_error_fragment("urls", RuntimeError("x" * 500)).plain_text()
    assert long_reason.endswith("…")
    assert build_error_fragment("urls", RuntimeError("boom")).has_issue
