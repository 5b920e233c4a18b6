"""Substitute fragments for checker units that did not complete."""

from __future__ import annotations

from . import symbols
from .report import Fragment


def build_timeout_fragment(checker_id: str, timeout: float) -> Fragment:
    """Fixed fragment recorded when a checker exceeds its time budget."""
    return Fragment().warning(f"{symbols.TIMEOUT}Checker timeout: {checker_id} (exceeded {timeout:g}s)")


def build_error_fragment(checker_id: str, exc: BaseException) -> Fragment:
    """Fragment recorded when a checker raised instead of returning."""
    return Fragment().error(f"Checker error in {checker_id}: {_format_reason(exc)}")


def _format_reason(exc: BaseException) -> str:
    cleaned = " ".join(str(exc).strip().split())
    if not cleaned:
        return type(exc).__name__
    return cleaned[:200] + ("…" if len(cleaned) > 200 else "")


__all__ = ["build_error_fragment", "build_timeout_fragment"]
