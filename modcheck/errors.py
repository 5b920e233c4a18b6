"""Exception hierarchy shared across modcheck components."""

from __future__ import annotations


class ModcheckError(RuntimeError):
    """Base class for errors raised by modcheck."""


class ConfigError(ModcheckError):
    """Raised when configuration is invalid or cannot be parsed."""


class WorkspaceError(ModcheckError):
    """Raised when the workspace tree cannot be discovered at all."""


class ReportWriteError(ModcheckError):
    """Raised when the report output location cannot be created or written."""


class VersionQueryError(ModcheckError):
    """Raised by remote package sources when a version listing cannot be fetched."""


__all__ = [
    "ConfigError",
    "ModcheckError",
    "ReportWriteError",
    "VersionQueryError",
    "WorkspaceError",
]
