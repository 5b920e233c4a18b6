"""Configuration loading for modcheck (.modcheck.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .errors import ConfigError
from .logging import get_logger

CONFIG_FILENAME = ".modcheck.yml"

DEFAULT_REPOSITORIES = ("https://repo.maven.apache.org/maven2",)
DEFAULT_IGNORE_SCOPES = ("system", "test", "provided")
DEFAULT_CHECKER_TIMEOUT = 30.0
DEFAULT_CHECKER_WORKERS = 8
DEFAULT_VERSION_TIMEOUT = 30.0
DEFAULT_VERSION_WORKERS = 8
DEFAULT_OUTPUT_DIR = "target/checker-reports"
DEFAULT_REPORT_NAME = "module-check-report"
DEFAULT_YAML_EXCLUDED_PROPERTIES = ("logging.level",)

SUPPORTED_FORMATS = ("html", "markdown", "text")
_FORMAT_ALIASES = {"md": "markdown", "txt": "text"}

logger = get_logger("config")


@dataclass
class CheckerConfig:
    """Checker selection and module exclusions."""

    enabled: List[str] = field(default_factory=list)
    exclude_modules: List[str] = field(default_factory=list)


@dataclass
class SchedulerConfig:
    """Worker pool sizes and per-checker timeout."""

    checker_timeout: Optional[float] = None
    module_workers: Optional[int] = None
    checker_workers: Optional[int] = None


@dataclass
class VersionConfig:
    """Remote version lookup settings."""

    repositories: List[str] = field(default_factory=list)
    timeout: Optional[float] = None
    max_workers: Optional[int] = None
    ignore_scopes: List[str] = field(default_factory=list)
    ignore_groups: Optional[str] = None
    show_all: bool = False


@dataclass
class YamlSchemaConfig:
    """JSON schema used to validate application.yml files."""

    schema_path: Optional[str] = None
    exclude_properties: List[str] = field(default_factory=list)


@dataclass
class ReportConfig:
    """Report output settings."""

    formats: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None
    file_name: Optional[str] = None
    fail_on_issue: bool = False
    verbose: bool = False


@dataclass
class ModcheckConfig:
    """Represents the settings defined in .modcheck.yml."""

    root: Path
    checkers: CheckerConfig = field(default_factory=CheckerConfig)
    properties_to_check: List[str] = field(default_factory=list)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    versions: VersionConfig = field(default_factory=VersionConfig)
    yaml_schema: YamlSchemaConfig = field(default_factory=YamlSchemaConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


@dataclass(frozen=True)
class RunSettings:
    """Effective, immutable settings for one orchestration run."""

    root: Path
    checkers: Optional[Tuple[str, ...]]
    exclude_modules: Tuple[str, ...]
    properties_to_check: Tuple[str, ...]
    checker_timeout: float
    module_workers: int
    checker_workers: int
    repositories: Tuple[str, ...]
    version_timeout: float
    version_workers: int
    ignore_scopes: Tuple[str, ...]
    ignore_groups: Optional[str]
    formats: Tuple[str, ...]
    output_dir: Path
    file_name: str
    fail_on_issue: bool
    verbose: bool
    show_all_versions: bool = False
    yaml_schema: Optional[Path] = None
    yaml_excluded_properties: Tuple[str, ...] = DEFAULT_YAML_EXCLUDED_PROPERTIES


def load_config(config_path: Path) -> ModcheckConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ModcheckConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    checkers = CheckerConfig()
    checker_data = _as_dict(data.get("checkers"))
    if checker_data:
        checkers.enabled = _as_str_list(checker_data.get("enabled"))
        checkers.exclude_modules = _as_str_list(checker_data.get("exclude_modules"))

    scheduler = SchedulerConfig()
    scheduler_data = _as_dict(data.get("scheduler"))
    if scheduler_data:
        scheduler.checker_timeout = _as_float(scheduler_data.get("checker_timeout"))
        scheduler.module_workers = _as_int(scheduler_data.get("module_workers"))
        scheduler.checker_workers = _as_int(scheduler_data.get("checker_workers"))

    versions = VersionConfig()
    versions_data = _as_dict(data.get("versions"))
    if versions_data:
        versions.repositories = _as_str_list(versions_data.get("repositories"))
        versions.timeout = _as_float(versions_data.get("timeout"))
        versions.max_workers = _as_int(versions_data.get("max_workers"))
        versions.ignore_scopes = _as_str_list(versions_data.get("ignore_scopes"))
        versions.ignore_groups = _as_str(versions_data.get("ignore_groups"))
        versions.show_all = _as_bool(versions_data.get("show_all")) or False

    yaml_schema = YamlSchemaConfig()
    yaml_data = _as_dict(data.get("yaml_schema"))
    if yaml_data:
        yaml_schema.schema_path = _as_str(yaml_data.get("schema_path"))
        yaml_schema.exclude_properties = _as_str_list(yaml_data.get("exclude_properties"))

    report = ReportConfig()
    report_data = _as_dict(data.get("report"))
    if report_data:
        report.formats = _as_str_list(report_data.get("formats"))
        report.output_dir = _as_str(report_data.get("output_dir"))
        report.file_name = _as_str(report_data.get("file_name"))
        report.fail_on_issue = _as_bool(report_data.get("fail_on_issue")) or False
        report.verbose = _as_bool(report_data.get("verbose")) or False

    return ModcheckConfig(
        root=root,
        checkers=checkers,
        properties_to_check=_as_str_list(data.get("properties_to_check")),
        scheduler=scheduler,
        versions=versions,
        yaml_schema=yaml_schema,
        report=report,
    )


def build_run_settings(
    config: ModcheckConfig,
    *,
    checkers: Sequence[str] | None = None,
    properties: Sequence[str] | None = None,
    formats: Sequence[str] | None = None,
    output_dir: Path | str | None = None,
    timeout: float | None = None,
    fail_on_issue: bool | None = None,
    verbose: bool | None = None,
) -> RunSettings:
    """Fold caller overrides over the file config into one frozen value."""
    requested = _split_csv(checkers) if checkers else _split_csv(config.checkers.enabled)
    selected = tuple(dict.fromkeys(requested)) or None

    props = _split_csv(properties) if properties else _split_csv(config.properties_to_check)
    if not props:
        logger.warning("No properties to check specified; propertyPresence has nothing to verify")

    checker_timeout = timeout if timeout is not None else config.scheduler.checker_timeout
    if checker_timeout is None:
        checker_timeout = DEFAULT_CHECKER_TIMEOUT
    if checker_timeout <= 0:
        raise ConfigError("checker_timeout must be > 0")

    version_timeout = config.versions.timeout
    if version_timeout is None:
        version_timeout = DEFAULT_VERSION_TIMEOUT
    if version_timeout <= 0:
        raise ConfigError("versions.timeout must be > 0")

    out_dir = Path(output_dir) if output_dir else Path(config.report.output_dir or DEFAULT_OUTPUT_DIR)
    if not out_dir.is_absolute():
        out_dir = config.root / out_dir

    schema_path = None
    if config.yaml_schema.schema_path:
        schema_path = Path(config.yaml_schema.schema_path).expanduser()
        if not schema_path.is_absolute():
            schema_path = config.root / schema_path

    return RunSettings(
        root=config.root,
        checkers=selected,
        exclude_modules=tuple(config.checkers.exclude_modules),
        properties_to_check=tuple(dict.fromkeys(props)),
        checker_timeout=float(checker_timeout),
        module_workers=_positive(config.scheduler.module_workers, os.cpu_count() or 4),
        checker_workers=_positive(config.scheduler.checker_workers, DEFAULT_CHECKER_WORKERS),
        repositories=tuple(config.versions.repositories) or DEFAULT_REPOSITORIES,
        version_timeout=float(version_timeout),
        version_workers=_positive(config.versions.max_workers, DEFAULT_VERSION_WORKERS),
        ignore_scopes=tuple(config.versions.ignore_scopes) or DEFAULT_IGNORE_SCOPES,
        ignore_groups=config.versions.ignore_groups,
        formats=normalise_formats(formats or config.report.formats),
        output_dir=out_dir,
        file_name=config.report.file_name or DEFAULT_REPORT_NAME,
        fail_on_issue=config.report.fail_on_issue if fail_on_issue is None else fail_on_issue,
        verbose=config.report.verbose if verbose is None else verbose,
        show_all_versions=config.versions.show_all,
        yaml_schema=schema_path,
        yaml_excluded_properties=tuple(config.yaml_schema.exclude_properties) or DEFAULT_YAML_EXCLUDED_PROPERTIES,
    )


def normalise_formats(formats: Sequence[str] | None) -> Tuple[str, ...]:
    """Return supported output formats, falling back to html."""
    if not formats:
        return ("html",)
    valid: List[str] = []
    for raw in _split_csv(formats):
        name = _FORMAT_ALIASES.get(raw.lower(), raw.lower())
        if name not in SUPPORTED_FORMATS:
            logger.warning("Ignoring unsupported report format '%s'", raw)
            continue
        if name not in valid:
            valid.append(name)
    if not valid:
        logger.warning("No valid formats specified. Using default: html")
        return ("html",)
    return tuple(valid)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _split_csv(values: Sequence[str] | None) -> List[str]:
    if isinstance(values, str):
        values = [values]
    result: List[str] = []
    for value in values or []:
        for part in str(value).split(","):
            cleaned = part.strip()
            if cleaned:
                result.append(cleaned)
    return result


def _positive(value: Optional[int], default: int) -> int:
    if value is None or value <= 0:
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CheckerConfig",
    "ModcheckConfig",
    "ReportConfig",
    "RunSettings",
    "SchedulerConfig",
    "VersionConfig",
    "YamlSchemaConfig",
    "build_run_settings",
    "load_config",
    "normalise_formats",
]
