"""``application.yml`` files validated against a JSON schema."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml
from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from ..context import AnalysisContext
from ..errors import ConfigError
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

CONFIG_DIRS = (
    "src/main/resources",
    "src/main/resources/config",
    "config",
    "src/test/resources",
    "src/test/resources/config",
)
CONFIG_NAMES = ("application.yml", "application.yaml")

logger = get_logger("checkers.yaml_schema")


class YamlSchemaChecker(Checker):
    id = "yamlSchemaValidator"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        fragment = Fragment()
        files = find_application_files(context.module_path)
        if not files:
            return fragment

        schema_path = context.settings.yaml_schema
        if schema_path is None:
            logger.debug("No YAML schema configured; %d file(s) in %s not validated", len(files), context.module.name)
            return fragment

        schema = load_schema(schema_path)
        validator = validator_for(schema, default=Draft7Validator)(schema)
        excluded = context.settings.yaml_excluded_properties

        for path in files:
            relative = _relative(path, context.module_path)
            try:
                documents = [doc for doc in yaml.safe_load_all(path.read_text(encoding="utf-8")) if doc is not None]
            except (OSError, yaml.YAMLError) as exc:
                logger.error("Cannot read %s: %s", path, exc)
                fragment.error(f"Cannot validate `{relative}`: {exc}")
                continue

            violations: List[List[str]] = []
            undeclared: List[str] = []
            for document in documents:
                errors = sorted(validator.iter_errors(document), key=lambda item: [str(p) for p in item.absolute_path])
                for error in errors:
                    location = ".".join(str(part) for part in error.absolute_path) or "(root)"
                    violations.append([location, error.message, _format_value(error.instance)])
                if isinstance(document, dict):
                    for name in undeclared_properties(document, schema, excluded):
                        if name not in undeclared:
                            undeclared.append(name)

            if violations:
                fragment.heading(f"Schema validation failed for `{relative}`").open_section()
                fragment.warning("The file does not match the validation schema:")
                fragment.table(["Property", "Problem", "Found value"], violations)
                fragment.close_section()
            if undeclared:
                fragment.heading(f"Properties not declared in the schema: `{relative}`").open_section()
                fragment.warning("The following properties are not defined by the schema:")
                fragment.table(["Property"], [[name] for name in undeclared])
                fragment.close_section()
            if not violations and not undeclared:
                logger.debug("%s matches the schema", path)
        return fragment


def find_application_files(module_dir: Path) -> List[Path]:
    found: List[Path] = []
    for relative in CONFIG_DIRS:
        directory = module_dir / relative
        if not directory.is_dir():
            continue
        for name in CONFIG_NAMES:
            candidate = directory / name
            if candidate.is_file():
                found.append(candidate)
    return found


def load_schema(path: Path) -> Dict[str, Any]:
    """Read and check a JSON schema; problems surface as ConfigError."""
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read YAML schema {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"YAML schema {path} is not valid JSON: {exc}") from exc
    if not isinstance(schema, dict):
        raise ConfigError(f"YAML schema {path} must be a JSON object")
    try:
        validator_for(schema, default=Draft7Validator).check_schema(schema)
    except SchemaError as exc:
        raise ConfigError(f"YAML schema {path} is invalid: {exc.message}") from exc
    return schema


def undeclared_properties(data: Dict[Any, Any], schema: Dict[str, Any], excluded: Sequence[str] = ()) -> List[str]:
    """Dotted paths of leaf keys that the schema's ``properties`` tree does not declare."""
    found: List[str] = []
    _collect_undeclared("", data, schema, found)
    return [name for name in found if not any(name.startswith(prefix) for prefix in excluded)]


def _collect_undeclared(prefix: str, data: Dict[Any, Any], schema: Dict[str, Any], found: List[str]) -> None:
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            _collect_undeclared(path, value, schema, found)
        elif not _is_declared(path, schema):
            found.append(path)


def _is_declared(path: str, schema: Dict[str, Any]) -> bool:
    node: Any = schema
    for segment in path.split("."):
        properties = node.get("properties") if isinstance(node, dict) else None
        if not isinstance(properties, dict) or segment not in properties:
            return False
        node = properties[segment]
    return True


def _format_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def _relative(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.name
