"""Workspace discovery from Maven-style ``pom.xml`` descriptors."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .errors import WorkspaceError
from .logging import get_logger
from .models import Coordinate, Dependency, Module, ParentRef

DESCRIPTOR_NAME = "pom.xml"
_DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"

logger = get_logger("workspace")


class WorkspaceLoader:
    """Builds the read-only module tree rooted at a workspace directory."""

    def __init__(self, descriptor_name: str = DESCRIPTOR_NAME) -> None:
        self.descriptor_name = descriptor_name

    def load(self, path: Path | str) -> Module:
        """Return the root module; raise :class:`WorkspaceError` if it cannot be read."""
        root_dir = Path(path).expanduser().resolve()
        descriptor = root_dir / self.descriptor_name if root_dir.is_dir() else root_dir
        if not descriptor.exists():
            raise WorkspaceError(f"No {self.descriptor_name} found at {descriptor.parent}")
        try:
            root = parse_descriptor(descriptor)
        except (ET.ParseError, OSError) as exc:
            raise WorkspaceError(f"Cannot read workspace descriptor {descriptor}: {exc}") from exc

        seen: Set[Path] = {descriptor.resolve()}
        self._attach_children(root, seen)
        count = sum(1 for _ in root.iter_tree())
        logger.debug("Discovered %d module(s) under %s", count, root.path)
        return root

    def _attach_children(self, module: Module, seen: Set[Path]) -> None:
        for name in module.declared_modules:
            child_descriptor = (module.path / name / self.descriptor_name).resolve()
            if child_descriptor in seen:
                continue
            if not child_descriptor.exists():
                logger.debug("Declared module %s has no descriptor under %s", name, module.path)
                continue
            try:
                child = parse_descriptor(child_descriptor, parent=module)
            except (ET.ParseError, OSError) as exc:
                logger.warning("Skipping module %s: %s", name, exc)
                continue
            seen.add(child_descriptor)
            module.children.append(child)
            self._attach_children(child, seen)


def parse_descriptor(descriptor: Path, parent: Optional[Module] = None) -> Module:
    """Parse one descriptor into a :class:`Module` linked to ``parent``."""
    root = ET.fromstring(descriptor.read_text(encoding="utf-8"))
    ns = _detect_xml_namespace(root)

    parent_ref = _parse_parent_ref(_find(root, ns, "parent"), ns)
    artifact_id = _text(root, ns, "artifactId")
    if not artifact_id:
        artifact_id = descriptor.parent.name
    group_id = _text(root, ns, "groupId")
    version = _text(root, ns, "version")
    if parent_ref is not None:
        group_id = group_id or parent_ref.coordinate.group_id
        version = version or parent_ref.version

    module = Module(
        name=artifact_id,
        path=descriptor.parent,
        group_id=group_id,
        version=version,
        packaging=_text(root, ns, "packaging") or "jar",
        display_name=_text(root, ns, "name"),
        url=_text(root, ns, "url"),
        descriptor=descriptor,
        parent_ref=parent_ref,
        declared_modules=_parse_modules(root, ns),
        properties=_parse_properties(root, ns),
        dependencies=_parse_dependencies(_find(root, ns, "dependencies"), ns),
        managed_dependencies=_parse_dependencies(
            _find(_find(root, ns, "dependencyManagement"), ns, "dependencies"), ns
        ),
        plugins=_parse_plugins(_find(_find(root, ns, "build"), ns, "plugins"), ns),
        parent=parent,
    )
    return module


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def _tag(ns: str | None, name: str) -> str:
    return f"{{{ns}}}{name}" if ns else name


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find(element: Optional[ET.Element], ns: str | None, name: str) -> Optional[ET.Element]:
    if element is None:
        return None
    return element.find(_tag(ns, name))


def _text(element: Optional[ET.Element], ns: str | None, name: str) -> Optional[str]:
    child = _find(element, ns, name)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def _parse_parent_ref(element: Optional[ET.Element], ns: str | None) -> Optional[ParentRef]:
    if element is None:
        return None
    group = _text(element, ns, "groupId")
    artifact = _text(element, ns, "artifactId")
    if not group or not artifact:
        return None
    return ParentRef(
        coordinate=Coordinate(group, artifact),
        version=_text(element, ns, "version"),
        relative_path=_text(element, ns, "relativePath"),
    )


def _parse_modules(root: ET.Element, ns: str | None) -> Tuple[str, ...]:
    modules_el = _find(root, ns, "modules")
    if modules_el is None:
        return ()
    names: List[str] = []
    for entry in modules_el.findall(_tag(ns, "module")):
        if entry.text and entry.text.strip():
            names.append(entry.text.strip())
    return tuple(names)


def _parse_properties(root: ET.Element, ns: str | None) -> Dict[str, str]:
    props_el = _find(root, ns, "properties")
    if props_el is None:
        return {}
    properties: Dict[str, str] = {}
    for entry in props_el:
        if not isinstance(entry.tag, str):
            continue
        properties[_local_name(entry.tag)] = (entry.text or "").strip()
    return properties


def _parse_dependencies(element: Optional[ET.Element], ns: str | None) -> Tuple[Dependency, ...]:
    if element is None:
        return ()
    deps: List[Dependency] = []
    for dep in element.findall(_tag(ns, "dependency")):
        group = _text(dep, ns, "groupId")
        artifact = _text(dep, ns, "artifactId")
        if not group or not artifact:
            continue
        deps.append(
            Dependency(
                coordinate=Coordinate(group, artifact),
                version=_text(dep, ns, "version"),
                scope=_text(dep, ns, "scope"),
                optional=(_text(dep, ns, "optional") or "").lower() == "true",
            )
        )
    return tuple(deps)


def _parse_plugins(element: Optional[ET.Element], ns: str | None) -> Tuple[Dependency, ...]:
    if element is None:
        return ()
    plugins: List[Dependency] = []
    for plugin in element.findall(_tag(ns, "plugin")):
        artifact = _text(plugin, ns, "artifactId")
        if not artifact:
            continue
        group = _text(plugin, ns, "groupId") or _DEFAULT_PLUGIN_GROUP
        plugins.append(Dependency(coordinate=Coordinate(group, artifact), version=_text(plugin, ns, "version")))
    return tuple(plugins)


__all__ = ["DESCRIPTOR_NAME", "WorkspaceLoader", "parse_descriptor"]
