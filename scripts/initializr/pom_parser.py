"""Reads the parts of an existing pom.xml the add-starters flow relies on.

Only parent coordinates, properties, ``<dependencies>`` and
``<dependencyManagement>`` are extracted. Elements are matched by local
name, so POMs with or without the Maven namespace read the same.
Nothing here writes XML; insertion is done on the raw text by
``pom_patcher``.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .errors import UserError
from .pom_models import Dependency, MavenModule

_PROPERTY_REF_RE = re.compile(r"^\$\{([^}]+)\}$")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(el, name: str):
    """First direct child of ``el`` whose local name is ``name``."""
    for child in el:
        if isinstance(child.tag, str) and _local_name(child.tag) == name:
            return child
    return None


def _children(el, name: str) -> list:
    return [c for c in el if isinstance(c.tag, str) and _local_name(c.tag) == name]


def _child_text(el, name: str) -> Optional[str]:
    child = _child(el, name)
    if child is None or not child.text or not child.text.strip():
        return None
    return child.text.strip()


def _dependency_list(container) -> list:
    """``<dependency>`` entries under a ``<dependencies>`` element, if any."""
    if container is None:
        return []
    return [
        Dependency(
            group_id=_child_text(dep_el, "groupId") or "",
            artifact_id=_child_text(dep_el, "artifactId") or "",
            version=_child_text(dep_el, "version"),
            scope=_child_text(dep_el, "scope") or "compile",
            dep_type=_child_text(dep_el, "type"),
        )
        for dep_el in _children(container, "dependency")
    ]


def _properties(root) -> dict:
    props_el = _child(root, "properties")
    if props_el is None:
        return {}
    return {
        _local_name(p.tag): p.text.strip()
        for p in props_el
        if isinstance(p.tag, str) and p.text
    }


def parse_pom_text(content: str, source: str = "pom.xml") -> MavenModule:
    """Parse POM content into a MavenModule.

    ``groupId`` and ``version`` fall back to the parent's when the project
    does not declare them.

    Raises:
        UserError: If the content is not well-formed XML.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise UserError(f"Unable to parse {source}: {e}") from e

    parent = _child(root, "parent")
    if parent is None:
        parent_coords = (None, None, None, None)
    else:
        parent_coords = tuple(
            _child_text(parent, name) for name in ("groupId", "artifactId", "version", "relativePath")
        )
    parent_group, parent_artifact, parent_version, relative_path = parent_coords

    dep_mgmt = _child(root, "dependencyManagement")
    return MavenModule(
        group_id=_child_text(root, "groupId") or parent_group or "",
        artifact_id=_child_text(root, "artifactId") or "",
        version=_child_text(root, "version") or parent_version,
        packaging=_child_text(root, "packaging") or "jar",
        parent_artifact_id=parent_artifact,
        parent_group_id=parent_group,
        parent_version=parent_version,
        parent_relative_path=relative_path,
        properties=_properties(root),
        dependencies=_dependency_list(_child(root, "dependencies")),
        dep_management=_dependency_list(_child(dep_mgmt, "dependencies") if dep_mgmt is not None else None),
    )


def parse_pom(pom_path: Path) -> MavenModule:
    return parse_pom_text(pom_path.read_text(encoding="utf-8"), source=str(pom_path))


def resolve_property(value: Optional[str], properties: dict) -> Optional[str]:
    """Follow ``${name}`` references through ``properties``.

    Only values that are a single reference are resolved. ``project.x``
    also looks up ``x``. A reference that cannot be resolved, or that loops
    back on itself, is returned as it was last seen.
    """
    seen = set()
    while value:
        match = _PROPERTY_REF_RE.match(value)
        if not match or value in seen:
            break
        seen.add(value)
        name = match.group(1)
        keys = [name, name[len("project."):]] if name.startswith("project.") else [name]
        resolved = next((properties[k] for k in keys if k in properties), None)
        if resolved is None:
            break
        value = resolved
    return value


def is_bom_import(dep: Dependency) -> bool:
    """A ``<dependencyManagement>`` entry importing a BOM (``pom`` type, ``import`` scope)."""
    return dep.dep_type == "pom" and dep.scope == "import"
