"""Spring Boot detection heuristics.

Inspects parsed Maven data to find the Spring Boot version a project is
built against, which selects the starters offered by the service.
"""

import logging
from pathlib import Path
from typing import Optional

from .pom_models import MavenModule
from .pom_parser import parse_pom, resolve_property

logger = logging.getLogger(__name__)

BOOT_PARENT_ARTIFACT_ID = "spring-boot-starter-parent"
BOOT_BOM_ARTIFACT_ID = "spring-boot-dependencies"


def detect_boot_version(module: MavenModule) -> Optional[str]:
    """Extract the Spring Boot version declared by a single module.

    Detection checks:
        1. Parent POM is ``spring-boot-starter-parent``
        2. ``spring-boot-dependencies`` is imported in ``<dependencyManagement>``

    ``${property}`` references are resolved against the module's properties.

    Returns:
        Version string (e.g. ``"3.4.1"``), or ``None`` if not declared here.
    """
    if module.parent_artifact_id == BOOT_PARENT_ARTIFACT_ID and module.parent_version:
        return resolve_property(module.parent_version, module.properties)
    for dep in module.dep_management:
        if dep.artifact_id == BOOT_BOM_ARTIFACT_ID and dep.version:
            return resolve_property(dep.version, module.properties)
    return None


def find_boot_version(pom_path: Path, _visited: set = None) -> Optional[str]:
    """Find the Spring Boot version of a POM, searching parent POMs on disk.

    Only an explicit ``<parent><relativePath>`` is followed. A relative path
    naming a directory resolves to the ``pom.xml`` inside it. Visited files
    are tracked to stop on circular parent references.

    Args:
        pom_path: Filesystem path to the pom.xml to inspect.
        _visited: Internal set of visited paths (callers should not set this).

    Returns:
        The boot version, or ``None`` if neither the POM nor its parents declare one.
    """
    if _visited is None:
        _visited = set()
    resolved = pom_path.resolve()
    if resolved in _visited:
        return None
    _visited.add(resolved)

    module = parse_pom(pom_path)
    version = detect_boot_version(module)
    if version:
        return version

    if module.parent_relative_path:
        parent_path = pom_path.parent / module.parent_relative_path
        if parent_path.is_dir():
            parent_path = parent_path / "pom.xml"
        if parent_path.is_file():
            logger.debug("Searching parent POM %s for the boot version", parent_path)
            return find_boot_version(parent_path, _visited)
    return None
