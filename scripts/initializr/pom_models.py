"""Maven data model classes.

``Dependency`` and ``MavenModule`` describe what was read from an existing
pom.xml; ``Artifact`` and ``Bom`` describe what gets inserted into one.
No imports from other initializr modules.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Dependency:
    """One ``<dependency>`` entry of an existing POM.

    ``version`` is ``None`` when the version comes from a BOM or the parent.
    ``dep_type`` is ``pom`` for BOM imports.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    dep_type: Optional[str] = None

    @property
    def coordinates(self) -> str:
        """``groupId:artifactId`` key used to match starters."""
        return f"{self.group_id}:{self.artifact_id}"


@dataclass
class MavenModule:
    """What the add-starters flow needs to know about one ``pom.xml``.

    ``group_id`` and ``version`` are taken from ``<parent>`` when the project
    omits them. ``dep_management`` holds the entries of
    ``<dependencyManagement><dependencies>``, BOM imports included.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: str = "jar"
    parent_artifact_id: Optional[str] = None
    parent_group_id: Optional[str] = None
    parent_version: Optional[str] = None
    parent_relative_path: Optional[str] = None
    properties: dict = field(default_factory=dict)
    dependencies: list = field(default_factory=list)
    dep_management: list = field(default_factory=list)


@dataclass(frozen=True)
class Artifact:
    """A starter to insert as a ``<dependency>``.

    Attributes:
        group_id: Maven groupId.
        artifact_id: Maven artifactId.
        version: Emitted only when set.
        scope: Emitted only when set and not ``compile``.
        bom: Id of the BOM this starter needs in ``<dependencyManagement>``.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: Optional[str] = None
    bom: Optional[str] = None


@dataclass(frozen=True)
class Bom:
    """A bill of materials to import in ``<dependencyManagement>``.

    Always rendered with ``<type>pom</type>`` and ``<scope>import</scope>``.
    """
    group_id: str
    artifact_id: str
    version: str
