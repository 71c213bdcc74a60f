"""Wizard data model.

Pure data structures accumulated while the user answers the wizard.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ProjectType(Enum):
    """Build system of the generated project (the ``type`` query parameter)."""
    MAVEN = "maven-project"
    GRADLE = "gradle-project"
    GRADLE_KOTLIN = "gradle-project-kotlin"

    @property
    def label(self) -> str:
        return {
            ProjectType.MAVEN: "Maven Project",
            ProjectType.GRADLE: "Gradle Project",
            ProjectType.GRADLE_KOTLIN: "Gradle Project - Kotlin DSL",
        }[self]


class StepKind(Enum):
    """Wizard steps in chain order."""
    SERVICE_URL = "serviceUrl"
    BOOT_VERSION = "bootVersion"
    LANGUAGE = "language"
    GROUP_ID = "groupId"
    ARTIFACT_ID = "artifactId"
    PACKAGE_NAME = "packageName"
    PACKAGING = "packaging"
    JAVA_VERSION = "javaVersion"
    DEPENDENCIES = "dependencies"


@dataclass
class DefaultProjectData:
    """Answers supplied up front by the caller; they win over settings.

    Attributes:
        dependencies: Ids selected when the dependencies step opens.
        target_folder: Skips the target folder prompt when set.
    """
    language: Optional[str] = None
    java_version: Optional[str] = None
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    package_name: Optional[str] = None
    packaging: Optional[str] = None
    boot_version: Optional[str] = None
    dependencies: list = field(default_factory=list)
    target_folder: Optional[str] = None


@dataclass
class InputDefaults:
    """Pre-filled values of the text input steps.

    The value a user enters becomes the pre-filled value the next time the
    same step is shown, including in later runs that reuse this object.
    """
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    package_name: Optional[str] = None


@dataclass
class ProjectDescriptor:
    """Answers collected by one wizard run.

    Attributes:
        dependencies: Comma-joined ids of the confirmed dependency selection.
        navigation_stack: Steps completed so far, most recent last. Popping
            it is the only way to go back.
    """
    service_url: Optional[str] = None
    language: Optional[str] = None
    java_version: Optional[str] = None
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    package_name: Optional[str] = None
    packaging: Optional[str] = None
    boot_version: Optional[str] = None
    dependencies: Optional[str] = None
    defaults: DefaultProjectData = field(default_factory=DefaultProjectData)
    parent_folder: str = ""
    navigation_stack: list = field(default_factory=list)
