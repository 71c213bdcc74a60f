"""Spring Initializr wizard and pom.xml starter patcher."""

from .cli import main
from .dependency_selector import DependencySelector
from .pom_models import Artifact, Bom
from .pom_patcher import build_pom_edit, update_pom
from .project_models import ProjectDescriptor, StepKind
from .steps import run_steps

__all__ = [
    "main", "DependencySelector", "Artifact", "Bom", "build_pom_edit", "update_pom",
    "ProjectDescriptor", "StepKind", "run_steps",
]
