"""Wizard step chain.

Each step asks for one value and returns the next step to run:

* on success it stores the value in the descriptor, pushes itself on the
  navigation stack and returns the following step in chain order;
* when the user dismisses the prompt it pops the most recently completed
  step and returns it, so that step is asked again. With nothing to pop, a
  required step raises ``OperationCanceledError`` and an optional one ends
  the chain.

Steps are looked up in ``WizardContext.step_table`` by ``StepKind``.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .dependency_selector import ITEM_DEPENDENCY, ITEM_SEPARATOR, DependencySelector, LastUsedStore
from .errors import OperationCanceledError
from .metadata import MetadataType, ServiceManager
from .project_models import InputDefaults, ProjectDescriptor, StepKind
from .prompts import PickItem, Prompter
from .settings import DEFAULT_SERVICE_URL, Settings
from .validation import (
    artifact_id_validation,
    group_id_validation,
    package_name_validation,
    recommended_package_name,
)

logger = logging.getLogger(__name__)

STEP_ORDER = [
    StepKind.SERVICE_URL,
    StepKind.BOOT_VERSION,
    StepKind.LANGUAGE,
    StepKind.GROUP_ID,
    StepKind.ARTIFACT_ID,
    StepKind.PACKAGE_NAME,
    StepKind.PACKAGING,
    StepKind.JAVA_VERSION,
    StepKind.DEPENDENCIES,
]

# Steps that cannot be skipped, with the message raised when they are dismissed.
REQUIRED_STEPS = {
    StepKind.SERVICE_URL: "Service URL not specified.",
    StepKind.BOOT_VERSION: "BootVersion not specified.",
    StepKind.LANGUAGE: "Language not specified.",
    StepKind.GROUP_ID: "GroupId not specified.",
    StepKind.ARTIFACT_ID: "ArtifactId not specified.",
    StepKind.PACKAGE_NAME: "PackageName not specified.",
    StepKind.PACKAGING: "Packaging not specified.",
}


def reset_input_defaults(settings: Settings) -> InputDefaults:
    """Input defaults for a fresh run, seeded from the settings."""
    return InputDefaults(
        group_id=settings.default_group_id,
        artifact_id=settings.default_artifact_id,
    )


@dataclass
class WizardContext:
    """Everything a step needs: the answers so far and the host services."""
    descriptor: ProjectDescriptor
    settings: Settings
    prompter: Prompter
    service: ServiceManager
    input_defaults: InputDefaults = field(default_factory=InputDefaults)
    step_table: dict = field(default_factory=lambda: dict(STEP_TABLE))


def next_step(kind: StepKind) -> Optional[StepKind]:
    """The step after ``kind`` in chain order, ``None`` after the last one."""
    index = STEP_ORDER.index(kind)
    return STEP_ORDER[index + 1] if index + 1 < len(STEP_ORDER) else None


def _complete(kind: StepKind, context: WizardContext) -> Optional[StepKind]:
    context.descriptor.navigation_stack.append(kind)
    return next_step(kind)


def _go_back(kind: StepKind, context: WizardContext) -> Optional[StepKind]:
    stack = context.descriptor.navigation_stack
    if stack:
        previous = stack.pop()
        logger.debug("%s dismissed, going back to %s", kind.name, previous.name)
        return previous
    if kind in REQUIRED_STEPS:
        raise OperationCanceledError(REQUIRED_STEPS[kind])
    return None


async def specify_service_url(settings: Settings, prompter: Prompter) -> Optional[str]:
    """Resolve the service URL from the settings, asking when there are several.

    Returns:
        The URL, or ``None`` if the user dismissed the choice.
    """
    configured = settings.service_url
    if isinstance(configured, str) and configured:
        return configured
    if isinstance(configured, list) and configured:
        if len(configured) == 1:
            return configured[0]
        picked = await prompter.pick(
            [PickItem(label=url, value=url) for url in configured],
            placeholder="Select the service URL.",
        )
        return picked.value if picked is not None else None
    return DEFAULT_SERVICE_URL


async def _pick_metadata(context: WizardContext, metadata_type: MetadataType, title: str, placeholder: str):
    service_url = context.descriptor.service_url
    items = await context.service.get_items(service_url, metadata_type) if service_url else []
    picked = await context.prompter.pick(
        [PickItem(label=item.name, value=item, description="default" if item.is_default else "") for item in items],
        title=title,
        placeholder=placeholder,
    )
    return picked.value if picked is not None else None


async def _input_value(context: WizardContext, prompt: str, placeholder: str, default: Optional[str], validate) -> Optional[str]:
    value = default or ""
    while True:
        answer = await context.prompter.input_box(prompt, default=value, placeholder=placeholder)
        if answer is None:
            return None
        error = validate(answer)
        if error is None:
            return answer
        context.prompter.show_warning(f"{error}: {answer!r}")
        value = answer


async def service_url_step(context: WizardContext) -> Optional[StepKind]:
    url = await specify_service_url(context.settings, context.prompter)
    if url is None:
        return _go_back(StepKind.SERVICE_URL, context)
    context.descriptor.service_url = url
    return _complete(StepKind.SERVICE_URL, context)


async def boot_version_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = descriptor.defaults.boot_version
    if not value:
        item = await _pick_metadata(
            context, MetadataType.BOOT_VERSION,
            "Spring Initializr: Specify Spring Boot version", "Specify Spring Boot version.",
        )
        if item is None:
            return _go_back(StepKind.BOOT_VERSION, context)
        value = item.id
    descriptor.boot_version = value
    return _complete(StepKind.BOOT_VERSION, context)


async def language_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = descriptor.defaults.language or context.settings.default_language
    if not value:
        item = await _pick_metadata(
            context, MetadataType.LANGUAGE,
            "Spring Initializr: Specify project language", "Specify project language.",
        )
        if item is None:
            return _go_back(StepKind.LANGUAGE, context)
        value = item.id
    descriptor.language = value.lower()
    return _complete(StepKind.LANGUAGE, context)


async def group_id_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = await _input_value(
        context,
        "Input Group Id for your project.",
        "e.g. com.example",
        descriptor.defaults.group_id or context.input_defaults.group_id,
        group_id_validation,
    )
    if value is None:
        return _go_back(StepKind.GROUP_ID, context)
    descriptor.group_id = value
    context.input_defaults.group_id = value
    return _complete(StepKind.GROUP_ID, context)


async def artifact_id_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = await _input_value(
        context,
        "Input Artifact Id for your project.",
        "e.g. demo",
        descriptor.defaults.artifact_id or context.input_defaults.artifact_id,
        artifact_id_validation,
    )
    if value is None:
        return _go_back(StepKind.ARTIFACT_ID, context)
    descriptor.artifact_id = value
    context.input_defaults.artifact_id = value
    return _complete(StepKind.ARTIFACT_ID, context)


async def package_name_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    default = (
        descriptor.defaults.package_name
        or context.input_defaults.package_name
        or recommended_package_name(descriptor.group_id, descriptor.artifact_id)
    )
    value = await _input_value(
        context,
        "Input Package Name for your project.",
        "e.g. com.example.demo",
        default,
        package_name_validation,
    )
    if value is None:
        return _go_back(StepKind.PACKAGE_NAME, context)
    descriptor.package_name = value
    context.input_defaults.package_name = value
    return _complete(StepKind.PACKAGE_NAME, context)


async def packaging_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = descriptor.defaults.packaging or context.settings.default_packaging
    if not value:
        item = await _pick_metadata(
            context, MetadataType.PACKAGING,
            "Spring Initializr: Specify packaging type", "Specify packaging type.",
        )
        if item is None:
            return _go_back(StepKind.PACKAGING, context)
        value = item.id
    descriptor.packaging = value.lower()
    return _complete(StepKind.PACKAGING, context)


async def java_version_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    value = descriptor.defaults.java_version or context.settings.default_java_version
    if not value:
        item = await _pick_metadata(
            context, MetadataType.JAVA_VERSION,
            "Spring Initializr: Specify Java version", "Specify Java version.",
        )
        if item is None:
            return _go_back(StepKind.JAVA_VERSION, context)
        value = item.id
    descriptor.java_version = value
    return _complete(StepKind.JAVA_VERSION, context)


def dependency_pick_items(items: list) -> list:
    """Wrap selector display items for the prompter."""
    return [
        PickItem(
            label=item.label or "",
            value=item,
            description=item.description,
            separator=item.item_type == ITEM_SEPARATOR,
        )
        for item in items
    ]


async def dependencies_step(context: WizardContext) -> Optional[StepKind]:
    descriptor = context.descriptor
    selector = DependencySelector(
        store=LastUsedStore(context.settings.storage_dir),
        selected_ids=descriptor.defaults.dependencies,
    )
    selector.initialize(
        await context.service.get_available_dependencies(descriptor.service_url, descriptor.boot_version)
    )
    while True:
        picked = await context.prompter.pick(
            dependency_pick_items(selector.list_display_items(has_last_selected=True)),
            title="Spring Initializr: Specify dependencies",
            placeholder="Search for dependencies.",
        )
        if picked is None:
            return _go_back(StepKind.DEPENDENCIES, context)
        item = picked.value
        if item.item_type != ITEM_DEPENDENCY:
            break
        selector.toggle(item.id)

    descriptor.dependencies = item.id
    selector.remember(item)
    return _complete(StepKind.DEPENDENCIES, context)


STEP_TABLE = {
    StepKind.SERVICE_URL: service_url_step,
    StepKind.BOOT_VERSION: boot_version_step,
    StepKind.LANGUAGE: language_step,
    StepKind.GROUP_ID: group_id_step,
    StepKind.ARTIFACT_ID: artifact_id_step,
    StepKind.PACKAGE_NAME: package_name_step,
    StepKind.PACKAGING: packaging_step,
    StepKind.JAVA_VERSION: java_version_step,
    StepKind.DEPENDENCIES: dependencies_step,
}


async def execute_step(kind: StepKind, context: WizardContext) -> Optional[StepKind]:
    """Run one step and return the step to run next (``None`` when done)."""
    return await context.step_table[kind](context)


async def run_steps(context: WizardContext, first: StepKind = StepKind.SERVICE_URL) -> ProjectDescriptor:
    """Drive the chain from ``first`` until a step returns ``None``.

    Raises:
        OperationCanceledError: If a required step is dismissed with no step
            to go back to.
    """
    step: Optional[StepKind] = first
    while step is not None:
        logger.debug("Running step %s", step.name)
        step = await execute_step(step, context)
    return context.descriptor
