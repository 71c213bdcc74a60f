"""Tests for steps.py — the wizard step chain and back navigation."""

import pytest

from initializr.dependency_selector import LAST_USED_FILENAME
from initializr.errors import OperationCanceledError
from initializr.project_models import DefaultProjectData, InputDefaults, ProjectDescriptor, StepKind
from initializr.settings import Settings
from initializr.steps import (
    STEP_ORDER,
    WizardContext,
    execute_step,
    next_step,
    reset_input_defaults,
    run_steps,
    specify_service_url,
)

from conftest import ACCEPT_DEFAULT, SERVICE_URL, ScriptedPrompter

FULL_RUN = [
    "3.2.1",            # boot version
    "Java",             # language
    "com.example",      # group id
    "demo",             # artifact id
    ACCEPT_DEFAULT,     # package name
    "Jar",              # packaging
    "17",               # java version
    "Spring Web",
    "Selected 1 dependency",
]


def _context(settings, prompter, service, defaults=None, input_defaults=None):
    return WizardContext(
        descriptor=ProjectDescriptor(defaults=defaults or DefaultProjectData()),
        settings=settings,
        prompter=prompter,
        service=service,
        input_defaults=input_defaults if input_defaults is not None else InputDefaults(),
    )


class TestNextStep:
    def test_chain_order(self):
        assert next_step(StepKind.SERVICE_URL) == StepKind.BOOT_VERSION
        assert next_step(StepKind.PACKAGING) == StepKind.JAVA_VERSION
        assert next_step(StepKind.DEPENDENCIES) is None


class TestFullChain:
    @pytest.mark.asyncio
    async def test_collects_every_answer(self, settings, service):
        prompter = ScriptedPrompter(FULL_RUN)
        descriptor = await run_steps(_context(settings, prompter, service))

        assert descriptor.service_url == SERVICE_URL
        assert descriptor.boot_version == "3.2.1"
        assert descriptor.language == "java"
        assert descriptor.group_id == "com.example"
        assert descriptor.artifact_id == "demo"
        assert descriptor.package_name == "com.example.demo"
        assert descriptor.packaging == "jar"
        assert descriptor.java_version == "17"
        assert descriptor.dependencies == "web"
        assert descriptor.navigation_stack == STEP_ORDER
        assert prompter.answers == []

    @pytest.mark.asyncio
    async def test_metadata_default_listed_first(self, settings, service):
        prompter = ScriptedPrompter(FULL_RUN)
        await run_steps(_context(settings, prompter, service))
        boot_items, _ = prompter.picks[0]
        assert [i.label for i in boot_items] == ["3.2.1", "3.3.0 (SNAPSHOT)", "2.7.18"]
        assert boot_items[0].description == "default"

    @pytest.mark.asyncio
    async def test_metadata_fetched_once(self, settings, service, service_stub):
        await run_steps(_context(settings, ScriptedPrompter(FULL_RUN), service))
        assert len([r for r in service_stub.requests if r.url.path == "/"]) == 1

    @pytest.mark.asyncio
    async def test_dependencies_filtered_by_boot_version(self, settings, service):
        prompter = ScriptedPrompter(FULL_RUN)
        await run_steps(_context(settings, prompter, service))
        dep_items, _ = prompter.picks[4]
        labels = [i.label for i in dep_items]
        assert "Config Client" in labels
        assert "Legacy SQL" not in labels

    @pytest.mark.asyncio
    async def test_confirmed_selection_remembered(self, settings, service):
        await run_steps(_context(settings, ScriptedPrompter(FULL_RUN), service))
        stored = settings.storage_dir / LAST_USED_FILENAME
        assert stored.read_text(encoding="utf-8") == "web"


class TestBackNavigation:
    @pytest.mark.asyncio
    async def test_dismiss_returns_to_previous_step(self, settings, service):
        prompter = ScriptedPrompter([
            "3.2.1", "Java", "com.example",
            None,                   # dismiss artifact id -> group id again
            "org.acme",
            "demo", ACCEPT_DEFAULT, "Jar", "17", "Selected 0 dependencies",
        ])
        descriptor = await run_steps(_context(settings, prompter, service))

        prompts = [p for p, _ in prompter.inputs]
        assert prompts[:4] == [
            "Input Group Id for your project.",
            "Input Artifact Id for your project.",
            "Input Group Id for your project.",
            "Input Artifact Id for your project.",
        ]
        # The group id prompt shows the previous answer when revisited.
        assert prompter.inputs[2][1] == "com.example"
        assert descriptor.group_id == "org.acme"
        assert descriptor.package_name == "org.acme.demo"
        assert descriptor.navigation_stack == STEP_ORDER

    @pytest.mark.asyncio
    async def test_back_from_pick_step(self, settings, service):
        prompter = ScriptedPrompter([
            "3.2.1", "Java", "com.example", "demo", ACCEPT_DEFAULT, "Jar",
            None,                   # dismiss java version -> packaging again
            "War", "21", "Selected 0 dependencies",
        ])
        descriptor = await run_steps(_context(settings, prompter, service))
        assert descriptor.packaging == "war"
        assert descriptor.java_version == "21"
        assert descriptor.dependencies == ""
        assert len(descriptor.navigation_stack) == len(STEP_ORDER)

    @pytest.mark.asyncio
    async def test_cancel_when_first_step_dismissed(self, service):
        settings = Settings(service_url=[SERVICE_URL, "https://other.example.test"])
        prompter = ScriptedPrompter([
            SERVICE_URL,
            None,                   # dismiss boot version -> service URL again
            None,                   # dismiss service URL -> nothing to go back to
        ])
        context = _context(settings, prompter, service)
        with pytest.raises(OperationCanceledError, match="Service URL not specified."):
            await run_steps(context)
        assert context.descriptor.navigation_stack == []

    @pytest.mark.asyncio
    async def test_optional_step_with_empty_stack_ends_chain(self, settings, service):
        context = _context(settings, ScriptedPrompter([None]), service)
        context.descriptor.service_url = SERVICE_URL
        descriptor = await run_steps(context, first=StepKind.JAVA_VERSION)
        assert descriptor.java_version is None
        assert descriptor.navigation_stack == []

    @pytest.mark.asyncio
    async def test_required_step_with_empty_stack_cancels(self, settings, service):
        context = _context(settings, ScriptedPrompter([None]), service)
        with pytest.raises(OperationCanceledError, match="GroupId not specified."):
            await execute_step(StepKind.GROUP_ID, context)


class TestValidation:
    @pytest.mark.asyncio
    async def test_invalid_input_prompts_again(self, settings, service):
        prompter = ScriptedPrompter(["Com.Example", "com.example"])
        context = _context(settings, prompter, service)
        assert await execute_step(StepKind.GROUP_ID, context) == StepKind.ARTIFACT_ID
        assert prompter.warnings == ["Invalid Group Id: 'Com.Example'"]
        # The invalid value is offered again for editing.
        assert prompter.inputs[1][1] == "Com.Example"
        assert context.descriptor.group_id == "com.example"

    @pytest.mark.asyncio
    async def test_invalid_artifact_id(self, settings, service):
        prompter = ScriptedPrompter(["demo app", "demo-app"])
        context = _context(settings, prompter, service)
        await execute_step(StepKind.ARTIFACT_ID, context)
        assert prompter.warnings == ["Invalid Artifact Id: 'demo app'"]
        assert context.descriptor.artifact_id == "demo-app"


class TestShortCircuit:
    @pytest.mark.asyncio
    async def test_defaults_skip_prompts_but_still_push(self, service):
        settings = Settings(service_url=SERVICE_URL, default_language="Kotlin", default_packaging="war")
        defaults = DefaultProjectData(boot_version="3.1.0", java_version="21")
        context = _context(settings, ScriptedPrompter(), service, defaults=defaults)
        context.descriptor.service_url = SERVICE_URL

        for kind in [StepKind.BOOT_VERSION, StepKind.LANGUAGE, StepKind.PACKAGING, StepKind.JAVA_VERSION]:
            await execute_step(kind, context)

        d = context.descriptor
        assert (d.boot_version, d.language, d.packaging, d.java_version) == ("3.1.0", "kotlin", "war", "21")
        assert d.navigation_stack == [
            StepKind.BOOT_VERSION, StepKind.LANGUAGE, StepKind.PACKAGING, StepKind.JAVA_VERSION,
        ]

    @pytest.mark.asyncio
    async def test_back_over_short_circuited_step(self, service):
        settings = Settings(service_url=SERVICE_URL, default_packaging="jar")
        prompter = ScriptedPrompter([
            "3.2.1", "Java", "com.example", "demo", ACCEPT_DEFAULT,
            None,                   # dismiss java version -> packaging replays its default
            "17", "Selected 0 dependencies",
        ])
        descriptor = await run_steps(_context(settings, prompter, service))
        assert descriptor.packaging == "jar"
        assert descriptor.java_version == "17"
        assert descriptor.navigation_stack == STEP_ORDER

    @pytest.mark.asyncio
    async def test_explicit_package_name_default(self, settings, service):
        defaults = DefaultProjectData(package_name="com.acme.app")
        prompter = ScriptedPrompter([ACCEPT_DEFAULT])
        context = _context(settings, prompter, service, defaults=defaults)
        await execute_step(StepKind.PACKAGE_NAME, context)
        assert context.descriptor.package_name == "com.acme.app"


class TestDependenciesStep:
    @pytest.mark.asyncio
    async def test_preselected_defaults(self, settings, service):
        defaults = DefaultProjectData(dependencies=["web", "data-jpa"])
        prompter = ScriptedPrompter(["Selected 2 dependencies"])
        context = _context(settings, prompter, service, defaults=defaults)
        context.descriptor.service_url = SERVICE_URL
        context.descriptor.boot_version = "3.2.1"
        await execute_step(StepKind.DEPENDENCIES, context)
        assert context.descriptor.dependencies == "web,data-jpa"

    @pytest.mark.asyncio
    async def test_last_used_entry(self, settings, service):
        settings.storage_dir.mkdir(parents=True)
        (settings.storage_dir / LAST_USED_FILENAME).write_text("webflux,data-jpa", encoding="utf-8")
        prompter = ScriptedPrompter(["Last used"])
        context = _context(settings, prompter, service)
        context.descriptor.service_url = SERVICE_URL
        context.descriptor.boot_version = "3.2.1"
        await execute_step(StepKind.DEPENDENCIES, context)

        items, _ = prompter.picks[0]
        assert items[0].label == "Last used"
        assert items[0].description == "Spring Reactive Web, Spring Data JPA"
        assert context.descriptor.dependencies == "webflux,data-jpa"

    @pytest.mark.asyncio
    async def test_separators_are_not_choices(self, settings, service):
        prompter = ScriptedPrompter(["Selected 0 dependencies"])
        context = _context(settings, prompter, service)
        context.descriptor.service_url = SERVICE_URL
        context.descriptor.boot_version = "3.2.1"
        await execute_step(StepKind.DEPENDENCIES, context)
        items, _ = prompter.picks[0]
        assert [i.label for i in items if i.separator] == ["SQL", "Spring Cloud"]


class TestServiceUrl:
    @pytest.mark.asyncio
    async def test_single_string(self):
        assert await specify_service_url(Settings(service_url="https://a.test"), ScriptedPrompter()) == "https://a.test"

    @pytest.mark.asyncio
    async def test_unset_uses_public_service(self):
        assert await specify_service_url(Settings(), ScriptedPrompter()) == "https://start.spring.io"

    @pytest.mark.asyncio
    async def test_single_element_list(self):
        assert await specify_service_url(Settings(service_url=["https://a.test"]), ScriptedPrompter()) == "https://a.test"

    @pytest.mark.asyncio
    async def test_picks_from_several(self):
        prompter = ScriptedPrompter(["https://b.test"])
        settings = Settings(service_url=["https://a.test", "https://b.test"])
        assert await specify_service_url(settings, prompter) == "https://b.test"


class TestInputDefaults:
    def test_reset_from_settings(self):
        settings = Settings(default_group_id="org.acme", default_artifact_id="app")
        assert reset_input_defaults(settings) == InputDefaults(group_id="org.acme", artifact_id="app")

    @pytest.mark.asyncio
    async def test_reused_across_runs(self, settings, service):
        input_defaults = InputDefaults()
        await run_steps(_context(settings, ScriptedPrompter(FULL_RUN), service, input_defaults=input_defaults))
        assert input_defaults == InputDefaults(group_id="com.example", artifact_id="demo", package_name="com.example.demo")

        prompter = ScriptedPrompter([
            "3.2.1", "Java", ACCEPT_DEFAULT, ACCEPT_DEFAULT, ACCEPT_DEFAULT, "Jar", "17", "Last used",
        ])
        descriptor = await run_steps(_context(settings, prompter, service, input_defaults=input_defaults))
        assert [default for _, default in prompter.inputs] == ["com.example", "demo", "com.example.demo"]
        assert descriptor.dependencies == "web"
