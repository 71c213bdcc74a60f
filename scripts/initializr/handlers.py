"""Command handlers: generate a new project, add starters to a pom.xml.

Both share ``BaseHandler.run``, the single place where failures are reported
to the user before being re-raised to the caller.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from .dependency_selector import ITEM_DEPENDENCY, DependencySelector
from .detection import find_boot_version
from .downloads import download_file, extract_zip
from .errors import OperationCanceledError, UserError
from .metadata import ServiceManager
from .pom_models import Artifact
from .pom_parser import is_bom_import, parse_pom_text
from .pom_patcher import PLATFORM_EOL, BuildDescriptorDocument, update_pom
from .project_models import DefaultProjectData, InputDefaults, ProjectDescriptor, ProjectType
from .prompts import PickItem, Prompter
from .settings import Settings
from .steps import WizardContext, dependency_pick_items, reset_input_defaults, run_steps, specify_service_url

logger = logging.getLogger(__name__)

OPTION_CONTINUE = "Continue"
OPTION_CHOOSE_ANOTHER_FOLDER = "Choose another folder"
LABEL_CHOOSE_FOLDER = "Generate into this folder"
OPTION_PROCEED = "Proceed"
OPTION_CANCEL = "Cancel"

# Directories never searched for pom.xml files.
SKIPPED_DIRS = {"target", "build", "node_modules", ".git", ".mvn", ".idea"}


class BaseHandler:
    """Runs a flow and reports any failure as ``<failure_message> <error>``.

    Attributes:
        failure_message: Prefix of the reported error.
        report_cancellation: Whether a dismissed prompt is reported as a
            failure or ends the flow silently.
    """
    failure_message = "Operation failed."
    report_cancellation = True

    def __init__(self, settings: Settings, prompter: Prompter, service: ServiceManager):
        self.settings = settings
        self.prompter = prompter
        self.service = service

    async def run(self, *args):
        try:
            return await self.run_steps(*args)
        except OperationCanceledError as e:
            if self.report_cancellation:
                self.prompter.show_error(f"{self.failure_message} {e}")
            raise
        except Exception as e:
            self.prompter.show_error(f"{self.failure_message} {e}")
            raise

    async def run_steps(self, *args):
        raise NotImplementedError


class GenerateProjectHandler(BaseHandler):
    """Walks the wizard, then downloads and unpacks the generated project.

    Args:
        project_type: Build system of the generated project.
        defaults: Answers supplied up front.
        input_defaults: Pre-filled text input values to reuse across runs;
            a fresh set seeded from the settings is used when omitted.
        cwd: Folder proposed as the generation target.
        transport: Optional ``httpx`` transport for the archive download.
    """
    failure_message = "Failed to create a project."

    def __init__(
        self,
        project_type: ProjectType,
        settings: Settings,
        prompter: Prompter,
        service: ServiceManager,
        defaults: Optional[DefaultProjectData] = None,
        input_defaults: Optional[InputDefaults] = None,
        cwd: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings, prompter, service)
        self.project_type = project_type
        self.input_defaults = input_defaults
        self.cwd = cwd or Path.cwd()
        self.transport = transport
        self.metadata = ProjectDescriptor(
            defaults=defaults or DefaultProjectData(),
            parent_folder=settings.parent_folder,
        )
        self.output_path: Optional[Path] = None

    async def run_steps(self) -> Path:
        context = WizardContext(
            descriptor=self.metadata,
            settings=self.settings,
            prompter=self.prompter,
            service=self.service,
            input_defaults=self.input_defaults if self.input_defaults is not None else reset_input_defaults(self.settings),
        )
        await run_steps(context)

        self.output_path = await self.specify_target_folder()
        if self.output_path is None:
            raise OperationCanceledError("Target folder not specified.")

        await self.download_and_unzip(self.download_url, self.output_path)
        self.prompter.show_info(f"Generated project at {self.output_path}")
        return self.output_path

    @property
    def download_url(self) -> str:
        """``<service>/starter.zip`` with the collected answers as query parameters."""
        m = self.metadata
        params = [
            ("type", self.project_type.value),
            ("language", m.language or ""),
            ("javaVersion", m.java_version or ""),
            ("groupId", m.group_id or ""),
            ("artifactId", m.artifact_id or ""),
            ("packageName", m.package_name or ""),
            ("name", m.artifact_id or ""),
            ("packaging", m.packaging or ""),
            ("bootVersion", m.boot_version or ""),
            ("dependencies", m.dependencies or ""),
        ]
        parts = urlsplit(m.service_url or "")
        return urlunsplit((parts.scheme, parts.netloc, "/starter.zip", urlencode(params), ""))

    async def _require_input_folder(self) -> Optional[Path]:
        answer = await self.prompter.input_box(LABEL_CHOOSE_FOLDER, default=str(self.cwd), placeholder=LABEL_CHOOSE_FOLDER)
        if not answer:
            return None
        return Path(answer).expanduser()

    async def specify_target_folder(self) -> Optional[Path]:
        """Choose where the project is extracted.

        With ``parent_folder = "artifactId"`` the artifact id is appended and
        an existing folder of that name triggers a warning; otherwise a
        non-empty target folder does. Dismissing the warning cancels.
        """
        use_artifact_id = self.settings.uses_artifact_id_folder
        target = self.metadata.defaults.target_folder
        output = Path(target).expanduser() if target else await self._require_input_folder()
        if output is not None and use_artifact_id:
            output = output / self.metadata.artifact_id

        while output is not None and self._is_occupied(output, use_artifact_id):
            if use_artifact_id:
                message = f"A folder [{output}] already exists in the selected folder."
            else:
                message = f"The folder [{output}] is not empty. Existing files with same names will be overwritten."
            self.prompter.show_warning(message)
            choice = await self.prompter.pick(
                [PickItem(label=OPTION_CONTINUE), PickItem(label=OPTION_CHOOSE_ANOTHER_FOLDER)],
                placeholder=message,
            )
            if choice is None:
                return None
            if choice.label != OPTION_CHOOSE_ANOTHER_FOLDER:
                break
            output = await self._require_input_folder()
            if output is not None and use_artifact_id:
                output = output / self.metadata.artifact_id
        return output

    @staticmethod
    def _is_occupied(path: Path, use_artifact_id: bool) -> bool:
        if use_artifact_id:
            return path.exists()
        return path.is_dir() and any(path.iterdir())

    async def download_and_unzip(self, url: str, target_folder: Path) -> None:
        self.prompter.report_progress("Downloading project package...")
        archive = await download_file(url, timeout=self.settings.timeout, transport=self.transport)
        self.prompter.report_progress("Unzipping project archive...")
        await extract_zip(archive, target_folder)


class AddStartersHandler(BaseHandler):
    """Lets the user pick starters and inserts them into an existing pom.xml."""
    failure_message = "Fail to edit starters."
    report_cancellation = False

    def __init__(self, settings: Settings, prompter: Prompter, service: ServiceManager, eol: str = PLATFORM_EOL):
        super().__init__(settings, prompter, service)
        self.eol = eol
        self.service_url: Optional[str] = None

    async def run_steps(self, pom_path: Path):
        """Returns the applied ``PomEdit``, or ``None`` when nothing was changed."""
        boot_version = find_boot_version(pom_path)
        if not boot_version:
            raise UserError("Not within a valid Spring Boot project.")

        document = BuildDescriptorDocument.load(pom_path)
        module = parse_pom_text(document.text, source=str(pom_path))
        existing = {dep.coordinates for dep in module.dependencies}
        existing_boms = {dep.coordinates for dep in module.dep_management if is_bom_import(dep)}

        self.service_url = await specify_service_url(self.settings, self.prompter)
        if self.service_url is None:
            return None

        self.prompter.report_progress(f"Fetching metadata for {boot_version} ...")
        starters = await self.service.get_starters(self.service_url, boot_version)
        if not starters.dependencies:
            self.prompter.show_error("Unable to retrieve information of available starters.")
            return None

        old_starter_ids = [
            dep_id for dep_id, artifact in starters.dependencies.items()
            if f"{artifact.group_id}:{artifact.artifact_id}" in existing
        ]
        selector = DependencySelector(selected_ids=old_starter_ids)
        selector.initialize(await self.service.get_available_dependencies(self.service_url, boot_version))

        while True:
            picked = await self.prompter.pick(
                dependency_pick_items(selector.list_display_items()),
                placeholder="Select dependencies to add.",
            )
            if picked is None:
                return None
            item = picked.value
            if item.item_type != ITEM_DEPENDENCY:
                break
            if item.id not in old_starter_ids:
                selector.toggle(item.id)

        to_add = [dep_id for dep_id in selector.selected_ids if dep_id not in old_starter_ids]
        if not to_add:
            self.prompter.show_info("No changes.")
            return None

        names = ", ".join(selector.by_id[dep_id].name for dep_id in to_add if dep_id in selector.by_id)
        choice = await self.prompter.pick(
            [PickItem(label=OPTION_PROCEED), PickItem(label=OPTION_CANCEL)],
            placeholder=f"Adding: [{names}]. Proceed?",
        )
        if choice is None or choice.label != OPTION_PROCEED:
            return None

        artifacts = self._artifacts(starters.dependencies, to_add)
        boms = []
        for bom_id in dict.fromkeys(a.bom for a in artifacts if a.bom):
            bom = starters.boms.get(bom_id)
            if bom is None:
                logger.warning("Starter BOM %r is not described by the service, skipping it", bom_id)
            elif f"{bom.group_id}:{bom.artifact_id}" not in existing_boms:
                boms.append(bom)

        edit = update_pom(document, artifacts, boms, indent=self.settings.indent, eol=self.eol)
        self.prompter.show_info("Pom file successfully updated.")
        return edit

    @staticmethod
    def _artifacts(dependencies: dict, ids: list) -> list:
        artifacts = []
        for dep_id in ids:
            artifact: Optional[Artifact] = dependencies.get(dep_id)
            if artifact is None:
                logger.warning("Starter %r has no Maven coordinates for this boot version, skipping it", dep_id)
                continue
            artifacts.append(artifact)
        return artifacts


async def find_target_pom(root: Path, prompter: Prompter) -> Optional[Path]:
    """Find the pom.xml to patch under ``root``, asking when there are several.

    Returns:
        The chosen file, or ``None`` if none exists or the user dismissed the choice.
    """
    candidates = sorted(
        p for p in root.rglob("pom.xml")
        if not SKIPPED_DIRS.intersection(p.relative_to(root).parts[:-1])
    )
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    picked = await prompter.pick(
        [PickItem(label=str(p.relative_to(root)), value=p, description=root.name) for p in candidates],
        placeholder="Select the target project.",
    )
    return picked.value if picked is not None else None


async def select_project_type(prompter: Prompter) -> Optional[ProjectType]:
    picked = await prompter.pick(
        [PickItem(label=t.label, value=t) for t in ProjectType],
        placeholder="Select project type.",
    )
    return picked.value if picked is not None else None
