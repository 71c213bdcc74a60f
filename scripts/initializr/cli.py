"""CLI entry point.

Wires settings, the console prompter and the metadata client into the
generate-project and add-starters handlers.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .errors import InitializrError, OperationCanceledError
from .handlers import AddStartersHandler, GenerateProjectHandler, find_target_pom, select_project_type
from .metadata import ServiceManager
from .project_models import DefaultProjectData, ProjectType
from .prompts import ConsolePrompter, Prompter
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)


def _split_ids(value: str) -> list:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="spring-initializr",
        description="Generate Spring Boot projects and add starters to an existing pom.xml",
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="Configuration file (TOML)")
    parser.add_argument("--service-url", default=None, help="Project generator service URL (overrides the configuration)")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Log more (repeat for debug output)")
    commands = parser.add_subparsers(dest="command", required=True)

    new = commands.add_parser("new", help="Generate a project from the service")
    new.add_argument(
        "project_type", nargs="?", choices=[t.value for t in ProjectType], default=None,
        help="Build system of the project (asked when omitted)",
    )
    new.add_argument("--language", default=None)
    new.add_argument("--java-version", default=None)
    new.add_argument("--group-id", default=None)
    new.add_argument("--artifact-id", default=None)
    new.add_argument("--package-name", default=None)
    new.add_argument("--packaging", default=None)
    new.add_argument("--boot-version", default=None)
    new.add_argument("--dependencies", type=_split_ids, default=[], help="Comma-separated dependency ids to preselect")
    new.add_argument("--target-folder", default=None, help="Folder to generate into (asked when omitted)")

    add = commands.add_parser("add-starters", help="Add starters to an existing pom.xml")
    add.add_argument("pom", nargs="?", type=Path, default=None, help="Target pom.xml (searched in the working directory when omitted)")
    return parser.parse_args(argv)


def defaults_from_args(args: argparse.Namespace) -> DefaultProjectData:
    return DefaultProjectData(
        language=args.language,
        java_version=args.java_version,
        group_id=args.group_id,
        artifact_id=args.artifact_id,
        package_name=args.package_name,
        packaging=args.packaging,
        boot_version=args.boot_version,
        dependencies=args.dependencies,
        target_folder=args.target_folder,
    )


async def run_command(args: argparse.Namespace, settings: Settings, prompter: Prompter, service: ServiceManager, cwd: Path):
    """Dispatch a parsed command line to its handler."""
    if args.command == "new":
        project_type = ProjectType(args.project_type) if args.project_type else await select_project_type(prompter)
        if project_type is None:
            return None
        handler = GenerateProjectHandler(
            project_type, settings, prompter, service, defaults=defaults_from_args(args), cwd=cwd,
        )
        return await handler.run()

    target = args.pom or await find_target_pom(cwd, prompter)
    if target is None:
        prompter.show_info("No pom.xml found in the workspace.")
        return None
    return await AddStartersHandler(settings, prompter, service).run(target)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[list] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = parse_args(argv)
    _configure_logging(args.verbose)
    prompter = ConsolePrompter()
    try:
        settings = load_settings(args.config)
    except InitializrError as e:
        prompter.show_error(str(e))
        return 1
    if args.service_url:
        settings.service_url = args.service_url

    service = ServiceManager(timeout=settings.timeout)
    try:
        asyncio.run(run_command(args, settings, prompter, service, Path.cwd()))
    except OperationCanceledError as e:
        logger.debug("Canceled: %s", e)
        return 1
    except InitializrError:
        logger.debug("Command failed", exc_info=True)
        return 1
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130
    return 0
