"""Host configuration for the wizard.

Settings are read from the ``[initializr]`` table of a TOML file. Every key
is optional; a missing file yields the defaults.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

from .errors import UserError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "https://start.spring.io"
CONFIG_ENV_VAR = "INITIALIZR_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/spring-initializr/config.toml")
DEFAULT_STORAGE_DIR = Path("~/.local/share/spring-initializr")

# Value of ``parent_folder`` that nests the generated project in a folder
# named after its artifact id.
PARENT_FOLDER_ARTIFACT_ID = "artifactId"


@dataclass
class Settings:
    """Values the host environment contributes to a wizard run.

    Attributes:
        service_url: One service URL, several to pick from, or ``None`` for
            ``https://start.spring.io``.
        default_language: Skips the language prompt when set.
        default_java_version: Skips the Java version prompt when set.
        default_group_id: Initial value of the group id prompt.
        default_artifact_id: Initial value of the artifact id prompt.
        default_packaging: Skips the packaging prompt when set.
        parent_folder: ``"artifactId"`` to generate into ``<target>/<artifactId>``.
        insert_spaces: Indent inserted POM fragments with spaces instead of tabs.
        tab_size: Number of spaces per indentation level.
        storage_dir: Directory holding the last used dependency list.
        timeout: HTTP timeout in seconds.
    """
    service_url: Union[str, list, None] = None
    default_language: Optional[str] = None
    default_java_version: Optional[str] = None
    default_group_id: Optional[str] = None
    default_artifact_id: Optional[str] = None
    default_packaging: Optional[str] = None
    parent_folder: str = ""
    insert_spaces: bool = True
    tab_size: int = 4
    storage_dir: Path = field(default_factory=lambda: DEFAULT_STORAGE_DIR.expanduser())
    timeout: float = 30.0

    @property
    def indent(self) -> str:
        """One indentation unit as configured (tab or ``tab_size`` spaces)."""
        return " " * self.tab_size if self.insert_spaces else "\t"

    @property
    def uses_artifact_id_folder(self) -> bool:
        return self.parent_folder == PARENT_FOLDER_ARTIFACT_ID


def _coerce(name: str, value):
    if name == "storage_dir":
        return Path(str(value)).expanduser()
    if name == "service_url":
        if isinstance(value, (str, list)):
            return value
        raise UserError(f"Invalid setting service_url: expected a string or a list, got {value!r}")
    if name == "insert_spaces":
        if not isinstance(value, bool):
            raise UserError(f"Invalid setting insert_spaces: expected true or false, got {value!r}")
        return value
    if name == "tab_size":
        if not isinstance(value, int) or value < 1:
            raise UserError(f"Invalid setting tab_size: expected a positive integer, got {value!r}")
        return value
    if name == "timeout":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise UserError(f"Invalid setting timeout: expected a positive number of seconds, got {value!r}")
        return float(value)
    return str(value)


def settings_from_mapping(table: dict) -> Settings:
    """Build Settings from an already parsed ``[initializr]`` table.

    Unknown keys are logged and ignored.
    """
    known = {f.name for f in fields(Settings)}
    values = {}
    for key, value in table.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        values[key] = _coerce(key, value)
    return Settings(**values)


def config_path(explicit: Optional[Path] = None) -> Path:
    """Resolve the configuration file location.

    Order: explicit path, ``$INITIALIZR_CONFIG``, then
    ``~/.config/spring-initializr/config.toml``.
    """
    if explicit is not None:
        return explicit
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load Settings from a TOML file, falling back to defaults if it is absent.

    Args:
        path: Explicit configuration file. An explicit path that does not
            exist is an error; the implicit locations are optional.

    Raises:
        UserError: If the file is not valid TOML or holds invalid values.
    """
    resolved = config_path(path)
    if not resolved.exists():
        if path is not None:
            raise UserError(f"Configuration file not found: {resolved}")
        logger.debug("No configuration file at %s, using defaults", resolved)
        return Settings()

    try:
        with open(resolved, "rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise UserError(f"Invalid configuration file {resolved}: {e}") from e

    logger.debug("Loaded configuration from %s", resolved)
    return settings_from_mapping(document.get("initializr", {}))
