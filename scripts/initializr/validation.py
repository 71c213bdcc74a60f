"""Identifier rules for the text input steps.

Each function returns an error message, or ``None`` when the value is valid.
"""

import re
from typing import Optional

_GROUP_ID_RE = re.compile(r"^[a-z_][a-z0-9_]*(\.[a-z0-9_]+)*$")
_ARTIFACT_ID_RE = re.compile(r"^[a-z_][a-z0-9_]*(-[a-z_][a-z0-9_]*)*$")
_PACKAGE_NAME_RE = _GROUP_ID_RE


def group_id_validation(value: str) -> Optional[str]:
    return None if _GROUP_ID_RE.match(value) else "Invalid Group Id"


def artifact_id_validation(value: str) -> Optional[str]:
    return None if _ARTIFACT_ID_RE.match(value) else "Invalid Artifact Id"


def package_name_validation(value: str) -> Optional[str]:
    return None if _PACKAGE_NAME_RE.match(value) else "Invalid Package Name"


def recommended_package_name(group_id: Optional[str], artifact_id: Optional[str]) -> str:
    """Derive a package name from the coordinates, dropping invalid characters.

    ``com.example`` + ``my-app`` gives ``com.example.myapp``.
    """
    parts = [p for p in (group_id, artifact_id) if p]
    return re.sub(r"[^a-z0-9_.]", "", ".".join(parts).lower())
