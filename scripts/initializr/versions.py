"""Spring-style version comparison and version range matching.

The service annotates dependencies with ranges such as
``[3.0.0,3.3.0-M1)`` or a bare lower bound ``3.2.0``. Versions look like
``3.2.1``, ``3.3.0-M2``, ``3.3.0-SNAPSHOT`` or the legacy ``2.7.0.RELEASE``.
"""

import re
from typing import Optional

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:[.-]([A-Za-z0-9-]+))?$")

# Qualifier precedence: milestones < release candidates < snapshots < releases.
_QUALIFIER_ORDER = {"M": 0, "RC": 1, "BUILD-SNAPSHOT": 2, "SNAPSHOT": 2, "RELEASE": 3, "": 3}


def parse_version(text: str) -> tuple:
    """Turn a version string into a sortable tuple.

    Raises:
        ValueError: If ``text`` is not a ``major.minor.patch[-qualifier]`` version.
    """
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise ValueError(f"Invalid version: {text!r}")
    major, minor, patch, qualifier = match.groups()
    qualifier = (qualifier or "").upper()
    q_match = re.match(r"^(M|RC)(\d+)$", qualifier)
    if q_match:
        rank, number = _QUALIFIER_ORDER[q_match.group(1)], int(q_match.group(2))
    else:
        rank, number = _QUALIFIER_ORDER.get(qualifier, 3), 0
    return int(major), int(minor), int(patch), rank, number


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as ``left`` sorts before, equal to or after ``right``."""
    a, b = parse_version(left), parse_version(right)
    return (a > b) - (a < b)


def match_range(version: str, version_range: Optional[str]) -> bool:
    """Check whether ``version`` lies within a Maven-style range.

    A missing range matches everything. A bare version is an inclusive lower
    bound. Bracketed ranges use ``[``/``]`` for inclusive and ``(``/``)`` for
    exclusive bounds, either bound may be empty.
    """
    if not version_range:
        return True
    version_range = version_range.strip()
    if version_range[0] not in "[(":
        return compare_versions(version, version_range) >= 0

    lower_inclusive = version_range[0] == "["
    upper_inclusive = version_range[-1] == "]"
    lower, _, upper = version_range[1:-1].partition(",")
    lower, upper = lower.strip(), upper.strip()
    if lower:
        cmp = compare_versions(version, lower)
        if cmp < 0 or (cmp == 0 and not lower_inclusive):
            return False
    if upper:
        cmp = compare_versions(version, upper)
        if cmp > 0 or (cmp == 0 and not upper_inclusive):
            return False
    return True
