from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any

from packaging.version import Version

MODERN_MANIFEST = "angular.json"
LEGACY_MANIFEST = ".angular-cli.json"
PACKAGE_JSON = "package.json"

MODERN_MIN_VERSION = Version("6.0.0")

_VERSION_RUN_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class ProjectKind(str, Enum):
    ANGULARJS = "angularjs"
    NG_CLI_LEGACY = "ng-cli-legacy"
    ANGULAR_MODERN = "angular-modern"

    def __str__(self) -> str:
        return self.value


def read_package_json(root: Path) -> dict[str, Any] | None:
    path = root / PACKAGE_JSON
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def coerce_version(spec: Any) -> Version | None:
    """Pull a concrete version out of an npm range such as ``^6.1.0`` or ``~5.2``.

    Parameters
    ----------
    spec:
        Raw dependency value from ``package.json``.

    Returns
    -------
    Version | None
        The first ``major[.minor[.patch]]`` run with missing parts filled with zero, or ``None``
        when the value holds no digits at all.
    """

    if not isinstance(spec, str):
        return None
    match = _VERSION_RUN_RE.search(spec)
    if match is None:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return Version(f"{major}.{minor}.{patch}")


def _merged_dependencies(pkg: dict[str, Any] | None) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    if pkg is None:
        return merged
    for field in ("dependencies", "devDependencies"):
        deps = pkg.get(field)
        if isinstance(deps, dict):
            merged.update(deps)
    return merged


def detect_project_kind(root: Path) -> ProjectKind:
    """Classify the project under ``root`` into one of the three build-tool generations.

    Manifest files on disk win over ``package.json``; an ``@angular/core`` range decides
    between the two CLI generations; a plain ``angular`` dependency marks AngularJS. Anything
    else is treated as a modern project.
    """

    if (root / MODERN_MANIFEST).exists():
        return ProjectKind.ANGULAR_MODERN
    if (root / LEGACY_MANIFEST).exists():
        return ProjectKind.NG_CLI_LEGACY

    deps = _merged_dependencies(read_package_json(root))
    core_version = coerce_version(deps.get("@angular/core"))
    if core_version is not None:
        if core_version >= MODERN_MIN_VERSION:
            return ProjectKind.ANGULAR_MODERN
        return ProjectKind.NG_CLI_LEGACY
    if isinstance(deps.get("angular"), str):
        return ProjectKind.ANGULARJS
    return ProjectKind.ANGULAR_MODERN
