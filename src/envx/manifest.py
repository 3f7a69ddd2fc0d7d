from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from envx.console import Console
from envx.detect import LEGACY_MANIFEST, MODERN_MANIFEST
from envx.errors import ManifestError, ManifestNotFoundError, ProjectNotFoundError
from envx.paths import BASE_DESCRIPTOR, rel_to_root, to_posix

TargetsKey = Literal["targets", "architect"]

_STAMP_UNSAFE_RE = re.compile(r"[:.]")


@dataclass(frozen=True)
class ProjectInfo:
    project_name: str
    source_root: str
    targets_key: TargetsKey
    document: dict[str, Any]
    manifest_path: Path

    @property
    def project(self) -> dict[str, Any]:
        return self.document["projects"][self.project_name]

    @property
    def targets(self) -> dict[str, Any]:
        targets = self.project.get(self.targets_key)
        return targets if isinstance(targets, dict) else {}

    @property
    def uses_targets(self) -> bool:
        return self.targets_key == "targets"


def read_manifest(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestNotFoundError(f"{path.name} not found") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Failed to read {path.name} (not valid UTF-8): {e}") from e
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ManifestError(f"Failed to parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Unexpected {path.name} shape (expected a JSON object)")
    return data


def write_manifest(path: Path, document: dict[str, Any]) -> None:
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def backup_stamp(now: datetime | None = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    return _STAMP_UNSAFE_RE.sub("-", iso)


def backup_file(path: Path, *, enabled: bool, console: Console, now: datetime | None = None) -> Path | None:
    if not enabled or not path.exists():
        return None
    backup = path.with_name(f"{path.name}.bak.{backup_stamp(now)}")
    shutil.copyfile(path, backup)
    console.info(f"Backup created: {backup.name}")
    return backup


def _detect_targets_key(project: dict[str, Any]) -> TargetsKey:
    if isinstance(project.get("targets"), dict):
        return "targets"
    return "architect"


def _project_source_root(project: dict[str, Any]) -> str:
    source_root = project.get("sourceRoot")
    if isinstance(source_root, str) and source_root.strip():
        return to_posix(source_root.strip()).rstrip("/")
    project_root = project.get("root")
    if isinstance(project_root, str) and project_root.strip():
        return to_posix(project_root.strip()).rstrip("/") + "/src"
    return "src"


def resolve_project_info(root: Path, project: str | None = None) -> ProjectInfo:
    """Load ``angular.json`` and locate the addressed project.

    Parameters
    ----------
    root:
        Working directory holding ``angular.json``.
    project:
        Explicit project name. Defaults to ``defaultProject`` and then to the first declared
        project.

    Raises
    ------
    ManifestNotFoundError
        ``angular.json`` does not exist.
    ManifestError
        The manifest is unparseable or declares no projects.
    ProjectNotFoundError
        The requested project is not declared; the message lists the available names.
    """

    manifest_path = root / MODERN_MANIFEST
    document = read_manifest(manifest_path)
    projects = document.get("projects")
    if not isinstance(projects, dict) or not projects:
        raise ManifestError(f"No projects found in {MODERN_MANIFEST}")

    names = list(projects)
    default_project = document.get("defaultProject")
    project_name = project or (default_project if isinstance(default_project, str) else None) or names[0]
    entry = projects.get(project_name)
    if not isinstance(entry, dict):
        raise ProjectNotFoundError(f'Project "{project_name}" not found. Available: {", ".join(names)}')

    return ProjectInfo(
        project_name=project_name,
        source_root=_project_source_root(entry),
        targets_key=_detect_targets_key(entry),
        document=document,
        manifest_path=manifest_path,
    )


def _child_dict(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key)
    if not isinstance(value, dict):
        value = {}
        parent[key] = value
    return value


def _serve_reference_key(serve: dict[str, Any]) -> str:
    sections: list[Any] = [serve.get("options")]
    configurations = serve.get("configurations")
    if isinstance(configurations, dict):
        sections.extend(configurations.values())
    for section in sections:
        if isinstance(section, dict) and "buildTarget" in section:
            return "buildTarget"
    return "browserTarget"


def upsert_file_replacement(configuration: dict[str, Any], replace: str, with_path: str) -> None:
    raw = configuration.get("fileReplacements")
    replacements: list[Any] = raw if isinstance(raw, list) else []
    entry = {"replace": replace, "with": with_path}
    for idx, existing in enumerate(replacements):
        if isinstance(existing, dict) and existing.get("replace") == replace:
            replacements[idx] = entry
            break
    else:
        replacements.append(entry)
    configuration["fileReplacements"] = replacements


def update_modern_manifest(
    root: Path,
    env_name: str,
    descriptor: Path,
    *,
    project: str | None = None,
    source_root: str | None = None,
    backup: bool = True,
    dry_run: bool = False,
    console: Console,
) -> ProjectInfo:
    """Register ``env_name`` in ``angular.json`` as a build and serve configuration.

    The build configuration gets a ``fileReplacements`` entry swapping the baseline descriptor
    for ``descriptor``; an entry with the same ``replace`` path is updated in place. The serve
    configuration points at ``<project>:build:<env_name>``. Only the shape key the project
    already uses (``targets`` or ``architect``) is written.
    """

    info = resolve_project_info(root, project)
    effective_source_root = source_root or info.source_root
    base_replace = f"{to_posix(effective_source_root).rstrip('/')}/environments/{BASE_DESCRIPTOR}"
    with_replace = rel_to_root(descriptor, root)

    targets = _child_dict(info.project, info.targets_key)
    build = _child_dict(targets, "build")
    serve = _child_dict(targets, "serve")

    build_configurations = _child_dict(build, "configurations")
    upsert_file_replacement(_child_dict(build_configurations, env_name), base_replace, with_replace)

    reference_key = _serve_reference_key(serve)
    serve_configurations = _child_dict(serve, "configurations")
    serve_entry = _child_dict(serve_configurations, env_name)
    for stale in ("browserTarget", "buildTarget"):
        serve_entry.pop(stale, None)
    serve_entry[reference_key] = f"{info.project_name}:build:{env_name}"

    if dry_run:
        console.info(f"[dry-run] {MODERN_MANIFEST} would be updated:")
        console.info(f"  replace: {base_replace}")
        console.info(f"  with:    {with_replace}")
        return info

    backup_file(info.manifest_path, enabled=backup, console=console)
    write_manifest(info.manifest_path, info.document)
    console.ok(f'{MODERN_MANIFEST} updated with configuration "{env_name}"')
    return info


def _legacy_apps(document: dict[str, Any]) -> list[Any]:
    apps = document.get("apps")
    if not apps:
        nested = document.get("project")
        apps = nested.get("apps") if isinstance(nested, dict) else None
    return apps if isinstance(apps, list) else []


def legacy_source_root(root: Path) -> str | None:
    path = root / LEGACY_MANIFEST
    if not path.exists():
        return None
    apps = _legacy_apps(read_manifest(path))
    if not apps or not isinstance(apps[0], dict):
        return None
    app_root = apps[0].get("root")
    if isinstance(app_root, str) and app_root.strip():
        return to_posix(app_root.strip()).rstrip("/")
    return None


def legacy_environment_mapping(root: Path, source_root: str, descriptor: Path) -> str:
    relative = to_posix(os.path.relpath(descriptor, root / source_root))
    if relative.startswith("environments/"):
        return relative
    return f"environments/{descriptor.name}"


def update_legacy_manifest(
    root: Path,
    env_name: str,
    descriptor: Path,
    *,
    source_root: str = "src",
    backup: bool = True,
    dry_run: bool = False,
    console: Console,
) -> str:
    manifest_path = root / LEGACY_MANIFEST
    if not manifest_path.exists():
        raise ManifestNotFoundError(f"{LEGACY_MANIFEST} not found")

    document = read_manifest(manifest_path)
    apps = _legacy_apps(document)
    if not apps or not isinstance(apps[0], dict):
        raise ManifestError(f"No apps found in {LEGACY_MANIFEST}")

    mapping = legacy_environment_mapping(root, source_root, descriptor)
    if dry_run:
        console.info(f"[dry-run] {LEGACY_MANIFEST} would be updated:")
        console.info(f'  environments["{env_name}"] = "{mapping}"')
        return mapping

    app = apps[0]
    _child_dict(app, "environments")[env_name] = mapping
    backup_file(manifest_path, enabled=backup, console=console)
    write_manifest(manifest_path, document)
    console.ok(f'{LEGACY_MANIFEST} updated: environments["{env_name}"] = "{mapping}"')
    return mapping
