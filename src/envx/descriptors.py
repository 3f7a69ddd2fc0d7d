from __future__ import annotations

import json
import re
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping

from envx.console import Console
from envx.paths import descriptor_path, find_clone_source, rel_to_root
from envx.values import js_literal, parse_scalar

BASELINE_CONTENT = "export const environment = { production: false };\n"
BROWSER_GLOBAL_NAME = "__ENV"

_PRODUCTION_NAME_RE = re.compile(r"^(prod|production)$", re.IGNORECASE)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class DescriptorAction(str, Enum):
    REUSE = "reuse"
    TEMPLATE = "template"
    CLONE = "clone"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class DescriptorPlan:
    action: DescriptorAction
    target: Path
    source: Path | None = None


def is_production_name(name: str) -> bool:
    return _PRODUCTION_NAME_RE.match(name) is not None


def _field_name(key: str) -> str:
    return key if _IDENTIFIER_RE.match(key) else json.dumps(key, ensure_ascii=False)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _copy_file(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)


def ensure_baseline(root: Path, source_root: str, *, dry_run: bool, console: Console) -> Path:
    """Make sure ``environments/environment.ts`` exists at the root of the source tree.

    An existing baseline is left alone. Otherwise a root-level ``environment.prod.ts`` is copied
    byte for byte, and failing that a descriptor exporting only ``production: false`` is created.
    """

    baseline = descriptor_path(root, source_root)
    if baseline.exists():
        return baseline

    prod = descriptor_path(root, source_root, "prod")
    if prod.is_file():
        if dry_run:
            console.info(f"[dry-run] clone {rel_to_root(prod, root)} → {rel_to_root(baseline, root)}")
            return baseline
        _copy_file(prod, baseline)
        console.ok(f"Created baseline: {rel_to_root(baseline, root)} (cloned from {prod.name})")
        return baseline

    if dry_run:
        console.info(f"[dry-run] create {rel_to_root(baseline, root)}")
        return baseline
    _write_text(baseline, BASELINE_CONTENT)
    console.ok(f"Created baseline: {rel_to_root(baseline, root)}")
    return baseline


def render_descriptor(name: str, values: Mapping[str, str]) -> str:
    lines = ["export const environment = {", f"  production: {js_literal(is_production_name(name))},"]
    for key, raw in values.items():
        if key == "production":
            continue
        lines.append(f"  {_field_name(key)}: {js_literal(parse_scalar(raw))},")
    lines.append("};")
    return "\n".join(lines) + "\n"


def write_descriptor(
    root: Path,
    source_root: str,
    name: str,
    values: Mapping[str, str],
    folder: str | None = None,
    *,
    dry_run: bool,
    console: Console,
) -> Path:
    target = descriptor_path(root, source_root, name, folder)
    content = render_descriptor(name, values)
    if dry_run:
        console.info(f"[dry-run] create {rel_to_root(target, root)}")
        return target
    _write_text(target, content)
    console.ok(f"Created {rel_to_root(target, root)}")
    return target


def resolve_clone_source(
    root: Path,
    source_root: str,
    folder: str | None = None,
    explicit_source: str | None = None,
) -> Path | None:
    if explicit_source:
        preferred = descriptor_path(root, source_root, explicit_source, folder)
        if preferred.is_file():
            return preferred
    return find_clone_source(root, source_root, folder)


def clone_descriptor(
    root: Path,
    source_root: str,
    dest_name: str,
    folder: str | None = None,
    explicit_source: str | None = None,
    *,
    dry_run: bool,
    console: Console,
) -> Path | None:
    """Copy an existing descriptor to ``environment.<dest_name>.ts``.

    Returns ``None`` when no source descriptor exists; the caller then falls back to
    :func:`write_descriptor`.
    """

    src = resolve_clone_source(root, source_root, folder, explicit_source)
    if src is None:
        return None
    dest = descriptor_path(root, source_root, dest_name, folder)
    return _clone(root, src, dest, dry_run=dry_run, console=console)


def _clone(root: Path, src: Path, dest: Path, *, dry_run: bool, console: Console) -> Path:
    if dry_run:
        console.info(f"[dry-run] clone {rel_to_root(src, root)} → {rel_to_root(dest, root)}")
        return dest
    _copy_file(src, dest)
    console.ok(f"Cloned {rel_to_root(src, root)} → {rel_to_root(dest, root)}")
    return dest


def plan_descriptor(
    root: Path,
    source_root: str,
    name: str,
    values: Mapping[str, str],
    folder: str | None = None,
    copy_from: str | None = None,
    *,
    baseline: Path | None = None,
) -> DescriptorPlan:
    """Decide how ``environment.<name>.ts`` comes into being.

    ``baseline`` is the path returned by :func:`ensure_baseline`. It is the last clone candidate
    and counts even when a dry run skipped writing it, so a preview plans what a real run does.
    """

    target = descriptor_path(root, source_root, name, folder)
    if target.exists():
        return DescriptorPlan(DescriptorAction.REUSE, target)
    if values:
        return DescriptorPlan(DescriptorAction.TEMPLATE, target)
    source = resolve_clone_source(root, source_root, folder, copy_from) or baseline
    if source is not None:
        return DescriptorPlan(DescriptorAction.CLONE, target, source)
    return DescriptorPlan(DescriptorAction.MINIMAL, target)


def describe_plan(plan: DescriptorPlan, root: Path, key_count: int) -> str:
    target = rel_to_root(plan.target, root)
    if plan.action is DescriptorAction.REUSE:
        return f"Use existing {target}"
    if plan.action is DescriptorAction.TEMPLATE:
        return f"Create {target} from provided values ({key_count} keys)"
    if plan.action is DescriptorAction.CLONE and plan.source is not None:
        return f"Clone {rel_to_root(plan.source, root)} into {target}"
    return f"Create minimal {target} (production flag only)"


def apply_descriptor_plan(
    plan: DescriptorPlan,
    root: Path,
    source_root: str,
    name: str,
    values: Mapping[str, str],
    folder: str | None = None,
    *,
    dry_run: bool,
    console: Console,
) -> Path:
    if plan.action is DescriptorAction.REUSE:
        return plan.target
    if plan.action is DescriptorAction.TEMPLATE:
        return write_descriptor(root, source_root, name, values, folder, dry_run=dry_run, console=console)
    if plan.action is DescriptorAction.CLONE and plan.source is not None:
        return _clone(root, plan.source, plan.target, dry_run=dry_run, console=console)
    return write_descriptor(root, source_root, name, {}, folder, dry_run=dry_run, console=console)


def render_browser_global(values: Mapping[str, str]) -> str:
    parsed = {key: parse_scalar(raw) for key, raw in values.items()}
    body = json.dumps(parsed, indent=2, ensure_ascii=False)
    return f"// generated by envx\n(function(w){{ w.{BROWSER_GLOBAL_NAME} = {body}; }})(window);\n"


def angularjs_env_path(root: Path, source_root: str, name: str, folder: str | None = None) -> Path:
    assets = root / source_root / "assets"
    if folder:
        assets = assets / folder
    return assets / f"env.{name}.js"


def write_angularjs_env(
    root: Path,
    source_root: str,
    name: str,
    values: Mapping[str, str],
    folder: str | None = None,
    *,
    dry_run: bool,
    console: Console,
) -> Path:
    target = angularjs_env_path(root, source_root, name, folder)
    content = render_browser_global(values)
    if dry_run:
        console.info(f"[dry-run] create {rel_to_root(target, root)}")
        return target
    _write_text(target, content)
    console.ok(f"AngularJS env file created: {rel_to_root(target, root)}")
    script_src = rel_to_root(target, root / source_root)
    console.info(f'Include it in index.html: <script src="{script_src}"></script>')
    return target
