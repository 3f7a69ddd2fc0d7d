#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Callable

from envx import __version__
from envx.config import EnvxConfig, load_config
from envx.console import Console, configure_console_output
from envx.descriptors import (
    DescriptorAction,
    apply_descriptor_plan,
    describe_plan,
    ensure_baseline,
    plan_descriptor,
    write_angularjs_env,
)
from envx.detect import MODERN_MANIFEST, ProjectKind, detect_project_kind
from envx.envfile import load_env_file, merge_values
from envx.errors import EnvxError
from envx.manifest import (
    legacy_source_root,
    resolve_project_info,
    update_legacy_manifest,
    update_modern_manifest,
)
from envx.paths import environments_dir, iter_descriptor_files, rel_to_root
from envx.values import parse_pairs, sanitize_folder

DEFAULT_SOURCE_ROOT = "src"


def _console_for(args: argparse.Namespace) -> Console:
    return Console(color=False if args.no_color else None)


def _resolve_backup(args: argparse.Namespace, config: EnvxConfig) -> bool:
    if args.backup is not None:
        return bool(args.backup)
    if config.backup is not None:
        return config.backup
    return True


def _print_plan(console: Console, steps: list[str]) -> None:
    console.info("Plan:")
    for step in steps:
        console.info(f"  • {step}")


def _generate_angularjs(
    args: argparse.Namespace,
    config: EnvxConfig,
    console: Console,
    values: dict[str, str],
    folder: str | None,
) -> int:
    root: Path = args.root
    source_root = args.source_root or config.source_root or DEFAULT_SOURCE_ROOT
    assets = f"assets/{folder}/" if folder else "assets/"
    _print_plan(
        console,
        [
            f"Create {assets}env.{args.env}.js from provided values ({len(values)} keys)",
            f"No {MODERN_MANIFEST} updates for AngularJS",
        ],
    )
    write_angularjs_env(root, source_root, args.env, values, folder, dry_run=args.dry_run, console=console)
    return 0


def _generate_descriptor(
    args: argparse.Namespace,
    console: Console,
    source_root: str,
    values: dict[str, str],
    folder: str | None,
) -> Path:
    root: Path = args.root
    baseline = ensure_baseline(root, source_root, dry_run=args.dry_run, console=console)
    plan = plan_descriptor(root, source_root, args.env, values, folder, args.copy_from, baseline=baseline)
    steps = [describe_plan(plan, root, len(values))]
    drops_production = plan.action is DescriptorAction.TEMPLATE and "production" in values
    if drops_production:
        steps.append('Skip provided "production" value (the flag follows the environment name)')
    _print_plan(console, steps)
    if drops_production:
        console.warn(f'Ignoring production={values["production"]}; environment.{args.env}.ts sets it from the name')
    return apply_descriptor_plan(
        plan,
        root,
        source_root,
        args.env,
        values,
        folder,
        dry_run=args.dry_run,
        console=console,
    )


def _generate_modern(
    args: argparse.Namespace,
    config: EnvxConfig,
    console: Console,
    values: dict[str, str],
    folder: str | None,
) -> int:
    root: Path = args.root
    project = args.project or config.project
    source_root = args.source_root or config.source_root
    if (root / MODERN_MANIFEST).exists():
        info = resolve_project_info(root, project)
        project = info.project_name
        source_root = source_root or info.source_root
        console.info(f"Using project: {project}")
    source_root = source_root or DEFAULT_SOURCE_ROOT
    console.info(f"sourceRoot: {source_root}")

    descriptor = _generate_descriptor(args, console, source_root, values, folder)
    update_modern_manifest(
        root,
        args.env,
        descriptor,
        project=project,
        source_root=source_root,
        backup=_resolve_backup(args, config),
        dry_run=args.dry_run,
        console=console,
    )
    if not args.dry_run:
        console.ok(f"Done. Run with:\n  ng build -c {args.env}\n  ng serve -c {args.env}")
    return 0


def _generate_legacy(
    args: argparse.Namespace,
    config: EnvxConfig,
    console: Console,
    values: dict[str, str],
    folder: str | None,
) -> int:
    root: Path = args.root
    source_root = args.source_root or config.source_root or legacy_source_root(root) or DEFAULT_SOURCE_ROOT
    console.info(f"Legacy Angular CLI detected (.angular-cli.json). Using sourceRoot: {source_root}")

    descriptor = _generate_descriptor(args, console, source_root, values, folder)
    update_legacy_manifest(
        root,
        args.env,
        descriptor,
        source_root=source_root,
        backup=_resolve_backup(args, config),
        dry_run=args.dry_run,
        console=console,
    )
    if not args.dry_run:
        console.ok(f"Done. Run with:\n  ng build --env={args.env}\n  ng serve --env={args.env}")
    return 0


def _cmd_gen(args: argparse.Namespace, config: EnvxConfig, console: Console) -> int:
    root: Path = args.root
    folder = sanitize_folder(args.folder or config.folder)
    inline_values = parse_pairs(args.set)
    file_values = load_env_file(root, args.env, args.env_file or config.env_file, console=console)
    values = merge_values(file_values, inline_values)

    kind = detect_project_kind(root)
    console.info(f"Detected project type: {kind.value}")
    if kind is ProjectKind.ANGULARJS:
        return _generate_angularjs(args, config, console, values, folder)
    if kind is ProjectKind.ANGULAR_MODERN:
        return _generate_modern(args, config, console, values, folder)
    return _generate_legacy(args, config, console, values, folder)


def _cmd_list(args: argparse.Namespace, config: EnvxConfig, console: Console) -> int:
    root: Path = args.root
    kind = detect_project_kind(root)
    if kind is ProjectKind.ANGULARJS:
        console.info("AngularJS project: environment files are not used the same way.")
        return 0

    source_root = args.source_root or config.source_root
    if kind is ProjectKind.ANGULAR_MODERN and (root / MODERN_MANIFEST).exists():
        info = resolve_project_info(root, args.project or config.project)
        source_root = source_root or info.source_root
        console.info(f"Project: {info.project_name}")
    elif kind is ProjectKind.NG_CLI_LEGACY:
        source_root = source_root or legacy_source_root(root)
    source_root = source_root or DEFAULT_SOURCE_ROOT

    base = environments_dir(root, source_root)
    if not base.is_dir():
        console.warn(f"No environments folder found at {rel_to_root(base, root)}")
        return 0

    files = sorted(rel_to_root(path, root) for path in iter_descriptor_files(root, source_root))
    if args.json:
        payload = {
            "schema_version": 1,
            "kind": kind.value,
            "source_root": source_root,
            "files": files,
        }
        console.line(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0
    if not files:
        console.warn("No environment files found.")
        return 0
    console.ok(f"Found {len(files)} file(s):")
    for path in files:
        console.line(f"  - {path}")
    return 0


def _run_command(
    handler: Callable[[argparse.Namespace, EnvxConfig, Console], int], args: argparse.Namespace
) -> int:
    console = _console_for(args)
    try:
        config = load_config(args.root, args.config)
        return handler(args, config, console)
    except (EnvxError, OSError, ValueError) as e:
        console.err(str(e) or type(e).__name__)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envx",
        description="Smart env manager for Angular projects (AngularJS 1.x to modern Angular).",
    )
    parser.add_argument("--version", action="version", version=f"envx {__version__}")
    parser.add_argument(
        "-C",
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Project directory to operate in (default: current directory).",
    )
    parser.add_argument("--config", type=Path, help="Defaults file (default: <root>/.envx.yaml when present).")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output.")

    sub = parser.add_subparsers(dest="cmd", required=True)

    gen_p = sub.add_parser("gen", help="Generate environment file and update Angular config.")
    gen_p.add_argument("env", help="Environment name, e.g. dev | sit | uat | prod.")
    gen_p.add_argument("-f", "--folder", help="Subfolder under environments/, e.g. f1.")
    gen_p.add_argument("--project", help="Angular project name (defaults to defaultProject or first).")
    gen_p.add_argument("--source-root", dest="source_root", help="Override detected sourceRoot (e.g. apps/myapp/src).")
    gen_p.add_argument("-e", "--env-file", dest="env_file", help="Path to an env file (optional).")
    gen_p.add_argument(
        "-s",
        "--set",
        nargs="+",
        action="extend",
        default=[],
        metavar="KEY=VALUE",
        help="Inline key=value pairs to write (optional, repeatable).",
    )
    gen_p.add_argument("--copy-from", dest="copy_from", help="Clone from an existing environment file first.")
    gen_p.add_argument("--dry-run", action="store_true", help="Show plan without writing files.")
    gen_p.add_argument(
        "--no-backup",
        dest="backup",
        action="store_false",
        default=None,
        help="Do not create timestamped backups of Angular configs.",
    )
    gen_p.set_defaults(func=_cmd_gen)

    list_p = sub.add_parser("list", help="List environment files under environments/ (recursively).")
    list_p.add_argument("--project", help="Angular project name.")
    list_p.add_argument("--source-root", dest="source_root", help="Override detected sourceRoot.")
    list_p.add_argument("--json", action="store_true", help="Emit a JSON payload instead of text.")
    list_p.set_defaults(func=_cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_console_output()
    parser = build_parser()
    args = parser.parse_args(argv)
    args.root = args.root.resolve()
    return _run_command(args.func, args)


if __name__ == "__main__":
    raise SystemExit(main())
