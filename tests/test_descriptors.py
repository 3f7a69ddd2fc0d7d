from __future__ import annotations

from pathlib import Path

import pytest

from envx.console import Console
from envx.descriptors import (
    BASELINE_CONTENT,
    DescriptorAction,
    angularjs_env_path,
    apply_descriptor_plan,
    clone_descriptor,
    describe_plan,
    ensure_baseline,
    plan_descriptor,
    render_browser_global,
    render_descriptor,
    write_angularjs_env,
    write_descriptor,
)

from _helpers import snapshot_tree, write_text

PROD_BODY = "export const environment = {\n  production: true,\n  apiUrl: 'https://api.example.com',\n};\n"


def test_render_descriptor_for_production_names() -> None:
    assert "  production: true," in render_descriptor("PROD", {})
    assert "  production: true," in render_descriptor("production", {})
    assert "  production: false," in render_descriptor("prod2", {})


def test_render_descriptor_coerces_values_in_order() -> None:
    body = render_descriptor(
        "sit",
        {"apiUrl": "https://sit.example.com", "retries": "3", "debug": "true", "flags": '["a","b"]'},
    )
    assert body == (
        "export const environment = {\n"
        "  production: false,\n"
        '  apiUrl: "https://sit.example.com",\n'
        "  retries: 3,\n"
        "  debug: true,\n"
        '  flags: ["a","b"],\n'
        "};\n"
    )


def test_render_descriptor_quotes_odd_keys_and_skips_production() -> None:
    body = render_descriptor("dev", {"feature-flag": "on", "production": "true"})
    assert '  "feature-flag": "on",' in body
    assert body.count("production") == 1
    assert "  production: false," in body


def test_ensure_baseline_synthesizes_minimal(tmp_path: Path, console: Console) -> None:
    baseline = ensure_baseline(tmp_path, "src", dry_run=False, console=console)
    assert baseline == tmp_path / "src" / "environments" / "environment.ts"
    assert baseline.read_text(encoding="utf-8") == BASELINE_CONTENT


def test_ensure_baseline_clones_prod(tmp_path: Path, console: Console) -> None:
    prod = write_text(tmp_path / "src" / "environments" / "environment.prod.ts", PROD_BODY)
    baseline = ensure_baseline(tmp_path, "src", dry_run=False, console=console)
    assert baseline.read_bytes() == prod.read_bytes()


def test_ensure_baseline_keeps_existing(tmp_path: Path, console: Console) -> None:
    existing = write_text(tmp_path / "src" / "environments" / "environment.ts", "keep me\n")
    ensure_baseline(tmp_path, "src", dry_run=False, console=console)
    assert existing.read_text(encoding="utf-8") == "keep me\n"


def test_ensure_baseline_dry_run_writes_nothing(
    tmp_path: Path, console: Console, capsys: pytest.CaptureFixture[str]
) -> None:
    before = snapshot_tree(tmp_path)
    ensure_baseline(tmp_path, "src", dry_run=True, console=console)
    assert snapshot_tree(tmp_path) == before
    assert "[dry-run] create src/environments/environment.ts" in capsys.readouterr().out


def test_write_descriptor_creates_folders(tmp_path: Path, console: Console) -> None:
    target = write_descriptor(tmp_path, "src", "sit", {"a": "1"}, "f1", dry_run=False, console=console)
    assert target == tmp_path / "src" / "environments" / "f1" / "environment.sit.ts"
    assert "  a: 1," in target.read_text(encoding="utf-8")


def test_clone_descriptor_uses_explicit_source(tmp_path: Path, console: Console) -> None:
    env_dir = tmp_path / "src" / "environments"
    write_text(env_dir / "environment.prod.ts", PROD_BODY)
    qa = write_text(env_dir / "environment.qa.ts", "qa body\n")

    dest = clone_descriptor(tmp_path, "src", "uat", None, "qa", dry_run=False, console=console)
    assert dest == env_dir / "environment.uat.ts"
    assert dest.read_bytes() == qa.read_bytes()


def test_clone_descriptor_falls_back_when_explicit_missing(tmp_path: Path, console: Console) -> None:
    env_dir = tmp_path / "src" / "environments"
    prod = write_text(env_dir / "environment.prod.ts", PROD_BODY)
    dest = clone_descriptor(tmp_path, "src", "uat", None, "nope", dry_run=False, console=console)
    assert dest is not None
    assert dest.read_bytes() == prod.read_bytes()


def test_clone_descriptor_without_source_returns_none(tmp_path: Path, console: Console) -> None:
    assert clone_descriptor(tmp_path, "src", "uat", dry_run=False, console=console) is None
    assert not (tmp_path / "src").exists()


def test_plan_descriptor_policy(tmp_path: Path) -> None:
    env_dir = tmp_path / "src" / "environments"
    assert plan_descriptor(tmp_path, "src", "dev", {}).action is DescriptorAction.MINIMAL
    assert plan_descriptor(tmp_path, "src", "dev", {"a": "1"}).action is DescriptorAction.TEMPLATE

    prod = write_text(env_dir / "environment.prod.ts", PROD_BODY)
    plan = plan_descriptor(tmp_path, "src", "dev", {})
    assert plan.action is DescriptorAction.CLONE
    assert plan.source == prod
    assert describe_plan(plan, tmp_path, 0) == (
        "Clone src/environments/environment.prod.ts into src/environments/environment.dev.ts"
    )

    write_text(env_dir / "environment.dev.ts", "existing\n")
    plan = plan_descriptor(tmp_path, "src", "dev", {"a": "1"})
    assert plan.action is DescriptorAction.REUSE
    assert describe_plan(plan, tmp_path, 1) == "Use existing src/environments/environment.dev.ts"


def test_apply_minimal_plan_writes_production_flag_only(tmp_path: Path, console: Console) -> None:
    plan = plan_descriptor(tmp_path, "src", "dev", {})
    target = apply_descriptor_plan(plan, tmp_path, "src", "dev", {}, dry_run=False, console=console)
    assert target.read_text(encoding="utf-8") == "export const environment = {\n  production: false,\n};\n"


def test_apply_reuse_plan_leaves_file_untouched(tmp_path: Path, console: Console) -> None:
    existing = write_text(tmp_path / "src" / "environments" / "environment.dev.ts", "existing\n")
    plan = plan_descriptor(tmp_path, "src", "dev", {"a": "1"})
    assert apply_descriptor_plan(plan, tmp_path, "src", "dev", {"a": "1"}, dry_run=False, console=console) == existing
    assert existing.read_text(encoding="utf-8") == "existing\n"


def test_render_browser_global() -> None:
    body = render_browser_global({"apiUrl": "https://x", "debug": "false"})
    assert body.startswith("// generated by envx\n(function(w){ w.__ENV = {\n")
    assert '"apiUrl": "https://x"' in body
    assert '"debug": false' in body
    assert body.endswith("; })(window);\n")


def test_write_angularjs_env(tmp_path: Path, console: Console, capsys: pytest.CaptureFixture[str]) -> None:
    target = write_angularjs_env(tmp_path, "src", "dev", {"a": "1"}, "f1", dry_run=False, console=console)
    assert target == angularjs_env_path(tmp_path, "src", "dev", "f1")
    assert target == tmp_path / "src" / "assets" / "f1" / "env.dev.js"
    assert '"a": 1' in target.read_text(encoding="utf-8")
    assert '<script src="assets/f1/env.dev.js"></script>' in capsys.readouterr().out


def test_plan_descriptor_counts_pending_baseline_as_clone_source(tmp_path: Path, console: Console) -> None:
    before = snapshot_tree(tmp_path)
    baseline = ensure_baseline(tmp_path, "src", dry_run=True, console=console)
    assert not baseline.exists()

    plan = plan_descriptor(tmp_path, "src", "dev", {}, baseline=baseline)
    assert plan.action is DescriptorAction.CLONE
    assert plan.source == baseline

    target = apply_descriptor_plan(plan, tmp_path, "src", "dev", {}, dry_run=True, console=console)
    assert target == tmp_path / "src" / "environments" / "environment.dev.ts"
    assert snapshot_tree(tmp_path) == before


def test_apply_clone_plan_copies_planned_source(tmp_path: Path, console: Console) -> None:
    baseline = ensure_baseline(tmp_path, "src", dry_run=False, console=console)
    plan = plan_descriptor(tmp_path, "src", "dev", {}, baseline=baseline)
    target = apply_descriptor_plan(plan, tmp_path, "src", "dev", {}, dry_run=False, console=console)
    assert target.read_bytes() == baseline.read_bytes()
