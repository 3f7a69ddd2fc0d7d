from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from envx.errors import ConfigError

DEFAULT_CONFIG_NAME = ".envx.yaml"

_STRING_KEYS = ("project", "source_root", "folder", "env_file")


@dataclass(frozen=True)
class EnvxConfig:
    project: str | None = None
    source_root: str | None = None
    folder: str | None = None
    env_file: str | None = None
    backup: bool | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping in {path}, got {type(data).__name__}")
    return data


def load_config(root: Path, explicit: Path | None = None) -> EnvxConfig:
    """Read project defaults from ``.envx.yaml`` (or ``explicit``).

    A missing default file yields empty defaults; a missing explicit file is an error.
    """

    if explicit is not None:
        path = explicit if explicit.is_absolute() else root / explicit
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        path = root / DEFAULT_CONFIG_NAME
        if not path.is_file():
            return EnvxConfig()

    data = _load_yaml(path)
    values: dict[str, Any] = {}
    for key in _STRING_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigError(f"Invalid `{key}` in {path.name} (expected string)")
        values[key] = value
    backup = data.get("backup")
    if backup is not None and not isinstance(backup, bool):
        raise ConfigError(f"Invalid `backup` in {path.name} (expected boolean)")
    return EnvxConfig(backup=backup, **values)
