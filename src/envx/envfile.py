from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values

from envx.console import Console
from envx.errors import EnvFileError
from envx.paths import rel_to_root


def env_file_candidates(root: Path, env_name: str, explicit: str | Path | None = None) -> list[Path]:
    if explicit is not None:
        explicit_path = Path(explicit)
        return [explicit_path if explicit_path.is_absolute() else root / explicit_path]
    return [root / f".env.{env_name}", root / ".env"]


def load_env_file(
    root: Path,
    env_name: str,
    explicit: str | Path | None = None,
    *,
    console: Console,
) -> dict[str, str]:
    """Load the first existing dotenv file for ``env_name``.

    Lookup order is the explicit path when given, otherwise ``.env.<env_name>`` then ``.env``.
    Keys declared without a value are skipped.
    """

    for path in env_file_candidates(root, env_name, explicit):
        if not path.is_file():
            continue
        try:
            parsed = dotenv_values(path, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EnvFileError(f"Failed to read env file {rel_to_root(path, root)}: {e}") from e
        console.info(f"Loaded env file: {rel_to_root(path, root)}")
        return {key: value for key, value in parsed.items() if value is not None}
    return {}


def merge_values(file_values: dict[str, str], inline_values: dict[str, str]) -> dict[str, str]:
    merged = dict(file_values)
    merged.update(inline_values)
    return merged
