from __future__ import annotations

import os
import re
from pathlib import Path, PurePath
from typing import Iterator

BASE_DESCRIPTOR = "environment.ts"
_DESCRIPTOR_NAME_RE = re.compile(r"^environment\.[^.]+\.ts$")


def to_posix(path: str | PurePath) -> str:
    return str(path).replace(os.sep, "/")


def rel_to_root(path: Path, root: Path) -> str:
    """Render ``path`` relative to the working root with forward slashes."""

    return to_posix(os.path.relpath(path, root))


def environments_dir(root: Path, source_root: str, folder: str | None = None) -> Path:
    base = root / source_root / "environments"
    return base / folder if folder else base


def descriptor_path(root: Path, source_root: str, name: str | None = None, folder: str | None = None) -> Path:
    filename = f"environment.{name}.ts" if name else BASE_DESCRIPTOR
    return environments_dir(root, source_root, folder) / filename


def find_clone_source(root: Path, source_root: str, folder: str | None = None) -> Path | None:
    """Return the best existing template for a new descriptor.

    Preference order: ``prod`` in ``folder``, base in ``folder``, ``prod`` at the root of
    ``environments/``, base at the root.
    """

    candidates = (
        descriptor_path(root, source_root, "prod", folder),
        descriptor_path(root, source_root, None, folder),
        descriptor_path(root, source_root, "prod", None),
        descriptor_path(root, source_root, None, None),
    )
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def is_descriptor_name(name: str) -> bool:
    return name == BASE_DESCRIPTOR or _DESCRIPTOR_NAME_RE.match(name) is not None


def iter_descriptor_files(root: Path, source_root: str) -> Iterator[Path]:
    base = environments_dir(root, source_root)
    for dirpath, _dirnames, filenames in os.walk(base):
        for filename in filenames:
            if is_descriptor_name(filename):
                yield Path(dirpath) / filename
