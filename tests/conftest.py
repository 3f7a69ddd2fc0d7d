from __future__ import annotations

import pytest

from envx.console import Console


@pytest.fixture(autouse=True)
def _no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep console assertions free of ANSI escapes."""
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def console() -> Console:
    return Console(color=False)
