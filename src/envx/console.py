"""Glyph-prefixed, optionally colorized status lines for the command line."""

from __future__ import annotations

import os
import sys
from typing import Any, TextIO

from colorama import Fore, Style

INFO_GLYPH = "ℹ"
OK_GLYPH = "✔"
WARN_GLYPH = "⚠"
ERR_GLYPH = "✖"


def _stream_supports_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


class Console:
    """Status sink handed to every component that reports progress.

    Parameters
    ----------
    stream:
        Destination stream. Defaults to ``sys.stdout`` at write time so that test capture and
        redirection keep working.
    color:
        Force colors on or off. ``None`` enables them only for a TTY without ``NO_COLOR``.
    """

    def __init__(self, stream: TextIO | None = None, *, color: bool | None = None) -> None:
        self._stream = stream
        self._color = color

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def color(self) -> bool:
        if self._color is not None:
            return self._color
        return _stream_supports_color(self.stream)

    def _emit(self, glyph: str, tint: str, message: str) -> None:
        prefix = f"{tint}{glyph}{Style.RESET_ALL} " if self.color else f"{glyph} "
        self.line(prefix + message)

    def line(self, text: str = "") -> None:
        print(text, file=self.stream)

    def info(self, message: str) -> None:
        self._emit(INFO_GLYPH, Fore.CYAN, message)

    def ok(self, message: str) -> None:
        self._emit(OK_GLYPH, Fore.GREEN, message)

    def warn(self, message: str) -> None:
        self._emit(WARN_GLYPH, Fore.YELLOW, message)

    def err(self, message: str) -> None:
        self._emit(ERR_GLYPH, Fore.RED, message)


def _enable_console_backslashreplace(stream: Any) -> None:
    reconfigure = getattr(stream, "reconfigure", None)
    if not callable(reconfigure):
        return
    try:
        if str(getattr(stream, "errors", "")).lower() == "backslashreplace":
            return
        reconfigure(errors="backslashreplace")
    except (AttributeError, OSError, ValueError):
        return


def configure_console_output() -> None:
    """Keep the status glyphs from crashing on consoles with a narrow encoding."""
    _enable_console_backslashreplace(sys.stdout)
    _enable_console_backslashreplace(sys.stderr)
