from __future__ import annotations

import json
import re
from typing import Any, Iterable

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_LEADING_SEPARATORS_RE = re.compile(r"^[\\/]+")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unsupported JSON constant: {name}")


def parse_scalar(raw: str) -> Any:
    """Coerce a raw string value into the literal it most likely denotes.

    Parameters
    ----------
    raw:
        Value as read from a dotenv file or a ``--set key=value`` argument.

    Returns
    -------
    Any
        ``True``/``False`` for boolean literals, ``int``/``float`` for plain decimal numbers,
        the decoded structure for bracket-delimited JSON arrays or objects, otherwise the
        trimmed string.

    Notes
    -----
    Precedence is fixed: boolean literals, then the numeric pattern, then bracket-delimited
    JSON, then the string fallback. The function never raises. JSON text carrying
    ``NaN`` or ``Infinity`` falls back to the string. A decimal such as ``"3.0"`` stays a
    ``float`` and is written back as ``3.0``, not ``3``.
    """

    text = raw.strip()
    if text == "true":
        return True
    if text == "false":
        return False
    match = _NUMBER_RE.match(text)
    if match is not None:
        return float(text) if match.group(1) else int(text)
    if (text.startswith("[") and text.endswith("]")) or (text.startswith("{") and text.endswith("}")):
        try:
            return json.loads(text, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            pass
    return text


def parse_pairs(pairs: Iterable[str] | None) -> dict[str, str]:
    """Parse ``key=value`` strings into an ordered mapping.

    Entries without ``=`` and entries whose key is empty after trimming are dropped. A later
    duplicate overwrites the value but keeps the position of the first occurrence.
    """

    out: dict[str, str] = {}
    if not pairs:
        return out
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key:
            out[key] = value.strip()
    return out


def sanitize_folder(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = _LEADING_SEPARATORS_RE.sub("", value).replace("..", "").strip()
    return cleaned or None


def js_literal(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
