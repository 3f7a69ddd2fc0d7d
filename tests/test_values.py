from __future__ import annotations

import pytest

from envx.values import js_literal, parse_pairs, parse_scalar, sanitize_folder


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("  false ", False),
        ("42", 42),
        ("-7", -7),
        ("3.25", 3.25),
        ("[1, 2]", [1, 2]),
        ('{"a": {"b": null}}', {"a": {"b": None}}),
        ("  https://api.example.com  ", "https://api.example.com"),
        ("True", "True"),
        ("1e5", "1e5"),
        ("", ""),
    ],
)
def test_parse_scalar_coercion_order(raw: str, expected: object) -> None:
    result = parse_scalar(raw)
    assert result == expected
    assert type(result) is type(expected)


def test_parse_scalar_falls_back_on_broken_json() -> None:
    assert parse_scalar("[not json") == "[not json"
    assert parse_scalar("{oops}") == "{oops}"
    assert parse_scalar("[" * 5000 + "]" * 5000) is not None


@pytest.mark.parametrize("raw", ["true", "false", "0", "-12", "2.5", "100"])
def test_parse_scalar_is_stable_on_its_own_literal(raw: str) -> None:
    first = parse_scalar(raw)
    assert parse_scalar(js_literal(first)) == first


def test_parse_pairs_drops_malformed_and_keeps_first_seen_order() -> None:
    pairs = ["api=https://x", "broken", " =nokey", "debug=true", "api=https://y", "expr=a=b"]
    parsed = parse_pairs(pairs)
    assert parsed == {"api": "https://y", "debug": "true", "expr": "a=b"}
    assert list(parsed) == ["api", "debug", "expr"]


def test_parse_pairs_empty_input() -> None:
    assert parse_pairs(None) == {}
    assert parse_pairs([]) == {}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        ("", None),
        ("f1", "f1"),
        ("//f1", "f1"),
        ("\\teams\\a", "teams\\a"),
        ("../../etc", "//etc"),
        ("  ", None),
        ("/..", None),
    ],
)
def test_sanitize_folder(raw: str | None, expected: str | None) -> None:
    assert sanitize_folder(raw) == expected


def test_js_literal_is_compact() -> None:
    assert js_literal({"a": [1, "é"]}) == '{"a":[1,"é"]}'


@pytest.mark.parametrize("raw", ["[NaN]", "[1, Infinity]", '{"a": -Infinity}'])
def test_parse_scalar_rejects_non_finite_json_constants(raw: str) -> None:
    assert parse_scalar(raw) == raw


def test_parse_scalar_keeps_decimal_point_as_float() -> None:
    assert parse_scalar("3.0") == 3.0
    assert js_literal(parse_scalar("3.0")) == "3.0"
