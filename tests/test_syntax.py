"""Tests for `is_dynamic_pattern`, `escape_path` and `unescape_pattern`."""

from __future__ import annotations

import pytest

from globscan import escape_path, is_dynamic_pattern
from globscan.patterns.matcher import SegmentMatcher
from globscan.patterns.parser import parse_pattern
from globscan.patterns.syntax import unescape_pattern


@pytest.mark.parametrize(
    ("pattern", "expected"),
    [
        ("a/b.txt", False),
        ("a/**/*.ts", True),
        ("src/?.py", True),
        ("src/[abc].py", True),
        ("src/\\*.py", False),
        ("src/\\[abc\\].py", False),
        ("!a/b.txt", False),
        ("a]b", False),
        ("", False),
    ],
)
def test_is_dynamic_pattern(pattern: str, expected: bool):
    assert is_dynamic_pattern(pattern) is expected


def test_is_dynamic_agrees_with_parser():
    for raw in ["a/b.txt", "a/**/*.ts", "x\\?y", "[ab]", "dir/sub/"]:
        assert is_dynamic_pattern(raw) == parse_pattern(raw).is_dynamic


def test_escape_path_special_characters():
    assert escape_path("src/[special]/file.ts") == "src/\\[special\\]/file.ts"
    assert escape_path("what?.txt") == "what\\?.txt"
    assert escape_path("a*b") == "a\\*b"
    assert escape_path("back\\slash") == "back\\\\slash"


def test_escape_path_leading_negation_only():
    assert escape_path("!keep.txt") == "\\!keep.txt"
    assert escape_path("dir/!keep.txt") == "dir/!keep.txt"


def test_escape_path_leaves_plain_paths_alone():
    assert escape_path("src/lib/main.py") == "src/lib/main.py"


@pytest.mark.parametrize(
    "literal",
    [
        "src/[special]/file.ts",
        "!important",
        "weird*name?[x]",
        "a\\b",
        "[]",
        "x]",
    ],
)
def test_escaped_path_is_static_and_matches_only_itself(literal: str):
    escaped = escape_path(literal)
    pattern = parse_pattern(escaped)
    assert not is_dynamic_pattern(escaped)
    assert not pattern.is_dynamic
    assert not pattern.negated
    assert pattern.literal_path == literal
    assert SegmentMatcher().match(pattern, literal.split("/"), dot=True)


def test_unescape_pattern():
    assert unescape_pattern("a\\[1\\]") == "a[1]"
    assert unescape_pattern("plain") == "plain"
