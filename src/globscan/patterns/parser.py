"""
Pattern compiler: turns a raw glob string into a `GlobPattern`.

Syntax:
- `/` separates segments; a leading `/` makes the pattern absolute and a
  trailing `/` restricts matches to directories.
- `*` matches within a segment, `?` matches one character, `**` as a whole
  segment matches zero or more segments.
- `[abc]`, `[a-z]`, `[!a-z]` / `[^a-z]` are character classes. A `]` right
  after the opening bracket (or negation) is literal.
- `\\` escapes the next character.
- A single leading `!` makes the whole pattern an ignore rule.
"""

from __future__ import annotations

from collections.abc import Iterable

from globscan.errors import PatternSyntaxError
from globscan.patterns.syntax import ESCAPE_CHAR, NEGATION_CHAR
from globscan.patterns.types import (
    AnyChar,
    CharacterClass,
    Globstar,
    GlobPattern,
    Literal,
    Segment,
    SingleWildcard,
    Token,
)

_GLOBSTAR_SEGMENT = Segment((Globstar(),))


def parse_pattern(raw: str) -> GlobPattern:
    """Compile `raw`. Raises `PatternSyntaxError` on malformed input."""
    if not raw:
        raise PatternSyntaxError(raw, 0, "empty pattern")

    offset = 0
    negated = raw.startswith(NEGATION_CHAR)
    if negated:
        offset = 1
        if len(raw) == 1:
            raise PatternSyntaxError(raw, 0, "negation without a pattern")

    root = ""
    if raw.startswith("/", offset):
        root = "/"

    segments: list[Segment] = []
    for start, text in _split_segments(raw, offset):
        if text in ("", "."):
            continue
        if text == "**":
            # Consecutive globstars match the same paths as a single one.
            if not segments or not segments[-1].is_globstar:
                segments.append(_GLOBSTAR_SEGMENT)
            continue
        segments.append(Segment(tuple(_compile_segment(raw, start, text))))

    directory_only = raw.endswith("/")

    if not segments and negated and not root:
        raise PatternSyntaxError(raw, offset, "negation without a pattern")

    return GlobPattern(
        raw=raw,
        segments=tuple(segments),
        root=root,
        negated=negated,
        directory_only=directory_only,
    )


def _split_segments(raw: str, offset: int) -> Iterable[tuple[int, str]]:
    """
    Split on unescaped `/`, yielding `(start_index, text)`. An escaped
    separator is rejected since a segment can never contain one.
    """
    start = offset
    i = offset
    while i < len(raw):
        ch = raw[i]
        if ch == ESCAPE_CHAR:
            if i + 1 >= len(raw):
                raise PatternSyntaxError(raw, i, "trailing escape character")
            if raw[i + 1] == "/":
                raise PatternSyntaxError(raw, i, "path separator cannot be escaped")
            i += 2
            continue
        if ch == "/":
            yield start, raw[start:i]
            start = i + 1
        i += 1
    yield start, raw[start:]


def _compile_segment(raw: str, start: int, text: str) -> list[Token]:
    tokens: list[Token] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            tokens.append(Literal("".join(literal)))
            literal.clear()

    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE_CHAR:
            literal.append(text[i + 1])
            i += 2
        elif ch == "*":
            flush()
            # `a**b` is not a globstar; adjacent stars collapse to one.
            if not tokens or not isinstance(tokens[-1], SingleWildcard):
                tokens.append(SingleWildcard())
            i += 1
        elif ch == "?":
            flush()
            tokens.append(AnyChar())
            i += 1
        elif ch == "[":
            flush()
            cls, i = _compile_class(raw, start, text, i)
            tokens.append(cls)
        else:
            literal.append(ch)
            i += 1
    flush()
    return tokens


def _compile_class(raw: str, start: int, text: str, open_index: int) -> tuple[CharacterClass, int]:
    """Parse `[...]` beginning at `open_index`; return the class and the index after `]`."""
    i = open_index + 1
    negated = False
    if i < len(text) and text[i] in "!^":
        negated = True
        i += 1

    # (character, was_escaped) pairs; an escaped `-` never forms a range.
    members: list[tuple[str, bool]] = []
    closed = False
    while i < len(text):
        ch = text[i]
        if ch == "]" and members:
            closed = True
            i += 1
            break
        escaped = ch == ESCAPE_CHAR
        if escaped:
            ch = text[i + 1]
            i += 1
        members.append((ch, escaped))
        i += 1

    if not closed:
        raise PatternSyntaxError(raw, start + open_index, "unterminated character class")

    chars: set[str] = set()
    ranges: list[tuple[str, str]] = []
    j = 0
    while j < len(members):
        if j + 2 < len(members) and members[j + 1] == ("-", False):
            lo, hi = members[j][0], members[j + 2][0]
            if lo > hi:
                raise PatternSyntaxError(
                    raw, start + open_index, f"reversed range {lo}-{hi} in character class"
                )
            ranges.append((lo, hi))
            j += 3
        else:
            chars.add(members[j][0])
            j += 1

    return CharacterClass(frozenset(chars), tuple(ranges), negated), i


class PatternCache:
    """
    Compiled patterns keyed by raw string. Owned by the caller: pass the same
    cache to repeated calls to skip recompilation, or let each call create
    its own.
    """

    def __init__(self) -> None:
        self._patterns: dict[str, GlobPattern] = {}

    def compile(self, raw: str) -> GlobPattern:
        pattern = self._patterns.get(raw)
        if pattern is None:
            pattern = parse_pattern(raw)
            self._patterns[raw] = pattern
        return pattern

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, raw: object) -> bool:
        return raw in self._patterns
