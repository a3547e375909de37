"""
Special-character handling shared by the parser, `is_dynamic_pattern` and
`escape_path`. Keeping the tables here keeps escaping the exact inverse of
what the parser treats as syntax.
"""

from __future__ import annotations

ESCAPE_CHAR = "\\"
NEGATION_CHAR = "!"

# Characters that start wildcard syntax anywhere in a pattern.
WILDCARD_CHARS = frozenset("*?[")

# Characters escaped by `escape_path`: wildcard starters, the class terminator
# and the escape character itself. A leading `!` is escaped separately.
ESCAPED_CHARS = frozenset("*?[]\\")


def is_dynamic_pattern(pattern: str) -> bool:
    """
    Return True if `pattern` contains wildcard syntax (`*`, `?`, `**`, or a
    `[...]` class) outside an escape. Static patterns can be resolved with a
    single existence check instead of a directory walk.
    """
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == ESCAPE_CHAR:
            i += 2
            continue
        if ch in WILDCARD_CHARS:
            return True
        i += 1
    return False


def escape_path(path: str) -> str:
    """
    Escape a literal path so that, used as a pattern, it matches only itself.

    >>> escape_path("src/[special]/file?.ts")
    'src/\\\\[special\\\\]/file\\\\?.ts'
    """
    escaped = "".join(ESCAPE_CHAR + ch if ch in ESCAPED_CHARS else ch for ch in path)
    if escaped.startswith(NEGATION_CHAR):
        escaped = ESCAPE_CHAR + escaped
    return escaped


def unescape_pattern(text: str) -> str:
    """Remove escapes from a static pattern, e.g. `a\\[1\\]` becomes `a[1]`."""
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == ESCAPE_CHAR and i + 1 < len(text):
            i += 1
        out.append(text[i])
        i += 1
    return "".join(out)
