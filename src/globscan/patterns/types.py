"""
Compiled pattern data model.

A `GlobPattern` is a sequence of `Segment`s, one per path position. Each
segment is a tuple of tokens; a `Globstar` is always the only token of its
segment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class SingleWildcard:
    """`*`: zero or more characters within one path segment."""


@dataclass(frozen=True)
class AnyChar:
    """`?`: exactly one character within one path segment."""


@dataclass(frozen=True)
class Globstar:
    """`**`: zero or more whole path segments."""


@dataclass(frozen=True)
class CharacterClass:
    """`[...]`: one character from a set of characters and inclusive ranges."""

    chars: frozenset[str]
    ranges: tuple[tuple[str, str], ...] = ()
    negated: bool = False

    def contains(self, ch: str, case_sensitive: bool = True) -> bool:
        candidates = (ch,) if case_sensitive else {ch, ch.lower(), ch.upper()}
        found = any(
            c in self.chars or any(lo <= c <= hi for lo, hi in self.ranges) for c in candidates
        )
        return found != self.negated


Token = Union[Literal, SingleWildcard, AnyChar, Globstar, CharacterClass]

# A flattened token: a single literal character or a one-character matcher.
Atom = Union[str, SingleWildcard, AnyChar, CharacterClass]


@dataclass(frozen=True)
class Segment:
    tokens: tuple[Token, ...]
    atoms: tuple[Atom, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.atoms:
            object.__setattr__(self, "atoms", _flatten(self.tokens))

    @property
    def is_globstar(self) -> bool:
        return len(self.tokens) == 1 and isinstance(self.tokens[0], Globstar)

    @property
    def is_literal(self) -> bool:
        return all(isinstance(t, Literal) for t in self.tokens)

    @property
    def literal_text(self) -> str:
        """Unescaped text of a literal segment."""
        return "".join(t.text for t in self.tokens if isinstance(t, Literal))

    @property
    def starts_with_dot(self) -> bool:
        return bool(self.atoms) and self.atoms[0] == "."


def _flatten(tokens: tuple[Token, ...]) -> tuple[Atom, ...]:
    atoms: list[Atom] = []
    for token in tokens:
        if isinstance(token, Literal):
            atoms.extend(token.text)
        elif isinstance(token, Globstar):
            atoms.append(SingleWildcard())
        else:
            atoms.append(token)
    return tuple(atoms)


@dataclass(frozen=True)
class GlobPattern:
    """
    A compiled pattern. Immutable, so a single instance can be shared by
    concurrent traversals.
    """

    raw: str
    segments: tuple[Segment, ...]
    root: str = ""
    negated: bool = False
    directory_only: bool = False

    @property
    def is_dynamic(self) -> bool:
        return not all(s.is_literal for s in self.segments)

    @property
    def is_absolute(self) -> bool:
        return self.root == "/"

    @property
    def base(self) -> tuple[str, ...]:
        """The literal prefix: leading segments with no wildcard syntax."""
        prefix: list[str] = []
        for segment in self.segments:
            if not segment.is_literal:
                break
            prefix.append(segment.literal_text)
        return tuple(prefix)

    @property
    def literal_path(self) -> str:
        """Display form of a static pattern, with escapes removed."""
        joined = "/".join(s.literal_text for s in self.segments)
        if self.root:
            return self.root + joined
        return joined or "."
