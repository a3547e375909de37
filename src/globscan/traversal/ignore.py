"""
Ignore-pattern filter used for subtree pruning and result exclusion.

Ignore patterns always match dot entries, so `**/*.log` also excludes
`.debug.log`. A directory that matches an ignore pattern is excluded together
with everything below it, so the traverser never reads it.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence

from globscan.patterns.matcher import SegmentMatcher
from globscan.patterns.types import GlobPattern


class IgnoreFilter:
    """
    Wraps a set of compiled ignore patterns.

    Patterns that are fully literal, or literal followed only by `**`, are
    kept in a lookup table keyed by their literal path, so the common cases
    (`node_modules`, `build/**`) cost a few set lookups per entry and cover
    whole subtrees. The rest go through the matcher.
    """

    def __init__(
        self,
        patterns: Iterable[GlobPattern],
        matcher: SegmentMatcher,
        cwd_segments: Sequence[str] = (),
    ) -> None:
        self._matcher: SegmentMatcher = matcher
        self._cwd_segments: tuple[str, ...] = tuple(cwd_segments)
        self._static: set[tuple[str, tuple[str, ...]]] = set()
        self._dynamic: list[GlobPattern] = []
        for pattern in patterns:
            prefix = static_prefix(pattern)
            if prefix is not None and not pattern.directory_only:
                self._static.add((pattern.root, self._fold(prefix)))
            else:
                self._dynamic.append(pattern)
        self._needs_absolute: bool = any(root == "/" for root, _ in self._static) or any(
            p.is_absolute for p in self._dynamic
        )

    def __bool__(self) -> bool:
        return bool(self._static or self._dynamic)

    def excludes(self, segments: Sequence[str], is_dir: bool, root: str = "") -> bool:
        """
        True if the entry at `segments` (relative to the cwd, or absolute when
        `root` is `/`) is ignored.
        """
        if not self:
            return False
        relative, absolute = self._views(segments, root)
        if self._static_covers("", relative) or self._static_covers("/", absolute):
            return True
        for pattern in self._dynamic:
            if pattern.directory_only and not is_dir:
                continue
            view = absolute if pattern.is_absolute else relative
            if view is not None and self._matcher.match(pattern, view, dot=True):
                return True
        return False

    def _static_covers(self, root: str, view: tuple[str, ...] | None) -> bool:
        if not self._static or view is None:
            return False
        folded = self._fold(view)
        # The entry itself or any ancestor.
        return any((root, folded[:i]) in self._static for i in range(len(folded), 0, -1))

    def _views(
        self, segments: Sequence[str], root: str
    ) -> tuple[tuple[str, ...] | None, tuple[str, ...] | None]:
        """The entry as cwd-relative and as absolute segments."""
        if root == "/":
            absolute = tuple(segments)
            cwd = self._cwd_segments
            relative = absolute[len(cwd) :] if absolute[: len(cwd)] == cwd else None
            return relative, absolute
        relative = tuple(segments)
        if not self._needs_absolute:
            return relative, None
        joined = os.path.normpath("/".join(("",) + self._cwd_segments + relative))
        absolute = tuple(p for p in joined.replace(os.sep, "/").split("/") if p)
        return relative, absolute

    def _fold(self, segments: Sequence[str]) -> tuple[str, ...]:
        if self._matcher.case_sensitive:
            return tuple(segments)
        return tuple(s.lower() for s in segments)


def static_prefix(pattern: GlobPattern) -> tuple[str, ...] | None:
    """
    The literal path of a pattern that is either fully static or a static
    prefix followed only by `**`; `None` for anything else.
    """
    base = pattern.base
    rest = pattern.segments[len(base) :]
    if base and all(s.is_globstar for s in rest):
        return base
    return None
