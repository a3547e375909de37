"""
The traversal core.

`Traverser.run()` is a generator that yields `MatchResult`s and filesystem
requests (see `globscan.traversal.fs`) and receives each request's reply via
`send()`. The same generator is driven by the blocking and the asyncio
adapters, so both apply identical matching, filtering and ordering.

Walk plan:
- Static patterns become a single existence check.
- Dynamic patterns are grouped by literal prefix (their base directory).
  A pattern whose base lies inside another's joins that walk.
- Each group is walked breadth-first from its base with an explicit queue.
  Directories are only read when some pattern could still match below them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator, Sequence
from dataclasses import dataclass, field
from typing import Any

from globscan.errors import FileSystemError, RootNotFoundError
from globscan.patterns.matcher import SegmentMatcher
from globscan.patterns.parser import PatternCache
from globscan.patterns.syntax import unescape_pattern
from globscan.patterns.types import GlobPattern
from globscan.traversal.fs import DirEntry, DirListing, ReadDirectories, ReadText, StatPath, TraversalCore
from globscan.traversal.gitignore import GITIGNORE_NAME, GitignoreChain, parse_gitignore
from globscan.traversal.ignore import IgnoreFilter
from globscan.traversal.types import GlobOptions, MatchResult, TraversalState, WorkItem

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticCheck:
    pattern: GlobPattern


@dataclass(eq=False)
class WalkGroup:
    root: str
    base: tuple[str, ...]
    patterns: list[GlobPattern] = field(default_factory=list)


def _contains(outer: tuple[str, ...], inner: tuple[str, ...]) -> bool:
    """True if a walk from `outer` reaches `inner`. Walks never go up through `..`."""
    return inner[: len(outer)] == outer and ".." not in inner[len(outer) :]


def plan_walks(includes: Sequence[GlobPattern]) -> list[StaticCheck | WalkGroup]:
    """
    Order of the returned tasks follows the first pattern of each task, which
    fixes the order of results across tasks.
    """
    tasks: list[StaticCheck | WalkGroup] = []
    for pattern in includes:
        if not pattern.is_dynamic:
            tasks.append(StaticCheck(pattern))
            continue

        base = pattern.base
        groups = [t for t in tasks if isinstance(t, WalkGroup) and t.root == pattern.root]
        owner = next((g for g in groups if _contains(g.base, base)), None)
        if owner is not None:
            owner.patterns.append(pattern)
            continue

        absorbed = [g for g in groups if _contains(base, g.base)]
        group = WalkGroup(pattern.root, base, [p for g in absorbed for p in g.patterns] + [pattern])
        if absorbed:
            position = next(i for i, t in enumerate(tasks) if t is absorbed[0])
            tasks[position] = group
            for g in absorbed[1:]:
                tasks.remove(g)
        else:
            tasks.append(group)
    return tasks


def _split_absolute(path: str) -> tuple[str, ...]:
    return tuple(p for p in path.replace(os.sep, "/").split("/") if p)


class Traverser:
    """
    Resolves one set of patterns under one set of options. All patterns are
    compiled in the constructor, so syntax errors surface before any I/O.
    """

    def __init__(
        self,
        patterns: Sequence[str] | str,
        options: GlobOptions | None = None,
        cache: PatternCache | None = None,
    ) -> None:
        if isinstance(patterns, str):
            patterns = [patterns]
        self.options: GlobOptions = options if options is not None else GlobOptions()
        self.cache: PatternCache = cache if cache is not None else PatternCache()
        self.matcher: SegmentMatcher = SegmentMatcher(self.options.case_sensitive)

        self._cwd: str = self.options.effective_cwd
        self._cwd_abs: str = os.path.abspath(self._cwd)

        self.includes: list[GlobPattern] = []
        ignores: list[GlobPattern] = []
        for raw in patterns:
            pattern = self.cache.compile(raw)
            if pattern.negated:
                ignores.append(pattern)
            else:
                self.includes.append(pattern)
        # Entries of the ignore option are ignore rules whether or not they start with `!`.
        ignores.extend(self.cache.compile(raw) for raw in self.options.ignore)

        self.ignores: list[GlobPattern] = ignores
        self.ignore_filter: IgnoreFilter = IgnoreFilter(
            ignores, self.matcher, _split_absolute(self._cwd_abs)
        )
        self.plan: list[StaticCheck | WalkGroup] = plan_walks(self.includes)

    def run(self, batch_size: int = 1) -> TraversalCore:
        """
        The traversal generator. `batch_size` is the number of directories
        requested per `ReadDirectories`; it changes how much I/O can overlap,
        never the order of results.
        """
        state = TraversalState()
        for task in self.plan:
            if isinstance(task, StaticCheck):
                yield from self._check_static(task.pattern, state)
            else:
                yield from self._walk(task, state, max(1, batch_size))

    def _check_static(self, pattern: GlobPattern, state: TraversalState) -> TraversalCore:
        segments = pattern.base
        path = self._fs_path(pattern.root, segments)
        reply = yield StatPath(path, self.options.follow_symlinks)

        if isinstance(reply, OSError):
            self._read_failed(path, reply)
            return
        if reply is None:
            if self.options.strict:
                raise RootNotFoundError(pattern.raw, path)
            log.debug("No match for static pattern %r: %s does not exist", pattern.raw, path)
            return

        is_dir = bool(reply)
        if pattern.directory_only and not is_dir:
            return
        if not self._passes_type_filter(is_dir):
            return
        if self.ignore_filter.excludes(segments, is_dir, pattern.root):
            return
        display = None if self.options.absolute else unescape_pattern(pattern.raw)
        result = self._emit(pattern.root, segments, is_dir, state, display)
        if result is not None:
            yield result

    def _walk(self, group: WalkGroup, state: TraversalState, batch_size: int) -> TraversalCore:
        base = group.base
        for i in range(1, len(base) + 1):
            if self.ignore_filter.excludes(base[:i], True, group.root):
                log.debug("Skipping ignored base directory %s", "/".join(base[:i]))
                return

        chain: GitignoreChain | None = None
        if self.options.gitignore:
            chain = yield from self._load_gitignore_ancestors(group)
            if any(chain.excludes(base[:i], True) for i in range(1, len(base) + 1)):
                return

        state.begin_walk()
        state.queue.append(WorkItem(base, chain))
        while state.queue:
            batch = state.take_batch(batch_size)
            paths = tuple(self._fs_path(group.root, item.segments) for item in batch)
            listings = yield ReadDirectories(paths, self.options.follow_symlinks)

            for item, path, listing in zip(batch, paths, listings):
                if isinstance(listing, OSError):
                    self._read_failed(path, listing)
                    continue
                if not state.enter(listing.identity):
                    log.debug("Skipping already visited directory %s", path)
                    continue
                yield from self._process_listing(group, item, path, listing, state)

    def _process_listing(
        self,
        group: WalkGroup,
        item: WorkItem,
        path: str,
        listing: DirListing,
        state: TraversalState,
    ) -> TraversalCore:
        chain = item.gitignore
        if chain is not None and any(
            e.name == GITIGNORE_NAME and not e.is_dir for e in listing.entries
        ):
            text = yield ReadText(os.path.join(path, GITIGNORE_NAME))
            if text is not None:
                chain = chain.extend(item.segments, parse_gitignore(text))

        for entry in listing.entries:
            segments = item.segments + (entry.name,)
            if chain is not None and chain.excludes(segments, entry.is_dir):
                continue
            if self.ignore_filter.excludes(segments, entry.is_dir, group.root):
                continue

            if self._matches(group, segments, entry):
                result = self._emit(group.root, segments, entry.is_dir, state)
                if result is not None:
                    yield result

            if self._should_descend(group, segments, entry):
                state.queue.append(WorkItem(segments, chain))

    def _matches(self, group: WalkGroup, segments: tuple[str, ...], entry: DirEntry) -> bool:
        if not self._passes_type_filter(entry.is_dir):
            return False
        deep = self.options.deep
        for pattern in group.patterns:
            depth = len(segments) - len(pattern.base) - 1
            if depth < 0 or (deep is not None and depth > deep):
                continue
            if pattern.directory_only and not entry.is_dir:
                continue
            if self.matcher.match(pattern, segments, self.options.dot):
                return True
        return False

    def _should_descend(self, group: WalkGroup, segments: tuple[str, ...], entry: DirEntry) -> bool:
        if not entry.is_dir:
            return False
        deep = self.options.deep
        for pattern in group.patterns:
            # Reading a directory at depth d yields entries at depth d.
            if deep is not None and len(segments) - len(pattern.base) > deep:
                continue
            if self.matcher.match_prefix(pattern, segments, self.options.dot):
                return True
        return False

    def _passes_type_filter(self, is_dir: bool) -> bool:
        if self.options.only_directories and not is_dir:
            return False
        if self.options.only_files and is_dir:
            return False
        return True

    def _load_gitignore_ancestors(self, group: WalkGroup) -> Generator[Any, Any, GitignoreChain]:
        """Rules from `.gitignore` files between the cwd and the walk base (exclusive)."""
        chain = GitignoreChain()
        if group.root or ".." in group.base:
            return chain
        for i in range(len(group.base)):
            directory = group.base[:i]
            text = yield ReadText(os.path.join(self._fs_path("", directory), GITIGNORE_NAME))
            if text is not None:
                chain = chain.extend(directory, parse_gitignore(text))
        return chain

    def _read_failed(self, path: str, error: OSError) -> None:
        if isinstance(error, PermissionError):
            if self.options.strict:
                raise error
            log.warning("Skipping unreadable directory %s: %s", path, error.strerror or error)
            return
        if isinstance(error, (FileNotFoundError, NotADirectoryError)):
            log.debug("Skipping missing directory %s", path)
            return
        raise FileSystemError(path, error) from error

    def _emit(
        self,
        root: str,
        segments: tuple[str, ...],
        is_dir: bool,
        state: TraversalState,
        display: str | None = None,
    ) -> MatchResult | None:
        if display is None:
            display = self._display_path(root, segments)
        if display in state.emitted:
            return None
        state.emitted.add(display)
        return MatchResult(display, is_dir)

    def _fs_path(self, root: str, segments: Sequence[str]) -> str:
        if root:
            return root + "/".join(segments)
        if not segments:
            return self._cwd
        return os.path.join(self._cwd, *segments)

    def _display_path(self, root: str, segments: Sequence[str]) -> str:
        if self.options.absolute:
            if root:
                path = os.path.normpath(root + "/".join(segments))
            else:
                path = os.path.normpath(os.path.join(self._cwd_abs, *segments))
            return path.replace(os.sep, "/")
        if root:
            return root + "/".join(segments)
        return "/".join(segments) or "."
