"""Options, results and per-call state for traversal."""

from __future__ import annotations

import os
import threading
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

from globscan.traversal.gitignore import GitignoreChain

DEFAULT_CONCURRENCY = 8


@dataclass
class GlobOptions:
    """
    Options for a glob call.

    `ignore` patterns are merged with the `!`-prefixed patterns of the main list.
    `deep=None` means unbounded; `deep=0` only reads each pattern's base directory.
    `cwd=None` means the process working directory at call time.
    `strict=True` surfaces permission errors and missing static targets
    instead of skipping them.
    `concurrency` bounds the number of directory reads in flight (async only).
    """

    ignore: list[str] = field(default_factory=list)
    dot: bool = False
    absolute: bool = False
    deep: int | None = None
    only_directories: bool = False
    only_files: bool = False
    cwd: str | Path | None = None
    case_sensitive: bool = True
    follow_symlinks: bool = True
    strict: bool = False
    gitignore: bool = False
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self) -> None:
        if isinstance(self.ignore, str):
            self.ignore = [self.ignore]
        if self.deep is not None and self.deep < 0:
            raise ValueError(f"deep must be a non-negative integer, got {self.deep}")
        if self.only_directories and self.only_files:
            raise ValueError("only_directories and only_files are mutually exclusive")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    @property
    def effective_cwd(self) -> str:
        """The base directory as a string, defaulting to the current directory."""
        return os.fspath(self.cwd) if self.cwd is not None else os.getcwd()


@dataclass(frozen=True)
class MatchResult:
    path: str
    is_directory: bool


@dataclass(frozen=True)
class WorkItem:
    """A directory waiting to be read, as segments relative to the cwd (or to `/`)."""

    segments: tuple[str, ...]
    gitignore: GitignoreChain | None = None


class TraversalState:
    """
    Mutable state of one glob call: pending directories, visited directory
    identities (for symlink cycles) and paths already emitted.
    """

    def __init__(self) -> None:
        self.queue: deque[WorkItem] = deque()
        self.emitted: set[str] = set()
        self._visited: set[tuple[int, int]] = set()
        self._lock = threading.Lock()

    def begin_walk(self) -> None:
        """Start a new walk group. Identities are tracked per group; emitted paths per call."""
        with self._lock:
            self._visited.clear()

    def enter(self, identity: tuple[int, int]) -> bool:
        """Record a directory identity; False if it was already visited."""
        with self._lock:
            if identity in self._visited:
                return False
            self._visited.add(identity)
            return True

    def take_batch(self, size: int) -> list[WorkItem]:
        batch: list[WorkItem] = []
        while self.queue and len(batch) < size:
            batch.append(self.queue.popleft())
        return batch
