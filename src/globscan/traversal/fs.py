"""
Filesystem access for the traverser.

The traverser never touches the filesystem itself. It yields request objects
and receives their replies, so one algorithm can be driven either by
`iter_sync` (blocking reads on the calling thread) or by `iter_async` (reads
in worker threads, awaited on the event loop, bounded by a semaphore).

Read failures are returned as `OSError` values rather than raised so the
traverser can apply its error policy in a fixed order.
"""

from __future__ import annotations

import asyncio
import os
import stat
from collections.abc import AsyncIterator, Callable, Generator, Iterator
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Union

from globscan.traversal.types import MatchResult


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool
    is_symlink: bool


@dataclass(frozen=True)
class DirListing:
    """Entries of one directory in lexical order, plus its `(st_dev, st_ino)`."""

    identity: tuple[int, int]
    entries: tuple[DirEntry, ...]


@dataclass(frozen=True)
class ReadDirectories:
    """Reply: a list with one `DirListing` or `OSError` per path, in order."""

    paths: tuple[str, ...]
    follow_symlinks: bool = True


@dataclass(frozen=True)
class StatPath:
    """Reply: True for a directory, False for anything else, `None` if missing, or an `OSError`."""

    path: str
    follow_symlinks: bool = True


@dataclass(frozen=True)
class ReadText:
    """Reply: the file's text, or `None` if it is missing, unreadable or not UTF-8."""

    path: str


Request = Union[ReadDirectories, StatPath, ReadText]

TraversalCore = Generator[Union[MatchResult, Request], Any, None]


def read_directory(path: str, follow_symlinks: bool = True) -> DirListing:
    st = os.stat(path)
    entries: list[DirEntry] = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
            except OSError:
                # Broken or unreadable link target: report it as a plain entry.
                is_dir = False
            entries.append(DirEntry(entry.name, is_dir, entry.is_symlink()))
    entries.sort(key=lambda e: e.name)
    return DirListing((st.st_dev, st.st_ino), tuple(entries))


def stat_path(path: str, follow_symlinks: bool = True) -> bool | None:
    try:
        st = os.stat(path, follow_symlinks=follow_symlinks)
    except (FileNotFoundError, NotADirectoryError):
        if follow_symlinks and os.path.lexists(path):
            # Dangling symlink: the link itself exists.
            return False
        return None
    return stat.S_ISDIR(st.st_mode)


def read_text(path: str) -> str | None:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError):
        return None


def _read_or_error(path: str, follow_symlinks: bool) -> DirListing | OSError:
    try:
        return read_directory(path, follow_symlinks)
    except OSError as e:
        return e


def _stat_or_error(path: str, follow_symlinks: bool) -> bool | None | OSError:
    try:
        return stat_path(path, follow_symlinks)
    except OSError as e:
        return e


def perform_sync(request: Request) -> Any:
    if isinstance(request, ReadDirectories):
        return [_read_or_error(p, request.follow_symlinks) for p in request.paths]
    if isinstance(request, StatPath):
        return _stat_or_error(request.path, request.follow_symlinks)
    if isinstance(request, ReadText):
        return read_text(request.path)
    raise TypeError(f"Unknown filesystem request: {request!r}")


async def _run_bounded(
    calls: list[tuple[Callable[..., Any], tuple[Any, ...]]], semaphore: asyncio.Semaphore
) -> list[Any]:
    """
    Run blocking calls in worker threads, at most `semaphore` at a time. On
    cancellation, calls not yet started are dropped and calls already running
    are awaited before the cancellation propagates.
    """
    stopping = False

    async def bounded(func: Callable[..., Any], args: tuple[Any, ...]) -> Any:
        async with semaphore:
            if stopping:
                return None
            return await asyncio.to_thread(func, *args)

    tasks = [asyncio.ensure_future(bounded(func, args)) for func, args in calls]
    if not tasks:
        return []
    try:
        await asyncio.wait(tasks)
    except asyncio.CancelledError:
        stopping = True
        await asyncio.wait(tasks)
        raise
    return [task.result() for task in tasks]


async def perform_async(request: Request, semaphore: asyncio.Semaphore) -> Any:
    if isinstance(request, ReadDirectories):
        return await _run_bounded(
            [(_read_or_error, (p, request.follow_symlinks)) for p in request.paths], semaphore
        )
    if isinstance(request, StatPath):
        (result,) = await _run_bounded(
            [(_stat_or_error, (request.path, request.follow_symlinks))], semaphore
        )
        return result
    if isinstance(request, ReadText):
        (result,) = await _run_bounded([(read_text, (request.path,))], semaphore)
        return result
    raise TypeError(f"Unknown filesystem request: {request!r}")


def iter_sync(core: TraversalCore) -> Iterator[MatchResult]:
    """Drive a traversal core with blocking reads, yielding its results."""
    with closing(core):
        reply: Any = None
        while True:
            try:
                item = core.send(reply)
            except StopIteration:
                return
            if isinstance(item, MatchResult):
                reply = None
                yield item
            else:
                reply = perform_sync(item)


async def iter_async(core: TraversalCore, concurrency: int) -> AsyncIterator[MatchResult]:
    """
    Drive a traversal core on the event loop. Each batch of directory reads is
    a suspension point. If the consumer stops early or the task is cancelled,
    reads already issued finish in their threads (closing their handles) and
    the core is closed so no new reads are issued.
    """
    semaphore = asyncio.Semaphore(concurrency)
    with closing(core):
        reply: Any = None
        while True:
            try:
                item = core.send(reply)
            except StopIteration:
                return
            if isinstance(item, MatchResult):
                reply = None
                yield item
            else:
                reply = await perform_async(item, semaphore)
