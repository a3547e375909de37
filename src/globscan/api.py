"""
Public entry points: `glob`, `glob_sync` and their streaming variants.

`glob` and `glob_sync` return the complete, ordered match list or raise;
they never return partial results. The `iter_matches*` variants stream
`MatchResult`s as they are found.
"""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator, Iterator, Sequence
from typing import Any

from globscan.patterns.parser import PatternCache
from globscan.traversal.fs import iter_async, iter_sync
from globscan.traversal.traverser import Traverser
from globscan.traversal.types import GlobOptions, MatchResult


def _make_traverser(
    patterns: Sequence[str] | str,
    options: GlobOptions | None,
    cache: PatternCache | None,
    overrides: dict[str, Any],
) -> Traverser:
    if options is None:
        options = GlobOptions(**overrides)
    elif overrides:
        options = dataclasses.replace(options, **overrides)
    return Traverser(patterns, options, cache)


def iter_matches_sync(
    patterns: Sequence[str] | str,
    options: GlobOptions | None = None,
    *,
    cache: PatternCache | None = None,
    **overrides: Any,
) -> Iterator[MatchResult]:
    """Stream matches, reading directories on the calling thread."""
    traverser = _make_traverser(patterns, options, cache, overrides)
    return iter_sync(traverser.run(batch_size=1))


def iter_matches(
    patterns: Sequence[str] | str,
    options: GlobOptions | None = None,
    *,
    cache: PatternCache | None = None,
    **overrides: Any,
) -> AsyncIterator[MatchResult]:
    """
    Stream matches from the event loop. Directory reads run in worker threads,
    at most `options.concurrency` at a time. Close the iterator (for example
    with `contextlib.aclosing`) when stopping early.
    """
    traverser = _make_traverser(patterns, options, cache, overrides)
    return iter_async(traverser.run(batch_size=traverser.options.concurrency), traverser.options.concurrency)


def glob_sync(
    patterns: Sequence[str] | str,
    options: GlobOptions | None = None,
    *,
    cache: PatternCache | None = None,
    **overrides: Any,
) -> list[str]:
    """
    Return the paths matching `patterns`, blocking until the walk completes.

    Patterns starting with `!` are ignore rules. Keyword arguments override
    fields of `options`, e.g. `glob_sync("**/*.py", dot=True)`.
    """
    return [m.path for m in iter_matches_sync(patterns, options, cache=cache, **overrides)]


async def glob(
    patterns: Sequence[str] | str,
    options: GlobOptions | None = None,
    *,
    cache: PatternCache | None = None,
    **overrides: Any,
) -> list[str]:
    """Async counterpart of `glob_sync`, with the same results in the same order."""
    return [m.path async for m in iter_matches(patterns, options, cache=cache, **overrides)]
