"""
Glob-pattern file discovery with ignore rules, depth limits and matching
sync and async entry points.

Usage::

    from globscan import glob, glob_sync

    files = glob_sync(["src/**/*.ts", "!**/*.test.ts"])
    dirs = await glob("src/*", only_directories=True)
"""

from globscan.api import glob, glob_sync, iter_matches, iter_matches_sync
from globscan.errors import FileSystemError, GlobError, PatternSyntaxError, RootNotFoundError
from globscan.patterns.parser import PatternCache
from globscan.patterns.syntax import escape_path, is_dynamic_pattern
from globscan.traversal.types import GlobOptions, MatchResult

__all__ = [
    "FileSystemError",
    "GlobError",
    "GlobOptions",
    "MatchResult",
    "PatternCache",
    "PatternSyntaxError",
    "RootNotFoundError",
    "escape_path",
    "glob",
    "glob_sync",
    "is_dynamic_pattern",
    "iter_matches",
    "iter_matches_sync",
]
