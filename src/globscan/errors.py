"""Exception types raised by globscan."""

from __future__ import annotations


class GlobError(Exception):
    """Base class for all globscan errors."""


class PatternSyntaxError(GlobError, ValueError):
    """
    A pattern could not be compiled. Raised before any filesystem access.

    `position` is the index into the raw pattern where the problem was found.
    """

    def __init__(self, pattern: str, position: int, reason: str) -> None:
        self.pattern: str = pattern
        self.position: int = position
        self.reason: str = reason
        super().__init__(f"Invalid pattern {pattern!r} at position {position}: {reason}")


class RootNotFoundError(GlobError, FileNotFoundError):
    """The target of a fully static pattern does not exist (strict mode only)."""

    def __init__(self, pattern: str, path: str) -> None:
        self.pattern: str = pattern
        self.path: str = path
        super().__init__(f"Path not found for pattern {pattern!r}: {path}")


class FileSystemError(GlobError):
    """An I/O failure that aborts the whole call. The original `OSError` is chained."""

    def __init__(self, path: str, error: OSError) -> None:
        self.path: str = path
        self.errno: int | None = error.errno
        super().__init__(f"Failed to read {path}: {error.strerror or error}")
