"""`.gitignore` handling using pathspec."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pathspec

GITIGNORE_NAME = ".gitignore"


def parse_gitignore(text: str) -> pathspec.PathSpec | None:
    """
    Compile the contents of a `.gitignore` file, or return `None` if it has no
    rules (only blank lines and comments).
    """
    lines = [line for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


@dataclass(frozen=True)
class GitignoreChain:
    """
    The `.gitignore` specs in effect for a directory: one entry per ancestor
    directory that has rules, outermost first. Each spec applies to paths
    relative to the directory it was found in.
    """

    specs: tuple[tuple[tuple[str, ...], pathspec.PathSpec], ...] = ()

    def extend(self, directory: Sequence[str], spec: pathspec.PathSpec | None) -> GitignoreChain:
        if spec is None:
            return self
        return GitignoreChain(self.specs + ((tuple(directory), spec),))

    def excludes(self, segments: Sequence[str], is_dir: bool) -> bool:
        for directory, spec in self.specs:
            if tuple(segments[: len(directory)]) != directory:
                continue
            rel = "/".join(segments[len(directory) :])
            if not rel:
                continue
            if is_dir:
                rel += "/"
            if spec.match_file(rel):
                return True
        return False

    def __bool__(self) -> bool:
        return bool(self.specs)
