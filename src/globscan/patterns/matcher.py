"""
Matching of path segments against compiled patterns.

Single segments use a two-pointer scan that backtracks only to the most
recent `*`. Whole paths are matched by a reachability search over
(pattern-position, path-position) states; each state is expanded at most
once, so cost is bounded by segments x names even for `**/**/**/x`.
"""

from __future__ import annotations

from collections.abc import Sequence

from globscan.patterns.types import AnyChar, Atom, CharacterClass, GlobPattern, Segment, SingleWildcard


class SegmentMatcher:
    """
    Matches path name sequences against `GlobPattern`s.

    `case_sensitive` applies uniformly to literal characters and character
    classes. `steps` counts expanded search states, which bounds the cost of
    the last calls and is useful for diagnostics.
    """

    def __init__(self, case_sensitive: bool = True) -> None:
        self.case_sensitive: bool = case_sensitive
        self.steps: int = 0

    def match_segment(self, segment: Segment, name: str, dot: bool = False) -> bool:
        """Match one path component against one non-globstar segment."""
        if name.startswith(".") and not dot and not segment.starts_with_dot:
            return False
        return self._match_atoms(segment.atoms, name)

    def match(self, pattern: GlobPattern, names: Sequence[str], dot: bool = False) -> bool:
        """True if the whole of `names` matches the whole of `pattern`."""
        return self._search(pattern.segments, names, dot, prefix=False)

    def match_prefix(self, pattern: GlobPattern, names: Sequence[str], dot: bool = False) -> bool:
        """
        True if some path below `names` could match `pattern`, i.e. the
        directory `names` is worth descending into.
        """
        return self._search(pattern.segments, names, dot, prefix=True)

    def _search(
        self, segments: Sequence[Segment], names: Sequence[str], dot: bool, prefix: bool
    ) -> bool:
        n_segs = len(segments)
        n_names = len(names)
        # States already expanded. Reaching one again cannot produce a new
        # outcome, so failed (segment, name) pairs are never retried.
        seen: set[tuple[int, int]] = set()
        stack: list[tuple[int, int]] = [(0, 0)]
        while stack:
            state = stack.pop()
            if state in seen:
                continue
            seen.add(state)
            self.steps += 1
            i, j = state

            if j == n_names:
                if prefix:
                    # More names may follow as long as pattern segments remain.
                    if i < n_segs:
                        return True
                elif i == n_segs:
                    return True
            if i == n_segs:
                continue

            segment = segments[i]
            if segment.is_globstar:
                # Push the longer consumption first so zero consumption is tried first.
                if j < n_names and (dot or not names[j].startswith(".")):
                    stack.append((i, j + 1))
                stack.append((i + 1, j))
            elif j < n_names and self.match_segment(segment, names[j], dot):
                stack.append((i + 1, j + 1))
        return False

    def _match_atoms(self, atoms: Sequence[Atom], name: str) -> bool:
        a = 0
        n = 0
        star_a = -1
        star_n = 0
        while n < len(name):
            if a < len(atoms):
                atom = atoms[a]
                if isinstance(atom, SingleWildcard):
                    star_a = a
                    star_n = n
                    a += 1
                    continue
                if self._match_char(atom, name[n]):
                    a += 1
                    n += 1
                    continue
            if star_a >= 0:
                # Let the last `*` absorb one more character and retry.
                star_n += 1
                n = star_n
                a = star_a + 1
                continue
            return False
        while a < len(atoms) and isinstance(atoms[a], SingleWildcard):
            a += 1
        return a == len(atoms)

    def _match_char(self, atom: Atom, ch: str) -> bool:
        if isinstance(atom, str):
            if self.case_sensitive:
                return atom == ch
            return atom.lower() == ch.lower()
        if isinstance(atom, AnyChar):
            return True
        if isinstance(atom, CharacterClass):
            return atom.contains(ch, self.case_sensitive)
        return False
