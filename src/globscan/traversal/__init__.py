from globscan.traversal.ignore import IgnoreFilter
from globscan.traversal.traverser import Traverser
from globscan.traversal.types import GlobOptions, MatchResult

__all__ = [
    "GlobOptions",
    "IgnoreFilter",
    "MatchResult",
    "Traverser",
]
