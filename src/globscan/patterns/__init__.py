from globscan.patterns.matcher import SegmentMatcher
from globscan.patterns.parser import PatternCache, parse_pattern
from globscan.patterns.syntax import escape_path, is_dynamic_pattern, unescape_pattern
from globscan.patterns.types import GlobPattern, Segment

__all__ = [
    "GlobPattern",
    "PatternCache",
    "Segment",
    "SegmentMatcher",
    "escape_path",
    "is_dynamic_pattern",
    "parse_pattern",
    "unescape_pattern",
]
