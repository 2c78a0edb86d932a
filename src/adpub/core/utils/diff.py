"""Line-level comparison of two record contents"""

import difflib
from typing import NamedTuple


class LineStats(NamedTuple):
    added:     int
    deleted:   int
    unchanged: int


def line_stats(old: str, new: str) -> LineStats:
    """Count added/deleted/unchanged lines; a replaced line counts as one of each side."""
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines())
    added = deleted = unchanged = 0
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            unchanged += i2 - i1
        else:
            deleted += i2 - i1
            added += j2 - j1
    return LineStats(added, deleted, unchanged)


def unified_diff(old: str, new: str, from_label: str, to_label: str, context: int = 3) -> list[str]:
    """Unified diff lines (newline-terminated) from old to new content. Empty if identical."""
    old_lines = [line + "\n" for line in old.splitlines()]
    new_lines = [line + "\n" for line in new.splitlines()]
    return list(difflib.unified_diff(old_lines, new_lines, fromfile=from_label, tofile=to_label, n=context))
