"""Compare published and freshly compiled records by coordinate"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from adpub.core.coordinates import Coordinate, resolve
from adpub.core.models import Record
from adpub.core.utils.diff import LineStats, line_stats, unified_diff
from adpub.core.utils.hashing import canonical_json, sha256


class ChangeStatus(str, Enum):
    created = "created"
    updated = "updated"
    unchanged = "unchanged"
    removed = "removed"


@dataclass(frozen=True)
class Change:
    status:     ChangeStatus
    coordinate: Coordinate
    previous:   Optional[Record] = None
    current:    Optional[Record] = None

    def content_diff(self) -> list[str]:
        """Unified diff of content between the two versions (empty unless both exist)."""
        if self.previous is None or self.current is None:
            return []
        slug = self.coordinate.slug
        return unified_diff(self.previous.content, self.current.content, f"a/{slug}", f"b/{slug}")

    def line_stats(self) -> LineStats:
        """Added/deleted/unchanged content lines between the two versions."""
        return line_stats(
            self.previous.content if self.previous else "",
            self.current.content if self.current else "",
        )


def record_digest(record: Record) -> str:
    """SHA-256 over kind, tags and content; author and timestamp excluded."""
    return sha256(canonical_json([record.kind, [list(t) for t in record.tags], record.content]))


def event_id(record: Record) -> str:
    """Hex SHA-256 of [0, author_key, created_at, kind, tags, content]. Requires both base fields."""
    if not record.author_key or record.created_at is None:
        raise ValueError("event_id needs author_key and created_at")
    return sha256(canonical_json([
        0, record.author_key, record.created_at, record.kind,
        [list(t) for t in record.tags], record.content,
    ]))


def reconcile(previous: Iterable[Record], current: Iterable[Record]) -> list[Change]:
    """Status per coordinate: current coordinates in order, then removed ones."""
    old = resolve(previous)
    new = resolve(current)
    changes = []
    for coord, record in new.items():
        prior = old.get(coord)
        if prior is None:
            status = ChangeStatus.created
        elif record_digest(prior) == record_digest(record):
            status = ChangeStatus.unchanged
        else:
            status = ChangeStatus.updated
        changes.append(Change(status, coord, prior, record))
    for coord, record in old.items():
        if coord not in new:
            changes.append(Change(ChangeStatus.removed, coord, record, None))
    return changes


def summarize(changes: Iterable[Change]) -> dict[str, int]:
    """Count changes per status, every status present."""
    counts = {s.value: 0 for s in ChangeStatus}
    for change in changes:
        counts[change.status.value] += 1
    return counts
