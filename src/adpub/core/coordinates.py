"""Record addresses (kind:author:slug) and newest-version resolution"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from adpub.core.models import ADDRESSABLE_MAX, ADDRESSABLE_MIN, Record


logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Coordinate:
    """Stable address of a replaceable record; distinct versions share it."""
    kind:       int
    author_key: str
    slug:       str

    def __str__(self) -> str:
        return f"{self.kind}:{self.author_key}:{self.slug}"

    def a_tag(self) -> tuple[str, str]:
        return ('a', str(self))

    @classmethod
    def parse(cls, value: str) -> "Coordinate":
        """Parse 'kind:author_key:slug'; the slug may itself contain ':'."""
        parts = value.split(':', 2)
        if len(parts) != 3 or not parts[0].isdigit() or not parts[1] or not parts[2]:
            raise ValueError(f"Invalid coordinate: {value!r}")
        return cls(int(parts[0]), parts[1], parts[2])


def is_addressable(kind: int) -> bool:
    return ADDRESSABLE_MIN <= kind <= ADDRESSABLE_MAX


def coordinate_of(record: Record) -> Optional[Coordinate]:
    """Coordinate for an addressable record with a d tag and author key, else None."""
    if not is_addressable(record.kind) or not record.author_key:
        return None
    slug = record.tag_value('d')
    if not slug:
        return None
    return Coordinate(record.kind, record.author_key, slug)


def child_coordinates(record: Record) -> list[Coordinate]:
    """Coordinates named by the record's a tags, in tag order; malformed values are skipped."""
    children = []
    for value in record.tag_values('a'):
        try:
            children.append(Coordinate.parse(value))
        except ValueError:
            logger.debug("Skipping malformed a tag %r on %s", value, coordinate_of(record))
    return children


def _newer(candidate: Record, current: Record) -> bool:
    """True when candidate should replace current at the same coordinate."""
    if candidate.created_at is None:
        return current.created_at is None
    if current.created_at is None:
        return True
    return candidate.created_at > current.created_at


def resolve(versions: Iterable[Record]) -> dict[Coordinate, Record]:
    """Reduce versions to the newest record per coordinate.

    Greatest created_at wins; equal timestamps keep the first seen. A record
    without created_at loses to any record with one, and between two without,
    the later one wins. Records without a coordinate are ignored. Keys keep
    first-seen order, so resolving a resolved set changes nothing.
    """
    chosen: dict[Coordinate, Record] = {}
    duplicates = 0
    for record in versions:
        coord = coordinate_of(record)
        if coord is None:
            continue
        current = chosen.get(coord)
        if current is None:
            chosen[coord] = record
            continue
        duplicates += 1
        if _newer(record, current):
            chosen[coord] = record
    if duplicates:
        logger.debug("Resolved %d superseded versions across %d coordinates", duplicates, len(chosen))
    return chosen


def dedupe(records: Iterable[Record]) -> list[Record]:
    """Keep one winning version per coordinate at its first-seen position; pass other records through."""
    records = list(records)
    winners = resolve(records)
    out: list[Record] = []
    emitted: set[Coordinate] = set()
    passthrough = 0
    for record in records:
        coord = coordinate_of(record)
        if coord is None:
            out.append(record)
            passthrough += 1
        elif coord not in emitted:
            out.append(winners[coord])
            emitted.add(coord)
    logger.debug(
        "Deduplicated %d records: %d addressable kept, %d passed through",
        len(records), len(emitted), passthrough,
    )
    return out


def walk(root: Record, records: Iterable[Record]) -> Iterator[tuple[int, Record]]:
    """Yield (depth, record) from root down its a tags, in tag order.

    Children are looked up among the newest versions of records. Missing
    children are skipped; a coordinate already on the current path is not
    revisited.
    """
    index = resolve(records)

    def visit(record: Record, depth: int, trail: frozenset) -> Iterator[tuple[int, Record]]:
        yield depth, record
        for child in child_coordinates(record):
            if child in trail:
                logger.warning("Cycle at %s; not descending", child)
                continue
            target = index.get(child)
            if target is None:
                logger.info("Missing child record %s", child)
                continue
            yield from visit(target, depth + 1, trail | {child})

    start = coordinate_of(root)
    yield from visit(root, 0, frozenset({start} if start else ()))
