"""Raw-text grouping into sections by heading marker length"""

import re
from dataclasses import dataclass
from typing import Iterator

from adpub.core.models import Section


HEADING_RE = re.compile(r'^(=+)[ \t]+(\S.*?)(?:[ \t]+\1)?\s*$')
DELIMITER_RE = re.compile(r'^(-{4,}|\.{4,}|\+{4,}|_{4,}|\*{4,}|/{4,}|={4,})[ \t]*$')
FENCE_RE = re.compile(r'^(`{3,})')


@dataclass(frozen=True)
class Heading:
    level: int      # marker length; 1 is the document title
    title: str
    line:  str
    start: int      # offset of the heading line
    end:   int      # offset just past its line break


def _lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (offset, line) with line endings kept."""
    offset = 0
    for line in text.splitlines(keepends=True):
        yield offset, line
        offset += len(line)


def iter_headings(text: str) -> Iterator[Heading]:
    """Yield heading lines of any level, skipping those inside delimited blocks."""
    closer: str | None = None
    for offset, raw in _lines(text):
        line = raw.rstrip('\r\n')
        if closer is not None:
            if line.strip() == closer:
                closer = None
            continue
        if m := DELIMITER_RE.match(line):
            closer = m.group(1)
            continue
        if m := FENCE_RE.match(line):
            closer = m.group(1)
            continue
        if m := HEADING_RE.match(line):
            yield Heading(len(m.group(1)), m.group(2), line, offset, offset + len(raw))


def split_preamble(body: str, level: int) -> tuple[str, list[Section]]:
    """Split body at headings of exactly level; return (text before the first one, sections).

    Each section's text runs from its heading line to just before the next
    heading of the same level. Deeper and shallower headings stay inside.
    """
    marks = [h for h in iter_headings(body) if h.level == level]
    if not marks:
        return body, []

    sections = []
    for i, h in enumerate(marks):
        end = marks[i + 1].start if i + 1 < len(marks) else len(body)
        sections.append(Section(
            level=level, title=h.title, heading=h.line,
            text=body[h.start:end], start=h.start, end=end,
        ))
    return body[:marks[0].start], sections


def split_sections(body: str, level: int) -> list[Section]:
    """Sections at exactly level, in document order."""
    return split_preamble(body, level)[1]
