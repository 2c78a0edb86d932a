"""Header-block recognition: heading markers, author/revision lines and attribute lines"""

import re
from dataclasses import dataclass, field


TITLE_RE = re.compile(r'^=[ \t]+(\S.*?)(?:[ \t]+=)?\s*$')
SECTION_RE = re.compile(r'^(={2,})[ \t]+(\S.*?)(?:[ \t]+\1)?\s*$')
ATTRIBUTE_RE = re.compile(r'^:(!?)([^:!\s][^:!]*?)(!?):(?:[ \t]+(.*?))?\s*$')
COMMENT_RE = re.compile(r'^//(?!//)')
ENTRY_RE = re.compile(r'^(?P<name>[^<>]*?)\s*(?:<(?P<email>[^<>\s]+)>)?$')
NAME_RE = re.compile(r"^[^\W\d_]+(?:[ .'\-]+[^\W\d_]+)*\.?$")
SHORT_NAME_RE = re.compile(r'^[^\W\d_]+(?:\s+[^\W\d_]+)?$')
REVISION_RE = re.compile(
    r'^(?P<v>v?)(?P<version>\d[\w.\-]*)'
    r'(?:\s*,\s*(?P<date>[^,:]+?))?'
    r'(?:\s*[,:]\s*(?P<publisher>\S.*?))?\s*$'
)

INDEX_CARD_MARKER = 'index card'
MAX_NAME_WORDS = 4


@dataclass
class Revision:
    version:   str | None = None
    date:      str | None = None
    publisher: str | None = None


@dataclass
class Header:
    """Lines recognized at the top of a document or section block."""
    title:      str | None = None
    level:      int | None = None       # marker length; None for a document title
    authors:    list[str] = field(default_factory=list)
    revision:   Revision = field(default_factory=Revision)
    attributes: list[tuple[str, str]] = field(default_factory=list)
    consumed:   int = 0                 # number of leading lines that belong to the header


def is_index_card_marker(line: str) -> bool:
    return line.strip().lower() == INDEX_CARD_MARKER


def parse_attribute(line: str) -> tuple[str, str] | None:
    """Return (key, value) for a ':key: value' line, ('', '') for an unset line, else None."""
    m = ATTRIBUTE_RE.match(line)
    if not m:
        return None
    if m.group(1) or m.group(3):
        return '', ''
    return m.group(2).strip(), (m.group(4) or '').strip()


def _author_entry(entry: str, short: bool = False) -> str | None:
    """Return the author name from 'Name' or 'Name <email>', else None."""
    m = ENTRY_RE.match(entry.strip())
    if not m or not m.group('name'):
        return None
    name = m.group('name').strip()
    if m.group('email'):
        return name
    if short:
        return name if SHORT_NAME_RE.match(name) else None
    if NAME_RE.match(name) and len(name.split()) <= MAX_NAME_WORDS:
        return name
    return None


def parse_author_line(line: str) -> list[str] | None:
    """Names from a document author line ('A <a@x>; B'), or None if the line is not one."""
    text = line.strip()
    if not text or is_index_card_marker(text) or text.startswith(':') or text.startswith('='):
        return None
    sep = ';' if ';' in text else ','
    names = [_author_entry(part) for part in text.split(sep)]
    if not names or any(n is None for n in names):
        return None
    return names


def parse_section_author(line: str) -> str | None:
    """A single standalone author right after a section heading; deliberately narrow."""
    text = line.strip()
    if not text or text.startswith(':') or is_index_card_marker(text):
        return None
    return _author_entry(text, short=True)


def parse_revision_line(line: str) -> Revision | None:
    """'version, date, publisher' / 'version, date: publisher' / 'vN'; missing trailing fields stay None."""
    m = REVISION_RE.match(line.strip())
    if not m:
        return None
    if not (m.group('v') or m.group('date') or m.group('publisher')):
        return None
    return Revision(version=m.group('version'), date=m.group('date'), publisher=m.group('publisher'))


def _has_body(lines: list[str], start: int) -> bool:
    """True when a line from start on is neither blank, a comment nor an attribute."""
    for line in lines[start:]:
        if line.strip() and not COMMENT_RE.match(line) and parse_attribute(line) is None:
            return True
    return False


def parse_header(lines: list[str], document: bool = True) -> Header:
    """Recognize the header block at the top of lines.

    A document header is a '= Title' line (after optional blank lines), then an
    optional author line, an optional revision line and attribute lines. A
    section header is a '== Title' (or deeper) line, then at most one standalone
    author line and attribute lines. The section author line only counts when
    body text follows it; otherwise it is the body. Attribute lines run until
    the first blank or non-attribute line; comment lines are skipped inside the
    block. A closing marker matching the opening one is dropped from a title.
    """
    header = Header()
    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    if i >= len(lines):
        return header

    if document:
        m = TITLE_RE.match(lines[i])
        if not m:
            return header
        header.title = m.group(1)
    else:
        m = SECTION_RE.match(lines[i])
        if not m:
            return header
        header.level = len(m.group(1))
        header.title = m.group(2)
    i += 1

    if document:
        if i < len(lines) and (names := parse_author_line(lines[i])) is not None:
            header.authors.extend(names)
            i += 1
        if i < len(lines) and (revision := parse_revision_line(lines[i])) is not None:
            header.revision = revision
            i += 1
    elif i < len(lines) and (name := parse_section_author(lines[i])) is not None:
        if _has_body(lines, i + 1):
            header.authors.append(name)
            i += 1

    while i < len(lines):
        line = lines[i]
        if COMMENT_RE.match(line):
            i += 1
            continue
        attr = parse_attribute(line)
        if attr is None:
            break
        if attr[0]:
            header.attributes.append(attr)
        i += 1

    header.consumed = i
    return header
