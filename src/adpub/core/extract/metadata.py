"""Header metadata extraction, document classification and metadata-to-tag mapping"""

import logging
from dataclasses import dataclass

from adpub.core.extract.header import TITLE_RE, Header, is_index_card_marker, parse_header
from adpub.core.extract.sections import iter_headings, split_sections
from adpub.core.models import DocumentForm, Metadata, Section


logger = logging.getLogger(__name__)

# attribute key -> Metadata field, for single-valued keys (last one wins)
FIELD_KEYS = {
    'version':       'version',
    'revnumber':     'version',
    'version-label': 'version',
    'edition':       'edition',
    'revremark':     'edition',
    'published_on':  'publication_date',
    'date':          'publication_date',
    'revdate':       'publication_date',
    'published_by':  'publisher',
    'publisher':     'publisher',
    'image':         'image',
    'cover':         'image',
    'isbn':          'isbn',
    'source':        'source',
    'type':          'type',
    'auto-update':   'auto_update',
}
RESERVED_KEYS = frozenset({'title', 'd', 'a'})


@dataclass(frozen=True)
class Extraction:
    metadata: Metadata
    body:     str
    title:    str | None = None


@dataclass(frozen=True)
class SmartExtraction:
    form:     DocumentForm
    metadata: Metadata
    body:     str


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(',') if v.strip()]


def _body(lines: list[str]) -> str:
    """Join lines, dropping leading blank lines and trailing whitespace."""
    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    return "\n".join(lines[i:]).rstrip()


def build_metadata(header: Header) -> Metadata:
    """Merge header lines and attributes into Metadata.

    Header authors come first, then each author attribute. Tags are all tags
    values followed by all keywords values. The revision line wins over
    version and publisher attributes; a date attribute wins over the revision
    date. Unknown keys are kept in order as passthrough attributes.
    """
    authors = list(header.authors)
    fields: dict[str, str] = {}
    summary = description = None
    tags: list[str] = []
    keywords: list[str] = []
    passthrough: list[tuple[str, str]] = []

    for key, value in header.attributes:
        name = key.lower()
        if name in RESERVED_KEYS:
            logger.debug("Dropping reserved attribute %r", key)
            continue
        if not value:
            continue
        if name == 'author':
            authors.append(value)
        elif name == 'summary':
            summary = value
        elif name == 'description':
            description = value
        elif name == 'tags':
            tags.extend(_split_list(value))
        elif name == 'keywords':
            keywords.extend(_split_list(value))
        elif name in FIELD_KEYS:
            fields[FIELD_KEYS[name]] = value
        else:
            passthrough.append((key, value))

    rev = header.revision
    if rev.version:
        fields['version'] = rev.version
    if rev.publisher:
        fields['publisher'] = rev.publisher
    if rev.date:
        fields.setdefault('publication_date', rev.date)

    if summary and description and description != summary:
        summary = f"{summary} {description}"

    return Metadata(
        title=header.title,
        authors=authors,
        summary=summary or description,
        tags=tags + keywords,
        attributes=passthrough,
        **fields,
    )


def extract(text: str, document: bool = True) -> Extraction:
    """Split text into header metadata and body. Empty text yields empty metadata."""
    if not text.strip():
        return Extraction(Metadata(), "")
    lines = text.splitlines()
    header = parse_header(lines, document=document)
    return Extraction(build_metadata(header), _body(lines[header.consumed:]), header.title)


def extract_section(section: Section) -> Extraction:
    """Metadata and body of one section; the heading title is the fallback title."""
    ext = extract(section.text, document=False)
    if ext.title is None:
        return Extraction(ext.metadata, ext.body, section.title)
    return ext


def _is_index_card(body: str) -> bool:
    lines = [line for line in body.splitlines() if line.strip()]
    return len(lines) == 1 and is_index_card_marker(lines[0])


def classify(text: str) -> DocumentForm:
    """Decide the document's form from its first line and its headings."""
    first = next((line for line in text.splitlines() if line.strip()), None)
    if first is not None and TITLE_RE.match(first):
        return DocumentForm.index_card if _is_index_card(extract(text).body) else DocumentForm.article
    if any(h.level == 1 for h in iter_headings(text)):
        return DocumentForm.none
    if split_sections(text, 2):
        return DocumentForm.scattered_notes
    return DocumentForm.none


def extract_smart(text: str) -> SmartExtraction:
    """Classify text and extract metadata the way its form needs."""
    form = classify(text)
    if form in (DocumentForm.article, DocumentForm.index_card):
        ext = extract(text)
        return SmartExtraction(form, ext.metadata, ext.body)
    if form is DocumentForm.scattered_notes:
        first = split_sections(text, 2)[0]
        return SmartExtraction(form, Metadata(title=first.title), text)
    return SmartExtraction(form, Metadata(), text)


def metadata_to_tags(metadata: Metadata) -> list[tuple[str, str]]:
    """Ordered tags for a record's metadata; the title tag is left to the caller."""
    tags = [('author', a) for a in metadata.authors]
    for name, value in (
        ('version',      metadata.version),
        ('edition',      metadata.edition),
        ('published_on', metadata.publication_date),
        ('published_by', metadata.publisher),
        ('summary',      metadata.summary),
        ('image',        metadata.image),
        ('i',            metadata.isbn),
        ('source',       metadata.source),
        ('type',         metadata.type),
        ('auto-update',  metadata.auto_update),
    ):
        if value:
            tags.append((name, value))
    tags.extend(('t', t) for t in metadata.tags)
    tags.extend(metadata.attributes)
    return tags
