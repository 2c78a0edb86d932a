"""Compile a document into a tree of addressable index and content records"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from adpub.core.coordinates import Coordinate, resolve
from adpub.core.extract.metadata import extract, extract_section, metadata_to_tags
from adpub.core.extract.sections import split_preamble
from adpub.core.models import (
    BaseFields, CompileResult, DocumentForm, OutlineNode,
    PreamblePolicy, Record, RecordKind, Section,
)
from adpub.core.utils.slug import compose
from adpub.core.validate import validate_structure


logger = logging.getLogger(__name__)

SUPPORTED_PARSE_LEVELS = (2, 3, 4, 5)
RESERVED_EXTRA_TAGS = frozenset({'d', 'title', 'a'})
# extra tags with these names replace the metadata tag instead of adding to it
SINGLE_VALUED_TAGS = frozenset({
    'version', 'edition', 'published_on', 'published_by', 'summary',
    'image', 'i', 'source', 'type', 'auto-update',
})

Tag = tuple[str, ...]


def validate_parse_level(level) -> bool:
    """True when level is a supported split depth (an int in 2..5)."""
    return isinstance(level, int) and not isinstance(level, bool) and level in SUPPORTED_PARSE_LEVELS


def _join(lead: str, text: str) -> str:
    lead = lead.strip()
    if lead and text:
        return f"{lead}\n\n{text}"
    return lead or text


def _extra_tags(extra_tags: Sequence[Sequence[str]]) -> list[Tag]:
    tags = []
    for raw in extra_tags:
        tag = tuple(str(v) for v in raw)
        if not tag or not tag[0]:
            logger.warning("Ignoring empty extra tag %r", raw)
        elif tag[0] in RESERVED_EXTRA_TAGS:
            logger.warning("Ignoring extra tag %r; the compiler sets it", tag[0])
        else:
            tags.append(tag)
    return tags


def _merge_tags(meta_tags: list[Tag], extra: list[Tag]) -> list[Tag]:
    """Metadata tags followed by extra tags; single-valued extras replace their metadata tag."""
    override = {t[0] for t in extra if t[0] in SINGLE_VALUED_TAGS}
    return [t for t in meta_tags if t[0] not in override] + extra


@dataclass
class _Planned:
    coordinate: Coordinate
    node:       OutlineNode
    records:    list[Record] = field(default_factory=list)     # pre-order, own record first


class _Planner:
    """Turns sections into branch/leaf records under one BaseFields and policy."""

    def __init__(self, base: BaseFields, parse_level: int, preamble: PreamblePolicy):
        self.base = base
        self.parse_level = parse_level
        self.preamble = preamble

    def coordinate(self, kind: RecordKind, slug: str) -> Coordinate:
        return Coordinate(int(kind), self.base.author_key, slug)

    def record(
        self,
        kind: RecordKind,
        slug: str,
        title: str,
        tags: list[Tag],
        content: str = "",
        children: Sequence[Coordinate] = (),
        ) -> Record:
        all_tags = [('d', slug), ('title', title), *tags, *(c.a_tag() for c in children)]
        return Record(
            kind=int(kind),
            content=content,
            tags=tuple(tuple(t) for t in all_tags),
            author_key=self.base.author_key,
            created_at=self.base.created_at,
        )

    def place(self, intro: str, lead: str, where: str, has_index: bool = True, has_children: bool = True) -> tuple[str, str]:
        """Route text before the first child. Returns (own content, lead for the first child)."""
        text = _join(lead, intro.strip())
        if not text:
            return "", ""
        if self.preamble is PreamblePolicy.index and has_index:
            return text, ""
        if self.preamble is PreamblePolicy.first_child and has_children:
            return "", text
        logger.info("Discarding %d characters of text before the first section of %s", len(text), where)
        return "", ""

    def section(self, section: Section, parent_slug: str | None, lead: str = "") -> _Planned:
        """Plan one section as a branch (has children within parse level) or a leaf."""
        ext = extract_section(section)
        title = ext.title
        slug = compose(parent_slug, title)
        meta_tags = metadata_to_tags(ext.metadata)

        intro, children = ext.body, []
        if section.level < self.parse_level:
            intro, children = split_preamble(ext.body, section.level + 1)

        if not children:
            record = self.record(RecordKind.content, slug, title, meta_tags, _join(lead, ext.body))
            node = OutlineNode(title, section.level, RecordKind.content, slug)
            return _Planned(self.coordinate(RecordKind.content, slug), node, [record])

        content, lead = self.place(intro, lead, f"section {title!r}")
        planned = self.children(children, slug, lead)
        record = self.record(RecordKind.index, slug, title, meta_tags, content, [p.coordinate for p in planned])
        node = OutlineNode(title, section.level, RecordKind.index, slug, [p.node for p in planned])
        records = [record] + [r for p in planned for r in p.records]
        return _Planned(self.coordinate(RecordKind.index, slug), node, records)

    def children(self, sections: list[Section], parent_slug: str | None, lead: str = "") -> list[_Planned]:
        return [self.section(s, parent_slug, lead if i == 0 else "") for i, s in enumerate(sections)]


def _collisions(records: list[Record], planned: list[Coordinate]) -> list[Coordinate]:
    """Coordinates shared by more than one emitted record, in first-seen order."""
    if len(resolve(records)) == len(records):
        return []
    duplicates = []
    for coord, count in Counter(planned).items():
        if count > 1:
            logger.warning("Duplicate coordinate %s shared by %d records", coord, count)
            duplicates.append(coord)
    return duplicates


def compile_document(
    text: str,
    extra_tags: Sequence[Sequence[str]],
    base: BaseFields,
    parse_level: int = 2,
    preamble: PreamblePolicy | str = PreamblePolicy.discard,
    ) -> CompileResult:
    """Compile text into one optional index record and pre-ordered content records.

    An article yields an index record for the document, then a branch
    (index kind) for every section below parse_level that has subsections and
    a leaf (content kind) for every other section. Scattered notes yield the
    same branches and leaves without a document index record; an index card
    yields only the index record. extra_tags go on the document index record.
    Structural problems come back in result.validation, never as exceptions.

    Raises ValueError when parse_level is outside SUPPORTED_PARSE_LEVELS.
    """
    if not validate_parse_level(parse_level):
        raise ValueError(f"parse_level must be one of {SUPPORTED_PARSE_LEVELS}, got {parse_level!r}")
    policy = PreamblePolicy(preamble)

    validation = validate_structure(text)
    if not validation.valid:
        return CompileResult(validation=validation)

    planner = _Planner(base, parse_level, policy)
    extra = _extra_tags(extra_tags)
    index_record = None
    outline: list[OutlineNode] = []
    planned: list[_Planned] = []

    if validation.form is DocumentForm.scattered_notes:
        if extra:
            logger.info("Scattered notes have no index record; ignoring %d extra tags", len(extra))
        intro, sections = split_preamble(text, 2)
        _, lead = planner.place(intro, "", "the notes", has_index=False)
        planned = planner.children(sections, None, lead)
        outline = [p.node for p in planned]
    else:
        ext = extract(text)
        title = ext.title
        slug = compose(None, title)
        tags = _merge_tags(metadata_to_tags(ext.metadata), extra)
        if validation.form is DocumentForm.article:
            intro, sections = split_preamble(ext.body, 2)
            content, lead = planner.place(intro, "", f"document {title!r}", has_children=bool(sections))
            planned = planner.children(sections, slug, lead)
        else:
            content = ""
        children = [p.coordinate for p in planned]
        index_record = planner.record(RecordKind.index, slug, title, tags, content, children)
        outline = [OutlineNode(title, 1, RecordKind.index, slug, [p.node for p in planned])]

    content_records = [r for p in planned for r in p.records]
    records = ([index_record] if index_record else []) + content_records
    coords = [planner.coordinate(RecordKind(r.kind), r.tag_value('d')) for r in records]
    logger.debug("Compiled %s into %d records", validation.form.value, len(records))

    return CompileResult(
        validation=validation,
        index_record=index_record,
        content_records=content_records,
        outline=outline,
        collisions=_collisions(records, coords),
    )
