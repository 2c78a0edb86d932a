"""Data models shared by the extract, compile and resolve steps"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


ADDRESSABLE_MIN = 30000
ADDRESSABLE_MAX = 39999


class RecordKind(IntEnum):
    """Addressable record kinds emitted by the compiler"""
    index = 30040      # branch: empty content, links children via `a` tags
    content = 30041    # leaf: carries section body text


class DocumentForm(str, Enum):
    """Top-level shape of a document, decides how it compiles"""
    article = "article"
    scattered_notes = "scattered-notes"
    index_card = "index-card"
    none = "none"


class PreamblePolicy(str, Enum):
    """Where text between a header and its first child section goes"""
    discard = "discard"
    index = "index"
    first_child = "first-child"


class Metadata(BaseModel):
    """Structured header metadata for a document or a section."""
    model_config = ConfigDict(frozen=True)

    title:            Optional[str] = None
    authors:          list[str] = Field(default_factory=list)
    version:          Optional[str] = None
    edition:          Optional[str] = None
    publication_date: Optional[str] = None
    publisher:        Optional[str] = None
    summary:          Optional[str] = None
    image:            Optional[str] = None
    isbn:             Optional[str] = None
    source:           Optional[str] = None
    type:             Optional[str] = None
    auto_update:      Optional[str] = None
    tags:             list[str] = Field(default_factory=list)
    attributes:       list[tuple[str, str]] = Field(default_factory=list)   # passthrough, source order


@dataclass(frozen=True)
class Section:
    """A heading plus the raw text slice it owns, cut from a larger body."""
    level:   int        # marker length: 2 for '==', 3 for '===', ...
    title:   str
    heading: str        # the heading line as written
    text:    str        # heading line through the line before the next sibling
    start:   int        # offsets of text within the string that was split
    end:     int


class BaseFields(BaseModel):
    """Caller-supplied identity and time applied to every compiled record."""
    author_key: str = Field(min_length=1)
    created_at: Optional[int] = Field(default=None, ge=0)


class Record(BaseModel):
    """An unsigned event description: kind, content and ordered tags."""
    model_config = ConfigDict(frozen=True)

    kind:       int
    content:    str = ""
    tags:       tuple[tuple[str, ...], ...] = ()
    author_key: Optional[str] = None
    created_at: Optional[int] = None

    def tag_value(self, name: str) -> str | None:
        """First value of the first tag called name, else None."""
        for tag in self.tags:
            if tag and tag[0] == name and len(tag) > 1:
                return tag[1]
        return None

    def tag_values(self, name: str) -> list[str]:
        """First value of every tag called name, in tag order."""
        return [tag[1] for tag in self.tags if len(tag) > 1 and tag[0] == name]


class ValidationResult(BaseModel):
    """Outcome of the pre-flight structure check."""
    valid:    bool
    reason:   Optional[str] = None
    warnings: list[str] = Field(default_factory=list)
    form:     DocumentForm = DocumentForm.none


@dataclass
class OutlineNode:
    """One emitted record in the compiled hierarchy."""
    title:    str
    level:    int               # 1 for the document index record
    kind:     RecordKind
    slug:     str
    children: list["OutlineNode"] = field(default_factory=list)


@dataclass
class CompileResult:
    """Records produced by one compile call, plus diagnostics."""
    validation:      ValidationResult
    index_record:    Optional[Record] = None
    content_records: list[Record] = field(default_factory=list)
    outline:         list[OutlineNode] = field(default_factory=list)
    collisions:      list = field(default_factory=list)     # duplicate Coordinates

    @property
    def ok(self) -> bool:
        return self.validation.valid

    @property
    def records(self) -> list[Record]:
        """Index record (if any) followed by content records."""
        head = [self.index_record] if self.index_record is not None else []
        return head + self.content_records
