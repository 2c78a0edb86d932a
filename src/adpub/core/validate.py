"""Pre-flight structure checks for documents and published index records"""

from adpub.core.coordinates import Coordinate
from adpub.core.extract.metadata import classify, extract, extract_section
from adpub.core.extract.sections import iter_headings, split_sections
from adpub.core.models import DocumentForm, Record, RecordKind, ValidationResult


NO_TITLE = (
    'Document must have a document title (a first line starting with "= ") '
    'or at least one section ("== ") to publish as scattered notes.'
)
TITLE_NOT_FIRST = 'The document title ("= ") must be the first non-blank line.'


def validate_structure(text: str) -> ValidationResult:
    """Check that text has a publishable shape; warnings never make it invalid."""
    form = classify(text)
    titles = sum(1 for h in iter_headings(text) if h.level == 1)

    if form is DocumentForm.none:
        reason = TITLE_NOT_FIRST if titles else NO_TITLE
        return ValidationResult(valid=False, reason=reason, form=form)
    if titles > 1:
        return ValidationResult(
            valid=False,
            reason=f'Document must have exactly one document title ("= "); found {titles}.',
            form=form,
        )
    if form is DocumentForm.index_card:
        return ValidationResult(valid=True, form=form)

    warnings = []
    body = extract(text).body if form is DocumentForm.article else text
    sections = split_sections(body, 2)
    if not sections:
        warnings.append('No sections ("== ") found; only an index record will be produced.')
    empty = [s.title for s in sections if not extract_section(s).body]
    if empty:
        warnings.append("Sections with no content: " + ", ".join(empty))
    return ValidationResult(valid=True, warnings=warnings, form=form)


def analyze_index_record(record: Record) -> tuple[bool, list[str]]:
    """Check a fetched index record for the shape the compiler emits. Returns (ok, issues)."""
    issues = []
    if record.kind != RecordKind.index:
        issues.append(f"kind is {record.kind}, expected {int(RecordKind.index)}")
    if record.content:
        issues.append("content is not empty")
    for name in ('title', 'd'):
        if not record.tag_value(name):
            issues.append(f"missing {name} tag")
    links = record.tag_values('a')
    if not links:
        issues.append("missing a tags")
    for value in links:
        try:
            Coordinate.parse(value)
        except ValueError:
            issues.append(f"malformed a tag {value!r}")
    return not issues, issues
