"""Pipeline step functions: compile, outline, merge and diff over files"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from adpub.config import Settings
from adpub.core.compile import compile_document
from adpub.core.coordinates import dedupe
from adpub.core.export import load_records, write_records, write_result
from adpub.core.models import BaseFields, CompileResult, Record
from adpub.core.reconcile import Change, reconcile
from adpub.core.utils.slug import compose


logger = logging.getLogger(__name__)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuntimeError(f"Failed to read {path}: {e}") from e


def _load(path: Path) -> list[Record]:
    try:
        return load_records(path)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Failed to load {path}: {e}") from e


def run_compile(
    path: Path,
    settings: Settings,
    extra_tags: Sequence[Sequence[str]] = (),
    created_at: Optional[int] = None,
    ) -> tuple[CompileResult, Optional[Path]]:
    """Compile one source file and write its records to settings.output_dir.

    created_at defaults to the current UTC time. Returns (result, json_path);
    json_path is None when the document failed validation.
    """
    if created_at is None:
        created_at = int(datetime.now(timezone.utc).timestamp())
    base = BaseFields(author_key=settings.author_key, created_at=created_at)
    result = compile_document(_read(path), extra_tags, base, settings.parse_level, settings.preamble)
    if not result.ok:
        return result, None

    name = result.index_record.tag_value('d') if result.index_record else compose(None, path.stem)
    out = write_result(result, Path(settings.output_dir), name)
    logger.info("Wrote %d records to %s", len(result.records), out)
    return result, out


def run_outline(path: Path, settings: Settings) -> CompileResult:
    """Compile without writing, under a placeholder author, for previewing the hierarchy."""
    base = BaseFields(author_key=settings.author_key or "preview")
    return compile_document(_read(path), (), base, settings.parse_level, settings.preamble)


def run_merge(paths: Sequence[Path], out: Optional[Path] = None) -> tuple[int, list[Record]]:
    """Combine record files, keeping the newest version per coordinate.

    Returns (records read, merged records); writes the merged list to out when given.
    """
    records = [r for p in paths for r in _load(p)]
    merged = dedupe(records)
    if out is not None:
        write_records(merged, out)
    return len(records), merged


def run_diff(old_path: Path, new_path: Path) -> list[Change]:
    """Reconcile a previously published record file against a new one."""
    return reconcile(_load(old_path), _load(new_path))
