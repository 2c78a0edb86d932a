"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from adpub.config import Settings, load_config
from adpub.core.export import dump_records, format_outline
from adpub.core.models import CompileResult, PreamblePolicy, RecordKind
from adpub.core.pipeline import run_compile, run_diff, run_merge, run_outline
from adpub.core.reconcile import ChangeStatus, summarize
from adpub.core.validate import validate_structure


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _parse_tag(value: str) -> tuple[str, str]:
    """'key=value' -> (key, value)."""
    key, sep, val = value.partition("=")
    if not sep or not key.strip():
        _fail(f"Invalid --tag {value!r}; expected key=value")
    return key.strip(), val.strip()


def _echo_diagnostics(result: CompileResult) -> None:
    """Print validation warnings and duplicate coordinates to stderr."""
    for warning in result.validation.warnings:
        typer.echo(f"  warning: {warning}", err=True)
    for coord in result.collisions:
        typer.echo(f"  duplicate: {coord}", err=True)


def validate_cmd(
    path: Annotated[Path, typer.Argument(help="Document to check")],
    ):
    """Check that a document has a publishable structure."""
    validation = validate_structure(_read_source(path))
    if not validation.valid:
        _fail(validation.reason)
    typer.echo(f"{path}: valid ({validation.form.value})")
    for warning in validation.warnings:
        typer.echo(f"  warning: {warning}")


def compile_cmd(
    path: Annotated[Path, typer.Argument(help="Document to compile")],
    parse_level: Annotated[Optional[int], typer.Option("--parse-level", help="Deepest heading level split into records (2-5)")] = None,
    author_key: Annotated[Optional[str], typer.Option("--author-key", help="Author public key for every record")] = None,
    created_at: Annotated[Optional[int], typer.Option("--created-at", help="Unix timestamp; defaults to now")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", help="Extra index tag as key=value; repeatable")] = None,
    preamble: Annotated[Optional[PreamblePolicy], typer.Option("--preamble", help="Where text before the first section goes")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    ):
    """Compile a document into index and content records (JSON)."""
    settings = _settings(overrides={
        "parse_level": parse_level, "author_key": author_key,
        "preamble": preamble, "output_dir": out,
    })
    if not settings.author_key:
        _fail("No author key; pass --author-key or set ADPUB_AUTHOR_KEY")
    extra = [_parse_tag(t) for t in tags or []]

    try:
        result, out_file = run_compile(path, settings, extra, created_at)
    except RuntimeError as e:
        _fail(str(e))
    if not result.ok:
        _fail(result.validation.reason)

    _echo_diagnostics(result)
    branches = sum(1 for r in result.records if r.kind == RecordKind.index)
    typer.echo(f"  {path} -> {out_file}")
    typer.echo(
        f"Compiled {len(result.records)} record(s) - "
        f"{branches} index, {len(result.records) - branches} content"
    )


def outline_cmd(
    path: Annotated[Path, typer.Argument(help="Document to preview")],
    parse_level: Annotated[Optional[int], typer.Option("--parse-level", help="Deepest heading level split into records (2-5)")] = None,
    ):
    """Print the record hierarchy a compile would produce, without writing anything."""
    settings = _settings(overrides={"parse_level": parse_level})
    try:
        result = run_outline(path, settings)
    except RuntimeError as e:
        _fail(str(e))
    if not result.ok:
        _fail(result.validation.reason)
    _echo_diagnostics(result)
    for line in format_outline(result.outline):
        typer.echo(line)


def merge_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Record JSON files to combine")],
    out: Annotated[Optional[Path], typer.Option("--out", help="Write merged records here instead of stdout")] = None,
    ):
    """Combine record files, keeping the newest version of each record."""
    try:
        read, merged = run_merge(paths, out)
    except RuntimeError as e:
        _fail(str(e))
    if out is None:
        typer.echo(json.dumps(dump_records(merged), indent=2, ensure_ascii=False))
        return
    typer.echo(f"  {len(paths)} file(s) -> {out}")
    typer.echo(f"Merged {read} record(s) into {len(merged)}")


def diff_cmd(
    old: Annotated[Path, typer.Argument(help="Previously published record JSON")],
    new: Annotated[Path, typer.Argument(help="Freshly compiled record JSON")],
    show_diff: Annotated[bool, typer.Option("--show-diff", help="Print content diffs for updated records")] = False,
    ):
    """Report which records were created, updated or removed between two record files."""
    try:
        changes = run_diff(old, new)
    except RuntimeError as e:
        _fail(str(e))

    for change in changes:
        if change.status is ChangeStatus.unchanged:
            continue
        typer.echo(f"  {change.status.value}: {change.coordinate}")
        if show_diff and change.status is ChangeStatus.updated:
            typer.echo("".join(change.content_diff()), nl=False)
    counts = summarize(changes)
    typer.echo(
        f"Diff complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged, "
        f"{counts['removed']} removed"
    )
