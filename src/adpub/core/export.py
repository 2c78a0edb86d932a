"""JSON export and import of compiled record sets"""

import json
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from adpub.core.models import CompileResult, OutlineNode, Record


def dump_record(record: Record) -> dict:
    """JSON-ready dict for one record (tags become lists)."""
    return record.model_dump(mode="json")


def dump_records(records: Iterable[Record]) -> list[dict]:
    return [dump_record(r) for r in records]


def dump_result(result: CompileResult) -> dict:
    """{"index": record or null, "content": [records...]} for one compile."""
    return {
        "index": dump_record(result.index_record) if result.index_record else None,
        "content": dump_records(result.content_records),
    }


def _dump(data, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def write_result(result: CompileResult, output_dir: Path, name: str) -> Path:
    """Write output_dir/<name>.json for a compile result. Returns the path."""
    return _dump(dump_result(result), output_dir / f"{name}.json")


def write_records(records: Iterable[Record], path: Path) -> Path:
    """Write records as a flat JSON list."""
    return _dump(dump_records(records), path)


def load_records(path: Path) -> list[Record]:
    """Read records from a JSON list or a {"index", "content"} object.

    Raises ValueError for unreadable JSON, an unexpected shape, or invalid records.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        items = ([data["index"]] if data.get("index") else []) + list(data.get("content") or [])
    elif isinstance(data, list):
        items = data
    else:
        raise ValueError(f"Expected a list or an index/content object in {path}")

    try:
        return [Record.model_validate(item) for item in items]
    except ValidationError as e:
        raise ValueError(f"Invalid record in {path}: {e}") from e


def format_outline(nodes: list[OutlineNode], indent: int = 0) -> list[str]:
    """One line per node, children indented two spaces under their parent."""
    lines = []
    for node in nodes:
        lines.append(f"{'  ' * indent}{node.title}  [{node.kind.name} {int(node.kind)}] {node.slug}")
        lines.extend(format_outline(node.children, indent + 1))
    return lines
