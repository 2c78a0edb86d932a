"""Integration tests for the adpub CLI commands"""

import json

import pytest
from typer.testing import CliRunner

from adpub.cli.cli import app


ARTICLE = """\
= Field Guide
Jane Smith <jane@example.com>
:summary: Birds of the coast

Preamble text.

== Gulls

Loud birds.

=== Herring Gull

Grey back.

== Terns

Fast birds.
"""


@pytest.fixture(name="runner")
def runner_fixture():
    return CliRunner()


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


@pytest.fixture(name="doc")
def doc_fixture(tmp_path):
    path = tmp_path / "guide.adoc"
    path.write_text(ARTICLE, encoding="utf-8")
    return path


# --- validate ---

def test_validate_valid(runner, doc):
    result = runner.invoke(app, ["validate", str(doc)])
    assert result.exit_code == 0, result.output
    assert "valid (article)" in result.output


def test_validate_invalid(runner, tmp_path):
    """An unstructured file exits 1 with the reason."""
    path = tmp_path / "plain.txt"
    path.write_text("nothing here\n")
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1
    assert "document title" in result.output


def test_validate_missing_file(runner, tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.adoc")])
    assert result.exit_code == 1
    assert "Cannot read" in result.output


# --- compile ---

def test_compile_writes_records(runner, doc, tmp_path):
    """compile writes <slug>.json with the index record and content records."""
    result = runner.invoke(app, [
        "compile", str(doc),
        "--author-key", "pk",
        "--created-at", "1700000000",
        "--parse-level", "3",
        "--tag", "client=adpub",
        "--out-dir", str(tmp_path / "dist"),
    ])
    assert result.exit_code == 0, result.output
    out = tmp_path / "dist" / "field-guide.json"
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["index"]["created_at"] == 1700000000
    assert ["client", "adpub"] in data["index"]["tags"]
    assert [r["tags"][0][1] for r in data["content"]] == [
        "field-guide-gulls", "field-guide-gulls-herring-gull", "field-guide-terns",
    ]
    assert "Compiled 4 record(s) - 2 index, 2 content" in result.output


def test_compile_author_key_from_env(runner, doc, monkeypatch):
    monkeypatch.setenv("ADPUB_AUTHOR_KEY", "env-key")
    result = runner.invoke(app, ["compile", str(doc)])
    assert result.exit_code == 0, result.output
    data = json.loads(open("dist/field-guide.json", encoding="utf-8").read())
    assert data["index"]["author_key"] == "env-key"


def test_compile_preamble_policy(runner, doc):
    result = runner.invoke(app, ["compile", str(doc), "--author-key", "pk", "--preamble", "index"])
    assert result.exit_code == 0, result.output
    data = json.loads(open("dist/field-guide.json", encoding="utf-8").read())
    assert data["index"]["content"] == "Preamble text."


def test_compile_requires_author_key(runner, doc):
    result = runner.invoke(app, ["compile", str(doc)])
    assert result.exit_code == 1
    assert "author key" in result.output


def test_compile_rejects_bad_tag(runner, doc):
    result = runner.invoke(app, ["compile", str(doc), "--author-key", "pk", "--tag", "novalue"])
    assert result.exit_code == 1
    assert "key=value" in result.output


def test_compile_rejects_bad_parse_level(runner, doc):
    """An out-of-range --parse-level fails settings validation."""
    result = runner.invoke(app, ["compile", str(doc), "--author-key", "pk", "--parse-level", "9"])
    assert result.exit_code == 1
    assert "parse_level" in result.output


def test_compile_invalid_document(runner, tmp_path):
    path = tmp_path / "plain.txt"
    path.write_text("nothing here\n")
    result = runner.invoke(app, ["compile", str(path), "--author-key", "pk"])
    assert result.exit_code == 1
    assert not (tmp_path / "dist").exists()


# --- outline ---

def test_outline_prints_hierarchy(runner, doc):
    result = runner.invoke(app, ["outline", str(doc), "--parse-level", "3"])
    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0].startswith("Field Guide")
    assert lines[2].startswith("    Herring Gull")


# --- merge / diff ---

def _compile(runner, doc, created_at: int, out_dir: str) -> str:
    result = runner.invoke(app, [
        "compile", str(doc), "--author-key", "pk",
        "--created-at", str(created_at), "--out-dir", out_dir,
    ])
    assert result.exit_code == 0, result.output
    return f"{out_dir}/field-guide.json"


def test_merge_to_stdout(runner, doc):
    """merge prints the newest version of each record as JSON."""
    old = _compile(runner, doc, 1, "v1")
    doc.write_text(ARTICLE.replace("Fast birds.", "Very fast birds."), encoding="utf-8")
    new = _compile(runner, doc, 2, "v2")
    result = runner.invoke(app, ["merge", old, new])
    assert result.exit_code == 0, result.output
    records = json.loads(result.stdout)
    terns = next(r for r in records if r["tags"][0][1] == "field-guide-terns")
    assert terns["content"] == "Very fast birds."
    assert len(records) == 3


def test_merge_to_file(runner, doc):
    path = _compile(runner, doc, 1, "v1")
    result = runner.invoke(app, ["merge", path, path, "--out", "merged.json"])
    assert result.exit_code == 0, result.output
    assert "Merged 6 record(s) into 3" in result.output


def test_diff_reports_changes(runner, doc):
    old = _compile(runner, doc, 1, "v1")
    doc.write_text(ARTICLE.replace("Fast birds.", "Very fast birds."), encoding="utf-8")
    new = _compile(runner, doc, 2, "v2")
    result = runner.invoke(app, ["diff", old, new, "--show-diff"])
    assert result.exit_code == 0, result.output
    assert "updated: 30041:pk:field-guide-terns" in result.output
    assert "+Very fast birds." in result.output
    assert "0 created, 1 updated, 2 unchanged, 0 removed" in result.output


def test_diff_missing_file(runner, tmp_path):
    result = runner.invoke(app, ["diff", str(tmp_path / "a.json"), str(tmp_path / "b.json")])
    assert result.exit_code == 1
    assert "Failed to load" in result.output
