"""Unit tests for core/utils/slug.py"""

import pytest

from adpub.core.utils.slug import UNTITLED, compose, normalize


@pytest.mark.parametrize("title,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Hello, World! & Friends", "hello-world-friends"),
    ("Chapter 1: The Beginning", "chapter-1-the-beginning"),
    ("Café au lait", "caf-au-lait"),
    ("Document with Special Characters: Test & More!", "document-with-special-characters-test-more"),
    ("!!!", ""),
    ("", ""),
])
def test_normalize_basic(title, expected):
    """normalize lowercases and collapses non [a-z0-9] runs into one hyphen."""
    assert normalize(title) == expected


@pytest.mark.parametrize("title", ["Hello World", "--x--", "A  B", "Ünïcode Tïtle", "a-b-c"])
def test_normalize_idempotent(title):
    """Normalizing a slug again changes nothing."""
    assert normalize(normalize(title)) == normalize(title)


def test_normalize_output_alphabet():
    """Output has only [a-z0-9-], no leading/trailing or doubled hyphens."""
    slug = normalize("  -- Weird__Title!!  with ##many## chars -- ")
    assert set(slug) <= set("abcdefghijklmnopqrstuvwxyz0123456789-")
    assert not slug.startswith("-") and not slug.endswith("-")
    assert "--" not in slug


def test_normalize_no_length_cap():
    """Long titles are not truncated."""
    assert normalize("A" * 300) == "a" * 300


def test_compose_with_parent():
    """compose appends the normalized title to the parent slug."""
    assert compose("test-document", "First Section") == "test-document-first-section"


def test_compose_without_parent():
    """Without a parent the slug is just the normalized title."""
    assert compose(None, "Note One") == "note-one"


def test_compose_empty_title_uses_placeholder():
    """A title that normalizes to '' becomes the untitled placeholder."""
    assert compose("doc", "???") == f"doc-{UNTITLED}"
    assert compose(None, "") == UNTITLED
