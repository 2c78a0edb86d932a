"""Shared fixtures for core unit tests"""

import pytest

from adpub.core.models import BaseFields


ARTICLE = """\
= Test Document
John Doe <john@example.com>
1.0, 2024-01-15: Alexandria Test
:summary: A test document
:tags: nostr, publishing

This is the preamble.

== First Section
:summary: Section summary

This is the content of the first section.

== Second Section

Second section content.

=== Nested Subsection

Nested content.
"""

SCATTERED = """\
== Note One

Alpha.

== Note Two

Beta.
"""

INDEX_CARD = """\
= Test Index Card
:author: Test Author
:summary: A test index card

index card
"""


@pytest.fixture(name="base")
def base_fixture():
    return BaseFields(author_key="pubkey", created_at=1700000000)


@pytest.fixture(name="article")
def article_fixture():
    return ARTICLE


@pytest.fixture(name="scattered")
def scattered_fixture():
    return SCATTERED


@pytest.fixture(name="index_card")
def index_card_fixture():
    return INDEX_CARD
