"""Slug generation for record identifiers (d tags)"""

import re


SLUG_RE = re.compile(r'[^a-z0-9]+')
UNTITLED = 'untitled'


def normalize(title: str) -> str:
    """Convert a title to a lowercase, hyphen-separated slug. Idempotent; may return ''."""
    return SLUG_RE.sub('-', title.lower()).strip('-')


def compose(parent: str | None, title: str) -> str:
    """Append the normalized title to an already-composed parent slug."""
    own = normalize(title) or UNTITLED
    return f"{parent}-{own}" if parent else own
