"""Root test configuration: isolate tests from the developer's ADPUB_* environment"""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop ADPUB_* variables so settings only come from what a test sets."""
    for name in list(os.environ):
        if name.startswith("ADPUB_"):
            monkeypatch.delenv(name)
