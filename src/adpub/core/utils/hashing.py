"""SHA-256 hashing for record digests and ids"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def canonical_json(value: Any) -> str:
    """Compact, non-ASCII-preserving JSON used as hashing input."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
