"""Content fingerprints for vacancy descriptions (the analysis cache key)."""

import hashlib
import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_description(description: str) -> str:
    """Trim and collapse every whitespace run (newlines and tabs included) to one space."""
    return _WHITESPACE_RE.sub(" ", description.strip())


def fingerprint(description: str) -> str:
    """SHA-256 hex digest of the normalized description."""
    normalized = normalize_description(description)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
