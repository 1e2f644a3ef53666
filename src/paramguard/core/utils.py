"""
Utility functions shared across modules: content hashing, format detection.
"""

import hashlib
from pathlib import Path

UNKNOWN_FORMAT = "unknown"


def compute_content_hash(content: bytes) -> str:
    """
    Return the hex SHA-256 digest of raw file bytes.

    The digest is stored alongside every archive for integrity checks;
    it is never used as an identity.
    """
    return hashlib.sha256(content).hexdigest()


def detect_format(path) -> str:
    """Short format tag from the file extension, e.g. 'json' for 'a/b.json'."""
    suffix = Path(path).suffix
    return suffix[1:] if len(suffix) > 1 else UNKNOWN_FORMAT
