"""Hashing utilities for contentdb."""

import hashlib


def sha256_hash(content: str) -> str:
    """Calculate SHA256 hash of content.

    Args:
        content: Text content to hash.

    Returns:
        Hexadecimal SHA256 hash string.
    """
    return hashlib.sha256(content.encode()).hexdigest()


def short_hash(content: str, length: int = 10) -> str:
    """Truncated SHA256 hex digest, used for version and cache tags."""
    return sha256_hash(content)[:length]
