"""
Content hashing for drift detection.

A digest is a pure function of the text: SHA-256 over its UTF-8 bytes,
hex-encoded (64 lowercase characters).
"""

import hashlib


DIGEST_LENGTH = 64


def content_hash(text: str) -> str:
    """
    Compute SHA-256 hash of text content.

    Args:
        text: Text to hash

    Returns:
        Hex string of SHA-256 hash
    """
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def hashes_match(first: str, second: str) -> bool:
    """Check whether two texts have the same digest."""
    return content_hash(first) == content_hash(second)
