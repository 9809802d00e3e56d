"""
Security utilities for API key handling.
"""
import hashlib
import secrets
from typing import Iterable, Optional


def hash_api_key(api_key: str) -> str:
    """
    Hash an API key for storage in the key list.

    Keys are hashed before storing them so that a leaked data directory
    does not hand out working keys.
    """
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def generate_api_key() -> str:
    """Create a new random API key."""
    return secrets.token_urlsafe(24)


def resolve_api_key(presented: str, key_entries: Iterable[dict]) -> Optional[str]:
    """
    Resolve a presented key to its user.

    Args:
        presented: The raw key from the request header
        key_entries: Stored entries of the form {"keyHash": ..., "user": ...}

    Returns:
        The user name, or None if no entry matches
    """
    presented_hash = hash_api_key(presented)
    for entry in key_entries:
        stored = entry.get("keyHash")
        if stored and secrets.compare_digest(stored, presented_hash):
            return entry.get("user")
    return None
