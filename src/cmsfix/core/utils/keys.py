"""Opaque array-item keys for CMS patches"""

from uuid import uuid4


def generate_key(length: int = 12) -> str:
    """Return a random lowercase hex key (CMS array items need a unique _key)."""
    return uuid4().hex[:length]
