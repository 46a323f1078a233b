"""Short text helpers for console reports"""

import re


_WS_RE = re.compile(r'\s+')


def preview(text: str, limit: int = 80) -> str:
    """Collapse whitespace and cut text to at most limit characters."""
    text = _WS_RE.sub(' ', text).strip()
    return text if len(text) <= limit else text[:limit - 1] + '…'
