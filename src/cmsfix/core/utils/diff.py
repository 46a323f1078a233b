"""Line diffs of article markup for reviewing an image-lift run"""

import difflib
import re


_TAG_GAP_RE = re.compile(r">\s*<")


def markup_lines(html: str) -> list[str]:
    """Split serialized markup so that every tag starts its own line."""
    return _TAG_GAP_RE.sub(">\n<", html).splitlines()


def markup_diff(before: str, after: str, name: str = "content.html", context: int = 3) -> str:
    """Unified diff of two markup strings, one tag per line. Empty string if they match."""
    lines = difflib.unified_diff(
        markup_lines(before), markup_lines(after),
        fromfile=f"a/{name}", tofile=f"b/{name}", n=context, lineterm="",
    )
    return "\n".join(lines)
