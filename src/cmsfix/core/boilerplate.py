"""Boilerplate detection over rich-text blocks (report only) and scraped header/footer removal"""

import re
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, model_validator

from cmsfix.core.models import TextBlock


class BoilerplatePattern(BaseModel):
    """A fixed rule matched against a block's trimmed text."""
    model_config = ConfigDict(frozen=True)

    kind:        Literal["prefix", "suffix", "equals", "regex"]
    value:       str
    ignore_case: bool = False

    @model_validator(mode="after")
    def _check_regex(self):
        if self.kind == "regex":
            try:
                re.compile(self.value)
            except re.error as e:
                raise ValueError(f"Invalid regex {self.value!r}: {e}") from e
        return self

    def matches(self, text: str) -> bool:
        if self.kind == "regex":
            return re.search(self.value, text, re.IGNORECASE if self.ignore_case else 0) is not None
        value, subject = (self.value.casefold(), text.casefold()) if self.ignore_case else (self.value, text)
        if self.kind == "prefix":
            return subject.startswith(value)
        if self.kind == "suffix":
            return subject.endswith(value)
        return subject == value

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}" + (" (i)" if self.ignore_case else "")


DEFAULT_PATTERNS: tuple[BoilerplatePattern, ...] = (
    BoilerplatePattern(kind="regex",  value=r"^©\d{4}"),
    BoilerplatePattern(kind="regex",  value=r"^Copyright\s*\d{4}", ignore_case=True),
    BoilerplatePattern(kind="prefix", value="Built with ", ignore_case=True),
    BoilerplatePattern(kind="prefix", value="← "),
    BoilerplatePattern(kind="suffix", value="→"),
    BoilerplatePattern(kind="prefix", value="About the Author", ignore_case=True),
    BoilerplatePattern(kind="equals", value="Secret Atomics"),
    BoilerplatePattern(kind="equals", value="Blog"),
    BoilerplatePattern(kind="equals", value="Source"),
)
HEADER_LABELS: tuple[str, ...] = ("Secret Atomics", "Blog")

# A footer starts at one of these lines; the blocks just before it are
# included while they are empty or match FOOTER_LIKE.
FOOTER_ANCHORS: tuple[BoilerplatePattern, ...] = (
    BoilerplatePattern(kind="regex", value=r"^(©|Copyright)\s*\d{4}", ignore_case=True),
    BoilerplatePattern(kind="regex", value=r"^Built with\s", ignore_case=True),
)
FOOTER_LIKE: tuple[BoilerplatePattern, ...] = tuple(p for p in DEFAULT_PATTERNS if p.value not in HEADER_LABELS)


@dataclass(frozen=True)
class Match:
    block_index:  int
    matched_text: str
    pattern:      BoilerplatePattern


@dataclass(frozen=True)
class FooterCut:
    index:   int
    kept:    list
    removed: list


@dataclass(frozen=True)
class HeaderCut:
    count:   int
    kept:    list
    removed: list


def block_text(block) -> str:
    """Trimmed span text of a text block; '' for any other block type."""
    return block.text if isinstance(block, TextBlock) else ""


def _is_blank(block) -> bool:
    return isinstance(block, TextBlock) and not block.text


def _matches_any(patterns: Sequence[BoilerplatePattern], text: str) -> bool:
    return bool(text) and any(p.matches(text) for p in patterns)


def scan(blocks: Sequence, patterns: Sequence[BoilerplatePattern] = DEFAULT_PATTERNS) -> list[Match]:
    """Report every (block, pattern) pair whose pattern matches the block text. Blocks are not modified."""
    matches = []
    for i, block in enumerate(blocks):
        text = block_text(block)
        if not text:
            continue
        matches.extend(Match(i, text, p) for p in patterns if p.matches(text))
    return matches


def cut_footer(
    body: Sequence,
    anchors: Sequence[BoilerplatePattern] = FOOTER_ANCHORS,
    window: int = 20,
    lookback: int = 3,
    footer_like: Sequence[BoilerplatePattern] = FOOTER_LIKE,
    ) -> Optional[FooterCut]:
    """Drop the footer and everything after it.

    The footer starts at the last anchor line within the trailing window
    blocks. Up to lookback blocks before it join the footer while they are
    empty text blocks or footer-like lines ("← Previous", "About the Author").
    Empty text blocks left at the end of the kept body are trimmed as well.
    Returns None when no block in the window matches an anchor.
    """
    start = max(0, len(body) - window)
    index = next(
        (i for i in range(len(body) - 1, start - 1, -1) if _matches_any(anchors, block_text(body[i]))),
        None,
    )
    if index is None:
        return None
    for j in range(index - 1, max(0, index - lookback) - 1, -1):
        if not (_is_blank(body[j]) or _matches_any(footer_like, block_text(body[j]))):
            break
        index = j
    kept = list(body[:index])
    while kept and _is_blank(kept[-1]):
        kept.pop()
    return FooterCut(index=index, kept=kept, removed=list(body[index:]))


def cut_header(body: Sequence, labels: Sequence[str] = HEADER_LABELS, window: int = 6) -> Optional[HeaderCut]:
    """Drop scraped site-title lines ("Secret Atomics", "Blog") from the top of body.

    Leading blocks are examined up to the first non-empty text that is not a
    label, within the first window blocks. The last label found and everything
    before it are removed, plus the empty text blocks that follow it.
    """
    if len(body) < 2:
        return None
    count = 0
    for i, block in enumerate(body[:window]):
        text = block_text(block)
        if text in labels:
            count = i + 1
        elif text:
            break
    if not count:
        return None
    while count < len(body) and _is_blank(body[count]):
        count += 1
    return HeaderCut(count=count, kept=list(body[count:]), removed=list(body[:count]))
