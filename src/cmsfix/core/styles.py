"""Heading style normalization for rich-text bodies"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from cmsfix.core.models import TextBlock
from cmsfix.core.utils.text import preview


@dataclass(frozen=True)
class StyleChange:
    index: int
    old:   str
    new:   str
    text:  str

    def __str__(self) -> str:
        return f'[{self.index}] {self.old}→{self.new}: "{preview(self.text, 60)}"'


@dataclass(frozen=True)
class StyleChanges:
    body:    list
    changes: list[StyleChange]

    @property
    def count(self) -> int:
        return len(self.changes)


def downgrade_headings(
    body: Sequence,
    disallowed: Iterable[str] = ("h5", "h6"),
    replacement: str = "h4",
    ) -> StyleChanges:
    """Return a new body where text blocks styled in disallowed use replacement instead."""
    disallowed = set(disallowed)
    new_body, changes = [], []
    for i, block in enumerate(body):
        if isinstance(block, TextBlock) and block.style in disallowed:
            changes.append(StyleChange(i, block.style, replacement, block.text))
            block = block.model_copy(update={"style": replacement})
        new_body.append(block)
    return StyleChanges(body=new_body, changes=changes)
