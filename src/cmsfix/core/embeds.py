"""Promote video/image objects nested inside text blocks to top-level body blocks"""

from dataclasses import dataclass
from typing import Sequence

from cmsfix.core.models import ImageBlock, InlineObject, Span, TextBlock, VideoBlock
from cmsfix.core.utils.keys import generate_key


PROMOTED = {"video": VideoBlock, "image": ImageBlock}


@dataclass(frozen=True)
class EmbedFix:
    body:    list
    changes: list[str]


def _promote(child: InlineObject):
    data = child.dump()
    data["_key"] = child.key or generate_key()
    return PROMOTED[child.type_].model_validate(data)


def promote_embeds(body: Sequence) -> EmbedFix:
    """Return a body where no text block holds a video or image child.

    The text block survives with its remaining children only if some span has
    non-blank text; the promoted embeds follow it in their original order.
    """
    fixed, changes = [], []
    for i, block in enumerate(body):
        embeds = [c for c in block.children if c.type_ in PROMOTED] if isinstance(block, TextBlock) else []
        if not embeds:
            fixed.append(block)
            continue
        rest = [c for c in block.children if c.type_ not in PROMOTED]
        if any(isinstance(c, Span) and c.text.strip() for c in rest):
            fixed.append(block.model_copy(update={"children": rest}))
            changes.append(f"body[{i}]: kept text block, extracted {len(embeds)} embed(s)")
        else:
            changes.append(f"body[{i}]: removed empty text block wrapper around {len(embeds)} embed(s)")
        fixed.extend(_promote(c) for c in embeds)
    return EmbedFix(body=fixed, changes=changes)
