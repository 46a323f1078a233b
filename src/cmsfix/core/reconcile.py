"""Draft/published reconciliation: classify drafts as duplicates or orphans"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from cmsfix.core.models import DocumentHeader


class PairStatus(str, Enum):
    duplicate = "duplicate"            # draft and published both exist; draft is deletable
    orphan = "orphan"                  # draft with no published counterpart; needs review
    published_only = "published-only"


@dataclass
class DraftPublishPair:
    base_id:   str
    published: Optional[DocumentHeader] = None
    draft:     Optional[DocumentHeader] = None

    @property
    def status(self) -> PairStatus:
        if self.draft is None:
            return PairStatus.published_only
        return PairStatus.duplicate if self.published is not None else PairStatus.orphan


@dataclass
class Reconciliation:
    duplicates: list[DocumentHeader] = field(default_factory=list)
    orphans:    list[DocumentHeader] = field(default_factory=list)


def pair_documents(documents: Sequence[DocumentHeader]) -> dict[str, DraftPublishPair]:
    """Group documents by base identifier (first-seen order)."""
    pairs: dict[str, DraftPublishPair] = {}
    for doc in documents:
        pair = pairs.setdefault(doc.base_id, DraftPublishPair(doc.base_id))
        if doc.is_draft:
            pair.draft = doc
        else:
            pair.published = doc
    return pairs


def reconcile(documents: Sequence[DocumentHeader]) -> Reconciliation:
    """Split drafts into duplicates (published version exists) and orphans, keeping input order."""
    published = {doc.id for doc in documents if not doc.is_draft}
    result = Reconciliation()
    for doc in documents:
        if not doc.is_draft:
            continue
        (result.duplicates if doc.base_id in published else result.orphans).append(doc)
    return result
