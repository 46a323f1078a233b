"""Default-author backfill for documents missing an authors reference"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from cmsfix.core.models import ContentDocument, Person, Reference
from cmsfix.core.utils.keys import generate_key


LOGGER = logging.getLogger(__name__)

Matcher = Callable[[Person], bool]


@dataclass(frozen=True)
class AuthorPatch:
    document_id: str
    authors:     list[Reference]

    def fields(self) -> dict:
        return {"authors": [r.dump() for r in self.authors]}


@dataclass
class Backfill:
    author:  Optional[Person] = None
    missing: list[ContentDocument] = field(default_factory=list)
    patches: list[AuthorPatch] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return len(self.patches)


def name_matcher(fragment: str) -> Matcher:
    """Case-insensitive substring match on a person's name."""
    needle = fragment.casefold()
    return lambda person: bool(person.name) and needle in person.name.casefold()


def backfill(
    documents: Sequence[ContentDocument],
    candidates: Sequence[Person],
    matcher: Matcher,
    ) -> Backfill:
    """Build one authors patch per document lacking authors, pointing at the first matching candidate.

    With no matching candidate there is no safe default: nothing is patched.
    """
    missing = [doc for doc in documents if not doc.authors]
    author = next((p for p in candidates if matcher(p)), None)
    if author is None:
        LOGGER.warning("No author candidate matched; skipping %d document(s)", len(missing))
        return Backfill(missing=missing)
    patches = [
        AuthorPatch(doc.id, [Reference(ref=author.id, key=generate_key())])
        for doc in missing
    ]
    return Backfill(author=author, missing=missing, patches=patches)
