"""Command step functions: fetch from the store, compute fixes, and optionally write them back"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from cmsfix.config import Settings
from cmsfix.core.authors import Backfill, backfill, name_matcher
from cmsfix.core.boilerplate import FooterCut, HeaderCut, Match, cut_footer, cut_header, scan
from cmsfix.core.embeds import EmbedFix, promote_embeds
from cmsfix.core.html.dom import Element
from cmsfix.core.html.lift import (
    count_images, nested_images, normalize, prune_empty, top_level_images,
)
from cmsfix.core.html.parse import parse_html
from cmsfix.core.models import ContentDocument, DocumentHeader, Person, decode_documents, dump_body
from cmsfix.core.reconcile import Reconciliation, reconcile
from cmsfix.core.styles import StyleChanges, downgrade_headings
from cmsfix.store.base import ContentStore, StoreError


LOGGER = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Tally of per-document writes; one failure never stops the batch."""
    succeeded: list[str] = field(default_factory=list)
    failed:    list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class LiftReport:
    before:    Element
    after:     Element
    images:    int
    top_level: int
    nested:    int


def apply_each(writes: Iterable[tuple[str, Callable[[], object]]]) -> BatchResult:
    """Run each (doc_id, write) pair, recording store failures instead of raising."""
    result = BatchResult()
    for doc_id, write in writes:
        try:
            write()
        except StoreError as e:
            LOGGER.error("Write failed for %s: %s", doc_id, e)
            result.failed.append((doc_id, str(e)))
        else:
            result.succeeded.append(doc_id)
    return result


def _patch_bodies(store: ContentStore, fixes: list[tuple[ContentDocument, list]]) -> BatchResult:
    return apply_each(
        (doc.id, lambda doc=doc, body=body: store.patch(doc.id, {"body": dump_body(body)}))
        for doc, body in fixes
    )


def _decode(rows: list[dict], model: type) -> list:
    decoded, rejected = decode_documents(rows, model)
    for row_id, error in rejected:
        LOGGER.warning("Skipping malformed %s %s: %s", model.__name__, row_id, error)
    return decoded


def load_documents(
    store: ContentStore,
    settings: Settings,
    migrated_only: bool = True,
    model: type = ContentDocument,
    ) -> list:
    """Fetch and decode documents of the configured type; malformed rows are logged and skipped.

    Pass model=DocumentHeader when only identity fields are needed, so that
    a document with a malformed body is still returned.
    """
    pattern = settings.id_pattern if migrated_only else None
    documents = _decode(store.fetch_documents(settings.document_type, pattern), model)
    LOGGER.info("Loaded %d %s document(s)", len(documents), settings.document_type)
    return documents


def run_lift(html: str, settings: Settings, prune: bool = True) -> LiftReport:
    """Parse html, hoist nested images, and report verification counts."""
    before = parse_html(html, settings.content_selector)
    allowed = set(settings.allowed_ancestors)
    after = normalize(before, allowed, settings.max_depth)
    if prune:
        after = prune_empty(after)
    return LiftReport(
        before=before,
        after=after,
        images=count_images(after),
        top_level=top_level_images(after),
        nested=nested_images(after, allowed),
    )


def run_scan(store: ContentStore, settings: Settings) -> list[tuple[ContentDocument, list[Match]]]:
    """Return (document, matches) for every document with at least one boilerplate match."""
    report = []
    for doc in load_documents(store, settings, migrated_only=False):
        matches = scan(doc.body or [], settings.boilerplate_patterns)
        if matches:
            report.append((doc, matches))
    return report


def run_strip_footer(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[list[tuple[ContentDocument, FooterCut]], Optional[BatchResult]]:
    cuts = []
    for doc in load_documents(store, settings, migrated_only=False):
        cut = cut_footer(doc.body or [], settings.footer_anchors, settings.footer_window, settings.footer_lookback)
        if cut is not None:
            cuts.append((doc, cut))
    batch = _patch_bodies(store, [(doc, cut.kept) for doc, cut in cuts]) if apply else None
    return cuts, batch


def run_strip_header(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[list[tuple[ContentDocument, HeaderCut]], Optional[BatchResult]]:
    """Find (and with apply, remove) scraped site-title lines at the top of migrated bodies."""
    cuts = []
    for doc in load_documents(store, settings):
        cut = cut_header(doc.body or [], settings.header_labels, settings.header_window)
        if cut is not None:
            cuts.append((doc, cut))
    batch = _patch_bodies(store, [(doc, cut.kept) for doc, cut in cuts]) if apply else None
    return cuts, batch


def run_cleanup_drafts(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[Reconciliation, Optional[BatchResult]]:
    """Classify drafts; with apply, delete duplicates only. Orphans are never deleted."""
    result = reconcile(load_documents(store, settings, model=DocumentHeader))
    if not apply:
        return result, None
    batch = apply_each((doc.id, lambda doc=doc: store.delete(doc.id)) for doc in result.duplicates)
    return result, batch


def run_fix_headings(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[list[tuple[ContentDocument, StyleChanges]], Optional[BatchResult]]:
    fixes = []
    for doc in load_documents(store, settings, migrated_only=False):
        changes = downgrade_headings(doc.body or [], settings.disallowed_styles, settings.replacement_style)
        if changes.count:
            fixes.append((doc, changes))
    batch = _patch_bodies(store, [(doc, c.body) for doc, c in fixes]) if apply else None
    return fixes, batch


def run_fix_authors(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[list[Person], Backfill, Optional[BatchResult]]:
    persons = _decode(store.fetch_persons(settings.person_type), Person)
    result = backfill(load_documents(store, settings), persons, name_matcher(settings.author_name))
    if not apply or result.author is None:
        return persons, result, None
    batch = apply_each((p.document_id, lambda p=p: store.patch(p.document_id, p.fields())) for p in result.patches)
    return persons, result, batch


def run_fix_embeds(
    store: ContentStore,
    settings: Settings,
    apply: bool = False,
    ) -> tuple[list[tuple[ContentDocument, EmbedFix]], Optional[BatchResult]]:
    fixes = []
    for doc in load_documents(store, settings):
        fix = promote_embeds(doc.body or [])
        if fix.changes:
            fixes.append((doc, fix))
    batch = _patch_bodies(store, [(doc, f.body) for doc, f in fixes]) if apply else None
    return fixes, batch


def run_purge(store: ContentStore, settings: Settings, apply: bool = False) -> tuple[list[str], Optional[int]]:
    """List migrated document ids; with apply, delete them all in one transaction."""
    ids = [row["_id"] for row in store.fetch_documents(settings.document_type, settings.id_pattern)]
    if not apply or not ids:
        return ids, None
    return ids, store.delete_many(ids)
