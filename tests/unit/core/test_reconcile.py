"""Unit tests for core/reconcile.py"""

import pytest

from cmsfix.core.models import DocumentHeader
from cmsfix.core.reconcile import PairStatus, pair_documents, reconcile


def _docs(*ids: str) -> list[DocumentHeader]:
    return [DocumentHeader.model_validate({"_id": i, "_type": "collection.article"}) for i in ids]


def test_reconcile_example():
    """A draft with a published twin is a duplicate; a lone draft is an orphan."""
    result = reconcile(_docs("a", "drafts.a", "drafts.b"))
    assert [d.id for d in result.duplicates] == ["drafts.a"]
    assert [d.id for d in result.orphans] == ["drafts.b"]


def test_reconcile_order_independent():
    """The published twin may appear after its draft."""
    result = reconcile(_docs("drafts.a", "a"))
    assert [d.id for d in result.duplicates] == ["drafts.a"]


def test_reconcile_no_drafts():
    result = reconcile(_docs("a", "b"))
    assert result.duplicates == [] and result.orphans == []


def test_reconcile_prefix_only_stripped_at_start():
    """Only a leading 'drafts.' marks a draft."""
    result = reconcile(_docs("migrated-drafts.x", "drafts.migrated-drafts.x"))
    assert [d.id for d in result.duplicates] == ["drafts.migrated-drafts.x"]


@pytest.mark.parametrize("ids", [
    ["a", "drafts.a", "drafts.b"],
    ["drafts.x", "drafts.y", "y", "z", "drafts.z", "drafts.w"],
    ["drafts.only"],
    [],
])
def test_reconcile_partition_complete(ids):
    """Duplicates and orphans are disjoint and together cover every draft."""
    docs = _docs(*ids)
    result = reconcile(docs)
    dup = {d.id for d in result.duplicates}
    orph = {d.id for d in result.orphans}
    assert not dup & orph
    assert dup | orph == {d.id for d in docs if d.is_draft}


def test_pair_documents_status():
    pairs = pair_documents(_docs("a", "drafts.a", "drafts.b", "c"))
    assert pairs["a"].status is PairStatus.duplicate
    assert pairs["b"].status is PairStatus.orphan
    assert pairs["c"].status is PairStatus.published_only
    assert pairs["a"].draft.id == "drafts.a"


def test_reconcile_ignores_body_contents():
    """Identity decoding never looks at the body, so a malformed body still pairs."""
    docs = [
        DocumentHeader.model_validate({"_id": "a", "_type": "t", "body": [{"style": None}]}),
        DocumentHeader.model_validate({"_id": "drafts.a", "_type": "t", "body": "not a list"}),
    ]
    result = reconcile(docs)
    assert [d.id for d in result.duplicates] == ["drafts.a"]
    assert result.orphans == []
