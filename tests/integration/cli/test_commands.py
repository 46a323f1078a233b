"""Integration tests for the cmsfix commands against an in-memory store"""

import pytest
from typer.testing import CliRunner

from cmsfix.cli import commands
from cmsfix.cli.cli import app
from cmsfix.store.memory import MemoryStore


runner = CliRunner()


def _text(text: str, style: str = "normal") -> dict:
    return {"_type": "block", "style": style, "children": [{"_type": "span", "text": text}]}


@pytest.fixture(name="store")
def store_fixture(monkeypatch):
    """A MemoryStore wired in place of the Sanity adapter, with store identity configured."""
    monkeypatch.setenv("SANITY_PROJECT_ID", "proj")
    monkeypatch.setenv("SANITY_DATASET", "test")
    store = MemoryStore.from_documents([
        {"_id": "person-1", "_type": "person", "name": "Michael Example"},
        {"_id": "migrated-a", "_type": "collection.article", "metadata": {"title": "A"},
         "body": [_text("Intro"), _text("Deep", "h5"), _text("Copyright 2021")]},
        {"_id": "drafts.migrated-a", "_type": "collection.article", "metadata": {"title": "A"}},
        {"_id": "drafts.migrated-b", "_type": "collection.article", "metadata": {"title": "B"}},
    ])
    monkeypatch.setattr(commands, "make_store", lambda settings: store)
    return store


def test_cleanup_drafts_dry_run(store):
    result = runner.invoke(app, ["cleanup-drafts"])
    assert result.exit_code == 0, result.output
    assert "Duplicate drafts (published version exists): 1" in result.output
    assert "Orphan drafts (no published version): 1" in result.output
    assert "DRY RUN" in result.output
    assert store.get("drafts.migrated-a") is not None


def test_apply_requires_write_token(store):
    """--apply without SANITY_WRITE_TOKEN fails before touching the store."""
    result = runner.invoke(app, ["cleanup-drafts", "--apply"])
    assert result.exit_code == 1
    assert "SANITY_WRITE_TOKEN" in result.output
    assert store.get("drafts.migrated-a") is not None


def test_cleanup_drafts_apply(store, monkeypatch):
    monkeypatch.setenv("SANITY_WRITE_TOKEN", "sk")
    result = runner.invoke(app, ["cleanup-drafts", "--apply"])
    assert result.exit_code == 0, result.output
    assert "1 deleted, 0 failed" in result.output
    assert store.get("drafts.migrated-a") is None
    assert store.get("drafts.migrated-b") is not None


def test_missing_store_identity_exits_nonzero(monkeypatch):
    result = runner.invoke(app, ["scan-boilerplate"])
    assert result.exit_code == 1
    assert "Missing Sanity configuration" in result.output


def test_scan_boilerplate(store):
    result = runner.invoke(app, ["scan-boilerplate"])
    assert result.exit_code == 0, result.output
    assert '[2] "Copyright 2021"' in result.output
    assert "1 match(es) in 1 document(s)" in result.output


def test_fix_headings_apply(store, monkeypatch):
    monkeypatch.setenv("SANITY_WRITE_TOKEN", "sk")
    result = runner.invoke(app, ["fix-headings", "--apply"])
    assert result.exit_code == 0, result.output
    assert '[1] h5→h4: "Deep"' in result.output
    assert "Total heading fixes: 1" in result.output
    assert store.get("migrated-a")["body"][1]["style"] == "h4"


def test_strip_footer_dry_run(store):
    result = runner.invoke(app, ["strip-footer"])
    assert result.exit_code == 0, result.output
    assert "removing 1 block(s) from index 2" in result.output
    assert len(store.get("migrated-a")["body"]) == 3


def test_strip_header_apply(store, monkeypatch):
    monkeypatch.setenv("SANITY_WRITE_TOKEN", "sk")
    store.patch("migrated-a", {"body": [_text("Blog"), _text(""), _text("Intro")]})
    result = runner.invoke(app, ["strip-header", "--apply"])
    assert result.exit_code == 0, result.output
    assert 'migrated-a "A": removing 2 block(s)' in result.output
    assert '[0] "Blog" (block)' in result.output
    assert "1 patched, 0 failed" in result.output
    assert [b["children"][0]["text"] for b in store.get("migrated-a")["body"]] == ["Intro"]


def test_cleanup_drafts_with_malformed_published_body(store):
    """A published twin with a broken body still makes its draft a duplicate."""
    store.patch("migrated-a", {"body": [{"_type": "block", "style": None}]})
    result = runner.invoke(app, ["cleanup-drafts"])
    assert result.exit_code == 0, result.output
    assert "Duplicate drafts (published version exists): 1" in result.output
    assert "Orphan drafts (no published version): 1" in result.output


def test_fix_authors_dry_run(store):
    result = runner.invoke(app, ["fix-authors"])
    assert result.exit_code == 0, result.output
    assert 'Using: person-1 ("Michael Example")' in result.output
    assert "3 document(s) would be updated" in result.output
    assert "authors" not in store.get("migrated-a")


def test_fix_authors_no_match(store):
    result = runner.invoke(app, ["fix-authors", "--author", "Nobody"])
    assert result.exit_code == 0
    assert "0 documents updated." in result.output


def test_fix_nested_embeds_clean(store):
    result = runner.invoke(app, ["fix-nested-embeds"])
    assert result.exit_code == 0, result.output
    assert "0 document(s) with 0 fix(es)" in result.output


def test_purge_dry_run(store):
    result = runner.invoke(app, ["purge"])
    assert result.exit_code == 0, result.output
    assert "3 document(s) would be deleted." in result.output


def test_lift_images_writes_output(tmp_path):
    """lift-images works on local files and needs no store configuration."""
    source = tmp_path / "post.html"
    source.write_text('<html><body><div class="post-content"><p>a <img src="x.jpg"/> b</p></div></body></html>')
    out = tmp_path / "out.html"
    result = runner.invoke(app, ["lift-images", str(source), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_text() == '<p>a </p><img src="x.jpg"/><p> b</p>'
    assert "Top level images: 1/1" in result.output
    assert "Remaining nested images: 0" in result.output


def test_lift_images_diff(tmp_path):
    source = tmp_path / "post.html"
    source.write_text('<article><p><img src="x.jpg"/></p></article>')
    result = runner.invoke(app, ["lift-images", str(source), "--diff"])
    assert result.exit_code == 0, result.output
    assert "--- a/post.html" in result.output
    assert "-<p>" in result.output
    assert "-</p>" in result.output
