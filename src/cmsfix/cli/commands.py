"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from cmsfix.config import Settings, load_config, require_store
from cmsfix.core.boilerplate import block_text
from cmsfix.core.html.parse import inner_html
from cmsfix.core.pipeline import (
    BatchResult, run_cleanup_drafts, run_fix_authors, run_fix_embeds, run_fix_headings,
    run_lift, run_purge, run_scan, run_strip_footer, run_strip_header,
)
from cmsfix.core.utils.diff import markup_diff
from cmsfix.core.utils.text import preview
from cmsfix.store.base import ContentStore, StoreError
from cmsfix.store.sanity import SanityStore


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

Apply = Annotated[bool, typer.Option("--apply", help="Write changes (default is a dry run)")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    return settings


def make_store(settings: Settings) -> ContentStore:
    return SanityStore.from_settings(settings)


def _store(settings: Settings, write: bool = False) -> ContentStore:
    """Validate store configuration before any access; a write needs the token."""
    try:
        require_store(settings, write=write)
    except ValueError as e:
        _fail(str(e))
    return make_store(settings)


def _mode(apply: bool) -> str:
    return "APPLY" if apply else "DRY RUN"


def _echo_batch(batch: Optional[BatchResult], verb: str) -> None:
    """Print the write tally, listing failed ids on stderr."""
    if batch is None:
        typer.echo("DRY RUN - run with --apply to make changes.")
        return
    typer.echo(f"{len(batch.succeeded)} {verb}, {len(batch.failed)} failed")
    for doc_id, error in batch.failed:
        typer.echo(f"  failed: {doc_id}: {error}", err=True)


def lift_images_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="HTML file to normalize")],
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write normalized HTML here")] = None,
    selector: Annotated[Optional[str], typer.Option("--selector", help="CSS selector of the content container")] = None,
    diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff of the container markup")] = False,
    prune: Annotated[bool, typer.Option("--prune/--no-prune", help="Remove wrappers left empty by splitting")] = True,
    ):
    """Hoist images out of inline wrappers in a local HTML file."""
    settings = _settings(overrides={"content_selector": selector})
    report = run_lift(path.read_text(encoding="utf-8"), settings, prune=prune)
    html = inner_html(report.after)

    if out:
        out.write_text(html, encoding="utf-8")
        typer.echo(f"  {path} -> {out}")
    elif not diff:
        typer.echo(html)
    if diff:
        typer.echo(markup_diff(inner_html(report.before), html, path.name))
    typer.echo(f"Top level images: {report.top_level}/{report.images}")
    typer.echo(f"Remaining nested images: {report.nested}")


def scan_boilerplate_cmd():
    """Report blocks that look like leftover boilerplate (no changes are made)."""
    settings = _settings()
    store = _store(settings)
    try:
        report = run_scan(store, settings)
    except StoreError as e:
        _fail("Scan failed", e)
    for doc, matches in report:
        typer.echo(f"{doc.label}:")
        for m in matches:
            typer.echo(f'  [{m.block_index}] "{preview(m.matched_text)}" (matches {m.pattern})')
    typer.echo(f"{sum(len(m) for _, m in report)} match(es) in {len(report)} document(s)")


def strip_footer_cmd(apply: Apply = False):
    """Remove copyright footers (and everything after them) from document bodies."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        cuts, batch = run_strip_footer(store, settings, apply)
    except StoreError as e:
        _fail("Footer cleanup failed", e)
    typer.echo(f"Mode: {_mode(apply)}")
    for doc, cut in cuts:
        typer.echo(f"{doc.label}: removing {len(cut.removed)} block(s) from index {cut.index}")
    typer.echo(f"{len(cuts)} document(s) {'fixed' if apply else 'would be fixed'}")
    _echo_batch(batch, "patched")


def strip_header_cmd(apply: Apply = False):
    """Remove scraped site-title lines ("Secret Atomics", "Blog") from the top of migrated bodies."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        cuts, batch = run_strip_header(store, settings, apply)
    except StoreError as e:
        _fail("Header cleanup failed", e)
    typer.echo(f"Mode: {_mode(apply)}")
    for doc, cut in cuts:
        typer.echo(f"{doc.label}: removing {cut.count} block(s)")
        for i, block in enumerate(cut.removed):
            typer.echo(f'  [{i}] "{preview(block_text(block))}" ({block.type_})')
    typer.echo(f"{len(cuts)} document(s) {'fixed' if apply else 'would be fixed'}")
    _echo_batch(batch, "patched")


def cleanup_drafts_cmd(apply: Apply = False):
    """Report duplicate and orphan drafts; --apply deletes duplicates only."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        result, batch = run_cleanup_drafts(store, settings, apply)
    except StoreError as e:
        _fail("Draft cleanup failed", e)
    typer.echo(f"Duplicate drafts (published version exists): {len(result.duplicates)}")
    for doc in result.duplicates:
        typer.echo(f"  {doc.label}")
    typer.echo(f"Orphan drafts (no published version): {len(result.orphans)}")
    for doc in result.orphans:
        typer.echo(f"  {doc.label}")
    if result.duplicates:
        _echo_batch(batch, "deleted")


def fix_headings_cmd(apply: Apply = False):
    """Downgrade unsupported heading styles (h5/h6 by default) to the replacement style."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        fixes, batch = run_fix_headings(store, settings, apply)
    except StoreError as e:
        _fail("Heading fix failed", e)
    typer.echo(f"Mode: {_mode(apply)}")
    for doc, changes in fixes:
        typer.echo(f"{doc.label}: {changes.count} fix(es)")
        for change in changes.changes:
            typer.echo(f"  {change}")
    total = sum(c.count for _, c in fixes)
    typer.echo(f"Total heading fixes: {total} in {len(fixes)} document(s)")
    if fixes:
        _echo_batch(batch, "patched")


def fix_authors_cmd(
    apply: Apply = False,
    author: Annotated[Optional[str], typer.Option("--author", help="Name fragment of the default author")] = None,
    ):
    """Attach a default author to documents with no authors."""
    settings = _settings(overrides={"author_name": author})
    store = _store(settings, write=apply)
    try:
        persons, result, batch = run_fix_authors(store, settings, apply)
    except StoreError as e:
        _fail("Author backfill failed", e)
    if result.author is None:
        typer.echo(f"No person matching '{settings.author_name}' among {len(persons)} candidate(s); nothing updated.", err=True)
        typer.echo("0 documents updated.")
        return
    typer.echo(f"Using: {result.author.id} (\"{result.author.name}\")")
    for doc in result.missing:
        typer.echo(f"  + {doc.label}")
    typer.echo(f"{result.updated} document(s) {'updated' if apply else 'would be updated'}")
    if result.patches:
        _echo_batch(batch, "patched")


def fix_nested_embeds_cmd(apply: Apply = False):
    """Move videos and images nested inside text blocks up to the body level."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        fixes, batch = run_fix_embeds(store, settings, apply)
    except StoreError as e:
        _fail("Embed fix failed", e)
    typer.echo(f"Mode: {_mode(apply)}")
    for doc, fix in fixes:
        typer.echo(f"{doc.label}:")
        for change in fix.changes:
            typer.echo(f"  {change}")
    typer.echo(f"{len(fixes)} document(s) with {sum(len(f.changes) for _, f in fixes)} fix(es)")
    if fixes:
        _echo_batch(batch, "patched")


def purge_cmd(apply: Apply = False):
    """Delete every migrated document of the configured type in one transaction."""
    settings = _settings()
    store = _store(settings, write=apply)
    try:
        ids, deleted = run_purge(store, settings, apply)
    except StoreError as e:
        _fail("Purge failed", e)
    if not ids:
        typer.echo("No migrated documents found to delete.")
        return
    if deleted is None:
        typer.echo(f"{len(ids)} document(s) would be deleted.")
        typer.echo("DRY RUN - run with --apply to make changes.")
        return
    typer.echo(f"Deleted {deleted} of {len(ids)} document(s).")
