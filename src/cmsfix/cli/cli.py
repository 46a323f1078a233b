"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from cmsfix.cli.commands import (
    LOG_FORMAT, cleanup_drafts_cmd, fix_authors_cmd, fix_headings_cmd, fix_nested_embeds_cmd,
    lift_images_cmd, purge_cmd, scan_boilerplate_cmd, strip_footer_cmd, strip_header_cmd,
)


app = typer.Typer(name="cmsfix", no_args_is_help=True, help="Content migration fixes for a headless CMS")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
    ):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


app.command(name="lift-images")(lift_images_cmd)
app.command(name="scan-boilerplate")(scan_boilerplate_cmd)
app.command(name="strip-footer")(strip_footer_cmd)
app.command(name="strip-header")(strip_header_cmd)
app.command(name="cleanup-drafts")(cleanup_drafts_cmd)
app.command(name="fix-headings")(fix_headings_cmd)
app.command(name="fix-authors")(fix_authors_cmd)
app.command(name="fix-nested-embeds")(fix_nested_embeds_cmd)
app.command(name="purge")(purge_cmd)
