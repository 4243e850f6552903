"""tag command: re-create the tag and release for the current version."""

from __future__ import annotations

import click

from bumpr_cli.auth import require_write_token


@click.command("tag")
@click.option(
    "--info-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="A bump log whose PR details feed the tag and release templates.",
)
@click.pass_context
def tag_cmd(ctx, info_file: str | None):
    """Tag (and release) the version currently in the root manifest."""
    bumpr = ctx.obj["bumpr"]
    if not bumpr.is_pr():
        require_write_token(ctx.obj["config"])
    bumpr.tag(info_file=info_file)
