"""publish command."""

from __future__ import annotations

import click


@click.command("publish")
@click.pass_context
def publish_cmd(ctx):
    """Publish every package if the last bump had a scope other than "none"."""
    ctx.obj["bumpr"].publish()
