"""check command: verify the open PR declares a version-bump scope."""

from __future__ import annotations

import click

from bumpr_cli.auth import require_write_token


@click.command("check")
@click.pass_context
def check_cmd(ctx):
    """Check the current PR for a valid scope (and changelog, when enabled).

    Does nothing on merge builds. Errors are mirrored to a PR comment when the
    comments feature is enabled.
    """
    bumpr = ctx.obj["bumpr"]
    if bumpr.is_pr():
        require_write_token(ctx.obj["config"])
    bumpr.check()
