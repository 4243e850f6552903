"""bump and info commands: act on the PR that was just merged."""

from __future__ import annotations

import click

from bumpr_cli.auth import require_write_token

_num_extra_commits = click.option(
    "--num-extra-commits",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Commits made on top of the merge commit (e.g. by earlier CI steps).",
)


@click.command("bump")
@_num_extra_commits
@click.pass_context
def bump_cmd(ctx, num_extra_commits: int):
    """Bump versions based on the last merged PR.

    \b
    Stages (each can be skipped by config or a "none" scope):
      version, changelog, commit, tag, push, release, log
    """
    bumpr = ctx.obj["bumpr"]
    if not bumpr.is_pr():
        require_write_token(ctx.obj["config"])
    bumpr.bump(num_extra_commits=num_extra_commits)


@click.command("info")
@_num_extra_commits
@click.pass_context
def info_cmd(ctx, num_extra_commits: int):
    """Write the bump log for the last merged PR without changing anything."""
    bumpr = ctx.obj["bumpr"]
    if not bumpr.is_pr():
        require_write_token(ctx.obj["config"])
    bumpr.info(num_extra_commits=num_extra_commits)
