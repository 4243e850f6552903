"""log and is-pr commands: read-only queries for CI scripts."""

from __future__ import annotations

import json

import click


@click.command("log")
@click.argument("key")
@click.pass_context
def log_cmd(ctx, key: str):
    """Print the value at dotted KEY (e.g. pr.user.login) in the bump log."""
    value = ctx.obj["bumpr"].log(key)
    click.echo(value if isinstance(value, str) else json.dumps(value))


@click.command("is-pr")
@click.pass_context
def is_pr_cmd(ctx):
    """Print "true" on PR builds and "false" otherwise."""
    click.echo("true" if ctx.obj["bumpr"].is_pr() else "false")
