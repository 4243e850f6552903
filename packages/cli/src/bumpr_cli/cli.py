"""CLI entry point for bumpr.

Commands:
  check    verify the open PR declares a version-bump scope (PR builds)
  bump     bump versions, changelog, tag and release after a merge
  info     write the bump log for the last merged PR without bumping
  tag      re-create the tag and release for the current version
  publish  publish every package when the last bump had a real scope
  log      print a value from the bump log
  is-pr    print "true" on PR builds, "false" otherwise
"""

from __future__ import annotations

import importlib.metadata
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler

from bumpr_cli.commands.bump import bump_cmd, info_cmd
from bumpr_cli.commands.check import check_cmd
from bumpr_cli.commands.log import is_pr_cmd, log_cmd
from bumpr_cli.commands.publish import publish_cmd
from bumpr_cli.commands.tag import tag_cmd
from bumpr_core.errors import CommandError

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_bumpr(config):
    """Wire the configured VCS and CI adapters into a pipeline.

    Adapters connect lazily, so commands that never touch the API (``log``,
    ``is-pr``) work without a token.
    """
    from bumpr_core.ci.providers import get_ci
    from bumpr_core.gh.github import get_vcs
    from bumpr_core.pipeline import Bumpr

    vcs = get_vcs(config)
    return Bumpr(config, vcs, get_ci(config, vcs))


class BumprGroup(click.Group):
    """Turns any uncaught error into a red ``Error:`` line and exit code 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as err:
            logger.debug("Command failed", exc_info=True)
            if isinstance(err, CommandError) and err.stderr:
                logger.debug("Command stderr:\n%s", err.stderr.rstrip())
            console.print(f"bumpr: Error: {err}", style="red", markup=False, highlight=False, soft_wrap=True)
            raise SystemExit(1) from err


@click.group(cls=BumprGroup)
@click.version_option(
    version=importlib.metadata.version("bumpr"),
    prog_name="bumpr",
)
@click.option(
    "--config",
    "config_path",
    default=".bumpr.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="BUMPR_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log diagnostic detail (also enabled by VERBOSE).")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Semantic-version bumping driven by pull request descriptions."""
    from bumpr_core.config import load_config
    from bumpr_cli.auth import apply_token_fallback

    _configure_logging(verbose or bool(os.environ.get("VERBOSE")))
    ctx.ensure_object(dict)

    config = load_config(config_path)
    apply_token_fallback(config)

    ctx.obj["config"] = config
    ctx.obj["bumpr"] = _build_bumpr(config)


main.add_command(check_cmd)
main.add_command(bump_cmd)
main.add_command(info_cmd)
main.add_command(tag_cmd)
main.add_command(publish_cmd)
main.add_command(log_cmd)
main.add_command(is_pr_cmd)
