"""GitHub token resolution with gh CLI fallback.

Resolution order (stops at first success):
  1. The write-token env var named in the config (``vcs.env.write_token``)
  2. GITHUB_TOKEN environment variable
  3. `gh auth token` (GitHub CLI session, works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import TYPE_CHECKING, Iterable

import click

if TYPE_CHECKING:
    from bumpr_core.config import Config

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"


def _gh_cli_token() -> str | None:
    """Return the token of the active `gh` session, if there is one."""
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None

    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token or None


def resolve_github_token(env_vars: Iterable[str] = (DEFAULT_TOKEN_ENV,)) -> str | None:
    """Return a token from the first set variable in ``env_vars``, else from `gh`.

    The literal value ``undefined`` counts as unset. Never raises: callers
    check for None and emit a UsageError.
    """
    for name in dict.fromkeys(env_vars):
        token = os.environ.get(name) if name else None
        if token and token != "undefined":
            logger.debug("Resolved GitHub token from $%s.", name)
            return token

    return _gh_cli_token()


def apply_token_fallback(config: Config) -> None:
    """Fill ``computed.write_token`` when the configured env var left it empty."""
    if config.computed.write_token:
        return
    token = resolve_github_token((config.vcs.env.write_token, DEFAULT_TOKEN_ENV))
    if token:
        config.computed.write_token = token


def require_write_token(config: Config) -> None:
    if not config.computed.write_token:
        raise click.UsageError(
            f"No GitHub token found. Set {config.vcs.env.write_token} or {DEFAULT_TOKEN_ENV}, "
            "or run `gh auth login` first."
        )
