"""Thin subprocess wrapper used by the CI adapter and publish step."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Sequence

from bumpr_core.errors import CommandError

logger = logging.getLogger(__name__)


def run(args: Sequence[str] | str, cwd: str | None = None, timeout: float | None = None) -> str:
    """Run a command and return its stripped stdout.

    ``args`` may be an argv list or a shell-style string (split with shlex,
    never run through a shell).

    Raises:
        CommandError: If the command exits non-zero or cannot be found
    """
    argv = shlex.split(args) if isinstance(args, str) else list(args)
    logger.debug("Running %s (cwd=%s)", argv[0] if argv else "", cwd or ".")
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {argv[0]}") from e
    except subprocess.CalledProcessError as e:
        raise CommandError(
            f"{' '.join(argv[:2])} failed with exit code {e.returncode}",
            stderr=e.stderr or "",
        ) from e
    return result.stdout.strip()
