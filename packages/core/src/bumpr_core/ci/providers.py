"""CI adapters.

Every provider shares the same git primitives; they differ only in how the
push target is built. A provider is a small profile composed into ``Ci``
rather than a subclass overriding ``push``/``setup_git_env``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from bumpr_core.utils.shell import run

if TYPE_CHECKING:
    from bumpr_core.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CiProvider:
    """How one CI provider lays out the branch it builds.

    ``local_branch_prefix`` is set for providers that build on a detached
    HEAD: bumpr checks out ``<prefix><branch>`` locally and pushes it back
    onto ``<branch>``.
    """

    name: str
    local_branch_prefix: str = ""


PROVIDERS = {
    "circle": CiProvider("circle"),
    "github": CiProvider("github"),
    "travis": CiProvider("travis", local_branch_prefix="ci-"),
}


class Ci:
    """git add/commit/tag/push against the checkout the CI job is running in."""

    def __init__(self, config: Config, vcs, provider: CiProvider, runner: Callable[[Sequence[str]], str] = run):
        self.config = config
        self.vcs = vcs
        self.provider = provider
        self._run = runner

    @property
    def local_branch(self) -> str:
        return f"{self.provider.local_branch_prefix}{self.config.computed.branch}"

    def add(self, files: Sequence[str]) -> str:
        return self._run(["git", "add", *files])

    def commit(self, summary: str, message: str) -> str:
        return self._run(["git", "commit", "-m", summary, "-m", message])

    def tag(self, name: str, message: str) -> str:
        return self._run(["git", "tag", name, "-a", "-m", message])

    def setup_git_env(self) -> str:
        user = self.config.ci.git_user
        self._run(["git", "config", "--global", "user.email", user.email])
        output = self._run(["git", "config", "--global", "user.name", user.name])
        if self.provider.local_branch_prefix:
            output = self._run(["git", "checkout", "-b", self.local_branch])
        return output

    def push(self) -> str:
        remote = self.vcs.add_remote_for_push()
        branch = self.config.computed.branch
        if self.provider.local_branch_prefix:
            refspec = f"{self.local_branch}:refs/heads/{branch}"
        else:
            refspec = branch
        logger.info("Pushing %s to %s", refspec, remote)
        return self._run(["git", "push", remote, refspec, "--tags"])


def get_ci(config: Config, vcs) -> Ci:
    provider = config.ci.provider
    logger.info("Detected CI provider: %s", provider)
    if provider not in PROVIDERS:
        raise ValueError(f"Invalid ci provider: {provider!r}. Choose one of {', '.join(sorted(PROVIDERS))}.")
    return Ci(config, vcs, PROVIDERS[provider])

