"""GitHub implementation of the VCS collaborator, built on PyGithub."""

from __future__ import annotations

import logging
from itertools import islice
from typing import TYPE_CHECKING

from github import Github

from bumpr_core.changelog import normalize_newlines
from bumpr_core.errors import PipelineError
from bumpr_core.models import PullRequest
from bumpr_core.utils.shell import run

if TYPE_CHECKING:
    from bumpr_core.config import Config

logger = logging.getLogger(__name__)

PUSH_REMOTE = "ci-origin"

# How many recently-closed PRs to scan for a merge commit.
_MERGED_PR_SEARCH_LIMIT = 100


def get_repo(repo_name: str, token: str | None):
    return (Github(token) if token else Github()).get_repo(repo_name)


def convert_pr(gh_pr) -> PullRequest:
    """Normalize a PyGithub PullRequest into a PullRequest record."""
    user = gh_pr.user
    return PullRequest(
        number=gh_pr.number,
        description=normalize_newlines(gh_pr.body or ""),
        url=gh_pr.html_url,
        author=user.login if user else "",
        author_url=user.html_url if user else "",
        name=gh_pr.title or "",
    )


class GitHubVcs:
    """Talks to github.com (or an enterprise domain) for one repository.

    Reads use the read-only token when one is configured and fall back to the
    write token; anything that changes GitHub state uses the write token.
    """

    def __init__(self, config: Config, read_repo=None, write_repo=None):
        self.config = config
        self._read_repo = read_repo
        self._write_repo = write_repo

    @property
    def read_repo(self):
        if self._read_repo is None:
            auth = self.config.computed
            self._read_repo = get_repo(self.config.vcs.repository.full_name, auth.read_token or auth.write_token)
        return self._read_repo

    @property
    def write_repo(self):
        if self._write_repo is None:
            self._write_repo = get_repo(self.config.vcs.repository.full_name, self.config.computed.write_token)
        return self._write_repo

    def add_remote_for_push(self) -> str:
        """Add a remote that carries the write token and return its name."""
        repository = self.config.vcs.repository
        token = self.config.computed.write_token
        logger.info("Adding %s remote", PUSH_REMOTE)
        url = f"https://{token}@{self.config.vcs.domain}/{repository.owner}/{repository.name}"
        run(["git", "remote", "add", PUSH_REMOTE, url])
        return PUSH_REMOTE

    def get_pr(self, pr_number: int | str) -> PullRequest:
        logger.info("Fetching PR #%s", pr_number)
        return convert_pr(self.read_repo.get_pull(int(pr_number)))

    def get_merged_pr_by_sha(self, sha: str) -> PullRequest:
        """Find the recently closed PR whose merge commit is ``sha``.

        Raises:
            PipelineError: If no recently closed PR was merged as ``sha``
        """
        pulls = self.read_repo.get_pulls(state="closed", sort="updated", direction="desc")
        for gh_pr in islice(pulls, _MERGED_PR_SEARCH_LIMIT):
            if gh_pr.merge_commit_sha == sha:
                return convert_pr(gh_pr)
        raise PipelineError(f"None of the most recently closed PRs has merge commit {sha}")

    def post_comment(self, pr_number: int | str, comment: str) -> None:
        logger.info("Posting comment to PR #%s", pr_number)
        self.write_repo.get_issue(int(pr_number)).create_comment(comment)

    def create_release(self, tag_name: str, name: str, description: str):
        logger.info("Creating release %s for tag %s", name, tag_name)
        return self.write_repo.create_git_release(tag_name, name, description)

    def upload_release_asset(self, release, path: str, content_type: str):
        logger.info("Uploading release asset %s (%s)", path, content_type)
        return release.upload_asset(path, content_type=content_type)


def get_vcs(config: Config) -> GitHubVcs:
    provider = config.vcs.provider
    logger.info("Detected VCS provider: %s", provider)
    if provider == "github":
        return GitHubVcs(config)
    raise ValueError(f"Invalid vcs provider: {provider!r}. Choose 'github'.")
