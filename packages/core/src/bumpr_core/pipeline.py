"""Version-bump orchestration.

Each top-level command builds a PrInfo and threads it through a fixed list of
stages. A stage either returns an updated PrInfo or a ``Skipped`` explaining
why it did nothing; ``_run_stages`` prints skip reasons in one place and stops
at the first exception. There is no rollback: a commit that was made before a
failed push stays made.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence, Union

from rich.console import Console

from bumpr_core.changelog import extract_changelog, update_changelog_file
from bumpr_core.errors import PipelineError
from bumpr_core.manifests import read_name, read_version, write_version
from bumpr_core.models import PrInfo
from bumpr_core.notify import build_release_message, send_slack_message
from bumpr_core.reporting import with_error_reporting
from bumpr_core.scope import resolve_scope
from bumpr_core.templates import expand_variables, get_date_string
from bumpr_core.utils.concurrency import run_concurrently
from bumpr_core.utils.shell import run
from bumpr_core.version import bump_version_string, find_packages, find_version_files
from bumpr_store.errors import NoLogFileError
from bumpr_store.log_file import LogFileStore
from bumpr_store.models import LogRecord, PrRecord, UserRecord

if TYPE_CHECKING:
    from bumpr_core.ci.providers import Ci
    from bumpr_core.config import Config
    from bumpr_core.models import PullRequest

console = Console()
logger = logging.getLogger(__name__)

COMMIT_PREFIX = "[ci skip] [bumpr]"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class Skipped:
    """A stage decided not to act. The PrInfo it was given flows on unchanged."""

    reason: str


StageResult = Union[PrInfo, Skipped]
Stage = Callable[[PrInfo], StageResult]


def _stage_label(stage: Stage) -> str:
    return stage.__name__.removeprefix("maybe_").replace("_", " ")


def to_log_record(info: PrInfo) -> LogRecord:
    return LogRecord(
        scope=info.scope,
        version=info.version,
        changelog=info.changelog,
        pr=PrRecord(number=info.number, url=info.url, user=UserRecord(login=info.author, url=info.author_url)),
    )


def from_log_record(record: LogRecord) -> PrInfo:
    return PrInfo(
        scope=record.scope,
        number=record.pr.number,
        url=record.pr.url,
        author=record.pr.user.login,
        author_url=record.pr.user.url,
        changelog=record.changelog,
        version=record.version,
    )


class Bumpr:
    """Drives the check/bump/info/tag/publish commands for one CI build."""

    def __init__(self, config: Config, vcs, ci: Ci):
        self.config = config
        self.vcs = vcs
        self.ci = ci

    # ------------------------------------------------------------------ #
    # Commands                                                             #
    # ------------------------------------------------------------------ #

    def is_pr(self) -> bool:
        is_pr = self.config.computed.is_pr
        logger.info("This build is%s a PR", "" if is_pr else " not")
        return is_pr

    def check(self) -> PrInfo | None:
        """Verify the open PR declares a valid scope (and changelog, if enabled)."""
        if not self.config.computed.is_pr:
            console.print("[yellow]Not a PR build, skipping check[/yellow]")
            return None

        info = self.get_open_pr_info()
        console.print(f"Found a [bold]{info.scope}[/bold] bump for the current PR")
        return info

    def bump(self, num_extra_commits: int = 0) -> PrInfo | None:
        """Bump, commit, tag, push and release based on the last merged PR."""
        if self.config.computed.is_pr:
            console.print("[yellow]Not a merge build, skipping bump[/yellow]")
            return None

        info = self.get_merged_pr_info(num_extra_commits)
        return self._run_stages(
            info,
            [
                self.maybe_bump_version,
                self.maybe_update_changelog,
                self.maybe_commit_changes,
                self.maybe_create_tag,
                self.maybe_push_changes,
                self.maybe_create_release,
                self.maybe_log_changes,
            ],
        )

    def info(self, num_extra_commits: int = 0) -> PrInfo | None:
        """Resolve the last merged PR and write the log file, without bumping."""
        if self.config.computed.is_pr:
            console.print("[yellow]Not a merge build, skipping info[/yellow]")
            return None

        info = self.get_merged_pr_info(num_extra_commits)
        return self._run_stages(info, [self.maybe_log_changes])

    def tag(self, info_file: str | None = None) -> PrInfo | None:
        """Re-create the tag (and release) for the current version without bumping.

        With ``info_file`` (a bump log), its PR details feed the templates;
        otherwise placeholder PR fields are used.
        """
        if self.config.computed.is_pr:
            console.print("[yellow]Not a merge build, skipping tag[/yellow]")
            return None

        root_manifest = self.config.files[0]
        current_version = read_version(root_manifest)

        if info_file:
            base = from_log_record(LogFileStore(info_file).load())
        else:
            # Any scope but "none", so the tag stage acts.
            base = PrInfo(scope="patch", number=-1, url="")

        # The modified files are nominal; push skips when there are none.
        info = replace(
            base,
            version=current_version,
            modified_files=(self.config.features.changelog.file, root_manifest),
        )

        self.ci.setup_git_env()
        return self._run_stages(info, [self.maybe_create_tag, self.maybe_push_changes, self.maybe_create_release])

    def publish(self) -> LogRecord | None:
        """Publish every workspace package if the last bump had a real scope."""
        try:
            record = self._log_store().load()
        except NoLogFileError:
            console.print("Skipping publish because no log file found.")
            return None

        if not record.scope:
            console.print("Skipping publish because no scope found.")
            return None

        if record.scope == "none":
            console.print('Skipping publish because of "none" scope.')
            return None

        publish = self.config.publish
        console.print(f"Publishing [bold]{record.version}[/bold]")
        Path(publish.credentials_file).write_text(publish.credentials, encoding="utf-8")

        packages = find_packages(self.config.packages_dir, self.config.files)
        run_concurrently(lambda package: run(publish.command, cwd=package), packages)
        console.print(f"[green]Published {len(packages)} package(s)[/green]")

        result = self.maybe_send_slack_message(record)
        if isinstance(result, Skipped):
            console.print(f"[dim]Skipping slack message: {result.reason}[/dim]")
        return record

    def log(self, key: str):
        """Return the value at dotted ``key`` in the log file."""
        return self._log_store().get(key)

    # ------------------------------------------------------------------ #
    # PR resolution                                                        #
    # ------------------------------------------------------------------ #

    def get_last_pr(self, num_extra_commits: int = 0) -> PullRequest:
        """Find the PR merged as HEAD, skipping ``num_extra_commits`` later commits."""
        logger.info("Getting last PR: num_extra_commits = %d", num_extra_commits)
        sha = run(["git", "rev-list", "HEAD", "--max-count=1", f"--skip={num_extra_commits}"])
        logger.info("Fetching PR for sha [%s]", sha)
        return self.vcs.get_merged_pr_by_sha(sha)

    def get_merged_pr_info(self, num_extra_commits: int = 0) -> PrInfo:
        pr = self.get_last_pr(num_extra_commits)
        return self._resolve(pr, required=())

    def get_open_pr_info(self) -> PrInfo:
        pr = self.vcs.get_pr(self.config.computed.pr_number)
        return self._resolve(pr, required=self.config.features.changelog.required)

    def _resolve(self, pr: PullRequest, required: Sequence[str]) -> PrInfo:
        scope = with_error_reporting(self.config, self.vcs, lambda: resolve_scope(pr, self.config.max_scope))

        changelog = ""
        if self.config.is_enabled("changelog") and scope != "none":
            changelog = with_error_reporting(self.config, self.vcs, lambda: extract_changelog(pr, required))

        return PrInfo(
            scope=scope,
            number=pr.number,
            url=pr.url,
            author=pr.author,
            author_url=pr.author_url,
            changelog=changelog,
        )

    # ------------------------------------------------------------------ #
    # Stages                                                               #
    # ------------------------------------------------------------------ #

    def maybe_bump_version(self, info: PrInfo) -> StageResult:
        """Apply the scope to every managed manifest in every workspace package.

        All manifests must land on the same version.
        """
        if info.scope == "none":
            return Skipped('"none" scope')

        files = find_version_files(find_packages(self.config.packages_dir, self.config.files), self.config.files)
        if not files:
            raise PipelineError(f"No version files found (looked for {', '.join(self.config.files)})")

        new_versions = run_concurrently(lambda path: bump_version_string(read_version(path), info.scope), files)
        distinct = sorted(set(new_versions))
        if len(distinct) != 1:
            raise PipelineError(f"Version files would end up on different versions: {', '.join(distinct)}")

        version = distinct[0]
        run_concurrently(lambda path: write_version(path, version), files)
        console.print(f"Bumped {len(files)} file(s) to [bold]{version}[/bold]")
        return replace(info, version=version).with_modified(*files)

    def maybe_update_changelog(self, info: PrInfo) -> StageResult:
        if not self.config.is_enabled("changelog"):
            return Skipped("disabled by config")
        if info.scope == "none":
            return Skipped('"none" scope')

        filename = self.config.features.changelog.file
        update_changelog_file(filename, info, self._date_string())
        console.print(f"Updated {filename}")
        return info.with_modified(filename)

    def maybe_commit_changes(self, info: PrInfo) -> StageResult:
        if not info.modified_files:
            return Skipped("no files were changed")

        build_number = self.config.computed.build_number
        console.print("Committing changes")
        self.ci.setup_git_env()
        self.ci.add(list(info.modified_files))
        self.ci.commit(f"{COMMIT_PREFIX} Version bump to {info.version}", f"From CI build {build_number}")
        return info

    def maybe_create_tag(self, info: PrInfo) -> StageResult:
        if not self.config.is_enabled("tag"):
            return Skipped("disabled by config")
        if info.scope == "none":
            return Skipped('"none" scope')

        name = expand_variables(self.config.features.tag.name, info, self._date_string())
        console.print(f"Creating tag [bold]{name}[/bold]")
        self.ci.tag(name, f"Generated tag from CI build {self.config.computed.build_number}")
        return info

    def maybe_push_changes(self, info: PrInfo) -> StageResult:
        if not info.modified_files:
            return Skipped("nothing changed")

        console.print("Pushing changes")
        self.ci.push()
        return info

    def maybe_create_release(self, info: PrInfo) -> StageResult:
        """Create a VCS release and upload every file in the artifacts directory."""
        if not self.config.is_enabled("release"):
            return Skipped("disabled by config")
        if info.scope == "none":
            return Skipped('"none" scope')

        release_config = self.config.features.release
        date_string = self._date_string()
        tag_name = expand_variables(self.config.features.tag.name, info, date_string)
        release = self.vcs.create_release(
            tag_name,
            expand_variables(release_config.name, info, date_string),
            expand_variables(release_config.description, info, date_string),
        )
        console.print(f"Created release for [bold]{tag_name}[/bold]")

        artifacts = release_config.artifacts
        if artifacts:
            paths = sorted(
                os.path.join(artifacts, name)
                for name in os.listdir(artifacts)
                if os.path.isfile(os.path.join(artifacts, name))
            )
            run_concurrently(
                lambda path: self.vcs.upload_release_asset(release, path, mimetypes.guess_type(path)[0] or OCTET_STREAM),
                paths,
            )
            console.print(f"Uploaded {len(paths)} release asset(s)")
        return info

    def maybe_log_changes(self, info: PrInfo) -> StageResult:
        if not self.config.is_enabled("logging"):
            return Skipped("disabled by config")

        self._log_store().save(to_log_record(info))
        logger.info("Wrote bump log to %s", self.config.features.logging.file)
        return info

    def maybe_send_slack_message(self, record: LogRecord) -> LogRecord | Skipped:
        if not self.config.is_enabled("slack"):
            return Skipped("disabled by config")

        url = self.config.computed.slack_url
        if not url:
            raise PipelineError(f"Slack is enabled but ${self.config.features.slack.url_env} is not set")

        message = build_release_message(
            read_name(self.config.files[0]),
            record.version,
            record.scope,
            record.pr.number,
            record.pr.url,
            record.pr.user.login,
            record.pr.user.url,
        )
        console.print("Sending slack message")
        send_slack_message(url, message, self.config.features.slack.channels)
        return record

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def _run_stages(self, info: PrInfo, stages: Sequence[Stage]) -> PrInfo:
        for stage in stages:
            result = stage(info)
            if isinstance(result, Skipped):
                console.print(f"[dim]Skipping {_stage_label(stage)}: {result.reason}[/dim]")
                continue
            info = result
        return info

    def _date_string(self) -> str:
        return get_date_string(self.config)

    def _log_store(self) -> LogFileStore:
        return LogFileStore(self.config.features.logging.file)
