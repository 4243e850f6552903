"""Configuration loading.

The user's ``.bumpr.yml`` is deep-merged over ``DEFAULT_CONFIG`` and then
converted into typed dataclasses. Facts that depend on the CI environment
(PR number, build number, branch, tokens) are resolved once at load time and
kept under ``config.computed``.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "ci": {
        "env": {
            "branch": "TRAVIS_BRANCH",
            "build_number": "TRAVIS_BUILD_NUMBER",
            "pr_number": "TRAVIS_PULL_REQUEST",
            "pr_url": "",
        },
        "git_user": {
            "email": "bumpr@domain.com",
            "name": "Bumpr",
        },
        "provider": "travis",
    },
    "features": {
        "changelog": {"enabled": False, "file": "CHANGELOG.md", "required": []},
        "comments": {"enabled": False},
        "date_format": {"enabled": False, "format": "%Y-%m-%d"},
        "logging": {"enabled": False, "file": ".bumpr-log.json"},
        "max_scope": {"enabled": False, "value": "major"},
        "release": {"enabled": False, "artifacts": "", "name": "v{version}", "description": "{changelog}"},
        "slack": {"enabled": False, "env": {"url": "SLACK_URL"}, "channels": []},
        "tag": {"enabled": False, "name": "v{version}"},
        "timezone": {"enabled": False, "zone": "Etc/UTC"},
    },
    "files": ["package.json"],
    "packages_dir": "packages",
    "publish": {
        "credentials_file": ".npmrc",
        "credentials": "//registry.npmjs.org/:_authToken=${NPM_TOKEN}",
        "command": "npm publish .",
    },
    "vcs": {
        "domain": "github.com",
        "env": {
            "read_token": "GITHUB_READ_ONLY_TOKEN",
            "write_token": "GITHUB_TOKEN",
        },
        "provider": "github",
        "repository": {
            "main_branch": "main",
            "name": "",
            "owner": "",
        },
    },
}

FEATURE_NAMES = frozenset(DEFAULT_CONFIG["features"])


@dataclass
class GitUser:
    email: str
    name: str


@dataclass
class CiEnv:
    """Names of the environment variables the CI provider populates."""

    branch: str
    build_number: str
    pr_number: str
    pr_url: str = ""


@dataclass
class CiConfig:
    provider: str
    env: CiEnv
    git_user: GitUser


@dataclass
class VcsEnv:
    read_token: str
    write_token: str


@dataclass
class Repository:
    owner: str
    name: str
    main_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class VcsConfig:
    provider: str
    domain: str
    env: VcsEnv
    repository: Repository


@dataclass
class ChangelogFeature:
    enabled: bool = False
    file: str = "CHANGELOG.md"
    required: list[str] = field(default_factory=list)


@dataclass
class CommentsFeature:
    enabled: bool = False


@dataclass
class DateFormatFeature:
    enabled: bool = False
    format: str = "%Y-%m-%d"


@dataclass
class LoggingFeature:
    enabled: bool = False
    file: str = ".bumpr-log.json"


@dataclass
class MaxScopeFeature:
    enabled: bool = False
    value: str = "major"


@dataclass
class ReleaseFeature:
    enabled: bool = False
    artifacts: str = ""
    name: str = "v{version}"
    description: str = "{changelog}"


@dataclass
class SlackFeature:
    enabled: bool = False
    url_env: str = "SLACK_URL"
    channels: list[str] = field(default_factory=list)


@dataclass
class TagFeature:
    enabled: bool = False
    name: str = "v{version}"


@dataclass
class TimezoneFeature:
    enabled: bool = False
    zone: str = "Etc/UTC"


@dataclass
class Features:
    changelog: ChangelogFeature
    comments: CommentsFeature
    date_format: DateFormatFeature
    logging: LoggingFeature
    max_scope: MaxScopeFeature
    release: ReleaseFeature
    slack: SlackFeature
    tag: TagFeature
    timezone: TimezoneFeature


@dataclass
class PublishConfig:
    credentials_file: str
    credentials: str
    command: str


@dataclass
class Computed:
    """Runtime facts read from the environment."""

    build_number: str = ""
    branch: str = ""
    pr_number: str = "false"
    is_pr: bool = False
    slack_url: str | None = None
    read_token: str | None = None
    write_token: str | None = None


@dataclass
class Config:
    ci: CiConfig
    vcs: VcsConfig
    features: Features
    files: list[str]
    packages_dir: str
    publish: PublishConfig
    computed: Computed = field(default_factory=Computed)

    def is_enabled(self, feature: str) -> bool:
        if feature not in FEATURE_NAMES:
            raise KeyError(f"Unknown feature: {feature!r}")
        return getattr(self.features, feature).enabled

    @property
    def max_scope(self) -> str:
        return self.features.max_scope.value if self.is_enabled("max_scope") else "major"


def _deep_merge(base: dict, override: Mapping) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _pick(cls, data: Mapping):
    """Instantiate a dataclass from the keys of ``data`` it knows about."""
    return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})


def _get_env(environ: Mapping[str, str], key: str, default: str | None = None) -> str | None:
    """Read ``key`` from the environment, treating the literal "undefined" as unset."""
    if not key:
        return default
    value = environ.get(key)
    if value is None or value == "undefined":
        return default
    return value


def _build_features(data: Mapping) -> Features:
    slack = data["slack"]
    return Features(
        changelog=_pick(ChangelogFeature, data["changelog"]),
        comments=_pick(CommentsFeature, data["comments"]),
        date_format=_pick(DateFormatFeature, data["date_format"]),
        logging=_pick(LoggingFeature, data["logging"]),
        max_scope=_pick(MaxScopeFeature, data["max_scope"]),
        release=_pick(ReleaseFeature, data["release"]),
        slack=SlackFeature(
            enabled=slack.get("enabled", False),
            url_env=slack.get("env", {}).get("url", "SLACK_URL"),
            channels=list(slack.get("channels") or []),
        ),
        tag=_pick(TagFeature, data["tag"]),
        timezone=_pick(TimezoneFeature, data["timezone"]),
    )


def compute_env(config: Config, environ: Mapping[str, str]) -> Computed:
    """Resolve the CI/VCS facts that come from environment variables."""
    env = config.ci.env
    pr_number = _get_env(environ, env.pr_number, "false")

    # Some providers only expose the PR URL on PR builds.
    if pr_number == "false":
        parts = (_get_env(environ, env.pr_url, "") or "").split("/")
        if len(parts) > 1:
            pr_number = parts[-1] or "false"

    computed = Computed(
        build_number=_get_env(environ, env.build_number, "") or "",
        branch=_get_env(environ, env.branch, config.vcs.repository.main_branch) or "",
        pr_number=pr_number,
        is_pr=pr_number != "false",
        read_token=_get_env(environ, config.vcs.env.read_token),
        write_token=_get_env(environ, config.vcs.env.write_token),
    )
    if config.features.slack.enabled:
        computed.slack_url = _get_env(environ, config.features.slack.url_env)

    logger.info("bumpr::config: prNumber [%s], isPr [%s]", computed.pr_number, computed.is_pr)
    return computed


def build_config(data: Mapping, environ: Mapping[str, str] | None = None) -> Config:
    """Build a typed Config from a (merged) config dict and an environment."""
    ci = data["ci"]
    vcs = data["vcs"]
    config = Config(
        ci=CiConfig(
            provider=ci["provider"],
            env=_pick(CiEnv, ci["env"]),
            git_user=_pick(GitUser, ci["git_user"]),
        ),
        vcs=VcsConfig(
            provider=vcs["provider"],
            domain=vcs["domain"],
            env=_pick(VcsEnv, vcs["env"]),
            repository=_pick(Repository, vcs["repository"]),
        ),
        features=_build_features(data["features"]),
        files=list(data["files"]),
        packages_dir=data["packages_dir"],
        publish=_pick(PublishConfig, data["publish"]),
    )
    config.computed = compute_env(config, os.environ if environ is None else environ)
    return config


def load_config(config_path: str = ".bumpr.yml", environ: Mapping[str, str] | None = None) -> Config:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .bumpr.yml in the current directory
      3. Environment variables (computed facts only)
    """
    path = Path(config_path)
    file_config: dict = {}
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
    else:
        logger.info("No config file found at %s, using defaults", config_path)

    return build_config(_deep_merge(DEFAULT_CONFIG, file_config), environ)
