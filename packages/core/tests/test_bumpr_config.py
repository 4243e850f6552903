"""Tests for configuration loading and environment resolution."""

import pytest

from bumpr_core.config import FEATURE_NAMES, load_config

TRAVIS_PR_ENV = {
    "TRAVIS_BRANCH": "main",
    "TRAVIS_BUILD_NUMBER": "123",
    "TRAVIS_PULL_REQUEST": "42",
    "GITHUB_TOKEN": "write-tok",
}


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={})
    assert config.ci.provider == "travis"
    assert config.vcs.provider == "github"
    assert config.files == ["package.json"]
    assert config.packages_dir == "packages"
    assert config.features.changelog.file == "CHANGELOG.md"
    assert config.features.logging.file == ".bumpr-log.json"
    assert config.publish.credentials_file == ".npmrc"
    assert all(not config.is_enabled(name) for name in FEATURE_NAMES)


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".bumpr.yml"
    cfg.write_text(
        "ci:\n"
        "  provider: github\n"
        "vcs:\n"
        "  repository:\n"
        "    owner: org\n"
        "    name: repo\n"
        "features:\n"
        "  changelog:\n"
        "    enabled: true\n"
        "    required:\n"
        "      - 'JIRA-\\d+'\n"
    )
    config = load_config(config_path=str(cfg), environ={})
    assert config.ci.provider == "github"
    assert config.vcs.repository.full_name == "org/repo"
    assert config.vcs.repository.main_branch == "main"
    assert config.is_enabled("changelog")
    assert config.features.changelog.required == ["JIRA-\\d+"]
    # Siblings of an overridden key keep their defaults.
    assert config.features.changelog.file == "CHANGELOG.md"
    assert config.ci.env.build_number == "TRAVIS_BUILD_NUMBER"


def test_empty_config_file(tmp_path):
    cfg = tmp_path / ".bumpr.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg), environ={})
    assert config.ci.provider == "travis"


def test_is_enabled_rejects_unknown_feature(make_config):
    with pytest.raises(KeyError):
        make_config().is_enabled("nonsense")


def test_max_scope_only_applies_when_enabled(make_config):
    assert make_config({"features": {"max_scope": {"value": "minor"}}}).max_scope == "major"
    assert make_config({"features": {"max_scope": {"enabled": True, "value": "minor"}}}).max_scope == "minor"


def test_slack_env_name_from_config(make_config):
    config = make_config(
        {"features": {"slack": {"enabled": True, "env": {"url": "MY_HOOK"}, "channels": ["#releases"]}}},
        environ={"MY_HOOK": "https://hooks.slack.test/x"},
    )
    assert config.features.slack.url_env == "MY_HOOK"
    assert config.features.slack.channels == ["#releases"]
    assert config.computed.slack_url == "https://hooks.slack.test/x"


def test_slack_url_ignored_when_disabled(make_config):
    config = make_config(environ={"SLACK_URL": "https://hooks.slack.test/x"})
    assert config.computed.slack_url is None


class TestComputedEnv:
    def test_pr_build(self, make_config):
        computed = make_config(environ=TRAVIS_PR_ENV).computed
        assert computed.pr_number == "42"
        assert computed.is_pr is True
        assert computed.build_number == "123"
        assert computed.branch == "main"
        assert computed.write_token == "write-tok"
        assert computed.read_token is None

    def test_merge_build(self, make_config):
        computed = make_config(environ={**TRAVIS_PR_ENV, "TRAVIS_PULL_REQUEST": "false"}).computed
        assert computed.pr_number == "false"
        assert computed.is_pr is False

    def test_undefined_treated_as_unset(self, make_config):
        computed = make_config(environ={"TRAVIS_PULL_REQUEST": "undefined"}).computed
        assert computed.is_pr is False

    def test_branch_defaults_to_main_branch(self, make_config):
        config = make_config({"vcs": {"repository": {"main_branch": "trunk"}}})
        assert config.computed.branch == "trunk"

    def test_pr_number_from_pr_url(self, make_config):
        config = make_config(
            {"ci": {"provider": "circle", "env": {"pr_number": "", "pr_url": "CIRCLE_PULL_REQUEST"}}},
            environ={"CIRCLE_PULL_REQUEST": "https://github.com/org/repo/pull/77"},
        )
        assert config.computed.pr_number == "77"
        assert config.computed.is_pr is True

    def test_no_pr_url_means_not_a_pr(self, make_config):
        config = make_config({"ci": {"env": {"pr_number": "", "pr_url": "CIRCLE_PULL_REQUEST"}}})
        assert config.computed.is_pr is False
