"""Tests for the CI adapters."""

from unittest.mock import MagicMock, call

import pytest

from bumpr_core.ci.providers import PROVIDERS, Ci, get_ci

ENV = {"TRAVIS_BRANCH": "main", "TRAVIS_BUILD_NUMBER": "9", "TRAVIS_PULL_REQUEST": "false"}


def _ci(make_config, provider="travis"):
    config = make_config({"ci": {"provider": provider}}, environ=ENV)
    vcs = MagicMock()
    vcs.add_remote_for_push.return_value = "ci-origin"
    runner = MagicMock(return_value="")
    return Ci(config, vcs, PROVIDERS[provider], runner=runner), runner, vcs


class TestGitPrimitives:
    def test_add(self, make_config):
        ci, runner, _ = _ci(make_config)
        ci.add(["package.json", "CHANGELOG.md"])
        runner.assert_called_once_with(["git", "add", "package.json", "CHANGELOG.md"])

    def test_commit(self, make_config):
        ci, runner, _ = _ci(make_config)
        ci.commit("[ci skip] summary", "body")
        runner.assert_called_once_with(["git", "commit", "-m", "[ci skip] summary", "-m", "body"])

    def test_tag(self, make_config):
        ci, runner, _ = _ci(make_config)
        ci.tag("v1.0.0", "Generated tag from CI build 9")
        runner.assert_called_once_with(["git", "tag", "v1.0.0", "-a", "-m", "Generated tag from CI build 9"])


class TestTravis:
    def test_setup_git_env_checks_out_local_branch(self, make_config):
        ci, runner, _ = _ci(make_config, "travis")
        ci.setup_git_env()
        assert runner.call_args_list == [
            call(["git", "config", "--global", "user.email", "bumpr@domain.com"]),
            call(["git", "config", "--global", "user.name", "Bumpr"]),
            call(["git", "checkout", "-b", "ci-main"]),
        ]

    def test_push_maps_local_branch_onto_tracked_branch(self, make_config):
        ci, runner, vcs = _ci(make_config, "travis")
        ci.push()
        vcs.add_remote_for_push.assert_called_once()
        runner.assert_called_once_with(["git", "push", "ci-origin", "ci-main:refs/heads/main", "--tags"])


@pytest.mark.parametrize("provider", ["circle", "github"])
class TestBranchBuildProviders:
    def test_setup_git_env_only_sets_identity(self, make_config, provider):
        ci, runner, _ = _ci(make_config, provider)
        ci.setup_git_env()
        assert runner.call_count == 2

    def test_push_branch(self, make_config, provider):
        ci, runner, _ = _ci(make_config, provider)
        ci.push()
        runner.assert_called_once_with(["git", "push", "ci-origin", "main", "--tags"])


def test_get_ci_selects_provider(make_config):
    ci = get_ci(make_config({"ci": {"provider": "circle"}}), MagicMock())
    assert ci.provider.name == "circle"


def test_get_ci_rejects_unknown_provider(make_config):
    with pytest.raises(ValueError, match="Invalid ci provider: 'jenkins'"):
        get_ci(make_config({"ci": {"provider": "jenkins"}}), MagicMock())
