"""Tests for template variable expansion and release dates."""

from datetime import datetime, timezone

from bumpr_core.models import PrInfo
from bumpr_core.templates import expand_variables, get_date_string

INFO = PrInfo(
    scope="minor",
    number=7,
    url="https://github.com/org/repo/pull/7",
    author="octocat",
    author_url="https://github.com/octocat",
    changelog="### Added\n- Search ([#12](https://github.com/org/repo/issues/12))\n- Docs [here](https://docs.test)",
    version="1.3.0",
)


class TestExpandVariables:
    def test_simple_tokens(self):
        template = "v{version} ({scope}) on {date} by {pr.user.login}"
        assert expand_variables(template, INFO, "2026-10-17") == "v1.3.0 (minor) on 2026-10-17 by octocat"

    def test_pr_tokens(self):
        template = "[#{pr.number}]({pr.url}) / {pr.user.url}"
        assert expand_variables(template, INFO, "") == (
            "[#7](https://github.com/org/repo/pull/7) / https://github.com/octocat"
        )

    def test_changelog_and_links(self):
        assert expand_variables("{changelog}", INFO, "") == INFO.changelog
        assert expand_variables("{links}", INFO, "") == (
            "[#12](https://github.com/org/repo/issues/12), [here](https://docs.test)"
        )

    def test_only_first_occurrence_replaced(self):
        assert expand_variables("{version}-{version}", INFO, "") == "1.3.0-{version}"

    def test_unknown_tokens_left_alone(self):
        assert expand_variables("{nope} v{version}", INFO, "") == "{nope} v1.3.0"


class TestGetDateString:
    NOON_UTC = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

    def test_defaults_to_utc_iso_date(self, make_config):
        assert get_date_string(make_config(), now=self.NOON_UTC) == "2026-10-17"

    def test_timezone_feature(self, make_config):
        config = make_config({"features": {"timezone": {"enabled": True, "zone": "Pacific/Kiritimati"}}})
        # UTC+14 is already the next day at noon UTC.
        assert get_date_string(config, now=self.NOON_UTC) == "2026-10-18"

    def test_timezone_ignored_when_disabled(self, make_config):
        config = make_config({"features": {"timezone": {"zone": "Pacific/Kiritimati"}}})
        assert get_date_string(config, now=self.NOON_UTC) == "2026-10-17"

    def test_date_format_feature(self, make_config):
        config = make_config({"features": {"date_format": {"enabled": True, "format": "%d/%m/%Y %H:%M"}}})
        assert get_date_string(config, now=self.NOON_UTC) == "17/10/2026 12:00"
