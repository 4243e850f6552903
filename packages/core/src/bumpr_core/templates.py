"""Variable expansion for tag and release templates, and release dates."""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from bumpr_core.config import Config
    from bumpr_core.models import PrInfo

_MD_LINK_RE = re.compile(r"\[([^[]+)\](\([^)]*\))", re.MULTILINE)


def get_date_string(config: Config, now: datetime | None = None) -> str:
    """Format the release date in the configured zone and format."""
    zone = config.features.timezone.zone if config.is_enabled("timezone") else "Etc/UTC"
    fmt = config.features.date_format.format if config.is_enabled("date_format") else "%Y-%m-%d"
    moment = (now or datetime.now(ZoneInfo("Etc/UTC"))).astimezone(ZoneInfo(zone))
    return moment.strftime(fmt)


def expand_variables(template: str, info: PrInfo, date_string: str) -> str:
    """Replace ``{token}`` placeholders in a tag or release template.

    Supported tokens: ``{changelog}``, ``{date}``, ``{links}``,
    ``{pr.number}``, ``{pr.url}``, ``{pr.user.login}``, ``{pr.user.url}``,
    ``{scope}`` and ``{version}``. Only the first occurrence of each token is
    replaced.
    """
    links = [match.group(0) for match in _MD_LINK_RE.finditer(info.changelog)]
    replacements = {
        "changelog": info.changelog,
        "date": date_string,
        "links": ", ".join(links),
        "pr.number": str(info.number),
        "pr.url": info.url,
        "pr.user.login": info.author,
        "pr.user.url": info.author_url,
        "scope": info.scope,
        "version": info.version,
    }

    expanded = template
    for key, value in replacements.items():
        expanded = expanded.replace(f"{{{key}}}", value, 1)
    return expanded
