"""Changelog extraction from PR descriptions and splicing into CHANGELOG files."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from bumpr_core.errors import ChangelogError, PipelineError
from bumpr_core.scope import DEPENDABOT_IDENTIFIER

if TYPE_CHECKING:
    from bumpr_core.models import PrInfo, PullRequest

logger = logging.getLogger(__name__)

CHANGELOG_MARKER = "<!-- bumpr -->"
DOCS_URL = "https://github.com/all-i-code/bumpr#changelog"

_SECTION_HEADERS = ("##changelog", "## changelog")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _find_section_index(lines: list[str]) -> int:
    """Return the index of the ``## CHANGELOG`` line, or -1 if there is none."""
    index = -1
    for i, line in enumerate(lines):
        if line.strip().lower() in _SECTION_HEADERS:
            if index != -1:
                raise ChangelogError(f"Multiple changelog sections found. Line {index + 1} and line {i + 1}.")
            index = i
    return index


def extract_changelog(pr: PullRequest, required: Iterable[str] = ()) -> str:
    """Extract the changelog section from a PR description.

    Everything after the ``## CHANGELOG`` header line, up to the end of the
    description, is the changelog. Dependency-bot PRs get a default Security
    entry when they carry no explicit section.

    Args:
        pr: The pull request to read
        required: Regular expressions the changelog must all match

    Returns:
        The changelog text

    Raises:
        ChangelogError: If the changelog is missing, duplicated or fails a pattern
    """
    description = normalize_newlines(pr.description or "")
    changelog = ""

    if DEPENDABOT_IDENTIFIER in description:
        changelog = f"### Security\n- [Dependabot] {pr.name}"

    lines = description.split("\n")
    index = _find_section_index(lines)
    if index >= 0:
        changelog = "\n".join(lines[index + 1 :])

    if not changelog.strip():
        raise ChangelogError(
            "No CHANGELOG content found in PR description.\n"
            "Please add a `## CHANGELOG` section to your PR description with some content describing your change.\n"
            f"See {DOCS_URL} for details."
        )

    for pattern in required:
        if not re.search(pattern, changelog):
            raise ChangelogError(f"Changelog does not match pattern: {pattern}")

    return changelog


def build_changelog_entry(info: PrInfo, date_string: str) -> str:
    pr_link = f"[PR {info.number}]({info.url})"
    return f"{CHANGELOG_MARKER}\n\n## [{info.version}] - {date_string} ({pr_link})\n{info.changelog}"


def update_changelog_file(path: str | Path, info: PrInfo, date_string: str) -> Path:
    """Insert a new release section directly after the bumpr marker.

    The marker stays in place so the next release lands above this one.

    Raises:
        PipelineError: If the file has no marker
    """
    changelog_path = Path(path)
    content = changelog_path.read_text(encoding="utf-8")
    if CHANGELOG_MARKER not in content:
        raise PipelineError(f"No {CHANGELOG_MARKER} marker found in {changelog_path}")

    entry = build_changelog_entry(info, date_string)
    changelog_path.write_text(content.replace(CHANGELOG_MARKER, entry, 1), encoding="utf-8")
    logger.debug("Added %s section to %s", info.version, changelog_path)
    return changelog_path
