"""Release scope resolution from PR descriptions.

A PR author selects a scope by writing a hash-delimited token anywhere in the
description (``#minor#``), or, when a template lists every scope, by checking
exactly one GFM checkbox::

    - [ ] #patch# - bugfix, dependency update
    - [x] #minor# - new feature, backwards compatible
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from bumpr_core.errors import ScopeError

if TYPE_CHECKING:
    from bumpr_core.models import PullRequest

logger = logging.getLogger(__name__)

SCOPE_WEIGHTS = {
    "none": 1,
    "patch": 2,
    "minor": 3,
    "major": 4,
}

DEPENDABOT_IDENTIFIER = "<summary>Dependabot commands and options</summary>"
DOCS_URL = "https://github.com/all-i-code/bumpr#pull-requests"

_SCOPE_TOKEN_RE = re.compile(r"#[A-Za-z]+#")
_CHECKED_RE = re.compile(r"(-|\*)\s+\[x\].*?#(\w+)#", re.IGNORECASE)
_UNCHECKED_RE = re.compile(r"(-|\*)\s+\[\s\].*?#(\w+)#", re.IGNORECASE)


def validate_scope(scope: str, max_scope: str = "major", pr_number=None, pr_url: str = "") -> str:
    """Return ``scope`` if it is a known scope no heavier than ``max_scope``.

    Raises:
        ScopeError: If the scope is unknown or exceeds the ceiling
    """
    pr_str = f"PR #{pr_number} ({pr_url})"
    weight = SCOPE_WEIGHTS.get(scope)
    if weight is None:
        raise ScopeError(f'Invalid version-bump scope "{scope}" found for {pr_str}')

    if weight > SCOPE_WEIGHTS[max_scope]:
        raise ScopeError(f'Version-bump scope "{scope}" is higher than the maximum "{max_scope}" for {pr_str}')

    return scope


def _select_from_checklist(description: str, token_count: int, pr_link: str) -> str:
    selected = [match.group(2) for match in _CHECKED_RE.finditer(description)]
    if len(selected) == 1:
        return selected[0]

    if not selected:
        unchecked = _UNCHECKED_RE.findall(description)
        # Every token lives in an unchecked box: the author simply forgot to pick one.
        if unchecked and len(unchecked) == token_count:
            raise ScopeError(f"No version-bump scope found for {pr_link}")

    raise ScopeError(f"Too many version-bump scopes found for {pr_link}")


def resolve_scope(pr: PullRequest, max_scope: str = "major") -> str:
    """Extract the release scope from a PR description.

    Args:
        pr: The pull request whose description is scanned
        max_scope: Heaviest scope the PR is allowed to claim

    Returns:
        One of ``none``, ``patch``, ``minor`` or ``major``

    Raises:
        ScopeError: If no single valid scope can be determined
    """
    description = pr.description or ""

    if DEPENDABOT_IDENTIFIER in description:
        logger.debug("PR #%s is a dependency-bot PR, defaulting to patch", pr.number)
        return validate_scope("patch", max_scope, pr.number, pr.url)

    tokens = _SCOPE_TOKEN_RE.findall(description)
    pr_link = f"[PR #{pr.number}]({pr.url})"

    if not tokens:
        example = "Please include a scope (e.g. `#major#`, `#minor#`, `#patch#`) in your PR description."
        example_link = f"See {DOCS_URL} for more details."
        raise ScopeError(f"No version-bump scope found for {pr_link}\n{example}\n{example_link}")

    if len(tokens) > 1:
        scope = _select_from_checklist(description, len(tokens), pr_link)
    else:
        scope = tokens[0].strip("#")

    return validate_scope(scope.lower(), max_scope, pr.number, pr.url)
