"""Error taxonomy for bumpr.

Scope and changelog errors are mistakes in a PR description and are never
retried. PipelineError covers everything that goes wrong while the bump
stages are running.
"""

from __future__ import annotations


class BumprError(Exception):
    """Base class for all bumpr errors."""


class ScopeError(BumprError):
    """No scope, too many scopes, an invalid scope, or one above the ceiling."""


class ChangelogError(BumprError):
    """Missing changelog, duplicate sections, or a required pattern mismatch."""


class PipelineError(BumprError):
    """A bump stage could not complete."""


class CommandError(BumprError):
    """An external command exited with a non-zero status."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr
