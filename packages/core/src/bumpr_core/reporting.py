"""Mirror resolution errors onto the PR as comments.

This is an observability adapter, not recovery: the original error is always
re-raised once the comment has been posted.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Callable, TypeVar

from bumpr_core.errors import PipelineError

if TYPE_CHECKING:
    from bumpr_core.config import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _comments_wanted(config: Config) -> bool:
    return config.computed.is_pr and config.is_enabled("comments")


def maybe_post_comment(config: Config, vcs, msg: str, is_error: bool = False) -> None:
    """Post ``msg`` to the current PR if this is a PR build with comments enabled.

    Setting ``SKIP_COMMENTS`` in the environment suppresses the comment.

    Raises:
        PipelineError: If the comment could not be posted, chained from the VCS error
    """
    if os.environ.get("SKIP_COMMENTS") or not _comments_wanted(config):
        return

    comment = f"## ERROR\n{msg}" if is_error else msg
    logger.info("Posting comment on PR #%s", config.computed.pr_number)
    try:
        vcs.post_comment(config.computed.pr_number, comment)
    except Exception as e:
        raise PipelineError(f"Received error: {e} while trying to post PR comment: {comment}") from e


def with_error_reporting(config: Config, vcs, fn: Callable[[], T]) -> T:
    """Call ``fn`` and return its result, commenting on the PR if it raises.

    Raises:
        Exception: The error raised by ``fn``, unchanged
        PipelineError: If ``fn`` failed and the comment could not be posted either
    """
    try:
        return fn()
    except Exception as error:
        try:
            maybe_post_comment(config, vcs, str(error), is_error=True)
        except PipelineError as post_error:
            raise PipelineError(
                f"Received error: {post_error.__cause__} while trying to post PR comment about error: {error}"
            ) from error
        raise
