"""Bump log data models.

Decoupled from bumpr_core so the log file can be read (``bumpr log``,
``bumpr publish``) without loading the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class UserRecord:
    """The author of the released PR."""

    login: str = ""
    url: str = ""


@dataclass
class PrRecord:
    number: int = -1
    url: str = ""
    user: UserRecord = field(default_factory=UserRecord)


@dataclass
class LogRecord:
    """What the last bump did, as written to the log file.

    Created by the pipeline's logging stage from the final PrInfo.
    """

    scope: str
    version: str = ""
    changelog: str = ""
    pr: PrRecord = field(default_factory=PrRecord)
