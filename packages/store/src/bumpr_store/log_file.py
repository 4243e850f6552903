"""LogFileStore: the JSON file a bump run leaves behind for later commands.

Data format: a single JSON object, written with 2-space indentation::

    {
      "changelog": "...",
      "pr": {"number": 12, "url": "...", "user": {"login": "...", "url": "..."}},
      "scope": "minor",
      "version": "1.3.0"
    }

Each save() overwrites the previous content.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bumpr_store.errors import MissingKeyError, NoLogFileError
from bumpr_store.models import LogRecord, PrRecord, UserRecord

logger = logging.getLogger(__name__)


class LogFileStore:
    """Reads and writes the bump log at ``path``."""

    def __init__(self, path: str | Path = ".bumpr-log.json"):
        self.path = Path(path)

    def save(self, record: LogRecord) -> None:
        data = self._to_dict(record)
        logger.debug("Writing %s to %s", json.dumps(data), self.path)
        self.path.write_text(f"{json.dumps(data, indent=2)}\n", encoding="utf-8")

    def read(self) -> dict:
        """Return the raw log contents.

        Raises:
            NoLogFileError: If the file does not exist
        """
        logger.debug("Reading log file from %s", self.path)
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NoLogFileError(str(self.path)) from e
        return json.loads(content)

    def load(self) -> LogRecord:
        return self._from_dict(self.read())

    def get(self, key: str) -> Any:
        """Look up a dotted key (``pr.user.login``) in the log.

        Raises:
            NoLogFileError: If the file does not exist
            MissingKeyError: If any segment of the key is absent
        """
        value: Any = self.read()
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
                value = value[int(part)]
            else:
                raise MissingKeyError(key, str(self.path))
        if value is None:
            raise MissingKeyError(key, str(self.path))
        return value

    @staticmethod
    def _to_dict(record: LogRecord) -> dict:
        return {
            "changelog": record.changelog,
            "pr": {
                "number": record.pr.number,
                "url": record.pr.url,
                "user": {"login": record.pr.user.login, "url": record.pr.user.url},
            },
            "scope": record.scope,
            "version": record.version,
        }

    @staticmethod
    def _from_dict(d: dict) -> LogRecord:
        pr = d.get("pr") or {}
        user = pr.get("user") or {}
        return LogRecord(
            scope=d.get("scope", ""),
            version=d.get("version", ""),
            changelog=d.get("changelog", ""),
            pr=PrRecord(
                number=pr.get("number", -1),
                url=pr.get("url", ""),
                user=UserRecord(login=user.get("login", ""), url=user.get("url", "")),
            ),
        )
