"""Errors raised while reading the bump log file."""

from __future__ import annotations


class LogFileError(Exception):
    """Base class for log file errors."""


class NoLogFileError(LogFileError):
    """The log file does not exist; callers usually treat this as "nothing to do"."""

    def __init__(self, log_file: str):
        super().__init__(f"log file {log_file} not found.")
        self.log_file = log_file


class MissingKeyError(LogFileError):
    """A requested key is absent from an otherwise valid log file."""

    def __init__(self, key: str, log_file: str):
        super().__init__(f"no {key} key found in {log_file}")
        self.key = key
        self.log_file = log_file
