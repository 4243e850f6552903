"""Slack release notifications via incoming webhooks."""

from __future__ import annotations

import logging

import requests

from bumpr_core.utils.concurrency import run_concurrently

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10


def build_release_message(package: str, version: str, scope: str, pr_number, pr_url: str, login: str, user_url: str):
    return (
        f"Published `{package}@{version}` ({scope}) from <{pr_url}|PR #{pr_number}> "
        f"by <{user_url}|{login}>"
    )


def post_message(url: str, body: dict) -> requests.Response:
    response = requests.post(url, json=body, timeout=_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response


def send_slack_message(url: str, text: str, channels: list[str]) -> list[requests.Response]:
    """Post ``text`` once per channel, or once to the webhook's default channel."""
    if not channels:
        return [post_message(url, {"text": text})]

    logger.debug("Posting release message to %d channel(s)", len(channels))
    return run_concurrently(lambda channel: post_message(url, {"channel": channel, "text": text}), channels)
