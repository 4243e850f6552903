"""Records threaded through the bump pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class PullRequest:
    """A pull request normalized away from the VCS API shape.

    ``description`` always uses ``\\n`` line endings.
    """

    number: int
    description: str
    url: str
    author: str = ""
    author_url: str = ""
    name: str = ""


@dataclass(frozen=True)
class PrInfo:
    """Everything the pipeline knows about the release being cut.

    Stages never mutate a PrInfo in place; they return a new one via
    ``dataclasses.replace``. ``scope`` is fixed at creation and
    ``modified_files`` only ever grows.
    """

    scope: str
    number: int
    url: str
    author: str = ""
    author_url: str = ""
    changelog: str = ""
    version: str = ""
    modified_files: tuple[str, ...] = field(default_factory=tuple)

    def with_modified(self, *paths: str) -> PrInfo:
        return replace(self, modified_files=self.modified_files + tuple(paths))
