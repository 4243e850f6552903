"""Version increments and workspace discovery.

Numeric semantics come from the ``semver`` package; this module only decides
which increment a scope maps to.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import semver

from bumpr_core.errors import PipelineError

logger = logging.getLogger(__name__)

ROOT_PACKAGE = "."


def bump_version_string(version: str, scope: str) -> str:
    """Apply a release scope to a semantic version string.

    ``patch`` bumps the pre-release counter when there is one
    (``1.2.3-alpha.4`` → ``1.2.3-alpha.5``), otherwise the patch number.
    ``minor`` and ``major`` drop any pre-release suffix.

    Raises:
        PipelineError: If the version is not semver or the scope cannot bump it
    """
    try:
        current = semver.Version.parse(version)
    except ValueError as e:
        raise PipelineError(f"Invalid version [{version}]: not a semantic version") from e

    if scope == "patch":
        bumped = current.bump_prerelease() if current.prerelease else current.bump_patch()
    elif scope == "minor":
        bumped = current.bump_minor()
    elif scope == "major":
        bumped = current.bump_major()
    else:
        raise PipelineError(f"Invalid scope [{scope}]")
    return str(bumped)


def find_packages(
    packages_dir: str | Path = "packages",
    files: Sequence[str] = ("package.json",),
    root: str | Path = ".",
) -> list[str]:
    """Return workspace package directories, or the root package if there are none.

    An immediate subdirectory of ``packages_dir`` counts as a package only if
    it holds one of the manifest ``files``.
    Paths are returned relative to ``root``.
    """
    base = Path(root) / packages_dir
    if not base.is_dir():
        return [ROOT_PACKAGE]

    packages = sorted(
        str(Path(packages_dir) / p.name)
        for p in base.iterdir()
        if p.is_dir() and any((p / filename).is_file() for filename in files)
    )
    logger.debug("Discovered %d workspace package(s) under %s", len(packages), base)
    return packages or [ROOT_PACKAGE]


def find_version_files(packages: list[str], files: list[str], root: str | Path = ".") -> list[str]:
    """List every configured manifest that exists in the given packages.

    The root package is always included so its version moves with the rest.
    """
    packages = list(packages)
    if ROOT_PACKAGE not in packages:
        packages.append(ROOT_PACKAGE)

    found = []
    for package in packages:
        for filename in files:
            relative = str(Path(package) / filename)
            if (Path(root) / relative).exists():
                found.append(relative)
    return found
