"""Reading and rewriting version-bearing manifest files.

JSON manifests (``package.json`` and friends) are parsed and rewritten with
2-space indentation. ``pyproject.toml`` is updated with a targeted regex so
comments and formatting survive.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from bumpr_core.errors import PipelineError

_TOML_SECTIONS = (r"\[project\]", r"\[tool\.poetry\]")
_TOML_VERSION_RE = re.compile(r'^(version\s*=\s*)["\']([^"\']+)["\']', re.MULTILINE)
_TOML_NAME_RE = re.compile(r'^name\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)


def _is_toml(path: Path) -> bool:
    return path.suffix == ".toml"


def _is_json(path: Path) -> bool:
    return path.suffix == ".json"


def _toml_section(content: str, header: str) -> re.Match[str] | None:
    # A section runs from its header to the next header or EOF.
    return re.search(rf"^{header}.*?(?=^\[|\Z)", content, re.MULTILINE | re.DOTALL)


def _read_toml_field(path: Path, pattern: re.Pattern[str], group: int) -> str:
    content = path.read_text(encoding="utf-8")
    for header in _TOML_SECTIONS:
        section = _toml_section(content, header)
        if section:
            match = pattern.search(section.group(0))
            if match:
                return match.group(group)
    raise PipelineError(f"Could not find [project] or [tool.poetry] value in {path}")


def _read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _unsupported(path: Path) -> PipelineError:
    return PipelineError(f"Unsupported manifest type: {path.name} (expected .json or .toml)")


def read_version(path: str | Path) -> str:
    """Return the version recorded in a manifest."""
    path = Path(path)
    if _is_json(path):
        version = _read_json(path).get("version")
        if not version:
            raise PipelineError(f"No version found in {path}")
        return version
    if _is_toml(path):
        return _read_toml_field(path, _TOML_VERSION_RE, 2)
    raise _unsupported(path)


def read_name(path: str | Path) -> str:
    """Return the package name recorded in a manifest."""
    path = Path(path)
    if _is_json(path):
        return _read_json(path).get("name", "")
    if _is_toml(path):
        return _read_toml_field(path, _TOML_NAME_RE, 1)
    raise _unsupported(path)


def write_version(path: str | Path, new_version: str) -> Path:
    """Set the version in a manifest, leaving everything else untouched."""
    path = Path(path)
    if _is_json(path):
        data = _read_json(path)
        data["version"] = new_version
        path.write_text(f"{json.dumps(data, indent=2, ensure_ascii=False)}\n", encoding="utf-8")
        return path

    if not _is_toml(path):
        raise _unsupported(path)

    content = path.read_text(encoding="utf-8")
    for header in _TOML_SECTIONS:
        section = _toml_section(content, header)
        if section is None:
            continue
        updated, count = _TOML_VERSION_RE.subn(rf'\g<1>"{new_version}"', section.group(0), count=1)
        if count:
            path.write_text(content[: section.start()] + updated + content[section.end() :], encoding="utf-8")
            return path

    raise PipelineError(f"Could not find version to update in {path}")
