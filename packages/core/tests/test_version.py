"""Tests for version increments and workspace discovery."""

import pytest

from bumpr_core.errors import PipelineError
from bumpr_core.version import bump_version_string, find_packages, find_version_files


class TestBumpVersionString:
    @pytest.mark.parametrize(
        "version, scope, expected",
        [
            ("1.2.3", "patch", "1.2.4"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3-alpha.4", "patch", "1.2.3-alpha.5"),
            ("1.2.3-alpha.4", "minor", "1.3.0"),
            ("1.2.3-alpha.4", "major", "2.0.0"),
            ("0.9.9", "minor", "0.10.0"),
        ],
    )
    def test_scopes(self, version, scope, expected):
        assert bump_version_string(version, scope) == expected

    @pytest.mark.parametrize("scope", ["none", "huge", ""])
    def test_invalid_scope(self, scope):
        with pytest.raises(PipelineError, match=f"Invalid scope \\[{scope}\\]"):
            bump_version_string("1.2.3", scope)

    def test_non_semver_version(self):
        with pytest.raises(PipelineError, match=r"Invalid version \[v1.2.3\]"):
            bump_version_string("v1.2.3", "patch")


class TestFindPackages:
    def test_root_when_no_packages_dir(self, tmp_path):
        assert find_packages("packages", root=tmp_path) == ["."]

    def test_root_when_packages_dir_empty(self, tmp_path):
        (tmp_path / "packages").mkdir()
        assert find_packages("packages", root=tmp_path) == ["."]

    def test_subdirectories_sorted(self, tmp_path):
        for name in ("web", "api"):
            (tmp_path / "packages" / name).mkdir(parents=True)
            (tmp_path / "packages" / name / "package.json").write_text("{}")
        (tmp_path / "packages" / "README.md").write_text("not a package")
        assert find_packages("packages", root=tmp_path) == ["packages/api", "packages/web"]

    def test_directories_without_manifest_ignored(self, tmp_path):
        (tmp_path / "packages" / "api").mkdir(parents=True)
        (tmp_path / "packages" / "api" / "pyproject.toml").write_text("")
        (tmp_path / "packages" / "__pycache__").mkdir()
        (tmp_path / "packages" / "assets").mkdir()
        (tmp_path / "packages" / "assets" / "logo.png").write_bytes(b"png")

        assert find_packages("packages", files=["package.json", "pyproject.toml"], root=tmp_path) == ["packages/api"]

    def test_root_when_no_subdirectory_has_manifest(self, tmp_path):
        (tmp_path / "packages" / "__pycache__").mkdir(parents=True)
        assert find_packages("packages", root=tmp_path) == ["."]


class TestFindVersionFiles:
    def test_root_always_included(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "packages" / "api").mkdir(parents=True)
        (tmp_path / "packages" / "api" / "package.json").write_text("{}")

        found = find_version_files(["packages/api"], ["package.json"], root=tmp_path)

        assert found == ["packages/api/package.json", "package.json"]

    def test_missing_files_skipped(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("")
        assert find_version_files(["."], ["package.json", "pyproject.toml"], root=tmp_path) == ["pyproject.toml"]
