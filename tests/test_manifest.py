"""Tests for release_bump.manifest."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_bump.errors import ManifestReadError, ManifestWriteError
from release_bump.manifest import (
    find_manifest,
    read_manifest_section,
    read_manifest_version,
    write_manifest_version,
)


class TestFindManifest:
    def test_prefers_package_json(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nversion = "1.0.0"\n')
        (tmp_path / "package.json").write_text('{"version": "1.0.0"}')

        assert find_manifest(tmp_path) == tmp_path / "package.json"

    def test_falls_back_to_pyproject(self, tmp_pyproject: Path) -> None:
        assert find_manifest(tmp_pyproject.parent) == tmp_pyproject

    def test_none_when_missing(self, tmp_path: Path) -> None:
        assert find_manifest(tmp_path) is None


class TestPackageJson:
    def test_read_version(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text('{"name": "x", "version": "0.4.0-beta.1"}')

        assert read_manifest_version(manifest) == "0.4.0-beta.1"

    def test_write_keeps_key_order_and_fields(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text(
            '{\n    "name": "x",\n    "version": "1.0.0",\n'
            '    "scripts": {"build": "tsc"},\n    "description": "naïve"\n}\n',
            encoding="utf-8",
        )

        write_manifest_version(manifest, "1.1.0")

        text = manifest.read_text(encoding="utf-8")
        assert text == (
            "{\n"
            '  "name": "x",\n'
            '  "version": "1.1.0",\n'
            '  "scripts": {\n'
            '    "build": "tsc"\n'
            "  },\n"
            '  "description": "naïve"\n'
            "}\n"
        )

    def test_write_without_trailing_newline(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text('{"version": "1.0.0"}')

        write_manifest_version(manifest, "2.0.0")

        assert manifest.read_text() == '{\n  "version": "2.0.0"\n}'

    def test_missing_version_field(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text('{"name": "x"}')

        with pytest.raises(ManifestReadError, match="no version field"):
            read_manifest_version(manifest)

    def test_write_invalid_json(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text("{")

        with pytest.raises(ManifestWriteError, match="cannot parse"):
            write_manifest_version(manifest, "1.0.0")

    def test_write_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestWriteError, match="cannot read"):
            write_manifest_version(tmp_path / "package.json", "1.0.0")

    def test_read_section(self, workspace: Path) -> None:
        section = read_manifest_section(workspace / "package.json", "bump")

        assert section is not None
        assert section["activePackages"] == ["a", "b"]

    def test_read_missing_section(self, tmp_path: Path) -> None:
        manifest = tmp_path / "package.json"
        manifest.write_text(json.dumps({"version": "1.0.0"}))

        assert read_manifest_section(manifest, "bump") is None


class TestPyproject:
    def test_read_version(self, tmp_pyproject: Path) -> None:
        assert read_manifest_version(tmp_pyproject) == "1.0.0"

    def test_write_preserves_comments(self, tmp_pyproject: Path) -> None:
        write_manifest_version(tmp_pyproject, "1.1.0")

        text = tmp_pyproject.read_text()
        assert "# Root project" in text
        assert 'version = "1.1.0"  # bumped by release-bump' in text
        assert '"requests>=2.0",' in text
        assert read_manifest_version(tmp_pyproject) == "1.1.0"

    def test_poetry_version(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.poetry]\nname = "x"\nversion = "0.1.0"\n')

        write_manifest_version(pyproject, "0.2.0")

        assert read_manifest_version(pyproject) == "0.2.0"
        assert "[tool.poetry]" in pyproject.read_text()

    def test_no_project_table(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.other]\nkey = "value"\n')

        with pytest.raises(ManifestReadError):
            read_manifest_version(pyproject)
        with pytest.raises(ManifestWriteError, match="no version table"):
            write_manifest_version(pyproject, "1.0.0")

    def test_read_section(self, tmp_pyproject: Path) -> None:
        section = read_manifest_section(tmp_pyproject, "tool.release-bump")

        assert section == {
            "message": "chore(release): %s",
            "activePackages": ["core"],
            "preCommit": ["ruff format ."],
        }
        assert type(section) is dict
