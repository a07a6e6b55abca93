"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


def write_package_json(directory: Path, version: str, **extra: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    manifest = directory / "package.json"
    data = {"name": directory.name, "version": version, **extra}
    manifest.write_text(json.dumps(data, indent=2) + "\n")
    return manifest


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A JSON workspace at 1.2.3 with packages a, b and c; a and b are active."""
    write_package_json(
        tmp_path,
        "1.2.3",
        private=True,
        bump={"message": "release: %s", "activePackages": ["a", "b"], "publish": True},
    )
    for name in ("a", "b", "c"):
        write_package_json(tmp_path / "packages" / name, "1.2.3")
    return tmp_path


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
# Root project
[project]
name = "test-package"
version = "1.0.0"  # bumped by release-bump
dependencies = [
    "requests>=2.0",
]

[tool.release-bump]
message = "chore(release): %s"
activePackages = ["core"]
preCommit = ["ruff format ."]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject
