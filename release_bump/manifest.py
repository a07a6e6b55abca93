"""Manifest reading and writing.

A manifest is the metadata file whose version field gets bumped: either a
``package.json`` or a ``pyproject.toml``. JSON manifests are rewritten with
2-space indentation and their key order intact; TOML manifests go through
tomlkit so comments and formatting survive the edit.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import InlineTable, Table

from .errors import ManifestReadError, ManifestWriteError

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"
MANIFEST_NAMES = (PACKAGE_JSON, PYPROJECT_TOML)


def find_manifest(directory: Path) -> Path | None:
    """Return the manifest inside ``directory``, preferring package.json."""
    for name in MANIFEST_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text(encoding="utf-8"))


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def _load(path: Path) -> Any:
    try:
        if path.name == PYPROJECT_TOML:
            return load_pyproject(path)
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestReadError(f"cannot read {path}: {exc}") from exc
    except (json.JSONDecodeError, TOMLKitError) as exc:
        raise ManifestReadError(f"cannot parse {path}: {exc}") from exc


def _version_table(doc: Any) -> Any:
    """Return the mapping that owns the version field.

    pyproject.toml keeps it under [project], or [tool.poetry] for Poetry
    projects; package.json keeps it at the root.
    """
    if isinstance(doc, tomlkit.TOMLDocument):
        project = doc.get("project")
        if project is not None and "version" in project:
            return project
        poetry = doc.get("tool", {}).get("poetry")
        if poetry is not None and "version" in poetry:
            return poetry
        return project
    return doc if isinstance(doc, dict) else None


def read_manifest_version(path: Path) -> str:
    """Read the version string of a manifest.

    Raises:
        ManifestReadError: If the file is unreadable or has no version.
    """
    table = _version_table(_load(path))
    version = table.get("version") if table is not None else None
    if not isinstance(version, str) or not version:
        raise ManifestReadError(f"no version field in {path}")
    return str(version)


def read_manifest_section(path: Path, key: str) -> dict[str, Any] | None:
    """Return a raw configuration section of a manifest, if present.

    ``key`` is a dotted path, e.g. "bump" for package.json or
    "tool.release-bump" for pyproject.toml.
    """
    node: Any = _load(path)
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    if not isinstance(node, dict):
        raise ManifestReadError(f"[{key}] in {path} is not a table")
    if isinstance(node, (Table, InlineTable)):
        return node.unwrap()
    return dict(node)


def write_manifest_version(path: Path, version: str) -> None:
    """Set the version field of a manifest and save it.

    Raises:
        ManifestWriteError: If the manifest cannot be read, has no version
            table, or cannot be written back.
    """
    try:
        doc = _load(path)
    except ManifestReadError as exc:
        raise ManifestWriteError(exc.message) from exc

    table = _version_table(doc)
    if table is None:
        raise ManifestWriteError(f"no version table in {path}")
    table["version"] = version

    try:
        if isinstance(doc, tomlkit.TOMLDocument):
            save_pyproject(path, doc)
        else:
            original = path.read_text(encoding="utf-8")
            text = json.dumps(doc, indent=2, ensure_ascii=False)
            if original.endswith("\n"):
                text += "\n"
            path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ManifestWriteError(f"cannot write {path}: {exc}") from exc
