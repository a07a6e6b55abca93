"""Changelog generation via conventional-changelog.

The generator is an external tool; it is called as a subprocess and its
output is captured and returned as the full changelog text.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ChangelogError
from .shell import DEFAULT_TIMEOUT, run

CHANGELOG_HEADER = "# CHANGELOG\n\n"


def changelog_command(preset: str) -> list[str]:
    # -r 0 regenerates every release, not only the latest one
    return ["npx", "--yes", "conventional-changelog", "-p", preset, "-r", "0"]


def generate_changelog(
    root: Path, preset: str = "angular", timeout: float = DEFAULT_TIMEOUT
) -> str:
    """Generate the full changelog for the repository at ``root``.

    Args:
        root: Repository root the generator runs in.
        preset: Commit convention preset (e.g. "angular").
        timeout: Seconds to wait for the generator.

    Returns:
        Changelog text, starting with a top-level heading.

    Raises:
        ChangelogError: If the generator is missing or fails.
        CommandTimeoutError: If the generator hangs.
    """
    result = run(changelog_command(preset), root, timeout=timeout)
    if result.returncode == 127:
        raise ChangelogError(
            "conventional-changelog not found, install Node.js (npx) to generate changelogs"
        )
    if not result.ok:
        raise ChangelogError(
            f"changelog generation failed (exit {result.returncode}): {result.output.strip()}"
        )
    return CHANGELOG_HEADER + result.stdout
