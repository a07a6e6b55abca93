"""Release configuration.

The configuration lives in the root manifest: the ``"bump"`` object of
package.json, or the ``[tool.release-bump]`` table of pyproject.toml. It is
loaded once per run into a frozen model; absent fields take the defaults
declared below.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, ManifestReadError
from .manifest import PACKAGE_JSON, find_manifest, read_manifest_section

CONFIG_SECTIONS = {
    "package.json": "bump",
    "pyproject.toml": "tool.release-bump",
}


class ReleaseConfig(BaseModel):
    """Settings that shape a release run.

    Attributes:
        message: Commit and tag message; ``%s`` is replaced by the version.
        active_packages: Allow-list of package names. None or empty means
            every discovered package is eligible.
        publish: Default for the publish flag.
        pre_commit: Shell commands run, in order, before the commit.
        after_push: Shell commands run, in order, after pushing.
        packages_dir: Directory (relative to the root) holding sub-packages.
        changelog_file: File the generated changelog is written to.
        changelog_preset: Preset passed to the changelog generator.
        package_manager: Publishing tool; detected from lock files if unset.
        command_timeout: Seconds any external command may run.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    message: str = "release: %s"
    active_packages: list[str] | None = Field(default=None, alias="activePackages")
    publish: bool = False
    pre_commit: list[str] = Field(default_factory=list, alias="preCommit")
    after_push: list[str] = Field(default_factory=list, alias="afterPush")
    packages_dir: str = Field(default="packages", alias="packagesDir")
    changelog_file: str = Field(default="CHANGELOG.md", alias="changelogFile")
    changelog_preset: str = Field(default="angular", alias="changelogPreset")
    package_manager: str | None = Field(default=None, alias="packageManager")
    command_timeout: float = Field(default=600.0, gt=0, alias="commandTimeout")

    @field_validator("message")
    @classmethod
    def _message_has_placeholder(cls, value: str) -> str:
        if "%s" not in value:
            raise ValueError("message must contain a %s placeholder for the version")
        return value

    @property
    def allow_list(self) -> frozenset[str] | None:
        """The active-package allow-list, or None when unrestricted."""
        if not self.active_packages:
            return None
        return frozenset(self.active_packages)

    def commit_message(self, version: str) -> str:
        return self.message.replace("%s", version, 1)


def load_config(root: Path) -> ReleaseConfig:
    """Load the release configuration from the root manifest.

    Args:
        root: Workspace root containing package.json or pyproject.toml.

    Raises:
        ConfigError: If there is no root manifest or the section is invalid.
    """
    manifest = find_manifest(root)
    if manifest is None:
        raise ConfigError(
            f"no {PACKAGE_JSON} or pyproject.toml in {root}, are you in the root?"
        )

    key = CONFIG_SECTIONS[manifest.name]
    try:
        section = read_manifest_section(manifest, key)
    except ManifestReadError as exc:
        raise ConfigError(exc.message) from exc

    try:
        return ReleaseConfig.model_validate(section or {})
    except ValidationError as exc:
        raise ConfigError(f"invalid [{key}] configuration in {manifest}:\n{exc}") from exc
