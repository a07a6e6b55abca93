"""Data models for release-bump.

These Pydantic models represent the values that flow between the version
engine, the package catalog and the release pipeline. Everything that is
built once per run (versions, plans) is frozen; a change means a new value.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BumpKind(str, Enum):
    """The category of version increment an operator can request."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"
    BETA = "beta"
    CANARY = "canary"
    RC = "rc"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value


class Version(BaseModel):
    """A parsed MAJOR.MINOR.PATCH[-TAG[.N]] version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        prerelease_tag: Prerelease identifier such as "alpha" or "rc".
        prerelease_number: Prerelease counter; only set alongside a tag.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)
    prerelease_tag: str | None = None
    prerelease_number: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _counter_needs_tag(self) -> Version:
        if self.prerelease_number is not None and self.prerelease_tag is None:
            raise ValueError("prerelease_number requires a prerelease_tag")
        return self

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease_tag is not None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease_tag is not None:
            text += f"-{self.prerelease_tag}"
            if self.prerelease_number is not None:
                text += f".{self.prerelease_number}"
        return text


class BumpChoice(BaseModel):
    """One selectable entry of the bump menu.

    ``preview`` is the version the choice would produce; it is None for
    ``custom``, which the operator types in.
    """

    kind: BumpKind
    title: str
    preview: str | None = None


class Package(BaseModel):
    """A sub-package discovered under the packages root.

    Attributes:
        name: Directory name; the package identity.
        path: Package directory.
        manifest_path: The manifest whose version field is bumped.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    manifest_path: Path


class ReleaseRequest(BaseModel):
    """Operator input, as collected by the CLI.

    An empty ``packages`` list, or one containing ``"all"``, is the wildcard.
    ``publish`` of None falls back to the configured default.
    """

    bump: BumpKind
    custom_version: str | None = None
    packages: list[str] = Field(default_factory=list)
    publish: bool | None = None
    generate_changelog: bool = True


class ReleasePlan(BaseModel):
    """The resolved intent for one pipeline run.

    ``target_version`` is kept as text because a custom version is written
    verbatim, without being parsed.
    """

    model_config = ConfigDict(frozen=True)

    current_version: str
    target_version: str
    packages: tuple[Package, ...] = ()
    all_packages: bool = False
    generate_changelog: bool = True
    publish: bool = False


class HookFailure(BaseModel):
    """A configured hook command that exited non-zero (advisory)."""

    step: str
    command: str
    returncode: int
    output: str = ""


class PublishFailure(BaseModel):
    """A package whose publish command failed (siblings still publish)."""

    package: str
    command: str
    returncode: int
    output: str = ""


class ReleaseReport(BaseModel):
    """What a pipeline run did, for the final summary."""

    plan: ReleasePlan
    dry_run: bool = False
    completed: list[str] = Field(default_factory=list)
    hook_failures: list[HookFailure] = Field(default_factory=list)
    publish_failures: list[PublishFailure] = Field(default_factory=list)
    published: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.publish_failures
