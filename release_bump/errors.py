"""Error types raised by release-bump.

Every fatal condition is a ReleaseError subclass. The pipeline stamps the
step that was running onto the exception before it propagates, so the CLI
can name both the step and the cause. Hook and publish failures are not
exceptions; they are collected as records (see models.HookFailure).
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all fatal release-bump errors."""

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class ConfigError(ReleaseError):
    """The release configuration could not be loaded or is invalid."""


class MalformedVersionError(ReleaseError):
    """A version string does not match MAJOR.MINOR.PATCH[-TAG[.N]]."""


class UnsupportedBumpKindError(ReleaseError):
    """A bump kind is not legal from the current version."""


class CatalogUnavailableError(ReleaseError):
    """The packages root does not exist or cannot be listed."""


class UnknownPackageError(ReleaseError):
    """A requested package is not present in the catalog."""


class PackageNotEligibleError(ReleaseError):
    """None of the explicitly requested packages is allow-listed."""


class DirtyWorkingTreeError(ReleaseError):
    """The working tree has uncommitted changes."""


class ManifestReadError(ReleaseError):
    """A manifest could not be read or has no version field."""


class ManifestWriteError(ReleaseError):
    """One or more manifests could not be updated."""


class SourceControlOperationError(ReleaseError):
    """A git command failed."""


class ChangelogError(ReleaseError):
    """The changelog generator failed."""


class CommandTimeoutError(ReleaseError):
    """An external command did not finish within the configured timeout."""

    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(f"hung external command: `{command}` exceeded {timeout:g}s")
        self.command = command
        self.timeout = timeout
