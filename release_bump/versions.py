"""Version parsing, bump menu and next-version computation.

Versions have the shape MAJOR.MINOR.PATCH[-TAG[.N]]. Prerelease tags follow
a fixed lineage, alpha → beta → canary → rc, and each promotion resets the
counter to 0. ``prerelease`` advances the counter without changing the tag.

Stable component arithmetic is delegated to semver; the prerelease handling
is specific to this tool and lives here.
"""

from __future__ import annotations

import re

import semver

from .errors import MalformedVersionError, UnsupportedBumpKindError
from .models import BumpChoice, BumpKind, Version

DEFAULT_PRERELEASE_TAG = "alpha"
LINEAGE_TAGS = ("alpha", "beta", "canary", "rc")

# Tag that must be current for each promotion kind to be offered.
_PROMOTIONS: dict[BumpKind, str] = {
    BumpKind.BETA: "alpha",
    BumpKind.CANARY: "beta",
    BumpKind.RC: "canary",
}

_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([A-Za-z][0-9A-Za-z-]*)(?:\.(0|[1-9]\d*))?)?$"
)

_TITLES: dict[BumpKind, str] = {
    BumpKind.MAJOR: "Major",
    BumpKind.MINOR: "Minor",
    BumpKind.PATCH: "Patch",
    BumpKind.PREMAJOR: "Pre-Major",
    BumpKind.PREMINOR: "Pre-Minor",
    BumpKind.PREPATCH: "Pre-Patch",
    BumpKind.PRERELEASE: "Pre-Release",
    BumpKind.BETA: "Beta",
    BumpKind.CANARY: "Canary",
    BumpKind.RC: "RC",
    BumpKind.CUSTOM: "Custom Version",
}


def parse_version(text: str) -> Version:
    """Parse a version string into a Version.

    Examples:
        "1.2.3" → Version(1, 2, 3)
        "1.2.3-beta.2" → Version(1, 2, 3, "beta", 2)
        "1.2.3-rc" → Version(1, 2, 3, "rc", None)

    Raises:
        MalformedVersionError: If the text does not match the grammar.
    """
    m = _VERSION_RE.match(text.strip())
    if m is None:
        raise MalformedVersionError(
            f"malformed version {text!r}, expected MAJOR.MINOR.PATCH[-TAG[.N]]"
        )
    major, minor, patch, tag, number = m.groups()
    return Version(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease_tag=tag,
        prerelease_number=int(number) if number is not None else None,
    )


def is_valid_version(text: str) -> bool:
    """Check ``text`` against the version grammar without raising."""
    return _VERSION_RE.match(text.strip()) is not None


def available_kinds(current: Version) -> list[BumpKind]:
    """Return the bump kinds selectable from ``current``, in menu order."""
    kinds = [
        BumpKind.MAJOR,
        BumpKind.MINOR,
        BumpKind.PATCH,
        BumpKind.PREMAJOR,
        BumpKind.PREMINOR,
        BumpKind.PREPATCH,
    ]
    tag = current.prerelease_tag
    if tag in LINEAGE_TAGS:
        kinds.append(BumpKind.PRERELEASE)
    for kind, required_tag in _PROMOTIONS.items():
        if tag == required_tag:
            kinds.append(kind)
    kinds.append(BumpKind.CUSTOM)
    return kinds


def enumerate_choices(current: Version) -> list[BumpChoice]:
    """Build the bump menu for ``current`` with a preview of each result."""
    choices: list[BumpChoice] = []
    for kind in available_kinds(current):
        if kind is BumpKind.CUSTOM:
            choices.append(BumpChoice(kind=kind, title=_TITLES[kind]))
            continue
        preview = str(compute_next_version(current, kind))
        choices.append(
            BumpChoice(kind=kind, title=f"{_TITLES[kind]} - {preview}", preview=preview)
        )
    return choices


def compute_next_version(current: Version, kind: BumpKind) -> Version:
    """Compute the version that ``kind`` produces from ``current``.

    The kind is re-checked against the menu for ``current`` so direct
    callers cannot reach a state the menu would not offer.

    Raises:
        UnsupportedBumpKindError: For ``custom`` or a kind not legal here.
    """
    if kind is BumpKind.CUSTOM:
        raise UnsupportedBumpKindError("custom versions are supplied, not computed")
    if kind not in available_kinds(current):
        raise UnsupportedBumpKindError(
            f"cannot apply {kind.value} to {current}"
            + (
                f" (prerelease tag {current.prerelease_tag!r})"
                if current.is_prerelease
                else " (not a prerelease)"
            )
        )

    base = semver.Version(current.major, current.minor, current.patch)
    tag = current.prerelease_tag or DEFAULT_PRERELEASE_TAG

    if kind is BumpKind.MAJOR:
        return _from_semver(base.bump_major())
    if kind is BumpKind.MINOR:
        return _from_semver(base.bump_minor())
    if kind is BumpKind.PATCH:
        return _from_semver(base.bump_patch())
    if kind is BumpKind.PREMAJOR:
        return _from_semver(base.bump_major(), tag, 0)
    if kind is BumpKind.PREMINOR:
        return _from_semver(base.bump_minor(), tag, 0)
    if kind is BumpKind.PREPATCH:
        return _from_semver(base.bump_patch(), tag, 0)
    if kind is BumpKind.PRERELEASE:
        counter = current.prerelease_number
        return _from_semver(base, tag, 0 if counter is None else counter + 1)
    # beta, canary, rc: promote to the named tag
    return _from_semver(base, kind.value, 0)


def resolve_next_version(
    current_text: str, kind: BumpKind, custom: str | None = None
) -> str:
    """Resolve the target version text for an operator's choice.

    ``custom`` versions are returned verbatim (stripped); they only have to
    be non-empty, and the current version is not even parsed. Every other
    kind is computed from ``current_text``.
    """
    if kind is BumpKind.CUSTOM:
        literal = (custom or "").strip()
        if not literal:
            raise MalformedVersionError("custom version must not be empty")
        return literal
    return str(compute_next_version(parse_version(current_text), kind))


def _from_semver(
    base: semver.Version, tag: str | None = None, number: int | None = None
) -> Version:
    return Version(
        major=base.major,
        minor=base.minor,
        patch=base.patch,
        prerelease_tag=tag,
        prerelease_number=number if tag is not None else None,
    )
