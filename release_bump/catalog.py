"""Package catalog: discover sub-packages and resolve the release targets.

Sub-packages are the directories under the packages root that carry a
manifest. The operator asks for either the ``all`` wildcard or explicit
names; both are reconciled against the configured allow-list here.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CatalogUnavailableError, PackageNotEligibleError, UnknownPackageError
from .manifest import PACKAGE_JSON, find_manifest
from .models import Package
from .shell import warn

ALL = "all"

# Directory entries that are never packages.
NOISE_ENTRIES = frozenset({"__pycache__", "node_modules", "Thumbs.db"})

# Lock file → package manager, checked in this order.
LOCK_FILES = (
    ("package-lock.json", "npm"),
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("uv.lock", "uv"),
)


@dataclass(frozen=True)
class TargetSelection:
    """Result of reconciling a request against the catalog.

    Attributes:
        packages: Packages to version and publish, in catalog order.
        all_packages: True when the request was the wildcard.
        skipped: Names dropped because they are not allow-listed.
    """

    packages: tuple[Package, ...]
    all_packages: bool
    skipped: tuple[str, ...] = field(default_factory=tuple)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.packages]


def discover_packages(root: Path, packages_dir: str = "packages") -> list[Package]:
    """List the sub-packages under ``root/packages_dir``.

    Hidden entries, files, known noise directories and directories without
    a manifest are ignored.

    Raises:
        CatalogUnavailableError: If the packages root is missing or
            unreadable. Callers decide whether that is acceptable.
    """
    packages_root = root / packages_dir
    try:
        entries = sorted(packages_root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise CatalogUnavailableError(
            f"no packages found at {packages_root}: {exc.strerror or exc}"
        ) from exc

    packages: list[Package] = []
    for entry in entries:
        if entry.name.startswith(".") or entry.name in NOISE_ENTRIES:
            continue
        if not entry.is_dir():
            continue
        manifest = find_manifest(entry)
        if manifest is None:
            continue
        packages.append(Package(name=entry.name, path=entry, manifest_path=manifest))
    return packages


def is_wildcard(requested: Iterable[str]) -> bool:
    names = list(requested)
    return not names or ALL in names


def resolve_targets(
    requested: Iterable[str],
    catalog: list[Package],
    active_packages: Iterable[str] | None,
) -> TargetSelection:
    """Reconcile the requested packages with the catalog and allow-list.

    Unknown names always fail, even when listed next to ``all``. ``all``
    (or an empty request) then expands to the whole catalog and drops, with
    a warning, whatever the allow-list excludes. An explicit request with no
    allow-listed name at all is rejected.

    Args:
        requested: Package names, or ["all"].
        catalog: Discovered packages.
        active_packages: Allow-list; None or empty means no restriction.

    Raises:
        UnknownPackageError: If a requested name is not in the catalog.
        PackageNotEligibleError: If no requested name is allow-listed.
    """
    names = list(dict.fromkeys(requested))
    allow = set(active_packages) if active_packages else None
    by_name = {p.name: p for p in catalog}

    unknown = [n for n in names if n != ALL and n not in by_name]
    if unknown:
        known = ", ".join(by_name) or "<none>"
        raise UnknownPackageError(
            f"unknown package(s): {', '.join(unknown)} (known: {known})"
        )

    if is_wildcard(names):
        selected: list[Package] = []
        skipped: list[str] = []
        for pkg in catalog:
            if allow is not None and pkg.name not in allow:
                warn(f"activePackages is configured to skip {pkg.name}")
                skipped.append(pkg.name)
                continue
            selected.append(pkg)
        return TargetSelection(tuple(selected), all_packages=True, skipped=tuple(skipped))

    if allow is None:
        return TargetSelection(tuple(by_name[n] for n in names), all_packages=False)

    eligible = [n for n in names if n in allow]
    if not eligible:
        raise PackageNotEligibleError(
            f"none of {', '.join(names)} is in activePackages "
            f"({', '.join(sorted(allow))}), check the configuration"
        )
    skipped = [n for n in names if n not in allow]
    for name in skipped:
        warn(f"{name} is not in activePackages, skipping it")
    return TargetSelection(
        tuple(by_name[n] for n in eligible), all_packages=False, skipped=tuple(skipped)
    )


def detect_package_manager(root: Path) -> str:
    """Pick the publishing tool from the lock file present in ``root``.

    Without a lock file, npm is assumed for package.json roots and uv for
    pyproject.toml roots.
    """
    for lock_file, manager in LOCK_FILES:
        if (root / lock_file).exists():
            return manager
    manifest = find_manifest(root)
    if manifest is not None and manifest.name != PACKAGE_JSON:
        return "uv"
    return "npm"
