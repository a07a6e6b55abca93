"""CLI entry point for release-bump."""

from __future__ import annotations

from pathlib import Path

import click

from .catalog import detect_package_manager
from .config import ReleaseConfig, load_config
from .errors import ManifestReadError, ReleaseError
from .manifest import find_manifest, read_manifest_version
from .models import BumpKind, ReleasePlan, ReleaseReport, ReleaseRequest
from .pipeline import build_plan, run_release
from .shell import error, fatal, info, step, success, warn
from .versions import enumerate_choices, is_valid_version, parse_version

ROOT_OPTION = click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root holding the root manifest.",
)


@click.group()
@click.version_option(package_name="release-bump")
def cli() -> None:
    """Bump versions across a multi-package tree, then tag, push and publish."""


def _describe(root: Path, config: ReleaseConfig, current: str) -> None:
    click.echo(f"Current Directory: {click.style(str(root), fg='green')}")
    click.echo(f"Current Version: {click.style(current, fg='green')}")
    active = ", ".join(config.active_packages or []) or "<all>"
    click.echo(f"Active Packages: {click.style(active, fg='green')}")
    manager = config.package_manager or detect_package_manager(root)
    click.echo(f"Package Manager: {click.style(manager, fg='green')}")


@cli.command()
@ROOT_OPTION
def choices(root: Path) -> None:
    """Show the current version and the bumps available from it."""
    root = root.resolve()
    try:
        manifest = find_manifest(root)
        if manifest is None:
            raise ManifestReadError(f"no root manifest in {root}, are you in the root?")
        config = load_config(root)
        current = read_manifest_version(manifest)
        menu = enumerate_choices(parse_version(current))
    except ReleaseError as exc:
        fatal(str(exc))
        return

    _describe(root, config, current)
    click.echo()
    for choice in menu:
        click.echo(f"  {choice.kind.value:<11} {choice.title}")


def _print_plan(plan: ReleasePlan) -> None:
    step(f"Release {plan.current_version} → {plan.target_version}")
    names = ", ".join(p.name for p in plan.packages) or "<root only>"
    info(f"Packages: {names}{' (all)' if plan.all_packages else ''}")
    info(f"Changelog: {'yes' if plan.generate_changelog else 'no'}")
    info(f"Publish: {'yes' if plan.publish else 'no'}")


def _print_report(report: ReleaseReport) -> None:
    for failure in report.hook_failures:
        warn(f"{failure.step}: `{failure.command}` exited {failure.returncode}")
    if report.published:
        info(f"Published: {', '.join(report.published)}")
    for failure in report.publish_failures:
        error(f"{failure.package}: `{failure.command}` exited {failure.returncode}")
        if failure.output:
            click.echo(failure.output, err=True)


@cli.command()
@ROOT_OPTION
@click.option(
    "-b",
    "--bump",
    type=click.Choice([k.value for k in BumpKind]),
    default=None,
    help="Kind of version bump.",
)
@click.option("--custom", "custom_version", default=None, help="Literal next version.")
@click.option(
    "-p",
    "--package",
    "packages",
    multiple=True,
    help="Package to release (repeatable). Defaults to all.",
)
@click.option(
    "--publish/--no-publish",
    default=None,
    help="Publish packages after pushing. Defaults to the configured value.",
)
@click.option(
    "--changelog/--no-changelog",
    default=True,
    show_default=True,
    help="Generate the changelog and commit it with the release.",
)
@click.option("--dry-run", is_flag=True, help="Print commands without running them.")
def release(
    root: Path,
    bump: str | None,
    custom_version: str | None,
    packages: tuple[str, ...],
    publish: bool | None,
    changelog: bool,
    dry_run: bool,
) -> None:
    """Bump the version, commit, tag, push and optionally publish."""
    if bump is None and custom_version is None:
        raise click.UsageError("pass --bump KIND or --custom VERSION")
    if custom_version is not None and bump not in (None, BumpKind.CUSTOM.value):
        raise click.UsageError("--custom cannot be combined with --bump " + bump)
    kind = BumpKind(bump) if bump else BumpKind.CUSTOM
    if custom_version and custom_version.strip() and not is_valid_version(custom_version):
        warn(
            f"custom version {custom_version.strip()!r} is not "
            "MAJOR.MINOR.PATCH[-TAG[.N]], it will be written as given"
        )

    root = root.resolve()
    try:
        config = load_config(root)
        request = ReleaseRequest(
            bump=kind,
            custom_version=custom_version,
            packages=list(packages),
            publish=publish,
            generate_changelog=changelog,
        )
        plan = build_plan(root, config, request)
        _print_plan(plan)
        report = run_release(plan, config, root, dry_run=dry_run)
    except ReleaseError as exc:
        fatal(str(exc))
        return

    _print_report(report)
    if not report.ok:
        fatal(
            f"released {plan.target_version} but "
            f"{len(report.publish_failures)} package(s) failed to publish"
        )
    suffix = " (dry run)" if dry_run else ""
    success(f"Version bumped to {plan.target_version}{suffix}")


if __name__ == "__main__":
    cli()
