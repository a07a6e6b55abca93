"""Release pipeline: guard → version → hooks → commit → tag → push → publish.

This module orchestrates a release of the workspace:
1. Refuse to start on a dirty working tree
2. Write the target version into the root and package manifests
3. Run the pre-commit hooks
4. Commit everything and create an annotated tag named after the version
5. Optionally generate the changelog and fold it into the release commit
6. Push the commit and the tags
7. Run the after-push hooks
8. Optionally publish every target package

Steps run strictly in that order. Each one is either fatal (its failure
stops the run) or advisory (failures are reported, the run goes on), as
declared in STEP_POLICY. Nothing is rolled back: a fatal failure after
ApplyVersions leaves the tree as it is, for the operator to resolve.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .catalog import detect_package_manager, discover_packages, is_wildcard, resolve_targets
from .changelog import generate_changelog
from .config import ReleaseConfig
from .errors import (
    CatalogUnavailableError,
    ChangelogError,
    CommandTimeoutError,
    DirtyWorkingTreeError,
    ManifestReadError,
    ManifestWriteError,
    ReleaseError,
)
from .manifest import find_manifest, read_manifest_version, write_manifest_version
from .models import (
    HookFailure,
    PublishFailure,
    ReleasePlan,
    ReleaseReport,
    ReleaseRequest,
)
from .shell import command, display, git, info, run, step, warn
from .versions import resolve_next_version

ChangelogGenerator = Callable[[Path, str, float], str]


class Step(str, Enum):
    GUARD_CHECK = "guard-check"
    APPLY_VERSIONS = "apply-versions"
    PRE_COMMIT_HOOKS = "pre-commit-hooks"
    COMMIT = "commit"
    TAG = "tag"
    CHANGELOG = "changelog"
    PUSH = "push"
    PUSH_TAGS = "push-tags"
    AFTER_PUSH_HOOKS = "after-push-hooks"
    PUBLISH = "publish"


class Policy(str, Enum):
    FATAL = "fatal"
    ADVISORY = "advisory"


STEP_ORDER: tuple[Step, ...] = tuple(Step)

STEP_POLICY: dict[Step, Policy] = {
    Step.GUARD_CHECK: Policy.FATAL,
    Step.APPLY_VERSIONS: Policy.FATAL,
    Step.PRE_COMMIT_HOOKS: Policy.ADVISORY,
    Step.COMMIT: Policy.FATAL,
    Step.TAG: Policy.FATAL,
    Step.CHANGELOG: Policy.FATAL,
    Step.PUSH: Policy.FATAL,
    Step.PUSH_TAGS: Policy.FATAL,
    Step.AFTER_PUSH_HOOKS: Policy.ADVISORY,
    Step.PUBLISH: Policy.ADVISORY,
}


@dataclass(frozen=True)
class ReleaseContext:
    """Everything a step needs; built once per run and never modified."""

    root: Path
    config: ReleaseConfig
    plan: ReleasePlan
    dry_run: bool = False
    changelog_generator: ChangelogGenerator = generate_changelog

    @property
    def message(self) -> str:
        return self.config.commit_message(self.plan.target_version)

    @property
    def timeout(self) -> float:
        return self.config.command_timeout


def build_plan(root: Path, config: ReleaseConfig, request: ReleaseRequest) -> ReleasePlan:
    """Resolve an operator request into a release plan.

    Reads the current version from the root manifest, computes the target
    version and resolves the target packages. Performs no side effects, so
    every validation error surfaces before anything is touched.

    A missing packages root is tolerated for the ``all`` wildcard (the
    release then only covers the root manifest) but not for explicit names.
    """
    root_manifest = find_manifest(root)
    if root_manifest is None:
        raise ManifestReadError(f"no root manifest in {root}, are you in the root?")
    current = read_manifest_version(root_manifest)
    target = resolve_next_version(current, request.bump, request.custom_version)

    try:
        catalog = discover_packages(root, config.packages_dir)
    except CatalogUnavailableError as exc:
        if not is_wildcard(request.packages):
            raise
        warn(f"{exc.message}, only the root manifest will be versioned")
        catalog = []

    selection = resolve_targets(request.packages, catalog, config.allow_list)
    publish = config.publish if request.publish is None else request.publish

    return ReleasePlan(
        current_version=current,
        target_version=target,
        packages=selection.packages,
        all_packages=selection.all_packages,
        generate_changelog=request.generate_changelog,
        publish=publish,
    )


def _git(ctx: ReleaseContext, *args: str) -> str:
    """Echo a mutating git command and run it, unless this is a dry run."""
    command(display(["git", *args]))
    if ctx.dry_run:
        return ""
    return git(*args, cwd=ctx.root, timeout=ctx.timeout)


def check_clean_tree(ctx: ReleaseContext) -> None:
    """Abort before any mutation if the working tree has changes.

    The status query is read-only, so it also runs on a dry run.
    """
    status = git("status", "--porcelain", cwd=ctx.root, timeout=ctx.timeout)
    if status:
        changed = "\n".join(f"    {line}" for line in status.splitlines()[:10])
        raise DirtyWorkingTreeError(
            f"you have uncommitted changes, please commit them first:\n{changed}"
        )
    info("Working tree clean")


def manifest_targets(ctx: ReleaseContext) -> list[tuple[str, Path | None]]:
    """The manifests to version: the root one first, then each package."""
    targets: list[tuple[str, Path | None]] = [("root", find_manifest(ctx.root))]
    targets.extend((pkg.name, pkg.manifest_path) for pkg in ctx.plan.packages)
    return targets


def apply_versions(ctx: ReleaseContext) -> list[Path]:
    """Write the target version into every planned manifest.

    Every manifest is attempted even after a failure; the failures are
    then raised together.

    Returns:
        The manifests that were written.

    Raises:
        ManifestWriteError: If any manifest could not be updated.
    """
    version = ctx.plan.target_version
    written: list[Path] = []
    failures: list[str] = []

    for name, manifest in manifest_targets(ctx):
        if manifest is None:
            failures.append(f"{name}: no manifest found")
            continue
        info(f"{name}: {_relative(ctx, manifest)} → {version}")
        if ctx.dry_run:
            continue
        try:
            write_manifest_version(manifest, version)
        except ManifestWriteError as exc:
            failures.append(f"{name}: {exc.message}")
            continue
        written.append(manifest)

    if failures:
        raise ManifestWriteError(
            "failed to update manifests (tree left partially versioned):\n"
            + "\n".join(f"  - {f}" for f in failures)
        )
    return written


def run_hooks(ctx: ReleaseContext, which: Step, commands: list[str]) -> list[HookFailure]:
    """Run configured hook commands in order, each to completion.

    Hooks are advisory: a failing or hung hook is reported and the next one
    still runs.
    """
    failures: list[HookFailure] = []
    if not commands:
        info("No hooks configured")
        return failures

    for hook in commands:
        command(hook)
        if ctx.dry_run:
            continue
        try:
            result = run(hook, ctx.root, shell=True, timeout=ctx.timeout)
        except CommandTimeoutError as exc:
            failures.append(
                HookFailure(step=which.value, command=hook, returncode=-1, output=exc.message)
            )
            warn(exc.message)
            continue
        if not result.ok:
            failures.append(
                HookFailure(
                    step=which.value,
                    command=hook,
                    returncode=result.returncode,
                    output=result.output,
                )
            )
            warn(f"hook `{hook}` failed (exit {result.returncode})")
    return failures


def commit_release(ctx: ReleaseContext) -> None:
    """Stage everything and commit, skipping commit-time verification hooks."""
    _git(ctx, "add", ".")
    _git(ctx, "commit", "-m", ctx.message, "--no-verify")


def tag_release(ctx: ReleaseContext) -> None:
    """Create an annotated tag named exactly after the target version."""
    _git(ctx, "tag", "-a", ctx.plan.target_version, "-m", ctx.message)


def write_changelog(ctx: ReleaseContext) -> Path:
    """Generate the changelog and fold it into the release commit.

    The file is amended into the commit created by commit_release, and the
    tag is moved onto the amended commit so both carry the changelog.
    """
    path = ctx.root / ctx.config.changelog_file
    command(f"conventional-changelog -p {ctx.config.changelog_preset} > {path.name}")
    if not ctx.dry_run:
        text = ctx.changelog_generator(ctx.root, ctx.config.changelog_preset, ctx.timeout)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ChangelogError(f"cannot write {path}: {exc}") from exc
    _git(ctx, "add", ctx.config.changelog_file)
    _git(ctx, "commit", "--amend", "--no-edit", "--no-verify")
    _git(ctx, "tag", "-a", "-f", ctx.plan.target_version, "-m", ctx.message)
    return path


def push_commits(ctx: ReleaseContext) -> None:
    _git(ctx, "push")


def push_tags(ctx: ReleaseContext) -> None:
    _git(ctx, "push", "--tags")


def publish_command(ctx: ReleaseContext) -> list[str]:
    manager = ctx.config.package_manager or detect_package_manager(ctx.root)
    return [manager, "publish"]


def publish_packages(ctx: ReleaseContext) -> tuple[list[str], list[PublishFailure]]:
    """Publish each target package from its own directory.

    Publishes are independent: one failure is recorded and the remaining
    packages are still attempted.

    Returns:
        Tuple of (published package names, failures).
    """
    cmd = publish_command(ctx)
    published: list[str] = []
    failures: list[PublishFailure] = []

    if not ctx.plan.packages:
        info("No packages to publish")
        return published, failures

    for pkg in ctx.plan.packages:
        command(f"cd {_relative(ctx, pkg.path)} && {display(cmd)}")
        if ctx.dry_run:
            published.append(pkg.name)
            continue
        try:
            result = run(cmd, pkg.path, timeout=ctx.timeout)
        except CommandTimeoutError as exc:
            failures.append(
                PublishFailure(
                    package=pkg.name, command=display(cmd), returncode=-1, output=exc.message
                )
            )
            warn(f"{pkg.name}: {exc.message}")
            continue
        if result.ok:
            published.append(pkg.name)
            continue
        failures.append(
            PublishFailure(
                package=pkg.name,
                command=display(cmd),
                returncode=result.returncode,
                output=result.output,
            )
        )
        warn(f"{pkg.name}: publish failed (exit {result.returncode})")

    return published, failures


def _relative(ctx: ReleaseContext, path: Path) -> str:
    try:
        return str(path.relative_to(ctx.root))
    except ValueError:
        return str(path)


def _is_enabled(plan: ReleasePlan, current: Step) -> bool:
    if current is Step.CHANGELOG:
        return plan.generate_changelog
    if current is Step.PUBLISH:
        return plan.publish
    return True


def _execute(ctx: ReleaseContext, current: Step, report: ReleaseReport) -> None:
    if current is Step.GUARD_CHECK:
        check_clean_tree(ctx)
    elif current is Step.APPLY_VERSIONS:
        apply_versions(ctx)
    elif current is Step.PRE_COMMIT_HOOKS:
        report.hook_failures.extend(run_hooks(ctx, current, ctx.config.pre_commit))
    elif current is Step.COMMIT:
        commit_release(ctx)
    elif current is Step.TAG:
        tag_release(ctx)
    elif current is Step.CHANGELOG:
        write_changelog(ctx)
    elif current is Step.PUSH:
        push_commits(ctx)
    elif current is Step.PUSH_TAGS:
        push_tags(ctx)
    elif current is Step.AFTER_PUSH_HOOKS:
        report.hook_failures.extend(run_hooks(ctx, current, ctx.config.after_push))
    elif current is Step.PUBLISH:
        published, failures = publish_packages(ctx)
        report.published.extend(published)
        report.publish_failures.extend(failures)


def run_release(
    plan: ReleasePlan,
    config: ReleaseConfig,
    root: Path,
    *,
    dry_run: bool = False,
    changelog_generator: ChangelogGenerator = generate_changelog,
) -> ReleaseReport:
    """Execute the release steps for ``plan`` in order.

    Args:
        plan: Resolved release plan (see build_plan).
        config: Configuration loaded once for this run.
        root: Workspace root; every command and path is anchored here.
        dry_run: Echo commands and skip every write and mutating command.
        changelog_generator: Produces the changelog text.

    Returns:
        Report of completed steps, hook failures and publish results.

    Raises:
        ReleaseError: From the first fatal step that fails, with its
            ``step`` attribute set. Earlier steps are not undone.
    """
    ctx = ReleaseContext(
        root=root,
        config=config,
        plan=plan,
        dry_run=dry_run,
        changelog_generator=changelog_generator,
    )
    report = ReleaseReport(plan=plan, dry_run=dry_run)

    for current in STEP_ORDER:
        if not _is_enabled(plan, current):
            continue
        step(f"{current.value}{' (dry run)' if dry_run else ''}")
        try:
            _execute(ctx, current, report)
        except ReleaseError as exc:
            if exc.step is None:
                exc.step = current.value
            if STEP_POLICY[current] is Policy.FATAL:
                raise
            warn(f"{current.value} failed, continuing: {exc.message}")
        report.completed.append(current.value)

    return report
