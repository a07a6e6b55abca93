"""Shell and git utilities.

Provides blocking wrappers around subprocess calls for running hook and
publish commands and git operations, plus output formatting helpers.
Every command runs in an explicit working directory and with a bounded
wait; nothing here reads the process's current directory.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import click

from .errors import CommandTimeoutError, SourceControlOperationError

DEFAULT_TIMEOUT = 600.0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together, for failure reports."""
        return "\n".join(s for s in (self.stdout.strip(), self.stderr.strip()) if s)


def display(command: str | Sequence[str]) -> str:
    """Render a command the way an operator would type it."""
    if isinstance(command, str):
        return command
    return shlex.join(command)


def run(
    command: str | Sequence[str],
    cwd: Path,
    *,
    shell: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
) -> CommandResult:
    """Run an external command and wait for it to finish.

    stdout and stderr are captured separately and decoded as UTF-8, with
    undecodable bytes replaced; ``CommandResult.output`` joins them for
    failure reports.

    Args:
        command: Argument list, or a command line when ``shell`` is True.
        cwd: Working directory for the command.
        shell: Run through the system shell (hook commands).
        timeout: Seconds to wait before giving up.

    Returns:
        CommandResult with the exit code and captured output. A missing
        executable is reported as exit code 127, like a shell would.

    Raises:
        CommandTimeoutError: If the command exceeds ``timeout``.
    """
    args = command if shell else list(command)
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            shell=shell,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeoutError(display(command), timeout) from exc
    except FileNotFoundError as exc:
        return CommandResult(returncode=127, stderr=str(exc))
    return CommandResult(
        returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or ""
    )


def git(*args: str, cwd: Path, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run a git command in ``cwd`` and return its stripped output.

    Raises:
        SourceControlOperationError: On a non-zero exit.
        CommandTimeoutError: If git hangs (e.g. waiting on the network).
    """
    result = run(["git", *args], cwd, timeout=timeout)
    if not result.ok:
        detail = result.output.strip() or f"exit code {result.returncode}"
        raise SourceControlOperationError(f"`git {' '.join(args)}` failed: {detail}")
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    click.echo(f"  {msg}")


def command(msg: str) -> None:
    """Echo a command before it runs (or instead of running it)."""
    click.secho(f"  $ {msg}", fg="blue")


def warn(msg: str) -> None:
    click.secho(f"[WARN] {msg}", fg="yellow", err=True)


def success(msg: str) -> None:
    click.secho(msg, fg="green")


def error(msg: str) -> None:
    click.secho(f"[ERROR] {msg}", fg="red", err=True)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    error(msg)
    sys.exit(1)
