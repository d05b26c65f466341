"""Shell and git utilities.

Thin wrappers around subprocess for the git clean-tree check and for running
build/publish commands, plus console output helpers.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stripped stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        cwd: Directory to run in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()


def run(*args: str, cwd: Path | None = None) -> int:
    """Run a command with output streamed straight to the terminal.

    Returns the exit code. The caller decides what a non-zero code means,
    so this never raises on failure.
    """
    return subprocess.run(args, cwd=cwd).returncode


def is_tree_clean(root: Path) -> bool:
    """True when ``git status --porcelain`` reports nothing in ``root``."""
    return git("status", "--porcelain", cwd=root) == ""


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def banner(msg: str) -> None:
    """Print a heavy banner, used at the start and end of a run."""
    click.echo(f"\n{'═' * 60}\n  {msg}\n{'═' * 60}\n")


def warn(msg: str) -> None:
    """Print a warning to stderr."""
    click.secho(f"WARNING: {msg}", fg="yellow", err=True)
