"""Publish pipeline: build → publish, one package at a time.

Packages are processed strictly in the order given, which the caller has
already made dependency-first. The first non-zero exit from a build or
publish command stops the run; packages already published stay published.

Progress is carried in an immutable RunState that each step returns rather
than mutates.
"""

from __future__ import annotations

import click

from .config import PublishConfig
from .errors import CommandError
from .models import Package, RunOptions, RunState
from .shell import run, step


def publish_args(options: RunOptions, config: PublishConfig) -> list[str]:
    """Build the registry upload command line for the current options.

    Example (defaults, dry run):
        ["bun", "publish", "--tag", "alpha", "--dry-run", "--ignore-scripts"]
    """
    args = [*config.publish_command, "--tag", options.tag]

    if options.dry_run:
        args.append("--dry-run")
    if options.tolerate_republish:
        args.append("--tolerate-republish")
    if not options.run_scripts:
        args.append("--ignore-scripts")

    if options.registry:
        args.append(f"--registry={options.registry}")
    if options.access:
        args.append(f"--access={options.access}")
    if options.otp:
        args.append(f"--otp={options.otp}")

    return args


def _run_step(pkg: Package, step_name: str, args: list[str]) -> int:
    """Run one step's command in the package directory. Returns its exit code.

    Raises:
        CommandError: If the command cannot be started (missing program,
                      not executable, missing package directory).
    """
    try:
        return run(*args, cwd=pkg.path)
    except OSError as exc:
        raise CommandError(
            pkg.name, step_name, args[0], exc.strerror or str(exc)
        ) from exc


def build_package(pkg: Package, config: PublishConfig) -> int:
    """Run the build command in the package directory. Returns its exit code."""
    click.echo("\n  Building...")
    return _run_step(pkg, "build", list(config.build_command))


def publish_package(pkg: Package, options: RunOptions, config: PublishConfig) -> int:
    """Run the publish command in the package directory. Returns its exit code."""
    click.echo("\n  Publishing...")
    return _run_step(pkg, "publish", publish_args(options, config))


def process_package(
    pkg: Package, options: RunOptions, config: PublishConfig, state: RunState
) -> RunState:
    """Build (if needed) and publish one package, returning the new state."""
    step(pkg.label)

    if not options.skip_build and pkg.build_script:
        code = build_package(pkg, config)
        if code != 0:
            return state.record_failure(pkg.name, "build", code)

    code = publish_package(pkg, options, config)
    if code != 0:
        return state.record_failure(pkg.name, "publish", code)

    return state.record_success(pkg.name)


def run_pipeline(
    targets: list[Package], options: RunOptions, config: PublishConfig
) -> RunState:
    """Process every target in order, stopping at the first failure.

    Args:
        targets: Packages to act on, dependencies first.
        options: Run options for this invocation.
        config: Commands to run for build and publish.

    Returns:
        The final RunState. When ``state.ok`` is False, ``state.failed``
        names the package that stopped the run and no later target was
        attempted.
    """
    state = RunState()
    for pkg in targets:
        state = process_package(pkg, options, config, state)
        if not state.ok:
            break
    return state
