"""Exceptions for ordered-publish.

Every fatal condition is a click.ClickException so the CLI reports it as a
single ``Error: ...`` line on stderr and exits with ``exit_code``.
"""

from __future__ import annotations

import click


class UserError(click.ClickException):
    """Bad input: unknown packages, empty target set, empty workspace."""


class ManifestError(UserError):
    """A package.json could not be parsed or lacks required fields."""


class ConfigError(UserError):
    """The ordered-publish.toml file is unreadable or ill-typed."""


class ResolutionError(UserError):
    """Target resolution violated strict-exclude rules."""


class PreconditionError(UserError):
    """The repository is not in a state where publishing may start."""


class StepFailed(click.ClickException):
    """A build or publish subprocess exited non-zero.

    The exit code of the failing subprocess becomes the exit code of the
    whole run. Signal deaths (negative codes) fall back to 1.
    """

    def __init__(self, package: str, step: str, exit_code: int) -> None:
        verb = "Build" if step == "build" else "Publishing"
        super().__init__(f"{verb} failed for {package} (exit code {exit_code})")
        self.package = package
        self.step = step
        self.exit_code = exit_code if exit_code > 0 else 1


class CommandError(UserError):
    """A build or publish command could not be started at all.

    Exits with 127, the shell's code for a command that cannot be found.
    """

    def __init__(self, package: str, step: str, command: str, reason: str) -> None:
        super().__init__(
            f"Could not run {step} command {command!r} for {package}: {reason}"
        )
        self.package = package
        self.step = step
        self.exit_code = 127
