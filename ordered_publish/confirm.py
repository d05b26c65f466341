"""Run mode derivation and the interactive confirmation gate."""

from __future__ import annotations

import click

from .models import RunOptions


def derive_mode(publish: bool, yes: bool, dry_run: bool) -> tuple[bool, bool]:
    """Turn the three mode flags into ``(publish, dry_run)``.

    --yes implies --publish, and anything short of publishing is a dry run.
    An explicit --dry-run always wins:

        (no flags)          → publish=False, dry_run=True
        --publish           → publish=True,  dry_run=False (asks first)
        --yes               → publish=True,  dry_run=False (no prompt)
        --dry-run --yes     → publish=True,  dry_run=True
    """
    publish = publish or yes
    return publish, dry_run or not publish


def should_proceed(options: RunOptions, target_count: int, tag: str) -> bool:
    """Ask before mutating the registry.

    Dry runs and --yes never prompt. Otherwise a single keypress is read;
    only "y" or "Y" continues.
    """
    if options.dry_run or options.yes:
        return True

    click.echo(
        f"\nAbout to publish {target_count} package(s) with tag \"{tag}\". "
        "Continue? (y/N) ",
        nl=False,
    )
    char = click.getchar()
    click.echo()
    return char.lower() == "y"
