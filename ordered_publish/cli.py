"""CLI entry point for ordered-publish."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

import click

from .config import CONFIG_FILENAME, PublishConfig, load_config
from .confirm import derive_mode, should_proceed
from .errors import ConfigError, PreconditionError, StepFailed, UserError
from .graph import order_packages
from .manifest import discover_packages
from .models import Package, RunOptions
from .pipeline import run_pipeline
from .report import render_report, write_report
from .shell import banner, is_tree_clean, warn
from .targets import resolve_targets, unknown_packages

TAG_RE = re.compile(r"^\S+$")


def _validate_tag(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    if value is not None and not TAG_RE.match(value):
        raise click.BadParameter(
            f'Invalid tag: "{value}". Tag must be non-empty and contain no whitespace.'
        )
    return value


def _print_targets(targets: list[Package]) -> None:
    for pkg in targets:
        click.echo(f"  • {pkg.label}")


def require_clean_tree(root: Path) -> None:
    """Refuse to publish from a working tree with uncommitted changes."""
    try:
        clean = is_tree_clean(root)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise PreconditionError(f"Could not check git status in {root}: {exc}") from exc
    if not clean:
        raise PreconditionError(
            "Working tree is not clean. Commit/stash first or pass --allow-dirty."
        )


def plan_targets(
    root: Path, config: PublishConfig, options: RunOptions
) -> list[Package]:
    """Load the workspace and resolve the packages this run acts on.

    Raises:
        UserError: If the workspace is empty, --only names an unknown
                   package, the graph has a cycle and cycles are fatal, or
                   nothing is left to publish.
    """
    packages = discover_packages(root)
    if not packages:
        raise UserError("No publishable workspace packages found.")

    ordering = order_packages(packages, config.priority)
    if ordering.degraded:
        cycle = ", ".join(ordering.cycle)
        if options.fail_on_cycle:
            raise UserError(f"Dependency cycle detected involving: {cycle}")
        warn(
            f"Dependency cycle detected involving: {cycle}. "
            "Falling back to alphabetical order; dependencies may be "
            "published after their dependents."
        )

    missing = unknown_packages(packages, options.only)
    if missing:
        raise UserError(f"Unknown package(s): {', '.join(missing)}")

    ordered = [packages[name] for name in ordering.order]
    targets = resolve_targets(
        ordered, options.only, options.exclude, strict=options.strict_exclude
    )
    if not targets:
        raise UserError("No matching packages to publish.")
    return targets


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="ordered-publish")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root containing the root package.json.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Config file. (default: <root>/{CONFIG_FILENAME})",
)
@click.option(
    "--tag",
    callback=_validate_tag,
    help="Dist-tag to publish under. (default: config tag, else alpha)",
)
@click.option("--list", "list_only", is_flag=True, help="Print publish order and exit.")
@click.option(
    "--only",
    multiple=True,
    metavar="PKG",
    help="Only publish a package and its internal deps (repeatable).",
)
@click.option(
    "--exclude", multiple=True, metavar="PKG", help="Exclude a package (repeatable)."
)
@click.option(
    "--strict-exclude",
    is_flag=True,
    help="Fail if an excluded package is required by another target.",
)
@click.option(
    "--fail-on-cycle",
    is_flag=True,
    help="Fail on a dependency cycle instead of using alphabetical order.",
)
@click.option("--publish", is_flag=True, help="Actually publish to the registry.")
@click.option(
    "--yes", is_flag=True, help="Skip confirmation prompt (implies --publish)."
)
@click.option(
    "--dry-run", is_flag=True, help="Force dry run (overrides --publish/--yes)."
)
@click.option("--skip-build", is_flag=True, help="Skip each package's build script.")
@click.option(
    "--tolerate-republish",
    is_flag=True,
    help="Do not fail if the version already exists.",
)
@click.option(
    "--allow-dirty",
    is_flag=True,
    help="Allow uncommitted git changes when publishing.",
)
@click.option(
    "--run-scripts", is_flag=True, help="Allow lifecycle scripts during publish."
)
@click.option("--registry", metavar="URL", help="Override registry URL.")
@click.option("--access", metavar="LEVEL", help="Publish access level (e.g. public).")
@click.option("--otp", metavar="CODE", help="One-time password for 2FA.")
@click.option("--no-report", is_flag=True, help="Do not write the HTML results report.")
@click.option("--no-open", is_flag=True, help="Write the report but do not open it.")
def cli(
    root: Path,
    config_path: Path | None,
    tag: str | None,
    list_only: bool,
    only: tuple[str, ...],
    exclude: tuple[str, ...],
    strict_exclude: bool,
    fail_on_cycle: bool,
    publish: bool,
    yes: bool,
    dry_run: bool,
    skip_build: bool,
    tolerate_republish: bool,
    allow_dirty: bool,
    run_scripts: bool,
    registry: str | None,
    access: str | None,
    otp: str | None,
    no_report: bool,
    no_open: bool,
) -> None:
    """Build and publish workspace packages in dependency order.

    The default mode is a dry run: builds run, but nothing is published.
    Pass --publish to publish after a confirmation prompt, or --yes to
    publish without one.
    """
    root = root.resolve()
    config = load_config(config_path or root / CONFIG_FILENAME)

    resolved_tag = tag or config.tag
    if not TAG_RE.match(resolved_tag):
        raise ConfigError(
            f'Invalid tag: "{resolved_tag}". '
            "Tag must be non-empty and contain no whitespace."
        )

    publish, dry_run = derive_mode(publish, yes, dry_run)
    options = RunOptions(
        tag=resolved_tag,
        publish=publish,
        yes=yes,
        dry_run=dry_run,
        skip_build=skip_build,
        tolerate_republish=tolerate_republish,
        allow_dirty=allow_dirty,
        run_scripts=run_scripts,
        registry=registry,
        access=access,
        otp=otp,
        only=frozenset(only),
        exclude=frozenset(exclude),
        strict_exclude=strict_exclude,
        fail_on_cycle=fail_on_cycle or config.fail_on_cycle,
    )

    targets = plan_targets(root, config, options)

    if list_only:
        click.echo("\nPublish order:")
        _print_targets(targets)
        return

    if not options.dry_run and not options.allow_dirty:
        require_clean_tree(root)

    banner(f"{root.name} v{targets[0].version}")
    click.echo(f"Tag: {options.tag}")
    click.echo(f"Mode: {'dry-run' if options.dry_run else 'publish'}")
    if options.registry:
        click.echo(f"Registry: {options.registry}")
    if options.access:
        click.echo(f"Access: {options.access}")
    click.echo(f"Packages ({len(targets)}):")
    _print_targets(targets)

    if not should_proceed(options, len(targets), options.tag):
        click.echo("Cancelled.")
        return

    state = run_pipeline(targets, options, config)
    if not state.ok:
        raise StepFailed(state.failed, state.failed_step, state.exit_code)

    banner("Dry run complete!" if options.dry_run else "Publish complete!")

    if no_report:
        return

    content = render_report(
        targets,
        title=root.name,
        tag=options.tag,
        dry_run=options.dry_run,
        registry_url=options.registry or config.registry_url,
    )
    report_path = write_report(root / config.report, content)
    click.echo(f"Report saved: {report_path}")
    if not no_open:
        click.launch(str(report_path))
