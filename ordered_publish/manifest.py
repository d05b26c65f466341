"""Workspace discovery.

Reads the root package.json ``workspaces`` declaration, expands it to the
set of member manifests, and parses each member into a Package with its
internal dependencies resolved.

Glob expansion is the only filesystem-facing part of selection; the
include-minus-exclude set algebra in select_manifest_paths() is pure and
takes the expansion as a callable.
"""

from __future__ import annotations

import glob
import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from .errors import ManifestError
from .models import Package, WorkspacePatterns

MANIFEST = "package.json"
DEFAULT_MEMBER_GLOB = "packages/*"

# Dependency tables that make a workspace package an internal dependency.
DEPENDENCY_FIELDS = ("dependencies", "optionalDependencies", "peerDependencies")


def load_json(path: Path) -> Any:
    """Parse a UTF-8 JSON file, turning read and syntax errors into ManifestError."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        raise ManifestError(f"Invalid JSON in {path}: {exc}") from exc


def normalize_pattern(pattern: str) -> str:
    """Use forward slashes and drop leading ``./`` and trailing slashes."""
    pattern = pattern.replace("\\", "/").rstrip("/")
    negated = pattern.startswith("!")
    body = pattern[1:] if negated else pattern
    while body.startswith("./"):
        body = body[2:]
    return f"!{body}" if negated else body


def to_manifest_glob(pattern: str) -> str:
    """Point a member directory glob at the manifest inside it.

    Examples:
        "packages/*" → "packages/*/package.json"
        "tools/cli/package.json" → "tools/cli/package.json"
    """
    return pattern if pattern.endswith(MANIFEST) else f"{pattern}/{MANIFEST}"


def get_workspace_member_globs(root_manifest: Any) -> list[str]:
    """Extract raw member globs from a root package.json document.

    ``workspaces`` may be a list of globs or an object with a ``packages``
    list (the yarn form). Anything else falls back to ``packages/*``.
    """
    raw = root_manifest.get("workspaces") if isinstance(root_manifest, dict) else None
    if isinstance(raw, list):
        return [str(p) for p in raw]
    if isinstance(raw, dict) and isinstance(raw.get("packages"), list):
        return [str(p) for p in raw["packages"]]
    return [DEFAULT_MEMBER_GLOB]


def parse_workspace_patterns(member_globs: Iterable[str]) -> WorkspacePatterns:
    """Split member globs into include and exclude manifest globs.

    Globs starting with ``!`` are exclusions. Empty globs are skipped, and
    if nothing is left to include the default ``packages/*`` is used.
    """
    include: list[str] = []
    exclude: list[str] = []

    for raw in member_globs:
        pattern = normalize_pattern(raw)
        if not pattern:
            continue
        if pattern.startswith("!"):
            negated = pattern[1:]
            if negated:
                exclude.append(to_manifest_glob(negated))
            continue
        include.append(to_manifest_glob(pattern))

    return WorkspacePatterns(
        include=include or [to_manifest_glob(DEFAULT_MEMBER_GLOB)],
        exclude=exclude,
    )


def select_manifest_paths(
    patterns: WorkspacePatterns, expand: Callable[[str], Iterable[str]]
) -> list[str]:
    """Compute the member manifests selected by ``patterns``.

    Args:
        patterns: Include and exclude globs.
        expand: Maps one glob to the relative paths it matches.

    Returns:
        Sorted relative manifest paths: the union of include matches minus
        the union of exclude matches.
    """
    selected: set[str] = set()
    for pattern in patterns.include:
        selected.update(expand(pattern))
    for pattern in patterns.exclude:
        selected.difference_update(expand(pattern))
    return sorted(selected)


def filesystem_expander(root: Path) -> Callable[[str], list[str]]:
    """Build an ``expand`` callable that globs files under ``root``.

    Results are POSIX-style paths relative to ``root``, so that include and
    exclude matches compare equal.
    """

    def expand(pattern: str) -> list[str]:
        matches = glob.glob(pattern, root_dir=root, recursive=True)
        return [Path(m).as_posix() for m in matches if (root / m).is_file()]

    return expand


def get_internal_deps(
    manifest: dict[str, Any], workspace_names: set[str]
) -> tuple[str, ...]:
    """Collect the workspace packages a manifest depends on.

    Merges runtime, optional and peer dependencies, keeps only names that
    belong to the workspace, and drops duplicates while preserving the
    order in which names first appear.
    """
    seen: dict[str, None] = {}
    for field in DEPENDENCY_FIELDS:
        table = manifest.get(field)
        if not isinstance(table, dict):
            continue
        for name in table:
            if name in workspace_names:
                seen.setdefault(name, None)
    return tuple(seen)


def read_workspace_patterns(root: Path) -> WorkspacePatterns:
    """Read member patterns from ``root/package.json``.

    A workspace without a root manifest uses the default ``packages/*``.
    """
    root_manifest_path = root / MANIFEST
    root_manifest: Any = {}
    if root_manifest_path.exists():
        root_manifest = load_json(root_manifest_path)
    return parse_workspace_patterns(get_workspace_member_globs(root_manifest))


def discover_packages(root: Path) -> dict[str, Package]:
    """Scan the workspace and load every publishable package.

    Private packages are skipped entirely. Packages are returned keyed by
    name, in manifest path order.

    Raises:
        ManifestError: On an unreadable or invalid JSON file, a manifest
                       whose ``name`` or ``version`` is missing or not a
                       string, or two manifests with the same name.
    """
    patterns = read_workspace_patterns(root)
    rel_paths = select_manifest_paths(patterns, filesystem_expander(root))

    # First pass: read manifests and collect the workspace name set
    manifests: dict[str, tuple[Path, dict[str, Any]]] = {}
    for rel_path in rel_paths:
        manifest_path = root / rel_path
        manifest = load_json(manifest_path)

        if not isinstance(manifest, dict):
            continue
        if manifest.get("private"):
            continue

        name = manifest.get("name")
        version = manifest.get("version")
        if not (isinstance(name, str) and name) or not (
            isinstance(version, str) and version
        ):
            raise ManifestError(f"Invalid {MANIFEST}: {rel_path}")
        if name in manifests:
            other = manifests[name][0].relative_to(root).as_posix()
            raise ManifestError(
                f"Duplicate package name {name!r} in {rel_path} and {other}"
            )
        manifests[name] = (manifest_path, manifest)

    # Second pass: resolve internal deps now that every name is known
    workspace_names = set(manifests)
    packages: dict[str, Package] = {}
    for name, (manifest_path, manifest) in manifests.items():
        scripts = manifest.get("scripts")
        build_script = scripts.get("build") if isinstance(scripts, dict) else None
        packages[name] = Package(
            name=name,
            version=manifest["version"],
            path=manifest_path.parent.resolve(),
            deps=get_internal_deps(manifest, workspace_names),
            build_script=str(build_script) if build_script else None,
        )

    return packages
