"""Target set resolution.

Narrows the ordered workspace down to the packages one invocation acts on:
an --only seed set closed over internal dependencies, minus --exclude.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping

from .errors import ResolutionError
from .models import Package


def unknown_packages(
    packages: Mapping[str, Package], names: Iterable[str]
) -> list[str]:
    """Return the names that are not workspace packages, sorted."""
    return sorted(name for name in set(names) if name not in packages)


def dependency_closure(
    packages: Mapping[str, Package], seeds: Iterable[str]
) -> set[str]:
    """Every package reachable from ``seeds`` through internal deps.

    The seeds themselves are included. Seeds that are not workspace
    packages are skipped; callers validate them with unknown_packages().
    """
    resolved: set[str] = set()
    queue = list(seeds)

    while queue:
        name = queue.pop()
        if name in resolved:
            continue
        resolved.add(name)

        info = packages.get(name)
        if info is None:
            continue
        queue.extend(dep for dep in info.deps if dep not in resolved)

    return resolved


def resolve_targets(
    ordered: list[Package],
    only: Collection[str] = (),
    exclude: Collection[str] = (),
    *,
    strict: bool = False,
) -> list[Package]:
    """Select the packages to act on, keeping publish order.

    Args:
        ordered: Workspace packages in publish order.
        only: Seed names. When non-empty, the targets are the seeds plus
              everything they transitively depend on.
        exclude: Names removed after the closure is taken. Names that are
                 not in the workspace are ignored.
        strict: When True, excluding a package that a remaining target
                depends on is an error instead of a silent omission.

    Returns:
        The selected packages, in the same relative order as ``ordered``.
        May be empty; the caller decides whether that is an error.

    Raises:
        ResolutionError: In strict mode, if an excluded package is needed
                         by a remaining target.
    """
    candidates = ordered

    if only:
        by_name = {p.name: p for p in ordered}
        closure = dependency_closure(by_name, only)
        candidates = [p for p in ordered if p.name in closure]

    targets = [p for p in candidates if p.name not in exclude]

    if strict:
        missing = [
            f"{p.name} → {dep}"
            for p in targets
            for dep in p.deps
            if dep in exclude and dep != p.name
        ]
        if missing:
            raise ResolutionError(
                "Excluded package(s) are required by targets: " + ", ".join(missing)
            )

    return targets
