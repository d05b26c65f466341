"""Dependency graph utilities.

Provides topological sorting for determining publish order in a workspace.
Packages must be published in dependency order so that when package A
depends on package B, B is already in the registry when A lands there.
"""

from __future__ import annotations

import heapq
from collections.abc import Mapping

from .models import OrderingResult, Package

# Sort key shared by every package without an explicit priority.
DEFAULT_PRIORITY = 1_000_000


def sort_key(name: str, priority: Mapping[str, int]) -> tuple[int, str]:
    """Tie-break key: explicit priority first, then alphabetical."""
    return (priority.get(name, DEFAULT_PRIORITY), name)


def build_graph(packages: Mapping[str, Package]) -> dict[str, set[str]]:
    """Build the dependency → dependents adjacency map.

    An edge B → A means A depends on B, so B must be published first.
    Only names inside ``packages`` become edge endpoints, duplicate edges
    collapse into one, and a package listing itself adds no edge.
    """
    dependents: dict[str, set[str]] = {name: set() for name in packages}
    for name, info in packages.items():
        for dep in info.deps:
            if dep in dependents and dep != name:
                dependents[dep].add(name)
    return dependents


def order_packages(
    packages: Mapping[str, Package], priority: Mapping[str, int] | None = None
) -> OrderingResult:
    """Topologically sort packages by their internal dependencies.

    Uses Kahn's algorithm; whenever several packages are ready at once the
    one with the smallest sort_key() goes next, so the result is fully
    determined by the graph and the priority table.

    Args:
        packages: Map of package name → Package with its deps.
        priority: Optional tie-break keys for distinguished packages.

    Returns:
        OrderingResult with dependencies before dependents. If a cycle
        prevents that, every package sorted by sort_key() with
        ``degraded=True`` and the unplaceable names in ``cycle``.

    Example:
        If C depends on B, and B depends on A:
        order_packages({A, B, C}).order → [A, B, C]
    """
    priority = priority or {}
    dependents = build_graph(packages)

    # Count incoming edges (distinct internal dependencies) for each package
    in_degree = {name: 0 for name in packages}
    for targets in dependents.values():
        for dependent in targets:
            in_degree[dependent] += 1

    # Start with packages that have no dependencies
    ready = [sort_key(n, priority) for n, d in in_degree.items() if d == 0]
    heapq.heapify(ready)
    order: list[str] = []

    while ready:
        _, node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            # When a package has all deps placed, it becomes ready
            if in_degree[dependent] == 0:
                heapq.heappush(ready, sort_key(dependent, priority))

    # If we didn't place every package, there must be a cycle
    if len(order) != len(packages):
        placed = set(order)
        cycle = sorted(n for n in packages if n not in placed)
        fallback = sorted(packages, key=lambda n: sort_key(n, priority))
        return OrderingResult(order=fallback, degraded=True, cycle=cycle)

    return OrderingResult(order=order)
