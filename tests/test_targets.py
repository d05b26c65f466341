"""Tests for ordered_publish.targets."""

from __future__ import annotations

from pathlib import Path

import pytest

from ordered_publish.errors import ResolutionError
from ordered_publish.models import Package
from ordered_publish.targets import (
    dependency_closure,
    resolve_targets,
    unknown_packages,
)


def _names(packages: list[Package]) -> list[str]:
    return [p.name for p in packages]


@pytest.fixture
def ordered(abc_packages: dict[str, Package]) -> list[Package]:
    return [abc_packages["pkg-a"], abc_packages["pkg-b"], abc_packages["pkg-c"]]


@pytest.fixture
def diamond(tmp_path: Path) -> list[Package]:
    """bottom ← left/right ← top, plus an unrelated package."""
    layout = {
        "bottom": (),
        "left": ("bottom",),
        "right": ("bottom",),
        "solo": (),
        "top": ("left", "right"),
    }
    return [
        Package(name=n, version="1.0.0", path=tmp_path / n, deps=d)
        for n, d in layout.items()
    ]


class TestUnknownPackages:
    def test_lists_every_missing_name_sorted(
        self, abc_packages: dict[str, Package]
    ) -> None:
        assert unknown_packages(abc_packages, ["zzz", "pkg-a", "nope"]) == [
            "nope",
            "zzz",
        ]

    def test_empty_when_all_known(self, abc_packages: dict[str, Package]) -> None:
        assert unknown_packages(abc_packages, ["pkg-a", "pkg-c"]) == []


class TestDependencyClosure:
    def test_includes_seeds_and_transitive_deps(
        self, abc_packages: dict[str, Package]
    ) -> None:
        assert dependency_closure(abc_packages, ["pkg-c"]) == {
            "pkg-a",
            "pkg-b",
            "pkg-c",
        }

    def test_leaf_seed(self, abc_packages: dict[str, Package]) -> None:
        assert dependency_closure(abc_packages, ["pkg-a"]) == {"pkg-a"}

    def test_unknown_seed_does_not_break_traversal(
        self, abc_packages: dict[str, Package]
    ) -> None:
        closure = dependency_closure(abc_packages, ["ghost", "pkg-b"])
        assert {"pkg-a", "pkg-b"} <= closure


class TestResolveTargets:
    def test_no_filters_returns_everything(self, ordered: list[Package]) -> None:
        assert _names(resolve_targets(ordered)) == ["pkg-a", "pkg-b", "pkg-c"]

    def test_only_pulls_in_dependencies(self, ordered: list[Package]) -> None:
        assert _names(resolve_targets(ordered, {"pkg-c"})) == [
            "pkg-a",
            "pkg-b",
            "pkg-c",
        ]

    def test_only_does_not_pull_in_dependents(self, ordered: list[Package]) -> None:
        assert _names(resolve_targets(ordered, {"pkg-b"})) == ["pkg-a", "pkg-b"]

    def test_exclude_drops_required_dependency(self, ordered: list[Package]) -> None:
        """Non-strict resolution silently omits an excluded dependency."""
        result = resolve_targets(ordered, {"pkg-c"}, {"pkg-a"})
        assert _names(result) == ["pkg-b", "pkg-c"]

    def test_exclude_wins_over_only(self, ordered: list[Package]) -> None:
        assert _names(resolve_targets(ordered, {"pkg-c"}, {"pkg-c"})) == [
            "pkg-a",
            "pkg-b",
        ]

    def test_unknown_exclude_ignored(self, ordered: list[Package]) -> None:
        result = resolve_targets(ordered, (), {"does-not-exist"})
        assert _names(result) == ["pkg-a", "pkg-b", "pkg-c"]

    def test_can_resolve_to_nothing(self, ordered: list[Package]) -> None:
        assert resolve_targets(ordered, {"pkg-a"}, {"pkg-a"}) == []

    def test_preserves_given_order(self, diamond: list[Package]) -> None:
        result = resolve_targets(diamond, {"top"})
        assert _names(result) == ["bottom", "left", "right", "top"]

    def test_closure_excludes_unrelated(self, diamond: list[Package]) -> None:
        result = resolve_targets(diamond, {"left", "solo"})
        assert _names(result) == ["bottom", "left", "solo"]


class TestStrictExclude:
    def test_raises_when_excluded_package_is_required(
        self, ordered: list[Package]
    ) -> None:
        with pytest.raises(ResolutionError, match="pkg-b → pkg-a"):
            resolve_targets(ordered, {"pkg-c"}, {"pkg-a"}, strict=True)

    def test_applies_without_only(self, ordered: list[Package]) -> None:
        with pytest.raises(ResolutionError, match="pkg-c → pkg-b"):
            resolve_targets(ordered, (), {"pkg-b"}, strict=True)

    def test_allows_excluding_leaf_dependents(self, ordered: list[Package]) -> None:
        result = resolve_targets(ordered, (), {"pkg-c"}, strict=True)
        assert _names(result) == ["pkg-a", "pkg-b"]

    def test_lists_every_violation(self, diamond: list[Package]) -> None:
        with pytest.raises(ResolutionError) as excinfo:
            resolve_targets(diamond, {"top"}, {"bottom"}, strict=True)
        message = str(excinfo.value)
        assert "left → bottom" in message
        assert "right → bottom" in message
