"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from ordered_publish.models import Package, RunOptions


def _write_manifest(directory: Path, manifest: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(manifest, indent=2))
    return path


@pytest.fixture
def write_manifest() -> Callable[[Path, dict[str, Any]], Path]:
    """Write a package.json into a directory, creating it if needed."""
    return _write_manifest


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace where pkg-c → pkg-b → pkg-a, plus a private package.

    pkg-a has a build script, pkg-b also depends on an external package,
    and pkg-c reaches pkg-b through peerDependencies.
    """
    _write_manifest(
        tmp_path, {"name": "monorepo", "private": True, "workspaces": ["packages/*"]}
    )
    _write_manifest(
        tmp_path / "packages" / "a",
        {"name": "pkg-a", "version": "1.0.0", "scripts": {"build": "tsc"}},
    )
    _write_manifest(
        tmp_path / "packages" / "b",
        {
            "name": "pkg-b",
            "version": "1.1.0",
            "dependencies": {"pkg-a": "workspace:*", "left-pad": "^1.3.0"},
        },
    )
    _write_manifest(
        tmp_path / "packages" / "c",
        {"name": "pkg-c", "version": "2.0.0", "peerDependencies": {"pkg-b": "*"}},
    )
    _write_manifest(
        tmp_path / "packages" / "internal",
        {"name": "internal-tools", "version": "0.0.0", "private": True},
    )
    return tmp_path


@pytest.fixture
def abc_packages(tmp_path: Path) -> dict[str, Package]:
    """In-memory packages for the chain pkg-c → pkg-b → pkg-a."""
    return {
        "pkg-a": Package(
            name="pkg-a", version="1.0.0", path=tmp_path / "a", build_script="tsc"
        ),
        "pkg-b": Package(
            name="pkg-b", version="1.1.0", path=tmp_path / "b", deps=("pkg-a",)
        ),
        "pkg-c": Package(
            name="pkg-c", version="2.0.0", path=tmp_path / "c", deps=("pkg-b",)
        ),
    }


@pytest.fixture
def dry_run_options() -> RunOptions:
    """Options equivalent to running with no mode flags."""
    return RunOptions(tag="alpha")
