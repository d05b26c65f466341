"""Data models for ordered-publish.

These Pydantic models represent the core data structures used throughout
the publish pipeline. All of them are frozen: a run builds them once and
only ever derives new values from them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Package(BaseModel):
    """Metadata for a single publishable package in the workspace.

    Attributes:
        name: Package name from package.json, unique within the workspace.
        version: Version string from package.json. Never interpreted.
        path: Absolute path to the package directory.
        deps: Internal (workspace) dependency names. External deps are
              dropped when the manifest is read.
        build_script: The manifest's ``scripts.build`` entry, or None when
              the package has no build step.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    path: Path
    deps: tuple[str, ...] = ()
    build_script: str | None = None

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"


class WorkspacePatterns(BaseModel):
    """Manifest globs from the root ``workspaces`` declaration."""

    model_config = ConfigDict(frozen=True)

    include: list[str]
    exclude: list[str] = Field(default_factory=list)


class OrderingResult(BaseModel):
    """Outcome of topologically sorting the workspace.

    Attributes:
        order: Package names, dependencies before dependents.
        degraded: True when a cycle made a topological order impossible and
                  ``order`` is only the tie-break sort of every package.
        cycle: Names Kahn's algorithm could not place. Empty unless degraded.
    """

    model_config = ConfigDict(frozen=True)

    order: list[str]
    degraded: bool = False
    cycle: list[str] = Field(default_factory=list)


class RunOptions(BaseModel):
    """Immutable snapshot of the command-line options for one invocation."""

    model_config = ConfigDict(frozen=True)

    tag: str
    publish: bool = False
    yes: bool = False
    dry_run: bool = True
    skip_build: bool = False
    tolerate_republish: bool = False
    allow_dirty: bool = False
    run_scripts: bool = False
    registry: str | None = None
    access: str | None = None
    otp: str | None = None
    only: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()
    strict_exclude: bool = False
    fail_on_cycle: bool = False


class RunState(BaseModel):
    """Progress of the pipeline, threaded through it by return value.

    Attributes:
        published: Names of packages whose build and publish steps succeeded,
                   in the order they ran.
        failed: Name of the package whose step failed, if any.
        failed_step: "build" or "publish" when ``failed`` is set.
        exit_code: Exit code of the failing subprocess, 0 otherwise.
    """

    model_config = ConfigDict(frozen=True)

    published: tuple[str, ...] = ()
    failed: str | None = None
    failed_step: str | None = None
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        return self.failed is None

    def record_success(self, name: str) -> RunState:
        return self.model_copy(update={"published": (*self.published, name)})

    def record_failure(self, name: str, step: str, exit_code: int) -> RunState:
        return self.model_copy(
            update={"failed": name, "failed_step": step, "exit_code": exit_code}
        )
