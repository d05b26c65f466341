"""Configuration file handling.

Reads the optional ``ordered-publish.toml`` at the workspace root with tomlkit
and validates it into a frozen PublishConfig. Every key is optional, so a
missing file simply yields the defaults.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError

CONFIG_FILENAME = "ordered-publish.toml"
DEFAULT_TAG = "alpha"


class PublishConfig(BaseModel):
    """Project-level settings for a publish run.

    Attributes:
        tag: Dist-tag used when --tag is not given.
        build_command: Command run in a package directory when its manifest
                       declares a build script.
        publish_command: Registry upload command; flags are appended to it.
        report: Results report path, relative to the workspace root.
        registry_url: Base URL used for package links in the report.
        fail_on_cycle: Abort instead of falling back to alphabetical order
                       when the dependency graph has a cycle.
        priority: Tie-break sort keys for distinguished packages. Lower
                  values sort first; unlisted packages share one default key.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    tag: str = DEFAULT_TAG
    build_command: list[str] = Field(
        default_factory=lambda: ["bun", "run", "build"],
        alias="build-command",
        min_length=1,
    )
    publish_command: list[str] = Field(
        default_factory=lambda: ["bun", "publish"],
        alias="publish-command",
        min_length=1,
    )
    report: str = "publish-report.html"
    registry_url: str = Field("https://www.npmjs.com", alias="registry-url")
    fail_on_cycle: bool = Field(False, alias="fail-on-cycle")
    priority: dict[str, int] = Field(default_factory=dict)


def load_config(path: Path) -> PublishConfig:
    """Load a PublishConfig from ``path``, or defaults if it does not exist.

    Raises:
        ConfigError: If the file is not valid TOML or a value has the
                     wrong type.
    """
    if not path.exists():
        return PublishConfig()

    try:
        data = tomlkit.parse(path.read_text()).unwrap()
    except TOMLKitError as exc:
        raise ConfigError(f"Invalid TOML in {path.name}: {exc}") from exc

    try:
        return PublishConfig.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid {path.name}: {problems}") from exc
