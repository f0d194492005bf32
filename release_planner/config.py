"""Configuration for release-planner.

All environment and working-directory reads happen once, at the process
boundary, and are captured in a ReleaseConfig that is passed to every
entry point.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

CHANGESET_DIR = ".changeset"
CHANGESET_README = "README.md"
PACKAGES_DIR = "packages"
PLAN_FILE = Path(".release-meta") / "maintenance-branches.json"
MAIN_BRANCH = "main"
RELEASE_BRANCH_PREFIX = "release/"
DEFAULT_SKIP_MARKER = "[skip changeset check]"
DEFAULT_PUBLISH_COMMAND = ("pnpm", "changeset", "publish")
DEFAULT_VERSION_COMMAND = ("pnpm", "changeset", "version")


class ReleaseConfig(BaseModel):
    """Settings for a single pipeline invocation.

    Attributes:
        base_dir: Repository root containing .changeset/ and packages/.
        branch_name: Current git ref name (GITHUB_REF_NAME).
        multi_release: Whether major bumps fan out into maintenance branches.
        skip_marker: Text that exempts a PR from the changeset requirement.
        publish_command: argv for the external publish tool.
        version_command: argv for the external version tool.
    """

    model_config = ConfigDict(frozen=True)

    base_dir: Path = Field(default_factory=Path.cwd)
    branch_name: str = ""
    multi_release: bool = False
    skip_marker: str = DEFAULT_SKIP_MARKER
    publish_command: tuple[str, ...] = DEFAULT_PUBLISH_COMMAND
    version_command: tuple[str, ...] = DEFAULT_VERSION_COMMAND

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base_dir: Path | None = None,
    ) -> ReleaseConfig:
        """Build a config from environment variables.

        Recognised variables:
        - GITHUB_REF_NAME: current branch.
        - ENABLE_MULTI_RELEASE: exactly "true" enables multi-release mode.
        - INPUT_SKIP-LABEL / SKIP_CHANGESET_MARKER: skip marker override.
        - RELEASE_PUBLISH_COMMAND / RELEASE_VERSION_COMMAND: command overrides,
          split shell-style.
        """
        env = os.environ if environ is None else environ
        skip_marker = (
            env.get("INPUT_SKIP-LABEL")
            or env.get("SKIP_CHANGESET_MARKER")
            or DEFAULT_SKIP_MARKER
        )
        publish = env.get("RELEASE_PUBLISH_COMMAND")
        version = env.get("RELEASE_VERSION_COMMAND")
        return cls(
            base_dir=base_dir if base_dir is not None else Path.cwd(),
            branch_name=env.get("GITHUB_REF_NAME", ""),
            multi_release=env.get("ENABLE_MULTI_RELEASE") == "true",
            skip_marker=skip_marker,
            publish_command=tuple(shlex.split(publish))
            if publish
            else DEFAULT_PUBLISH_COMMAND,
            version_command=tuple(shlex.split(version))
            if version
            else DEFAULT_VERSION_COMMAND,
        )
