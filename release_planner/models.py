"""Data models for release-planner.

These Pydantic models represent the core data structures shared by the
planning job, the release job and the pull request changeset check.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BumpKind = Literal["patch", "minor", "major"]

# A front-matter line starting with a double-quoted package name, a colon,
# then the bump kind. Single-quoted or unquoted keys are not recognised.
_BUMP_INTENT = re.compile(r'^\s*"([^"]+)"\s*:\s*(patch|minor|major)\b')


class ChangeDescriptor(BaseModel):
    """One pending changeset file from the .changeset directory.

    Attributes:
        filename: File name, unique within the changeset directory.
        content: Raw text: a front-matter block of bump intents followed
                 by a free-text summary.
    """

    filename: str
    content: str

    @property
    def bump_intents(self) -> dict[str, BumpKind]:
        """Map of package name → bump kind declared in this descriptor."""
        intents: dict[str, BumpKind] = {}
        for line in self.content.splitlines():
            match = _BUMP_INTENT.search(line)
            if match:
                intents[match.group(1)] = match.group(2)  # type: ignore[assignment]
        return intents


class PackageInfo(BaseModel):
    """Metadata for a single package in the monorepo workspace.

    Attributes:
        package_name: Full package name, possibly scoped (e.g. "@scope/name").
        dir_name: Last segment of the name; the directory under packages/.
        version: Current version string from the package's package.json.
    """

    package_name: str
    dir_name: str
    version: str


class MaintenancePlanEntry(BaseModel):
    """One row of the persisted maintenance-branch plan.

    Field aliases match the JSON plan file consumed by the release job.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    dir_name: str = Field(alias="dirName")
    major_version: int = Field(alias="majorVersion")
    branch_name: str = Field(alias="branchName")


class ReleaseContext(BaseModel):
    """Branch/mode context for a single release job invocation."""

    model_config = ConfigDict(frozen=True)

    branch_name: str
    is_main_branch: bool
    is_release_branch: bool
    is_multi_release: bool

    @property
    def is_other_branch(self) -> bool:
        return not (self.is_main_branch or self.is_release_branch)


class PublishStep(BaseModel):
    """Invoke the external publish command."""

    kind: Literal["publish"] = "publish"


class EnsureBranchStep(BaseModel):
    """Create and push a maintenance branch unless it already exists remotely."""

    kind: Literal["ensure-branch"] = "ensure-branch"
    branch_name: str
    from_ref: str = "HEAD~1"


class WarnStep(BaseModel):
    """Print a warning; has no side effects."""

    kind: Literal["warn"] = "warn"
    message: str


ReleaseStep = PublishStep | EnsureBranchStep | WarnStep


class ReleaseResult(BaseModel):
    """Outcome of a release job run.

    Attributes:
        status: "published" when the publish command ran, "skipped" when the
                run decided there was nothing to release.
        reason: Human-readable explanation of the decision taken.
        steps: Kinds of the steps that were executed, in order.
    """

    status: Literal["published", "skipped"]
    reason: str
    steps: list[str] = Field(default_factory=list)
