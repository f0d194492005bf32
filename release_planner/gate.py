"""Pull request changeset requirement check.

Decides whether a PR is exempt from needing a changeset and, if not,
verifies that one was added by diffing the PR's base and head.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field

from .git import Git

RELEASE_PR_TITLE_PREFIX = "Version Packages"
AUTOMATION_ACTORS = frozenset({"github-actions[bot]", "dependabot[bot]"})
AUTOMATION_BRANCH_PREFIXES = ("changeset-release/", "dependabot/")
CHANGESET_FILE = re.compile(r"^\.changeset/.*\.md$")


class PullRequestContext(BaseModel):
    """The subset of a GitHub event the changeset check looks at."""

    event_name: str
    actor: str = ""
    title: str = ""
    body: str = ""
    labels: list[str] = Field(default_factory=list)
    base_ref: str = "main"
    head_ref: str = ""
    base_sha: str = ""
    head_sha: str = ""

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> PullRequestContext:
        """Build a context from a loaded event (see github.load_event)."""
        pr = (event.get("payload") or {}).get("pull_request") or {}
        base = pr.get("base") or {}
        head = pr.get("head") or {}
        return cls(
            event_name=event.get("event_name", ""),
            actor=event.get("actor", ""),
            title=pr.get("title") or "",
            body=pr.get("body") or "",
            labels=[label.get("name", "") for label in pr.get("labels") or []],
            base_ref=base.get("ref") or "main",
            head_ref=head.get("ref") or "",
            base_sha=base.get("sha") or "",
            head_sha=head.get("sha") or "",
        )


class GateResult(BaseModel):
    """Outcome of the changeset check. Always produced, even on error."""

    exempt: bool = False
    exempt_reason: str | None = None
    has_required_file: bool = False
    changed_files: list[str] = Field(default_factory=list)
    changeset_files: list[str] = Field(default_factory=list)
    error: str | None = None


def exemption_reason(pr: PullRequestContext, skip_marker: str) -> str | None:
    """Why a PR does not need a changeset, or None if it does."""
    if pr.event_name != "pull_request":
        return "not a pull request"
    if pr.title.startswith(RELEASE_PR_TITLE_PREFIX):
        return "release PR"
    if pr.actor in AUTOMATION_ACTORS:
        return f"opened by {pr.actor}"
    if pr.head_ref.startswith(AUTOMATION_BRANCH_PREFIXES):
        return f"automation branch {pr.head_ref}"
    if skip_marker in pr.title or skip_marker in pr.body:
        return f"'{skip_marker}' found in PR title or body"
    if skip_marker in pr.labels:
        return f"'{skip_marker}' label applied"
    return None


def is_exempt(pr: PullRequestContext, skip_marker: str) -> bool:
    return exemption_reason(pr, skip_marker) is not None


def find_changeset_files(files: list[str]) -> list[str]:
    return [f for f in files if CHANGESET_FILE.match(f)]


def evaluate(
    pr: PullRequestContext,
    git: Git,
    skip_marker: str,
    *,
    fetch: bool = True,
) -> GateResult:
    """Run the changeset check for a pull request.

    Never raises: git failures are reported in GateResult.error so the
    workflow step can render a clear outcome.
    """
    result = GateResult()
    try:
        reason = exemption_reason(pr, skip_marker)
        if reason is not None:
            print(f"  Skipping changeset check: {reason}")
            result.exempt = True
            result.exempt_reason = reason
            return result

        if fetch:
            print("  Fetching branches")
            git.fetch_branch(pr.base_ref)
            if pr.head_ref:
                git.fetch_branch(pr.head_ref)

        base = pr.base_sha or pr.base_ref
        head = pr.head_sha or pr.head_ref
        print(f"  Comparing {base} (base) to {head} (head)")
        result.changed_files = git.changed_files_between_refs(
            pr.base_ref, pr.head_ref, pr.base_sha, pr.head_sha
        )
        for path in result.changed_files:
            print(f"    {path}")

        result.changeset_files = find_changeset_files(result.changed_files)
        result.has_required_file = bool(result.changeset_files)
    except Exception as exc:  # noqa: BLE001
        result.error = str(exc)
    return result


def missing_changeset_message() -> str:
    """Remediation text shown when a PR has no changeset."""
    return "\n".join(
        [
            "",
            "ERROR: No changeset found for this PR!",
            "",
            "This PR modifies code but doesn't include a changeset.",
            "Changesets are required to track version bumps and generate changelogs.",
            "",
            "To fix this:",
            "  1. Run: pnpm changeset",
            "  2. Follow the prompts to describe your changes",
            "  3. Commit the generated .changeset/*.md file",
            "",
            "Learn more: https://github.com/changesets/changesets",
            "",
        ]
    )
