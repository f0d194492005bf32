"""Release job: decide whether to publish, fan out maintenance branches, publish.

Decision order for each run (first match wins):
1. Multi-release mode on a branch that is neither main nor release/* →
   skip without touching git.
2. The latest commit did not change a package.json or CHANGELOG.md →
   not a release event, skip.
3. Single-release mode, or a release/* branch → publish only.
4. Multi-release mode on main → ensure every planned maintenance branch
   exists, then publish.

Publish runs at most once per invocation and is never retried: publishing
the same version twice is worse than a failed pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from .config import MAIN_BRANCH, PLAN_FILE, RELEASE_BRANCH_PREFIX, ReleaseConfig
from .git import Git
from .models import (
    EnsureBranchStep,
    PublishStep,
    ReleaseContext,
    ReleaseResult,
    ReleaseStep,
    WarnStep,
)
from .planner import load_plan
from .shell import CommandRunner, step, warn

RELEASE_FILE_SUFFIXES = ("package.json", "CHANGELOG.md")


def get_release_context(config: ReleaseConfig) -> ReleaseContext:
    """Classify the current branch and mode."""
    branch = config.branch_name
    return ReleaseContext(
        branch_name=branch,
        is_main_branch=branch == MAIN_BRANCH,
        is_release_branch=branch.startswith(RELEASE_BRANCH_PREFIX),
        is_multi_release=config.multi_release,
    )


def is_release_event(changed_files: Iterable[str]) -> bool:
    """Whether a commit's changed files look like an applied version bump.

    Any changed manifest or changelog counts, so an ordinary dependency bump
    that touches package.json is also treated as a release event.
    """
    return any(path.endswith(RELEASE_FILE_SUFFIXES) for path in changed_files)


def plan_release_steps(ctx: ReleaseContext, base_dir: Path) -> list[ReleaseStep]:
    """Build the ordered list of steps for a run that is a release event.

    The maintenance plan file is only consulted in multi-release mode on
    main. Every returned list ends with exactly one PublishStep.
    """
    if not (ctx.is_multi_release and ctx.is_main_branch):
        return [PublishStep()]

    steps: list[ReleaseStep] = []
    if not (base_dir / PLAN_FILE).is_file():
        steps.append(
            WarnStep(
                message=f"no maintenance plan at {PLAN_FILE}; "
                "publishing without maintenance branches"
            )
        )

    plan = load_plan(base_dir)
    if not plan:
        print("  No maintenance branches planned")

    steps += [
        EnsureBranchStep(branch_name=entry.branch_name)
        for entry in plan.values()
    ]
    steps.append(PublishStep())
    return steps


def ensure_maintenance_branch(git: Git, branch_name: str, from_ref: str) -> bool:
    """Create and push a maintenance branch unless it already exists remotely.

    Existence is always checked against the remote so re-running a release
    job never recreates or force-pushes an existing branch.

    Returns:
        True if the branch was created, False if it already existed.
    """
    print(f"  Checking for branch '{branch_name}'")
    if git.remote_branch_exists(branch_name):
        print(f"  Branch '{branch_name}' already exists")
        return False

    print(f"  Creating '{branch_name}' from {from_ref}")
    git.create_branch(branch_name, from_ref)
    git.push_branch(branch_name)
    print(f"  ✓ Created and pushed '{branch_name}'")
    return True


def execute_steps(
    steps: Sequence[ReleaseStep],
    git: Git,
    runner: CommandRunner,
    publish_command: Sequence[str],
) -> list[str]:
    """Run release steps in order.

    Any command failure propagates immediately; later steps (including
    publish) do not run.

    Returns:
        Kinds of the executed steps.
    """
    executed: list[str] = []
    for item in steps:
        if isinstance(item, WarnStep):
            warn(item.message)
        elif isinstance(item, EnsureBranchStep):
            ensure_maintenance_branch(git, item.branch_name, item.from_ref)
        elif isinstance(item, PublishStep):
            step("Publishing packages")
            runner.run(*publish_command)
        else:
            raise TypeError(f"Unknown release step: {item!r}")
        executed.append(item.kind)
    return executed


def run_release(config: ReleaseConfig, runner: CommandRunner) -> ReleaseResult:
    """Execute the release job.

    Returns:
        ReleaseResult describing whether anything was published.

    Raises:
        CommandError: If branch creation, push or publish fails.
        PlanError: If the plan file exists but is malformed.
    """
    step("Starting release")

    ctx = get_release_context(config)
    print(f"  Branch: {ctx.branch_name or '<unknown>'}")
    print(f"  Multi-release mode: {ctx.is_multi_release}")

    if ctx.is_multi_release and ctx.is_other_branch:
        reason = (
            f"branch '{ctx.branch_name}' is neither {MAIN_BRANCH} nor "
            f"{RELEASE_BRANCH_PREFIX}*; nothing to release in multi-release mode"
        )
        print(f"  Skipping: {reason}")
        return ReleaseResult(status="skipped", reason=reason)

    git = Git(runner)

    step("Checking latest commit for version changes")
    changed = git.changed_files_since_last_commit()
    if not is_release_event(changed):
        reason = "latest commit did not change any package.json or CHANGELOG.md"
        print(f"  Skipping: {reason}")
        return ReleaseResult(status="skipped", reason=reason)
    print("  Version changes detected, proceeding with release")

    steps = plan_release_steps(ctx, config.base_dir)
    print(f"  Planned steps: {', '.join(s.kind for s in steps)}")

    executed = execute_steps(steps, git, runner, config.publish_command)

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return ReleaseResult(
        status="published", reason="release event published", steps=executed
    )
