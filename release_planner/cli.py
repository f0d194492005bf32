"""CLI entry point for release-planner."""

from __future__ import annotations

from pathlib import Path

import click

from release_planner.config import ReleaseConfig
from release_planner.gate import PullRequestContext, evaluate, missing_changeset_message
from release_planner.git import Git, GitError
from release_planner.github import load_event, set_failed, write_output
from release_planner.planner import PlanError, run_version
from release_planner.release import run_release
from release_planner.shell import CommandError, Shell, fatal, step


def _load_config(base_dir: str | None, **overrides: object) -> ReleaseConfig:
    config = ReleaseConfig.from_env(base_dir=Path(base_dir) if base_dir else None)
    updates = {k: v for k, v in overrides.items() if v is not None}
    return config.model_copy(update=updates) if updates else config


@click.group()
@click.version_option(package_name="release-planner")
def cli() -> None:
    """Changeset-driven release automation for pnpm monorepos."""


@cli.command()
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Repository root. Defaults to the current directory.",
)
def version(base_dir: str | None) -> None:
    """Plan maintenance branches, then run the version tool."""
    config = _load_config(base_dir)
    try:
        run_version(config, Shell())
    except CommandError as exc:
        fatal(str(exc))
    click.echo("✓ Version job completed")


@cli.command()
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Repository root. Defaults to the current directory.",
)
@click.option("--branch", default=None, help="Override GITHUB_REF_NAME.")
@click.option(
    "--multi-release/--single-release",
    default=None,
    help="Override ENABLE_MULTI_RELEASE.",
)
def release(
    base_dir: str | None, branch: str | None, multi_release: bool | None
) -> None:
    """Publish packages, creating maintenance branches when planned."""
    config = _load_config(base_dir, branch_name=branch, multi_release=multi_release)
    try:
        result = run_release(config, Shell())
    except (CommandError, GitError, PlanError) as exc:
        fatal(str(exc))
        return
    if result.status == "skipped":
        click.echo(f"Nothing released: {result.reason}")


@cli.command("check-changeset")
@click.option(
    "--skip-marker",
    default=None,
    help="Text that exempts a PR when found in its title, body or labels.",
)
@click.option(
    "--no-fetch",
    is_flag=True,
    help="Do not fetch base/head refs before diffing.",
)
@click.pass_context
def check_changeset(
    ctx: click.Context, skip_marker: str | None, no_fetch: bool
) -> None:
    """Verify that a pull request adds a changeset (usually called from CI)."""
    config = _load_config(None, skip_marker=skip_marker)
    pr = PullRequestContext.from_event(load_event())

    step("Checking for changeset")
    print(f"  Event: {pr.event_name}")
    print(f"  PR title: {pr.title or 'N/A'}")
    print(f"  Actor: {pr.actor}")

    result = evaluate(pr, Git(Shell()), config.skip_marker, fetch=not no_fetch)

    if result.error:
        set_failed(result.error)
        ctx.exit(1)
    if result.exempt:
        write_output("skipped", "true")
        return
    if not result.has_required_file:
        print(missing_changeset_message())
        set_failed("No changeset found for this PR")
        ctx.exit(1)

    print("\n✓ Changeset found:")
    for path in result.changeset_files:
        print(f"  {path}")
    write_output("changeset-files", ",".join(result.changeset_files))
