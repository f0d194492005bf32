"""Git facade.

Wraps the git plumbing the release automation needs: changed-file detection
with fallback strategies, remote branch checks, and maintenance branch
creation. All commands go through an injected CommandRunner so tests can
substitute a recording fake.
"""

from __future__ import annotations

from .shell import CommandError, CommandRunner


class GitError(Exception):
    """Raised when a git operation cannot be completed."""


def _split_lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class Git:
    """Git operations used by the release and changeset-check jobs."""

    def __init__(self, runner: CommandRunner, remote: str = "origin") -> None:
        self.runner = runner
        self.remote = remote

    def changed_files_since_last_commit(self) -> list[str]:
        """List files changed by the most recent commit.

        Tries HEAD~1..HEAD, then HEAD^..HEAD. A strategy that fails or yields
        nothing falls through to the next one.

        Returns:
            Changed paths in git's order, or an empty list when every strategy
            failed or found nothing. "No changed files" is a normal outcome.
        """
        for rev_range in ("HEAD~1..HEAD", "HEAD^..HEAD"):
            try:
                files = _split_lines(
                    self.runner.capture("git", "diff", "--name-only", rev_range)
                )
            except CommandError as exc:
                print(f"  {rev_range} failed: {exc}")
                continue
            if files:
                print(f"  Found {len(files)} changed files using {rev_range}")
                return files

        print("  Warning: no diff strategy found changed files")
        return []

    def changed_files_between_refs(
        self,
        base_ref: str,
        head_ref: str,
        base_sha: str,
        head_sha: str,
    ) -> list[str]:
        """List files changed between a pull request's base and head.

        Strategies, in order (each skipped when its inputs are missing):
        1. origin/<base>...origin/<head>  (remote branches, merge-base relative)
        2. <base_sha>...<head_sha>        (SHAs, merge-base relative)
        3. <base_sha>..<head_sha>         (SHAs, literal range)
        4. origin/<base>..HEAD            (base branch to checked-out HEAD)

        Returns:
            The first non-empty result. An empty list when at least one
            strategy ran successfully but none found changes.

        Raises:
            GitError: If every strategy failed.
        """
        strategies: list[str] = []
        if base_ref and head_ref:
            strategies.append(f"{self.remote}/{base_ref}...{self.remote}/{head_ref}")
        if base_sha and head_sha:
            strategies.append(f"{base_sha}...{head_sha}")
            strategies.append(f"{base_sha}..{head_sha}")
        if base_ref:
            strategies.append(f"{self.remote}/{base_ref}..HEAD")

        errors: list[str] = []
        for rev_range in strategies:
            try:
                files = _split_lines(
                    self.runner.capture("git", "diff", "--name-only", rev_range)
                )
            except CommandError as exc:
                print(f"  {rev_range} failed: {exc}")
                errors.append(str(exc))
                continue
            if files:
                print(f"  Found {len(files)} changed files using {rev_range}")
                return files

        if len(errors) == len(strategies):
            raise GitError(
                f"Could not determine changed files between {base_ref or base_sha} "
                f"and {head_ref or head_sha}: every diff strategy failed"
            )
        return []

    def remote_branch_exists(self, name: str) -> bool:
        """Check whether refs/heads/<name> exists on the remote."""
        output = self.runner.capture("git", "ls-remote", "--heads", self.remote, name)
        return output.strip() != ""

    def create_branch(self, name: str, from_ref: str = "HEAD~1") -> None:
        """Create a local branch at from_ref. Does not check for existence."""
        self.runner.run("git", "branch", name, from_ref)

    def push_branch(self, name: str) -> None:
        """Push a local branch to the remote."""
        self.runner.run("git", "push", self.remote, name)

    def fetch_branch(self, ref: str) -> None:
        """Fetch a ref from the remote so it can be resolved locally.

        Raises:
            GitError: If the fetch fails.
        """
        try:
            self.runner.capture("git", "fetch", self.remote, ref)
        except CommandError as exc:
            raise GitError(f"Failed to fetch {self.remote}/{ref}: {exc}") from exc
