"""Tests for release_planner.cli."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from release_planner.cli import cli

from .conftest import FakeRunner

DIFF = "git diff --name-only HEAD~1..HEAD"
RELEASE_DIFF = "packages/pkg-one/package.json"


class TestVersion:
    @patch("release_planner.cli.Shell")
    def test_writes_plan_and_versions(self, mock_shell: MagicMock, monorepo: Path) -> None:
        fake = FakeRunner()
        mock_shell.return_value = fake

        result = CliRunner().invoke(cli, ["version", "--base-dir", str(monorepo)], env={})

        assert result.exit_code == 0, result.output
        plan = json.loads(
            (monorepo / ".release-meta" / "maintenance-branches.json").read_text()
        )
        assert plan["@scope/pkg-two"]["branchName"] == "release/pkg-two_v4"
        assert fake.commands == ["pnpm changeset version"]

    @patch("release_planner.cli.Shell")
    def test_version_failure_exits_nonzero(
        self, mock_shell: MagicMock, tmp_path: Path
    ) -> None:
        mock_shell.return_value = FakeRunner(failures=["pnpm changeset version"])

        result = CliRunner().invoke(cli, ["version", "--base-dir", str(tmp_path)], env={})

        assert result.exit_code == 1
        assert "ERROR:" in result.output


class TestRelease:
    @patch("release_planner.cli.Shell")
    def test_feature_branch_skipped(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        fake = FakeRunner()
        mock_shell.return_value = fake

        result = CliRunner().invoke(
            cli,
            ["release", "--base-dir", str(tmp_path)],
            env={"GITHUB_REF_NAME": "feature/x", "ENABLE_MULTI_RELEASE": "true"},
        )

        assert result.exit_code == 0, result.output
        assert "Nothing released" in result.output
        assert fake.calls == []

    @patch("release_planner.cli.Shell")
    def test_options_override_environment(
        self, mock_shell: MagicMock, tmp_path: Path
    ) -> None:
        fake = FakeRunner(outputs={DIFF: RELEASE_DIFF})
        mock_shell.return_value = fake

        result = CliRunner().invoke(
            cli,
            ["release", "--base-dir", str(tmp_path), "--branch", "main", "--single-release"],
            env={"GITHUB_REF_NAME": "feature/x", "ENABLE_MULTI_RELEASE": "true"},
        )

        assert result.exit_code == 0, result.output
        assert fake.commands == [DIFF, "pnpm changeset publish"]

    @patch("release_planner.cli.Shell")
    def test_publish_failure_exits_nonzero(
        self, mock_shell: MagicMock, tmp_path: Path
    ) -> None:
        mock_shell.return_value = FakeRunner(
            outputs={DIFF: RELEASE_DIFF}, failures=["pnpm changeset publish"]
        )

        result = CliRunner().invoke(
            cli,
            ["release", "--base-dir", str(tmp_path)],
            env={"GITHUB_REF_NAME": "main", "ENABLE_MULTI_RELEASE": "false"},
        )

        assert result.exit_code == 1
        assert "ERROR: Command failed" in result.output


class TestCheckChangeset:
    def _event(self, tmp_path: Path, **pr: object) -> dict[str, str]:
        pull_request = {
            "title": "Add feature",
            "body": "",
            "labels": [],
            "base": {"ref": "main", "sha": "abc"},
            "head": {"ref": "feature", "sha": "def"},
        }
        pull_request.update(pr)
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"pull_request": pull_request}))
        return {
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_ACTOR": "octocat",
            "GITHUB_EVENT_PATH": str(event_file),
            "GITHUB_OUTPUT": str(tmp_path / "output.txt"),
        }

    @patch("release_planner.cli.Shell")
    def test_changeset_found(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        mock_shell.return_value = FakeRunner(outputs={"git diff": ".changeset/a.md\nsrc/x.ts"})

        result = CliRunner().invoke(cli, ["check-changeset"], env=self._event(tmp_path))

        assert result.exit_code == 0, result.output
        assert (tmp_path / "output.txt").read_text() == "changeset-files=.changeset/a.md\n"

    @patch("release_planner.cli.Shell")
    def test_changeset_missing(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        mock_shell.return_value = FakeRunner(outputs={"git diff": "src/x.ts"})

        result = CliRunner().invoke(cli, ["check-changeset"], env=self._event(tmp_path))

        assert result.exit_code == 1
        assert "::error::No changeset found for this PR" in result.output

    @patch("release_planner.cli.Shell")
    def test_skip_marker_option(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        fake = FakeRunner()
        mock_shell.return_value = fake

        result = CliRunner().invoke(
            cli,
            ["check-changeset", "--skip-marker", "[no-cs]"],
            env=self._event(tmp_path, title="Tidy CI [no-cs]"),
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "output.txt").read_text() == "skipped=true\n"
        assert fake.calls == []

    @patch("release_planner.cli.Shell")
    def test_git_error_fails_step(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        mock_shell.return_value = FakeRunner(failures=["git"])

        result = CliRunner().invoke(cli, ["check-changeset"], env=self._event(tmp_path))

        assert result.exit_code == 1
        assert "::error::Failed to fetch origin/main" in result.output
