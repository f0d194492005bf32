"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_planner.shell import CommandError


class FakeRunner:
    """In-memory CommandRunner that records every command.

    Outputs and failures are keyed by command prefix (the argv joined with
    spaces); the first matching prefix wins. Unmatched commands succeed with
    empty output.
    """

    def __init__(
        self,
        outputs: dict[str, str] | None = None,
        failures: list[str] | None = None,
    ) -> None:
        self.outputs = dict(outputs or {})
        self.failures = list(failures or [])
        self.calls: list[tuple[str, ...]] = []

    @property
    def commands(self) -> list[str]:
        return [" ".join(call) for call in self.calls]

    def _respond(self, args: tuple[str, ...], *, fatal: bool) -> str:
        self.calls.append(args)
        command = " ".join(args)
        for prefix in self.failures:
            if command.startswith(prefix):
                raise CommandError(args, 1, "simulated failure", fatal=fatal)
        for prefix, output in self.outputs.items():
            if command.startswith(prefix):
                return output
        return ""

    def run(self, *args: str) -> None:
        self._respond(args, fatal=True)

    def capture(self, *args: str) -> str:
        return self._respond(args, fatal=False)


def write_package(root: Path, name: str, version: str) -> Path:
    """Create packages/<dir>/package.json for a (possibly scoped) name."""
    package_dir = root / "packages" / name.split("/")[-1]
    package_dir.mkdir(parents=True, exist_ok=True)
    manifest = package_dir / "package.json"
    manifest.write_text(json.dumps({"name": name, "version": version}))
    return manifest


def write_changeset(root: Path, filename: str, content: str) -> Path:
    """Create a file in .changeset/."""
    changeset_dir = root / ".changeset"
    changeset_dir.mkdir(parents=True, exist_ok=True)
    path = changeset_dir / filename
    path.write_text(content)
    return path


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """A workspace with two packages, each with one pending major changeset."""
    write_package(tmp_path, "@scope/pkg-one", "1.2.3")
    write_package(tmp_path, "@scope/pkg-two", "4.5.6")
    write_changeset(
        tmp_path,
        "brave-cats-dance.md",
        '---\n"@scope/pkg-one": major\n---\n\nDrop legacy API\n',
    )
    write_changeset(
        tmp_path,
        "quiet-dogs-sing.md",
        '---\n"@scope/pkg-two": major\n---\n\nRename exports\n',
    )
    write_changeset(tmp_path, "README.md", '"@scope/ignored": major\n')
    return tmp_path
