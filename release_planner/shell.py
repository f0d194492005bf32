"""Shell utilities.

Provides a small wrapper around subprocess for running the external commands
the release automation depends on (git, pnpm, changesets), plus output
formatting helpers.

Two modes are supported:
- run(): streams output to the terminal. Used for side-effecting commands
  (branch creation, push, publish); a failure is fatal to the pipeline.
- capture(): captures stdout as text. Used for read-only inspection commands
  (diff, ls-remote) where the caller may legitimately continue after a failure.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from typing import Protocol


class CommandError(Exception):
    """Raised when an external command exits non-zero.

    Attributes:
        command: The argv that was executed.
        returncode: Exit status of the process.
        stderr: Captured stderr (empty for streamed commands).
        fatal: True when raised by a side-effecting (streamed) command. Callers
               must let fatal errors propagate to the process boundary.
    """

    def __init__(
        self,
        command: tuple[str, ...],
        returncode: int,
        stderr: str = "",
        *,
        fatal: bool,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        self.fatal = fatal
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(
            f"Command failed ({returncode}): {shlex.join(command)}{detail}"
        )


class CommandRunner(Protocol):
    """Capability for executing external commands."""

    def run(self, *args: str) -> None:
        """Run a side-effecting command, streaming output. Raises on failure."""
        ...

    def capture(self, *args: str) -> str:
        """Run a read-only command and return its stripped stdout."""
        ...


class Shell:
    """Production CommandRunner backed by subprocess."""

    def run(self, *args: str) -> None:
        """Run a command, streaming its output to the terminal.

        Raises:
            CommandError: With fatal=True if the command exits non-zero.
        """
        print(f"> {shlex.join(args)}")
        result = subprocess.run(args, check=False)
        if result.returncode != 0:
            print(f"  Command failed: {shlex.join(args)}", file=sys.stderr)
            raise CommandError(args, result.returncode, fatal=True)

    def capture(self, *args: str) -> str:
        """Run a command and return its stripped stdout.

        Raises:
            CommandError: With fatal=False if the command exits non-zero, so
                the caller can fall back or treat it as "nothing found".
        """
        print(f"> {shlex.join(args)}")
        result = subprocess.run(args, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            raise CommandError(args, result.returncode, result.stderr, fatal=False)
        return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the release pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print an indented warning line."""
    print(f"  Warning: {msg}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Only the CLI calls this; everything below it raises instead.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
