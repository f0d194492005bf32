"""GitHub Actions helpers: event loading, step outputs, annotations."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any


def load_event(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load the workflow event context.

    Returns a dict with "event_name", "actor" and "payload" keys. The payload
    is read from GITHUB_EVENT_PATH and is empty when the file is missing.
    """
    env = os.environ if environ is None else environ
    payload: dict[str, Any] = {}
    event_path = env.get("GITHUB_EVENT_PATH")
    if event_path and Path(event_path).is_file():
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    return {
        "event_name": env.get("GITHUB_EVENT_NAME", ""),
        "actor": env.get("GITHUB_ACTOR", ""),
        "payload": payload,
    }


def write_output(key: str, value: str, environ: Mapping[str, str] | None = None) -> None:
    """Append a key-value pair to GITHUB_OUTPUT.

    Multiline values use heredoc syntax. Outside of Actions the value is
    printed instead.
    """
    env = os.environ if environ is None else environ
    output_file = env.get("GITHUB_OUTPUT")
    if not output_file:
        print(f"  GITHUB_OUTPUT not set, would output: {key}={value}")
        return
    with open(output_file, "a", encoding="utf-8") as fh:
        if "\n" in value:
            fh.write(f"{key}<<EOF\n{value}\nEOF\n")
        else:
            fh.write(f"{key}={value}\n")


def set_failed(message: str) -> None:
    """Emit an error annotation for the current step."""
    # Workflow commands are single-line; newlines must be percent-encoded.
    encoded = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{encoded}")
