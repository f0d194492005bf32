"""Changeset and workspace package lookups.

Reads pending changeset descriptors from .changeset/ and resolves package
names to their directories and versions under packages/.
"""

from __future__ import annotations

import json
from pathlib import Path

from .config import CHANGESET_DIR, CHANGESET_README, PACKAGES_DIR
from .models import ChangeDescriptor, PackageInfo
from .shell import warn


def pending_descriptors(base_dir: Path) -> list[ChangeDescriptor]:
    """Load all pending changeset files.

    Only *.md files are considered, and the changeset README is skipped.
    Files are returned sorted by name for deterministic processing.

    Returns:
        Descriptors in filename order, or an empty list when the
        changeset directory does not exist.
    """
    changeset_dir = base_dir / CHANGESET_DIR
    if not changeset_dir.is_dir():
        return []

    return [
        ChangeDescriptor(filename=path.name, content=path.read_text(encoding="utf-8"))
        for path in sorted(changeset_dir.glob("*.md"))
        if path.name != CHANGESET_README
    ]


def major_bump_packages(base_dir: Path) -> set[str]:
    """Collect every package declared with a major bump in a pending changeset.

    Only lines of the form `"<package>": major` count. Single-quoted or
    unquoted keys are ignored; changesets always writes double quotes.
    """
    majors: set[str] = set()
    for descriptor in pending_descriptors(base_dir):
        for name, kind in descriptor.bump_intents.items():
            if kind == "major":
                majors.add(name)
    return majors


def package_dir_name(package_name: str) -> str:
    """Directory name for a package: the last segment of a scoped name.

    Examples:
        "@scope/pkg-one" → "pkg-one"
        "pkg-two" → "pkg-two"
    """
    return package_name.split("/")[-1]


def resolve_package(package_name: str, base_dir: Path) -> PackageInfo | None:
    """Resolve a package name to its on-disk directory and current version.

    Reads packages/<dir_name>/package.json.

    Returns:
        PackageInfo, or None when the manifest is missing, is not a JSON
        object, or has no string "version", so callers can skip one bad
        package without aborting the rest.
    """
    dir_name = package_dir_name(package_name)
    manifest = base_dir / PACKAGES_DIR / dir_name / "package.json"
    if not manifest.is_file():
        return None

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        warn(f"{manifest.relative_to(base_dir)} is not valid JSON: {exc}")
        return None

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version:
        warn(f"{manifest.relative_to(base_dir)} has no version")
        return None

    return PackageInfo(package_name=package_name, dir_name=dir_name, version=version)
