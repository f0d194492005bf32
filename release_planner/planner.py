"""Maintenance branch planning.

Runs in the pre-publish (version) job: finds packages with a pending major
bump, records which maintenance branch each one needs, and persists that plan
to .release-meta/maintenance-branches.json for the release job to consume.

The plan must be written before the version tool runs, because versioning
consumes (deletes) the changeset files the plan is derived from.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from .changesets import major_bump_packages, resolve_package
from .config import PLAN_FILE, ReleaseConfig
from .models import MaintenancePlanEntry
from .shell import CommandRunner, step, warn
from .versions import major_version

MaintenancePlan = dict[str, MaintenancePlanEntry]


class PlanError(Exception):
    """Raised when a persisted plan file exists but cannot be read."""


def branch_name_for(dir_name: str, major: int) -> str:
    """Maintenance branch name for a package's current major line.

    Example:
        branch_name_for("pkg-one", 2) → "release/pkg-one_v2"
    """
    return f"release/{dir_name}_v{major}"


def plan_maintenance_branches(
    packages: Iterable[str], base_dir: Path
) -> MaintenancePlan:
    """Compute a maintenance branch for each package with a major bump pending.

    The branch is named after the version *before* the bump, so it preserves
    the outgoing major line. Packages whose manifest cannot be found, or whose
    version cannot be parsed, are skipped with a warning.

    Args:
        packages: Names of packages with a pending major bump.
        base_dir: Repository root.

    Returns:
        Map of package name → MaintenancePlanEntry, ordered by package name.
    """
    plan: MaintenancePlan = {}
    for name in sorted(packages):
        info = resolve_package(name, base_dir)
        if info is None:
            warn(f"no usable package.json for {name}, skipping")
            continue
        try:
            major = major_version(info.version)
        except ValueError:
            warn(f"{name} has unparseable version {info.version!r}, skipping")
            continue

        entry = MaintenancePlanEntry(
            dir_name=info.dir_name,
            major_version=major,
            branch_name=branch_name_for(info.dir_name, major),
        )
        plan[name] = entry
        print(f"  {name} {info.version} → {entry.branch_name}")
    return plan


def dump_plan(plan: MaintenancePlan) -> str:
    """Serialize a plan to the JSON text stored on disk.

    Packages are sorted by name so identical inputs always produce
    byte-identical output.
    """
    data = {
        name: plan[name].model_dump(by_alias=True) for name in sorted(plan)
    }
    return json.dumps(data, indent=2) + "\n"


def persist_plan(plan: MaintenancePlan, base_dir: Path) -> Path:
    """Write the plan file, replacing any previous one.

    Returns:
        Path of the written plan file.
    """
    path = base_dir / PLAN_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_plan(plan), encoding="utf-8")
    print(f"  Plan written to {PLAN_FILE}")
    return path


def load_plan(base_dir: Path) -> MaintenancePlan:
    """Read a persisted plan.

    A missing or blank file is an empty plan.

    Raises:
        PlanError: If the file is not a JSON object of valid plan entries.
    """
    path = base_dir / PLAN_FILE
    if not path.is_file():
        return {}

    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanError(f"Invalid JSON in {PLAN_FILE}: {exc}") from exc
    if not isinstance(raw, dict):
        raise PlanError(f"{PLAN_FILE} must contain a JSON object")

    try:
        return {
            name: MaintenancePlanEntry.model_validate(entry)
            for name, entry in raw.items()
        }
    except ValidationError as exc:
        raise PlanError(f"Invalid entry in {PLAN_FILE}: {exc}") from exc


def run_version(config: ReleaseConfig, runner: CommandRunner) -> MaintenancePlan:
    """Execute the version job: plan, persist, then run the version tool.

    The plan is regenerated from scratch every run; an empty plan ({}) is
    written when no major bumps are pending.
    """
    step("Planning maintenance branches")

    majors = major_bump_packages(config.base_dir)
    if majors:
        print(f"  Major bumps pending: {', '.join(sorted(majors))}")
    else:
        print("  No major version bumps pending")

    plan = plan_maintenance_branches(majors, config.base_dir)
    persist_plan(plan, config.base_dir)

    step("Versioning packages")
    runner.run(*config.version_command)
    return plan
