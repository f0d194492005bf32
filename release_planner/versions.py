"""Reading the major line of a package.json version.

Maintenance branches are keyed by the major version a package is leaving,
so the only thing planning needs from a manifest version is its leading
component.
"""

from __future__ import annotations

import semver


def parse_version(version_str: str) -> semver.Version:
    """Parse an npm manifest version with semver.

    Full versions, including prerelease tags such as "2.0.0-beta.1", are
    parsed as-is. Shortened forms like "3" or "3.1" are zero-filled.
    """
    if semver.Version.is_valid(version_str):
        return semver.Version.parse(version_str)
    core = (version_str.split(".") + ["0", "0"])[:3]
    return semver.Version.parse(".".join(core))


def major_version(version_str: str) -> int:
    """Return the major line of a manifest version.

    Examples:
        "2.5.0" → 2
        "1.0.0-next.3" → 1
        "7" → 7

    Raises:
        ValueError: If the string is not a parseable version.
    """
    return parse_version(version_str).major
