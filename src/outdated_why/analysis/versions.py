"""Version delta classification for (current, latest) version pairs."""

import re

from outdated_why.core.models import UpdateKind, VersionDelta

# First dotted numeric run, e.g. "v1.2.3-beta+build" -> "1.2.3"
_VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def coerce_version(text: str | None) -> tuple[int, int, int] | None:
    """Leniently parse a version string into a (major, minor, patch) triple.

    Prefixes such as ``v`` or ``^``, pre-release tags and build metadata
    are ignored. Missing minor or patch components default to 0.

    Args:
        text: Raw version string.

    Returns:
        The version triple, or None if no numeric component is present.
    """
    if not text:
        return None

    match = _VERSION_PATTERN.search(text)
    if not match:
        return None

    major, minor, patch = match.groups()
    return int(major), int(minor or 0), int(patch or 0)


def analyze_version_delta(current: str | None, latest: str | None) -> VersionDelta:
    """Classify the update from ``current`` to ``latest``.

    Major takes precedence over minor, minor over patch. If either side
    cannot be coerced the delta is reported as a patch with both majors at
    0, so ambiguous data never reads as high risk.

    Args:
        current: Installed version string.
        latest: Latest available version string.

    Returns:
        The version delta.
    """
    current_v = coerce_version(current)
    latest_v = coerce_version(latest)

    if current_v is None or latest_v is None:
        return VersionDelta(update_kind=UpdateKind.PATCH, version_jump="unknown")

    if latest_v[0] > current_v[0]:
        kind = UpdateKind.MAJOR
    elif latest_v[1] > current_v[1]:
        kind = UpdateKind.MINOR
    else:
        kind = UpdateKind.PATCH

    return VersionDelta(
        update_kind=kind,
        current_major=current_v[0],
        latest_major=latest_v[0],
        version_jump=f"{current} -> {latest}",
    )
