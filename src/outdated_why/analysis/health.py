"""Package health summary from registry maintenance signals."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from outdated_why.core.models import HealthSummary, PackageHealth

UNMAINTAINED_AFTER = timedelta(days=2 * 365)
LOW_USAGE_WEEKLY_DOWNLOADS = 1000


def is_unmaintained(health: PackageHealth, now: datetime) -> bool:
    """A package is unmaintained when its last release is 2+ years old."""
    if health.last_publish is None:
        return False
    return health.last_publish < now - UNMAINTAINED_AFTER


def summarize_health(
    healths: Sequence[PackageHealth],
    now: datetime | None = None,
) -> HealthSummary:
    """Group packages by their most serious maintenance signal.

    Precedence is deprecated, then unmaintained, then low usage; anything
    else counts as healthy. Missing signals are treated as healthy.

    Args:
        healths: Health facts gathered for each package.
        now: Reference time (defaults to the current time).

    Returns:
        The health summary.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    deprecated: list[str] = []
    unmaintained: list[str] = []
    low_usage: list[str] = []
    healthy = 0

    for health in healths:
        if health.is_deprecated:
            deprecated.append(health.name)
        elif is_unmaintained(health, now):
            unmaintained.append(health.name)
        elif health.weekly_downloads is not None and health.weekly_downloads < LOW_USAGE_WEEKLY_DOWNLOADS:
            low_usage.append(health.name)
        else:
            healthy += 1

    return HealthSummary(
        deprecated=deprecated,
        unmaintained=unmaintained,
        low_usage=low_usage,
        healthy=healthy,
    )
