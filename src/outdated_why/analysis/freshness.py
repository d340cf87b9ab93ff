"""Libyear metrics: how far behind the outdated set has drifted.

See https://libyear.com/ for the idea. One libyear is a calendar year
between the release of the installed version and the release of the
latest version, summed across dependencies.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from outdated_why.core.models import LibyearMetrics, PackageAge, PackageFact
from outdated_why.utils.logging import get_logger

logger = get_logger(__name__)

DAYS_PER_YEAR = 365
LIBYEAR_PENALTY = 10
MAJOR_BEHIND_PENALTY = 5


def parse_publish_time(value: str | None) -> datetime | None:
    """Parse a registry ISO 8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def count_releases_between(versions: Sequence[str], current: str, latest: str) -> int:
    """Count releases from ``current`` up to ``latest`` in publish order.

    Returns 0 when either version is missing from the list.
    """
    try:
        current_idx = versions.index(current)
        latest_idx = versions.index(latest)
    except ValueError:
        return 0
    return max(0, latest_idx - current_idx)


def build_package_age(
    fact: PackageFact,
    times: Mapping[str, str] | None = None,
    versions: Sequence[str] | None = None,
) -> PackageAge:
    """Derive age facts for a package from registry metadata.

    Args:
        fact: The outdated package.
        times: Registry ``time`` map of version to publish timestamp.
        versions: Registry ``versions`` list in publish order.

    Returns:
        Age facts; unknown versions leave the dates unset.
    """
    times = times or {}
    return PackageAge(
        package_name=fact.name,
        current_version=fact.current_version,
        latest_version=fact.latest_version,
        current_publish_date=parse_publish_time(times.get(fact.current_version)),
        latest_publish_date=parse_publish_time(times.get(fact.latest_version)),
        releases_behind=count_releases_between(
            list(versions or ()), fact.current_version, fact.latest_version
        ),
    )


def _version_component(version: str, index: int) -> int | None:
    parts = version.split(".")
    if index >= len(parts):
        return None
    try:
        return int(parts[index])
    except ValueError:
        return None


def _is_greater(latest: int | None, current: int | None) -> bool:
    # Malformed components never compare as greater.
    if latest is None or current is None:
        return False
    return latest > current


def aggregate_freshness(
    ages: Sequence[PackageAge],
    now: datetime | None = None,
) -> LibyearMetrics:
    """Fold per-package age facts into libyear metrics.

    Packages with unknown publish dates contribute zero days.

    Args:
        ages: Age facts for every outdated package.
        now: Reference time for the pulse (defaults to the current time).

    Returns:
        Aggregate freshness metrics; an empty input is perfectly fresh.
    """
    if not ages:
        return LibyearMetrics()

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    total_days = sum(a.days_outdated for a in ages)
    total_libyears = total_days / DAYS_PER_YEAR
    oldest = max(ages, key=lambda a: a.years_outdated)

    majors_behind = minors_behind = patches_behind = 0
    for age in ages:
        current, latest = age.current_version, age.latest_version
        if _is_greater(_version_component(latest, 0), _version_component(current, 0)):
            majors_behind += 1
        elif _is_greater(_version_component(latest, 1), _version_component(current, 1)):
            minors_behind += 1
        else:
            patches_behind += 1

    latest_dates = [a.latest_publish_date for a in ages if a.latest_publish_date is not None]
    if latest_dates:
        pulse = max(0, int((now - max(latest_dates)).total_seconds() // 86400))
    else:
        pulse = 0

    missing = sum(1 for a in ages if a.days_outdated == 0 and a.current_publish_date is None)
    if missing:
        logger.debug("%d package(s) have no publish dates; counted as 0 days", missing)

    score = 100 - total_libyears * LIBYEAR_PENALTY - majors_behind * MAJOR_BEHIND_PENALTY
    freshness_score = round(max(0.0, min(100.0, score)))

    return LibyearMetrics(
        total_libyears=round(total_libyears, 2),
        avg_libyears=round(total_libyears / len(ages), 2),
        max_libyears=round(oldest.years_outdated, 2),
        most_outdated=oldest.package_name,
        drift_days=total_days,
        pulse=pulse,
        releases_behind=sum(a.releases_behind for a in ages),
        majors_behind=majors_behind,
        minors_behind=minors_behind,
        patches_behind=patches_behind,
        freshness_score=freshness_score,
    )
