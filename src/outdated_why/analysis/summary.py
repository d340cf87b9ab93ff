"""Aggregate summary: security score, effort estimate and recommendation."""

import math
from collections.abc import Sequence

from outdated_why.core.models import (
    AnalysisSummary,
    PackageAssessment,
    Priority,
    Severity,
)

SEVERITY_DEDUCTIONS = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MODERATE: 5,
    Severity.LOW: 2,
}

HOURS_PER_DAY = 8
MANY_MAJOR_UPDATES = 3

ALL_CURRENT_MESSAGE = "All packages are up to date!"
NO_URGENT_ACTION_MESSAGE = "No urgent updates. Apply the safe updates in one batch."


def calculate_security_score(assessments: Sequence[PackageAssessment]) -> int:
    """Score security health from 100 down, one deduction per advisory.

    Advisories compound independently, even on the same package.

    Args:
        assessments: Classified packages.

    Returns:
        Score between 0 and 100 (100 means no known vulnerabilities).
    """
    deductions = sum(
        SEVERITY_DEDUCTIONS[advisory.severity]
        for assessment in assessments
        for advisory in assessment.advisories
    )
    return max(0, 100 - deductions)


def format_effort(hours: float) -> str:
    """Bucket a number of hours into a human label."""
    if hours < 1:
        return "< 1 hour"
    if hours < 4:
        rounded = math.ceil(hours)
        return f"~{rounded} hour" if rounded == 1 else f"~{rounded} hours"
    days = math.ceil(hours / HOURS_PER_DAY)
    return "~1 day" if days == 1 else f"~{days} days"


def estimate_total_effort(assessments: Sequence[PackageAssessment]) -> tuple[float, str]:
    """Sum per-package effort as weighted hours.

    Args:
        assessments: Classified packages.

    Returns:
        Tuple of (total hours, human label).
    """
    hours = sum(a.effort.hours for a in assessments)
    return hours, format_effort(hours)


def build_recommendation(
    critical_vulnerabilities: int,
    high_vulnerabilities: int,
    major_updates: int,
    total_packages: int,
) -> str:
    """Pick the single most urgent recommendation."""
    if critical_vulnerabilities > 0:
        return f"Fix {critical_vulnerabilities} critical vulnerabilities immediately!"
    if high_vulnerabilities > 0:
        return f"Address {high_vulnerabilities} high severity issues soon."
    if major_updates > MANY_MAJOR_UPDATES:
        return f"{major_updates} major updates available. Consider updating one at a time."
    if total_packages == 0:
        return ALL_CURRENT_MESSAGE
    return NO_URGENT_ACTION_MESSAGE


def summarize(assessments: Sequence[PackageAssessment]) -> tuple[int, AnalysisSummary]:
    """Fold classified packages into a security score and summary.

    Args:
        assessments: Every classified package from one run.

    Returns:
        Tuple of (security_score, summary).
    """
    severities = [adv.severity for a in assessments for adv in a.advisories]
    critical_vulns = severities.count(Severity.CRITICAL)
    high_vulns = severities.count(Severity.HIGH)
    major_updates = sum(1 for a in assessments if a.delta.is_major)
    hours, effort_label = estimate_total_effort(assessments)

    counts = {priority: 0 for priority in Priority}
    for assessment in assessments:
        counts[assessment.priority] += 1

    summary = AnalysisSummary(
        total_packages=len(assessments),
        critical_count=counts[Priority.CRITICAL],
        important_count=counts[Priority.IMPORTANT],
        safe_count=counts[Priority.SAFE],
        skip_count=counts[Priority.SKIP],
        total_vulnerabilities=len(severities),
        critical_vulnerabilities=critical_vulns,
        high_vulnerabilities=high_vulns,
        major_updates_available=major_updates,
        estimated_hours=hours,
        estimated_effort=effort_label,
        recommendation=build_recommendation(critical_vulns, high_vulns, major_updates, len(assessments)),
    )

    return calculate_security_score(assessments), summary
