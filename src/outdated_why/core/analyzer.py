"""Analysis orchestration: classify, bucket, summarize."""

from collections.abc import Collection, Mapping, Sequence
from datetime import datetime, timezone

from outdated_why.analysis.classifier import RiskClassifier
from outdated_why.analysis.freshness import aggregate_freshness
from outdated_why.analysis.health import summarize_health
from outdated_why.analysis.known_breaking_changes import BreakingChangeKnowledgeBase
from outdated_why.analysis.summary import summarize
from outdated_why.core.models import (
    AnalysisReport,
    PackageAge,
    PackageAssessment,
    PackageFact,
    PackageHealth,
    Priority,
    SecurityAdvisory,
)
from outdated_why.utils.logging import get_logger

logger = get_logger(__name__)


def _by_risk(assessments: list[PackageAssessment]) -> list[PackageAssessment]:
    # sorted() is stable, so equal scores keep input order.
    return sorted(assessments, key=lambda a: a.risk_score, reverse=True)


def select_packages(
    facts: Sequence[PackageFact],
    ignore: Collection[str] = (),
    include_dev: bool = True,
) -> list[PackageFact]:
    """Drop ignored packages and, optionally, dev dependencies.

    Args:
        facts: Outdated packages.
        ignore: Package names to leave out.
        include_dev: Whether to keep development dependencies.

    Returns:
        Packages to analyze, in input order.
    """
    ignored = set(ignore)
    selected: list[PackageFact] = []
    for fact in facts:
        if fact.name in ignored:
            logger.debug("Ignoring %s (configured)", fact.name)
            continue
        if not include_dev and fact.is_dev:
            logger.debug("Ignoring %s (dev dependency)", fact.name)
            continue
        selected.append(fact)
    return selected


def analyze_packages(
    facts: Sequence[PackageFact],
    advisories: Mapping[str, Sequence[SecurityAdvisory] | None] | None = None,
    ages: Sequence[PackageAge] | None = None,
    health: Sequence[PackageHealth] | None = None,
    knowledge_base: BreakingChangeKnowledgeBase | None = None,
    ignore: Collection[str] = (),
    include_dev: bool = True,
    generated_at: datetime | None = None,
) -> AnalysisReport:
    """Build the full report for a set of outdated packages.

    Args:
        facts: Outdated packages from the package manager.
        advisories: Advisories keyed by package name; missing means none.
        ages: Optional age facts for the freshness section.
        health: Optional health facts for the health section.
        knowledge_base: Optional breaking change table.
        ignore: Package names to leave out.
        include_dev: Whether to analyze development dependencies.
        generated_at: Report timestamp (defaults to now).

    Returns:
        The analysis report.
    """
    advisories = advisories or {}
    classifier = RiskClassifier(knowledge_base=knowledge_base)

    selected = select_packages(facts, ignore=ignore, include_dev=include_dev)
    assessments = [classifier.classify(fact, advisories.get(fact.name) or ()) for fact in selected]

    buckets: dict[Priority, list[PackageAssessment]] = {priority: [] for priority in Priority}
    for assessment in assessments:
        buckets[assessment.priority].append(assessment)

    security_score, summary = summarize(assessments)

    names = {fact.name for fact in selected}

    freshness = None
    if ages is not None:
        freshness = aggregate_freshness(
            [age for age in ages if age.package_name in names],
            now=generated_at,
        )

    health_summary = None
    if health is not None:
        health_summary = summarize_health(
            [h for h in health if h.name in names],
            now=generated_at,
        )

    logger.info(
        "Analyzed %d packages: %d critical, %d important, %d safe, %d skip",
        len(assessments),
        summary.critical_count,
        summary.important_count,
        summary.safe_count,
        summary.skip_count,
    )

    return AnalysisReport(
        critical=_by_risk(buckets[Priority.CRITICAL]),
        important=_by_risk(buckets[Priority.IMPORTANT]),
        safe=_by_risk(buckets[Priority.SAFE]),
        skip=_by_risk(buckets[Priority.SKIP]),
        generated_at=generated_at or datetime.now(timezone.utc),
        total_packages=len(assessments),
        security_score=security_score,
        summary=summary,
        freshness=freshness,
        health=health_summary,
    )
