"""Risk classifier turning one package's facts into a prioritized assessment."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from outdated_why.analysis.known_breaking_changes import (
    BreakingChangeKnowledgeBase,
    get_default_knowledge_base,
)
from outdated_why.analysis.versions import analyze_version_delta
from outdated_why.core.models import (
    BreakingChangeInfo,
    EffortTier,
    PackageAssessment,
    PackageFact,
    Priority,
    SecurityAdvisory,
    Severity,
    VersionDelta,
)


@dataclass(frozen=True)
class RiskScoreWeights:
    """Points used by the additive risk score."""

    # Security points (one of the two applies)
    severe_advisory_points: int = 80
    any_advisory_points: int = 50

    # Update-type points
    major_with_known_breaking_points: int = 30
    major_points: int = 20
    minor_points: int = 5
    patch_points: int = 0

    # Dev dependencies without advisories keep this share of the score
    dev_discount: float = 0.5

    max_score: int = 100


SEVERE = (Severity.CRITICAL, Severity.HIGH)


@dataclass(frozen=True)
class _Narrative:
    priority: Priority
    reason: str
    why_it_matters: str


def highest_severity_advisory(advisories: Sequence[SecurityAdvisory]) -> SecurityAdvisory | None:
    """Return the most severe advisory, the first one listed on ties."""
    best: SecurityAdvisory | None = None
    for advisory in advisories:
        if best is None or advisory.severity.rank > best.severity.rank:
            best = advisory
    return best


class RiskClassifier:
    """Classifies outdated packages into priority buckets."""

    def __init__(
        self,
        knowledge_base: Optional[BreakingChangeKnowledgeBase] = None,
        weights: Optional[RiskScoreWeights] = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            knowledge_base: Breaking change table (bundled table by default).
            weights: Optional custom scoring weights.
        """
        self._kb = knowledge_base or get_default_knowledge_base()
        self._weights = weights or RiskScoreWeights()

    def classify(
        self,
        fact: PackageFact,
        advisories: Sequence[SecurityAdvisory] | None = None,
        is_dev: bool | None = None,
    ) -> PackageAssessment:
        """Assess a single outdated package.

        Args:
            fact: The outdated package.
            advisories: Security advisories for the package (None means none).
            is_dev: Whether to treat it as a dev dependency; derived from the
                dependency kind when omitted.

        Returns:
            The package assessment.
        """
        advisories = tuple(advisories or ())
        if is_dev is None:
            is_dev = fact.is_dev

        delta = analyze_version_delta(fact.current_version, fact.latest_version)

        breaking_info: BreakingChangeInfo | None = None
        has_known_breaking = False
        effort = EffortTier.LOW
        if delta.is_major:
            breaking_info = self._kb.get_breaking_change_info(
                fact.name, delta.current_major, delta.latest_major
            )
            has_known_breaking = self._kb.has_known_breaking_changes(
                fact.name, delta.current_major, delta.latest_major
            )
            effort = self._kb.estimate_update_effort(
                fact.name, delta.current_major, delta.latest_major
            )

        risk_score = self.calculate_risk_score(delta, advisories, is_dev, has_known_breaking)
        narrative = self._decide(delta, advisories, is_dev, has_known_breaking, breaking_info)

        return PackageAssessment(
            package=fact,
            priority=narrative.priority,
            risk_score=risk_score,
            effort=effort,
            reason=narrative.reason,
            why_it_matters=narrative.why_it_matters,
            update_command=self._update_command(fact, delta, advisories),
            read_more_url=self._read_more_url(fact, delta, advisories),
            advisories=advisories,
            delta=delta,
            breaking_change=breaking_info,
            has_known_breaking_changes=has_known_breaking,
            is_dev_dependency=is_dev,
        )

    def calculate_risk_score(
        self,
        delta: VersionDelta,
        advisories: Sequence[SecurityAdvisory],
        is_dev: bool,
        has_known_breaking: bool,
    ) -> int:
        """Compute the additive 0-100 risk score.

        Args:
            delta: Version delta for the package.
            advisories: Security advisories for the package.
            is_dev: Whether the package is a dev dependency.
            has_known_breaking: Whether the major jump crosses a known entry.

        Returns:
            Risk score, clamped to the 0-100 range.
        """
        w = self._weights
        score = 0

        if any(a.severity in SEVERE for a in advisories):
            score += w.severe_advisory_points
        elif advisories:
            score += w.any_advisory_points

        if delta.is_major:
            score += w.major_with_known_breaking_points if has_known_breaking else w.major_points
        elif delta.is_minor:
            score += w.minor_points
        else:
            score += w.patch_points

        if is_dev and not advisories:
            score = int(score * w.dev_discount)

        # The additive formula can reach 110; the cap is applied here.
        return max(0, min(w.max_score, score))

    def _decide(
        self,
        delta: VersionDelta,
        advisories: Sequence[SecurityAdvisory],
        is_dev: bool,
        has_known_breaking: bool,
        breaking_info: BreakingChangeInfo | None,
    ) -> _Narrative:
        """Pick the priority bucket and its narrative, first match wins."""
        top = highest_severity_advisory(advisories)

        if top is not None and top.severity in SEVERE:
            if top.severity == Severity.CRITICAL:
                impact = "Critical vulnerabilities can lead to remote code execution or data breaches."
            else:
                impact = "High severity issues can compromise your application security."
            return _Narrative(
                Priority.CRITICAL,
                f"Security vulnerability ({top.severity.value}): {top.title}",
                f"This package has a known security flaw that attackers could exploit. {impact}",
            )

        if top is not None:
            return _Narrative(
                Priority.IMPORTANT,
                f"Security advisory ({top.severity.value}): {top.title}",
                "There's a known security issue, though lower severity. "
                "Worth fixing to reduce your attack surface.",
            )

        jump = f"v{delta.current_major} -> v{delta.latest_major}"

        if delta.is_major:
            if is_dev and not has_known_breaking:
                return _Narrative(
                    Priority.SKIP,
                    f"Dev dependency major update ({jump})",
                    "This is a dev-only tool with a major update. "
                    "Lower priority since it doesn't affect production.",
                )

            if breaking_info is not None:
                if breaking_info.known_issues:
                    watch = f"Watch out for: {', '.join(breaking_info.known_issues)}."
                else:
                    watch = "Review the migration guide before updating."
                return _Narrative(
                    Priority.IMPORTANT,
                    f"Major update: {breaking_info.summary}",
                    f"Version {delta.latest_major} includes breaking changes. {watch}",
                )

            return _Narrative(
                Priority.IMPORTANT,
                f"Major version update ({jump})",
                "Major versions often include breaking changes. Check the changelog before updating.",
            )

        if delta.is_minor:
            if is_dev:
                return _Narrative(
                    Priority.SKIP,
                    "Dev dependency minor update - new features",
                    "New features available, but this is a dev tool. Update when convenient.",
                )
            return _Narrative(
                Priority.SAFE,
                "Minor update - new features, backward compatible",
                "New features added without breaking existing code. Safe to update.",
            )

        if is_dev:
            return _Narrative(
                Priority.SKIP,
                "Dev dependency patch - bug fixes",
                "Bug fixes for a dev tool. Low priority but good to stay current.",
            )
        return _Narrative(
            Priority.SAFE,
            "Patch update - bug fixes only",
            "Bug fixes and small improvements. Very safe to update.",
        )

    @staticmethod
    def _update_command(
        fact: PackageFact,
        delta: VersionDelta,
        advisories: Sequence[SecurityAdvisory],
    ) -> str:
        # `update` stays inside the declared range; crossing a major or
        # pulling a patched release must be asked for explicitly.
        if delta.is_major or advisories:
            return f"install {fact.name}@latest"
        return f"update {fact.name}"

    def _read_more_url(
        self,
        fact: PackageFact,
        delta: VersionDelta,
        advisories: Sequence[SecurityAdvisory],
    ) -> str | None:
        if delta.is_major:
            url = self._kb.get_breaking_change_url(fact.name, delta.latest_major)
            if url:
                return url

        top = highest_severity_advisory(advisories)
        if top is not None and top.url:
            return top.url

        return None


def classify(
    fact: PackageFact,
    advisories: Sequence[SecurityAdvisory] | None = None,
    is_dev: bool | None = None,
    knowledge_base: BreakingChangeKnowledgeBase | None = None,
) -> PackageAssessment:
    """Convenience function to classify one package.

    Args:
        fact: The outdated package.
        advisories: Its security advisories.
        is_dev: Dev dependency override.
        knowledge_base: Optional breaking change table.

    Returns:
        The package assessment.
    """
    return RiskClassifier(knowledge_base=knowledge_base).classify(fact, advisories, is_dev)
