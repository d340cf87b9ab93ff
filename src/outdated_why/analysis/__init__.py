"""Classification and scoring engine.

Components:
- versions: Classify (current, latest) pairs into major/minor/patch updates
- known_breaking_changes: Curated breaking-change table with effort heuristics
- classifier: Per-package priority, risk score, effort and narrative
- summary: Security score, effort total and recommendation across packages
- freshness: Libyear drift metrics
- health: Maintenance signals summary
"""

from outdated_why.analysis.classifier import (
    RiskClassifier,
    RiskScoreWeights,
    classify,
    highest_severity_advisory,
)
from outdated_why.analysis.freshness import (
    aggregate_freshness,
    build_package_age,
)
from outdated_why.analysis.health import summarize_health
from outdated_why.analysis.known_breaking_changes import (
    BreakingChangeKnowledgeBase,
    estimate_update_effort,
    get_breaking_change_info,
    get_default_knowledge_base,
    has_known_breaking_changes,
    load_knowledge_base,
)
from outdated_why.analysis.summary import (
    calculate_security_score,
    estimate_total_effort,
    summarize,
)
from outdated_why.analysis.versions import analyze_version_delta, coerce_version

__all__ = [
    # Classifier
    "RiskClassifier",
    "RiskScoreWeights",
    "classify",
    "highest_severity_advisory",
    # Freshness
    "aggregate_freshness",
    "build_package_age",
    # Health
    "summarize_health",
    # Known Breaking Changes
    "BreakingChangeKnowledgeBase",
    "estimate_update_effort",
    "get_breaking_change_info",
    "get_default_knowledge_base",
    "has_known_breaking_changes",
    "load_knowledge_base",
    # Summary
    "calculate_security_score",
    "estimate_total_effort",
    "summarize",
    # Versions
    "analyze_version_delta",
    "coerce_version",
]
