"""Tests for markdown report generation."""

from datetime import datetime, timezone

from outdated_why.core.analyzer import analyze_packages
from outdated_why.core.models import (
    AnalysisReport,
    DependencyKind,
    HealthSummary,
    LibyearMetrics,
    Severity,
)
from outdated_why.report.markdown import (
    MarkdownConfig,
    MarkdownReportGenerator,
    generate_markdown_report,
)

GENERATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _report(make_fact, make_advisory) -> AnalysisReport:
    facts = [
        make_fact(name="lodash", current="4.17.20", latest="4.17.21"),
        make_fact(name="react", current="17.0.2", latest="18.2.0"),
        make_fact(name="axios", current="1.6.0", latest="1.6.2"),
        make_fact(name="jest", current="29.0.0", latest="29.1.0", kind=DependencyKind.DEVELOPMENT),
    ]
    advisories = {"lodash": [make_advisory(severity=Severity.HIGH, title="Command Injection")]}
    return analyze_packages(facts, advisories, generated_at=GENERATED_AT)


class TestMarkdownReportGenerator:
    """Tests for MarkdownReportGenerator."""

    def test_summary(self, make_fact, make_advisory) -> None:
        """Test the summary section."""
        markdown = generate_markdown_report(_report(make_fact, make_advisory))

        assert markdown.startswith("# Outdated Package Report")
        assert "**Security score:** 85/100" in markdown
        assert "| 1 | 1 | 1 | 1 | 4 |" in markdown
        assert "**Recommendation:** Address 1 high severity issues soon." in markdown

    def test_bucket_sections(self, make_fact, make_advisory) -> None:
        """Test each non-empty bucket gets a section."""
        markdown = generate_markdown_report(_report(make_fact, make_advisory))

        assert "## Critical (1)" in markdown
        assert "## Important (1)" in markdown
        assert "## Safe (1)" in markdown
        assert "## Skip (1)" in markdown
        assert markdown.index("## Critical") < markdown.index("## Important") < markdown.index("## Safe")

    def test_package_details(self, make_fact, make_advisory) -> None:
        """Test detailed blocks for urgent packages."""
        markdown = generate_markdown_report(_report(make_fact, make_advisory))

        assert "### `lodash` 4.17.20 -> 4.17.21" in markdown
        assert "- [HIGH] Command Injection (GHSA-1234)" in markdown
        assert "`npm install lodash@latest`" in markdown
        assert "- **Known issues:** StrictMode double-renders, Suspense changes" in markdown
        assert "- **Read more:** https://react.dev/" in markdown

    def test_package_manager_prefix(self, make_fact, make_advisory) -> None:
        """Test commands use the configured package manager."""
        markdown = generate_markdown_report(_report(make_fact, make_advisory), package_manager="pnpm")
        assert "`pnpm update axios`" in markdown
        assert "`npm " not in markdown

    def test_without_details(self, make_fact, make_advisory) -> None:
        """Test compact tables replace detail blocks."""
        generator = MarkdownReportGenerator(MarkdownConfig(include_details=False))
        markdown = generator.generate(_report(make_fact, make_advisory))
        assert "### `lodash`" not in markdown
        assert "| `lodash` | 4.17.20 | 4.17.21 | `npm install lodash@latest` |" in markdown

    def test_skipped_list_truncated(self, make_fact) -> None:
        """Test long skip lists are truncated."""
        facts = [
            make_fact(name=f"dev-{i}", kind=DependencyKind.DEVELOPMENT) for i in range(4)
        ]
        report = analyze_packages(facts, generated_at=GENERATED_AT)
        markdown = MarkdownReportGenerator(MarkdownConfig(max_skipped=2)).generate(report)
        assert "- `dev-0` 1.0.0 -> 1.0.1" in markdown
        assert "`dev-3`" not in markdown
        assert "- ... and 2 more" in markdown

    def test_freshness_and_health(self) -> None:
        """Test optional sections render when present."""
        report = AnalysisReport(
            generated_at=GENERATED_AT,
            freshness=LibyearMetrics(
                total_libyears=2.5,
                avg_libyears=1.25,
                max_libyears=2.0,
                most_outdated="moment",
                majors_behind=1,
                minors_behind=1,
                freshness_score=70,
            ),
            health=HealthSummary(deprecated=["request"], low_usage=["tiny-lib"], healthy=3),
        )
        markdown = generate_markdown_report(report)

        assert "## Dependency Freshness" in markdown
        assert "- Total drift: 2.5 libyears" in markdown
        assert "- Most outdated: `moment` (2.0 years)" in markdown
        assert "- Freshness score: 70/100" in markdown
        assert "## Package Health" in markdown
        assert "- Deprecated: `request`" in markdown
        assert "- Low usage: `tiny-lib`" in markdown
        assert "Unmaintained" not in markdown
        assert "- Healthy: 3" in markdown

    def test_empty_report(self) -> None:
        """Test an empty report has only the summary."""
        markdown = generate_markdown_report(AnalysisReport(generated_at=GENERATED_AT))
        assert "## Critical" not in markdown
        assert "## Dependency Freshness" not in markdown
        assert markdown.endswith("_Generated 2024-01-01T00:00:00+00:00_")
