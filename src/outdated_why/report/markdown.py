"""Markdown rendering of analysis reports."""

from dataclasses import dataclass
from typing import Optional

from outdated_why.core.models import (
    AnalysisReport,
    HealthSummary,
    LibyearMetrics,
    PackageAssessment,
    Priority,
)


@dataclass
class MarkdownConfig:
    """Configuration for markdown generation."""

    # Prefix for suggested commands
    package_manager: str = "npm"

    # Whether to include per-package explanations
    include_details: bool = True

    # Maximum number of skipped packages to list
    max_skipped: int = 10


PRIORITY_HEADINGS = {
    Priority.CRITICAL: ("Critical", "Security vulnerabilities that need fixing now."),
    Priority.IMPORTANT: ("Important", "Breaking changes or security advisories. Review before updating."),
    Priority.SAFE: ("Safe", "Backward-compatible changes. Update anytime."),
    Priority.SKIP: ("Skip", "Dev-only housekeeping. Update when convenient."),
}


def full_command(assessment: PackageAssessment, package_manager: str) -> str:
    """Prefix a suggested command with the package manager."""
    return f"{package_manager} {assessment.update_command}"


class MarkdownReportGenerator:
    """Generates markdown reports."""

    def __init__(self, config: Optional[MarkdownConfig] = None):
        """Initialize the generator.

        Args:
            config: Optional markdown configuration.
        """
        self._config = config or MarkdownConfig()

    def generate(self, report: AnalysisReport) -> str:
        """Render a complete report.

        Args:
            report: Analysis report.

        Returns:
            Markdown document.
        """
        sections: list[str] = ["# Outdated Package Report", ""]

        sections.append(self._generate_summary(report))
        sections.append("")

        buckets = {
            Priority.CRITICAL: report.critical,
            Priority.IMPORTANT: report.important,
            Priority.SAFE: report.safe,
            Priority.SKIP: report.skip,
        }
        for priority, assessments in buckets.items():
            if assessments:
                sections.append(self._generate_bucket(priority, assessments))
                sections.append("")

        if report.freshness is not None:
            sections.append(self._generate_freshness(report.freshness))
            sections.append("")

        if report.health is not None:
            sections.append(self._generate_health(report.health))
            sections.append("")

        sections.append(f"_Generated {report.generated_at.isoformat()}_")
        return "\n".join(sections)

    def _generate_summary(self, report: AnalysisReport) -> str:
        """Generate summary section."""
        summary = report.summary
        lines = [
            "## Summary",
            "",
            f"**Security score:** {report.security_score}/100",
            "",
            "| Critical | Important | Safe | Skip | Total |",
            "|---------:|----------:|-----:|-----:|------:|",
            f"| {len(report.critical)} | {len(report.important)} | {len(report.safe)} "
            f"| {len(report.skip)} | {report.total_packages} |",
            "",
            f"**Recommendation:** {summary.recommendation}",
            "",
            f"**Estimated effort:** {summary.estimated_effort}",
        ]
        return "\n".join(lines)

    def _generate_bucket(self, priority: Priority, assessments: list[PackageAssessment]) -> str:
        """Generate one priority section."""
        title, blurb = PRIORITY_HEADINGS[priority]
        lines = [f"## {title} ({len(assessments)})", "", blurb, ""]

        if priority == Priority.SKIP:
            shown = assessments[: self._config.max_skipped]
            for a in shown:
                lines.append(f"- `{a.package.name}` {a.package.current_version} -> {a.package.latest_version}")
            if len(assessments) > len(shown):
                lines.append(f"- ... and {len(assessments) - len(shown)} more")
            return "\n".join(lines)

        if not self._config.include_details or priority == Priority.SAFE:
            lines.append("| Package | Current | Latest | Command |")
            lines.append("|---------|---------|--------|---------|")
            for a in assessments:
                lines.append(
                    f"| `{a.package.name}` | {a.package.current_version} | {a.package.latest_version} "
                    f"| `{full_command(a, self._config.package_manager)}` |"
                )
            return "\n".join(lines)

        for a in assessments:
            lines.append(self._generate_package(a))
            lines.append("")
        return "\n".join(lines).rstrip()

    def _generate_package(self, a: PackageAssessment) -> str:
        """Generate the detailed block for one package."""
        lines = [
            f"### `{a.package.name}` {a.package.current_version} -> {a.package.latest_version}",
            "",
            f"- **Reason:** {a.reason}",
            f"- **Why it matters:** {a.why_it_matters}",
            f"- **Risk score:** {a.risk_score}/100, effort {a.effort.value}",
            f"- **Update:** `{full_command(a, self._config.package_manager)}`",
        ]

        for advisory in a.advisories:
            lines.append(f"- [{advisory.severity.value.upper()}] {advisory.title} ({advisory.id})")

        if a.breaking_change and a.breaking_change.known_issues:
            lines.append(f"- **Known issues:** {', '.join(a.breaking_change.known_issues)}")

        if a.read_more_url:
            lines.append(f"- **Read more:** {a.read_more_url}")

        return "\n".join(lines)

    def _generate_freshness(self, metrics: LibyearMetrics) -> str:
        """Generate the libyear section."""
        lines = [
            "## Dependency Freshness",
            "",
            f"- Total drift: {metrics.total_libyears:.1f} libyears",
            f"- Average age: {metrics.avg_libyears:.2f} years per dependency",
        ]
        if metrics.most_outdated and metrics.max_libyears > 0:
            lines.append(f"- Most outdated: `{metrics.most_outdated}` ({metrics.max_libyears:.1f} years)")
        lines.extend(
            [
                f"- Behind: {metrics.majors_behind} major, {metrics.minors_behind} minor, "
                f"{metrics.patches_behind} patch",
                f"- Freshness score: {metrics.freshness_score}/100",
            ]
        )
        return "\n".join(lines)

    def _generate_health(self, health: HealthSummary) -> str:
        """Generate the health section."""
        lines = ["## Package Health", ""]
        if health.deprecated:
            lines.append(f"- Deprecated: {', '.join(f'`{n}`' for n in health.deprecated)}")
        if health.unmaintained:
            lines.append(f"- Unmaintained (2+ years): {', '.join(f'`{n}`' for n in health.unmaintained)}")
        if health.low_usage:
            lines.append(f"- Low usage: {', '.join(f'`{n}`' for n in health.low_usage)}")
        lines.append(f"- Healthy: {health.healthy}")
        return "\n".join(lines)


def generate_markdown_report(report: AnalysisReport, package_manager: str = "npm") -> str:
    """Convenience function to render a report as markdown."""
    return MarkdownReportGenerator(MarkdownConfig(package_manager=package_manager)).generate(report)
