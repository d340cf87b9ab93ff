"""Report rendering."""

from outdated_why.report.markdown import (
    MarkdownConfig,
    MarkdownReportGenerator,
    generate_markdown_report,
)

__all__ = [
    "MarkdownConfig",
    "MarkdownReportGenerator",
    "generate_markdown_report",
]
