"""Known breaking changes database for popular packages.

This provides curated migration facts (summary, effort, known issues,
migration guide URL) keyed by package and target major version, for
packages where a bare "major bump" says too little about upgrade risk.

The table itself lives in ``outdated_why/data/breaking_changes.yml`` and
is loaded once per process. Keys may be glob patterns such as
``@radix-ui/react-*``; exact names take precedence over patterns.
"""

import fnmatch
from collections.abc import Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import ValidationError

from outdated_why.core.models import BreakingChangeEntry, BreakingChangeInfo, EffortTier
from outdated_why.errors import KnowledgeBaseError
from outdated_why.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TABLE_RESOURCE = "breaking_changes.yml"

# Name fragments used when no curated entry exists for the target major.
HIGH_EFFORT_NAME_HINTS = ("eslint", "webpack")
MEDIUM_EFFORT_NAME_HINTS = ("react", "vue", "angular")

BreakingChangeTable = Mapping[str, Mapping[int, BreakingChangeEntry]]


def parse_breaking_change_table(data: Any, source: str = "") -> dict[str, dict[int, BreakingChangeEntry]]:
    """Validate raw YAML data into a breaking change table.

    Args:
        data: Parsed YAML document.
        source: Where the data came from, for error messages.

    Returns:
        Mapping of package name to major version to entry.

    Raises:
        KnowledgeBaseError: If the document does not have the expected shape.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise KnowledgeBaseError(source, message=f"Breaking-change table in {source or 'input'} must be a mapping")

    table: dict[str, dict[int, BreakingChangeEntry]] = {}
    for package, versions in data.items():
        if not isinstance(versions, dict):
            raise KnowledgeBaseError(
                source,
                message=f"Entry for {package!r} must map major versions to change details",
            )

        entries: dict[int, BreakingChangeEntry] = {}
        for major, raw in versions.items():
            try:
                major_int = int(major)
            except (TypeError, ValueError) as e:
                raise KnowledgeBaseError(
                    source,
                    message=f"Major version {major!r} for {package!r} is not an integer",
                ) from e

            if not isinstance(raw, dict):
                raise KnowledgeBaseError(
                    source,
                    message=f"Entry {package!r}@{major_int} must be a mapping",
                )

            try:
                entries[major_int] = BreakingChangeEntry(
                    summary=raw.get("summary", ""),
                    migration_url=raw.get("url", raw.get("migration_url", "")),
                    effort=raw.get("effort", EffortTier.LOW),
                    known_issues=tuple(raw.get("known_issues") or ()),
                )
            except ValidationError as e:
                raise KnowledgeBaseError(
                    source,
                    message=f"Invalid entry {package!r}@{major_int}: {e.errors()[0]['msg']}",
                ) from e

        table[str(package)] = entries

    return table


class BreakingChangeKnowledgeBase:
    """Read-only lookup of curated breaking changes."""

    def __init__(self, table: BreakingChangeTable | None = None) -> None:
        """Initialize the knowledge base.

        Args:
            table: Package name to major version to entry mapping.
        """
        frozen = {
            name: MappingProxyType(dict(versions)) for name, versions in (table or {}).items()
        }
        self._table: Mapping[str, Mapping[int, BreakingChangeEntry]] = MappingProxyType(frozen)
        self._patterns = tuple(
            name for name in frozen if any(ch in name for ch in "*?[")
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "BreakingChangeKnowledgeBase":
        """Load a knowledge base from a YAML file.

        Args:
            path: Path to the YAML table.

        Returns:
            The loaded knowledge base.

        Raises:
            KnowledgeBaseError: If the file cannot be read or is malformed.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise KnowledgeBaseError(str(path), message=f"Failed to load breaking-change table {path}: {e}") from e

        return cls(parse_breaking_change_table(data, str(path)))

    def merged(self, other: "BreakingChangeKnowledgeBase") -> "BreakingChangeKnowledgeBase":
        """Return a new knowledge base with ``other`` layered on top of this one.

        Entries from ``other`` replace entries for the same package and
        major version; everything else is kept.
        """
        combined: dict[str, dict[int, BreakingChangeEntry]] = {
            name: dict(versions) for name, versions in self._table.items()
        }
        for name, versions in other._table.items():
            combined.setdefault(name, {}).update(versions)
        return BreakingChangeKnowledgeBase(combined)

    def _versions_for(self, package_name: str) -> Mapping[int, BreakingChangeEntry] | None:
        versions = self._table.get(package_name)
        if versions is not None:
            return versions

        for pattern in self._patterns:
            if fnmatch.fnmatchcase(package_name, pattern):
                return self._table[pattern]

        return None

    def packages(self) -> list[str]:
        """Return every package name or pattern in the table."""
        return sorted(self._table)

    def entry_for(self, package_name: str, major: int) -> BreakingChangeEntry | None:
        """Return the entry for ``package_name`` at ``major``, if any."""
        versions = self._versions_for(package_name)
        if versions is None:
            return None
        return versions.get(major)

    def get_breaking_change_url(self, package_name: str, target_major: int) -> str | None:
        """Return the migration guide URL for a target major version."""
        entry = self.entry_for(package_name, target_major)
        return entry.migration_url if entry else None

    def get_breaking_change_info(
        self,
        package_name: str,
        current_major: int,
        latest_major: int,
    ) -> BreakingChangeInfo | None:
        """Get breaking change details for the latest major version.

        Args:
            package_name: Package name.
            current_major: Installed major version.
            latest_major: Target major version.

        Returns:
            The resolved entry, or None when the jump is not a major upgrade
            or nothing is known about the target major.
        """
        if current_major >= latest_major:
            return None

        entry = self.entry_for(package_name, latest_major)
        if entry is None:
            return None

        return BreakingChangeInfo(
            from_major=current_major,
            to_major=latest_major,
            summary=entry.summary,
            migration_url=entry.migration_url,
            effort=entry.effort,
            known_issues=entry.known_issues,
        )

    def has_known_breaking_changes(
        self,
        package_name: str,
        current_major: int,
        latest_major: int,
    ) -> bool:
        """Check whether any major in (current, latest] has a known entry.

        A package jumping several majors at once accrues the breaking
        changes of every intermediate release, even when the final target
        itself has no entry.
        """
        if current_major >= latest_major:
            return False

        versions = self._versions_for(package_name)
        if not versions:
            return False

        return any(current_major < v <= latest_major for v in versions)

    def estimate_update_effort(
        self,
        package_name: str,
        current_major: int,
        latest_major: int,
    ) -> EffortTier:
        """Estimate the effort of moving to ``latest_major``.

        Uses the curated entry when there is one. Otherwise this is a
        best-effort name heuristic, not a guarantee: linter and bundler
        families are high effort, UI frameworks medium, and jumps of two or
        more majors at least medium.
        """
        entry = self.entry_for(package_name, latest_major)
        if entry is not None:
            return entry.effort

        if any(hint in package_name for hint in HIGH_EFFORT_NAME_HINTS):
            return EffortTier.HIGH
        if any(hint in package_name for hint in MEDIUM_EFFORT_NAME_HINTS):
            return EffortTier.MEDIUM
        if latest_major - current_major >= 2:
            return EffortTier.MEDIUM

        return EffortTier.LOW


@lru_cache(maxsize=1)
def get_default_knowledge_base() -> BreakingChangeKnowledgeBase:
    """Load the bundled breaking change table (once per process)."""
    resource = resources.files("outdated_why.data").joinpath(DEFAULT_TABLE_RESOURCE)
    with resource.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    kb = BreakingChangeKnowledgeBase(parse_breaking_change_table(data, DEFAULT_TABLE_RESOURCE))
    logger.debug("Loaded breaking-change table with %d packages", len(kb.packages()))
    return kb


def load_knowledge_base(extra_path: Path | None = None) -> BreakingChangeKnowledgeBase:
    """Return the bundled knowledge base, optionally extended from a file.

    Args:
        extra_path: Optional YAML file with additional or overriding entries.

    Returns:
        Knowledge base to classify with.
    """
    kb = get_default_knowledge_base()
    if extra_path is None:
        return kb

    logger.debug("Layering breaking-change entries from %s", extra_path)
    return kb.merged(BreakingChangeKnowledgeBase.from_yaml(extra_path))


def get_breaking_change_info(
    package_name: str,
    current_major: int,
    latest_major: int,
) -> BreakingChangeInfo | None:
    """Convenience wrapper over the default knowledge base."""
    return get_default_knowledge_base().get_breaking_change_info(package_name, current_major, latest_major)


def has_known_breaking_changes(package_name: str, current_major: int, latest_major: int) -> bool:
    """Convenience wrapper over the default knowledge base."""
    return get_default_knowledge_base().has_known_breaking_changes(package_name, current_major, latest_major)


def estimate_update_effort(package_name: str, current_major: int, latest_major: int) -> EffortTier:
    """Convenience wrapper over the default knowledge base."""
    return get_default_knowledge_base().estimate_update_effort(package_name, current_major, latest_major)
