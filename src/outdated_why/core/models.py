"""Core data models for outdated-why."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DependencyKind(str, Enum):
    """How a package is declared in the manifest."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    PEER = "peer"

    @classmethod
    def from_npm_type(cls, value: str | None) -> "DependencyKind":
        """Map npm's manifest section name to a dependency kind."""
        if value == "devDependencies":
            return cls.DEVELOPMENT
        if value == "peerDependencies":
            return cls.PEER
        return cls.PRODUCTION


class Severity(str, Enum):
    """Advisory severity, ordered low < moderate < high < critical."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position in the severity order (higher is worse)."""
        return _SEVERITY_RANK[self]

    @classmethod
    def normalize(cls, value: str | None) -> "Severity":
        """Coerce an audit severity string, defaulting to low."""
        s = value.strip().lower() if isinstance(value, str) else ""
        if s == "critical":
            return cls.CRITICAL
        if s == "high":
            return cls.HIGH
        if s in ("moderate", "medium"):
            return cls.MODERATE
        return cls.LOW


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MODERATE: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class Priority(str, Enum):
    """Triage bucket for an outdated package."""

    CRITICAL = "critical"
    IMPORTANT = "important"
    SAFE = "safe"
    SKIP = "skip"

    @property
    def rank(self) -> int:
        """Urgency rank (higher is more urgent)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.SKIP: 0,
    Priority.SAFE: 1,
    Priority.IMPORTANT: 2,
    Priority.CRITICAL: 3,
}


class EffortTier(str, Enum):
    """Coarse estimate of developer time needed to adopt an update."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def hours(self) -> float:
        """Weighted hours used when totalling effort."""
        return _EFFORT_HOURS[self]


_EFFORT_HOURS = {
    EffortTier.LOW: 0.25,
    EffortTier.MEDIUM: 1.0,
    EffortTier.HIGH: 4.0,
}


class UpdateKind(str, Enum):
    """Semver distance between the installed and latest versions."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class PackageFact(BaseModel):
    """One outdated dependency as reported by the package manager."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Package name")
    current_version: str = Field(..., description="Installed version")
    wanted_version: str = Field(..., description="Highest version satisfying the declared range")
    latest_version: str = Field(..., description="Latest published version")
    dependency_kind: DependencyKind = DependencyKind.PRODUCTION
    location: str = Field(default="", description="Install location, informational only")

    @property
    def is_dev(self) -> bool:
        """Whether this is a development dependency."""
        return self.dependency_kind == DependencyKind.DEVELOPMENT


class SecurityAdvisory(BaseModel):
    """A disclosed vulnerability affecting a package."""

    model_config = ConfigDict(frozen=True)

    id: str
    severity: Severity
    title: str
    url: str = ""
    vulnerable_versions: str = ""
    patched_version: str = "unknown"
    cwe: str | None = None


class BreakingChangeEntry(BaseModel):
    """Curated migration facts for one major version of a package."""

    model_config = ConfigDict(frozen=True)

    summary: str
    migration_url: str
    effort: EffortTier = EffortTier.LOW
    known_issues: tuple[str, ...] = ()


class BreakingChangeInfo(BaseModel):
    """Breaking change entry resolved for a concrete major jump."""

    model_config = ConfigDict(frozen=True)

    from_major: int
    to_major: int
    summary: str
    migration_url: str
    effort: EffortTier
    known_issues: tuple[str, ...] = ()


class VersionDelta(BaseModel):
    """Classification of a (current, latest) version pair."""

    model_config = ConfigDict(frozen=True)

    update_kind: UpdateKind
    current_major: int = 0
    latest_major: int = 0
    version_jump: str = "unknown"

    @property
    def is_major(self) -> bool:
        return self.update_kind == UpdateKind.MAJOR

    @property
    def is_minor(self) -> bool:
        return self.update_kind == UpdateKind.MINOR

    @property
    def is_patch(self) -> bool:
        return self.update_kind == UpdateKind.PATCH


class PackageAssessment(BaseModel):
    """Classifier output for a single package."""

    model_config = ConfigDict(frozen=True)

    package: PackageFact
    priority: Priority
    risk_score: int = Field(..., ge=0, le=100)
    effort: EffortTier
    reason: str = Field(..., min_length=1)
    why_it_matters: str = Field(..., min_length=1)
    update_command: str
    read_more_url: str | None = None
    advisories: tuple[SecurityAdvisory, ...] = ()
    delta: VersionDelta
    breaking_change: BreakingChangeInfo | None = None
    has_known_breaking_changes: bool = False
    is_dev_dependency: bool = False


class AnalysisSummary(BaseModel):
    """Aggregate counts, effort and recommendation for a run."""

    model_config = ConfigDict(frozen=True)

    total_packages: int = 0
    critical_count: int = 0
    important_count: int = 0
    safe_count: int = 0
    skip_count: int = 0
    total_vulnerabilities: int = 0
    critical_vulnerabilities: int = 0
    high_vulnerabilities: int = 0
    major_updates_available: int = 0
    estimated_hours: float = 0.0
    estimated_effort: str = "< 1 hour"
    recommendation: str = ""


class PackageAge(BaseModel):
    """Release-date facts for one outdated package."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    current_version: str
    latest_version: str
    current_publish_date: datetime | None = None
    latest_publish_date: datetime | None = None
    releases_behind: int = Field(default=0, ge=0)

    @field_validator("current_publish_date", "latest_publish_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        """Store publish dates as aware UTC datetimes."""
        return _as_utc(v)

    @property
    def days_outdated(self) -> int:
        """Whole days between the current and latest releases."""
        if self.current_publish_date is None or self.latest_publish_date is None:
            return 0
        delta = self.latest_publish_date - self.current_publish_date
        return max(0, int(delta.total_seconds() // 86400))

    @property
    def years_outdated(self) -> float:
        return self.days_outdated / 365


class LibyearMetrics(BaseModel):
    """Dependency freshness aggregated across the outdated set."""

    model_config = ConfigDict(frozen=True)

    total_libyears: float = 0.0
    avg_libyears: float = 0.0
    max_libyears: float = 0.0
    most_outdated: str | None = None
    drift_days: int = 0
    pulse: int = 0
    releases_behind: int = 0
    majors_behind: int = 0
    minors_behind: int = 0
    patches_behind: int = 0
    freshness_score: int = Field(default=100, ge=0, le=100)


class PackageHealth(BaseModel):
    """Registry health signals for a package."""

    model_config = ConfigDict(frozen=True)

    name: str
    weekly_downloads: int | None = None
    last_publish: datetime | None = None
    is_deprecated: bool = False
    has_types: bool | None = None

    @field_validator("last_publish")
    @classmethod
    def normalize_last_publish(cls, v: datetime | None) -> datetime | None:
        """Store the publish date as an aware UTC datetime."""
        return _as_utc(v)


class HealthSummary(BaseModel):
    """Packages grouped by maintenance signal."""

    model_config = ConfigDict(frozen=True)

    deprecated: list[str] = Field(default_factory=list)
    unmaintained: list[str] = Field(default_factory=list)
    low_usage: list[str] = Field(default_factory=list)
    healthy: int = 0


class AnalysisReport(BaseModel):
    """Complete prioritized report for one analysis run."""

    critical: list[PackageAssessment] = Field(default_factory=list)
    important: list[PackageAssessment] = Field(default_factory=list)
    safe: list[PackageAssessment] = Field(default_factory=list)
    skip: list[PackageAssessment] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_packages: int = 0
    security_score: int = Field(default=100, ge=0, le=100)
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    freshness: LibyearMetrics | None = None
    health: HealthSummary | None = None

    @model_validator(mode="after")
    def check_partition(self) -> "AnalysisReport":
        """Every package must land in exactly one bucket."""
        bucketed = len(self.critical) + len(self.important) + len(self.safe) + len(self.skip)
        if bucketed != self.total_packages:
            raise ValueError(
                f"bucket sizes ({bucketed}) do not match total_packages ({self.total_packages})"
            )
        return self

    def all_assessments(self) -> list[PackageAssessment]:
        """Return every assessment, most urgent bucket first."""
        return [*self.critical, *self.important, *self.safe, *self.skip]

    def find(self, package_name: str) -> PackageAssessment | None:
        """Look up an assessment by package name (case-insensitive)."""
        wanted = package_name.lower()
        for assessment in self.all_assessments():
            if assessment.package.name.lower() == wanted:
                return assessment
        return None
