"""Parsers for captured npm JSON output.

These adapters turn the JSON printed by ``npm outdated --json``,
``npm audit --json`` and ``npm view <pkg> --json`` into typed facts. They
never run npm themselves.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from outdated_why.analysis.freshness import parse_publish_time
from outdated_why.core.models import (
    DependencyKind,
    PackageFact,
    PackageHealth,
    SecurityAdvisory,
    Severity,
)
from outdated_why.errors import AuditParseError, OutdatedParseError, RegistryParseError
from outdated_why.utils.logging import get_logger

logger = get_logger(__name__)

GITHUB_ADVISORY_URL = "https://github.com/advisories/GHSA-{source}"
NPM_ADVISORY_SEARCH_URL = "https://www.npmjs.com/advisories?search={name}"


def _load_json(payload: str | bytes | dict[str, Any] | None, error: type[Exception]) -> dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return payload

    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise error(message=f"Input is not valid UTF-8: {e}") from e
    elif isinstance(payload, str):
        text = payload
    else:
        raise error(message=f"Expected a JSON object, got {type(payload).__name__}")

    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise error(message=f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise error(message=f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_outdated_json(payload: str | bytes | dict[str, Any] | None) -> list[PackageFact]:
    """Parse ``npm outdated --json`` output.

    Args:
        payload: Raw JSON text or an already-decoded object.

    Returns:
        One fact per outdated package, in listing order.

    Raises:
        OutdatedParseError: If the payload is not a JSON object.
    """
    data = _load_json(payload, OutdatedParseError)
    packages: list[PackageFact] = []

    for name, info in data.items():
        # Workspaces list one entry per dependent; the first is representative.
        if isinstance(info, list) and info:
            info = info[0]
        if not isinstance(info, dict):
            logger.debug("Skipping malformed outdated entry for %s", name)
            continue

        current = info.get("current") or "N/A"
        wanted = info.get("wanted") or current
        latest = info.get("latest") or wanted

        packages.append(
            PackageFact(
                name=name,
                current_version=current,
                wanted_version=wanted,
                latest_version=latest,
                dependency_kind=DependencyKind.from_npm_type(info.get("type")),
                location=info.get("location") or f"node_modules/{name}",
            )
        )

    logger.debug("Parsed %d outdated packages", len(packages))
    return packages


def _fixed_version(fix_available: Any) -> str:
    if isinstance(fix_available, dict) and fix_available.get("version"):
        return str(fix_available["version"])
    return "unknown"


def parse_audit_json(payload: str | bytes | dict[str, Any] | None) -> dict[str, list[SecurityAdvisory]]:
    """Parse ``npm audit --json`` output (npm 7 and newer).

    Each ``via`` object carrying a ``source`` id becomes one advisory.
    String ``via`` entries point at other vulnerable packages and are
    skipped. A vulnerable package with only a severity gets one generic
    advisory. Malformed entries are ignored.

    Args:
        payload: Raw JSON text or an already-decoded object.

    Returns:
        Mapping of package name to its advisories.

    Raises:
        AuditParseError: If the payload is not a JSON object.
    """
    data = _load_json(payload, AuditParseError)
    vulnerabilities = data.get("vulnerabilities") or {}
    if not isinstance(vulnerabilities, dict):
        logger.debug("Audit output has no vulnerabilities mapping")
        return {}

    advisories_map: dict[str, list[SecurityAdvisory]] = {}

    for name, vuln in vulnerabilities.items():
        if not isinstance(vuln, dict):
            logger.debug("Skipping malformed audit entry for %s", name)
            continue

        package_severity = vuln.get("severity")
        patched = _fixed_version(vuln.get("fixAvailable"))
        advisories: list[SecurityAdvisory] = []

        vias = vuln.get("via") or []
        if not isinstance(vias, list):
            logger.debug("Skipping malformed via list for %s", name)
            vias = []

        for via in vias:
            if not isinstance(via, dict) or not via.get("source"):
                continue

            source = via["source"]
            cwe = via.get("cwe")
            try:
                advisory = SecurityAdvisory(
                    id=f"GHSA-{source}",
                    severity=Severity.normalize(via.get("severity") or package_severity),
                    title=via.get("title") or "Security vulnerability",
                    url=via.get("url") or GITHUB_ADVISORY_URL.format(source=source),
                    vulnerable_versions=via.get("range") or vuln.get("range") or "",
                    patched_version=patched,
                    cwe=", ".join(str(c) for c in cwe) if isinstance(cwe, list) and cwe else None,
                )
            except ValidationError as e:
                logger.debug("Skipping malformed advisory %s for %s: %s", source, name, e)
                continue
            advisories.append(advisory)

        if advisories:
            advisories_map[name] = advisories
        elif package_severity:
            try:
                generic = SecurityAdvisory(
                    id="unknown",
                    severity=Severity.normalize(package_severity),
                    title="Security vulnerability detected",
                    url=NPM_ADVISORY_SEARCH_URL.format(name=name),
                    vulnerable_versions=vuln.get("range") or "",
                    patched_version=patched,
                )
            except ValidationError as e:
                logger.debug("Skipping malformed audit entry for %s: %s", name, e)
                continue
            advisories_map[name] = [generic]

    logger.debug("Parsed advisories for %d packages", len(advisories_map))
    return advisories_map


@dataclass
class RegistryMetadata:
    """Registry facts for one package (``npm view <pkg> --json``)."""

    name: str
    times: dict[str, str] = field(default_factory=dict)
    versions: list[str] = field(default_factory=list)
    latest: str | None = None
    deprecated: str | None = None
    has_types: bool | None = None
    weekly_downloads: int | None = None

    def to_health(self) -> PackageHealth:
        """Build health signals from the registry facts."""
        last_publish = None
        if self.latest:
            last_publish = parse_publish_time(self.times.get(self.latest))

        return PackageHealth(
            name=self.name,
            weekly_downloads=self.weekly_downloads,
            last_publish=last_publish,
            is_deprecated=bool(self.deprecated),
            has_types=self.has_types,
        )


def parse_registry_json(name: str, payload: str | bytes | dict[str, Any] | None) -> RegistryMetadata:
    """Parse registry metadata for one package.

    Accepts the full ``npm view <pkg> --json`` document or the narrower
    ``npm view <pkg> time versions --json`` one. A plain ``time`` map (as
    printed by ``npm view <pkg> time --json``) is also accepted.

    Args:
        name: Package name.
        payload: Raw JSON text or an already-decoded object.

    Returns:
        The parsed metadata.

    Raises:
        RegistryParseError: If the payload is not a JSON object.
    """
    try:
        data = _load_json(payload, RegistryParseError)
    except RegistryParseError as e:
        raise RegistryParseError(name, message=f"Registry metadata for {name}: {e.message}") from e

    if "time" not in data and "versions" not in data and all(isinstance(v, str) for v in data.values()):
        data = {"time": data}

    times = data.get("time") or {}
    if not isinstance(times, dict):
        times = {}

    versions = data.get("versions") or []
    if isinstance(versions, str):
        versions = [versions]
    elif not isinstance(versions, list):
        versions = []

    dist_tags = data.get("dist-tags") or {}
    latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
    if not latest and versions:
        latest = str(versions[-1])

    has_types = None
    if "types" in data or "typings" in data:
        has_types = bool(data.get("types") or data.get("typings"))

    downloads = data.get("weeklyDownloads", data.get("downloads"))

    return RegistryMetadata(
        name=name,
        times={str(k): str(v) for k, v in times.items()},
        versions=[str(v) for v in versions],
        latest=latest,
        deprecated=data.get("deprecated") or None,
        has_types=has_types,
        weekly_downloads=downloads if isinstance(downloads, int) else None,
    )
