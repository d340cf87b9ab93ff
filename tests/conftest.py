"""Pytest configuration and fixtures for outdated-why tests."""

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from outdated_why.core.models import DependencyKind, PackageFact, SecurityAdvisory, Severity


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_fact() -> Callable[..., PackageFact]:
    """Factory for outdated package facts."""

    def _make(
        name: str = "left-pad",
        current: str = "1.0.0",
        latest: str = "1.0.1",
        kind: DependencyKind = DependencyKind.PRODUCTION,
        wanted: str | None = None,
    ) -> PackageFact:
        return PackageFact(
            name=name,
            current_version=current,
            wanted_version=wanted or latest,
            latest_version=latest,
            dependency_kind=kind,
            location=f"node_modules/{name}",
        )

    return _make


@pytest.fixture
def make_advisory() -> Callable[..., SecurityAdvisory]:
    """Factory for security advisories."""

    def _make(
        severity: Severity = Severity.HIGH,
        title: str = "Prototype Pollution",
        advisory_id: str = "GHSA-1234",
        url: str = "https://github.com/advisories/GHSA-1234",
    ) -> SecurityAdvisory:
        return SecurityAdvisory(
            id=advisory_id,
            severity=severity,
            title=title,
            url=url,
            vulnerable_versions="<4.17.21",
            patched_version="4.17.21",
        )

    return _make


OUTDATED_JSON = {
    "lodash": {
        "current": "4.17.20",
        "wanted": "4.17.21",
        "latest": "4.17.21",
        "dependent": "sample-project",
        "location": "node_modules/lodash",
    },
    "react": {
        "current": "17.0.2",
        "wanted": "17.0.2",
        "latest": "18.2.0",
        "dependent": "sample-project",
        "location": "node_modules/react",
        "type": "dependencies",
    },
    "@types/node": {
        "current": "20.10.0",
        "wanted": "20.11.5",
        "latest": "20.11.5",
        "dependent": "sample-project",
        "location": "node_modules/@types/node",
        "type": "devDependencies",
    },
    "axios": {
        "current": "1.6.0",
        "wanted": "1.6.2",
        "latest": "1.6.2",
        "dependent": "sample-project",
        "location": "node_modules/axios",
        "type": "dependencies",
    },
}

AUDIT_JSON = {
    "auditReportVersion": 2,
    "vulnerabilities": {
        "lodash": {
            "name": "lodash",
            "severity": "high",
            "isDirect": True,
            "via": [
                {
                    "source": 1523,
                    "name": "lodash",
                    "dependency": "lodash",
                    "title": "Command Injection in lodash",
                    "url": "https://github.com/advisories/GHSA-35jh-r3h4-6jhm",
                    "severity": "high",
                    "cwe": ["CWE-77"],
                    "range": "<4.17.21",
                }
            ],
            "effects": [],
            "range": "<4.17.21",
            "nodes": ["node_modules/lodash"],
            "fixAvailable": {"name": "lodash", "version": "4.17.21", "isSemVerMajor": False},
        }
    },
    "metadata": {"vulnerabilities": {"high": 1, "total": 1}},
}

REGISTRY_JSON = {
    "lodash": {
        "name": "lodash",
        "dist-tags": {"latest": "4.17.21"},
        "versions": ["4.17.19", "4.17.20", "4.17.21"],
        "time": {
            "4.17.19": "2020-07-08T17:14:40.866Z",
            "4.17.20": "2020-08-13T16:53:54.152Z",
            "4.17.21": "2021-02-20T15:42:16.891Z",
        },
    },
    "react": {
        "name": "react",
        "dist-tags": {"latest": "18.2.0"},
        "versions": ["17.0.2", "18.0.0", "18.1.0", "18.2.0"],
        "time": {
            "17.0.2": "2021-03-22T21:56:19.536Z",
            "18.0.0": "2022-03-29T15:59:05.321Z",
            "18.1.0": "2022-04-26T16:18:23.146Z",
            "18.2.0": "2022-06-14T19:46:38.369Z",
        },
    },
}


@pytest.fixture
def outdated_data() -> dict:
    """Decoded `npm outdated --json` sample."""
    return json.loads(json.dumps(OUTDATED_JSON))


@pytest.fixture
def audit_data() -> dict:
    """Decoded `npm audit --json` sample."""
    return json.loads(json.dumps(AUDIT_JSON))


@pytest.fixture
def registry_data() -> dict:
    """Decoded registry metadata keyed by package name."""
    return json.loads(json.dumps(REGISTRY_JSON))


@pytest.fixture
def outdated_file(temp_dir: Path) -> Path:
    """Write a sample `npm outdated --json` capture."""
    path = temp_dir / "outdated.json"
    path.write_text(json.dumps(OUTDATED_JSON))
    return path


@pytest.fixture
def audit_file(temp_dir: Path) -> Path:
    """Write a sample `npm audit --json` capture."""
    path = temp_dir / "audit.json"
    path.write_text(json.dumps(AUDIT_JSON))
    return path


@pytest.fixture
def registry_file(temp_dir: Path) -> Path:
    """Write sample registry metadata keyed by package name."""
    path = temp_dir / "registry.json"
    path.write_text(json.dumps(REGISTRY_JSON))
    return path


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample .outdated-why.yml configuration file."""
    content = """version: 1

analysis:
  package_manager: pnpm
  include_dev: true
  ignore:
    - left-pad

ci:
  fail_on: important

output:
  format: markdown
"""
    file_path = temp_dir / ".outdated-why.yml"
    file_path.write_text(content)
    return file_path


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration environment variables for testing."""
    monkeypatch.delenv("OUTDATED_WHY_PACKAGE_MANAGER", raising=False)
    monkeypatch.delenv("OUTDATED_WHY_FAIL_ON", raising=False)
