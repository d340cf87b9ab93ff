"""Tests for npm JSON adapters."""

import json
from datetime import datetime, timezone

import pytest

from outdated_why.core.models import DependencyKind, Severity
from outdated_why.errors import AuditParseError, OutdatedParseError, RegistryParseError
from outdated_why.sources.npm import parse_audit_json, parse_outdated_json, parse_registry_json


class TestParseOutdated:
    """Tests for `npm outdated --json` parsing."""

    def test_parse_sample(self, outdated_data: dict) -> None:
        """Test every entry becomes a fact in listing order."""
        facts = parse_outdated_json(json.dumps(outdated_data))

        assert [f.name for f in facts] == ["lodash", "react", "@types/node", "axios"]
        react = facts[1]
        assert react.current_version == "17.0.2"
        assert react.wanted_version == "17.0.2"
        assert react.latest_version == "18.2.0"
        assert react.dependency_kind == DependencyKind.PRODUCTION
        assert facts[2].dependency_kind == DependencyKind.DEVELOPMENT

    def test_accepts_decoded_and_bytes(self, outdated_data: dict) -> None:
        """Test decoded objects and bytes are accepted."""
        assert len(parse_outdated_json(outdated_data)) == 4
        assert len(parse_outdated_json(json.dumps(outdated_data).encode())) == 4

    def test_empty_output(self) -> None:
        """Test npm prints nothing when all packages are current."""
        assert parse_outdated_json("") == []
        assert parse_outdated_json("{}") == []
        assert parse_outdated_json(None) == []

    def test_missing_fields_default(self) -> None:
        """Test missing versions and location fall back."""
        facts = parse_outdated_json({"ghost": {"latest": "2.0.0"}, "partial": {"current": "1.0.0"}})

        ghost, partial = facts
        assert ghost.current_version == "N/A"
        assert ghost.wanted_version == "N/A"
        assert ghost.latest_version == "2.0.0"
        assert ghost.location == "node_modules/ghost"
        assert partial.wanted_version == "1.0.0"
        assert partial.latest_version == "1.0.0"

    def test_workspace_list_uses_first_entry(self) -> None:
        """Test workspace listings take the first dependent."""
        facts = parse_outdated_json(
            {"vite": [{"current": "4.0.0", "wanted": "4.5.0", "latest": "5.0.0"}, {"current": "3.0.0"}]}
        )
        assert facts[0].current_version == "4.0.0"

    def test_malformed_entries_skipped(self) -> None:
        """Test non-object entries are ignored."""
        assert parse_outdated_json({"bad": "1.0.0", "also-bad": []}) == []

    @pytest.mark.parametrize("payload", ["{not json", "[1, 2]"])
    def test_invalid_json(self, payload: str) -> None:
        """Test invalid JSON raises a parse error."""
        with pytest.raises(OutdatedParseError):
            parse_outdated_json(payload)


class TestParseAudit:
    """Tests for `npm audit --json` parsing."""

    def test_parse_sample(self, audit_data: dict) -> None:
        """Test via objects become advisories."""
        advisories = parse_audit_json(audit_data)

        assert list(advisories) == ["lodash"]
        advisory = advisories["lodash"][0]
        assert advisory.id == "GHSA-1523"
        assert advisory.severity == Severity.HIGH
        assert advisory.title == "Command Injection in lodash"
        assert advisory.url == "https://github.com/advisories/GHSA-35jh-r3h4-6jhm"
        assert advisory.vulnerable_versions == "<4.17.21"
        assert advisory.patched_version == "4.17.21"
        assert advisory.cwe == "CWE-77"

    def test_transitive_only_gets_generic_advisory(self) -> None:
        """Test packages vulnerable only through others get one generic advisory."""
        advisories = parse_audit_json(
            {"vulnerabilities": {"express": {"severity": "moderate", "via": ["qs"], "fixAvailable": True}}}
        )
        generic = advisories["express"][0]
        assert generic.id == "unknown"
        assert generic.severity == Severity.MODERATE
        assert generic.title == "Security vulnerability detected"
        assert generic.url == "https://www.npmjs.com/advisories?search=express"
        assert generic.patched_version == "unknown"

    def test_defaults_for_sparse_via(self) -> None:
        """Test sparse via objects fall back to package-level data."""
        advisories = parse_audit_json(
            {"vulnerabilities": {"qs": {"severity": "medium", "range": "<6.2.4", "via": [{"source": 99}]}}}
        )
        advisory = advisories["qs"][0]
        assert advisory.severity == Severity.MODERATE
        assert advisory.url == "https://github.com/advisories/GHSA-99"
        assert advisory.vulnerable_versions == "<6.2.4"
        assert advisory.cwe is None

    def test_no_vulnerabilities(self) -> None:
        """Test clean audits produce nothing."""
        assert parse_audit_json({"auditReportVersion": 2, "vulnerabilities": {}}) == {}
        assert parse_audit_json("") == {}

    @pytest.mark.parametrize(
        ("bad_entry", "expected_id", "expected_severity"),
        [
            ({"severity": "high", "via": 5}, "unknown", Severity.HIGH),
            ({"severity": "high", "via": [{"source": 7, "severity": 5}]}, "GHSA-7", Severity.LOW),
            ({"severity": "high", "via": [{"source": 8, "title": 5}]}, "unknown", Severity.HIGH),
        ],
    )
    def test_malformed_advisories_skipped(
        self, audit_data: dict, bad_entry: dict, expected_id: str, expected_severity: Severity
    ) -> None:
        """Test one malformed vulnerability does not abort the whole audit."""
        audit_data["vulnerabilities"]["bad"] = bad_entry
        advisories = parse_audit_json(audit_data)

        assert advisories["lodash"][0].id == "GHSA-1523"
        assert [a.id for a in advisories["bad"]] == [expected_id]
        assert advisories["bad"][0].severity == expected_severity

    def test_invalid_json(self) -> None:
        """Test invalid JSON raises a parse error."""
        with pytest.raises(AuditParseError):
            parse_audit_json("nope")

    def test_non_utf8_bytes(self) -> None:
        """Test undecodable bytes raise a parse error."""
        with pytest.raises(AuditParseError, match="UTF-8"):
            parse_audit_json(b"\xff\xfe{}")


class TestParseRegistry:
    """Tests for registry metadata parsing."""

    def test_full_document(self) -> None:
        """Test a full `npm view` document."""
        metadata = parse_registry_json(
            "request",
            {
                "name": "request",
                "dist-tags": {"latest": "2.88.2"},
                "versions": ["2.88.0", "2.88.2"],
                "time": {"2.88.2": "2020-02-11T16:35:06.000Z"},
                "deprecated": "request has been deprecated",
                "weeklyDownloads": 15000000,
                "types": "index.d.ts",
            },
        )
        assert metadata.latest == "2.88.2"
        assert metadata.versions == ["2.88.0", "2.88.2"]

        health = metadata.to_health()
        assert health.is_deprecated
        assert health.has_types
        assert health.weekly_downloads == 15000000
        assert health.last_publish == datetime(2020, 2, 11, 16, 35, 6, tzinfo=timezone.utc)

    def test_plain_time_map(self) -> None:
        """Test `npm view <pkg> time --json` output is accepted."""
        metadata = parse_registry_json("axios", {"1.6.0": "2023-10-26T00:00:00Z", "1.6.2": "2023-11-14T00:00:00Z"})
        assert metadata.times["1.6.2"] == "2023-11-14T00:00:00Z"
        assert metadata.latest is None

    def test_latest_falls_back_to_last_version(self) -> None:
        """Test missing dist-tags use the last published version."""
        metadata = parse_registry_json("x", {"versions": ["1.0.0", "1.1.0"], "time": {}})
        assert metadata.latest == "1.1.0"
        assert metadata.to_health().last_publish is None

    def test_invalid_json_names_package(self) -> None:
        """Test parse errors mention the package."""
        with pytest.raises(RegistryParseError, match="lodash"):
            parse_registry_json("lodash", "{oops")

    @pytest.mark.parametrize("payload", [[{"time": {}}], 5, True])
    def test_non_object_payload(self, payload: object) -> None:
        """Test list, number and bool payloads raise a parse error."""
        with pytest.raises(RegistryParseError, match="Expected a JSON object"):
            parse_registry_json("left-pad", payload)
