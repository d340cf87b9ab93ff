"""Adapters turning captured package manager output into typed facts."""

from outdated_why.sources.cache import CacheStats, RegistryCache
from outdated_why.sources.npm import (
    RegistryMetadata,
    parse_audit_json,
    parse_outdated_json,
    parse_registry_json,
)

__all__ = [
    "CacheStats",
    "RegistryCache",
    "RegistryMetadata",
    "parse_audit_json",
    "parse_outdated_json",
    "parse_registry_json",
]
