"""Per-run memoization of registry lookups."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from outdated_why.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheStats:
    """Hit/miss counters for a cache."""

    hits: int = 0
    misses: int = 0
    entries: int = 0


class RegistryCache(Generic[T]):
    """In-memory cache of registry lookups keyed by package name.

    One instance belongs to one analysis run and is owned by whoever
    fetches registry data. Repeated lookups of the same package within the
    run return the stored value; nothing survives past the instance.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[str, T] = {}
        self._hits = 0
        self._misses = 0

    def __contains__(self, package_name: str) -> bool:
        return package_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, package_name: str) -> T | None:
        """Get a cached value.

        Args:
            package_name: Package name.

        Returns:
            Cached value or None if not present.
        """
        if package_name in self._entries:
            self._hits += 1
            return self._entries[package_name]

        self._misses += 1
        return None

    def set(self, package_name: str, value: T) -> None:
        """Store a value for a package."""
        self._entries[package_name] = value

    def delete(self, package_name: str) -> None:
        """Drop a package from the cache."""
        self._entries.pop(package_name, None)

    def get_or_load(self, package_name: str, loader: Callable[[str], T]) -> T:
        """Return the cached value, calling ``loader`` on the first lookup.

        Args:
            package_name: Package name.
            loader: Fetches the value for a package name.

        Returns:
            The cached or freshly loaded value.
        """
        if package_name in self._entries:
            self._hits += 1
            return self._entries[package_name]

        self._misses += 1
        logger.debug("Registry cache miss for %s", package_name)
        value = loader(package_name)
        self._entries[package_name] = value
        return value

    def clear(self) -> None:
        """Remove every entry and reset the counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        """Return hit/miss counters and the number of entries."""
        return CacheStats(hits=self._hits, misses=self._misses, entries=len(self._entries))
