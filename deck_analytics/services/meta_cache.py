"""Bounded TTL cache for meta-game snapshots.

Snapshots are keyed by data source. Expired entries are not dropped on
read: they stay available as the last-known-good snapshot so callers can
be served while a refresh runs, and only leave the cache through
eviction, invalidation or ``clear()``.

Usage:
    cache = MetaSnapshotCache()

    entry = cache.get("default")
    if entry and not entry.is_expired():
        return entry.snapshot

    cache.put("default", snapshot)
"""

import time
from dataclasses import dataclass
from typing import Any

from deck_analytics.core.config import DEFAULT_META_CACHE_TTL, get_settings
from deck_analytics.models.meta_models import MetaGameData

# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class MetaCacheConfig:
    """Configuration for the meta snapshot cache.

    Attributes:
        enabled: Whether caching is enabled.
        ttl: Seconds a snapshot counts as fresh.
        max_entries: Maximum number of cached snapshots (0 = unlimited).
    """

    enabled: bool = True
    ttl: int = DEFAULT_META_CACHE_TTL
    max_entries: int = 16

    @classmethod
    def default(cls) -> "MetaCacheConfig":
        return cls()

    @classmethod
    def from_env(cls) -> "MetaCacheConfig":
        """Create config from the engine settings.

        Environment variables (read by ``get_settings``):
            META_CACHE_ENABLED: "true" or "false" (default: "true")
            META_CACHE_TTL_SECONDS: Freshness window in seconds (default: 900)
            META_CACHE_MAX_ENTRIES: Max snapshots (default: 16)
        """
        settings = get_settings()
        return cls(
            enabled=settings.meta_cache_enabled,
            ttl=settings.meta_cache_ttl,
            max_entries=settings.meta_cache_max_entries,
        )

    @classmethod
    def disabled(cls) -> "MetaCacheConfig":
        return cls(enabled=False)


# =============================================================================
# Cache Entry
# =============================================================================


@dataclass
class SnapshotEntry:
    """A cached snapshot.

    Attributes:
        snapshot: The cached MetaGameData.
        created_at: Unix timestamp when the entry was stored.
        ttl: Freshness window in seconds.
        source_key: Key of the data source that produced it.
    """

    snapshot: MetaGameData
    created_at: float
    ttl: int
    source_key: str

    def is_expired(self, now: float | None = None) -> bool:
        if self.ttl <= 0:
            return True
        return (now if now is not None else time.time()) > self.created_at + self.ttl

    def age(self) -> float:
        return max(0.0, time.time() - self.created_at)


# =============================================================================
# Cache Metrics
# =============================================================================


@dataclass
class CacheMetrics:
    """Counters for cache behaviour.

    Attributes:
        hits: Fresh snapshots served.
        misses: Lookups with no usable fresh snapshot.
        stale_served: Expired snapshots served as last-known-good.
        evictions: Entries evicted to respect max_entries.
    """

    hits: int = 0
    misses: int = 0
    stale_served: int = 0
    evictions: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage (0.0 when there were no requests)."""
        if self.total_requests == 0:
            return 0.0
        return (self.hits / self.total_requests) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "stale_served": self.stale_served,
            "evictions": self.evictions,
            "total_requests": self.total_requests,
            "hit_rate": round(self.hit_rate, 2),
        }


# =============================================================================
# Snapshot Cache
# =============================================================================


class MetaSnapshotCache:
    """In-memory snapshot store with TTL freshness and bounded size.

    Reads never block and never remove entries. Not thread-safe; the
    aggregator uses it from a single event loop.
    """

    def __init__(self, config: MetaCacheConfig | None = None):
        self.config = config or MetaCacheConfig.default()
        self._entries: dict[str, SnapshotEntry] = {}
        self._metrics = CacheMetrics()

    def get(self, source_key: str) -> SnapshotEntry | None:
        """Return the entry for a source, fresh or stale, and record metrics."""
        if not self.config.enabled:
            self._metrics.misses += 1
            return None

        entry = self._entries.get(source_key)
        if entry is None:
            self._metrics.misses += 1
            return None

        if entry.is_expired():
            self._metrics.misses += 1
            return entry

        self._metrics.hits += 1
        return entry

    def mark_stale_served(self) -> None:
        self._metrics.stale_served += 1

    def put(self, source_key: str, snapshot: MetaGameData) -> None:
        if not self.config.enabled:
            return

        if source_key not in self._entries:
            self._evict_if_needed()

        self._entries[source_key] = SnapshotEntry(
            snapshot=snapshot,
            created_at=time.time(),
            ttl=self.config.ttl,
            source_key=source_key,
        )

    def _evict_if_needed(self) -> None:
        if self.config.max_entries <= 0:
            return

        while len(self._entries) >= self.config.max_entries:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].created_at)
            del self._entries[oldest_key]
            self._metrics.evictions += 1

    def invalidate(self, source_key: str | None = None) -> int:
        """Drop one source's snapshot, or every snapshot when no key is given.

        Returns:
            Number of entries removed.
        """
        if source_key is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        return 1 if self._entries.pop(source_key, None) is not None else 0

    def clear(self) -> None:
        self._entries.clear()

    def get_metrics(self) -> CacheMetrics:
        return self._metrics

    def reset_metrics(self) -> None:
        self._metrics = CacheMetrics()

    def size(self) -> int:
        return len(self._entries)
