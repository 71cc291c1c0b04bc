"""Meta-game aggregation.

Turns raw counts from a ``MetaStatsSource`` into the ``MetaGameData``
view: category breakdown, popular cards, trending cards and archetype
summaries. The aggregator keeps the last snapshot in a
``MetaSnapshotCache``; once it goes stale, callers keep receiving it while
a single background refresh runs.

Key invariants:
- meta breakdown percentages sum to exactly 100 (largest remainder)
- popular cards are ordered by usage rate, highest first
- trend direction is derived from change_percent, never stored
"""

import asyncio
import math
from datetime import UTC, datetime
from typing import Protocol

from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.meta_models import (
    ArchetypeRecord,
    ArchetypeSummary,
    CardTrendRecord,
    CardUsageRecord,
    MetaArchetype,
    MetaBreakdown,
    MetaGameData,
    MetaSnapshot,
    MetaStats,
    PopularCard,
    TrendingCard,
)
from deck_analytics.services.exceptions import MetaDataUnavailableError
from deck_analytics.services.meta_cache import MetaCacheConfig, MetaSnapshotCache

logger = get_logger(__name__)

BREAKDOWN_CATEGORIES = ("control_decks", "aggro_decks", "midrange_decks", "combo_decks")

# Usage change (percentage points) before an archetype counts as rising/falling
MOVEMENT_THRESHOLD = 1.0
TOP_ARCHETYPES = 5


class MetaStatsSource(Protocol):
    """Anything that can load raw meta statistics."""

    async def load(self) -> MetaStats: ...


# =============================================================================
# Aggregation
# =============================================================================


def _percent(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return min(100.0, round(100 * part / whole, 1))


def build_meta_breakdown(category_counts: dict[str, int]) -> MetaBreakdown:
    """Convert category deck counts into percentages summing to exactly 100.

    Uses the largest remainder method at 0.1% resolution. With no data the
    field is split evenly.
    """
    counts = [max(category_counts.get(c, 0), 0) for c in BREAKDOWN_CATEGORIES]
    total = sum(counts)
    if total == 0:
        share = 100 / len(BREAKDOWN_CATEGORIES)
        return MetaBreakdown(**{c: share for c in BREAKDOWN_CATEGORIES})

    units = 1000
    raw = [count * units / total for count in counts]
    floored = [math.floor(r) for r in raw]
    remainder = units - sum(floored)
    by_fraction = sorted(range(len(raw)), key=lambda i: raw[i] - floored[i], reverse=True)
    for i in by_fraction[:remainder]:
        floored[i] += 1

    return MetaBreakdown(
        **{c: floored[i] / 10 for i, c in enumerate(BREAKDOWN_CATEGORIES)}
    )


def _popular_card(record: CardUsageRecord, total_decks: int) -> PopularCard:
    return PopularCard(
        card=record.card,
        usage_rate=_percent(record.decks_used, total_decks),
        win_rate=_percent(record.games_won, record.games_played),
        decks_used=record.decks_used,
    )


def _trending_card(record: CardTrendRecord) -> TrendingCard:
    previous = record.previous_usage_rate
    current = record.current_usage_rate
    if previous > 0:
        change = round(100 * (current - previous) / previous, 1)
    else:
        change = 100.0 if current > 0 else 0.0
    return TrendingCard(card=record.card, change_percent=change, period_days=record.period_days)


def _archetype_summary(record: ArchetypeRecord, total_decks: int) -> ArchetypeSummary:
    usage = _percent(record.decks, total_decks)
    change = 0.0
    if record.previous_usage_rate is not None:
        change = round(usage - record.previous_usage_rate, 1)
    return ArchetypeSummary(
        name=record.name,
        description=record.description,
        win_rate=_percent(record.games_won, record.games_played),
        usage_rate=usage,
        usage_change=change,
        key_cards=list(record.key_cards),
    )


def build_meta_game_data(stats: MetaStats) -> MetaGameData:
    """Aggregate raw statistics into a MetaGameData snapshot."""
    popular = sorted(
        (_popular_card(r, stats.total_decks) for r in stats.card_usage),
        key=lambda p: p.usage_rate,
        reverse=True,
    )
    trending = sorted(
        (_trending_card(r) for r in stats.card_trends),
        key=lambda t: abs(t.change_percent),
        reverse=True,
    )
    archetypes = sorted(
        (_archetype_summary(r, stats.total_decks) for r in stats.archetypes),
        key=lambda a: a.usage_rate,
        reverse=True,
    )

    return MetaGameData(
        meta_breakdown=build_meta_breakdown(stats.category_counts),
        popular_cards=popular,
        trending_cards=trending,
        popular_archetypes=archetypes,
    )


def build_meta_snapshot(data: MetaGameData, date: datetime | None = None) -> MetaSnapshot:
    """Derive the dated top-archetype view from a MetaGameData snapshot."""
    top = [
        MetaArchetype(
            name=a.name,
            percentage=a.usage_rate,
            win_rate=a.win_rate,
            key_cards=a.key_cards,
            description=a.description,
        )
        for a in data.popular_archetypes[:TOP_ARCHETYPES]
    ]
    return MetaSnapshot(
        date=date or datetime.now(UTC),
        top_archetypes=top,
        rising_archetypes=[
            a.name for a in data.popular_archetypes if a.usage_change >= MOVEMENT_THRESHOLD
        ],
        falling_archetypes=[
            a.name for a in data.popular_archetypes if a.usage_change <= -MOVEMENT_THRESHOLD
        ],
    )


# =============================================================================
# Built-in source
# =============================================================================


class StaticMetaSource:
    """Serves a fixed MetaStats snapshot.

    The default snapshot reflects the current reference field so the
    engine has something to work with before an external source is wired
    in.
    """

    def __init__(self, stats: MetaStats | None = None):
        self._stats = stats or default_meta_stats()

    async def load(self) -> MetaStats:
        return self._stats


def default_meta_stats() -> MetaStats:
    return MetaStats(
        total_decks=1000,
        category_counts={
            "control_decks": 350,
            "aggro_decks": 280,
            "midrange_decks": 250,
            "combo_decks": 120,
        },
        archetypes=[
            ArchetypeRecord(
                name="Federation Control",
                description="Control-based deck focusing on Earth Federation units",
                decks=152,
                games_played=1000,
                games_won=583,
                previous_usage_rate=14.0,
            ),
            ArchetypeRecord(
                name="Zeon Aggro",
                description="Fast aggressive deck using Zeon mobile suits",
                decks=187,
                games_played=1000,
                games_won=521,
                previous_usage_rate=19.5,
            ),
        ],
    )


# =============================================================================
# Aggregator
# =============================================================================


class MetaGameAggregator:
    """Serves MetaGameData snapshots backed by a source and a TTL cache.

    Example:
        aggregator = MetaGameAggregator(source=MyWarehouseSource())
        data = await aggregator.get_meta_game_data()
    """

    def __init__(
        self,
        source: MetaStatsSource | None = None,
        cache: MetaSnapshotCache | None = None,
        source_key: str = "default",
    ):
        self._source = source or StaticMetaSource()
        self._cache = cache or MetaSnapshotCache(MetaCacheConfig.from_env())
        self._source_key = source_key
        self._inflight: asyncio.Future[MetaGameData] | None = None

    @property
    def cache(self) -> MetaSnapshotCache:
        return self._cache

    async def get_meta_game_data(self) -> MetaGameData:
        """Return the current snapshot.

        Fresh cached snapshots are returned directly. A stale snapshot is
        returned immediately while a background refresh runs. With nothing
        cached the caller waits for the load.

        Raises:
            MetaDataUnavailableError: The source failed and nothing is cached.
        """
        entry = self._cache.get(self._source_key)
        if entry is not None and not entry.is_expired():
            return entry.snapshot

        if entry is not None:
            self._cache.mark_stale_served()
            self._schedule_refresh()
            logger.info(
                "Serving stale meta snapshot while refreshing",
                extra={"extra_data": {"source": self._source_key, "age": round(entry.age(), 1)}},
            )
            return entry.snapshot

        return await self.refresh()

    async def get_current_meta(self) -> MetaSnapshot:
        return build_meta_snapshot(await self.get_meta_game_data())

    async def refresh(self) -> MetaGameData:
        """Load a new snapshot, joining a load already in flight."""
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._inflight)

    def _schedule_refresh(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            return
        self._inflight = asyncio.ensure_future(self._load())
        self._inflight.add_done_callback(self._report_background_failure)

    def _report_background_failure(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                "Background meta refresh failed; keeping last-known-good snapshot",
                extra={"extra_data": {"source": self._source_key, "error": str(error)}},
            )

    async def _load(self) -> MetaGameData:
        try:
            stats = await self._source.load()
        except Exception as e:
            logger.warning(
                "Meta data source failed",
                extra={"extra_data": {"source": self._source_key, "error": str(e)}},
            )
            raise MetaDataUnavailableError(f"Meta data source unavailable: {e}") from e

        snapshot = build_meta_game_data(stats)
        self._cache.put(self._source_key, snapshot)
        logger.info(
            "Meta snapshot refreshed",
            extra={
                "extra_data": {
                    "source": self._source_key,
                    "total_decks": stats.total_decks,
                    "archetypes": len(snapshot.popular_archetypes),
                }
            },
        )
        return snapshot


# =============================================================================
# Global aggregator instance
# =============================================================================


_default_aggregator: MetaGameAggregator | None = None


def get_meta_aggregator() -> MetaGameAggregator:
    """Get the default aggregator instance."""
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = MetaGameAggregator()
    return _default_aggregator


def reset_meta_aggregator() -> None:
    """Reset the global aggregator instance.

    Useful for testing or reconfiguration.
    """
    global _default_aggregator
    _default_aggregator = None


async def get_meta_game_data() -> MetaGameData:
    """Return the default aggregator's current MetaGameData."""
    return await get_meta_aggregator().get_meta_game_data()
