"""Tests for meta-game aggregation and the aggregator."""

import asyncio
from datetime import UTC, datetime

import pytest

from deck_analytics.models.deck_models import CardRef
from deck_analytics.models.meta_models import (
    CardTrendRecord,
    CardUsageRecord,
    MetaBreakdown,
    MetaStats,
    TrendingCard,
)
from deck_analytics.services.exceptions import MetaDataUnavailableError
from deck_analytics.services.meta_cache import MetaCacheConfig, MetaSnapshotCache
from deck_analytics.services.meta_game import (
    MetaGameAggregator,
    StaticMetaSource,
    build_meta_breakdown,
    build_meta_game_data,
    build_meta_snapshot,
    default_meta_stats,
    get_meta_aggregator,
    reset_meta_aggregator,
)


def _card(card_id: str) -> CardRef:
    return CardRef(id=card_id, name=card_id.title())


class CountingSource:
    """Source that records how often it is loaded."""

    def __init__(self, stats=None, delay=0.0):
        self.calls = 0
        self.stats = stats or default_meta_stats()
        self.delay = delay

    async def load(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.stats


class FlakySource(CountingSource):
    """Source that succeeds once, then fails."""

    async def load(self):
        self.calls += 1
        if self.calls > 1:
            raise ConnectionError("warehouse offline")
        return self.stats


class BrokenSource:
    async def load(self):
        raise ConnectionError("warehouse offline")


@pytest.fixture(autouse=True)
def reset_aggregator():
    """Reset the global aggregator before and after each test."""
    reset_meta_aggregator()
    yield
    reset_meta_aggregator()


# =============================================================================
# Aggregation Tests
# =============================================================================


class TestMetaBreakdown:
    """Tests for build_meta_breakdown."""

    def test_sums_to_100(self):
        """Percentages always sum to exactly 100."""
        breakdown = build_meta_breakdown(
            {"control_decks": 1, "aggro_decks": 1, "midrange_decks": 1}
        )

        assert breakdown.total() == pytest.approx(100.0)
        assert breakdown.combo_decks == 0.0

    def test_proportional_shares(self):
        """Shares follow the deck counts."""
        breakdown = build_meta_breakdown(default_meta_stats().category_counts)

        assert breakdown.control_decks == 35.0
        assert breakdown.aggro_decks == 28.0
        assert breakdown.combo_decks == 12.0

    def test_awkward_counts_still_sum_to_100(self):
        """Remainders are distributed so rounding never drifts."""
        breakdown = build_meta_breakdown(
            {"control_decks": 7, "aggro_decks": 11, "midrange_decks": 13, "combo_decks": 17}
        )

        assert breakdown.total() == pytest.approx(100.0)

    def test_no_data_splits_evenly(self):
        """An empty field is split evenly."""
        breakdown = build_meta_breakdown({})

        assert breakdown.control_decks == 25.0
        assert breakdown.total() == pytest.approx(100.0)

    def test_archetype_weights(self):
        """Categories map onto named archetype profiles."""
        breakdown = MetaBreakdown(
            control_decks=40, aggro_decks=30, midrange_decks=20, combo_decks=10
        )

        assert breakdown.as_archetype_weights() == {
            "Control Lock": 40,
            "Aggro Rush": 30,
            "Midrange Value": 20,
            "Combo Engine": 10,
        }


class TestTrendingCards:
    """Tests for trend direction derivation."""

    @pytest.mark.parametrize(
        "previous,current,direction",
        [(10, 15, "up"), (10, 5, "down"), (10, 10, "stable"), (0, 5, "up"), (0, 0, "stable")],
    )
    def test_direction_matches_change(self, previous, current, direction):
        """trend_direction always follows the sign of change_percent."""
        stats = MetaStats(
            card_trends=[
                CardTrendRecord(
                    card=_card("x"), previous_usage_rate=previous, current_usage_rate=current
                )
            ]
        )

        trending = build_meta_game_data(stats).trending_cards[0]

        assert trending.trend_direction == direction

    @pytest.mark.parametrize("change", [-12.5, -0.1, 0.0, 0.1, 40.0])
    def test_direction_is_derived(self, change):
        """The direction is serialised but never stored independently."""
        card = TrendingCard(card=_card("x"), change_percent=change, period_days=7)

        dumped = card.model_dump()
        expected = "up" if change > 0 else "down" if change < 0 else "stable"
        assert dumped["trend_direction"] == expected

    def test_sorted_by_magnitude(self):
        """Biggest movers come first, whichever direction."""
        stats = MetaStats(
            card_trends=[
                CardTrendRecord(card=_card("a"), previous_usage_rate=10, current_usage_rate=11),
                CardTrendRecord(card=_card("b"), previous_usage_rate=10, current_usage_rate=2),
                CardTrendRecord(card=_card("c"), previous_usage_rate=10, current_usage_rate=14),
            ]
        )

        trending = build_meta_game_data(stats).trending_cards

        assert [t.card.id for t in trending] == ["b", "c", "a"]


class TestMetaGameData:
    """Tests for build_meta_game_data."""

    def test_popular_cards_sorted_by_usage(self):
        """Popular cards come out most used first."""
        stats = MetaStats(
            total_decks=200,
            card_usage=[
                CardUsageRecord(card=_card("a"), decks_used=20, games_played=100, games_won=40),
                CardUsageRecord(card=_card("b"), decks_used=150, games_played=100, games_won=55),
                CardUsageRecord(card=_card("c"), decks_used=80),
            ],
        )

        popular = build_meta_game_data(stats).popular_cards

        assert [p.card.id for p in popular] == ["b", "c", "a"]
        assert popular[0].usage_rate == 75.0
        assert popular[0].win_rate == 55.0
        assert popular[1].win_rate == 0.0

    def test_empty_stats_are_valid(self):
        """No data is an empty snapshot, not an error."""
        data = build_meta_game_data(MetaStats())

        assert data.popular_cards == []
        assert data.trending_cards == []
        assert not data.has_data

    def test_default_archetypes(self):
        """Archetypes are ordered by usage with win rates from game counts."""
        data = build_meta_game_data(default_meta_stats())

        names = [a.name for a in data.popular_archetypes]
        assert names == ["Zeon Aggro", "Federation Control"]
        assert data.archetype_win_rates()["Federation Control"] == 58.3

    def test_snapshot_movement(self):
        """Rising and falling archetypes follow usage change."""
        data = build_meta_game_data(default_meta_stats())
        date = datetime(2025, 1, 1, tzinfo=UTC)

        snapshot = build_meta_snapshot(data, date=date)

        assert snapshot.date == date
        assert snapshot.rising_archetypes == ["Federation Control"]
        assert snapshot.falling_archetypes == []
        assert snapshot.top_archetypes[0].name == "Zeon Aggro"
        assert snapshot.top_archetypes[0].percentage == 18.7


# =============================================================================
# Aggregator Tests
# =============================================================================


class TestMetaGameAggregator:
    """Tests for the cached aggregator."""

    def test_loads_and_caches(self):
        """A fresh snapshot is served from cache on the second call."""
        source = CountingSource()
        aggregator = MetaGameAggregator(source=source, cache=MetaSnapshotCache())

        async def run():
            first = await aggregator.get_meta_game_data()
            second = await aggregator.get_meta_game_data()
            return first, second

        first, second = asyncio.run(run())

        assert first == second
        assert source.calls == 1
        assert aggregator.cache.get_metrics().hits == 1

    def test_concurrent_cold_callers_share_load(self):
        """Callers arriving during a load join it instead of starting another."""
        source = CountingSource(delay=0.01)
        aggregator = MetaGameAggregator(source=source, cache=MetaSnapshotCache())

        async def run():
            return await asyncio.gather(
                aggregator.get_meta_game_data(),
                aggregator.get_meta_game_data(),
                aggregator.get_meta_game_data(),
            )

        results = asyncio.run(run())

        assert source.calls == 1
        assert results[0] == results[1] == results[2]

    def test_stale_snapshot_served_while_refreshing(self):
        """An expired snapshot is returned immediately and refreshed in the background."""
        source = CountingSource()
        cache = MetaSnapshotCache(MetaCacheConfig(ttl=0))
        aggregator = MetaGameAggregator(source=source, cache=cache)

        async def run():
            first = await aggregator.get_meta_game_data()
            stale = await aggregator.get_meta_game_data()
            await asyncio.sleep(0.01)
            return first, stale

        first, stale = asyncio.run(run())

        assert stale == first
        assert source.calls == 2
        assert cache.get_metrics().stale_served == 1

    def test_source_failure_keeps_last_known_good(self):
        """A failing refresh never hides the stale snapshot."""
        source = FlakySource()
        aggregator = MetaGameAggregator(
            source=source, cache=MetaSnapshotCache(MetaCacheConfig(ttl=0))
        )

        async def run():
            first = await aggregator.get_meta_game_data()
            stale = await aggregator.get_meta_game_data()
            await asyncio.sleep(0.01)
            again = await aggregator.get_meta_game_data()
            return first, stale, again

        first, stale, again = asyncio.run(run())

        assert stale == first
        assert again == first

    def test_cold_failure_raises(self):
        """With nothing cached a source failure surfaces as a typed error."""
        aggregator = MetaGameAggregator(source=BrokenSource(), cache=MetaSnapshotCache())

        with pytest.raises(MetaDataUnavailableError, match="warehouse offline"):
            asyncio.run(aggregator.get_meta_game_data())

    def test_explicit_refresh_failure_raises(self):
        """refresh() reports the failure even when a stale snapshot exists."""
        source = FlakySource()
        aggregator = MetaGameAggregator(source=source, cache=MetaSnapshotCache())

        async def run():
            await aggregator.get_meta_game_data()
            await aggregator.refresh()

        with pytest.raises(MetaDataUnavailableError):
            asyncio.run(run())

    def test_current_meta(self):
        """get_current_meta derives the dated snapshot."""
        aggregator = MetaGameAggregator(source=StaticMetaSource(), cache=MetaSnapshotCache())

        snapshot = asyncio.run(aggregator.get_current_meta())

        assert [a.name for a in snapshot.top_archetypes] == ["Zeon Aggro", "Federation Control"]

    def test_global_instance(self):
        """get_meta_aggregator returns a shared instance until reset."""
        first = get_meta_aggregator()

        assert get_meta_aggregator() is first
        reset_meta_aggregator()
        assert get_meta_aggregator() is not first
