"""Tests for card distribution aggregation."""

import pytest

from deck_analytics.services.distribution import (
    DEFAULT_COST_BUCKETS,
    UNKNOWN_LABEL,
    CostBucketScheme,
    cost_distribution,
    faction_distribution,
    rarity_distribution,
    total_copies,
    type_distribution,
)

# =============================================================================
# CostBucketScheme Tests
# =============================================================================


class TestCostBucketScheme:
    """Tests for cost bucketing."""

    def test_default_labels(self):
        """Default scheme has buckets 0-7 plus an 8+ overflow bucket."""
        assert DEFAULT_COST_BUCKETS.labels == ["0", "1", "2", "3", "4", "5", "6", "7", "8+"]

    def test_overflow_bucket(self):
        """Costs above the discrete range share the overflow bucket."""
        assert DEFAULT_COST_BUCKETS.bucket_for(8) == "8+"
        assert DEFAULT_COST_BUCKETS.bucket_for(15) == "8+"

    def test_missing_cost_is_zero(self):
        """Cards without a cost fall into the 0 bucket."""
        assert DEFAULT_COST_BUCKETS.bucket_for(None) == "0"

    def test_fractional_cost_floors(self):
        """Fractional costs are floored."""
        assert DEFAULT_COST_BUCKETS.bucket_for(2.5) == "2"

    def test_custom_scheme(self):
        """A narrower scheme moves the overflow bucket down."""
        scheme = CostBucketScheme(max_discrete=4)

        assert scheme.overflow_label == "5+"
        assert scheme.bucket_for(6) == "5+"


# =============================================================================
# Distribution Tests
# =============================================================================


class TestCostDistribution:
    """Tests for the cost curve distribution."""

    def test_counts_copies_not_entries(self, curve_deck):
        """Bucket counts are scaled by quantity."""
        dist = cost_distribution(curve_deck.main_deck)

        assert dist["1"].count == 2
        assert dist["2"].count == 8
        assert dist["7"].count == 5

    def test_counts_sum_to_total(self, curve_deck):
        """Bucket counts add up to the number of copies."""
        dist = cost_distribution(curve_deck.main_deck)

        assert sum(b.count for b in dist.values()) == 40

    def test_percentages_sum_to_100(self, optimized_deck):
        """Percentages add up to 100 within rounding."""
        dist = cost_distribution(optimized_deck.main_deck)

        assert sum(b.percentage for b in dist.values()) == pytest.approx(100, abs=0.1)

    def test_ordered_by_cost(self, make_entry):
        """Buckets come out cheapest first regardless of deck order."""
        entries = [make_entry("big", 9, 1), make_entry("mid", 3, 1), make_entry("free", 0, 1)]

        assert list(cost_distribution(entries)) == ["0", "3", "8+"]

    def test_empty_deck(self):
        """An empty deck has an empty distribution."""
        assert cost_distribution([]) == {}


class TestCategoricalDistributions:
    """Tests for type, rarity and faction distributions."""

    def test_type_distribution(self, optimized_deck):
        """Type buckets count copies per card type."""
        dist = type_distribution(optimized_deck.main_deck)

        assert dist["Command"].count == 10
        assert dist["Pilot"].count == 6
        assert dist["Unit"].count == 38
        assert dist["Command"].percentage == pytest.approx(18.52)

    def test_missing_values_grouped_as_unknown(self, make_entry):
        """Missing or blank labels land in the Unknown bucket."""
        entries = [
            make_entry("a", 1, 2, faction_name=None),
            make_entry("b", 1, 1, faction_name="  "),
            make_entry("c", 1, 1, faction_name="Zeon"),
        ]

        dist = faction_distribution(entries)

        assert dist[UNKNOWN_LABEL].count == 3
        assert dist["Zeon"].percentage == 25.0

    def test_rarity_distribution(self, optimized_deck):
        """Rarity counts cover the whole deck."""
        dist = rarity_distribution(optimized_deck.main_deck)

        assert sum(b.count for b in dist.values()) == total_copies(optimized_deck.main_deck)
        assert dist["Legendary"].count == 3
