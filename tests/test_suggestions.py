"""Tests for suggestion and improvement rules."""

from deck_analytics.models.analytics_models import DeckSuggestion
from deck_analytics.models.deck_models import Deck
from deck_analytics.services.deck_analyzer import analyze_deck
from deck_analytics.services.suggestions import SuggestionThresholds, rank_suggestions


def _suggestion(priority, impact, reason):
    return DeckSuggestion(type="add", priority=priority, impact=impact, reason=reason)


# =============================================================================
# Ranking Tests
# =============================================================================


class TestRankSuggestions:
    """Tests for the priority/impact sort."""

    def test_priority_before_impact(self):
        """High priority outranks a higher-impact medium suggestion."""
        ranked = rank_suggestions(
            [_suggestion("medium", 0.9, "m"), _suggestion("high", 0.1, "h")]
        )

        assert [s.reason for s in ranked] == ["h", "m"]

    def test_impact_within_priority(self):
        """Within a priority, higher impact comes first."""
        ranked = rank_suggestions(
            [_suggestion("low", 0.2, "a"), _suggestion("low", 0.7, "b")]
        )

        assert [s.reason for s in ranked] == ["b", "a"]

    def test_ties_keep_input_order(self):
        """Equal priority and impact keep their original order."""
        ranked = rank_suggestions(
            [
                _suggestion("medium", 0.5, "first"),
                _suggestion("medium", 0.5, "second"),
                _suggestion("medium", 0.5, "third"),
            ]
        )

        assert [s.reason for s in ranked] == ["first", "second", "third"]


# =============================================================================
# Suggestion Rule Tests
# =============================================================================


class TestGenerateSuggestions:
    """Tests for add/remove/replace suggestions."""

    def test_optimized_deck_has_none(self, optimized_deck):
        """A well-built deck gets no suggestions."""
        assert analyze_deck(optimized_deck).suggestions == []

    def test_small_deck_suggests_adding(self, make_entry):
        """Too few cards yields a high-priority add suggestion first."""
        analytics = analyze_deck([make_entry("a", 1, 4), make_entry("b", 2, 4)])

        first = analytics.suggestions[0]
        assert first.type == "add"
        assert first.priority == "high"
        assert first.impact == 0.8

    def test_oversized_deck_suggests_removing(self, make_entry):
        """More than 70 cards yields a remove suggestion."""
        entries = [make_entry(f"c{i}", i % 5, 3) for i in range(25)]

        analytics = analyze_deck(entries)

        assert any(
            s.type == "remove" and s.priority == "medium" and s.impact == 0.6
            for s in analytics.suggestions
        )

    def test_few_low_cost_cards(self, weak_deck):
        """A deck without cheap cards is told to add some."""
        analytics = analyze_deck(weak_deck)

        assert analytics.suggestions[0].type == "add"
        assert analytics.suggestions[0].impact == 0.5

    def test_faction_spread(self, weak_deck):
        """Ten evenly split factions triggers a consolidation suggestion."""
        analytics = analyze_deck(weak_deck)

        assert any("factions" in s.reason for s in analytics.suggestions)

    def test_replace_weak_expensive_card(self, make_entry):
        """An expensive low-impact card is replaced by an efficient cheap one."""
        entries = [
            make_entry("sniper", 1, 2, power=2, toughness=2),
            make_entry("trooper", 3, 4, power=3, toughness=3),
            make_entry("brick", 6, 2, power=1, toughness=0),
        ]

        analytics = analyze_deck(entries)

        replace = [s for s in analytics.suggestions if s.type == "replace"]
        assert len(replace) == 1
        assert replace[0].target_card.id == "brick"
        assert replace[0].card.id == "sniper"

    def test_remove_weak_card_without_replacement(self, make_entry):
        """With no eligible replacement the weak card is flagged for removal."""
        entries = [
            make_entry("sniper", 1, 3, power=2, toughness=2),
            make_entry("trooper", 3, 4, power=3, toughness=3),
            make_entry("brick", 6, 2, power=1, toughness=0),
        ]

        analytics = analyze_deck(entries)

        removals = [s for s in analytics.suggestions if s.card and s.card.id == "brick"]
        assert removals[0].type == "remove"
        assert removals[0].priority == "low"

    def test_suggestions_are_ranked(self, make_entry):
        """Output is always in priority/impact order."""
        entries = [
            make_entry("sniper", 1, 2, power=2, toughness=2),
            make_entry("brick", 6, 2, power=1, toughness=0),
        ]

        suggestions = analyze_deck(entries).suggestions

        assert suggestions == rank_suggestions(suggestions)

    def test_custom_thresholds(self, optimized_deck):
        """Raising the minimum size turns a clean deck into an add suggestion."""
        analytics = analyze_deck(optimized_deck, thresholds=SuggestionThresholds(min_deck_size=60))

        assert analytics.suggestions[0].type == "add"
        assert analytics.suggestions[0].priority == "high"


# =============================================================================
# Improvement Rule Tests
# =============================================================================


class TestAnalyzeImprovements:
    """Tests for severity-tagged improvements."""

    def test_optimized_deck_has_none(self, optimized_deck):
        """A well-built deck gets no improvements."""
        assert analyze_deck(optimized_deck).improvements == []

    def test_top_heavy_deck(self, weak_deck):
        """An all-expensive deck gets critical cost-curve feedback."""
        improvements = analyze_deck(weak_deck).improvements

        curve = [i for i in improvements if i.category == "cost-curve"]
        assert len(curve) == 2
        assert all(i.severity == "critical" for i in curve)

    def test_low_synergy(self, weak_deck):
        """Unrelated cards get a synergy improvement."""
        categories = {i.category for i in analyze_deck(weak_deck).improvements}

        assert "synergy" in categories
        assert "card-draw" in categories

    def test_small_deck_is_critical(self, make_entry):
        """A deck under the minimum size is a critical problem."""
        improvements = analyze_deck([make_entry("a", 1, 4), make_entry("b", 2, 4)]).improvements

        assert improvements[0].category == "deck-size"
        assert improvements[0].severity == "critical"

    def test_missing_finishers(self, make_entry):
        """A full deck with nothing costing 5+ lacks finishers."""
        entries = [make_entry(f"c{i}", i % 5, 4) for i in range(10)]

        categories = {i.category for i in analyze_deck(entries).improvements}

        assert "finishers" in categories

    def test_well_optimized_flag(self, optimized_deck, weak_deck):
        """is_well_optimized reflects empty recommendation lists."""
        assert analyze_deck(optimized_deck).is_well_optimized
        assert not analyze_deck(weak_deck).is_well_optimized

    def test_single_card_deck_skips_synergy(self, make_entry):
        """Synergy feedback needs at least two unique cards."""
        entries = [make_entry("only", 3, 40, power=3, toughness=3)]

        categories = {i.category for i in analyze_deck(entries).improvements}

        assert "synergy" not in categories
        assert Deck(entries=tuple(entries)).total_cards == 40
