"""Deck analysis entry points.

``analyze_deck`` is a pure function of the deck: the same entries always
produce an equal ``DeckAnalytics``, and degenerate decks (empty, missing
costs or categories) yield zeros and empty collections instead of errors.
"""

from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.analytics_models import DeckAnalytics, DeckComparison
from deck_analytics.models.deck_models import DeckInput, as_deck
from deck_analytics.services import distribution, scorer
from deck_analytics.services.suggestions import (
    DEFAULT_THRESHOLDS,
    DeckProfile,
    SuggestionThresholds,
    analyze_improvements,
    generate_suggestions,
)

logger = get_logger(__name__)


def analyze_deck(
    deck: DeckInput,
    cost_buckets: distribution.CostBucketScheme = distribution.DEFAULT_COST_BUCKETS,
    thresholds: SuggestionThresholds = DEFAULT_THRESHOLDS,
) -> DeckAnalytics:
    """Analyze a deck for statistics, scores and recommendations.

    Sideboard entries are excluded; everything else counts.

    Args:
        deck: A Deck or a plain list of DeckCardEntry
        cost_buckets: Cost curve bucketing scheme
        thresholds: Heuristic targets for suggestions and improvements

    Returns:
        A freshly built DeckAnalytics
    """
    entries = as_deck(deck).main_deck
    total_cards = distribution.total_copies(entries)

    type_dist = distribution.type_distribution(entries)
    cost_dist = distribution.cost_distribution(entries, cost_buckets)
    rarity_dist = distribution.rarity_distribution(entries)
    faction_dist = distribution.faction_distribution(entries)

    efficiency = scorer.card_efficiency(entries)
    balance = scorer.deck_balance(entries, cost_buckets, distribution=cost_dist)
    synergy = scorer.synergy_score(entries)
    rating = scorer.competitive_rating(efficiency, balance, synergy, total_cards)

    profile = DeckProfile(
        entries=entries,
        total_cards=total_cards,
        efficiency=efficiency,
        synergy=synergy,
        cost_distribution=cost_dist,
        type_distribution=type_dist,
        faction_distribution=faction_dist,
    )
    suggestions = generate_suggestions(profile, thresholds)
    improvements = analyze_improvements(profile, thresholds)

    logger.debug(
        "Deck analyzed",
        extra={
            "extra_data": {
                "total_cards": total_cards,
                "unique_cards": len(entries),
                "competitive_rating": rating,
                "suggestions": len(suggestions),
                "improvements": len(improvements),
            }
        },
    )

    return DeckAnalytics(
        total_cards=total_cards,
        unique_cards=len(entries),
        average_cost=scorer.average_cost(entries),
        total_cost=scorer.total_cost(entries),
        competitive_rating=rating,
        card_efficiency=efficiency,
        deck_balance=balance,
        synergy_score=synergy,
        type_distribution=type_dist,
        cost_distribution=cost_dist,
        rarity_distribution=rarity_dist,
        faction_distribution=faction_dist,
        suggestions=suggestions,
        improvements=improvements,
    )


def compare_decks(deck_a: DeckInput, deck_b: DeckInput) -> DeckComparison:
    """Analyze two decks and report their score differences (a - b)."""
    analytics_a = analyze_deck(deck_a)
    analytics_b = analyze_deck(deck_b)

    return DeckComparison(
        deck_a=analytics_a,
        deck_b=analytics_b,
        efficiency_diff=round(analytics_a.card_efficiency - analytics_b.card_efficiency, 2),
        balance_diff=analytics_a.deck_balance - analytics_b.deck_balance,
        synergy_diff=analytics_a.synergy_score - analytics_b.synergy_score,
        competitive_diff=analytics_a.competitive_rating - analytics_b.competitive_rating,
    )
