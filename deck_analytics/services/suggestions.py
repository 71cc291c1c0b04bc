"""Rule-based deck suggestions and improvements.

Suggestions are concrete add/remove/replace actions ranked for display;
improvements are free-standing commentary with a severity. A deck that
trips no rule gets two empty lists, which callers render as a success
state.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from deck_analytics.models.analytics_models import DeckImprovement, DeckSuggestion
from deck_analytics.models.deck_models import CardRef, DeckCardEntry, DistributionBucket
from deck_analytics.services.distribution import UNKNOWN_LABEL
from deck_analytics.services.scorer import card_value

PRIORITY_RANK = {"high": 2, "medium": 1, "low": 0}

UTILITY_TYPES = frozenset({"Command", "Spell", "Event"})


@dataclass(frozen=True)
class SuggestionThresholds:
    """Heuristic targets a deck is measured against."""

    min_deck_size: int = 40
    max_deck_size: int = 70
    low_cost_max: int = 2
    low_cost_min_share: float = 25.0
    early_play_critical_share: float = 10.0
    high_cost_min: int = 6
    high_cost_moderate_share: float = 20.0
    high_cost_critical_share: float = 35.0
    weak_card_min_cost: int = 5
    weak_card_value_ratio: float = 0.5
    replacement_max_cost: int = 3
    max_copies: int = 3
    faction_spread_limit: int = 4
    faction_spread_top_share: float = 50.0
    synergy_floor: int = 40
    utility_min_share: float = 15.0
    finisher_min_cost: int = 5


DEFAULT_THRESHOLDS = SuggestionThresholds()


@dataclass(frozen=True)
class DeckProfile:
    """Precomputed figures the rules read from."""

    entries: Sequence[DeckCardEntry]
    total_cards: int
    efficiency: float
    synergy: int
    cost_distribution: dict[str, DistributionBucket]
    type_distribution: dict[str, DistributionBucket]
    faction_distribution: dict[str, DistributionBucket]

    def share(self, count: int) -> float:
        if self.total_cards == 0:
            return 0.0
        return 100 * count / self.total_cards

    def copies_where(self, predicate) -> int:
        return sum(e.quantity for e in self.entries if predicate(e.card))


def rank_suggestions(suggestions: Sequence[DeckSuggestion]) -> list[DeckSuggestion]:
    """Sort by priority (high first), then impact descending.

    ``sorted`` is stable, so ties keep their insertion order.
    """
    return sorted(suggestions, key=lambda s: (-PRIORITY_RANK[s.priority], -s.impact))


def _low_cost(card: CardRef, thresholds: SuggestionThresholds) -> bool:
    return (card.cost or 0) <= thresholds.low_cost_max


def _high_cost(card: CardRef, thresholds: SuggestionThresholds) -> bool:
    return (card.cost or 0) >= thresholds.high_cost_min


def _best_replacement(
    profile: DeckProfile,
    exclude: CardRef,
    thresholds: SuggestionThresholds,
) -> CardRef | None:
    """Cheapest-to-play, highest-value card the deck could run more copies of."""
    best: CardRef | None = None
    for entry in profile.entries:
        card = entry.card
        if card.id == exclude.id or entry.quantity >= thresholds.max_copies:
            continue
        if (card.cost or 0) > thresholds.replacement_max_cost:
            continue
        if card_value(card) < profile.efficiency:
            continue
        if best is None or card_value(card) > card_value(best):
            best = card
    return best


def generate_suggestions(
    profile: DeckProfile,
    thresholds: SuggestionThresholds = DEFAULT_THRESHOLDS,
) -> list[DeckSuggestion]:
    """Evaluate suggestion rules and return them ranked for display."""
    if profile.total_cards == 0:
        return []

    suggestions: list[DeckSuggestion] = []

    # 1. Deck size
    if profile.total_cards < thresholds.min_deck_size:
        suggestions.append(
            DeckSuggestion(
                type="add",
                priority="high",
                impact=0.8,
                reason=(
                    f"Deck has {profile.total_cards} cards, below the recommended "
                    f"minimum of {thresholds.min_deck_size}"
                ),
            )
        )
    elif profile.total_cards > thresholds.max_deck_size:
        suggestions.append(
            DeckSuggestion(
                type="remove",
                priority="medium",
                impact=0.6,
                reason="Deck size is too large, consider removing less impactful cards",
            )
        )

    # 2. Early game
    low_cost_share = profile.share(profile.copies_where(lambda c: _low_cost(c, thresholds)))
    if low_cost_share < thresholds.low_cost_min_share:
        suggestions.append(
            DeckSuggestion(
                type="add",
                priority="medium",
                impact=0.5,
                reason=(
                    f"Only {low_cost_share:.0f}% of the deck costs "
                    f"{thresholds.low_cost_max} or less; add low-cost cards for early game consistency"
                ),
            )
        )

    # 3. Expensive low-impact cards
    weak_floor = profile.efficiency * thresholds.weak_card_value_ratio
    for entry in profile.entries:
        card = entry.card
        if (card.cost or 0) < thresholds.weak_card_min_cost or card_value(card) >= weak_floor:
            continue
        replacement = _best_replacement(profile, card, thresholds)
        if replacement is not None:
            suggestions.append(
                DeckSuggestion(
                    type="replace",
                    priority="medium",
                    impact=min(1.0, 0.3 + 0.1 * entry.quantity),
                    reason=(
                        f"'{card.name}' costs {card.cost:g} but delivers little impact; "
                        f"'{replacement.name}' is a more efficient use of the slot"
                    ),
                    card=replacement,
                    target_card=card,
                )
            )
        else:
            suggestions.append(
                DeckSuggestion(
                    type="remove",
                    priority="low",
                    impact=min(1.0, 0.2 + 0.05 * entry.quantity),
                    reason=f"'{card.name}' is expensive for the impact it provides",
                    card=card,
                )
            )

    # 4. Faction spread
    known_factions = {
        label: bucket
        for label, bucket in profile.faction_distribution.items()
        if label != UNKNOWN_LABEL
    }
    if len(known_factions) >= thresholds.faction_spread_limit:
        top_share = max(b.percentage for b in known_factions.values())
        if top_share < thresholds.faction_spread_top_share:
            suggestions.append(
                DeckSuggestion(
                    type="remove",
                    priority="medium",
                    impact=0.4,
                    reason=(
                        f"Deck is spread across {len(known_factions)} factions; "
                        "cut the weakest faction to improve consistency"
                    ),
                )
            )

    return rank_suggestions(suggestions)


def analyze_improvements(
    profile: DeckProfile,
    thresholds: SuggestionThresholds = DEFAULT_THRESHOLDS,
) -> list[DeckImprovement]:
    """Evaluate structural rules and return severity-tagged commentary."""
    if profile.total_cards == 0:
        return []

    improvements: list[DeckImprovement] = []

    if profile.total_cards < thresholds.min_deck_size:
        improvements.append(
            DeckImprovement(
                category="deck-size",
                severity="critical",
                description=f"Deck has only {profile.total_cards} cards",
                suggestion=f"Build up to at least {thresholds.min_deck_size} cards",
            )
        )

    high_cost_share = profile.share(profile.copies_where(lambda c: _high_cost(c, thresholds)))
    if high_cost_share > thresholds.high_cost_moderate_share:
        improvements.append(
            DeckImprovement(
                category="cost-curve",
                severity=(
                    "critical"
                    if high_cost_share > thresholds.high_cost_critical_share
                    else "moderate"
                ),
                description="Deck has too many high-cost cards",
                suggestion="Consider replacing some high-cost cards with lower cost alternatives",
            )
        )

    low_cost_share = profile.share(profile.copies_where(lambda c: _low_cost(c, thresholds)))
    if low_cost_share < thresholds.early_play_critical_share:
        improvements.append(
            DeckImprovement(
                category="cost-curve",
                severity="critical",
                description="Deck has almost no early plays",
                suggestion=(
                    f"Run more cards costing {thresholds.low_cost_max} or less "
                    "to avoid falling behind early"
                ),
            )
        )

    utility_share = sum(
        bucket.percentage
        for label, bucket in profile.type_distribution.items()
        if label in UTILITY_TYPES
    )
    if utility_share < thresholds.utility_min_share:
        improvements.append(
            DeckImprovement(
                category="card-draw",
                severity="minor",
                description="Deck may lack card draw and utility",
                suggestion="Add more Command cards for card advantage and utility",
            )
        )

    if len(profile.entries) >= 2 and profile.synergy < thresholds.synergy_floor:
        improvements.append(
            DeckImprovement(
                category="synergy",
                severity="moderate",
                description="Cards share few factions or types",
                suggestion="Focus on cards that work well together",
            )
        )

    has_finisher = any(
        (e.card.cost or 0) >= thresholds.finisher_min_cost for e in profile.entries
    )
    if not has_finisher and profile.total_cards >= thresholds.min_deck_size:
        improvements.append(
            DeckImprovement(
                category="finishers",
                severity="minor",
                description="Deck has no late-game threats",
                suggestion=(
                    f"Include a few cards costing {thresholds.finisher_min_cost} "
                    "or more to close out long games"
                ),
            )
        )

    return improvements
