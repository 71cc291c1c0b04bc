"""Competitive scoring heuristics.

All scores are deterministic functions of deck composition:

- card efficiency: copy-weighted mean of impact / cost, capped at 10.
  Impact is power + toughness, or a flat baseline for cards without
  combat stats. Cheap high-impact cards raise it, expensive low-impact
  cards lower it.
- deck balance: normalized Shannon entropy of the cost curve over the
  configured cost buckets. A perfectly even curve scores 100, a deck
  concentrated in one bucket scores 0.
- synergy: share of unique-card pairs that share a faction (60%) or a
  type (40%). Unknown factions/types never count as shared.
- competitive rating: equal-weight blend of efficiency (rescaled to
  0-100), balance, synergy and a deck-size score.
"""

import math
from collections import Counter
from collections.abc import Sequence

from deck_analytics.models.analytics_models import RatingTier
from deck_analytics.models.deck_models import CardRef, DeckCardEntry, DistributionBucket
from deck_analytics.services.distribution import (
    DEFAULT_COST_BUCKETS,
    CostBucketScheme,
    cost_distribution,
    total_copies,
)

MAX_EFFICIENCY = 10.0
BASELINE_IMPACT = 2.0

FACTION_SYNERGY_WEIGHT = 0.6
TYPE_SYNERGY_WEIGHT = 0.4

RATING_WEIGHTS = {
    "efficiency": 0.25,
    "balance": 0.25,
    "synergy": 0.25,
    "size": 0.25,
}

# (floor, tier, label), checked top down
TIER_BREAKPOINTS: list[tuple[int, str, str]] = [
    (90, "S", "Competitive"),
    (80, "A", "Strong"),
    (70, "B", "Good"),
    (60, "C", "Average"),
    (50, "D", "Below Average"),
]


def total_cost(entries: Sequence[DeckCardEntry]) -> float:
    return sum((e.card.cost or 0) * e.quantity for e in entries)


def average_cost(entries: Sequence[DeckCardEntry]) -> float:
    total = total_copies(entries)
    if total == 0:
        return 0.0
    return round(total_cost(entries) / total, 2)


def card_impact(card: CardRef) -> float:
    """Raw impact of a card: combat stats, or a baseline for non-combat cards."""
    if card.power is None and card.toughness is None:
        return BASELINE_IMPACT
    return float((card.power or 0) + (card.toughness or 0))


def card_value(card: CardRef) -> float:
    """Impact per unit of cost; costs below 1 count as 1."""
    cost = max(card.cost or 0, 1)
    return min(card_impact(card) / cost, MAX_EFFICIENCY)


def card_efficiency(entries: Sequence[DeckCardEntry]) -> float:
    total = total_copies(entries)
    if total == 0:
        return 0.0
    weighted = sum(card_value(e.card) * e.quantity for e in entries)
    return round(min(weighted / total, MAX_EFFICIENCY), 2)


def deck_balance(
    entries: Sequence[DeckCardEntry],
    scheme: CostBucketScheme = DEFAULT_COST_BUCKETS,
    distribution: dict[str, DistributionBucket] | None = None,
) -> int:
    distribution = distribution if distribution is not None else cost_distribution(entries, scheme)
    total = sum(b.count for b in distribution.values())
    bucket_total = len(scheme.labels)
    if total == 0 or bucket_total < 2:
        return 0

    entropy = 0.0
    for bucket in distribution.values():
        if bucket.count:
            p = bucket.count / total
            entropy -= p * math.log(p)

    return round(100 * entropy / math.log(bucket_total))


def _shared_pairs(labels: list[str | None]) -> int:
    counts = Counter(label for label in labels if label)
    return sum(n * (n - 1) // 2 for n in counts.values())


def synergy_score(entries: Sequence[DeckCardEntry]) -> int:
    unique = len(entries)
    if unique < 2:
        return 0

    pairs = unique * (unique - 1) // 2
    faction_density = _shared_pairs([e.card.faction_name for e in entries]) / pairs
    type_density = _shared_pairs([e.card.type_name for e in entries]) / pairs

    score = 100 * (
        FACTION_SYNERGY_WEIGHT * faction_density + TYPE_SYNERGY_WEIGHT * type_density
    )
    return round(score)


def deck_size_score(total_cards: int) -> int:
    """Score deck size; 50-60 cards is the sweet spot."""
    if total_cards == 0:
        return 0
    if total_cards < 40:
        return 60
    if total_cards < 50:
        return 80
    if total_cards <= 60:
        return 100
    if total_cards <= 70:
        return 85
    return 70


def competitive_rating(
    efficiency: float,
    balance: int,
    synergy: int,
    total_cards: int,
) -> int:
    if total_cards == 0:
        return 0

    rating = (
        (efficiency / MAX_EFFICIENCY) * 100 * RATING_WEIGHTS["efficiency"]
        + balance * RATING_WEIGHTS["balance"]
        + synergy * RATING_WEIGHTS["synergy"]
        + deck_size_score(total_cards) * RATING_WEIGHTS["size"]
    )
    return max(0, min(100, round(rating)))


def rating_tier(rating: float) -> RatingTier:
    """Map a 0-100 rating onto its display tier.

    >=90 S, >=80 A, >=70 B, >=60 C, >=50 D, otherwise F.
    """
    for floor, tier, label in TIER_BREAKPOINTS:
        if rating >= floor:
            return RatingTier(tier=tier, label=label)
    return RatingTier(tier="F", label="Needs Work")
