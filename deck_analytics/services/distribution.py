"""Card distribution aggregation.

Groups deck entries by a categorical attribute (type, rarity, faction) or
by cost bucket and reports count + percentage per bucket. Counts are card
copies, so an entry with quantity 3 contributes 3 to its bucket, and
percentages are taken against the total number of copies.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from deck_analytics.models.deck_models import CardRef, DeckCardEntry, DistributionBucket

UNKNOWN_LABEL = "Unknown"

# Percentages are rounded to two decimals
PERCENT_DECIMALS = 2

KeyFunction = Callable[[CardRef], str | None]


@dataclass(frozen=True)
class CostBucketScheme:
    """Maps numeric costs onto display buckets.

    Costs 0..max_discrete get their own bucket; anything above lands in a
    single overflow bucket labelled ``"{max_discrete + 1}+"``. Missing
    costs count as 0, matching how total cost treats them.
    """

    max_discrete: int = 7

    @property
    def overflow_label(self) -> str:
        return f"{self.max_discrete + 1}+"

    @property
    def labels(self) -> list[str]:
        return [str(c) for c in range(self.max_discrete + 1)] + [self.overflow_label]

    def bucket_for(self, cost: float | None) -> str:
        value = math.floor(cost) if cost is not None else 0
        if value > self.max_discrete:
            return self.overflow_label
        return str(max(value, 0))


DEFAULT_COST_BUCKETS = CostBucketScheme()


def total_copies(entries: Sequence[DeckCardEntry]) -> int:
    return sum(e.quantity for e in entries)


def distribute(
    entries: Sequence[DeckCardEntry],
    key: KeyFunction,
) -> dict[str, DistributionBucket]:
    """Aggregate entries into labelled buckets.

    Args:
        entries: Deck entries to aggregate
        key: Extracts a label from a card; None or blank labels are
            grouped under "Unknown"

    Returns:
        Mapping of label to DistributionBucket in first-seen order; empty
        for an empty deck
    """
    total = total_copies(entries)
    if total == 0:
        return {}

    counts: dict[str, int] = {}
    for entry in entries:
        label = key(entry.card)
        if label is None or not str(label).strip():
            label = UNKNOWN_LABEL
        counts[label] = counts.get(label, 0) + entry.quantity

    return {
        label: DistributionBucket(
            count=count,
            percentage=round(100 * count / total, PERCENT_DECIMALS),
        )
        for label, count in counts.items()
    }


def type_distribution(entries: Sequence[DeckCardEntry]) -> dict[str, DistributionBucket]:
    return distribute(entries, lambda card: card.type_name)


def rarity_distribution(entries: Sequence[DeckCardEntry]) -> dict[str, DistributionBucket]:
    return distribute(entries, lambda card: card.rarity_name)


def faction_distribution(entries: Sequence[DeckCardEntry]) -> dict[str, DistributionBucket]:
    return distribute(entries, lambda card: card.faction_name)


def cost_distribution(
    entries: Sequence[DeckCardEntry],
    scheme: CostBucketScheme = DEFAULT_COST_BUCKETS,
) -> dict[str, DistributionBucket]:
    """Cost curve distribution, ordered from cheapest bucket to the overflow bucket."""
    buckets = distribute(entries, lambda card: scheme.bucket_for(card.cost))
    order = {label: i for i, label in enumerate(scheme.labels)}
    return dict(sorted(buckets.items(), key=lambda item: order[item[0]]))
