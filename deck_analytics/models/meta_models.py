"""Pydantic models for meta-game aggregates.

``MetaStats`` is the raw shape a data source hands to the aggregator;
``MetaGameData`` and ``MetaSnapshot`` are the derived views returned to
callers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from deck_analytics.models.deck_models import CardRef

# Meta categories and the archetype profile each one is modelled by
CATEGORY_ARCHETYPES: dict[str, str] = {
    "control_decks": "Control Lock",
    "aggro_decks": "Aggro Rush",
    "midrange_decks": "Midrange Value",
    "combo_decks": "Combo Engine",
}


class MetaBreakdown(BaseModel):
    """Share of the field per strategic category, in percent."""

    control_decks: float = Field(ge=0.0, le=100.0)
    aggro_decks: float = Field(ge=0.0, le=100.0)
    midrange_decks: float = Field(ge=0.0, le=100.0)
    combo_decks: float = Field(ge=0.0, le=100.0)

    def total(self) -> float:
        return self.control_decks + self.aggro_decks + self.midrange_decks + self.combo_decks

    def as_archetype_weights(self) -> dict[str, float]:
        """Map each category onto its named archetype profile."""
        return {
            archetype: getattr(self, category)
            for category, archetype in CATEGORY_ARCHETYPES.items()
        }


class PopularCard(BaseModel):
    card: CardRef
    usage_rate: float = Field(ge=0.0, le=100.0, description="Share of decks running the card")
    win_rate: float = Field(ge=0.0, le=100.0, description="Game win rate of those decks")
    decks_used: int = Field(default=0, ge=0)


class TrendingCard(BaseModel):
    """Usage change of a card over a period.

    The direction is always derived from ``change_percent`` so the two can
    never disagree.
    """

    card: CardRef
    change_percent: float
    period_days: int = Field(gt=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def trend_direction(self) -> Literal["up", "down", "stable"]:
        if self.change_percent > 0:
            return "up"
        if self.change_percent < 0:
            return "down"
        return "stable"


class ArchetypeSummary(BaseModel):
    name: str
    description: str
    win_rate: float = Field(ge=0.0, le=100.0)
    usage_rate: float = Field(ge=0.0, le=100.0)
    usage_change: float = Field(
        default=0.0,
        description="Usage rate change versus the previous period, in percentage points",
    )
    key_cards: list[CardRef] = Field(default_factory=list)


class MetaGameData(BaseModel):
    """Aggregate snapshot of the competitive field."""

    meta_breakdown: MetaBreakdown
    popular_cards: list[PopularCard] = Field(default_factory=list)
    trending_cards: list[TrendingCard] = Field(default_factory=list)
    popular_archetypes: list[ArchetypeSummary] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(self.popular_cards or self.trending_cards or self.popular_archetypes)

    def archetype_win_rates(self) -> dict[str, float]:
        return {a.name: a.win_rate for a in self.popular_archetypes}


class MetaArchetype(BaseModel):
    name: str
    percentage: float = Field(ge=0.0, le=100.0)
    win_rate: float = Field(ge=0.0, le=100.0)
    key_cards: list[CardRef] = Field(default_factory=list)
    description: str = ""


class MetaSnapshot(BaseModel):
    """Dated view of the top archetypes and which way they are moving."""

    date: datetime
    top_archetypes: list[MetaArchetype] = Field(default_factory=list)
    rising_archetypes: list[str] = Field(default_factory=list)
    falling_archetypes: list[str] = Field(default_factory=list)


# =============================================================================
# Raw source data
# =============================================================================


class CardUsageRecord(BaseModel):
    card: CardRef
    decks_used: int = Field(ge=0)
    games_played: int = Field(default=0, ge=0)
    games_won: int = Field(default=0, ge=0)


class CardTrendRecord(BaseModel):
    card: CardRef
    previous_usage_rate: float = Field(ge=0.0)
    current_usage_rate: float = Field(ge=0.0)
    period_days: int = Field(default=7, gt=0)


class ArchetypeRecord(BaseModel):
    name: str
    description: str = ""
    decks: int = Field(ge=0)
    games_played: int = Field(default=0, ge=0)
    games_won: int = Field(default=0, ge=0)
    previous_usage_rate: float | None = Field(
        default=None,
        ge=0.0,
        description="Usage rate in the previous period, if known",
    )
    key_cards: list[CardRef] = Field(default_factory=list)


class MetaStats(BaseModel):
    """Raw counts loaded from a meta data source."""

    total_decks: int = Field(default=0, ge=0)
    category_counts: dict[str, int] = Field(
        default_factory=dict,
        description="Deck counts keyed by control_decks/aggro_decks/midrange_decks/combo_decks",
    )
    card_usage: list[CardUsageRecord] = Field(default_factory=list)
    card_trends: list[CardTrendRecord] = Field(default_factory=list)
    archetypes: list[ArchetypeRecord] = Field(default_factory=list)
