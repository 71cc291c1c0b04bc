"""Pydantic models for deck analytics results.

These schemas describe what a single ``analyze_deck`` call produces:
basic statistics, categorical distributions, heuristic scores and the
ranked suggestion/improvement lists. Results are built fresh for every
call and never mutated afterwards.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from deck_analytics.models.deck_models import CardRef, DistributionBucket

Priority = Literal["low", "medium", "high"]
Severity = Literal["minor", "moderate", "critical"]


class DeckSuggestion(BaseModel):
    """A concrete add/remove/replace recommendation.

    For ``replace`` suggestions ``target_card`` is the card being swapped
    out and ``card`` is the one to bring in.
    """

    type: Literal["add", "remove", "replace"] = Field(description="Kind of change")
    priority: Priority = Field(description="Display priority")
    impact: float = Field(ge=0.0, le=1.0, description="Estimated benefit (0-1)")
    reason: str = Field(description="Why the change is suggested")
    card: CardRef | None = Field(default=None, description="Card to add, remove or bring in")
    target_card: CardRef | None = Field(default=None, description="Card being replaced")


class DeckImprovement(BaseModel):
    """Free-standing commentary on a structural weakness."""

    category: str = Field(description="Area of the deck (cost-curve, synergy, ...)")
    severity: Severity = Field(description="minor | moderate | critical")
    description: str = Field(description="What is wrong")
    suggestion: str = Field(description="How to address it")


class DeckAnalytics(BaseModel):
    """Complete analysis of one deck."""

    # Basic statistics
    total_cards: int = Field(ge=0)
    unique_cards: int = Field(ge=0)
    average_cost: float = Field(ge=0.0)
    total_cost: float = Field(ge=0.0)

    # Heuristic scores
    competitive_rating: int = Field(ge=0, le=100, description="Roll-up score (0-100)")
    card_efficiency: float = Field(ge=0.0, le=10.0, description="Power-to-cost ratio (0-10)")
    deck_balance: int = Field(ge=0, le=100, description="Cost curve evenness (0-100)")
    synergy_score: int = Field(ge=0, le=100, description="Faction/type cohesion (0-100)")

    # Distributions
    type_distribution: dict[str, DistributionBucket] = Field(default_factory=dict)
    cost_distribution: dict[str, DistributionBucket] = Field(default_factory=dict)
    rarity_distribution: dict[str, DistributionBucket] = Field(default_factory=dict)
    faction_distribution: dict[str, DistributionBucket] = Field(default_factory=dict)

    # Recommendations
    suggestions: list[DeckSuggestion] = Field(default_factory=list)
    improvements: list[DeckImprovement] = Field(default_factory=list)

    @property
    def is_well_optimized(self) -> bool:
        """True when the engine has nothing to recommend."""
        return not self.suggestions and not self.improvements


class RatingTier(BaseModel):
    """Display tier for a competitive rating."""

    tier: Literal["S", "A", "B", "C", "D", "F"]
    label: str


class DeckComparison(BaseModel):
    """Side-by-side analysis of two decks (differences are a - b)."""

    deck_a: DeckAnalytics
    deck_b: DeckAnalytics
    efficiency_diff: float
    balance_diff: int
    synergy_diff: int
    competitive_diff: int
