"""Pydantic models for deck input.

A deck is an ordered list of card entries (card + quantity). These models
are frozen: once a deck is handed to the engine nothing inside it changes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CardRef(BaseModel):
    """Reference to a single card as seen by the analytics engine."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique card identifier")
    name: str = Field(description="Card display name")
    cost: float | None = Field(
        default=None,
        ge=0,
        description="Play cost (None for cards without a cost)",
    )
    type_name: str | None = Field(default=None, description="Card type (Unit, Command, ...)")
    rarity_name: str | None = Field(default=None, description="Card rarity")
    faction_name: str | None = Field(default=None, description="Card faction")
    power: int | None = Field(default=None, ge=0, description="Combat power if any")
    toughness: int | None = Field(default=None, ge=0, description="Toughness if any")


class DeckCardEntry(BaseModel):
    """A card and how many copies of it the deck runs."""

    model_config = ConfigDict(frozen=True)

    card: CardRef
    quantity: int = Field(gt=0, description="Number of copies (positive)")
    category: Literal["main", "side", "extra"] = Field(
        default="main",
        description="main = counted deck, side = sideboard, extra = auxiliary deck",
    )


class Deck(BaseModel):
    """An ordered sequence of deck entries."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Untitled Deck", description="Deck display name")
    entries: tuple[DeckCardEntry, ...] = Field(
        default=(),
        description="Deck entries in list order",
    )

    @property
    def main_deck(self) -> list[DeckCardEntry]:
        """Entries that count toward deck statistics (everything but the sideboard)."""
        return [e for e in self.entries if e.category != "side"]

    @property
    def sideboard(self) -> list[DeckCardEntry]:
        return [e for e in self.entries if e.category == "side"]

    @property
    def total_cards(self) -> int:
        return sum(e.quantity for e in self.main_deck)

    @property
    def unique_cards(self) -> int:
        return len(self.main_deck)


DeckInput = Deck | Sequence[DeckCardEntry]


def as_deck(deck: DeckInput) -> Deck:
    """Normalize a Deck or a plain list of entries into a Deck."""
    if isinstance(deck, Deck):
        return deck
    return Deck(entries=tuple(deck))


class DistributionBucket(BaseModel):
    """Count and share of deck copies falling into one bucket."""

    count: int = Field(ge=0, description="Number of card copies in the bucket")
    percentage: float = Field(ge=0.0, le=100.0, description="Share of the total, in percent")
