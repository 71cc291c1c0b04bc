"""Pydantic models for tournament formats and deck legality checks.

A format encodes construction limits (deck size, sideboard size, copy
limits, banned and restricted cards) as data so they can be checked
programmatically, plus the number of single-elimination rounds a
tournament in that format runs.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class RestrictedCard(BaseModel):
    """A card limited below the format's normal copy limit."""

    card_id: str = Field(description="Restricted card id")
    max_copies: int = Field(ge=0, description="Maximum copies allowed")


class TournamentFormat(BaseModel):
    """Tournament format definition.

    Attributes:
        name: Format display name
        round_count: Single-elimination rounds; the bracket holds 2^round_count players
        min_deck_size: Minimum main deck size
        max_deck_size: Maximum main deck size
        sideboard_size: Maximum sideboard size
        max_copies_per_card: Copy limit across main deck and sideboard
        banned_cards: Card ids that may not be played
        restricted_cards: Per-card lower copy limits
    """

    name: str = Field(description="Format display name")
    round_count: int = Field(default=3, ge=1, le=12, description="Single-elimination rounds")
    min_deck_size: int = Field(default=40, ge=1)
    max_deck_size: int = Field(default=60, ge=1)
    sideboard_size: int = Field(default=15, ge=0)
    max_copies_per_card: int = Field(default=3, ge=1)
    banned_cards: list[str] = Field(default_factory=list)
    restricted_cards: list[RestrictedCard] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_size_range(self) -> "TournamentFormat":
        if self.max_deck_size < self.min_deck_size:
            raise ValueError("max_deck_size must be >= min_deck_size")
        return self

    @property
    def bracket_size(self) -> int:
        return 2**self.round_count


class ValidationError(BaseModel):
    """A rule violation that makes the deck illegal for the format."""

    code: Literal[
        "DECK_SIZE",
        "SIDEBOARD_SIZE",
        "BANNED_CARD",
        "RESTRICTED_CARD",
        "MAX_COPIES",
        "INVALID_FORMAT",
    ]
    message: str
    card_id: str | None = None
    card_name: str | None = None
    current_value: int | None = None
    required_value: int | None = None


class ValidationWarning(BaseModel):
    """Advisory note; the deck is still legal."""

    code: Literal["SUBOPTIMAL_SIZE", "WEAK_SYNERGY", "HIGH_VARIANCE"]
    message: str
    suggestion: str
    severity: Literal["low", "medium", "high"] = "low"


class TournamentValidation(BaseModel):
    """Complete legality result for a deck in one format."""

    is_valid: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    format: TournamentFormat

    def summary(self) -> str:
        """Generate a human-readable validation summary."""
        if self.is_valid:
            return f"✓ Deck legal in {self.format.name}"

        lines = [f"✗ Deck not legal in {self.format.name}"]
        for err in self.errors:
            lines.append(f"  ERROR: {err.message}")
        for warn in self.warnings:
            lines.append(f"  WARN: {warn.message}")
        return "\n".join(lines)
