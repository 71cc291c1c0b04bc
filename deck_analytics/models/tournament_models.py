"""Pydantic models for tournament preparation.

Covers matchup analysis, bracket simulation results and practice match
tracking. Practice matches model their lifecycle as a tagged union so a
completed match can never be mistaken for one still accepting games.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

from deck_analytics.models.deck_models import CardRef, Deck
from deck_analytics.models.format_rules import TournamentFormat

GameOutcome = Literal["win", "loss"]
PracticeOutcome = Literal["win", "loss", "draw"]


# =============================================================================
# Matchup analysis
# =============================================================================


class OpponentProfile(BaseModel):
    archetype: str
    description: str
    strategy: str


class Gameplan(BaseModel):
    on_play: list[str] = Field(default_factory=list)
    on_draw: list[str] = Field(default_factory=list)
    key_cards: list[CardRef] = Field(default_factory=list)
    avoid_cards: list[CardRef] = Field(default_factory=list)


class SideboardChange(BaseModel):
    card: CardRef
    quantity: int = Field(gt=0)
    reason: str


class SideboardPlan(BaseModel):
    cards_in: list[SideboardChange] = Field(default_factory=list)
    cards_out: list[SideboardChange] = Field(default_factory=list)
    priority_order: list[str] = Field(default_factory=list)

    def net_card_change(self) -> int:
        """Deck size change when the plan is applied (always 0 for generated plans)."""
        return sum(c.quantity for c in self.cards_in) - sum(c.quantity for c in self.cards_out)


class MatchupAnalysis(BaseModel):
    opponent: OpponentProfile
    winrate_estimate: float = Field(ge=0.0, le=100.0)
    gameplan: Gameplan = Field(default_factory=Gameplan)
    play_tips: list[str] = Field(default_factory=list)
    sideboarding: SideboardPlan = Field(default_factory=SideboardPlan)


# =============================================================================
# Tournament simulation
# =============================================================================


class SimulatedGame(BaseModel):
    game: int = Field(ge=1)
    result: GameOutcome
    on_play: bool


class RoundResult(BaseModel):
    """Outcome of one best-of-three round."""

    round: int = Field(ge=1)
    opponent_archetype: str
    result: GameOutcome
    games: list[SimulatedGame] = Field(default_factory=list)

    @property
    def games_won(self) -> int:
        return sum(1 for g in self.games if g.result == "win")


class ExpectedPlacement(BaseModel):
    min: int = Field(ge=1)
    average: float = Field(ge=1.0)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_order(self) -> "ExpectedPlacement":
        if not (self.min <= self.average <= self.max):
            raise ValueError("expected placement must satisfy min <= average <= max")
        return self


class TournamentSimulation(BaseModel):
    player_deck: Deck
    format: TournamentFormat
    rounds: int = Field(ge=1)
    meta_breakdown: dict[str, float]
    results: list[RoundResult] = Field(default_factory=list)
    overall_winrate: float = Field(ge=0.0, le=100.0, description="Game win rate over games played")
    expected_placement: ExpectedPlacement
    final_placement: int = Field(ge=1, description="Placement reached in this run")

    @property
    def bracket_size(self) -> int:
        return 2**self.rounds

    @property
    def opponents(self) -> list[str]:
        return [r.opponent_archetype for r in self.results]


# =============================================================================
# Practice matches
# =============================================================================


class PracticeRound(BaseModel):
    round_number: int = Field(ge=1)
    player_result: PracticeOutcome
    on_play: bool
    duration_minutes: float = Field(ge=0)
    key_moments: list[str] = Field(default_factory=list)


class OngoingMatch(BaseModel):
    status: Literal["ongoing"] = "ongoing"


class CompletedMatch(BaseModel):
    status: Literal["completed"] = "completed"
    result: PracticeOutcome
    ended_at: datetime


MatchState = Annotated[OngoingMatch | CompletedMatch, Field(discriminator="status")]

WINS_NEEDED = 2
MAX_ROUNDS = 3


def match_outcome(rounds: list[PracticeRound]) -> PracticeOutcome | None:
    """Result decided by the recorded rounds, or None while still open."""
    wins = sum(1 for r in rounds if r.player_result == "win")
    losses = sum(1 for r in rounds if r.player_result == "loss")
    if wins >= WINS_NEEDED:
        return "win"
    if losses >= WINS_NEEDED:
        return "loss"
    if len(rounds) >= MAX_ROUNDS:
        return "draw"
    return None


class PracticeMatch(BaseModel):
    """A best-of-three practice match against a named archetype."""

    id: str
    deck_name: str
    opponent_archetype: str
    rounds: list[PracticeRound] = Field(default_factory=list)
    state: MatchState = Field(default_factory=OngoingMatch)
    started_at: datetime
    notes: str = ""

    @model_validator(mode="after")
    def _check_state(self) -> "PracticeMatch":
        numbers = [r.round_number for r in self.rounds]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"round numbers must run 1..{len(numbers)}, got {numbers}")
        for i in range(1, len(self.rounds)):
            if match_outcome(self.rounds[:i]) is not None:
                raise ValueError(f"match was decided after round {i} but has more rounds")
        outcome = match_outcome(self.rounds)
        if outcome is None and isinstance(self.state, CompletedMatch):
            raise ValueError("match is marked completed but its rounds are undecided")
        if outcome is not None and self.result != outcome:
            raise ValueError(f"rounds decide the match as {outcome}, state says {self.result}")
        return self

    @property
    def result(self) -> Literal["win", "loss", "draw", "ongoing"]:
        if isinstance(self.state, CompletedMatch):
            return self.state.result
        return "ongoing"

    @property
    def is_completed(self) -> bool:
        return isinstance(self.state, CompletedMatch)


class ArchetypeRecordStats(BaseModel):
    archetype: str
    matches: int
    wins: int
    winrate: int


class PracticeStats(BaseModel):
    total_matches: int = 0
    wins: int = 0
    winrate: int = 0
    by_archetype: list[ArchetypeRecordStats] = Field(default_factory=list)
