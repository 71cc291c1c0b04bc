"""Tournament preparation API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from deck_analytics.api.analytics import get_aggregator
from deck_analytics.core.config import get_settings
from deck_analytics.models.deck_models import Deck
from deck_analytics.models.format_rules import TournamentFormat, TournamentValidation
from deck_analytics.models.tournament_models import (
    MatchupAnalysis,
    PracticeMatch,
    PracticeOutcome,
    TournamentSimulation,
)
from deck_analytics.services.exceptions import (
    MetaDataUnavailableError,
    PracticeMatchClosedError,
    UnknownFormatError,
)
from deck_analytics.services.matchups import analyze_matchups
from deck_analytics.services.meta_game import MetaGameAggregator
from deck_analytics.services.practice import create_practice_match, record_practice_round
from deck_analytics.services.tournament_simulator import simulate_tournament
from deck_analytics.services.validators import (
    get_available_formats,
    get_format,
    validate_deck_for_tournament,
)

router = APIRouter()


class ValidateRequest(BaseModel):
    """Request model for format validation."""

    deck: Deck
    format_name: str = Field(default_factory=lambda: get_settings().default_format)


class MatchupRequest(BaseModel):
    """Request model for matchup analysis."""

    deck: Deck
    archetypes: list[str] = Field(min_length=1)
    use_meta: bool = Field(default=True, description="Adjust estimates by meta win rates")


class SimulateRequest(BaseModel):
    """Request model for tournament simulation."""

    deck: Deck
    format_name: str = Field(default_factory=lambda: get_settings().default_format)
    round_count: int | None = Field(default=None, ge=1, le=12)
    meta_breakdown: dict[str, float] | None = Field(
        default=None,
        description="Archetype weights; defaults to the current meta breakdown",
    )
    seed: int | None = None


class PracticeCreateRequest(BaseModel):
    """Request model for starting a practice match."""

    deck: Deck
    opponent_archetype: str


class PracticeRoundRequest(BaseModel):
    """Request model for recording a practice round."""

    match: PracticeMatch
    result: PracticeOutcome
    on_play: bool
    duration_minutes: float = Field(ge=0)
    key_moments: list[str] = []


@router.get("/formats", response_model=list[TournamentFormat])
async def list_formats():
    """List available tournament formats."""
    return get_available_formats()


@router.post("/validate", response_model=TournamentValidation)
async def validate(request: ValidateRequest):
    """Validate a deck for a tournament format."""
    return validate_deck_for_tournament(request.deck, request.format_name)


@router.post("/matchups", response_model=list[MatchupAnalysis])
async def matchups(
    request: MatchupRequest,
    aggregator: MetaGameAggregator = Depends(get_aggregator),
):
    """Analyze matchups against a list of archetypes."""
    try:
        return await analyze_matchups(
            request.deck,
            request.archetypes,
            aggregator=aggregator if request.use_meta else None,
        )
    except MetaDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/simulate", response_model=TournamentSimulation)
async def simulate(
    request: SimulateRequest,
    aggregator: MetaGameAggregator = Depends(get_aggregator),
):
    """Simulate a single-elimination tournament run."""
    try:
        tournament_format = get_format(request.format_name)
        meta_breakdown = request.meta_breakdown
        if meta_breakdown is None:
            meta = await aggregator.get_meta_game_data()
            meta_breakdown = meta.meta_breakdown.as_archetype_weights()

        return await simulate_tournament(
            request.deck,
            tournament_format,
            round_count=request.round_count,
            meta_breakdown=meta_breakdown,
            seed=request.seed,
        )
    except UnknownFormatError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MetaDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/practice", response_model=PracticeMatch)
async def start_practice(request: PracticeCreateRequest):
    """Start a practice match."""
    return create_practice_match(request.deck, request.opponent_archetype)


@router.post("/practice/round", response_model=PracticeMatch)
async def record_round(request: PracticeRoundRequest):
    """Record a round on a practice match and return the updated match."""
    try:
        return record_practice_round(
            request.match,
            request.result,
            request.on_play,
            request.duration_minutes,
            request.key_moments,
        )
    except PracticeMatchClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
