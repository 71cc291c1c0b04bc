"""Deck analytics API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from deck_analytics.models.analytics_models import DeckAnalytics, DeckComparison, RatingTier
from deck_analytics.models.deck_models import Deck
from deck_analytics.models.meta_models import MetaGameData, MetaSnapshot
from deck_analytics.services.deck_analyzer import analyze_deck, compare_decks
from deck_analytics.services.exceptions import MetaDataUnavailableError
from deck_analytics.services.meta_game import MetaGameAggregator, get_meta_aggregator
from deck_analytics.services.scorer import rating_tier

router = APIRouter()


def get_aggregator() -> MetaGameAggregator:
    """Dependency to get the meta-game aggregator."""
    return get_meta_aggregator()


class CompareRequest(BaseModel):
    """Request model for deck comparison."""

    deck_a: Deck
    deck_b: Deck


@router.post("/deck", response_model=DeckAnalytics)
async def analyze(deck: Deck):
    """Analyze a deck."""
    return analyze_deck(deck)


@router.post("/compare", response_model=DeckComparison)
async def compare(request: CompareRequest):
    """Compare two decks (differences are a - b)."""
    return compare_decks(request.deck_a, request.deck_b)


@router.get("/meta", response_model=MetaGameData)
async def meta_game(aggregator: MetaGameAggregator = Depends(get_aggregator)):
    """Get the current meta-game aggregate."""
    try:
        return await aggregator.get_meta_game_data()
    except MetaDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/meta/current", response_model=MetaSnapshot)
async def current_meta(aggregator: MetaGameAggregator = Depends(get_aggregator)):
    """Get the dated top-archetype snapshot."""
    try:
        return await aggregator.get_current_meta()
    except MetaDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/tier/{rating}", response_model=RatingTier)
async def tier(rating: float = Path(ge=0, le=100)):
    """Get the display tier for a competitive rating."""
    return rating_tier(rating)
