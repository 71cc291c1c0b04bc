"""Pydantic models for the deck analytics engine."""

from deck_analytics.models.analytics_models import (
    DeckAnalytics,
    DeckComparison,
    DeckImprovement,
    DeckSuggestion,
    RatingTier,
)
from deck_analytics.models.deck_models import (
    CardRef,
    Deck,
    DeckCardEntry,
    DistributionBucket,
)
from deck_analytics.models.format_rules import (
    TournamentFormat,
    TournamentValidation,
)
from deck_analytics.models.meta_models import (
    MetaBreakdown,
    MetaGameData,
    MetaSnapshot,
    MetaStats,
    TrendingCard,
)
from deck_analytics.models.tournament_models import (
    MatchupAnalysis,
    PracticeMatch,
    PracticeRound,
    TournamentSimulation,
)

__all__ = [
    # Deck input
    "CardRef",
    "Deck",
    "DeckCardEntry",
    "DistributionBucket",
    # Analytics
    "DeckAnalytics",
    "DeckComparison",
    "DeckImprovement",
    "DeckSuggestion",
    "RatingTier",
    # Meta game
    "MetaBreakdown",
    "MetaGameData",
    "MetaSnapshot",
    "MetaStats",
    "TrendingCard",
    # Tournament
    "MatchupAnalysis",
    "PracticeMatch",
    "PracticeRound",
    "TournamentFormat",
    "TournamentSimulation",
    "TournamentValidation",
]
