"""Validators for tournament play.

Pure Python legality checks against format presets.
"""

from deck_analytics.services.validators.tournament_validator import (
    FORMAT_PRESETS,
    TournamentValidator,
    get_available_formats,
    get_format,
    validate_deck_for_tournament,
)

__all__ = [
    "FORMAT_PRESETS",
    "TournamentValidator",
    "get_available_formats",
    "get_format",
    "validate_deck_for_tournament",
]
