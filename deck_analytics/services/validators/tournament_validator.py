"""Tournament legality checks for decks.

Construction rules (deck size, sideboard size, copy limits, banned and
restricted cards) are enforced programmatically against a format preset.
Errors make a deck illegal; warnings flag legal but risky builds using
the deck's analytics.
"""

from collections import Counter

from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.deck_models import CardRef, Deck, DeckInput, as_deck
from deck_analytics.models.format_rules import (
    TournamentFormat,
    TournamentValidation,
    ValidationError,
    ValidationWarning,
)
from deck_analytics.services.deck_analyzer import analyze_deck
from deck_analytics.services.exceptions import UnknownFormatError

logger = get_logger(__name__)


class TournamentValidator:
    """Validates decks against a tournament format's construction rules.

    Typical usage:
        validator = TournamentValidator()
        result = validator.validate(deck, get_format("standard"))
        if not result.is_valid:
            print(result.summary())
    """

    # Analytics floors (0-100) below which a legal deck gets a warning
    SYNERGY_WARNING_FLOOR = 60
    BALANCE_WARNING_FLOOR = 50

    def validate(self, deck: DeckInput, tournament_format: TournamentFormat) -> TournamentValidation:
        """Validate a deck against a format.

        Args:
            deck: Deck with main and sideboard entries
            tournament_format: Format to check against

        Returns:
            TournamentValidation with is_valid flag, errors and warnings
        """
        resolved = as_deck(deck)
        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []

        main_size = resolved.total_cards

        # 1. Main deck size
        errors.extend(self._validate_deck_size(main_size, tournament_format))

        # 2. Sideboard size
        errors.extend(self._validate_sideboard_size(resolved, tournament_format))

        # 3. Copy limits, banned and restricted cards
        errors.extend(self._validate_card_counts(resolved, tournament_format))

        # 4. Advisory warnings
        warnings.extend(self._build_warnings(resolved, main_size, tournament_format))

        return TournamentValidation(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            format=tournament_format,
        )

    def _validate_deck_size(
        self,
        main_size: int,
        tournament_format: TournamentFormat,
    ) -> list[ValidationError]:
        if main_size < tournament_format.min_deck_size:
            return [
                ValidationError(
                    code="DECK_SIZE",
                    message=(
                        f"Main deck too small: {main_size} cards "
                        f"(minimum {tournament_format.min_deck_size})"
                    ),
                    current_value=main_size,
                    required_value=tournament_format.min_deck_size,
                )
            ]
        if main_size > tournament_format.max_deck_size:
            return [
                ValidationError(
                    code="DECK_SIZE",
                    message=(
                        f"Main deck too large: {main_size} cards "
                        f"(maximum {tournament_format.max_deck_size})"
                    ),
                    current_value=main_size,
                    required_value=tournament_format.max_deck_size,
                )
            ]
        return []

    def _validate_sideboard_size(
        self,
        deck: Deck,
        tournament_format: TournamentFormat,
    ) -> list[ValidationError]:
        sideboard_size = sum(e.quantity for e in deck.sideboard)
        if sideboard_size <= tournament_format.sideboard_size:
            return []
        return [
            ValidationError(
                code="SIDEBOARD_SIZE",
                message=(
                    f"Sideboard too large: {sideboard_size} cards "
                    f"(maximum {tournament_format.sideboard_size})"
                ),
                current_value=sideboard_size,
                required_value=tournament_format.sideboard_size,
            )
        ]

    def _validate_card_counts(
        self,
        deck: Deck,
        tournament_format: TournamentFormat,
    ) -> list[ValidationError]:
        """Check copies summed across main deck and sideboard."""
        errors: list[ValidationError] = []

        counts: Counter[str] = Counter()
        cards: dict[str, CardRef] = {}
        for entry in deck.entries:
            counts[entry.card.id] += entry.quantity
            cards.setdefault(entry.card.id, entry.card)

        banned = set(tournament_format.banned_cards)
        restricted = {r.card_id: r.max_copies for r in tournament_format.restricted_cards}

        for card_id, count in counts.items():
            card = cards[card_id]

            if count > tournament_format.max_copies_per_card:
                errors.append(
                    ValidationError(
                        code="MAX_COPIES",
                        message=(
                            f"Too many copies of {card.name}: {count} "
                            f"(maximum {tournament_format.max_copies_per_card})"
                        ),
                        card_id=card_id,
                        card_name=card.name,
                        current_value=count,
                        required_value=tournament_format.max_copies_per_card,
                    )
                )

            if card_id in banned:
                errors.append(
                    ValidationError(
                        code="BANNED_CARD",
                        message=f"{card.name} is banned in {tournament_format.name} format",
                        card_id=card_id,
                        card_name=card.name,
                    )
                )

            if card_id in restricted and count > restricted[card_id]:
                errors.append(
                    ValidationError(
                        code="RESTRICTED_CARD",
                        message=(
                            f"Too many copies of restricted card {card.name}: {count} "
                            f"(maximum {restricted[card_id]})"
                        ),
                        card_id=card_id,
                        card_name=card.name,
                        current_value=count,
                        required_value=restricted[card_id],
                    )
                )

        return errors

    def _build_warnings(
        self,
        deck: Deck,
        main_size: int,
        tournament_format: TournamentFormat,
    ) -> list[ValidationWarning]:
        warnings: list[ValidationWarning] = []

        if (
            main_size == tournament_format.min_deck_size
            and tournament_format.max_deck_size > tournament_format.min_deck_size
        ):
            warnings.append(
                ValidationWarning(
                    code="SUBOPTIMAL_SIZE",
                    message=f"Deck is at minimum size ({main_size} cards)",
                    suggestion=(
                        f"Consider increasing to {min(60, tournament_format.max_deck_size)} "
                        "cards for better consistency"
                    ),
                    severity="low",
                )
            )

        if main_size == 0:
            return warnings

        analytics = analyze_deck(deck)
        if analytics.synergy_score < self.SYNERGY_WARNING_FLOOR:
            warnings.append(
                ValidationWarning(
                    code="WEAK_SYNERGY",
                    message="Low card synergy detected",
                    suggestion="Consider focusing on cards that work well together",
                    severity="medium",
                )
            )
        if analytics.deck_balance < self.BALANCE_WARNING_FLOOR:
            warnings.append(
                ValidationWarning(
                    code="HIGH_VARIANCE",
                    message="Deck may be inconsistent",
                    suggestion="Review card distribution and consider better balance",
                    severity="high",
                )
            )

        return warnings


# =============================================================================
# Format Presets
# =============================================================================

# Keyed by lowercase format name. Ban lists start empty and are filled in
# by the caller when a format's list changes.

FORMAT_PRESETS: dict[str, TournamentFormat] = {
    "standard": TournamentFormat(
        name="Standard",
        round_count=4,
        min_deck_size=50,
        max_deck_size=60,
        sideboard_size=15,
        max_copies_per_card=3,
    ),
    "advanced": TournamentFormat(
        name="Advanced",
        round_count=5,
        min_deck_size=40,
        max_deck_size=80,
        sideboard_size=20,
        max_copies_per_card=4,
    ),
    "limited": TournamentFormat(
        name="Limited",
        round_count=3,
        min_deck_size=40,
        max_deck_size=40,
        sideboard_size=0,
        max_copies_per_card=1,
    ),
}


def get_available_formats() -> list[TournamentFormat]:
    return list(FORMAT_PRESETS.values())


def get_format(format_name: str) -> TournamentFormat:
    """Get a format preset by name (case-insensitive).

    Raises:
        UnknownFormatError: No preset has that name.
    """
    tournament_format = FORMAT_PRESETS.get(format_name.strip().lower())
    if tournament_format is None:
        raise UnknownFormatError(f"Unknown tournament format: {format_name}")
    return tournament_format


def validate_deck_for_tournament(deck: DeckInput, format_name: str) -> TournamentValidation:
    """Validate a deck against a named format.

    An unknown format name yields an invalid result carrying an
    INVALID_FORMAT error (against the Standard preset) instead of raising.
    """
    try:
        tournament_format = get_format(format_name)
    except UnknownFormatError as e:
        logger.warning(
            "Validation requested for unknown format",
            extra={"extra_data": {"format": format_name}},
        )
        return TournamentValidation(
            is_valid=False,
            errors=[ValidationError(code="INVALID_FORMAT", message=str(e))],
            format=FORMAT_PRESETS["standard"],
        )

    result = TournamentValidator().validate(deck, tournament_format)
    logger.info(
        "Deck validated",
        extra={
            "extra_data": {
                "format": tournament_format.name,
                "is_valid": result.is_valid,
                "errors": len(result.errors),
                "warnings": len(result.warnings),
            }
        },
    )
    return result
