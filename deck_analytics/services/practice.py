"""Practice match tracking.

A practice match is best of three. Recording a round returns a new match;
once either side has two wins (or three rounds have been played without
a winner) the match moves to ``CompletedMatch`` and rejects further rounds.
Persisting matches is up to the caller.
"""

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.deck_models import DeckInput, as_deck
from deck_analytics.models.tournament_models import (
    ArchetypeRecordStats,
    CompletedMatch,
    PracticeMatch,
    PracticeOutcome,
    PracticeRound,
    PracticeStats,
    match_outcome,
)
from deck_analytics.services.exceptions import PracticeMatchClosedError

logger = get_logger(__name__)


def create_practice_match(deck: DeckInput, opponent_archetype: str) -> PracticeMatch:
    """Start an ongoing practice match for a deck against an archetype."""
    resolved = as_deck(deck)
    match = PracticeMatch(
        id=f"practice-{uuid.uuid4().hex}",
        deck_name=resolved.name,
        opponent_archetype=opponent_archetype,
        started_at=datetime.now(UTC),
    )
    logger.info(
        "Practice match started",
        extra={"extra_data": {"match_id": match.id, "opponent": opponent_archetype}},
    )
    return match


def record_practice_round(
    match: PracticeMatch,
    result: PracticeOutcome,
    on_play: bool,
    duration_minutes: float,
    key_moments: list[str] | None = None,
) -> PracticeMatch:
    """Append a round and return the updated match.

    Raises:
        PracticeMatchClosedError: The match is already completed.
    """
    if match.is_completed:
        raise PracticeMatchClosedError(f"Practice match {match.id} is already {match.result}")

    new_round = PracticeRound(
        round_number=len(match.rounds) + 1,
        player_result=result,
        on_play=on_play,
        duration_minutes=duration_minutes,
        key_moments=list(key_moments or []),
    )
    rounds = [*match.rounds, new_round]

    update: dict = {"rounds": rounds}
    outcome = match_outcome(rounds)
    if outcome is not None:
        update["state"] = CompletedMatch(result=outcome, ended_at=datetime.now(UTC))
        logger.info(
            "Practice match completed",
            extra={
                "extra_data": {
                    "match_id": match.id,
                    "result": outcome,
                    "rounds": len(rounds),
                }
            },
        )

    return PracticeMatch.model_validate({**dict(match), **update})


def summarize_practice(matches: Iterable[PracticeMatch]) -> PracticeStats:
    """Win/loss record over completed matches, overall and per archetype."""
    completed = [m for m in matches if m.is_completed]
    if not completed:
        return PracticeStats()

    records: dict[str, list[int]] = {}
    for match in completed:
        record = records.setdefault(match.opponent_archetype, [0, 0])
        record[0] += 1
        if match.result == "win":
            record[1] += 1

    wins = sum(1 for m in completed if m.result == "win")
    by_archetype = [
        ArchetypeRecordStats(
            archetype=archetype,
            matches=played,
            wins=won,
            winrate=round(100 * won / played),
        )
        for archetype, (played, won) in records.items()
    ]
    by_archetype.sort(key=lambda r: r.matches, reverse=True)

    return PracticeStats(
        total_matches=len(completed),
        wins=wins,
        winrate=round(100 * wins / len(completed)),
        by_archetype=by_archetype,
    )
