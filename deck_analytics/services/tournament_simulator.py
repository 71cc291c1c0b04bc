"""Single-elimination tournament simulation.

Each round draws an opponent archetype from the meta weights and plays a
best-of-three: the round ends as soon as either side has two game wins.
The per-game win probability comes from the matchup estimator, bumped up
on the play and down on the draw. Game 1's play/draw is a coin flip; after
that the loser of the previous game goes on the draw.

Randomness is always injected: pass ``rng`` (anything with ``random()``)
or a ``seed``. Every run without an injected generator gets its own
``random.Random`` so concurrent simulations never share state.

Placement in a bracket of 2^n players:
- champion: 1
- eliminated in round r: 2^(n-r) + 1
"""

import random
from collections.abc import Mapping
from typing import Protocol

from deck_analytics.core.config import get_settings
from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.analytics_models import DeckAnalytics
from deck_analytics.models.deck_models import DeckInput, as_deck
from deck_analytics.models.format_rules import TournamentFormat
from deck_analytics.models.meta_models import MetaBreakdown
from deck_analytics.models.tournament_models import (
    ExpectedPlacement,
    RoundResult,
    SimulatedGame,
    TournamentSimulation,
)
from deck_analytics.services.deck_analyzer import analyze_deck
from deck_analytics.services.matchups import estimate_winrate, resolve_archetype
from deck_analytics.services.validators import get_format

logger = get_logger(__name__)

GAMES_TO_WIN_ROUND = 2
UNKNOWN_OPPONENT = "Unknown"


class RandomSource(Protocol):
    """Minimal generator interface: uniform floats in [0, 1)."""

    def random(self) -> float: ...


# =============================================================================
# Helpers
# =============================================================================


def normalize_weights(meta_breakdown: Mapping[str, float] | MetaBreakdown) -> dict[str, float]:
    """Normalize archetype weights to sum to 1, dropping non-positive ones."""
    if isinstance(meta_breakdown, MetaBreakdown):
        meta_breakdown = meta_breakdown.as_archetype_weights()

    positive = {name: float(w) for name, w in meta_breakdown.items() if w > 0}
    total = sum(positive.values())
    if total <= 0:
        return {}
    return {name: w / total for name, w in positive.items()}


def sample_archetype(weights: Mapping[str, float], rng: RandomSource) -> str:
    """Draw one archetype by weight; an empty field yields an unknown opponent."""
    if not weights:
        return UNKNOWN_OPPONENT

    target = rng.random()
    cumulative = 0.0
    name = UNKNOWN_OPPONENT
    for name, weight in weights.items():
        cumulative += weight
        if target < cumulative:
            return name
    # float rounding can leave target just above the last cumulative sum
    return name


def game_win_probability(base: float, on_play: bool, play_advantage: float) -> float:
    if on_play:
        return min(1.0, base * (1 + play_advantage))
    return max(0.0, base * (1 - play_advantage))


def placement_for_elimination(round_number: int, round_count: int) -> int:
    return 2 ** (round_count - round_number) + 1


def round_win_probability(p: float) -> float:
    """Chance of taking a best-of-three with per-game win chance p."""
    return p * p * (3 - 2 * p)


def expected_placement(
    round_win_chance: float,
    round_count: int,
    final_placement: int,
) -> ExpectedPlacement:
    """Bracket bounds plus an average blending this run with the analytic mean.

    The analytic mean assumes each round is won independently with the
    same probability.
    """
    q = round_win_chance
    mean = q**round_count
    for r in range(1, round_count + 1):
        mean += q ** (r - 1) * (1 - q) * placement_for_elimination(r, round_count)

    worst = placement_for_elimination(1, round_count)
    average = round((final_placement + mean) / 2, 2)
    return ExpectedPlacement(min=1, average=min(max(average, 1.0), worst), max=worst)


# =============================================================================
# Simulation
# =============================================================================


class _MatchupTable:
    """Lazily computed per-archetype game win probabilities for one deck."""

    def __init__(self, analytics: DeckAnalytics):
        self._analytics = analytics
        self._cache: dict[str, float] = {}

    def probability(self, archetype: str) -> float:
        if archetype not in self._cache:
            estimate = estimate_winrate(self._analytics, resolve_archetype(archetype))
            self._cache[archetype] = estimate / 100
        return self._cache[archetype]


def _play_round(
    round_number: int,
    opponent: str,
    base: float,
    play_advantage: float,
    rng: RandomSource,
) -> RoundResult:
    games: list[SimulatedGame] = []
    wins = losses = 0
    on_play = rng.random() < 0.5

    while wins < GAMES_TO_WIN_ROUND and losses < GAMES_TO_WIN_ROUND:
        won = rng.random() < game_win_probability(base, on_play, play_advantage)
        games.append(
            SimulatedGame(game=len(games) + 1, result="win" if won else "loss", on_play=on_play)
        )
        if won:
            wins += 1
        else:
            losses += 1
        on_play = won  # loser goes on the draw

    return RoundResult(
        round=round_number,
        opponent_archetype=opponent,
        result="win" if wins > losses else "loss",
        games=games,
    )


async def simulate_tournament(
    deck: DeckInput,
    format: TournamentFormat | str,
    round_count: int | None = None,
    meta_breakdown: Mapping[str, float] | MetaBreakdown | None = None,
    rng: RandomSource | None = None,
    seed: int | None = None,
    play_advantage: float | None = None,
) -> TournamentSimulation:
    """Simulate one run through a single-elimination bracket.

    Args:
        deck: Player deck
        format: Tournament format or preset name
        round_count: Rounds to play (defaults to the format's round count)
        meta_breakdown: Archetype weights, or a MetaBreakdown mapped onto
            the named archetype profiles. Defaults to an even field.
        rng: Injected random source
        seed: Seed for a private generator when no rng is given
        play_advantage: On-the-play bump (defaults to SIM_PLAY_ADVANTAGE)

    Returns:
        TournamentSimulation; results stop at the first lost round

    Raises:
        UnknownFormatError: format is a name with no preset.
    """
    resolved = as_deck(deck)
    tournament_format = get_format(format) if isinstance(format, str) else format
    rounds = round_count if round_count is not None else tournament_format.round_count
    if rounds < 1:
        raise ValueError("round_count must be at least 1")

    if meta_breakdown is None:
        meta_breakdown = MetaBreakdown(
            control_decks=25.0, aggro_decks=25.0, midrange_decks=25.0, combo_decks=25.0
        )
    weights = normalize_weights(meta_breakdown)
    rng = rng if rng is not None else random.Random(seed)
    advantage = play_advantage if play_advantage is not None else get_settings().play_advantage

    matchups = _MatchupTable(analyze_deck(resolved))

    results: list[RoundResult] = []
    final_placement = 1
    for round_number in range(1, rounds + 1):
        opponent = sample_archetype(weights, rng)
        outcome = _play_round(
            round_number, opponent, matchups.probability(opponent), advantage, rng
        )
        results.append(outcome)

        logger.debug(
            "Round simulated",
            extra={
                "extra_data": {
                    "round": round_number,
                    "opponent": opponent,
                    "result": outcome.result,
                    "games": len(outcome.games),
                }
            },
        )

        if outcome.result == "loss":
            final_placement = placement_for_elimination(round_number, rounds)
            break

    games_played = sum(len(r.games) for r in results)
    games_won = sum(r.games_won for r in results)
    overall = round(100 * games_won / games_played, 2) if games_played else 0.0

    field_probability = sum(w * matchups.probability(name) for name, w in weights.items())
    if not weights:
        field_probability = matchups.probability(UNKNOWN_OPPONENT)

    simulation = TournamentSimulation(
        player_deck=resolved,
        format=tournament_format,
        rounds=rounds,
        meta_breakdown=weights,
        results=results,
        overall_winrate=overall,
        expected_placement=expected_placement(
            round_win_probability(field_probability), rounds, final_placement
        ),
        final_placement=final_placement,
    )

    logger.info(
        "Tournament simulated",
        extra={
            "extra_data": {
                "deck": resolved.name,
                "format": tournament_format.name,
                "rounds": rounds,
                "rounds_played": len(results),
                "final_placement": final_placement,
                "overall_winrate": overall,
            }
        },
    )
    return simulation
