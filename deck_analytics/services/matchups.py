"""Matchup analysis against named archetypes.

Archetypes resolve to a strategy profile, either by exact name or by a
style keyword in the name ("Zeon Aggro" plays like aggro). Names that
resolve to nothing get a neutral 50% estimate and an empty plan.

The win-rate estimate starts at 50 and is adjusted by:
- style matchup against the deck's average cost (or balance for midrange)
- card efficiency relative to a typical deck
- competitive rating
- the opponent's observed meta win rate, when one is known
and is clamped to [20, 80].
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from deck_analytics.core.logging_config import get_logger
from deck_analytics.models.analytics_models import DeckAnalytics
from deck_analytics.models.deck_models import CardRef, DeckCardEntry, DeckInput, as_deck
from deck_analytics.models.meta_models import MetaGameData
from deck_analytics.models.tournament_models import (
    Gameplan,
    MatchupAnalysis,
    OpponentProfile,
    SideboardChange,
    SideboardPlan,
)
from deck_analytics.services.deck_analyzer import analyze_deck
from deck_analytics.services.meta_game import MetaGameAggregator
from deck_analytics.services.scorer import BASELINE_IMPACT, card_impact, card_value

logger = get_logger(__name__)

Style = Literal["aggro", "control", "midrange", "combo"]

NEUTRAL_WINRATE = 50.0
MIN_WINRATE = 20.0
MAX_WINRATE = 80.0

TYPICAL_EFFICIENCY = 2.0
MAX_SIDEBOARD_SWAPS = 6
KEY_CARD_COUNT = 3


@dataclass(frozen=True)
class ArchetypeProfile:
    name: str
    style: Style
    description: str
    strategy: str


ARCHETYPE_PROFILES: dict[str, ArchetypeProfile] = {
    "aggro rush": ArchetypeProfile(
        name="Aggro Rush",
        style="aggro",
        description="Fast, aggressive deck focusing on early pressure and quick wins",
        strategy="Apply early pressure, win before turn 6-7",
    ),
    "control lock": ArchetypeProfile(
        name="Control Lock",
        style="control",
        description="Defensive deck with removal and late-game threats",
        strategy="Control early game, win with powerful late-game threats",
    ),
    "midrange value": ArchetypeProfile(
        name="Midrange Value",
        style="midrange",
        description="Balanced deck with efficient threats and answers",
        strategy="Trade efficiently, apply pressure when ahead",
    ),
    "combo engine": ArchetypeProfile(
        name="Combo Engine",
        style="combo",
        description="Synergy-based deck with powerful card interactions",
        strategy="Assemble combo pieces, protect the combo",
    ),
}

STYLE_DEFAULTS: dict[Style, ArchetypeProfile] = {
    profile.style: profile for profile in ARCHETYPE_PROFILES.values()
}


def resolve_archetype(name: str) -> ArchetypeProfile | None:
    """Find the strategy profile for an archetype name, or None if unknown."""
    key = name.strip().lower()
    if key in ARCHETYPE_PROFILES:
        return ARCHETYPE_PROFILES[key]

    for style, template in STYLE_DEFAULTS.items():
        if style in key:
            return ArchetypeProfile(
                name=name,
                style=style,
                description=template.description,
                strategy=template.strategy,
            )
    return None


# =============================================================================
# Win rate estimate
# =============================================================================


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def estimate_winrate(
    analytics: DeckAnalytics,
    profile: ArchetypeProfile | None,
    baseline_win_rate: float | None = None,
) -> float:
    """Estimate the deck's game win rate (percent) against an archetype."""
    if profile is None or analytics.total_cards == 0:
        return NEUTRAL_WINRATE

    estimate = NEUTRAL_WINRATE
    avg_cost = analytics.average_cost

    if profile.style == "aggro":
        if avg_cost >= 4:
            estimate -= 15  # too slow to stabilize
        elif avg_cost <= 2.5:
            estimate += 5
    elif profile.style == "control":
        if avg_cost <= 3:
            estimate += 10  # pressure before their answers line up
        elif avg_cost >= 4.5:
            estimate -= 5
    elif profile.style == "combo":
        if avg_cost <= 3:
            estimate += 5
    else:
        estimate += (analytics.deck_balance - 50) / 10

    estimate += _clamp((analytics.card_efficiency - TYPICAL_EFFICIENCY) * 5, -10, 10)
    estimate += _clamp((analytics.competitive_rating - 50) / 5, -10, 10)

    if baseline_win_rate is not None:
        estimate -= (baseline_win_rate - 50) / 2

    return round(_clamp(estimate, MIN_WINRATE, MAX_WINRATE), 1)


# =============================================================================
# Gameplan, tips and sideboarding
# =============================================================================


def _unique_cards(entries: Sequence[DeckCardEntry]) -> list[CardRef]:
    seen: dict[str, CardRef] = {}
    for entry in entries:
        seen.setdefault(entry.card.id, entry.card)
    return list(seen.values())


def _cost(card: CardRef) -> float:
    return card.cost or 0


def _key_cards(cards: list[CardRef], style: Style) -> list[CardRef]:
    if style == "aggro":
        ranked = sorted((c for c in cards if _cost(c) <= 3), key=lambda c: (_cost(c), -card_value(c)))
    elif style == "control":
        ranked = sorted(cards, key=lambda c: -card_impact(c))
    elif style == "combo":
        ranked = sorted((c for c in cards if _cost(c) <= 2), key=lambda c: -card_value(c))
    else:
        ranked = sorted(cards, key=lambda c: -card_value(c))
    return ranked[:KEY_CARD_COUNT]


def _avoid_cards(cards: list[CardRef], style: Style) -> list[CardRef]:
    if style in ("aggro", "combo"):
        slow = sorted((c for c in cards if _cost(c) >= 6), key=lambda c: -_cost(c))
        return slow[:KEY_CARD_COUNT]
    return []


def generate_gameplan(
    entries: Sequence[DeckCardEntry],
    profile: ArchetypeProfile,
    analytics: DeckAnalytics,
) -> Gameplan:
    cards = _unique_cards(entries)
    plan = Gameplan(
        key_cards=_key_cards(cards, profile.style),
        avoid_cards=_avoid_cards(cards, profile.style),
    )

    if profile.style == "aggro":
        if analytics.average_cost >= 4:
            plan.on_play = [
                "Prioritize early defensive plays",
                "Look for card advantage engines",
                "Stabilize around turn 4-5",
            ]
            plan.on_draw = [
                "Focus on survival tools",
                "Accept early damage for card advantage",
                "Plan for late-game dominance",
            ]
        else:
            plan.on_play = [
                "Race aggressively",
                "Prioritize efficient threats",
                "Avoid trading unless favorable",
            ]
            plan.on_draw = [
                "Look for removal",
                "Trade efficiently to slow them down",
                "Counter-attack when possible",
            ]
    elif profile.style == "control":
        plan.on_play = [
            "Apply early pressure",
            "Force them to react",
            "Avoid overextending into sweepers",
        ]
        plan.on_draw = [
            "Build board presence gradually",
            "Hold up interaction",
            "Pressure their life total",
        ]
    elif profile.style == "combo":
        plan.on_play = [
            "Deploy threats early to shorten their clock",
            "Keep disruption for their key turn",
        ]
        plan.on_draw = [
            "Mulligan for early interaction",
            "Identify their combo pieces before committing",
        ]
    else:
        plan.on_play = [
            "Take the initiative with efficient threats",
            "Trade when it keeps you ahead on board",
        ]
        plan.on_draw = [
            "Answer their early threats efficiently",
            "Win the long game with card quality",
        ]
    return plan


def generate_play_tips(profile: ArchetypeProfile, analytics: DeckAnalytics) -> list[str]:
    tips: list[str] = []

    if profile.style == "aggro":
        tips += [
            "Prioritize life total preservation",
            "Look for favorable trades early",
            "Don't be afraid to take some damage to develop",
        ]
    elif profile.style == "control":
        tips += [
            "Apply consistent pressure",
            "Play around board sweepers",
            "Hold counterplay for key threats",
        ]
    elif profile.style == "combo":
        tips += [
            "Identify and disrupt key pieces",
            "Apply pressure to force suboptimal plays",
            "Save removal for combo enablers",
        ]
    else:
        tips += [
            "Value every trade; card quality decides the matchup",
            "Shift to aggression once you are ahead on board",
        ]

    if analytics.synergy_score > 70:
        tips.append("Focus on assembling your synergies")
    if analytics.average_cost < 3:
        tips.append("Maintain card advantage in longer games")
    else:
        tips.append("Mulligan aggressively for early plays")
    return tips


def _sideboard_candidates(
    main: Sequence[DeckCardEntry],
    side: Sequence[DeckCardEntry],
    style: Style,
    efficiency: float,
) -> tuple[list[DeckCardEntry], list[DeckCardEntry], str, str]:
    """Pick (cards in, cards out, in reason, out reason) ordered by priority."""
    if style in ("aggro", "combo"):
        cards_in = sorted(
            (e for e in side if _cost(e.card) <= 2),
            key=lambda e: -card_value(e.card),
        )
        out_floor = 5 if style == "aggro" else 6
        cards_out = sorted(
            (e for e in main if _cost(e.card) >= out_floor),
            key=lambda e: -_cost(e.card),
        )
        return (
            cards_in,
            cards_out,
            "Cheap interaction keeps pace with a fast opponent",
            "Too slow for this matchup",
        )

    if style == "control":
        cards_in = sorted(
            (e for e in side if card_impact(e.card) > BASELINE_IMPACT * 2),
            key=lambda e: -card_impact(e.card),
        )
        cards_out = sorted(
            (e for e in main if _cost(e.card) <= 1 and card_impact(e.card) <= BASELINE_IMPACT),
            key=lambda e: card_value(e.card),
        )
        return (
            cards_in,
            cards_out,
            "Resilient threat that outlasts their answers",
            "Low impact against a slow, answer-heavy deck",
        )

    cards_in = sorted(
        (e for e in side if card_value(e.card) > efficiency),
        key=lambda e: -card_value(e.card),
    )
    cards_out = sorted(main, key=lambda e: card_value(e.card))
    return (
        cards_in,
        cards_out,
        "More efficient than the card it replaces",
        "Least efficient card in the deck",
    )


def _take(
    candidates: Sequence[DeckCardEntry],
    budget: int,
    reason: str,
) -> list[SideboardChange]:
    changes: list[SideboardChange] = []
    for entry in candidates:
        if budget <= 0:
            break
        quantity = min(entry.quantity, budget)
        changes.append(SideboardChange(card=entry.card, quantity=quantity, reason=reason))
        budget -= quantity
    return changes


def generate_sideboard_plan(
    main: Sequence[DeckCardEntry],
    side: Sequence[DeckCardEntry],
    profile: ArchetypeProfile,
    efficiency: float,
) -> SideboardPlan:
    """Pair sideboard cards in with main deck cards out, copy for copy."""
    cards_in, cards_out, in_reason, out_reason = _sideboard_candidates(
        main, side, profile.style, efficiency
    )
    swaps = min(
        sum(e.quantity for e in cards_in),
        sum(e.quantity for e in cards_out),
        MAX_SIDEBOARD_SWAPS,
    )

    priority = {
        "aggro": "Bring in cheap interaction",
        "control": "Bring in resilient threats",
        "combo": "Bring in fast disruption",
        "midrange": "Upgrade card quality",
    }[profile.style]

    return SideboardPlan(
        cards_in=_take(cards_in, swaps, in_reason),
        cards_out=_take(cards_out, swaps, out_reason),
        priority_order=[priority, "Remove dead cards", "Adjust threat density"],
    )


# =============================================================================
# Entry points
# =============================================================================


def analyze_matchup(
    deck: DeckInput,
    archetype: str,
    meta: MetaGameData | None = None,
    analytics: DeckAnalytics | None = None,
) -> MatchupAnalysis:
    """Analyze one matchup.

    Args:
        deck: Deck (sideboard entries feed the sideboard plan)
        archetype: Opponent archetype name
        meta: Optional meta snapshot supplying the opponent's baseline win rate
        analytics: Precomputed analytics for the deck, if available

    Returns:
        MatchupAnalysis; unknown archetypes get a neutral estimate and empty plan
    """
    resolved = as_deck(deck)
    profile = resolve_archetype(archetype)

    if profile is None:
        return MatchupAnalysis(
            opponent=OpponentProfile(
                archetype=archetype,
                description="Unknown archetype",
                strategy="Varies",
            ),
            winrate_estimate=NEUTRAL_WINRATE,
        )

    analytics = analytics or analyze_deck(resolved)
    baseline = None
    if meta is not None:
        rates = {name.lower(): rate for name, rate in meta.archetype_win_rates().items()}
        baseline = rates.get(archetype.strip().lower())

    opponent = OpponentProfile(
        archetype=profile.name,
        description=profile.description,
        strategy=profile.strategy,
    )
    if analytics.total_cards == 0:
        return MatchupAnalysis(opponent=opponent, winrate_estimate=NEUTRAL_WINRATE)

    main = resolved.main_deck
    return MatchupAnalysis(
        opponent=opponent,
        winrate_estimate=estimate_winrate(analytics, profile, baseline),
        gameplan=generate_gameplan(main, profile, analytics),
        play_tips=generate_play_tips(profile, analytics),
        sideboarding=generate_sideboard_plan(
            main, resolved.sideboard, profile, analytics.card_efficiency
        ),
    )


async def analyze_matchups(
    deck: DeckInput,
    archetype_names: Sequence[str],
    aggregator: MetaGameAggregator | None = None,
) -> list[MatchupAnalysis]:
    """Analyze several matchups, best estimate first.

    When an aggregator is given its snapshot supplies baseline win rates.

    Raises:
        MetaDataUnavailableError: The aggregator's source failed with nothing cached.
    """
    meta = await aggregator.get_meta_game_data() if aggregator is not None else None
    analytics = analyze_deck(deck)

    matchups = [analyze_matchup(deck, name, meta=meta, analytics=analytics) for name in archetype_names]

    logger.info(
        "Matchups analyzed",
        extra={
            "extra_data": {
                "archetypes": list(archetype_names),
                "with_meta": meta is not None,
            }
        },
    )
    return sorted(matchups, key=lambda m: m.winrate_estimate, reverse=True)
