"""Shared pytest fixtures."""

import pytest

from deck_analytics.models.deck_models import CardRef, Deck, DeckCardEntry


def build_entry(
    card_id: str,
    cost: float | None,
    quantity: int,
    type_name: str | None = "Unit",
    faction_name: str | None = "Federation",
    power: int | None = None,
    toughness: int | None = None,
    rarity_name: str | None = "Common",
    category: str = "main",
) -> DeckCardEntry:
    return DeckCardEntry(
        card=CardRef(
            id=card_id,
            name=card_id.replace("_", " ").title(),
            cost=cost,
            type_name=type_name,
            faction_name=faction_name,
            rarity_name=rarity_name,
            power=power,
            toughness=toughness,
        ),
        quantity=quantity,
        category=category,
    )


@pytest.fixture
def make_entry():
    """Fixture providing the deck entry factory."""
    return build_entry


@pytest.fixture
def optimized_deck():
    """A 54-card single-faction deck with a smooth curve.

    Trips no suggestion or improvement rule.
    """
    return Deck(
        name="Federation Midrange",
        entries=(
            build_entry("gm_scout", 0, 4, power=1, toughness=1),
            build_entry("guncannon_lite", 1, 4, power=2, toughness=1),
            build_entry("gm_sniper", 2, 4, power=3, toughness=2),
            build_entry("guntank", 2, 4, power=2, toughness=3),
            build_entry("quick_orders", 1, 4, type_name="Command"),
            build_entry("resupply", 2, 4, type_name="Command"),
            build_entry("rookie_pilot", 1, 4, type_name="Pilot"),
            build_entry("gm_command", 3, 4, power=4, toughness=3),
            build_entry("guncannon", 3, 4, power=3, toughness=4),
            build_entry("gundam_ez8", 4, 4, power=5, toughness=4),
            build_entry("ace_pilot", 3, 2, type_name="Pilot", rarity_name="Rare"),
            build_entry("gundam", 5, 4, power=6, toughness=6, rarity_name="Rare"),
            build_entry("full_armor", 6, 3, power=8, toughness=6, rarity_name="Rare"),
            build_entry("solar_ray", 4, 2, type_name="Command", rarity_name="Rare"),
            build_entry("white_base", 7, 3, power=9, toughness=8, rarity_name="Legendary"),
        ),
    )


@pytest.fixture
def curve_deck():
    """Ten unique cards, 40 copies, costs 1,1,2,2,3,3,4,5,6,7."""
    costs = [1, 1, 2, 2, 3, 3, 4, 5, 6, 7]
    quantities = [1, 1, 4, 4, 5, 5, 5, 5, 5, 5]
    return Deck(
        name="Curve",
        entries=tuple(
            build_entry(f"card_{i}", cost, qty, power=cost, toughness=cost)
            for i, (cost, qty) in enumerate(zip(costs, quantities))
        ),
    )


@pytest.fixture
def weak_deck():
    """Forty expensive, low-impact cards spread over ten factions and types."""
    return Deck(
        name="Pile",
        entries=tuple(
            build_entry(
                f"lumber_{i}",
                7,
                4,
                type_name=f"Type{i}",
                faction_name=f"Faction{i}",
                power=1,
                toughness=1,
            )
            for i in range(10)
        ),
    )


@pytest.fixture
def sideboard_deck(optimized_deck):
    """The optimized deck plus a seven-card sideboard."""
    return Deck(
        name="Federation Midrange",
        entries=optimized_deck.entries
        + (
            build_entry("beam_shield", 1, 3, type_name="Command", category="side"),
            build_entry("psycho_gundam", 5, 2, power=8, toughness=8, category="side"),
            build_entry("gm_custom", 2, 2, power=4, toughness=3, category="side"),
        ),
    )
