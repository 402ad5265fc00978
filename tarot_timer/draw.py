"""Card draw engine: filtering, shuffling, selection and orientation.

Every function takes the randomness it needs as a ``RandomSource``. Pass a
``SeededRandomSource`` for reproducible draws or a ``SystemRandomSource`` for
throwaway ones; the engine itself never decides which.

Stream layout for a position draw with source ``rng``:

- card pick:        ``rng.derive("pos-<i>")``
- orientation roll: ``rng.derive("reversed-<i>")``
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Collection, Dict, List, Optional, Sequence, Tuple

from .deck import validate_catalog
from .errors import EmptyDeckError
from .models import SpreadCardAssignment, SpreadLayout, TarotCard
from .utils.rng import RandomSource

log = logging.getLogger("tarot_timer.draw")

BASE_REVERSAL_PROBABILITY = 0.25

# Whole-spread overrides of the base probability
SPREAD_REVERSAL_PROBABILITY: Dict[str, float] = {
    "cup_of_relationship": 0.30,
    "one_card": 0.20,
}

# (spread_id, position_index) overrides, checked first
POSITION_REVERSAL_PROBABILITY: Dict[Tuple[str, int], float] = {
    ("celtic_cross", 1): 0.40,  # Challenge
    ("celtic_cross", 8): 0.35,  # Inner self
}


def generate_spread_seed(spread_id: str, timestamp: Optional[str] = None) -> str:
    time = timestamp or datetime.now(timezone.utc).isoformat()
    return f"{spread_id}-{time}-spread-drawing-2024"


def available_cards(catalog: Sequence[TarotCard], exclude_ids: Collection[str] = ()) -> List[TarotCard]:
    if not catalog:
        raise ValueError("catalog must not be empty")
    excluded = set(exclude_ids)
    return [c for c in catalog if c.id not in excluded]


def shuffle(cards: Sequence[TarotCard], rng: RandomSource) -> List[TarotCard]:
    """Fisher-Yates shuffle into a new list; the input is left untouched."""
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randbelow(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def draw_card(catalog: Sequence[TarotCard], exclude_ids: Collection[str], rng: RandomSource) -> TarotCard:
    candidates = available_cards(catalog, exclude_ids)
    if not candidates:
        raise EmptyDeckError(
            f"No cards available to draw ({len(catalog)} in deck, {len(set(exclude_ids))} excluded)"
        )
    return candidates[rng.randbelow(len(candidates))]


def reversal_probability(spread_id: str, position_index: int) -> float:
    override = POSITION_REVERSAL_PROBABILITY.get((spread_id, position_index))
    if override is not None:
        return override
    return SPREAD_REVERSAL_PROBABILITY.get(spread_id, BASE_REVERSAL_PROBABILITY)


def determine_orientation(rng: RandomSource, position_index: int, spread_id: str) -> bool:
    """True when the card at ``position_index`` comes out reversed."""
    roll = rng.derive(f"reversed-{position_index}").next()
    return roll < reversal_probability(spread_id, position_index)


def draw_card_for_position(
    catalog: Sequence[TarotCard],
    position_index: int,
    exclude_ids: Collection[str],
    rng: RandomSource,
    spread_id: str,
    drawn_at: Optional[datetime] = None,
) -> SpreadCardAssignment:
    card = draw_card(catalog, exclude_ids, rng.derive(f"pos-{position_index}"))
    is_reversed = determine_orientation(rng, position_index, spread_id)
    log.debug("drew %s%s for %s[%d]", card.id, " (reversed)" if is_reversed else "", spread_id, position_index)
    return SpreadCardAssignment(
        position_index=position_index,
        card_id=card.id,
        card_name=card.name,
        is_reversed=is_reversed,
        drawn_at=drawn_at or datetime.now(timezone.utc),
        keywords=card.keywords_for(is_reversed),
    )


class DrawEngine:
    """The draw operations bound to one validated catalog."""

    def __init__(self, catalog: Sequence[TarotCard], deck_id: str = "classic"):
        catalog = list(catalog)
        validate_catalog(catalog)
        self.catalog = catalog
        self.deck_id = deck_id

    def available_cards(self, exclude_ids: Collection[str] = ()) -> List[TarotCard]:
        return available_cards(self.catalog, exclude_ids)

    def shuffle(self, rng: RandomSource, exclude_ids: Collection[str] = ()) -> List[TarotCard]:
        return shuffle(self.available_cards(exclude_ids), rng)

    def draw_card(self, exclude_ids: Collection[str], rng: RandomSource) -> TarotCard:
        return draw_card(self.catalog, exclude_ids, rng)

    def determine_orientation(self, rng: RandomSource, position_index: int, spread_id: str) -> bool:
        return determine_orientation(rng, position_index, spread_id)

    def draw_card_for_position(
        self,
        position_index: int,
        exclude_ids: Collection[str],
        rng: RandomSource,
        spread_id: str,
        drawn_at: Optional[datetime] = None,
    ) -> SpreadCardAssignment:
        return draw_card_for_position(self.catalog, position_index, exclude_ids, rng, spread_id, drawn_at)

    def draw_complete_spread(
        self,
        layout: SpreadLayout,
        rng: RandomSource,
        drawn_at: Optional[datetime] = None,
    ) -> List[SpreadCardAssignment]:
        drawn: List[SpreadCardAssignment] = []
        excluded: List[str] = []
        for i in range(layout.card_count):
            card = self.draw_card_for_position(i, excluded, rng, layout.id, drawn_at)
            drawn.append(card)
            excluded.append(card.card_id)
        return drawn
