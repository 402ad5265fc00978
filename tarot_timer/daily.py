"""Date-seeded hourly cards: one card per hour, the same set all day."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .draw import shuffle
from .errors import InsufficientDeckError, InvalidPositionError
from .models import DailyCard, DailyCardSet, TarotCard
from .utils.rng import SeededRandomSource

log = logging.getLogger("tarot_timer.daily")

HOURS_PER_DAY = 24
DAILY_SEED_SALT = "tarot-timer-2024"
DAILY_REVERSAL_PROBABILITY = 0.3


def create_date_seed(date_key: str) -> str:
    return f"{date_key}-{DAILY_SEED_SALT}"


def generate_daily_cards(catalog: Sequence[TarotCard], date_key: str) -> List[TarotCard]:
    """Shuffle the whole deck with the date seed and keep the first 24 cards.

    Raises:
        InsufficientDeckError: the deck cannot fill 24 distinct hours.
    """
    if len(catalog) < HOURS_PER_DAY:
        raise InsufficientDeckError(
            f"Daily cards need at least {HOURS_PER_DAY} cards; deck has {len(catalog)}"
        )
    rng = SeededRandomSource.from_seed(create_date_seed(date_key))
    return shuffle(catalog, rng)[:HOURS_PER_DAY]


def generate_daily_card_set(
    catalog: Sequence[TarotCard],
    date_key: str,
    deck_id: str = "classic",
    generated_at: Optional[datetime] = None,
) -> DailyCardSet:
    cards = generate_daily_cards(catalog, date_key)
    # Orientation rolls come from their own stream so they never track the shuffle
    rolls = SeededRandomSource.from_seed(create_date_seed(date_key)).derive("reversed")

    daily: List[DailyCard] = []
    for hour, card in enumerate(cards):
        is_reversed = rolls.next() < DAILY_REVERSAL_PROBABILITY
        daily.append(
            DailyCard(
                hour=hour,
                card_key=card.id,
                card_name=card.name,
                reversed=is_reversed,
                keywords=card.keywords_for(is_reversed),
            )
        )
    log.debug("generated daily cards for %s (%s)", date_key, deck_id)
    return DailyCardSet(
        date=date_key,
        deck_id=deck_id,
        cards=daily,
        generated_at=generated_at or datetime.now(timezone.utc),
    )


def get_hourly_card(card_set: DailyCardSet, hour: int) -> DailyCard:
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidPositionError(f"Hour must be between 0 and 23, got {hour}")
    return card_set.cards[hour]


def get_current_hour_card(card_set: DailyCardSet, now: Optional[datetime] = None) -> DailyCard:
    now = now or datetime.now()
    return get_hourly_card(card_set, now.hour)


def validate_daily_cards(card_set: DailyCardSet) -> bool:
    if not card_set.date or not card_set.deck_id:
        return False
    if len(card_set.cards) != HOURS_PER_DAY:
        return False
    for hour, card in enumerate(card_set.cards):
        if card.hour != hour or not card.card_key or not card.card_name:
            return False
    keys = [c.card_key for c in card_set.cards]
    return len(set(keys)) == len(keys)


class DailySessionGenerator:
    def __init__(self, catalog: Sequence[TarotCard], deck_id: str = "classic"):
        self.catalog = list(catalog)
        self.deck_id = deck_id

    def generate_daily_cards(self, date_key: str) -> List[TarotCard]:
        return generate_daily_cards(self.catalog, date_key)

    def card_set(self, date_key: str) -> DailyCardSet:
        return generate_daily_card_set(self.catalog, date_key, self.deck_id)

    def hourly_card(self, date_key: str, hour: int) -> DailyCard:
        return get_hourly_card(self.card_set(date_key), hour)
