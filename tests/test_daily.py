"""Tests for date-seeded hourly cards."""

from datetime import datetime

import pytest

from tarot_timer.daily import (
    DailySessionGenerator,
    create_date_seed,
    generate_daily_card_set,
    generate_daily_cards,
    get_current_hour_card,
    get_hourly_card,
    validate_daily_cards,
)
from tarot_timer.errors import InsufficientDeckError, InvalidPositionError


class TestDailyCards:
    def test_same_date_same_cards(self, catalog):
        first = generate_daily_cards(catalog, "2025-01-01")
        second = generate_daily_cards(catalog, "2025-01-01")
        assert len(first) == 24
        assert first == second

    def test_different_dates_differ(self, catalog):
        assert generate_daily_cards(catalog, "2025-01-01") != generate_daily_cards(catalog, "2025-01-02")

    def test_cards_are_distinct(self, catalog):
        cards = generate_daily_cards(catalog, "2025-03-14")
        assert len({c.id for c in cards}) == 24

    def test_exactly_24_cards_is_enough(self, catalog_of):
        cards = generate_daily_cards(catalog_of(24), "2025-01-01")
        assert sorted(c.id for c in cards) == sorted(c.id for c in catalog_of(24))

    def test_small_deck_fails_loudly(self, catalog_of):
        with pytest.raises(InsufficientDeckError):
            generate_daily_cards(catalog_of(22), "2025-01-01")

    def test_date_seed(self):
        assert create_date_seed("2025-01-01") == "2025-01-01-tarot-timer-2024"


class TestDailyCardSet:
    def test_card_set_is_stable(self, catalog):
        a = generate_daily_card_set(catalog, "2025-01-01")
        b = generate_daily_card_set(catalog, "2025-01-01")
        assert a.cards == b.cards
        assert validate_daily_cards(a)

    def test_hours_and_keywords(self, catalog):
        by_id = {c.id: c for c in catalog}
        card_set = generate_daily_card_set(catalog, "2025-06-01", deck_id="test")
        assert card_set.deck_id == "test"
        assert [c.hour for c in card_set.cards] == list(range(24))
        for daily in card_set.cards:
            card = by_id[daily.card_key]
            assert daily.card_name == card.name
            assert daily.keywords == (card.reversed_keywords if daily.reversed else card.upright_keywords)

    def test_order_matches_shuffle(self, catalog):
        card_set = generate_daily_card_set(catalog, "2025-01-01")
        assert [c.card_key for c in card_set.cards] == [c.id for c in generate_daily_cards(catalog, "2025-01-01")]

    def test_hourly_lookup(self, catalog):
        card_set = generate_daily_card_set(catalog, "2025-01-01")
        assert get_hourly_card(card_set, 13) == card_set.cards[13]
        assert get_current_hour_card(card_set, datetime(2025, 1, 1, 7, 30)) == card_set.cards[7]

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_hour_out_of_range(self, catalog, hour):
        card_set = generate_daily_card_set(catalog, "2025-01-01")
        with pytest.raises(InvalidPositionError):
            get_hourly_card(card_set, hour)

    def test_validate_rejects_truncated_set(self, catalog):
        card_set = generate_daily_card_set(catalog, "2025-01-01")
        truncated = card_set.model_copy(update={"cards": card_set.cards[:23]})
        assert validate_daily_cards(truncated) is False

    def test_validate_rejects_shuffled_hours(self, catalog):
        card_set = generate_daily_card_set(catalog, "2025-01-01")
        swapped = card_set.model_copy(update={"cards": list(reversed(card_set.cards))})
        assert validate_daily_cards(swapped) is False


def test_generator_bundles_catalog(catalog):
    gen = DailySessionGenerator(catalog, deck_id="test")
    assert gen.generate_daily_cards("2025-01-01") == generate_daily_cards(catalog, "2025-01-01")
    assert gen.hourly_card("2025-01-01", 0).card_key == gen.generate_daily_cards("2025-01-01")[0].id
