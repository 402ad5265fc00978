from datetime import datetime, timedelta, timezone

import pytest

from tarot_timer.draw import DrawEngine
from tarot_timer.models import SpreadLayout, TarotCard
from tarot_timer.spreads import SpreadLayoutRegistry


def make_catalog(n):
    return [
        TarotCard(
            id=f"card_{i}",
            name=f"Card {i}",
            upright_keywords=[f"upright_{i}"],
            reversed_keywords=[f"reversed_{i}"],
        )
        for i in range(n)
    ]


class FakeClock:
    """Advances one second per call so timestamps are ordered and predictable."""

    def __init__(self):
        self.now = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def catalog():
    return make_catalog(78)


@pytest.fixture
def engine(catalog):
    return DrawEngine(catalog, deck_id="test")


@pytest.fixture
def registry():
    return SpreadLayoutRegistry(
        [
            SpreadLayout(id="one_card", card_count=1),
            SpreadLayout(id="three_card", card_count=3, position_labels=["Past", "Present", "Future"]),
            SpreadLayout(id="celtic_cross", card_count=10, supports_timeline=True, timeline_count=4),
            SpreadLayout(id="empty_spread", card_count=0),
        ]
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog_of():
    return make_catalog
