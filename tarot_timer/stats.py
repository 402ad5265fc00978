from __future__ import annotations

from collections import Counter
from typing import Iterable

from .models import SpreadSnapshot, SpreadStatistics


def _most_used(counts: Counter) -> str:
    # On a tie the spread seen later wins
    best = "three_card"
    for spread_id, count in counts.items():
        if count >= counts[best]:
            best = spread_id
    return best


def get_spread_statistics(snapshots: Iterable[SpreadSnapshot]) -> SpreadStatistics:
    spreads = list(snapshots)
    if not spreads:
        return SpreadStatistics()

    completed = [s for s in spreads if s.is_complete]
    durations = [
        (s.completed_at - s.created_at).total_seconds()
        for s in completed
        if s.completed_at is not None
    ]

    return SpreadStatistics(
        total_spreads=len(spreads),
        completed_spreads=len(completed),
        most_used_spread_id=_most_used(Counter(s.spread_id for s in spreads)),
        average_completion_time=sum(durations) / len(durations) if durations else 0.0,
        total_cards_drawn=sum(len(s.cards) + len(s.timeline_cards or []) for s in spreads),
    )
