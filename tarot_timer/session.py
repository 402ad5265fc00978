"""Spread session state machine.

States::

    Empty --start--> Drawing --(last slot filled)--> Complete
      ^                 |                               |
      +------clear------+-------------clear-------------+

Each operation builds a new immutable state value and installs it only once
the whole operation has succeeded, so a failed call leaves the session as it
was. All randomness comes from the session seed:

- position draw:  ``seed`` (see ``draw.draw_card_for_position``)
- replacement:    ``seed-replace-<i>-<previous card id>``
- timeline cards: ``seed-timeline``
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

from .draw import DrawEngine
from .errors import (
    InvalidPositionError,
    LayoutNotFoundError,
    SessionNotActiveError,
    SnapshotError,
    TimelineUnsupportedError,
)
from .models import (
    CompleteSession,
    DrawingSession,
    EmptySession,
    SessionState,
    SpreadCardAssignment,
    SpreadSnapshot,
    StartedSession,
)
from .spreads import SpreadLayoutRegistry
from .utils.rng import SeededRandomSource

log = logging.getLogger("tarot_timer.session")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _started_fields(state: StartedSession) -> dict:
    return {
        "id": state.id,
        "layout_id": state.layout_id,
        "deck_id": state.deck_id,
        "seed": state.seed,
        "card_count": state.card_count,
        "assignments": state.assignments,
        "timeline_assignments": state.timeline_assignments,
        "created_at": state.created_at,
    }


def _is_complete_set(positions: List[int], card_ids: List[str], card_count: int) -> bool:
    return (
        len(positions) == card_count
        and sorted(positions) == list(range(card_count))
        and len(set(card_ids)) == len(card_ids)
    )


def validate_completion(
    session: Union[SessionState, SpreadSnapshot], registry: SpreadLayoutRegistry
) -> bool:
    """True iff every layout position holds exactly one card and no card repeats."""
    if isinstance(session, EmptySession):
        return False
    if isinstance(session, SpreadSnapshot):
        layout_id = session.spread_id
        cards = list(session.cards)
    else:
        layout_id = session.layout_id
        cards = list(session.assignments.values())
        if any(key != a.position_index for key, a in session.assignments.items()):
            return False
    try:
        layout = registry.get_layout(layout_id)
    except LayoutNotFoundError:
        return False
    return _is_complete_set(
        [c.position_index for c in cards], [c.card_id for c in cards], layout.card_count
    )


class SpreadSession:
    """Owner of one reading session. Not thread-safe: callers serialise access."""

    def __init__(
        self,
        engine: DrawEngine,
        registry: SpreadLayoutRegistry,
        clock: Optional[Clock] = None,
    ):
        self.engine = engine
        self.registry = registry
        self._clock = clock or _utcnow
        self.state: SessionState = EmptySession()
        self.version = 0

    # -- helpers ---------------------------------------------------------

    def _install(self, state: SessionState) -> None:
        self.state = state
        self.version += 1

    def _require_started(self) -> StartedSession:
        if isinstance(self.state, EmptySession):
            raise SessionNotActiveError("No active spread session; call start() first.")
        return self.state

    def _check_position(self, state: StartedSession, position_index: int) -> None:
        if not 0 <= position_index < state.card_count:
            raise InvalidPositionError(
                f"Position {position_index} is outside 0..{state.card_count - 1} for {state.layout_id}"
            )

    def _complete_if_full(self, state: StartedSession) -> StartedSession:
        if isinstance(state, DrawingSession) and state.is_full:
            log.info("session %s complete (%s)", state.id, state.layout_id)
            return CompleteSession(**_started_fields(state), completed_at=self._clock())
        return state

    @property
    def is_active(self) -> bool:
        return not isinstance(self.state, EmptySession)

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, CompleteSession)

    # -- operations ------------------------------------------------------

    def start(self, layout_id: str, seed: Optional[str] = None) -> StartedSession:
        layout = self.registry.get_layout(layout_id)
        if seed is None:
            seed = secrets.token_urlsafe(16)
        state = DrawingSession(
            id=str(uuid.uuid4()),
            layout_id=layout.id,
            deck_id=self.engine.deck_id,
            seed=str(seed),
            card_count=layout.card_count,
            created_at=self._clock(),
        )
        state = self._complete_if_full(state)
        self._install(state)
        log.info("session %s started: spread=%s deck=%s", state.id, layout.id, state.deck_id)
        return state

    def draw_at_position(self, position_index: int) -> SpreadCardAssignment:
        state = self._require_started()
        self._check_position(state, position_index)
        if position_index in state.assignments:
            raise InvalidPositionError(f"Position {position_index} already holds a card")

        card = self.engine.draw_card_for_position(
            position_index,
            state.drawn_card_ids(),
            SeededRandomSource.from_seed(state.seed),
            state.layout_id,
            self._clock(),
        )
        updated = state.model_copy(update={"assignments": {**state.assignments, position_index: card}})
        self._install(self._complete_if_full(updated))
        return card

    def replace_at_position(self, position_index: int) -> SpreadCardAssignment:
        state = self._require_started()
        self._check_position(state, position_index)
        previous = state.assignments.get(position_index)
        if previous is None:
            raise InvalidPositionError(f"Position {position_index} has no card to replace")

        rng = SeededRandomSource.from_seed(state.seed).derive(f"replace-{position_index}-{previous.card_id}")
        # The card being replaced stays in the exclusion set so it cannot come straight back
        card = self.engine.draw_card_for_position(
            position_index, state.drawn_card_ids(), rng, state.layout_id, self._clock()
        )
        self._install(state.model_copy(update={"assignments": {**state.assignments, position_index: card}}))
        log.info("session %s replaced %s with %s at %d", state.id, previous.card_id, card.card_id, position_index)
        return card

    def complete_if_full(self) -> StartedSession:
        state = self._require_started()
        completed = self._complete_if_full(state)
        if completed is not state:
            self._install(completed)
        return completed

    def draw_timeline_cards(self, count: Optional[int] = None) -> List[SpreadCardAssignment]:
        state = self._require_started()
        layout = self.registry.get_layout(state.layout_id)
        if not layout.supports_timeline:
            raise TimelineUnsupportedError(f"Spread {layout.id} does not support timeline cards")

        remaining = layout.timeline_count - len(state.timeline_assignments)
        if count is None:
            count = remaining
        if count < 1 or count > remaining:
            raise InvalidPositionError(
                f"Cannot draw {count} timeline cards; {remaining} of {layout.timeline_count} left"
            )

        rng = SeededRandomSource.from_seed(state.seed).derive("timeline")
        excluded = state.drawn_card_ids()
        timeline: Dict[int, SpreadCardAssignment] = dict(state.timeline_assignments)
        first = state.card_count + len(state.timeline_assignments)
        drawn: List[SpreadCardAssignment] = []
        now = self._clock()
        for position_index in range(first, first + count):
            card = self.engine.draw_card_for_position(position_index, excluded, rng, state.layout_id, now)
            timeline[position_index] = card
            excluded.append(card.card_id)
            drawn.append(card)

        self._install(state.model_copy(update={"timeline_assignments": timeline}))
        log.info("session %s drew %d timeline cards", state.id, count)
        return drawn

    def clear(self) -> None:
        if self.is_active:
            log.info("session %s cleared", self.state.id)
        self._install(EmptySession())

    def validate_completion(self) -> bool:
        return validate_completion(self.state, self.registry)

    # -- serialisation ---------------------------------------------------

    def snapshot(self) -> SpreadSnapshot:
        state = self._require_started()
        # Deep copies: keyword lists must not be shared with the live state
        timeline = [state.timeline_assignments[k].model_copy(deep=True) for k in sorted(state.timeline_assignments)]
        return SpreadSnapshot(
            id=state.id,
            spread_id=state.layout_id,
            is_complete=isinstance(state, CompleteSession),
            cards=[state.assignments[k].model_copy(deep=True) for k in sorted(state.assignments)],
            timeline_cards=timeline or None,
            created_at=state.created_at,
            completed_at=state.completed_at if isinstance(state, CompleteSession) else None,
            seed=state.seed,
            deck_id=state.deck_id,
        )

    @classmethod
    def restore(
        cls,
        snapshot: SpreadSnapshot,
        engine: DrawEngine,
        registry: SpreadLayoutRegistry,
        clock: Optional[Clock] = None,
    ) -> "SpreadSession":
        if snapshot.deck_id != engine.deck_id:
            raise SnapshotError(f"Snapshot uses deck {snapshot.deck_id}, engine has {engine.deck_id}")
        layout = registry.get_layout(snapshot.spread_id)
        timeline_cards = snapshot.timeline_cards or []

        assignments = {c.position_index: c.model_copy(deep=True) for c in snapshot.cards}
        timeline = {c.position_index: c.model_copy(deep=True) for c in timeline_cards}
        if len(assignments) != len(snapshot.cards) or len(timeline) != len(timeline_cards):
            raise SnapshotError("Snapshot repeats a position index")
        if any(not 0 <= i < layout.card_count for i in assignments):
            raise SnapshotError(f"Snapshot has positions outside 0..{layout.card_count - 1}")
        if len(timeline) > layout.timeline_count:
            raise SnapshotError(f"Snapshot has more timeline cards than {layout.id} allows")
        # Timeline draws continue at card_count + len(timeline), so the indices must have no gaps
        if sorted(timeline) != list(range(layout.card_count, layout.card_count + len(timeline))):
            raise SnapshotError(
                f"Snapshot timeline positions must run {layout.card_count}..{layout.card_count + len(timeline) - 1}"
            )
        card_ids = [c.card_id for c in snapshot.cards] + [c.card_id for c in timeline_cards]
        if len(set(card_ids)) != len(card_ids):
            raise SnapshotError("Snapshot repeats a card")
        unknown = sorted(set(card_ids) - {c.id for c in engine.catalog})
        if unknown:
            raise SnapshotError(f"Snapshot has cards missing from deck {engine.deck_id}: {', '.join(unknown)}")
        if snapshot.is_complete != (len(assignments) == layout.card_count):
            raise SnapshotError("Snapshot completion flag does not match its cards")
        if snapshot.is_complete and snapshot.completed_at is None:
            raise SnapshotError("Complete snapshot has no completedAt")

        fields = dict(
            id=snapshot.id,
            layout_id=layout.id,
            deck_id=snapshot.deck_id,
            seed=snapshot.seed,
            card_count=layout.card_count,
            assignments=assignments,
            timeline_assignments=timeline,
            created_at=snapshot.created_at,
        )
        session = cls(engine, registry, clock=clock)
        if snapshot.is_complete:
            session.state = CompleteSession(**fields, completed_at=snapshot.completed_at)
        else:
            session.state = DrawingSession(**fields)
        return session
