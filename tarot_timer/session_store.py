"""In-process registry of live spread sessions for the HTTP layer.

Sessions are kept in memory, keyed by session id. Mutations go through
``mutate`` which holds a lock and, when the caller sends the version it last
saw, rejects stale writes with ``SessionVersionConflictError``.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, TypeVar, Union

from .deck import JsonDeckProvider, StaticDeckProvider
from .draw import DrawEngine
from .errors import SessionNotFoundError, SessionVersionConflictError
from .models import SpreadSnapshot
from .session import Clock, SpreadSession
from .spreads import SpreadLayoutRegistry

log = logging.getLogger("tarot_timer.session_store")

T = TypeVar("T")


class SessionStore:
    def __init__(
        self,
        decks: Union[JsonDeckProvider, StaticDeckProvider],
        registry: SpreadLayoutRegistry,
        clock: Optional[Clock] = None,
    ):
        self.decks = decks
        self.registry = registry
        self._clock = clock
        self._engines: Dict[str, DrawEngine] = {}
        self._sessions: Dict[str, SpreadSession] = {}
        self._lock = threading.Lock()

    def engine_for(self, deck_id: str) -> DrawEngine:
        engine = self._engines.get(deck_id)
        if engine is None:
            engine = DrawEngine(self.decks.get_catalog(deck_id), deck_id=deck_id)
            self._engines[deck_id] = engine
        return engine

    def start(self, spread_id: str, deck_id: str, seed: Optional[str] = None) -> SpreadSession:
        with self._lock:
            session = SpreadSession(self.engine_for(deck_id), self.registry, clock=self._clock)
            state = session.start(spread_id, seed=seed)
            self._sessions[state.id] = session
            return session

    def restore(self, snapshot: SpreadSnapshot) -> SpreadSession:
        with self._lock:
            session = SpreadSession.restore(
                snapshot, self.engine_for(snapshot.deck_id), self.registry, clock=self._clock
            )
            self._sessions[snapshot.id] = session
            return session

    def get(self, session_id: str) -> SpreadSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def mutate(
        self,
        session_id: str,
        operation: Callable[[SpreadSession], T],
        expected_version: Optional[int] = None,
    ) -> T:
        with self._lock:
            session = self.get(session_id)
            if expected_version is not None and expected_version != session.version:
                raise SessionVersionConflictError(
                    f"Session {session_id} is at version {session.version}, not {expected_version}"
                )
            return operation(session)

    def clear(self, session_id: str, expected_version: Optional[int] = None) -> None:
        self.mutate(session_id, lambda s: s.clear(), expected_version)
        with self._lock:
            self._sessions.pop(session_id, None)
        log.info("session %s removed", session_id)

    def snapshots(self) -> List[SpreadSnapshot]:
        with self._lock:
            return [s.snapshot() for s in self._sessions.values() if s.is_active]
