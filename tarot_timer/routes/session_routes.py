"""FastAPI routes for spread reading sessions with deterministic draws."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from .. import config
from ..dependencies import get_store
from ..models import SpreadCardAssignment, SpreadSnapshot, SpreadStatistics
from ..session import SpreadSession
from ..session_store import SessionStore
from ..stats import get_spread_statistics

log = logging.getLogger("tarot_timer.routes.sessions")

router = APIRouter(prefix="/sessions", tags=["sessions"])


class StartSessionRequest(BaseModel):
    spread_id: Optional[str] = Field(None, description="Spread identifier: 'one_card', 'celtic_cross', etc.")
    deck_id: Optional[str] = Field(None, description="Deck identifier, defaults to TAROT_DEFAULT_DECK")
    seed: Optional[str] = Field(None, description="Optional seed for reproducible draws")


class PositionRequest(BaseModel):
    position_index: int = Field(..., ge=0)
    expected_version: Optional[int] = Field(None, description="Reject the write if the session moved on")


class TimelineRequest(BaseModel):
    count: Optional[int] = Field(None, ge=1, description="Defaults to all remaining timeline cards")
    expected_version: Optional[int] = None


class SessionResponse(BaseModel):
    version: int
    valid: bool
    session: SpreadSnapshot
    drawn: List[SpreadCardAssignment] = Field(default_factory=list)


def _response(session: SpreadSession, drawn: Optional[List[SpreadCardAssignment]] = None) -> SessionResponse:
    return SessionResponse(
        version=session.version,
        valid=session.validate_completion(),
        session=session.snapshot(),
        drawn=drawn or [],
    )


@router.post("", response_model=SessionResponse, response_model_exclude_none=True)
def start_session(req: StartSessionRequest, store: SessionStore = Depends(get_store)) -> SessionResponse:
    spread_id = req.spread_id or store.registry.default_id
    deck_id = req.deck_id or config.default_deck_id()
    session = store.start(spread_id, deck_id, seed=req.seed)
    log.info("sessions/start spread=%s deck=%s id=%s", spread_id, deck_id, session.state.id)
    return _response(session)


@router.post("/restore", response_model=SessionResponse, response_model_exclude_none=True)
def restore_session(snapshot: SpreadSnapshot, store: SessionStore = Depends(get_store)) -> SessionResponse:
    return _response(store.restore(snapshot))


@router.get("/stats", response_model=SpreadStatistics)
def session_stats(store: SessionStore = Depends(get_store)) -> SpreadStatistics:
    return get_spread_statistics(store.snapshots())


@router.get("/{session_id}", response_model=SessionResponse, response_model_exclude_none=True)
def get_session(session_id: str, store: SessionStore = Depends(get_store)) -> SessionResponse:
    return _response(store.get(session_id))


@router.post("/{session_id}/draw", response_model=SessionResponse, response_model_exclude_none=True)
def draw_at_position(
    session_id: str, req: PositionRequest, store: SessionStore = Depends(get_store)
) -> SessionResponse:
    def op(session: SpreadSession) -> SessionResponse:
        return _response(session, [session.draw_at_position(req.position_index)])

    return store.mutate(session_id, op, req.expected_version)


@router.post("/{session_id}/replace", response_model=SessionResponse, response_model_exclude_none=True)
def replace_at_position(
    session_id: str, req: PositionRequest, store: SessionStore = Depends(get_store)
) -> SessionResponse:
    def op(session: SpreadSession) -> SessionResponse:
        return _response(session, [session.replace_at_position(req.position_index)])

    return store.mutate(session_id, op, req.expected_version)


@router.post("/{session_id}/timeline", response_model=SessionResponse, response_model_exclude_none=True)
def draw_timeline(
    session_id: str, req: TimelineRequest, store: SessionStore = Depends(get_store)
) -> SessionResponse:
    def op(session: SpreadSession) -> SessionResponse:
        return _response(session, session.draw_timeline_cards(req.count))

    return store.mutate(session_id, op, req.expected_version)


@router.delete("/{session_id}")
def clear_session(
    session_id: str, expected_version: Optional[int] = None, store: SessionStore = Depends(get_store)
) -> dict:
    store.clear(session_id, expected_version)
    return {"session_id": session_id, "cleared": True}
