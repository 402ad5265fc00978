"""FastAPI routes for deck catalogs, spread layouts and daily cards.

Endpoints:
- GET /decks/{deck_id}/cards
- GET /decks/{deck_id}/cards/{card_id}
- GET /spreads
- GET /spreads/{spread_id}
- GET /daily/{date_key}
- GET /daily/{date_key}/{hour}
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from .. import config
from ..daily import DailySessionGenerator
from ..dependencies import get_registry, get_store
from ..models import DailyCard, DailyCardSet
from ..session_store import SessionStore
from ..spreads import SpreadLayoutRegistry

router = APIRouter(tags=["deck"])


@router.get("/decks/{deck_id}/cards")
def cards(deck_id: str, store: SessionStore = Depends(get_store)) -> Dict[str, Any]:
    catalog = store.engine_for(deck_id).catalog
    return {
        "deck_id": deck_id,
        "card_count": len(catalog),
        "cards": [c.model_dump(by_alias=True) for c in catalog],
    }


@router.get("/decks/{deck_id}/cards/{card_id}")
def card(deck_id: str, card_id: str, store: SessionStore = Depends(get_store)) -> Dict[str, Any]:
    for c in store.engine_for(deck_id).catalog:
        if c.id == card_id:
            return {"card": c.model_dump(by_alias=True)}
    raise HTTPException(status_code=404, detail=f"Unknown card_id: {card_id}")


@router.get("/spreads")
def spreads(registry: SpreadLayoutRegistry = Depends(get_registry)) -> Dict[str, Any]:
    return {
        "default": registry.default_id,
        "spreads": [layout.model_dump(by_alias=True) for layout in registry.layouts()],
    }


@router.get("/spreads/{spread_id}")
def spread(spread_id: str, registry: SpreadLayoutRegistry = Depends(get_registry)) -> Dict[str, Any]:
    return {"spread": registry.get_layout(spread_id).model_dump(by_alias=True)}


@router.get("/daily/{date_key}", response_model=DailyCardSet)
def daily_cards(
    date_key: str, deck_id: Optional[str] = None, store: SessionStore = Depends(get_store)
) -> DailyCardSet:
    deck_id = deck_id or config.default_deck_id()
    return DailySessionGenerator(store.engine_for(deck_id).catalog, deck_id).card_set(date_key)


@router.get("/daily/{date_key}/{hour}", response_model=DailyCard)
def hourly_card(
    date_key: str, hour: int, deck_id: Optional[str] = None, store: SessionStore = Depends(get_store)
) -> DailyCard:
    deck_id = deck_id or config.default_deck_id()
    return DailySessionGenerator(store.engine_for(deck_id).catalog, deck_id).hourly_card(date_key, hour)
