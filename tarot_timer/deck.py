"""Deck catalogs.

- ``JsonDeckProvider`` loads ``<deck_dir>/<deck_id>.json`` once per deck id
- ``StaticDeckProvider`` serves catalogs handed to it in memory (tests, embedding)

Both expose ``get_catalog(deck_id) -> list[TarotCard]``; the draw engine only
relies on card ``id`` and the upright/reversed keyword lists.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from .errors import CatalogError, DeckNotFoundError
from .models import TarotCard

log = logging.getLogger("tarot_timer.deck")


def parse_catalog(data: Dict[str, Any], source: str = "<memory>") -> List[TarotCard]:
    raw_cards = data.get("cards")
    if not isinstance(raw_cards, list) or not raw_cards:
        raise CatalogError(f"Deck data in {source} must contain a non-empty 'cards' list.")
    try:
        cards = [TarotCard.model_validate(c) for c in raw_cards]
    except ValidationError as e:
        raise CatalogError(f"Invalid card entry in {source}: {e}") from e
    validate_catalog(cards)
    return cards


def validate_catalog(cards: Iterable[TarotCard]) -> None:
    ids = [c.id for c in cards]
    if not ids:
        raise CatalogError("Deck catalog is empty.")
    if len(ids) != len(set(ids)):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise CatalogError(f"Duplicate card ids detected: {', '.join(dupes)}")


class StaticDeckProvider:
    def __init__(self, decks: Dict[str, List[TarotCard]]):
        for cards in decks.values():
            validate_catalog(cards)
        self._decks = {deck_id: list(cards) for deck_id, cards in decks.items()}

    def get_catalog(self, deck_id: str) -> List[TarotCard]:
        try:
            return list(self._decks[deck_id])
        except KeyError:
            raise DeckNotFoundError(f"Unknown deck id: {deck_id}") from None


class JsonDeckProvider:
    def __init__(self, deck_dir: Path):
        self.deck_dir = Path(deck_dir)
        self._cache: Dict[str, List[TarotCard]] = {}

    def _path_for(self, deck_id: str) -> Path:
        # Deck ids are plain names; anything path-like is rejected
        if not deck_id or Path(deck_id).name != deck_id or deck_id.startswith("."):
            raise DeckNotFoundError(f"Unknown deck id: {deck_id}")
        return self.deck_dir / f"{deck_id}.json"

    def _load(self, deck_id: str) -> List[TarotCard]:
        path = self._path_for(deck_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DeckNotFoundError(f"Unknown deck id: {deck_id}") from None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}") from e

        cards = parse_catalog(data, str(path))
        log.info("loaded deck %s (%d cards) from %s", deck_id, len(cards), path)
        return cards

    def get_catalog(self, deck_id: str) -> List[TarotCard]:
        if deck_id not in self._cache:
            self._cache[deck_id] = self._load(deck_id)
        return list(self._cache[deck_id])
