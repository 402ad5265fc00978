"""Spread layout registry: card count and timeline support per spread id."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List

from pydantic import ValidationError

from .errors import CatalogError, LayoutNotFoundError
from .models import SpreadLayout


class SpreadLayoutRegistry:
    def __init__(self, layouts: Iterable[SpreadLayout], default_id: str = "three_card"):
        self._layouts: Dict[str, SpreadLayout] = {}
        for layout in layouts:
            if layout.id in self._layouts:
                raise CatalogError(f"Duplicate spread id: {layout.id}")
            self._layouts[layout.id] = layout
        self.default_id = default_id

    @classmethod
    def from_json(cls, path: Path) -> "SpreadLayoutRegistry":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CatalogError(f"Spread data file not found at: {path}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}") from e

        try:
            layouts = [SpreadLayout.model_validate(s) for s in data.get("spreads", [])]
        except ValidationError as e:
            raise CatalogError(f"Invalid spread entry in {path}: {e}") from e
        return cls(layouts, default_id=data.get("default", "three_card"))

    def get_layout(self, spread_id: str) -> SpreadLayout:
        layout = self._layouts.get(spread_id)
        if layout is None:
            raise LayoutNotFoundError(f"Spread layout not found: {spread_id}")
        return layout

    def is_available(self, spread_id: str) -> bool:
        return spread_id in self._layouts

    def layouts(self) -> List[SpreadLayout]:
        return list(self._layouts.values())

    def default_layout(self) -> SpreadLayout:
        return self.get_layout(self.default_id)
