from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TarotCard(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="key")
    name: str
    number: str = ""
    suit: str = ""
    upright_keywords: List[str] = Field(default_factory=list, alias="upright")
    reversed_keywords: List[str] = Field(default_factory=list, alias="reversed")

    def keywords_for(self, is_reversed: bool) -> List[str]:
        return list(self.reversed_keywords if is_reversed else self.upright_keywords)


class SpreadLayout(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    card_count: int = Field(..., ge=0, alias="cardCount")
    supports_timeline: bool = Field(False, alias="supportsTimeline")
    timeline_count: int = Field(0, ge=0, alias="timelineCount")
    position_labels: List[str] = Field(default_factory=list, alias="positions")

    @model_validator(mode="after")
    def _check_timeline(self) -> "SpreadLayout":
        if not self.supports_timeline and self.timeline_count:
            raise ValueError(f"layout {self.id} has timeline_count without timeline support")
        if self.position_labels and len(self.position_labels) != self.card_count:
            raise ValueError(f"layout {self.id} has {len(self.position_labels)} labels for {self.card_count} cards")
        return self


class SpreadCardAssignment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position_index: int = Field(..., ge=0, alias="positionIndex")
    card_id: str = Field(..., alias="cardKey")
    card_name: str = Field("", alias="cardName")
    is_reversed: bool = Field(False, alias="isReversed")
    drawn_at: datetime = Field(..., alias="drawnAt")
    keywords: List[str] = Field(default_factory=list)


# Session state: Empty | Drawing | Complete, discriminated on ``status``.

class EmptySession(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["empty"] = "empty"


class _StartedSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    layout_id: str
    deck_id: str
    seed: str
    card_count: int = Field(..., ge=0)
    assignments: Dict[int, SpreadCardAssignment] = Field(default_factory=dict)
    timeline_assignments: Dict[int, SpreadCardAssignment] = Field(default_factory=dict)
    created_at: datetime

    def drawn_card_ids(self) -> List[str]:
        return [a.card_id for a in self.assignments.values()] + [
            a.card_id for a in self.timeline_assignments.values()
        ]

    @property
    def is_full(self) -> bool:
        return len(self.assignments) == self.card_count


class DrawingSession(_StartedSession):
    status: Literal["drawing"] = "drawing"


class CompleteSession(_StartedSession):
    status: Literal["complete"] = "complete"
    completed_at: datetime


SessionState = Annotated[
    Union[EmptySession, DrawingSession, CompleteSession],
    Field(discriminator="status"),
]
StartedSession = Union[DrawingSession, CompleteSession]


class SpreadSnapshot(BaseModel):
    """Serializable read-only view of a started session."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    spread_id: str = Field(..., alias="spreadId")
    is_complete: bool = Field(..., alias="isComplete")
    cards: List[SpreadCardAssignment] = Field(default_factory=list)
    timeline_cards: Optional[List[SpreadCardAssignment]] = Field(None, alias="timelineCards")
    created_at: datetime = Field(..., alias="createdAt")
    completed_at: Optional[datetime] = Field(None, alias="completedAt")
    seed: str
    deck_id: str = Field(..., alias="deckId")

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DailyCard(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    card_key: str
    card_name: str
    reversed: bool = False
    keywords: List[str] = Field(default_factory=list)


class DailyCardSet(BaseModel):
    date: str
    deck_id: str
    cards: List[DailyCard]
    generated_at: datetime


class SpreadStatistics(BaseModel):
    total_spreads: int = 0
    completed_spreads: int = 0
    most_used_spread_id: str = Field("three_card", description="Ties go to the spread seen later")
    average_completion_time: float = Field(0.0, description="Mean seconds from creation to completion")
    total_cards_drawn: int = 0
