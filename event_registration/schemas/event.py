from datetime import datetime
from typing import Optional

from pydantic import AfterValidator, Field, model_validator
from typing_extensions import Annotated

from ..models.event import EventCategory, EventStatus, as_utc
from .common import CamelModel, NonEmptyStr

UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]


class EventBase(CamelModel):
    title: NonEmptyStr
    description: NonEmptyStr
    category: EventCategory
    date: UTCDatetime
    location: NonEmptyStr
    max_participants: int = Field(..., ge=1, description="Capacity must be at least 1.")
    speaker: NonEmptyStr
    price: float = Field(0, ge=0)
    status: EventStatus = EventStatus.UPCOMING


class EventCreate(EventBase):
    """Client payload for a new event; currentParticipants is never accepted."""


class EventUpdate(CamelModel):
    """Partial update. Omitted fields keep their value; null is rejected."""

    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    category: Optional[EventCategory] = None
    date: Optional[UTCDatetime] = None
    location: Optional[NonEmptyStr] = None
    max_participants: Optional[int] = Field(None, ge=1)
    speaker: Optional[NonEmptyStr] = None
    price: Optional[float] = Field(None, ge=0)
    status: Optional[EventStatus] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "EventUpdate":
        nulls = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return self


class Event(EventBase):
    id: int
    current_participants: int
    created_at: datetime
    updated_at: datetime


class EventSummary(CamelModel):
    """Fields of an event shown next to its registrations."""

    id: int
    title: str
    date: datetime
    location: str
