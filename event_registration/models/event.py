import enum
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
)

from ..database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """The same instant in UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC on every backend.

    SQLite keeps no offset, so values are converted to UTC before binding
    and tagged as UTC when loaded.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime], dialect: Any
    ) -> Optional[datetime]:
        return None if value is None else as_utc(value)

    def process_result_value(
        self, value: Optional[datetime], dialect: Any
    ) -> Optional[datetime]:
        return None if value is None else as_utc(value)


class EventCategory(str, enum.Enum):
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    CONFERENCE = "conference"
    TRAINING = "training"
    WEBINAR = "webinar"


class EventStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        Enum(EventCategory, name="eventcategory", values_callable=_enum_values),
        nullable=False,
    )
    date = Column(UTCDateTime(), nullable=False)
    location = Column(String(200), nullable=False)
    max_participants = Column(Integer, nullable=False)
    # Written only through crud.event.admit_participant / release_participant
    current_participants = Column(Integer, nullable=False, default=0)
    speaker = Column(String(200), nullable=False)
    price = Column(Float, nullable=False, default=0)
    status = Column(
        Enum(EventStatus, name="eventstatus", values_callable=_enum_values),
        nullable=False,
        default=EventStatus.UPCOMING,
    )
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("max_participants >= 1", name="ck_event_max_participants"),
        CheckConstraint(
            "current_participants >= 0", name="ck_event_current_participants"
        ),
        Index("idx_event_date", "date"),
        Index("idx_event_category_date", "category", "date"),
        Index("idx_event_status_date", "status", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event {self.id} {self.title!r} {self.current_participants}/{self.max_participants}>"
