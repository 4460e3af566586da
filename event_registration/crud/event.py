import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.models.event import Event, EventCategory, EventStatus
from event_registration.models.registration import Registration
from event_registration.schemas.event import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


class Admission(str, enum.Enum):
    ADMITTED = "admitted"
    NOT_FOUND = "not_found"
    FULL = "full"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of one admit_participant call."""

    outcome: Admission
    current_participants: Optional[int] = None
    max_participants: Optional[int] = None

    @property
    def admitted(self) -> bool:
        return self.outcome is Admission.ADMITTED


async def get_event(db: AsyncSession, event_id: int) -> Optional[Event]:
    result = await db.execute(
        select(Event)
        .filter(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    first: Optional[Event] = result.scalars().first()
    return first


async def get_events(
    db: AsyncSession,
    category: Optional[EventCategory] = None,
    status: Optional[EventStatus] = None,
) -> list[Event]:
    """Events matching the exact-match filters, earliest date first"""
    query = select(Event)

    filters = []
    if category is not None:
        filters.append(Event.category == category)
    if status is not None:
        filters.append(Event.status == status)
    if filters:
        query = query.filter(and_(*filters))

    result = await db.execute(query.order_by(Event.date.asc(), Event.id.asc()))
    return list(result.scalars().all())


async def create_event(db: AsyncSession, event: EventCreate) -> Event:
    db_event = Event(**event.model_dump(), current_participants=0)
    db.add(db_event)
    await db.commit()
    await db.refresh(db_event)
    logger.info("Event %s created: %s", db_event.id, db_event.title)
    return db_event


async def update_event(
    db: AsyncSession, event_id: int, event: EventUpdate
) -> Optional[Event]:
    db_event = await get_event(db, event_id)
    if db_event:
        for key, value in event.model_dump(exclude_unset=True).items():
            setattr(db_event, key, value)
        await db.commit()
        await db.refresh(db_event)
        logger.info("Event %s updated", event_id)
    return db_event


async def delete_event(db: AsyncSession, event_id: int) -> bool:
    """Delete an event and, in the same transaction, every registration for it"""
    db_event = await get_event(db, event_id)
    if not db_event:
        return False

    result = await db.execute(
        delete(Registration)
        .where(Registration.event_id == event_id)
        .execution_options(synchronize_session=False)
    )
    await db.delete(db_event)
    await db.commit()
    logger.info(
        "Event %s deleted with %s registration(s)", event_id, result.rowcount or 0
    )
    return True


async def admit_participant(db: AsyncSession, event_id: int) -> AdmissionResult:
    """Take one participant slot if the event exists, is open and not full.

    The check and the increment are a single conditional UPDATE, so two
    callers can never both take the last slot. Does not commit.
    """
    result = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            Event.current_participants < Event.max_participants,
            Event.status != EventStatus.CANCELLED,
        )
        .values(current_participants=Event.current_participants + 1)
        .returning(Event.current_participants, Event.max_participants)
        .execution_options(synchronize_session=False)
    )
    row = result.first()
    if row is not None:
        return AdmissionResult(Admission.ADMITTED, row[0], row[1])

    event = await get_event(db, event_id)
    if event is None:
        return AdmissionResult(Admission.NOT_FOUND)
    if event.current_participants >= event.max_participants:
        return AdmissionResult(
            Admission.FULL, event.current_participants, event.max_participants
        )
    return AdmissionResult(
        Admission.CANCELLED, event.current_participants, event.max_participants
    )


async def release_participant(db: AsyncSession, event_id: int) -> bool:
    """Give back one participant slot, never going below zero. Does not commit.

    Returns False when the event is gone or already at zero.
    """
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.current_participants > 0)
        .values(current_participants=Event.current_participants - 1)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)
