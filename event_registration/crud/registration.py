import logging
from typing import Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only, selectinload

from event_registration.models.event import Event
from event_registration.models.registration import Registration, RegistrationStatus
from event_registration.schemas.registration import (
    RegistrationCreate,
    RegistrationUpdate,
)

logger = logging.getLogger(__name__)


async def get_registration(
    db: AsyncSession, registration_id: int, with_event: bool = False
) -> Optional[Registration]:
    query = select(Registration).filter(Registration.id == registration_id)
    if with_event:
        query = query.options(selectinload(Registration.event))
    result = await db.execute(query.execution_options(populate_existing=True))
    registration: Optional[Registration] = result.scalars().first()
    return registration


async def get_registrations(
    db: AsyncSession,
    event_id: Optional[int] = None,
    status: Optional[RegistrationStatus] = None,
) -> list[Registration]:
    """Registrations matching the exact-match filters, each with its event's
    title, date and location loaded for display."""
    query = select(Registration).options(
        selectinload(Registration.event).options(
            load_only(Event.id, Event.title, Event.date, Event.location)
        )
    )

    filters = []
    if event_id is not None:
        filters.append(Registration.event_id == event_id)
    if status is not None:
        filters.append(Registration.status == status)
    if filters:
        query = query.filter(and_(*filters))

    result = await db.execute(
        query.order_by(Registration.created_at.asc(), Registration.id.asc())
    )
    return list(result.scalars().all())


async def get_registrations_for_event(
    db: AsyncSession, event_id: int
) -> list[Registration]:
    result = await db.execute(
        select(Registration)
        .filter(Registration.event_id == event_id)
        .order_by(Registration.created_at.asc(), Registration.id.asc())
    )
    return list(result.scalars().all())


async def create_registration_record(
    db: AsyncSession, registration: RegistrationCreate, commit: bool = True
) -> Registration:
    db_registration = Registration(**registration.model_dump())
    db.add(db_registration)
    if commit:
        await db.commit()
        await db.refresh(db_registration)
    else:
        await db.flush()
    return db_registration


async def update_registration_record(
    db: AsyncSession, registration_id: int, registration: RegistrationUpdate
) -> Optional[Registration]:
    db_registration = await get_registration(db, registration_id)
    if db_registration:
        for key, value in registration.model_dump(exclude_unset=True).items():
            setattr(db_registration, key, value)
        await db.commit()
        await db.refresh(db_registration)
        logger.info("Registration %s updated", registration_id)
    return db_registration


async def delete_registration_record(
    db: AsyncSession, registration_id: int, commit: bool = True
) -> bool:
    result = await db.execute(
        delete(Registration)
        .where(Registration.id == registration_id)
        .execution_options(synchronize_session=False)
    )
    deleted = bool(result.rowcount)
    if commit:
        await db.commit()
    return deleted
