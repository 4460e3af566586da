from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.database_manager import DatabaseManager
from event_registration.core.locks import EventLockManager
from event_registration.services.registration_service import RegistrationService


def get_db_manager(request: Request) -> DatabaseManager:
    manager: DatabaseManager = request.app.state.db_manager
    return manager


async def get_db(
    manager: DatabaseManager = Depends(get_db_manager),
) -> AsyncGenerator[AsyncSession, None]:
    async with manager.get_session() as session:
        yield session


def get_event_locks(request: Request) -> EventLockManager:
    locks: EventLockManager = request.app.state.event_locks
    return locks


def get_registration_service(
    db: AsyncSession = Depends(get_db),
    locks: EventLockManager = Depends(get_event_locks),
) -> RegistrationService:
    return RegistrationService(db, locks)
