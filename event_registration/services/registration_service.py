"""Registration service - admission control for event capacity.

Every admission and cancellation runs as one transaction while holding the
per-event lock, and the store side of the check is a conditional UPDATE,
so the participant counter and the registration rows always change together.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.db_utils import db_transaction
from event_registration.core.errors import (
    CapacityExceededError,
    EventCancelledError,
    EventNotFoundError,
    InternalFailureError,
    RegistrationNotFoundError,
)
from event_registration.core.locks import EventLockManager
from event_registration.crud import event as event_crud
from event_registration.crud import registration as registration_crud
from event_registration.crud.event import Admission
from event_registration.middleware.monitoring import business_metrics
from event_registration.models.registration import Registration
from event_registration.schemas.registration import RegistrationCreate

logger = logging.getLogger(__name__)


class RegistrationService:
    """Creates and cancels registrations while keeping
    ``Event.current_participants`` in step with them."""

    def __init__(self, db: AsyncSession, locks: EventLockManager) -> None:
        self.db = db
        self.locks = locks

    async def register_participant(self, data: RegistrationCreate) -> Registration:
        """Admit one participant to ``data.event_id``.

        Raises:
            EventNotFoundError: The event does not exist.
            CapacityExceededError: The event has no free slot.
            EventCancelledError: The event is cancelled.
            InternalFailureError: The store failed; nothing was written.
        """
        event_id = data.event_id
        async with self.locks.hold(event_id):
            async with db_transaction(self.db):
                admission = await event_crud.admit_participant(self.db, event_id)

                if admission.outcome is Admission.NOT_FOUND:
                    business_metrics.record_admission(admission.outcome)
                    logger.info("Registration rejected: event %s not found", event_id)
                    raise EventNotFoundError(event_id)
                if admission.outcome is Admission.FULL:
                    business_metrics.record_admission(admission.outcome)
                    logger.info(
                        "Registration rejected: event %s is full (%s/%s)",
                        event_id,
                        admission.current_participants,
                        admission.max_participants,
                    )
                    raise CapacityExceededError(event_id, admission.max_participants)
                if admission.outcome is Admission.CANCELLED:
                    business_metrics.record_admission(admission.outcome)
                    logger.info("Registration rejected: event %s is cancelled", event_id)
                    raise EventCancelledError(event_id)

                registration = await registration_crud.create_registration_record(
                    self.db, data, commit=False
                )

        business_metrics.record_admission(Admission.ADMITTED)
        logger.info(
            "Registration %s admitted to event %s (%s/%s)",
            registration.id,
            event_id,
            admission.current_participants,
            admission.max_participants,
        )
        return registration

    async def cancel_registration(self, registration_id: int) -> None:
        """Delete a registration and give its slot back to the event.

        If the event no longer exists only the registration is removed.

        Raises:
            RegistrationNotFoundError: No such registration, including when a
                concurrent cancellation removed it first.
            InternalFailureError: The store failed; nothing was written.
        """
        registration = await self._find_registration(registration_id)
        event_id = registration.event_id

        async with self.locks.hold(event_id):
            async with db_transaction(self.db):
                deleted = await registration_crud.delete_registration_record(
                    self.db, registration_id, commit=False
                )
                if not deleted:
                    raise RegistrationNotFoundError(registration_id)
                released = await event_crud.release_participant(self.db, event_id)

        business_metrics.record_cancellation()
        if released:
            logger.info(
                "Registration %s cancelled, slot returned to event %s",
                registration_id,
                event_id,
            )
        else:
            logger.warning(
                "Registration %s cancelled, event %s missing or already empty",
                registration_id,
                event_id,
            )

    async def _find_registration(self, registration_id: int) -> Registration:
        try:
            registration: Optional[Registration] = await registration_crud.get_registration(
                self.db, registration_id
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load registration %s", registration_id)
            raise InternalFailureError("Database operation failed") from e
        if registration is None:
            raise RegistrationNotFoundError(registration_id)
        return registration
