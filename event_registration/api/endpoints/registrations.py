from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.api import deps
from event_registration.core.errors import RegistrationNotFoundError
from event_registration.crud import registration as registration_crud
from event_registration.models.registration import RegistrationStatus
from event_registration.schemas.common import APIResponse, ListResponse
from event_registration.schemas.registration import (
    Registration,
    RegistrationCreate,
    RegistrationUpdate,
    RegistrationWithEvent,
    RegistrationWithEventSummary,
)
from event_registration.services.registration_service import RegistrationService

router = APIRouter()


@router.get("", response_model=ListResponse[RegistrationWithEventSummary])
async def read_registrations(
    db: AsyncSession = Depends(deps.get_db),
    event_id: Optional[int] = Query(None, alias="eventId"),
    registration_status: Optional[RegistrationStatus] = Query(None, alias="status"),
) -> ListResponse[RegistrationWithEventSummary]:
    """
    Retrieve registrations, each with its event's title, date and location.
    """
    registrations = await registration_crud.get_registrations(
        db, event_id=event_id, status=registration_status
    )
    data = [RegistrationWithEventSummary.model_validate(r) for r in registrations]
    return ListResponse[RegistrationWithEventSummary](count=len(data), data=data)


@router.get("/{registration_id}", response_model=APIResponse[RegistrationWithEvent])
async def read_registration(
    *,
    db: AsyncSession = Depends(deps.get_db),
    registration_id: int,
) -> APIResponse[RegistrationWithEvent]:
    """
    Get registration by ID, with the full event attached.
    """
    registration = await registration_crud.get_registration(
        db, registration_id, with_event=True
    )
    if not registration:
        raise RegistrationNotFoundError(registration_id)
    return APIResponse[RegistrationWithEvent](
        data=RegistrationWithEvent.model_validate(registration)
    )


@router.post(
    "", response_model=APIResponse[Registration], status_code=status.HTTP_201_CREATED
)
async def create_registration(
    *,
    registration_in: RegistrationCreate,
    service: RegistrationService = Depends(deps.get_registration_service),
) -> APIResponse[Registration]:
    """
    Register a participant. Fails with 404 if the event does not exist and
    with 409 if it is full or cancelled.
    """
    registration = await service.register_participant(registration_in)
    return APIResponse[Registration](
        message="Registration successful",
        data=Registration.model_validate(registration),
    )


@router.put("/{registration_id}", response_model=APIResponse[Registration])
async def update_registration(
    *,
    db: AsyncSession = Depends(deps.get_db),
    registration_id: int,
    registration_in: RegistrationUpdate,
) -> APIResponse[Registration]:
    """
    Update participant data or status. Does not touch the event's counter.
    """
    registration = await registration_crud.update_registration_record(
        db, registration_id, registration_in
    )
    if not registration:
        raise RegistrationNotFoundError(registration_id)
    return APIResponse[Registration](
        message="Registration updated successfully",
        data=Registration.model_validate(registration),
    )


@router.delete("/{registration_id}", response_model=APIResponse[None])
async def cancel_registration(
    *,
    registration_id: int,
    service: RegistrationService = Depends(deps.get_registration_service),
) -> APIResponse[None]:
    """
    Cancel a registration, freeing its slot on the event.
    """
    await service.cancel_registration(registration_id)
    return APIResponse[None](message="Registration cancelled successfully")
