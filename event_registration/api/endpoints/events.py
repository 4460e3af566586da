from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.api import deps
from event_registration.core.errors import EventNotFoundError
from event_registration.core.locks import EventLockManager
from event_registration.crud import event as event_crud
from event_registration.crud import registration as registration_crud
from event_registration.models.event import EventCategory, EventStatus
from event_registration.schemas.common import APIResponse, ListResponse
from event_registration.schemas.event import Event as EventSchema
from event_registration.schemas.event import EventCreate, EventUpdate
from event_registration.schemas.registration import Registration as RegistrationSchema

router = APIRouter()


@router.get("", response_model=ListResponse[EventSchema], summary="List Events")
async def read_events(
    db: AsyncSession = Depends(deps.get_db),
    category: Optional[EventCategory] = Query(None, description="Exact category"),
    event_status: Optional[EventStatus] = Query(
        None, alias="status", description="Exact status"
    ),
) -> ListResponse[EventSchema]:
    """
    **List Events**

    Returns all events ordered by date, earliest first. Both filters are
    exact matches; omitting one means no restriction.

    **Example Requests:**
    ```bash
    GET /api/events
    GET /api/events?category=workshop&status=upcoming
    ```
    """
    events = await event_crud.get_events(db, category=category, status=event_status)
    data = [EventSchema.model_validate(e) for e in events]
    return ListResponse[EventSchema](count=len(data), data=data)


@router.get("/{event_id}", response_model=APIResponse[EventSchema], summary="Get Event")
async def read_event(
    *,
    db: AsyncSession = Depends(deps.get_db),
    event_id: int,
) -> APIResponse[EventSchema]:
    """
    **Get Event by ID**

    **Errors:**
    - `404`: Event not found
    """
    event = await event_crud.get_event(db, event_id)
    if not event:
        raise EventNotFoundError(event_id)
    return APIResponse[EventSchema](data=EventSchema.model_validate(event))


@router.post(
    "",
    response_model=APIResponse[EventSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
)
async def create_event(
    *,
    db: AsyncSession = Depends(deps.get_db),
    event_in: EventCreate,
) -> APIResponse[EventSchema]:
    """
    **Create New Event**

    **Example Request:**
    ```json
    {
        "title": "Intro to FastAPI",
        "description": "Hands-on session",
        "category": "workshop",
        "date": "2026-11-15T09:00:00Z",
        "location": "Room 101",
        "maxParticipants": 30,
        "speaker": "Sam Doe",
        "price": 0
    }
    ```

    `currentParticipants` always starts at 0 and cannot be set by clients.

    **Errors:**
    - `400`: Missing field, unknown category/status or `maxParticipants < 1`
    """
    event = await event_crud.create_event(db, event_in)
    return APIResponse[EventSchema](
        message="Event created successfully", data=EventSchema.model_validate(event)
    )


@router.put("/{event_id}", response_model=APIResponse[EventSchema], summary="Update Event")
async def update_event(
    *,
    db: AsyncSession = Depends(deps.get_db),
    event_id: int,
    event_in: EventUpdate,
) -> APIResponse[EventSchema]:
    """
    **Update Event**

    Partial update; the same field rules as creation apply to every field
    sent. Lowering `maxParticipants` below the current participant count is
    allowed and does not cancel existing registrations.

    **Errors:**
    - `400`: Invalid field value
    - `404`: Event not found
    """
    event = await event_crud.update_event(db, event_id, event_in)
    if not event:
        raise EventNotFoundError(event_id)
    return APIResponse[EventSchema](
        message="Event updated successfully", data=EventSchema.model_validate(event)
    )


@router.delete("/{event_id}", response_model=APIResponse[None], summary="Delete Event")
async def delete_event(
    *,
    db: AsyncSession = Depends(deps.get_db),
    locks: EventLockManager = Depends(deps.get_event_locks),
    event_id: int,
) -> APIResponse[None]:
    """
    **Delete Event**

    Permanently deletes the event together with all of its registrations.
    Waits for in-flight registrations and cancellations on the event.

    **Errors:**
    - `404`: Event not found
    """
    async with locks.hold(event_id):
        deleted = await event_crud.delete_event(db, event_id)
    if not deleted:
        raise EventNotFoundError(event_id)
    return APIResponse[None](message="Event deleted successfully")


@router.get(
    "/{event_id}/registrations",
    response_model=ListResponse[RegistrationSchema],
    summary="List Registrations for Event",
)
async def read_event_registrations(
    *,
    db: AsyncSession = Depends(deps.get_db),
    event_id: int,
) -> ListResponse[RegistrationSchema]:
    """
    **Registrations of one Event**

    An unknown event id yields an empty list.
    """
    registrations = await registration_crud.get_registrations_for_event(db, event_id)
    data = [RegistrationSchema.model_validate(r) for r in registrations]
    return ListResponse[RegistrationSchema](count=len(data), data=data)
