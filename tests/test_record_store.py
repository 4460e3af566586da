from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import registration_payload
from event_registration.crud import event as event_crud
from event_registration.crud import registration as registration_crud
from event_registration.crud.event import Admission
from event_registration.models.event import Event, EventCategory, EventStatus
from event_registration.models.registration import RegistrationStatus
from event_registration.schemas.event import EventUpdate
from event_registration.schemas.registration import (
    RegistrationCreate,
    RegistrationUpdate,
)


async def _register(db: AsyncSession, event_id: int, **overrides: Any) -> int:
    record = await registration_crud.create_registration_record(
        db, RegistrationCreate.model_validate(registration_payload(event_id, **overrides))
    )
    return record.id


async def _set_counter(db: AsyncSession, event_id: int, value: int) -> None:
    await db.execute(
        update(Event).where(Event.id == event_id).values(current_participants=value)
    )
    await db.commit()


async def test_create_event_starts_empty(db: AsyncSession, make_event: Any) -> None:
    event = await make_event(maxParticipants=5)
    assert event.id is not None
    assert event.current_participants == 0
    assert event.created_at is not None


async def test_get_missing_event_returns_none(db: AsyncSession) -> None:
    assert await event_crud.get_event(db, 404) is None


async def test_events_are_ordered_by_date(db: AsyncSession, make_event: Any) -> None:
    late = (await make_event(title="Late", date="2026-12-01T09:00:00Z")).id
    early = (await make_event(title="Early", date="2026-10-01T09:00:00Z")).id

    events = await event_crud.get_events(db)
    assert [e.id for e in events] == [early, late]


async def test_events_are_ordered_by_instant_across_offsets(
    db: AsyncSession, make_event: Any
) -> None:
    # 05:00Z written with a +05:00 offset, still before 08:00Z
    early = (await make_event(title="Early", date="2026-11-15T10:00:00+05:00")).id
    late = (await make_event(title="Late", date="2026-11-15T08:00:00Z")).id

    events = await event_crud.get_events(db)

    assert [e.id for e in events] == [early, late]
    stored = await event_crud.get_event(db, early)
    assert stored is not None
    assert stored.date == datetime(2026, 11, 15, 5, 0, tzinfo=timezone.utc)
    assert stored.date.utcoffset() == timedelta(0)


async def test_event_filters_are_exact_and_combined(
    db: AsyncSession, make_event: Any
) -> None:
    workshop = (await make_event(category="workshop")).id
    await make_event(category="seminar")
    await make_event(category="workshop", status="cancelled")

    by_category = await event_crud.get_events(db, category=EventCategory.WORKSHOP)
    assert len(by_category) == 2

    both = await event_crud.get_events(
        db, category=EventCategory.WORKSHOP, status=EventStatus.UPCOMING
    )
    assert [e.id for e in both] == [workshop]

    none = await event_crud.get_events(db, category=EventCategory.WEBINAR)
    assert none == []


async def test_update_event_changes_only_sent_fields(
    db: AsyncSession, make_event: Any
) -> None:
    event_id = (await make_event(title="Before", speaker="Sam")).id

    updated = await event_crud.update_event(
        db, event_id, EventUpdate.model_validate({"title": "After"})
    )
    assert updated is not None
    assert updated.title == "After"
    assert updated.speaker == "Sam"


async def test_update_missing_event_returns_none(db: AsyncSession) -> None:
    update_in = EventUpdate.model_validate({"title": "x"})
    assert await event_crud.update_event(db, 404, update_in) is None


async def test_capacity_may_shrink_below_current_count(
    db: AsyncSession, make_event: Any
) -> None:
    event_id = (await make_event(maxParticipants=5)).id
    await _set_counter(db, event_id, 4)

    updated = await event_crud.update_event(
        db, event_id, EventUpdate.model_validate({"maxParticipants": 2})
    )
    assert updated is not None
    assert updated.max_participants == 2
    assert updated.current_participants == 4

    result = await event_crud.admit_participant(db, event_id)
    assert result.outcome is Admission.FULL


async def test_delete_event_removes_its_registrations(
    db: AsyncSession, make_event: Any
) -> None:
    doomed = (await make_event()).id
    kept = (await make_event()).id
    await _register(db, doomed)
    await _register(db, doomed, email="other@example.com")
    survivor = await _register(db, kept)

    assert await event_crud.delete_event(db, doomed) is True

    assert await event_crud.get_event(db, doomed) is None
    assert await registration_crud.get_registrations(db, event_id=doomed) == []
    remaining = await registration_crud.get_registrations(db)
    assert [r.id for r in remaining] == [survivor]


async def test_delete_missing_event_returns_false(db: AsyncSession) -> None:
    assert await event_crud.delete_event(db, 404) is False


async def test_admit_takes_slots_until_full(db: AsyncSession, make_event: Any) -> None:
    event_id = (await make_event(maxParticipants=2)).id

    first = await event_crud.admit_participant(db, event_id)
    second = await event_crud.admit_participant(db, event_id)
    third = await event_crud.admit_participant(db, event_id)
    await db.commit()

    assert first.admitted and first.current_participants == 1
    assert second.admitted and second.current_participants == 2
    assert third.outcome is Admission.FULL
    assert not third.admitted

    event = await event_crud.get_event(db, event_id)
    assert event is not None
    assert event.current_participants == 2


async def test_admit_reports_missing_event(db: AsyncSession) -> None:
    result = await event_crud.admit_participant(db, 404)
    assert result.outcome is Admission.NOT_FOUND


async def test_admit_refuses_cancelled_event(db: AsyncSession, make_event: Any) -> None:
    event_id = (await make_event(status="cancelled")).id

    result = await event_crud.admit_participant(db, event_id)
    assert result.outcome is Admission.CANCELLED

    event = await event_crud.get_event(db, event_id)
    assert event is not None
    assert event.current_participants == 0


async def test_full_takes_precedence_over_cancelled(
    db: AsyncSession, make_event: Any
) -> None:
    event_id = (await make_event(maxParticipants=1, status="cancelled")).id
    await _set_counter(db, event_id, 1)

    result = await event_crud.admit_participant(db, event_id)
    assert result.outcome is Admission.FULL


async def test_release_never_goes_below_zero(db: AsyncSession, make_event: Any) -> None:
    event_id = (await make_event()).id
    await _set_counter(db, event_id, 1)

    assert await event_crud.release_participant(db, event_id) is True
    assert await event_crud.release_participant(db, event_id) is False
    await db.commit()

    event = await event_crud.get_event(db, event_id)
    assert event is not None
    assert event.current_participants == 0


async def test_release_on_missing_event_is_a_no_op(db: AsyncSession) -> None:
    assert await event_crud.release_participant(db, 404) is False


async def test_registration_filters(db: AsyncSession, make_event: Any) -> None:
    first_event = (await make_event()).id
    second_event = (await make_event()).id
    a = await _register(db, first_event)
    b = await _register(db, first_event, status="pending")
    c = await _register(db, second_event)

    assert [r.id for r in await registration_crud.get_registrations(db)] == [a, b, c]
    by_event = await registration_crud.get_registrations(db, event_id=first_event)
    assert [r.id for r in by_event] == [a, b]
    pending = await registration_crud.get_registrations(
        db, status=RegistrationStatus.PENDING
    )
    assert [r.id for r in pending] == [b]
    both = await registration_crud.get_registrations(
        db, event_id=second_event, status=RegistrationStatus.PENDING
    )
    assert both == []


async def test_registration_list_carries_event_summary(
    db: AsyncSession, make_event: Any
) -> None:
    event_id = (await make_event(title="Summit", location="Hall B")).id
    await _register(db, event_id)

    [registration] = await registration_crud.get_registrations(db)
    assert registration.event.title == "Summit"
    assert registration.event.location == "Hall B"


async def test_get_registration_with_event(db: AsyncSession, make_event: Any) -> None:
    event_id = (await make_event(speaker="Dr. Lee")).id
    registration_id = await _register(db, event_id)

    registration = await registration_crud.get_registration(
        db, registration_id, with_event=True
    )
    assert registration is not None
    assert registration.event.speaker == "Dr. Lee"


async def test_registrations_for_unknown_event_is_empty(db: AsyncSession) -> None:
    assert await registration_crud.get_registrations_for_event(db, 404) == []


async def test_update_registration_keeps_counter(
    db: AsyncSession, make_event: Any
) -> None:
    event_id = (await make_event()).id
    await _set_counter(db, event_id, 1)
    registration_id = await _register(db, event_id)

    updated = await registration_crud.update_registration_record(
        db,
        registration_id,
        RegistrationUpdate.model_validate({"status": "cancelled", "phone": "999"}),
    )
    assert updated is not None
    assert updated.status is RegistrationStatus.CANCELLED
    assert updated.phone == "999"

    event = await event_crud.get_event(db, event_id)
    assert event is not None
    assert event.current_participants == 1


async def test_delete_registration_record(db: AsyncSession, make_event: Any) -> None:
    registration_id = await _register(db, (await make_event()).id)

    assert await registration_crud.delete_registration_record(db, registration_id)
    assert not await registration_crud.delete_registration_record(db, registration_id)
