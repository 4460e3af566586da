from datetime import datetime
from typing import Any, Optional

from pydantic import BeforeValidator, EmailStr, model_validator
from typing_extensions import Annotated

from ..models.registration import RegistrationStatus
from .common import CamelModel, NonEmptyStr
from .event import Event, EventSummary


def _normalize_email(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip() or None
    return v


LowercaseEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


class RegistrationBase(CamelModel):
    participant_name: NonEmptyStr
    email: LowercaseEmail
    phone: NonEmptyStr
    organization: OptionalText = None
    status: RegistrationStatus = RegistrationStatus.CONFIRMED


class RegistrationCreate(RegistrationBase):
    event_id: int


class RegistrationUpdate(CamelModel):
    """Partial update of participant data. The event reference is fixed."""

    participant_name: Optional[NonEmptyStr] = None
    email: Optional[LowercaseEmail] = None
    phone: Optional[NonEmptyStr] = None
    organization: OptionalText = None
    status: Optional[RegistrationStatus] = None

    @model_validator(mode="after")
    def reject_required_nulls(self) -> "RegistrationUpdate":
        nulls = sorted(
            name
            for name in self.model_fields_set
            if name != "organization" and getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return self


class Registration(RegistrationBase):
    id: int
    event_id: int
    created_at: datetime
    updated_at: datetime


class RegistrationWithEventSummary(Registration):
    event: Optional[EventSummary] = None


class RegistrationWithEvent(Registration):
    event: Optional[Event] = None
