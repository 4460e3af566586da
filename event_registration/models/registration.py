import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..database import Base
from .event import UTCDateTime, _enum_values, utcnow


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    # Referential integrity is kept by crud.event.delete_event, not the database
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    participant_name = Column(String(200), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(50), nullable=False)
    organization = Column(String(200), nullable=True)
    status = Column(
        Enum(RegistrationStatus, name="registrationstatus", values_callable=_enum_values),
        nullable=False,
        default=RegistrationStatus.CONFIRMED,
    )
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    event = relationship("Event", lazy="raise")

    __table_args__ = (
        Index("idx_registration_event_status", "event_id", "status"),
        Index("idx_registration_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<Registration {self.id} event={self.event_id} {self.email}>"
