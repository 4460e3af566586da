# Import all models for easier access
from .event import Event, EventCategory, EventStatus  # noqa: F401
from .registration import Registration, RegistrationStatus  # noqa: F401
