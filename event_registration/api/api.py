from fastapi import APIRouter

from .endpoints import events, registrations

api_router = APIRouter()
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(
    registrations.router, prefix="/registrations", tags=["registrations"]
)
