"""Shared fixtures: a throwaway SQLite file per test, the app and a client."""
import sys
from pathlib import Path
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    # Insert at front so local package imports resolve
    sys.path.insert(0, str(REPO_ROOT))

from event_registration.core.database_manager import DatabaseManager  # noqa: E402
from event_registration.core.locks import EventLockManager  # noqa: E402
from event_registration.crud import event as event_crud  # noqa: E402
from event_registration.main import create_app  # noqa: E402
from event_registration.models.event import Event  # noqa: E402
from event_registration.schemas.event import EventCreate  # noqa: E402


def event_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "title": "Intro to FastAPI",
        "description": "Hands-on session",
        "category": "workshop",
        "date": "2026-11-15T09:00:00Z",
        "location": "Room 101",
        "maxParticipants": 30,
        "speaker": "Sam Doe",
        "price": 0,
    }
    payload.update(overrides)
    return payload


def registration_payload(event_id: int, **overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "eventId": event_id,
        "participantName": "Alex Kim",
        "email": "alex@example.com",
        "phone": "+1 555 0100",
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def manager(tmp_path: Path) -> AsyncGenerator[DatabaseManager, None]:
    # A file, not :memory:, so each session gets its own connection
    db_manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db_manager.create_tables()
    yield db_manager
    await db_manager.drop_tables()
    await db_manager.close()


@pytest_asyncio.fixture
async def db(manager: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    async with manager.get_session() as session:
        yield session


@pytest.fixture
def locks() -> EventLockManager:
    return EventLockManager()


@pytest.fixture
def make_event(db: AsyncSession) -> Callable[..., Awaitable[Event]]:
    async def _make(**overrides: Any) -> Event:
        return await event_crud.create_event(
            db, EventCreate.model_validate(event_payload(**overrides))
        )

    return _make


@pytest.fixture
def app(manager: DatabaseManager) -> Any:
    return create_app(manager)


@pytest_asyncio.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
