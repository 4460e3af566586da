import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict


class EventLockManager:
    """Serializes admission work per event using in-process asyncio locks.

    A lock exists only while some task holds or waits for it, so the
    registry does not grow with the number of events ever touched.
    """

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}
        self._users: Dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, event_id: int) -> AsyncGenerator[None, None]:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[event_id] = lock
        self._users[event_id] = self._users.get(event_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[event_id] -= 1
            if self._users[event_id] == 0:
                del self._users[event_id]
                del self._locks[event_id]

    def is_locked(self, event_id: int) -> bool:
        lock = self._locks.get(event_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
