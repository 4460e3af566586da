import asyncio
from typing import List

import pytest

from event_registration.core.locks import EventLockManager


async def test_same_event_is_serialized() -> None:
    locks = EventLockManager()
    order: List[str] = []

    async def worker(name: str) -> None:
        async with locks.hold(1):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order in (
        ["a-in", "a-out", "b-in", "b-out"],
        ["b-in", "b-out", "a-in", "a-out"],
    )


async def test_different_events_do_not_block_each_other() -> None:
    locks = EventLockManager()
    entered = asyncio.Event()

    async def holder() -> None:
        async with locks.hold(1):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other() -> None:
        async with locks.hold(2):
            entered.set()

    await asyncio.gather(holder(), other())


async def test_lock_is_dropped_when_unused() -> None:
    locks = EventLockManager()

    async with locks.hold(7):
        assert locks.is_locked(7)
        assert len(locks) == 1

    assert not locks.is_locked(7)
    assert len(locks) == 0


async def test_lock_is_released_on_error() -> None:
    locks = EventLockManager()

    with pytest.raises(RuntimeError):
        async with locks.hold(3):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold(3):
        assert locks.is_locked(3)
