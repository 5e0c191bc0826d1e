import asyncio

import pytest

from auction.core.locks import KeyedLock

pytestmark = pytest.mark.asyncio


async def test_same_key_is_serialized():
    locks = KeyedLock()
    order = []

    async def worker(name: str):
        async with locks.hold("item-1"):
            order.append(f"{name}-start")
            await asyncio.sleep(0.01)
            order.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-start", "a-end", "b-start", "b-end"]


async def test_different_keys_do_not_block():
    locks = KeyedLock()

    async with locks.hold(1):
        assert locks.locked(1)
        assert not locks.locked(2)
        async with locks.hold(2):
            assert len(locks) == 2


async def test_unused_locks_are_discarded():
    locks = KeyedLock()

    async with locks.hold(1):
        assert len(locks) == 1

    assert len(locks) == 0
    assert not locks.locked(1)


async def test_lock_released_on_error():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.hold(1):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold(1):
        assert locks.locked(1)
