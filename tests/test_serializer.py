"""Tests for UpdateSerializer."""

import asyncio

import pytest

from settings_store.serializer import UpdateSerializer


async def test_locked_inside_context():
    serializer = UpdateSerializer()
    assert not serializer.locked
    async with serializer:
        assert serializer.locked
    assert not serializer.locked


async def test_waiters_run_in_arrival_order():
    serializer = UpdateSerializer()
    order = []

    async def worker(i):
        async with serializer:
            order.append(i)
            await asyncio.sleep(0)

    await asyncio.gather(*(worker(i) for i in range(5)))
    assert order == [0, 1, 2, 3, 4]


async def test_critical_sections_do_not_interleave():
    serializer = UpdateSerializer()
    events = []

    async def worker(name):
        async with serializer:
            events.append(f"{name}-start")
            await asyncio.sleep(0.001)
            events.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))
    assert events == ["a-start", "a-end", "b-start", "b-end"]


async def test_run_returns_result():
    serializer = UpdateSerializer()

    async def op():
        return 42

    assert await serializer.run(op) == 42


async def test_released_after_exception():
    serializer = UpdateSerializer()

    async def op():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await serializer.run(op)
    assert not serializer.locked
