"""Tests for InMemoryArea."""

import pytest

from settings_store.areas import SYNC, InMemoryArea


@pytest.fixture
def area():
    return InMemoryArea()


async def test_get_missing_key_is_omitted(area):
    assert await area.get(["nope"]) == {}


async def test_set_and_get(area):
    await area.set({"k": {"val": 1}})
    assert await area.get(["k"]) == {"k": {"val": 1}}


async def test_get_all(area):
    await area.set({"a": 1, "b": 2})
    assert await area.get() == {"a": 1, "b": 2}


async def test_remove(area):
    await area.set({"a": 1, "b": 2})
    await area.remove(["a", "missing"])
    assert await area.get() == {"b": 2}


async def test_clear(area):
    await area.set({"a": 1, "b": 2})
    await area.clear()
    assert await area.get() == {}


async def test_values_are_copied(area):
    value = {"items": [1]}
    await area.set({"k": value})
    value["items"].append(2)

    stored = await area.get(["k"])
    stored["k"]["items"].append(3)

    assert await area.get(["k"]) == {"k": {"items": [1]}}


async def test_listener_receives_changes():
    area = InMemoryArea(SYNC)
    seen = []
    area.add_listener(lambda changes, name: seen.append((changes, name)))

    await area.set({"k": 1})
    await area.set({"k": 2})
    await area.remove(["k"])

    assert [name for _, name in seen] == ["sync"] * 3
    assert seen[0][0]["k"].old_value is None
    assert seen[0][0]["k"].new_value == 1
    assert seen[1][0]["k"].old_value == 1
    assert seen[1][0]["k"].new_value == 2
    assert seen[2][0]["k"].old_value == 2
    assert seen[2][0]["k"].new_value is None


async def test_unsubscribe(area):
    seen = []
    unsubscribe = area.add_listener(lambda changes, name: seen.append(changes))
    unsubscribe()
    await area.set({"k": 1})
    assert seen == []


async def test_failing_listener_does_not_break_writes(area):
    def boom(changes, name):
        raise RuntimeError("listener bug")

    area.add_listener(boom)
    await area.set({"k": 1})
    assert await area.get(["k"]) == {"k": 1}


async def test_no_notification_for_noop_remove(area):
    seen = []
    area.add_listener(lambda changes, name: seen.append(changes))
    await area.remove(["missing"])
    assert seen == []
