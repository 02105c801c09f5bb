"""Tests for SQLiteArea."""

import pytest

from settings_store.areas import LOCAL, SYNC, SQLiteArea


@pytest.fixture
async def area(tmp_path):
    a = SQLiteArea(str(tmp_path / "settings.db"))
    yield a
    await a.close()


async def test_set_and_get(area):
    await area.set({"k": {"val": 1, "items": ["a"]}})
    assert await area.get(["k"]) == {"k": {"val": 1, "items": ["a"]}}


async def test_get_missing_and_empty_keys(area):
    assert await area.get(["nope"]) == {}
    assert await area.get([]) == {}


async def test_overwrite(area):
    await area.set({"k": 1})
    await area.set({"k": 2})
    assert await area.get() == {"k": 2}


async def test_remove_and_clear(area):
    await area.set({"a": 1, "b": 2, "c": 3})
    await area.remove(["a"])
    assert await area.get() == {"b": 2, "c": 3}
    await area.clear()
    assert await area.get() == {}


async def test_areas_share_a_file_without_mixing(tmp_path):
    path = str(tmp_path / "shared.db")
    local = SQLiteArea(path, LOCAL)
    sync = SQLiteArea(path, SYNC)
    try:
        await local.set({"k": "local"})
        await sync.set({"k": "sync"})
        await sync.clear()
        assert await local.get() == {"k": "local"}
        assert await sync.get() == {}
    finally:
        await local.close()
        await sync.close()


async def test_persists_across_connections(tmp_path):
    path = str(tmp_path / "persist.db")
    first = SQLiteArea(path)
    await first.set({"enabled": False})
    await first.close()

    second = SQLiteArea(path)
    try:
        assert await second.get(["enabled"]) == {"enabled": False}
    finally:
        await second.close()


async def test_listener_sees_previous_value(area):
    seen = []
    area.add_listener(lambda changes, name: seen.append(changes))
    await area.set({"k": 1})
    await area.set({"k": 2})
    assert seen[1]["k"].old_value == 1
    assert seen[1]["k"].new_value == 2
