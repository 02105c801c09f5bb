"""Tests for AreaRouter."""

from settings_store.areas import LOCAL, SYNC, InMemoryArea, StorageChange
from settings_store.router import AreaRouter


def test_everything_local_when_sync_disabled():
    router = AreaRouter()
    assert router.route("ui") == LOCAL
    assert router.route("stats") == LOCAL


def test_eligible_keys_go_to_sync_when_enabled():
    router = AreaRouter(sync_enabled=True)
    assert router.route("ui") == SYNC
    assert router.route("userTags") == SYNC


def test_ineligible_keys_stay_local_when_enabled():
    router = AreaRouter(sync_enabled=True)
    for key in ("stats", "scrollPositions", "mutedUsers", "sync", "_schemaVersion", "unknown"):
        assert router.route(key) == LOCAL


def test_routing_is_deterministic():
    router = AreaRouter(sync_enabled=True)
    assert {router.route("darkMode") for _ in range(10)} == {SYNC}


async def test_load_reads_flag_from_local():
    local = InMemoryArea(LOCAL)
    await local.set({"sync": {"enabled": True, "lastSync": None}})
    router = AreaRouter()
    assert await router.load(local) is True
    assert router.route("ui") == SYNC


async def test_load_defaults_to_disabled():
    router = AreaRouter(sync_enabled=True)
    assert await router.load(InMemoryArea(LOCAL)) is False


def test_on_local_change_updates_flag():
    router = AreaRouter()
    router.on_local_change({"sync": StorageChange(None, {"enabled": True})}, LOCAL)
    assert router.sync_enabled
    router.on_local_change({"sync": StorageChange({"enabled": True}, None)}, LOCAL)
    assert not router.sync_enabled


def test_on_local_change_ignores_other_areas_and_keys():
    router = AreaRouter()
    router.on_local_change({"sync": StorageChange(None, {"enabled": True})}, SYNC)
    router.on_local_change({"ui": StorageChange(None, {})}, LOCAL)
    assert not router.sync_enabled


async def test_store_follows_toggle_from_another_context(store, local):
    await local.set({"sync": {"enabled": True, "lastSync": None}})
    assert store.accessor.router.route("ui") == SYNC
