"""Tests for schema migration."""

import logging

from settings_store.schema import REGISTRY, SCHEMA_VERSION


async def test_legacy_install_uses_probe(store):
    async def probe():
        return False

    assert await store.migrate(probe) is True

    everything = await store.get_all()
    assert everything["_schemaVersion"] == SCHEMA_VERSION
    assert everything["enabled"] is False
    assert set(REGISTRY) <= set(everything)


async def test_legacy_install_defaults_to_enabled(store):
    assert await store.migrate() is True
    assert await store.get_enabled() is True


async def test_unknown_probe_keeps_stored_flag(store, local):
    await local.set({"enabled": False})

    async def probe():
        return None

    await store.migrate(probe)
    assert await store.get_enabled() is False


async def test_migration_is_idempotent(store):
    await store.migrate()
    first = await store.get_all()

    assert await store.migrate() is False
    assert await store.get_all() == first


async def test_older_version_fills_missing_keys(store, local):
    await local.set({"_schemaVersion": 1, "ui": {"badgeStyle": "color"}})

    assert await store.migrate() is True

    everything = await local.get()
    assert everything["_schemaVersion"] == SCHEMA_VERSION
    assert everything["ui"] == {"badgeStyle": "color"}
    assert "keyboardShortcuts" in everything


async def test_newer_version_is_left_alone(store, local):
    await local.set({"_schemaVersion": SCHEMA_VERSION + 1})
    assert await store.migrate() is False
    assert await local.get() == {"_schemaVersion": SCHEMA_VERSION + 1}


async def test_failures_are_logged_not_raised(store, local, caplog):
    async def probe():
        raise RuntimeError("rules unavailable")

    with caplog.at_level(logging.ERROR, logger="settings_store.migration"):
        assert await store.migrate(probe) is False

    assert "Schema migration failed" in caplog.text
    assert await local.get() == {}
