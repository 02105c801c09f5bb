"""Tests for settings export, validated import and reading-history transfer."""

import pytest

from settings_store.exceptions import ImportValidationError, InvalidValueError
from settings_store.import_export import EXPORT_SECTIONS, validate_import


def _bundle(**sections):
    return {"_exportVersion": 1, **sections}


async def test_export_shape(store):
    bundle = await store.export_settings()
    assert bundle["_exportVersion"] == 1
    assert bundle["_exportDate"] == "2024-01-15T12:00:00+00:00"
    assert bundle["_extensionVersion"] == "0.0.0"
    assert set(bundle) == {"_exportVersion", "_exportDate", "_extensionVersion", *EXPORT_SECTIONS}
    assert "stats" not in bundle


async def test_round_trip_into_fresh_store(store, clock):
    from settings_store import SettingsStore

    await store.set_dark_mode({"enabled": "oled"})
    await store.add_muted_subreddit("r/Funny")
    await store.set_ui_preferences({"badgeStyle": "count"})
    exported = await store.export_settings()

    fresh = SettingsStore(clock=clock)
    imported = await fresh.import_settings(exported)

    assert imported == list(EXPORT_SECTIONS)
    for section in EXPORT_SECTIONS:
        assert await fresh.get(section) == await store.get(section)


async def test_import_merges_and_ignores_unknown_sections(store):
    await store.set_ui_preferences({"animateToggle": False})

    imported = await store.import_settings(
        _bundle(ui={"badgeStyle": "color"}, stats={"totalRedirects": 99}, bogus=1)
    )

    assert imported == ["ui"]
    ui = await store.get_ui_preferences()
    assert ui["badgeStyle"] == "color"
    assert ui["animateToggle"] is False
    assert (await store.get_stats())["totalRedirects"] == 0


async def test_oversized_whitelist_rejected_without_mutation(store):
    before = await store.get_all()
    bundle = _bundle(
        subredditOverrides={"whitelist": [f"sub{i}" for i in range(501)]},
        ui={"badgeStyle": "count"},
    )

    with pytest.raises(ImportValidationError) as exc_info:
        await store.import_settings(bundle)

    assert "Whitelist exceeds 500 entry limit" in exc_info.value.errors
    assert "Whitelist exceeds 500 entry limit" in str(exc_info.value)
    assert await store.get_all() == before


def test_validation_collects_every_error():
    result = validate_import(
        {
            "_exportVersion": 2,
            "frontend": {"target": 5},
            "subredditOverrides": {"whitelist": ["ok", "not ok!"]},
            "contentFiltering": {"useRegex": True, "mutedKeywords": ["(unclosed"]},
            "ui": {"badgeStyle": "sparkles"},
        }
    )
    assert not result.valid
    assert result.errors == [
        "Unsupported export version",
        "Invalid frontend target",
        "Invalid subreddit names: not ok!",
        "Invalid regex pattern: (unclosed",
        "Invalid badge style",
    ]


def test_validation_rejects_non_objects():
    assert validate_import(["nope"]).errors == ["Data must be an object"]
    assert validate_import({"_exportVersion": 1, "ui": "dark"}).errors == ["Invalid UI config"]


def test_validation_size_cap():
    result = validate_import(_bundle(blob="x" * (5 * 1024 * 1024)))
    assert result.errors == ["Import data exceeds 5MB size limit"]


def test_validation_list_limits():
    result = validate_import(
        _bundle(
            subredditOverrides={"mutedSubreddits": ["a"] * 501},
            contentFiltering={"mutedKeywords": ["k"] * 201, "mutedDomains": ["d.com"] * 501},
        )
    )
    assert result.errors == [
        "Muted subreddits exceeds 500 entry limit",
        "Muted keywords exceeds 200 entry limit",
        "Muted domains exceeds 500 entry limit",
    ]


def test_regex_only_checked_when_enabled():
    assert validate_import(_bundle(contentFiltering={"mutedKeywords": ["(unclosed"]})).valid


def test_enum_fields_checked():
    result = validate_import(_bundle(darkMode={"enabled": "neon"}))
    assert result.errors == ["Invalid darkMode.enabled: 'neon'"]


async def test_reading_history_round_trip(store, clock):
    from settings_store import SettingsStore

    await store.add_reading_history_entry({"id": "p1", "title": "One"})
    await store.add_reading_history_entry({"id": "p2", "title": "Two"})
    exported = await store.export_reading_history()

    assert exported["version"] == "1.0"
    assert exported["entryCount"] == 2

    fresh = SettingsStore(clock=clock)
    assert await fresh.import_reading_history(exported) == 2
    assert await fresh.import_reading_history(exported) == 0
    assert [e["id"] for e in await fresh.get_reading_history_entries()] == ["p2", "p1"]


async def test_reading_history_import_rejects_bad_format(store):
    with pytest.raises(InvalidValueError):
        await store.import_reading_history({"entries": "nope"})
