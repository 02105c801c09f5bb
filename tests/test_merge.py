"""Tests for the typed section merge."""

import copy

import pytest

from settings_store.exceptions import InvalidValueError
from settings_store.merge import merge_section
from settings_store.schema import REGISTRY, default_for


def test_nested_records_merge_field_by_field():
    current = default_for("privacy")
    current["trackingStats"]["byType"]["social"] = 3
    merged = merge_section(
        REGISTRY["privacy"], current, {"trackingStats": {"byType": {"utm": 5}}}
    )
    assert merged["trackingStats"]["byType"]["utm"] == 5
    assert merged["trackingStats"]["byType"]["social"] == 3
    assert merged["trackingStats"]["totalCleaned"] == 0
    assert merged["removeTracking"] is True


def test_arrays_are_replaced():
    current = default_for("contentFiltering")
    current["mutedKeywords"] = ["a", "b"]
    merged = merge_section(REGISTRY["contentFiltering"], current, {"mutedKeywords": ["c"]})
    assert merged["mutedKeywords"] == ["c"]


def test_open_mappings_are_replaced():
    current = default_for("keyboardShortcuts")
    patch = {"shortcuts": {"only": {"keys": "x", "enabled": True}}}
    merged = merge_section(REGISTRY["keyboardShortcuts"], current, patch)
    assert list(merged["shortcuts"]) == ["only"]


def test_empty_default_mappings_are_replaced():
    current = default_for("userTags")
    current["tags"] = {"alice": {"text": "a"}}
    merged = merge_section(REGISTRY["userTags"], current, {"tags": {"bob": {"text": "b"}}})
    assert merged["tags"] == {"bob": {"text": "b"}}


def test_undeclared_fields_are_ignored():
    merged = merge_section(REGISTRY["ui"], default_for("ui"), {"bogus": 1, "badgeStyle": "count"})
    assert "bogus" not in merged
    assert merged["badgeStyle"] == "count"


def test_missing_current_starts_from_default():
    merged = merge_section(REGISTRY["darkMode"], None, {"enabled": "dark"})
    assert merged == {"enabled": "dark", "autoCollapseAutomod": True}


def test_scalar_sections_are_replaced():
    assert merge_section(REGISTRY["enabled"], True, False) is False


def test_non_mapping_patch_rejected():
    with pytest.raises(InvalidValueError):
        merge_section(REGISTRY["ui"], default_for("ui"), ["not", "a", "dict"])


def test_arguments_not_mutated():
    current = default_for("privacy")
    patch = {"trackingStats": {"byType": {"utm": 1}}}
    before_current, before_patch = copy.deepcopy(current), copy.deepcopy(patch)
    merge_section(REGISTRY["privacy"], current, patch)
    assert current == before_current
    assert patch == before_patch
