"""Tests for the quota & health monitor."""

import pytest

from settings_store.config import LOCAL_QUOTA_BYTES, StoreConfig
from settings_store.quota import QuotaMonitor, encoded_size, estimate_size, percent


@pytest.fixture
def monitor(accessor, clock):
    return QuotaMonitor(accessor, clock=clock)


def _blob_for_percent(pct, quota=LOCAL_QUOTA_BYTES):
    # {"blob":"..."} adds 11 bytes of framing around the string
    return "x" * (quota * pct // 100 - 11)


def test_encoded_size_counts_utf8_bytes():
    assert encoded_size("é") == 4
    assert encoded_size({"a": 1}) == 7


def test_encoded_size_of_unserializable_is_zero():
    assert encoded_size({"a": object()}) == 0


def test_estimate_size_includes_key():
    assert estimate_size("k", 1) == len('{"k":1}')


def test_percent_rounds_half_up():
    assert percent(1, 200) == 1
    assert percent(1, 300) == 0
    assert percent(5, 0) == 0


async def test_usage_of_empty_store(monitor):
    usage = await monitor.usage()
    assert usage.local.used == 2
    assert usage.local.quota == 5_242_880
    assert usage.sync.quota == 102_400
    assert usage.local.percentage == 0
    assert usage.breakdown == {}


async def test_usage_breakdown_sorted_largest_first(monitor, local):
    await local.set({"small": 1, "large": "x" * 100})
    usage = await monitor.usage()
    assert list(usage.breakdown) == ["large", "small"]
    assert usage.total == usage.local.used + usage.sync.used


async def test_ninety_five_percent_is_critical(monitor, local):
    await local.set({"blob": _blob_for_percent(95)})

    report = await monitor.health_report()

    assert report.usage.local.percentage == 95
    assert report.status == "critical"
    assert "Storage is critically full (>90%)" in report.issues


async def test_eighty_five_percent_is_warning(monitor, local):
    await local.set({"blob": _blob_for_percent(85)})

    report = await monitor.health_report()
    check = await monitor.is_near_quota()

    assert report.status == "warning"
    assert "Storage is approaching quota limit (>80%)" in report.issues
    assert check.is_near_limit
    assert check.local.is_near_limit
    assert not check.sync.is_near_limit


async def test_healthy_store(monitor):
    report = await monitor.health_report()
    assert report.status == "healthy"
    assert report.issues == []
    assert report.last_checked == "2024-01-15T12:00:00+00:00"


async def test_custom_threshold(monitor, local):
    await local.set({"blob": _blob_for_percent(50)})
    assert not (await monitor.is_near_quota()).is_near_limit
    assert (await monitor.is_near_quota(threshold=40)).is_near_limit


async def test_recommendations_for_oversized_keys(accessor, local, clock):
    monitor = QuotaMonitor(accessor, StoreConfig(local_quota_bytes=100_000), clock)
    positions = {f"https://example.com/{i}": {"scrollY": i, "timestamp": i} for i in range(1500)}
    await local.set({"scrollPositions": {"maxEntries": 5000, "positions": positions}})

    check = await monitor.is_near_quota()

    assert check.is_near_limit
    actions = [r.action for r in check.recommendations]
    assert actions == ["cleanup_scroll_positions"]
    assert check.recommendations[0].savings == estimate_size(
        "scrollPositions", {"maxEntries": 5000, "positions": positions}
    )


async def test_no_recommendations_when_not_near(monitor):
    assert (await monitor.is_near_quota()).recommendations == []


async def test_collection_near_cap_is_an_issue(monitor, local):
    positions = {f"u{i}": {"scrollY": i, "timestamp": i} for i in range(82)}
    await local.set({"scrollPositions": {"maxEntries": 100, "positions": positions}})

    report = await monitor.health_report()

    assert report.status == "healthy"
    assert "Scroll positions near limit (82/100)" in report.issues
    assert report.counts["scrollPositions"] == 82


async def test_counts_cover_collections_and_lists(monitor, local):
    await local.set(
        {
            "subredditOverrides": {"whitelist": [], "mutedSubreddits": ["a", "b"]},
            "contentFiltering": {"mutedKeywords": ["k"], "mutedDomains": [], "mutedFlairs": []},
        }
    )
    counts = (await monitor.health_report()).counts
    assert counts["mutedSubreddits"] == 2
    assert counts["mutedKeywords"] == 1
    assert counts["userTags"] == 0
    assert counts["readingHistory"] == 0
