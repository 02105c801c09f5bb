"""Store configuration.

Quotas and thresholds here are coarse heuristics carried over from the
extension, not derived from the host's exact quota accounting.  They are
configurable so callers can tune them instead of inferring a formula.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

LOCAL_QUOTA_BYTES = 5_242_880
SYNC_QUOTA_BYTES = 102_400


class KeyThreshold(BaseModel):
    """Size above which a key earns a cleanup recommendation.

    Attributes:
        max_bytes: Estimated size that triggers the recommendation.
        action:    Machine-readable remediation name.
        message:   Human-readable advice.
    """

    max_bytes: int
    action: str
    message: str


def _default_key_thresholds() -> dict[str, KeyThreshold]:
    return {
        "scrollPositions": KeyThreshold(
            max_bytes=50_000,
            action="cleanup_scroll_positions",
            message="Scroll positions are using significant storage. "
            "Consider clearing old positions.",
        ),
        "sortPreferences": KeyThreshold(
            max_bytes=30_000,
            action="cleanup_sort_preferences",
            message="Sort preferences are using significant storage. "
            "Consider clearing old preferences.",
        ),
        "userTags": KeyThreshold(
            max_bytes=100_000,
            action="cleanup_user_tags",
            message="User tags are using significant storage. Consider removing unused tags.",
        ),
        "stats": KeyThreshold(
            max_bytes=50_000,
            action="cleanup_stats",
            message="Statistics are using significant storage. Consider clearing old stats.",
        ),
    }


class AreaConfigSchema(BaseModel):
    """Backend configuration for the storage areas.

    Attributes:
        type: Area backend (``"memory"`` or ``"sqlite"``).
        path: SQLite database file shared by both areas (for ``sqlite``).
    """

    type: Literal["memory", "sqlite"] = "memory"
    path: str = ""


class StoreConfig(BaseModel):
    """Tunable limits for quota monitoring and maintenance.

    Attributes:
        local_quota_bytes:          Modelled capacity of the local area.
        sync_quota_bytes:           Modelled capacity of the sync area.
        near_quota_percent:         Percentage at which an area is "near" its quota.
        critical_quota_percent:     Percentage at which health turns critical.
        collection_warning_ratio:   Fraction of a collection's cap that raises an issue.
        key_thresholds:             Per-key recommendation thresholds.
        compaction_min_bytes_freed: Cleanup must free more than this to trigger compaction.
        stats_trim_top:             Subreddit stats kept by maintenance.
        maintenance_interval_seconds: Period of the background maintenance loop.
        extension_version:          Stamped into export bundles.
        areas:                      Storage backend selection.
    """

    local_quota_bytes: int = LOCAL_QUOTA_BYTES
    sync_quota_bytes: int = SYNC_QUOTA_BYTES
    near_quota_percent: int = 80
    critical_quota_percent: int = 90
    collection_warning_ratio: float = 0.8
    key_thresholds: dict[str, KeyThreshold] = Field(default_factory=_default_key_thresholds)
    compaction_min_bytes_freed: int = 1000
    stats_trim_top: int = 25
    maintenance_interval_seconds: float = 3600.0
    extension_version: str = "0.0.0"
    areas: AreaConfigSchema = Field(default_factory=AreaConfigSchema)
