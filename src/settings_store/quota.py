"""QuotaMonitor — size estimation, near-quota detection and health scoring.

Sizes are estimates: each value is encoded as compact JSON and measured
in UTF-8 bytes, whatever string representation the host uses natively.
That tracks the host's accounting closely enough for early warnings but
is not the exact wire size.
"""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import Clock, SystemClock
from settings_store.bounded import BOUNDED_COLLECTIONS, READING_HISTORY_KEY
from settings_store.config import StoreConfig
from settings_store.reports import (
    AreaQuotaStatus,
    AreaUsage,
    HealthReport,
    HealthStatus,
    QuotaCheck,
    Recommendation,
    UsageReport,
)
from settings_store.schema import MAX_READING_HISTORY

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor

logger = logging.getLogger(__name__)


def encoded_size(value: Any) -> int:
    """UTF-8 byte length of *value* as compact JSON (0 if unserializable)."""
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        logger.debug("Cannot size unserializable value: %s", exc)
        return 0
    return len(text.encode("utf-8"))


def estimate_size(key: str, value: Any) -> int:
    """Estimated stored size of a single top-level key."""
    return encoded_size({key: value})


def percent(used: int, quota: int) -> int:
    """Whole percentage, rounded half up."""
    if quota <= 0:
        return 0
    return math.floor(used * 100 / quota + 0.5)


def _mapping_len(section: Any, field: str) -> int:
    value = section.get(field) if isinstance(section, dict) else None
    return len(value) if isinstance(value, dict | list) else 0


class QuotaMonitor:
    """Estimates usage per area and turns it into actionable health data.

    Quota pressure is reported, never enforced: writes are accepted even
    over quota, and callers warn proactively from :meth:`health_report`.

    Parameters:
        accessor: Core accessor over both areas.
        config:   Quotas and thresholds.
        clock:    Injectable clock for ``last_checked``.
    """

    def __init__(
        self,
        accessor: CoreAccessor,
        config: StoreConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._accessor = accessor
        self._config = config or StoreConfig()
        self._clock = clock or SystemClock()

    async def usage(self) -> UsageReport:
        local_data, sync_data = await self._accessor.snapshot()
        local_bytes = encoded_size(local_data)
        sync_bytes = encoded_size(sync_data)

        sizes = {key: estimate_size(key, value) for key, value in {**local_data, **sync_data}.items()}
        breakdown = dict(sorted(sizes.items(), key=lambda item: item[1], reverse=True))

        cfg = self._config
        return UsageReport(
            local=AreaUsage(
                used=local_bytes,
                quota=cfg.local_quota_bytes,
                percentage=percent(local_bytes, cfg.local_quota_bytes),
            ),
            sync=AreaUsage(
                used=sync_bytes,
                quota=cfg.sync_quota_bytes,
                percentage=percent(sync_bytes, cfg.sync_quota_bytes),
            ),
            total=local_bytes + sync_bytes,
            breakdown=breakdown,
        )

    async def is_near_quota(self, threshold: int | None = None) -> QuotaCheck:
        return self._quota_check(await self.usage(), threshold)

    def _quota_check(self, usage: UsageReport, threshold: int | None) -> QuotaCheck:
        if threshold is None:
            threshold = self._config.near_quota_percent
        local_near = usage.local.percentage >= threshold
        sync_near = usage.sync.percentage >= threshold

        recommendations: list[Recommendation] = []
        if local_near or sync_near:
            for key, rule in self._config.key_thresholds.items():
                size = usage.breakdown.get(key, 0)
                if size > rule.max_bytes:
                    recommendations.append(
                        Recommendation(action=rule.action, message=rule.message, savings=size)
                    )

        return QuotaCheck(
            is_near_limit=local_near or sync_near,
            local=AreaQuotaStatus(is_near_limit=local_near, percentage=usage.local.percentage),
            sync=AreaQuotaStatus(is_near_limit=sync_near, percentage=usage.sync.percentage),
            recommendations=recommendations,
        )

    async def health_report(self) -> HealthReport:
        usage = await self.usage()
        quota = self._quota_check(usage, None)
        stored = await self._accessor.get_all()
        cfg = self._config

        status: HealthStatus = "healthy"
        issues: list[str] = []
        critical = cfg.critical_quota_percent
        if quota.local.percentage >= critical or quota.sync.percentage >= critical:
            status = "critical"
            issues.append(f"Storage is critically full (>{critical}%)")
        elif quota.is_near_limit:
            status = "warning"
            issues.append(f"Storage is approaching quota limit (>{cfg.near_quota_percent}%)")

        counts: dict[str, int] = {}
        for spec in BOUNDED_COLLECTIONS:
            section = stored.get(spec.config_key)
            count = _mapping_len(section, spec.items_field)
            counts[spec.config_key] = count
            cap = spec.cap(section if isinstance(section, dict) else {})
            if count > cap * cfg.collection_warning_ratio:
                issues.append(f"{spec.label} near limit ({count}/{cap})")

        history = stored.get(READING_HISTORY_KEY)
        history_count = _mapping_len(history, "entries")
        counts[READING_HISTORY_KEY] = history_count
        history_cap = MAX_READING_HISTORY
        if isinstance(history, dict) and isinstance(history.get("maxEntries"), int):
            history_cap = history["maxEntries"]
        if history_count > history_cap * cfg.collection_warning_ratio:
            issues.append(f"Reading history near limit ({history_count}/{history_cap})")

        counts["subredditLayouts"] = _mapping_len(stored.get("layoutPresets"), "subredditLayouts")
        counts["mutedSubreddits"] = _mapping_len(stored.get("subredditOverrides"), "mutedSubreddits")
        filtering = stored.get("contentFiltering")
        counts["mutedKeywords"] = _mapping_len(filtering, "mutedKeywords")
        counts["mutedDomains"] = _mapping_len(filtering, "mutedDomains")
        counts["mutedFlairs"] = _mapping_len(filtering, "mutedFlairs")

        return HealthReport(
            status=status,
            issues=issues,
            usage=usage,
            counts=counts,
            recommendations=quota.recommendations,
            last_checked=self._clock.now().isoformat(),
        )
