"""MaintenanceScheduler — retention sweeps, compaction and health regeneration."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import Clock, SystemClock
from settings_store.bounded import SCROLL_POSITIONS, SORT_PREFERENCES
from settings_store.config import StoreConfig
from settings_store.quota import estimate_size
from settings_store.reports import CleanupResult, CompactResult, MaintenanceResult

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor
    from settings_store.bounded import BoundedCollections
    from settings_store.quota import QuotaMonitor
    from settings_store.stats import StatsTracker

logger = logging.getLogger(__name__)


def compact_value(value: Any) -> Any:
    """Recursively drop ``None`` from arrays and ``None``-valued fields from mappings."""
    if isinstance(value, list):
        return [compact_value(v) for v in value if v is not None]
    if isinstance(value, dict):
        return {k: compact_value(v) for k, v in value.items() if v is not None}
    return value


class MaintenanceScheduler:
    """Keeps the store inside its quotas.

    One run:

    1. expires scroll positions, sort preferences and reading history past
       their retention windows;
    2. trims per-subreddit stats to the busiest ``stats_trim_top``;
    3. compacts storage when the cleanup freed more than
       ``compaction_min_bytes_freed`` bytes;
    4. regenerates the health report.

    A failing step is logged and recorded in ``error``; results of steps
    that completed are kept and the health report is still attempted.

    Parameters:
        accessor:    Core accessor over both areas.
        collections: Bounded collection manager.
        stats:       Stats tracker.
        monitor:     Quota & health monitor.
        config:      Thresholds and the loop interval.
        clock:       Injectable clock.
    """

    def __init__(
        self,
        accessor: CoreAccessor,
        collections: BoundedCollections,
        stats: StatsTracker,
        monitor: QuotaMonitor,
        *,
        config: StoreConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._accessor = accessor
        self._collections = collections
        self._stats = stats
        self._monitor = monitor
        self._config = config or StoreConfig()
        self._clock = clock or SystemClock()
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    # ── single run ───────────────────────────────────────────

    async def cleanup_expired_data(self) -> CleanupResult:
        result = CleanupResult()
        result.start_usage = (await self._monitor.usage()).total

        now = self._clock.now()
        result.scroll_positions = await self._collections.expire(SCROLL_POSITIONS, now)
        result.sort_preferences = await self._collections.expire(SORT_PREFERENCES, now)
        result.reading_history = await self._collections.expire_history(now)
        result.subreddit_stats_trimmed = await self._stats.trim_subreddits(
            self._config.stats_trim_top
        )

        result.end_usage = (await self._monitor.usage()).total
        result.total_bytes_freed = result.start_usage - result.end_usage
        return result

    async def compact_storage(self) -> CompactResult:
        """Rewrite keys whose ``None``-stripped form is strictly smaller.

        Internal keys (leading underscore) are left alone.
        """
        result = CompactResult()
        start = (await self._monitor.usage()).total
        stored = await self._accessor.get_all()

        for key, value in stored.items():
            if key.startswith("_"):
                continue
            compacted = compact_value(value)
            if estimate_size(key, compacted) < estimate_size(key, value):
                await self._accessor.set(key, compacted)
                result.keys_compacted += 1

        result.bytes_freed = start - (await self._monitor.usage()).total
        if result.keys_compacted:
            logger.info(
                "Compacted %d keys, freed %d bytes", result.keys_compacted, result.bytes_freed
            )
        return result

    async def run_maintenance(self) -> MaintenanceResult:
        result = MaintenanceResult(timestamp=self._clock.now().isoformat())
        errors: list[str] = []

        try:
            result.cleanup = await self.cleanup_expired_data()
        except Exception as exc:
            logger.exception("Maintenance cleanup failed")
            errors.append(f"cleanup: {exc}")

        if (
            result.cleanup is not None
            and result.cleanup.total_bytes_freed > self._config.compaction_min_bytes_freed
        ):
            try:
                result.compact = await self.compact_storage()
            except Exception as exc:
                logger.exception("Maintenance compaction failed")
                errors.append(f"compact: {exc}")

        try:
            result.health_report = await self._monitor.health_report()
        except Exception as exc:
            logger.exception("Maintenance health report failed")
            errors.append(f"health_report: {exc}")

        if errors:
            result.error = "; ".join(errors)
        return result

    # ── periodic loop ────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval_seconds: float | None = None) -> None:
        """Run maintenance now and then every *interval_seconds* on the current loop."""
        if self.running:
            return
        interval = interval_seconds or self._config.maintenance_interval_seconds
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(interval, self._stop_event))

    async def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self._stop_event = None

    async def _run_loop(self, interval: float, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                outcome = await self.run_maintenance()
                if outcome.error:
                    logger.warning("Maintenance finished with errors: %s", outcome.error)
            except Exception:
                logger.exception("Maintenance run crashed")
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
