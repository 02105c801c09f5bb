"""Bounded collections — capped mappings pruned by least-recently-written eviction."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import LogicalClock, epoch_millis
from settings_store.schema import (
    MAX_LAYOUT_PRESETS,
    MAX_MUTED_USERS,
    MAX_READING_HISTORY,
    MAX_SCROLL_POSITIONS,
    MAX_SORT_PREFERENCES,
    MAX_SUBREDDIT_MAPPINGS,
    MAX_USER_TAGS,
    READING_HISTORY_RETENTION_DAYS,
    SCROLL_RETENTION_HOURS,
    SORT_RETENTION_DAYS,
)

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionSpec:
    """Declares where a bounded collection lives inside its config section.

    Attributes:
        label:           Human-readable name used in health issues.
        config_key:      Storage key of the owning section.
        items_field:     Field of the section holding the ``{id: record}`` map.
        cap_field:       Field of the section holding the entry cap.
        default_cap:     Cap used when the section does not declare one.
        retention:       Fixed retention window, if any.
        retention_hours_field: Section field overriding ``retention`` in hours.
        lowercase_ids:   Whether record ids are case-insensitive.
    """

    label: str
    config_key: str
    items_field: str
    cap_field: str
    default_cap: int
    retention: timedelta | None = None
    retention_hours_field: str | None = None
    lowercase_ids: bool = False

    def normalize_id(self, record_id: str) -> str:
        return record_id.lower() if self.lowercase_ids else record_id

    def cap(self, section: dict[str, Any]) -> int:
        return _positive_int(section.get(self.cap_field), self.default_cap)

    def retention_for(self, section: dict[str, Any]) -> timedelta | None:
        if self.retention_hours_field:
            hours = section.get(self.retention_hours_field)
            if isinstance(hours, int | float) and not isinstance(hours, bool) and hours > 0:
                return timedelta(hours=hours)
        return self.retention


USER_TAGS = CollectionSpec(
    "User tags", "userTags", "tags", "maxTags", MAX_USER_TAGS, lowercase_ids=True
)
MUTED_USERS = CollectionSpec(
    "Muted users", "mutedUsers", "users", "maxUsers", MAX_MUTED_USERS, lowercase_ids=True
)
SORT_PREFERENCES = CollectionSpec(
    "Sort preferences",
    "sortPreferences",
    "preferences",
    "maxEntries",
    MAX_SORT_PREFERENCES,
    retention=timedelta(days=SORT_RETENTION_DAYS),
    lowercase_ids=True,
)
SCROLL_POSITIONS = CollectionSpec(
    "Scroll positions",
    "scrollPositions",
    "positions",
    "maxEntries",
    MAX_SCROLL_POSITIONS,
    retention=timedelta(hours=SCROLL_RETENTION_HOURS),
    retention_hours_field="retentionHours",
)
LAYOUT_PRESETS = CollectionSpec(
    "Layout presets", "layoutPresets", "presets", "maxPresets", MAX_LAYOUT_PRESETS
)

BOUNDED_COLLECTIONS: tuple[CollectionSpec, ...] = (
    USER_TAGS,
    MUTED_USERS,
    SORT_PREFERENCES,
    SCROLL_POSITIONS,
    LAYOUT_PRESETS,
)

READING_HISTORY_KEY = "readingHistory"
SUBREDDIT_LAYOUTS_FIELD = "subredditLayouts"


def _positive_int(value: Any, fallback: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return fallback


def _stamp(record: Any) -> float | None:
    if isinstance(record, dict):
        ts = record.get("timestamp")
        if isinstance(ts, int | float) and not isinstance(ts, bool) and not math.isnan(ts):
            return ts
    return None


def _timestamp(record: Any) -> float:
    ts = _stamp(record)
    return -math.inf if ts is None else ts


def _expired(record: Any, cutoff: int) -> bool:
    """Older than *cutoff*.  Records without a usable timestamp never expire."""
    ts = _stamp(record)
    return ts is not None and ts < cutoff


def _history_config(value: Any) -> dict[str, Any]:
    """Coerce a stored reading-history section to a mapping of entry records."""
    config = value if isinstance(value, dict) else {}
    entries = config.get("entries")
    config["entries"] = (
        [e for e in entries if isinstance(e, dict)] if isinstance(entries, list) else []
    )
    return config


def evict_oldest(items: dict[str, Any], cap: int, *, keep: str | None = None) -> list[str]:
    """Drop minimum-timestamp entries until ``len(items) <= cap``.

    *keep* is never evicted.  Records without a timestamp count as oldest.
    Ties go to whichever entry iteration reaches first.
    """
    evicted: list[str] = []
    while len(items) > cap:
        victim: str | None = None
        oldest = math.inf
        for record_id, record in items.items():
            if record_id == keep:
                continue
            ts = _timestamp(record)
            if ts < oldest:
                victim, oldest = record_id, ts
        if victim is None:
            break
        del items[victim]
        evicted.append(victim)
    return evicted


def _section(spec: CollectionSpec, value: Any) -> dict[str, Any]:
    """Coerce a stored section so its items field is a mapping."""
    section = value if isinstance(value, dict) else {}
    if not isinstance(section.get(spec.items_field), dict):
        section[spec.items_field] = {}
    return section


class BoundedCollections:
    """LRU-capped record maps stored inside config sections.

    Every mutation runs under the store's update serializer via
    :meth:`CoreAccessor.modify`.  Upserts stamp ``timestamp`` from a
    logical clock and evict the least-recently-written record other than
    the one just written whenever the cap is exceeded.  Deletes and clears
    skip eviction entirely.
    """

    def __init__(self, accessor: CoreAccessor, stamps: LogicalClock) -> None:
        self._accessor = accessor
        self._stamps = stamps

    # ── keyed collections ────────────────────────────────────

    async def upsert(
        self,
        spec: CollectionSpec,
        record_id: str,
        patch: dict[str, Any],
        *,
        replace: bool = False,
    ) -> dict[str, Any]:
        """Insert or update *record_id* and return the stored record.

        With ``replace=True`` an existing record is overwritten instead of
        merged with *patch*.
        """
        rid = spec.normalize_id(record_id)

        def mutate(value: Any) -> dict[str, Any]:
            section = _section(spec, value)
            items = section[spec.items_field]
            existing = items.get(rid)
            record = {} if replace or not isinstance(existing, dict) else dict(existing)
            record.update(patch)
            record["timestamp"] = self._stamps.stamp()
            items[rid] = record
            evicted = evict_oldest(items, spec.cap(section), keep=rid)
            if evicted:
                logger.debug("%s: evicted %s", spec.label, ", ".join(evicted))
            return copy.deepcopy(record)

        return await self._accessor.modify(spec.config_key, mutate)

    async def get(self, spec: CollectionSpec, record_id: str) -> dict[str, Any] | None:
        items = await self.items(spec)
        return items.get(spec.normalize_id(record_id))

    async def items(self, spec: CollectionSpec) -> dict[str, Any]:
        section = _section(spec, await self._accessor.get(spec.config_key))
        return section[spec.items_field]

    async def count(self, spec: CollectionSpec) -> int:
        return len(await self.items(spec))

    async def delete(self, spec: CollectionSpec, record_id: str) -> bool:
        rid = spec.normalize_id(record_id)

        def mutate(value: Any) -> bool:
            section = _section(spec, value)
            return section[spec.items_field].pop(rid, None) is not None

        return await self._accessor.modify(spec.config_key, mutate)

    async def clear(self, spec: CollectionSpec) -> int:
        def mutate(value: Any) -> int:
            section = _section(spec, value)
            removed = len(section[spec.items_field])
            section[spec.items_field] = {}
            return removed

        return await self._accessor.modify(spec.config_key, mutate)

    async def expire(self, spec: CollectionSpec, now: datetime) -> int:
        """Remove records older than the collection's retention window."""
        if spec.retention is None and spec.retention_hours_field is None:
            return 0

        def mutate(value: Any) -> int:
            section = _section(spec, value)
            window = spec.retention_for(section)
            if window is None:
                return 0
            cutoff = epoch_millis(now - window)
            items = section[spec.items_field]
            stale = [rid for rid, rec in items.items() if _expired(rec, cutoff)]
            for rid in stale:
                del items[rid]
            return len(stale)

        removed = await self._accessor.modify(spec.config_key, mutate)
        if removed:
            logger.debug("%s: expired %d entries", spec.label, removed)
        return removed

    # ── subreddit → preset mappings ──────────────────────────

    async def set_subreddit_layout(self, subreddit: str, preset_name: str) -> bool:
        """Map *subreddit* to *preset_name*; ``False`` if the preset is unknown.

        Mappings carry no timestamps: when over the cap, the earliest
        inserted mapping other than this one is dropped.
        """
        key = subreddit.lower()

        def mutate(value: Any) -> bool:
            section = _section(LAYOUT_PRESETS, value)
            if preset_name not in section[LAYOUT_PRESETS.items_field]:
                return False
            layouts = section.get(SUBREDDIT_LAYOUTS_FIELD)
            if not isinstance(layouts, dict):
                layouts = section[SUBREDDIT_LAYOUTS_FIELD] = {}
            layouts.pop(key, None)
            layouts[key] = preset_name
            cap = _positive_int(section.get("maxSubredditMappings"), MAX_SUBREDDIT_MAPPINGS)
            while len(layouts) > cap:
                oldest = next(k for k in layouts if k != key)
                del layouts[oldest]
            return True

        return await self._accessor.modify(LAYOUT_PRESETS.config_key, mutate)

    # ── reading history (ordered, newest first) ──────────────

    async def add_history_entry(self, entry: dict[str, Any]) -> bool:
        """Record a visit; re-visits move the entry to the front.

        Returns ``False`` when reading history is disabled.
        """
        post_id = entry["id"]

        def mutate(config: dict[str, Any]) -> bool:
            if config.get("enabled") is False:
                return False
            entries = config["entries"]
            stamp = self._stamps.stamp()
            existing = next((e for e in entries if e.get("id") == post_id), None)
            if existing is not None:
                entries.remove(existing)
                existing["timestamp"] = stamp
                existing["title"] = entry.get("title") or existing.get("title")
                entries.insert(0, existing)
            else:
                entries.insert(
                    0,
                    {
                        "id": post_id,
                        "title": entry.get("title") or "Untitled",
                        "subreddit": entry.get("subreddit") or "",
                        "url": entry.get("url") or "",
                        "commentCount": entry.get("commentCount") or 0,
                        "timestamp": stamp,
                    },
                )
                cap = _positive_int(config.get("maxEntries"), MAX_READING_HISTORY)
                del entries[cap:]
            return True

        return await self._accessor.modify(READING_HISTORY_KEY, mutate, coerce=_history_config)

    async def history_entries(self, now: datetime, limit: int | None = None) -> list[dict[str, Any]]:
        """Entries inside the retention window, newest first."""
        config = _history_config(await self._accessor.get(READING_HISTORY_KEY))
        cutoff = _history_cutoff(config, now)
        valid = [e for e in config["entries"] if not _expired(e, cutoff)]
        if limit and limit > 0:
            return valid[:limit]
        return valid

    async def remove_history_entry(self, post_id: str) -> bool:
        def mutate(config: dict[str, Any]) -> bool:
            entries = config["entries"]
            config["entries"] = [e for e in entries if e.get("id") != post_id]
            return len(config["entries"]) != len(entries)

        return await self._accessor.modify(READING_HISTORY_KEY, mutate, coerce=_history_config)

    async def clear_history(self) -> int:
        def mutate(config: dict[str, Any]) -> int:
            removed = len(config["entries"])
            config["entries"] = []
            return removed

        return await self._accessor.modify(READING_HISTORY_KEY, mutate, coerce=_history_config)

    async def expire_history(self, now: datetime) -> int:
        def mutate(config: dict[str, Any]) -> int:
            entries = config["entries"]
            cutoff = _history_cutoff(config, now)
            config["entries"] = [e for e in entries if not _expired(e, cutoff)]
            return len(entries) - len(config["entries"])

        removed = await self._accessor.modify(
            READING_HISTORY_KEY, mutate, coerce=_history_config
        )
        if removed:
            logger.debug("Reading history: expired %d entries", removed)
        return removed

    async def merge_history(self, entries: list[dict[str, Any]], *, merge: bool = True) -> int:
        """Add imported entries not already present; returns how many were added.

        The result is re-sorted newest first and capped.
        """

        def mutate(config: dict[str, Any]) -> int:
            current = list(config["entries"]) if merge else []
            known = {e.get("id") for e in current}
            added = 0
            for raw in entries:
                ts = _coerce_timestamp(raw.get("timestamp"))
                if not raw.get("id") or ts is None or raw["id"] in known:
                    continue
                current.append(
                    {
                        "id": raw["id"],
                        "title": raw.get("title") or "Untitled",
                        "subreddit": raw.get("subreddit") or "",
                        "url": raw.get("url") or "",
                        "commentCount": raw.get("commentCount") or 0,
                        "timestamp": ts,
                    }
                )
                known.add(raw["id"])
                added += 1
            current.sort(key=_timestamp, reverse=True)
            cap = _positive_int(config.get("maxEntries"), MAX_READING_HISTORY)
            config["entries"] = current[:cap]
            return added

        return await self._accessor.modify(READING_HISTORY_KEY, mutate, coerce=_history_config)


def _history_cutoff(config: dict[str, Any], now: datetime) -> int:
    days = _positive_int(config.get("retentionDays"), READING_HISTORY_RETENTION_DAYS)
    return epoch_millis(now - timedelta(days=days))


def _coerce_timestamp(value: Any) -> int | None:
    """Accept epoch milliseconds or an ISO-8601 string."""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        try:
            return epoch_millis(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None
