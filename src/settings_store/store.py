"""SettingsStore — the public facade wiring every component together."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from settings_store._internal.clock import Clock, LogicalClock, SystemClock
from settings_store.accessor import MISSING, CoreAccessor
from settings_store.areas.base import LOCAL, SYNC
from settings_store.areas.memory import InMemoryArea
from settings_store.areas.sqlite import SQLiteArea
from settings_store.bounded import (
    LAYOUT_PRESETS,
    MUTED_USERS,
    READING_HISTORY_KEY,
    SCROLL_POSITIONS,
    SORT_PREFERENCES,
    SUBREDDIT_LAYOUTS_FIELD,
    USER_TAGS,
    BoundedCollections,
)
from settings_store.config import StoreConfig
from settings_store.exceptions import InvalidValueError
from settings_store.import_export import ImportExportGate, validate_import
from settings_store.lists import ListSubscriptions, normalize_domain, normalize_subreddit
from settings_store.maintenance import MaintenanceScheduler
from settings_store.migration import MigrationGate
from settings_store.quota import QuotaMonitor
from settings_store.reports import dump
from settings_store.router import SYNC_CONFIG_KEY
from settings_store.schema import (
    ENUM_FIELDS,
    MAX_MUTE_REASON_LENGTH,
    MAX_NSFW_ALLOWED_SUBREDDITS,
    MAX_PRESET_NAME_LENGTH,
    MAX_TAG_TEXT_LENGTH,
    default_for,
)
from settings_store.shortcuts import detect_conflicts, validate_key_string
from settings_store.stats import StatsTracker

if TYPE_CHECKING:
    from collections.abc import Callable

    from settings_store.areas.base import StorageArea
    from settings_store.migration import LegacyStateProbe
    from settings_store.reports import (
        CleanupResult,
        CompactResult,
        HealthReport,
        ImportValidation,
        MaintenanceResult,
        QuotaCheck,
        ShortcutConflict,
        UsageReport,
    )

logger = logging.getLogger(__name__)

SHORTCUTS_KEY = "keyboardShortcuts"


def check_enum_fields(key: str, patch: Any) -> None:
    """Raise ``InvalidValueError`` when *patch* sets an enum field outside its domain."""
    if not isinstance(patch, dict):
        return
    for field, value in patch.items():
        allowed = ENUM_FIELDS.get((key, field))
        if allowed is not None and value not in allowed:
            raise InvalidValueError(f"Invalid {key}.{field}: {value!r}")


def check_shortcut_keys(key: str, patch: Any) -> None:
    """Raise ``InvalidValueError`` when *patch* binds a shortcut to unusable keys."""
    if key != SHORTCUTS_KEY or not isinstance(patch, dict):
        return
    shortcuts = patch.get("shortcuts")
    if not isinstance(shortcuts, dict):
        return
    for shortcut_id, entry in shortcuts.items():
        if not isinstance(entry, dict) or "keys" not in entry:
            continue
        error = validate_key_string(entry["keys"])
        if error:
            raise InvalidValueError(f"{shortcut_id}: {error}")


def _valid_preset_name(name: Any) -> bool:
    return isinstance(name, str) and 0 < len(name) <= MAX_PRESET_NAME_LENGTH


class SettingsStore:
    """Typed settings and state for the extension, over two storage areas.

    Usage::

        store = SettingsStore()
        await store.open()
        await store.migrate()
        await store.set_user_tag("spez", "admin", color="#f00")
        report = await store.health_report()
        await store.close()

    Parameters:
        local:  Large device-only area.  Defaults to :class:`InMemoryArea`.
        sync:   Small replicated area.  Defaults to :class:`InMemoryArea`.
        config: Quotas, thresholds and backend selection.
        clock:  Injectable clock shared by every component.
    """

    def __init__(
        self,
        local: StorageArea | None = None,
        sync: StorageArea | None = None,
        *,
        config: StoreConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or StoreConfig()
        self._clock = clock or SystemClock()
        self._owned: list[StorageArea] = []
        if local is None:
            local = InMemoryArea(LOCAL)
            self._owned.append(local)
        if sync is None:
            sync = InMemoryArea(SYNC)
            self._owned.append(sync)

        self.accessor = CoreAccessor(local, sync, clock=self._clock)
        self.collections = BoundedCollections(self.accessor, LogicalClock(self._clock))
        self.stats = StatsTracker(self.accessor, self._clock)
        self.monitor = QuotaMonitor(self.accessor, self._config, self._clock)
        self.maintenance = MaintenanceScheduler(
            self.accessor,
            self.collections,
            self.stats,
            self.monitor,
            config=self._config,
            clock=self._clock,
        )
        self.migrations = MigrationGate(self.accessor)
        self.transfer = ImportExportGate(
            self.accessor, self.collections, config=self._config, clock=self._clock
        )
        self.lists = ListSubscriptions(self.accessor, clock=self._clock)
        self._unsubscribe: Callable[[], None] | None = None

    @classmethod
    def from_config(cls, config: StoreConfig, *, clock: Clock | None = None) -> SettingsStore:
        """Build a store whose areas come from ``config.areas``; it owns them."""
        if config.areas.type == "sqlite":
            path = config.areas.path or "settings_store.db"
            local: StorageArea = SQLiteArea(path, LOCAL)
            sync: StorageArea = SQLiteArea(path, SYNC)
        else:
            local, sync = InMemoryArea(LOCAL), InMemoryArea(SYNC)
        store = cls(local, sync, config=config, clock=clock)
        store._owned = [local, sync]
        return store

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def local(self) -> StorageArea:
        return self.accessor.local

    @property
    def sync(self) -> StorageArea:
        return self.accessor.sync

    # ── lifecycle ────────────────────────────────────────────

    async def open(self) -> None:
        """Load the sync flag and follow changes made by other contexts."""
        await self.accessor.router.load(self.local)
        if self._unsubscribe is None:
            self._unsubscribe = self.local.add_listener(self.accessor.router.on_local_change)

    async def close(self) -> None:
        await self.maintenance.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for area in self._owned:
            await area.close()

    async def __aenter__(self) -> SettingsStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── generic access ───────────────────────────────────────

    async def get(self, key: str, default: Any = MISSING) -> Any:
        return await self.accessor.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        check_enum_fields(key, value)
        check_shortcut_keys(key, value)
        await self.accessor.set(key, value)

    async def update(self, key: str, patch: Any) -> Any:
        check_enum_fields(key, patch)
        check_shortcut_keys(key, patch)
        return await self.accessor.update(key, patch)

    async def get_all(self) -> dict[str, Any]:
        return await self.accessor.get_all()

    async def clear(self) -> None:
        await self.accessor.clear()

    async def initialize(self) -> list[str]:
        return await self.accessor.initialize()

    async def _section(self, key: str) -> dict[str, Any]:
        """Stored section over its defaults, so fields added later are present."""
        stored = await self.accessor.get(key)
        defaults = self.accessor.default(key)
        return {**defaults, **stored} if isinstance(stored, dict) else defaults

    # ── simple flags & sections ──────────────────────────────

    async def get_enabled(self) -> bool:
        return await self.accessor.get("enabled") is not False

    async def set_enabled(self, enabled: bool) -> None:
        await self.accessor.set("enabled", bool(enabled))

    async def get_temporary_disable(self) -> dict[str, Any]:
        return await self._section("temporaryDisable")

    async def set_temporary_disable(self, config: dict[str, Any]) -> Any:
        return await self.update("temporaryDisable", config)

    async def get_frontend(self) -> dict[str, Any]:
        return await self._section("frontend")

    async def set_frontend(self, config: dict[str, Any]) -> Any:
        return await self.update("frontend", config)

    async def get_ui_preferences(self) -> dict[str, Any]:
        return await self._section("ui")

    async def set_ui_preferences(self, prefs: dict[str, Any]) -> Any:
        return await self.update("ui", prefs)

    async def get_dark_mode(self) -> dict[str, Any]:
        return await self._section("darkMode")

    async def set_dark_mode(self, prefs: dict[str, Any]) -> Any:
        return await self.update("darkMode", prefs)

    async def get_accessibility(self) -> dict[str, Any]:
        return await self._section("accessibility")

    async def set_accessibility(self, prefs: dict[str, Any]) -> Any:
        return await self.update("accessibility", prefs)

    async def get_nag_blocking(self) -> dict[str, Any]:
        return await self._section("nagBlocking")

    async def set_nag_blocking(self, prefs: dict[str, Any]) -> Any:
        return await self.update("nagBlocking", prefs)

    async def get_comment_enhancements(self) -> dict[str, Any]:
        return await self._section("commentEnhancements")

    async def set_comment_enhancements(self, prefs: dict[str, Any]) -> Any:
        return await self.update("commentEnhancements", prefs)

    async def get_feed_enhancements(self) -> dict[str, Any]:
        return await self._section("feedEnhancements")

    async def set_feed_enhancements(self, prefs: dict[str, Any]) -> Any:
        return await self.update("feedEnhancements", prefs)

    async def get_privacy(self) -> dict[str, Any]:
        return await self._section("privacy")

    async def set_privacy(self, prefs: dict[str, Any]) -> Any:
        return await self.update("privacy", prefs)

    async def get_comment_minimap(self) -> dict[str, Any]:
        return await self._section("commentMinimap")

    async def set_comment_minimap(self, prefs: dict[str, Any]) -> Any:
        return await self.update("commentMinimap", prefs)

    async def get_minimap_position(self) -> str:
        return (await self.get_comment_minimap()).get("position") or "right"

    async def set_minimap_position(self, position: str) -> None:
        if position not in ENUM_FIELDS[("commentMinimap", "position")]:
            raise InvalidValueError(f"Invalid minimap position: {position}")
        await self.accessor.update("commentMinimap", {"position": position})

    # ── mute lists ───────────────────────────────────────────

    async def _add_to_list(self, key: str, field: str, item: str) -> bool:
        def mutate(section: Any) -> bool:
            items = section.get(field) or []
            if not item or item in items:
                return False
            section[field] = sorted([*items, item])
            return True

        return await self.accessor.modify(key, mutate)

    async def _remove_from_list(self, key: str, field: str, item: str) -> bool:
        def mutate(section: Any) -> bool:
            items = section.get(field) or []
            section[field] = [i for i in items if i != item]
            return len(section[field]) != len(items)

        return await self.accessor.modify(key, mutate)

    async def get_subreddit_overrides(self) -> dict[str, Any]:
        return await self._section("subredditOverrides")

    async def set_subreddit_overrides(self, overrides: dict[str, Any]) -> Any:
        return await self.update("subredditOverrides", overrides)

    async def add_muted_subreddit(self, subreddit: str) -> bool:
        return await self._add_to_list(
            "subredditOverrides", "mutedSubreddits", normalize_subreddit(subreddit)
        )

    async def remove_muted_subreddit(self, subreddit: str) -> bool:
        return await self._remove_from_list(
            "subredditOverrides", "mutedSubreddits", normalize_subreddit(subreddit)
        )

    async def get_content_filtering(self) -> dict[str, Any]:
        return await self._section("contentFiltering")

    async def set_content_filtering(self, filtering: dict[str, Any]) -> Any:
        return await self.update("contentFiltering", filtering)

    async def add_muted_keyword(self, keyword: str) -> bool:
        return await self._add_to_list("contentFiltering", "mutedKeywords", keyword.strip())

    async def remove_muted_keyword(self, keyword: str) -> bool:
        return await self._remove_from_list("contentFiltering", "mutedKeywords", keyword)

    async def add_muted_domain(self, domain: str) -> bool:
        return await self._add_to_list("contentFiltering", "mutedDomains", normalize_domain(domain))

    async def remove_muted_domain(self, domain: str) -> bool:
        return await self._remove_from_list("contentFiltering", "mutedDomains", domain)

    # ── NSFW controls ────────────────────────────────────────

    async def get_nsfw_controls(self) -> dict[str, Any]:
        return await self._section("nsfwControls")

    async def set_nsfw_controls(self, config: dict[str, Any]) -> Any:
        return await self.update("nsfwControls", config)

    async def get_nsfw_visibility(self) -> str:
        return (await self.get_nsfw_controls()).get("visibility") or "show"

    async def set_nsfw_visibility(self, mode: str) -> None:
        if mode not in ENUM_FIELDS[("nsfwControls", "visibility")]:
            raise InvalidValueError(f"Invalid NSFW visibility mode: {mode}")
        await self.accessor.update("nsfwControls", {"visibility": mode})

    async def get_nsfw_allowed_subreddits(self) -> list[str]:
        return list((await self.get_nsfw_controls()).get("allowedSubreddits") or [])

    async def is_nsfw_allowed_subreddit(self, subreddit: str) -> bool:
        return normalize_subreddit(subreddit) in await self.get_nsfw_allowed_subreddits()

    async def add_nsfw_allowed_subreddit(self, subreddit: str) -> bool:
        """Allow-list *subreddit*.  The list is kept sorted and capped at 100."""
        name = normalize_subreddit(subreddit)

        def mutate(section: Any) -> bool:
            allowed = section.get("allowedSubreddits") or []
            if name in allowed:
                return False
            section["allowedSubreddits"] = sorted([*allowed, name])[:MAX_NSFW_ALLOWED_SUBREDDITS]
            return name in section["allowedSubreddits"]

        return await self.accessor.modify("nsfwControls", mutate)

    async def remove_nsfw_allowed_subreddit(self, subreddit: str) -> bool:
        return await self._remove_from_list(
            "nsfwControls", "allowedSubreddits", normalize_subreddit(subreddit)
        )

    async def clear_nsfw_allowed_subreddits(self) -> None:
        await self.accessor.update("nsfwControls", {"allowedSubreddits": []})

    # ── user tags & muted users ──────────────────────────────

    async def get_user_tags(self) -> dict[str, Any]:
        return await self._section(USER_TAGS.config_key)

    async def get_user_tag(self, username: str) -> dict[str, Any] | None:
        return await self.collections.get(USER_TAGS, username)

    async def set_user_tag(
        self, username: str, text: str, *, color: str | None = None
    ) -> dict[str, Any]:
        return await self.collections.upsert(
            USER_TAGS,
            username,
            {"text": text[:MAX_TAG_TEXT_LENGTH], "color": color},
            replace=True,
        )

    async def delete_user_tag(self, username: str) -> bool:
        return await self.collections.delete(USER_TAGS, username)

    async def clear_user_tags(self) -> int:
        return await self.collections.clear(USER_TAGS)

    async def get_muted_users(self) -> dict[str, Any]:
        return await self._section(MUTED_USERS.config_key)

    async def get_muted_user(self, username: str) -> dict[str, Any] | None:
        return await self.collections.get(MUTED_USERS, username)

    async def set_muted_user(self, username: str, reason: str | None = None) -> dict[str, Any]:
        reason = (reason or "")[:MAX_MUTE_REASON_LENGTH] or "No reason"
        return await self.collections.upsert(
            MUTED_USERS, username, {"reason": reason}, replace=True
        )

    async def delete_muted_user(self, username: str) -> bool:
        return await self.collections.delete(MUTED_USERS, username)

    async def clear_muted_users(self) -> int:
        return await self.collections.clear(MUTED_USERS)

    # ── sort preferences & scroll positions ──────────────────

    async def get_sort_preference(self, subreddit: str) -> dict[str, Any] | None:
        return await self.collections.get(SORT_PREFERENCES, subreddit)

    async def set_sort_preference(self, subreddit: str, sort_data: dict[str, Any]) -> dict[str, Any]:
        return await self.collections.upsert(SORT_PREFERENCES, subreddit, sort_data, replace=True)

    async def delete_sort_preference(self, subreddit: str) -> bool:
        return await self.collections.delete(SORT_PREFERENCES, subreddit)

    async def clear_sort_preferences(self) -> int:
        return await self.collections.clear(SORT_PREFERENCES)

    async def get_scroll_position(self, url: str) -> dict[str, Any] | None:
        return await self.collections.get(SCROLL_POSITIONS, url)

    async def set_scroll_position(self, url: str, scroll_y: float) -> dict[str, Any]:
        return await self.collections.upsert(
            SCROLL_POSITIONS, url, {"scrollY": scroll_y}, replace=True
        )

    async def delete_scroll_position(self, url: str) -> bool:
        return await self.collections.delete(SCROLL_POSITIONS, url)

    async def clear_scroll_positions(self) -> int:
        return await self.collections.clear(SCROLL_POSITIONS)

    async def cleanup_scroll_positions(self) -> int:
        return await self.collections.expire(SCROLL_POSITIONS, self._clock.now())

    # ── layout presets ───────────────────────────────────────

    async def get_layout_presets(self) -> dict[str, Any]:
        return await self._section(LAYOUT_PRESETS.config_key)

    async def get_layout_preset(self, name: str) -> dict[str, Any] | None:
        return await self.collections.get(LAYOUT_PRESETS, name)

    async def get_layout_preset_names(self) -> list[str]:
        return list(await self.collections.items(LAYOUT_PRESETS))

    async def set_layout_preset(self, name: str, preset: dict[str, Any]) -> dict[str, Any]:
        if not _valid_preset_name(name):
            raise InvalidValueError("Invalid preset name")
        return await self.collections.upsert(LAYOUT_PRESETS, name, preset, replace=True)

    async def delete_layout_preset(self, name: str) -> bool:
        """Delete a preset along with its subreddit mappings and active selection."""

        def mutate(section: Any) -> bool:
            presets = section.get("presets") or {}
            existed = presets.pop(name, None) is not None
            section["presets"] = presets
            layouts = section.get(SUBREDDIT_LAYOUTS_FIELD) or {}
            section[SUBREDDIT_LAYOUTS_FIELD] = {s: p for s, p in layouts.items() if p != name}
            if section.get("activePreset") == name:
                section["activePreset"] = None
            return existed

        return await self.accessor.modify(LAYOUT_PRESETS.config_key, mutate)

    async def clear_layout_presets(self) -> None:
        await self.accessor.update(
            LAYOUT_PRESETS.config_key,
            {"presets": {}, SUBREDDIT_LAYOUTS_FIELD: {}, "activePreset": None},
        )

    async def get_subreddit_layout(self, subreddit: str) -> str | None:
        layouts = (await self.get_layout_presets()).get(SUBREDDIT_LAYOUTS_FIELD) or {}
        return layouts.get(subreddit.lower())

    async def set_subreddit_layout(self, subreddit: str, preset_name: str) -> None:
        if not await self.collections.set_subreddit_layout(subreddit, preset_name):
            raise InvalidValueError(f'Preset "{preset_name}" does not exist')

    async def delete_subreddit_layout(self, subreddit: str) -> bool:
        key = subreddit.lower()

        def mutate(section: Any) -> bool:
            layouts = section.get(SUBREDDIT_LAYOUTS_FIELD) or {}
            existed = layouts.pop(key, None) is not None
            section[SUBREDDIT_LAYOUTS_FIELD] = layouts
            return existed

        return await self.accessor.modify(LAYOUT_PRESETS.config_key, mutate)

    async def clear_subreddit_layouts(self) -> None:
        await self.accessor.update(LAYOUT_PRESETS.config_key, {SUBREDDIT_LAYOUTS_FIELD: {}})

    async def get_active_preset(self) -> str | None:
        return (await self.get_layout_presets()).get("activePreset")

    async def set_active_preset(self, name: str | None) -> None:
        def mutate(section: Any) -> None:
            if name is not None and name not in (section.get("presets") or {}):
                raise InvalidValueError(f'Preset "{name}" does not exist')
            section["activePreset"] = name

        await self.accessor.modify(LAYOUT_PRESETS.config_key, mutate)

    # ── reading history ──────────────────────────────────────

    async def get_reading_history(self) -> dict[str, Any]:
        return await self._section(READING_HISTORY_KEY)

    async def add_reading_history_entry(self, entry: dict[str, Any]) -> bool:
        if not entry.get("id"):
            raise InvalidValueError("Reading history entries need an id")
        return await self.collections.add_history_entry(entry)

    async def get_reading_history_entries(self, limit: int | None = None) -> list[dict[str, Any]]:
        return await self.collections.history_entries(self._clock.now(), limit)

    async def has_read_post(self, post_id: str) -> bool:
        entries = (await self.get_reading_history()).get("entries") or []
        return any(isinstance(e, dict) and e.get("id") == post_id for e in entries)

    async def remove_reading_history_entry(self, post_id: str) -> bool:
        return await self.collections.remove_history_entry(post_id)

    async def clear_reading_history(self) -> int:
        return await self.collections.clear_history()

    async def cleanup_reading_history(self) -> int:
        return await self.collections.expire_history(self._clock.now())

    async def export_reading_history(self) -> dict[str, Any]:
        return await self.transfer.export_reading_history()

    async def import_reading_history(self, data: Any, *, merge: bool = True) -> int:
        return await self.transfer.import_reading_history(data, merge=merge)

    # ── keyboard shortcuts ───────────────────────────────────

    async def get_keyboard_shortcuts(self) -> dict[str, Any]:
        return await self._section(SHORTCUTS_KEY)

    async def get_keyboard_shortcut(self, shortcut_id: str) -> dict[str, Any] | None:
        shortcuts = (await self.get_keyboard_shortcuts()).get("shortcuts") or {}
        return shortcuts.get(shortcut_id)

    async def set_keyboard_shortcut(
        self, shortcut_id: str, shortcut: dict[str, Any]
    ) -> dict[str, Any]:
        error = validate_key_string(shortcut.get("keys"))
        if error:
            raise InvalidValueError(error)
        entry = {
            **shortcut,
            "enabled": shortcut.get("enabled") is not False,
            "type": shortcut.get("type") or "content",
            "context": shortcut.get("context") or "any",
        }

        def mutate(config: Any) -> None:
            shortcuts = config.get("shortcuts")
            if not isinstance(shortcuts, dict):
                shortcuts = config["shortcuts"] = {}
            shortcuts[shortcut_id] = copy.deepcopy(entry)

        await self.accessor.modify(SHORTCUTS_KEY, mutate)
        return entry

    async def reset_keyboard_shortcut(self, shortcut_id: str) -> dict[str, Any]:
        defaults = default_for(SHORTCUTS_KEY)["shortcuts"]
        if shortcut_id not in defaults:
            raise InvalidValueError(f"Unknown shortcut ID: {shortcut_id}")
        return await self.set_keyboard_shortcut(shortcut_id, defaults[shortcut_id])

    async def reset_all_keyboard_shortcuts(self) -> None:
        defaults = default_for(SHORTCUTS_KEY)["shortcuts"]
        await self.accessor.update(SHORTCUTS_KEY, {"shortcuts": defaults, "conflicts": []})

    async def detect_shortcut_conflicts(self) -> list[ShortcutConflict]:
        """Detect conflicts and record them under ``keyboardShortcuts.conflicts``."""

        def mutate(config: Any) -> list[ShortcutConflict]:
            conflicts = detect_conflicts(config.get("shortcuts") or {})
            config["conflicts"] = [dump(c) for c in conflicts]
            return conflicts

        conflicts = await self.accessor.modify(SHORTCUTS_KEY, mutate)
        if conflicts:
            logger.info("Found %d keyboard shortcut conflicts", len(conflicts))
        return conflicts

    # ── sync ─────────────────────────────────────────────────

    async def get_sync_config(self) -> dict[str, Any]:
        return await self._section(SYNC_CONFIG_KEY)

    async def enable_sync(self) -> None:
        await self.accessor.enable_sync()

    async def disable_sync(self) -> None:
        await self.accessor.disable_sync()

    # ── stats ────────────────────────────────────────────────

    async def get_stats(self) -> dict[str, Any]:
        return await self.stats.get_stats()

    async def increment_redirect_count(self, subreddit: str | None = None) -> dict[str, Any]:
        return await self.stats.increment_redirect_count(subreddit)

    async def clear_stats(self) -> None:
        await self.stats.clear_stats()

    # ── quota, health & maintenance ──────────────────────────

    async def get_storage_usage(self) -> UsageReport:
        return await self.monitor.usage()

    async def is_near_quota(self, threshold: int | None = None) -> QuotaCheck:
        return await self.monitor.is_near_quota(threshold)

    async def health_report(self) -> HealthReport:
        return await self.monitor.health_report()

    async def cleanup_expired_data(self) -> CleanupResult:
        return await self.maintenance.cleanup_expired_data()

    async def compact_storage(self) -> CompactResult:
        return await self.maintenance.compact_storage()

    async def run_maintenance(self) -> MaintenanceResult:
        return await self.maintenance.run_maintenance()

    def start_maintenance(self, interval_seconds: float | None = None) -> None:
        self.maintenance.start(interval_seconds)

    async def stop_maintenance(self) -> None:
        await self.maintenance.stop()

    # ── migration & transfer ─────────────────────────────────

    async def migrate(self, probe: LegacyStateProbe | None = None) -> bool:
        return await self.migrations.migrate(probe)

    async def export_settings(self) -> dict[str, Any]:
        return await self.transfer.export_settings()

    def validate_import(self, bundle: Any) -> ImportValidation:
        return validate_import(bundle)

    async def import_settings(self, bundle: Any) -> list[str]:
        return await self.transfer.import_settings(bundle)
