"""CoreAccessor — generic get/set over the two storage areas, with defaulting."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from settings_store._internal.clock import Clock, SystemClock, today_iso
from settings_store.areas.base import LOCAL, SYNC
from settings_store.exceptions import StoreError
from settings_store.merge import merge_section
from settings_store.router import SYNC_CONFIG_KEY, AreaRouter
from settings_store.schema import REGISTRY, SYNC_KEYS, default_for
from settings_store.serializer import UpdateSerializer

if TYPE_CHECKING:
    from settings_store.areas.base import AreaName, StorageArea

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class CoreAccessor:
    """Reads and writes single keys in whichever area the router selects.

    * ``get`` never raises on area failure: it logs and returns the
      default (the schema default when the caller supplies none).
    * ``set`` raises :class:`StoreError` on area failure, because intended
      and actual state may now differ and the caller must decide what to do.

    Parameters:
        local:      The large, device-only area.
        sync:       The small, replicated area.
        router:     Area router holding the sync flag.
        serializer: Global update lock, used by the sync toggle.
        clock:      Injectable clock.
    """

    def __init__(
        self,
        local: StorageArea,
        sync: StorageArea,
        *,
        router: AreaRouter | None = None,
        serializer: UpdateSerializer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.local = local
        self.sync = sync
        self.router = router or AreaRouter()
        self.serializer = serializer or UpdateSerializer()
        self._clock = clock or SystemClock()

    def area(self, name: AreaName) -> StorageArea:
        return self.sync if name == SYNC else self.local

    def area_for(self, key: str) -> StorageArea:
        return self.area(self.router.route(key))

    def default(self, key: str) -> Any:
        return default_for(key, today=today_iso(self._clock))

    # ── single keys ──────────────────────────────────────────

    async def get(self, key: str, default: Any = MISSING) -> Any:
        if default is MISSING:
            default = self.default(key)
        area = self.area_for(key)
        try:
            data = await area.get([key])
        except Exception as exc:
            logger.warning("Read of '%s' from %s area failed: %s", key, area.name, exc)
            return default
        return data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        area = self.area_for(key)
        try:
            await area.set({key: value})
        except Exception as exc:
            logger.error("Write of '%s' to %s area failed: %s", key, area.name, exc)
            raise StoreError("set", f"{key}: {exc}") from exc

    async def remove(self, key: str) -> None:
        area = self.area_for(key)
        try:
            await area.remove([key])
        except Exception as exc:
            logger.error("Removal of '%s' from %s area failed: %s", key, area.name, exc)
            raise StoreError("remove", f"{key}: {exc}") from exc

    # ── read-modify-write ────────────────────────────────────

    async def _read_strict(self, key: str) -> Any:
        area = self.area_for(key)
        try:
            data = await area.get([key])
        except Exception as exc:
            logger.error("Read of '%s' from %s area failed: %s", key, area.name, exc)
            raise StoreError("get", f"{key}: {exc}") from exc
        return data[key] if key in data else self.default(key)

    async def modify(
        self,
        key: str,
        mutate: Callable[[Any], T],
        *,
        coerce: Callable[[Any], Any] | None = None,
    ) -> T:
        """Run *mutate* on the current value of *key* and write it back.

        *mutate* receives a private copy to change in place; its return
        value is passed through.  Nothing is written when the value is left
        unchanged.  The whole cycle holds the serializer.  A failed read
        raises instead of falling back to the default, so a transient read
        error can never overwrite stored data.

        *coerce* maps a malformed stored value to a usable one before
        *mutate* runs; a replaced value is written back like any change.
        """
        async with self.serializer:
            value = await self._read_strict(key)
            before = copy.deepcopy(value)
            if coerce is not None:
                value = coerce(value)
            result = mutate(value)
            if value != before:
                await self.set(key, value)
            return result

    async def update(self, key: str, patch: Any) -> Any:
        """Merge *patch* into *key* using the section's typed merge."""
        entry = REGISTRY.get(key)
        async with self.serializer:
            current = await self._read_strict(key)
            merged = merge_section(entry, current, patch) if entry else patch
            await self.set(key, merged)
            return merged

    # ── whole store ──────────────────────────────────────────

    async def snapshot(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Everything stored, as ``(local, sync)``."""
        try:
            local_data = await self.local.get()
            sync_data = await self.sync.get()
        except Exception as exc:
            logger.error("Reading all stored values failed: %s", exc)
            raise StoreError("get_all", str(exc)) from exc
        return local_data, sync_data

    async def get_all(self) -> dict[str, Any]:
        """Union of both areas; sync values win on key collision."""
        local_data, sync_data = await self.snapshot()
        return {**local_data, **sync_data}

    async def clear(self) -> None:
        """Factory reset: empty both areas."""
        try:
            await self.local.clear()
            await self.sync.clear()
        except Exception as exc:
            logger.error("Clearing storage failed: %s", exc)
            raise StoreError("clear", str(exc)) from exc
        self.router.sync_enabled = False

    async def initialize(self) -> list[str]:
        """Write defaults for every registered key stored in neither area.

        Returns the keys that were written.
        """
        stored = await self.get_all()
        written: list[str] = []
        for key in REGISTRY:
            if key not in stored:
                await self.set(key, self.default(key))
                written.append(key)
        return written

    # ── sync toggle ──────────────────────────────────────────

    async def enable_sync(self) -> None:
        """Move sync-eligible keys from local to sync and switch routing.

        Copy first, flip the flag, then clear the local copies; only
        during this transaction do both areas hold a key.
        """
        async with self.serializer:
            try:
                moved = await self.local.get(sorted(SYNC_KEYS))
                if moved:
                    await self.sync.set(moved)
                await self.local.set(
                    {
                        SYNC_CONFIG_KEY: {
                            "enabled": True,
                            "lastSync": self._clock.now().isoformat(),
                        }
                    }
                )
                self.router.sync_enabled = True
                if moved:
                    await self.local.remove(list(moved))
            except Exception as exc:
                logger.error("Enabling sync failed: %s", exc)
                raise StoreError("enable_sync", str(exc)) from exc
        logger.info("Sync enabled; moved %d keys to the %s area", len(moved), SYNC)

    async def disable_sync(self) -> None:
        """Move synced keys back to local, clear the sync area, switch routing."""
        async with self.serializer:
            try:
                moved = await self.sync.get(sorted(SYNC_KEYS))
                if moved:
                    await self.local.set(moved)
                await self.local.set({SYNC_CONFIG_KEY: {"enabled": False, "lastSync": None}})
                self.router.sync_enabled = False
                await self.sync.clear()
            except Exception as exc:
                logger.error("Disabling sync failed: %s", exc)
                raise StoreError("disable_sync", str(exc)) from exc
        logger.info("Sync disabled; moved %d keys to the %s area", len(moved), LOCAL)
