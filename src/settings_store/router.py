"""AreaRouter — decides which storage area owns a key."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from settings_store.areas.base import LOCAL, SYNC, AreaName, StorageChange
from settings_store.schema import is_sync_eligible

if TYPE_CHECKING:
    from settings_store.areas.base import StorageArea

logger = logging.getLogger(__name__)

SYNC_CONFIG_KEY = "sync"


class AreaRouter:
    """Routes keys to ``"local"`` or ``"sync"``.

    A key goes to the sync area only when it is declared sync-eligible
    *and* sync is switched on.  The sync flag is held here rather than
    re-read from storage on every decision; :meth:`load` seeds it straight
    from the local area, and :meth:`on_local_change` keeps it current when
    another context flips the toggle.

    Parameters:
        sync_enabled: Initial value of the sync flag.
    """

    def __init__(self, sync_enabled: bool = False) -> None:
        self._sync_enabled = sync_enabled

    @property
    def sync_enabled(self) -> bool:
        return self._sync_enabled

    @sync_enabled.setter
    def sync_enabled(self, value: bool) -> None:
        if value != self._sync_enabled:
            logger.info("Sync routing %s", "enabled" if value else "disabled")
        self._sync_enabled = bool(value)

    def route(self, key: str) -> AreaName:
        if self._sync_enabled and is_sync_eligible(key):
            return SYNC
        return LOCAL

    async def load(self, local: StorageArea) -> bool:
        """Read the sync flag directly from *local*, bypassing the accessor."""
        data = await local.get([SYNC_CONFIG_KEY])
        self.sync_enabled = _flag_from(data.get(SYNC_CONFIG_KEY))
        return self._sync_enabled

    def on_local_change(self, changes: dict[str, StorageChange], area_name: str) -> None:
        """Change listener for the local area."""
        if area_name != LOCAL or SYNC_CONFIG_KEY not in changes:
            return
        self.sync_enabled = _flag_from(changes[SYNC_CONFIG_KEY].new_value)


def _flag_from(sync_config: Any) -> bool:
    return isinstance(sync_config, dict) and bool(sync_config.get("enabled"))
