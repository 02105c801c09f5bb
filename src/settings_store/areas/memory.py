"""InMemoryArea — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

import copy
from typing import Any

from settings_store.areas.base import LOCAL, AreaName, StorageArea, StorageChange


class InMemoryArea(StorageArea):
    """In-memory area.  Data is lost on process exit.

    Values are deep-copied on write and on read, so callers never hold a
    reference into stored state (the browser substrate serializes too).
    """

    def __init__(self, name: AreaName = LOCAL) -> None:
        super().__init__(name)
        self._data: dict[str, Any] = {}

    async def get(self, keys: list[str] | None = None) -> dict[str, Any]:
        if keys is None:
            return copy.deepcopy(self._data)
        return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    async def set(self, values: dict[str, Any]) -> None:
        changes: dict[str, StorageChange] = {}
        for key, value in values.items():
            new_value = copy.deepcopy(value)
            changes[key] = StorageChange(self._data.get(key), copy.deepcopy(new_value))
            self._data[key] = new_value
        self._notify(changes)

    async def remove(self, keys: list[str]) -> None:
        changes = {
            key: StorageChange(old_value=self._data.pop(key)) for key in keys if key in self._data
        }
        self._notify(changes)

    async def clear(self) -> None:
        changes = {key: StorageChange(old_value=value) for key, value in self._data.items()}
        self._data.clear()
        self._notify(changes)
