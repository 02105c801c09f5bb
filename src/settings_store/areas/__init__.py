"""Storage areas: the key-value substrate behind the settings store."""

from settings_store.areas.base import (
    LOCAL,
    SYNC,
    AreaName,
    ChangeListener,
    StorageArea,
    StorageChange,
)
from settings_store.areas.memory import InMemoryArea
from settings_store.areas.sqlite import SQLiteArea

__all__ = [
    "LOCAL",
    "SYNC",
    "AreaName",
    "ChangeListener",
    "InMemoryArea",
    "SQLiteArea",
    "StorageArea",
    "StorageChange",
]
