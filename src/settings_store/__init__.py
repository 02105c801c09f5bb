"""settings_store — typed settings and state persistence over two storage areas.

Keys live in a large device-only ``local`` area or a small replicated
``sync`` area.  Bounded collections evict their least-recently-written
records, a quota monitor scores storage health, and a maintenance job
keeps everything inside its limits.
"""

from settings_store.areas import InMemoryArea, SQLiteArea, StorageArea, StorageChange
from settings_store.config import StoreConfig
from settings_store.exceptions import (
    ImportValidationError,
    InvalidValueError,
    ListFetchError,
    SettingsStoreError,
    StoreError,
)
from settings_store.store import SettingsStore

__all__ = [
    "ImportValidationError",
    "InMemoryArea",
    "InvalidValueError",
    "ListFetchError",
    "SQLiteArea",
    "SettingsStore",
    "SettingsStoreError",
    "StorageArea",
    "StorageChange",
    "StoreConfig",
    "StoreError",
]
