"""StorageArea protocol — the host key-value primitive the store is built on."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

logger = logging.getLogger(__name__)

AreaName = Literal["local", "sync"]

LOCAL: AreaName = "local"
SYNC: AreaName = "sync"


@dataclass(frozen=True)
class StorageChange:
    """Before/after value of a single key.  ``None`` means absent."""

    old_value: Any = None
    new_value: Any = None


ChangeListener = Callable[[dict[str, StorageChange], str], None]


class StorageArea(ABC):
    """Abstract base for a named storage area.

    An area persists JSON-compatible values under string keys.  It knows
    nothing about schemas, defaults or routing; those live above it.

    Every mutation is reported to registered listeners as a mapping of
    changed keys to :class:`StorageChange`, together with the area name.
    """

    def __init__(self, name: AreaName) -> None:
        self.name: AreaName = name
        self._listeners: list[ChangeListener] = []

    @abstractmethod
    async def get(self, keys: list[str] | None = None) -> dict[str, Any]:
        """Return stored values for *keys* (all values when ``None``).

        Keys that are not stored are omitted from the result.
        """
        ...

    @abstractmethod
    async def set(self, values: dict[str, Any]) -> None:
        """Create or overwrite every key in *values*."""
        ...

    @abstractmethod
    async def remove(self, keys: list[str]) -> None:
        """Delete *keys*.  Missing keys are ignored."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key in the area."""
        ...

    async def close(self) -> None:
        """Release backend resources.  No-op by default."""

    # ── change notifications ─────────────────────────────────

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, changes: dict[str, StorageChange]) -> None:
        if not changes:
            return
        for listener in list(self._listeners):
            try:
                listener(changes, self.name)
            except Exception:
                logger.exception("Change listener failed for area '%s'", self.name)
