"""UpdateSerializer — the single global lock for read-modify-write updates."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import TypeVar

T = TypeVar("T")


class UpdateSerializer:
    """Process-wide mutual exclusion for read-modify-write cycles.

    Deep-merge updates, LRU upserts, stats increments and sync toggles all
    take this lock, so two concurrent updates can never both read the same
    base value and silently drop one side's change.  Waiters are woken in
    arrival order.  Plain ``get``/``set`` calls do not take it.

    The lock covers the whole store, not individual keys.  That is a known
    throughput ceiling; a mapping of key to lock would give the same
    guarantee at finer granularity if write concurrency ever demands it.
    The lock is not re-entrant: code running under it must use the
    unlocked internal helpers.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def __aenter__(self) -> UpdateSerializer:
        await self._lock.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._lock.release()

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* to completion while holding the lock."""
        async with self._lock:
            return await operation()
