"""Clock abstraction for testable time-dependent logic."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Protocol for getting the current time.  Inject a fake in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Default clock backed by the real system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def today_iso(clock: Clock) -> str:
    """Current UTC date as ``YYYY-MM-DD``."""
    return clock.now().astimezone(UTC).date().isoformat()


class LogicalClock:
    """Write stamps in epoch milliseconds that never repeat or go backwards.

    Two writes landing in the same millisecond (or a wall clock stepping
    back) still get strictly increasing stamps, so LRU ordering follows
    write order.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._last = 0

    def stamp(self) -> int:
        self._last = max(epoch_millis(self._clock.now()), self._last + 1)
        return self._last
