"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from settings_store import SettingsStore
from settings_store.accessor import CoreAccessor
from settings_store.areas import LOCAL, SYNC, InMemoryArea

START = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = START):
        self._now = start.timestamp()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._now, tz=UTC)

    def advance(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def local():
    return InMemoryArea(LOCAL)


@pytest.fixture
def sync():
    return InMemoryArea(SYNC)


@pytest.fixture
def accessor(local, sync, clock):
    return CoreAccessor(local, sync, clock=clock)


@pytest.fixture
async def store(local, sync, clock):
    settings = SettingsStore(local, sync, clock=clock)
    await settings.open()
    yield settings
    await settings.close()
