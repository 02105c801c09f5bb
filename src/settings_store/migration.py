"""Schema migration — bring whatever is stored up to the current schema version."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from settings_store.schema import SCHEMA_VERSION, SCHEMA_VERSION_KEY

if TYPE_CHECKING:
    from settings_store.accessor import CoreAccessor

logger = logging.getLogger(__name__)

# Reports whether the pre-storage install had redirecting switched on.
# ``None`` means "unknown"; the stored flag (or the default) is kept.
LegacyStateProbe = Callable[[], Awaitable[bool | None]]


class MigrationGate:
    """Runs once at startup, before anything else reads the store.

    * No ``_schemaVersion`` stored: a legacy install.  The ``enabled``
      flag is taken from the probe, every missing key gets its default
      and the current version is stamped.
    * An older version stored: missing keys are filled, the version is
      re-stamped.
    * Same or newer version: nothing happens.

    Migration is best effort: failures are logged and reported as
    ``False`` so startup can proceed on defaults.
    """

    def __init__(self, accessor: CoreAccessor) -> None:
        self._accessor = accessor

    async def migrate(self, probe: LegacyStateProbe | None = None) -> bool:
        """Migrate stored state; returns whether anything was migrated."""
        try:
            async with self._accessor.serializer:
                return await self._migrate(probe)
        except Exception:
            logger.exception("Schema migration failed")
            return False

    async def _migrate(self, probe: LegacyStateProbe | None) -> bool:
        stored = await self._accessor.get_all()
        version = stored.get(SCHEMA_VERSION_KEY)

        if isinstance(version, int) and not isinstance(version, bool):
            if version >= SCHEMA_VERSION:
                return False
            written = await self._accessor.initialize()
            await self._accessor.set(SCHEMA_VERSION_KEY, SCHEMA_VERSION)
            logger.info(
                "Upgraded schema v%d -> v%d (%d keys added)", version, SCHEMA_VERSION, len(written)
            )
            return True

        enabled = await probe() if probe is not None else None
        if enabled is None:
            enabled = stored.get("enabled", True) is not False
        await self._accessor.set(SCHEMA_VERSION_KEY, SCHEMA_VERSION)
        await self._accessor.set("enabled", bool(enabled))
        written = await self._accessor.initialize()
        logger.info(
            "Migrated legacy install to schema v%d (enabled=%s, %d keys initialized)",
            SCHEMA_VERSION,
            enabled,
            len(written),
        )
        return True
