# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for running store commands.

Orchestrates one command:
1. Create the store from configuration
2. Open it (load routing state)
3. Run the command
4. Return a structured result
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from settings_store.exceptions import ImportValidationError, InvalidValueError
from settings_store.reports import dump
from settings_store.store import SettingsStore

from .schema import CommandInput, CommandOutput

logger = logging.getLogger(__name__)

CommandHandler = Callable[[SettingsStore, dict[str, Any]], Awaitable[Any]]


async def _health(store: SettingsStore, args: dict[str, Any]) -> Any:
    return dump(await store.health_report())


async def _usage(store: SettingsStore, args: dict[str, Any]) -> Any:
    return dump(await store.get_storage_usage())


async def _maintenance(store: SettingsStore, args: dict[str, Any]) -> Any:
    return dump(await store.run_maintenance())


async def _export(store: SettingsStore, args: dict[str, Any]) -> Any:
    return await store.export_settings()


async def _import(store: SettingsStore, args: dict[str, Any]) -> Any:
    if "bundle" not in args:
        raise InvalidValueError("import requires args.bundle")
    return {"imported": await store.import_settings(args["bundle"])}


async def _migrate(store: SettingsStore, args: dict[str, Any]) -> Any:
    return {"migrated": await store.migrate()}


async def _conflicts(store: SettingsStore, args: dict[str, Any]) -> Any:
    return [dump(c) for c in await store.detect_shortcut_conflicts()]


COMMANDS: dict[str, CommandHandler] = {
    "health": _health,
    "usage": _usage,
    "maintenance": _maintenance,
    "export": _export,
    "import": _import,
    "migrate": _migrate,
    "conflicts": _conflicts,
}


class CommandExecutor:
    """Runs a single command against a settings store.

    Pass a store to the constructor to override creation from the input
    configuration; an injected store is left open afterwards.

    Example:
        executor = CommandExecutor()
        output = await executor.execute(input_data)
    """

    def __init__(self, store: SettingsStore | None = None) -> None:
        self._injected_store = store

    async def execute(self, input_data: CommandInput) -> CommandOutput:
        """Run the command, converting every failure into a ``CommandOutput``."""
        try:
            return await self._execute_internal(input_data)
        except ImportValidationError as e:
            return CommandOutput(
                success=False,
                result={"errors": e.errors},
                error=str(e),
                error_type="ImportValidationError",
            )
        except Exception as e:
            logger.debug("Command '%s' failed", input_data.command, exc_info=True)
            return CommandOutput(
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _execute_internal(self, input_data: CommandInput) -> CommandOutput:
        store = self._injected_store or SettingsStore.from_config(input_data.store)
        owns_store = self._injected_store is None

        try:
            await store.open()
            handler = COMMANDS[input_data.command]
            result = await handler(store, input_data.args)
            return CommandOutput(success=True, result=result)
        finally:
            if owns_store:
                await store.close()
