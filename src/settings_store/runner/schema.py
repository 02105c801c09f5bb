# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for the command runner.

The runner reads one :class:`CommandInput` from stdin and always answers
with one :class:`CommandOutput` on stdout.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from settings_store.config import StoreConfig

Command = Literal["health", "usage", "maintenance", "export", "import", "migrate", "conflicts"]


class CommandInput(BaseModel):
    """Complete input read from stdin.

    Attributes:
        command: Operation to run.
        store: Store configuration, including the area backend.
        args: Command-specific arguments (``bundle`` for ``import``).
    """

    command: Command
    store: StoreConfig = Field(default_factory=StoreConfig)
    args: dict[str, Any] = Field(default_factory=dict)


class CommandOutput(BaseModel):
    """Complete output written to stdout.

    Attributes:
        success: Whether the command completed.
        result: Command result (on success, or validation details on failure).
        error: Error message (on failure).
        error_type: Error class name (on failure).
    """

    success: bool
    result: Any = None
    error: str = ""
    error_type: str = ""
