# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for driving a settings store from JSON on stdin.

Usage:
    python -m settings_store < input.json > output.json

Exports:
    CommandExecutor: Runs one command against a store
    CommandInput: Input schema
    CommandOutput: Output schema
"""

from .executor import COMMANDS, CommandExecutor
from .schema import CommandInput, CommandOutput

__all__ = [
    "COMMANDS",
    "CommandExecutor",
    "CommandInput",
    "CommandOutput",
]
