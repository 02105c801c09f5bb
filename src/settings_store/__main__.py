# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Entry point for the settings-store command runner.

Usage:
    python -m settings_store < input.json > output.json

The runner reads a JSON command from stdin, runs it against the
configured store, and writes JSON output to stdout.

Exit codes:
    0: Success
    1: Failure (error details in JSON output)
"""

from __future__ import annotations

import asyncio
import sys

from settings_store.runner import CommandExecutor, CommandInput, CommandOutput


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        input_data = CommandInput.model_validate_json(sys.stdin.read())

        executor = CommandExecutor()
        output = asyncio.run(executor.execute(input_data))

        print(output.model_dump_json())

        return 0 if output.success else 1

    except Exception as e:
        # Always emit valid JSON, even for unparseable input
        error_output = CommandOutput(
            success=False,
            error=str(e),
            error_type=type(e).__name__,
        )
        print(error_output.model_dump_json())
        return 1


if __name__ == "__main__":
    sys.exit(main())
