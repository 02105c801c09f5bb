"""Tests for the command runner."""

import io
import json

import pytest

from settings_store import SettingsStore
from settings_store.__main__ import main
from settings_store.runner import COMMANDS, CommandExecutor, CommandInput


class TestCommandExecutor:
    """Tests for CommandExecutor.execute()."""

    async def test_health_with_injected_store(self, store):
        output = await CommandExecutor(store).execute(CommandInput(command="health"))

        assert output.success
        assert output.result["status"] == "healthy"

    async def test_export_then_import(self, store, clock):
        await store.set_dark_mode({"enabled": "oled"})
        exported = await CommandExecutor(store).execute(CommandInput(command="export"))

        fresh = SettingsStore(clock=clock)
        output = await CommandExecutor(fresh).execute(
            CommandInput(command="import", args={"bundle": exported.result})
        )

        assert output.success
        assert "darkMode" in output.result["imported"]
        assert (await fresh.get_dark_mode())["enabled"] == "oled"

    async def test_import_validation_failure(self, store):
        bundle = {"_exportVersion": 1, "ui": {"badgeStyle": "sparkles"}}
        output = await CommandExecutor(store).execute(
            CommandInput(command="import", args={"bundle": bundle})
        )

        assert not output.success
        assert output.error_type == "ImportValidationError"
        assert output.result == {"errors": ["Invalid badge style"]}

    async def test_import_requires_bundle(self, store):
        output = await CommandExecutor(store).execute(CommandInput(command="import"))

        assert not output.success
        assert output.error_type == "InvalidValueError"

    async def test_migrate_creates_and_closes_store(self):
        output = await CommandExecutor().execute(CommandInput(command="migrate"))

        assert output.success
        assert output.result == {"migrated": True}

    async def test_conflicts_and_maintenance(self, store):
        conflicts = await CommandExecutor(store).execute(CommandInput(command="conflicts"))
        maintenance = await CommandExecutor(store).execute(CommandInput(command="maintenance"))

        assert conflicts.result == []
        assert maintenance.success
        assert maintenance.result["error"] is None

    def test_every_command_has_a_handler(self):
        assert set(COMMANDS) == {
            "health",
            "usage",
            "maintenance",
            "export",
            "import",
            "migrate",
            "conflicts",
        }


class TestMain:
    """Tests for the stdin/stdout entry point."""

    def _run(self, monkeypatch, capsys, stdin):
        monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
        code = main()
        return code, json.loads(capsys.readouterr().out)

    def test_usage_command(self, monkeypatch, capsys):
        code, output = self._run(monkeypatch, capsys, '{"command": "usage"}')

        assert code == 0
        assert output["success"] is True
        assert output["result"]["local"]["quota"] == 5_242_880

    def test_unparseable_input(self, monkeypatch, capsys):
        code, output = self._run(monkeypatch, capsys, "not json")

        assert code == 1
        assert output["success"] is False
        assert output["error_type"] == "ValidationError"

    @pytest.mark.parametrize("command", ["bogus", ""])
    def test_unknown_command(self, monkeypatch, capsys, command):
        code, output = self._run(monkeypatch, capsys, json.dumps({"command": command}))

        assert code == 1
        assert output["success"] is False
