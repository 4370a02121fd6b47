from __future__ import annotations

import sys
from uuid import UUID

from typer.testing import CliRunner

from reltrack.api.client import ApiError, MockApiClient
from reltrack.cli.app import app
from reltrack.cli.commands import monitors as monitors_cmd
from reltrack.cli.context import CommandContext
from reltrack.core.config import Config
from reltrack.core.models import CheckInStatus, Monitor
from reltrack.output.console import MockConsole

MONITOR = "0f3c2b1a-9d8e-4f7a-8b6c-5d4e3f2a1b0c"
runner = CliRunner()


def _child(code: int) -> list[str]:
    return ["--", sys.executable, "-c", f"import sys; sys.exit({code})"]


def _api(context: CommandContext) -> MockApiClient:
    assert isinstance(context.api, MockApiClient)
    return context.api


def _console(context: CommandContext) -> MockConsole:
    assert isinstance(context.console, MockConsole)
    return context.console


class TestRun:
    def test_invalid_monitor_id_fails_before_anything_runs(self, patch_context) -> None:
        built = patch_context(monitors_cmd)

        result = runner.invoke(app, ["monitors", "run", "nightly", *_child(0)])

        assert result.exit_code == 1
        assert "invalid monitor ID" in result.output
        assert built == []

    def test_success(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)

        result = runner.invoke(app, ["monitors", "run", MONITOR, *_child(0)])

        assert result.exit_code == 0
        calls = _api(context).calls
        assert calls[0] == ("create_checkin", UUID(MONITOR), CheckInStatus.IN_PROGRESS)
        assert calls[1][0] == "update_checkin"
        assert calls[1][3] is CheckInStatus.OK

    def test_child_exit_code_propagates(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)

        result = runner.invoke(app, ["monitors", "run", MONITOR, *_child(7)])

        assert result.exit_code == 7
        assert _api(context).calls[-1][3] is CheckInStatus.ERROR
        assert not _console(context).has_error()

    def test_checkin_failure_is_reported(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)
        _api(context).create_checkin_error = ApiError(
            url="mock://checkins", status=401, message="Invalid token"
        )

        result = runner.invoke(app, ["monitors", "run", MONITOR, *_child(0)])

        assert result.exit_code == 3
        assert _console(context).has_error()

    def test_checkin_failure_allowed(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)
        _api(context).create_checkin_error = ApiError(
            url="mock://checkins", status=401, message="Invalid token"
        )

        result = runner.invoke(
            app, ["monitors", "run", "--allow-failure", MONITOR, *_child(0)]
        )

        assert result.exit_code == 0
        assert "Invalid token" in _console(context).text


class TestList:
    def test_lists_monitors_as_table(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)
        _api(context).monitors = [
            Monitor(id="2", name="nightly", status="active"),
            Monitor(id="1", name="backup", status="disabled"),
        ]

        result = runner.invoke(app, ["monitors", "list"])

        assert result.exit_code == 0
        assert _console(context).tables == [
            (["ID", "Name", "Status"], [["1", "backup", "disabled"], ["2", "nightly", "active"]])
        ]
        assert _api(context).calls == [("list_monitors", "acme")]

    def test_org_flag_overrides_config(self, patch_context, context: CommandContext) -> None:
        patch_context(monitors_cmd)

        result = runner.invoke(app, ["monitors", "list", "--org", "other"])

        assert result.exit_code == 0
        assert _api(context).calls == [("list_monitors", "other")]

    def test_missing_org(self, monkeypatch, tmp_path) -> None:
        context = CommandContext(
            config=Config(), api=MockApiClient(), console=MockConsole(), cwd=tmp_path
        )
        monkeypatch.setattr(monitors_cmd, "build_context", lambda config_path=None: context)

        result = runner.invoke(app, ["monitors", "list"])

        assert result.exit_code == 1
        assert "organization slug is required" in _console(context).text
