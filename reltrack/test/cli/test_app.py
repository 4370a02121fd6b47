from __future__ import annotations

import os
from pathlib import Path

import click
import pytest
from typer.testing import CliRunner

from reltrack import __version__
from reltrack.api.client import HttpApiClient
from reltrack.cli.app import app
from reltrack.cli.commands import monitors as monitors_cmd
from reltrack.cli.context import build_context
from reltrack.core.config import ENV_CONFIG

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_unknown_log_level() -> None:
    result = runner.invoke(app, ["--log-level", "chatty", "monitors", "list"])
    assert result.exit_code == 1
    assert "unknown log level" in result.output


def test_missing_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "nope.toml"), "monitors", "list"])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_config_flag_reaches_the_command_without_touching_the_environment(
    patch_context, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv(ENV_CONFIG, raising=False)
    built = patch_context(monitors_cmd)
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[defaults]\norg = "acme"\n', encoding="utf-8")

    first = runner.invoke(app, ["--config", str(cfg), "monitors", "list"])
    second = runner.invoke(app, ["monitors", "list"])

    assert first.exit_code == 0
    assert second.exit_code == 0
    assert built == [cfg.resolve(), None]
    assert ENV_CONFIG not in os.environ


class TestBuildContext:
    def test_uses_discovered_config(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.delenv(ENV_CONFIG, raising=False)
        for name in ("RELTRACK_URL", "RELTRACK_ORG", "RELTRACK_PROJECT", "RELTRACK_AUTH_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        (tmp_path / ".reltrack.toml").write_text(
            '[defaults]\norg = "acme"\nproject = "mobile"\n', encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)

        ctx = build_context()

        assert ctx.config.org == "acme"
        assert ctx.config.project == "mobile"
        assert ctx.cwd.resolve() == tmp_path.resolve()
        assert isinstance(ctx.api, HttpApiClient)

    def test_invalid_config_exits_with_env_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.delenv(ENV_CONFIG, raising=False)
        (tmp_path / ".reltrack.toml").write_text("[defaults\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(click.exceptions.Exit) as exc_info:
            build_context()

        assert exc_info.value.exit_code == 2

    def test_explicit_config_path_wins_over_discovery(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.delenv(ENV_CONFIG, raising=False)
        for name in ("RELTRACK_URL", "RELTRACK_ORG", "RELTRACK_PROJECT", "RELTRACK_AUTH_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        (tmp_path / ".reltrack.toml").write_text('[defaults]\norg = "local"\n', encoding="utf-8")
        explicit = tmp_path / "ci.toml"
        explicit.write_text('[defaults]\norg = "acme-ci"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        ctx = build_context(config_path=explicit)

        assert ctx.config.org == "acme-ci"
