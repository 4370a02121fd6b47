from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from reltrack.api.client import MockApiClient
from reltrack.cli.context import CommandContext
from reltrack.core.config import Config
from reltrack.output.console import MockConsole


@pytest.fixture
def context(tmp_path: Path) -> CommandContext:
    return CommandContext(
        config=Config(org="acme", project="mobile"),
        api=MockApiClient(),
        console=MockConsole(),
        cwd=tmp_path,
    )


@pytest.fixture
def patch_context(
    monkeypatch: pytest.MonkeyPatch, context: CommandContext
) -> Callable[[object], list[Path | None]]:
    """Replace ``build_context`` in a command module.

    Returns the list of config paths it was called with, one per build.
    """

    def _patch(module: object) -> list[Path | None]:
        built: list[Path | None] = []

        def fake_build_context(config_path: Path | None = None) -> CommandContext:
            built.append(config_path)
            return context

        monkeypatch.setattr(module, "build_context", fake_build_context)
        return built

    return _patch
