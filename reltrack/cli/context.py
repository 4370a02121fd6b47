from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import typer

from reltrack.api.client import ApiClient, HttpApiClient
from reltrack.core.config import Config, load_settings
from reltrack.core.errors import ErrorCode
from reltrack.core.result import Err
from reltrack.output.console import ConsoleProtocol, RichConsole, Style

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Options given before the command name, kept on ``typer.Context.obj``."""

    config_path: Path | None = None


@dataclass(frozen=True, slots=True)
class CommandContext:
    """Everything a command needs, built once per invocation."""

    config: Config
    api: ApiClient
    console: ConsoleProtocol
    cwd: Path


def config_path_option(ctx: typer.Context) -> Path | None:
    options = ctx.obj
    if isinstance(options, GlobalOptions):
        return options.config_path
    return None


def build_context(config_path: Path | None = None) -> CommandContext:
    console = RichConsole()
    cwd = Path.cwd()

    config_result = load_settings(cwd=cwd, explicit=config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        if config_result.error.hint:
            console.print(f"hint: {config_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = config_result.value
    logger.debug("service url: %s", config.url)
    return CommandContext(
        config=config,
        api=HttpApiClient(
            base_url=config.url,
            auth_token=config.auth_token,
            timeout=config.http_timeout,
        ),
        console=console,
        cwd=cwd,
    )
