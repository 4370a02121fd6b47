from __future__ import annotations

from pathlib import Path

import typer

from reltrack import __version__
from reltrack.cli.commands.appcenter_upload import appcenter_upload
from reltrack.cli.commands.monitors import monitors_app
from reltrack.cli.context import GlobalOptions
from reltrack.core.errors import ErrorCode
from reltrack.output.logs import LOG_LEVELS, configure_logging


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command("appcenter-upload")(appcenter_upload)

# Sub-apps
app.add_typer(monitors_app, name="monitors")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help=f"Diagnostic log level ({', '.join(LOG_LEVELS)}).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (overrides .reltrack.toml discovery).",
    ),
) -> None:
    try:
        configure_logging(log_level)
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    path: Path | None = None
    if config is not None:
        path = config.expanduser().resolve()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    ctx.obj = GlobalOptions(config_path=path)


def main() -> None:
    app()
