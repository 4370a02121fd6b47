"""``reltrack monitors`` - list monitors and wrap jobs with check-ins."""

from __future__ import annotations

import typer

from reltrack.cli.commands._helpers import fail, unwrap_or_exit
from reltrack.cli.context import build_context, config_path_option
from reltrack.core.errors import ErrorCode
from reltrack.core.result import Err
from reltrack.services.monitors import MonitorRunner, list_monitors, parse_monitor_id

monitors_app = typer.Typer(
    no_args_is_help=True,
    help="Manage monitors on the release-tracking service.",
)


@monitors_app.command("list")
def list_cmd(
    ctx: typer.Context,
    org: str | None = typer.Option(None, "--org", "-o", help="The organization slug."),
) -> None:
    """List all monitors for an organization."""
    c = build_context(config_path_option(ctx))
    org_slug = unwrap_or_exit(c.config.resolve_org(org), c.console, ErrorCode.USER_ERROR)
    monitors = unwrap_or_exit(list_monitors(c.api, org_slug), c.console, ErrorCode.NETWORK_ERROR)

    c.console.table(
        ["ID", "Name", "Status"],
        [[m.id, m.name, m.status] for m in monitors],
    )


@monitors_app.command("run")
def run_cmd(
    ctx: typer.Context,
    monitor: str = typer.Argument(..., help="The monitor ID."),
    args: list[str] = typer.Argument(
        ...,
        metavar="-- COMMAND [ARGS]...",
        help="The command to run, after `--`.",
    ),
    allow_failure: bool = typer.Option(
        False,
        "--allow-failure",
        "-f",
        help="Run provided command even when the service reports an error.",
    ),
) -> None:
    """Wrap a command and report its run as a monitor check-in."""
    monitor_id = parse_monitor_id(monitor)
    if isinstance(monitor_id, Err):
        fail(monitor_id.error)

    c = build_context(config_path_option(ctx))
    runner = MonitorRunner(api=c.api, console=c.console)
    result = runner.run(monitor_id.value, args, allow_failure=allow_failure)
    if isinstance(result, Err):
        fail(result.error, c.console)
