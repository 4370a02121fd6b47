"""``reltrack appcenter-upload`` - upload react-native CodePush source maps."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from reltrack.cli.commands._helpers import fail, unwrap_or_exit
from reltrack.cli.context import build_context, config_path_option
from reltrack.core.errors import CommandError, ErrorCode
from reltrack.core.result import Err, Ok, Result
from reltrack.services.appcenter import AppCenterLookup, get_release_name
from reltrack.services.release_upload import ReleaseUploadOrchestrator
from reltrack.services.sourcemaps import ArtifactPipeline

logger = logging.getLogger(__name__)

DEFAULT_DEPLOYMENT = "Staging"


def check_release_name_flags(
    *,
    release_name: str | None,
    bundle_id: str | None,
    version_name: str | None,
) -> Result[None, CommandError]:
    if release_name is None:
        return Ok(None)
    conflicting = [
        flag
        for flag, value in (("--bundle-id", bundle_id), ("--version-name", version_name))
        if value is not None
    ]
    if conflicting:
        return Err(
            CommandError(
                f"--release-name cannot be used with {' or '.join(conflicting)}",
                code=int(ErrorCode.USER_ERROR),
            )
        )
    return Ok(None)


def appcenter_upload(
    ctx: typer.Context,
    app_name: str = typer.Argument(..., help="The name of the AppCenter application."),
    platform: str = typer.Argument(..., help="The name of the app platform. [ios, android]"),
    paths: list[Path] = typer.Argument(
        ...,
        help="A list of folders with assets that should be processed.",
    ),
    deployment: str = typer.Option(
        DEFAULT_DEPLOYMENT,
        "--deployment",
        help="The name of the deployment. [Production, Staging]",
    ),
    bundle_id: str | None = typer.Option(
        None,
        "--bundle-id",
        help=(
            "Explicitly provide the bundle ID instead of parsing the source projects. "
            "Useful without Xcode, or when release and debug builds use different IDs."
        ),
    ),
    version_name: str | None = typer.Option(
        None, "--version-name", help="Override version name in release name."
    ),
    release_name: str | None = typer.Option(
        None, "--release-name", help="Override the entire release name."
    ),
    dist: list[str] | None = typer.Option(
        None,
        "--dist",
        help="The names of the distributions to publish. Can be supplied multiple times.",
    ),
    print_release_name: bool = typer.Option(
        False, "--print-release-name", help="Print the release name instead."
    ),
    wait: bool = typer.Option(
        False, "--wait", help="Wait for the server to fully process uploaded files."
    ),
    org: str | None = typer.Option(None, "--org", "-o", help="The organization slug."),
    project: str | None = typer.Option(None, "--project", "-p", help="The project slug."),
) -> None:
    """Upload react-native projects for AppCenter."""
    flags = check_release_name_flags(
        release_name=release_name,
        bundle_id=bundle_id,
        version_name=version_name,
    )
    if isinstance(flags, Err):
        fail(flags.error)

    c = build_context(config_path_option(ctx))
    console = c.console

    if not print_release_name:
        console.step("Fetching latest AppCenter deployment info")

    lookup = AppCenterLookup(cwd=c.cwd)
    package = unwrap_or_exit(lookup.get_package(app_name, deployment), console, ErrorCode.ENV_ERROR)
    release = unwrap_or_exit(
        get_release_name(
            package,
            platform,
            project_root=c.cwd,
            bundle_id=bundle_id,
            version_name=version_name,
            release_name=release_name,
        ),
        console,
        ErrorCode.USER_ERROR,
    )
    if print_release_name:
        typer.echo(release)
        return

    org_slug, project_slug = unwrap_or_exit(
        c.config.resolve_org_and_project(org, project), console, ErrorCode.USER_ERROR
    )
    logger.info("Issuing a command for Organization: %s Project: %s", org_slug, project_slug)

    console.step("Processing react-native AppCenter sourcemaps")
    processed = unwrap_or_exit(
        ArtifactPipeline().collect_and_process(paths, [c.cwd]),
        console,
        ErrorCode.IO_ERROR,
    )
    logger.debug(
        "collected %d bundle(s) and %d source map(s)",
        processed.bundle_count,
        processed.sourcemap_count,
    )

    orchestrator = ReleaseUploadOrchestrator(api=c.api, console=console)
    unwrap_or_exit(
        orchestrator.run(
            org=org_slug,
            project=project_slug,
            version=release,
            dists=list(dist or []),
            artifacts=processed.artifacts,
            wait=wait,
        ),
        console,
        ErrorCode.NETWORK_ERROR,
    )
