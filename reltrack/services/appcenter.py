"""AppCenter CodePush deployment lookup and release naming.

The latest package of a deployment is read from the ``appcenter`` CLI. The
release name combines the native bundle identifier, the app version and the
CodePush label: ``<bundle_id>@<version>+codepush:<label>``.
"""

from __future__ import annotations

import json
import plistlib
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from reltrack.core.result import Err, Ok, Result
from reltrack.core.structured import as_obj_list, as_str_dict, get_str
from reltrack.platform.process import run as run_process
from reltrack.services.timeouts import APPCENTER_TIMEOUT_SECONDS

__all__ = [
    "AppCenterError",
    "AppCenterLookup",
    "AppCenterPackage",
    "SUPPORTED_PLATFORMS",
    "get_release_name",
]

SUPPORTED_PLATFORMS = ("ios", "android")

_APPLICATION_ID_RE = re.compile(r"""^\s*applicationId\s*[= ]\s*["']([^"']+)["']""", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class AppCenterError:
    kind: Literal[
        "appcenter_missing",
        "appcenter_failed",
        "deployment_not_found",
        "unsupported_platform",
        "bundle_id_unknown",
    ]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class AppCenterPackage:
    label: str
    app_version: str


def _find_appcenter(cwd: Path) -> Result[str, AppCenterError]:
    local = cwd / "node_modules" / ".bin" / "appcenter"
    if local.is_file():
        return Ok(str(local))
    found = shutil.which("appcenter")
    if found is None:
        return Err(
            AppCenterError(
                kind="appcenter_missing",
                message="appcenter: missing",
                hint="Install the AppCenter CLI: npm install -g appcenter-cli",
            )
        )
    return Ok(found)


def _last_error_line(text: str) -> str | None:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in reversed(lines):
        if line.lower().startswith("error:"):
            return line
    return lines[-1] if lines else None


class AppCenterLookup:
    """Reads deployment history through the ``appcenter`` CLI."""

    def __init__(self, *, cwd: Path) -> None:
        self._cwd = cwd

    def get_package(self, app: str, deployment: str) -> Result[AppCenterPackage, AppCenterError]:
        binary = _find_appcenter(self._cwd)
        if isinstance(binary, Err):
            return binary

        cmd = [
            binary.value,
            "codepush",
            "deployment",
            "history",
            deployment,
            "--app",
            app,
            "--output",
            "json",
        ]
        result = run_process(cmd, cwd=self._cwd, timeout=APPCENTER_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            error = result.error
            return Err(
                AppCenterError(
                    kind="appcenter_failed",
                    message=f"appcenter failed to fetch deployment {deployment} of {app}",
                    hint=_last_error_line(error.stderr or error.stdout),
                )
            )

        try:
            data: object = json.loads(result.value)
        except json.JSONDecodeError as e:
            return Err(
                AppCenterError(
                    kind="appcenter_failed",
                    message=f"appcenter returned invalid JSON: {e}",
                )
            )

        packages: list[AppCenterPackage] = []
        for item in as_obj_list(data) or []:
            obj = as_str_dict(item)
            if obj is None:
                continue
            label = get_str(obj, "label")
            version = get_str(obj, "appVersion")
            if label and version:
                packages.append(AppCenterPackage(label=label, app_version=version))

        if not packages:
            return Err(
                AppCenterError(
                    kind="deployment_not_found",
                    message=f"Could not find deployment {deployment} for {app}",
                    hint="Check --deployment (defaults to Staging) and the app name",
                )
            )
        return Ok(packages[-1])


def _android_bundle_id(project_root: Path) -> str | None:
    gradle = project_root / "android" / "app" / "build.gradle"
    try:
        text = gradle.read_text(encoding="utf-8")
    except OSError:
        return None
    match = _APPLICATION_ID_RE.search(text)
    return match.group(1) if match else None


def _ios_bundle_id(project_root: Path) -> str | None:
    for plist_path in sorted((project_root / "ios").glob("*/Info.plist")):
        try:
            with plist_path.open("rb") as f:
                data: object = plistlib.load(f)
        except (OSError, plistlib.InvalidFileException, ValueError):
            continue
        obj = as_str_dict(data)
        bundle_id = get_str(obj, "CFBundleIdentifier") if obj is not None else None
        # $(PRODUCT_BUNDLE_IDENTIFIER) needs Xcode build settings to resolve.
        if bundle_id and "$(" not in bundle_id:
            return bundle_id
    return None


def get_release_name(
    package: AppCenterPackage,
    platform: str,
    *,
    project_root: Path,
    bundle_id: str | None = None,
    version_name: str | None = None,
    release_name: str | None = None,
) -> Result[str, AppCenterError]:
    """Compute the release name for a CodePush package.

    ``release_name`` wins verbatim. Otherwise the bundle id comes from
    ``bundle_id`` or the native project under ``project_root``, and the
    version from ``version_name`` or the package's app version.
    """
    if release_name:
        return Ok(release_name)

    if platform not in SUPPORTED_PLATFORMS:
        return Err(
            AppCenterError(
                kind="unsupported_platform",
                message=f"Unsupported platform '{platform}'",
                hint=f"Expected one of: {', '.join(SUPPORTED_PLATFORMS)}",
            )
        )

    resolved_id = bundle_id
    if not resolved_id:
        resolved_id = (
            _ios_bundle_id(project_root) if platform == "ios" else _android_bundle_id(project_root)
        )
    if not resolved_id:
        return Err(
            AppCenterError(
                kind="bundle_id_unknown",
                message=f"Could not determine the {platform} bundle ID",
                hint="Pass --bundle-id explicitly",
            )
        )

    version = version_name or package.app_version
    return Ok(f"{resolved_id}@{version}+codepush:{package.label}")
