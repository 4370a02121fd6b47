"""Release-tracking service client.

This module provides:
- ApiClient: Protocol for the service operations (injectable for tests)
- HttpApiClient: Real implementation using urllib against ``/api/0/``
- MockApiClient: Scripted implementation for testing
"""

from __future__ import annotations

import json
import logging
import ssl
import urllib.error
import urllib.parse
import urllib.request
import uuid
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import UUID

from reltrack import __version__
from reltrack.core.models import (
    Artifact,
    CheckInStatus,
    Monitor,
    MonitorCheckIn,
    NewRelease,
    Release,
    UploadContext,
)
from reltrack.core.result import Err, Ok, Result
from reltrack.core.structured import as_obj_list, as_str_dict, get_number, get_str

__all__ = [
    "ApiClient",
    "ApiError",
    "HttpApiClient",
    "MockApiClient",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApiError:
    """Service error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network and decoding errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"API request failed: HTTP {self.status}: {self.message} ({self.url})"
        return f"API request failed: {self.message} ({self.url})"


@runtime_checkable
class ApiClient(Protocol):
    """Operations this tool needs from the release-tracking service."""

    def list_monitors(self, org: str) -> Result[list[Monitor], ApiError]: ...

    def create_checkin(
        self, monitor_id: UUID, status: CheckInStatus
    ) -> Result[MonitorCheckIn, ApiError]: ...

    def update_checkin(
        self,
        monitor_id: UUID,
        checkin_id: str,
        *,
        status: CheckInStatus | None = None,
        duration: int | None = None,
    ) -> Result[MonitorCheckIn, ApiError]: ...

    def create_release(self, org: str, release: NewRelease) -> Result[Release, ApiError]: ...

    def upload_file(self, context: UploadContext, artifact: Artifact) -> Result[None, ApiError]: ...

    def list_release_files(self, context: UploadContext) -> Result[list[str], ApiError]:
        """Names of the files stored for ``context``'s release and dist."""
        ...


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


def _parse_checkin(data: object, url: str) -> Result[MonitorCheckIn, ApiError]:
    obj = as_str_dict(data)
    checkin_id = get_str(obj, "id") if obj is not None else None
    if obj is None or checkin_id is None:
        return Err(ApiError(url=url, status=0, message="Unexpected check-in payload"))
    try:
        status = CheckInStatus(get_str(obj, "status") or "")
    except ValueError:
        status = CheckInStatus.IN_PROGRESS
    duration = get_number(obj, "duration")
    return Ok(
        MonitorCheckIn(
            id=checkin_id,
            status=status,
            duration=int(duration) if duration is not None else None,
        )
    )


def _encode_multipart(
    fields: list[tuple[str, str]],
    *,
    file_field: str,
    filename: str,
    content: bytes,
) -> tuple[bytes, str]:
    """Encode form fields plus one file as multipart/form-data.

    Returns:
        (body, content_type)
    """
    boundary = f"----reltrack-{uuid.uuid4().hex}"
    parts: list[bytes] = []
    for name, value in fields:
        parts.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            ).encode("utf-8")
        )
    parts.append(
        (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'
            "Content-Type: application/octet-stream\r\n\r\n"
        ).encode("utf-8")
    )
    parts.append(content)
    parts.append(f"\r\n--{boundary}--\r\n".encode("utf-8"))
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


class HttpApiClient:
    """Real API client using urllib.

    Handles:
    - Bearer token authentication
    - JSON request/response bodies
    - multipart file uploads
    - ``{"detail": ...}`` error bodies
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth_token: str | None = None,
        timeout: float = 30.0,
        user_agent: str = f"reltrack/{__version__}",
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/api/0/"
        self.auth_token = auth_token
        self.timeout = timeout
        self.user_agent = user_agent
        # Use system certificates
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Result[object, ApiError]:
        url = self.base_url + path
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        if content_type:
            headers["Content-Type"] = content_type

        logger.debug("%s %s", method, url)
        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            return Err(ApiError(url=url, status=e.code, message=_error_detail(e)))
        except urllib.error.URLError as e:
            return Err(ApiError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(ApiError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(ApiError(url=url, status=0, message=str(e)))

        if not raw:
            return Ok(None)
        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(ApiError(url=url, status=0, message=f"JSON parse error: {e}"))

    def _json(self, method: str, path: str, payload: object | None = None) -> Result[object, ApiError]:
        body = None if payload is None else json.dumps(payload).encode("utf-8")
        return self._request(
            method,
            path,
            body=body,
            content_type="application/json" if body is not None else None,
        )

    def list_monitors(self, org: str) -> Result[list[Monitor], ApiError]:
        path = f"organizations/{_quote(org)}/monitors/"
        result = self._json("GET", path)
        if isinstance(result, Err):
            return result

        items = as_obj_list(result.value)
        if items is None:
            return Err(ApiError(url=self.base_url + path, status=0, message="Expected a list"))
        monitors: list[Monitor] = []
        for item in items:
            obj = as_str_dict(item)
            if obj is None:
                continue
            monitors.append(
                Monitor(
                    id=get_str(obj, "id") or "",
                    name=get_str(obj, "name") or "",
                    status=get_str(obj, "status") or "",
                )
            )
        return Ok(monitors)

    def create_checkin(
        self, monitor_id: UUID, status: CheckInStatus
    ) -> Result[MonitorCheckIn, ApiError]:
        path = f"monitors/{monitor_id}/checkins/"
        result = self._json("POST", path, {"status": status.value})
        if isinstance(result, Err):
            return result
        return _parse_checkin(result.value, self.base_url + path)

    def update_checkin(
        self,
        monitor_id: UUID,
        checkin_id: str,
        *,
        status: CheckInStatus | None = None,
        duration: int | None = None,
    ) -> Result[MonitorCheckIn, ApiError]:
        path = f"monitors/{monitor_id}/checkins/{_quote(checkin_id)}/"
        payload: dict[str, object] = {}
        if status is not None:
            payload["status"] = status.value
        if duration is not None:
            payload["duration"] = duration
        result = self._json("PUT", path, payload)
        if isinstance(result, Err):
            return result
        return _parse_checkin(result.value, self.base_url + path)

    def create_release(self, org: str, release: NewRelease) -> Result[Release, ApiError]:
        path = f"organizations/{_quote(org)}/releases/"
        result = self._json(
            "POST",
            path,
            {"version": release.version, "projects": list(release.projects)},
        )
        if isinstance(result, Err):
            return result

        obj = as_str_dict(result.value)
        version = get_str(obj, "version") if obj is not None else None
        if version is None:
            return Err(ApiError(url=self.base_url + path, status=0, message="Unexpected release payload"))
        return Ok(Release(version=version, projects=release.projects))

    def _files_path(self, context: UploadContext) -> str:
        return (
            f"projects/{_quote(context.org)}/{_quote(context.project)}"
            f"/releases/{_quote(context.release)}/files/"
        )

    def upload_file(self, context: UploadContext, artifact: Artifact) -> Result[None, ApiError]:
        fields = [("name", artifact.url)]
        if context.dist is not None:
            fields.append(("dist", context.dist))
        if artifact.is_bundle and artifact.ref:
            fields.append(("header", f"Sourcemap:{artifact.ref}"))
        body, content_type = _encode_multipart(
            fields,
            file_field="file",
            filename=artifact.path.name,
            content=artifact.contents,
        )
        result = self._request("POST", self._files_path(context), body=body, content_type=content_type)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_release_files(self, context: UploadContext) -> Result[list[str], ApiError]:
        path = self._files_path(context)
        result = self._json("GET", path)
        if isinstance(result, Err):
            return result

        items = as_obj_list(result.value)
        if items is None:
            return Err(ApiError(url=self.base_url + path, status=0, message="Expected a list"))
        names: list[str] = []
        for item in items:
            obj = as_str_dict(item)
            if obj is None:
                continue
            if get_str(obj, "dist") != context.dist:
                continue
            name = get_str(obj, "name")
            if name is not None:
                names.append(name)
        return Ok(names)


def _error_detail(error: urllib.error.HTTPError) -> str:
    """Prefer the service's ``detail`` field over the HTTP reason phrase."""
    try:
        raw = error.read()
    except OSError:
        raw = b""
    try:
        obj = as_str_dict(json.loads(raw.decode("utf-8"))) if raw else None
    except (json.JSONDecodeError, UnicodeDecodeError):
        obj = None
    detail = get_str(obj, "detail") if obj is not None else None
    return detail or str(error.reason)


class MockApiClient:
    """Scripted API client for testing.

    Every call is recorded in ``calls`` as ``(operation, args...)``. Results
    default to plausible successes; tests script failures through the
    ``*_error`` attributes.

    Usage:
        api = MockApiClient()
        api.create_checkin_error = ApiError(url="...", status=500, message="boom")
        runner = MonitorRunner(api=api, console=MockConsole())
    """

    def __init__(self) -> None:
        self.monitors: list[Monitor] = []
        self.checkin_id = "checkin-1"
        self.create_checkin_error: ApiError | None = None
        self.update_checkin_error: ApiError | None = None
        self.release_error: ApiError | None = None
        self.upload_errors: dict[tuple[str | None, str], ApiError] = {}
        self.release_version_override: str | None = None
        self.uploaded: list[tuple[UploadContext, str]] = []
        self.calls: list[tuple[object, ...]] = []

    def list_monitors(self, org: str) -> Result[list[Monitor], ApiError]:
        self.calls.append(("list_monitors", org))
        return Ok(list(self.monitors))

    def create_checkin(
        self, monitor_id: UUID, status: CheckInStatus
    ) -> Result[MonitorCheckIn, ApiError]:
        self.calls.append(("create_checkin", monitor_id, status))
        if self.create_checkin_error is not None:
            return Err(self.create_checkin_error)
        return Ok(MonitorCheckIn(id=self.checkin_id, status=status))

    def update_checkin(
        self,
        monitor_id: UUID,
        checkin_id: str,
        *,
        status: CheckInStatus | None = None,
        duration: int | None = None,
    ) -> Result[MonitorCheckIn, ApiError]:
        self.calls.append(("update_checkin", monitor_id, checkin_id, status, duration))
        if self.update_checkin_error is not None:
            return Err(self.update_checkin_error)
        return Ok(
            MonitorCheckIn(
                id=checkin_id,
                status=status or CheckInStatus.IN_PROGRESS,
                duration=duration,
            )
        )

    def create_release(self, org: str, release: NewRelease) -> Result[Release, ApiError]:
        self.calls.append(("create_release", org, release))
        if self.release_error is not None:
            return Err(self.release_error)
        version = self.release_version_override or release.version
        return Ok(Release(version=version, projects=release.projects))

    def upload_file(self, context: UploadContext, artifact: Artifact) -> Result[None, ApiError]:
        self.calls.append(("upload_file", context, artifact.url))
        error = self.upload_errors.get((context.dist, artifact.url))
        if error is not None:
            return Err(error)
        self.uploaded.append((context, artifact.url))
        return Ok(None)

    def list_release_files(self, context: UploadContext) -> Result[list[str], ApiError]:
        self.calls.append(("list_release_files", context))
        return Ok(
            [
                url
                for ctx, url in self.uploaded
                if ctx.release == context.release and ctx.dist == context.dist
            ]
        )
