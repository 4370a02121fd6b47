"""Create a release and upload its artifacts, once per distribution."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from reltrack.api.client import ApiClient, ApiError
from reltrack.core.models import Artifact, NewRelease, Release, UploadContext
from reltrack.core.result import Err, Ok, Result
from reltrack.output.console import ConsoleProtocol, Style
from reltrack.services.timeouts import UPLOAD_WAIT_ATTEMPTS, UPLOAD_WAIT_DELAY_SECONDS

__all__ = ["ReleaseUploadOrchestrator"]

logger = logging.getLogger(__name__)


class ReleaseUploadOrchestrator:
    """Release creation + sequential, fail-fast upload passes.

    With no distributions there is exactly one pass without a dist. Otherwise
    there is one pass per distribution, in the given order, all against the
    version returned by the release service.
    """

    def __init__(
        self,
        *,
        api: ApiClient,
        console: ConsoleProtocol,
        sleep: Callable[[float], None] = time.sleep,
        wait_attempts: int = UPLOAD_WAIT_ATTEMPTS,
    ) -> None:
        self._api = api
        self._console = console
        self._sleep = sleep
        self._wait_attempts = wait_attempts

    def run(
        self,
        *,
        org: str,
        project: str,
        version: str,
        dists: Sequence[str],
        artifacts: Sequence[Artifact],
        wait: bool = False,
    ) -> Result[Release, ApiError]:
        created = self._api.create_release(org, NewRelease(version=version, projects=(project,)))
        if isinstance(created, Err):
            return created
        release = created.value

        if not dists:
            self._console.print(
                f"Uploading sourcemaps for release {release.version} "
                "(no distribution value given; use --dist to set distribution value)"
            )
            passes: list[str | None] = [None]
        else:
            passes = list(dists)

        for dist in passes:
            if dist is not None:
                self._console.print(
                    f"Uploading sourcemaps for release {release.version} distribution {dist}"
                )
            context = UploadContext(
                org=org,
                project=project,
                release=release.version,
                dist=dist,
                wait=wait,
            )
            uploaded = self._upload_pass(context, artifacts)
            if isinstance(uploaded, Err):
                return uploaded

        return Ok(release)

    def _upload_pass(
        self, context: UploadContext, artifacts: Sequence[Artifact]
    ) -> Result[None, ApiError]:
        for artifact in artifacts:
            result = self._api.upload_file(context, artifact)
            if isinstance(result, Err):
                return result
            self._console.print(f"  {artifact.url}", Style.DIM)

        if context.wait and artifacts:
            return self._wait_until_listed(context, {a.url for a in artifacts})
        return Ok(None)

    def _wait_until_listed(self, context: UploadContext, names: set[str]) -> Result[None, ApiError]:
        missing = set(names)
        attempts = max(1, self._wait_attempts)
        for attempt in range(attempts):
            listed = self._api.list_release_files(context)
            if isinstance(listed, Err):
                return listed
            missing = names - set(listed.value)
            if not missing:
                return Ok(None)
            logger.debug(
                "waiting for %d file(s) in %s (attempt %d)", len(missing), context.release, attempt + 1
            )
            if attempt < attempts - 1:
                self._sleep(UPLOAD_WAIT_DELAY_SECONDS)

        return Err(
            ApiError(
                url=f"release {context.release}",
                status=0,
                message=f"timed out waiting for processing of {', '.join(sorted(missing))}",
            )
        )
