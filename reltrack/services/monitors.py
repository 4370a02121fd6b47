"""Monitor listing and check-in reporting around a wrapped command.

``MonitorRunner.run`` is the check-in state machine:

1. create an ``in_progress`` check-in (failure is remembered, not fatal yet)
2. run the command with inherited stdio and time it
3. with a check-in: report ``ok``/``error`` + duration, ignoring the outcome
   without one: ``allow_failure`` decides between printing the error and
   failing the whole run with it
4. a failed command becomes a quiet exit with the command's own code

The command always runs, whatever the service said in step 1.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from uuid import UUID

from reltrack.api.client import ApiClient, ApiError
from reltrack.core.errors import CommandError, ErrorCode
from reltrack.core.models import CheckInStatus, Monitor
from reltrack.core.result import Err, Ok, Result
from reltrack.output.console import ConsoleProtocol
from reltrack.platform.process import ExitStatus, ProcessError, run_inherited

__all__ = ["Executor", "MonitorRunner", "list_monitors", "parse_monitor_id"]

logger = logging.getLogger(__name__)

Executor = Callable[[list[str]], Result[ExitStatus, ProcessError]]


def parse_monitor_id(value: str) -> Result[UUID, CommandError]:
    try:
        return Ok(UUID(value.strip()))
    except ValueError:
        return Err(
            CommandError(
                f"invalid monitor ID: {value!r}",
                code=int(ErrorCode.USER_ERROR),
                hint="Monitor IDs are UUIDs; run `reltrack monitors list` to find them",
            )
        )


def list_monitors(api: ApiClient, org: str) -> Result[list[Monitor], ApiError]:
    """Fetch the organization's monitors sorted by name."""
    result = api.list_monitors(org)
    if isinstance(result, Err):
        return result
    return Ok(sorted(result.value, key=lambda m: m.name))


class MonitorRunner:
    """Run a command and report it as a monitor check-in."""

    def __init__(
        self,
        *,
        api: ApiClient,
        console: ConsoleProtocol,
        executor: Executor = run_inherited,
    ) -> None:
        self._api = api
        self._console = console
        self._executor = executor

    def run(
        self,
        monitor_id: UUID,
        command: Sequence[str],
        *,
        allow_failure: bool = False,
    ) -> Result[None, CommandError]:
        if not command:
            return Err(CommandError("no command given", hint="Usage: monitors run <ID> -- <command>"))

        checkin = self._api.create_checkin(monitor_id, CheckInStatus.IN_PROGRESS)

        executed = self._executor(list(command))
        if isinstance(executed, Err):
            # The check-in, if any, stays in_progress: there is no duration
            # to report for a command that never started.
            return Err(
                CommandError(
                    f"failed to run {command[0]!r}: {executed.error.stderr}",
                    code=int(ErrorCode.ENV_ERROR),
                )
            )
        status = executed.value

        match checkin:
            case Ok(created):
                self._report(monitor_id, created.id, status)
            case Err(error):
                if not allow_failure:
                    return Err(CommandError(str(error), code=int(ErrorCode.NETWORK_ERROR)))
                self._console.error(str(error))

        if not status.success:
            return Err(CommandError.quiet_exit(status.exit_code))
        return Ok(None)

    def _report(self, monitor_id: UUID, checkin_id: str, status: ExitStatus) -> None:
        result = self._api.update_checkin(
            monitor_id,
            checkin_id,
            status=CheckInStatus.OK if status.success else CheckInStatus.ERROR,
            duration=status.duration_ms,
        )
        if isinstance(result, Err):
            logger.debug("ignoring check-in update failure: %s", result.error)
