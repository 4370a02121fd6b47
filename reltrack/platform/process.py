"""Subprocess execution with Result-based error handling.

Two flavours:

- ``run`` captures output, for helper tools whose stdout we parse
  (e.g. ``appcenter ... --output json``).
- ``run_inherited`` lets the child use our stdin/stdout/stderr directly and
  reports how it exited and how long it took. This is what wrapped jobs use.

Usage:
    match run_inherited(["./nightly-backup.sh"]):
        case Ok(status):
            print(status.returncode, status.duration_ms)
        case Err(error):
            print(f"could not start: {error.stderr}")
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from reltrack.core.result import Err, Ok, Result

__all__ = ["ExitStatus", "ProcessError", "run", "run_inherited"]

_NS_PER_MS = 1_000_000


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never started
            or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.returncode == -1:
            return f"{cmd_str}: {self.stderr}"
        return f"{cmd_str} failed (exit {self.returncode})"


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """How a child process ended.

    Attributes:
        returncode: Exit code, or None when the child was killed by a signal.
        duration_ms: Wall-clock time in whole milliseconds (truncated).
    """

    returncode: int | None
    duration_ms: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def exit_code(self) -> int:
        """Code to propagate: the child's own, or 1 when it has none."""
        if self.returncode is None:
            return 1
        return self.returncode


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_inherited(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    clock: Callable[[], int] = time.monotonic_ns,
) -> Result[ExitStatus, ProcessError]:
    """Run a command with inherited standard streams and time it.

    A non-zero exit is not an error here; it is reported in ``ExitStatus``.
    Only failing to start the command at all (missing binary, permission
    denied) returns ``Err``.

    Args:
        cmd: Command and arguments; ``cmd[0]`` is resolved through PATH.
        cwd: Working directory (current directory if None).
        clock: Monotonic nanosecond clock, injectable for tests.
    """
    started = clock()
    try:
        proc = subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=False)
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )
    elapsed_ms = (clock() - started) // _NS_PER_MS

    # Negative return codes mean "killed by signal N" on POSIX.
    returncode: int | None = proc.returncode if proc.returncode >= 0 else None
    return Ok(ExitStatus(returncode=returncode, duration_ms=elapsed_ms))
