"""Exit codes and the command-level error value.

Every CLI command ends either successfully or with a ``CommandError``. The
error carries the process exit code and whether its diagnostic has already
been shown (``quiet``). A wrapped child process that exits non-zero has
already printed whatever it had to say, so its failure is quiet: the CLI exits
with the child's code and prints nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

__all__ = ["CommandError", "ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad input, conflicting flags, missing org/project)
    - 2: Environment error (missing tools, unusable config, spawn failure)
    - 3: Network error (remote service rejected or unreachable)
    - 4: I/O error (artifact directory unreadable, source map rewrite failed)

    Quiet failures of a wrapped command use the command's own exit code.
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 3
    IO_ERROR = 4


@dataclass(frozen=True, slots=True)
class CommandError:
    """Terminal failure of a CLI command.

    Attributes:
        message: Text shown to the user as ``error: <message>``.
        code: Process exit code.
        hint: Optional follow-up line (dimmed).
        quiet: True when the failure was already reported by someone else;
            nothing is printed, only the exit code is used.
    """

    message: str
    code: int = int(ErrorCode.USER_ERROR)
    hint: str | None = None
    quiet: bool = False

    @classmethod
    def quiet_exit(cls, code: int) -> CommandError:
        """A failure whose diagnostics were already printed by a child process."""
        return cls(message=f"command exited with code {code}", code=code, quiet=True)
