"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from reltrack.api.client import ApiError
from reltrack.core.errors import CommandError, ErrorCode
from reltrack.core.result import Err, Result
from reltrack.output.console import ConsoleProtocol, Style

T = TypeVar("T")
E = TypeVar("E")


def as_command_error(error: object, code: ErrorCode) -> CommandError:
    """Wrap a service error value as a CommandError.

    Expects error objects to have 'message' and optional 'hint' attributes;
    ApiError is rendered with its URL and status.
    """
    if isinstance(error, CommandError):
        return error
    if isinstance(error, ApiError):
        return CommandError(str(error), code=int(code))
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    return CommandError(message, code=int(code), hint=hint)


def fail(error: CommandError, console: ConsoleProtocol | None = None) -> NoReturn:
    """Exit with ``error.code``; print the error unless it is quiet."""
    if not error.quiet:
        if console is None:
            typer.echo(f"error: {error.message}", err=True)
            if error.hint:
                typer.echo(f"hint: {error.hint}", err=True)
        else:
            console.error(error.message)
            if error.hint:
                console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=error.code)


def unwrap_or_exit[T, E](
    result: Result[T, E],
    console: ConsoleProtocol | None,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or report the error and exit.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                console.error(e.message)
                raise typer.Exit(code=...)
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        fail(as_command_error(result.error, error_code), console)
    return result.value
