"""Result type for explicit error handling.

Operations that can fail for expected reasons (remote errors, unreadable
files, bad input) return ``Ok(value)`` or ``Err(error)`` instead of raising.
Callers branch with ``isinstance`` or pattern matching:

    match api.create_release(org, new_release):
        case Ok(release):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result carrying an error value."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
