"""Diagnostic logging setup.

Modules log through ``logging.getLogger(__name__)``. User-facing output goes
through ``ConsoleProtocol`` instead; logs are for ``--log-level debug``.
"""

from __future__ import annotations

import logging

__all__ = ["LOG_LEVELS", "configure_logging"]

LOG_LEVELS = ("debug", "info", "warning", "error")


def configure_logging(level: str = "warning") -> None:
    """Send ``reltrack`` logs to stderr through a Rich handler.

    Raises:
        ValueError: If ``level`` is not one of ``LOG_LEVELS``.
    """
    name = level.strip().lower()
    if name not in LOG_LEVELS:
        raise ValueError(f"unknown log level: {level}")

    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("reltrack")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(name.upper())
    logger.propagate = False
