"""Platform helpers (process execution)."""

from .process import ExitStatus, ProcessError, run, run_inherited

__all__ = ["ExitStatus", "ProcessError", "run", "run_inherited"]
