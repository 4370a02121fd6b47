"""Core domain types and logic."""

from .config import Config, ConfigError, load_settings
from .errors import CommandError, ErrorCode
from .models import (
    Artifact,
    CheckInStatus,
    Monitor,
    MonitorCheckIn,
    NewRelease,
    Release,
    UploadContext,
)
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_settings",
    # errors
    "CommandError",
    "ErrorCode",
    # models
    "Artifact",
    "CheckInStatus",
    "Monitor",
    "MonitorCheckIn",
    "NewRelease",
    "Release",
    "UploadContext",
    # result
    "Err",
    "Ok",
    "Result",
]
