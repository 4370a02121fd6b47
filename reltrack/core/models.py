"""Domain values shared by the API client and the services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

__all__ = [
    "Artifact",
    "BUNDLE_EXTENSIONS",
    "CheckInStatus",
    "Monitor",
    "MonitorCheckIn",
    "NewRelease",
    "Release",
    "SOURCEMAP_EXTENSIONS",
    "UploadContext",
]

BUNDLE_EXTENSIONS = frozenset({"jsbundle", "bundle"})
SOURCEMAP_EXTENSIONS = frozenset({"map"})


class CheckInStatus(Enum):
    """Lifecycle state of a monitor check-in (wire values)."""

    IN_PROGRESS = "in_progress"
    OK = "ok"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Monitor:
    id: str
    name: str
    status: str


@dataclass(frozen=True, slots=True)
class MonitorCheckIn:
    id: str
    status: CheckInStatus
    duration: int | None = None


@dataclass(frozen=True, slots=True)
class NewRelease:
    version: str
    projects: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Release:
    version: str
    projects: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UploadContext:
    """Target of one upload pass. Built fresh per pass, never modified."""

    org: str
    project: str
    release: str
    dist: str | None = None
    wait: bool = False


@dataclass(slots=True)
class Artifact:
    """A collected file and the URL it is uploaded under.

    ``url`` is fixed at collection time. ``contents`` and ``ref`` are updated
    in place while source maps are rewritten and cross-referenced: for a bundle
    ``ref`` names its source map, for a source map it names the bundle.
    """

    url: str
    path: Path
    contents: bytes = field(repr=False)
    ref: str | None = None

    @property
    def name(self) -> str:
        """URL without the ``~/`` prefix."""
        return self.url.removeprefix("~/")

    @property
    def extension(self) -> str:
        return self.path.suffix.removeprefix(".").lower()

    @property
    def is_bundle(self) -> bool:
        return self.extension in BUNDLE_EXTENSIONS

    @property
    def is_sourcemap(self) -> bool:
        return self.extension in SOURCEMAP_EXTENSIONS
