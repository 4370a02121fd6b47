"""Services: monitor check-ins, artifact processing, release uploads."""

from .appcenter import AppCenterError, AppCenterLookup, AppCenterPackage, get_release_name
from .artifacts import ArtifactError, collect
from .monitors import MonitorRunner, list_monitors, parse_monitor_id
from .release_upload import ReleaseUploadOrchestrator
from .sourcemaps import ArtifactPipeline, ProcessedArtifacts, TextSourceMapEngine

__all__ = [
    "AppCenterError",
    "AppCenterLookup",
    "AppCenterPackage",
    "ArtifactError",
    "ArtifactPipeline",
    "MonitorRunner",
    "ProcessedArtifacts",
    "ReleaseUploadOrchestrator",
    "TextSourceMapEngine",
    "collect",
    "get_release_name",
    "list_monitors",
    "parse_monitor_id",
]
