"""Artifact discovery: pick bundles and source maps out of build folders.

Only the immediate entries of each folder are considered. Every selected file
is read into memory right away so no file handles stay open while the
(possibly many) artifacts are rewritten and uploaded.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from reltrack.core.models import BUNDLE_EXTENSIONS, SOURCEMAP_EXTENSIONS, Artifact
from reltrack.core.result import Err, Ok, Result

__all__ = [
    "ARTIFACT_EXTENSIONS",
    "ArtifactError",
    "artifact_url",
    "collect",
    "collect_file",
]

logger = logging.getLogger(__name__)

ARTIFACT_EXTENSIONS = BUNDLE_EXTENSIONS | SOURCEMAP_EXTENSIONS


@dataclass(frozen=True, slots=True)
class ArtifactError:
    kind: Literal["unreadable_dir", "rewrite_failed", "reference_failed"]
    message: str
    hint: str | None = None


def artifact_url(path: Path) -> str:
    """Root-relative URL a file is uploaded under (``~/<filename>``)."""
    return f"~/{path.name}"


def collect_file(path: Path) -> Artifact | None:
    """Read one file into an Artifact, or None if it cannot be read."""
    try:
        contents = path.read_bytes()
    except OSError as e:
        logger.debug("skipping %s: %s", path, e)
        return None
    return Artifact(url=artifact_url(path), path=path, contents=contents)


def _has_artifact_extension(name: str) -> bool:
    suffix = Path(name).suffix
    return suffix.removeprefix(".") in ARTIFACT_EXTENSIONS


def collect(paths: Iterable[Path]) -> Result[list[Artifact], ArtifactError]:
    """Collect bundles and source maps from the given folders.

    Entries are visited in name order. Unreadable entries are skipped; a
    folder that cannot be listed fails the whole collection. Files sharing a
    name across folders share an upload URL: the one found last is kept, in
    the position of the first.
    """
    by_url: dict[str, Artifact] = {}
    for folder in paths:
        try:
            with os.scandir(folder) as it:
                names = sorted(entry.name for entry in it)
        except OSError as e:
            return Err(
                ArtifactError(
                    kind="unreadable_dir",
                    message=f"cannot list {folder}: {e.strerror or e}",
                    hint="Pass folders containing the bundle and its source map",
                )
            )

        for name in names:
            if not _has_artifact_extension(name):
                continue
            artifact = collect_file(Path(folder) / name)
            if artifact is None:
                continue
            previous = by_url.get(artifact.url)
            if previous is not None:
                logger.warning(
                    "%s replaces %s (both upload as %s)", artifact.path, previous.path, artifact.url
                )
            by_url[artifact.url] = artifact

    return Ok(list(by_url.values()))
