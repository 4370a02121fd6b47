"""Source map processing: rewrite local paths, link bundles to their maps.

The pipeline only sequences the steps; the content work is done by a
``SourceMapEngine``. ``TextSourceMapEngine`` is the built-in engine. It works
on the text of the files and does not interpret source map JSON.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from reltrack.core.models import Artifact
from reltrack.core.result import Err, Ok, Result
from reltrack.services.artifacts import ArtifactError, collect

__all__ = [
    "ArtifactPipeline",
    "ProcessedArtifacts",
    "SourceMapEngine",
    "TextSourceMapEngine",
]

_MAPPING_URL_RE = re.compile(r"^//[#@] sourceMappingURL=(\S+)\s*$", re.MULTILINE)


class SourceMapEngine(Protocol):
    def rewrite(
        self, artifacts: Sequence[Artifact], local_roots: Sequence[Path]
    ) -> Result[None, ArtifactError]:
        """Make local absolute paths inside source maps root-relative."""
        ...

    def add_references(self, artifacts: Sequence[Artifact]) -> Result[None, ArtifactError]:
        """Point bundles at their source maps and maps back at their bundles."""
        ...


def _decode(artifact: Artifact, kind: str) -> Result[str, ArtifactError]:
    try:
        return Ok(artifact.contents.decode("utf-8"))
    except UnicodeDecodeError as e:
        return Err(
            ArtifactError(
                kind="rewrite_failed" if kind == "rewrite" else "reference_failed",
                message=f"{artifact.url} is not valid UTF-8 ({e.reason} at byte {e.start})",
                hint=str(artifact.path),
            )
        )


class TextSourceMapEngine:
    """Text-level engine.

    ``rewrite`` replaces ``<root>/`` prefixes in source maps with ``~/``.
    Filesystem roots such as ``/`` are skipped.
    ``add_references`` appends a ``//# sourceMappingURL=`` comment to bundles
    that have a map among the artifacts (``a.jsbundle.map`` or ``a.map``),
    unless the bundle already carries one.
    """

    def rewrite(
        self, artifacts: Sequence[Artifact], local_roots: Sequence[Path]
    ) -> Result[None, ArtifactError]:
        # A filesystem root would turn every "/" in the map into "~/".
        prefixes = [
            root.as_posix().rstrip("/") + "/"
            for root in local_roots
            if not (root.anchor and root.parent == root)
        ]
        for artifact in artifacts:
            if not artifact.is_sourcemap:
                continue
            decoded = _decode(artifact, "rewrite")
            if isinstance(decoded, Err):
                return decoded
            text = decoded.value
            for prefix in prefixes:
                text = text.replace(prefix, "~/")
            artifact.contents = text.encode("utf-8")
        return Ok(None)

    def add_references(self, artifacts: Sequence[Artifact]) -> Result[None, ArtifactError]:
        by_url = {a.url: a for a in artifacts}
        for bundle in artifacts:
            if not bundle.is_bundle:
                continue
            decoded = _decode(bundle, "reference")
            if isinstance(decoded, Err):
                return decoded
            text = decoded.value

            existing = _MAPPING_URL_RE.findall(text)
            if existing:
                bundle.ref = existing[-1]
                sourcemap = by_url.get(f"~/{bundle.ref}")
            else:
                sourcemap = _find_sourcemap(bundle, by_url)
                if sourcemap is None:
                    continue
                bundle.ref = sourcemap.name
                bundle.contents = (
                    text.rstrip("\n") + f"\n//# sourceMappingURL={sourcemap.name}\n"
                ).encode("utf-8")

            if sourcemap is not None:
                sourcemap.ref = bundle.name
        return Ok(None)


def _find_sourcemap(bundle: Artifact, by_url: dict[str, Artifact]) -> Artifact | None:
    stem = bundle.url.removesuffix(bundle.path.suffix)
    for candidate in (f"{bundle.url}.map", f"{stem}.map"):
        found = by_url.get(candidate)
        if found is not None and found.is_sourcemap:
            return found
    return None


@dataclass(frozen=True, slots=True)
class ProcessedArtifacts:
    """Artifacts ready for upload."""

    artifacts: tuple[Artifact, ...]

    @property
    def bundle_count(self) -> int:
        return sum(1 for a in self.artifacts if a.is_bundle)

    @property
    def sourcemap_count(self) -> int:
        return sum(1 for a in self.artifacts if a.is_sourcemap)

    def __len__(self) -> int:
        return len(self.artifacts)


class ArtifactPipeline:
    """collect -> rewrite -> add references; any failure stops the pipeline."""

    def __init__(self, *, engine: SourceMapEngine | None = None) -> None:
        self._engine: SourceMapEngine = engine or TextSourceMapEngine()

    def process(
        self, artifacts: Sequence[Artifact], local_roots: Sequence[Path]
    ) -> Result[ProcessedArtifacts, ArtifactError]:
        rewritten = self._engine.rewrite(artifacts, local_roots)
        if isinstance(rewritten, Err):
            return rewritten
        referenced = self._engine.add_references(artifacts)
        if isinstance(referenced, Err):
            return referenced
        return Ok(ProcessedArtifacts(artifacts=tuple(artifacts)))

    def collect_and_process(
        self, paths: Sequence[Path], local_roots: Sequence[Path]
    ) -> Result[ProcessedArtifacts, ArtifactError]:
        collected = collect(paths)
        if isinstance(collected, Err):
            return collected
        return self.process(collected.value, local_roots)
