from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

from reltrack.core.result import Err, Ok
from reltrack.services.artifacts import artifact_url, collect, collect_file


def _touch(folder: Path, *names: str) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / name).write_text(f"// {name}\n", encoding="utf-8")


def test_artifact_url() -> None:
    assert artifact_url(Path("/abs/build/out/main.jsbundle")) == "~/main.jsbundle"


def test_collect_selects_bundles_and_maps(tmp_path: Path) -> None:
    _touch(tmp_path, "a.jsbundle", "a.map", "notes.txt", "b.bundle")

    result = collect([tmp_path])

    assert isinstance(result, Ok)
    assert sorted(a.url for a in result.value) == ["~/a.jsbundle", "~/a.map", "~/b.bundle"]


def test_collect_reads_contents(tmp_path: Path) -> None:
    _touch(tmp_path, "a.map")
    result = collect([tmp_path])
    assert isinstance(result, Ok)
    [artifact] = result.value
    assert artifact.contents == b"// a.map\n"
    assert artifact.path == tmp_path / "a.map"


def test_collect_is_not_recursive(tmp_path: Path) -> None:
    _touch(tmp_path, "top.map")
    _touch(tmp_path / "nested", "deep.map")

    result = collect([tmp_path])

    assert isinstance(result, Ok)
    assert [a.url for a in result.value] == ["~/top.map"]


def test_collect_multiple_folders_in_order(tmp_path: Path) -> None:
    _touch(tmp_path / "ios", "main.jsbundle")
    _touch(tmp_path / "maps", "main.jsbundle.map")

    result = collect([tmp_path / "ios", tmp_path / "maps"])

    assert isinstance(result, Ok)
    assert [a.url for a in result.value] == ["~/main.jsbundle", "~/main.jsbundle.map"]


def test_collect_same_name_in_two_folders_keeps_the_last(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(logging.getLogger("reltrack"), "propagate", True)
    _touch(tmp_path / "old", "main.jsbundle", "main.jsbundle.map")
    (tmp_path / "new").mkdir()
    (tmp_path / "new" / "main.jsbundle").write_text("// rebuilt\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="reltrack.services.artifacts"):
        result = collect([tmp_path / "old", tmp_path / "new"])

    assert isinstance(result, Ok)
    assert [a.url for a in result.value] == ["~/main.jsbundle", "~/main.jsbundle.map"]
    bundle = result.value[0]
    assert bundle.path == tmp_path / "new" / "main.jsbundle"
    assert bundle.contents == b"// rebuilt\n"
    assert "both upload as ~/main.jsbundle" in caplog.text


def test_collect_skips_unreadable_entries(tmp_path: Path) -> None:
    _touch(tmp_path, "good.map")
    (tmp_path / "dir.map").mkdir()

    result = collect([tmp_path])

    assert isinstance(result, Ok)
    assert [a.url for a in result.value] == ["~/good.map"]


@pytest.mark.skipif(sys.platform == "win32" or os.geteuid() == 0, reason="needs POSIX non-root")
def test_collect_skips_permission_denied(tmp_path: Path) -> None:
    _touch(tmp_path, "secret.map", "open.map")
    (tmp_path / "secret.map").chmod(0)
    try:
        result = collect([tmp_path])
    finally:
        (tmp_path / "secret.map").chmod(0o644)

    assert isinstance(result, Ok)
    assert [a.url for a in result.value] == ["~/open.map"]


def test_collect_missing_folder_is_fatal(tmp_path: Path) -> None:
    result = collect([tmp_path / "does-not-exist"])
    assert isinstance(result, Err)
    assert result.error.kind == "unreadable_dir"


def test_collect_file_missing_returns_none(tmp_path: Path) -> None:
    assert collect_file(tmp_path / "gone.map") is None
