# === NAVMAP v1 ===
# {
#   "module": "tests.doxygen_runner.test_io_safe",
#   "purpose": "Directory helpers and traversal-safe archive extraction tests.",
#   "sections": [
#     {"id": "directories", "name": "Directory helpers", "anchor": "DIR", "kind": "tests"},
#     {"id": "archives", "name": "Archive extraction", "anchor": "ARC", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Directory helpers and traversal-safe archive extraction tests."""

from __future__ import annotations

import io
import os
import stat
import tarfile
import zipfile
from pathlib import Path

import pytest

from RenderDocs.DoxygenRunner.errors import ConfigError
from RenderDocs.DoxygenRunner.io_safe import (
    clean_directory,
    create_directories,
    extract_archive_safe,
    extract_tar_safe,
    extract_zip_safe,
)


def _write_tar(path: Path, members) -> Path:
    with tarfile.open(path, mode="w:gz") as archive:
        for info, payload in members:
            archive.addfile(info, io.BytesIO(payload) if payload is not None else None)
    return path


def _file_info(name: str, payload: bytes, mode: int = 0o644) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name)
    info.size = len(payload)
    info.mode = mode
    return info


def test_create_directories_builds_parents(tmp_path: Path) -> None:
    targets = [tmp_path / "a" / "b", tmp_path / "c"]

    create_directories(targets)
    create_directories(targets)

    assert all(path.is_dir() for path in targets)


def test_clean_directory_keeps_the_folder(tmp_path: Path) -> None:
    folder = tmp_path / "xml"
    (folder / "nested").mkdir(parents=True)
    (folder / "index.xml").write_text("<doxygenindex/>")
    (folder / "nested" / "class.xml").write_text("<compound/>")

    clean_directory(folder)

    assert folder.is_dir()
    assert list(folder.iterdir()) == []


def test_clean_directory_ignores_missing_folder(tmp_path: Path) -> None:
    clean_directory(tmp_path / "absent")

    assert not (tmp_path / "absent").exists()


def test_extract_tar_keeps_executable_bit(tmp_path: Path) -> None:
    archive = _write_tar(
        tmp_path / "release.tar.gz",
        [
            (_file_info("doxygen-1.9.8/bin/doxygen", b"#!/bin/sh\n", 0o755), b"#!/bin/sh\n"),
            (_file_info("doxygen-1.9.8/README", b"readme"), b"readme"),
        ],
    )

    extracted = extract_tar_safe(archive, tmp_path / "out")

    binary = tmp_path / "out" / "doxygen-1.9.8" / "bin" / "doxygen"
    assert binary in extracted
    if os.name == "posix":
        assert binary.stat().st_mode & stat.S_IXUSR


def test_extract_tar_skips_links(tmp_path: Path) -> None:
    link = tarfile.TarInfo("doxygen-1.9.8/bin/doxywizard")
    link.type = tarfile.SYMTYPE
    link.linkname = "/etc/passwd"
    archive = _write_tar(
        tmp_path / "release.tar.gz",
        [(_file_info("doxygen-1.9.8/bin/doxygen", b"bin"), b"bin"), (link, None)],
    )

    extract_tar_safe(archive, tmp_path / "out")

    assert not (tmp_path / "out" / "doxygen-1.9.8" / "bin" / "doxywizard").exists()


@pytest.mark.parametrize("name", ["../escape.txt", "/abs/escape.txt", "bin/../../escape.txt"])
def test_extract_tar_rejects_traversal(tmp_path: Path, name: str) -> None:
    archive = _write_tar(tmp_path / "evil.tar.gz", [(_file_info(name, b"x"), b"x")])

    with pytest.raises(ConfigError):
        extract_tar_safe(archive, tmp_path / "out")

    assert not (tmp_path / "escape.txt").exists()


def test_extract_tar_rejects_compression_bombs(tmp_path: Path) -> None:
    payload = b"\0" * (1024 * 1024)
    archive = _write_tar(tmp_path / "bomb.tar.gz", [(_file_info("zeros.bin", payload), payload)])

    with pytest.raises(ConfigError, match="compression ratio"):
        extract_tar_safe(archive, tmp_path / "out")


def test_extract_zip_rejects_traversal(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr("../escape.txt", "x")

    with pytest.raises(ConfigError):
        extract_zip_safe(archive, tmp_path / "out")


def test_extract_zip_reports_corrupt_archive(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"PK not really")

    with pytest.raises(ConfigError):
        extract_zip_safe(archive, tmp_path / "out")


def test_extract_archive_dispatches_by_suffix(tmp_path: Path) -> None:
    archive = tmp_path / "release.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr("doxygen.exe", "MZ")

    extracted = extract_archive_safe(archive, tmp_path / "out")

    assert extracted == [tmp_path / "out" / "doxygen.exe"]


def test_extract_archive_rejects_unknown_format(tmp_path: Path) -> None:
    archive = tmp_path / "release.rar"
    archive.write_bytes(b"rar")

    with pytest.raises(ConfigError, match="Unsupported archive format"):
        extract_archive_safe(archive, tmp_path / "out")
