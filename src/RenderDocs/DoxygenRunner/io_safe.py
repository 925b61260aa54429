# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.io_safe",
#   "purpose": "Filesystem helpers and traversal-safe archive extraction for tool installs",
#   "sections": [
#     {"id": "directories", "name": "Directory Helpers", "anchor": "DIR", "kind": "api"},
#     {"id": "validate-member-path", "name": "_validate_member_path", "anchor": "function-validate-member-path", "kind": "function"},
#     {"id": "check-compression-ratio", "name": "_check_compression_ratio", "anchor": "function-check-compression-ratio", "kind": "function"},
#     {"id": "extract-zip-safe", "name": "extract_zip_safe", "anchor": "function-extract-zip-safe", "kind": "function"},
#     {"id": "extract-tar-safe", "name": "extract_tar_safe", "anchor": "function-extract-tar-safe", "kind": "function"},
#     {"id": "extract-archive-safe", "name": "extract_archive_safe", "anchor": "function-extract-archive-safe", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Filesystem and archive safety utilities for the Doxygen runner."""

from __future__ import annotations

import logging
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from .errors import ConfigError

__all__ = [
    "clean_directory",
    "create_directories",
    "extract_archive_safe",
    "extract_tar_safe",
    "extract_zip_safe",
]


def create_directories(paths: Iterable[Path]) -> None:
    """Create every directory in ``paths`` including missing parents."""

    for path in paths:
        Path(path).mkdir(parents=True, exist_ok=True)


def clean_directory(path: Path) -> None:
    """Delete everything inside ``path`` while keeping ``path`` itself.

    Missing directories are ignored.
    """

    path = Path(path)
    if not path.is_dir():
        return
    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


_MAX_COMPRESSION_RATIO = 10.0


def _validate_member_path(member_name: str) -> Path:
    """Validate archive member paths to prevent traversal attacks."""

    normalized = member_name.replace("\\", "/").rstrip("/")
    relative = PurePosixPath(normalized)
    if relative.is_absolute():
        raise ConfigError(f"Unsafe absolute path detected in archive: {member_name}")
    if not relative.parts:
        raise ConfigError(f"Empty path detected in archive: {member_name}")
    if any(part in {"", ".", ".."} for part in relative.parts):
        raise ConfigError(f"Unsafe path detected in archive: {member_name}")
    return Path(*relative.parts)


def _check_compression_ratio(
    *,
    total_uncompressed: int,
    compressed_size: int,
    archive: Path,
    logger: Optional[logging.Logger],
    archive_type: str,
) -> None:
    """Ensure compressed archives do not expand beyond the permitted ratio."""

    if compressed_size <= 0:
        return
    ratio = total_uncompressed / float(compressed_size)
    if ratio > _MAX_COMPRESSION_RATIO:
        if logger:
            logger.error(
                "archive compression ratio too high",
                extra={
                    "stage": "install",
                    "archive": str(archive),
                    "ratio": round(ratio, 2),
                    "limit": _MAX_COMPRESSION_RATIO,
                },
            )
        raise ConfigError(
            f"{archive_type} archive {archive} expands to {total_uncompressed} bytes, "
            f"exceeding {_MAX_COMPRESSION_RATIO}:1 compression ratio"
        )


def extract_zip_safe(
    zip_path: Path, destination: Path, *, logger: Optional[logging.Logger] = None
) -> List[Path]:
    """Extract a ZIP archive while preventing traversal and compression bombs."""

    if not zip_path.exists():
        raise ConfigError(f"ZIP archive not found: {zip_path}")
    destination.mkdir(parents=True, exist_ok=True)
    extracted: List[Path] = []
    try:
        with zipfile.ZipFile(zip_path) as archive:
            members = archive.infolist()
            safe_members: List[tuple[zipfile.ZipInfo, Path]] = []
            total_uncompressed = 0
            for member in members:
                member_path = _validate_member_path(member.filename)
                mode = (member.external_attr >> 16) & 0xFFFF
                if stat.S_IFMT(mode) == stat.S_IFLNK:
                    raise ConfigError(f"Unsafe link detected in archive: {member.filename}")
                if not member.is_dir():
                    total_uncompressed += int(member.file_size)
                safe_members.append((member, member_path))
            _check_compression_ratio(
                total_uncompressed=total_uncompressed,
                compressed_size=zip_path.stat().st_size,
                archive=zip_path,
                logger=logger,
                archive_type="ZIP",
            )
            for member, member_path in safe_members:
                target_path = destination / member_path
                if member.is_dir():
                    target_path.mkdir(parents=True, exist_ok=True)
                    continue
                target_path.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(member, "r") as source, target_path.open("wb") as target:
                    shutil.copyfileobj(source, target)
                extracted.append(target_path)
    except zipfile.BadZipFile as exc:
        raise ConfigError(f"Failed to extract zip archive {zip_path}: {exc}") from exc
    if logger:
        logger.debug(
            "extracted zip archive",
            extra={"stage": "install", "archive": str(zip_path), "files": len(extracted)},
        )
    return extracted


def extract_tar_safe(
    tar_path: Path, destination: Path, *, logger: Optional[logging.Logger] = None
) -> List[Path]:
    """Safely extract tar archives, keeping the permission bits of regular files.

    Symbolic and hard links are skipped rather than materialised.
    """

    if not tar_path.exists():
        raise ConfigError(f"TAR archive not found: {tar_path}")
    destination.mkdir(parents=True, exist_ok=True)
    extracted: List[Path] = []
    try:
        with tarfile.open(tar_path, mode="r:*") as archive:
            safe_members: List[tuple[tarfile.TarInfo, Path]] = []
            total_uncompressed = 0
            for member in archive.getmembers():
                member_path = _validate_member_path(member.name)
                if member.isdir():
                    safe_members.append((member, member_path))
                    continue
                if member.islnk() or member.issym():
                    if logger:
                        logger.debug(
                            "skipping archive link",
                            extra={"stage": "install", "member": member.name},
                        )
                    continue
                if not member.isfile():
                    raise ConfigError(f"Unsupported tar member type encountered: {member.name}")
                total_uncompressed += int(member.size)
                safe_members.append((member, member_path))
            _check_compression_ratio(
                total_uncompressed=total_uncompressed,
                compressed_size=tar_path.stat().st_size,
                archive=tar_path,
                logger=logger,
                archive_type="TAR",
            )
            for member, member_path in safe_members:
                target_path = destination / member_path
                if member.isdir():
                    target_path.mkdir(parents=True, exist_ok=True)
                    continue
                target_path.parent.mkdir(parents=True, exist_ok=True)
                extracted_file = archive.extractfile(member)
                if extracted_file is None:
                    raise ConfigError(f"Failed to extract member: {member.name}")
                with extracted_file as source, target_path.open("wb") as target:
                    shutil.copyfileobj(source, target)
                target_path.chmod(member.mode & 0o755 | stat.S_IRUSR | stat.S_IWUSR)
                extracted.append(target_path)
    except tarfile.TarError as exc:
        raise ConfigError(f"Failed to extract tar archive {tar_path}: {exc}") from exc
    if logger:
        logger.debug(
            "extracted tar archive",
            extra={"stage": "install", "archive": str(tar_path), "files": len(extracted)},
        )
    return extracted


_TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2", ".tbz2")


def extract_archive_safe(
    archive_path: Path, destination: Path, *, logger: Optional[logging.Logger] = None
) -> List[Path]:
    """Extract archives by dispatching to the appropriate safe handler."""

    lower_name = archive_path.name.lower()
    if lower_name.endswith(".zip"):
        return extract_zip_safe(archive_path, destination, logger=logger)
    if any(lower_name.endswith(suffix) for suffix in _TAR_SUFFIXES):
        return extract_tar_safe(archive_path, destination, logger=logger)
    raise ConfigError(f"Unsupported archive format: {archive_path}")
