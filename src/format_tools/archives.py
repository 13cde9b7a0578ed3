from __future__ import annotations

import lzma
import tarfile
import zipfile
from enum import Enum
from pathlib import Path, PurePosixPath

import py7zr

from .errors import ArchiveError


class ArchiveFormat(str, Enum):
    ZIP = ".zip"
    TAR_GZ = ".tar.gz"
    TAR_XZ = ".tar.xz"
    SEVEN_ZIP = ".7z"


def detect_archive_format(name: str) -> ArchiveFormat | None:
    lowered = name.lower()
    for archive_format in ArchiveFormat:
        if lowered.endswith(archive_format.value):
            return archive_format
    return None


def is_archive(name: str) -> bool:
    return detect_archive_format(name) is not None


def _safe_member(destination: Path, member: str) -> Path:
    relative = PurePosixPath(member.replace("\\", "/"))
    if relative.is_absolute() or ".." in relative.parts:
        raise ArchiveError(f"Archive entry escapes extraction directory: {member}")
    return destination / Path(*relative.parts)


def _extract_zip(archive: Path, destination: Path) -> None:
    with zipfile.ZipFile(archive) as bundle:
        for info in bundle.infolist():
            target = _safe_member(destination, info.filename)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with bundle.open(info) as source, target.open("wb") as handle:
                while chunk := source.read(1024 * 1024):
                    handle.write(chunk)


def _extract_tar(archive: Path, destination: Path, mode: str) -> None:
    with tarfile.open(archive, mode) as bundle:
        bundle.extractall(destination, filter="data")


def _extract_7z(archive: Path, destination: Path) -> None:
    with py7zr.SevenZipFile(archive, mode="r") as bundle:
        for name in bundle.getnames():
            _safe_member(destination, name)
        bundle.extractall(path=destination)


def extract_archive(archive: Path, destination: Path, *, name: str | None = None) -> ArchiveFormat:
    """Unpack ``archive`` into ``destination``.

    The format is chosen from ``name`` (defaults to the archive's file name) so
    uploads saved under temporary names can still be classified.
    """

    label = name or archive.name
    archive_format = detect_archive_format(label)
    if archive_format is None:
        raise ArchiveError(f"Unsupported archive format: {Path(label).suffix or label}")
    destination.mkdir(parents=True, exist_ok=True)
    try:
        if archive_format is ArchiveFormat.ZIP:
            _extract_zip(archive, destination)
        elif archive_format is ArchiveFormat.TAR_GZ:
            _extract_tar(archive, destination, "r:gz")
        elif archive_format is ArchiveFormat.TAR_XZ:
            _extract_tar(archive, destination, "r:xz")
        else:
            _extract_7z(archive, destination)
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Failed to extract zip archive: {exc}") from exc
    except tarfile.TarError as exc:
        raise ArchiveError(f"Failed to extract tar archive: {exc}") from exc
    except py7zr.Bad7zFile as exc:
        raise ArchiveError(f"Failed to extract 7z archive: {exc}") from exc
    except (EOFError, lzma.LZMAError, OSError) as exc:
        raise ArchiveError(f"Failed to extract archive {label}: {exc}") from exc
    return archive_format


__all__ = ["ArchiveFormat", "detect_archive_format", "extract_archive", "is_archive"]
