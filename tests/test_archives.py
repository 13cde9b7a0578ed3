import tarfile
import zipfile
from pathlib import Path

import py7zr
import pytest

from format_tools.archives import ArchiveFormat, detect_archive_format, extract_archive
from format_tools.errors import ArchiveError


def _sample_tree(tmp_path: Path) -> Path:
    root = tmp_path / "src"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.md").write_text("# B\n", encoding="utf-8")
    return root


def test_detect_archive_format() -> None:
    assert detect_archive_format("notes.ZIP") is ArchiveFormat.ZIP
    assert detect_archive_format("notes.tar.gz") is ArchiveFormat.TAR_GZ
    assert detect_archive_format("notes.tar.xz") is ArchiveFormat.TAR_XZ
    assert detect_archive_format("notes.7z") is ArchiveFormat.SEVEN_ZIP
    assert detect_archive_format("notes.rar") is None
    assert detect_archive_format("notes.md") is None


def test_extract_zip(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("a/b.md", "# B\n")
    destination = tmp_path / "out"
    assert extract_archive(archive, destination) is ArchiveFormat.ZIP
    assert (destination / "a" / "b.md").read_text(encoding="utf-8") == "# B\n"


@pytest.mark.parametrize(("suffix", "mode"), [(".tar.gz", "w:gz"), (".tar.xz", "w:xz")])
def test_extract_tar(tmp_path: Path, suffix: str, mode: str) -> None:
    root = _sample_tree(tmp_path)
    archive = tmp_path / f"bundle{suffix}"
    with tarfile.open(archive, mode) as bundle:
        bundle.add(root / "a", arcname="a")
    destination = tmp_path / "out"
    extract_archive(archive, destination)
    assert (destination / "a" / "b.md").read_text(encoding="utf-8") == "# B\n"


def test_extract_7z(tmp_path: Path) -> None:
    root = _sample_tree(tmp_path)
    archive = tmp_path / "bundle.7z"
    with py7zr.SevenZipFile(archive, "w") as bundle:
        bundle.write(root / "a" / "b.md", arcname="a/b.md")
    destination = tmp_path / "out"
    assert extract_archive(archive, destination) is ArchiveFormat.SEVEN_ZIP
    assert (destination / "a" / "b.md").read_text(encoding="utf-8") == "# B\n"


def test_name_overrides_file_suffix(tmp_path: Path) -> None:
    archive = tmp_path / "upload.tmp"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("doc.md", "x")
    extract_archive(archive, tmp_path / "out", name="notes.zip")
    assert (tmp_path / "out" / "doc.md").exists()


def test_unsupported_format(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.rar"
    archive.write_bytes(b"Rar!")
    with pytest.raises(ArchiveError) as exc:
        extract_archive(archive, tmp_path / "out")
    assert "Unsupported archive format" in str(exc.value)


def test_corrupt_zip(tmp_path: Path) -> None:
    archive = tmp_path / "bundle.zip"
    archive.write_bytes(b"not a zip at all")
    with pytest.raises(ArchiveError):
        extract_archive(archive, tmp_path / "out")


def test_zip_entry_outside_destination_rejected(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("../escaped.md", "x")
    with pytest.raises(ArchiveError):
        extract_archive(archive, tmp_path / "out")
    assert not (tmp_path / "escaped.md").exists()
