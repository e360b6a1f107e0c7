"""Unit tests for pond file operations."""

from __future__ import annotations

from pathlib import Path
import zipfile

import pytest

from core.errors import PondIOError
from ingest.pond_files import extract_archive, relocate_file


def test_relocate_file_moves_bytes_unchanged(tmp_path: Path) -> None:
    """Relocation should move the file under the same name."""
    inbox = tmp_path / "inbox"
    pond = tmp_path / "pond"
    inbox.mkdir()
    pond.mkdir()
    source = inbox / "2021_a.csv"
    source.write_bytes(b"x,y\n1,2\n")

    target = relocate_file(source, pond)

    assert target == pond / "2021_a.csv" and target.read_bytes() == b"x,y\n1,2\n"
    assert source.exists() is False


def test_relocate_file_falls_back_to_copy(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A failed rename should fall back to copy then delete."""
    pond = tmp_path / "pond"
    pond.mkdir()
    source = tmp_path / "2021_a.csv"
    source.write_bytes(b"payload")

    def _fail_rename(self: Path, target: Path) -> Path:
        raise OSError(18, "Invalid cross-device link")

    monkeypatch.setattr(Path, "rename", _fail_rename)

    target = relocate_file(source, pond)

    assert target.read_bytes() == b"payload" and source.exists() is False


def test_relocate_file_accepts_identical_existing_entry(tmp_path: Path) -> None:
    """Re-dropping identical bytes should settle onto the existing entry."""
    pond = tmp_path / "pond"
    pond.mkdir()
    (pond / "2021_a.csv").write_bytes(b"same")
    source = tmp_path / "2021_a.csv"
    source.write_bytes(b"same")

    relocate_file(source, pond)

    assert source.exists() is False and (pond / "2021_a.csv").read_bytes() == b"same"


def test_relocate_file_refuses_to_overwrite_different_entry(tmp_path: Path) -> None:
    """Pond entries should never be replaced with different bytes."""
    pond = tmp_path / "pond"
    pond.mkdir()
    (pond / "2021_a.csv").write_bytes(b"original")
    source = tmp_path / "2021_a.csv"
    source.write_bytes(b"changed")

    with pytest.raises(PondIOError):
        relocate_file(source, pond)

    assert (pond / "2021_a.csv").read_bytes() == b"original"


def test_extract_archive_skips_directory_entries(tmp_path: Path) -> None:
    """Extraction should return regular files with their member names."""
    archive_path = tmp_path / "bundle_1.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("tables/", "")
        archive.writestr("tables/data.csv", "a,b\n")
        archive.writestr("notes.txt", "hi")
    scratch = tmp_path / "scratch"
    scratch.mkdir()

    extracted = extract_archive(archive_path, scratch)

    assert [member for _, member in extracted] == ["tables/data.csv", "notes.txt"]


def test_extract_archive_raises_for_corrupt_zip(tmp_path: Path) -> None:
    """A corrupt archive should fail extraction."""
    archive_path = tmp_path / "bundle_1.zip"
    archive_path.write_bytes(b"PK not really")

    with pytest.raises(PondIOError):
        extract_archive(archive_path, tmp_path)
