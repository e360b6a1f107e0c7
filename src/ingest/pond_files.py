"""Filesystem operations on pond entries.

This module hashes, relocates, and extracts files on their way into the
immutable pond. Pond entries are never overwritten with different bytes.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import shutil
import zipfile

from core.constants import HASH_ALGORITHM, HASH_CHUNK_SIZE
from core.errors import PondIOError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def file_sha256(path: Path) -> str:
    """Hash the full contents of a file.

    Args:
        path: File to hash.

    Returns:
        Hex-encoded SHA-256 digest.

    Raises:
        PondIOError: If the file cannot be read.
    """
    digest = hashlib.new(HASH_ALGORITHM)
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as error:
        raise PondIOError(
            f"Failed to hash {path.name}: {error}. Check the file exists and is readable."
        ) from error
    return digest.hexdigest()


def relocate_file(source: Path, target_dir: Path) -> Path:
    """Move a file into a directory unchanged in name and bytes.

    Rename is tried first, then copy followed by deleting the source.
    An existing target with identical bytes is treated as already moved.

    Args:
        source: File to move.
        target_dir: Destination directory.

    Returns:
        Path of the file inside ``target_dir``.

    Raises:
        PondIOError: If the target exists with different bytes or both
            rename and copy fail.
    """
    target = target_dir / source.name
    if target.exists() and target.resolve() == source.resolve():
        return target
    if target.exists():
        return _settle_existing_target(source, target)
    try:
        source.rename(target)
        return target
    except OSError as rename_error:
        _LOGGER.info("rename_fallback_copy", file=source.name, error=str(rename_error))
    try:
        shutil.copy2(source, target)
        source.unlink()
    except OSError as error:
        raise PondIOError(
            f"Failed to move {source.name} into {target_dir}: {error}. "
            "Check permissions on the inbox and pond directories."
        ) from error
    return target


def copy_into_pond(source: Path, target: Path) -> Path:
    """Copy a file to an exact pond path, replacing any existing file.

    Raises:
        PondIOError: If the copy fails.
    """
    try:
        shutil.copy2(source, target)
    except OSError as error:
        raise PondIOError(f"Failed to copy {source.name} to {target}: {error}.") from error
    return target


def extract_archive(archive_path: Path, scratch_dir: Path) -> list[tuple[Path, str]]:
    """Extract the regular files of a ZIP archive.

    Args:
        archive_path: ZIP archive to extract.
        scratch_dir: Temporary extraction directory.

    Returns:
        Pairs of extracted path and in-archive member name, in archive order.

    Raises:
        PondIOError: If the archive cannot be read or extracted.
    """
    extracted: list[tuple[Path, str]] = []
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for member in archive.infolist():
                if member.is_dir():
                    continue
                extracted_path = Path(archive.extract(member, scratch_dir))
                extracted.append((extracted_path, member.filename))
    except (OSError, RuntimeError, zipfile.BadZipFile) as error:
        raise PondIOError(
            f"Failed to extract archive {archive_path.name}: {error}. "
            "Re-download the archive and drop it into the inbox again."
        ) from error
    return extracted


def _settle_existing_target(source: Path, target: Path) -> Path:
    """Resolve a relocation onto an existing pond entry."""
    if file_sha256(source) != file_sha256(target):
        raise PondIOError(
            f"Refusing to overwrite pond entry {target.name}: contents differ. "
            "Rename the incoming file with a new version prefix."
        )
    try:
        source.unlink()
    except OSError as error:
        raise PondIOError(f"Failed to remove inbox copy of {source.name}: {error}.") from error
    _LOGGER.info("pond_entry_already_present", file=target.name)
    return target
