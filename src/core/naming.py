"""Filename rules for pond entries.

Raw filenames carry a version part and a semantic part separated by the
first ``_``. Views and metadata only ever store bare filenames.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import PurePath

from core.constants import (
    ARCHIVE_PREFIX_SOURCE,
    NAME_SEPARATOR,
    PARQUET_EXTENSION,
    TIMESTAMP_FORMAT,
)
from core.errors import PondInvalidArgumentError


def semantic_name(raw_filename: str) -> str:
    """Strip everything up to and including the first separator.

    Args:
        raw_filename: Bare raw filename, e.g. ``2021_census_industry.xlsx``.

    Returns:
        Semantic key with extension, e.g. ``census_industry.xlsx``. A name
        without a separator is returned unchanged.

    Raises:
        PondInvalidArgumentError: If the name carries a directory component.
    """
    if _is_path_qualified(raw_filename):
        raise PondInvalidArgumentError(
            f"Cannot derive a semantic name from path-qualified input '{raw_filename}'. "
            "Pass the bare filename."
        )
    _, separator, remainder = raw_filename.partition(NAME_SEPARATOR)
    return remainder if separator else raw_filename


def zip_prepend(archive_name: str) -> str:
    """Return the archive name text before the first separator."""
    return archive_name.partition(NAME_SEPARATOR)[0]


def has_separator(raw_filename: str) -> bool:
    """Return whether a filename carries a version/semantic split point."""
    return NAME_SEPARATOR in raw_filename


def archive_prefix(archive_name: str, mode: str) -> str:
    """Build the filename prefix for members extracted from an archive.

    Args:
        archive_name: Bare archive filename.
        mode: ``stem`` for the full name without extension, or ``source``
            for the text before the first separator.

    Returns:
        Prefix shared by every member of the archive.
    """
    if mode == ARCHIVE_PREFIX_SOURCE:
        return zip_prepend(archive_name)
    return PurePath(archive_name).stem


def extracted_member_name(prefix: str, member_name: str) -> str:
    """Return the pond filename for an archive member."""
    return f"{prefix}{NAME_SEPARATOR}{PurePath(member_name).name}"


def derived_parquet_name(raw_filename: str) -> str:
    """Return the conventional Parquet filename for a raw file."""
    return f"{PurePath(raw_filename).stem}{PARQUET_EXTENSION}"


def as_filename(value: object) -> str | None:
    """Normalize a path-like value to its bare filename.

    ``None`` and empty values stay ``None`` so they can be omitted.
    """
    if value is None:
        return None
    text = str(value)
    if not text:
        return None
    return PurePath(text.replace("\\", "/")).name or None


def now_stamp() -> str:
    """Return the current local time in record timestamp format."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def _is_path_qualified(name: str) -> bool:
    return "/" in name or "\\" in name
