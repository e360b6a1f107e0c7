"""Content metadata for raw pond files.

This module builds metadata records from a file's bytes and structure.
Only the hash needs a full read; schemas come from a bounded prefix and
row counts are deferred.
"""

from __future__ import annotations

import codecs
import csv
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable, Sequence
import zipfile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from core.constants import (
    CSV_DELIMITER,
    CSV_HEADER_PREFIX_BYTES,
    DELIMITED_TEXT_EXTENSIONS,
    LEGACY_SPREADSHEET_EXTENSIONS,
    NAME_SEPARATOR,
    SPREADSHEET_EXTENSIONS,
    SPREADSHEET_MAX_ROWS,
    UNKNOWN_COLUMN_TYPE,
    UTF8_BOM,
)
from core.errors import PondIOError, PondUnreadableContentError
from core.logging_config import get_logger
from core.naming import now_stamp, semantic_name
from core.types import MetadataRecord
from ingest.pond_files import file_sha256

_LOGGER = get_logger(__name__)


def describe(file_path: Path) -> MetadataRecord:
    """Build the metadata record for a file.

    Args:
        file_path: File to describe; only its basename is recorded.

    Returns:
        Metadata record without provenance.

    Raises:
        PondIOError: If the file cannot be opened or hashed.
        PondUnreadableContentError: If a spreadsheet cannot be parsed.
    """
    path = Path(file_path)
    sha256 = file_sha256(path)
    size_bytes = path.stat().st_size
    col_names, col_types = _describe_columns(path)
    return MetadataRecord(
        file=path.name,
        sha256=sha256,
        size_bytes=size_bytes,
        n_rows=None,
        n_cols=len(col_names),
        col_names=tuple(col_names),
        col_types=tuple(col_types),
        created=now_stamp(),
        semantic_name=semantic_name(path.name),
    )


def read_csv_header(path: Path) -> list[str]:
    """Read unique column names from the first line of a delimited file.

    Only a small byte prefix is read. Missing and empty files yield an
    empty list.

    Raises:
        PondIOError: If an existing file cannot be read.
    """
    try:
        with path.open("rb") as handle:
            prefix = handle.read(CSV_HEADER_PREFIX_BYTES)
    except FileNotFoundError:
        return []
    except OSError as error:
        raise PondIOError(f"Failed to read header of {path.name}: {error}.") from error
    first_line = _decode_header_line(prefix.split(b"\n", 1)[0])
    first_line = first_line.removeprefix(UTF8_BOM).rstrip("\r")
    if not first_line.strip():
        return []
    fields = next(csv.reader([first_line], delimiter=CSV_DELIMITER), [])
    return make_unique_names(field.strip() for field in fields)


def make_unique_names(names: Iterable[str]) -> list[str]:
    """Suffix repeated names with ``_1``, ``_2``, ... keeping first occurrences.

    Generated suffixes skip any name already present in the input.
    """
    original = list(names)
    taken = set(original)
    seen: set[str] = set()
    counters: dict[str, int] = {}
    unique: list[str] = []
    for name in original:
        if name not in seen:
            seen.add(name)
            unique.append(name)
            continue
        counter = counters.get(name, 0)
        while True:
            counter += 1
            candidate = f"{name}{NAME_SEPARATOR}{counter}"
            if candidate not in taken and candidate not in seen:
                break
        counters[name] = counter
        seen.add(candidate)
        unique.append(candidate)
    return unique


def _decode_header_line(raw: bytes) -> str:
    """Decode a header line as UTF-8, falling back to Latin-1.

    An incomplete multibyte sequence cut off by the prefix limit is dropped.
    """
    try:
        return codecs.getincrementaldecoder("utf-8")().decode(raw, final=False)
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _describe_columns(path: Path) -> tuple[list[str], list[str]]:
    """Dispatch schema extraction by file extension."""
    suffix = path.suffix.lower()
    if suffix in DELIMITED_TEXT_EXTENSIONS:
        names = read_csv_header(path)
        return names, [UNKNOWN_COLUMN_TYPE] * len(names)
    if suffix in SPREADSHEET_EXTENSIONS:
        return _read_spreadsheet_columns(path)
    if suffix in LEGACY_SPREADSHEET_EXTENSIONS:
        _LOGGER.warning("spreadsheet_schema_unavailable", file=path.name, extension=suffix)
    return [], []


def _read_spreadsheet_columns(path: Path) -> tuple[list[str], list[str]]:
    """Read column names and best-effort types from the first worksheet.

    Raises:
        PondUnreadableContentError: If the workbook cannot be opened.
    """
    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (OSError, KeyError, ValueError, zipfile.BadZipFile, InvalidFileException) as error:
        raise PondUnreadableContentError(
            f"Failed to open spreadsheet {path.name}: {error}. "
            "Check the file is a valid workbook and re-drop it."
        ) from error
    try:
        rows = workbook.worksheets[0].iter_rows(
            max_row=SPREADSHEET_MAX_ROWS + 1,
            values_only=True,
        )
        header = next(rows, None)
        data_rows = [tuple(row) for row in rows]
    finally:
        workbook.close()
    if header is None:
        return [], []
    width = _used_width(header, data_rows)
    names = make_unique_names(
        _header_name(value, position) for position, value in enumerate(header[:width], 1)
    )
    types = [
        _column_type(row[index] for row in data_rows if index < len(row))
        for index in range(width)
    ]
    return names, types


def _used_width(header: Sequence[object], data_rows: list[tuple[object, ...]]) -> int:
    """Return the column count after dropping fully empty trailing columns."""
    width = 0
    for row in [tuple(header), *data_rows]:
        for index, value in enumerate(row, 1):
            if value is not None and value != "":
                width = max(width, index)
    return min(width, len(header))


def _header_name(value: object, position: int) -> str:
    text = "" if value is None else str(value).strip()
    return text or f"...{position}"


def _column_type(values: Iterable[object]) -> str:
    kinds = {_value_kind(value) for value in values if value is not None and value != ""}
    if not kinds:
        return UNKNOWN_COLUMN_TYPE
    if len(kinds) == 1:
        return kinds.pop()
    return "character"


def _value_kind(value: object) -> str:
    if isinstance(value, bool):
        return "logical"
    if isinstance(value, (int, float)):
        return "numeric"
    if isinstance(value, (datetime, date, time)):
        return "datetime"
    return "character"
