"""Streaming CSV to Parquet conversion.

This module turns one raw CSV into one Parquet file through a narrow
path-in, path-out interface. The Parquet file only appears once complete.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from core.constants import (
    DEFAULT_PARQUET_BLOCK_SIZE,
    DEFAULT_PARQUET_COMPRESSION,
    PARTIAL_FILE_SUFFIX,
)
from core.errors import PondConversionError, PondDependencyError
from ingest.content_describer import make_unique_names

_NON_IDENTIFIER_PATTERN = re.compile(r"[^0-9a-z]+")


def convert_csv_to_parquet(
    csv_path: Path,
    parquet_path: Path,
    compression: str = DEFAULT_PARQUET_COMPRESSION,
    block_size: int = DEFAULT_PARQUET_BLOCK_SIZE,
) -> int:
    """Convert a CSV file into a Parquet file block by block.

    Column types are inferred from the first block. Column names are
    cleaned to unique lower snake case.

    Args:
        csv_path: Source CSV file.
        parquet_path: Destination Parquet file.
        compression: Parquet compression codec.
        block_size: Bytes read per CSV block.

    Returns:
        Number of rows written.

    Raises:
        PondDependencyError: If pyarrow is not installed.
        PondConversionError: If reading or writing fails.
    """
    try:
        import pyarrow as pa
        import pyarrow.csv as pa_csv
        import pyarrow.parquet as pq
    except ImportError as error:
        raise PondDependencyError(
            "Parquet conversion requires pyarrow, but it is not installed. "
            "Install pyarrow to produce derived Parquet files."
        ) from error

    partial_path = parquet_path.with_name(parquet_path.name + PARTIAL_FILE_SUFFIX)
    row_count = 0
    try:
        reader = pa_csv.open_csv(
            str(csv_path),
            read_options=pa_csv.ReadOptions(block_size=block_size),
        )
        column_names = clean_column_names(reader.schema.names)
        schema = pa.schema(
            [field.with_name(name) for field, name in zip(reader.schema, column_names)]
        )
        with pq.ParquetWriter(str(partial_path), schema, compression=compression) as writer:
            for batch in reader:
                writer.write_table(pa.Table.from_batches([batch]).rename_columns(column_names))
                row_count += batch.num_rows
        partial_path.replace(parquet_path)
    except (OSError, pa.ArrowException) as error:
        partial_path.unlink(missing_ok=True)
        raise PondConversionError(
            f"Failed to convert {csv_path.name} to Parquet: {error}. "
            "Check the CSV has consistent column types or lower the block size."
        ) from error
    return row_count


def clean_column_names(names: Iterable[str]) -> list[str]:
    """Normalize column names to unique lower snake case identifiers."""
    cleaned: list[str] = []
    for name in names:
        text = _NON_IDENTIFIER_PATTERN.sub("_", name.strip().lower()).strip("_")
        if not text:
            text = "x"
        elif text[0].isdigit():
            text = f"x{text}"
        cleaned.append(text)
    return make_unique_names(cleaned)
