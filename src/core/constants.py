"""Core constants used across datapond modules.

This module centralizes directory names, filename rules, and limits.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_PROJECT_ROOT = Path(".")
DATA_STORE_DIR_NAME = "data_store"
DATA_INDEX_DIR_NAME = "data_index"
INBOX_DIR_NAME = "add_to_pond"
POND_DIR_NAME = "data_pond"
PARQUET_DIR_NAME = "data_parquet"
META_DIR_NAME = "meta"
VIEWS_DIR_NAME = "views"
RECORD_FILE_SUFFIX = ".yml"
NAME_SEPARATOR = "_"
HASH_ALGORITHM = "sha256"
HASH_CHUNK_SIZE = 1024 * 1024
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
UTF8_BOM = "\ufeff"
CSV_DELIMITER = ","
CSV_HEADER_PREFIX_BYTES = 4096
UNKNOWN_COLUMN_TYPE = "unknown"
SPREADSHEET_MAX_ROWS = 1000
DELIMITED_TEXT_EXTENSIONS = (".csv",)
SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm")
LEGACY_SPREADSHEET_EXTENSIONS = (".xls",)
TABULAR_EXTENSIONS = (
    DELIMITED_TEXT_EXTENSIONS + SPREADSHEET_EXTENSIONS + LEGACY_SPREADSHEET_EXTENSIONS
)
ARCHIVE_EXTENSIONS = (".zip",)
RAW_REPRESENTATION = "raw"
PARQUET_REPRESENTATION = "parquet"
SUPPORTED_REPRESENTATIONS = (RAW_REPRESENTATION, PARQUET_REPRESENTATION)
PARQUET_EXTENSION = ".parquet"
PARTIAL_FILE_SUFFIX = ".partial"
ARCHIVE_PREFIX_STEM = "stem"
ARCHIVE_PREFIX_SOURCE = "source"
SUPPORTED_ARCHIVE_PREFIX_MODES = (ARCHIVE_PREFIX_STEM, ARCHIVE_PREFIX_SOURCE)
DEFAULT_PARQUET_MIN_SIZE_MB = 200.0
DEFAULT_PARQUET_COMPRESSION = "zstd"
DEFAULT_PARQUET_BLOCK_SIZE = 64 * 1024 * 1024
BYTES_PER_MB = 1024 * 1024
