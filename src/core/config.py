"""Runtime configuration model for datapond.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads
or the process working directory.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    ARCHIVE_PREFIX_STEM,
    DATA_INDEX_DIR_NAME,
    DATA_STORE_DIR_NAME,
    DEFAULT_PARQUET_BLOCK_SIZE,
    DEFAULT_PARQUET_COMPRESSION,
    DEFAULT_PARQUET_MIN_SIZE_MB,
    DEFAULT_PROJECT_ROOT,
    INBOX_DIR_NAME,
    META_DIR_NAME,
    PARQUET_DIR_NAME,
    POND_DIR_NAME,
    SUPPORTED_ARCHIVE_PREFIX_MODES,
    VIEWS_DIR_NAME,
)
from core.errors import PondConfigError


@dataclass(frozen=True)
class PondConfig:
    """Validated runtime configuration.

    Attributes:
        project_root: Root directory holding data_store and data_index.
        archive_prefix_mode: Prefix rule for extracted archive members.
        parquet_min_size_mb: Minimum CSV size before Parquet conversion.
        parquet_compression: Parquet compression codec.
        parquet_block_size: Bytes per streamed CSV block during conversion.
    """

    project_root: Path
    archive_prefix_mode: str = ARCHIVE_PREFIX_STEM
    parquet_min_size_mb: float = DEFAULT_PARQUET_MIN_SIZE_MB
    parquet_compression: str = DEFAULT_PARQUET_COMPRESSION
    parquet_block_size: int = DEFAULT_PARQUET_BLOCK_SIZE

    @classmethod
    def from_env(cls) -> "PondConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            PondConfigError: If environment values are invalid.
        """
        project_root_value = os.getenv("POND_PROJECT_ROOT", str(DEFAULT_PROJECT_ROOT))
        archive_prefix_mode = _parse_archive_prefix_mode(
            os.getenv("POND_ARCHIVE_PREFIX", ARCHIVE_PREFIX_STEM)
        )
        min_size_mb = _parse_min_size_mb(
            os.getenv("POND_PARQUET_MIN_SIZE_MB", str(DEFAULT_PARQUET_MIN_SIZE_MB))
        )
        block_size = _parse_block_size(
            os.getenv("POND_PARQUET_BLOCK_SIZE", str(DEFAULT_PARQUET_BLOCK_SIZE))
        )
        return cls(
            project_root=Path(project_root_value).expanduser().resolve(),
            archive_prefix_mode=archive_prefix_mode,
            parquet_min_size_mb=min_size_mb,
            parquet_compression=os.getenv("POND_PARQUET_COMPRESSION", DEFAULT_PARQUET_COMPRESSION),
            parquet_block_size=block_size,
        )

    @property
    def inbox_dir(self) -> Path:
        """Transient inbox consumed by ingestion runs."""
        return self.project_root / DATA_STORE_DIR_NAME / INBOX_DIR_NAME

    @property
    def pond_dir(self) -> Path:
        """Immutable raw file storage."""
        return self.project_root / DATA_STORE_DIR_NAME / POND_DIR_NAME

    @property
    def parquet_dir(self) -> Path:
        """Regenerable derived Parquet artifacts."""
        return self.project_root / DATA_STORE_DIR_NAME / PARQUET_DIR_NAME

    @property
    def meta_dir(self) -> Path:
        """One metadata record per raw file."""
        return self.project_root / DATA_INDEX_DIR_NAME / META_DIR_NAME

    @property
    def views_dir(self) -> Path:
        """One view record per semantic name."""
        return self.project_root / DATA_INDEX_DIR_NAME / VIEWS_DIR_NAME


def _parse_archive_prefix_mode(raw_value: str) -> str:
    """Validate the archive prefix mode environment value.

    Raises:
        PondConfigError: If the mode is not recognized.
    """
    mode = raw_value.strip().lower()
    if mode not in SUPPORTED_ARCHIVE_PREFIX_MODES:
        raise PondConfigError(
            "Invalid POND_ARCHIVE_PREFIX value: "
            f"expected one of {SUPPORTED_ARCHIVE_PREFIX_MODES}, got '{raw_value}'."
        )
    return mode


def _parse_min_size_mb(raw_value: str) -> float:
    """Parse the Parquet minimum size environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed non-negative size in megabytes.

    Raises:
        PondConfigError: If value is not a non-negative number.
    """
    try:
        value = float(raw_value)
    except ValueError as error:
        raise PondConfigError(
            "Invalid POND_PARQUET_MIN_SIZE_MB value: "
            f"expected number, got '{raw_value}'. "
            "Set POND_PARQUET_MIN_SIZE_MB to a size in megabytes."
        ) from error
    if value < 0:
        raise PondConfigError(
            f"Invalid POND_PARQUET_MIN_SIZE_MB value: expected >= 0, got {value}."
        )
    return value


def _parse_block_size(raw_value: str) -> int:
    """Parse the Parquet conversion block size environment value.

    Raises:
        PondConfigError: If value is not a positive integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise PondConfigError(
            "Invalid POND_PARQUET_BLOCK_SIZE value: "
            f"expected integer, got '{raw_value}'. "
            "Set POND_PARQUET_BLOCK_SIZE to a byte count."
        ) from error
    if value <= 0:
        raise PondConfigError(
            f"Invalid POND_PARQUET_BLOCK_SIZE value: expected > 0, got {value}."
        )
    return value
