"""Shared typed models.

This module defines immutable data models used by ingest, store,
resolver, and derived-representation layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.constants import PARQUET_REPRESENTATION


@dataclass(frozen=True)
class Provenance:
    """Recorded origin of a file extracted from an archive.

    Attributes:
        source_archive: Archive filename the file was extracted from.
        original_file: Relative member name inside the archive.
    """

    source_archive: str
    original_file: str


@dataclass(frozen=True)
class MetadataRecord:
    """Content description of one raw pond file.

    Attributes:
        file: Raw pond filename.
        sha256: Hex-encoded SHA-256 of the full file contents.
        size_bytes: File size in bytes.
        n_rows: Row count, ``None`` while deferred.
        n_cols: Number of detected columns.
        col_names: Ordered unique column names.
        col_types: Column type tags parallel to ``col_names``.
        created: Creation timestamp string.
        semantic_name: Version-independent dataset identity.
        provenance: Optional archive origin.
    """

    file: str
    sha256: str
    size_bytes: int
    n_rows: int | None
    n_cols: int
    col_names: tuple[str, ...]
    col_types: tuple[str, ...]
    created: str
    semantic_name: str
    provenance: Provenance | None = None


@dataclass(frozen=True)
class ViewRecord:
    """Mutable logical pointer from a semantic name to a concrete file.

    Attributes:
        semantic_name: Stable dataset identity.
        preferred: Preferred representation tag.
        raw: Bare filename of the raw pond file.
        parquet: Optional bare filename of the derived Parquet file.
        meta_file: Optional bare filename of the metadata record.
        sha256: Optional content hash of the raw file.
        updated: Last-updated timestamp string.
    """

    semantic_name: str
    preferred: str
    raw: str
    parquet: str | None = None
    meta_file: str | None = None
    sha256: str | None = None
    updated: str | None = None

    @property
    def uses_derived(self) -> bool:
        """Return whether resolution should select the derived file."""
        return self.preferred == PARQUET_REPRESENTATION and bool(self.parquet)


@dataclass(frozen=True)
class IngestedFile:
    """One raw file successfully ingested into the pond."""

    raw_filename: str
    semantic_name: str
    meta_file: str
    provenance: Provenance | None = None


@dataclass(frozen=True)
class SkippedItem:
    """One inbox entry left unprocessed with a reason."""

    path: str
    reason: str


@dataclass(frozen=True)
class IngestReport:
    """Outcome of an ingestion run.

    Attributes:
        ingested: Raw files written into the pond, in processing order.
        skipped: Inbox entries that were skipped with a warning.
    """

    ingested: tuple[IngestedFile, ...] = ()
    skipped: tuple[SkippedItem, ...] = ()


@dataclass(frozen=True)
class ConversionCandidate:
    """A raw CSV eligible for Parquet conversion.

    Attributes:
        semantic_name: Semantic name of the raw file.
        raw_filename: Raw pond filename.
        raw_path: Absolute raw file path.
        parquet_filename: Conventional derived filename.
        parquet_path: Absolute derived file path.
        size_mb: Raw file size in megabytes.
    """

    semantic_name: str
    raw_filename: str
    raw_path: Path
    parquet_filename: str
    parquet_path: Path
    size_mb: float
