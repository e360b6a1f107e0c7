"""Full view regeneration from metadata records.

This module recomputes every view from the metadata index alone, without
consulting existing views. It is the recovery path after interrupted runs.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import PARQUET_REPRESENTATION, RAW_REPRESENTATION, RECORD_FILE_SUFFIX
from core.errors import PondInvalidArgumentError, PondIOError, PondNotFoundError
from core.logging_config import get_logger
from core.naming import as_filename, derived_parquet_name, semantic_name
from core.types import MetadataRecord
from store.record_payload import metadata_from_payload, read_yaml_mapping
from store.view_store import ViewStore

_LOGGER = get_logger(__name__)


def rebuild_all(meta_dir: Path, pond_dir: Path, derived_dir: Path, views_dir: Path) -> int:
    """Rewrite every view from the metadata records.

    Records are applied oldest first, so when several raw versions share a
    semantic name the most recently created one ends up backing the view.
    A view prefers Parquet iff ``<raw stem>.parquet`` exists in
    ``derived_dir``.

    Args:
        meta_dir: Metadata record directory.
        pond_dir: Raw pond directory.
        derived_dir: Derived Parquet directory.
        views_dir: View record directory.

    Returns:
        Number of metadata records applied to views.

    Raises:
        PondNotFoundError: If no metadata records exist.
    """
    meta_paths = sorted(meta_dir.glob(f"*{RECORD_FILE_SUFFIX}")) if meta_dir.is_dir() else []
    if not meta_paths:
        raise PondNotFoundError(
            f"No metadata records found in {meta_dir}. Ingest data before rebuilding views."
        )
    loaded = [
        (meta_path, record)
        for meta_path in meta_paths
        if (record := _load_record(meta_path)) is not None
    ]
    loaded.sort(key=lambda item: (item[1].created, item[1].file))
    store = ViewStore(views_dir)
    for meta_path, record in loaded:
        _apply_record(store, meta_path, record, pond_dir, derived_dir)
    _LOGGER.info(
        "views_rebuilt",
        record_count=len(loaded),
        skipped_count=len(meta_paths) - len(loaded),
        view_count=len({_record_semantic_name(record) for _, record in loaded}),
    )
    return len(loaded)


def _load_record(meta_path: Path) -> MetadataRecord | None:
    """Parse one metadata record, skipping malformed ones with a warning."""
    try:
        return metadata_from_payload(read_yaml_mapping(meta_path))
    except (PondIOError, PondInvalidArgumentError) as error:
        _LOGGER.warning("metadata_record_skipped", meta_file=meta_path.name, error=str(error))
        return None


def _apply_record(
    store: ViewStore,
    meta_path: Path,
    record: MetadataRecord,
    pond_dir: Path,
    derived_dir: Path,
) -> None:
    raw_filename = as_filename(record.file) or record.file
    if not (pond_dir / raw_filename).is_file():
        _LOGGER.warning("raw_file_missing_from_pond", raw=raw_filename, pond_dir=str(pond_dir))
    parquet_filename = derived_parquet_name(raw_filename)
    has_derived = (derived_dir / parquet_filename).is_file()
    store.write(
        _record_semantic_name(record),
        raw=raw_filename,
        preferred=PARQUET_REPRESENTATION if has_derived else RAW_REPRESENTATION,
        parquet=parquet_filename if has_derived else None,
        meta_file=meta_path.name,
        sha256=record.sha256,
    )


def _record_semantic_name(record: MetadataRecord) -> str:
    return record.semantic_name or semantic_name(as_filename(record.file) or record.file)
