"""Metadata record store.

This module persists one content description per raw pond file under
``data_index/meta``. Records are written once at ingestion time.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import RECORD_FILE_SUFFIX
from core.errors import PondNotFoundError
from core.types import MetadataRecord
from store.record_payload import (
    metadata_from_payload,
    metadata_to_payload,
    read_yaml_mapping,
    write_yaml_mapping,
)


class MetadataStore:
    """Filesystem-backed metadata store keyed by raw filename."""

    def __init__(self, meta_dir: Path) -> None:
        self._meta_dir = meta_dir
        self._meta_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, raw_filename: str) -> Path:
        """Return the metadata file path for a raw filename."""
        return self._meta_dir / f"{raw_filename}{RECORD_FILE_SUFFIX}"

    def write(self, record: MetadataRecord) -> Path:
        """Persist a metadata record named after its raw file.

        Args:
            record: Metadata record to write.

        Returns:
            Written metadata file path.

        Raises:
            PondIOError: If the record cannot be written.
        """
        meta_path = self.path_for(record.file)
        write_yaml_mapping(meta_path, metadata_to_payload(record))
        return meta_path

    def read(self, raw_filename: str) -> MetadataRecord:
        """Load the metadata record for a raw filename.

        Raises:
            PondNotFoundError: If no record exists.
            PondIOError: If the record cannot be parsed.
            PondInvalidArgumentError: If the record lacks its raw filename.
        """
        meta_path = self.path_for(raw_filename)
        if not meta_path.is_file():
            raise PondNotFoundError(
                f"No metadata record for '{raw_filename}' at {meta_path}. "
                "Ingest the file before requesting its metadata."
            )
        return metadata_from_payload(read_yaml_mapping(meta_path))

    def list_paths(self) -> list[Path]:
        """Return all metadata file paths, sorted by name."""
        return sorted(
            meta_path
            for meta_path in self._meta_dir.glob(f"*{RECORD_FILE_SUFFIX}")
            if meta_path.is_file()
        )
