"""View record store.

This module persists the mutable pointer records that map semantic names
to concrete pond or derived files. Views hold bare filenames only.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import RECORD_FILE_SUFFIX, SUPPORTED_REPRESENTATIONS
from core.errors import PondInvalidArgumentError, PondInvalidViewError, PondIOError
from core.logging_config import get_logger
from core.naming import as_filename, now_stamp
from core.types import ViewRecord
from store.record_payload import (
    read_yaml_mapping,
    view_from_payload,
    view_to_payload,
    write_yaml_mapping,
)

_LOGGER = get_logger(__name__)


class ViewStore:
    """Filesystem-backed view store keyed by semantic name."""

    def __init__(self, views_dir: Path) -> None:
        self._views_dir = views_dir
        self._views_dir.mkdir(parents=True, exist_ok=True)

    @property
    def views_dir(self) -> Path:
        return self._views_dir

    def path_for(self, semantic_name: str) -> Path:
        """Return the view file path for a semantic name."""
        return self._views_dir / f"{semantic_name}{RECORD_FILE_SUFFIX}"

    def exists(self, semantic_name: str) -> bool:
        return self.path_for(semantic_name).is_file()

    def write(
        self,
        semantic_name: str,
        raw: str,
        preferred: str,
        parquet: str | None = None,
        meta_file: str | None = None,
        sha256: str | None = None,
    ) -> ViewRecord:
        """Serialize a view record, replacing any existing one.

        Path-like fields are reduced to bare filenames and empty fields
        are omitted from the written file.

        Args:
            semantic_name: Stable dataset identity.
            raw: Raw pond filename.
            preferred: ``raw`` or ``parquet``.
            parquet: Optional derived filename.
            meta_file: Optional metadata record filename.
            sha256: Optional raw content hash.

        Returns:
            The record as written.

        Raises:
            PondInvalidArgumentError: If the tag, name, or raw filename is invalid.
            PondIOError: If the view file cannot be written.
        """
        _validate_semantic_name(semantic_name)
        if preferred not in SUPPORTED_REPRESENTATIONS:
            raise PondInvalidArgumentError(
                f"Invalid preferred representation '{preferred}' for view '{semantic_name}': "
                f"expected one of {SUPPORTED_REPRESENTATIONS}."
            )
        raw_filename = as_filename(raw)
        if raw_filename is None:
            raise PondInvalidArgumentError(
                f"Cannot write view '{semantic_name}': raw filename must be non-empty."
            )
        view = ViewRecord(
            semantic_name=semantic_name,
            preferred=preferred,
            raw=raw_filename,
            parquet=as_filename(parquet),
            meta_file=as_filename(meta_file),
            sha256=sha256 or None,
            updated=now_stamp(),
        )
        write_yaml_mapping(self.path_for(semantic_name), view_to_payload(view))
        _LOGGER.info(
            "view_written",
            semantic_name=semantic_name,
            preferred=view.preferred,
            raw=view.raw,
            parquet=view.parquet,
        )
        return view

    def read(self, semantic_name: str) -> ViewRecord | None:
        """Read a view record.

        Returns:
            Parsed record, or ``None`` when the view does not exist or is
            structurally invalid.
        """
        view_path = self.path_for(semantic_name)
        if not view_path.is_file():
            return None
        try:
            return view_from_payload(read_yaml_mapping(view_path))
        except (PondIOError, PondInvalidViewError) as error:
            _LOGGER.warning("view_unreadable", semantic_name=semantic_name, error=str(error))
            return None

    def update(
        self,
        semantic_name: str,
        raw: str,
        preferred: str,
        parquet: str | None = None,
        meta_file: str | None = None,
        sha256: str | None = None,
    ) -> ViewRecord:
        """Write a view, carrying forward fields the caller did not supply.

        ``meta_file`` and ``sha256`` come from the prior record when omitted.
        ``parquet`` is carried forward only while the raw file is unchanged.

        Returns:
            The merged record as written.
        """
        prior = self.read(semantic_name)
        if prior is not None:
            raw_filename = as_filename(raw)
            meta_file = meta_file or prior.meta_file
            sha256 = sha256 or prior.sha256
            if not parquet and prior.raw == raw_filename:
                parquet = prior.parquet
        return self.write(
            semantic_name,
            raw=raw,
            preferred=preferred,
            parquet=parquet,
            meta_file=meta_file,
            sha256=sha256,
        )

    def list_names(self) -> list[str]:
        """Return all semantic names with a view file, sorted."""
        suffix_length = len(RECORD_FILE_SUFFIX)
        return sorted(
            view_path.name[:-suffix_length]
            for view_path in self._views_dir.glob(f"*{RECORD_FILE_SUFFIX}")
            if view_path.is_file()
        )


def _validate_semantic_name(semantic_name: str) -> None:
    """Reject empty or path-qualified semantic names."""
    if not semantic_name or as_filename(semantic_name) != semantic_name:
        raise PondInvalidArgumentError(
            f"Invalid semantic name '{semantic_name}': expected a non-empty bare name."
        )
