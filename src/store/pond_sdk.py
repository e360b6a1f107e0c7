"""Python SDK for data pond operations.

This module exposes high-level APIs for ingestion, resolution, view
maintenance, and derived Parquet conversion under one project root.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import PondConfig
from core.types import (
    ConversionCandidate,
    IngestedFile,
    IngestReport,
    MetadataRecord,
    Provenance,
    ViewRecord,
)
from ingest.pipeline import ingest_file, ingest_inbox, ingest_single
from store.metadata_store import MetadataStore
from store.resolver import ViewResolver
from store.view_rebuild import rebuild_all
from store.view_store import ViewStore
from transforms.derived_representation import Converter, convert_large_csvs


class PondClient:
    """Primary SDK entry point for data pond workflows."""

    def __init__(self, config: PondConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or PondConfig.from_env()
        self._resolver = ViewResolver(self._config)

    @property
    def config(self) -> PondConfig:
        return self._config

    def ingest(self) -> IngestReport:
        """Ingest every file waiting in the inbox.

        Returns:
            Report of ingested files and skipped inbox entries.

        Raises:
            PondIOError: If extraction, hashing, or relocation fails.
        """
        return ingest_inbox(self._config)

    def ingest_file(self, path: str | Path) -> list[IngestedFile]:
        """Ingest one file or archive from any location.

        Raises:
            PondUnsupportedTypeError: If the extension is not recognized.
            PondInvalidArgumentError: If the raw filename lacks a separator.
            PondUnreadableContentError: If a spreadsheet cannot be parsed.
        """
        return ingest_file(Path(path), self._config)

    def ingest_pond_file(
        self,
        raw_filename: str,
        provenance: Provenance | None = None,
    ) -> IngestedFile:
        """Re-describe a file already in the pond and repoint its view."""
        return ingest_single(self._config.pond_dir / raw_filename, self._config, provenance)

    def resolve(self, semantic_name: str) -> Path:
        """Return the concrete path currently backing a semantic name.

        Raises:
            PondNotFoundError: If no view exists.
            PondInvalidViewError: If the view lacks a raw filename.
        """
        return self._resolver.resolve(semantic_name)

    def view(self, semantic_name: str) -> ViewRecord:
        """Load the view record for a semantic name."""
        return self._resolver.load_view(semantic_name)

    def list_views(self) -> list[str]:
        """Return all semantic names that have a view."""
        return ViewStore(self._config.views_dir).list_names()

    def metadata(self, raw_filename: str) -> MetadataRecord:
        """Load the metadata record for a raw pond filename."""
        return MetadataStore(self._config.meta_dir).read(raw_filename)

    def rebuild_views(self) -> int:
        """Regenerate all views from metadata records.

        Returns:
            Number of metadata records applied.
        """
        return rebuild_all(
            self._config.meta_dir,
            self._config.pond_dir,
            self._config.parquet_dir,
            self._config.views_dir,
        )

    def convert_large_csvs(
        self,
        min_size_mb: float | None = None,
        converter: Converter | None = None,
    ) -> list[ConversionCandidate]:
        """Convert large raw CSVs to Parquet and prefer them in views."""
        return convert_large_csvs(self._config, min_size_mb, converter)

    def with_project_root(self, project_root: str) -> "PondClient":
        """Clone the client with a different project root.

        Args:
            project_root: New project root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(project_root).expanduser().resolve()
        return PondClient(replace(self._config, project_root=resolved_root))
