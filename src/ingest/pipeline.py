"""Ingest orchestration for the data pond.

This module classifies incoming files, relocates them into the immutable
pond, writes metadata records, and points views at the newest raw files.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import tempfile

from core.config import PondConfig
from core.constants import ARCHIVE_EXTENSIONS, RAW_REPRESENTATION, TABULAR_EXTENSIONS
from core.errors import (
    PondInvalidArgumentError,
    PondIOError,
    PondUnreadableContentError,
    PondUnsupportedTypeError,
)
from core.logging_config import get_logger
from core.naming import archive_prefix, extracted_member_name, has_separator, semantic_name
from core.types import IngestedFile, IngestReport, MetadataRecord, Provenance, SkippedItem
from ingest.content_describer import describe
from ingest.pond_files import copy_into_pond, extract_archive, relocate_file
from store.metadata_store import MetadataStore
from store.view_store import ViewStore

_LOGGER = get_logger(__name__)

TABULAR_KIND = "tabular"
ARCHIVE_KIND = "archive"


class IngestPipelineRunner:
    """Runner for sequential, per-item pond ingestion."""

    def __init__(self, config: PondConfig) -> None:
        self._config = config
        self._metadata = MetadataStore(config.meta_dir)
        self._views = ViewStore(config.views_dir)
        config.inbox_dir.mkdir(parents=True, exist_ok=True)
        config.pond_dir.mkdir(parents=True, exist_ok=True)

    def run(self) -> IngestReport:
        """Ingest every file in the inbox.

        Unsupported, misnamed, or unparseable files are skipped with a
        warning and left in place. Extraction, hashing, and relocation
        failures propagate.
        """
        ingested: list[IngestedFile] = []
        skipped: list[SkippedItem] = []
        for entry in sorted(self._config.inbox_dir.iterdir()):
            if not entry.is_file():
                continue
            try:
                ingested.extend(self.ingest_item(entry))
            except (
                PondUnsupportedTypeError,
                PondInvalidArgumentError,
                PondUnreadableContentError,
            ) as error:
                _LOGGER.warning("inbox_item_skipped", file=entry.name, reason=str(error))
                skipped.append(SkippedItem(path=str(entry), reason=str(error)))
        _LOGGER.info(
            "inbox_ingest_completed",
            inbox_dir=str(self._config.inbox_dir),
            ingested_count=len(ingested),
            skipped_count=len(skipped),
        )
        return IngestReport(ingested=tuple(ingested), skipped=tuple(skipped))

    def ingest_item(self, path: Path) -> list[IngestedFile]:
        """Ingest one incoming file or archive.

        The file is described before it moves, so a file that cannot be
        described never reaches the pond.

        Raises:
            PondUnsupportedTypeError: If the extension is not recognized.
            PondInvalidArgumentError: If a raw filename lacks a separator.
            PondUnreadableContentError: If a spreadsheet cannot be parsed.
            PondIOError: If relocation, extraction, or hashing fails.
        """
        kind = classify_path(path)
        if kind == ARCHIVE_KIND:
            return self._ingest_archive(path)
        _require_separator(path.name)
        record = describe(path)
        relocate_file(path, self._config.pond_dir)
        return [self._index(record)]

    def ingest_pond_file(
        self,
        pond_path: Path,
        provenance: Provenance | None = None,
    ) -> IngestedFile:
        """Describe a pond-resident file and point its view at it.

        Safe to repeat for a file already in the pond.

        Args:
            pond_path: File inside the pond directory.
            provenance: Optional archive origin.

        Returns:
            Ingestion summary for the file.
        """
        return self._index(describe(pond_path), provenance)

    def _index(self, record: MetadataRecord, provenance: Provenance | None = None) -> IngestedFile:
        """Write the metadata record and repoint the view at its raw file."""
        record = replace(record, provenance=provenance)
        meta_path = self._metadata.write(record)
        self._views.update(
            record.semantic_name,
            raw=record.file,
            preferred=RAW_REPRESENTATION,
            meta_file=meta_path.name,
            sha256=record.sha256,
        )
        _LOGGER.info(
            "file_ingested",
            raw=record.file,
            semantic_name=record.semantic_name,
            size_bytes=record.size_bytes,
            n_cols=record.n_cols,
            source_archive=provenance.source_archive if provenance else None,
        )
        return IngestedFile(
            raw_filename=record.file,
            semantic_name=record.semantic_name,
            meta_file=meta_path.name,
            provenance=provenance,
        )

    def _ingest_archive(self, archive_path: Path) -> list[IngestedFile]:
        """Extract an archive into the pond under prefixed names, then remove it.

        Each member is described under its pond name before it is copied.
        """
        prefix = archive_prefix(archive_path.name, self._config.archive_prefix_mode)
        ingested: list[IngestedFile] = []
        with tempfile.TemporaryDirectory(prefix="datapond-extract-") as scratch_dir:
            members = extract_archive(archive_path, Path(scratch_dir))
            for extracted_path, member_name in members:
                pond_name = extracted_member_name(prefix, member_name)
                if any(item.raw_filename == pond_name for item in ingested):
                    _LOGGER.warning(
                        "archive_member_name_collision",
                        archive=archive_path.name,
                        member=member_name,
                        raw=pond_name,
                    )
                record = describe(extracted_path)
                record = replace(
                    record,
                    file=pond_name,
                    semantic_name=semantic_name(pond_name),
                )
                copy_into_pond(extracted_path, self._config.pond_dir / pond_name)
                provenance = Provenance(
                    source_archive=archive_path.name,
                    original_file=member_name,
                )
                ingested.append(self._index(record, provenance))
        _remove_consumed(archive_path)
        _LOGGER.info(
            "archive_ingested",
            archive=archive_path.name,
            member_count=len(ingested),
        )
        return ingested


def classify_path(path: Path) -> str:
    """Classify an incoming file by extension.

    Returns:
        ``tabular`` or ``archive``.

    Raises:
        PondUnsupportedTypeError: If the extension is not recognized.
    """
    suffix = path.suffix.lower()
    if suffix in TABULAR_EXTENSIONS:
        return TABULAR_KIND
    if suffix in ARCHIVE_EXTENSIONS:
        return ARCHIVE_KIND
    raise PondUnsupportedTypeError(
        f"Unsupported file type for {path.name}: '{suffix or '<none>'}'. "
        f"Supported: {TABULAR_EXTENSIONS + ARCHIVE_EXTENSIONS}."
    )


def ingest_inbox(config: PondConfig) -> IngestReport:
    """Ingest every file waiting in the inbox.

    Args:
        config: Runtime configuration.

    Returns:
        Report of ingested files and skipped inbox entries.

    Raises:
        PondIOError: If extraction, hashing, or relocation fails.
    """
    return IngestPipelineRunner(config).run()


def ingest_file(path: Path, config: PondConfig) -> list[IngestedFile]:
    """Ingest a single incoming file or archive from any location."""
    return IngestPipelineRunner(config).ingest_item(path)


def ingest_single(
    pond_path: Path,
    config: PondConfig,
    provenance: Provenance | None = None,
) -> IngestedFile:
    """Describe and index a file that already sits in the pond."""
    return IngestPipelineRunner(config).ingest_pond_file(pond_path, provenance)


def _require_separator(raw_filename: str) -> None:
    """Reject raw filenames without a version/semantic split point."""
    if not has_separator(raw_filename):
        raise PondInvalidArgumentError(
            f"Raw filename '{raw_filename}' has no '_' separator, so its semantic name "
            "is ambiguous. Rename it as <version>_<semantic name> and re-drop it."
        )


def _remove_consumed(archive_path: Path) -> None:
    try:
        archive_path.unlink()
    except OSError as error:
        raise PondIOError(
            f"Failed to remove ingested archive {archive_path.name} from the inbox: {error}."
        ) from error
