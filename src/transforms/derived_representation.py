"""Derived representation updates for views.

This module selects large raw CSVs, hands each to a converter, and then
repoints the owning view to prefer the derived Parquet file. Raw pond
files are never touched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from core.config import PondConfig
from core.constants import BYTES_PER_MB, DELIMITED_TEXT_EXTENSIONS, PARQUET_REPRESENTATION
from core.errors import PondConversionError
from core.logging_config import get_logger
from core.naming import derived_parquet_name, semantic_name
from core.types import ConversionCandidate, ViewRecord
from store.view_store import ViewStore
from transforms.parquet_conversion import convert_csv_to_parquet

_LOGGER = get_logger(__name__)

Converter = Callable[[Path, Path], object]


class DerivedRepresentationUpdater:
    """Convert eligible raw CSVs and point their views at the results."""

    def __init__(self, config: PondConfig, converter: Converter | None = None) -> None:
        self._config = config
        self._views = ViewStore(config.views_dir)
        self._converter = converter or _default_converter(config)

    def find_candidates(self, min_size_mb: float | None = None) -> list[ConversionCandidate]:
        """List raw CSVs eligible for conversion.

        A CSV qualifies when it meets the size threshold, has no Parquet
        file yet, and is the raw file its view currently points at (or
        has no view).

        Args:
            min_size_mb: Optional threshold override in megabytes.

        Returns:
            Candidates sorted by raw filename.
        """
        threshold = self._config.parquet_min_size_mb if min_size_mb is None else min_size_mb
        pond_dir = self._config.pond_dir
        if not pond_dir.is_dir():
            return []
        candidates: list[ConversionCandidate] = []
        for raw_path in sorted(pond_dir.iterdir()):
            if not raw_path.is_file() or raw_path.suffix.lower() not in DELIMITED_TEXT_EXTENSIONS:
                continue
            size_mb = raw_path.stat().st_size / BYTES_PER_MB
            parquet_filename = derived_parquet_name(raw_path.name)
            parquet_path = self._config.parquet_dir / parquet_filename
            semantic = semantic_name(raw_path.name)
            if size_mb < threshold or parquet_path.exists():
                continue
            if not self._backs_current_view(semantic, raw_path.name):
                continue
            candidates.append(
                ConversionCandidate(
                    semantic_name=semantic,
                    raw_filename=raw_path.name,
                    raw_path=raw_path,
                    parquet_filename=parquet_filename,
                    parquet_path=parquet_path,
                    size_mb=size_mb,
                )
            )
        return candidates

    def run(self, min_size_mb: float | None = None) -> list[ConversionCandidate]:
        """Convert every eligible CSV and update its view.

        Returns:
            Candidates that were converted, in processing order.

        Raises:
            PondConversionError: If a conversion fails or produces no file.
        """
        candidates = self.find_candidates(min_size_mb)
        if not candidates:
            _LOGGER.info("parquet_nothing_to_convert", pond_dir=str(self._config.pond_dir))
            return []
        self._config.parquet_dir.mkdir(parents=True, exist_ok=True)
        for candidate in candidates:
            _LOGGER.info("parquet_converting", raw=candidate.raw_filename, size_mb=candidate.size_mb)
            self._converter(candidate.raw_path, candidate.parquet_path)
            if not candidate.parquet_path.is_file():
                raise PondConversionError(
                    f"Converter reported success for {candidate.raw_filename} "
                    f"but {candidate.parquet_filename} was not produced."
                )
            self.apply(candidate.semantic_name, candidate.raw_filename, candidate.parquet_filename)
            _LOGGER.info(
                "parquet_converted",
                semantic_name=candidate.semantic_name,
                raw=candidate.raw_filename,
                parquet=candidate.parquet_filename,
            )
        return candidates

    def apply(self, semantic: str, raw_filename: str, derived_filename: str) -> ViewRecord:
        """Point a view at its derived file, keeping its identity fields."""
        return apply_derived_representation(self._views, semantic, raw_filename, derived_filename)

    def _backs_current_view(self, semantic: str, raw_filename: str) -> bool:
        view = self._views.read(semantic)
        return view is None or view.raw == raw_filename


def apply_derived_representation(
    views: ViewStore,
    semantic: str,
    raw_filename: str,
    derived_filename: str,
) -> ViewRecord:
    """Write one view update preferring the derived file.

    ``meta_file`` and ``sha256`` are carried forward from the prior view.

    Args:
        views: View store.
        semantic: Semantic name of the dataset.
        raw_filename: Raw pond filename backing the view.
        derived_filename: Derived Parquet filename.

    Returns:
        The written view record.
    """
    return views.update(
        semantic,
        raw=raw_filename,
        preferred=PARQUET_REPRESENTATION,
        parquet=derived_filename,
    )


def convert_large_csvs(
    config: PondConfig,
    min_size_mb: float | None = None,
    converter: Converter | None = None,
) -> list[ConversionCandidate]:
    """Convert large raw CSVs to Parquet and update their views."""
    return DerivedRepresentationUpdater(config, converter).run(min_size_mb)


def _default_converter(config: PondConfig) -> Converter:
    def convert(csv_path: Path, parquet_path: Path) -> int:
        return convert_csv_to_parquet(
            csv_path,
            parquet_path,
            compression=config.parquet_compression,
            block_size=config.parquet_block_size,
        )

    return convert
