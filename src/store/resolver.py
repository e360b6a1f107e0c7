"""Semantic name resolution.

This module maps a semantic name to the concrete file currently backing
its view. Resolution never guesses: missing or broken views are errors.
"""

from __future__ import annotations

from pathlib import Path

from core.config import PondConfig
from core.errors import PondInvalidViewError, PondNotFoundError
from core.types import ViewRecord
from store.view_store import ViewStore


class ViewResolver:
    """Resolve semantic names against the view index."""

    def __init__(self, config: PondConfig) -> None:
        self._config = config
        self._views = ViewStore(config.views_dir)

    def resolve(self, semantic_name: str) -> Path:
        """Return the path currently backing a semantic name.

        The derived file is selected only when the view prefers it and
        names it; otherwise the raw pond file is returned. The path is not
        checked for existence.

        Args:
            semantic_name: Stable dataset identity.

        Returns:
            Joined path under the pond or derived directory.

        Raises:
            PondNotFoundError: If no view file exists.
            PondInvalidViewError: If the view lacks a non-empty raw filename.
        """
        view = self.load_view(semantic_name)
        if view.uses_derived:
            return self._config.parquet_dir / view.parquet
        return self._config.pond_dir / view.raw

    def load_view(self, semantic_name: str) -> ViewRecord:
        """Load a view, failing loudly when it is missing or invalid.

        Raises:
            PondNotFoundError: If no view file exists.
            PondInvalidViewError: If the view cannot be used for resolution.
        """
        if not self._views.exists(semantic_name):
            raise PondNotFoundError(
                f"No view found for '{semantic_name}' in {self._views.views_dir}. "
                "Ingest a raw file with this semantic name first."
            )
        view = self._views.read(semantic_name)
        if view is None:
            raise PondInvalidViewError(
                f"View '{semantic_name}' at {self._views.path_for(semantic_name)} "
                "is missing a non-empty raw field. Rebuild views from metadata."
            )
        return view


def resolve_current(semantic_name: str, config: PondConfig) -> Path:
    """Resolve a semantic name to its current concrete file path.

    Args:
        semantic_name: Stable dataset identity.
        config: Runtime configuration.

    Returns:
        Current backing file path.
    """
    return ViewResolver(config).resolve(semantic_name)
