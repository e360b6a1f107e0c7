"""Public SDK surface for datapond.

This module provides a stable import path for pond users.
It re-exports the primary client, configuration, and typed records.
"""

from __future__ import annotations

from core.config import PondConfig
from core.errors import (
    PondError,
    PondInvalidViewError,
    PondNotFoundError,
    PondUnsupportedTypeError,
)
from core.naming import semantic_name, zip_prepend
from core.types import IngestReport, MetadataRecord, Provenance, ViewRecord
from store.pond_sdk import PondClient
from store.resolver import resolve_current

__all__ = [
    "IngestReport",
    "MetadataRecord",
    "PondClient",
    "PondConfig",
    "PondError",
    "PondInvalidViewError",
    "PondNotFoundError",
    "PondUnsupportedTypeError",
    "Provenance",
    "ViewRecord",
    "resolve_current",
    "semantic_name",
    "zip_prepend",
]
