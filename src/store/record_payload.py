"""Shared YAML serialization for view and metadata records.

This module centralizes record payload mapping and YAML file IO.
It is reused by the view store, metadata store, and view rebuild flows.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping

import yaml

from core.constants import RAW_REPRESENTATION, TIMESTAMP_FORMAT
from core.errors import PondInvalidArgumentError, PondInvalidViewError, PondIOError
from core.types import MetadataRecord, Provenance, ViewRecord


def view_to_payload(view: ViewRecord) -> dict[str, object]:
    """Serialize a view into an ordered payload without empty fields.

    Args:
        view: View record.

    Returns:
        Mapping in view file field order; absent or empty values omitted.
    """
    payload: dict[str, object] = {
        "semantic_name": view.semantic_name,
        "preferred": view.preferred,
        "raw": view.raw,
        "parquet": view.parquet,
        "meta_file": view.meta_file,
        "sha256": view.sha256,
        "updated": view.updated,
    }
    return {key: value for key, value in payload.items() if value not in (None, "")}


def view_from_payload(payload: Mapping[str, Any]) -> ViewRecord:
    """Deserialize a view payload.

    Args:
        payload: Parsed YAML mapping.

    Returns:
        Typed view record.

    Raises:
        PondInvalidViewError: If ``semantic_name`` or ``raw`` is missing.
    """
    semantic = _optional_text(payload.get("semantic_name"))
    raw = _optional_text(payload.get("raw"))
    if not semantic or not raw:
        raise PondInvalidViewError(
            "View record is missing a non-empty "
            f"{'raw' if semantic else 'semantic_name'} field."
        )
    return ViewRecord(
        semantic_name=semantic,
        preferred=_optional_text(payload.get("preferred")) or RAW_REPRESENTATION,
        raw=raw,
        parquet=_optional_text(payload.get("parquet")),
        meta_file=_optional_text(payload.get("meta_file")),
        sha256=_optional_text(payload.get("sha256")),
        updated=_optional_text(payload.get("updated")),
    )


def metadata_to_payload(record: MetadataRecord) -> dict[str, object]:
    """Serialize a metadata record into an ordered payload.

    ``n_rows`` and ``provenance`` are kept as explicit nulls.
    """
    provenance: dict[str, str] | None = None
    if record.provenance is not None:
        provenance = {
            "source_archive": record.provenance.source_archive,
            "original_file": record.provenance.original_file,
        }
    return {
        "file": record.file,
        "sha256": record.sha256,
        "size_bytes": record.size_bytes,
        "n_rows": record.n_rows,
        "n_cols": record.n_cols,
        "col_names": list(record.col_names),
        "col_types": list(record.col_types),
        "semantic_name": record.semantic_name,
        "provenance": provenance,
        "created": record.created,
    }


def metadata_from_payload(payload: Mapping[str, Any]) -> MetadataRecord:
    """Deserialize a metadata payload.

    Args:
        payload: Parsed YAML mapping.

    Returns:
        Typed metadata record.

    Raises:
        PondInvalidArgumentError: If the raw ``file`` field is missing.
    """
    file_name = _optional_text(payload.get("file"))
    if not file_name:
        raise PondInvalidArgumentError(
            "Metadata record is missing the backing raw filename ('file')."
        )
    col_names = tuple(str(name) for name in payload.get("col_names") or ())
    col_types = tuple(str(kind) for kind in payload.get("col_types") or ())
    n_rows = payload.get("n_rows")
    return MetadataRecord(
        file=file_name,
        sha256=_optional_text(payload.get("sha256")) or "",
        size_bytes=int(payload.get("size_bytes") or 0),
        n_rows=int(n_rows) if n_rows is not None else None,
        n_cols=int(payload.get("n_cols") or len(col_names)),
        col_names=col_names,
        col_types=col_types,
        created=_optional_text(payload.get("created")) or "",
        semantic_name=_optional_text(payload.get("semantic_name")) or "",
        provenance=_provenance_from_payload(payload.get("provenance")),
    )


def read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML file whose top level must be a mapping.

    Args:
        path: YAML file path.

    Returns:
        Parsed mapping.

    Raises:
        PondIOError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as error:
        raise PondIOError(f"Failed to read record at {path}: {error}.") from error
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as error:
        raise PondIOError(
            f"Failed to parse record at {path}: {error}. Fix or regenerate the record."
        ) from error
    if not isinstance(payload, dict):
        raise PondIOError(
            f"Failed to parse record at {path}: expected a YAML mapping at top level."
        )
    return payload


def write_yaml_mapping(path: Path, payload: Mapping[str, object]) -> None:
    """Write a mapping as block-style YAML preserving key order.

    Raises:
        PondIOError: If the file cannot be written.
    """
    body = yaml.safe_dump(
        dict(payload),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as error:
        raise PondIOError(
            f"Failed to write record at {path}: {error}. "
            "Check write permissions and available disk space."
        ) from error


def _provenance_from_payload(value: object) -> Provenance | None:
    if not isinstance(value, dict):
        return None
    return Provenance(
        source_archive=_optional_text(value.get("source_archive")) or "",
        original_file=_optional_text(value.get("original_file")) or "",
    )


def _optional_text(value: object) -> str | None:
    """Coerce a YAML scalar to text, mapping null and empty to None.

    Unquoted timestamps load as datetime objects and are re-rendered.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    text = str(value)
    return text or None
