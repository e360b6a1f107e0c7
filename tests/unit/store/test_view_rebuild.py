"""Unit tests for view regeneration from metadata."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import PondConfig
from core.errors import PondNotFoundError
from store.view_rebuild import rebuild_all
from store.view_store import ViewStore


def _write_meta(config: PondConfig, raw_filename: str, created: str, sha256: str = "abc") -> None:
    config.meta_dir.mkdir(parents=True, exist_ok=True)
    semantic = raw_filename.split("_", 1)[1]
    (config.meta_dir / f"{raw_filename}.yml").write_text(
        f"file: {raw_filename}\n"
        f"sha256: {sha256}\n"
        "size_bytes: 10\n"
        "n_rows: null\n"
        "n_cols: 0\n"
        "col_names: []\n"
        "col_types: []\n"
        f"semantic_name: {semantic}\n"
        "provenance: null\n"
        f"created: '{created}'\n",
        encoding="utf-8",
    )


def _rebuild(config: PondConfig) -> int:
    return rebuild_all(config.meta_dir, config.pond_dir, config.parquet_dir, config.views_dir)


def test_rebuild_without_metadata_raises(tmp_path: Path) -> None:
    """Rebuilding with an empty index should fail."""
    config = PondConfig(project_root=tmp_path)

    with pytest.raises(PondNotFoundError):
        _rebuild(config)


def test_rebuild_prefers_parquet_when_derived_file_exists(tmp_path: Path) -> None:
    """Views should prefer parquet iff the conventional derived file exists."""
    config = PondConfig(project_root=tmp_path)
    _write_meta(config, "2021_big.csv", "2021-01-01 00:00:00")
    _write_meta(config, "2021_small.csv", "2021-01-01 00:00:00")
    config.parquet_dir.mkdir(parents=True)
    (config.parquet_dir / "2021_big.parquet").write_bytes(b"PAR1")

    count = _rebuild(config)

    store = ViewStore(config.views_dir)
    big, small = store.read("big.csv"), store.read("small.csv")
    assert count == 2 and big is not None and small is not None
    assert (big.preferred, big.parquet, big.meta_file) == (
        "parquet",
        "2021_big.parquet",
        "2021_big.csv.yml",
    )
    assert (small.preferred, small.parquet) == ("raw", None)


def test_rebuild_ignores_existing_views(tmp_path: Path) -> None:
    """Existing view content should not be merged into rebuilt views."""
    config = PondConfig(project_root=tmp_path)
    _write_meta(config, "2021_a.csv", "2021-01-01 00:00:00")
    ViewStore(config.views_dir).write(
        "a.csv", raw="2021_a.csv", preferred="parquet", parquet="2021_a.parquet"
    )

    _rebuild(config)

    view = ViewStore(config.views_dir).read("a.csv")
    assert view is not None and (view.preferred, view.parquet) == ("raw", None)


def test_rebuild_points_view_at_newest_version(tmp_path: Path) -> None:
    """The most recently created raw version should back the view."""
    config = PondConfig(project_root=tmp_path)
    _write_meta(config, "2022_census.csv", "2022-06-01 00:00:00", sha256="new")
    _write_meta(config, "2021_census.csv", "2021-06-01 00:00:00", sha256="old")

    _rebuild(config)

    view = ViewStore(config.views_dir).read("census.csv")
    assert view is not None and (view.raw, view.sha256) == ("2022_census.csv", "new")


def test_rebuild_skips_malformed_records(tmp_path: Path) -> None:
    """Records without a raw filename should be skipped, not fatal."""
    config = PondConfig(project_root=tmp_path)
    _write_meta(config, "2021_a.csv", "2021-01-01 00:00:00")
    (config.meta_dir / "broken.yml").write_text("sha256: abc\n", encoding="utf-8")

    count = _rebuild(config)

    assert count == 1 and ViewStore(config.views_dir).list_names() == ["a.csv"]


def test_rebuild_orders_same_second_records_by_fraction(tmp_path: Path) -> None:
    """Sub-second creation times should decide the newest version."""
    config = PondConfig(project_root=tmp_path)
    _write_meta(config, "v9_x.csv", "2025-01-01 12:00:00.100000", sha256="older")
    _write_meta(config, "v10_x.csv", "2025-01-01 12:00:00.200000", sha256="newer")

    _rebuild(config)

    view = ViewStore(config.views_dir).read("x.csv")
    assert view is not None and (view.raw, view.sha256) == ("v10_x.csv", "newer")
