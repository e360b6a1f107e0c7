"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import PondConfig
from core.errors import PondConfigError


def test_from_env_reads_project_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve project root from environment."""
    monkeypatch.setenv("POND_PROJECT_ROOT", "./.tmp-pond")

    config = PondConfig.from_env()

    assert config.project_root.name == ".tmp-pond" and config.project_root.is_absolute()


def test_layout_directories_hang_off_project_root(tmp_path) -> None:
    """Derived directories should follow the persisted layout."""
    config = PondConfig(project_root=tmp_path)

    relative = [
        path.relative_to(tmp_path).as_posix()
        for path in (
            config.inbox_dir,
            config.pond_dir,
            config.parquet_dir,
            config.meta_dir,
            config.views_dir,
        )
    ]

    assert relative == [
        "data_store/add_to_pond",
        "data_store/data_pond",
        "data_store/data_parquet",
        "data_index/meta",
        "data_index/views",
    ]


def test_from_env_raises_for_invalid_min_size(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric Parquet size threshold."""
    monkeypatch.setenv("POND_PARQUET_MIN_SIZE_MB", "large")

    with pytest.raises(PondConfigError):
        PondConfig.from_env()

    assert os.getenv("POND_PARQUET_MIN_SIZE_MB") == "large"


def test_from_env_raises_for_unknown_archive_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject archive prefix modes it does not know."""
    monkeypatch.setenv("POND_ARCHIVE_PREFIX", "random")

    with pytest.raises(PondConfigError):
        PondConfig.from_env()


def test_from_env_raises_for_non_positive_block_size(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject a zero conversion block size."""
    monkeypatch.setenv("POND_PARQUET_BLOCK_SIZE", "0")

    with pytest.raises(PondConfigError):
        PondConfig.from_env()
