"""Unit tests for pond ingestion orchestration."""

from __future__ import annotations

from pathlib import Path
import zipfile

import pytest
import yaml

from core.config import PondConfig
from core.errors import PondIOError, PondUnsupportedTypeError
from ingest import pipeline
from ingest.pipeline import IngestPipelineRunner, classify_path, ingest_inbox


def _drop(config: PondConfig, name: str, body: bytes = b"a,b\n1,2\n") -> Path:
    config.inbox_dir.mkdir(parents=True, exist_ok=True)
    path = config.inbox_dir / name
    path.write_bytes(body)
    return path


def _read_yaml(path: Path) -> dict:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def info(self, event: str, **fields: object) -> None:
        self.events.append(("info", event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self.events.append(("warning", event, fields))


def test_ingest_single_csv_writes_pond_meta_and_view(tmp_path: Path) -> None:
    """A CSV in the inbox should land in the pond with metadata and a view."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "RTRA3605542_agenaics.csv")

    report = ingest_inbox(config)

    view = _read_yaml(config.views_dir / "agenaics.csv.yml")
    meta = _read_yaml(config.meta_dir / "RTRA3605542_agenaics.csv.yml")
    assert [item.raw_filename for item in report.ingested] == ["RTRA3605542_agenaics.csv"]
    assert (config.pond_dir / "RTRA3605542_agenaics.csv").is_file()
    assert not (config.inbox_dir / "RTRA3605542_agenaics.csv").exists()
    assert (view["preferred"], view["raw"], view["meta_file"], view["sha256"]) == (
        "raw",
        "RTRA3605542_agenaics.csv",
        "RTRA3605542_agenaics.csv.yml",
        meta["sha256"],
    )
    assert meta["provenance"] is None and meta["n_rows"] is None


def test_second_version_repoints_view_and_keeps_both_files(tmp_path: Path) -> None:
    """A newer raw version should update the view without removing the old file."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "2021_census_industry.csv", b"a\n1\n")
    ingest_inbox(config)
    _drop(config, "2021v2_census_industry.csv", b"a\n2\n")

    ingest_inbox(config)

    view = _read_yaml(config.views_dir / "census_industry.csv.yml")
    assert (config.pond_dir / "2021_census_industry.csv").is_file()
    assert (config.pond_dir / "2021v2_census_industry.csv").is_file()
    assert view["raw"] == "2021v2_census_industry.csv"


def test_archive_members_get_prefixed_names_and_provenance(tmp_path: Path) -> None:
    """Archive members should be renamed with the archive prefix and traced."""
    config = PondConfig(project_root=tmp_path)
    config.inbox_dir.mkdir(parents=True)
    archive_path = config.inbox_dir / "statcan_12345_20250101_120000.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("data.csv", "REF_DATE,VALUE\n2020,1\n")

    report = ingest_inbox(config)

    pond_name = "statcan_12345_20250101_120000_data.csv"
    meta = _read_yaml(config.meta_dir / f"{pond_name}.yml")
    assert [item.raw_filename for item in report.ingested] == [pond_name]
    assert (config.pond_dir / pond_name).is_file()
    assert meta["provenance"] == {
        "source_archive": "statcan_12345_20250101_120000.zip",
        "original_file": "data.csv",
    }
    assert archive_path.exists() is False


def test_archive_source_prefix_mode_uses_zip_prepend(tmp_path: Path) -> None:
    """Source prefix mode should name members after the archive source."""
    config = PondConfig(project_root=tmp_path, archive_prefix_mode="source")
    config.inbox_dir.mkdir(parents=True)
    with zipfile.ZipFile(config.inbox_dir / "statcan_12345_20250101_120000.zip", "w") as archive:
        archive.writestr("tables/12345.csv", "a,b\n")

    report = ingest_inbox(config)

    assert [(item.raw_filename, item.semantic_name) for item in report.ingested] == [
        ("statcan_12345.csv", "12345.csv")
    ]


def test_reextracting_same_archive_is_idempotent(tmp_path: Path) -> None:
    """Ingesting the same archive twice should overwrite its members in place."""
    config = PondConfig(project_root=tmp_path)
    config.inbox_dir.mkdir(parents=True)
    for _ in range(2):
        with zipfile.ZipFile(config.inbox_dir / "bundle_1.zip", "w") as archive:
            archive.writestr("data.csv", "a,b\n")
        ingest_inbox(config)

    assert sorted(path.name for path in config.pond_dir.iterdir()) == ["bundle_1_data.csv"]


def test_batch_skips_unsupported_file_and_ingests_rest(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """One unsupported file should be skipped while the others are ingested."""
    config = PondConfig(project_root=tmp_path)
    recorder = _RecordingLogger()
    monkeypatch.setattr(pipeline, "_LOGGER", recorder)
    for name in ("v1_alpha.csv", "v1_beta.csv", "v1_gamma.csv", "v1_delta.csv", "v1_notes.txt"):
        _drop(config, name)

    report = ingest_inbox(config)

    assert len(report.ingested) == 4 and len(report.skipped) == 1
    assert (config.inbox_dir / "v1_notes.txt").is_file()
    skips = [
        (level, fields["file"])
        for level, event, fields in recorder.events
        if event == "inbox_item_skipped"
    ]
    assert skips == [("warning", "v1_notes.txt")]


def test_filename_without_separator_is_skipped(tmp_path: Path) -> None:
    """Raw filenames without a separator should be left in the inbox."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "census.csv")

    report = ingest_inbox(config)

    assert report.ingested == () and (config.inbox_dir / "census.csv").is_file()


def test_unreadable_spreadsheet_is_skipped_without_entering_pond(tmp_path: Path) -> None:
    """A broken workbook should stay in the inbox while later files are ingested."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "v1_a_broken.xlsx", b"not a workbook")
    _drop(config, "v1_b_good.csv")

    report = ingest_inbox(config)

    assert [item.raw_filename for item in report.ingested] == ["v1_b_good.csv"]
    assert [Path(item.path).name for item in report.skipped] == ["v1_a_broken.xlsx"]
    assert (config.inbox_dir / "v1_a_broken.xlsx").is_file()
    assert sorted(path.name for path in config.pond_dir.iterdir()) == ["v1_b_good.csv"]
    assert sorted(path.name for path in config.meta_dir.iterdir()) == ["v1_b_good.csv.yml"]


def test_archive_with_unreadable_member_stays_in_inbox(tmp_path: Path) -> None:
    """An archive holding a broken workbook should be kept for another attempt."""
    config = PondConfig(project_root=tmp_path)
    config.inbox_dir.mkdir(parents=True)
    archive_path = config.inbox_dir / "bundle_1.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("good.csv", "a,b\n")
        archive.writestr("broken.xlsx", "not a workbook")

    report = ingest_inbox(config)

    assert [Path(item.path).name for item in report.skipped] == ["bundle_1.zip"]
    assert archive_path.is_file()
    assert sorted(path.name for path in config.pond_dir.iterdir()) == ["bundle_1_good.csv"]
    assert sorted(path.name for path in config.meta_dir.iterdir()) == ["bundle_1_good.csv.yml"]


def test_corrupt_archive_fails_the_run(tmp_path: Path) -> None:
    """Archive extraction failures should propagate."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "bundle_1.zip", b"definitely not a zip")

    with pytest.raises(PondIOError):
        ingest_inbox(config)

    assert (config.inbox_dir / "bundle_1.zip").is_file()


def test_classify_path_rejects_unknown_extension() -> None:
    """Classification should raise for unrecognized extensions."""
    with pytest.raises(PondUnsupportedTypeError):
        classify_path(Path("v1_image.png"))


def test_reingesting_pond_file_is_harmless(tmp_path: Path) -> None:
    """Re-describing a pond-resident file should leave the same view pointer."""
    config = PondConfig(project_root=tmp_path)
    _drop(config, "2021_a.csv")
    ingest_inbox(config)
    runner = IngestPipelineRunner(config)

    result = runner.ingest_pond_file(config.pond_dir / "2021_a.csv")

    view = _read_yaml(config.views_dir / "a.csv.yml")
    assert result.raw_filename == view["raw"] == "2021_a.csv"
    assert (config.pond_dir / "2021_a.csv").is_file()
