"""Unit tests for the local bulk load driver."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import GraphloadConfig
from core.constants import VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY
from core.errors import GraphloadConfigError, GraphloadIngestError
from core.types import BulkLoadOptions
from ingest.pipeline import build_strategy_settings, run_bulk_load
from tests.fixture_paths import records_fixture


def _config(tmp_path: Path, decoder: str | None = None) -> GraphloadConfig:
    return GraphloadConfig(
        output_root=tmp_path,
        s3_region=None,
        s3_profile=None,
        vertex_decoder=decoder,
        vertex_encoder="column-family",
    )


def _options(tmp_path: Path, source: str, **overrides: object) -> BulkLoadOptions:
    fields: dict[str, object] = {
        "source_uri": source,
        "output_dir": str(tmp_path / "out"),
        "vertex_decoder": "tsv",
    }
    fields.update(overrides)
    return BulkLoadOptions(**fields)  # type: ignore[arg-type]


def test_run_bulk_load_reports_failures_and_continues(tmp_path: Path) -> None:
    """A malformed record should be reported while other records load."""
    result = run_bulk_load(_options(tmp_path, records_fixture("mixed.tsv")), _config(tmp_path))

    assert (result.record_count, result.pair_count, result.failures[0].record_index) == (3, 2, 2)


def test_run_bulk_load_failure_names_error_type(tmp_path: Path) -> None:
    """Failure reports should carry the error class name."""
    result = run_bulk_load(_options(tmp_path, records_fixture("mixed.tsv")), _config(tmp_path))

    assert result.failures[0].error_type == "GraphloadParseError"


def test_run_bulk_load_writes_requested_partitions(tmp_path: Path) -> None:
    """Output should contain one part file per requested partition."""
    options = _options(tmp_path, records_fixture("people.tsv"), partitions=2)

    result = run_bulk_load(options, _config(tmp_path))

    assert len(result.part_files) == 2 and Path(result.manifest_path).exists()


def test_run_bulk_load_aborts_when_failure_budget_exceeded(tmp_path: Path) -> None:
    """Exceeding max_failures should abort without writing output."""
    options = _options(tmp_path, records_fixture("mixed.tsv"), max_failures=0)

    with pytest.raises(GraphloadIngestError, match="max_failures"):
        run_bulk_load(options, _config(tmp_path))

    assert not (tmp_path / "out").exists()


def test_run_bulk_load_fails_fatally_without_decoder(tmp_path: Path) -> None:
    """Missing strategy selection should stop the run before any output."""
    options = _options(tmp_path, records_fixture("people.tsv"), vertex_decoder=None)

    with pytest.raises(GraphloadConfigError):
        run_bulk_load(options, _config(tmp_path))

    assert not (tmp_path / "out").exists()


def test_run_bulk_load_rejects_zero_partitions(tmp_path: Path) -> None:
    """Partition count must be positive."""
    options = _options(tmp_path, records_fixture("people.tsv"), partitions=0)

    with pytest.raises(GraphloadConfigError):
        run_bulk_load(options, _config(tmp_path))

    assert not (tmp_path / "out").exists()


def test_build_strategy_settings_prefers_options_over_settings(tmp_path: Path) -> None:
    """Explicit options should win over job settings and environment."""
    options = _options(tmp_path, "unused", vertex_decoder="jsonl")
    job_settings = {VERTEX_DECODER_KEY: "vertex-list", VERTEX_ENCODER_KEY: "salted-column-family"}

    merged = build_strategy_settings(options, _config(tmp_path, decoder="adjacency"), job_settings)

    assert merged == {
        VERTEX_DECODER_KEY: "jsonl",
        VERTEX_ENCODER_KEY: "salted-column-family",
    }


def test_run_bulk_load_isolates_encoding_failures(tmp_path: Path) -> None:
    """A record that cannot be encoded should fail alone while later records load."""
    options = _options(tmp_path, records_fixture("unencodable.jsonl"), vertex_decoder="jsonl")

    result = run_bulk_load(options, _config(tmp_path))

    assert (result.pair_count, result.failure_count) == (2, 1) and (
        result.failures[0].record_index,
        result.failures[0].error_type,
    ) == (2, "GraphloadEncodingError")
