"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path, records_fixture


def _lines(output: str, prefix: str) -> list[str]:
    return [line for line in output.splitlines() if line.startswith(prefix)]


def test_cli_load_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Load should print a summary line and exit 0 when all records succeed."""
    args = [
        "load",
        records_fixture("people.tsv"),
        "--output-dir",
        str(tmp_path / "out"),
        "--decoder",
        "tsv",
        "--encoder",
        "column-family",
    ]

    exit_code = main(args)
    summary = _lines(capsys.readouterr().out, "records=")

    assert exit_code == 0 and summary[0].startswith("records=3 pairs=3 failures=0")


def test_cli_load_reports_failed_records(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Failed records should be listed and produce exit code 1."""
    args = [
        "load",
        records_fixture("mixed.tsv"),
        "--output-dir",
        str(tmp_path / "out"),
        "--decoder",
        "tsv",
        "--encoder",
        "column-family",
    ]

    exit_code = main(args)
    failed = _lines(capsys.readouterr().out, "failed\t")

    assert exit_code == 1 and len(failed) == 1 and failed[0].split("\t")[1:3] == [
        f"{records_fixture('mixed.tsv')}:2",
        "GraphloadParseError",
    ]


def test_cli_load_uses_job_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Job file strategies and partitions should apply when flags are absent."""
    args = [
        "load",
        records_fixture("people.tsv"),
        "--output-dir",
        str(tmp_path / "out"),
        "--job-file",
        str(fixture_path("jobs/tsv_job.yaml")),
    ]

    exit_code = main(args)
    capsys.readouterr()
    manifest = json.loads((tmp_path / "out" / "manifest.json").read_text(encoding="utf-8"))

    assert exit_code == 0 and (manifest["encoder"], len(manifest["partitions"])) == (
        "salted-column-family",
        2,
    )


def test_cli_load_fails_fatally_without_strategies(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Missing strategy selection should print a diagnostic and write nothing."""
    args = ["load", records_fixture("people.tsv"), "--output-dir", str(tmp_path / "out")]

    exit_code = main(args)
    error_output = capsys.readouterr().err

    assert exit_code == 2 and "bulk_load.vertex_decoder" in error_output and not (tmp_path / "out").exists()


def test_cli_strategies_lists_registered_names(capsys: pytest.CaptureFixture[str]) -> None:
    """Strategies command should list decoders with kinds and encoders."""
    exit_code = main(["strategies"])
    output = capsys.readouterr().out

    assert exit_code == 0 and "decoder\tvertex-list\tbatch" in output and "encoder\tcolumn-family" in output


def test_cli_inspect_prints_stored_vertices(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Inspect should print one JSON vertex per stored pair."""
    output_dir = tmp_path / "out"
    main(["load", records_fixture("vertex_lists.lines"), "--output-dir", str(output_dir), "--decoder", "vertex-list", "--encoder", "column-family"])
    capsys.readouterr()

    exit_code = main(["inspect", str(output_dir)])
    vertices = [json.loads(line) for line in _lines(capsys.readouterr().out, '{"edges"')]

    assert exit_code == 0 and [vertex["id"] for vertex in vertices] == ["v1", "v2", "v3", "v4"]
