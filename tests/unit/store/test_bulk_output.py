"""Unit tests for sorted, partitioned bulk-load files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.errors import GraphloadStoreError
from core.types import KeyedMutation, Mutation
from store.bulk_output import (
    read_bulk_load_files,
    sort_keyed_mutations,
    split_partitions,
    write_bulk_load_files,
)


def _pair(row_key: bytes, label: bytes = b"x") -> KeyedMutation:
    mutation = Mutation(row_key=row_key).add_cell("m", b"label", label)
    return KeyedMutation(row_key=row_key, mutation=mutation)


def test_sort_keyed_mutations_orders_by_row_key() -> None:
    """Pairs should be ordered by row key bytes."""
    pairs = [_pair(b"c"), _pair(b"a"), _pair(b"b")]

    ordered = sort_keyed_mutations(pairs)

    assert [pair.row_key for pair in ordered] == [b"a", b"b", b"c"]


def test_sort_keyed_mutations_keeps_emission_order_for_ties() -> None:
    """Pairs sharing a row key should keep their emission order."""
    pairs = [_pair(b"k", b"first"), _pair(b"a"), _pair(b"k", b"second")]

    ordered = sort_keyed_mutations(pairs)

    assert [pair.mutation.cells[("m", b"label")] for pair in ordered[1:]] == [b"first", b"second"]


def test_split_partitions_produces_contiguous_ranges() -> None:
    """Partitions should be near-equal contiguous slices."""
    pairs = [_pair(key) for key in (b"a", b"b", b"c", b"d", b"e")]

    partitions = split_partitions(pairs, 2)

    assert [[pair.row_key for pair in part] for part in partitions] == [[b"a", b"b"], [b"c", b"d", b"e"]]


def test_split_partitions_keeps_equal_keys_together() -> None:
    """A boundary should never separate pairs sharing a row key."""
    pairs = [_pair(key) for key in (b"a", b"b", b"b", b"b")]

    partitions = split_partitions(pairs, 2)

    assert [len(part) for part in partitions] == [1, 3]


def test_split_partitions_allows_empty_partitions() -> None:
    """More partitions than pairs should yield empty trailing ranges."""
    partitions = split_partitions([_pair(b"a")], 3)

    assert [len(part) for part in partitions] == [0, 0, 1]


def test_split_partitions_rejects_non_positive_count() -> None:
    """Partition count must be at least one."""
    with pytest.raises(GraphloadStoreError):
        split_partitions([], 0)

    assert True


def test_write_and_read_bulk_load_files_preserve_pairs(tmp_path: Path) -> None:
    """Reading written files should return every pair in key order."""
    pairs = [_pair(b"b"), _pair(b"a"), _pair(b"b", b"again")]
    write_bulk_load_files(tmp_path, pairs, 2, {"decoder": "tsv"})

    restored = read_bulk_load_files(tmp_path)

    assert [(pair.row_key, pair.mutation.cells) for pair in restored] == [
        (b"a", {("m", b"label"): b"x"}),
        (b"b", {("m", b"label"): b"x"}),
        (b"b", {("m", b"label"): b"again"}),
    ]


def test_write_bulk_load_files_records_key_ranges(tmp_path: Path) -> None:
    """Manifest should describe each partition key range in hex."""
    _, manifest_path = write_bulk_load_files(tmp_path, [_pair(b"a"), _pair(b"z")], 2, {"encoder": "e"})

    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))

    assert [(entry["first_row_key"], entry["last_row_key"]) for entry in manifest["partitions"]] == [
        ("61", "61"),
        ("7a", "7a"),
    ]


def test_read_bulk_load_files_requires_manifest(tmp_path: Path) -> None:
    """Directories without a manifest are not bulk-load output."""
    with pytest.raises(GraphloadStoreError, match="manifest"):
        read_bulk_load_files(tmp_path)

    assert True


def test_read_bulk_load_files_reports_missing_part(tmp_path: Path) -> None:
    """A part file listed in the manifest must exist."""
    part_paths, _ = write_bulk_load_files(tmp_path, [_pair(b"a")], 1, {})
    part_paths[0].unlink()

    with pytest.raises(GraphloadStoreError, match="missing"):
        read_bulk_load_files(tmp_path)

    assert True
