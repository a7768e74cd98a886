"""Sorted, partitioned bulk-load files.

This module orders emitted (row key, mutation) pairs by row key, splits
them into contiguous key ranges, and persists one Parquet file per
range with one row per cell. A JSON manifest records the key range of
each file so a store can assign files to regions without scanning them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import pyarrow as pa
import pyarrow.parquet as pq

from core.constants import BULK_LOAD_MANIFEST_FILE_NAME, BULK_LOAD_PART_FILE_TEMPLATE
from core.errors import GraphloadStoreError
from core.logging_config import get_logger
from core.types import KeyedMutation, Mutation

_LOGGER = get_logger(__name__)

_CELL_SCHEMA = pa.schema(
    [
        ("pair_index", pa.int64()),
        ("row_key", pa.binary()),
        ("family", pa.string()),
        ("qualifier", pa.binary()),
        ("value", pa.binary()),
    ]
)


def sort_keyed_mutations(pairs: Iterable[KeyedMutation]) -> list[KeyedMutation]:
    """Return pairs ordered by row key, keeping emission order for ties."""
    return sorted(pairs, key=lambda pair: pair.row_key)


def split_partitions(
    pairs: list[KeyedMutation],
    partitions: int,
) -> list[list[KeyedMutation]]:
    """Split sorted pairs into contiguous, near-equal key ranges.

    Pairs sharing a row key always land in the same partition, so a
    partition may be empty when keys repeat or pairs are scarce.

    Args:
        pairs: Pairs sorted by row key.
        partitions: Number of partitions to produce.

    Returns:
        Exactly ``partitions`` lists in key order.

    Raises:
        GraphloadStoreError: If ``partitions`` is less than one.
    """
    if partitions < 1:
        raise GraphloadStoreError(
            f"Invalid partition count {partitions}: expected at least 1."
        )
    boundaries = [0]
    for index in range(1, partitions):
        boundary = index * len(pairs) // partitions
        # Pull the cut back to the start of a run of equal row keys.
        while boundary > boundaries[-1] and pairs[boundary - 1].row_key == pairs[boundary].row_key:
            boundary -= 1
        boundaries.append(max(boundary, boundaries[-1]))
    boundaries.append(len(pairs))
    return [pairs[start:end] for start, end in zip(boundaries, boundaries[1:])]


def write_bulk_load_files(
    output_dir: Path,
    pairs: Iterable[KeyedMutation],
    partitions: int,
    manifest_fields: Mapping[str, object],
) -> tuple[list[Path], Path]:
    """Sort, partition, and persist pairs as Parquet bulk-load files.

    Args:
        output_dir: Destination directory, created when missing.
        pairs: Emitted pairs in emission order.
        partitions: Number of key-range partitions.
        manifest_fields: Extra run metadata stored in the manifest.

    Returns:
        Written part file paths in key order and the manifest path.

    Raises:
        GraphloadStoreError: If partitioning or persistence fails.
    """
    sorted_pairs = sort_keyed_mutations(pairs)
    partition_rows = split_partitions(sorted_pairs, partitions)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise GraphloadStoreError(
            f"Failed to create output directory {output_dir}: {error}. "
            "Check write permissions."
        ) from error
    part_paths: list[Path] = []
    partition_entries: list[dict[str, object]] = []
    pair_offset = 0
    for index, partition in enumerate(partition_rows):
        part_path = output_dir / BULK_LOAD_PART_FILE_TEMPLATE.format(index=index)
        _write_part_file(part_path, partition, pair_offset)
        part_paths.append(part_path)
        partition_entries.append(_partition_entry(part_path, partition))
        pair_offset += len(partition)
    manifest_path = output_dir / BULK_LOAD_MANIFEST_FILE_NAME
    manifest = {
        **manifest_fields,
        "pair_count": len(sorted_pairs),
        "partitions": partition_entries,
    }
    _write_manifest(manifest_path, manifest)
    _LOGGER.info(
        "bulk_load_files_written",
        output_dir=str(output_dir),
        partition_count=len(part_paths),
        pair_count=len(sorted_pairs),
    )
    return part_paths, manifest_path


def read_bulk_load_files(output_dir: Path) -> list[KeyedMutation]:
    """Read bulk-load files back into pairs in key order.

    Args:
        output_dir: Directory written by ``write_bulk_load_files``.

    Returns:
        Pairs regrouped from their cells.

    Raises:
        GraphloadStoreError: If the manifest or a part file is missing or invalid.
    """
    manifest = read_manifest(output_dir)
    pairs: list[KeyedMutation] = []
    for entry in manifest.get("partitions", []):
        part_path = output_dir / str(entry["file"])
        pairs.extend(_read_part_file(part_path))
    return pairs


def read_manifest(output_dir: Path) -> dict[str, Any]:
    """Load the bulk-load manifest from an output directory.

    Raises:
        GraphloadStoreError: If the manifest is missing or invalid.
    """
    manifest_path = output_dir / BULK_LOAD_MANIFEST_FILE_NAME
    if not manifest_path.exists():
        raise GraphloadStoreError(
            f"Bulk-load manifest not found at {manifest_path}. "
            "Point to a directory written by 'graphload load'."
        )
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise GraphloadStoreError(
            f"Failed to read bulk-load manifest at {manifest_path}: {error}."
        ) from error
    if not isinstance(payload, dict):
        raise GraphloadStoreError(
            f"Invalid bulk-load manifest at {manifest_path}: expected a JSON object."
        )
    return payload


def _write_part_file(part_path: Path, partition: list[KeyedMutation], pair_offset: int) -> None:
    rows: dict[str, list[object]] = {name: [] for name in _CELL_SCHEMA.names}
    for pair_index, pair in enumerate(partition, pair_offset):
        for (family, qualifier), value in sorted(pair.mutation.cells.items()):
            rows["pair_index"].append(pair_index)
            rows["row_key"].append(pair.row_key)
            rows["family"].append(family)
            rows["qualifier"].append(qualifier)
            rows["value"].append(value)
    table = pa.table(rows, schema=_CELL_SCHEMA)
    try:
        pq.write_table(table, str(part_path))
    except (OSError, pa.ArrowException) as error:
        raise GraphloadStoreError(
            f"Failed to write bulk-load file {part_path}: {error}. "
            "Check write permissions and available disk space."
        ) from error


def _read_part_file(part_path: Path) -> list[KeyedMutation]:
    if not part_path.exists():
        raise GraphloadStoreError(
            f"Bulk-load file {part_path} listed in the manifest is missing."
        )
    try:
        rows = pq.read_table(str(part_path)).to_pylist()
    except (OSError, pa.ArrowException) as error:
        raise GraphloadStoreError(
            f"Failed to read bulk-load file {part_path}: {error}."
        ) from error
    pairs: list[KeyedMutation] = []
    current_index: int | None = None
    for row in rows:
        if row["pair_index"] != current_index:
            current_index = row["pair_index"]
            pairs.append(KeyedMutation(row_key=row["row_key"], mutation=Mutation(row["row_key"])))
        pairs[-1].mutation.add_cell(row["family"], row["qualifier"], row["value"])
    return pairs


def _partition_entry(part_path: Path, partition: list[KeyedMutation]) -> dict[str, object]:
    return {
        "file": part_path.name,
        "pair_count": len(partition),
        "first_row_key": partition[0].row_key.hex() if partition else None,
        "last_row_key": partition[-1].row_key.hex() if partition else None,
    }


def _write_manifest(manifest_path: Path, manifest: Mapping[str, object]) -> None:
    try:
        manifest_path.write_text(json.dumps(manifest, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as error:
        raise GraphloadStoreError(
            f"Failed to write bulk-load manifest at {manifest_path}: {error}."
        ) from error
