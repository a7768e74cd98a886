"""Shared typed models.

This module defines the vertex interchange model, store mutations,
and the option/result models used by the stage, driver, and CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

from core.constants import DEFAULT_PARTITION_COUNT

PropertyValue = str | int | float | bool
RowKey = bytes
DecoderKind = Literal["single", "batch"]


@dataclass(frozen=True)
class Vertex:
    """In-memory graph vertex passed from decoders to encoders.

    Attributes:
        vertex_id: Identity unique within the load job. ``None`` or an empty
            string marks an invalid vertex that must not be encoded.
        label: Vertex category.
        properties: Property name to typed value mapping.
        outgoing_edges: Target vertex ids of outgoing edges, in input order.

    Vertices compare by value but are not hashable, since ``properties``
    is a plain mapping.
    """

    vertex_id: str | None
    label: str
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    outgoing_edges: tuple[str, ...] = ()

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class SourceRecord:
    """One raw input record handed to the stage.

    Attributes:
        record_index: One-based position of the record within its source.
        text: Raw record text.
        source_uri: Path or URI the record was read from.
    """

    record_index: int
    text: str
    source_uri: str = ""


@dataclass
class Mutation:
    """Write operation targeted at one row key.

    Cells are keyed by ``(family, qualifier)``; a later write to the same
    cell replaces the earlier value.
    """

    row_key: RowKey
    cells: dict[tuple[str, bytes], bytes] = field(default_factory=dict)

    def add_cell(self, family: str, qualifier: bytes, value: bytes) -> "Mutation":
        """Set one cell value and return the mutation for chaining."""
        self.cells[(family, qualifier)] = value
        return self

    def family_cells(self, family: str) -> dict[bytes, bytes]:
        """Return qualifier -> value for one column family."""
        return {
            qualifier: value
            for (cell_family, qualifier), value in self.cells.items()
            if cell_family == family
        }

    def is_empty(self) -> bool:
        """Return whether the mutation carries no cells."""
        return not self.cells


@dataclass(frozen=True)
class KeyedMutation:
    """One emitted output pair."""

    row_key: RowKey
    mutation: Mutation


@dataclass(frozen=True)
class RecordFailure:
    """Per-record failure report.

    Attributes:
        source_uri: Source the failing record came from.
        record_index: One-based record position within its source.
        error_type: Exception class name.
        message: Human-readable failure description.
    """

    source_uri: str
    record_index: int
    error_type: str
    message: str


@dataclass(frozen=True)
class BulkLoadOptions:
    """Bulk load run options.

    Attributes:
        source_uri: Input file path, directory, or S3 URI.
        output_dir: Local directory receiving bulk-load files.
        vertex_decoder: Optional decoder name overriding config.
        vertex_encoder: Optional encoder name overriding config.
        partitions: Number of contiguous row-key partitions to write.
        max_failures: Optional failed-record budget; exceeding it aborts.
    """

    source_uri: str
    output_dir: str
    vertex_decoder: str | None = None
    vertex_encoder: str | None = None
    partitions: int = DEFAULT_PARTITION_COUNT
    max_failures: int | None = None


@dataclass(frozen=True)
class BulkLoadResult:
    """Bulk load run summary.

    Attributes:
        record_count: Number of records read from the source.
        pair_count: Number of (row key, mutation) pairs written.
        failures: Per-record failures in input order.
        part_files: Written bulk-load file paths in key order.
        manifest_path: Written manifest path.
    """

    record_count: int
    pair_count: int
    failures: tuple[RecordFailure, ...]
    part_files: tuple[str, ...]
    manifest_path: str

    @property
    def failure_count(self) -> int:
        """Return number of failed records."""
        return len(self.failures)
