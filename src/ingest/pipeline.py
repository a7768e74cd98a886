"""Local bulk load driver.

This module plays the execution engine for single-process runs: it
resolves strategies, feeds every source record through the stage,
reports per-record failures, and hands the emitted pairs to the
bulk-load file writer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from core.config import GraphloadConfig
from core.constants import VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY
from core.errors import (
    GraphloadConfigError,
    GraphloadEncodingError,
    GraphloadIngestError,
    GraphloadParseError,
)
from core.logging_config import get_logger
from core.types import (
    BulkLoadOptions,
    BulkLoadResult,
    KeyedMutation,
    Mutation,
    RecordFailure,
    RowKey,
    SourceRecord,
)
from ingest.bulk_load_stage import BulkLoadStage
from ingest.input_reader import read_source_records
from store.bulk_output import write_bulk_load_files

_LOGGER = get_logger(__name__)


class BulkLoadRunner:
    """Single-process runner for one bulk load job."""

    def __init__(
        self,
        options: BulkLoadOptions,
        config: GraphloadConfig,
        settings: Mapping[str, object] | None = None,
    ) -> None:
        _validate_options(options)
        self._options = options
        self._config = config
        merged_settings = build_strategy_settings(options, config, settings)
        self._stage = BulkLoadStage.from_settings(merged_settings)

    def run(self) -> BulkLoadResult:
        """Execute the bulk load and return its summary.

        Raises:
            GraphloadIngestError: If the source cannot be read or the
                failure budget is exceeded.
            GraphloadStoreError: If bulk-load files cannot be written.
        """
        records = read_source_records(self._options.source_uri, self._config)
        pairs, failures = self.process_records(records)
        part_paths, manifest_path = write_bulk_load_files(
            Path(self._options.output_dir).expanduser(),
            pairs,
            self._options.partitions,
            self._manifest_fields(len(records), len(failures)),
        )
        result = BulkLoadResult(
            record_count=len(records),
            pair_count=len(pairs),
            failures=tuple(failures),
            part_files=tuple(str(path) for path in part_paths),
            manifest_path=str(manifest_path),
        )
        _log_bulk_load_completion(self._options, result)
        return result

    def process_records(
        self,
        records: list[SourceRecord],
    ) -> tuple[list[KeyedMutation], list[RecordFailure]]:
        """Run every record through the stage, isolating per-record failures."""
        pairs: list[KeyedMutation] = []
        failures: list[RecordFailure] = []

        def emit(row_key: RowKey, mutation: Mutation) -> None:
            pairs.append(KeyedMutation(row_key=row_key, mutation=mutation))

        for record in records:
            try:
                self._stage.process(record, emit)
            except (GraphloadParseError, GraphloadEncodingError) as error:
                failures.append(_record_failure(record, error))
                self._check_failure_budget(len(failures))
        return pairs, failures

    def _check_failure_budget(self, failure_count: int) -> None:
        max_failures = self._options.max_failures
        if max_failures is not None and failure_count > max_failures:
            raise GraphloadIngestError(
                f"Aborting bulk load of {self._options.source_uri}: {failure_count} records "
                f"failed, exceeding max_failures={max_failures}. Fix the input and retry."
            )

    def _manifest_fields(self, record_count: int, failure_count: int) -> dict[str, object]:
        strategies = self._stage.strategies
        return {
            "source_uri": self._options.source_uri,
            "decoder": strategies.decoder_name,
            "encoder": strategies.encoder_name,
            "record_count": record_count,
            "failure_count": failure_count,
        }


def run_bulk_load(
    options: BulkLoadOptions,
    config: GraphloadConfig,
    settings: Mapping[str, object] | None = None,
) -> BulkLoadResult:
    """Run a bulk load from source records to bulk-load files.

    Args:
        options: Bulk load request options.
        config: Runtime configuration.
        settings: Optional strategy settings (e.g. from a job file).

    Returns:
        Run summary including per-record failures.

    Raises:
        GraphloadConfigError: If strategy resolution fails; raised before
            any input is read.
        GraphloadIngestError: If source read fails or too many records fail.
        GraphloadStoreError: If output persistence fails.
    """
    runner = BulkLoadRunner(options, config, settings)
    return runner.run()


def build_strategy_settings(
    options: BulkLoadOptions,
    config: GraphloadConfig,
    settings: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Merge strategy selections: options over settings over environment."""
    merged: dict[str, object] = dict(config.strategy_settings())
    if settings:
        merged.update(settings)
    if options.vertex_decoder:
        merged[VERTEX_DECODER_KEY] = options.vertex_decoder
    if options.vertex_encoder:
        merged[VERTEX_ENCODER_KEY] = options.vertex_encoder
    return merged


def _validate_options(options: BulkLoadOptions) -> None:
    if options.partitions < 1:
        raise GraphloadConfigError(
            f"Invalid partitions value {options.partitions}: expected at least 1."
        )
    if options.max_failures is not None and options.max_failures < 0:
        raise GraphloadConfigError(
            f"Invalid max_failures value {options.max_failures}: expected 0 or more."
        )


def _record_failure(record: SourceRecord, error: Exception) -> RecordFailure:
    """Build and log a per-record failure report."""
    failure = RecordFailure(
        source_uri=record.source_uri,
        record_index=record.record_index,
        error_type=type(error).__name__,
        message=str(error),
    )
    _LOGGER.warning(
        "record_failed",
        source_uri=failure.source_uri,
        record_index=failure.record_index,
        error_type=failure.error_type,
        message=failure.message,
    )
    return failure


def _log_bulk_load_completion(options: BulkLoadOptions, result: BulkLoadResult) -> None:
    """Log run completion with contextual metadata."""
    _LOGGER.info(
        "bulk_load_completed",
        source_uri=options.source_uri,
        output_dir=options.output_dir,
        record_count=result.record_count,
        pair_count=result.pair_count,
        failure_count=result.failure_count,
        partition_count=len(result.part_files),
    )
