"""Graphload CLI entry points.

This module exposes bulk load commands and strategy introspection.
It maps argparse commands onto the driver and store helpers.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import GraphloadConfig
from core.errors import GraphloadError
from core.job_config import JobSpec, load_job_file
from core.types import BulkLoadOptions, BulkLoadResult
from ingest.pipeline import run_bulk_load
from ingest.strategy_resolver import resolve_encoder, supported_decoders, supported_encoders
from store.bulk_output import read_bulk_load_files, read_manifest
from store.encoders import ColumnFamilyVertexEncoder
from store.vertex_reader import read_vertex, vertex_to_payload

_FATAL_EXIT_CODE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="graphload", description="Graph bulk load CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_load_command(subparsers)
    _add_strategies_command(subparsers)
    _add_inspect_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Graphload CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 on success, 1 when records failed,
        2 on fatal errors.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = GraphloadConfig.from_env()
    try:
        if args.command == "load":
            return _run_load_command(config, args)
        if args.command == "strategies":
            return _run_strategies_command()
        if args.command == "inspect":
            return _run_inspect_command(args)
    except GraphloadError as error:
        print(f"graphload: error: {error}", file=sys.stderr)
        return _FATAL_EXIT_CODE
    parser.error(f"Unsupported command: {args.command}")
    return _FATAL_EXIT_CODE


def _run_load_command(config: GraphloadConfig, args: argparse.Namespace) -> int:
    """Handle load command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    job = load_job_file(args.job_file) if args.job_file else JobSpec()
    options = BulkLoadOptions(
        source_uri=args.source,
        output_dir=args.output_dir or str(config.output_root),
        vertex_decoder=args.decoder,
        vertex_encoder=args.encoder,
        partitions=args.partitions if args.partitions is not None else job.partitions,
        max_failures=args.max_failures if args.max_failures is not None else job.max_failures,
    )
    result = run_bulk_load(options, config, job.strategy_settings())
    _print_load_result(result)
    return 1 if result.failures else 0


def _run_strategies_command() -> int:
    """Handle strategies command."""
    for name, kind in supported_decoders().items():
        print(f"decoder\t{name}\t{kind}")
    for name in supported_encoders():
        print(f"encoder\t{name}")
    return 0


def _run_inspect_command(args: argparse.Namespace) -> int:
    """Handle inspect command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    output_dir = Path(args.output_dir).expanduser()
    encoder_name = args.encoder or str(read_manifest(output_dir).get("encoder", ""))
    encoder = resolve_encoder(encoder_name)
    if not isinstance(encoder, ColumnFamilyVertexEncoder):
        print(
            f"graphload: error: encoder '{encoder_name}' has no reference reader.",
            file=sys.stderr,
        )
        return _FATAL_EXIT_CODE
    for pair in read_bulk_load_files(output_dir):
        vertex = read_vertex(encoder, pair.mutation)
        print(json.dumps(vertex_to_payload(vertex), sort_keys=True))
    return 0


def _print_load_result(result: BulkLoadResult) -> None:
    print(
        f"records={result.record_count} pairs={result.pair_count} "
        f"failures={result.failure_count} manifest={result.manifest_path}"
    )
    for failure in result.failures:
        print(
            f"failed\t{failure.source_uri}:{failure.record_index}\t"
            f"{failure.error_type}\t{failure.message}"
        )


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Transform records into bulk-load files")
    parser.add_argument("source", help="Source file, directory, or s3://bucket/prefix")
    parser.add_argument("--output-dir", help="Output directory (default: GRAPHLOAD_OUTPUT_ROOT)")
    parser.add_argument("--decoder", help="Record decoder name, e.g. tsv")
    parser.add_argument("--encoder", help="Store encoder name, e.g. column-family")
    parser.add_argument("--partitions", type=int, help="Number of row-key partitions")
    parser.add_argument("--max-failures", type=int, help="Abort after this many failed records")
    parser.add_argument("--job-file", help="Optional YAML job file")


def _add_strategies_command(subparsers: Any) -> None:
    """Register strategies subcommand."""
    subparsers.add_parser("strategies", help="List registered decoders and encoders")


def _add_inspect_command(subparsers: Any) -> None:
    """Register inspect subcommand."""
    parser = subparsers.add_parser("inspect", help="Print vertices stored in bulk-load files")
    parser.add_argument("output_dir", help="Directory written by the load command")
    parser.add_argument("--encoder", help="Encoder name (default: from manifest)")
