"""Public SDK surface for Graphload.

This module provides a stable import path for library users.
It re-exports the stage, strategy interfaces, and typed models.
"""

from __future__ import annotations

from core.config import GraphloadConfig
from core.errors import (
    GraphloadConfigError,
    GraphloadEncodingError,
    GraphloadError,
    GraphloadParseError,
)
from core.job_config import JobSpec, load_job_file
from core.types import (
    BulkLoadOptions,
    BulkLoadResult,
    KeyedMutation,
    Mutation,
    RecordFailure,
    SourceRecord,
    Vertex,
)
from ingest.bulk_load_stage import BulkLoadStage
from ingest.decoders import BatchVertexDecoder, SingleVertexDecoder
from ingest.pipeline import run_bulk_load
from ingest.strategy_resolver import (
    BulkLoadStrategies,
    register_decoder,
    register_encoder,
    resolve_strategies,
)
from store.bulk_output import read_bulk_load_files
from store.encoders import VertexEncoder
from store.vertex_reader import read_vertex

__all__ = [
    "BatchVertexDecoder",
    "BulkLoadOptions",
    "BulkLoadResult",
    "BulkLoadStage",
    "BulkLoadStrategies",
    "GraphloadConfig",
    "GraphloadConfigError",
    "GraphloadEncodingError",
    "GraphloadError",
    "GraphloadParseError",
    "JobSpec",
    "KeyedMutation",
    "Mutation",
    "RecordFailure",
    "SingleVertexDecoder",
    "SourceRecord",
    "Vertex",
    "VertexEncoder",
    "load_job_file",
    "read_bulk_load_files",
    "read_vertex",
    "register_decoder",
    "register_encoder",
    "resolve_strategies",
    "run_bulk_load",
]
