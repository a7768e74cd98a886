"""Core constants used across Graphload modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_OUTPUT_ROOT = Path(".graphload")
VERTEX_DECODER_KEY = "bulk_load.vertex_decoder"
VERTEX_ENCODER_KEY = "bulk_load.vertex_encoder"
SUPPORTED_RECORD_EXTENSIONS = (".txt", ".tsv", ".jsonl", ".lines")
DEFAULT_VERTEX_LABEL = "vertex"
DEFAULT_PARTITION_COUNT = 1
BULK_LOAD_MANIFEST_FILE_NAME = "manifest.json"
BULK_LOAD_PART_FILE_TEMPLATE = "part-{index:05d}.parquet"
JOB_FILE_VERSION = 1
META_FAMILY = "m"
PROPERTY_FAMILY = "p"
EDGE_FAMILY = "e"
LABEL_QUALIFIER = b"label"
ROW_KEY_SALT_LENGTH = 2
