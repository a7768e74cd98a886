"""Typed YAML job files for bulk load runs.

This module loads and validates the declarative job file accepted by
the CLI and SDK. A job file selects the decoder/encoder strategies and
the output shaping options for one bulk load run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import (
    DEFAULT_PARTITION_COUNT,
    JOB_FILE_VERSION,
    VERTEX_DECODER_KEY,
    VERTEX_ENCODER_KEY,
)
from core.errors import GraphloadConfigError

_ROOT_KEYS = frozenset({"version", "bulk_load"})
_BULK_LOAD_KEYS = frozenset({"vertex_decoder", "vertex_encoder", "partitions", "max_failures"})


@dataclass(frozen=True)
class JobSpec:
    """Validated job file contents."""

    vertex_decoder: str | None = None
    vertex_encoder: str | None = None
    partitions: int = DEFAULT_PARTITION_COUNT
    max_failures: int | None = None

    def strategy_settings(self) -> dict[str, str]:
        """Return strategy selection entries in resolver key form."""
        settings: dict[str, str] = {}
        if self.vertex_decoder:
            settings[VERTEX_DECODER_KEY] = self.vertex_decoder
        if self.vertex_encoder:
            settings[VERTEX_ENCODER_KEY] = self.vertex_encoder
        return settings


def load_job_file(job_path: str) -> JobSpec:
    """Load and validate a YAML job file from disk.

    Args:
        job_path: File path to YAML job file.

    Returns:
        Validated job specification.

    Raises:
        GraphloadConfigError: If the file is missing, unparsable, or invalid.
    """
    payload = _load_yaml_payload(job_path)
    root_mapping = _expect_mapping(payload, "job file root")
    _validate_keys(root_mapping, _ROOT_KEYS, "job file root")
    _parse_version(root_mapping)
    bulk_load_mapping = _expect_mapping(root_mapping.get("bulk_load") or {}, "bulk_load section")
    _validate_keys(bulk_load_mapping, _BULK_LOAD_KEYS, "bulk_load section")
    partitions = _optional_int(bulk_load_mapping, "partitions")
    return JobSpec(
        vertex_decoder=_optional_string(bulk_load_mapping, "vertex_decoder"),
        vertex_encoder=_optional_string(bulk_load_mapping, "vertex_encoder"),
        partitions=DEFAULT_PARTITION_COUNT if partitions is None else partitions,
        max_failures=_optional_int(bulk_load_mapping, "max_failures"),
    )


def _load_yaml_payload(job_path: str) -> object:
    job_file = Path(job_path).expanduser().resolve()
    if not job_file.exists():
        raise GraphloadConfigError(
            f"Job file does not exist at {job_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(job_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise GraphloadConfigError(
            f"Failed to read job file at {job_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise GraphloadConfigError(
            f"Failed to parse YAML job file at {job_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise GraphloadConfigError(
            f"Job file at {job_file} is empty. Define 'version' and 'bulk_load'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise GraphloadConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise GraphloadConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise GraphloadConfigError(
            f"Job file field 'version' must be an integer. Set version: {JOB_FILE_VERSION}."
        )
    if raw_version != JOB_FILE_VERSION:
        raise GraphloadConfigError(
            f"Unsupported job file version {raw_version}. Use version: {JOB_FILE_VERSION}."
        )
    return raw_version


def _optional_string(mapping: Mapping[str, object], field_name: str) -> str | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    if isinstance(raw_value, str):
        normalized_value = raw_value.strip()
        return normalized_value if normalized_value else None
    raise GraphloadConfigError(f"Job file field '{field_name}' must be a string when provided.")


def _optional_int(mapping: Mapping[str, object], field_name: str) -> int | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        raise GraphloadConfigError(f"Job file field '{field_name}' must be an integer.")
    return raw_value


def _validate_keys(mapping: Mapping[str, object], allowed_keys: frozenset[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise GraphloadConfigError(
            f"Invalid {context}: unknown fields {', '.join(unknown_keys)}."
        )
