"""Record readers for bulk load sources.

This module loads line records from local paths or S3 prefixes.
Every non-blank line becomes one source record; the record index is
its one-based line number within the file or object.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from core.config import GraphloadConfig
from core.constants import SUPPORTED_RECORD_EXTENSIONS
from core.errors import GraphloadDependencyError, GraphloadIngestError
from core.s3_uri import S3Location, parse_s3_uri
from core.types import SourceRecord


def read_source_records(source_uri: str, config: GraphloadConfig) -> list[SourceRecord]:
    """Load line records from local files or S3.

    Args:
        source_uri: Local path, local file, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Ordered list of source records.

    Raises:
        GraphloadIngestError: If source cannot be read.
    """
    if source_uri.startswith("s3://"):
        return _read_s3_records(source_uri, config)
    return _read_local_records(Path(source_uri).expanduser())


def split_records(source_uri: str, body: str) -> list[SourceRecord]:
    """Split a text body into one record per non-blank line.

    Args:
        source_uri: Source identifier stored on each record.
        body: Full text content.

    Returns:
        Records in line order.
    """
    return [
        SourceRecord(record_index=line_number, text=line, source_uri=source_uri)
        for line_number, line in enumerate(body.splitlines(), 1)
        if line.strip()
    ]


def _read_local_records(source_path: Path) -> list[SourceRecord]:
    """Read records from local file system.

    Raises:
        GraphloadIngestError: If path is missing, unreadable, or empty.
    """
    if not source_path.exists():
        raise GraphloadIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return _read_file_records(source_path)
    records: list[SourceRecord] = []
    for file_path in sorted(source_path.rglob("*")):
        if file_path.is_file() and _is_supported_name(file_path.name):
            records.extend(_read_file_records(file_path))
    if not records:
        raise GraphloadIngestError(
            f"No readable record files found under {source_path}. "
            f"Supported extensions: {SUPPORTED_RECORD_EXTENSIONS}."
        )
    return records


def _read_file_records(file_path: Path) -> list[SourceRecord]:
    try:
        body = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise GraphloadIngestError(
            f"Failed to read source file {file_path}: {error}. "
            "Check file permissions and UTF-8 encoding."
        ) from error
    return split_records(str(file_path), body)


def _read_s3_records(source_uri: str, config: GraphloadConfig) -> list[SourceRecord]:
    """Read records from S3 objects under a prefix.

    Raises:
        GraphloadIngestError: If no readable objects are found.
    """
    location = parse_s3_uri(source_uri)
    s3_client = _create_s3_client(config)
    object_keys = _list_s3_keys(s3_client, location)
    records = _download_s3_records(s3_client, location.bucket, object_keys)
    if not records:
        raise GraphloadIngestError(
            f"No readable record objects found for {source_uri}. "
            f"Upload {'/'.join(SUPPORTED_RECORD_EXTENSIONS)} files and retry."
        )
    return records


def _create_s3_client(config: GraphloadConfig) -> Any:
    """Create a boto3 S3 client.

    Raises:
        GraphloadDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise GraphloadDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install graphload[s3] to read s3:// sources."
        ) from error
    session = boto3.session.Session(**_build_boto3_session_kwargs(config))
    return session.client("s3")


def _build_boto3_session_kwargs(config: GraphloadConfig) -> dict[str, str]:
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List supported object keys under an S3 prefix, sorted."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if _is_supported_name(key):
                keys.append(key)
    return sorted(keys)


def _download_s3_records(
    s3_client: Any,
    bucket: str,
    object_keys: Iterable[str],
) -> list[SourceRecord]:
    records: list[SourceRecord] = []
    for key in object_keys:
        body = s3_client.get_object(Bucket=bucket, Key=key)["Body"].read().decode("utf-8")
        records.extend(split_records(f"s3://{bucket}/{key}", body))
    return records


def _is_supported_name(name: str) -> bool:
    """Return whether a file name or object key has a supported extension."""
    return Path(name).suffix.lower() in SUPPORTED_RECORD_EXTENSIONS
