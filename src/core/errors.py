"""Graphload exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Fatal startup errors and per-record errors are kept distinct so the
driver can stop a worker or skip a record accordingly.
"""

from __future__ import annotations


class GraphloadError(Exception):
    """Base exception for all Graphload failures."""


class GraphloadConfigError(GraphloadError):
    """Raised for invalid configuration or strategy selection (fatal)."""


class GraphloadParseError(GraphloadError):
    """Raised when a record cannot be decoded into vertices."""


class GraphloadEncodingError(GraphloadError):
    """Raised when a vertex cannot be encoded into a store mutation."""


class GraphloadIngestError(GraphloadError):
    """Raised for source reading failures and aborted load runs."""


class GraphloadStoreError(GraphloadError):
    """Raised for bulk-load file write and read failures."""


class GraphloadDependencyError(GraphloadError):
    """Raised when an optional runtime dependency is missing."""
