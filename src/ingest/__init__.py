"""Bulk load ingestion.

This package decodes raw records into vertices, resolves the configured
strategies, and runs the per-record decode/encode/emit stage.
"""
