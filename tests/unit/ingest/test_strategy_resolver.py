"""Unit tests for decoder/encoder strategy resolution."""

from __future__ import annotations

from typing import Iterator

import pytest

from core.constants import VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY
from core.errors import GraphloadConfigError
from ingest.decoders import TabSeparatedVertexDecoder, VertexListDecoder
from ingest.strategy_resolver import (
    register_decoder,
    register_encoder,
    resolve_strategies,
    supported_decoders,
    supported_encoders,
    unregister_strategy,
)
from store.encoders import ColumnFamilyVertexEncoder, SaltedColumnFamilyVertexEncoder


@pytest.fixture
def cleanup_names() -> Iterator[list[str]]:
    names: list[str] = []
    yield names
    for name in names:
        unregister_strategy(name)


def _settings(decoder: object = "tsv", encoder: object = "column-family") -> dict[str, object]:
    return {VERTEX_DECODER_KEY: decoder, VERTEX_ENCODER_KEY: encoder}


def test_resolve_strategies_builds_registered_pair() -> None:
    """Named strategies should resolve to live instances."""
    strategies = resolve_strategies(_settings("vertex-list", "salted-column-family"))

    assert isinstance(strategies.decoder, VertexListDecoder) and isinstance(
        strategies.encoder, SaltedColumnFamilyVertexEncoder
    )


def test_resolve_strategies_records_names() -> None:
    """Resolved strategies should keep the configured names."""
    strategies = resolve_strategies(_settings(" tsv ", "column-family"))

    assert (strategies.decoder_name, strategies.encoder_name) == ("tsv", "column-family")


@pytest.mark.parametrize(
    "settings",
    [
        {VERTEX_ENCODER_KEY: "column-family"},
        {VERTEX_DECODER_KEY: "tsv"},
        _settings(decoder="  "),
        _settings(decoder=42),
        _settings(decoder="csv"),
        _settings(encoder="hfile"),
    ],
)
def test_resolve_strategies_fails_fatally_for_bad_selection(settings: dict[str, object]) -> None:
    """Missing or unknown strategy names should raise a config error."""
    with pytest.raises(GraphloadConfigError):
        resolve_strategies(settings)

    assert True


def test_resolve_strategies_wraps_construction_failure(cleanup_names: list[str]) -> None:
    """A factory that raises should surface as a config error, never a null strategy."""

    def broken_factory() -> TabSeparatedVertexDecoder:
        raise RuntimeError("no such dictionary")

    register_decoder("broken", broken_factory)
    cleanup_names.append("broken")

    with pytest.raises(GraphloadConfigError, match="no such dictionary"):
        resolve_strategies(_settings(decoder="broken"))

    assert "broken" in supported_decoders()


def test_resolve_strategies_rejects_wrong_interface(cleanup_names: list[str]) -> None:
    """Factories must return objects of the expected strategy interface."""
    register_encoder("not-an-encoder", TabSeparatedVertexDecoder)
    cleanup_names.append("not-an-encoder")

    with pytest.raises(GraphloadConfigError, match="not a vertex encoder"):
        resolve_strategies(_settings(encoder="not-an-encoder"))

    assert True


def test_register_encoder_rejects_duplicate_name() -> None:
    """Registering an existing name should fail."""
    with pytest.raises(GraphloadConfigError):
        register_encoder("column-family", ColumnFamilyVertexEncoder)

    assert "column-family" in supported_encoders()


def test_supported_decoders_report_kind() -> None:
    """Decoder listing should include each decoder kind."""
    decoders = supported_decoders()

    assert decoders["tsv"] == "single" and decoders["vertex-list"] == "batch"
