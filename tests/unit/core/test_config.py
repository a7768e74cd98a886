"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import GraphloadConfig
from core.constants import VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY


def test_from_env_reads_output_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve output root from environment."""
    monkeypatch.setenv("GRAPHLOAD_OUTPUT_ROOT", "./.tmp-graphload")

    config = GraphloadConfig.from_env()

    assert config.output_root.name == ".tmp-graphload"


def test_from_env_reads_strategy_names(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strategy selections from environment should map to resolver keys."""
    monkeypatch.setenv("GRAPHLOAD_VERTEX_DECODER", " tsv ")
    monkeypatch.setenv("GRAPHLOAD_VERTEX_ENCODER", "column-family")

    settings = GraphloadConfig.from_env().strategy_settings()

    assert settings == {VERTEX_DECODER_KEY: "tsv", VERTEX_ENCODER_KEY: "column-family"}


def test_from_env_treats_blank_strategy_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Blank strategy variables should not produce settings entries."""
    monkeypatch.setenv("GRAPHLOAD_VERTEX_DECODER", "   ")

    settings = GraphloadConfig.from_env().strategy_settings()

    assert settings == {}
