"""Decoder and encoder strategy resolution.

This module maps configured strategy names to no-argument factories and
constructs one decoder and one encoder at stage startup. Resolution is
all-or-nothing: any missing or broken selection raises a fatal
configuration error before a single record is processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from core.constants import VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY
from core.errors import GraphloadConfigError
from core.logging_config import get_logger
from ingest.decoders import (
    AdjacencyListDecoder,
    BatchVertexDecoder,
    JsonVertexDecoder,
    RecordDecoder,
    SingleVertexDecoder,
    TabSeparatedVertexDecoder,
    VertexListDecoder,
)
from store.encoders import (
    ColumnFamilyVertexEncoder,
    SaltedColumnFamilyVertexEncoder,
    VertexEncoder,
)

_LOGGER = get_logger(__name__)

DecoderFactory = Callable[[], RecordDecoder]
EncoderFactory = Callable[[], VertexEncoder]

_DECODER_REGISTRY: dict[str, DecoderFactory] = {
    "tsv": TabSeparatedVertexDecoder,
    "adjacency": AdjacencyListDecoder,
    "vertex-list": VertexListDecoder,
    "jsonl": JsonVertexDecoder,
}
_ENCODER_REGISTRY: dict[str, EncoderFactory] = {
    "column-family": ColumnFamilyVertexEncoder,
    "salted-column-family": SaltedColumnFamilyVertexEncoder,
}


@dataclass(frozen=True)
class BulkLoadStrategies:
    """Resolved strategy pair held for the lifetime of a stage."""

    decoder_name: str
    decoder: RecordDecoder
    encoder_name: str
    encoder: VertexEncoder


def resolve_strategies(settings: Mapping[str, object]) -> BulkLoadStrategies:
    """Resolve and construct the configured decoder and encoder.

    Args:
        settings: Configuration entries keyed by ``bulk_load.vertex_decoder``
            and ``bulk_load.vertex_encoder``.

    Returns:
        Live strategy instances.

    Raises:
        GraphloadConfigError: If a key is missing, names an unknown strategy,
            or construction fails.
    """
    decoder_name = _required_name(settings, VERTEX_DECODER_KEY)
    encoder_name = _required_name(settings, VERTEX_ENCODER_KEY)
    decoder = _construct(decoder_name, _DECODER_REGISTRY, "decoder")
    if not isinstance(decoder, (SingleVertexDecoder, BatchVertexDecoder)):
        raise GraphloadConfigError(
            f"Decoder factory '{decoder_name}' returned {type(decoder).__name__}, "
            "which is neither a single nor a batch vertex decoder."
        )
    encoder = resolve_encoder(encoder_name)
    _LOGGER.info(
        "strategies_resolved",
        decoder=decoder_name,
        decoder_kind=decoder.kind,
        encoder=encoder_name,
    )
    return BulkLoadStrategies(
        decoder_name=decoder_name,
        decoder=decoder,
        encoder_name=encoder_name,
        encoder=encoder,
    )


def resolve_encoder(encoder_name: str) -> VertexEncoder:
    """Construct one registered encoder by name.

    Raises:
        GraphloadConfigError: If the name is unknown or construction fails.
    """
    encoder = _construct(encoder_name, _ENCODER_REGISTRY, "encoder")
    if not isinstance(encoder, VertexEncoder):
        raise GraphloadConfigError(
            f"Encoder factory '{encoder_name}' returned {type(encoder).__name__}, "
            "which is not a vertex encoder."
        )
    return encoder


def register_decoder(name: str, factory: DecoderFactory) -> None:
    """Register a decoder factory under a configuration name.

    Raises:
        GraphloadConfigError: If the name is blank or already registered.
    """
    _register(name, factory, _DECODER_REGISTRY, "decoder")


def register_encoder(name: str, factory: EncoderFactory) -> None:
    """Register an encoder factory under a configuration name.

    Raises:
        GraphloadConfigError: If the name is blank or already registered.
    """
    _register(name, factory, _ENCODER_REGISTRY, "encoder")


def unregister_strategy(name: str) -> None:
    """Remove a decoder or encoder registration if present."""
    _DECODER_REGISTRY.pop(name, None)
    _ENCODER_REGISTRY.pop(name, None)


def supported_decoders() -> dict[str, str]:
    """Return registered decoder names mapped to their kind."""
    return {name: _factory_kind(factory) for name, factory in sorted(_DECODER_REGISTRY.items())}


def supported_encoders() -> tuple[str, ...]:
    """Return registered encoder names."""
    return tuple(sorted(_ENCODER_REGISTRY))


def _required_name(settings: Mapping[str, object], key: str) -> str:
    raw_value = settings.get(key)
    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        raise GraphloadConfigError(
            f"Missing strategy selection '{key}'. "
            "Set it in the job file, environment, or command-line options."
        )
    if not isinstance(raw_value, str):
        raise GraphloadConfigError(
            f"Strategy selection '{key}' must be a string, got {type(raw_value).__name__}."
        )
    return raw_value.strip()


def _construct(name: str, registry: Mapping[str, Callable[[], object]], role: str) -> object:
    factory = registry.get(name)
    if factory is None:
        supported = ", ".join(sorted(registry))
        raise GraphloadConfigError(
            f"Unknown {role} '{name}'. Choose one of: {supported}."
        )
    try:
        return factory()
    except Exception as error:
        raise GraphloadConfigError(
            f"Failed to construct {role} '{name}': {error}."
        ) from error


def _register(name: str, factory: Callable[[], object], registry: dict, role: str) -> None:
    normalized_name = name.strip()
    if not normalized_name:
        raise GraphloadConfigError(f"Cannot register {role} with a blank name.")
    if normalized_name in registry:
        raise GraphloadConfigError(f"A {role} named '{normalized_name}' is already registered.")
    registry[normalized_name] = factory


def _factory_kind(factory: DecoderFactory) -> str:
    return str(getattr(factory, "kind", "unknown"))
