"""Per-record bulk load transform.

The stage composes a record decoder and a store encoder into one
decode -> encode -> emit step that an execution engine invokes once per
input record. The decode operation is bound once from the decoder kind,
and a record either emits all of its pairs or none of them.
"""

from __future__ import annotations

from typing import Callable, Mapping

from core.errors import GraphloadEncodingError
from core.types import KeyedMutation, Mutation, RowKey, SourceRecord, Vertex
from ingest.decoders import BatchVertexDecoder, RecordDecoder
from ingest.strategy_resolver import BulkLoadStrategies, resolve_strategies
from store.encoders import VertexEncoder

EmitFn = Callable[[RowKey, Mutation], None]
DecodeFn = Callable[[str], list[Vertex]]


class BulkLoadStage:
    """Stateless per-record transform over one resolved strategy pair."""

    def __init__(self, strategies: BulkLoadStrategies) -> None:
        self._strategies = strategies
        self._encoder: VertexEncoder = strategies.encoder
        self._decode: DecodeFn = _bind_decode(strategies.decoder)

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> "BulkLoadStage":
        """Resolve strategies from settings and build a stage.

        Raises:
            GraphloadConfigError: If strategy resolution fails.
        """
        return cls(resolve_strategies(settings))

    @property
    def strategies(self) -> BulkLoadStrategies:
        """Return the strategy pair this stage was built with."""
        return self._strategies

    def process(self, record: SourceRecord, emit: EmitFn) -> int:
        """Transform one record and emit its (row key, mutation) pairs.

        Args:
            record: Input record.
            emit: Output channel callback, called once per pair in decode order.

        Returns:
            Number of pairs emitted.

        Raises:
            GraphloadParseError: If the record cannot be decoded.
            GraphloadEncodingError: If a decoded vertex cannot be encoded.
        """
        pairs = self.transform(record)
        for pair in pairs:
            emit(pair.row_key, pair.mutation)
        return len(pairs)

    def transform(self, record: SourceRecord) -> list[KeyedMutation]:
        """Decode and encode one record without emitting.

        Raises:
            GraphloadParseError: If the record cannot be decoded.
            GraphloadEncodingError: If a decoded vertex cannot be encoded.
        """
        vertices = self._decode(record.text)
        return [self._encode_vertex(vertex) for vertex in vertices]

    def _encode_vertex(self, vertex: Vertex) -> KeyedMutation:
        row_key = self._encoder.row_key_for(vertex.vertex_id)
        mutation = self._encoder.encode(Mutation(row_key=row_key), vertex)
        if mutation.row_key != row_key:
            raise GraphloadEncodingError(
                f"Encoder '{self._strategies.encoder_name}' returned a mutation for row key "
                f"{mutation.row_key!r} while encoding vertex '{vertex.vertex_id}' "
                f"(expected {row_key!r})."
            )
        return KeyedMutation(row_key=row_key, mutation=mutation)


def _bind_decode(decoder: RecordDecoder) -> DecodeFn:
    """Select the decode operation matching the decoder kind."""
    if isinstance(decoder, BatchVertexDecoder):
        return decoder.decode_batch
    single_decode = decoder.decode
    return lambda text: [single_decode(text)]
