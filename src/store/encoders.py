"""Store encoders that turn vertices into row-keyed mutations.

An encoder owns two decisions: how a vertex id maps to a row key, and
how a vertex is laid out as cells of a mutation targeted at that key.
The stage relies on the contract that ``encode`` only ever populates a
mutation whose row key equals ``row_key_for(vertex.vertex_id)``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import hashlib

from core.constants import (
    EDGE_FAMILY,
    LABEL_QUALIFIER,
    META_FAMILY,
    PROPERTY_FAMILY,
    ROW_KEY_SALT_LENGTH,
)
from core.errors import GraphloadEncodingError
from core.types import Mutation, RowKey, Vertex
from store.cell_codec import encode_property_value, encode_text

_EDGE_POSITION_BYTES = 4


class VertexEncoder(ABC):
    """Strategy mapping vertices to row keys and mutations."""

    @abstractmethod
    def row_key_for(self, vertex_id: str | None) -> RowKey:
        """Return the deterministic row key for a vertex id.

        Raises:
            GraphloadEncodingError: If the id is missing.
        """

    @abstractmethod
    def encode(self, mutation: Mutation, vertex: Vertex) -> Mutation:
        """Populate a mutation targeted at the vertex row key.

        Raises:
            GraphloadEncodingError: If the vertex cannot be encoded.
        """


class ColumnFamilyVertexEncoder(VertexEncoder):
    """Reference encoder with one column family per vertex aspect.

    Layout:
        ``m:label`` holds the UTF-8 label.
        ``p:<name>`` holds one tagged cell per property.
        ``e:<position>`` holds the UTF-8 target id of each outgoing edge,
        keyed by its 4-byte big-endian position so order and duplicates
        survive the store's qualifier sort.
    """

    def row_key_for(self, vertex_id: str | None) -> RowKey:
        return encode_text(require_vertex_id(vertex_id), "vertex id")

    def vertex_id_from_row_key(self, row_key: RowKey) -> str:
        """Recover the vertex id from a row key written by this encoder."""
        return _decode_id_bytes(row_key)

    def encode(self, mutation: Mutation, vertex: Vertex) -> Mutation:
        expected_key = self.row_key_for(vertex.vertex_id)
        if mutation.row_key != expected_key:
            raise GraphloadEncodingError(
                f"Cannot encode vertex '{vertex.vertex_id}': mutation targets row key "
                f"{mutation.row_key!r}, expected {expected_key!r}."
            )
        context = f"vertex '{vertex.vertex_id}'"
        cells = [(META_FAMILY, LABEL_QUALIFIER, encode_text(vertex.label, f"label of {context}"))]
        for name, value in vertex.properties.items():
            cells.append(
                (
                    PROPERTY_FAMILY,
                    encode_text(name, f"property name of {context}"),
                    encode_property_value(name, value),
                )
            )
        for position, target_id in enumerate(vertex.outgoing_edges):
            cells.append(
                (
                    EDGE_FAMILY,
                    position.to_bytes(_EDGE_POSITION_BYTES, "big"),
                    encode_text(target_id, f"edge target #{position} of {context}"),
                )
            )
        # Populate only once every cell encoded.
        for family, qualifier, value in cells:
            mutation.add_cell(family, qualifier, value)
        return mutation


class SaltedColumnFamilyVertexEncoder(ColumnFamilyVertexEncoder):
    """Column-family encoder whose row keys carry a short hash salt.

    The salt is the first bytes of the MD5 digest of the id, which spreads
    sequential ids across key ranges while staying deterministic.
    """

    def row_key_for(self, vertex_id: str | None) -> RowKey:
        id_bytes = encode_text(require_vertex_id(vertex_id), "vertex id")
        return _salt_for(id_bytes) + id_bytes

    def vertex_id_from_row_key(self, row_key: RowKey) -> str:
        salt, id_bytes = row_key[:ROW_KEY_SALT_LENGTH], row_key[ROW_KEY_SALT_LENGTH:]
        if salt != _salt_for(id_bytes):
            raise GraphloadEncodingError(
                f"Row key {row_key!r} does not carry a valid salt prefix."
            )
        return _decode_id_bytes(id_bytes)


def require_vertex_id(vertex_id: str | None) -> str:
    """Return the vertex id or raise when it is missing.

    Raises:
        GraphloadEncodingError: If the id is ``None``, blank, or not a string.
    """
    if not isinstance(vertex_id, str) or not vertex_id:
        raise GraphloadEncodingError(
            f"Cannot encode vertex without identity (got {vertex_id!r}). "
            "Every vertex needs a non-empty string id."
        )
    return vertex_id


def _salt_for(id_bytes: bytes) -> bytes:
    return hashlib.md5(id_bytes, usedforsecurity=False).digest()[:ROW_KEY_SALT_LENGTH]


def _decode_id_bytes(id_bytes: bytes) -> str:
    try:
        vertex_id = id_bytes.decode("utf-8")
    except UnicodeDecodeError as error:
        raise GraphloadEncodingError(f"Row key {id_bytes!r} is not valid UTF-8.") from error
    return require_vertex_id(vertex_id)
