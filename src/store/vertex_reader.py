"""Reference reader for column-family vertex mutations.

This module rebuilds vertices from mutations written by the reference
column-family encoders. It is used by the CLI ``inspect`` command and
to verify that encoded payloads keep every vertex field.
"""

from __future__ import annotations

from core.constants import EDGE_FAMILY, LABEL_QUALIFIER, META_FAMILY, PROPERTY_FAMILY
from core.errors import GraphloadEncodingError
from core.types import Mutation, PropertyValue, Vertex
from store.cell_codec import decode_property_value, decode_text
from store.encoders import ColumnFamilyVertexEncoder


def read_vertex(encoder: ColumnFamilyVertexEncoder, mutation: Mutation) -> Vertex:
    """Rebuild a vertex from its row key and mutation payload.

    Args:
        encoder: Encoder that produced the mutation; owns the row-key layout.
        mutation: Populated mutation.

    Returns:
        Reconstructed vertex.

    Raises:
        GraphloadEncodingError: If the payload is incomplete or corrupt.
    """
    vertex_id = encoder.vertex_id_from_row_key(mutation.row_key)
    label_cell = mutation.cells.get((META_FAMILY, LABEL_QUALIFIER))
    if label_cell is None:
        raise GraphloadEncodingError(
            f"Mutation for vertex '{vertex_id}' has no label cell."
        )
    return Vertex(
        vertex_id=vertex_id,
        label=decode_text(label_cell, "label"),
        properties=_read_properties(mutation),
        outgoing_edges=_read_edges(mutation),
    )


def vertex_to_payload(vertex: Vertex) -> dict[str, object]:
    """Serialize a vertex into a JSON-safe payload."""
    return {
        "id": vertex.vertex_id,
        "label": vertex.label,
        "properties": dict(vertex.properties),
        "edges": list(vertex.outgoing_edges),
    }


def _read_properties(mutation: Mutation) -> dict[str, PropertyValue]:
    properties: dict[str, PropertyValue] = {}
    for qualifier, cell in mutation.family_cells(PROPERTY_FAMILY).items():
        name = decode_text(qualifier, "property name")
        properties[name] = decode_property_value(name, cell)
    return properties


def _read_edges(mutation: Mutation) -> tuple[str, ...]:
    edge_cells = sorted(mutation.family_cells(EDGE_FAMILY).items())
    return tuple(decode_text(target, "edge target") for _, target in edge_cells)
