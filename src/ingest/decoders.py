"""Record decoders that turn raw input text into vertices.

Decoders come in two kinds. A ``single`` decoder maps one record to
exactly one vertex; a ``batch`` decoder maps one record to a possibly
empty list of vertices. The kind is a property of the class, so the
stage binds the matching operation once instead of asking per record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import math
from typing import Any, ClassVar, Mapping

from core.constants import DEFAULT_VERTEX_LABEL
from core.errors import GraphloadParseError
from core.types import DecoderKind, PropertyValue, Vertex

_TSV_MIN_FIELDS = 2
_TSV_MAX_FIELDS = 4
_JSON_VERTEX_KEYS = frozenset({"id", "label", "properties", "edges"})


class SingleVertexDecoder(ABC):
    """Decoder producing exactly one vertex per record."""

    kind: ClassVar[DecoderKind] = "single"

    @abstractmethod
    def decode(self, text: str) -> Vertex:
        """Decode one record into one vertex.

        Raises:
            GraphloadParseError: If the record is malformed.
        """


class BatchVertexDecoder(ABC):
    """Decoder producing zero or more vertices per record."""

    kind: ClassVar[DecoderKind] = "batch"

    @abstractmethod
    def decode_batch(self, text: str) -> list[Vertex]:
        """Decode one record into vertices in record order.

        Raises:
            GraphloadParseError: If the record is malformed.
        """


RecordDecoder = SingleVertexDecoder | BatchVertexDecoder


class TabSeparatedVertexDecoder(SingleVertexDecoder):
    """Decode ``id<TAB>label[<TAB>properties[<TAB>edges]]`` lines.

    Properties are comma-separated ``name=value`` or ``name:type=value``
    entries where type is one of ``str``, ``int``, ``float``, ``bool``.
    Edges are comma-separated target ids.
    """

    def decode(self, text: str) -> Vertex:
        fields = text.rstrip("\r\n").split("\t")
        if not _TSV_MIN_FIELDS <= len(fields) <= _TSV_MAX_FIELDS:
            raise GraphloadParseError(
                f"Invalid tsv record {_preview(text)}: expected "
                f"{_TSV_MIN_FIELDS}-{_TSV_MAX_FIELDS} tab-separated fields, got {len(fields)}."
            )
        vertex_id = _require_token(fields[0], "vertex id", text)
        label = _require_token(fields[1], "label", text)
        properties = _parse_properties(fields[2], text) if len(fields) > 2 else {}
        edges = _parse_edge_ids(fields[3], text) if len(fields) > 3 else ()
        return Vertex(
            vertex_id=vertex_id,
            label=label,
            properties=properties,
            outgoing_edges=edges,
        )


class AdjacencyListDecoder(SingleVertexDecoder):
    """Decode whitespace-separated ``id target target ...`` lines."""

    def decode(self, text: str) -> Vertex:
        tokens = text.split()
        if not tokens:
            raise GraphloadParseError(
                "Invalid adjacency record: line is blank. Provide a vertex id."
            )
        return Vertex(
            vertex_id=tokens[0],
            label=DEFAULT_VERTEX_LABEL,
            outgoing_edges=tuple(tokens[1:]),
        )


class VertexListDecoder(BatchVertexDecoder):
    """Decode ``;``-separated ``id`` or ``id|label`` entries."""

    def decode_batch(self, text: str) -> list[Vertex]:
        stripped = text.strip()
        if not stripped:
            return []
        vertices: list[Vertex] = []
        for position, entry in enumerate(stripped.split(";"), 1):
            raw_id, separator, raw_label = entry.partition("|")
            vertex_id = raw_id.strip()
            label = raw_label.strip() if separator else DEFAULT_VERTEX_LABEL
            if not vertex_id or not label:
                raise GraphloadParseError(
                    f"Invalid vertex-list record {_preview(text)}: entry #{position} "
                    "needs a non-empty id and label."
                )
            vertices.append(Vertex(vertex_id=vertex_id, label=label))
        return vertices


class JsonVertexDecoder(BatchVertexDecoder):
    """Decode a JSON vertex object or a JSON array of vertex objects."""

    def decode_batch(self, text: str) -> list[Vertex]:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as error:
            raise GraphloadParseError(
                f"Invalid jsonl record {_preview(text)}: {error.msg}. Fix the JSON syntax."
            ) from error
        rows = payload if isinstance(payload, list) else [payload]
        return [_vertex_from_json(row, position) for position, row in enumerate(rows, 1)]


def _vertex_from_json(row: Any, position: int) -> Vertex:
    """Validate one JSON vertex object."""
    context = f"jsonl vertex #{position}"
    if not isinstance(row, dict):
        raise GraphloadParseError(f"Invalid {context}: expected JSON object.")
    unknown_keys = sorted(set(row) - _JSON_VERTEX_KEYS)
    if unknown_keys:
        raise GraphloadParseError(f"Invalid {context}: unknown fields {', '.join(unknown_keys)}.")
    vertex_id = row.get("id")
    label = row.get("label")
    if not isinstance(vertex_id, str) or not vertex_id:
        raise GraphloadParseError(f"Invalid {context}: expected non-empty string field 'id'.")
    if not isinstance(label, str) or not label:
        raise GraphloadParseError(f"Invalid {context}: expected non-empty string field 'label'.")
    return Vertex(
        vertex_id=vertex_id,
        label=label,
        properties=_json_properties(row.get("properties", {}), context),
        outgoing_edges=_json_edges(row.get("edges", []), context),
    )


def _json_properties(raw_properties: Any, context: str) -> dict[str, PropertyValue]:
    if not isinstance(raw_properties, dict):
        raise GraphloadParseError(f"Invalid {context}: 'properties' must be an object.")
    properties: dict[str, PropertyValue] = {}
    for name, value in raw_properties.items():
        if isinstance(value, float) and not math.isfinite(value):
            raise GraphloadParseError(f"Invalid {context}: property '{name}' is not finite.")
        if not isinstance(value, (str, int, float, bool)):
            raise GraphloadParseError(
                f"Invalid {context}: property '{name}' must be a string, number, or boolean."
            )
        properties[name] = value
    return properties


def _json_edges(raw_edges: Any, context: str) -> tuple[str, ...]:
    if not isinstance(raw_edges, list):
        raise GraphloadParseError(f"Invalid {context}: 'edges' must be a list.")
    for edge in raw_edges:
        if not isinstance(edge, str) or not edge:
            raise GraphloadParseError(f"Invalid {context}: edges must be non-empty strings.")
    return tuple(raw_edges)


def _parse_properties(field_text: str, record_text: str) -> dict[str, PropertyValue]:
    """Parse the tsv property field into typed values."""
    properties: dict[str, PropertyValue] = {}
    if not field_text.strip():
        return properties
    for entry in field_text.split(","):
        declaration, separator, raw_value = entry.partition("=")
        if not separator:
            raise GraphloadParseError(
                f"Invalid tsv record {_preview(record_text)}: property '{entry.strip()}' "
                "is missing '='. Use name=value or name:type=value."
            )
        raw_name, _, type_name = declaration.partition(":")
        name = raw_name.strip()
        if not name:
            raise GraphloadParseError(
                f"Invalid tsv record {_preview(record_text)}: property name is blank."
            )
        if name in properties:
            raise GraphloadParseError(
                f"Invalid tsv record {_preview(record_text)}: duplicate property '{name}'."
            )
        properties[name] = _parse_typed_value(name, type_name.strip() or "str", raw_value.strip())
    return properties


def _parse_typed_value(name: str, type_name: str, raw_value: str) -> PropertyValue:
    """Convert one property value text to its declared type."""
    parsers: Mapping[str, Any] = {
        "str": str,
        "int": int,
        "float": _parse_finite_float,
        "bool": _parse_bool,
    }
    parser = parsers.get(type_name)
    if parser is None:
        supported = ", ".join(parsers)
        raise GraphloadParseError(
            f"Unsupported type '{type_name}' for property '{name}'. Use one of: {supported}."
        )
    try:
        return parser(raw_value)
    except ValueError as error:
        raise GraphloadParseError(
            f"Invalid {type_name} value '{raw_value}' for property '{name}'."
        ) from error


def _parse_finite_float(raw_value: str) -> float:
    value = float(raw_value)
    if not math.isfinite(value):
        raise ValueError(raw_value)
    return value


def _parse_bool(raw_value: str) -> bool:
    lowered = raw_value.lower()
    if lowered not in ("true", "false"):
        raise ValueError(raw_value)
    return lowered == "true"


def _parse_edge_ids(field_text: str, record_text: str) -> tuple[str, ...]:
    """Parse the tsv edge field into target ids."""
    if not field_text.strip():
        return ()
    edges: list[str] = []
    for raw_edge in field_text.split(","):
        edge = raw_edge.strip()
        if not edge:
            raise GraphloadParseError(
                f"Invalid tsv record {_preview(record_text)}: edge list has a blank target id."
            )
        edges.append(edge)
    return tuple(edges)


def _require_token(raw_value: str, field_name: str, record_text: str) -> str:
    value = raw_value.strip()
    if not value:
        raise GraphloadParseError(
            f"Invalid tsv record {_preview(record_text)}: {field_name} is blank."
        )
    return value


def _preview(text: str, limit: int = 60) -> str:
    """Return a short quoted preview of record text for messages."""
    snippet = text if len(text) <= limit else text[:limit] + "..."
    return repr(snippet)
