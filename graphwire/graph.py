"""Codecs for the graph-structure variants: Node, Relationship and Path.

A Path travels as one flat array of Node and Relationship envelopes in walk
order (``n0, r0, n1, r1, ... nk``). Decoding splits it into two ordered
tuples; the relative order inside each tuple is all that links
``relationships[i]`` to ``nodes[i]`` and ``nodes[i + 1]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from .errors import InvalidPayloadError, MissingFieldError, UnexpectedPathElementError
from .values import Node, Path, Relationship, Value
from .wire import Envelope, NodePayload, RelationshipPayload

if TYPE_CHECKING:
    from .codec import Codec

ELEMENT_ID = "_element_id"
LABELS = "_labels"
PROPERTIES = "_properties"
REL_TYPE = "_type"
START_NODE_ELEMENT_ID = "_start_node_element_id"
END_NODE_ELEMENT_ID = "_end_node_element_id"


def _ensure_object(payload: Any, discriminator: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise InvalidPayloadError(discriminator, "must be a JSON object")
    return payload


def _require(payload: Mapping[str, Any], name: str, discriminator: str) -> Any:
    if name not in payload:
        raise MissingFieldError(name, discriminator)
    return payload[name]


def _require_str(payload: Mapping[str, Any], name: str, discriminator: str) -> str:
    value = _require(payload, name, discriminator)
    if not isinstance(value, str):
        raise InvalidPayloadError(discriminator, f"field {name!r} must be a string")
    return value


def _decode_properties(
    codec: "Codec", payload: Mapping[str, Any], discriminator: str, depth: int, path: str
) -> Dict[str, Value]:
    raw = _require(payload, PROPERTIES, discriminator)
    if not isinstance(raw, Mapping):
        raise InvalidPayloadError(discriminator, f"field {PROPERTIES!r} must be an object")
    return {
        key: codec.decode_unit(unit, depth + 1, f"{path}/_value/{PROPERTIES}/{key}")
        for key, unit in raw.items()
    }


def _encode_properties(
    codec: "Codec", props: Mapping[str, Value], depth: int
) -> Dict[str, Envelope]:
    return {key: codec.encode_unit(item, depth + 1) for key, item in props.items()}


def decode_node(codec: "Codec", payload: Any, depth: int, path: str) -> Node:
    fields = _ensure_object(payload, "Node")
    element_id = _require_str(fields, ELEMENT_ID, "Node")
    labels = _require(fields, LABELS, "Node")
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        raise InvalidPayloadError("Node", f"field {LABELS!r} must be an array of strings")
    properties = _decode_properties(codec, fields, "Node", depth, path)
    return Node(element_id, tuple(labels), properties)


def encode_node(codec: "Codec", node: Node, depth: int) -> NodePayload:
    return {
        ELEMENT_ID: node.element_id,
        LABELS: list(node.labels),
        PROPERTIES: _encode_properties(codec, node.properties, depth),
    }


def decode_relationship(codec: "Codec", payload: Any, depth: int, path: str) -> Relationship:
    fields = _ensure_object(payload, "Relationship")
    element_id = _require_str(fields, ELEMENT_ID, "Relationship")
    rel_type = _require_str(fields, REL_TYPE, "Relationship")
    start_id = _require_str(fields, START_NODE_ELEMENT_ID, "Relationship")
    end_id = _require_str(fields, END_NODE_ELEMENT_ID, "Relationship")
    properties = _decode_properties(codec, fields, "Relationship", depth, path)
    return Relationship(element_id, rel_type, start_id, end_id, properties)


def encode_relationship(codec: "Codec", rel: Relationship, depth: int) -> RelationshipPayload:
    return {
        ELEMENT_ID: rel.element_id,
        REL_TYPE: rel.type,
        START_NODE_ELEMENT_ID: rel.start_node_element_id,
        END_NODE_ELEMENT_ID: rel.end_node_element_id,
        PROPERTIES: _encode_properties(codec, rel.properties, depth),
    }


def decode_path(codec: "Codec", payload: Any, depth: int, path: str) -> Path:
    """Split the flat walk into nodes and relationships.

    Elements are classified by the variant they decode to, in one pass.
    Whether each relationship really joins its neighbouring nodes is left
    to :meth:`Path.is_linked`.
    """
    if not isinstance(payload, list):
        raise InvalidPayloadError("Path", "must be an array of Node and Relationship values")
    nodes: List[Node] = []
    relationships: List[Relationship] = []
    for idx, unit in enumerate(payload):
        element_path = f"{path}/_value/{idx}"
        element = codec.decode_unit(unit, depth + 1, element_path)
        if isinstance(element, Node):
            nodes.append(element)
        elif isinstance(element, Relationship):
            relationships.append(element)
        else:
            raise UnexpectedPathElementError(
                idx, codec.discriminator_of(element)
            ).at(element_path)
    return Path(tuple(nodes), tuple(relationships))


def encode_path(codec: "Codec", value: Path, depth: int) -> List[Envelope]:
    """Re-interleave the walk as ``n0, r0, n1, r1, ... nk``.

    Should the tuples be unbalanced, the surplus of the longer one follows in
    order, which still decodes back to an equal Path.
    """
    elements: List[Envelope] = []
    nodes = value.nodes
    rels = value.relationships
    for idx in range(max(len(nodes), len(rels))):
        if idx < len(nodes):
            elements.append(codec.encode_unit(nodes[idx], depth + 1))
        if idx < len(rels):
            elements.append(codec.encode_unit(rels[idx], depth + 1))
    return elements
