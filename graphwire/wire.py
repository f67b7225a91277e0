"""Static shapes of the JSON documents exchanged on the wire."""

from __future__ import annotations

from typing import Any, Dict, List

from typing_extensions import Literal, TypedDict

Discriminator = Literal[
    "Null",
    "Boolean",
    "Integer",
    "Float",
    "String",
    "ByteArray",
    "Map",
    "List",
    "ZonedDateTime",
    "DateTime",
    "Time",
    "Date",
    "Duration",
    "Node",
    "Relationship",
    "Path",
]

Envelope = TypedDict(
    "Envelope",
    {
        "$type": str,
        "_value": Any,
    },
)

NodePayload = TypedDict(
    "NodePayload",
    {
        "_element_id": str,
        "_labels": List[str],
        "_properties": Dict[str, Envelope],
    },
)

RelationshipPayload = TypedDict(
    "RelationshipPayload",
    {
        "_element_id": str,
        "_type": str,
        "_start_node_element_id": str,
        "_end_node_element_id": str,
        "_properties": Dict[str, Envelope],
    },
)
