"""Immutable value model for the typed JSON wire format.

Every value exchanged with the query endpoint is one of the classes below.
The set is closed: the codec dispatches on the exact class, so new variants
must be registered there as well. Construction validates the payload, which
means any instance that exists can be encoded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Sequence, Tuple, Union

I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1


class Value:
    """Common base of every typed value variant."""

    __slots__ = ()


def _freeze_properties(owner: str, props: Any) -> Mapping[str, Value]:
    if not isinstance(props, Mapping):
        raise TypeError(f"{owner} must be a mapping of str -> Value")
    frozen = {}
    for key, item in props.items():
        if not isinstance(key, str):
            raise TypeError(f"{owner} keys must be strings, got {type(key).__name__}")
        if not isinstance(item, Value):
            raise TypeError(f"{owner}[{key!r}] must be a Value, got {type(item).__name__}")
        frozen[key] = item
    return MappingProxyType(frozen)


def _ensure_whole_seconds(kind: str, value: Union[datetime, time]) -> None:
    if value.microsecond:
        raise ValueError(f"{kind} does not carry sub-second precision")


@dataclass(frozen=True)
class Null(Value):
    """The absent value."""


@dataclass(frozen=True)
class Boolean(Value):
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError("Boolean requires a bool")


@dataclass(frozen=True)
class Integer(Value):
    """Signed 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("Integer requires an int")
        if self.value < I64_MIN or self.value > I64_MAX:
            raise ValueError("Integer must fit within signed 64-bit range")


@dataclass(frozen=True)
class Float(Value):
    """IEEE-754 double."""

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError("Float requires a float")
        object.__setattr__(self, "value", float(self.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Float):
            return NotImplemented
        if math.isnan(self.value) and math.isnan(other.value):
            return True
        return self.value == other.value

    def __hash__(self) -> int:
        # NaN hashes by identity, but all NaN Floats compare equal
        if math.isnan(self.value):
            return hash((Float, "NaN"))
        return hash((Float, self.value))


@dataclass(frozen=True)
class String(Value):
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("String requires a str")


@dataclass(frozen=True)
class ByteArray(Value):
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise TypeError("ByteArray requires a bytes-like object")
        object.__setattr__(self, "value", bytes(self.value))


@dataclass(frozen=True)
class Map(Value):
    """String-keyed mapping of values; key order carries no meaning."""

    value: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _freeze_properties("Map", self.value))

    def __getitem__(self, key: str) -> Value:
        return self.value[key]

    def __len__(self) -> int:
        return len(self.value)

    def __hash__(self) -> int:
        return hash((Map, frozenset(self.value.items())))


@dataclass(frozen=True)
class List(Value):
    value: Tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Sequence):
            raise TypeError("List requires a sequence of Value")
        items = tuple(self.value)
        for idx, item in enumerate(items):
            if not isinstance(item, Value):
                raise TypeError(f"List[{idx}] must be a Value, got {type(item).__name__}")
        object.__setattr__(self, "value", items)

    def __getitem__(self, idx: int) -> Value:
        return self.value[idx]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.value)

    def __len__(self) -> int:
        return len(self.value)


@dataclass(frozen=True, eq=False)
class ZonedDateTime(Value):
    """Timestamp with a fixed UTC offset.

    Two instances are equal only when both the wall-clock time and the offset
    match, so ``12:00+02:00`` and ``10:00+00:00`` are distinct values.
    """

    value: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.value, datetime):
            raise TypeError("ZonedDateTime requires a datetime")
        offset = self.value.utcoffset()
        if offset is None:
            raise ValueError("ZonedDateTime requires a timezone-aware datetime")
        if offset % timedelta(minutes=1):
            raise ValueError("ZonedDateTime offset must be a whole number of minutes")
        _ensure_whole_seconds("ZonedDateTime", self.value)

    @property
    def offset(self) -> timedelta:
        return self.value.utcoffset()  # type: ignore[return-value]

    def _key(self) -> Tuple[datetime, timedelta]:
        return self.value.replace(tzinfo=None), self.offset

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash((ZonedDateTime,) + self._key())


@dataclass(frozen=True)
class DateTime(Value):
    """Timestamp without an offset."""

    value: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.value, datetime):
            raise TypeError("DateTime requires a datetime")
        if self.value.tzinfo is not None:
            raise ValueError("DateTime must be naive; use ZonedDateTime for offsets")
        _ensure_whole_seconds("DateTime", self.value)


@dataclass(frozen=True)
class Time(Value):
    value: time

    def __post_init__(self) -> None:
        if not isinstance(self.value, time):
            raise TypeError("Time requires a time")
        if self.value.tzinfo is not None:
            raise ValueError("Time must not carry an offset")
        _ensure_whole_seconds("Time", self.value)


@dataclass(frozen=True)
class Date(Value):
    value: date

    def __post_init__(self) -> None:
        # datetime is a date subclass; reject it so DateTime stays distinct
        if isinstance(self.value, datetime) or not isinstance(self.value, date):
            raise TypeError("Date requires a date")


@dataclass(frozen=True)
class Duration(Value):
    value: timedelta

    def __post_init__(self) -> None:
        if not isinstance(self.value, timedelta):
            raise TypeError("Duration requires a timedelta")


@dataclass(frozen=True)
class Node(Value):
    """A graph node as returned by the query endpoint.

    ``element_id`` is opaque: compare it for equality, never parse it.
    Labels keep the order they were given in.
    """

    element_id: str
    labels: Tuple[str, ...] = ()
    properties: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.element_id, str):
            raise TypeError("Node element_id must be a string")
        if isinstance(self.labels, str) or not isinstance(self.labels, Sequence):
            raise TypeError("Node labels must be a sequence of strings")
        labels = tuple(self.labels)
        for label in labels:
            if not isinstance(label, str):
                raise TypeError("Node labels must be strings")
        object.__setattr__(self, "labels", labels)
        object.__setattr__(
            self, "properties", _freeze_properties("Node properties", self.properties)
        )

    def __hash__(self) -> int:
        return hash((Node, self.element_id, self.labels, frozenset(self.properties.items())))


@dataclass(frozen=True)
class Relationship(Value):
    """A typed, directed edge between two nodes.

    The start and end ids may name nodes that are not part of the same
    message; nothing here checks them.
    """

    element_id: str
    type: str
    start_node_element_id: str
    end_node_element_id: str
    properties: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("element_id", "type", "start_node_element_id", "end_node_element_id"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"Relationship {name} must be a string")
        object.__setattr__(
            self, "properties", _freeze_properties("Relationship properties", self.properties)
        )

    def __hash__(self) -> int:
        return hash(
            (
                Relationship,
                self.element_id,
                self.type,
                self.start_node_element_id,
                self.end_node_element_id,
                frozenset(self.properties.items()),
            )
        )


@dataclass(frozen=True)
class Path(Value):
    """A walk through the graph.

    ``relationships[i]`` is understood to join ``nodes[i]`` and
    ``nodes[i + 1]``. That convention is trusted, not enforced; call
    :meth:`is_linked` when the element ids need checking.
    """

    nodes: Tuple[Node, ...] = ()
    relationships: Tuple[Relationship, ...] = ()

    def __post_init__(self) -> None:
        nodes = tuple(self.nodes)
        rels = tuple(self.relationships)
        for idx, node in enumerate(nodes):
            if not isinstance(node, Node):
                raise TypeError(f"Path nodes[{idx}] must be a Node")
        for idx, rel in enumerate(rels):
            if not isinstance(rel, Relationship):
                raise TypeError(f"Path relationships[{idx}] must be a Relationship")
        object.__setattr__(self, "nodes", nodes)
        object.__setattr__(self, "relationships", rels)

    def __len__(self) -> int:
        return len(self.relationships)

    @property
    def start_node(self) -> Optional[Node]:
        return self.nodes[0] if self.nodes else None

    @property
    def end_node(self) -> Optional[Node]:
        return self.nodes[-1] if self.nodes else None

    def is_linked(self) -> bool:
        """Return True when every relationship joins its neighbouring nodes.

        Direction is ignored because a walk may traverse an edge backwards.
        """
        if not self.nodes:
            return not self.relationships
        if len(self.relationships) != len(self.nodes) - 1:
            return False
        for idx, rel in enumerate(self.relationships):
            ends = {self.nodes[idx].element_id, self.nodes[idx + 1].element_id}
            if {rel.start_node_element_id, rel.end_node_element_id} != ends:
                return False
        return True
