"""Conversion between plain Python objects and typed values."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Mapping

from .values import (
    Boolean,
    ByteArray,
    Date,
    DateTime,
    Duration,
    Float,
    Integer,
    List,
    Map,
    Null,
    String,
    Time,
    Value,
    ZonedDateTime,
)


def from_python(obj: Any) -> Value:
    """Tag a native Python object with the matching value variant.

    Values pass through unchanged, so mixed trees are fine. Order of the
    checks matters: ``bool`` before ``int`` and ``datetime`` before ``date``
    because of subclassing.
    """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteArray(bytes(obj))
    if isinstance(obj, datetime):
        if obj.utcoffset() is not None:
            return ZonedDateTime(obj)
        return DateTime(obj)
    if isinstance(obj, date):
        return Date(obj)
    if isinstance(obj, time):
        return Time(obj)
    if isinstance(obj, timedelta):
        return Duration(obj)
    if isinstance(obj, Mapping):
        entries = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"map keys must be strings, got {type(key).__name__}")
            entries[key] = from_python(item)
        return Map(entries)
    if isinstance(obj, (list, tuple)):
        return List(tuple(from_python(item) for item in obj))
    raise TypeError(f"unsupported value type: {type(obj)!r}")


def to_python(value: Value) -> Any:
    """Unwrap a typed value into plain Python objects.

    Maps become dicts and lists become lists. Nodes, relationships and
    paths have no plainer form and are returned as they are.
    """
    if not isinstance(value, Value):
        raise TypeError(f"expected a graphwire Value, got {type(value).__name__}")
    if isinstance(value, Null):
        return None
    if isinstance(value, Map):
        return {key: to_python(item) for key, item in value.value.items()}
    if isinstance(value, List):
        return [to_python(item) for item in value.value]
    return getattr(value, "value", value)
