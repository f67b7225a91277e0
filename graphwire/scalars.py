"""Payload codecs for the scalar variants.

Integers and floats travel as decimal strings rather than JSON numbers so
that generic JSON readers (which often parse every number as a double) do
not silently round 64-bit integers.
"""

from __future__ import annotations

import math
import re
from typing import Any, List

from .errors import (
    ByteOutOfRangeError,
    InvalidFloatLiteralError,
    InvalidIntegerLiteralError,
    InvalidPayloadError,
)
from .values import I64_MAX, I64_MIN

_INTEGER_REGEX = re.compile(r"[+-]?[0-9]+")
_FLOAT_REGEX = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_NON_FINITE_LITERALS = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "-Infinity": -math.inf,
}


def decode_boolean(payload: Any) -> bool:
    if not isinstance(payload, bool):
        raise InvalidPayloadError("Boolean", f"must be a JSON boolean, got {type(payload).__name__}")
    return payload


def encode_boolean(value: bool) -> bool:
    return value


def decode_integer(payload: Any) -> int:
    if not isinstance(payload, str):
        raise InvalidIntegerLiteralError(payload, "expected a decimal string")
    if not _INTEGER_REGEX.fullmatch(payload):
        raise InvalidIntegerLiteralError(payload)
    try:
        number = int(payload)
    except ValueError as err:
        raise InvalidIntegerLiteralError(payload, "outside signed 64-bit range") from err
    if number < I64_MIN or number > I64_MAX:
        raise InvalidIntegerLiteralError(payload, "outside signed 64-bit range")
    return number


def encode_integer(value: int) -> str:
    return str(value)


def decode_float(payload: Any) -> float:
    if not isinstance(payload, str):
        raise InvalidFloatLiteralError(payload, "expected a decimal string")
    if payload in _NON_FINITE_LITERALS:
        return _NON_FINITE_LITERALS[payload]
    if not _FLOAT_REGEX.fullmatch(payload):
        raise InvalidFloatLiteralError(payload)
    number = float(payload)
    if math.isinf(number):
        raise InvalidFloatLiteralError(payload, "outside double-precision range")
    return number


def encode_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # repr() is the shortest text that parses back to the same bits
    return repr(value)


def decode_string(payload: Any) -> str:
    if not isinstance(payload, str):
        raise InvalidPayloadError("String", f"must be a JSON string, got {type(payload).__name__}")
    return payload


def encode_string(value: str) -> str:
    return value


def decode_byte_array(payload: Any) -> bytes:
    if not isinstance(payload, list):
        raise InvalidPayloadError("ByteArray", "must be an array of integers")
    for idx, item in enumerate(payload):
        if isinstance(item, bool) or not isinstance(item, int):
            raise InvalidPayloadError(
                "ByteArray", f"element {idx} must be an integer, got {type(item).__name__}"
            )
        if item < 0 or item > 255:
            raise ByteOutOfRangeError(idx, item)
    return bytes(payload)


def encode_byte_array(value: bytes) -> List[int]:
    return list(value)
