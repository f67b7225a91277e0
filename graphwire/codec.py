"""Envelope dispatch and the recursive typed JSON codec.

Every value on the wire is an envelope with exactly two members::

    {"$type": "Integer", "_value": "9223372036854775807"}

``$type`` selects the variant and ``_value`` carries its payload. Maps,
lists and graph structures nest further envelopes inside their payloads;
the codec recurses through :meth:`Codec.decode_unit` for those, counting
depth so hostile input fails with a typed error instead of exhausting the
interpreter stack.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, Iterator, List as ListT, Mapping, Sequence, Tuple, Type, Union

from . import graph, scalars, temporal
from .errors import (
    GraphwireError,
    InvalidJsonError,
    InvalidPayloadError,
    MalformedEnvelopeError,
    StructuralDepthExceededError,
    UnknownDiscriminatorError,
)
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
    Node,
    Null,
    Path,
    Relationship,
    String,
    Time,
    Value,
    ZonedDateTime,
)
from .wire import Discriminator, Envelope

logger = logging.getLogger(__name__)

TYPE_KEY = "$type"
VALUE_KEY = "_value"

DEFAULT_MAX_DEPTH = 128

_WHITESPACE_REGEX = re.compile(r"[ \t\n\r]*")

TextInput = Union[str, bytes, bytearray]
DecodeFn = Callable[["Codec", Any, int, str], Value]
EncodeFn = Callable[["Codec", Any, int], Any]


def _last_write_wins(pairs: ListT[Tuple[str, Any]]) -> Dict[str, Any]:
    # JSON objects with repeated keys keep the last occurrence
    result: Dict[str, Any] = {}
    for key, item in pairs:
        result[key] = item
    return result


def _scalar_decoder(cls: Type[Value], decode: Callable[[Any], Any]) -> DecodeFn:
    def decoder(codec: "Codec", payload: Any, depth: int, path: str) -> Value:
        return cls(decode(payload))

    return decoder


def _scalar_encoder(encode: Callable[[Any], Any]) -> EncodeFn:
    def encoder(codec: "Codec", value: Any, depth: int) -> Any:
        return encode(value.value)

    return encoder


def _decode_null(codec: "Codec", payload: Any, depth: int, path: str) -> Null:
    if payload is not None:
        raise InvalidPayloadError("Null", "must be null")
    return Null()


def _encode_null(codec: "Codec", value: Null, depth: int) -> None:
    return None


def _map_items(payload: Any) -> Sequence[Tuple[Any, Any]]:
    if isinstance(payload, Mapping):
        return list(payload.items())
    if isinstance(payload, list) and all(
        isinstance(pair, (list, tuple)) and len(pair) == 2 for pair in payload
    ):
        return [(pair[0], pair[1]) for pair in payload]
    raise InvalidPayloadError("Map", "must be an object of typed values")


def _decode_map(codec: "Codec", payload: Any, depth: int, path: str) -> Map:
    entries: Dict[str, Value] = {}
    for key, unit in _map_items(payload):
        if not isinstance(key, str):
            raise InvalidPayloadError("Map", f"key {key!r} must be a string")
        entries[key] = codec.decode_unit(unit, depth + 1, f"{path}/{VALUE_KEY}/{key}")
    return Map(entries)


def _encode_map(codec: "Codec", value: Map, depth: int) -> Dict[str, Envelope]:
    return {key: codec.encode_unit(item, depth + 1) for key, item in value.value.items()}


def _decode_list(codec: "Codec", payload: Any, depth: int, path: str) -> List:
    if not isinstance(payload, list):
        raise InvalidPayloadError("List", "must be an array of typed values")
    return List(
        tuple(
            codec.decode_unit(unit, depth + 1, f"{path}/{VALUE_KEY}/{idx}")
            for idx, unit in enumerate(payload)
        )
    )


def _encode_list(codec: "Codec", value: List, depth: int) -> ListT[Envelope]:
    return [codec.encode_unit(item, depth + 1) for item in value.value]


_DECODERS: Dict[str, DecodeFn] = {
    "Null": _decode_null,
    "Boolean": _scalar_decoder(Boolean, scalars.decode_boolean),
    "Integer": _scalar_decoder(Integer, scalars.decode_integer),
    "Float": _scalar_decoder(Float, scalars.decode_float),
    "String": _scalar_decoder(String, scalars.decode_string),
    "ByteArray": _scalar_decoder(ByteArray, scalars.decode_byte_array),
    "Map": _decode_map,
    "List": _decode_list,
    "ZonedDateTime": _scalar_decoder(ZonedDateTime, temporal.decode_zoned_datetime),
    "DateTime": _scalar_decoder(DateTime, temporal.decode_datetime),
    "Time": _scalar_decoder(Time, temporal.decode_time),
    "Date": _scalar_decoder(Date, temporal.decode_date),
    "Duration": _scalar_decoder(Duration, temporal.decode_duration),
    "Node": graph.decode_node,
    "Relationship": graph.decode_relationship,
    "Path": graph.decode_path,
}

_ENCODERS: Dict[type, Tuple[Discriminator, EncodeFn]] = {
    Null: ("Null", _encode_null),
    Boolean: ("Boolean", _scalar_encoder(scalars.encode_boolean)),
    Integer: ("Integer", _scalar_encoder(scalars.encode_integer)),
    Float: ("Float", _scalar_encoder(scalars.encode_float)),
    String: ("String", _scalar_encoder(scalars.encode_string)),
    ByteArray: ("ByteArray", _scalar_encoder(scalars.encode_byte_array)),
    Map: ("Map", _encode_map),
    List: ("List", _encode_list),
    ZonedDateTime: ("ZonedDateTime", _scalar_encoder(temporal.encode_zoned_datetime)),
    DateTime: ("DateTime", _scalar_encoder(temporal.encode_datetime)),
    Time: ("Time", _scalar_encoder(temporal.encode_time)),
    Date: ("Date", _scalar_encoder(temporal.encode_date)),
    Duration: ("Duration", _scalar_encoder(temporal.encode_duration)),
    Node: ("Node", graph.encode_node),
    Relationship: ("Relationship", graph.encode_relationship),
    Path: ("Path", graph.encode_path),
}

DISCRIMINATORS: Tuple[str, ...] = tuple(_DECODERS)


class Codec:
    """Decoder/encoder for typed JSON envelopes.

    Options are keyword-only and validated up front:

    ``max_depth``
        Deepest envelope nesting accepted on decode or produced on encode.
    ``strict``
        Reject envelopes that carry members besides ``$type`` and ``_value``.
    ``allow_null``
        Accept ``Null`` envelopes. When false, ``Null`` is an unknown
        discriminator, matching producers that never emit it.

    Instances hold no mutable state and can be shared between threads.
    """

    def __init__(
        self,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        strict: bool = True,
        allow_null: bool = True,
    ) -> None:
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth <= 0:
            raise ValueError("max_depth must be a positive integer")
        if not isinstance(strict, bool):
            raise TypeError("strict must be a bool")
        if not isinstance(allow_null, bool):
            raise TypeError("allow_null must be a bool")
        self._max_depth = max_depth
        self._strict = strict
        self._allow_null = allow_null

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def allow_null(self) -> bool:
        return self._allow_null

    def __repr__(self) -> str:
        return (
            f"Codec(max_depth={self._max_depth}, strict={self._strict}, "
            f"allow_null={self._allow_null})"
        )

    # ------------------------------------------------------------------
    # decoding
    # ------------------------------------------------------------------

    def decode(self, unit: Any) -> Value:
        """Decode one already-parsed envelope into a Value."""
        try:
            return self.decode_unit(unit, 1, "")
        except RecursionError as err:
            raise StructuralDepthExceededError(None) from err
        except GraphwireError as err:
            logger.debug("decode failed at %s [%s]: %s", err.path, err.code, err.message)
            raise

    def loads(self, text: TextInput) -> Value:
        """Parse raw text holding a single envelope and decode it."""
        return self.decode(self._parse(text))

    def iter_loads(self, text: TextInput) -> Iterator[Value]:
        """Decode a stream of concatenated or whitespace-separated envelopes."""
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8")
            except UnicodeDecodeError as err:
                raise InvalidJsonError(f"invalid JSON: {err}") from err
        parser = json.JSONDecoder(object_pairs_hook=_last_write_wins)
        idx = _WHITESPACE_REGEX.match(text, 0).end()
        count = 0
        while idx < len(text):
            try:
                unit, idx = parser.raw_decode(text, idx)
            except json.JSONDecodeError as err:
                raise InvalidJsonError(f"invalid JSON: {err}") from err
            except RecursionError as err:
                raise StructuralDepthExceededError(None) from err
            yield self.decode(unit)
            count += 1
            idx = _WHITESPACE_REGEX.match(text, idx).end()
        logger.debug("decoded %d values from stream", count)

    def decode_unit(self, unit: Any, depth: int, path: str) -> Value:
        """Decode a nested envelope found at ``path``, ``depth`` levels down.

        Codecs for container variants call back into this for their
        children. Errors are tagged with the innermost location.
        """
        try:
            if depth > self._max_depth:
                raise StructuralDepthExceededError(self._max_depth)
            discriminator, payload = self._open_envelope(unit)
            decoder = _DECODERS.get(discriminator)
            if decoder is None or (discriminator == "Null" and not self._allow_null):
                raise UnknownDiscriminatorError(discriminator)
            return decoder(self, payload, depth, path)
        except GraphwireError as err:
            err.at(path)
            raise

    def _open_envelope(self, unit: Any) -> Tuple[str, Any]:
        if not isinstance(unit, Mapping):
            raise MalformedEnvelopeError(
                f"expected a {{{TYPE_KEY!r}, {VALUE_KEY!r}}} object, got {type(unit).__name__}"
            )
        if TYPE_KEY not in unit:
            raise MalformedEnvelopeError(f"envelope is missing {TYPE_KEY!r}")
        if VALUE_KEY not in unit:
            raise MalformedEnvelopeError(f"envelope is missing {VALUE_KEY!r}")
        if self._strict and len(unit) != 2:
            extra = sorted(str(key) for key in unit if key not in (TYPE_KEY, VALUE_KEY))
            raise MalformedEnvelopeError(f"envelope has unexpected members {extra}")
        discriminator = unit[TYPE_KEY]
        if not isinstance(discriminator, str):
            raise UnknownDiscriminatorError(discriminator)
        return discriminator, unit[VALUE_KEY]

    def _parse(self, text: TextInput) -> Any:
        if not isinstance(text, (str, bytes, bytearray)):
            raise TypeError(f"expected str or bytes, got {type(text).__name__}")
        try:
            return json.loads(text, object_pairs_hook=_last_write_wins)
        except RecursionError as err:
            raise StructuralDepthExceededError(None) from err
        except ValueError as err:
            # JSONDecodeError and UnicodeDecodeError both land here
            raise InvalidJsonError(f"invalid JSON: {err}") from err

    # ------------------------------------------------------------------
    # encoding
    # ------------------------------------------------------------------

    def encode(self, value: Value) -> Envelope:
        """Encode a Value into its envelope (a JSON-ready dict)."""
        try:
            return self.encode_unit(value, 1)
        except RecursionError as err:
            raise StructuralDepthExceededError(None) from err

    def dumps(self, value: Value, *, indent: Union[int, str, None] = None) -> str:
        """Encode a Value and serialize it to JSON text."""
        separators = (",", ":") if indent is None else (",", ": ")
        return json.dumps(
            self.encode(value),
            ensure_ascii=False,
            allow_nan=False,
            indent=indent,
            separators=separators,
        )

    def encode_unit(self, value: Value, depth: int) -> Envelope:
        """Encode a nested Value ``depth`` levels down."""
        if depth > self._max_depth:
            raise StructuralDepthExceededError(self._max_depth)
        discriminator, encoder = _lookup_encoder(value)
        return {"$type": discriminator, "_value": encoder(self, value, depth)}

    def discriminator_of(self, value: Value) -> Discriminator:
        return _lookup_encoder(value)[0]


def _lookup_encoder(value: Any) -> Tuple[Discriminator, EncodeFn]:
    entry = _ENCODERS.get(type(value))
    if entry is None:
        raise TypeError(f"cannot encode {type(value).__name__}; expected a graphwire Value")
    return entry


_DEFAULT_CODEC = Codec()


def decode(unit: Any) -> Value:
    return _DEFAULT_CODEC.decode(unit)


def encode(value: Value) -> Envelope:
    return _DEFAULT_CODEC.encode(value)


def loads(text: TextInput) -> Value:
    return _DEFAULT_CODEC.loads(text)


def dumps(value: Value, *, indent: Union[int, str, None] = None) -> str:
    return _DEFAULT_CODEC.dumps(value, indent=indent)


def iter_loads(text: TextInput) -> Iterator[Value]:
    return _DEFAULT_CODEC.iter_loads(text)


def discriminator_of(value: Value) -> Discriminator:
    """Return the ``$type`` tag used for ``value``."""
    return _DEFAULT_CODEC.discriminator_of(value)
