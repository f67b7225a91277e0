"""Typed JSON value codec for graph query results."""

from .codec import (
    DEFAULT_MAX_DEPTH,
    DISCRIMINATORS,
    Codec,
    decode,
    discriminator_of,
    dumps,
    encode,
    iter_loads,
    loads,
)
from .convert import from_python, to_python
from .errors import (
    ByteOutOfRangeError,
    ErrorCode,
    GraphwireError,
    InvalidFloatLiteralError,
    InvalidIntegerLiteralError,
    InvalidJsonError,
    InvalidPayloadError,
    InvalidTemporalLiteralError,
    MalformedEnvelopeError,
    MissingFieldError,
    StructuralDepthExceededError,
    UnexpectedPathElementError,
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

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Codec",
    "DEFAULT_MAX_DEPTH",
    "DISCRIMINATORS",
    "decode",
    "encode",
    "loads",
    "dumps",
    "iter_loads",
    "discriminator_of",
    "from_python",
    "to_python",
    # Value variants
    "Value",
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
    # Error types
    "ErrorCode",
    "GraphwireError",
    "UnknownDiscriminatorError",
    "InvalidIntegerLiteralError",
    "InvalidFloatLiteralError",
    "ByteOutOfRangeError",
    "InvalidTemporalLiteralError",
    "MissingFieldError",
    "UnexpectedPathElementError",
    "StructuralDepthExceededError",
    "MalformedEnvelopeError",
    "InvalidPayloadError",
    "InvalidJsonError",
]
