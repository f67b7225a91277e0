"""Typed errors raised by the graphwire codecs."""

from __future__ import annotations

from typing import Any, Optional


class ErrorCode:
    """Error codes attached to every graphwire exception."""
    UNKNOWN = "UNKNOWN"
    UNKNOWN_DISCRIMINATOR = "UNKNOWN_DISCRIMINATOR"
    INVALID_INTEGER_LITERAL = "INVALID_INTEGER_LITERAL"
    INVALID_FLOAT_LITERAL = "INVALID_FLOAT_LITERAL"
    BYTE_OUT_OF_RANGE = "BYTE_OUT_OF_RANGE"
    INVALID_TEMPORAL_LITERAL = "INVALID_TEMPORAL_LITERAL"
    MISSING_FIELD = "MISSING_FIELD"
    UNEXPECTED_PATH_ELEMENT = "UNEXPECTED_PATH_ELEMENT"
    STRUCTURAL_DEPTH_EXCEEDED = "STRUCTURAL_DEPTH_EXCEEDED"
    MALFORMED_ENVELOPE = "MALFORMED_ENVELOPE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_JSON = "INVALID_JSON"


class GraphwireError(ValueError):
    """Base exception class for all graphwire codec errors."""

    def __init__(self, message: str, code: str = ErrorCode.UNKNOWN):
        super().__init__(message)
        self.message = message
        self.code = code
        self.path = ""

    def at(self, path: str) -> "GraphwireError":
        """Record where in the input tree the error was raised.

        The innermost location wins; outer frames re-raise the same
        instance without overwriting it.
        """
        if not self.path:
            self.path = path or "/"
            self.args = (f"{self.path}: {self.message}",)
        return self


class UnknownDiscriminatorError(GraphwireError):
    """Error raised when an envelope carries an unrecognised ``$type``."""

    def __init__(self, discriminator: Any):
        super().__init__(
            f"unknown discriminator {discriminator!r}", ErrorCode.UNKNOWN_DISCRIMINATOR
        )
        self.discriminator = discriminator


class InvalidIntegerLiteralError(GraphwireError):
    """Error raised when an Integer payload is not a signed 64-bit decimal string."""

    def __init__(self, text: Any, reason: str = "not a decimal integer"):
        super().__init__(
            f"invalid Integer literal {text!r}: {reason}", ErrorCode.INVALID_INTEGER_LITERAL
        )
        self.text = text


class InvalidFloatLiteralError(GraphwireError):
    """Error raised when a Float payload is not a decimal string."""

    def __init__(self, text: Any, reason: str = "not a decimal number"):
        super().__init__(
            f"invalid Float literal {text!r}: {reason}", ErrorCode.INVALID_FLOAT_LITERAL
        )
        self.text = text


class ByteOutOfRangeError(GraphwireError):
    """Error raised when a ByteArray element lies outside [0, 255]."""

    def __init__(self, index: int, value: int):
        super().__init__(
            f"ByteArray element {index} is {value}, expected 0..255",
            ErrorCode.BYTE_OUT_OF_RANGE,
        )
        self.index = index
        self.value = value


class InvalidTemporalLiteralError(GraphwireError):
    """Error raised when a temporal payload does not match its canonical pattern."""

    def __init__(self, kind: str, text: Any, reason: str = "does not match pattern"):
        super().__init__(
            f"invalid {kind} literal {text!r}: {reason}", ErrorCode.INVALID_TEMPORAL_LITERAL
        )
        self.kind = kind
        self.text = text


class MissingFieldError(GraphwireError):
    """Error raised when a Node or Relationship payload lacks a required member."""

    def __init__(self, field: str, discriminator: str):
        super().__init__(
            f"{discriminator} payload is missing required field {field!r}",
            ErrorCode.MISSING_FIELD,
        )
        self.field = field
        self.discriminator = discriminator


class UnexpectedPathElementError(GraphwireError):
    """Error raised when a Path element is neither a Node nor a Relationship."""

    def __init__(self, index: int, discriminator: str):
        super().__init__(
            f"Path element {index} is a {discriminator}, expected Node or Relationship",
            ErrorCode.UNEXPECTED_PATH_ELEMENT,
        )
        self.index = index
        self.discriminator = discriminator


class StructuralDepthExceededError(GraphwireError):
    """Error raised when nesting goes deeper than the configured limit."""

    def __init__(self, limit: Optional[int]):
        detail = f"limit of {limit}" if limit is not None else "interpreter limit"
        super().__init__(
            f"value nesting exceeds the {detail}", ErrorCode.STRUCTURAL_DEPTH_EXCEEDED
        )
        self.limit = limit


class MalformedEnvelopeError(GraphwireError):
    """Error raised when a unit is not a ``{"$type", "_value"}`` object."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.MALFORMED_ENVELOPE)


class InvalidPayloadError(GraphwireError):
    """Error raised when a payload has the wrong JSON shape for its discriminator."""

    def __init__(self, discriminator: str, message: str):
        super().__init__(f"{discriminator} payload {message}", ErrorCode.INVALID_PAYLOAD)
        self.discriminator = discriminator


class InvalidJsonError(GraphwireError):
    """Error raised when raw text cannot be parsed as JSON."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_JSON)
