import json
import logging

import pytest

from graphwire import (
    DISCRIMINATORS,
    Boolean,
    Codec,
    ErrorCode,
    Float,
    GraphwireError,
    Integer,
    InvalidIntegerLiteralError,
    InvalidJsonError,
    InvalidPayloadError,
    List,
    MalformedEnvelopeError,
    Map,
    Null,
    String,
    StructuralDepthExceededError,
    UnknownDiscriminatorError,
    decode,
    discriminator_of,
    dumps,
    encode,
    iter_loads,
    loads,
)


def _nested_lists(levels: int) -> dict:
    unit: dict = {"$type": "Integer", "_value": "1"}
    for _ in range(levels):
        unit = {"$type": "List", "_value": [unit]}
    return unit


# ============================================================================
# Dispatch / envelope
# ============================================================================


def test_discriminator_table_is_complete() -> None:
    assert set(DISCRIMINATORS) == {
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
    }


def test_unknown_discriminator() -> None:
    with pytest.raises(UnknownDiscriminatorError) as exc:
        decode({"$type": "Frobnicate", "_value": 1})
    assert exc.value.code == ErrorCode.UNKNOWN_DISCRIMINATOR
    assert exc.value.discriminator == "Frobnicate"


def test_discriminator_is_case_sensitive() -> None:
    with pytest.raises(UnknownDiscriminatorError):
        decode({"$type": "integer", "_value": "1"})


def test_non_string_discriminator_is_unknown() -> None:
    with pytest.raises(UnknownDiscriminatorError):
        decode({"$type": 5, "_value": "1"})


@pytest.mark.parametrize(
    "unit",
    [
        {"Frobnicate": 1},
        {"$type": "Integer"},
        {"_value": "1"},
        ["Integer", "1"],
        "Integer",
        None,
    ],
)
def test_malformed_envelope(unit: object) -> None:
    with pytest.raises(MalformedEnvelopeError) as exc:
        decode(unit)
    assert exc.value.code == ErrorCode.MALFORMED_ENVELOPE


def test_strict_envelope_rejects_extra_members() -> None:
    unit = {"$type": "Integer", "_value": "1", "extra": True}
    with pytest.raises(MalformedEnvelopeError, match="extra"):
        decode(unit)
    assert Codec(strict=False).decode(unit) == Integer(1)


def test_encode_pairs_discriminator_with_payload() -> None:
    assert encode(Integer(5)) == {"$type": "Integer", "_value": "5"}
    assert discriminator_of(Map({})) == "Map"


def test_encode_rejects_foreign_objects() -> None:
    with pytest.raises(TypeError):
        encode(5)  # type: ignore[arg-type]


def test_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        decode({"$type": "Integer", "_value": "x"})


# ============================================================================
# Null
# ============================================================================


def test_null_round_trip() -> None:
    assert loads('{"$type": "Null", "_value": null}') == Null()
    assert dumps(Null()) == '{"$type":"Null","_value":null}'


def test_null_rejects_payload() -> None:
    with pytest.raises(InvalidPayloadError):
        decode({"$type": "Null", "_value": 0})


def test_null_can_be_disabled() -> None:
    codec = Codec(allow_null=False)
    with pytest.raises(UnknownDiscriminatorError):
        codec.decode({"$type": "Null", "_value": None})


# ============================================================================
# Map
# ============================================================================


def test_map_decodes() -> None:
    value = loads('{ "$type":"Map", "_value": {"k": { "$type":"String", "_value": "bert" } } }')
    assert isinstance(value, Map)
    assert value["k"] == String("bert")


def test_map_encodes() -> None:
    output = dumps(Map({"k": String("bert")}))
    assert output == '{"$type":"Map","_value":{"k":{"$type":"String","_value":"bert"}}}'


def test_nested_map_decodes() -> None:
    value = loads(
        '{ "$type":"Map", "_value": {"k": { "$type":"Map", "_value":'
        ' {"m": { "$type":"String", "_value": "bert" } } } } }'
    )
    assert value["k"]["m"] == String("bert")


def test_map_duplicate_keys_last_write_wins() -> None:
    text = (
        '{"$type":"Map","_value":{'
        '"k":{"$type":"Integer","_value":"1"},'
        '"k":{"$type":"Integer","_value":"2"}}}'
    )
    value = loads(text)
    assert len(value) == 1
    assert value["k"] == Integer(2)


def test_map_accepts_pair_sequence_with_last_write_wins() -> None:
    unit = {
        "$type": "Map",
        "_value": [
            ["a", {"$type": "Boolean", "_value": True}],
            ["a", {"$type": "Boolean", "_value": False}],
            ["b", {"$type": "String", "_value": "x"}],
        ],
    }
    assert decode(unit) == Map({"a": Boolean(False), "b": String("x")})


def test_map_key_order_is_irrelevant() -> None:
    first = Map({"a": Integer(1), "b": Integer(2)})
    second = Map({"b": Integer(2), "a": Integer(1)})
    assert first == second


def test_map_rejects_non_object_payload() -> None:
    with pytest.raises(InvalidPayloadError):
        decode({"$type": "Map", "_value": "nope"})


# ============================================================================
# List
# ============================================================================


def test_list_decodes() -> None:
    value = loads('{ "$type":"List", "_value": [{ "$type":"Integer", "_value": "10" }]}')
    assert value == List((Integer(10),))


def test_nested_list_decodes() -> None:
    value = loads(
        '{ "$type":"List", "_value": [{ "$type":"List", "_value":'
        ' [{"$type":"Integer", "_value": "10"}] }]}'
    )
    assert value[0][0] == Integer(10)


def test_list_round_trip_preserves_order() -> None:
    items = [{"$type": "Integer", "_value": str(n)} for n in (5, 3, 9, 1, 7)]
    unit = {"$type": "List", "_value": items}
    value = decode(unit)
    assert len(value) == 5
    assert encode(value) == unit


def test_list_rejects_object_payload() -> None:
    with pytest.raises(InvalidPayloadError):
        decode({"$type": "List", "_value": {"0": {"$type": "Integer", "_value": "1"}}})


def test_map_in_map_in_list_round_trip() -> None:
    unit = {
        "$type": "List",
        "_value": [
            {
                "$type": "Map",
                "_value": {
                    "outer": {
                        "$type": "Map",
                        "_value": {
                            "n": {"$type": "Integer", "_value": "-9223372036854775808"},
                            "f": {"$type": "Float", "_value": "0.1"},
                            "none": {"$type": "Null", "_value": None},
                        },
                    },
                    "flag": {"$type": "Boolean", "_value": True},
                },
            },
            {"$type": "String", "_value": "tail"},
        ],
    }
    first = decode(unit)
    text = dumps(first)
    second = loads(text)
    assert second == first
    assert json.loads(text) == unit


# ============================================================================
# Error locations
# ============================================================================


def test_nested_error_reports_location() -> None:
    unit = {
        "$type": "Map",
        "_value": {
            "items": {
                "$type": "List",
                "_value": [
                    {"$type": "Integer", "_value": "1"},
                    {"$type": "Integer", "_value": "not-a-number"},
                ],
            }
        },
    }
    with pytest.raises(InvalidIntegerLiteralError) as exc:
        decode(unit)
    assert exc.value.path == "/_value/items/_value/1"
    assert str(exc.value).startswith("/_value/items/_value/1: ")
    assert exc.value.text == "not-a-number"


def test_root_error_location() -> None:
    with pytest.raises(GraphwireError) as exc:
        decode({"$type": "Integer", "_value": "x"})
    assert exc.value.path == "/"


def test_decode_failure_is_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="graphwire.codec"):
        with pytest.raises(UnknownDiscriminatorError):
            decode({"$type": "Frobnicate", "_value": 1})
    assert any("UNKNOWN_DISCRIMINATOR" in record.getMessage() for record in caplog.records)


# ============================================================================
# Depth limits
# ============================================================================


def test_depth_within_limit_decodes() -> None:
    codec = Codec(max_depth=4)
    value = codec.decode(_nested_lists(3))
    assert value[0][0][0] == Integer(1)


def test_depth_beyond_limit_fails() -> None:
    codec = Codec(max_depth=4)
    with pytest.raises(StructuralDepthExceededError) as exc:
        codec.decode(_nested_lists(4))
    assert exc.value.code == ErrorCode.STRUCTURAL_DEPTH_EXCEEDED
    assert exc.value.limit == 4


def test_encode_depth_beyond_limit_fails() -> None:
    value = Integer(1)
    for _ in range(5):
        value = List((value,))
    with pytest.raises(StructuralDepthExceededError):
        Codec(max_depth=5).encode(value)


def test_default_depth_limit_guards_adversarial_text() -> None:
    text = '{"$type":"List","_value":[' * 5000 + '{"$type":"Null","_value":null}' + "]}" * 5000
    with pytest.raises(StructuralDepthExceededError):
        loads(text)


@pytest.mark.parametrize("bad", [0, -1, True, 1.5, "8"])
def test_codec_rejects_bad_max_depth(bad: object) -> None:
    with pytest.raises(ValueError):
        Codec(max_depth=bad)  # type: ignore[arg-type]


def test_codec_rejects_bad_flags() -> None:
    with pytest.raises(TypeError):
        Codec(strict="yes")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Codec(allow_null=1)  # type: ignore[arg-type]


def test_codec_exposes_options() -> None:
    codec = Codec(max_depth=16, strict=False, allow_null=False)
    assert (codec.max_depth, codec.strict, codec.allow_null) == (16, False, False)
    assert "max_depth=16" in repr(codec)


# ============================================================================
# Text I/O
# ============================================================================


def test_loads_accepts_bytes() -> None:
    assert loads(b'{"$type":"Float","_value":"2.5"}') == Float(2.5)


def test_loads_rejects_invalid_json() -> None:
    with pytest.raises(InvalidJsonError) as exc:
        loads('{"$type": "Integer", ')
    assert exc.value.code == ErrorCode.INVALID_JSON


def test_loads_rejects_non_text() -> None:
    with pytest.raises(TypeError):
        loads(42)  # type: ignore[arg-type]


def test_dumps_indent() -> None:
    text = dumps(Integer(1), indent=2)
    assert json.loads(text) == {"$type": "Integer", "_value": "1"}
    assert "\n" in text


def test_iter_loads_reads_concatenated_envelopes() -> None:
    text = (
        '{"$type":"Integer","_value":"1"}\n'
        '  {"$type":"String","_value":"two"}{"$type":"Boolean","_value":true}\n'
    )
    assert list(iter_loads(text)) == [Integer(1), String("two"), Boolean(True)]


def test_iter_loads_empty_stream() -> None:
    assert list(iter_loads("  \n ")) == []


def test_iter_loads_reports_trailing_garbage() -> None:
    stream = iter_loads(b'{"$type":"Integer","_value":"1"} nope')
    assert next(stream) == Integer(1)
    with pytest.raises(InvalidJsonError):
        next(stream)


def test_iter_loads_rejects_invalid_utf8() -> None:
    payload = b'{"$type":"String","_value":"\xff"}'
    with pytest.raises(InvalidJsonError) as exc:
        list(iter_loads(payload))
    assert exc.value.code == ErrorCode.INVALID_JSON
    with pytest.raises(InvalidJsonError):
        loads(payload)
