"""Tests for the tagged-envelope codec."""

import json
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from app.core.codec import Codec, build_default_codec, decode, encode
from app.core.exceptions import CodecError


@pytest.fixture
def codec() -> Codec:
    return build_default_codec()


def test_datetime_is_wrapped_in_envelope(codec):
    moment = datetime(2026, 11, 2, 14, 30, tzinfo=UTC)

    assert codec.encode(moment) == {"kind": "datetime", "payload": moment.isoformat()}


def test_datetime_keeps_offset_and_microseconds(codec):
    moment = datetime(2026, 3, 29, 1, 59, 59, 123456, tzinfo=timezone(timedelta(hours=5, minutes=30)))

    restored = codec.loads(codec.dumps(moment))

    assert restored == moment
    assert restored.utcoffset() == timedelta(hours=5, minutes=30)
    assert restored.microsecond == 123456


def test_nested_values_are_restored(codec):
    value = {
        "stay": {"check_in": date(2026, 11, 2), "nights": 3},
        "guests": [{"born": date(1990, 1, 31), "lead": True}, None],
        "total": Decimal("412.50"),
        "ref": UUID("12345678-1234-5678-1234-567812345678"),
        "note": "café",
        "ratio": 0.25,
    }

    assert codec.loads(codec.dumps(value)) == value


def test_date_is_not_widened_to_datetime(codec):
    restored = codec.decode(codec.encode(date(2026, 1, 1)))

    assert type(restored) is date


def test_plain_values_pass_through(codec):
    value = {"a": 1, "b": [True, None, "x"], "c": 2.5}

    assert codec.encode(value) == value
    assert codec.decode(value) == value


def test_tuples_encode_as_lists(codec):
    assert codec.encode((1, date(2026, 1, 1))) == [1, {"kind": "date", "payload": "2026-01-01"}]


def test_dumps_output_is_plain_json(codec):
    text = codec.dumps({"when": datetime(2026, 1, 1, tzinfo=UTC)})

    assert json.loads(text) == {
        "when": {"kind": "datetime", "payload": "2026-01-01T00:00:00+00:00"}
    }


def test_unknown_kind_is_left_alone(codec):
    value = {"kind": "Money", "payload": "10 EUR"}

    assert codec.decode(value) == value


def test_dict_with_extra_keys_is_not_an_envelope(codec):
    value = {"kind": "date", "payload": "2026-01-01", "label": "arrival"}

    assert codec.decode(value) == value


def test_envelope_inside_plain_dict_is_decoded(codec):
    value = {"kind": "hotel", "when": {"kind": "date", "payload": "2026-01-01"}}

    assert codec.decode(value) == {"kind": "hotel", "when": date(2026, 1, 1)}


@pytest.mark.parametrize(
    "envelope",
    [
        {"kind": "datetime", "payload": "not a date"},
        {"kind": "date", "payload": 20260101},
        {"kind": "Decimal", "payload": "ten"},
        {"kind": "UUID", "payload": "xyz"},
    ],
)
def test_malformed_payload_raises(codec, envelope):
    with pytest.raises(CodecError):
        codec.decode(envelope)


def test_malformed_json_raises(codec):
    with pytest.raises(json.JSONDecodeError):
        codec.loads("{not json")


def test_register_custom_type():
    codec = Codec()
    codec.register(complex, "complex", str, complex)

    assert codec.kinds == frozenset({"complex"})
    assert codec.encode(1 + 2j) == {"kind": "complex", "payload": "(1+2j)"}
    assert codec.decode(codec.encode([1 + 2j])) == [1 + 2j]


def test_unregistered_type_passes_through():
    codec = Codec()
    moment = datetime(2026, 1, 1, tzinfo=UTC)

    assert codec.encode(moment) is moment


def test_module_helpers_use_default_codec():
    value = {"when": date(2026, 5, 1)}

    assert decode(encode(value)) == value


@pytest.mark.parametrize(
    "value",
    [
        {"kind": "date", "payload": "2026-01-01"},
        {"kind": "date", "payload": "soon"},
        {"kind": "Money", "payload": "10 EUR"},
        {"kind": "dict", "payload": "{}"},
        {"kind": "stay", "payload": {"check_in": date(2026, 1, 1)}},
    ],
)
def test_envelope_shaped_data_round_trips(codec, value):
    assert codec.loads(codec.dumps(value)) == value


def test_envelope_shaped_data_is_escaped(codec):
    encoded = codec.encode({"kind": "date", "payload": "2026-01-01"})

    assert encoded["kind"] == "dict"
    assert json.loads(encoded["payload"]) == {"kind": "date", "payload": "2026-01-01"}


def test_nested_envelope_shaped_data_round_trips(codec):
    value = {"hotel": {"kind": {"kind": "x", "payload": "y"}, "payload": [date(2026, 1, 1)]}}

    assert codec.loads(codec.dumps(value)) == value


@pytest.mark.parametrize("payload", ["{not json", "[]", '{"kind": "x"}', 42])
def test_malformed_escaped_dict_raises(codec, payload):
    with pytest.raises(CodecError):
        codec.decode({"kind": "dict", "payload": payload})


def test_escape_kind_cannot_be_registered():
    with pytest.raises(ValueError):
        Codec().register(frozenset, "dict", str, frozenset)
