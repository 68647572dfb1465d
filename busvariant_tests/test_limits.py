from unittest.mock import patch

import pytest

from busvariant.codec import decode, encode
from busvariant.conf import CodecSettings
from busvariant.context import ByteOrder, WireFormat
from busvariant.serialization.exceptions import (
    InvalidSignatureError,
    MalformedSignatureError,
    MaxBytesExceededError,
    MaxDepthExceededError,
    ValueTooDeepError,
)
from busvariant.signature import parse_signature
from busvariant.value import Value

WIRE_FORMATS = [WireFormat.DBUS, WireFormat.GVARIANT]


def _nested_variants(depth: int) -> Value:
    value = Value.byte(1)
    for _ in range(depth):
        value = Value.variant(value)
    return value


@pytest.mark.parametrize('wire_format', WIRE_FORMATS)
def test_encode_depth(wire_format: WireFormat) -> None:
    value = Value.from_python('aay', [b'x'])
    encode(value, wire_format, max_depth=2)
    with pytest.raises(ValueTooDeepError):
        encode(Value.from_python('aaay', [[b'x']]), wire_format, max_depth=2)


@pytest.mark.parametrize('wire_format', WIRE_FORMATS)
def test_decode_depth(wire_format: WireFormat) -> None:
    type_ = parse_signature('aaay')
    data = encode(Value.from_python(type_, [[b'x']]), wire_format)
    with pytest.raises(MaxDepthExceededError):
        decode(data, type_, wire_format, max_depth=2)
    with pytest.raises(MalformedSignatureError):
        decode(data, 'aaay', wire_format, max_depth=2)


@pytest.mark.parametrize('wire_format', WIRE_FORMATS)
def test_variant_depth(wire_format: WireFormat) -> None:
    value = _nested_variants(10)
    data = encode(value, wire_format)
    assert decode(data, 'v', wire_format) == value
    with pytest.raises(ValueTooDeepError):
        encode(value, wire_format, max_depth=5)
    with pytest.raises(MaxDepthExceededError):
        decode(data, 'v', wire_format, max_depth=5)


def test_variant_signature_deeper_than_limit() -> None:
    value = Value.variant(Value.from_python('aaay', [[b'x']]))
    data = encode(value, WireFormat.DBUS)
    with pytest.raises(InvalidSignatureError):
        decode(data, 'v', WireFormat.DBUS, max_depth=2)


@pytest.mark.parametrize('wire_format', WIRE_FORMATS)
def test_max_bytes(wire_format: WireFormat) -> None:
    value = Value.string('hello')
    data = encode(value, wire_format, ByteOrder.LITTLE)
    assert encode(value, wire_format, max_bytes=len(data)) == data
    with pytest.raises(MaxBytesExceededError):
        encode(value, wire_format, max_bytes=len(data) - 1)
    assert decode(data, 's', wire_format, max_bytes=len(data)) == value
    with pytest.raises(MaxBytesExceededError):
        decode(data, 's', wire_format, max_bytes=len(data) - 1)


def test_max_bytes_defaults_to_the_settings() -> None:
    # unittests.yml caps messages at 1 MiB
    value = Value.string('a' * 2**20)
    with pytest.raises(MaxBytesExceededError):
        encode(value, max_bytes=None)
    assert len(encode(value, max_bytes=2**21)) == 2**20 + 5

    with patch('busvariant.codec.get_global_settings', return_value=CodecSettings(MAX_MESSAGE_SIZE=None)):
        assert len(encode(value, max_bytes=None)) == 2**20 + 5
