import pytest

from busvariant.codec import decode, decode_child, encode
from busvariant.codec.engine import CodecEngine
from busvariant.context import ByteOrder, EncodingContext, WireFormat
from busvariant.serialization.exceptions import (
    ArrayLengthMismatchError,
    ArrayTooLongError,
    BufferUnderrunError,
    InvalidBooleanError,
    InvalidSignatureError,
    InvalidUtf8Error,
    InvalidValueError,
    MissingNulTerminatorError,
    TrailingDataError,
    UnsupportedTypeError,
    ValueMismatchError,
)
from busvariant.signature import BYTE, STRING, UINT32, UINT64, VARIANT, parse_signature
from busvariant.value import Value

DBUS = WireFormat.DBUS
LITTLE = ByteOrder.LITTLE
BIG = ByteOrder.BIG


@pytest.mark.parametrize('value, byte_order, expected', [
    (Value.uint32(258), LITTLE, '02010000'),
    (Value.uint32(258), BIG, '00000102'),
    (Value.byte(0xff), LITTLE, 'ff'),
    (Value.boolean(True), LITTLE, '01000000'),
    (Value.boolean(True), BIG, '00000001'),
    (Value.int16(-2), LITTLE, 'feff'),
    (Value.int64(-2), BIG, 'fffffffffffffffe'),
    (Value.double(1.5), LITTLE, '000000000000f83f'),
    (Value.unix_fd(3), LITTLE, '03000000'),
    (Value.string('hi'), LITTLE, '02000000686900'),
    (Value.string(''), LITTLE, '0000000000'),
    (Value.object_path('/a'), BIG, '000000022f6100'),
    (Value.signature_value('a{sv}'), LITTLE, '05617b73767d00'),
    (Value.struct(Value.byte(1), Value.uint32(2)), LITTLE, '0100000002000000'),
    (Value.struct(Value.int16(1), Value.int64(2)), LITTLE, '0100000000000000' '0200000000000000'),
])
def test_encode(value: Value, byte_order: ByteOrder, expected: str) -> None:
    data = encode(value, DBUS, byte_order)
    assert data.hex() == expected
    assert decode(data, value.type, DBUS, byte_order) == value


def test_array_padding_is_not_counted() -> None:
    value = Value.array(UINT64, [5])
    data = encode(value, DBUS, LITTLE)
    # length 8, padding to the element alignment, element
    assert data.hex() == '08000000' '00000000' '0500000000000000'
    assert decode(data, 'at', DBUS, LITTLE) == value


def test_empty_arrays() -> None:
    # the padding after the length is present even without elements
    assert encode(Value.array(UINT64, []), DBUS, LITTLE).hex() == '0000000000000000'
    assert encode(Value.array(BYTE, []), DBUS, LITTLE).hex() == '00000000'
    assert decode(bytes(8), 'at', DBUS, LITTLE) == Value.array(UINT64, [])


def test_array_of_strings() -> None:
    value = Value.array(STRING, ['a', 'bc'])
    data = encode(value, DBUS, LITTLE)
    assert data.hex() == '0f000000' '01000000' '6100' '0000' '02000000' '626300'
    assert decode(data, 'as', DBUS, LITTLE) == value


def test_dict() -> None:
    value = Value.dict(STRING, VARIANT, {'a': Value.uint32(1)})
    data = encode(value, DBUS, LITTLE)
    assert data.hex() == '10000000' '00000000' '01000000' '6100' '017500' '000000' '01000000'
    assert decode(data, 'a{sv}', DBUS, LITTLE) == value


def test_variant_alignment_is_absolute() -> None:
    value = Value.variant(Value.uint64(1))
    data = encode(value, DBUS, LITTLE)
    assert data.hex() == '017400' '0000000000' '0100000000000000'
    assert decode(data, 'v', DBUS, LITTLE) == value

    value = Value.struct(Value.byte(7), Value.variant(Value.uint32(1)))
    data = encode(value, DBUS, LITTLE)
    assert data.hex() == '07' '017500' '01000000'
    assert decode(data, '(yv)', DBUS, LITTLE) == value


def test_maybe_is_unsupported() -> None:
    with pytest.raises(UnsupportedTypeError):
        encode(Value.maybe(BYTE, 1), DBUS, LITTLE)
    with pytest.raises(UnsupportedTypeError):
        encode(Value.struct(Value.nothing(BYTE)), DBUS, LITTLE)
    with pytest.raises(UnsupportedTypeError):
        decode(b'', 'my', DBUS, LITTLE)


def test_signature_value_with_maybe_is_rejected_on_encode() -> None:
    value = Value.signature_value('my')
    with pytest.raises(ValueMismatchError):
        encode(value, DBUS, LITTLE)
    with pytest.raises(ValueMismatchError):
        encode(Value.struct(Value.byte(1), Value.signature_value('asmy')), DBUS, LITTLE)
    # the same value is fine in GVariant
    data = encode(value, WireFormat.GVARIANT, LITTLE)
    assert decode(data, 'g', WireFormat.GVARIANT, LITTLE) == value


@pytest.mark.parametrize('hex_data, signature, error', [
    ('020100', 'u', BufferUnderrunError),
    ('0201000000', 'u', TrailingDataError),
    ('02000000', 'b', InvalidBooleanError),
    ('020000006869', 's', BufferUnderrunError),
    ('02000000686921', 's', MissingNulTerminatorError),
    ('01000000ff00', 's', InvalidUtf8Error),
    ('0300000061006200', 's', InvalidValueError),
    ('03000000612f6200', 'o', InvalidValueError),
    ('016100', 'g', InvalidSignatureError),
    ('015a00', 'v', InvalidSignatureError),
    ('02797900', 'v', InvalidSignatureError),
    ('016d00', 'v', InvalidSignatureError),
    ('0000', 'v', InvalidSignatureError),
    ('08000000' '01000000', 'au', BufferUnderrunError),
    ('06000000' '01000000' '02000000', 'au', ArrayLengthMismatchError),
])
def test_decode_errors(hex_data: str, signature: str, error: type[Exception]) -> None:
    with pytest.raises(error):
        decode(bytes.fromhex(hex_data), signature, DBUS, LITTLE)


def test_array_length_limit() -> None:
    engine = CodecEngine(EncodingContext(wire_format=DBUS, byte_order=LITTLE, max_depth=64), max_array_length=4)
    assert engine.encode(Value.array(UINT32, [1]), max_bytes=None).hex() == '04000000' '01000000'
    with pytest.raises(ArrayTooLongError):
        engine.encode(Value.array(UINT32, [1, 2]), max_bytes=None)
    with pytest.raises(ArrayLengthMismatchError):
        engine.decode(bytes.fromhex('08000000' '01000000' '02000000'), parse_signature('au'), max_bytes=None)


def test_decode_child() -> None:
    data = encode(Value.struct(Value.byte(1), Value.uint32(2)), DBUS, LITTLE)
    assert decode_child(data, '(yu)', 1, DBUS, LITTLE) == Value.uint32(2)
    data = encode(Value.array(STRING, ['a', 'bc']), DBUS, LITTLE)
    assert decode_child(data, 'as', 0, DBUS, LITTLE) == Value.string('a')
    with pytest.raises(IndexError):
        decode_child(data, 'as', 2, DBUS, LITTLE)
    with pytest.raises(UnsupportedTypeError):
        decode_child(bytes(4), 'u', 0, DBUS, LITTLE)
