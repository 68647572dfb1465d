import pytest

from busvariant.codec import decode, decode_child, encode
from busvariant.context import ByteOrder, WireFormat
from busvariant.serialization.exceptions import (
    ArrayLengthMismatchError,
    BufferUnderrunError,
    InvalidSignatureError,
    MissingNulTerminatorError,
    OffsetTableCorruptError,
    SignatureTooLongError,
    TrailingDataError,
    UnsupportedTypeError,
)
from busvariant.signature import BYTE, STRING, UINT16, UINT32, VARIANT, ArrayType
from busvariant.value import Value

GVARIANT = WireFormat.GVARIANT
LITTLE = ByteOrder.LITTLE
BIG = ByteOrder.BIG


@pytest.mark.parametrize('value, byte_order, expected', [
    (Value.uint32(258), LITTLE, '02010000'),
    (Value.uint32(258), BIG, '00000102'),
    (Value.boolean(True), LITTLE, '01'),
    (Value.int16(-2), BIG, 'fffe'),
    (Value.double(1.5), BIG, '3ff8000000000000'),
    (Value.string('hi'), LITTLE, '686900'),
    (Value.string(''), LITTLE, '00'),
    (Value.object_path('/'), LITTLE, '2f00'),
    (Value.signature_value('mi'), LITTLE, '6d6900'),
    (Value.struct(Value.string('ab'), Value.byte(1)), LITTLE, '6162000103'),
    (Value.struct(Value.byte(1), Value.string('a')), LITTLE, '016100'),
    (Value.struct(Value.byte(1), Value.uint32(2)), LITTLE, '0100000002000000'),
    (Value.struct(Value.uint32(2), Value.byte(1)), LITTLE, '0200000001000000'),
    (Value.struct(Value.string('a'), Value.string('b'), Value.string('c')), LITTLE, '610062006300' '0402'),
    (Value.array(UINT16, [1, 2]), LITTLE, '01000200'),
    (Value.array(UINT16, [1, 2]), BIG, '00010002'),
    (Value.array(UINT16, []), LITTLE, ''),
    (Value.array(STRING, ['a', 'bc']), LITTLE, '6100626300' '0205'),
    (Value.variant(Value.uint16(7)), LITTLE, '0700' '00' '71'),
    (Value.variant(Value.string('hi')), LITTLE, '686900' '00' '73'),
])
def test_encode(value: Value, byte_order: ByteOrder, expected: str) -> None:
    data = encode(value, GVARIANT, byte_order)
    assert data.hex() == expected
    assert decode(data, value.type, GVARIANT, byte_order) == value


def test_framing_offsets_are_little_endian() -> None:
    value = Value.struct(Value.string('a'), Value.string('b'), Value.string('c'))
    assert encode(value, GVARIANT, BIG).hex() == '610062006300' '0402'
    value = Value.array(STRING, ['x' * 200, 'y' * 200])
    data = encode(value, GVARIANT, BIG)
    assert data[-4:] == bytes.fromhex('c900' '9201')


def test_dict() -> None:
    value = Value.dict(STRING, VARIANT, {'a': Value.uint32(1)})
    data = encode(value, GVARIANT, LITTLE)
    # key, padding to 8, variant, offset of the key end, offset of the entry end
    assert data.hex() == '6100' '000000000000' '01000000' '00' '75' '02' '0f'
    assert decode(data, 'a{sv}', GVARIANT, LITTLE) == value


def test_maybe() -> None:
    cases = [
        (Value.maybe(UINT32, 5), '05000000'),
        (Value.nothing(UINT32), ''),
        (Value.maybe(STRING, 'hi'), '686900' '00'),
        (Value.nothing(STRING), ''),
        # a present empty array is told apart from a missing one by the extra zero byte
        (Value.maybe(ArrayType(BYTE), b''), '00'),
        (Value.nothing(ArrayType(BYTE)), ''),
    ]
    for value, expected in cases:
        data = encode(value, GVARIANT, LITTLE)
        assert data.hex() == expected
        assert decode(data, value.type, GVARIANT, LITTLE) == value


def test_nested_maybe() -> None:
    just_nothing = Value.maybe(Value.nothing(STRING).type, Value.nothing(STRING))
    data = encode(just_nothing, GVARIANT, LITTLE)
    assert data == b'\x00'
    assert decode(data, 'mms', GVARIANT, LITTLE) == just_nothing
    assert decode(b'', 'mms', GVARIANT, LITTLE) == Value.nothing(Value.nothing(STRING).type)


def test_struct_with_variant_alignment() -> None:
    value = Value.struct(Value.byte(1), Value.variant(Value.byte(2)))
    data = encode(value, GVARIANT, LITTLE)
    assert data.hex() == '01' '00000000000000' '02' '00' '79'
    assert decode(data, '(yv)', GVARIANT, LITTLE) == value


def test_two_byte_offsets() -> None:
    value = Value.array(STRING, ['x' * 200, 'y' * 200])
    data = encode(value, GVARIANT, LITTLE)
    assert len(data) == 402 + 2 * 2
    assert data[-4:] == bytes.fromhex('c900' '9201')
    assert decode(data, 'as', GVARIANT, LITTLE) == value


def test_offset_size_crossing_threshold() -> None:
    # 253 bytes of children and two 1-byte offsets fit in 255 bytes
    value = Value.array(STRING, ['x' * 125, 'y' * 126])
    assert len(encode(value, GVARIANT, LITTLE)) == 255
    # one more byte forces 2-byte offsets
    value = Value.array(STRING, ['x' * 126, 'y' * 126])
    data = encode(value, GVARIANT, LITTLE)
    assert len(data) == 254 + 2 * 2
    assert decode(data, 'as', GVARIANT, LITTLE) == value


def test_decode_child() -> None:
    data = encode(Value.array(STRING, ['a', 'bc', 'def']), GVARIANT, LITTLE)
    assert decode_child(data, 'as', 1, GVARIANT, LITTLE) == Value.string('bc')
    assert decode_child(data, 'as', 2, GVARIANT, LITTLE) == Value.string('def')
    with pytest.raises(IndexError):
        decode_child(data, 'as', 3, GVARIANT, LITTLE)

    data = encode(Value.array(UINT32, [10, 20, 30]), GVARIANT, LITTLE)
    assert decode_child(data, 'au', 2, GVARIANT, LITTLE) == Value.uint32(30)

    data = encode(Value.struct(Value.string('a'), Value.byte(2), Value.string('c')), GVARIANT, LITTLE)
    assert decode_child(data, '(sys)', 0, GVARIANT, LITTLE) == Value.string('a')
    assert decode_child(data, '(sys)', 1, GVARIANT, LITTLE) == Value.byte(2)
    assert decode_child(data, '(sys)', 2, GVARIANT, LITTLE) == Value.string('c')
    with pytest.raises(IndexError):
        decode_child(data, '(sys)', 3, GVARIANT, LITTLE)

    with pytest.raises(UnsupportedTypeError):
        decode_child(b'hi\x00', 's', 0, GVARIANT, LITTLE)


def test_decode_child_skips_siblings() -> None:
    # the first element is not valid utf-8, it is never looked at
    data = bytes.fromhex('ff00' '626300' '0205')
    assert decode_child(data, 'as', 1, GVARIANT, LITTLE) == Value.string('bc')


@pytest.mark.parametrize('hex_data, signature, error', [
    ('6869', 's', MissingNulTerminatorError),
    ('020100', 'u', BufferUnderrunError),
    ('0201000000', 'u', TrailingDataError),
    ('010002', 'aq', ArrayLengthMismatchError),
    ('6100626300' '0209', 'as', OffsetTableCorruptError),
    ('6100626300' '0605', 'as', OffsetTableCorruptError),
    ('6162000109', '(sy)', OffsetTableCorruptError),
    ('01000000020000000000', '(yu)', TrailingDataError),
    ('010000000200', '(yu)', BufferUnderrunError),
    ('686901', 'ms', MissingNulTerminatorError),
    ('0102', 'v', InvalidSignatureError),
    ('01005a', 'v', InvalidSignatureError),
    ('010079' '79', 'v', InvalidSignatureError),
    ('0100' + '79' * 256, 'v', SignatureTooLongError),
])
def test_decode_errors(hex_data: str, signature: str, error: type[Exception]) -> None:
    with pytest.raises(error):
        decode(bytes.fromhex(hex_data), signature, GVARIANT, LITTLE)


def test_maybe_in_variant() -> None:
    value = Value.variant(Value.maybe(STRING, 'a'))
    data = encode(value, GVARIANT, LITTLE)
    assert data.hex() == '6100' '00' '00' '6d73'
    assert decode(data, 'v', GVARIANT, LITTLE) == value
