import pytest

from busvariant.codec import decode, encode
from busvariant.context import ByteOrder, WireFormat
from busvariant.signature import BYTE, DOUBLE, INT32, STRING, UINT64, VARIANT, ArrayType, StructType, parse_signature
from busvariant.value import Value

VALUES = [
    Value.byte(0),
    Value.byte(255),
    Value.boolean(False),
    Value.int16(-2**15),
    Value.uint16(2**16 - 1),
    Value.int32(-1),
    Value.uint32(2**32 - 1),
    Value.int64(-2**63),
    Value.uint64(2**64 - 1),
    Value.double(-0.5),
    Value.double(float('inf')),
    Value.string(''),
    Value.string('π😎'),
    Value.object_path('/org/freedesktop/DBus'),
    Value.signature_value('a{sv}(ii)'),
    Value.unix_fd(3),
    Value.from_python('ay', b'abc'),
    Value.array(StructType((BYTE, UINT64)), []),
    Value.from_python('a(yt)', [(1, 2), (3, 4)]),
    Value.from_python('aas', [['a', 'b'], [], ['c']]),
    Value.from_python('aay', [b'', b'x', b'yz']),
    Value.from_python('a{sv}', {'a': 1, 'b': 'two', 'c': 3.0, 'd': b'\x04'}),
    Value.from_python('a{ias}', {1: ['a'], -2: []}),
    Value.from_python('(y(xs)ad)', (1, (-2, 'x'), [0.5, 1.5])),
    Value.from_python('(sv)', ('a', Value.struct(Value.byte(1), Value.string('b')))),
    Value.variant(Value.variant(Value.variant(Value.int32(7)))),
    Value.variant(Value.from_python('a{sv}', {'nested': Value.variant(Value.uint16(2))})),
    Value.array(VARIANT, [Value.variant(Value.byte(1)), Value.variant(Value.string('x'))]),
    Value.array(ArrayType(DOUBLE), [[1.0], [], [2.0, 3.0]]),
    Value.struct(Value.byte(1), Value.array(INT32, [1, 2]), Value.byte(3)),
]

MAYBE_VALUES = [
    Value.maybe(BYTE, 1),
    Value.nothing(BYTE),
    Value.maybe(STRING, ''),
    Value.nothing(ArrayType(STRING)),
    Value.from_python('ams', ['a', None, 'b']),
    Value.from_python('a{smv}', {'a': 1, 'b': None}),
    Value.from_python('(mymsmx)', (None, 'x', 5)),
    Value.variant(Value.maybe(ArrayType(BYTE), b'ab')),
]

BYTE_ORDERS = [ByteOrder.LITTLE, ByteOrder.BIG]


@pytest.mark.parametrize('byte_order', BYTE_ORDERS)
@pytest.mark.parametrize('wire_format', [WireFormat.DBUS, WireFormat.GVARIANT])
@pytest.mark.parametrize('value', VALUES, ids=repr)
def test_round_trip(value: Value, wire_format: WireFormat, byte_order: ByteOrder) -> None:
    data = encode(value, wire_format, byte_order)
    assert decode(data, value.type, wire_format, byte_order) == value
    assert decode(data, value.signature, wire_format, byte_order) == value


@pytest.mark.parametrize('byte_order', BYTE_ORDERS)
@pytest.mark.parametrize('value', MAYBE_VALUES, ids=repr)
def test_maybe_round_trip(value: Value, byte_order: ByteOrder) -> None:
    data = encode(value, WireFormat.GVARIANT, byte_order)
    assert decode(data, value.type, WireFormat.GVARIANT, byte_order) == value


@pytest.mark.parametrize('wire_format', [WireFormat.DBUS, WireFormat.GVARIANT])
def test_byte_order_only_changes_scalars(wire_format: WireFormat) -> None:
    value = Value.from_python('(yas)', (1, ['a', 'b']))
    little = encode(value, wire_format, ByteOrder.LITTLE)
    big = encode(value, wire_format, ByteOrder.BIG)
    assert len(little) == len(big)
    assert decode(big, '(yas)', wire_format, ByteOrder.BIG) == decode(little, '(yas)', wire_format, ByteOrder.LITTLE)


@pytest.mark.parametrize('wire_format', [WireFormat.DBUS, WireFormat.GVARIANT])
def test_padding_is_zero(wire_format: WireFormat) -> None:
    value = Value.from_python('(yt)', (0xff, 2**64 - 1))
    data = encode(value, wire_format, ByteOrder.LITTLE)
    assert data == b'\xff' + bytes(7) + b'\xff' * 8


def test_signature_types_are_equal_after_decode() -> None:
    value = Value.variant(Value.from_python('a{sa(ii)}', {'k': [(1, 2)]}))
    for wire_format in WireFormat:
        decoded = decode(encode(value, wire_format), 'v', wire_format)
        assert decoded.data.type == parse_signature('a{sa(ii)}')
