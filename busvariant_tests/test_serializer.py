import pytest

from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import BufferUnderrunError, MaxBytesExceededError, TrailingDataError


def test_write_at() -> None:
    se = Serializer.build_bytes_serializer()
    se.write_bytes(b'\x00\x00\x00\x00abc')
    se.write_at(0, b'\x03\x00')
    assert se.cur_pos() == 7
    with pytest.raises(IndexError):
        se.write_at(6, b'xy')
    assert se.finalize() == b'\x03\x00\x00\x00abc'


def test_write_at_through_max_bytes() -> None:
    inner = Serializer.build_bytes_serializer()
    se = inner.with_max_bytes(4)
    se.write_bytes(b'\x00\x00\x00\x00')
    se.write_at(0, b'\x01')
    with pytest.raises(MaxBytesExceededError):
        se.write_byte(0)
    assert inner.finalize() == b'\x01\x00\x00\x00'


def test_base_pos() -> None:
    de = Deserializer.build_bytes_deserializer(b'abcd', base_pos=6)
    assert de.cur_pos() == 6
    assert bytes(de.read_bytes(2)) == b'ab'
    assert de.cur_pos() == 8
    assert de.remaining() == 2
    assert bytes(de.read_all()) == b'cd'
    assert de.cur_pos() == 10
    de.finalize()


def test_underrun_and_trailing() -> None:
    de = Deserializer.build_bytes_deserializer(b'ab')
    with pytest.raises(BufferUnderrunError):
        de.read_bytes(3)
    assert bytes(de.read_bytes(3, exact=False)) == b'ab'
    with pytest.raises(BufferUnderrunError):
        de.read_byte()

    de = Deserializer.build_bytes_deserializer(b'ab')
    de.read_byte()
    with pytest.raises(TrailingDataError):
        de.finalize()


def test_max_bytes_deserializer() -> None:
    de = Deserializer.build_bytes_deserializer(b'abcdef').with_max_bytes(4)
    assert bytes(de.read_bytes(2)) == b'ab'
    assert de.cur_pos() == 2
    with pytest.raises(MaxBytesExceededError):
        de.read_all()

    de = Deserializer.build_bytes_deserializer(b'abc').with_max_bytes(4)
    assert bytes(de.read_all()) == b'abc'
    de.finalize()
