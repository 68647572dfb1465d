#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.


r"""
This module implements GVariant arrays: elements followed by the framing offsets of their ends.

Layout for fixed-size elements: [element_0]...[element_N]
Layout otherwise: [element_0][padding][element_1]...[element_N][framing offsets]

Fixed-size elements are packed and the number of elements follows from the size of the array. Otherwise the end of
every element is recorded in order, so the last offset, which is at the very end, tells where the table starts. An
empty array takes zero bytes.

>>> from busvariant.serialization.encoding.int import encode_int, decode_int
>>> from busvariant.serialization.encoding.utf8 import encode_utf8, decode_utf8
>>> def encode_s(se, value):
...     encode_utf8(se, value, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> def decode_s(de):
...     return decode_utf8(de, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> se = Serializer.build_bytes_serializer()
>>> encode_framed_collection(se, ['a', 'bc'], encode_s, alignment=1, fixed_size=None)
>>> bytes(se.finalize()).hex()
'61006263000205'

Breakdown of the result:

    6100: 'a'
    626300: 'bc'
    02: end of 'a'
    05: end of 'bc', which is also where the table starts

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('61006263000205'))
>>> decode_framed_collection(de, decode_s, list, alignment=1, fixed_size=None)
['a', 'bc']
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('61006263000205'))
>>> decode_framed_collection_item(de, 1, decode_s, alignment=1, fixed_size=None)
'bc'

Fixed-size elements:

>>> def encode_q(se, value):
...     encode_int(se, value, length=2, signed=False, byteorder=ByteOrder.LITTLE)
>>> se = Serializer.build_bytes_serializer()
>>> encode_framed_collection(se, [1, 2], encode_q, alignment=2, fixed_size=2)
>>> bytes(se.finalize()).hex()
'01000200'
"""

from collections.abc import Iterable
from typing import Callable, NamedTuple, TypeVar

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.encoding.framing_offset import (
    decode_framing_offset,
    encode_framing_offsets,
    offset_size_for,
)
from busvariant.serialization.encoding.padding import encode_padding, pad_to
from busvariant.serialization.exceptions import ArrayLengthMismatchError, OffsetTableCorruptError
from busvariant.serialization.types import Buffer

from . import Decoder, Encoder, decode_window

T = TypeVar('T')
R = TypeVar('R')


class _Frame(NamedTuple):
    length: int
    offset_size: int
    table_start: int


def encode_framed_collection(
    serializer: Serializer,
    values: Iterable[T],
    encoder: Encoder[T],
    *,
    alignment: int,
    fixed_size: int | None,
) -> None:
    start = serializer.cur_pos()
    offsets: list[int] = []
    for value in values:
        encode_padding(serializer, alignment)
        encoder(serializer, value)
        if fixed_size is None:
            offsets.append(serializer.cur_pos() - start)
    encode_framing_offsets(serializer, offsets, body_size=serializer.cur_pos() - start)


def _read_frame(data: Buffer, *, fixed_size: int | None) -> _Frame:
    size = len(data)
    if size == 0:
        return _Frame(0, 0, 0)
    if fixed_size is not None:
        if size % fixed_size:
            raise ArrayLengthMismatchError(f'{size} bytes is not a multiple of the element size {fixed_size}')
        return _Frame(size // fixed_size, 0, size)
    offset_size = offset_size_for(size)
    table_start = decode_framing_offset(data, size - offset_size, offset_size)
    table_size = size - table_start
    if table_start > size or table_size == 0 or table_size % offset_size:
        raise OffsetTableCorruptError(f'array framing offsets start at {table_start}, the array takes {size} bytes')
    return _Frame(table_size // offset_size, offset_size, table_start)


def _item_bounds(data: Buffer, frame: _Frame, index: int, *, alignment: int,
                 fixed_size: int | None) -> tuple[int, int]:
    if fixed_size is not None:
        return index * fixed_size, (index + 1) * fixed_size
    if index == 0:
        previous_end = 0
    else:
        previous_end = decode_framing_offset(data, frame.table_start + (index - 1) * frame.offset_size,
                                             frame.offset_size)
    start = previous_end + pad_to(previous_end, alignment)
    end = decode_framing_offset(data, frame.table_start + index * frame.offset_size, frame.offset_size)
    if not start <= end <= frame.table_start:
        raise OffsetTableCorruptError(f'array element {index} spans [{start}, {end}), '
                                      f'outside of [0, {frame.table_start})')
    return start, end


def decode_framed_collection(
    deserializer: Deserializer,
    decoder: Decoder[T],
    builder: Callable[[Iterable[T]], R],
    *,
    alignment: int,
    fixed_size: int | None,
) -> R:
    """ Decode an array that takes all of the remaining input.
    """
    base_pos = deserializer.cur_pos()
    data = deserializer.read_all()
    frame = _read_frame(data, fixed_size=fixed_size)
    return builder(
        decode_window(data, base_pos, *_item_bounds(data, frame, i, alignment=alignment, fixed_size=fixed_size),
                      decoder)
        for i in range(frame.length)
    )


def decode_framed_collection_item(
    deserializer: Deserializer,
    index: int,
    decoder: Decoder[T],
    *,
    alignment: int,
    fixed_size: int | None,
) -> T:
    """ Decode only the element at `index` of an array that takes all of the remaining input.
    """
    base_pos = deserializer.cur_pos()
    data = deserializer.read_all()
    frame = _read_frame(data, fixed_size=fixed_size)
    if not 0 <= index < frame.length:
        raise IndexError(f'array has {frame.length} elements, index {index} is out of range')
    start, end = _item_bounds(data, frame, index, alignment=alignment, fixed_size=fixed_size)
    return decode_window(data, base_pos, start, end, decoder)
