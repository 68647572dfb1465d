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
This module implements GVariant structs and dict entries: a tuple of children located by framing offsets.

Layout: [child_0][padding][child_1]...[child_N][framing offsets]

Each child is aligned relative to the start of the tuple. The end of every non-fixed-size child except the last one
is recorded, and the offsets are stored in reverse order, so the offset of the first non-fixed child is at the very
end. A tuple where every child is fixed-size has no offsets, it is padded instead to a multiple of its alignment.

>>> from busvariant.serialization.encoding.int import encode_int, decode_int
>>> from busvariant.serialization.encoding.utf8 import encode_utf8, decode_utf8
>>> def encode_s(se, value):
...     encode_utf8(se, value, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> def decode_s(de):
...     return decode_utf8(de, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> def encode_y(se, value):
...     encode_int(se, value, length=1, signed=False, byteorder=ByteOrder.LITTLE)
>>> def decode_y(de):
...     return decode_int(de, length=1, signed=False, byteorder=ByteOrder.LITTLE)
>>> se = Serializer.build_bytes_serializer()
>>> encode_framed_tuple(se, ('ab', 1), (encode_s, encode_y), alignments=(1, 1), fixed_sizes=(None, 1), alignment=1)
>>> bytes(se.finalize()).hex()
'6162000103'

Breakdown of the result:

    616200: 'ab'
    01: 1
    03: end of 'ab', the only non-fixed child that is not the last one

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('6162000103'))
>>> decode_framed_tuple(de, (decode_s, decode_y), alignments=(1, 1), fixed_sizes=(None, 1))
('ab', 1)
>>> de.finalize()

A single child can be decoded without decoding the others:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('6162000103'))
>>> decode_framed_tuple_item(de, 1, decode_y, alignments=(1, 1), fixed_sizes=(None, 1))
1

When the last child is not fixed-size there is no need for offsets:

>>> se = Serializer.build_bytes_serializer()
>>> encode_framed_tuple(se, (1, 'ab'), (encode_y, encode_s), alignments=(1, 1), fixed_sizes=(1, None), alignment=1)
>>> bytes(se.finalize()).hex()
'01616200'
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.encoding.framing_offset import (
    decode_framing_offset,
    encode_framing_offsets,
    offset_size_for,
)
from busvariant.serialization.encoding.padding import encode_padding, pad_to
from busvariant.serialization.exceptions import BufferUnderrunError, OffsetTableCorruptError, TrailingDataError
from busvariant.serialization.types import Buffer

from . import Decoder, Encoder, decode_window

T = TypeVar('T')


def encode_framed_tuple(
    serializer: Serializer,
    values: Sequence[Any],
    encoders: Sequence[Encoder[Any]],
    *,
    alignments: Sequence[int],
    fixed_sizes: Sequence[int | None],
    alignment: int,
) -> None:
    assert len(values) == len(encoders) == len(alignments) == len(fixed_sizes)
    start = serializer.cur_pos()
    last = len(values) - 1
    offsets: list[int] = []
    for i, value in enumerate(values):
        encode_padding(serializer, alignments[i])
        encoders[i](serializer, value)
        if fixed_sizes[i] is None and i != last:
            offsets.append(serializer.cur_pos() - start)
    if all(fixed_size is not None for fixed_size in fixed_sizes):
        encode_padding(serializer, alignment)
    else:
        offsets.reverse()
        encode_framing_offsets(serializer, offsets, body_size=serializer.cur_pos() - start)


def framed_tuple_bounds(
    data: Buffer,
    *,
    alignments: Sequence[int],
    fixed_sizes: Sequence[int | None],
) -> list[tuple[int, int]]:
    """ Locate the children of the tuple `data`, returns the `(start, end)` of each child.
    """
    size = len(data)
    last = len(fixed_sizes) - 1
    is_fixed = all(fixed_size is not None for fixed_size in fixed_sizes)
    offset_count = sum(1 for i, fixed_size in enumerate(fixed_sizes) if fixed_size is None and i != last)
    offset_size = offset_size_for(size)
    table_start = size - offset_size * offset_count
    if table_start < 0:
        raise OffsetTableCorruptError(f'{offset_count} framing offsets do not fit in {size} bytes')

    bounds: list[tuple[int, int]] = []
    pos = 0
    offset_index = 0
    for i, (alignment, fixed_size) in enumerate(zip(alignments, fixed_sizes)):
        start = pos + pad_to(pos, alignment)
        if fixed_size is not None:
            end = start + fixed_size
            if is_fixed and end > size:
                raise BufferUnderrunError(f'struct member {i} ends at {end}, beyond the {size} bytes available')
        elif i == last:
            end = table_start
        else:
            offset_index += 1
            end = decode_framing_offset(data, size - offset_size * offset_index, offset_size)
        if not start <= end <= table_start:
            raise OffsetTableCorruptError(f'struct member {i} spans [{start}, {end}), outside of [0, {table_start})')
        bounds.append((start, end))
        pos = end

    if is_fixed:
        expected = pos + pad_to(pos, max(alignments))
        if size > expected:
            raise TrailingDataError(f'fixed-size struct takes {expected} bytes, got {size}')
        elif size < expected:
            raise BufferUnderrunError(f'fixed-size struct takes {expected} bytes, got {size}')
    elif pos != table_start:
        raise OffsetTableCorruptError(f'struct members end at {pos}, the framing offsets start at {table_start}')
    return bounds


def decode_framed_tuple(
    deserializer: Deserializer,
    decoders: Sequence[Decoder[Any]],
    *,
    alignments: Sequence[int],
    fixed_sizes: Sequence[int | None],
) -> tuple[Any, ...]:
    """ Decode a tuple that takes all of the remaining input.
    """
    base_pos = deserializer.cur_pos()
    data = deserializer.read_all()
    bounds = framed_tuple_bounds(data, alignments=alignments, fixed_sizes=fixed_sizes)
    return tuple(decode_window(data, base_pos, start, end, decoder) for (start, end), decoder in zip(bounds, decoders))


def decode_framed_tuple_item(
    deserializer: Deserializer,
    index: int,
    decoder: Decoder[T],
    *,
    alignments: Sequence[int],
    fixed_sizes: Sequence[int | None],
) -> T:
    """ Decode only the child at `index` of a tuple that takes all of the remaining input.
    """
    if not 0 <= index < len(fixed_sizes):
        raise IndexError(f'struct has {len(fixed_sizes)} members, index {index} is out of range')
    base_pos = deserializer.cur_pos()
    data = deserializer.read_all()
    start, end = framed_tuple_bounds(data, alignments=alignments, fixed_sizes=fixed_sizes)[index]
    return decode_window(data, base_pos, start, end, decoder)
