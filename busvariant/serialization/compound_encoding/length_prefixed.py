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
This module implements D-Bus arrays: a length prefix followed by the elements.

Layout: [length: uint32][padding to the element alignment][element_0]...[element_N]

The length is the number of bytes taken by the elements, it does not include the padding between the prefix and the
first element, which is present even when the array is empty. Since the length is only known after encoding the
elements, the prefix is backfilled.

>>> from busvariant.serialization.encoding.int import encode_int, decode_int
>>> from busvariant.serialization.encoding.padding import encode_padding, skip_padding
>>> def encode_u64(se, value):
...     encode_padding(se, 8)
...     encode_int(se, value, length=8, signed=False, byteorder=ByteOrder.LITTLE)
>>> def decode_u64(de):
...     skip_padding(de, 8)
...     return decode_int(de, length=8, signed=False, byteorder=ByteOrder.LITTLE)
>>> se = Serializer.build_bytes_serializer()
>>> encode_length_prefixed(se, [1, 2], encode_u64, element_alignment=8, byteorder=ByteOrder.LITTLE,
...                        max_length=2**26)
>>> bytes(se.finalize()).hex()
'100000000000000001000000000000000200000000000000'

Breakdown of the result:

    10000000: 16, the length of the elements
    00000000: padding to 8
    0100000000000000: 1
    0200000000000000: 2

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('10000000000000000100000000000000' '0200000000000000'))
>>> decode_length_prefixed(de, decode_u64, list, element_alignment=8, byteorder=ByteOrder.LITTLE, max_length=2**26)
[1, 2]
>>> de.finalize()

The padding is also there for an empty array:

>>> se = Serializer.build_bytes_serializer()
>>> encode_length_prefixed(se, [], encode_u64, element_alignment=8, byteorder=ByteOrder.LITTLE, max_length=2**26)
>>> bytes(se.finalize()).hex()
'0000000000000000'
"""

from collections.abc import Iterable, Iterator
from typing import Callable, TypeVar

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.encoding.int import decode_int, encode_int
from busvariant.serialization.encoding.padding import encode_padding, skip_padding
from busvariant.serialization.exceptions import ArrayLengthMismatchError, ArrayTooLongError, BufferUnderrunError

from . import Decoder, Encoder

T = TypeVar('T')
R = TypeVar('R')

_PREFIX_LENGTH = 4


def encode_length_prefixed(
    serializer: Serializer,
    values: Iterable[T],
    encoder: Encoder[T],
    *,
    element_alignment: int,
    byteorder: ByteOrder,
    max_length: int,
) -> None:
    length_pos = serializer.cur_pos()
    encode_int(serializer, 0, length=_PREFIX_LENGTH, signed=False, byteorder=byteorder)
    encode_padding(serializer, element_alignment)
    start = serializer.cur_pos()
    for value in values:
        encoder(serializer, value)
    length = serializer.cur_pos() - start
    if length > max_length:
        raise ArrayTooLongError(f'array takes {length} bytes, the maximum is {max_length}')
    serializer.write_at(length_pos, length.to_bytes(_PREFIX_LENGTH, byteorder.byteorder))


def decode_length_prefixed(
    deserializer: Deserializer,
    decoder: Decoder[T],
    builder: Callable[[Iterable[T]], R],
    *,
    element_alignment: int,
    byteorder: ByteOrder,
    max_length: int,
) -> R:
    length = decode_int(deserializer, length=_PREFIX_LENGTH, signed=False, byteorder=byteorder)
    if length > max_length:
        raise ArrayLengthMismatchError(f'array length {length} is larger than the maximum {max_length}')
    skip_padding(deserializer, element_alignment)
    if length > deserializer.remaining():
        raise BufferUnderrunError(f'array length {length} is larger than the {deserializer.remaining()} bytes left')
    end = deserializer.cur_pos() + length

    def iter_elements() -> Iterator[T]:
        while deserializer.cur_pos() < end:
            yield decoder(deserializer)
        if deserializer.cur_pos() != end:
            raise ArrayLengthMismatchError(f'array elements end at {deserializer.cur_pos()}, expected {end}')

    return builder(iter_elements())
