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
This module implements alignment padding.

Values start on a boundary that is a multiple of their alignment, the gap before them is filled with zero bytes. The
position is always the one reported by the serializer/deserializer, which is relative to the start of the outermost
value.

>>> pad_to(0, 8), pad_to(1, 8), pad_to(5, 4), pad_to(8, 8), pad_to(3, 1)
(0, 7, 3, 0, 0)

>>> se = Serializer.build_bytes_serializer()
>>> se.write_byte(0xff)
>>> encode_padding(se, 4)  # writes 000000
>>> se.write_byte(0xff)
>>> encode_padding(se, 2)  # writes 00
>>> se.finalize().hex()
'ff000000ff00'

When decoding the padding is skipped, its contents are not checked but there must be enough bytes for it:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('ff000000ff'))
>>> de.read_byte()
255
>>> skip_padding(de, 4)
>>> de.read_byte()
255
>>> from busvariant.serialization.exceptions import BufferUnderrunError
>>> try:
...     skip_padding(de, 8)
... except BufferUnderrunError as e:
...     print(*e.args)
not enough bytes to read: need 3, have 0
"""

from busvariant.serialization import Deserializer, Serializer

_ZEROS = bytes(8)


def pad_to(offset: int, alignment: int) -> int:
    """ Number of padding bytes needed after `offset` to reach a multiple of `alignment`.
    """
    return (alignment - offset % alignment) % alignment


def encode_padding(serializer: Serializer, alignment: int) -> None:
    """ Writes zero bytes until the serializer position is aligned.
    """
    padding = pad_to(serializer.cur_pos(), alignment)
    if padding:
        serializer.write_bytes(_ZEROS[:padding])


def skip_padding(deserializer: Deserializer, alignment: int) -> None:
    """ Skips the padding bytes until the deserializer position is aligned.
    """
    padding = pad_to(deserializer.cur_pos(), alignment)
    if padding:
        deserializer.read_bytes(padding)
