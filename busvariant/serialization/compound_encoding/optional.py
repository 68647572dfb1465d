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
This module implements GVariant maybe values.

Layout:

    [] (zero bytes) when None
    [value] when not None and the inner type is fixed-size
    [value][0x00] when not None and the inner type is not fixed-size

The extra zero byte tells a present empty value (like an empty array) apart from a missing value.

>>> from busvariant.serialization.encoding.int import encode_int, decode_int
>>> from busvariant.serialization.encoding.utf8 import encode_utf8, decode_utf8
>>> def encode_s(se, value):
...     encode_utf8(se, value, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> def decode_s(de):
...     return decode_utf8(de, prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> se = Serializer.build_bytes_serializer()
>>> encode_maybe(se, 'hi', encode_s, fixed_size=None)
>>> bytes(se.finalize()).hex()
'68690000'

>>> se = Serializer.build_bytes_serializer()
>>> encode_maybe(se, None, encode_s, fixed_size=None)
>>> bytes(se.finalize()).hex()
''

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('68690000'))
>>> decode_maybe(de, decode_s, fixed_size=None)
'hi'
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(b'')
>>> str(decode_maybe(de, decode_s, fixed_size=None))
'None'

>>> def decode_u(de):
...     return decode_int(de, length=4, signed=False, byteorder=ByteOrder.LITTLE)
>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('05000000'))
>>> decode_maybe(de, decode_u, fixed_size=4)
5
"""

from typing import Optional, TypeVar

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import MissingNulTerminatorError

from . import Decoder, Encoder, decode_window

T = TypeVar('T')


def encode_maybe(serializer: Serializer, value: Optional[T], encoder: Encoder[T], *, fixed_size: int | None) -> None:
    if value is None:
        return
    encoder(serializer, value)
    if fixed_size is None:
        serializer.write_byte(0)


def decode_maybe(deserializer: Deserializer, decoder: Decoder[T], *, fixed_size: int | None) -> Optional[T]:
    """ Decode a maybe value that takes all of the remaining input.
    """
    base_pos = deserializer.cur_pos()
    data = deserializer.read_all()
    if not data:
        return None
    if fixed_size is not None:
        return decode_window(data, base_pos, 0, len(data), decoder)
    if data[-1] != 0:
        raise MissingNulTerminatorError('maybe value does not end with a zero byte')
    return decode_window(data, base_pos, 0, len(data) - 1, decoder)
