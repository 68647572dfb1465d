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
This module implements encoding a boolean value as an unsigned integer of the given length.

D-Bus uses 4 bytes, GVariant uses 1 byte. In both cases:

- `False` maps to the integer 0
- `True` maps to the integer 1
- any other value is invalid

>>> se = Serializer.build_bytes_serializer()
>>> encode_bool(se, True, length=4, byteorder=ByteOrder.LITTLE)
>>> se.finalize()
b'\x01\x00\x00\x00'

>>> se = Serializer.build_bytes_serializer()
>>> encode_bool(se, True, length=4, byteorder=ByteOrder.BIG)
>>> se.finalize()
b'\x00\x00\x00\x01'

>>> se = Serializer.build_bytes_serializer()
>>> encode_bool(se, False, length=1, byteorder=ByteOrder.LITTLE)
>>> se.finalize()
b'\x00'

>>> de = Deserializer.build_bytes_deserializer(b'\x01')
>>> decode_bool(de, length=1, byteorder=ByteOrder.LITTLE)
True
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(b'\x02\x00\x00\x00')
>>> try:
...     decode_bool(de, length=4, byteorder=ByteOrder.LITTLE)
... except InvalidBooleanError as e:
...     print(*e.args)
2 is not a valid boolean

>>> de = Deserializer.build_bytes_deserializer(b'\x01test')
>>> decode_bool(de, length=1, byteorder=ByteOrder.LITTLE)
True
>>> bytes(de.read_all())
b'test'
"""

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import InvalidBooleanError

from .int import decode_int, encode_int


def encode_bool(serializer: Serializer, value: bool, *, length: int, byteorder: ByteOrder) -> None:
    """ Encodes a boolean value using `length` bytes.
    """
    assert isinstance(value, bool)
    encode_int(serializer, 1 if value else 0, length=length, signed=False, byteorder=byteorder)


def decode_bool(deserializer: Deserializer, *, length: int, byteorder: ByteOrder) -> bool:
    """ Decodes a boolean value from `length` bytes.
    """
    i = decode_int(deserializer, length=length, signed=False, byteorder=byteorder)
    if i == 0:
        return False
    elif i == 1:
        return True
    else:
        raise InvalidBooleanError(f'{i} is not a valid boolean')
