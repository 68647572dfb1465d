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
This module implements NUL terminated utf-8 strings, with an optional length prefix.

Layout: [length: unsigned int of `prefix_length` bytes][utf-8 data][0x00]

The length does not count the NUL terminator. With `prefix_length=0` there is no prefix and the string takes the whole
input, this is how strings are framed in GVariant, where the container tells the exact size of each child.

>>> se = Serializer.build_bytes_serializer()
>>> encode_utf8(se, 'hi', prefix_length=4, byteorder=ByteOrder.LITTLE)  # writes 02000000 6869 00
>>> encode_utf8(se, 'π', prefix_length=1, byteorder=ByteOrder.LITTLE)  # writes 02 cf80 00
>>> se.finalize().hex()
'0200000068690002cf8000'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0200000068690002cf8000'))
>>> decode_utf8(de, prefix_length=4, byteorder=ByteOrder.LITTLE)
'hi'
>>> decode_utf8(de, prefix_length=1, byteorder=ByteOrder.LITTLE)
'π'
>>> de.finalize()

Without a prefix:

>>> se = Serializer.build_bytes_serializer()
>>> encode_utf8(se, 'foo', prefix_length=0, byteorder=ByteOrder.LITTLE)
>>> se.finalize()
b'foo\x00'
>>> de = Deserializer.build_bytes_deserializer(b'foo\x00')
>>> decode_utf8(de, prefix_length=0, byteorder=ByteOrder.LITTLE)
'foo'

Invalid inputs:

>>> from busvariant.serialization.exceptions import DecodeError
>>> for raw, prefix_length in [(b'foo', 0), (b'\x03\x00\x00\x00foo!', 4), (b'f\x00o\x00', 0), (b'\xff\x00', 0)]:
...     de = Deserializer.build_bytes_deserializer(raw)
...     try:
...         decode_utf8(de, prefix_length=prefix_length, byteorder=ByteOrder.LITTLE)
...     except DecodeError as e:
...         print(type(e).__name__)
MissingNulTerminatorError
MissingNulTerminatorError
InvalidValueError
InvalidUtf8Error
"""

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import InvalidUtf8Error, InvalidValueError, MissingNulTerminatorError
from busvariant.serialization.types import Buffer

from .int import decode_int, encode_int


def encode_utf8(serializer: Serializer, value: str, *, prefix_length: int, byteorder: ByteOrder) -> None:
    """ Encodes a string using UTF-8, adding a length prefix (if `prefix_length > 0`) and a NUL terminator.

    This modules's docstring has more details and examples.
    """
    assert isinstance(value, str)
    data = value.encode('utf-8')
    if prefix_length:
        encode_int(serializer, len(data), length=prefix_length, signed=False, byteorder=byteorder)
    serializer.write_bytes(data)
    serializer.write_byte(0)


def decode_utf8(deserializer: Deserializer, *, prefix_length: int, byteorder: ByteOrder) -> str:
    """ Decodes a NUL terminated UTF-8 string, with a length prefix if `prefix_length > 0`.

    This modules's docstring has more details and examples.
    """
    if prefix_length:
        size = decode_int(deserializer, length=prefix_length, signed=False, byteorder=byteorder)
        data = deserializer.read_bytes(size)
        if deserializer.read_byte() != 0:
            raise MissingNulTerminatorError('string is not followed by a NUL byte')
    else:
        raw = deserializer.read_all()
        if not raw or raw[-1] != 0:
            raise MissingNulTerminatorError('string does not end with a NUL byte')
        data = raw[:-1]
    return utf8_from_bytes(data)


def utf8_from_bytes(data: Buffer) -> str:
    """ Decodes the string contents, which cannot contain NUL bytes.
    """
    raw = bytes(data)
    if b'\x00' in raw:
        raise InvalidValueError('string contains an embedded NUL byte')
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(f'string is not valid utf-8: {e.reason}') from e
