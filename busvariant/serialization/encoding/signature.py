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
This module implements signature values, which are ASCII strings holding zero or more complete types.

D-Bus prefixes them with a single length byte, GVariant relies on the container to frame them. Both formats end them
with a NUL byte, and neither allows more than 255 characters.

>>> se = Serializer.build_bytes_serializer()
>>> encode_signature(se, 'a{sv}', prefixed=True)  # writes 05 617b73767d 00
>>> se.finalize().hex()
'05617b73767d00'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('05617b73767d00'))
>>> decode_signature(de, prefixed=True)
'a{sv}'
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(b'a{vs}\x00')
>>> try:
...     decode_signature(de, prefixed=False)
... except InvalidSignatureError as e:
...     print(type(e).__name__)
InvalidSignatureError
"""

from busvariant.consts import MAX_SIGNATURE_LENGTH
from busvariant.context import ByteOrder, WireFormat
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import (
    InvalidSignatureError,
    MalformedSignatureError,
    SignatureTooLongError,
    ValueMismatchError,
)

from .utf8 import decode_utf8, encode_utf8

# the prefix is a single byte, so the byte order does not matter
_BYTEORDER = ByteOrder.LITTLE


def encode_signature(serializer: Serializer, signature: str, *, prefixed: bool) -> None:
    """ Encodes a signature, with a single byte length prefix when `prefixed` is true.
    """
    if len(signature) > MAX_SIGNATURE_LENGTH:
        raise ValueMismatchError(f'signature is longer than {MAX_SIGNATURE_LENGTH} characters')
    encode_utf8(serializer, signature, prefix_length=1 if prefixed else 0, byteorder=_BYTEORDER)


def decode_signature(deserializer: Deserializer, *, prefixed: bool, wire_format: WireFormat | None = None) -> str:
    """ Decodes a signature and checks that it only contains complete types supported by `wire_format`.
    """
    from busvariant.signature import parse_signatures
    if not prefixed and deserializer.remaining() > MAX_SIGNATURE_LENGTH + 1:
        raise SignatureTooLongError(f'signature is longer than {MAX_SIGNATURE_LENGTH} characters')
    signature = decode_utf8(deserializer, prefix_length=1 if prefixed else 0, byteorder=_BYTEORDER)
    try:
        parse_signatures(signature, wire_format=wire_format)
    except MalformedSignatureError as e:
        raise InvalidSignatureError(f'invalid signature value: {e}') from e
    return signature
