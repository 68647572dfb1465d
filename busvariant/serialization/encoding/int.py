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

"""
This module implements encoding of integers with a fixed size, the size, signedness and byte order are parametrized.

>>> se = Serializer.build_bytes_serializer()
>>> encode_int(se, 258, length=4, signed=False, byteorder=ByteOrder.LITTLE)  # writes 02010000
>>> encode_int(se, 258, length=4, signed=False, byteorder=ByteOrder.BIG)  # writes 00000102
>>> encode_int(se, -1234, length=2, signed=True, byteorder=ByteOrder.BIG)  # writes fb2e
>>> encode_int(se, 255, length=1, signed=False, byteorder=ByteOrder.BIG)  # writes ff
>>> se.finalize().hex()
'0201000000000102fb2eff'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0201000000000102fb2eff'))
>>> decode_int(de, length=4, signed=False, byteorder=ByteOrder.LITTLE)  # reads 02010000
258
>>> decode_int(de, length=4, signed=False, byteorder=ByteOrder.BIG)  # reads 00000102
258
>>> decode_int(de, length=2, signed=True, byteorder=ByteOrder.BIG)  # reads fb2e
-1234
>>> decode_int(de, length=1, signed=True, byteorder=ByteOrder.BIG)  # reads ff
-1
>>> de.finalize()
"""

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.exceptions import ValueMismatchError


def encode_int(serializer: Serializer, number: int, *, length: int, signed: bool, byteorder: ByteOrder) -> None:
    """ Encode an int using the given byte-length, signedness and byte order.

    This modules's docstring has more details and examples.
    """
    try:
        data = int.to_bytes(number, length, byteorder=byteorder.byteorder, signed=signed)
    except OverflowError:
        raise ValueMismatchError(f'{number} does not fit in {length} bytes')
    serializer.write_bytes(data)


def decode_int(deserializer: Deserializer, *, length: int, signed: bool, byteorder: ByteOrder) -> int:
    """ Decode an int using the given byte-length, signedness and byte order.

    This modules's docstring has more details and examples.
    """
    data = deserializer.read_bytes(length)
    return int.from_bytes(data, byteorder=byteorder.byteorder, signed=signed)
