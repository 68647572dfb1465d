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
This module implements IEEE 754 double precision floats, 8 bytes in the given byte order.

>>> se = Serializer.build_bytes_serializer()
>>> encode_double(se, 1.5, byteorder=ByteOrder.LITTLE)  # writes 000000000000f83f
>>> encode_double(se, -2.0, byteorder=ByteOrder.BIG)  # writes c000000000000000
>>> se.finalize().hex()
'000000000000f83fc000000000000000'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('000000000000f83fc000000000000000'))
>>> decode_double(de, byteorder=ByteOrder.LITTLE)
1.5
>>> decode_double(de, byteorder=ByteOrder.BIG)
-2.0
>>> de.finalize()
"""

from busvariant.context import ByteOrder
from busvariant.serialization import Deserializer, Serializer


def encode_double(serializer: Serializer, value: float, *, byteorder: ByteOrder) -> None:
    assert isinstance(value, float)
    serializer.write_struct(byteorder.struct_prefix + 'd', value)


def decode_double(deserializer: Deserializer, *, byteorder: ByteOrder) -> float:
    value, = deserializer.read_struct(byteorder.struct_prefix + 'd')
    return value
