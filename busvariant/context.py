# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Literal


class ByteOrder(str, Enum):
    """Byte order of the encoded scalars.

    The values are the markers D-Bus uses in the first byte of a message header.

    >>> ByteOrder.from_marker(0x6c) is ByteOrder.LITTLE
    True
    >>> ByteOrder.BIG.struct_prefix
    '>'
    """

    LITTLE = 'l'
    BIG = 'B'

    @property
    def byteorder(self) -> Literal['little', 'big']:
        """Name used by `int.to_bytes` and `int.from_bytes`."""
        return 'little' if self is ByteOrder.LITTLE else 'big'

    @property
    def struct_prefix(self) -> str:
        return '<' if self is ByteOrder.LITTLE else '>'

    @property
    def marker(self) -> int:
        return ord(self.value)

    @classmethod
    def native(cls) -> 'ByteOrder':
        return cls.LITTLE if sys.byteorder == 'little' else cls.BIG

    @classmethod
    def from_marker(cls, marker: int) -> 'ByteOrder':
        try:
            return cls(chr(marker))
        except ValueError:
            raise ValueError(f'{marker:#04x} is not a valid byte order marker') from None


class WireFormat(str, Enum):
    # fixed-layout: length-prefixed containers, naturally aligned
    DBUS = 'dbus'
    # offset-indexed: trailing framing offsets, supports maybe types
    GVARIANT = 'gvariant'


@dataclass(slots=True, kw_only=True, frozen=True)
class EncodingContext:
    """Parameters of a single encode or decode call.

    The cursor (current offset) is not kept here, it belongs to the serializer or deserializer used in the call.
    """
    wire_format: WireFormat
    byte_order: ByteOrder
    max_depth: int
