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
This module implements the framing offsets of GVariant containers.

Non-fixed-size children of a container are located through the offsets of their ends, which are stored in a table at
the end of the container. All offsets in a container have the same size, which is the smallest of 0, 1, 2, 4 or 8
bytes that can address the whole container (table included). Framing offsets are always little-endian, regardless of
the byte order used for the values.

>>> [offset_size_for(n) for n in (0, 1, 0xff, 0x100, 0xffff, 0x10000, 0xffffffff, 0x100000000)]
[0, 1, 1, 2, 2, 4, 4, 8]

The container size when encoding accounts for the table itself, which can push it over a threshold:

>>> framed_container_size(253, 2), framed_container_size(254, 2)
(255, 258)

>>> se = Serializer.build_bytes_serializer()
>>> se.write_bytes(b'ab\x00\x01')
>>> encode_framing_offsets(se, [3], body_size=4)  # writes 03
>>> data = bytes(se.finalize())
>>> data.hex()
'6162000103'
>>> decode_framing_offset(data, 4, offset_size_for(len(data)))
3
"""

from collections.abc import Sequence

from busvariant.serialization import Serializer
from busvariant.serialization.exceptions import OffsetTableCorruptError
from busvariant.serialization.types import Buffer

# (offset size, largest container size it can address)
_OFFSET_LIMITS = ((1, 0xff), (2, 0xffff), (4, 0xffffffff))


def offset_size_for(container_size: int) -> int:
    """ Size of each framing offset in a container that takes `container_size` bytes, table included.
    """
    if container_size > 0xffffffff:
        return 8
    elif container_size > 0xffff:
        return 4
    elif container_size > 0xff:
        return 2
    elif container_size > 0:
        return 1
    else:
        return 0


def framed_container_size(body_size: int, offset_count: int) -> int:
    """ Total size of a container with `body_size` bytes of children followed by `offset_count` framing offsets.
    """
    if offset_count == 0:
        return body_size
    for offset_size, limit in _OFFSET_LIMITS:
        total = body_size + offset_size * offset_count
        if total <= limit:
            return total
    return body_size + 8 * offset_count


def encode_framing_offsets(serializer: Serializer, offsets: Sequence[int], *, body_size: int) -> None:
    """ Writes the framing offsets table, in the given order, after `body_size` bytes of children.
    """
    if not offsets:
        return
    offset_size = offset_size_for(framed_container_size(body_size, len(offsets)))
    for offset in offsets:
        serializer.write_bytes(offset.to_bytes(offset_size, 'little'))


def decode_framing_offset(data: Buffer, pos: int, offset_size: int) -> int:
    """ Reads the framing offset that starts at `pos` in the container `data`.
    """
    if pos < 0 or pos + offset_size > len(data):
        raise OffsetTableCorruptError(f'framing offset at {pos} is outside of the container')
    return int.from_bytes(data[pos:pos + offset_size], 'little')
