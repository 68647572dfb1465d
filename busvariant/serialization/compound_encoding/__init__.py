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


"""
This module was made to hold compound encoding implementations.

Compound encoders are generic containers that delegate the encoding of their children to another encoder. For example
a D-Bus array encoder deals with the length prefix and padding, and delegates each element to an encoder that knows
how to encode `T`.

The general organization should be that each submodule `x` deals with a single layout and look like this:

    def encode_x(serializer: Serializer, value: ValueType, ...config params...) -> None:
        ...

    def decode_x(deserializer: Deserializer, ...config params...) -> ValueType:
        ...

The "config params" are specific to each layout (alignment, fixed sizes, byte order...), submodules should not have
to take into consideration how types are mapped to encoders.
"""

from typing import Protocol, TypeVar

from busvariant.serialization.deserializer import Deserializer
from busvariant.serialization.serializer import Serializer
from busvariant.serialization.types import Buffer

T = TypeVar('T')
T_co = TypeVar('T_co', covariant=True)
T_contra = TypeVar('T_contra', contravariant=True)


class Decoder(Protocol[T_co]):
    def __call__(self, deserializer: Deserializer, /) -> T_co:
        ...


class Encoder(Protocol[T_contra]):
    def __call__(self, serializer: Serializer, value: T_contra, /) -> None:
        ...


def decode_window(data: Buffer, base_pos: int, start: int, end: int, decoder: Decoder[T]) -> T:
    """ Decode a child that must take exactly `data[start:end]`.

    `data` is a container that starts at `base_pos` in the outermost value, positions reported to the decoder stay
    relative to the outermost value.
    """
    window = Deserializer.build_bytes_deserializer(data[start:end], base_pos=base_pos + start)
    value = decoder(window)
    window.finalize()
    return value
