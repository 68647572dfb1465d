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


from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from busvariant.alignment import alignment_of
from busvariant.context import ByteOrder, WireFormat
from busvariant.serialization import Deserializer, Serializer
from busvariant.signature import ArrayType, BasicType, DictEntryType, MaybeType, StructType, TypeDescriptor
from busvariant.serialization.exceptions import UnsupportedTypeError
from busvariant.value import Value

if TYPE_CHECKING:
    from busvariant.codec.engine import CodecEngine


class FormatStrategy(ABC):
    """ Layout rules of a wire format.

    The engine deals with recursion, depth limits and the alignment of every value. A strategy only has to know how
    each kind of value is laid out, delegating its children back to the engine.
    """

    wire_format: ClassVar[WireFormat]

    def __init__(self, byte_order: ByteOrder) -> None:
        self.byte_order = byte_order

    def alignment_of(self, type_: TypeDescriptor) -> int:
        return alignment_of(type_, self.wire_format)

    @abstractmethod
    def encode_basic(self, engine: CodecEngine, serializer: Serializer, value: Value) -> None:
        raise NotImplementedError

    @abstractmethod
    def decode_basic(self, engine: CodecEngine, deserializer: Deserializer, type_: BasicType) -> Value:
        raise NotImplementedError

    @abstractmethod
    def encode_array(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def decode_array(self, engine: CodecEngine, deserializer: Deserializer, type_: ArrayType, depth: int) -> Value:
        raise NotImplementedError

    @abstractmethod
    def encode_struct(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        """Encode a struct or a dict entry."""
        raise NotImplementedError

    @abstractmethod
    def decode_struct(self, engine: CodecEngine, deserializer: Deserializer, type_: StructType | DictEntryType,
                      depth: int) -> Value:
        """Decode a struct or a dict entry."""
        raise NotImplementedError

    @abstractmethod
    def encode_variant(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def decode_variant(self, engine: CodecEngine, deserializer: Deserializer, depth: int) -> Value:
        raise NotImplementedError

    def encode_maybe(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        raise UnsupportedTypeError(f'maybe types are not supported by the {self.wire_format.value} format')

    def decode_maybe(self, engine: CodecEngine, deserializer: Deserializer, type_: MaybeType, depth: int) -> Value:
        raise UnsupportedTypeError(f'maybe types are not supported by the {self.wire_format.value} format')

    def decode_child(self, engine: CodecEngine, deserializer: Deserializer, type_: TypeDescriptor,
                     index: int) -> Value:
        """ Decode the child at `index` of a container that takes all of the input.

        This implementation decodes the whole container, formats that can locate a child without decoding its
        siblings override it.
        """
        check_indexable(type_)
        container = engine.decode_value(deserializer, type_)
        if not 0 <= index < len(container.data):
            raise IndexError(f'{type_.signature!r} has {len(container.data)} children, '
                             f'index {index} is out of range')
        return container.data[index]


def check_indexable(type_: TypeDescriptor) -> None:
    if not isinstance(type_, (ArrayType, StructType, DictEntryType)):
        raise UnsupportedTypeError(f'{type_.signature!r} is not an array, struct or dict entry')
