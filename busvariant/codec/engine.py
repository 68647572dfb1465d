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


from structlog import get_logger

from busvariant.context import ByteOrder, EncodingContext, WireFormat
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.compound_encoding import Decoder, Encoder
from busvariant.serialization.encoding.padding import encode_padding, skip_padding
from busvariant.serialization.exceptions import DecodeError, MaxDepthExceededError, ValueTooDeepError
from busvariant.serialization.types import Buffer
from busvariant.signature import (
    ArrayType,
    BasicType,
    DictEntryType,
    MaybeType,
    StructType,
    TypeDescriptor,
    VariantType,
)
from busvariant.value import Value

from .dbus import DBusStrategy
from .gvariant import GVariantStrategy
from .strategy import FormatStrategy

logger = get_logger()


def build_strategy(wire_format: WireFormat, byte_order: ByteOrder, *, max_array_length: int) -> FormatStrategy:
    match wire_format:
        case WireFormat.DBUS:
            return DBusStrategy(byte_order, max_array_length=max_array_length)
        case WireFormat.GVARIANT:
            return GVariantStrategy(byte_order)
        case _:
            raise ValueError(f'unknown wire format {wire_format!r}')


class CodecEngine:
    """ Walks a value (or a type, when decoding) and hands each node to the strategy of the wire format.

    Every value is aligned here, before the strategy sees it, so strategies never deal with their own padding.
    """

    def __init__(self, context: EncodingContext, *, max_array_length: int) -> None:
        self.context = context
        self.strategy = build_strategy(context.wire_format, context.byte_order, max_array_length=max_array_length)
        self.log = logger.new(wire_format=context.wire_format.value, byte_order=context.byte_order.name)

    def child_encoder(self, depth: int) -> Encoder[Value]:
        """Encoder for the children of a container at `depth`."""
        return lambda serializer, value: self.encode_value(serializer, value, depth + 1)

    def child_decoder(self, type_: TypeDescriptor, depth: int) -> Decoder[Value]:
        """Decoder for the children of type `type_` of a container at `depth`."""
        return lambda deserializer: self.decode_value(deserializer, type_, depth + 1)

    def encode_value(self, serializer: Serializer, value: Value, depth: int = 0) -> None:
        if depth > self.context.max_depth:
            raise ValueTooDeepError(f'value is nested deeper than {self.context.max_depth} containers')
        type_ = value.type
        encode_padding(serializer, self.strategy.alignment_of(type_))
        match type_:
            case BasicType():
                self.strategy.encode_basic(self, serializer, value)
            case ArrayType():
                self.strategy.encode_array(self, serializer, value, depth)
            case StructType() | DictEntryType():
                self.strategy.encode_struct(self, serializer, value, depth)
            case VariantType():
                self.strategy.encode_variant(self, serializer, value, depth)
            case MaybeType():
                self.strategy.encode_maybe(self, serializer, value, depth)
            case _:
                raise TypeError(f'unknown type descriptor {type_!r}')

    def decode_value(self, deserializer: Deserializer, type_: TypeDescriptor, depth: int = 0) -> Value:
        if depth > self.context.max_depth:
            raise MaxDepthExceededError(f'input is nested deeper than {self.context.max_depth} containers')
        skip_padding(deserializer, self.strategy.alignment_of(type_))
        match type_:
            case BasicType():
                return self.strategy.decode_basic(self, deserializer, type_)
            case ArrayType():
                return self.strategy.decode_array(self, deserializer, type_, depth)
            case StructType() | DictEntryType():
                return self.strategy.decode_struct(self, deserializer, type_, depth)
            case VariantType():
                return self.strategy.decode_variant(self, deserializer, depth)
            case MaybeType():
                return self.strategy.decode_maybe(self, deserializer, type_, depth)
            case _:
                raise TypeError(f'unknown type descriptor {type_!r}')

    def encode(self, value: Value, *, max_bytes: int | None) -> bytes:
        """ Encode a value from offset zero, nothing is returned unless the whole value was encoded.
        """
        serializer = Serializer.build_bytes_serializer()
        self.encode_value(serializer.with_optional_max_bytes(max_bytes), value)
        return bytes(serializer.finalize())

    def decode(self, data: Buffer, type_: TypeDescriptor, *, max_bytes: int | None) -> Value:
        """ Decode a value of `type_` that takes the whole of `data`.
        """
        deserializer = Deserializer.build_bytes_deserializer(data).with_optional_max_bytes(max_bytes)
        try:
            value = self.decode_value(deserializer, type_)
            deserializer.finalize()
        except DecodeError as e:
            self.log.debug('rejected input', signature=type_.signature, size=len(data), error=repr(e))
            raise
        return value

    def decode_child(self, data: Buffer, type_: TypeDescriptor, index: int, *, max_bytes: int | None) -> Value:
        """ Decode the child at `index` of a container of `type_` that takes the whole of `data`.
        """
        deserializer = Deserializer.build_bytes_deserializer(data).with_optional_max_bytes(max_bytes)
        try:
            value = self.strategy.decode_child(self, deserializer, type_, index)
            deserializer.finalize()
        except DecodeError as e:
            self.log.debug('rejected input', signature=type_.signature, index=index, size=len(data), error=repr(e))
            raise
        return value
