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
The fixed-layout format used by D-Bus messages.

Every value is aligned to its natural alignment relative to the start of the message, containers carry no size
information except arrays, which are prefixed by the number of bytes taken by their elements.

>>> from busvariant.codec import encode
>>> encode(Value.struct(Value.byte(1), Value.uint32(2)), WireFormat.DBUS).hex()
'0100000002000000'
>>> encode(Value.string('hi'), WireFormat.DBUS, ByteOrder.BIG).hex()
'00000002686900'
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from typing_extensions import override

from busvariant.consts import DEFAULT_MAX_ARRAY_LENGTH
from busvariant.context import ByteOrder, WireFormat
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.compound_encoding.length_prefixed import decode_length_prefixed, encode_length_prefixed
from busvariant.serialization.encoding.bool import decode_bool, encode_bool
from busvariant.serialization.encoding.float import decode_double, encode_double
from busvariant.serialization.encoding.int import decode_int, encode_int
from busvariant.serialization.encoding.signature import decode_signature, encode_signature
from busvariant.serialization.encoding.utf8 import decode_utf8, encode_utf8
from busvariant.serialization.exceptions import (
    InvalidSignatureError,
    InvalidValueError,
    MalformedSignatureError,
    ValueMismatchError,
)
from busvariant.signature import (
    INTEGER_LAYOUTS,
    VARIANT,
    ArrayType,
    BasicType,
    DictEntryType,
    StructType,
    TypeCode,
    member_types,
    parse_signature,
    parse_signatures,
)
from busvariant.value import Value, is_valid_object_path

from .strategy import FormatStrategy

if TYPE_CHECKING:
    from busvariant.codec.engine import CodecEngine

_BOOLEAN_LENGTH = 4
_STRING_PREFIX_LENGTH = 4


class DBusStrategy(FormatStrategy):
    wire_format = WireFormat.DBUS

    def __init__(self, byte_order: ByteOrder, *, max_array_length: int = DEFAULT_MAX_ARRAY_LENGTH) -> None:
        super().__init__(byte_order)
        self.max_array_length = max_array_length

    @override
    def encode_basic(self, engine: CodecEngine, serializer: Serializer, value: Value) -> None:
        assert isinstance(value.type, BasicType)
        code = value.type.code
        match code:
            case TypeCode.BOOLEAN:
                encode_bool(serializer, value.data, length=_BOOLEAN_LENGTH, byteorder=self.byte_order)
            case TypeCode.DOUBLE:
                encode_double(serializer, value.data, byteorder=self.byte_order)
            case TypeCode.STRING | TypeCode.OBJECT_PATH:
                encode_utf8(serializer, value.data, prefix_length=_STRING_PREFIX_LENGTH, byteorder=self.byte_order)
            case TypeCode.SIGNATURE:
                try:
                    parse_signatures(value.data, wire_format=self.wire_format)
                except MalformedSignatureError as e:
                    raise ValueMismatchError(f'{value.data!r} is not a valid D-Bus signature: {e}') from e
                encode_signature(serializer, value.data, prefixed=True)
            case _:
                length, signed = INTEGER_LAYOUTS[code]
                encode_int(serializer, value.data, length=length, signed=signed, byteorder=self.byte_order)

    @override
    def decode_basic(self, engine: CodecEngine, deserializer: Deserializer, type_: BasicType) -> Value:
        data: bool | int | float | str
        match type_.code:
            case TypeCode.BOOLEAN:
                data = decode_bool(deserializer, length=_BOOLEAN_LENGTH, byteorder=self.byte_order)
            case TypeCode.DOUBLE:
                data = decode_double(deserializer, byteorder=self.byte_order)
            case TypeCode.STRING:
                data = decode_utf8(deserializer, prefix_length=_STRING_PREFIX_LENGTH, byteorder=self.byte_order)
            case TypeCode.OBJECT_PATH:
                data = decode_utf8(deserializer, prefix_length=_STRING_PREFIX_LENGTH, byteorder=self.byte_order)
                if not is_valid_object_path(data):
                    raise InvalidValueError(f'{data!r} is not a valid object path')
            case TypeCode.SIGNATURE:
                data = decode_signature(deserializer, prefixed=True, wire_format=self.wire_format)
            case code:
                length, signed = INTEGER_LAYOUTS[code]
                data = decode_int(deserializer, length=length, signed=signed, byteorder=self.byte_order)
        return Value(type_, data)

    @override
    def encode_array(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        assert isinstance(value.type, ArrayType)
        encode_length_prefixed(
            serializer,
            value.data,
            engine.child_encoder(depth),
            element_alignment=self.alignment_of(value.type.element),
            byteorder=self.byte_order,
            max_length=self.max_array_length,
        )

    @override
    def decode_array(self, engine: CodecEngine, deserializer: Deserializer, type_: ArrayType, depth: int) -> Value:
        items = decode_length_prefixed(
            deserializer,
            engine.child_decoder(type_.element, depth),
            tuple,
            element_alignment=self.alignment_of(type_.element),
            byteorder=self.byte_order,
            max_length=self.max_array_length,
        )
        return Value(type_, items)

    @override
    def encode_struct(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        encoder = engine.child_encoder(depth)
        for member in value.data:
            encoder(serializer, member)

    @override
    def decode_struct(self, engine: CodecEngine, deserializer: Deserializer, type_: StructType | DictEntryType,
                      depth: int) -> Value:
        members = tuple(engine.child_decoder(member, depth)(deserializer) for member in member_types(type_))
        return Value(type_, members)

    @override
    def encode_variant(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        inner = value.data
        encode_signature(serializer, inner.signature, prefixed=True)
        engine.child_encoder(depth)(serializer, inner)

    @override
    def decode_variant(self, engine: CodecEngine, deserializer: Deserializer, depth: int) -> Value:
        signature = decode_signature(deserializer, prefixed=True)
        try:
            inner_type = parse_signature(signature, wire_format=self.wire_format, max_depth=engine.context.max_depth)
        except MalformedSignatureError as e:
            raise InvalidSignatureError(f'invalid variant signature {signature!r}: {e}') from e
        inner = engine.child_decoder(inner_type, depth)(deserializer)
        return Value(VARIANT, inner)
