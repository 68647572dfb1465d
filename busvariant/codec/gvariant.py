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
The offset-indexed format used by GVariant.

Containers do not store their own size, it is given by the enclosing container (or by the size of the whole input at
the top level). Children whose size depends on their value are located through framing offsets stored at the end of
their container, which allows reading a single child without decoding its siblings.

>>> from busvariant.codec import encode
>>> encode(Value.struct(Value.string('ab'), Value.byte(1)), WireFormat.GVARIANT).hex()
'6162000103'
>>> encode(Value.variant(Value.uint16(7)), WireFormat.GVARIANT).hex()
'07000071'
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from typing_extensions import override

from busvariant.alignment import fixed_size_of
from busvariant.consts import MAX_SIGNATURE_LENGTH
from busvariant.context import WireFormat
from busvariant.serialization import Deserializer, Serializer
from busvariant.serialization.compound_encoding import decode_window
from busvariant.serialization.compound_encoding.framed_collection import (
    decode_framed_collection,
    decode_framed_collection_item,
    encode_framed_collection,
)
from busvariant.serialization.compound_encoding.framed_tuple import (
    decode_framed_tuple,
    decode_framed_tuple_item,
    encode_framed_tuple,
)
from busvariant.serialization.compound_encoding.optional import decode_maybe, encode_maybe
from busvariant.serialization.encoding.bool import decode_bool, encode_bool
from busvariant.serialization.encoding.float import decode_double, encode_double
from busvariant.serialization.encoding.int import decode_int, encode_int
from busvariant.serialization.encoding.signature import decode_signature, encode_signature
from busvariant.serialization.encoding.utf8 import decode_utf8, encode_utf8
from busvariant.serialization.exceptions import (
    InvalidSignatureError,
    InvalidValueError,
    MalformedSignatureError,
    SignatureTooLongError,
)
from busvariant.signature import (
    INTEGER_LAYOUTS,
    VARIANT,
    ArrayType,
    BasicType,
    DictEntryType,
    MaybeType,
    StructType,
    TypeCode,
    TypeDescriptor,
    member_types,
    parse_signature,
)
from busvariant.value import Value, is_valid_object_path

from .strategy import FormatStrategy, check_indexable

if TYPE_CHECKING:
    from busvariant.codec.engine import CodecEngine

_BOOLEAN_LENGTH = 1


class GVariantStrategy(FormatStrategy):
    wire_format = WireFormat.GVARIANT

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
                encode_utf8(serializer, value.data, prefix_length=0, byteorder=self.byte_order)
            case TypeCode.SIGNATURE:
                encode_signature(serializer, value.data, prefixed=False)
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
                data = decode_utf8(deserializer, prefix_length=0, byteorder=self.byte_order)
            case TypeCode.OBJECT_PATH:
                data = decode_utf8(deserializer, prefix_length=0, byteorder=self.byte_order)
                if not is_valid_object_path(data):
                    raise InvalidValueError(f'{data!r} is not a valid object path')
            case TypeCode.SIGNATURE:
                data = decode_signature(deserializer, prefixed=False, wire_format=self.wire_format)
            case code:
                length, signed = INTEGER_LAYOUTS[code]
                data = decode_int(deserializer, length=length, signed=signed, byteorder=self.byte_order)
        return Value(type_, data)

    @override
    def encode_array(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        assert isinstance(value.type, ArrayType)
        element = value.type.element
        encode_framed_collection(
            serializer,
            value.data,
            engine.child_encoder(depth),
            alignment=self.alignment_of(element),
            fixed_size=fixed_size_of(element),
        )

    @override
    def decode_array(self, engine: CodecEngine, deserializer: Deserializer, type_: ArrayType, depth: int) -> Value:
        items = decode_framed_collection(
            deserializer,
            engine.child_decoder(type_.element, depth),
            tuple,
            alignment=self.alignment_of(type_.element),
            fixed_size=fixed_size_of(type_.element),
        )
        return Value(type_, items)

    def _member_layout(self, type_: TypeDescriptor) -> tuple[tuple[int, ...], tuple[int | None, ...]]:
        members = member_types(type_)
        return tuple(self.alignment_of(m) for m in members), tuple(fixed_size_of(m) for m in members)

    @override
    def encode_struct(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        alignments, fixed_sizes = self._member_layout(value.type)
        encoder = engine.child_encoder(depth)
        encode_framed_tuple(
            serializer,
            value.data,
            [encoder] * len(value.data),
            alignments=alignments,
            fixed_sizes=fixed_sizes,
            alignment=self.alignment_of(value.type),
        )

    @override
    def decode_struct(self, engine: CodecEngine, deserializer: Deserializer, type_: StructType | DictEntryType,
                      depth: int) -> Value:
        alignments, fixed_sizes = self._member_layout(type_)
        members = decode_framed_tuple(
            deserializer,
            [engine.child_decoder(member, depth) for member in member_types(type_)],
            alignments=alignments,
            fixed_sizes=fixed_sizes,
        )
        return Value(type_, members)

    @override
    def encode_variant(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        inner = value.data
        engine.child_encoder(depth)(serializer, inner)
        serializer.write_byte(0)
        serializer.write_bytes(inner.signature.encode('ascii'))

    @override
    def decode_variant(self, engine: CodecEngine, deserializer: Deserializer, depth: int) -> Value:
        base_pos = deserializer.cur_pos()
        data = deserializer.read_all()
        separator = bytes(data).rfind(b'\x00')
        if separator < 0:
            raise InvalidSignatureError('variant has no separator between the value and its signature')
        raw_signature = bytes(data[separator + 1:])
        if len(raw_signature) > MAX_SIGNATURE_LENGTH:
            raise SignatureTooLongError(f'variant signature is longer than {MAX_SIGNATURE_LENGTH} characters')
        try:
            signature = raw_signature.decode('ascii')
            inner_type = parse_signature(signature, wire_format=self.wire_format, max_depth=engine.context.max_depth)
        except (UnicodeDecodeError, MalformedSignatureError) as e:
            raise InvalidSignatureError(f'invalid variant signature {raw_signature!r}: {e}') from e
        inner = decode_window(data, base_pos, 0, separator, engine.child_decoder(inner_type, depth))
        return Value(VARIANT, inner)

    @override
    def encode_maybe(self, engine: CodecEngine, serializer: Serializer, value: Value, depth: int) -> None:
        assert isinstance(value.type, MaybeType)
        encode_maybe(serializer, value.data, engine.child_encoder(depth), fixed_size=fixed_size_of(value.type.inner))

    @override
    def decode_maybe(self, engine: CodecEngine, deserializer: Deserializer, type_: MaybeType, depth: int) -> Value:
        decoder = engine.child_decoder(type_.inner, depth)
        inner = decode_maybe(deserializer, decoder, fixed_size=fixed_size_of(type_.inner))
        return Value(type_, inner)

    @override
    def decode_child(self, engine: CodecEngine, deserializer: Deserializer, type_: TypeDescriptor,
                     index: int) -> Value:
        check_indexable(type_)
        match type_:
            case ArrayType(element=element):
                return decode_framed_collection_item(
                    deserializer,
                    index,
                    engine.child_decoder(element, 0),
                    alignment=self.alignment_of(element),
                    fixed_size=fixed_size_of(element),
                )
            case _:
                members = member_types(type_)
                if not 0 <= index < len(members):
                    raise IndexError(f'{type_.signature!r} has {len(members)} members, index {index} is out of range')
                alignments, fixed_sizes = self._member_layout(type_)
                return decode_framed_tuple_item(
                    deserializer,
                    index,
                    engine.child_decoder(members[index], 0),
                    alignments=alignments,
                    fixed_sizes=fixed_sizes,
                )
