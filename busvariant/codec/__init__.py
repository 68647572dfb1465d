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
Encoding and decoding of typed values in the D-Bus and GVariant wire formats.

Limits and defaults that are not given explicitly come from the global settings, see `busvariant.conf`. In
particular `max_bytes=None` means the `MAX_MESSAGE_SIZE` of the settings, a call cannot lift that cap, only a larger
or disabled setting can.

>>> data = encode(Value.uint32(258))
>>> data.hex()
'02010000'
>>> decode(data, 'u')
Value('u', 258)
>>> data = encode(Value.array(STRING, ['a', 'bc']), WireFormat.GVARIANT)
>>> decode_child(data, 'as', 1, WireFormat.GVARIANT)
Value('s', 'bc')
"""

from typing import Optional, Union

from busvariant.conf import get_global_settings
from busvariant.context import ByteOrder, EncodingContext, WireFormat
from busvariant.serialization.types import Buffer
from busvariant.signature import STRING, TypeDescriptor, parse_signature
from busvariant.value import Value

from .engine import CodecEngine

__all__ = ['encode', 'decode', 'decode_child', 'build_engine']


def build_engine(
    wire_format: Optional[WireFormat] = None,
    byte_order: Optional[ByteOrder] = None,
    *,
    max_depth: Optional[int] = None,
) -> CodecEngine:
    """ Build an engine, missing parameters are taken from the global settings.
    """
    settings = get_global_settings()
    context = EncodingContext(
        wire_format=wire_format if wire_format is not None else settings.DEFAULT_WIRE_FORMAT,
        byte_order=byte_order if byte_order is not None else settings.DEFAULT_BYTE_ORDER,
        max_depth=max_depth if max_depth is not None else settings.MAX_DEPTH,
    )
    return CodecEngine(context, max_array_length=settings.MAX_ARRAY_LENGTH)


def _resolve_max_bytes(max_bytes: Optional[int]) -> Optional[int]:
    return max_bytes if max_bytes is not None else get_global_settings().MAX_MESSAGE_SIZE


def _resolve_type(engine: CodecEngine, type_or_signature: Union[TypeDescriptor, str]) -> TypeDescriptor:
    if isinstance(type_or_signature, TypeDescriptor):
        return type_or_signature
    return parse_signature(type_or_signature, wire_format=engine.context.wire_format,
                           max_depth=engine.context.max_depth)


def encode(
    value: Value,
    wire_format: Optional[WireFormat] = None,
    byte_order: Optional[ByteOrder] = None,
    *,
    max_depth: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> bytes:
    """ Encode `value`, starting at offset zero.

    Raises an `EncodeError` when the value cannot be represented (like a too long array or too deep nesting),
    `UnsupportedTypeError` when the wire format has no representation for its type, and `MaxBytesExceededError` when
    the output would be longer than `max_bytes`.
    """
    engine = build_engine(wire_format, byte_order, max_depth=max_depth)
    return engine.encode(value, max_bytes=_resolve_max_bytes(max_bytes))


def decode(
    data: Buffer,
    type_or_signature: Union[TypeDescriptor, str],
    wire_format: Optional[WireFormat] = None,
    byte_order: Optional[ByteOrder] = None,
    *,
    max_depth: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> Value:
    """ Decode a single value of the given type that takes the whole of `data`.

    Raises a `DecodeError` for any malformed input, including trailing bytes, and `MalformedSignatureError` when the
    signature itself is invalid.
    """
    engine = build_engine(wire_format, byte_order, max_depth=max_depth)
    type_ = _resolve_type(engine, type_or_signature)
    return engine.decode(data, type_, max_bytes=_resolve_max_bytes(max_bytes))


def decode_child(
    data: Buffer,
    type_or_signature: Union[TypeDescriptor, str],
    index: int,
    wire_format: Optional[WireFormat] = None,
    byte_order: Optional[ByteOrder] = None,
    *,
    max_depth: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> Value:
    """ Decode only the child at `index` of an array, struct or dict entry that takes the whole of `data`.

    In GVariant the child is located through the framing offsets and its siblings are not decoded. D-Bus has no way to
    locate a child, so the whole container is decoded.
    """
    engine = build_engine(wire_format, byte_order, max_depth=max_depth)
    type_ = _resolve_type(engine, type_or_signature)
    return engine.decode_child(data, type_, index, max_bytes=_resolve_max_bytes(max_bytes))
