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
Alignment and fixed sizes of types in both wire formats.

>>> from busvariant.signature import parse_signature
>>> alignment_of(parse_signature('(yx)'), WireFormat.DBUS), alignment_of(parse_signature('(yx)'), WireFormat.GVARIANT)
(8, 8)
>>> alignment_of(parse_signature('ay'), WireFormat.DBUS), alignment_of(parse_signature('ay'), WireFormat.GVARIANT)
(4, 1)
>>> fixed_size_of(parse_signature('(yu)')), fixed_size_of(parse_signature('(uy)')), fixed_size_of(parse_signature('s'))
(8, 8, None)
"""

from functools import cache
from typing import Final

from busvariant.context import WireFormat
from busvariant.serialization.encoding.padding import pad_to
from busvariant.serialization.exceptions import UnsupportedTypeError
from busvariant.signature import (
    ArrayType,
    BasicType,
    DictEntryType,
    MaybeType,
    StructType,
    TypeCode,
    TypeDescriptor,
    VariantType,
    member_types,
)

__all__ = ['alignment_of', 'fixed_size_of', 'pad_to']

_DBUS_BASIC_ALIGNMENT: Final[dict[TypeCode, int]] = {
    TypeCode.BYTE: 1,
    TypeCode.BOOLEAN: 4,
    TypeCode.INT16: 2,
    TypeCode.UINT16: 2,
    TypeCode.INT32: 4,
    TypeCode.UINT32: 4,
    TypeCode.INT64: 8,
    TypeCode.UINT64: 8,
    TypeCode.DOUBLE: 8,
    # aligned on the length prefix
    TypeCode.STRING: 4,
    TypeCode.OBJECT_PATH: 4,
    TypeCode.SIGNATURE: 1,
    TypeCode.UNIX_FD: 4,
}

# GVariant fixed-size basic types are aligned to their size, strings have no alignment
_GVARIANT_BASIC_SIZE: Final[dict[TypeCode, int | None]] = {
    TypeCode.BYTE: 1,
    TypeCode.BOOLEAN: 1,
    TypeCode.INT16: 2,
    TypeCode.UINT16: 2,
    TypeCode.INT32: 4,
    TypeCode.UINT32: 4,
    TypeCode.INT64: 8,
    TypeCode.UINT64: 8,
    TypeCode.DOUBLE: 8,
    TypeCode.STRING: None,
    TypeCode.OBJECT_PATH: None,
    TypeCode.SIGNATURE: None,
    TypeCode.UNIX_FD: 4,
}

_DBUS_ARRAY_ALIGNMENT: Final = 4
_DBUS_STRUCT_ALIGNMENT: Final = 8
_DBUS_VARIANT_ALIGNMENT: Final = 1
_GVARIANT_VARIANT_ALIGNMENT: Final = 8


def alignment_of(type_: TypeDescriptor, wire_format: WireFormat) -> int:
    """ Alignment, in bytes, of values of `type_` in `wire_format`.
    """
    match wire_format:
        case WireFormat.DBUS:
            return _dbus_alignment(type_)
        case WireFormat.GVARIANT:
            return _gvariant_alignment(type_)
        case _:
            raise ValueError(f'unknown wire format {wire_format!r}')


def _dbus_alignment(type_: TypeDescriptor) -> int:
    match type_:
        case BasicType(code=code):
            return _DBUS_BASIC_ALIGNMENT[code]
        case ArrayType():
            return _DBUS_ARRAY_ALIGNMENT
        case StructType() | DictEntryType():
            return _DBUS_STRUCT_ALIGNMENT
        case VariantType():
            return _DBUS_VARIANT_ALIGNMENT
        case MaybeType():
            raise UnsupportedTypeError('maybe types are not supported by the D-Bus format')
        case _:
            raise TypeError(f'unknown type descriptor {type_!r}')


@cache
def _gvariant_alignment(type_: TypeDescriptor) -> int:
    match type_:
        case BasicType(code=code):
            return _GVARIANT_BASIC_SIZE[code] or 1
        case ArrayType(element=element):
            return _gvariant_alignment(element)
        case MaybeType(inner=inner):
            return _gvariant_alignment(inner)
        case StructType() | DictEntryType():
            return max(_gvariant_alignment(member) for member in member_types(type_))
        case VariantType():
            return _GVARIANT_VARIANT_ALIGNMENT
        case _:
            raise TypeError(f'unknown type descriptor {type_!r}')


@cache
def fixed_size_of(type_: TypeDescriptor) -> int | None:
    """ Size of every GVariant value of `type_`, or None when the size depends on the value.

    Only numeric basic types and structs made of fixed-size members are fixed-size. The size of a struct includes the
    padding between members and the padding at the end, up to the alignment of the struct.
    """
    match type_:
        case BasicType(code=code):
            return _GVARIANT_BASIC_SIZE[code]
        case StructType() | DictEntryType():
            offset = 0
            for member in member_types(type_):
                member_size = fixed_size_of(member)
                if member_size is None:
                    return None
                offset += pad_to(offset, _gvariant_alignment(member)) + member_size
            return offset + pad_to(offset, _gvariant_alignment(type_))
        case _:
            return None
