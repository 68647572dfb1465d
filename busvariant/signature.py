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
Type descriptors and the signature grammar.

A signature is the textual form of a type: single letters for basic types, `a` followed by a type for arrays, `(...)`
for structs, `{KV}` for dict entries (only as the element of an array), `v` for variants and `m` followed by a type for
maybe values (GVariant only).

>>> parse_signature('a{sv}') == ArrayType(DictEntryType(STRING, VARIANT))
True
>>> to_signature(parse_signature('a{sv}'))
'a{sv}'
>>> [str(t) for t in parse_signatures('sa(ii)v')]
['s', 'a(ii)', 'v']
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Final, Iterable

from busvariant.consts import DEFAULT_MAX_DEPTH, MAX_ARRAY_DEPTH, MAX_SIGNATURE_LENGTH, MAX_STRUCT_DEPTH
from busvariant.context import WireFormat
from busvariant.serialization.exceptions import MalformedSignatureError, UnsupportedTypeError


class TypeCode(str, Enum):
    """Codes of the basic (non-container) types."""
    BYTE = 'y'
    BOOLEAN = 'b'
    INT16 = 'n'
    UINT16 = 'q'
    INT32 = 'i'
    UINT32 = 'u'
    INT64 = 'x'
    UINT64 = 't'
    DOUBLE = 'd'
    STRING = 's'
    OBJECT_PATH = 'o'
    SIGNATURE = 'g'
    UNIX_FD = 'h'


# byte length and signedness of the types encoded as plain integers, unix fds are indexes in the fd list
INTEGER_LAYOUTS: Final[dict[TypeCode, tuple[int, bool]]] = {
    TypeCode.BYTE: (1, False),
    TypeCode.INT16: (2, True),
    TypeCode.UINT16: (2, False),
    TypeCode.INT32: (4, True),
    TypeCode.UINT32: (4, False),
    TypeCode.INT64: (8, True),
    TypeCode.UINT64: (8, False),
    TypeCode.UNIX_FD: (4, False),
}

_ARRAY: Final = 'a'
_STRUCT_BEGIN: Final = '('
_STRUCT_END: Final = ')'
_DICT_ENTRY_BEGIN: Final = '{'
_DICT_ENTRY_END: Final = '}'
_VARIANT: Final = 'v'
_MAYBE: Final = 'm'


class TypeDescriptor(ABC):
    """ Immutable description of a type, every descriptor maps to exactly one signature string.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def signature(self) -> str:
        raise NotImplementedError

    def is_basic(self) -> bool:
        """Basic types are the only ones that can be used as dict keys."""
        return False

    @property
    def array_depth(self) -> int:
        """Number of nested arrays, variants start a new count."""
        return 0

    @property
    def struct_depth(self) -> int:
        """Number of nested structs and dict entries, variants start a new count."""
        return 0

    def __str__(self) -> str:
        return self.signature


@dataclass(frozen=True)
class BasicType(TypeDescriptor):
    code: TypeCode

    @property
    def signature(self) -> str:
        return self.code.value

    def is_basic(self) -> bool:
        return True


@dataclass(frozen=True)
class ArrayType(TypeDescriptor):
    element: TypeDescriptor

    def __post_init__(self) -> None:
        if self.array_depth > MAX_ARRAY_DEPTH:
            raise MalformedSignatureError(f'more than {MAX_ARRAY_DEPTH} nested arrays')

    @cached_property
    def array_depth(self) -> int:
        return self.element.array_depth + 1

    @cached_property
    def struct_depth(self) -> int:
        return self.element.struct_depth

    @cached_property
    def signature(self) -> str:
        return _ARRAY + self.element.signature

    def is_dict(self) -> bool:
        return isinstance(self.element, DictEntryType)


@dataclass(frozen=True)
class StructType(TypeDescriptor):
    fields: tuple[TypeDescriptor, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, 'fields', tuple(self.fields))
        if not self.fields:
            raise MalformedSignatureError('structs must have at least one member')
        for field in self.fields:
            _check_not_dict_entry(field, 'a struct member')
        _check_struct_depth(self)

    @cached_property
    def array_depth(self) -> int:
        return max(field.array_depth for field in self.fields)

    @cached_property
    def struct_depth(self) -> int:
        return max(field.struct_depth for field in self.fields) + 1

    @cached_property
    def signature(self) -> str:
        return _STRUCT_BEGIN + ''.join(field.signature for field in self.fields) + _STRUCT_END


@dataclass(frozen=True)
class DictEntryType(TypeDescriptor):
    key: TypeDescriptor
    value: TypeDescriptor

    def __post_init__(self) -> None:
        if not self.key.is_basic():
            raise MalformedSignatureError(f'dict entry keys must be basic types, not {self.key.signature!r}')
        _check_not_dict_entry(self.value, 'a dict entry value')
        _check_struct_depth(self)

    @cached_property
    def array_depth(self) -> int:
        return self.value.array_depth

    @cached_property
    def struct_depth(self) -> int:
        return self.value.struct_depth + 1

    @cached_property
    def signature(self) -> str:
        return _DICT_ENTRY_BEGIN + self.key.signature + self.value.signature + _DICT_ENTRY_END


@dataclass(frozen=True)
class VariantType(TypeDescriptor):
    @property
    def signature(self) -> str:
        return _VARIANT


@dataclass(frozen=True)
class MaybeType(TypeDescriptor):
    inner: TypeDescriptor

    def __post_init__(self) -> None:
        _check_not_dict_entry(self.inner, 'a maybe value')

    @property
    def array_depth(self) -> int:
        return self.inner.array_depth

    @property
    def struct_depth(self) -> int:
        return self.inner.struct_depth

    @cached_property
    def signature(self) -> str:
        return _MAYBE + self.inner.signature


def _check_not_dict_entry(type_: TypeDescriptor, where: str) -> None:
    if isinstance(type_, DictEntryType):
        raise MalformedSignatureError(f'dict entries can only be array elements, not {where}')


def _check_struct_depth(type_: TypeDescriptor) -> None:
    if type_.struct_depth > MAX_STRUCT_DEPTH:
        raise MalformedSignatureError(f'more than {MAX_STRUCT_DEPTH} nested structs')


BYTE: Final = BasicType(TypeCode.BYTE)
BOOLEAN: Final = BasicType(TypeCode.BOOLEAN)
INT16: Final = BasicType(TypeCode.INT16)
UINT16: Final = BasicType(TypeCode.UINT16)
INT32: Final = BasicType(TypeCode.INT32)
UINT32: Final = BasicType(TypeCode.UINT32)
INT64: Final = BasicType(TypeCode.INT64)
UINT64: Final = BasicType(TypeCode.UINT64)
DOUBLE: Final = BasicType(TypeCode.DOUBLE)
STRING: Final = BasicType(TypeCode.STRING)
OBJECT_PATH: Final = BasicType(TypeCode.OBJECT_PATH)
SIGNATURE: Final = BasicType(TypeCode.SIGNATURE)
UNIX_FD: Final = BasicType(TypeCode.UNIX_FD)
VARIANT: Final = VariantType()


def member_types(type_: TypeDescriptor) -> tuple[TypeDescriptor, ...]:
    """Types of the members of a struct or dict entry, in order."""
    match type_:
        case StructType(fields=fields):
            return fields
        case DictEntryType(key=key, value=value):
            return (key, value)
        case _:
            raise TypeError(f'{type_.signature!r} is not a struct or dict entry')


class _SignatureParser:
    """ Recursive descent parser with one character of lookahead.

    Nesting is tracked explicitly so that hostile signatures are rejected before they can exhaust the stack.
    """

    def __init__(self, text: str, *, wire_format: WireFormat | None, max_depth: int) -> None:
        self.text = text
        self.pos = 0
        self.wire_format = wire_format
        self.max_depth = max_depth

    def _error(self, message: str) -> MalformedSignatureError:
        return MalformedSignatureError(f'{self.text!r} at position {self.pos}: {message}')

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        if self.at_end():
            raise self._error('unexpected end of signature')
        return self.text[self.pos]

    def parse_type(self, *, depth: int = 0, array_depth: int = 0, struct_depth: int = 0,
                   in_array: bool = False) -> TypeDescriptor:
        c = self._peek()
        if c in _CONTAINER_BEGIN:
            if depth >= self.max_depth:
                raise self._error(f'nesting deeper than {self.max_depth} containers')
        self.pos += 1

        if c == _ARRAY:
            if array_depth >= MAX_ARRAY_DEPTH:
                raise self._error(f'more than {MAX_ARRAY_DEPTH} nested arrays')
            element = self.parse_type(depth=depth + 1, array_depth=array_depth + 1, struct_depth=struct_depth,
                                      in_array=True)
            return ArrayType(element)

        if c == _STRUCT_BEGIN:
            if struct_depth >= MAX_STRUCT_DEPTH:
                raise self._error(f'more than {MAX_STRUCT_DEPTH} nested structs')
            fields: list[TypeDescriptor] = []
            while self._peek() != _STRUCT_END:
                fields.append(self.parse_type(depth=depth + 1, array_depth=array_depth,
                                              struct_depth=struct_depth + 1))
            if not fields:
                raise self._error('empty struct')
            self.pos += 1
            return StructType(tuple(fields))

        if c == _DICT_ENTRY_BEGIN:
            if not in_array:
                raise self._error('dict entry outside of an array')
            if struct_depth >= MAX_STRUCT_DEPTH:
                raise self._error(f'more than {MAX_STRUCT_DEPTH} nested structs')
            key = self.parse_type(depth=depth + 1, array_depth=array_depth, struct_depth=struct_depth + 1)
            if not key.is_basic():
                raise self._error(f'dict entry key must be a basic type, not {key.signature!r}')
            value = self.parse_type(depth=depth + 1, array_depth=array_depth, struct_depth=struct_depth + 1)
            if self._peek() != _DICT_ENTRY_END:
                raise self._error('dict entry must have exactly one key and one value')
            self.pos += 1
            return DictEntryType(key, value)

        if c == _MAYBE:
            if self.wire_format is WireFormat.DBUS:
                raise UnsupportedTypeError(f'{self.text!r}: maybe types are not supported by the D-Bus format')
            inner = self.parse_type(depth=depth + 1, array_depth=array_depth, struct_depth=struct_depth)
            return MaybeType(inner)

        if c == _VARIANT:
            return VARIANT

        try:
            return BasicType(TypeCode(c))
        except ValueError:
            self.pos -= 1
            raise self._error(f'unrecognized type code {c!r}') from None


_CONTAINER_BEGIN: Final = frozenset({_ARRAY, _STRUCT_BEGIN, _DICT_ENTRY_BEGIN, _MAYBE})


def _build_parser(text: str, wire_format: WireFormat | None, max_depth: int) -> _SignatureParser:
    if not isinstance(text, str):
        raise TypeError(f'signature must be a str, not {type(text).__name__}')
    if len(text) > MAX_SIGNATURE_LENGTH:
        raise MalformedSignatureError(f'signature is longer than {MAX_SIGNATURE_LENGTH} characters')
    return _SignatureParser(text, wire_format=wire_format, max_depth=max_depth)


def parse_signature(text: str, *, wire_format: WireFormat | None = None,
                    max_depth: int = DEFAULT_MAX_DEPTH) -> TypeDescriptor:
    """ Parse a signature containing exactly one complete type.

    When `wire_format` is given, types that format does not support are rejected with `UnsupportedTypeError`.
    """
    parser = _build_parser(text, wire_format, max_depth)
    type_ = parser.parse_type()
    if not parser.at_end():
        raise parser._error('trailing characters after a complete type')
    return type_


def parse_signatures(text: str, *, wire_format: WireFormat | None = None,
                     max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[TypeDescriptor, ...]:
    """ Parse a signature containing any number of complete types, like the signature of a message body.
    """
    parser = _build_parser(text, wire_format, max_depth)
    types: list[TypeDescriptor] = []
    while not parser.at_end():
        types.append(parser.parse_type())
    return tuple(types)


def to_signature(type_: TypeDescriptor) -> str:
    """ Inverse of `parse_signature`.
    """
    return type_.signature


def signature_of(types: Iterable[TypeDescriptor]) -> str:
    """ Inverse of `parse_signatures`.
    """
    return ''.join(type_.signature for type_ in types)
