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
Typed values, the input of encoding and the output of decoding.

A `Value` pairs a type descriptor with data of the matching Python shape:

- integers, unix fds: `int` within the range of the type
- booleans: `bool`
- doubles: `float`
- strings, object paths, signatures: `str`
- arrays: tuple of `Value`, all of the element type
- structs and dict entries: tuple of `Value`, one per member
- variants: a single `Value` of any type
- maybe: a `Value` of the inner type or `None`

Values check their data when built, so an encoder never sees data that does not match the type.

>>> v = Value.dict(STRING, VARIANT, {'answer': Value.int32(42)})
>>> v.signature
'a{sv}'
>>> v.to_python()
{'answer': 42}
>>> Value.from_python(parse_signature('(sab)'), ('x', [True, False]))
Value('(sab)', ('x', [True, False]))
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final, Optional

from busvariant.consts import MAX_SIGNATURE_LENGTH
from busvariant.serialization.exceptions import MalformedSignatureError, ValueMismatchError
from busvariant.signature import (
    BOOLEAN,
    BYTE,
    DOUBLE,
    INT16,
    INT32,
    INT64,
    INTEGER_LAYOUTS,
    OBJECT_PATH,
    SIGNATURE,
    STRING,
    UINT16,
    UINT32,
    UINT64,
    UNIX_FD,
    VARIANT,
    ArrayType,
    BasicType,
    DictEntryType,
    MaybeType,
    StructType,
    TypeCode,
    TypeDescriptor,
    VariantType,
    parse_signature,
    parse_signatures,
)

_OBJECT_PATH_RE: Final = re.compile(r'/|(/[A-Za-z0-9_]+)+')

_INTEGER_RANGES: Final[dict[TypeCode, range]] = {
    code: range(-(1 << (8 * length - 1)), 1 << (8 * length - 1)) if signed else range(1 << (8 * length))
    for code, (length, signed) in INTEGER_LAYOUTS.items()
}


def is_valid_object_path(path: str) -> bool:
    """
    >>> [is_valid_object_path(p) for p in ('/', '/org/freedesktop', '/a/', '', 'a', '//a', '/a-b')]
    [True, True, False, False, False, False, False]
    """
    return _OBJECT_PATH_RE.fullmatch(path) is not None


def is_valid_signature(signature: str) -> bool:
    if len(signature) > MAX_SIGNATURE_LENGTH:
        return False
    try:
        parse_signatures(signature)
    except MalformedSignatureError:
        return False
    return True


@dataclass(frozen=True)
class Value:
    type: TypeDescriptor
    data: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, 'data', _check_data(self.type, self.data))

    def __repr__(self) -> str:
        return f'Value({self.type.signature!r}, {self.to_python()!r})'

    @property
    def signature(self) -> str:
        return self.type.signature

    @classmethod
    def byte(cls, value: int) -> Value:
        return cls(BYTE, value)

    @classmethod
    def boolean(cls, value: bool) -> Value:
        return cls(BOOLEAN, value)

    @classmethod
    def int16(cls, value: int) -> Value:
        return cls(INT16, value)

    @classmethod
    def uint16(cls, value: int) -> Value:
        return cls(UINT16, value)

    @classmethod
    def int32(cls, value: int) -> Value:
        return cls(INT32, value)

    @classmethod
    def uint32(cls, value: int) -> Value:
        return cls(UINT32, value)

    @classmethod
    def int64(cls, value: int) -> Value:
        return cls(INT64, value)

    @classmethod
    def uint64(cls, value: int) -> Value:
        return cls(UINT64, value)

    @classmethod
    def double(cls, value: float) -> Value:
        return cls(DOUBLE, value)

    @classmethod
    def string(cls, value: str) -> Value:
        return cls(STRING, value)

    @classmethod
    def object_path(cls, value: str) -> Value:
        return cls(OBJECT_PATH, value)

    @classmethod
    def signature_value(cls, value: str) -> Value:
        return cls(SIGNATURE, value)

    @classmethod
    def unix_fd(cls, value: int) -> Value:
        """The value is an index into the file descriptors sent along with the message, not the descriptor itself."""
        return cls(UNIX_FD, value)

    @classmethod
    def array(cls, element_type: TypeDescriptor, values: Iterable[Any]) -> Value:
        return cls.from_python(ArrayType(element_type), values)

    @classmethod
    def struct(cls, *values: Value) -> Value:
        return cls(StructType(tuple(value.type for value in values)), values)

    @classmethod
    def dict_entry(cls, key: Value, value: Value) -> Value:
        return cls(DictEntryType(key.type, value.type), (key, value))

    @classmethod
    def dict(cls, key_type: TypeDescriptor, value_type: TypeDescriptor, mapping: Mapping[Any, Any]) -> Value:
        return cls.from_python(ArrayType(DictEntryType(key_type, value_type)), mapping)

    @classmethod
    def variant(cls, value: Any) -> Value:
        """Wrap `value` in a variant, plain Python data goes through `infer`."""
        return cls(VARIANT, cls.infer(value))

    @classmethod
    def maybe(cls, inner_type: TypeDescriptor, value: Any = None) -> Value:
        return cls(MaybeType(inner_type), None if value is None else cls.from_python(inner_type, value))

    @classmethod
    def nothing(cls, inner_type: TypeDescriptor) -> Value:
        return cls(MaybeType(inner_type), None)

    @classmethod
    def from_python(cls, type_: TypeDescriptor | str, obj: Any) -> Value:
        """ Build a value of `type_` from plain Python data, nested `Value` instances are accepted as they are.

        Byte arrays accept `bytes`, arrays of dict entries accept a mapping, and variants infer the type of plain data
        (see `infer`).
        """
        if isinstance(type_, str):
            type_ = parse_signature(type_)
        if isinstance(obj, Value):
            if obj.type == type_:
                return obj
            if not isinstance(type_, (VariantType, MaybeType)):
                raise ValueMismatchError(f'expected a value of type {type_.signature!r}, got {obj.signature!r}')
        match type_:
            case BasicType():
                return cls(type_, obj)
            case ArrayType(element=element):
                if element == BYTE and isinstance(obj, (bytes, bytearray, memoryview)):
                    return cls(type_, tuple(cls(BYTE, b) for b in bytes(obj)))
                if isinstance(element, DictEntryType) and isinstance(obj, Mapping):
                    obj = obj.items()
                items = _check_iterable(type_, obj)
                return cls(type_, tuple(cls.from_python(element, item) for item in items))
            case StructType(fields=fields):
                items = _check_iterable(type_, obj)
                if len(items) != len(fields):
                    raise ValueMismatchError(f'{type_.signature!r} has {len(fields)} members, got {len(items)}')
                return cls(type_, tuple(cls.from_python(field, item) for field, item in zip(fields, items)))
            case DictEntryType(key=key, value=value):
                items = _check_iterable(type_, obj)
                if len(items) != 2:
                    raise ValueMismatchError(f'dict entries are (key, value) pairs, got {len(items)} items')
                return cls(type_, (cls.from_python(key, items[0]), cls.from_python(value, items[1])))
            case VariantType():
                return cls(type_, cls.infer(obj))
            case MaybeType(inner=inner):
                return cls(type_, None if obj is None else cls.from_python(inner, obj))
            case _:
                raise TypeError(f'unknown type descriptor {type_!r}')

    @classmethod
    def infer(cls, obj: Any) -> Value:
        """ Build a value from plain Python data whose type is implied: bool, int (as int64), float, str and bytes.

        >>> Value.infer(3), Value.infer(b'ab')
        (Value('x', 3), Value('ay', b'ab'))
        """
        if isinstance(obj, Value):
            return obj
        elif isinstance(obj, bool):
            return cls(BOOLEAN, obj)
        elif isinstance(obj, int):
            return cls(INT64, obj)
        elif isinstance(obj, float):
            return cls(DOUBLE, obj)
        elif isinstance(obj, str):
            return cls(STRING, obj)
        elif isinstance(obj, (bytes, bytearray)):
            return cls.from_python(ArrayType(BYTE), obj)
        raise ValueMismatchError(f'cannot infer the type of {type(obj).__name__}, wrap it in a Value')

    def to_python(self) -> Any:
        """ Convert to plain Python data.

        Byte arrays become `bytes`, arrays of dict entries become `dict`, other arrays become `list`, structs become
        `tuple`. Variants are unwrapped, so the type of their contents is lost.
        """
        match self.type:
            case BasicType():
                return self.data
            case ArrayType(element=element):
                if element == BYTE:
                    return bytes(item.data for item in self.data)
                if isinstance(element, DictEntryType):
                    return {key.to_python(): value.to_python() for key, value in (item.data for item in self.data)}
                return [item.to_python() for item in self.data]
            case StructType() | DictEntryType():
                return tuple(item.to_python() for item in self.data)
            case VariantType():
                return self.data.to_python()
            case MaybeType():
                return None if self.data is None else self.data.to_python()
            case _:
                raise TypeError(f'unknown type descriptor {self.type!r}')


def _check_iterable(type_: TypeDescriptor, obj: Any) -> tuple[Any, ...]:
    if isinstance(obj, (str, bytes, bytearray, Mapping)) or not isinstance(obj, Iterable):
        raise ValueMismatchError(f'{type_.signature!r} expects a sequence, got {type(obj).__name__}')
    return tuple(obj)


def _check_child(item: Any, expected: TypeDescriptor) -> Value:
    if not isinstance(item, Value):
        raise ValueMismatchError(f'expected a Value of type {expected.signature!r}, got {type(item).__name__}')
    if item.type != expected:
        raise ValueMismatchError(f'expected a value of type {expected.signature!r}, got {item.signature!r}')
    return item


def _check_data(type_: TypeDescriptor, data: Any) -> Any:
    """ Check that `data` matches `type_` and normalize it, sequences become tuples.
    """
    match type_:
        case BasicType(code=code):
            return _check_basic(code, data)
        case ArrayType(element=element):
            return tuple(_check_child(item, element) for item in _check_iterable(type_, data))
        case StructType(fields=fields):
            items = _check_iterable(type_, data)
            if len(items) != len(fields):
                raise ValueMismatchError(f'{type_.signature!r} has {len(fields)} members, got {len(items)}')
            return tuple(_check_child(item, field) for item, field in zip(items, fields))
        case DictEntryType(key=key, value=value):
            items = _check_iterable(type_, data)
            if len(items) != 2:
                raise ValueMismatchError(f'dict entries are (key, value) pairs, got {len(items)} items')
            return (_check_child(items[0], key), _check_child(items[1], value))
        case VariantType():
            if not isinstance(data, Value):
                raise ValueMismatchError(f'a variant holds a Value, got {type(data).__name__}')
            if isinstance(data.type, DictEntryType):
                raise ValueMismatchError('a variant cannot hold a bare dict entry')
            return data
        case MaybeType(inner=inner):
            return None if data is None else _check_child(data, inner)
        case _:
            raise TypeError(f'unknown type descriptor {type_!r}')


def _check_basic(code: TypeCode, data: Any) -> Any:
    int_range: Optional[range] = _INTEGER_RANGES.get(code)
    if int_range is not None:
        if not isinstance(data, int) or isinstance(data, bool):
            raise ValueMismatchError(f'{code.name} expects an int, got {type(data).__name__}')
        if data not in int_range:
            raise ValueMismatchError(f'{data} is out of range for {code.name}')
        return data

    match code:
        case TypeCode.BOOLEAN:
            if not isinstance(data, bool):
                raise ValueMismatchError(f'BOOLEAN expects a bool, got {type(data).__name__}')
            return data
        case TypeCode.DOUBLE:
            if isinstance(data, int) and not isinstance(data, bool):
                data = float(data)
            if not isinstance(data, float):
                raise ValueMismatchError(f'DOUBLE expects a float, got {type(data).__name__}')
            return data
        case TypeCode.STRING | TypeCode.OBJECT_PATH | TypeCode.SIGNATURE:
            if not isinstance(data, str):
                raise ValueMismatchError(f'{code.name} expects a str, got {type(data).__name__}')
            if '\x00' in data:
                raise ValueMismatchError(f'{code.name} cannot contain NUL characters')
            try:
                data.encode('utf-8')
            except UnicodeEncodeError as e:
                raise ValueMismatchError(f'{code.name} is not encodable as utf-8: {e.reason}') from e
            if code is TypeCode.OBJECT_PATH and not is_valid_object_path(data):
                raise ValueMismatchError(f'{data!r} is not a valid object path')
            if code is TypeCode.SIGNATURE and not is_valid_signature(data):
                raise ValueMismatchError(f'{data!r} is not a valid signature')
            return data
        case _:
            raise TypeError(f'unknown type code {code!r}')
