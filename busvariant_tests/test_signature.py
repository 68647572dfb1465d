import pytest

from busvariant.consts import MAX_ARRAY_DEPTH, MAX_STRUCT_DEPTH
from busvariant.context import WireFormat
from busvariant.serialization.exceptions import MalformedSignatureError, UnsupportedTypeError
from busvariant.signature import (
    BYTE,
    INT32,
    STRING,
    UINT32,
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
    parse_signatures,
    signature_of,
    to_signature,
)
from busvariant.value import Value

VALID_SIGNATURES = [
    'y', 'b', 'n', 'q', 'i', 'u', 'x', 't', 'd', 's', 'o', 'g', 'h', 'v',
    'ay', 'as', 'aay', 'a{sv}', 'a{oa{sa{sv}}}', '(i)', '(yu)', '((i)(s))', 'a(ii)', '(a{sv}as)', 'av', 'aav',
]


@pytest.mark.parametrize('signature', VALID_SIGNATURES)
def test_parse_round_trip(signature: str) -> None:
    assert to_signature(parse_signature(signature)) == signature


def test_parse_dict() -> None:
    type_ = parse_signature('a{sv}')
    assert type_ == ArrayType(DictEntryType(STRING, VARIANT))
    assert isinstance(type_, ArrayType)
    assert type_.is_dict()
    assert str(type_) == 'a{sv}'


def test_parse_struct() -> None:
    type_ = parse_signature('(yu(s))')
    assert type_ == StructType((BYTE, UINT32, StructType((STRING,))))
    assert member_types(type_) == (BYTE, UINT32, StructType((STRING,)))


def test_parse_signatures() -> None:
    assert parse_signatures('') == ()
    assert parse_signatures('ia{sv}(s)') == (INT32, ArrayType(DictEntryType(STRING, VARIANT)), StructType((STRING,)))
    assert signature_of(parse_signatures('ia{sv}(s)')) == 'ia{sv}(s)'


def test_basic_types() -> None:
    for code in TypeCode:
        type_ = parse_signature(code.value)
        assert type_ == BasicType(code)
        assert type_.is_basic()
    assert not VARIANT.is_basic()


@pytest.mark.parametrize('signature', [
    '',  # no type
    'a',  # array without element
    '()',  # empty struct
    '(i',  # unterminated struct
    'i)',  # unbalanced
    'ii',  # more than one type
    'z',  # unknown code
    '{sv}',  # dict entry outside array
    'a{vs}',  # non-basic key
    'a{s}',  # missing value
    'a{svv}',  # too many members
    'a{(i)s}',  # struct key
    '(a{sv}{sv})',  # dict entry in a struct
    'a' * 33 + 'y',  # too many nested arrays
    '(' * 33 + 'y' + ')' * 33,  # too many nested structs
])
def test_parse_invalid(signature: str) -> None:
    with pytest.raises(MalformedSignatureError):
        parse_signature(signature)


def test_nesting_limits() -> None:
    parse_signature('a' * MAX_ARRAY_DEPTH + 'y')
    parse_signature('(' * MAX_STRUCT_DEPTH + 'y' + ')' * MAX_STRUCT_DEPTH)
    parse_signature('a' * 32 + '(' * 32 + 'y' + ')' * 32)


def test_nesting_limits_of_built_descriptors() -> None:
    array: TypeDescriptor = BYTE
    for _ in range(MAX_ARRAY_DEPTH):
        array = ArrayType(array)
    assert array == parse_signature('a' * MAX_ARRAY_DEPTH + 'y')
    with pytest.raises(MalformedSignatureError):
        ArrayType(array)
    # the contents of a variant are not part of its type
    assert ArrayType(StructType((VARIANT, BYTE))).array_depth == 1

    struct: TypeDescriptor = BYTE
    for _ in range(MAX_STRUCT_DEPTH - 1):
        struct = StructType((struct,))
    entry = DictEntryType(STRING, struct)
    assert entry.struct_depth == MAX_STRUCT_DEPTH
    with pytest.raises(MalformedSignatureError):
        StructType((StructType((struct,)),))
    with pytest.raises(MalformedSignatureError):
        DictEntryType(STRING, StructType((struct,)))
    with pytest.raises(MalformedSignatureError):
        Value.array(StructType((StructType((struct,)),)), [])


def test_max_depth() -> None:
    parse_signature('aay', max_depth=2)
    with pytest.raises(MalformedSignatureError):
        parse_signature('aaay', max_depth=2)
    with pytest.raises(MalformedSignatureError):
        parse_signature('((((y))))', max_depth=3)


def test_too_long() -> None:
    parse_signatures('y' * 255)
    with pytest.raises(MalformedSignatureError):
        parse_signatures('y' * 256)


def test_maybe() -> None:
    assert parse_signature('mi') == MaybeType(INT32)
    assert parse_signature('ams', wire_format=WireFormat.GVARIANT) == ArrayType(MaybeType(STRING))
    with pytest.raises(UnsupportedTypeError):
        parse_signature('mi', wire_format=WireFormat.DBUS)
    with pytest.raises(UnsupportedTypeError):
        parse_signature('a{smi}', wire_format=WireFormat.DBUS)
    # maybe without an inner type
    with pytest.raises(MalformedSignatureError):
        parse_signature('(m)', wire_format=WireFormat.GVARIANT)


def test_invalid_descriptors() -> None:
    with pytest.raises(MalformedSignatureError):
        StructType(())
    with pytest.raises(MalformedSignatureError):
        DictEntryType(VARIANT, STRING)
    with pytest.raises(MalformedSignatureError):
        StructType((DictEntryType(STRING, STRING),))
    with pytest.raises(MalformedSignatureError):
        MaybeType(DictEntryType(STRING, STRING))


def test_descriptors_are_hashable() -> None:
    types = {parse_signature('a{sv}'), parse_signature('a{sv}'), ArrayType(DictEntryType(STRING, VARIANT))}
    assert len(types) == 1


def test_not_a_string() -> None:
    with pytest.raises(TypeError):
        parse_signature(b'y')  # type: ignore[arg-type]
