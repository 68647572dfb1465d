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


from busvariant.codec import decode, decode_child, encode
from busvariant.context import ByteOrder, WireFormat
from busvariant.signature import (
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
    signature_of,
    to_signature,
)
from busvariant.value import Value
from busvariant.version import __version__

__all__ = [
    '__version__',
    'ByteOrder',
    'WireFormat',
    'TypeCode',
    'TypeDescriptor',
    'BasicType',
    'ArrayType',
    'StructType',
    'DictEntryType',
    'VariantType',
    'MaybeType',
    'Value',
    'parse_signature',
    'parse_signatures',
    'to_signature',
    'signature_of',
    'encode',
    'decode',
    'decode_child',
]
