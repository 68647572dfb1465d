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
Errors raised by the signature parser and by both codecs.

They are split in two families so a caller can tell its own bugs apart from bad input:

- `EncodeError`: the caller built something that cannot be encoded, this is a programming error;
- `DecodeError`: the bytes being decoded are not valid, the data should be dropped, there is no point in retrying.

`MalformedSignatureError` is separate because signatures come from both sides. When a malformed signature is found
embedded in the data being decoded `InvalidSignatureError` is raised instead, which belongs to both families.
"""


class SerializationError(Exception):
    """Base class for every error raised by busvariant."""


class MalformedSignatureError(SerializationError, ValueError):
    """Signature is not grammatically valid or goes over one of the nesting limits."""


class UnsupportedTypeError(MalformedSignatureError):
    """Type exists in the grammar but cannot be used with the selected wire format (maybe types on D-Bus)."""


class MaxBytesExceededError(SerializationError):
    """ This error is raised when the adapted serializer reached its maximum bytes write/read.

    After this exception is raised the adapted serializer cannot be used anymore. It is possible that the inner
    serializer is still usable, but the point where it stopped writing or reading might leave the rest of the data
    unusable, so it should be considered a failed (de)serialization overall.
    """


class EncodeError(SerializationError):
    """Base class for errors caused by the values given to the encoder."""


class ValueMismatchError(EncodeError, TypeError):
    """Value data does not match its type descriptor, raised when the value is constructed."""


class ArrayTooLongError(EncodeError):
    """Encoded array body is longer than what the wire format allows."""


class ValueTooDeepError(EncodeError):
    """Value nests containers deeper than the configured limit."""


class DecodeError(SerializationError):
    """Base class for errors caused by invalid input data."""


class BufferUnderrunError(DecodeError):
    """Tried to read past the end of the available data."""


class TrailingDataError(DecodeError):
    """Data was left over after decoding a value that should have consumed all of it."""


class ArrayLengthMismatchError(DecodeError):
    """Array elements do not add up to the declared or framed array length."""


class InvalidBooleanError(DecodeError):
    """Boolean is encoded with something other than 0 or 1."""


class InvalidUtf8Error(DecodeError):
    """String is not valid UTF-8."""


class MissingNulTerminatorError(DecodeError):
    """String (or maybe value) is not followed by the mandatory zero byte."""


class SignatureTooLongError(DecodeError):
    """Signature on the wire is longer than 255 bytes."""


class OffsetTableCorruptError(DecodeError):
    """A framing offset is out of bounds or goes backwards."""


class InvalidValueError(DecodeError):
    """Decoded data is well framed but not a valid value, like an object path with an empty element."""


class MaxDepthExceededError(DecodeError):
    """Data nests containers (including variants) deeper than the configured limit."""


class InvalidSignatureError(DecodeError, MalformedSignatureError):
    """A signature embedded in the data being decoded is malformed."""
