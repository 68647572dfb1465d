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


from pathlib import Path
from typing import Any, Optional, Union

from pydantic import Field, field_validator

from busvariant.consts import DEFAULT_MAX_ARRAY_LENGTH, DEFAULT_MAX_DEPTH, DEFAULT_MAX_MESSAGE_SIZE
from busvariant.context import ByteOrder, WireFormat
from busvariant.utils.pydantic import BaseModel
from busvariant.utils.yaml import model_from_extended_yaml


class CodecSettings(BaseModel):
    # Maximum nesting of containers, variants included, accepted when parsing signatures, encoding and decoding.
    MAX_DEPTH: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)

    # Maximum number of bytes taken by the elements of a D-Bus array, it cannot be raised over the protocol limit.
    MAX_ARRAY_LENGTH: int = Field(default=DEFAULT_MAX_ARRAY_LENGTH, gt=0, le=DEFAULT_MAX_ARRAY_LENGTH)

    # Maximum size of an encoded value, used when a call does not give `max_bytes`. `None` disables the default cap.
    MAX_MESSAGE_SIZE: Optional[int] = Field(default=DEFAULT_MAX_MESSAGE_SIZE, gt=0)

    # Used by `encode` and `decode` when they are not given a byte order or wire format.
    DEFAULT_BYTE_ORDER: ByteOrder = ByteOrder.LITTLE
    DEFAULT_WIRE_FORMAT: WireFormat = WireFormat.DBUS

    @field_validator('DEFAULT_BYTE_ORDER', mode='before')
    @classmethod
    def _parse_byte_order(cls, byte_order: Any) -> Any:
        """Accept 'little', 'big' and 'native' besides the D-Bus markers 'l' and 'B'."""
        if isinstance(byte_order, str):
            match byte_order.lower():
                case 'little':
                    return ByteOrder.LITTLE
                case 'big':
                    return ByteOrder.BIG
                case 'native':
                    return ByteOrder.native()
        return byte_order

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'CodecSettings':
        """Takes a filepath to a yaml file and returns a validated CodecSettings instance."""
        return model_from_extended_yaml(cls, filepath=filepath)
