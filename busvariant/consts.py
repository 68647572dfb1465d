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

# Limits fixed by the wire formats, these are not configurable.

# signatures are prefixed by a single length byte on D-Bus, GVariant uses the same limit
MAX_SIGNATURE_LENGTH: int = 255

# D-Bus: at most 32 nested arrays and 32 nested structs in a signature
MAX_ARRAY_DEPTH: int = 32
MAX_STRUCT_DEPTH: int = 32

# Defaults for the configurable limits, see `busvariant.conf.settings`.

DEFAULT_MAX_DEPTH: int = 64

# D-Bus arrays cannot be longer than 64 MiB
DEFAULT_MAX_ARRAY_LENGTH: int = 2**26

# D-Bus messages cannot be longer than 128 MiB
DEFAULT_MAX_MESSAGE_SIZE: int = 2**27
