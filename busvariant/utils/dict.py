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


from copy import deepcopy
from typing import Any, TypeVar

K = TypeVar('K')


def deep_merge(base: dict[K, Any], overrides: dict[K, Any]) -> dict[K, Any]:
    """
    Recursively merges `overrides` into a copy of `base`, nested dicts are merged key by key and anything else is
    replaced. Both input dicts are kept intact.

    >>> base = dict(MAX_DEPTH=64, limits=dict(array=10, message=20))
    >>> overrides = dict(limits=dict(message=30), DEFAULT_WIRE_FORMAT='gvariant')
    >>> deep_merge(base, overrides) == dict(MAX_DEPTH=64, limits=dict(array=10, message=30),
    ...                                     DEFAULT_WIRE_FORMAT='gvariant')
    True
    >>> base == dict(MAX_DEPTH=64, limits=dict(array=10, message=20))
    True
    """
    merged = deepcopy(base)

    def merge_into(target: dict[K, Any], source: dict[K, Any]) -> dict[K, Any]:
        for key, value in source.items():
            if isinstance(target.get(key), dict) and isinstance(value, dict):
                merge_into(target[key], value)
            else:
                target[key] = deepcopy(value)
        return target

    return merge_into(merged, overrides)
