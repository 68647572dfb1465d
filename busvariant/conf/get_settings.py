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


import os
from typing import NamedTuple, Optional

from structlog import get_logger

from busvariant.conf.settings import CodecSettings

logger = get_logger()

ENV_CONFIG_YAML = 'BUSVARIANT_CONFIG_YAML'


class _SettingsMetadata(NamedTuple):
    source: Optional[str]
    settings: CodecSettings


_settings_singleton: Optional[_SettingsMetadata] = None


def get_global_settings() -> CodecSettings:
    """
    Returns the settings used when a call does not give explicit limits.

    They are loaded once, from the yaml filepath in the 'BUSVARIANT_CONFIG_YAML' env var. When it is not set the
    defaults are used.
    """
    return _load_settings_singleton(os.environ.get(ENV_CONFIG_YAML))


def get_settings_source() -> Optional[str]:
    """ Returns the path of the YAML file that was loaded, or None when the defaults are used.

    XXX: Will raise an assertion error if get_global_settings() wasn't used before.
    """
    assert _settings_singleton is not None, 'get_global_settings() not called before'
    return _settings_singleton.source


def _load_settings_singleton(source: Optional[str]) -> CodecSettings:
    global _settings_singleton

    if _settings_singleton is not None:
        if _settings_singleton.source != source:
            raise Exception('loading config twice with a different file')
        return _settings_singleton.settings

    _settings_singleton = _SettingsMetadata(source=source, settings=_load_settings(source))
    return _settings_singleton.settings


def _load_settings(source: Optional[str]) -> CodecSettings:
    if source is None:
        return CodecSettings()
    log = logger.new()
    log.info('loading codec settings', source=source)
    return CodecSettings.from_yaml(filepath=source)
