from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from busvariant.conf import UNITTESTS_SETTINGS_FILEPATH, CodecSettings, get_global_settings
from busvariant.conf import get_settings
from busvariant.consts import DEFAULT_MAX_ARRAY_LENGTH, DEFAULT_MAX_DEPTH
from busvariant.context import ByteOrder, WireFormat
from busvariant.utils.yaml import dict_from_extended_yaml, dict_from_yaml


def _write(path: Path, contents: str) -> str:
    path.write_text(contents)
    return str(path)


def test_defaults() -> None:
    settings = CodecSettings()
    assert settings.MAX_DEPTH == DEFAULT_MAX_DEPTH
    assert settings.MAX_ARRAY_LENGTH == DEFAULT_MAX_ARRAY_LENGTH
    assert settings.DEFAULT_BYTE_ORDER is ByteOrder.LITTLE
    assert settings.DEFAULT_WIRE_FORMAT is WireFormat.DBUS


def test_unittests_settings_are_loaded() -> None:
    settings = get_global_settings()
    assert get_settings.get_settings_source() == UNITTESTS_SETTINGS_FILEPATH
    assert settings.MAX_MESSAGE_SIZE == 1048576


def test_from_yaml(tmp_path: Path) -> None:
    filepath = _write(tmp_path / 'settings.yml', '\n'.join([
        'MAX_DEPTH: 16',
        'MAX_MESSAGE_SIZE: null',
        'DEFAULT_BYTE_ORDER: big',
        'DEFAULT_WIRE_FORMAT: gvariant',
    ]))
    settings = CodecSettings.from_yaml(filepath=filepath)
    assert settings.MAX_DEPTH == 16
    assert settings.MAX_MESSAGE_SIZE is None
    assert settings.DEFAULT_BYTE_ORDER is ByteOrder.BIG
    assert settings.DEFAULT_WIRE_FORMAT is WireFormat.GVARIANT


def test_byte_order_markers() -> None:
    assert CodecSettings(DEFAULT_BYTE_ORDER='l').DEFAULT_BYTE_ORDER is ByteOrder.LITTLE
    assert CodecSettings(DEFAULT_BYTE_ORDER='B').DEFAULT_BYTE_ORDER is ByteOrder.BIG
    assert CodecSettings(DEFAULT_BYTE_ORDER='native').DEFAULT_BYTE_ORDER is ByteOrder.native()
    with pytest.raises(ValidationError):
        CodecSettings(DEFAULT_BYTE_ORDER='middle')


def test_extends(tmp_path: Path) -> None:
    _write(tmp_path / 'base.yml', 'MAX_DEPTH: 16\nDEFAULT_WIRE_FORMAT: gvariant\n')
    filepath = _write(tmp_path / 'child.yml', 'extends: base.yml\nMAX_DEPTH: 8\n')
    assert dict_from_extended_yaml(filepath=filepath) == {'MAX_DEPTH': 8, 'DEFAULT_WIRE_FORMAT': 'gvariant'}
    settings = CodecSettings.from_yaml(filepath=filepath)
    assert settings.MAX_DEPTH == 8
    assert settings.DEFAULT_WIRE_FORMAT is WireFormat.GVARIANT


def test_recursive_extends(tmp_path: Path) -> None:
    filepath = _write(tmp_path / 'loop.yml', 'extends: loop.yml\n')
    with pytest.raises(ValueError):
        dict_from_extended_yaml(filepath=filepath)


def test_invalid_yaml_files(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        dict_from_yaml(filepath=tmp_path / 'missing.yml')
    with pytest.raises(ValueError):
        dict_from_yaml(filepath=_write(tmp_path / 'list.yml', '- 1\n- 2\n'))
    assert dict_from_yaml(filepath=_write(tmp_path / 'empty.yml', '')) == {}


@pytest.mark.parametrize('contents', [
    'UNKNOWN_KEY: 1',
    'MAX_DEPTH: 0',
    f'MAX_ARRAY_LENGTH: {DEFAULT_MAX_ARRAY_LENGTH + 1}',
    'DEFAULT_WIRE_FORMAT: xml',
])
def test_invalid_settings(tmp_path: Path, contents: str) -> None:
    filepath = _write(tmp_path / 'settings.yml', contents)
    with pytest.raises(ValidationError):
        CodecSettings.from_yaml(filepath=filepath)


def test_settings_are_frozen() -> None:
    settings = CodecSettings()
    with pytest.raises(ValidationError):
        settings.MAX_DEPTH = 1  # type: ignore[misc]


def test_singleton(tmp_path: Path) -> None:
    filepath = _write(tmp_path / 'settings.yml', 'MAX_DEPTH: 3\n')
    with patch.object(get_settings, '_settings_singleton', None):
        settings = get_settings._load_settings_singleton(filepath)
        assert settings.MAX_DEPTH == 3
        assert get_settings._load_settings_singleton(filepath) is settings
        with pytest.raises(Exception, match='different file'):
            get_settings._load_settings_singleton(None)


def test_loading_settings_does_not_write_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    filepath = _write(tmp_path / 'settings.yml', 'MAX_DEPTH: 5\n')
    with patch.object(get_settings, '_settings_singleton', None):
        assert get_settings._load_settings_singleton(filepath).MAX_DEPTH == 5
    assert capsys.readouterr().out == ''
