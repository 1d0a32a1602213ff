from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config_manager import ConfigManager


@pytest.mark.parametrize("raw,expected", [
    ("10", 10),
    ("0.1", 0.1),
    ("true", True),
    ("Off", False),
    ("'quoted'", "quoted"),
    ("https://bsky.social", "https://bsky.social"),
    ("ctrl+c", "ctrl+c"),
])
def test_fix_values(raw, expected):
    assert ConfigManager.fix_values(raw) == expected


def test_custom_file_overrides_defaults_and_cli_wins(tmp_path: Path):
    cfg_path = tmp_path / "cfg.ini"
    cfg_path.write_text(
        "[XRPC]\nhost = https://custom.example\nencode_query = no\n"
        "[CONSOLE]\nqueue_size = 12\nmessage_ttl = 2.5\n",
        encoding="utf-8",
    )
    config = ConfigManager(str(cfg_path)).create_console_config({'host': 'https://cli.example'})

    assert config.get_str('XRPC', 'host') == 'https://cli.example'
    assert config.get_bool('XRPC', 'encode_query', True) is False
    assert config.get_int('CONSOLE', 'queue_size', 100) == 12
    assert config.get_float('CONSOLE', 'message_ttl', 5.0) == 2.5
    assert config.get_str('KEYS', 'quit') == 'ctrl+c'


def test_typed_getters_fall_back_on_missing_or_bad_values(tmp_path: Path):
    cfg_path = tmp_path / "cfg.ini"
    cfg_path.write_text("[CONSOLE]\nqueue_size = lots\nhistory_navigation = \n", encoding="utf-8")
    config = ConfigManager(str(cfg_path)).create_console_config()

    assert config.get_int('CONSOLE', 'queue_size', 100) == 100
    assert config.get_str('CONSOLE', 'history_navigation', 'mode') == 'mode'
    assert config.get_float('NOPE', 'tick_interval', 0.1) == 0.1
    assert config.get_option('NOPE', 'anything', 'fallback') == 'fallback'


def test_missing_custom_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ConfigManager(str(tmp_path / "missing.ini"))


def test_section_listing_skips_defaults():
    config = ConfigManager().create_console_config()
    options = config.get_all_options_from_section('XRPC')
    assert 'user_config' not in options
    assert options['provider'] == 'xrpc'
    assert config.get_all_options_from_section('NOPE') == {}
