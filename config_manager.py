import os
import re
from configparser import ConfigParser, NoOptionError, NoSectionError
from typing import Dict, Any, Optional

DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.ini')

_TRUE = ('true', 'yes', 'on')
_FALSE = ('false', 'no', 'off')


class ConfigManager:
    """
    Reads the ini files once at startup: the bundled config.ini, then the user
    file named by [DEFAULT] user_config, then an optional file from -c.
    """

    def __init__(self, config_file: Optional[str] = None):
        self.base_config = self._load_configs(config_file)

    def _load_configs(self, config_file: Optional[str] = None) -> ConfigParser:
        """
        Load and merge configuration files, later files winning
        :param config_file: optional path to a custom config file
        :return: ConfigParser object
        """
        if not os.path.exists(DEFAULT_CONFIG):
            raise FileNotFoundError(f'Could not find the default config file at {DEFAULT_CONFIG}')

        config = ConfigParser()
        config.read(DEFAULT_CONFIG)

        user_config = self.resolve_file_path(config['DEFAULT'].get('user_config'))
        if user_config is not None:
            config.read(user_config)

        if config_file is not None:
            file = self.resolve_file_path(config_file)
            if file is None:
                raise FileNotFoundError(f'Could not find the custom config file at {config_file}')
            config.read(file)

        return config

    def create_console_config(self, overrides: Optional[Dict[str, Any]] = None) -> 'ConsoleConfig':
        """Create the per-run config, with CLI overrides on top"""
        return ConsoleConfig(self.base_config, dict(overrides or {}))

    @staticmethod
    def fix_values(value: Any) -> Any:
        """Turn raw ini strings into ints, floats, bools or unquoted strings"""
        if not isinstance(value, str):
            return value
        value = value.strip()

        if value.startswith('~'):
            return os.path.expanduser(value)
        if value.isdigit():
            return int(value)
        if re.fullmatch(r'\d+\.\d+', value):
            return float(value)

        lower_value = value.lower()
        if lower_value in _TRUE:
            return True
        if lower_value in _FALSE:
            return False

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            return value[1:-1]
        return value

    @staticmethod
    def resolve_file_path(file_name: Optional[str]) -> Optional[str]:
        """
        Absolute path of an existing file, relative names taken from the cwd
        :param file_name: name or path of the file
        :return: absolute path to the file or None
        """
        if not file_name:
            return None
        path = os.path.abspath(os.path.expanduser(file_name))
        return path if os.path.isfile(path) else None


class ConsoleConfig:
    """
    Configuration for a single console run.
    Runtime overrides (CLI options) win over values read from the ini files.
    """

    def __init__(self, base_config: ConfigParser, overrides: Optional[Dict[str, Any]] = None):
        self.base_config = base_config
        self.overrides = overrides or {}

    def get_option(self, section: str, option: str, fallback: Any = None) -> Any:
        """
        Get a setting from the configuration

        :param section: the section to get the setting from
        :param option: the option to get
        :param fallback: the value to return if the option is not found
        :return: the setting value
        """
        # Overrides are keyed by option name and ignore the section
        if option in self.overrides:
            return self.overrides[option]
        try:
            return ConfigManager.fix_values(self.base_config.get(section, option))
        except (NoSectionError, NoOptionError):
            return fallback

    def get_str(self, section: str, option: str, fallback: str = '') -> str:
        value = self.get_option(section, option, fallback)
        if value is None or value == '':
            return fallback
        return str(value)

    def get_int(self, section: str, option: str, fallback: int) -> int:
        try:
            return int(self.get_option(section, option, fallback))
        except (TypeError, ValueError):
            return fallback

    def get_float(self, section: str, option: str, fallback: float) -> float:
        try:
            return float(self.get_option(section, option, fallback))
        except (TypeError, ValueError):
            return fallback

    def get_bool(self, section: str, option: str, fallback: bool) -> bool:
        value = self.get_option(section, option, fallback)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            return fallback
        return bool(value)

    def get_all_options_from_section(self, section: str) -> Dict[str, Any]:
        if not self.base_config.has_section(section):
            return {}
        defaults = set(self.base_config.defaults())
        return {
            option: self.get_option(section, option)
            for option in self.base_config.options(section)
            if option not in defaults
        }
