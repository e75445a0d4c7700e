"""promptshelf configuration.

Configuration is layered: built-in defaults, then a TOML file, then
``PROMPTSHELF_*`` environment variables.

Example:
    >>> from promptshelf.config import Config
    >>> config = Config.load()
    >>> config.logging.level
    <LogLevel.INFO: 'info'>
"""

from promptshelf.exceptions import ConfigError, ConfigLoadError

from ._defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG, DEFAULT_STORAGE_ROOT, ENV_PREFIX
from ._loader import (
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import Config, LogFormat, LoggingConfig, LogLevel, StorageConfig

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_CONFIG",
    "DEFAULT_STORAGE_ROOT",
    "ENV_PREFIX",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "StorageConfig",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "set_nested_key",
]
