# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models with typed access.

This module provides the Config class, the primary interface for reading
promptshelf configuration values.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

import tomli_w
from pydantic import BaseModel, ConfigDict, PrivateAttr

from promptshelf.config._defaults import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    DEFAULT_STORAGE_ROOT,
)
from promptshelf.config._loader import (
    copy_value,
    deep_merge,
    parse_env_vars,
    read_toml_file,
)
from promptshelf.utils._io import atomic_write


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty means ``<root>/logs/promptshelf.log``).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class StorageConfig(BaseModel):
    """Storage configuration section.

    Attributes:
        root: Storage root directory; ``~`` is expanded.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    root: str = DEFAULT_STORAGE_ROOT

    @property
    def root_path(self) -> Path:
        """Storage root as an expanded path."""
        return Path(self.root).expanduser()


def _parse_logging(data: dict[str, Any]) -> LoggingConfig:
    """Parse the logging section, falling back to defaults for bad values."""
    try:
        level = LogLevel(str(data.get("level", "info")).lower())
    except ValueError:
        level = LogLevel.INFO
    try:
        log_format = LogFormat(str(data.get("format", "json")).lower())
    except ValueError:
        log_format = LogFormat.JSON
    return LoggingConfig(level=level, format=log_format, file=str(data.get("file", "")))


def _parse_storage(data: dict[str, Any]) -> StorageConfig:
    """Parse the storage section."""
    return StorageConfig(
        root=str(data.get("root") or DEFAULT_STORAGE_ROOT),
    )


class Config(BaseModel):
    """Configuration container with typed access.

    Use the factory methods (from_dict, from_file, load) rather than the
    constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _source: Path | None = PrivateAttr(default=None)

    @classmethod
    def _from_merged(cls, merged: dict[str, Any], source: Path | None) -> Self:
        config = cls(
            storage=_parse_storage(merged.get("storage", {})),
            logging=_parse_logging(merged.get("logging", {})),
        )
        config._data = merged
        config._source = source
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults."""
        return cls._from_merged(deep_merge(DEFAULT_CONFIG, data), None)

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
        """
        return cls._from_merged(deep_merge(DEFAULT_CONFIG, read_toml_file(path)), path)

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        include_env: bool = True,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged in precedence order: defaults, then the TOML file,
        then ``PROMPTSHELF_*`` environment variables. When ``path`` is None the
        file is ``config.toml`` inside the storage root named by the defaults
        and environment; a missing file is not an error.

        Args:
            path: Explicit configuration file.
            include_env: Include environment variables as a source.

        Returns:
            Merged configuration object.

        Raises:
            FileNotFoundError: If an explicit ``path`` does not exist.
            ConfigLoadError: If the file cannot be parsed.
        """
        env_values = parse_env_vars() if include_env else {}

        if path is None:
            base = deep_merge(DEFAULT_CONFIG, env_values)
            candidate = _parse_storage(base.get("storage", {})).root_path / CONFIG_FILE_NAME
            file_values = read_toml_file(candidate) if candidate.is_file() else {}
            source = candidate if file_values else None
        else:
            file_values = read_toml_file(path)
            source = path

        merged = deep_merge(deep_merge(DEFAULT_CONFIG, file_values), env_values)
        return cls._from_merged(merged, source)

    @property
    def source(self) -> Path | None:
        """Configuration file that contributed values, if any."""
        return self._source

    @property
    def root(self) -> Path:
        """Expanded storage root."""
        return self.storage.root_path

    @property
    def log_file_path(self) -> Path:
        """Effective log file path."""
        if self.logging.file:
            return Path(self.logging.file).expanduser()
        return self.root / "logs" / "promptshelf.log"

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("logging.level")
            'info'
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the merged configuration."""
        return copy_value(self._data)

    def to_toml(self) -> str:
        """Render the merged configuration as TOML."""
        return tomli_w.dumps(self.to_dict())

    def write(self, path: Path | None = None) -> Path:
        """Write the configuration as TOML.

        Args:
            path: Destination; defaults to ``config.toml`` in the storage root.

        Returns:
            The path written.

        Raises:
            StorageIOError: If the file cannot be written.
        """
        target = path if path is not None else self.root / CONFIG_FILE_NAME
        atomic_write(target, self.to_toml())
        return target
