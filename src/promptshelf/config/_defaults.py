"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can be passed straight to deep_merge,
which copies rather than mutates its inputs.
"""

from typing import Any

DEFAULT_STORAGE_ROOT = "~/.promptshelf"
"""Storage root used when no configuration names one."""

CONFIG_FILE_NAME = "config.toml"
"""Configuration file looked up inside the storage root."""

ENV_PREFIX = "PROMPTSHELF_"
"""Prefix for configuration environment variables."""

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "storage": {
        "root": DEFAULT_STORAGE_ROOT,
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}
