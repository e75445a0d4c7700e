"""Shared utilities: atomic file I/O and logger factories."""

from promptshelf.utils._io import atomic_write, read_bytes
from promptshelf.utils._logging import (
    DEBUG_ENV_VAR,
    LogFormatType,
    create_logger,
    create_store_logger,
)

__all__ = [
    "DEBUG_ENV_VAR",
    "LogFormatType",
    "atomic_write",
    "create_logger",
    "create_store_logger",
    "read_bytes",
]
