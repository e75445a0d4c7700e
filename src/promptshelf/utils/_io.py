"""File I/O helpers for the storage root.

All writes go through a temporary file in the destination directory followed
by a rename, so a concurrent reader sees either the old file or the new one.
"""

import tempfile
from pathlib import Path

from promptshelf.exceptions import StorageIOError

__all__ = ["atomic_write", "read_bytes"]


def atomic_write(path: Path, content: bytes | str) -> None:
    """Write content to a file atomically.

    Writes to a temporary file in the same directory, then renames to the
    target path. This ensures the file is either fully written or not at all.

    Args:
        path: Destination file path.
        content: Content to write (bytes or string).

    Raises:
        StorageIOError: If the write or rename fails.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content

    try:
        _ = path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Failed to create directory: {e}"
        raise StorageIOError(msg, path=path.parent, operation="write", cause=e) from e

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as f:
            temp_path = Path(f.name)
            _ = f.write(data)

        # Path.replace() is atomic on both POSIX and Windows
        _ = temp_path.replace(path)

    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        msg = f"Failed to write file: {e}"
        raise StorageIOError(msg, path=path, operation="write", cause=e) from e


def read_bytes(path: Path) -> bytes:
    """Read a file's raw bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
        StorageIOError: If the file exists but cannot be read.
    """
    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise
    except OSError as e:
        msg = f"Failed to read file: {e}"
        raise StorageIOError(msg, path=path, operation="read", cause=e) from e
