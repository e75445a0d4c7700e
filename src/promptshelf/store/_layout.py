"""Storage root layout and path safety helpers."""

from collections.abc import Iterator  # noqa: TC003 - needed at runtime for signatures
from pathlib import Path, PurePosixPath

from promptshelf.exceptions import ArtifactValidationError

PROMPTS_DIR = "prompts"
TEMPLATES_DIR = "templates"
ARCHIVE_DIR = "archive"
CACHE_FILE = ".cache/metadata"
SAVED_SEARCHES_FILE = "saved_searches"
LOGS_DIR = "logs"
ARTIFACT_SUFFIX = ".md"

_UNSAFE_NAMES = frozenset({"", ".", ".."})


def validate_name(value: str, *, field: str, artifact_id: str | None = None) -> str:
    """Check that ``value`` can be used as a single file or directory name.

    Raises:
        ArtifactValidationError: If the value is empty, ``.``/``..``, or
            contains a path separator or NUL character.
    """
    if value.strip() in _UNSAFE_NAMES or any(c in value for c in "/\\\0"):
        msg = f"Invalid {field} {value!r}: must be a plain file name"
        raise ArtifactValidationError(msg, artifact_id=artifact_id, field=field)
    return value


def resolve_path(root: Path, relative: str) -> Path:
    """Resolve a storage-relative POSIX path against ``root``.

    Raises:
        ArtifactValidationError: If the path is absolute or escapes the root.
    """
    posix = PurePosixPath(relative)
    if not relative or posix.is_absolute() or Path(relative).is_absolute():
        msg = f"Path must be relative to the storage root: {relative!r}"
        raise ArtifactValidationError(msg, field="file_path")

    full = root.joinpath(*posix.parts)
    if not full.resolve().is_relative_to(root.resolve()):
        msg = f"Path escapes the storage root: {relative!r}"
        raise ArtifactValidationError(msg, field="file_path")
    return full


def relative_path(root: Path, path: Path) -> str:
    """Storage-relative POSIX form of ``path``."""
    return path.relative_to(root).as_posix()


def walk_artifacts(directory: Path) -> Iterator[Path]:
    """Yield artifact files below ``directory`` in sorted order.

    Hidden files, including in-progress temporary files, are skipped.
    """
    for path in sorted(directory.rglob(f"*{ARTIFACT_SUFFIX}")):
        if path.name.startswith(".") or not path.is_file():
            continue
        yield path
