"""Metadata cache for prompt listings.

This module provides the MetadataCache class, which keeps the denormalized
metadata of every listed prompt keyed by its storage-relative path. An entry
is served only while the file's modification time is exactly the one
recorded when the entry was written; bodies are never cached.

Example:
    >>> from pathlib import Path
    >>> from promptshelf.cache import MetadataCache
    >>> cache = MetadataCache(Path("~/.promptshelf/.cache/metadata").expanduser())
    >>> cache.load()
    >>> entry, valid = cache.get("prompts/summarize.md", 1734444000000000000)
"""

from collections.abc import Iterable  # noqa: TC003 - needed at runtime for signatures
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path  # noqa: TC003 - needed at runtime for signatures
from typing import Any, Self

import orjson
import structlog
from structlog.typing import FilteringBoundLogger  # noqa: TC002 - needed at runtime for signatures

from promptshelf.artifacts import DEFAULT_PACK, Prompt
from promptshelf.cache._rwlock import ReadWriteLock
from promptshelf.exceptions import StorageIOError
from promptshelf.utils._io import atomic_write

CACHE_FORMAT_VERSION = 1
"""Version of the serialized cache document."""


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: object) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"Expected ISO 8601 string, got {type(value).__name__}"
        raise TypeError(msg)
    return datetime.fromisoformat(value)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached metadata for one prompt file.

    Attributes:
        file_path: Storage-relative path of the file.
        mod_time: File modification time in nanoseconds when cached.
        file_hash: SHA-256 of the file bytes when cached (diagnostic only).
        id: Prompt ID.
        version: Prompt version.
        name: Prompt title.
        summary: Prompt description.
        tags: Prompt tags.
        template_ref: Referenced template ID.
        pack: Owning collection.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    file_path: str
    mod_time: int
    file_hash: str
    id: str
    version: str = ""
    name: str = ""
    summary: str = ""
    tags: tuple[str, ...] = ()
    template_ref: str | None = None
    pack: str = DEFAULT_PACK
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_prompt(cls, prompt: Prompt, *, mod_time: int, file_hash: str) -> Self:
        """Build an entry from a freshly parsed prompt."""
        return cls(
            file_path=prompt.file_path,
            mod_time=mod_time,
            file_hash=file_hash,
            id=prompt.id,
            version=prompt.version,
            name=prompt.name,
            summary=prompt.summary,
            tags=prompt.tags,
            template_ref=prompt.template_ref,
            pack=prompt.pack,
            created_at=prompt.created_at,
            updated_at=prompt.updated_at,
        )

    def to_prompt(self) -> Prompt:
        """Convert to a Prompt with an empty body.

        The body is loaded from disk on demand.
        """
        return Prompt(
            id=self.id,
            version=self.version,
            name=self.name,
            summary=self.summary,
            tags=self.tags,
            template_ref=self.template_ref,
            pack=self.pack,
            created_at=self.created_at,
            updated_at=self.updated_at,
            file_path=self.file_path,
            content_hash=self.file_hash,
        )

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Convert to a JSON-serializable dict."""
        return {
            "file_path": self.file_path,
            "mod_time": self.mod_time,
            "file_hash": self.file_hash,
            "id": self.id,
            "version": self.version,
            "name": self.name,
            "summary": self.summary,
            "tags": list(self.tags),
            "template_ref": self.template_ref,
            "pack": self.pack,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:  # pyright: ignore[reportExplicitAny]
        """Build an entry from its serialized form.

        Raises:
            KeyError: If a required key is missing.
            TypeError: If a value has the wrong type.
            ValueError: If a timestamp is malformed.
        """
        mod_time = data["mod_time"]
        if not isinstance(mod_time, int) or isinstance(mod_time, bool):
            msg = f"mod_time must be an integer, got {type(mod_time).__name__}"
            raise TypeError(msg)
        tags = data.get("tags") or []
        if not isinstance(tags, list):
            msg = f"tags must be a list, got {type(tags).__name__}"
            raise TypeError(msg)

        return cls(
            file_path=str(data["file_path"]),
            mod_time=mod_time,
            file_hash=str(data.get("file_hash", "")),
            id=str(data["id"]),
            version=str(data.get("version", "")),
            name=str(data.get("name", "")),
            summary=str(data.get("summary", "")),
            tags=tuple(str(tag) for tag in tags),  # pyright: ignore[reportUnknownArgumentType,reportUnknownVariableType]
            template_ref=data.get("template_ref"),
            pack=str(data.get("pack") or DEFAULT_PACK),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


class MetadataCache:
    """Path-keyed cache of prompt metadata persisted as one JSON document.

    The map is guarded by a reader/writer lock: ``get`` takes the read side,
    ``put``, ``evict`` and ``load`` take the write side. The document on disk
    is advisory; an unreadable document loads as an empty cache.

    Attributes:
        _path: Location of the serialized cache document.
        _entries: Entries keyed by storage-relative path.
        _lock: Reader/writer lock guarding ``_entries`` and ``_dirty``.
        _dirty: Whether entries changed since the last load or save.
        _logger: Logger for diagnostics.
    """

    __slots__ = ("_dirty", "_entries", "_lock", "_logger", "_path")

    def __init__(
        self,
        path: Path,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Create an empty cache backed by ``path``.

        Args:
            path: Location of the serialized cache document.
            logger: Logger for diagnostics (defaults to a structlog logger).
        """
        self._path = path
        self._entries: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()
        self._dirty = False
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger("promptshelf.cache")
        )

    @property
    def path(self) -> Path:
        """Location of the serialized cache document."""
        return self._path

    @property
    def dirty(self) -> bool:
        """Whether entries changed since the last load or save."""
        with self._lock.read():
            return self._dirty

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        with self._lock.read():
            return path in self._entries

    # --- Persistence ---

    def load(self) -> None:
        """Replace the in-memory entries with the document on disk.

        A missing document yields an empty cache. A corrupted document, or
        one from another format version, yields an empty cache and a
        warning. Malformed individual entries are skipped.
        """
        entries: dict[str, CacheEntry] = {}

        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            raw = None
        except OSError as e:
            self._logger.warning(
                "Metadata cache unreadable, starting empty",
                path=str(self._path),
                error=str(e),
            )
            raw = None

        if raw is not None:
            entries = self._decode(raw)

        with self._lock.write():
            self._entries = entries
            self._dirty = False

    def _decode(self, raw: bytes) -> dict[str, CacheEntry]:
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            self._logger.warning(
                "Metadata cache corrupted, starting empty",
                path=str(self._path),
                error=str(e),
            )
            return {}

        if (
            not isinstance(data, dict)
            or data.get("version") != CACHE_FORMAT_VERSION
            or not isinstance(data.get("entries"), dict)
        ):
            self._logger.warning(
                "Metadata cache has unexpected layout, starting empty",
                path=str(self._path),
            )
            return {}

        entries: dict[str, CacheEntry] = {}
        for key, value in data["entries"].items():  # pyright: ignore[reportAny]
            if not isinstance(value, dict):
                continue
            try:
                entries[key] = CacheEntry.from_dict(value)  # pyright: ignore[reportUnknownArgumentType]
            except (KeyError, TypeError, ValueError) as e:
                self._logger.debug(
                    "Skipping malformed cache entry", file=key, error=str(e)
                )
        return entries

    def save(self) -> None:
        """Write the cache document atomically and clear the dirty flag.

        Raises:
            StorageIOError: If the document cannot be written.
        """
        # Changes made while writing mark the cache dirty again
        with self._lock.write():
            document = {
                "version": CACHE_FORMAT_VERSION,
                "entries": {
                    key: entry.to_dict() for key, entry in self._entries.items()
                },
            }
            self._dirty = False

        try:
            atomic_write(
                self._path,
                orjson.dumps(document, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS),
            )
        except StorageIOError:
            with self._lock.write():
                self._dirty = True
            raise

    def save_if_dirty(self) -> bool:
        """Write the cache document only if entries changed.

        Returns:
            True if the document was written.

        Raises:
            StorageIOError: If the document cannot be written.
        """
        if not self.dirty:
            return False
        self.save()
        return True

    # --- Entry operations ---

    def get(self, path: str, mod_time: int) -> tuple[CacheEntry | None, bool]:
        """Look up the entry for ``path``.

        Args:
            path: Storage-relative file path.
            mod_time: The file's current modification time in nanoseconds.

        Returns:
            ``(entry, True)`` when an entry exists and its recorded
            modification time equals ``mod_time``; ``(None, False)``
            otherwise.
        """
        with self._lock.read():
            entry = self._entries.get(path)
        if entry is None or entry.mod_time != mod_time:
            return None, False
        return entry, True

    def put(self, path: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``path`` and mark the cache dirty."""
        with self._lock.write():
            self._entries[path] = entry
            self._dirty = True

    def evict(self, keep: Iterable[str], *, prefix: str | None = None) -> int:
        """Remove entries whose paths are not in ``keep``.

        Args:
            keep: Paths observed on disk.
            prefix: When given, only entries whose path starts with it are
                candidates for removal.

        Returns:
            Number of entries removed.
        """
        keep_set = frozenset(keep)
        with self._lock.write():
            stale = [
                key
                for key in self._entries
                if key not in keep_set and (prefix is None or key.startswith(prefix))
            ]
            for key in stale:
                del self._entries[key]
            if stale:
                self._dirty = True
        return len(stale)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock.write():
            if self._entries:
                self._dirty = True
            self._entries = {}
