r"""Prompt store backed by a directory of Markdown files.

This module provides the PromptStore class for CRUD operations on prompt
files under a storage root. Listings are served from the metadata cache
where possible; saving over an existing prompt archives the previous file
and advances its version.

Example:
    >>> from pathlib import Path
    >>> from promptshelf.artifacts import Prompt
    >>> from promptshelf.store import PromptStore
    >>> store = PromptStore(Path("~/.promptshelf").expanduser())
    >>> store.initialize()
    >>> saved = store.save(Prompt(id="summarize", tags=("writing",), content="..."))
    >>> saved.file_path
    'prompts/summarize.md'
"""

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from typing import Self

from structlog.typing import FilteringBoundLogger  # noqa: TC002 - needed at runtime for signatures

from promptshelf.artifacts import DEFAULT_PACK, Prompt, parse_prompt, serialize_prompt
from promptshelf.cache import CacheEntry, MetadataCache
from promptshelf.config import Config  # noqa: TC001 - needed at runtime for signatures
from promptshelf.exceptions import (
    ArtifactValidationError,
    MalformedArtifactError,
    PromptNotFoundError,
    StorageIOError,
)
from promptshelf.store._layout import (
    ARCHIVE_DIR,
    ARTIFACT_SUFFIX,
    CACHE_FILE,
    LOGS_DIR,
    PROMPTS_DIR,
    relative_path,
    resolve_path,
    validate_name,
    walk_artifacts,
)
from promptshelf.store._versioning import INITIAL_VERSION, increment_version, version_key
from promptshelf.utils import atomic_write, create_logger, create_store_logger, read_bytes


class PromptStore:
    """Store for prompt files under a storage root.

    Attributes:
        _root: Storage root directory.
        _cache: Metadata cache consulted by listings.
        _logger: Logger for store operations.
    """

    __slots__ = ("_cache", "_logger", "_root")

    def __init__(
        self,
        root: Path | str,
        *,
        cache: MetadataCache | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the prompt store.

        When no cache is given, one backed by ``<root>/.cache/metadata`` is
        created and loaded.

        Args:
            root: Storage root directory.
            cache: Metadata cache to use.
            logger: Logger for store operations (defaults to a JSON logger
                writing to ``<root>/logs/promptshelf.log``).
        """
        self._root = Path(root)
        self._logger: FilteringBoundLogger = (
            logger
            if logger is not None
            else create_logger(self._root / LOGS_DIR / "promptshelf.log")
        )
        if cache is None:
            cache = MetadataCache(self._root / CACHE_FILE, logger=self._logger)
            cache.load()
        self._cache = cache

    @classmethod
    def from_config(cls, config: Config) -> Self:
        """Create a store for the configured storage root."""
        return cls(config.root, logger=create_store_logger(config, component="prompts"))

    @property
    def root(self) -> Path:
        """Storage root directory."""
        return self._root

    @property
    def cache(self) -> MetadataCache:
        """Metadata cache used by listings."""
        return self._cache

    def initialize(self) -> None:
        """Create the prompt and archive directories if needed."""
        for name in (PROMPTS_DIR, ARCHIVE_DIR):
            (self._root / name).mkdir(parents=True, exist_ok=True)

    # --- Paths ---

    @staticmethod
    def prompt_path(prompt_id: str, pack: str = DEFAULT_PACK) -> str:
        """Storage-relative destination for a prompt.

        Raises:
            ArtifactValidationError: If the ID or pack is not a safe file name.
        """
        _ = validate_name(prompt_id, field="id", artifact_id=prompt_id)
        if not pack or pack == DEFAULT_PACK:
            return f"{PROMPTS_DIR}/{prompt_id}{ARTIFACT_SUFFIX}"
        _ = validate_name(pack, field="pack", artifact_id=prompt_id)
        return f"{PROMPTS_DIR}/{pack}/{prompt_id}{ARTIFACT_SUFFIX}"

    @staticmethod
    def archive_path(relative: str, version: str) -> str:
        """Storage-relative archive location for a prompt version.

        Example:
            >>> PromptStore.archive_path("prompts/work/review.md", "1.0.0")
            'archive/work/review-v1.0.0.md'
        """
        parts = PurePosixPath(relative).parts
        if parts and parts[0] == PROMPTS_DIR:
            parts = parts[1:]
        stem = PurePosixPath(*parts)
        if stem.suffix == ARTIFACT_SUFFIX:
            stem = stem.with_suffix("")
        label = version.strip().replace("/", "_").replace("\\", "_") or "0"
        return f"{ARCHIVE_DIR}/{stem.as_posix()}-v{label}{ARTIFACT_SUFFIX}"

    def _destination(self, prompt: Prompt) -> str:
        _ = validate_name(prompt.id, field="id", artifact_id=prompt.id)
        if not prompt.file_path:
            return self.prompt_path(prompt.id, prompt.pack)
        parts = PurePosixPath(prompt.file_path).parts
        if parts[:1] == (ARCHIVE_DIR,):
            msg = f"Cannot save over archived prompt: {prompt.file_path}"
            raise ArtifactValidationError(msg, artifact_id=prompt.id, field="file_path")
        if len(parts) < 2 or parts[0] != PROMPTS_DIR or ".." in parts:  # noqa: PLR2004
            msg = f"Prompt path must be under {PROMPTS_DIR}/: {prompt.file_path}"
            raise ArtifactValidationError(msg, artifact_id=prompt.id, field="file_path")
        return prompt.file_path

    # --- Read operations ---

    def load(self, path: str) -> Prompt:
        """Load a prompt, including its body, from a storage-relative path.

        Raises:
            PromptNotFoundError: If the file does not exist.
            MalformedArtifactError: If the file cannot be parsed.
            StorageIOError: If the file cannot be read.
            ArtifactValidationError: If the path escapes the storage root.
        """
        full = resolve_path(self._root, path)
        try:
            data = read_bytes(full)
        except FileNotFoundError as e:
            msg = f"Prompt not found: {path}"
            raise PromptNotFoundError(msg, path=path) from e
        return parse_prompt(data, file_path=path)

    def exists(self, prompt_id: str, pack: str = DEFAULT_PACK) -> bool:
        """Check whether a prompt file exists at its default location."""
        return resolve_path(self._root, self.prompt_path(prompt_id, pack)).is_file()

    # --- Write operations ---

    def save(self, prompt: Prompt) -> Prompt:
        """Create or update a prompt file.

        A new prompt gets version ``1.0.0`` when it has none. When the
        destination already exists, its bytes are first copied to the
        archive, ``created_at`` is carried over, and the version advances
        unless the caller supplied a higher one.

        Args:
            prompt: Prompt to write.

        Returns:
            The prompt as written, with its file path, timestamps, version,
            and content hash.

        Raises:
            ArtifactValidationError: If the ID or pack is unsafe, or the
                path is not a file under ``prompts/``.
            MalformedArtifactError: If the existing file cannot be parsed.
            StorageIOError: If a file cannot be read or written.
        """
        relative = self._destination(prompt)
        full = resolve_path(self._root, relative)
        now = datetime.now(UTC)

        try:
            previous_bytes = read_bytes(full)
        except FileNotFoundError:
            previous_bytes = None

        if previous_bytes is None:
            version = prompt.version.strip() or INITIAL_VERSION
            created_at = prompt.created_at or now
        else:
            previous = parse_prompt(previous_bytes, file_path=relative)
            self._archive(previous, previous_bytes)
            requested = prompt.version.strip()
            if requested and version_key(requested) > version_key(previous.version):
                version = requested
            else:
                version = increment_version(previous.version)
            created_at = previous.created_at or prompt.created_at or now

        to_write = replace(
            prompt,
            version=version,
            created_at=created_at,
            updated_at=now,
            file_path=relative,
        )
        data = serialize_prompt(to_write)
        atomic_write(full, data)

        self._logger.info(
            "Prompt saved",
            prompt_id=prompt.id,
            path=relative,
            version=version,
            updated=previous_bytes is not None,
        )
        return parse_prompt(data, file_path=relative)

    def _archive(self, previous: Prompt, data: bytes) -> str:
        base = self.archive_path(previous.file_path, previous.version)
        target = base
        counter = 1
        while True:
            full = resolve_path(self._root, target)
            try:
                existing = read_bytes(full)
            except FileNotFoundError:
                break
            if existing == data:
                return target
            counter += 1
            target = base.removesuffix(ARTIFACT_SUFFIX) + f"-{counter}{ARTIFACT_SUFFIX}"

        atomic_write(full, data)
        self._logger.info(
            "Prompt archived",
            prompt_id=previous.id,
            version=previous.version,
            path=target,
        )
        return target

    def delete(self, prompt: Prompt) -> None:
        """Delete a prompt file.

        Archived versions are kept. The cache entry is dropped by the next
        listing.

        Raises:
            PromptNotFoundError: If the file does not exist.
            StorageIOError: If the file cannot be removed.
        """
        relative = prompt.file_path or self.prompt_path(prompt.id, prompt.pack)
        full = resolve_path(self._root, relative)
        try:
            full.unlink()
        except FileNotFoundError as e:
            msg = f"Prompt not found: {relative}"
            raise PromptNotFoundError(msg, prompt_id=prompt.id, path=relative) from e
        except OSError as e:
            msg = f"Failed to delete {relative}: {e}"
            raise StorageIOError(msg, path=full, operation="delete", cause=e) from e

        self._logger.info("Prompt deleted", prompt_id=prompt.id, path=relative)

    # --- Listing ---

    def list_archived(self) -> list[Prompt]:
        """List archived prompt versions."""
        return self.list(ARCHIVE_DIR)

    def history(self, prompt_id: str, pack: str = DEFAULT_PACK) -> list[Prompt]:
        """List archived versions of one prompt, oldest version first."""
        pack = pack or DEFAULT_PACK
        versions = [
            prompt
            for prompt in self.list_archived()
            if prompt.id == prompt_id and prompt.pack == pack
        ]
        return sorted(versions, key=lambda prompt: version_key(prompt.version))

    def _read_entry(self, path: Path, relative: str) -> Prompt | None:
        try:
            mod_time = path.stat().st_mtime_ns
        except FileNotFoundError:
            return None

        entry, valid = self._cache.get(relative, mod_time)
        if valid and entry is not None:
            return entry.to_prompt()

        try:
            prompt = parse_prompt(read_bytes(path), file_path=relative)
        except FileNotFoundError:
            return None
        except (MalformedArtifactError, StorageIOError) as e:
            self._logger.warning("Skipping unreadable prompt", path=relative, error=str(e))
            return None

        self._cache.put(
            relative,
            CacheEntry.from_prompt(prompt, mod_time=mod_time, file_hash=prompt.content_hash),
        )
        return prompt

    # Defined last: inside the class body the name shadows the builtin.
    def list(self, directory: str = PROMPTS_DIR) -> list[Prompt]:
        """List prompts below a storage-relative directory.

        Files are visited recursively in sorted path order. Entries served
        from the cache have an empty ``content``; use ``load`` for the body.
        Unparseable files are skipped and logged. Cache entries under the
        directory whose files no longer exist are evicted, and the cache is
        written back if it changed.

        Args:
            directory: Storage-relative directory to walk.

        Returns:
            Prompts in path order; empty when the directory does not exist.
        """
        base = resolve_path(self._root, directory)
        if not base.is_dir():
            return []

        prompts: list[Prompt] = []
        seen: set[str] = set()
        for path in walk_artifacts(base):
            relative = relative_path(self._root, path)
            prompt = self._read_entry(path, relative)
            if prompt is None:
                continue
            seen.add(relative)
            prompts.append(prompt)

        prefix = relative_path(self._root, base) + "/"
        evicted = self._cache.evict(seen, prefix=prefix)
        try:
            _ = self._cache.save_if_dirty()
        except StorageIOError as e:
            self._logger.warning(
                "Failed to save metadata cache", path=str(e.path), error=str(e)
            )

        self._logger.debug(
            "Listed prompts", directory=directory, count=len(prompts), evicted=evicted
        )
        return prompts
