"""Saved boolean searches persisted as one JSON document.

The document at ``<root>/saved_searches`` has the form::

    {"searches": [{"name": ..., "expression": {...}, ...}], "version": "1.0"}
"""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - needed at runtime for signatures
from typing import Any, Self

import orjson
from structlog.typing import FilteringBoundLogger  # noqa: TC002 - needed at runtime for signatures

from promptshelf.exceptions import (
    ArtifactValidationError,
    SavedSearchNotFoundError,
    StorageIOError,
)
from promptshelf.query import (
    Expression,
    expression_from_dict,
    expression_to_dict,
    query_string,
)
from promptshelf.utils import atomic_write, read_bytes

SAVED_SEARCHES_VERSION = "1.0"
"""Version string written to the saved searches document."""


@dataclass(frozen=True, slots=True)
class SavedSearch:
    """A named boolean tag search.

    Attributes:
        name: Unique name of the search.
        expression: Boolean tag expression.
        text_query: Optional fuzzy text filter applied after the expression.
        description: Optional description.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    name: str
    expression: Expression
    text_query: str = ""
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def query(self) -> str:
        """The expression rendered as query text."""
        return query_string(self.expression)

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Convert to a JSON-serializable dict."""
        data: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
            "name": self.name,
            "expression": expression_to_dict(self.expression),
        }
        if self.description:
            data["description"] = self.description
        if self.text_query:
            data["text_query"] = self.text_query
        data["created_at"] = self.created_at.isoformat() if self.created_at else ""
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else ""
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:  # pyright: ignore[reportExplicitAny]
        """Build a saved search from its serialized form.

        Raises:
            KeyError: If ``name`` or ``expression`` is missing.
            ValueError: If the expression or a timestamp is invalid.
        """
        created_at = data.get("created_at") or None
        updated_at = data.get("updated_at") or None
        return cls(
            name=str(data["name"]),
            expression=expression_from_dict(data["expression"]),
            text_query=str(data.get("text_query") or ""),
            description=str(data.get("description") or ""),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )


class SavedSearchStore:
    """Persistence for saved searches.

    Every operation reads the document from disk, so edits made by other
    processes are picked up.

    Attributes:
        _path: Location of the saved searches document.
        _logger: Logger for store operations.
    """

    __slots__ = ("_logger", "_path")

    def __init__(
        self,
        path: Path,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: Location of the saved searches document.
            logger: Logger for store operations.
        """
        self._path = path
        self._logger = logger

    @property
    def path(self) -> Path:
        """Location of the saved searches document."""
        return self._path

    def load_all(self) -> list[SavedSearch]:
        """Read every saved search.

        Returns:
            Saved searches in stored order; empty when the file is missing.

        Raises:
            StorageIOError: If the document cannot be read or is corrupt.
        """
        try:
            raw = read_bytes(self._path)
        except FileNotFoundError:
            return []

        try:
            data = orjson.loads(raw)
            if not isinstance(data, dict):
                msg = "saved searches document must be an object"
                raise TypeError(msg)  # noqa: TRY301
            entries = data.get("searches") or []
            if not isinstance(entries, list):
                msg = "'searches' must be a list"
                raise TypeError(msg)  # noqa: TRY301
            return [SavedSearch.from_dict(entry) for entry in entries]  # pyright: ignore[reportUnknownArgumentType,reportUnknownVariableType]
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            msg = f"Corrupt saved searches file {self._path}: {e}"
            raise StorageIOError(msg, path=self._path, operation="read", cause=e) from e

    def save_all(self, searches: list[SavedSearch]) -> None:
        """Replace the document with ``searches``.

        Raises:
            StorageIOError: If the document cannot be written.
        """
        document = {
            "searches": [search.to_dict() for search in searches],
            "version": SAVED_SEARCHES_VERSION,
        }
        atomic_write(self._path, orjson.dumps(document, option=orjson.OPT_INDENT_2))

    def get(self, name: str) -> SavedSearch:
        """Get a saved search by name.

        Raises:
            SavedSearchNotFoundError: If no search has the name.
        """
        for search in self.load_all():
            if search.name == name:
                return search
        msg = f"Saved search not found: {name}"
        raise SavedSearchNotFoundError(msg, name=name)

    def upsert(self, search: SavedSearch) -> SavedSearch:
        """Add a saved search or replace the one with the same name.

        A replaced search keeps its original ``created_at``.

        Returns:
            The stored search with timestamps set.

        Raises:
            ArtifactValidationError: If the name is blank.
            StorageIOError: If the document cannot be read or written.
        """
        if not search.name.strip():
            msg = "Saved search name must not be empty"
            raise ArtifactValidationError(msg, field="name")

        now = datetime.now(UTC)
        searches = self.load_all()
        for index, existing in enumerate(searches):
            if existing.name == search.name:
                stored = replace(
                    search,
                    created_at=existing.created_at or search.created_at or now,
                    updated_at=now,
                )
                searches[index] = stored
                break
        else:
            stored = replace(search, created_at=search.created_at or now, updated_at=now)
            searches.append(stored)

        self.save_all(searches)
        if self._logger is not None:
            self._logger.info("Saved search stored", name=search.name)
        return stored

    def delete(self, name: str) -> None:
        """Delete a saved search by name.

        Raises:
            SavedSearchNotFoundError: If no search has the name.
            StorageIOError: If the document cannot be read or written.
        """
        searches = self.load_all()
        remaining = [search for search in searches if search.name != name]
        if len(remaining) == len(searches):
            msg = f"Saved search not found: {name}"
            raise SavedSearchNotFoundError(msg, name=name)

        self.save_all(remaining)
        if self._logger is not None:
            self._logger.info("Saved search deleted", name=name)
