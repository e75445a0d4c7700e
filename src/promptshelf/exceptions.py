"""promptshelf exceptions."""

from pathlib import Path  # noqa: TC003 - needed at runtime for signatures


class ShelfError(Exception):
    """Base exception for promptshelf errors."""


# =============================================================================
# Artifact Exceptions
# =============================================================================


class ArtifactError(ShelfError):
    """Base exception for artifact operations."""


class MalformedArtifactError(ArtifactError):
    """Raised when an artifact file cannot be parsed.

    Attributes:
        path: Storage-relative path of the artifact, if known.
        field: The metadata field that was invalid (if applicable).
        cause: The underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        field: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and parse context.

        Args:
            message: Human-readable error message.
            path: Storage-relative path of the artifact.
            field: The metadata field that was invalid.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.path: str | None = path
        self.field: str | None = field
        self.cause: Exception | None = cause


class ArtifactValidationError(ArtifactError, ValueError):
    """Raised when an artifact cannot be stored as given.

    Attributes:
        artifact_id: The ID of the artifact that failed validation.
        field: The field that failed validation (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        artifact_id: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize with error message and validation context.

        Args:
            message: Human-readable error message.
            artifact_id: The ID of the artifact that failed validation.
            field: The field that failed validation.
        """
        super().__init__(message)
        self.artifact_id: str | None = artifact_id
        self.field: str | None = field


# =============================================================================
# Lookup Exceptions
# =============================================================================


class NotFoundError(ShelfError, KeyError):
    """Raised when a requested prompt, template, or saved search does not exist."""

    def __str__(self) -> str:
        # KeyError wraps its message in quotes
        return str(self.args[0]) if self.args else ""


class PromptNotFoundError(NotFoundError):
    """Raised when a prompt cannot be found.

    Attributes:
        prompt_id: The ID of the prompt, when looked up by ID.
        path: The storage-relative path, when looked up by path.
    """

    def __init__(
        self,
        message: str,
        *,
        prompt_id: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize with error message and prompt context."""
        super().__init__(message)
        self.prompt_id: str | None = prompt_id
        self.path: str | None = path


class TemplateNotFoundError(NotFoundError):
    """Raised when a template cannot be found.

    Attributes:
        template_id: The ID of the template, when looked up by ID.
        path: The storage-relative path, when looked up by path.
    """

    def __init__(
        self,
        message: str,
        *,
        template_id: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize with error message and template context."""
        super().__init__(message)
        self.template_id: str | None = template_id
        self.path: str | None = path


class SavedSearchNotFoundError(NotFoundError):
    """Raised when a saved search cannot be found.

    Attributes:
        name: The name of the saved search that was not found.
    """

    def __init__(self, message: str, *, name: str | None = None) -> None:
        """Initialize with error message and saved search context."""
        super().__init__(message)
        self.name: str | None = name


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageIOError(ShelfError):
    """Raised when a file in the storage root cannot be read or written.

    Attributes:
        path: Path to the file that caused the error.
        operation: The operation that failed ("read", "write", "rename", "delete").
        cause: The underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and I/O context.

        Args:
            message: Human-readable error message.
            path: Path to the file that caused the error.
            operation: The operation that failed.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.path: Path = path
        self.operation: str = operation
        self.cause: Exception | None = cause


# =============================================================================
# Query Exceptions
# =============================================================================


class QuerySyntaxError(ShelfError, ValueError):
    """Raised when a boolean tag query cannot be parsed.

    Attributes:
        query: The query text that failed to parse.
        position: 0-based character offset of the offending token.
    """

    def __init__(self, message: str, *, query: str, position: int) -> None:
        """Initialize with error message and query location.

        Args:
            message: Human-readable error message.
            query: The query text that failed to parse.
            position: 0-based character offset of the offending token.
        """
        super().__init__(message)
        self.query: str = query
        self.position: int = position


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(ShelfError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column
