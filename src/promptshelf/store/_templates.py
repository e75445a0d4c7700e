"""Template store backed by ``<root>/templates``."""

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Self

from structlog.typing import FilteringBoundLogger  # noqa: TC002 - needed at runtime for signatures

from promptshelf.artifacts import Template, parse_template, serialize_template
from promptshelf.config import Config  # noqa: TC001 - needed at runtime for signatures
from promptshelf.exceptions import (
    MalformedArtifactError,
    StorageIOError,
    TemplateNotFoundError,
)
from promptshelf.store._layout import (
    ARTIFACT_SUFFIX,
    LOGS_DIR,
    TEMPLATES_DIR,
    relative_path,
    resolve_path,
    validate_name,
    walk_artifacts,
)
from promptshelf.utils import atomic_write, create_logger, create_store_logger, read_bytes


class TemplateStore:
    """Store for template files.

    Templates are not cached and not archived.

    Attributes:
        _root: Storage root directory.
        _logger: Logger for store operations.
    """

    __slots__ = ("_logger", "_root")

    def __init__(
        self,
        root: Path | str,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the template store.

        Args:
            root: Storage root directory.
            logger: Logger for store operations.
        """
        self._root = Path(root)
        self._logger: FilteringBoundLogger = (
            logger
            if logger is not None
            else create_logger(self._root / LOGS_DIR / "promptshelf.log")
        )

    @classmethod
    def from_config(cls, config: Config) -> Self:
        """Create a store for the configured storage root."""
        return cls(config.root, logger=create_store_logger(config, component="templates"))

    @property
    def templates_path(self) -> Path:
        """Path to the templates directory."""
        return self._root / TEMPLATES_DIR

    def initialize(self) -> None:
        """Create the templates directory if needed."""
        self.templates_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def template_path(template_id: str) -> str:
        """Storage-relative destination for a template."""
        _ = validate_name(template_id, field="id", artifact_id=template_id)
        return f"{TEMPLATES_DIR}/{template_id}{ARTIFACT_SUFFIX}"

    def load(self, path: str) -> Template:
        """Load a template from a storage-relative path.

        Raises:
            TemplateNotFoundError: If the file does not exist.
            MalformedArtifactError: If the file cannot be parsed.
            StorageIOError: If the file cannot be read.
        """
        full = resolve_path(self._root, path)
        try:
            data = read_bytes(full)
        except FileNotFoundError as e:
            msg = f"Template not found: {path}"
            raise TemplateNotFoundError(msg, path=path) from e
        return parse_template(data, file_path=path)

    def get(self, template_id: str) -> Template:
        """Load a template by ID.

        The default location is tried first, then every template file.

        Raises:
            TemplateNotFoundError: If no template has the ID.
        """
        try:
            return self.load(self.template_path(template_id))
        except TemplateNotFoundError:
            pass

        for template in self.list():
            if template.id == template_id:
                return template

        msg = f"Template not found: {template_id}"
        raise TemplateNotFoundError(msg, template_id=template_id)

    def save(self, template: Template) -> Template:
        """Create or overwrite a template file.

        The ``created_at`` of an existing file is kept; ``updated_at`` is
        set to now.

        Raises:
            ArtifactValidationError: If the ID or path is unsafe.
            StorageIOError: If the file cannot be written.
        """
        _ = validate_name(template.id, field="id", artifact_id=template.id)
        relative = template.file_path or self.template_path(template.id)
        full = resolve_path(self._root, relative)
        now = datetime.now(UTC)

        created_at = template.created_at
        try:
            previous = parse_template(read_bytes(full), file_path=relative)
        except FileNotFoundError:
            previous = None
        except MalformedArtifactError as e:
            self._logger.warning(
                "Overwriting unparseable template", path=relative, error=str(e)
            )
            previous = None
        if previous is not None and previous.created_at is not None:
            created_at = previous.created_at

        to_write = replace(
            template,
            created_at=created_at or now,
            updated_at=now,
            file_path=relative,
        )
        data = serialize_template(to_write)
        atomic_write(full, data)

        self._logger.info("Template saved", template_id=template.id, path=relative)
        return parse_template(data, file_path=relative)

    def delete(self, template: Template) -> None:
        """Delete a template file.

        Raises:
            TemplateNotFoundError: If the file does not exist.
            StorageIOError: If the file cannot be removed.
        """
        relative = template.file_path or self.template_path(template.id)
        full = resolve_path(self._root, relative)
        try:
            full.unlink()
        except FileNotFoundError as e:
            msg = f"Template not found: {relative}"
            raise TemplateNotFoundError(msg, template_id=template.id, path=relative) from e
        except OSError as e:
            msg = f"Failed to delete {relative}: {e}"
            raise StorageIOError(msg, path=full, operation="delete", cause=e) from e

        self._logger.info("Template deleted", template_id=template.id, path=relative)

    # Defined last: inside the class body the name shadows the builtin.
    def list(self) -> list[Template]:
        """List templates in path order, skipping unparseable files."""
        base = self.templates_path
        if not base.is_dir():
            return []

        templates: list[Template] = []
        for path in walk_artifacts(base):
            relative = relative_path(self._root, path)
            try:
                templates.append(parse_template(read_bytes(path), file_path=relative))
            except FileNotFoundError:
                continue
            except (MalformedArtifactError, StorageIOError) as e:
                self._logger.warning(
                    "Skipping unreadable template", path=relative, error=str(e)
                )
        return templates
