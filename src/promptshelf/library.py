"""High-level prompt library.

PromptLibrary combines the prompt, template, and saved search stores under
one storage root and adds tag filtering, boolean tag queries, and fuzzy
text search on top of them.

Example:
    >>> from promptshelf.config import Config
    >>> from promptshelf.library import PromptLibrary
    >>> library = PromptLibrary.from_config(Config.load())
    >>> [p.id for p in library.search_by_query("ai AND NOT draft")]
    ['summarize']
"""

from dataclasses import replace
from pathlib import Path
from typing import Self

from structlog.typing import FilteringBoundLogger  # noqa: TC002 - needed at runtime for signatures

from promptshelf.artifacts import DEFAULT_PACK, Prompt, Template
from promptshelf.cache import MetadataCache  # noqa: TC001 - needed at runtime for signatures
from promptshelf.config import Config  # noqa: TC001 - needed at runtime for signatures
from promptshelf.exceptions import ArtifactValidationError, PromptNotFoundError
from promptshelf.query import (
    Expression,
    evaluate,
    fuzzy_filter,
    normalize_tag,
    parse,
)
from promptshelf.store import (
    LOGS_DIR,
    SAVED_SEARCHES_FILE,
    PromptStore,
    SavedSearch,
    SavedSearchStore,
    TemplateStore,
)
from promptshelf.utils import create_logger, create_store_logger


def _search_fields(prompt: Prompt) -> list[str]:
    return [prompt.name, prompt.summary, prompt.id, *prompt.tags]


def _search_fields_with_content(prompt: Prompt) -> list[str]:
    return [*_search_fields(prompt), prompt.content]


class PromptLibrary:
    """Prompts, templates, and saved searches under one storage root.

    Attributes:
        _root: Storage root directory.
        _prompts: Prompt store.
        _templates: Template store.
        _searches: Saved search store.
        _logger: Logger shared by the stores.
    """

    __slots__ = ("_logger", "_prompts", "_root", "_searches", "_templates")

    def __init__(
        self,
        root: Path | str,
        *,
        cache: MetadataCache | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the library.

        Args:
            root: Storage root directory.
            cache: Metadata cache for prompt listings.
            logger: Logger shared by the stores (defaults to a JSON logger
                writing to ``<root>/logs/promptshelf.log``).
        """
        self._root = Path(root)
        self._logger: FilteringBoundLogger = (
            logger
            if logger is not None
            else create_logger(self._root / LOGS_DIR / "promptshelf.log")
        )
        self._prompts = PromptStore(self._root, cache=cache, logger=self._logger)
        self._templates = TemplateStore(self._root, logger=self._logger)
        self._searches = SavedSearchStore(
            self._root / SAVED_SEARCHES_FILE, logger=self._logger
        )

    @classmethod
    def from_config(cls, config: Config) -> Self:
        """Create a library for the configured storage root and logging."""
        return cls(config.root, logger=create_store_logger(config, component="library"))

    @property
    def root(self) -> Path:
        """Storage root directory."""
        return self._root

    @property
    def prompts(self) -> PromptStore:
        """Underlying prompt store."""
        return self._prompts

    @property
    def templates(self) -> TemplateStore:
        """Underlying template store."""
        return self._templates

    @property
    def saved_searches(self) -> SavedSearchStore:
        """Underlying saved search store."""
        return self._searches

    def initialize(self) -> None:
        """Create the storage layout."""
        self._prompts.initialize()
        self._templates.initialize()

    # --- Prompts ---

    def list_prompts(self) -> list[Prompt]:
        """List all current prompts (bodies may be empty when cached)."""
        return self._prompts.list()

    def _find(self, prompt_id: str, pack: str | None) -> Prompt | None:
        for prompt in self._prompts.list():
            if prompt.id == prompt_id and (pack is None or prompt.pack == pack):
                return prompt
        return None

    def get_prompt(self, prompt_id: str, pack: str | None = None) -> Prompt:
        """Get a prompt by ID with its full body.

        Args:
            prompt_id: Prompt ID.
            pack: Restrict the lookup to one pack.

        Raises:
            PromptNotFoundError: If no prompt has the ID.
        """
        found = self._find(prompt_id, pack)
        if found is None:
            msg = f"Prompt not found: {prompt_id}"
            raise PromptNotFoundError(msg, prompt_id=prompt_id)
        return self._prompts.load(found.file_path)

    def create_prompt(self, prompt: Prompt) -> Prompt:
        """Save a new prompt.

        Raises:
            ArtifactValidationError: If a prompt already exists at the
                destination.
        """
        pack = prompt.pack or DEFAULT_PACK
        if self._prompts.exists(prompt.id, pack) or self._find(prompt.id, pack):
            msg = f"Prompt already exists: {prompt.id}"
            raise ArtifactValidationError(msg, artifact_id=prompt.id, field="id")
        return self._prompts.save(prompt)

    def update_prompt(self, prompt: Prompt) -> Prompt:
        """Save changes to an existing prompt, archiving the previous version.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
        """
        existing = self._find(prompt.id, prompt.pack or DEFAULT_PACK)
        if existing is None:
            msg = f"Prompt not found: {prompt.id}"
            raise PromptNotFoundError(msg, prompt_id=prompt.id)
        return self._prompts.save(replace(prompt, file_path=existing.file_path))

    def save_prompt(self, prompt: Prompt) -> Prompt:
        """Create or update a prompt."""
        return self._prompts.save(prompt)

    def delete_prompt(self, prompt_id: str, pack: str | None = None) -> None:
        """Delete a prompt by ID; archived versions are kept.

        Raises:
            PromptNotFoundError: If no prompt has the ID.
        """
        found = self._find(prompt_id, pack)
        if found is None:
            msg = f"Prompt not found: {prompt_id}"
            raise PromptNotFoundError(msg, prompt_id=prompt_id)
        self._prompts.delete(found)

    def list_archived_prompts(self) -> list[Prompt]:
        """List archived prompt versions."""
        return self._prompts.list_archived()

    def prompt_history(self, prompt_id: str, pack: str = DEFAULT_PACK) -> list[Prompt]:
        """List archived versions of a prompt, oldest first."""
        return self._prompts.history(prompt_id, pack)

    # --- Search ---

    def filter_by_tag(self, tag: str) -> list[Prompt]:
        """List prompts carrying ``tag`` (case-insensitive)."""
        wanted = normalize_tag(tag)
        return [
            prompt
            for prompt in self._prompts.list()
            if any(normalize_tag(t) == wanted for t in prompt.tags)
        ]

    def all_tags(self) -> list[str]:
        """Every tag in use, sorted and without case-insensitive duplicates."""
        tags: dict[str, str] = {}
        for prompt in self._prompts.list():
            for tag in prompt.tags:
                _ = tags.setdefault(normalize_tag(tag), tag.strip())
        return [tags[key] for key in sorted(tags)]

    def search(self, text: str) -> list[Prompt]:
        """Fuzzy search over prompt names, summaries, IDs, and tags."""
        return fuzzy_filter(text, self._prompts.list(), _search_fields)

    def search_by_expression(self, expression: Expression) -> list[Prompt]:
        """List prompts whose tags satisfy ``expression``."""
        return [
            prompt for prompt in self._prompts.list() if evaluate(expression, prompt.tags)
        ]

    def search_by_query(self, query: str) -> list[Prompt]:
        """List prompts whose tags satisfy a boolean query.

        Raises:
            QuerySyntaxError: If the query cannot be parsed.
        """
        return self.search_by_expression(parse(query))

    # --- Templates ---

    def list_templates(self) -> list[Template]:
        """List all templates."""
        return self._templates.list()

    def get_template(self, template_id: str) -> Template:
        """Get a template by ID.

        Raises:
            TemplateNotFoundError: If no template has the ID.
        """
        return self._templates.get(template_id)

    def save_template(self, template: Template) -> Template:
        """Create or overwrite a template."""
        return self._templates.save(template)

    def delete_template(self, template_id: str) -> None:
        """Delete a template by ID.

        Raises:
            TemplateNotFoundError: If no template has the ID.
        """
        self._templates.delete(self._templates.get(template_id))

    # --- Saved searches ---

    def list_saved_searches(self) -> list[SavedSearch]:
        """List saved searches in stored order."""
        return self._searches.load_all()

    def get_saved_search(self, name: str) -> SavedSearch:
        """Get a saved search by name.

        Raises:
            SavedSearchNotFoundError: If no search has the name.
        """
        return self._searches.get(name)

    def save_search(self, search: SavedSearch) -> SavedSearch:
        """Add a saved search or replace the one with the same name."""
        return self._searches.upsert(search)

    def delete_saved_search(self, name: str) -> None:
        """Delete a saved search by name.

        Raises:
            SavedSearchNotFoundError: If no search has the name.
        """
        self._searches.delete(name)

    def execute_saved_search(
        self,
        name: str,
        text_query: str | None = None,
    ) -> list[Prompt]:
        """Run a saved search.

        Prompts are filtered by the saved expression, then by a fuzzy text
        query over names, summaries, IDs, tags, and bodies.

        Args:
            name: Saved search name.
            text_query: Replaces the saved text query when given.

        Raises:
            SavedSearchNotFoundError: If no search has the name.
        """
        search = self._searches.get(name)
        results = self.search_by_expression(search.expression)

        query = text_query if text_query is not None else search.text_query
        if not query.strip():
            return results

        loaded = [
            prompt if prompt.content else self._prompts.load(prompt.file_path)
            for prompt in results
        ]
        return fuzzy_filter(query, loaded, _search_fields_with_content)
