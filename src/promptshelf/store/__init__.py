"""File-backed stores for prompts, templates, and saved searches.

Layout under the storage root::

    prompts/          prompt files, one subdirectory per non-default pack
    templates/        template files
    archive/          previous prompt versions
    .cache/metadata   metadata cache document
    saved_searches    saved searches document
    logs/             default log location
"""

from promptshelf.store._layout import (
    ARCHIVE_DIR,
    ARTIFACT_SUFFIX,
    CACHE_FILE,
    LOGS_DIR,
    PROMPTS_DIR,
    SAVED_SEARCHES_FILE,
    TEMPLATES_DIR,
    resolve_path,
    validate_name,
)
from promptshelf.store._prompts import PromptStore
from promptshelf.store._saved_searches import (
    SAVED_SEARCHES_VERSION,
    SavedSearch,
    SavedSearchStore,
)
from promptshelf.store._templates import TemplateStore
from promptshelf.store._versioning import INITIAL_VERSION, increment_version, version_key

__all__ = [
    "ARCHIVE_DIR",
    "ARTIFACT_SUFFIX",
    "CACHE_FILE",
    "INITIAL_VERSION",
    "LOGS_DIR",
    "PROMPTS_DIR",
    "SAVED_SEARCHES_FILE",
    "SAVED_SEARCHES_VERSION",
    "TEMPLATES_DIR",
    "PromptStore",
    "SavedSearch",
    "SavedSearchStore",
    "TemplateStore",
    "increment_version",
    "resolve_path",
    "validate_name",
    "version_key",
]
