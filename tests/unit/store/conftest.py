"""Fixtures for store unit tests."""

from pathlib import Path

import pytest

from promptshelf.store import PromptStore, TemplateStore
from tests.conftest import CapturedLogger


@pytest.fixture
def prompt_store(storage_root: Path, captured_logger: CapturedLogger) -> PromptStore:
    """Prompt store over an empty storage root."""
    store = PromptStore(storage_root, logger=captured_logger.logger)
    store.initialize()
    return store


@pytest.fixture
def template_store(storage_root: Path, captured_logger: CapturedLogger) -> TemplateStore:
    """Template store over an empty storage root."""
    store = TemplateStore(storage_root, logger=captured_logger.logger)
    store.initialize()
    return store
