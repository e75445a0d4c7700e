"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from promptshelf.exceptions import (
    ArtifactError,
    ArtifactValidationError,
    ConfigError,
    ConfigLoadError,
    MalformedArtifactError,
    NotFoundError,
    PromptNotFoundError,
    QuerySyntaxError,
    SavedSearchNotFoundError,
    ShelfError,
    StorageIOError,
    TemplateNotFoundError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "bases"),
        [
            (MalformedArtifactError("m"), (ArtifactError,)),
            (ArtifactValidationError("m"), (ArtifactError, ValueError)),
            (PromptNotFoundError("m"), (NotFoundError, KeyError)),
            (TemplateNotFoundError("m"), (NotFoundError, KeyError)),
            (SavedSearchNotFoundError("m"), (NotFoundError, KeyError)),
            (StorageIOError("m", path=Path("x"), operation="read"), ()),
            (QuerySyntaxError("m", query="q", position=0), (ValueError,)),
            (ConfigLoadError("m"), (ConfigError,)),
        ],
    )
    def test_bases(self, error: ShelfError, bases: tuple[type, ...]) -> None:
        assert isinstance(error, ShelfError)
        for base in bases:
            assert isinstance(error, base)


class TestNotFoundError:
    def test_str_is_unquoted(self) -> None:
        error = PromptNotFoundError("Prompt not found: p1", prompt_id="p1")

        assert str(error) == "Prompt not found: p1"
        assert error.prompt_id == "p1"
        assert error.path is None

    def test_caught_as_key_error(self) -> None:
        with pytest.raises(KeyError):
            raise SavedSearchNotFoundError("missing", name="s")


class TestContext:
    def test_storage_io_error_keeps_cause(self) -> None:
        cause = OSError("disk full")

        error = StorageIOError("failed", path=Path("/x"), operation="write", cause=cause)

        assert error.path == Path("/x")
        assert error.operation == "write"
        assert error.cause is cause

    def test_query_syntax_error_location(self) -> None:
        error = QuerySyntaxError("Unmatched '(' at position 0", query="(a", position=0)

        assert error.query == "(a"
        assert error.position == 0
