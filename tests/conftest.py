"""Shared test fixtures for promptshelf tests."""

import logging
from dataclasses import dataclass
from pathlib import Path

import pytest
import structlog
from structlog.testing import CapturingLogger
from structlog.typing import FilteringBoundLogger


@dataclass(frozen=True, slots=True)
class CapturedLogger:
    """A logger paired with the sink that records its calls."""

    logger: FilteringBoundLogger
    sink: CapturingLogger

    def events(self, level: str | None = None) -> list[str]:
        """Event names logged, optionally restricted to one level."""
        return [
            str(call.kwargs.get("event"))
            for call in self.sink.calls
            if level is None or call.method_name == level
        ]


@pytest.fixture
def captured_logger() -> CapturedLogger:
    """Create a DEBUG-level logger whose entries are recorded in memory."""
    sink = CapturingLogger()
    logger = structlog.wrap_logger(
        sink,
        processors=[],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
    )
    return CapturedLogger(logger=logger, sink=sink)


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Create an empty storage root."""
    root = tmp_path / "shelf"
    root.mkdir()
    return root


# ---------------------------------------------------------------------------
# Helper functions for creating test artifacts
# ---------------------------------------------------------------------------


def write_prompt_file(
    root: Path,
    relative: str,
    *,
    prompt_id: str,
    title: str = "",
    tags: tuple[str, ...] = (),
    version: str = "1.0.0",
    body: str = "Prompt body.",
) -> Path:
    """Write a prompt file by hand, bypassing the store.

    Args:
        root: Storage root.
        relative: Storage-relative path such as ``prompts/review.md``.
        prompt_id: Value of the ``id`` key.
        title: Value of the ``title`` key.
        tags: Values of the ``tags`` key.
        version: Value of the ``version`` key.
        body: Markdown body.

    Returns:
        Path to the written file.
    """
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    tag_lines = "".join(f"  - {tag}\n" for tag in tags)
    path.write_text(
        f"---\nid: {prompt_id}\nversion: {version}\ntitle: {title or prompt_id}\n"
        f"tags:\n{tag_lines}---\n\n{body}\n",
        encoding="utf-8",
    )
    return path
