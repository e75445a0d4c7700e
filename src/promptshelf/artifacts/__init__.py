r"""Prompt and template artifacts.

Artifacts are UTF-8 Markdown files that open with a YAML metadata block
between two ``---`` lines. This package defines the records and the codec
that converts them to and from raw bytes.

Example:
    >>> from promptshelf.artifacts import Prompt, parse_prompt, serialize_prompt
    >>> prompt = Prompt(id="summarize", name="Summarize", content="Summarize: {{text}}")
    >>> data = serialize_prompt(prompt)
    >>> parse_prompt(data).content
    'Summarize: {{text}}\n'
"""

from promptshelf.artifacts._codec import (
    DELIMITER,
    PROMPT_KEYS,
    TEMPLATE_KEYS,
    compute_hash,
    parse_artifact,
    parse_prompt,
    parse_template,
    prompt_from_metadata,
    prompt_to_metadata,
    serialize_artifact,
    serialize_prompt,
    serialize_template,
    template_from_metadata,
    template_to_metadata,
)
from promptshelf.artifacts._types import (
    DEFAULT_PACK,
    Prompt,
    Slot,
    Template,
    TemplateConstraints,
)

__all__ = [
    "DEFAULT_PACK",
    "DELIMITER",
    "PROMPT_KEYS",
    "TEMPLATE_KEYS",
    "Prompt",
    "Slot",
    "Template",
    "TemplateConstraints",
    "compute_hash",
    "parse_artifact",
    "parse_prompt",
    "parse_template",
    "prompt_from_metadata",
    "prompt_to_metadata",
    "serialize_artifact",
    "serialize_prompt",
    "serialize_template",
    "template_from_metadata",
    "template_to_metadata",
]
