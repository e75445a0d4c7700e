"""Metadata block parsing and serialization.

This module converts artifact files to and from a YAML metadata block plus a
Markdown body, and maps the metadata block onto Prompt and Template records.
Keys the records do not know about are kept in ``extra`` so that re-saving a
file written by a newer version does not drop them.
"""

import hashlib
from collections.abc import Mapping  # noqa: TC003 - needed at runtime for signatures
from datetime import UTC, date, datetime
from typing import Any

import yaml

from promptshelf.artifacts._types import (
    DEFAULT_PACK,
    Prompt,
    Slot,
    Template,
    TemplateConstraints,
)
from promptshelf.exceptions import ArtifactValidationError, MalformedArtifactError

# =============================================================================
# Constants
# =============================================================================

DELIMITER = "---"
"""Line that opens and closes the metadata block."""

PROMPT_KEYS = (
    "id",
    "version",
    "title",
    "description",
    "tags",
    "template",
    "pack",
    "metadata",
    "created_at",
    "updated_at",
)
"""Metadata keys written for prompts, in file order."""

_PROMPT_ALIASES = frozenset({"name", "summary"})
"""Alternate spellings accepted on read and rewritten to the canonical key."""

TEMPLATE_KEYS = (
    "id",
    "version",
    "name",
    "description",
    "slots",
    "constraints",
    "metadata",
    "created_at",
    "updated_at",
)
"""Metadata keys written for templates, in file order."""

type ArtifactMetadata = dict[str, Any]  # pyright: ignore[reportExplicitAny]


# =============================================================================
# Raw Codec
# =============================================================================


def compute_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw file bytes."""
    return hashlib.sha256(data).hexdigest()


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r") == DELIMITER


def parse_artifact(
    data: bytes,
    *,
    path: str | None = None,
) -> tuple[ArtifactMetadata, str]:
    """Split raw artifact bytes into a metadata mapping and a body.

    Args:
        data: Raw file content.
        path: Storage-relative path, used only for error context.

    Returns:
        Tuple of (metadata, body). The body has leading blank lines removed
        and is otherwise returned exactly as stored.

    Raises:
        MalformedArtifactError: If the content is not UTF-8, a delimiter is
            missing, or the metadata block is not a YAML mapping.

    Example:
        >>> parse_artifact(b"---\\nid: p1\\n---\\n\\nHello\\n")
        ({'id': 'p1'}, 'Hello\\n')
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"Artifact is not valid UTF-8: {e}"
        raise MalformedArtifactError(msg, path=path, cause=e) from e

    text = text.removeprefix("\ufeff")
    lines = text.split("\n")

    if not _is_delimiter(lines[0]):
        msg = f"Artifact must start with a {DELIMITER!r} line"
        raise MalformedArtifactError(msg, path=path)

    closing = next(
        (index for index in range(1, len(lines)) if _is_delimiter(lines[index])),
        None,
    )
    if closing is None:
        msg = f"Closing {DELIMITER!r} line not found"
        raise MalformedArtifactError(msg, path=path)

    block = "\n".join(lines[1:closing])
    try:
        metadata = yaml.safe_load(block)  # pyright: ignore[reportAny]
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in metadata block: {e}"
        raise MalformedArtifactError(msg, path=path, cause=e) from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        msg = f"Metadata block must be a mapping, got {type(metadata).__name__}"
        raise MalformedArtifactError(msg, path=path)

    body_lines = lines[closing + 1 :]
    start = 0
    while start < len(body_lines) and not body_lines[start].strip():
        start += 1

    return {str(k): v for k, v in metadata.items()}, "\n".join(body_lines[start:])


def serialize_artifact(metadata: Mapping[str, Any], body: str) -> bytes:  # pyright: ignore[reportExplicitAny]
    """Render a metadata mapping and body into artifact bytes.

    The body always ends with exactly one newline, so serializing a parsed
    artifact a second time yields identical bytes.

    Args:
        metadata: Metadata mapping; key order is preserved.
        body: Markdown body.

    Returns:
        UTF-8 encoded file content.

    Raises:
        ArtifactValidationError: If the metadata holds values YAML cannot
            represent.
    """
    try:
        block = yaml.safe_dump(
            dict(metadata),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        msg = f"Failed to serialize metadata: {e}"
        raise ArtifactValidationError(
            msg, artifact_id=str(metadata.get("id", "")) or None, field="metadata"
        ) from e

    if block.strip() == "{}":
        block = ""

    document = f"{DELIMITER}\n{block}{DELIMITER}\n"
    body_lines = body.rstrip().split("\n")
    while body_lines and not body_lines[0].strip():
        body_lines.pop(0)
    if body_lines:
        document += "\n" + "\n".join(body_lines) + "\n"
    return document.encode("utf-8")


# =============================================================================
# Field Coercion
# =============================================================================


def _parse_datetime(
    value: object,
    *,
    field: str,
    path: str | None,
) -> datetime | None:
    """Coerce a metadata value to an aware datetime.

    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)  # noqa: DTZ001
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            msg = f"Invalid datetime for {field!r}: {value!r}"
            raise MalformedArtifactError(msg, path=path, field=field, cause=e) from e
    else:
        msg = f"Invalid datetime for {field!r}: {value!r}"
        raise MalformedArtifactError(msg, path=path, field=field)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _to_str(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _to_tags(value: object, *, path: str | None) -> tuple[str, ...]:
    """Coerce a tags value to a tuple of non-empty strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        items: list[object] = list(value.split(","))
    elif isinstance(value, list | tuple):
        items = list(value)  # pyright: ignore[reportUnknownArgumentType]
    else:
        msg = f"Tags must be a list, got {type(value).__name__}"
        raise MalformedArtifactError(msg, path=path, field="tags")
    return tuple(tag for tag in (_to_str(item).strip() for item in items) if tag)


def _to_mapping(value: object, *, field: str, path: str | None) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"{field!r} must be a mapping, got {type(value).__name__}"
        raise MalformedArtifactError(msg, path=path, field=field)
    return {str(k): v for k, v in value.items()}  # pyright: ignore[reportUnknownVariableType]


def _require_id(metadata: Mapping[str, Any], *, path: str | None) -> str:  # pyright: ignore[reportExplicitAny]
    artifact_id = _to_str(metadata.get("id")).strip()
    if not artifact_id:
        msg = "Missing required metadata field: id"
        raise MalformedArtifactError(msg, path=path, field="id")
    return artifact_id


# =============================================================================
# Prompt Mapping
# =============================================================================


def prompt_from_metadata(
    metadata: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    body: str,
    *,
    file_path: str = "",
    content_hash: str = "",
) -> Prompt:
    """Build a Prompt from a parsed metadata block.

    Args:
        metadata: Parsed metadata mapping.
        body: Markdown body.
        file_path: Storage-relative path the prompt was read from.
        content_hash: Digest of the raw file bytes.

    Returns:
        Prompt with unrecognized keys kept in ``extra``.

    Raises:
        MalformedArtifactError: If ``id`` is missing or a field has the
            wrong shape.
    """
    path = file_path or None
    name = metadata.get("title", metadata.get("name"))
    summary = metadata.get("description", metadata.get("summary"))
    template_ref = _to_str(metadata.get("template")).strip() or None
    extra = {
        k: v
        for k, v in metadata.items()
        if k not in PROMPT_KEYS and k not in _PROMPT_ALIASES
    }

    return Prompt(
        id=_require_id(metadata, path=path),
        version=_to_str(metadata.get("version")),
        name=_to_str(name),
        summary=_to_str(summary),
        tags=_to_tags(metadata.get("tags"), path=path),
        template_ref=template_ref,
        pack=_to_str(metadata.get("pack")).strip() or DEFAULT_PACK,
        metadata=_to_mapping(metadata.get("metadata"), field="metadata", path=path),
        content=body,
        created_at=_parse_datetime(
            metadata.get("created_at"), field="created_at", path=path
        ),
        updated_at=_parse_datetime(
            metadata.get("updated_at"), field="updated_at", path=path
        ),
        file_path=file_path,
        content_hash=content_hash,
        extra=extra,
    )


def prompt_to_metadata(prompt: Prompt) -> ArtifactMetadata:
    """Convert a Prompt to a serializable metadata mapping.

    Args:
        prompt: Prompt to convert.

    Returns:
        Mapping with known keys first, then preserved unknown keys.
    """
    result: ArtifactMetadata = {
        "id": prompt.id,
        "version": prompt.version,
        "title": prompt.name,
        "description": prompt.summary,
        "tags": list(prompt.tags),
    }

    if prompt.template_ref:
        result["template"] = prompt.template_ref
    if prompt.pack and prompt.pack != DEFAULT_PACK:
        result["pack"] = prompt.pack
    if prompt.metadata:
        result["metadata"] = dict(prompt.metadata)

    result["created_at"] = _format_datetime(prompt.created_at)
    result["updated_at"] = _format_datetime(prompt.updated_at)

    for key, value in prompt.extra.items():
        if key not in result:
            result[key] = value

    return result


def parse_prompt(data: bytes, *, file_path: str = "") -> Prompt:
    """Parse raw file bytes into a Prompt, recording its content hash."""
    metadata, body = parse_artifact(data, path=file_path or None)
    return prompt_from_metadata(
        metadata,
        body,
        file_path=file_path,
        content_hash=compute_hash(data),
    )


def serialize_prompt(prompt: Prompt) -> bytes:
    """Serialize a Prompt to file bytes."""
    return serialize_artifact(prompt_to_metadata(prompt), prompt.content)


# =============================================================================
# Template Mapping
# =============================================================================


def _parse_slot(value: object, *, index: int, path: str | None) -> Slot:
    if isinstance(value, str):
        return Slot(name=value)
    if not isinstance(value, dict):
        msg = f"Slot {index} must be a mapping, got {type(value).__name__}"
        raise MalformedArtifactError(msg, path=path, field="slots")

    name = _to_str(value.get("name")).strip()  # pyright: ignore[reportUnknownMemberType]
    if not name:
        msg = f"Slot {index} is missing a name"
        raise MalformedArtifactError(msg, path=path, field="slots")

    return Slot(
        name=name,
        description=_to_str(value.get("description")),  # pyright: ignore[reportUnknownMemberType]
        required=bool(value.get("required", False)),  # pyright: ignore[reportUnknownMemberType]
        default=_to_str(value.get("default")),  # pyright: ignore[reportUnknownMemberType]
    )


def _parse_constraints(value: object, *, path: str | None) -> TemplateConstraints:
    data = _to_mapping(value, field="constraints", path=path)
    try:
        return TemplateConstraints(
            required_headings=tuple(
                _to_str(h) for h in data.get("required_headings") or ()
            ),
            bullet_style=_to_str(data.get("bullet_style")),
            max_word_count=int(data.get("max_word_count") or 0),
            min_word_count=int(data.get("min_word_count") or 0),
            required_sections=tuple(
                _to_str(s) for s in data.get("required_sections") or ()
            ),
        )
    except (TypeError, ValueError) as e:
        msg = f"Invalid template constraints: {e}"
        raise MalformedArtifactError(
            msg, path=path, field="constraints", cause=e
        ) from e


def _constraints_to_dict(constraints: TemplateConstraints) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if constraints.required_headings:
        result["required_headings"] = list(constraints.required_headings)
    if constraints.bullet_style:
        result["bullet_style"] = constraints.bullet_style
    if constraints.max_word_count:
        result["max_word_count"] = constraints.max_word_count
    if constraints.min_word_count:
        result["min_word_count"] = constraints.min_word_count
    if constraints.required_sections:
        result["required_sections"] = list(constraints.required_sections)
    return result


def template_from_metadata(
    metadata: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    body: str,
    *,
    file_path: str = "",
) -> Template:
    """Build a Template from a parsed metadata block.

    Raises:
        MalformedArtifactError: If ``id`` is missing or a field has the
            wrong shape.
    """
    path = file_path or None
    raw_slots = metadata.get("slots") or []
    if not isinstance(raw_slots, list):
        msg = f"Slots must be a list, got {type(raw_slots).__name__}"
        raise MalformedArtifactError(msg, path=path, field="slots")

    return Template(
        id=_require_id(metadata, path=path),
        version=_to_str(metadata.get("version")),
        name=_to_str(metadata.get("name")),
        description=_to_str(metadata.get("description")),
        slots=tuple(
            _parse_slot(slot, index=i, path=path)
            for i, slot in enumerate(raw_slots)  # pyright: ignore[reportUnknownArgumentType,reportUnknownVariableType]
        ),
        constraints=_parse_constraints(metadata.get("constraints"), path=path),
        metadata=_to_mapping(metadata.get("metadata"), field="metadata", path=path),
        content=body,
        created_at=_parse_datetime(
            metadata.get("created_at"), field="created_at", path=path
        ),
        updated_at=_parse_datetime(
            metadata.get("updated_at"), field="updated_at", path=path
        ),
        file_path=file_path,
        extra={k: v for k, v in metadata.items() if k not in TEMPLATE_KEYS},
    )


def template_to_metadata(template: Template) -> ArtifactMetadata:
    """Convert a Template to a serializable metadata mapping."""
    slots: list[dict[str, Any]] = []  # pyright: ignore[reportExplicitAny]
    for slot in template.slots:
        entry: dict[str, Any] = {"name": slot.name}  # pyright: ignore[reportExplicitAny]
        if slot.description:
            entry["description"] = slot.description
        entry["required"] = slot.required
        if slot.default:
            entry["default"] = slot.default
        slots.append(entry)

    result: ArtifactMetadata = {
        "id": template.id,
        "version": template.version,
        "name": template.name,
        "description": template.description,
        "slots": slots,
    }

    if not template.constraints.is_empty:
        result["constraints"] = _constraints_to_dict(template.constraints)
    if template.metadata:
        result["metadata"] = dict(template.metadata)

    result["created_at"] = _format_datetime(template.created_at)
    result["updated_at"] = _format_datetime(template.updated_at)

    for key, value in template.extra.items():
        if key not in result:
            result[key] = value

    return result


def parse_template(data: bytes, *, file_path: str = "") -> Template:
    """Parse raw file bytes into a Template."""
    metadata, body = parse_artifact(data, path=file_path or None)
    return template_from_metadata(metadata, body, file_path=file_path)


def serialize_template(template: Template) -> bytes:
    """Serialize a Template to file bytes."""
    return serialize_artifact(template_to_metadata(template), template.content)
