"""Data classes for prompt and template artifacts.

This module defines the records the store reads and writes:
- Prompt for prompt artifacts
- Slot and TemplateConstraints for template structure
- Template for template artifacts
"""

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - needed at runtime for slots dataclass
from typing import Any

DEFAULT_PACK = "personal"
"""Collection name used when a prompt does not name one."""


@dataclass(frozen=True, slots=True)
class Prompt:
    """A prompt artifact.

    Attributes:
        id: Stable, user-chosen identifier, unique within a pack.
        version: Semantic version string.
        name: Human-readable title.
        summary: Brief description for listings.
        tags: Freeform tags, display-preserving.
        template_ref: ID of the template this prompt was built from.
        pack: Owning collection name.
        metadata: Free-form user metadata.
        content: Markdown body. Empty when the prompt came from the cache.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
        file_path: Storage-relative POSIX path, owned by the store.
        content_hash: SHA-256 hex digest of the raw file bytes.
        extra: Unrecognized metadata keys, preserved on re-save.
    """

    id: str
    version: str = ""
    name: str = ""
    summary: str = ""
    tags: tuple[str, ...] = ()
    template_ref: str | None = None
    pack: str = DEFAULT_PACK
    metadata: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]
    content: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    file_path: str = ""
    content_hash: str = ""
    extra: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]

    @property
    def title(self) -> str:
        """Display title, falling back to the ID."""
        return self.name or self.id

    @property
    def is_archived(self) -> bool:
        """Whether this prompt lives under the archive root."""
        return self.file_path.startswith("archive/")


@dataclass(frozen=True, slots=True)
class Slot:
    """A named placeholder in a template.

    Attributes:
        name: Slot name used in the template body.
        description: What the slot is for.
        required: Whether a value must be supplied.
        default: Value used when none is supplied.
    """

    name: str
    description: str = ""
    required: bool = False
    default: str = ""


@dataclass(frozen=True, slots=True)
class TemplateConstraints:
    """Structural rules a filled-in template should satisfy.

    Attributes:
        required_headings: Headings that must be present.
        bullet_style: One of "hyphen", "asterisk", "plus", or empty.
        max_word_count: Upper word limit (0 means unbounded).
        min_word_count: Lower word limit (0 means unbounded).
        required_sections: Sections that must be present.
    """

    required_headings: tuple[str, ...] = ()
    bullet_style: str = ""
    max_word_count: int = 0
    min_word_count: int = 0
    required_sections: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Whether no constraint is set."""
        return not (
            self.required_headings
            or self.bullet_style
            or self.max_word_count
            or self.min_word_count
            or self.required_sections
        )


@dataclass(frozen=True, slots=True)
class Template:
    """A template artifact: a reusable prompt scaffold with named slots.

    Attributes:
        id: Stable identifier.
        version: Semantic version string.
        name: Human-readable name.
        description: Brief description.
        slots: Ordered slots; order matters for display only.
        constraints: Structural rules for filled-in output.
        metadata: Free-form user metadata.
        content: Markdown body.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
        file_path: Storage-relative POSIX path, owned by the store.
        extra: Unrecognized metadata keys, preserved on re-save.
    """

    id: str
    version: str = ""
    name: str = ""
    description: str = ""
    slots: tuple[Slot, ...] = ()
    constraints: TemplateConstraints = field(default_factory=TemplateConstraints)
    metadata: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]
    content: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    file_path: str = ""
    extra: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]

    def get_slot(self, name: str) -> Slot | None:
        """Get a slot by name.

        Args:
            name: Slot name.

        Returns:
            The slot, or None if the template has no such slot.
        """
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None

    @property
    def required_slots(self) -> tuple[Slot, ...]:
        """Slots that must be supplied, in declaration order."""
        return tuple(slot for slot in self.slots if slot.required)
