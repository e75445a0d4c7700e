"""Property-based tests for artifact parsing and serialization."""

from datetime import UTC, datetime

from hypothesis import given, settings, strategies as st

from promptshelf.artifacts import (
    Prompt,
    Slot,
    Template,
    parse_prompt,
    parse_template,
    serialize_prompt,
    serialize_template,
)

# =============================================================================
# Strategies
# =============================================================================

valid_id = st.from_regex(r"[a-z][a-z0-9-]{0,15}", fullmatch=True)

valid_tag = st.from_regex(r"[A-Za-z][A-Za-z0-9_-]{0,11}", fullmatch=True)

# Only ASCII space, so YAML never folds or escapes the value
safe_text = st.text(
    alphabet=st.characters(
        whitelist_categories=["L", "N"],
        whitelist_characters="-_ ",
    ),
    min_size=1,
    max_size=50,
).filter(lambda x: x.strip() and not x.startswith("-"))

valid_datetime = st.datetimes(
    min_value=datetime(2000, 1, 1),  # noqa: DTZ001
    max_value=datetime(2100, 1, 1),  # noqa: DTZ001
).map(lambda dt: dt.replace(tzinfo=UTC))

body_line = st.text(
    alphabet=st.characters(
        whitelist_categories=["L", "N", "P", "Zs"],
    ),
    max_size=40,
)

body = st.lists(body_line, max_size=6).map("\n".join)


@st.composite
def prompts(draw: st.DrawFn) -> Prompt:
    """Strategy for prompts the store could have written."""
    return Prompt(
        id=draw(valid_id),
        version=draw(st.sampled_from(["", "1.0.0", "2.3.10"])),
        name=draw(st.one_of(st.just(""), safe_text)),
        summary=draw(st.one_of(st.just(""), safe_text)),
        tags=tuple(draw(st.lists(valid_tag, max_size=4))),
        pack=draw(st.sampled_from(["personal", "work"])),
        content=draw(body),
        created_at=draw(st.one_of(st.none(), valid_datetime)),
        updated_at=draw(st.one_of(st.none(), valid_datetime)),
    )


@st.composite
def templates(draw: st.DrawFn) -> Template:
    """Strategy for templates with a few slots."""
    slot_names = draw(st.lists(valid_id, max_size=3, unique=True))
    return Template(
        id=draw(valid_id),
        version="1.0.0",
        name=draw(st.one_of(st.just(""), safe_text)),
        slots=tuple(
            Slot(name=name, required=draw(st.booleans())) for name in slot_names
        ),
        content=draw(body),
    )


# =============================================================================
# Properties
# =============================================================================


class TestPromptCodecProperties:
    @given(prompt=prompts())
    @settings(max_examples=200)
    def test_serialization_is_stable(self, prompt: Prompt) -> None:
        data = serialize_prompt(prompt)

        assert serialize_prompt(parse_prompt(data)) == data

    @given(prompt=prompts())
    def test_metadata_survives(self, prompt: Prompt) -> None:
        parsed = parse_prompt(serialize_prompt(prompt))

        assert parsed.id == prompt.id
        assert parsed.version == prompt.version
        assert parsed.name == prompt.name
        assert parsed.summary == prompt.summary
        assert parsed.tags == prompt.tags
        assert parsed.pack == prompt.pack
        assert parsed.created_at == prompt.created_at
        assert parsed.updated_at == prompt.updated_at

    @given(prompt=prompts())
    def test_body_text_survives(self, prompt: Prompt) -> None:
        parsed = parse_prompt(serialize_prompt(prompt))

        assert parsed.content.strip() == prompt.content.strip()

    @given(prompt=prompts())
    def test_hash_tracks_bytes(self, prompt: Prompt) -> None:
        data = serialize_prompt(prompt)

        assert parse_prompt(data + b"extra\n").content_hash != parse_prompt(data).content_hash


class TestTemplateCodecProperties:
    @given(template=templates())
    def test_serialization_is_stable(self, template: Template) -> None:
        data = serialize_template(template)

        assert serialize_template(parse_template(data)) == data

    @given(template=templates())
    def test_slots_survive(self, template: Template) -> None:
        parsed = parse_template(serialize_template(template))

        assert parsed.slots == template.slots
        assert parsed.required_slots == template.required_slots
