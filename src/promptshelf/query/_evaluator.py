"""Evaluation, rendering, and JSON conversion of tag expressions."""

from collections.abc import Iterable  # noqa: TC003 - needed at runtime for signatures
from typing import Any, assert_never

from promptshelf.query._ast import (
    MAX_DEPTH,
    And,
    Expression,
    Not,
    Or,
    Tag,
    make_and,
    make_or,
)
from promptshelf.query._lexer import TokenKind, tokenize

# Deepest tree parse can produce: each nesting level adds at most an Or and an And.
_MAX_NODE_DEPTH = 2 * MAX_DEPTH + 3


def normalize_tag(tag: str) -> str:
    """Normalize a tag for matching (trimmed and case-folded)."""
    return tag.strip().casefold()


def normalize_tags(tags: Iterable[str]) -> frozenset[str]:
    """Normalize a collection of tags for matching."""
    return frozenset(normalize_tag(tag) for tag in tags)


def _matches(expression: Expression, tags: frozenset[str]) -> bool:
    match expression:
        case Tag(name=name):
            return normalize_tag(name) in tags
        case And(children=children):
            return all(_matches(child, tags) for child in children)
        case Or(children=children):
            return any(_matches(child, tags) for child in children)
        case Not(child=child):
            return not _matches(child, tags)
        case _:
            assert_never(expression)


def evaluate(expression: Expression, tags: Iterable[str]) -> bool:
    """Decide whether a tag collection satisfies an expression.

    Matching is case-insensitive and ignores surrounding whitespace.

    Example:
        >>> from promptshelf.query import parse
        >>> evaluate(parse("ai AND NOT draft"), ["AI", "analysis"])
        True
    """
    return _matches(expression, normalize_tags(tags))


def _precedence(expression: Expression) -> int:
    match expression:
        case Or():
            return 1
        case And():
            return 2
        case Not():
            return 3
        case Tag():
            return 4
        case _:
            assert_never(expression)


def _render_child(child: Expression, parent_precedence: int) -> str:
    text = query_string(child)
    if _precedence(child) < parent_precedence:
        return f"({text})"
    return text


def query_string(expression: Expression) -> str:
    """Render an expression as query text with minimal parentheses.

    Parsing the result yields an expression that evaluates identically.
    This holds for trees from ``parse`` and ``expression_from_dict``; a
    hand-built ``Tag`` whose name is not a plain query word does not
    survive rendering.

    Example:
        >>> from promptshelf.query import parse
        >>> query_string(parse("((ai)) and (ml or nlp)"))
        'ai AND (ml OR nlp)'
    """
    match expression:
        case Tag(name=name):
            return name
        case And(children=children):
            return " AND ".join(_render_child(child, 2) for child in children)
        case Or(children=children):
            return " OR ".join(_render_child(child, 1) for child in children)
        case Not(child=child):
            return f"NOT {_render_child(child, 3)}"
        case _:
            assert_never(expression)


def expression_to_dict(expression: Expression) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Convert an expression to its JSON-compatible form.

    Tags become ``{"type": "tag", "value": name}``; operators become
    ``{"type": "and" | "or" | "not", "value": [children...]}``.
    """
    match expression:
        case Tag(name=name):
            return {"type": "tag", "value": name}
        case And(children=children):
            return {"type": "and", "value": [expression_to_dict(c) for c in children]}
        case Or(children=children):
            return {"type": "or", "value": [expression_to_dict(c) for c in children]}
        case Not(child=child):
            return {"type": "not", "value": [expression_to_dict(child)]}
        case _:
            assert_never(expression)


def _is_plain_tag(name: str) -> bool:
    tokens = tokenize(name)
    return len(tokens) == 1 and tokens[0].kind is TokenKind.TAG and tokens[0].text == name


def _children_from(value: object, kind: str, depth: int) -> list[Expression]:
    if not isinstance(value, list) or not value:
        msg = f"'{kind}' expression requires a non-empty list value"
        raise ValueError(msg)
    return [_from_dict(item, depth + 1) for item in value]  # pyright: ignore[reportUnknownVariableType]


def _from_dict(data: object, depth: int) -> Expression:
    if depth > _MAX_NODE_DEPTH:
        msg = f"Expression nested deeper than {_MAX_NODE_DEPTH} levels"
        raise ValueError(msg)
    if not isinstance(data, dict):
        msg = f"Expression must be an object, got {type(data).__name__}"
        raise ValueError(msg)  # noqa: TRY004

    kind = data.get("type")  # pyright: ignore[reportUnknownMemberType,reportUnknownVariableType]
    value = data.get("value")  # pyright: ignore[reportUnknownMemberType,reportUnknownVariableType]
    kind = kind.lower() if isinstance(kind, str) else kind  # pyright: ignore[reportUnknownVariableType]

    match kind:
        case "tag":
            if not isinstance(value, str) or not _is_plain_tag(value):
                msg = f"'tag' expression requires a single query word, got {value!r}"
                raise ValueError(msg)
            return Tag(value)
        case "and":
            return make_and(_children_from(value, "and", depth))
        case "or":
            return make_or(_children_from(value, "or", depth))
        case "not":
            operand = value[0] if isinstance(value, list) and len(value) == 1 else value  # pyright: ignore[reportUnknownVariableType]
            if not isinstance(operand, dict):
                msg = "'not' expression requires exactly one operand"
                raise ValueError(msg)
            return Not(_from_dict(operand, depth + 1))
        case _:
            msg = f"Unknown expression type: {kind!r}"
            raise ValueError(msg)


def expression_from_dict(data: object) -> Expression:
    """Build an expression from its JSON-compatible form.

    Tag values must be words the query parser reads back as a tag, so
    ``query_string`` of the result always parses to the same tree.

    Raises:
        ValueError: If the data does not describe a valid expression, a tag
            value is blank, a keyword, or holds whitespace or parentheses,
            or nesting is deeper than any parsed query.
    """
    return _from_dict(data, 1)
