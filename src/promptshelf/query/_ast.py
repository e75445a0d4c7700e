"""Boolean tag expression tree.

Expressions form a closed union of four frozen node types. ``And`` and ``Or``
nodes built through ``make_and`` and ``make_or`` never hold a direct child of
their own type and always hold at least two children.
"""

from collections.abc import Iterable  # noqa: TC003 - needed at runtime for signatures
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Tag:
    """Matches artifacts carrying the named tag."""

    name: str


@dataclass(frozen=True, slots=True)
class And:
    """Matches when every child matches."""

    children: "tuple[Expression, ...]"  # noqa: UP037


@dataclass(frozen=True, slots=True)
class Or:
    """Matches when any child matches."""

    children: "tuple[Expression, ...]"  # noqa: UP037


@dataclass(frozen=True, slots=True)
class Not:
    """Matches when the child does not match."""

    child: "Expression"  # noqa: UP037


type Expression = Tag | And | Or | Not

MAX_DEPTH = 100
"""Deepest nesting of parentheses and NOT accepted when building expressions."""


def make_and(operands: Iterable[Expression]) -> Expression:
    """Conjoin operands, flattening nested ``And`` nodes.

    A single operand is returned unchanged.

    Raises:
        ValueError: If no operands are given.
    """
    children: list[Expression] = []
    for operand in operands:
        if isinstance(operand, And):
            children.extend(operand.children)
        else:
            children.append(operand)
    if not children:
        msg = "make_and requires at least one operand"
        raise ValueError(msg)
    if len(children) == 1:
        return children[0]
    return And(tuple(children))


def make_or(operands: Iterable[Expression]) -> Expression:
    """Disjoin operands, flattening nested ``Or`` nodes.

    A single operand is returned unchanged.

    Raises:
        ValueError: If no operands are given.
    """
    children: list[Expression] = []
    for operand in operands:
        if isinstance(operand, Or):
            children.extend(operand.children)
        else:
            children.append(operand)
    if not children:
        msg = "make_or requires at least one operand"
        raise ValueError(msg)
    if len(children) == 1:
        return children[0]
    return Or(tuple(children))
