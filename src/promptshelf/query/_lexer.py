"""Tokenizer for boolean tag queries."""

from dataclasses import dataclass
from enum import StrEnum


class TokenKind(StrEnum):
    """Kinds of query tokens."""

    AND = "and"
    OR = "or"
    NOT = "not"
    LPAREN = "lparen"
    RPAREN = "rparen"
    TAG = "tag"


@dataclass(frozen=True, slots=True)
class Token:
    """A query token.

    Attributes:
        kind: Token kind.
        text: Source text of the token.
        position: 0-based character offset of the token in the query.
    """

    kind: TokenKind
    text: str
    position: int


_KEYWORDS: dict[str, TokenKind] = {
    "AND": TokenKind.AND,
    "OR": TokenKind.OR,
    "NOT": TokenKind.NOT,
}

_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}


def tokenize(text: str) -> list[Token]:
    """Split a query into tokens.

    Words are runs of characters other than whitespace and parentheses.
    A word is a keyword only when the whole word is ``AND``, ``OR`` or
    ``NOT`` in any case, so ``android`` and ``order`` are tags.

    Example:
        >>> [t.kind.value for t in tokenize("ai AND (NOT draft)")]
        ['tag', 'and', 'lparen', 'not', 'tag', 'rparen']
    """
    tokens: list[Token] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if char.isspace():
            index += 1
            continue

        if char in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[char], char, index))
            index += 1
            continue

        start = index
        while (
            index < length
            and not text[index].isspace()
            and text[index] not in _PUNCTUATION
        ):
            index += 1
        word = text[start:index]
        tokens.append(Token(_KEYWORDS.get(word.upper(), TokenKind.TAG), word, start))

    return tokens
