"""Recursive-descent parser for boolean tag queries.

Grammar, lowest precedence first::

    or      := and (OR and)*
    and     := not (AND not)*
    not     := NOT not | primary
    primary := "(" or ")" | TAG
"""

from promptshelf.exceptions import QuerySyntaxError
from promptshelf.query._ast import MAX_DEPTH, Expression, Not, Tag, make_and, make_or
from promptshelf.query._lexer import Token, TokenKind, tokenize


class _Parser:
    __slots__ = ("_depth", "_index", "_query", "_tokens")

    def __init__(self, query: str, tokens: list[Token]) -> None:
        self._query = query
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    def _peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _error(self, message: str, position: int) -> QuerySyntaxError:
        return QuerySyntaxError(
            f"{message} at position {position}",
            query=self._query,
            position=position,
        )

    def _enter(self, token: Token) -> None:
        self._depth += 1
        if self._depth > MAX_DEPTH:
            raise self._error("Expression nested too deeply", token.position)

    def parse(self) -> Expression:
        expression = self._parse_or()
        token = self._peek()
        if token is None:
            return expression
        if token.kind is TokenKind.RPAREN:
            raise self._error("Unmatched ')'", token.position)
        raise self._error(f"Expected operator before {token.text!r}", token.position)

    def _parse_or(self) -> Expression:
        operands = [self._parse_and()]
        while (token := self._peek()) is not None and token.kind is TokenKind.OR:
            _ = self._advance()
            operands.append(self._parse_and())
        return make_or(operands)

    def _parse_and(self) -> Expression:
        operands = [self._parse_not()]
        while (token := self._peek()) is not None and token.kind is TokenKind.AND:
            _ = self._advance()
            operands.append(self._parse_not())
        return make_and(operands)

    def _parse_not(self) -> Expression:
        token = self._peek()
        if token is not None and token.kind is TokenKind.NOT:
            self._enter(self._advance())
            operand = self._parse_not()
            self._depth -= 1
            return Not(operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        token = self._peek()
        if token is None:
            raise self._error("Expected tag or '('", len(self._query))

        match token.kind:
            case TokenKind.TAG:
                _ = self._advance()
                return Tag(token.text)
            case TokenKind.LPAREN:
                self._enter(self._advance())
                closing = self._peek()
                if closing is not None and closing.kind is TokenKind.RPAREN:
                    raise self._error("Empty parentheses", closing.position)
                expression = self._parse_or()
                closing = self._peek()
                if closing is None or closing.kind is not TokenKind.RPAREN:
                    raise self._error("Unmatched '('", token.position)
                _ = self._advance()
                self._depth -= 1
                return expression
            case TokenKind.RPAREN:
                raise self._error("Unexpected ')'", token.position)
            case TokenKind.AND | TokenKind.OR | TokenKind.NOT:
                raise self._error(
                    f"Expected tag or '(' but found {token.text!r}", token.position
                )


def parse(query: str) -> Expression:
    """Parse a boolean tag query into an expression tree.

    ``AND`` binds tighter than ``OR`` and ``NOT`` binds tightest. Keywords
    are case-insensitive. Same-operator chains are flattened, so
    ``a AND b AND c`` yields one ``And`` with three children.

    Args:
        query: Query text, such as ``"(ai OR ml) AND NOT draft"``.

    Returns:
        The parsed expression.

    Raises:
        QuerySyntaxError: If the query is empty or malformed. The error
            carries the query and the 0-based position of the problem. Parentheses
            and NOT may nest at most ``MAX_DEPTH`` levels.

    Example:
        >>> parse("ai AND NOT draft")
        And(children=(Tag(name='ai'), Not(child=Tag(name='draft'))))
    """
    tokens = tokenize(query)
    if not tokens:
        raise QuerySyntaxError("Empty query", query=query, position=0)
    return _Parser(query, tokens).parse()
