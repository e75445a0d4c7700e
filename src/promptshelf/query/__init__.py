"""Boolean tag queries and fuzzy text filtering.

Example:
    >>> from promptshelf.query import evaluate, parse, query_string
    >>> expression = parse("(ai OR ml) AND NOT draft")
    >>> evaluate(expression, ["ML", "analysis"])
    True
    >>> query_string(expression)
    '(ai OR ml) AND NOT draft'
"""

from promptshelf.exceptions import QuerySyntaxError
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
from promptshelf.query._evaluator import (
    evaluate,
    expression_from_dict,
    expression_to_dict,
    normalize_tag,
    normalize_tags,
    query_string,
)
from promptshelf.query._lexer import Token, TokenKind, tokenize
from promptshelf.query._parser import parse
from promptshelf.query._text import fuzzy_filter, fuzzy_score

__all__ = [
    "MAX_DEPTH",
    "And",
    "Expression",
    "Not",
    "Or",
    "QuerySyntaxError",
    "Tag",
    "Token",
    "TokenKind",
    "evaluate",
    "expression_from_dict",
    "expression_to_dict",
    "fuzzy_filter",
    "fuzzy_score",
    "make_and",
    "make_or",
    "normalize_tag",
    "normalize_tags",
    "parse",
    "query_string",
    "tokenize",
]
