"""Tests for query tokenizing and parsing."""

import pytest

from promptshelf.exceptions import QuerySyntaxError
from promptshelf.query import MAX_DEPTH, And, Not, Or, Tag, TokenKind, parse, tokenize


class TestTokenize:
    def test_kinds_and_positions(self) -> None:
        tokens = tokenize("ai AND (NOT draft)")

        assert [(t.kind, t.text, t.position) for t in tokens] == [
            (TokenKind.TAG, "ai", 0),
            (TokenKind.AND, "AND", 3),
            (TokenKind.LPAREN, "(", 7),
            (TokenKind.NOT, "NOT", 8),
            (TokenKind.TAG, "draft", 12),
            (TokenKind.RPAREN, ")", 17),
        ]

    @pytest.mark.parametrize("keyword", ["and", "And", "AND", "aNd"])
    def test_keywords_are_case_insensitive(self, keyword: str) -> None:
        assert tokenize(keyword)[0].kind is TokenKind.AND

    @pytest.mark.parametrize("word", ["android", "order", "nothing", "sand", "ORacle"])
    def test_keyword_prefixes_are_tags(self, word: str) -> None:
        tokens = tokenize(word)

        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.TAG
        assert tokens[0].text == word

    def test_parentheses_split_words(self) -> None:
        assert [t.text for t in tokenize("(a)OR(b)")] == ["(", "a", ")", "OR", "(", "b", ")"]

    def test_blank_input(self) -> None:
        assert tokenize("  \t\n") == []


class TestParse:
    def test_single_tag(self) -> None:
        assert parse("ai") == Tag("ai")

    def test_and_binds_tighter_than_or(self) -> None:
        assert parse("a OR b AND c") == Or((Tag("a"), And((Tag("b"), Tag("c")))))
        assert parse("a AND b OR c") == Or((And((Tag("a"), Tag("b"))), Tag("c")))

    def test_not_binds_tightest(self) -> None:
        assert parse("NOT a AND b") == And((Not(Tag("a")), Tag("b")))

    def test_double_negation(self) -> None:
        assert parse("NOT NOT a") == Not(Not(Tag("a")))

    def test_parentheses_override_precedence(self) -> None:
        assert parse("(a OR b) AND c") == And((Or((Tag("a"), Tag("b"))), Tag("c")))

    def test_flattens_same_operator_chains(self) -> None:
        expected = And((Tag("a"), Tag("b"), Tag("c")))

        assert parse("a AND b AND c") == expected
        assert parse("(a AND b) AND c") == expected
        assert parse("a AND (b AND c)") == expected

    def test_redundant_parentheses(self) -> None:
        assert parse("((ai))") == Tag("ai")

    def test_lowercase_keywords(self) -> None:
        assert parse("ai and not draft") == And((Tag("ai"), Not(Tag("draft"))))

    def test_tag_named_like_keyword_prefix(self) -> None:
        assert parse("keyword AND android") == And((Tag("keyword"), Tag("android")))


class TestParseErrors:
    @pytest.mark.parametrize("query", ["", "   "])
    def test_empty(self, query: str) -> None:
        with pytest.raises(QuerySyntaxError) as exc_info:
            _ = parse(query)

        assert exc_info.value.position == 0
        assert exc_info.value.query == query

    def test_unmatched_open_paren(self) -> None:
        with pytest.raises(QuerySyntaxError, match="Unmatched '\\('") as exc_info:
            _ = parse("(a AND b")

        assert exc_info.value.position == 0

    def test_unmatched_close_paren(self) -> None:
        with pytest.raises(QuerySyntaxError, match="Unmatched '\\)'") as exc_info:
            _ = parse("a AND b)")

        assert exc_info.value.position == 7

    def test_missing_right_operand(self) -> None:
        with pytest.raises(QuerySyntaxError) as exc_info:
            _ = parse("a AND")

        assert exc_info.value.position == len("a AND")

    def test_missing_left_operand(self) -> None:
        with pytest.raises(QuerySyntaxError) as exc_info:
            _ = parse("OR b")

        assert exc_info.value.position == 0

    def test_adjacent_operands(self) -> None:
        with pytest.raises(QuerySyntaxError, match="Expected operator") as exc_info:
            _ = parse("a b")

        assert exc_info.value.position == 2

    def test_empty_parentheses(self) -> None:
        with pytest.raises(QuerySyntaxError, match="Empty parentheses") as exc_info:
            _ = parse("a AND ()")

        assert exc_info.value.position == 7

    def test_dangling_not(self) -> None:
        with pytest.raises(QuerySyntaxError):
            _ = parse("a AND NOT")

    def test_deep_parentheses(self) -> None:
        with pytest.raises(QuerySyntaxError, match="nested too deeply") as exc_info:
            _ = parse("(" * 400 + "a")

        assert exc_info.value.position == MAX_DEPTH

    def test_long_not_chain(self) -> None:
        with pytest.raises(QuerySyntaxError, match="nested too deeply"):
            _ = parse("NOT " * 400 + "a")

    def test_nesting_at_limit_is_accepted(self) -> None:
        query = "(" * MAX_DEPTH + "a" + ")" * MAX_DEPTH

        assert parse(query) == Tag("a")
        assert parse("NOT " * MAX_DEPTH + "a") is not None

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="position"):
            _ = parse("(")
