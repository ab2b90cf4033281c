"""Tests for the lexer."""

import pytest

from l5infer.surface.lexer import LexerError, TokenType, lex
from l5infer.utils.location import Location


def _types(source: str) -> list[str]:
    return [t.type for t in lex(source)]


def _values(source: str) -> list[str]:
    return [t.value for t in lex(source)][:-1]


class TestTokens:
    """Tests for individual token kinds."""

    def test_application(self):
        assert _types("(+ x 1)") == [
            TokenType.LPAREN,
            TokenType.SYMBOL,
            TokenType.SYMBOL,
            TokenType.NUMBER,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_brackets_are_parens(self):
        assert _types("[x]") == [TokenType.LPAREN, TokenType.SYMBOL, TokenType.RPAREN, TokenType.EOF]

    @pytest.mark.parametrize("source", ["0", "42", "-7", "+3", "2.5", "-0.25", ".5", "1."])
    def test_numbers(self, source):
        tokens = lex(source)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == source

    @pytest.mark.parametrize("source", ["+", "-", "1abc", "string=?", "->", "*", "set!"])
    def test_symbols(self, source):
        tokens = lex(source)
        assert tokens[0].type == TokenType.SYMBOL
        assert tokens[0].value == source

    @pytest.mark.parametrize("source", ["#t", "#f", "#true", "#false"])
    def test_booleans(self, source):
        assert lex(source)[0].type == TokenType.BOOLEAN

    def test_colon_separated(self):
        assert _types("x : number") == [
            TokenType.SYMBOL,
            TokenType.COLON,
            TokenType.SYMBOL,
            TokenType.EOF,
        ]

    def test_colon_inside_symbol(self):
        tokens = lex("x:y")
        assert tokens[0].type == TokenType.SYMBOL
        assert tokens[0].value == "x:y"

    def test_string_is_decoded(self):
        token = lex(r'"a\"b\nc"')[0]
        assert token.type == TokenType.STRING
        assert token.value == 'a"b\nc'

    def test_unknown_escape_kept(self):
        assert lex(r'"\q"')[0].value == "\\q"

    def test_comments_and_whitespace_skipped(self):
        assert _values("; a comment\n(f ; trailing\n x)") == ["(", "f", "x", ")"]

    def test_empty_input(self):
        assert _types("") == [TokenType.EOF]


class TestLocations:
    """Tokens carry their 1-based position."""

    def test_first_token(self):
        assert lex("x")[0].location == Location(1, 1)

    def test_across_lines(self):
        tokens = lex("(+ x\n  1)")
        one = tokens[3]
        assert one.value == "1"
        assert one.location == Location(2, 3)

    def test_filename(self):
        token = lex("x", filename="a.l5")[0]
        assert str(token.location) == "a.l5:1:1"


class TestErrors:
    """Tests for lexer failures."""

    def test_unterminated_string(self):
        with pytest.raises(LexerError, match="Unterminated string"):
            lex('(f "abc')

    @pytest.mark.parametrize("source", ["#x", "#tx"])
    def test_bad_hash(self, source):
        with pytest.raises(LexerError, match="Unexpected character"):
            lex(source)

    def test_error_location(self):
        with pytest.raises(LexerError) as exc_info:
            lex('x\n  "oops')
        assert exc_info.value.location == Location(2, 3)
