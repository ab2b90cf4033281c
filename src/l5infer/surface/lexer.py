"""Lexer for the parenthesized L5 surface syntax."""

from __future__ import annotations

import re
from dataclasses import dataclass

from l5infer.utils.location import Location

# Characters that end an atom.
_DELIMITER = r"(?=[\s()\[\];\"]|$)"


class TokenType:
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COLON = "COLON"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    SYMBOL = "SYMBOL"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token.

    `value` is the token text, except for STRING tokens where it is the
    decoded string contents.
    """

    type: str
    value: str
    location: Location

    def __str__(self) -> str:
        return f"{self.type}({self.value!r})"


class LexerError(Exception):
    """Error during tokenization."""

    def __init__(self, message: str, location: Location):
        super().__init__(f"{location}: {message}")
        self.location = location


class Lexer:
    """Tokenizer for L5 source text.

    Square brackets are accepted as parentheses. `;` starts a comment that
    runs to the end of the line. A lone `:` is its own token; it separates a
    binder from its type annotation.
    """

    TOKEN_PATTERNS = [
        ("NEWLINE", r"\n|\r\n?"),
        ("WHITESPACE", r"[ \t\f\v]+"),
        ("COMMENT", r";[^\n]*"),
        ("LPAREN", r"[(\[]"),
        ("RPAREN", r"[)\]]"),
        ("STRING", r'"(?:[^"\\]|\\.)*"'),
        ("UNTERMINATED", r'"'),
        ("BOOLEAN", r"#(?:true|false|t|f)" + _DELIMITER),
        ("NUMBER", r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)" + _DELIMITER),
        ("COLON", r":" + _DELIMITER),
        ("SYMBOL", r"[^\s()\[\];\"#][^\s()\[\];\"]*"),
    ]

    _ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}

    def __init__(self, source: str, filename: str | None = None):
        self.source = source
        self.filename = filename
        self._pattern = re.compile(
            "|".join(f"(?P<{name}>{pattern})" for name, pattern in self.TOKEN_PATTERNS)
        )

    def tokenize(self) -> list[Token]:
        """Convert source text to a token list ending with EOF.

        Raises:
            LexerError: On an unexpected character or unterminated string
        """
        tokens: list[Token] = []
        pos = 0
        loc = Location(1, 1, self.filename)

        while pos < len(self.source):
            match = self._pattern.match(self.source, pos)
            if match is None or match.lastgroup is None:
                raise LexerError(f"Unexpected character: {self.source[pos]!r}", loc)

            kind = match.lastgroup
            text = match.group()

            if kind == "UNTERMINATED":
                raise LexerError("Unterminated string literal", loc)
            if kind == TokenType.STRING:
                tokens.append(Token(kind, self._decode_string(text[1:-1]), loc))
            elif kind not in ("NEWLINE", "WHITESPACE", "COMMENT"):
                tokens.append(Token(kind, text, loc))

            pos = match.end()
            loc = loc.advance(text)

        tokens.append(Token(TokenType.EOF, "", loc))
        return tokens

    def _decode_string(self, body: str) -> str:
        result = []
        i = 0
        while i < len(body):
            char = body[i]
            if char == "\\" and i + 1 < len(body):
                escaped = body[i + 1]
                # Unknown escapes are kept as written.
                result.append(self._ESCAPES.get(escaped, "\\" + escaped))
                i += 2
            else:
                result.append(char)
                i += 1
        return "".join(result)


def lex(source: str, filename: str | None = None) -> list[Token]:
    """Tokenize source code.

    Example:
        >>> [t.type for t in lex("(+ x 1)")]
        ['LPAREN', 'SYMBOL', 'SYMBOL', 'NUMBER', 'RPAREN', 'EOF']
    """
    return Lexer(source, filename).tokenize()
