"""
Lexical analyzer for the climb expression language.

This module turns raw source text into the flat token sequence the parsers
consume:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with kind, payload, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Recognizes:
        * Identifiers (`[A-Za-z_][A-Za-z0-9_]*`)
        * Numbers (`123`, `4.5`, `6.`), stored as floats
        * The operators `+ - * / %` and parentheses

Raises:
    LexError: On malformed numbers or characters outside the language.

Example:
    >>> tokenize("f(x) + 1")
    [Token(IDENT, 'f'), Token(LPAREN, '('), Token(IDENT, 'x'), Token(RPAREN, ')'),
     Token(PLUS, '+'), Token(NUMLIT, 1.0), Token(EOF, '')]

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from typing import Any

from climb.climb_constants import (
    EOF,
    IDENT,
    NUMLIT,
    format_number,
    symbol_of,
    token_hashmap,
)
from climb.climb_errors import LexError


class CharacterStream:
    """
    Reads characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """A single lexical token.

    Tokens are immutable once built. Identifiers carry their name, numeric
    literals a float, and every other kind carries its source symbol.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'NUMLIT', 'PLUS', 'EOF').
        value (str | float): The token payload.
        line (int): The 1-based line number where the token appears (0 if unknown).
        col (int): The 1-based column number where the token starts (0 if unknown).
    """

    __slots__ = ("type", "value", "line", "col")

    def __init__(self, type_: str, value: str | float, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (Token, (self.type, self.value, self.line, self.col))

    @classmethod
    def of(cls, type_: str, line: int = 0, col: int = 0) -> "Token":
        """Builds a payload-free token (operator, parenthesis, or EOF)."""
        return cls(type_, symbol_of[type_], line, col)

    @classmethod
    def ident(cls, name: str, line: int = 0, col: int = 0) -> "Token":
        return cls(IDENT, name, line, col)

    @classmethod
    def num(cls, value: float, line: int = 0, col: int = 0) -> "Token":
        return cls(NUMLIT, float(value), line, col)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"

    def __str__(self) -> str:
        """Source rendering of the token; EOF renders as the empty string."""
        if self.type == NUMLIT:
            return format_number(float(self.value))
        return str(self.value)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the climb language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Once the source is exhausted every further call returns an EOF token.

        Raises:
            LexError: If a malformed number or an unknown character is encountered.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token.of(EOF, line, col)

        ch = self.peek()

        # 1. Identifier
        if ch.isascii() and (ch.isalpha() or ch == "_"):
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isascii() and (self.peek().isalnum() or self.peek() == "_")
            ):
                ident += self.advance()
            return Token.ident(ident, line, col)

        # 2. Number
        if ch.isascii() and ch.isdigit():
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                (self.peek().isascii() and self.peek().isdigit()) or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        raise LexError("Invalid number format", line, col)
                    has_dot = True
                num += self.advance()
            return Token.num(float(num), line, col)

        # 3. Operator or parenthesis
        if ch in token_hashmap:
            return Token(token_hashmap[ch], self.advance(), line, col)

        raise LexError(f"Unexpected character {ch!r}", line, col)

    def tokens(self) -> list[Token]:
        """Lexes the rest of the stream, including the trailing EOF token."""
        result: list[Token] = []
        while True:
            tok = self.next_token()
            result.append(tok)
            if tok.type == EOF:
                return result


def tokenize(source: str) -> list[Token]:
    """Lexes a whole source string into tokens terminated by EOF."""
    return Lexer(CharacterStream(source)).tokens()


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
