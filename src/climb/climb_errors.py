"""
Exceptions raised by the climb toolchain.

Classes:
    ParseErrorKind: The closed set of reasons a parse can fail.
    ParseError: Raised by the parsers on the first grammar violation.
    LexError: Raised by the lexer on malformed source text.
    EvalError: Raised by the evaluator on unbound names or bad calls.

Both ParseError and LexError derive from SyntaxError, so callers that only
care about "bad input" can catch SyntaxError.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from climb.climb_lexer import Token


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "unexpected token in primary position"
    MISSING_RPAREN = "missing closing parenthesis"
    TRAILING_INPUT = "trailing input"


_EXPECTED = {
    ParseErrorKind.UNEXPECTED_TOKEN: "an identifier, number, or parenthesized expression",
    ParseErrorKind.MISSING_RPAREN: "a right parenthesis",
    ParseErrorKind.TRAILING_INPUT: "end of input (there's extra stuff after the expression)",
}


def describe_token(token: Token) -> str:
    """Return how a token is shown in diagnostics."""
    if token.type == "EOF":
        return "end of input"
    return f"'{token}'"


class ParseError(SyntaxError):
    """Raised when a token sequence does not match the grammar.

    No partial tree is ever attached: the parse is abandoned at the first
    violation.

    Attributes:
        kind (ParseErrorKind): Which rule was violated.
        token (Token): The token found where something else was expected.
        found (str): Textual rendering of ``token``.
        position (int): Index of ``token`` in the input sequence.
    """

    def __init__(self, kind: ParseErrorKind, token: Token, position: int = 0):
        self.kind = kind
        self.token = token
        self.found = str(token)
        self.position = position
        message = f"expected {_EXPECTED[kind]}, not {describe_token(token)}"
        super().__init__(message)
        if token.line:
            self.lineno = token.line
            self.offset = token.col

    def __str__(self) -> str:
        return str(self.msg)


class LexError(SyntaxError):
    """Raised when the lexer meets text that is not a valid token.

    Attributes:
        line (int): 1-based line of the offending character.
        col (int): 1-based column of the offending character.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        super().__init__(f"{message} at line {line}, col {col}")
        self.line = line
        self.col = col

    def __str__(self) -> str:
        return str(self.msg)


class EvalError(Exception):
    """Raised when a well-formed tree cannot be evaluated.

    Example:
        raise EvalError("unbound name 'x'", name="x")
    """

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


__all__ = ["EvalError", "LexError", "ParseError", "ParseErrorKind", "describe_token"]
