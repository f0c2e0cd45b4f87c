"""
climb Expression Parser

Parses a flat sequence of climb tokens into a single expression tree.

The grammar, over tokens:

    Program := Exp EOF
    Exp     := Term (BinOp Term)*
    Term    := '-' Term | Primary Postfix*
    Primary := IDENT | NUMLIT | '(' Exp ')'
    Postfix := '(' Exp ')'                      (single-argument call)

`Term` and `Primary` are plain recursive descent. The `(BinOp Term)*` tail is
parsed by precedence climbing (`Parser.parse_binops`): one routine, driven by
`climb_constants.precedence_table`, handles every precedence level and keeps
operators left-associative within a level. Adding an operator or a level
only means editing the table.

Parser Behavior
---------------
- Fails fast: the first violation raises `ParseError` and nothing is returned.
- End of input is either an explicit EOF token or the end of the sequence;
  both are treated the same.
- Recursion depth grows with parenthesis nesting, runs of unary minus and
  chains of rising precedence. Pathologically deep input exhausts the Python
  stack and surfaces as `RecursionError`; this is a resource limit, not a
  parse error, and it is not caught here.

Entry Points
------------
- `parse(tokens)`: parse one complete expression.
- `Parser(tokens).parse()`: the same, on an explicit parser instance.

Raises
------
ParseError
    With `kind` set to UNEXPECTED_TOKEN, MISSING_RPAREN or TRAILING_INPUT.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from climb.climb_ast import Binary, Call, Const, Expr, Ident, Negate
from climb.climb_constants import (
    EOF,
    IDENT,
    LPAREN,
    MIN_PRECEDENCE,
    MINUS,
    NUMLIT,
    RPAREN,
    BinOp,
    Precedence,
    binop_table,
    precedence_table,
)
from climb.climb_errors import ParseError, ParseErrorKind
from climb.climb_lexer import Token

logger = logging.getLogger(__name__)


def precedence_of(token: Token) -> Precedence:
    """Precedence of a token, or Precedence.NONE if it is not a binary operator."""
    return precedence_table.get(token.type, Precedence.NONE)


def binop_of(token: Token) -> BinOp:
    """The BinOp tag for an operator token.

    Only ever called after `precedence_of(token)` reported a real level, so a
    miss here is a bug in the parser, not bad input.
    """
    try:
        return binop_table[token.type]
    except KeyError:
        raise AssertionError(f"binop_of() called on a {token!r} token") from None


class TokenCursor:
    """
    Read-only view of a token sequence plus a position that only moves forward.

    Attributes
    ----------
    tokens : Sequence[Token]
        The input tokens; never modified.
    position : int
        Index of the current token.
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens: Sequence[Token] = tokens
        self.position: int = 0

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return Token.of(EOF)

    def advance(self) -> Token:
        """Steps past the current token and returns it."""
        assert self.position < len(self.tokens), "advanced past end of input"
        tok = self.tokens[self.position]
        self.position += 1
        return tok

    def fail(self, kind: ParseErrorKind) -> ParseError:
        error = ParseError(kind, self.current(), self.position)
        logger.debug("parse failed at token %d: %s", self.position, error)
        return error

    def expect_rparen(self) -> Token:
        if self.current().type != RPAREN:
            raise self.fail(ParseErrorKind.MISSING_RPAREN)
        return self.advance()

    def expect_eof(self) -> None:
        if self.current().type != EOF:
            raise self.fail(ParseErrorKind.TRAILING_INPUT)


class Parser(TokenCursor):
    """
    Precedence-climbing parser for climb expressions.

    A Parser is good for one parse: build a new one (or call the module-level
    `parse`) for every token sequence.

    Methods
    -------
    parse() -> Expr
        Parse one expression and require end of input after it.
    parse_expression() -> Expr
        Exp := Term (BinOp Term)*
    parse_binops(lhs, min_precedence) -> Expr
        Fold binary operators at or above `min_precedence` onto `lhs`.
    parse_term() -> Expr
        Term := '-' Term | Primary Postfix*
    parse_primary() -> Expr
        Primary := IDENT | NUMLIT | '(' Exp ')'
    parse_postfix(lhs) -> Expr
        Postfix* applied to an already-parsed primary.
    """

    def parse(self) -> Expr:
        """Parse a full expression and return its tree."""
        logger.debug("parsing %d tokens", len(self.tokens))
        ret = self.parse_expression()
        self.expect_eof()
        logger.debug("parsed %s", ret.kind)
        return ret

    def parse_expression(self) -> Expr:
        lhs = self.parse_term()
        return self.parse_binops(lhs, MIN_PRECEDENCE)

    def parse_binops(self, lhs: Expr, min_precedence: Precedence) -> Expr:
        """Fold `(BinOp Term)*` onto `lhs` by precedence climbing.

        Non-operator tokens report Precedence.NONE, which is below every
        threshold, so the outer loop doubles as "while looking at a binary
        operator". The inner loop is a `while` rather than an `if` because a
        decreasing chain of tighter operators may follow; each one extends
        the right-hand side before `op` gets to fold it.
        """
        while precedence_of(self.current()).is_at_least(min_precedence):
            op = self.advance()
            op_precedence = precedence_of(op)
            rhs = self.parse_term()

            while precedence_of(self.current()).is_higher_than(op_precedence):
                rhs = self.parse_binops(rhs, precedence_of(self.current()))

            lhs = Binary(binop_of(op), lhs, rhs, line=op.line, col=op.col)

        return lhs

    def parse_term(self) -> Expr:
        tok = self.current()
        if tok.type == MINUS:
            self.advance()
            # `- - x` nests to the right
            operand = self.parse_term()
            return Negate(operand, line=tok.line, col=tok.col)

        primary = self.parse_primary()
        return self.parse_postfix(primary)

    def parse_primary(self) -> Expr:
        tok = self.current()

        if tok.type == IDENT:
            self.advance()
            return Ident(str(tok.value), line=tok.line, col=tok.col)

        if tok.type == NUMLIT:
            self.advance()
            return Const(float(tok.value), line=tok.line, col=tok.col)

        if tok.type == LPAREN:
            self.advance()
            inner = self.parse_expression()
            self.expect_rparen()
            return inner

        raise self.fail(ParseErrorKind.UNEXPECTED_TOKEN)

    def parse_postfix(self, lhs: Expr) -> Expr:
        while self.current().type == LPAREN:
            open_tok = self.advance()
            arg = self.parse_expression()
            self.expect_rparen()
            lhs = Call(lhs, arg, line=open_tok.line, col=open_tok.col)
        return lhs


def parse(tokens: Sequence[Token]) -> Expr:
    """Parse a token sequence into one expression tree.

    Raises:
        ParseError: On the first grammar violation.
    """
    return Parser(tokens).parse()


__all__ = ["Parser", "TokenCursor", "binop_of", "parse", "precedence_of"]
