"""
Bracket-delimited list grammar over climb tokens.

A much smaller sibling of the expression parser, with no operators and no
precedence:

    Program  := Exp EOF
    Exp      := IDENT | NUMLIT | ParenExp
    ParenExp := '(' Exp+ ')'

so `(add 3 (sub x y))` becomes
`ListExpr((Ident('add'), Const(3.0), ListExpr((Ident('sub'), Ident('x'), Ident('y')))))`.

Errors use the same `ParseError` taxonomy as the expression parser. An empty
list `()` is an UNEXPECTED_TOKEN error, because at least one item is
required.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from climb.climb_ast import Const, Ident
from climb.climb_constants import EOF, IDENT, LPAREN, NUMLIT, RPAREN, format_number
from climb.climb_errors import ParseErrorKind
from climb.climb_lexer import Token
from climb.climb_parser import TokenCursor


@dataclass(frozen=True)
class ListExpr:
    """A parenthesized list of one or more items."""

    items: tuple["ListItem", ...]
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)

    kind = "list"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "line": self.line,
            "col": self.col,
            "items": [item.to_dict() for item in self.items],
        }


ListItem = Union[Ident, Const, ListExpr]


class ListParser(TokenCursor):
    """Recursive-descent parser for the list grammar."""

    def parse(self) -> ListItem:
        ret = self.parse_item()
        self.expect_eof()
        return ret

    def parse_item(self) -> ListItem:
        tok = self.current()
        if tok.type == IDENT:
            self.advance()
            return Ident(str(tok.value), line=tok.line, col=tok.col)
        if tok.type == NUMLIT:
            self.advance()
            return Const(float(tok.value), line=tok.line, col=tok.col)
        if tok.type == LPAREN:
            return self.parse_list()
        raise self.fail(ParseErrorKind.UNEXPECTED_TOKEN)

    def parse_list(self) -> ListExpr:
        open_tok = self.advance()
        items = [self.parse_item()]
        while self.current().type not in (RPAREN, EOF):
            items.append(self.parse_item())
        self.expect_rparen()
        return ListExpr(tuple(items), line=open_tok.line, col=open_tok.col)


def parse_list(tokens: Sequence[Token]) -> ListItem:
    """Parse a token sequence with the list grammar.

    Raises:
        ParseError: On the first grammar violation.
    """
    return ListParser(tokens).parse()


def render_list(item: ListItem) -> str:
    """Renders a parsed list back to source form, e.g. `(add 3 x)`."""
    if isinstance(item, ListExpr):
        return "(" + " ".join(render_list(i) for i in item.items) + ")"
    if isinstance(item, Ident):
        return item.name
    return format_number(item.value)


__all__ = ["ListExpr", "ListItem", "ListParser", "parse_list", "render_list"]
