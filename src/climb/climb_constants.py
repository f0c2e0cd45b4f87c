"""
Shared token and operator tables for the climb expression language.

Tokens are identified by a canonical kind string. Punctuation and operator
kinds map one-to-one to a source symbol; identifiers and numeric literals
carry a payload instead.

Exports:
    - TOKEN_KINDS: every token kind the lexer can produce.
    - token_hashmap: source symbol → token kind.
    - symbol_of: token kind → source symbol.
    - Precedence: binding strength of binary operators.
    - BinOp: binary operator tags stored in the AST.
    - precedence_table / binop_table: kind-keyed lookups used by the parser.
    - format_number: positional decimal rendering shared by tokens and emitters.
"""

import math
from decimal import Decimal
from enum import Enum, IntEnum

EOF = "EOF"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
PLUS = "PLUS"
MINUS = "MINUS"
TIMES = "TIMES"
DIVIDE = "DIVIDE"
MODULO = "MODULO"
IDENT = "IDENT"
NUMLIT = "NUMLIT"

TOKEN_KINDS: tuple[str, ...] = (
    EOF,
    LPAREN,
    RPAREN,
    PLUS,
    MINUS,
    TIMES,
    DIVIDE,
    MODULO,
    IDENT,
    NUMLIT,
)

token_hashmap: dict[str, str] = {
    "(": LPAREN,
    ")": RPAREN,
    "+": PLUS,
    "-": MINUS,
    "*": TIMES,
    "/": DIVIDE,
    "%": MODULO,
}

symbol_of: dict[str, str] = {kind: sym for sym, kind in token_hashmap.items()}
symbol_of[EOF] = ""


class Precedence(IntEnum):
    """Binding strength of binary operators, listed from LOWEST to HIGHEST.

    NONE sits below every real level; it is what non-operator tokens report,
    which is how the expression parser knows to stop folding.
    Unary negation is not listed because it is parsed as part of a term.
    """

    NONE = 0
    ADD = 1
    MUL = 2

    def is_at_least(self, other: "Precedence") -> bool:
        return self >= other

    def is_higher_than(self, other: "Precedence") -> bool:
        return self > other


MIN_PRECEDENCE = Precedence.ADD
"""Lowest real precedence; the threshold for a top-level expression."""


class BinOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    def __str__(self) -> str:
        return self.value

    def apply(self, lhs: float, rhs: float) -> float:
        """Applies the operator with IEEE-754 float semantics.

        Division by zero gives an infinity (or nan for 0/0) and `%` is the
        truncating remainder, which is nan for a zero divisor.
        """
        if self is BinOp.ADD:
            return lhs + rhs
        if self is BinOp.SUB:
            return lhs - rhs
        if self is BinOp.MUL:
            return lhs * rhs
        if self is BinOp.DIV:
            if rhs == 0.0:
                if lhs == 0.0 or math.isnan(lhs):
                    return math.nan
                return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)
            return lhs / rhs
        if rhs == 0.0 or math.isinf(lhs) or math.isnan(lhs) or math.isnan(rhs):
            return math.nan
        return math.fmod(lhs, rhs)


# MINUS maps to ADD here even though it also spells negation: the parser only
# asks for a precedence where a binary operator may appear.
precedence_table: dict[str, Precedence] = {
    PLUS: Precedence.ADD,
    MINUS: Precedence.ADD,
    TIMES: Precedence.MUL,
    DIVIDE: Precedence.MUL,
    MODULO: Precedence.MUL,
}

binop_table: dict[str, BinOp] = {
    PLUS: BinOp.ADD,
    MINUS: BinOp.SUB,
    TIMES: BinOp.MUL,
    DIVIDE: BinOp.DIV,
    MODULO: BinOp.MOD,
}


def format_number(value: float) -> str:
    """Render a float the way the lexer reads numbers back.

    Integral values drop the fractional part and nothing uses exponent
    notation, so every finite non-negative value survives a round trip
    through the lexer unchanged.
    """
    if math.isnan(value) or math.isinf(value):
        return repr(value)
    if value == 0.0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


__all__ = [
    "MIN_PRECEDENCE",
    "TOKEN_KINDS",
    "BinOp",
    "Precedence",
    "binop_table",
    "format_number",
    "precedence_table",
    "symbol_of",
    "token_hashmap",
]
