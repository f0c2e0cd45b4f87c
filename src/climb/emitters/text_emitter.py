"""
Renders climb AST nodes back to climb source, fully parenthesized.

Every binary operation, negation and call gets its own parentheses, so the
output never depends on precedence or associativity to be read back:

    a + b * c      ->  (a + (b * c))
    - - x          ->  -(-(x))
    f(x)(y)        ->  ((f(x))(y))
    (-f)(x)        ->  ((-(f))(x))

Numbers go through `format_number`, which never uses exponent notation; for
any finite non-negative constant the text lexes back to the same float.
"""

from climb.climb_ast import ASTNode, Binary, Call, Const, Ident, Negate
from climb.climb_constants import format_number


class TextEmitter:
    """Emits fully-parenthesized climb source.

    Attributes:
        lines (list[str]): Accumulated rendered expressions.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def emit_expr(self, node: ASTNode) -> str:
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"Cannot render node kind '{node.kind}'")
        return str(method(node))

    def emit_const(self, node: Const) -> str:
        return format_number(node.value)

    def emit_ident(self, node: Ident) -> str:
        return node.name

    def emit_negate(self, node: Negate) -> str:
        return f"-({self.emit_expr(node.operand)})"

    def emit_binary(self, node: Binary) -> str:
        return f"({self.emit_expr(node.lhs)} {node.op} {self.emit_expr(node.rhs)})"

    def emit_call(self, node: Call) -> str:
        callee = self.emit_expr(node.callee)
        if isinstance(node.callee, Negate):
            # `-(f)(x)` would read back as `-(f(x))`
            callee = f"({callee})"
        return f"({callee}({self.emit_expr(node.arg)}))"
