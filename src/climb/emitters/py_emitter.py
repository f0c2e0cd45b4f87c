"""
Translates climb AST nodes into an equivalent Python expression.

The output is a single expression that can be passed to `eval` with `math`
and the names used by the tree in scope.

Behavior:
    - `%` becomes `math.fmod(...)`, because climb's remainder truncates toward
      zero (sign of the dividend) while Python's `%` floors.
    - Non-finite constants become `math.inf` / `math.nan`.
    - Calls stay calls; chained calls stay chained: `f(x)(y)`.

Note that Python raises ZeroDivisionError where climb's evaluator returns an
infinity, so the emitted code only agrees with `Evaluator` on inputs that
never divide by zero.
"""

import math

from climb.climb_ast import ASTNode, Binary, Call, Const, Ident, Negate
from climb.climb_constants import BinOp, format_number


class PythonEmitter:
    """Emits Python expressions from climb AST nodes.

    Attributes:
        lines (list[str]): Accumulated lines of emitted Python code.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        """
        Returns the emitted Python code as a single string.

        Returns
        -------
        str
            The joined lines of Python code.
        """
        return "\n".join(self.lines)

    def emit_expr(self, node: ASTNode) -> str:
        """
        Emits a Python expression for any expression node.

        Parameters
        ----------
        node : ASTNode
            The node to translate.

        Returns
        -------
        str
            Python source for the node.

        Raises
        ------
        NotImplementedError
            If the node kind has no emitter.
        """
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"Unhandled expression kind: {node.kind}")
        return str(method(node))

    def emit_const(self, node: Const) -> str:
        if math.isnan(node.value):
            return "math.nan"
        if math.isinf(node.value):
            return "math.inf" if node.value > 0 else "(-math.inf)"
        text = format_number(node.value)
        return f"({text})" if text.startswith("-") else text

    def emit_ident(self, node: Ident) -> str:
        return node.name

    def emit_negate(self, node: Negate) -> str:
        return f"(-{self.emit_expr(node.operand)})"

    def emit_binary(self, node: Binary) -> str:
        """
        Emits a binary arithmetic expression (+, -, *, /, %) as Python syntax.

        Parameters
        ----------
        node : Binary
            A binary node with an operator tag and two operands.

        Returns
        -------
        str
            The emitted Python expression.
        """
        left = self.emit_expr(node.lhs)
        right = self.emit_expr(node.rhs)
        if node.op is BinOp.MOD:
            return f"math.fmod({left}, {right})"
        return f"({left} {node.op} {right})"

    def emit_call(self, node: Call) -> str:
        return f"{self.emit_expr(node.callee)}({self.emit_expr(node.arg)})"
