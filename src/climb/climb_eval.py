"""
Tree-walking evaluator for climb expressions.

Arithmetic follows IEEE-754 doubles (see `BinOp.apply`): dividing by zero
gives an infinity or nan instead of raising. Identifiers are looked up first
in the name bindings, then in the function table, so `f(x)` works whenever
`f` resolves to a Python callable. Since calls take one argument and return
a value, `f(x)(y)` needs `f(x)` to return a callable.

Example:
    >>> Evaluator.with_defaults({"x": 2.0}).evaluate(parse(tokenize("sqrt(x * 8) + 1")))
    5.0
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from typing import Any

from climb.climb_ast import Binary, Call, Const, Expr, Ident, Negate
from climb.climb_errors import EvalError

logger = logging.getLogger(__name__)

DEFAULT_NAMES: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
    "inf": math.inf,
}

DEFAULT_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "sqrt": math.sqrt,
    "abs": abs,
    "exp": math.exp,
    "ln": math.log,
    "log10": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "floor": lambda x: float(math.floor(x)),
    "ceil": lambda x: float(math.ceil(x)),
}


class Evaluator:
    """Evaluates expression trees against an environment.

    Attributes:
        names (dict[str, Any]): Name → value bindings (numbers or callables).
        functions (dict[str, Callable]): Name → single-argument function.
    """

    def __init__(
        self,
        names: Mapping[str, Any] | None = None,
        functions: Mapping[str, Callable[[Any], Any]] | None = None,
    ) -> None:
        self.names: dict[str, Any] = dict(names or {})
        self.functions: dict[str, Callable[[Any], Any]] = dict(functions or {})

    @classmethod
    def with_defaults(cls, bindings: Mapping[str, Any] | None = None) -> "Evaluator":
        """An evaluator preloaded with the math constants and functions."""
        names: dict[str, Any] = dict(DEFAULT_NAMES)
        names.update(bindings or {})
        return cls(names, DEFAULT_FUNCTIONS)

    def bind(self, name: str, value: Any) -> None:
        self.names[name] = value

    def evaluate(self, node: Expr) -> Any:
        if isinstance(node, Const):
            return node.value
        if isinstance(node, Ident):
            return self.lookup(node.name)
        if isinstance(node, Negate):
            return -self._number(self.evaluate(node.operand), node)
        if isinstance(node, Binary):
            lhs = self._number(self.evaluate(node.lhs), node)
            rhs = self._number(self.evaluate(node.rhs), node)
            return node.op.apply(lhs, rhs)
        if isinstance(node, Call):
            return self._call(node)
        raise TypeError(f"Not an expression node: {node!r}")

    def lookup(self, name: str) -> Any:
        if name in self.names:
            return self.names[name]
        if name in self.functions:
            return self.functions[name]
        raise EvalError(f"unbound name '{name}'", name=name)

    def _call(self, node: Call) -> Any:
        callee = self.evaluate(node.callee)
        if not callable(callee):
            raise EvalError(f"cannot call a {type(callee).__name__} value")
        arg = self.evaluate(node.arg)
        try:
            return callee(arg)
        except (ValueError, OverflowError, TypeError) as e:
            logger.debug("call at line %d, col %d failed: %s", node.line, node.col, e)
            raise EvalError(f"call failed: {e}") from e

    @staticmethod
    def _number(value: Any, node: Expr) -> float:
        if callable(value):
            raise EvalError(f"a function is not a number (line {node.line}, col {node.col})")
        return float(value)


def evaluate(node: Expr, bindings: Mapping[str, Any] | None = None) -> Any:
    """Evaluates `node` with the default environment plus `bindings`."""
    return Evaluator.with_defaults(bindings).evaluate(node)


__all__ = ["DEFAULT_FUNCTIONS", "DEFAULT_NAMES", "Evaluator", "evaluate"]
