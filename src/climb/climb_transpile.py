"""
Provides the `Transpiler` class and emitter interface for rendering climb ASTs as code.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters.
    - TextEmitter: Fully-parenthesized climb source; re-parses to an equal value.
    - PythonEmitter: An equivalent Python expression.
    - Transpiler: Picks the emitter for a target ("text", "py") and dispatches
      nodes to its `emit_*` methods.

Example:
    >>> Transpiler("text").transpile(parse(tokenize("a + b * c")))
    '(a + (b * c))'

Raises:
    ValueError: If the target language is not supported.
    TypeError: If given something that is not an AST node.
    NotImplementedError: If the emitter lacks an `emit_*` method for a node kind.
"""

from typing import Protocol

from climb.climb_ast import ASTNode
from climb.emitters.py_emitter import PythonEmitter
from climb.emitters.text_emitter import TextEmitter


class Emitter(Protocol):  # pragma: no cover
    """Protocol for climb emitters.

    Attributes:
        lines (list[str]): Emitted output, one expression per line.
    """

    lines: list[str]

    def __init__(self) -> None: ...  # pragma: no cover

    def emit_expr(self, node: ASTNode) -> str: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "text": TextEmitter,
    "infix": TextEmitter,
    "py": PythonEmitter,
    "python": PythonEmitter,
}


class Transpiler:
    """Dispatches climb AST nodes to the emitter for a target language.

    Attributes:
        target (str): The normalized target name.
        emitter (Emitter): The selected emitter instance.
    """

    def __init__(self, target: str) -> None:
        """
        Args:
            target: The desired output language ("text", "py", ...).

        Raises:
            ValueError: If the target language is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown transpilation target: {target!r}")
        self.target = target
        self.emitter: Emitter = EMITTERS[target]()

    def transpile(self, *nodes: ASTNode) -> str:
        """Renders each node on its own line and returns the emitter output.

        Raises:
            TypeError: If any argument is not an ASTNode.
        """
        if not all(isinstance(node, ASTNode) for node in nodes):
            raise TypeError("All items to transpile must be ASTNode instances.")
        for node in nodes:
            self.emitter.lines.append(self._visit(node))
        return self.emitter.get_output()

    def _visit(self, node: ASTNode) -> str:
        method_name = f"emit_{node.kind}"
        if not hasattr(self.emitter, method_name):
            raise NotImplementedError(
                f"No emitter method for node kind '{node.kind}' "
                f"(line {node.line}, col {node.col})"
            )
        return str(getattr(self.emitter, method_name)(node))


def render(node: ASTNode, target: str = "text") -> str:
    """Shortcut for rendering a single node."""
    return Transpiler(target).transpile(node)


__all__ = ["EMITTERS", "Emitter", "Transpiler", "render"]
