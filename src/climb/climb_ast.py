"""
Defines the abstract syntax tree (AST) for the climb expression language.

The tree is a closed set of variants, one frozen dataclass each:

    Const(value)              a numeric literal
    Ident(name)               a bare name
    Negate(operand)           unary minus
    Binary(op, lhs, rhs)      `+ - * / %`
    Call(callee, arg)         single-argument call, `f(x)`

`Expr` is the union of the five. Every node exclusively owns its children, so
a tree has no sharing and no back-references; nodes cannot be mutated after
construction and `clone()` returns an independent deep copy.

Nodes remember the source position of the token that produced them (`line`,
`col`), but positions do not take part in equality: two trees compare equal
when they have the same shape and payloads.

Builders (`num`, `ident`, `neg`, `add`, `sub`, `mul`, `div`, `mod`, `bin_`,
`call`) keep hand-written trees in tests and tools short:

    >>> add(ident("a"), mul(ident("b"), ident("c")))
    Binary(op=<BinOp.ADD: '+'>, lhs=Ident(name='a'), rhs=Binary(...))
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, TypedDict, Union

from climb.climb_constants import BinOp


class ASTDict(TypedDict, total=False):
    """
    Serialized form of an AST node, as produced by `ASTNode.to_dict()`.

    Only the fields belonging to the node's variant are present, plus `kind`,
    `line` and `col`.
    """

    kind: str
    line: int
    col: int
    value: float
    name: str
    op: str
    operand: "ASTDict"
    lhs: "ASTDict"
    rhs: "ASTDict"
    callee: "ASTDict"
    arg: "ASTDict"


@dataclass(frozen=True)
class ASTNode:
    """Common base of the AST variants. Never instantiated directly."""

    line: int = field(default=0, compare=False, repr=False, kw_only=True)
    col: int = field(default=0, compare=False, repr=False, kw_only=True)

    kind = "node"

    def children(self) -> tuple["Expr", ...]:
        return ()

    def clone(self) -> "Expr":
        return copy.deepcopy(self)  # type: ignore[return-value]

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": self.kind, "line": self.line, "col": self.col}
        data.update(self._payload())
        return data  # type: ignore[return-value]

    def _payload(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class Const(ASTNode):
    value: float

    kind = "const"

    def _payload(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class Ident(ASTNode):
    name: str

    kind = "ident"

    def _payload(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Negate(ASTNode):
    operand: "Expr"

    kind = "negate"

    def children(self) -> tuple["Expr", ...]:
        return (self.operand,)

    def _payload(self) -> dict[str, Any]:
        return {"operand": self.operand.to_dict()}


@dataclass(frozen=True)
class Binary(ASTNode):
    op: BinOp
    lhs: "Expr"
    rhs: "Expr"

    kind = "binary"

    def children(self) -> tuple["Expr", ...]:
        return (self.lhs, self.rhs)

    def _payload(self) -> dict[str, Any]:
        return {"op": self.op.value, "lhs": self.lhs.to_dict(), "rhs": self.rhs.to_dict()}


@dataclass(frozen=True)
class Call(ASTNode):
    callee: "Expr"
    arg: "Expr"

    kind = "call"

    def children(self) -> tuple["Expr", ...]:
        return (self.callee, self.arg)

    def _payload(self) -> dict[str, Any]:
        return {"callee": self.callee.to_dict(), "arg": self.arg.to_dict()}


Expr = Union[Const, Ident, Negate, Binary, Call]
"""The closed set of expression nodes."""


def num(value: float) -> Const:
    return Const(float(value))


def ident(name: str) -> Ident:
    return Ident(name)


def neg(operand: Expr) -> Negate:
    return Negate(operand)


def bin_(lhs: Expr, op: BinOp, rhs: Expr) -> Binary:
    return Binary(op, lhs, rhs)


def add(lhs: Expr, rhs: Expr) -> Binary:
    return Binary(BinOp.ADD, lhs, rhs)


def sub(lhs: Expr, rhs: Expr) -> Binary:
    return Binary(BinOp.SUB, lhs, rhs)


def mul(lhs: Expr, rhs: Expr) -> Binary:
    return Binary(BinOp.MUL, lhs, rhs)


def div(lhs: Expr, rhs: Expr) -> Binary:
    return Binary(BinOp.DIV, lhs, rhs)


def mod(lhs: Expr, rhs: Expr) -> Binary:
    return Binary(BinOp.MOD, lhs, rhs)


def call(callee: Expr, arg: Expr) -> Call:
    return Call(callee, arg)


def reciprocal(node: Expr) -> Binary:
    """Builds the reciprocal of `node` without touching `node` itself.

    A division `a / b` flips to `b / a`; anything else becomes `1 / node`.
    """
    if isinstance(node, Binary) and node.op is BinOp.DIV:
        return div(node.rhs.clone(), node.lhs.clone())
    return div(num(1), node.clone())


def walk(node: Expr) -> list[Expr]:
    """Returns every node of the tree in pre-order."""
    out: list[Expr] = [node]
    for child in node.children():
        out.extend(walk(child))
    return out


__all__ = [
    "ASTDict",
    "ASTNode",
    "Binary",
    "Call",
    "Const",
    "Expr",
    "Ident",
    "Negate",
    "add",
    "bin_",
    "call",
    "div",
    "ident",
    "mod",
    "mul",
    "neg",
    "num",
    "reciprocal",
    "sub",
    "walk",
]
