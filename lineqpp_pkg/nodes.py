"""Expression tree nodes built by the expression builder.

Each node owns its children; trees are never shared between statements.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union


class NodeKind(Enum):
    """Canonical operator vocabulary understood by every engine."""

    SUM = "sum"
    DIFFERENCE = "difference"
    PRODUCT = "product"
    QUOTIENT = "quotient"
    EXPONENT = "exponentiation"
    EQUATION = "equation"
    NEGATION = "negation"
    APPLICATION = "application"
    MEDIATION = "mediation"

    @property
    def arity(self) -> int:
        if self is NodeKind.NEGATION:
            return 1
        if self is NodeKind.MEDIATION:
            return 3
        return 2


BINARY_KINDS = frozenset(
    {
        NodeKind.SUM,
        NodeKind.DIFFERENCE,
        NodeKind.PRODUCT,
        NodeKind.QUOTIENT,
        NodeKind.EXPONENT,
        NodeKind.EQUATION,
    }
)

_SYMBOLS = {
    NodeKind.SUM: "+",
    NodeKind.DIFFERENCE: "-",
    NodeKind.PRODUCT: "*",
    NodeKind.QUOTIENT: "/",
    NodeKind.EXPONENT: "^",
    NodeKind.EQUATION: "=",
}


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True, eq=False)
class AnonymousVariable:
    """An unnamed unknown; every instance is a distinct variable."""


@dataclass(frozen=True)
class NumberLiteral:
    value: float


@dataclass(frozen=True)
class Application:
    callee: "ExpressionNode"
    argument: "ExpressionNode"


@dataclass(frozen=True)
class Mediation:
    """``condition[consequent, alternative]``, the point ``condition`` of the way between them."""

    condition: "ExpressionNode"
    consequent: "ExpressionNode"
    alternative: "ExpressionNode"


@dataclass(frozen=True)
class BinaryOp:
    kind: NodeKind
    left: "ExpressionNode"
    right: "ExpressionNode"


@dataclass(frozen=True)
class Negation:
    operand: "ExpressionNode"


ExpressionNode = Union[
    Variable,
    AnonymousVariable,
    NumberLiteral,
    Application,
    Mediation,
    BinaryOp,
    Negation,
]


def make_node(kind: NodeKind, operands: list) -> ExpressionNode:
    """Build the node for ``kind`` from operands given in push order."""
    if len(operands) != kind.arity:
        raise ValueError(
            f"{kind.value} takes {kind.arity} operand(s), got {len(operands)}"
        )
    if kind is NodeKind.NEGATION:
        return Negation(operands[0])
    if kind is NodeKind.APPLICATION:
        return Application(operands[0], operands[1])
    if kind is NodeKind.MEDIATION:
        return Mediation(operands[0], operands[1], operands[2])
    return BinaryOp(kind, operands[0], operands[1])


def is_equation(node: object) -> bool:
    return isinstance(node, BinaryOp) and node.kind is NodeKind.EQUATION


def children(node: ExpressionNode) -> tuple:
    """Direct subtrees of ``node``, left to right."""
    if isinstance(node, Negation):
        return (node.operand,)
    if isinstance(node, Application):
        return (node.callee, node.argument)
    if isinstance(node, Mediation):
        return (node.condition, node.consequent, node.alternative)
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    return ()


def fold(node: ExpressionNode, combine: Callable[[ExpressionNode, list], Any]) -> Any:
    """Post-order reduction of a tree without recursion.

    ``combine(node, results)`` receives the already reduced children of
    ``node`` in left-to-right order. Left-deep trees from long sums can
    be thousands of levels deep, so the walk keeps its own stack.
    """
    results: list = []
    work = [(node, False)]
    while work:
        current, expanded = work.pop()
        subtrees = children(current)
        if subtrees and not expanded:
            work.append((current, True))
            work.extend((child, False) for child in reversed(subtrees))
            continue
        if subtrees:
            operands = results[-len(subtrees) :]
            del results[-len(subtrees) :]
        else:
            operands = []
        results.append(combine(current, operands))
    return results[0]


def _show(node: ExpressionNode, parts: list) -> str:
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, AnonymousVariable):
        return "whatever"
    if isinstance(node, NumberLiteral):
        return f"{node.value:g}"
    if isinstance(node, Negation):
        return f"-{parts[0]}"
    if isinstance(node, Application):
        return f"{parts[0]}({parts[1]})"
    if isinstance(node, Mediation):
        return f"{parts[0]}[{parts[1]}, {parts[2]}]"
    if node.kind is NodeKind.EQUATION:
        return f"{parts[0]} = {parts[1]}"
    return f"({parts[0]} {_SYMBOLS[node.kind]} {parts[1]})"


def show_expr(node: ExpressionNode) -> str:
    """Render a tree back to fully parenthesized source text."""
    return fold(node, _show)
