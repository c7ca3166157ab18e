"""Expression builder: one construction primitive per grammar production.

Every primitive works on the engine's operand stack. Operands are
pushed left to right, operators pop as many values as their arity and
push the combined value, so a one-pass parser can emit its actions
bottom-up without tracking nesting depth.
"""

from __future__ import annotations

from typing import Any, Optional

from .engine import SolvingEngine
from .nodes import BINARY_KINDS, NodeKind
from .types import EngineCapacityExceeded, StackUnderflow


class ExpressionBuilder:
    def __init__(self, engine: SolvingEngine) -> None:
        self.engine = engine
        # Operator that produced the value on top of the stack, if any
        self.last_kind: Optional[NodeKind] = None

    @property
    def depth(self) -> int:
        return self.engine.stack.depth

    def _ensure(self, extra: int) -> None:
        if not self.engine.check_stack(extra):
            raise EngineCapacityExceeded()

    # Operands

    def push_variable(self, name: str) -> None:
        self._ensure(2)
        self.engine.stack.push(self.engine.variable(name))
        self.last_kind = None

    def push_anonymous_variable(self) -> None:
        self._ensure(1)
        self.engine.stack.push(self.engine.anonymous_variable())
        self.last_kind = None

    def push_number(self, value: float) -> None:
        self._ensure(2)
        self.engine.stack.push(self.engine.number(float(value)))
        self.last_kind = None

    # Operators

    def _apply(self, kind: NodeKind) -> None:
        self._ensure(1)
        stack = self.engine.stack
        if stack.depth < kind.arity:
            raise StackUnderflow(
                f"{kind.value} needs {kind.arity} operand(s), stack holds {stack.depth}"
            )
        operands = stack.pop(kind.arity)
        stack.push(self.engine.construct(kind, operands))
        self.last_kind = kind

    def apply_unary(self, kind: NodeKind = NodeKind.NEGATION) -> None:
        if kind is not NodeKind.NEGATION:
            raise ValueError(f"{kind.value} is not a unary operator")
        self._apply(kind)

    def apply_binary(self, kind: NodeKind) -> None:
        if kind not in BINARY_KINDS and kind is not NodeKind.APPLICATION:
            raise ValueError(f"{kind.value} is not a binary operator")
        self._apply(kind)

    def apply_ternary(self, kind: NodeKind = NodeKind.MEDIATION) -> None:
        if kind is not NodeKind.MEDIATION:
            raise ValueError(f"{kind.value} is not a ternary operator")
        self._apply(kind)

    # Statement scope

    def result(self) -> Any:
        """The completed value when exactly one remains, else None."""
        if self.engine.stack.depth != 1:
            return None
        return self.engine.stack.peek()

    def reset(self) -> None:
        self.engine.stack.clear()
        self.last_kind = None
