"""Operand stack shared between the expression builder and an engine."""

from __future__ import annotations

from typing import Any

from .types import StackUnderflow


class OperandStack:
    """Ordered scratch space for the partial results of one statement.

    Values are opaque here; only depth and ordering matter.
    """

    def __init__(self) -> None:
        self._values: list[Any] = []

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"OperandStack(depth={len(self._values)})"

    @property
    def depth(self) -> int:
        return len(self._values)

    def push(self, value: Any) -> None:
        self._values.append(value)

    def insert(self, value: Any, depth: int) -> None:
        """Place ``value`` below the top ``depth`` values."""
        if depth < 0 or depth > len(self._values):
            raise StackUnderflow(
                f"cannot insert at depth {depth} in a stack of {len(self._values)}"
            )
        self._values.insert(len(self._values) - depth, value)

    def pop(self, count: int = 1) -> list[Any]:
        """Remove the top ``count`` values and return them in push order."""
        if count > len(self._values):
            raise StackUnderflow(
                f"need {count} operand(s), stack holds {len(self._values)}"
            )
        if count == 0:
            return []
        popped = self._values[-count:]
        del self._values[-count:]
        return popped

    def peek(self) -> Any:
        if not self._values:
            raise StackUnderflow("stack is empty")
        return self._values[-1]

    def clear(self) -> None:
        self._values.clear()
