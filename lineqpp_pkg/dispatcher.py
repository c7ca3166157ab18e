"""Statement dispatcher: submits completed statements to the engine."""

from __future__ import annotations

from enum import Enum

from .builder import ExpressionBuilder
from .engine import SolvingEngine
from .logging_config import get_logger
from .nodes import NodeKind
from .types import ParseError

logger = get_logger("dispatcher")


class DispatchState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    EQUATION = "equation"
    COMMAND = "command"


class StatementDispatcher:
    """Tracks one statement at a time and hands it to the engine.

    The operand stack is cleared after every statement, whether it was
    an equation or a command and whether or not the engine accepted it.
    """

    def __init__(self, engine: SolvingEngine, builder: ExpressionBuilder) -> None:
        self.engine = engine
        self.builder = builder
        self.state = DispatchState.IDLE
        self.statements = 0

    def begin(self) -> None:
        if self.state is not DispatchState.IDLE:
            raise ParseError(f"statement started while {self.state.value}")
        self.state = DispatchState.ACCUMULATING

    def finish_equation(self) -> dict[str, str]:
        """Submit the single equation left on the stack to the engine."""
        try:
            if self.builder.depth != 1 or self.builder.last_kind is not NodeKind.EQUATION:
                raise ParseError("malformed statement: equation expected")
            self.state = DispatchState.EQUATION
            bindings = self.engine.solve(self.builder.result())
            self.statements += 1
            if bindings:
                logger.debug("statement %d bound %s", self.statements, bindings)
            return bindings
        finally:
            self.reset()

    def dispatch_command(self, name: str, payload: str) -> None:
        try:
            self.state = DispatchState.COMMAND
            logger.debug("command %s %r", name, payload)
            self.engine.command(name, payload)
            self.statements += 1
        finally:
            self.reset()

    def reset(self) -> None:
        self.builder.reset()
        self.state = DispatchState.IDLE
