"""Type definitions: error hierarchy and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PreprocessResult:
    """Result of preprocessing one document."""

    ok: bool
    output: str = ""
    error: str | None = None
    code: str | None = None
    bindings: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "output": self.output}
        if self.error is not None:
            result_dict["error"] = self.error
        if self.code is not None:
            result_dict["code"] = self.code
        if self.bindings:
            result_dict["bindings"] = dict(self.bindings)
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"PreprocessResult(ok=False, code={self.code!r}, error={self.error!r})"
        return f"PreprocessResult(ok=True, output={self.output!r}, bindings={self.bindings!r})"


class LineqppError(Exception):
    """Base class for every fatal preprocessing error."""

    def __init__(self, message: str, code: str = "LINEQPP_ERROR"):
        self.message = message
        self.code = code
        self.line: int | None = None
        # "file:line: message", filled in by the scanner that saw the error
        self.location: str | None = None
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        return self.location or self.message


class ParseError(LineqppError):
    """Raised when the document or a statement cannot be parsed."""

    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        super().__init__(message, code)


class SolveError(LineqppError):
    """Raised when the engine rejects an equation or command."""

    def __init__(self, message: str, code: str = "SOLVE_ERROR"):
        super().__init__(message, code)


class StackUnderflow(LineqppError):
    """Raised when an operator finds fewer operands than its arity."""

    def __init__(self, message: str, code: str = "STACK_UNDERFLOW"):
        super().__init__(message, code)


class EngineCapacityExceeded(LineqppError):
    """Raised when the engine cannot guarantee room for the next push."""

    def __init__(self, message: str = "Stack cannot grow", code: str = "STACK_OVERFLOW"):
        super().__init__(message, code)
