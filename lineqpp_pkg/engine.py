"""Solving engines.

An engine owns the operand stack used while a statement is built, turns
construction requests into values, solves equations against the
bindings accumulated so far and answers translation queries for the
substitution writer.

``LinearEngine`` keeps every value as a SymPy expression that is linear
in the still-unknown variables, with complex coefficients. Solving an
equation eliminates the variable with the largest coefficient and
substitutes its form into every earlier binding, so each variable is
reported as soon as its form becomes a constant.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Protocol

import sympy as sp

from . import config
from .logging_config import get_logger
from .nodes import (
    AnonymousVariable,
    Application,
    BinaryOp,
    ExpressionNode,
    Mediation,
    Negation,
    NodeKind,
    NumberLiteral,
    Variable,
    fold,
    is_equation,
    make_node,
    show_expr,
)
from .stack import OperandStack
from .types import SolveError

logger = get_logger("engine")


class SolvingEngine(Protocol):
    """What the builder, dispatcher and writer need from an engine."""

    stack: OperandStack

    def check_stack(self, extra: int) -> bool:
        """Return True when ``extra`` more values fit on the stack."""
        ...

    def variable(self, name: str) -> Any:
        ...

    def anonymous_variable(self) -> Any:
        ...

    def number(self, value: float) -> Any:
        ...

    def construct(self, kind: NodeKind, operands: list[Any]) -> Any:
        """Combine operands, given in push order, into a new value."""
        ...

    def solve(self, equation: Any) -> dict[str, str]:
        """Solve an equation value; return the bindings it determined."""
        ...

    def command(self, name: str, payload: str) -> None:
        """Run an engine directive."""
        ...

    def translate(self, name: str) -> Optional[str]:
        """Text of the value bound to ``name``, or None when unbound."""
        ...

    def close(self) -> None:
        ...


def format_number(val: Any, precision: int = config.OUTPUT_PRECISION) -> str:
    """Format a real number with ``precision`` significant digits.

    Values within ZERO_TOLERANCE of zero print as ``0``.
    """
    x = float(val)
    if abs(x) < config.ZERO_TOLERANCE:
        return "0"
    return "{:.{}g}".format(x, int(precision))


def format_complex(val: Any, precision: int = config.OUTPUT_PRECISION) -> str:
    """Format a complex value as ``a``, ``b*i``, ``a + b*i`` or ``a - i``."""
    z = complex(val)
    re_zero = abs(z.real) < config.ZERO_TOLERANCE
    im_zero = abs(z.imag) < config.ZERO_TOLERANCE
    if im_zero:
        return format_number(z.real, precision)

    def imaginary(y: float) -> str:
        if abs(y - 1) < config.ZERO_TOLERANCE:
            return "i"
        return f"{format_number(y, precision)}*i"

    if re_zero:
        if abs(z.imag + 1) < config.ZERO_TOLERANCE:
            return "-i"
        return imaginary(z.imag)
    real = format_number(z.real, precision)
    if z.imag < 0:
        return f"{real} - {imaginary(-z.imag)}"
    return f"{real} + {imaginary(z.imag)}"


# Largest decimal exponent a double can hold
_MAX_DECIMAL_EXPONENT = 308


def _as_complex(c: Any) -> Optional[complex]:
    """``c`` as a Python complex, or None when it does not fit in doubles."""
    try:
        z = complex(c)
    except (OverflowError, TypeError):
        return None
    if not (math.isfinite(z.real) and math.isfinite(z.imag)):
        return None
    return z


def _is_constant(form: sp.Expr) -> bool:
    return not form.free_symbols


def _is_zero(c: Any) -> bool:
    return abs(complex(c)) < config.ZERO_TOLERANCE


def _is_one(c: Any) -> bool:
    return _is_zero(complex(c) - 1)


def _magnitude(c: Any) -> float:
    # Cheap distance metric, good enough to pick a pivot
    z = complex(c)
    return max(abs(z.real), abs(z.imag))


def _chop_number(c: Any) -> sp.Expr:
    """Drop real or imaginary parts that are within tolerance of zero."""
    c = sp.sympify(c)
    re_part, im_part = c.as_real_imag()
    if abs(float(re_part)) < config.ZERO_TOLERANCE:
        re_part = sp.Integer(0)
    if abs(float(im_part)) < config.ZERO_TOLERANCE:
        im_part = sp.Integer(0)
    return re_part + sp.I * im_part


def split_form(form: sp.Expr) -> tuple[sp.Expr, dict[sp.Symbol, sp.Expr]]:
    """Split a linear form into its constant and its coefficient map."""
    form = sp.expand(form)
    syms = sorted(form.free_symbols, key=sp.default_sort_key)
    coeffs = {s: form.coeff(s) for s in syms}
    const = form.subs({s: 0 for s in syms}) if syms else form
    return const, coeffs


def simplify_form(form: sp.Expr) -> sp.Expr:
    """Delete terms whose coefficients are within tolerance of zero."""
    const, coeffs = split_form(form)
    result = _chop_number(const)
    for sym, coeff in coeffs.items():
        if not _is_zero(coeff):
            result += _chop_number(coeff) * sym
    return result


def describe_form(form: sp.Expr, precision: int = config.OUTPUT_PRECISION) -> str:
    """Human-readable text for a linear form, constant first then terms by name."""
    const, coeffs = split_form(form)
    parts = []
    if not _is_zero(const):
        parts.append(format_complex(const, precision))
    for sym, coeff in coeffs.items():
        if _is_zero(coeff):
            continue
        if _is_one(coeff):
            parts.append(str(sym))
            continue
        z = complex(coeff)
        text = format_complex(z, precision)
        if abs(z.real) >= config.ZERO_TOLERANCE and abs(z.imag) >= config.ZERO_TOLERANCE:
            text = f"({text})"
        parts.append(f"{text}*{sym}")
    return " + ".join(parts) if parts else "0"


class LinearEngine:
    """Gaussian-elimination engine over linear forms with complex coefficients."""

    def __init__(
        self,
        verbose: bool = False,
        max_depth: int | None = None,
        precision: int | None = None,
    ) -> None:
        self.stack = OperandStack()
        self.verbose = verbose
        self.max_depth = config.MAX_STACK_DEPTH if max_depth is None else max_depth
        self.precision = config.OUTPUT_PRECISION if precision is None else precision
        # Eliminated variable -> linear form in the remaining unknowns
        self._env: dict[sp.Symbol, sp.Expr] = {
            sp.Symbol(config.IMAGINARY_UNIT): sp.I,
        }
        # Variables whose form is a constant, by name
        self._solved: dict[str, sp.Expr] = {}
        self.closed = False

    # Construction protocol

    def check_stack(self, extra: int) -> bool:
        return not self.closed and self.stack.depth + extra <= self.max_depth

    def variable(self, name: str) -> Variable:
        return Variable(name)

    def anonymous_variable(self) -> AnonymousVariable:
        return AnonymousVariable()

    def number(self, value: float) -> NumberLiteral:
        return NumberLiteral(value)

    def construct(self, kind: NodeKind, operands: list[Any]) -> ExpressionNode:
        return make_node(kind, operands)

    # Evaluation

    def evaluate(self, node: ExpressionNode) -> sp.Expr:
        """Reduce a tree to a linear form using the current bindings."""
        return fold(node, self._reduce)

    def _reduce(self, node: ExpressionNode, values: list) -> sp.Expr:
        form = self._combine(node, values)
        if any(_as_complex(n) is None for n in form.atoms(sp.Number)):
            raise SolveError("number out of range")
        return form

    def _combine(self, node: ExpressionNode, values: list) -> sp.Expr:
        if isinstance(node, Variable):
            sym = sp.Symbol(node.name)
            return self._env.get(sym, sym)
        if isinstance(node, AnonymousVariable):
            return sp.Dummy(config.ANONYMOUS_KEYWORD)
        if isinstance(node, NumberLiteral):
            value = float(node.value)
            if not math.isfinite(value):
                raise SolveError("number out of range")
            return sp.Rational(repr(value))
        if isinstance(node, Negation):
            return -values[0]
        if isinstance(node, Application):
            return self._application(node, values[1])
        if isinstance(node, Mediation):
            # t[a, b] = a + t * (b - a)
            scale, left, right = values
            return sp.expand(left + self._product(scale, right - left))
        if isinstance(node, BinaryOp):
            if node.kind is NodeKind.EQUATION:
                raise SolveError("equation used as a value")
            left, right = values
            if node.kind is NodeKind.SUM:
                return sp.expand(left + right)
            if node.kind is NodeKind.DIFFERENCE:
                return sp.expand(left - right)
            if node.kind is NodeKind.PRODUCT:
                return self._product(left, right)
            if node.kind is NodeKind.QUOTIENT:
                return self._quotient(left, right)
            if node.kind is NodeKind.EXPONENT:
                return self._power(left, right)
        raise SolveError(f"cannot evaluate {type(node).__name__}")

    def _product(self, left: sp.Expr, right: sp.Expr) -> sp.Expr:
        if not _is_constant(left) and not _is_constant(right):
            raise SolveError("both in product not a number")
        return sp.expand(left * right)

    def _quotient(self, left: sp.Expr, right: sp.Expr) -> sp.Expr:
        if not _is_constant(right):
            raise SolveError("divisor is not a number")
        if _is_zero(right):
            raise SolveError("division by zero")
        return sp.expand(left / right)

    def _power(self, base: sp.Expr, exponent: sp.Expr) -> sp.Expr:
        if not _is_constant(base):
            raise SolveError("exponent base not a number")
        if not _is_constant(exponent):
            raise SolveError("exponent not a number")
        z_base, z_exp = _as_complex(base), _as_complex(exponent)
        if z_base is None or z_exp is None:
            raise SolveError("number out of range")
        if z_base != 0:
            # decimal order of magnitude of |base ** exponent|, real part only
            scale = z_exp.real * math.log10(abs(z_base))
            if scale > _MAX_DECIMAL_EXPONENT:
                raise SolveError("exponentiation out of range")
            if scale < -_MAX_DECIMAL_EXPONENT:
                return sp.Integer(0)
        return self._number(base**exponent, "exponentiation")

    def _application(self, node: Application, arg: sp.Expr) -> sp.Expr:
        if not isinstance(node.callee, Variable):
            raise SolveError("function not well formed")
        name = node.callee.name
        func = config.ALLOWED_FUNCTIONS.get(name)
        if func is None:
            raise SolveError(f"function {name} not defined")
        if not _is_constant(arg):
            raise SolveError(f"function {name} not applied to a number")
        return self._number(func(arg), f"function {name}")

    @staticmethod
    def _number(value: sp.Expr, what: str) -> sp.Expr:
        if value.has(sp.zoo, sp.nan, sp.oo, -sp.oo):
            raise SolveError(f"{what} is undefined here")
        if _as_complex(value) is None:
            raise SolveError(f"{what} out of range")
        if value.is_Rational:
            return value
        return _chop_number(sp.N(value))

    # Solving

    def solve(self, equation: BinaryOp) -> dict[str, str]:
        if not is_equation(equation):
            raise SolveError("not an equation")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("solving %s", show_expr(equation))
        left = self.evaluate(equation.left)
        right = self.evaluate(equation.right)
        if self.verbose:
            logger.info(
                "%s = %s",
                describe_form(left, self.precision),
                describe_form(right, self.precision),
            )
        before = set(self._solved)
        self._eliminate(left - right)
        return {
            name: self.translate(name)
            for name in self._solved
            if name not in before
        }

    def _eliminate(self, difference: sp.Expr) -> None:
        form = simplify_form(difference)
        if _is_constant(form):
            if _is_zero(form):
                raise SolveError("redundant equation")
            raise SolveError("inconsistent equation")

        _, coeffs = split_form(form)
        pivot, pivot_coeff, best = None, None, 0.0
        for sym, coeff in coeffs.items():
            m = _magnitude(coeff)
            if m > best:
                pivot, pivot_coeff, best = sym, coeff, m

        # pivot = -(form - c*pivot) / c
        solution = simplify_form(-(form - pivot_coeff * pivot) / pivot_coeff)
        self._record(pivot, solution)

        for sym, known in list(self._env.items()):
            if pivot in known.free_symbols:
                self._record(sym, simplify_form(known.subs(pivot, solution)))
        self._env[pivot] = solution

    def _record(self, sym: sp.Symbol, form: sp.Expr) -> None:
        if _is_constant(form) and _as_complex(form) is None:
            raise SolveError(f"value of {sym} out of range")
        self._env[sym] = form
        if self.verbose:
            logger.info("%s is %s", sym, describe_form(form, self.precision))
        if _is_constant(form) and not isinstance(sym, sp.Dummy):
            self._solved[sym.name] = form
            logger.debug("solved %s = %s", sym.name, form)

    # Queries

    def translate(self, name: str) -> Optional[str]:
        base, part = name, None
        if name.endswith(config.REAL_SUFFIX) or name.endswith(config.IMAG_SUFFIX):
            base, part = name[:-2], name[-1]
        value = self._solved.get(base)
        if value is None:
            return None
        z = complex(value)
        if part == "r":
            return format_number(z.real, self.precision)
        if part == "i":
            return format_number(z.imag, self.precision)
        return format_complex(z, self.precision)

    def form_of(self, name: str) -> str:
        sym = sp.Symbol(name)
        return describe_form(self._env.get(sym, sym), self.precision)

    def bindings(self) -> dict[str, str]:
        return {name: self.translate(name) for name in self._solved}

    # Directives

    def command(self, name: str, payload: str) -> None:
        handler = getattr(self, f"_cmd_{name}", None)
        if handler is None:
            raise SolveError(f"unknown command: {name}")
        handler(payload.strip())

    def _cmd_verbose(self, payload: str) -> None:
        flag = payload.lower()
        if flag in ("", "on", "true", "1", "yes"):
            self.verbose = True
        elif flag in ("off", "false", "0", "no"):
            self.verbose = False
        else:
            raise SolveError(f"verbose expects on or off, got {payload!r}")

    def _cmd_show(self, payload: str) -> None:
        names = payload.replace(",", " ").split()
        if not names:
            raise SolveError("show expects variable names")
        for name in names:
            if not config.VAR_NAME_RE.match(name):
                raise SolveError(f"show: invalid variable name {name!r}")
            logger.info("%s is %s", name, self.form_of(name))

    def _cmd_digits(self, payload: str) -> None:
        try:
            digits = int(payload)
        except ValueError:
            raise SolveError(f"digits expects an integer, got {payload!r}") from None
        if not 1 <= digits <= 17:
            raise SolveError("digits must be between 1 and 17")
        self.precision = digits

    def close(self) -> None:
        self.stack.clear()
        self.closed = True
        logger.debug("engine closed with %d solved variable(s)", len(self._solved))
