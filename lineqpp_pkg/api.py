"""Public API for library use.

This module provides a stable interface for using lineqpp as a library.
``process`` wires one run together; the other functions own the engine
for the duration of a call and release it exactly once.
"""

from __future__ import annotations

import io
from contextlib import nullcontext
from typing import ContextManager, TextIO

from .builder import ExpressionBuilder
from .dispatcher import StatementDispatcher
from .engine import LinearEngine, SolvingEngine
from .lexing import Scanner
from .logging_config import get_logger, verbose_output
from .parser import Parser
from .types import LineqppError, PreprocessResult
from .writer import SubstitutionWriter

logger = get_logger("api")


def process(
    text: str,
    out: TextIO,
    engine: SolvingEngine,
    filename: str = "<stdin>",
) -> None:
    """Preprocess ``text`` into ``out`` using ``engine``.

    Output is written as the document is scanned, so a fatal error
    leaves everything before the failing statement in ``out``.

    Raises:
        LineqppError: on the first fatal error, with ``location`` set
    """
    scanner = Scanner(text, filename)
    builder = ExpressionBuilder(engine)
    dispatcher = StatementDispatcher(engine, builder)
    writer = SubstitutionWriter(engine, out)
    try:
        Parser(scanner, builder, dispatcher, writer).run()
    except LineqppError as err:
        err.location = scanner.report(err)
        raise
    except RecursionError:
        # Only reachable when MAX_EXPRESSION_DEPTH is raised past the interpreter limit
        dispatcher.reset()
        err = scanner.error("expression too deeply nested", code="TOO_DEEP")
        err.location = scanner.report(err)
        raise err from None
    logger.debug("%s: %d statement(s) processed", filename, dispatcher.statements)


def _reporting(verbose: bool) -> ContextManager[None]:
    return verbose_output() if verbose else nullcontext()


def preprocess(text: str, verbose: bool = False, filename: str = "<string>") -> str:
    """Preprocess a document held in a string.

    Args:
        text: Document text
        verbose: Report equations and derived forms on the ``lineqpp.engine``
            logger; when logging is not configured they go to stderr
        filename: Name used in error locations

    Returns:
        The rewritten document

    Raises:
        LineqppError: on the first fatal error

    Example:
        >>> preprocess("{{ x = 2 + 3 }}value: x")
        'value: 5'
    """
    engine = LinearEngine(verbose=verbose)
    out = io.StringIO()
    try:
        with _reporting(verbose):
            process(text, out, engine, filename)
    finally:
        engine.close()
    return out.getvalue()


def run(text: str, verbose: bool = False, filename: str = "<string>") -> PreprocessResult:
    """Like ``preprocess`` but reports failure in the result instead of raising."""
    engine = LinearEngine(verbose=verbose)
    out = io.StringIO()
    try:
        with _reporting(verbose):
            process(text, out, engine, filename)
        return PreprocessResult(ok=True, output=out.getvalue(), bindings=engine.bindings())
    except LineqppError as err:
        return PreprocessResult(
            ok=False,
            output=out.getvalue(),
            error=err.describe(),
            code=err.code,
            bindings=engine.bindings(),
        )
    finally:
        engine.close()


def preprocess_file(path: str, out: TextIO, verbose: bool = False) -> None:
    """Preprocess the file at ``path`` into ``out``.

    Raises:
        OSError: if the file cannot be read
        LineqppError: on the first fatal error
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    engine = LinearEngine(verbose=verbose)
    try:
        with _reporting(verbose):
            process(text, out, engine, path)
    finally:
        engine.close()
