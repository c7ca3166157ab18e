"""One-pass recursive-descent parser.

The parser never builds values itself: each production emits the
matching builder action once its operands are on the stack, literal
text is handed straight to the substitution writer, and every finished
statement goes to the dispatcher.

Grammar inside an equation block::

    block     := statement ((';' | newline) statement)*
    statement := command | expr '=' expr | <empty>
    expr      := term (('+' | '-') term)*
    term      := unary (('*' | '/') unary)*
    unary     := ('-' | '+') unary | power
    power     := postfix ('^' unary)?
    postfix   := primary ('[' expr ',' expr ']')*
    primary   := NUMBER | 'whatever' | IDENT '(' expr ')' | IDENT | '(' expr ')'
"""

from __future__ import annotations

from typing import Iterator

from . import config
from .builder import ExpressionBuilder
from .dispatcher import StatementDispatcher
from .lexing import (
    BLOCK_CLOSE,
    BLOCK_OPEN,
    STATEMENT_END,
    Command,
    Delim,
    EndOfInput,
    Ident,
    Keyword,
    Number,
    Op,
    Reference,
    Scanner,
    Text,
    Token,
)
from .nodes import NodeKind
from .types import LineqppError
from .writer import SubstitutionWriter

ADDITIVE = {"+": NodeKind.SUM, "-": NodeKind.DIFFERENCE}
MULTIPLICATIVE = {"*": NodeKind.PRODUCT, "/": NodeKind.QUOTIENT}


def _is_delim(tok: Token, kind: str) -> bool:
    return isinstance(tok, Delim) and tok.kind == kind


def _is_op(tok: Token, symbol: str) -> bool:
    return isinstance(tok, Op) and tok.symbol == symbol


class Parser:
    def __init__(
        self,
        scanner: Scanner,
        builder: ExpressionBuilder,
        dispatcher: StatementDispatcher,
        writer: SubstitutionWriter,
    ) -> None:
        self.scanner = scanner
        self.builder = builder
        self.dispatcher = dispatcher
        self.writer = writer
        self._tokens: Iterator[Token] = iter(())
        self.current: Token = EndOfInput()
        self._nesting = 0

    def _advance(self) -> Token:
        tok = self.current
        self.current = next(self._tokens)
        return tok

    def _error(self, message: str) -> LineqppError:
        return self.scanner.error(message, self.current.line)

    def _expect_delim(self, kind: str) -> None:
        if not _is_delim(self.current, kind):
            raise self._error(f"'{kind}' expected before {self.current.lexeme}")
        self._advance()

    # Document level

    def run(self) -> None:
        self._tokens = self.scanner.tokens()
        self._advance()
        while not isinstance(self.current, EndOfInput):
            tok = self.current
            if isinstance(tok, Text):
                self.writer.write_text(tok.raw)
                self._advance()
            elif isinstance(tok, Reference):
                self.writer.write_reference(tok.name)
                self._advance()
            elif _is_delim(tok, BLOCK_OPEN):
                self._advance()
                self._block()
            else:
                raise self._error(f"unexpected {tok.lexeme}")

    def _block(self) -> None:
        while True:
            tok = self.current
            if _is_delim(tok, BLOCK_CLOSE):
                self._advance()
                return
            if _is_delim(tok, STATEMENT_END):
                self._advance()
                continue
            self._statement()
            if not (
                _is_delim(self.current, STATEMENT_END)
                or _is_delim(self.current, BLOCK_CLOSE)
            ):
                raise self._error(f"unexpected {self.current.lexeme}")

    def _statement(self) -> None:
        line = self.current.line
        try:
            if isinstance(self.current, Command):
                cmd = self._advance()
                self.dispatcher.dispatch_command(cmd.name, cmd.payload)
                return
            self.dispatcher.begin()
            self._expr()
            if not _is_op(self.current, "="):
                raise self._error(f"'=' expected before {self.current.lexeme}")
            self._advance()
            self._expr()
            if _is_op(self.current, "="):
                raise self._error("one '=' per statement")
            self.builder.apply_binary(NodeKind.EQUATION)
            self.dispatcher.finish_equation()
        except LineqppError as err:
            if err.line is None:
                err.line = line
            self.dispatcher.reset()
            raise

    # Expressions

    def _expr(self) -> None:
        self._term()
        while isinstance(self.current, Op) and self.current.symbol in ADDITIVE:
            kind = ADDITIVE[self._advance().symbol]
            self._term()
            self.builder.apply_binary(kind)

    def _term(self) -> None:
        self._unary()
        while isinstance(self.current, Op) and self.current.symbol in MULTIPLICATIVE:
            kind = MULTIPLICATIVE[self._advance().symbol]
            self._unary()
            self.builder.apply_binary(kind)

    def _unary(self) -> None:
        # Every nested subexpression passes through here exactly once
        self._nesting += 1
        try:
            if self._nesting > config.MAX_EXPRESSION_DEPTH:
                raise self.scanner.error(
                    f"expression too deeply nested (>{config.MAX_EXPRESSION_DEPTH} levels)",
                    self.current.line,
                    code="TOO_DEEP",
                )
            if _is_op(self.current, "-"):
                self._advance()
                self._unary()
                self.builder.apply_unary(NodeKind.NEGATION)
            elif _is_op(self.current, "+"):
                self._advance()
                self._unary()
            else:
                self._power()
        finally:
            self._nesting -= 1

    def _power(self) -> None:
        self._postfix()
        if _is_op(self.current, "^"):
            self._advance()
            self._unary()
            self.builder.apply_binary(NodeKind.EXPONENT)

    def _postfix(self) -> None:
        self._primary()
        while _is_delim(self.current, "["):
            self._advance()
            self._expr()
            self._expect_delim(",")
            self._expr()
            self._expect_delim("]")
            self.builder.apply_ternary(NodeKind.MEDIATION)

    def _primary(self) -> None:
        tok = self.current
        if isinstance(tok, Number):
            self._advance()
            self.builder.push_number(tok.value)
        elif isinstance(tok, Keyword):
            self._advance()
            self.builder.push_anonymous_variable()
        elif isinstance(tok, Ident):
            self._advance()
            self.builder.push_variable(tok.name)
            if _is_delim(self.current, "("):
                self._advance()
                self._expr()
                self._expect_delim(")")
                self.builder.apply_binary(NodeKind.APPLICATION)
        elif _is_delim(tok, "("):
            self._advance()
            self._expr()
            self._expect_delim(")")
        else:
            raise self._error(f"unexpected {tok.lexeme}")
