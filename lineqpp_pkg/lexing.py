"""Token source: splits a document into literal text and equation tokens.

Outside equation blocks the scanner yields ``Text`` spans and a
``Reference`` for every identifier occurrence, which the substitution
writer may replace. Inside ``{{ ... }}`` blocks it yields the tokens of
the statement grammar; newlines and ``;`` both end a statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from . import config
from .types import LineqppError, ParseError

OPERATORS = frozenset("+-*/^=")
DELIMITERS = frozenset("()[],;")

# Delimiter kinds
STATEMENT_END = ";"
BLOCK_OPEN = "open"
BLOCK_CLOSE = "close"


class Token:
    line: int

    @property
    def lexeme(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Text(Token):
    raw: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return self.raw


@dataclass(frozen=True)
class Reference(Token):
    name: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return self.name


@dataclass(frozen=True)
class Ident(Token):
    name: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return self.name


@dataclass(frozen=True)
class Keyword(Token):
    word: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return self.word


@dataclass(frozen=True)
class Number(Token):
    value: float
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class Op(Token):
    symbol: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class Delim(Token):
    kind: str
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        if self.kind == BLOCK_OPEN:
            return config.OPEN_DELIM
        if self.kind == BLOCK_CLOSE:
            return config.CLOSE_DELIM
        return self.kind


@dataclass(frozen=True)
class Command(Token):
    name: str
    payload: str = ""
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return f"{config.COMMAND_PREFIX}{self.name} {self.payload}".rstrip()


@dataclass(frozen=True)
class EndOfInput(Token):
    line: int = field(default=0, compare=False)

    @property
    def lexeme(self) -> str:
        return "end of input"


class Scanner:
    """Produces tokens on demand and reports errors with their location."""

    def __init__(self, text: str, filename: str = "<stdin>") -> None:
        self.text = text
        self.filename = filename
        self.line = 1

    def error(
        self, message: str, line: int | None = None, code: str = "PARSE_ERROR"
    ) -> ParseError:
        err = ParseError(message, code)
        err.line = self.line if line is None else line
        return err

    def report(self, err: LineqppError) -> str:
        """Format an error the way compilers do: ``file:line: message``."""
        line = err.line if err.line is not None else self.line
        return f"{self.filename}:{line}: {err.message}"

    def tokens(self) -> Iterator[Token]:
        text = self.text
        pos = 0
        while pos < len(text):
            start = text.find(config.OPEN_DELIM, pos)
            if start < 0:
                yield from self._literal(text[pos:])
                break
            yield from self._literal(text[pos:start])
            yield Delim(BLOCK_OPEN, self.line)
            pos = yield from self._block(start + len(config.OPEN_DELIM))
        yield EndOfInput(self.line)

    def _literal(self, chunk: str) -> Iterator[Token]:
        last = 0
        for m in config.REFERENCE_REGEX.finditer(chunk):
            if m.start() > last:
                yield from self._text(chunk[last : m.start()])
            yield Reference(m.group(0), self.line)
            last = m.end()
        if last < len(chunk):
            yield from self._text(chunk[last:])

    def _text(self, raw: str) -> Iterator[Token]:
        yield Text(raw, self.line)
        self.line += raw.count("\n")

    def _block(self, pos: int) -> Iterator[Token]:
        text = self.text
        opened_at = self.line
        while pos < len(text):
            if text.startswith(config.CLOSE_DELIM, pos):
                yield Delim(BLOCK_CLOSE, self.line)
                return pos + len(config.CLOSE_DELIM)
            ch = text[pos]
            m = config.WHITESPACE_REGEX.match(text, pos)
            if m:
                pos = m.end()
            elif ch == "\n":
                yield Delim(STATEMENT_END, self.line)
                self.line += 1
                pos += 1
            elif ch == config.COMMENT_CHAR:
                end = text.find("\n", pos)
                pos = len(text) if end < 0 else end
            elif text.startswith(config.COMMAND_PREFIX, pos):
                pos = yield from self._command(pos + len(config.COMMAND_PREFIX))
            elif ch.isdigit() or (ch == "." and text[pos + 1 : pos + 2].isdigit()):
                m = config.NUMBER_REGEX.match(text, pos)
                yield Number(float(m.group(0)), self.line)
                pos = m.end()
            elif ch.isalpha() or ch == "_":
                m = config.IDENT_REGEX.match(text, pos)
                word = m.group(0)
                if word == config.ANONYMOUS_KEYWORD:
                    yield Keyword(word, self.line)
                else:
                    yield Ident(word, self.line)
                pos = m.end()
            elif ch in OPERATORS:
                yield Op(ch, self.line)
                pos += 1
            elif ch in DELIMITERS:
                yield Delim(ch, self.line)
                pos += 1
            else:
                raise self.error(f"unexpected character {ch!r}")
        raise self.error("unterminated equation block", opened_at)

    def _command(self, pos: int) -> Iterator[Token]:
        text = self.text
        m = config.IDENT_REGEX.match(text, pos)
        if not m:
            raise self.error("command name expected")
        end = pos = m.end()
        while end < len(text) and text[end] not in ";\n":
            if text.startswith(config.CLOSE_DELIM, end):
                break
            end += 1
        yield Command(m.group(0), text[pos:end].strip(), self.line)
        return end
