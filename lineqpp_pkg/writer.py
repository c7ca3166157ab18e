"""Substitution writer: copies literal text, replacing solved variables."""

from __future__ import annotations

from typing import TextIO

from .engine import SolvingEngine


class SubstitutionWriter:
    def __init__(self, engine: SolvingEngine, out: TextIO) -> None:
        self.engine = engine
        self.out = out

    def translate(self, name: str) -> str:
        """The bound value's text, or ``name`` itself when it has no binding."""
        value = self.engine.translate(name)
        return name if value is None else value

    def write_text(self, raw: str) -> None:
        self.out.write(raw)

    def write_reference(self, name: str) -> None:
        self.out.write(self.translate(name))
