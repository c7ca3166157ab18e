"""Tests for the substitution writer."""

import io
import unittest

from lineqpp_pkg.engine import LinearEngine
from lineqpp_pkg.nodes import BinaryOp, NodeKind, NumberLiteral, Variable
from lineqpp_pkg.writer import SubstitutionWriter


class TestTranslate(unittest.TestCase):
    def setUp(self):
        self.engine = LinearEngine()
        self.out = io.StringIO()
        self.writer = SubstitutionWriter(self.engine, self.out)

    def bind(self, name, value):
        self.engine.solve(
            BinaryOp(NodeKind.EQUATION, Variable(name), NumberLiteral(value))
        )

    def test_unbound_name_passes_through(self):
        self.assertEqual(self.writer.translate("y"), "y")
        self.assertEqual(self.writer.translate("y#r"), "y#r")

    def test_bound_name_is_stable(self):
        self.bind("x", 7)
        self.assertEqual(self.writer.translate("x"), "7")
        self.assertEqual(self.writer.translate("x"), "7")

    def test_imaginary_unit_is_not_a_binding(self):
        self.assertEqual(self.writer.translate("i"), "i")

    def test_write_reference_and_text(self):
        self.bind("width", 2.5)
        self.writer.write_text("w=")
        self.writer.write_reference("width")
        self.writer.write_text(" h=")
        self.writer.write_reference("height")
        self.assertEqual(self.out.getvalue(), "w=2.5 h=height")

    def test_translate_does_not_bind(self):
        self.writer.translate("z")
        self.assertEqual(self.engine.bindings(), {})


if __name__ == "__main__":
    unittest.main()
