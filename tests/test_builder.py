"""Unit tests for the expression builder construction protocol."""

import unittest

from lineqpp_pkg.builder import ExpressionBuilder
from lineqpp_pkg.engine import LinearEngine
from lineqpp_pkg.nodes import (
    Application,
    BinaryOp,
    Mediation,
    Negation,
    NodeKind,
    NumberLiteral,
    Variable,
)
from lineqpp_pkg.types import EngineCapacityExceeded, StackUnderflow

from tests.recording_engine import RecordingEngine


class TestConstruction(unittest.TestCase):
    def setUp(self):
        self.engine = LinearEngine()
        self.builder = ExpressionBuilder(self.engine)

    def test_binary_operand_order(self):
        self.builder.push_variable("a")
        self.builder.push_variable("b")
        self.builder.apply_binary(NodeKind.DIFFERENCE)
        self.assertEqual(
            self.builder.result(),
            BinaryOp(NodeKind.DIFFERENCE, Variable("a"), Variable("b")),
        )

    def test_nested_expression_leaves_single_tree(self):
        # (a + 2) * -b = c
        b = self.builder
        b.push_variable("a")
        b.push_number(2)
        b.apply_binary(NodeKind.SUM)
        b.push_variable("b")
        b.apply_unary(NodeKind.NEGATION)
        b.apply_binary(NodeKind.PRODUCT)
        b.push_variable("c")
        b.apply_binary(NodeKind.EQUATION)
        self.assertEqual(b.depth, 1)
        self.assertEqual(b.last_kind, NodeKind.EQUATION)
        eq = b.result()
        self.assertEqual(
            eq.left,
            BinaryOp(
                NodeKind.PRODUCT,
                BinaryOp(NodeKind.SUM, Variable("a"), NumberLiteral(2.0)),
                Negation(Variable("b")),
            ),
        )

    def test_mediation_takes_operands_in_push_order(self):
        for name in ("t", "p", "q"):
            self.builder.push_variable(name)
        self.builder.apply_ternary(NodeKind.MEDIATION)
        self.assertEqual(
            self.builder.result(),
            Mediation(Variable("t"), Variable("p"), Variable("q")),
        )

    def test_application(self):
        self.builder.push_variable("sqrt")
        self.builder.push_number(9)
        self.builder.apply_binary(NodeKind.APPLICATION)
        self.assertEqual(
            self.builder.result(), Application(Variable("sqrt"), NumberLiteral(9.0))
        )

    def test_result_is_none_unless_one_value(self):
        self.assertIsNone(self.builder.result())
        self.builder.push_number(1)
        self.builder.push_number(2)
        self.assertIsNone(self.builder.result())

    def test_reset_empties_stack(self):
        for i in range(4):
            self.builder.push_number(i)
        self.builder.reset()
        self.assertEqual(self.builder.depth, 0)
        self.assertIsNone(self.builder.last_kind)
        self.builder.reset()
        self.assertEqual(self.builder.depth, 0)


class TestConstructionFailures(unittest.TestCase):
    def test_unary_underflow(self):
        builder = ExpressionBuilder(LinearEngine())
        with self.assertRaises(StackUnderflow):
            builder.apply_unary(NodeKind.NEGATION)

    def test_binary_underflow(self):
        builder = ExpressionBuilder(LinearEngine())
        builder.push_number(1)
        with self.assertRaises(StackUnderflow) as ctx:
            builder.apply_binary(NodeKind.SUM)
        self.assertEqual(ctx.exception.code, "STACK_UNDERFLOW")
        self.assertEqual(builder.depth, 1)

    def test_ternary_underflow(self):
        builder = ExpressionBuilder(LinearEngine())
        builder.push_number(1)
        builder.push_number(2)
        with self.assertRaises(StackUnderflow):
            builder.apply_ternary(NodeKind.MEDIATION)

    def test_wrong_arity_kind_rejected(self):
        builder = ExpressionBuilder(LinearEngine())
        with self.assertRaises(ValueError):
            builder.apply_binary(NodeKind.MEDIATION)
        with self.assertRaises(ValueError):
            builder.apply_unary(NodeKind.SUM)

    def test_capacity_checked_before_push(self):
        engine = RecordingEngine(max_depth=3)
        builder = ExpressionBuilder(engine)
        builder.push_number(1)
        # a variable push asks for room for two values
        with self.assertRaises(EngineCapacityExceeded) as ctx:
            builder.push_variable("x")
            builder.push_variable("y")
        self.assertEqual(ctx.exception.code, "STACK_OVERFLOW")
        self.assertEqual(str(ctx.exception), "Stack cannot grow")

    def test_closed_engine_has_no_capacity(self):
        engine = LinearEngine()
        engine.close()
        with self.assertRaises(EngineCapacityExceeded):
            ExpressionBuilder(engine).push_number(1)


class TestOpaqueValues(unittest.TestCase):
    """The builder must work with any engine's values."""

    def test_recording_engine_values(self):
        engine = RecordingEngine()
        builder = ExpressionBuilder(engine)
        builder.push_variable("a")
        builder.push_anonymous_variable()
        builder.apply_binary(NodeKind.QUOTIENT)
        self.assertEqual(builder.result(), "quotient(a, ?)")


if __name__ == "__main__":
    unittest.main()
