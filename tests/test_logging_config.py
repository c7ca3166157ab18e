"""Tests for logging setup and the temporary verbose handler."""

import io
import logging
import unittest

from lineqpp_pkg.engine import LinearEngine
from lineqpp_pkg.logging_config import (
    StructuredFormatter,
    get_logger,
    setup_logging,
    verbose_output,
)
from lineqpp_pkg.nodes import BinaryOp, NodeKind, NumberLiteral, Variable


def solve_one(engine):
    engine.solve(BinaryOp(NodeKind.EQUATION, Variable("x"), NumberLiteral(4.0)))


class TestVerboseOutput(unittest.TestCase):
    def setUp(self):
        self.root = logging.getLogger("lineqpp")
        self.root.handlers.clear()

    def tearDown(self):
        self.root.handlers.clear()
        self.root.setLevel(logging.NOTSET)

    def test_reports_to_stream_and_restores_logger(self):
        engine_logger = get_logger("engine")
        level, propagate = engine_logger.level, engine_logger.propagate
        stream = io.StringIO()
        with verbose_output(stream):
            solve_one(LinearEngine(verbose=True))
        self.assertEqual(stream.getvalue(), "x = 4\nx is 4\n")
        self.assertEqual(engine_logger.handlers, [])
        self.assertEqual(engine_logger.level, level)
        self.assertEqual(engine_logger.propagate, propagate)

    def test_configured_logging_is_left_alone(self):
        setup_logging(level="INFO")
        stream = io.StringIO()
        with verbose_output(stream):
            self.assertEqual(get_logger("engine").handlers, [])
        self.assertEqual(stream.getvalue(), "")

    def test_setup_logging_installs_structured_handler(self):
        logger = setup_logging(level="DEBUG")
        self.assertEqual(logger.name, "lineqpp")
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0].formatter, StructuredFormatter)


if __name__ == "__main__":
    unittest.main()
