"""Centralized configuration for lineqpp.

This module defines:
- Engine limits (operand stack headroom)
- Numeric tolerance and output precision
- Document delimiters and statement keywords
- Functions available to equations
- Regex patterns for scanning

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with LINEQPP_)
"""

import os
import re

import sympy as sp

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("lineqpp")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

PACKAGE = "lineqpp"

# Engine limits
MAX_STACK_DEPTH = int(os.getenv("LINEQPP_MAX_STACK_DEPTH", "100"))
MAX_EXPRESSION_DEPTH = int(
    os.getenv("LINEQPP_MAX_EXPRESSION_DEPTH", "100")
)  # Nesting levels (parentheses, signs, exponents) per expression

# Numeric configuration
ZERO_TOLERANCE = float(
    os.getenv("LINEQPP_ZERO_TOLERANCE", "1e-6")
)  # Coefficients smaller than this are treated as zero
OUTPUT_PRECISION = int(
    os.getenv("LINEQPP_OUTPUT_PRECISION", "14")
)  # significant digits

# Document syntax
OPEN_DELIM = os.getenv("LINEQPP_OPEN_DELIM", "{{")
CLOSE_DELIM = os.getenv("LINEQPP_CLOSE_DELIM", "}}")
COMMAND_PREFIX = os.getenv("LINEQPP_COMMAND_PREFIX", "@")
ANONYMOUS_KEYWORD = os.getenv("LINEQPP_ANONYMOUS_KEYWORD", "whatever")
COMMENT_CHAR = "#"

# Name bound to the imaginary unit in a fresh environment
IMAGINARY_UNIT = "i"

# Suffixes selecting the real or imaginary part of a reference
REAL_SUFFIX = "#r"
IMAG_SUFFIX = "#i"

ALLOWED_FUNCTIONS = {
    "sqrt": sp.sqrt,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "log": sp.log,
    "ln": sp.log,
    "exp": sp.exp,
    "abs": sp.Abs,
    "Abs": sp.Abs,
    # Degree variants, handy for drawing
    "sind": lambda z: sp.sin(z * sp.pi / 180),
    "cosd": lambda z: sp.cos(z * sp.pi / 180),
    "tand": lambda z: sp.tan(z * sp.pi / 180),
}

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Identifier occurrences inside literal text, optionally with a part suffix
REFERENCE_REGEX = re.compile(r"(?<![A-Za-z0-9_#])[A-Za-z_][A-Za-z0-9_]*(?:#[ri](?![A-Za-z0-9_]))?")
NUMBER_REGEX = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
IDENT_REGEX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
WHITESPACE_REGEX = re.compile(r"[ \t\r]+")
