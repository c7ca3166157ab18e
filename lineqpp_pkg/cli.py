"""Command-line interface: ``lineqpp [options] [input]``."""

from __future__ import annotations

import argparse
import sys

from . import config as _config
from .api import process
from .config import PACKAGE, VERSION
from .engine import LinearEngine
from .logging_config import get_logger, setup_logging
from .types import LineqppError

logger = get_logger("cli")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PACKAGE,
        description="Solve the linear equations embedded in a document and "
        "substitute the solved values into its text.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Input file (default is standard input)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Output to file (default is standard output)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print equation debugging information",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Print version information"
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Significant digits of substituted values"
    )
    parser.add_argument(
        "--max-stack-depth",
        type=int,
        help=f"Operand stack limit (default: {_config.MAX_STACK_DEPTH})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    return parser


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the lineqpp CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for argument, file or solving errors)
    """
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help exits 0, usage errors exit 2; report the latter as 1
        return 0 if e.code in (0, None) else 1

    if args.version:
        # stdout is reserved for the document
        print(f"Package: {PACKAGE} {VERSION}", file=sys.stderr)
        return 0

    if args.precision is not None and not 1 <= args.precision <= 17:
        print("Error: precision must be between 1 and 17", file=sys.stderr)
        return 1
    if args.max_stack_depth is not None and args.max_stack_depth < 1:
        print("Error: max stack depth must be a positive integer", file=sys.stderr)
        return 1

    setup_logging(level=args.log_level, log_file=args.log_file)

    filename = args.input or "<stdin>"
    try:
        if args.input:
            with open(args.input, "r", encoding="utf-8") as f:
                text = f.read()
        else:
            text = sys.stdin.read()
    except OSError as e:
        print(f"{filename}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        out = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    except OSError as e:
        print(f"{args.output}: {e.strerror or e}", file=sys.stderr)
        return 1

    engine = LinearEngine(
        verbose=args.debug,
        max_depth=args.max_stack_depth,
        precision=args.precision,
    )
    try:
        process(text, out, engine, filename)
        out.flush()
        return 0
    except LineqppError as err:
        out.flush()
        print(err.describe(), file=sys.stderr)
        logger.debug("fatal %s in %s", err.code, filename)
        return 1
    finally:
        engine.close()
        if out is not sys.stdout:
            out.close()


if __name__ == "__main__":
    sys.exit(main_entry())
