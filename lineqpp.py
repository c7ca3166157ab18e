#!/usr/bin/env python3
"""
lineqpp - Linear Equation Preprocessor

Main entry point for the lineqpp document preprocessor.
This file serves as a thin wrapper that delegates all functionality
to the lineqpp_pkg package.

Usage:
    python lineqpp.py drawing.lep -o drawing.svg   # Preprocess a file
    python lineqpp.py -d < drawing.lep             # Show equation debugging
    python lineqpp.py --help                       # Show help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for lineqpp.

    Delegates all functionality to the lineqpp_pkg.cli module,
    which handles argument parsing, preprocessing, and exit codes.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        from lineqpp_pkg.cli import main_entry

        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        return 1
    except ImportError as e:
        print(f"Error: Failed to import lineqpp_pkg: {e}", file=sys.stderr)
        print("Please ensure all dependencies are installed: pip install -e .", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
