"""Main entry point for running lineqpp_pkg as a module.

This allows running lineqpp with:
    python -m lineqpp_pkg drawing.lep -o drawing.svg
    python -m lineqpp_pkg -d < drawing.lep

This is equivalent to running:
    python -m lineqpp_pkg.cli
    python lineqpp.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
