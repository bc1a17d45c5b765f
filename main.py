# main.py
"""
PoE Item Parser - command-line entry point.

Equivalent to ``python -m core.cli``.
"""
from __future__ import annotations

import sys

from core.cli import cli_main


def main() -> None:
    """Main entry point for the PoE Item Parser."""
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
