"""Entry point for running dbxwrap as a module or CLI command.

Usage:
    # Run as a module
    python -m dbxwrap ls /

    # After pip install, run as a command
    dbxwrap ls /
"""

from __future__ import annotations

import sys

from .cli import main


def cli() -> None:
    """CLI entry point installed by pip.

    Registered in pyproject.toml as the console script entry point.
    """
    sys.exit(main())


if __name__ == "__main__":
    cli()
