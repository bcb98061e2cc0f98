"""
Entry point for running bartest as a module.

Usage:
    python -m bartest run --module my_suites --bars 60
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
