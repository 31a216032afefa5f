"""
Entry point for running the complexity checker as a module.

Usage:
    python -m cyclomatic check ./src
    python -m cyclomatic --help
"""

import sys
from cyclomatic.cli import main

if __name__ == "__main__":
    sys.exit(main())
