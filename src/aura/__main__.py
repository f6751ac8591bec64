"""Entry point for running aura as a module."""

# main() in cli.py is the error boundary; it maps AppError to exit code 1.

import sys

from aura.cli import main

if __name__ == "__main__":
    sys.exit(main())
