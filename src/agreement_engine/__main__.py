"""Entry point for running the command line tools."""

import sys

from agreement_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
