"""
Module execution entry point.

Allows running with: python -m zkpool_cli
"""

import sys
from zkpool_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
