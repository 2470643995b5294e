"""
zkpool CLI

Command-line interface for the commitment tree.

Usage:
    python -m zkpool_cli root <leaf>... [--leaves-file PATH]
    python -m zkpool_cli prove --leaf <commitment> <leaf>... [--circuit]
    python -m zkpool_cli verify proof.json
    python -m zkpool_cli zeros [--height N]
    python -m zkpool_cli config --init
"""

__version__ = "0.1.0"
