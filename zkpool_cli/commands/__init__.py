"""
CLI command modules.
"""

from zkpool_cli.commands import prove, tree, verify

__all__ = ["prove", "tree", "verify"]
