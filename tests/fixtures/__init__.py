"""
Test fixtures package for commitment tree tests.

Usage:
    from fixtures import make_tree, make_leaves, add_hash

    def test_something():
        tree = make_tree(height=3, leaves=make_leaves(5))
"""

from .tree_fixtures import (
    add_hash,
    FailingHash,
    make_leaves,
    make_zeros,
    make_tree,
    naive_root,
)

__all__ = [
    "add_hash",
    "FailingHash",
    "make_leaves",
    "make_zeros",
    "make_tree",
    "naive_root",
]
