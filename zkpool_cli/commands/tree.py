"""
CLI Tree Commands

Build a tree from leaves and print its root, or print the zero table.

Usage:
    zkpool root 0x01 0x02 0x03 [--leaves-file leaves.txt] [--json]
    zkpool zeros [--height N] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import replace
from pathlib import Path

from core.config.runtime import RuntimeConfig
from core.crypto.hashing import node_to_hex, parse_node
from core.merkle.incremental_tree import IncrementalMerkleTree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def read_leaves_file(path: Path) -> list[str]:
    """Read one leaf per line; blank lines and '#' comments are skipped."""
    if not path.exists():
        raise FileNotFoundError(f"Leaves file not found: {path}")

    leaves = []
    for line in path.read_text().splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            leaves.append(line)
    return leaves


def collect_leaves(args: Namespace) -> list[int]:
    """Leaves from positional arguments followed by --leaves-file entries."""
    raw: list[str] = list(getattr(args, "leaves", None) or [])
    leaves_file = getattr(args, "leaves_file", None)
    if leaves_file:
        raw.extend(read_leaves_file(Path(leaves_file)))
    return [parse_node(leaf) for leaf in raw]


def build_tree(config: RuntimeConfig, leaves: list[int]) -> IncrementalMerkleTree:
    """
    Create a tree from config and insert leaves one at a time.

    Sequential insertion mirrors how the deposit contract grows the tree.
    """
    tree = config.create_tree()
    for leaf in leaves:
        tree.insert(leaf)
    logger.info("Built tree with %d leaves (height %d)", tree.leaf_count, tree.height)
    return tree


def root_cmd(args: Namespace) -> int:
    """Execute the root command."""
    config: RuntimeConfig = args.runtime_config
    tree = build_tree(config, collect_leaves(args))
    root = node_to_hex(tree.root())

    if args.json:
        print(json.dumps({
            "root": root,
            "leaf_count": tree.leaf_count,
            "height": tree.height,
        }, indent=2))
    else:
        print(root)
    return EXIT_SUCCESS


def zeros_cmd(args: Namespace) -> int:
    """Execute the zeros command."""
    config: RuntimeConfig = args.runtime_config
    tree_config = config.tree
    if getattr(args, "zeros_height", None) is not None:
        tree_config = replace(tree_config, height=args.zeros_height)
    zeros = [node_to_hex(z) for z in tree_config.build_zeros()]

    if args.json:
        print(json.dumps({"height": tree_config.height, "zeros": zeros}, indent=2))
    else:
        for level, value in enumerate(zeros):
            print(f"{level:>3}  {value}")
    return EXIT_SUCCESS
