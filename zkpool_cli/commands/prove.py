"""
CLI Prove Command

Build the tree from the deposit commitments and emit the membership
proof for one of them.

Usage:
    zkpool prove --leaf <commitment> <leaf>... [--circuit] [--out proof.json]
    zkpool prove --index 3 --leaves-file leaves.txt
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.config.runtime import RuntimeConfig
from core.crypto.hashing import parse_node
from core.merkle.merkle_proofs import MembershipProof
from zkpool_cli.commands.tree import build_tree, collect_leaves


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def render_proof(proof: MembershipProof, circuit: bool) -> str:
    """Proof JSON, either the full proof or the circuit witness subset."""
    data = proof.to_circuit_inputs() if circuit else proof.to_dict()
    return json.dumps(data, indent=2)


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config: RuntimeConfig = args.runtime_config
    tree = build_tree(config, collect_leaves(args))

    if args.leaf is not None:
        index = tree.index_of(parse_node(args.leaf))
        if index < 0:
            print(f"Error: leaf {args.leaf} is not in the tree", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
    else:
        index = args.index

    proof = tree.proof(index)
    logger.info("Generated proof for leaf %d against root %#x", index, proof.root)

    output = render_proof(proof, args.circuit)
    if args.out:
        Path(args.out).write_text(output + "\n")
        print(f"Proof written to {args.out}")
    else:
        print(output)
    return EXIT_SUCCESS
