"""
CLI Verify Command

Check a membership proof produced by `zkpool prove`.

Usage:
    zkpool verify proof.json [--root 0x...] [--json]
    zkpool prove ... | zkpool verify -
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.crypto.hashing import node_to_hex, parse_node
from core.merkle.merkle_proofs import MembershipProof, check_membership_proof
from core.schemas.errors import MerkleVerificationException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    source: str = ""
    root: str = ""
    leaf: str = ""
    index: int = 0
    depth: int = 0
    proof_ok: bool = False
    root_matches: bool | None = None
    error: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        for key in ("root_matches", "error"):
            if d[key] is None:
                del d[key]
        return d

    @property
    def all_ok(self) -> bool:
        """Check if all verifications passed."""
        return self.proof_ok and self.root_matches is not False


def load_proof(source: str) -> MembershipProof:
    """Load a proof from a JSON file, or stdin when source is '-'."""
    if source == "-":
        data = json.load(sys.stdin)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Proof file not found: {path}")
        data = json.loads(path.read_text())
    return MembershipProof.from_dict(data)


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"proof: {summary.source}")
    print(f"root: {summary.root}")
    print(f"leaf: {summary.leaf}")
    print(f"index: {summary.index}")
    print(f"depth: {summary.depth}")
    print(f"proof_ok: {str(summary.proof_ok).lower()}")
    if summary.root_matches is not None:
        print(f"root_matches: {str(summary.root_matches).lower()}")
    if summary.error is not None:
        print(f"reason: {summary.error['message']}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        Exit code (0 valid, 1 unreadable proof, 2 invalid proof)
    """
    try:
        proof = load_proof(args.proof_path)
    except (OSError, KeyError, TypeError, ValueError, ValidationError) as e:
        print(f"Error loading proof: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = VerifySummary(
        source=args.proof_path,
        root=node_to_hex(proof.root),
        leaf=node_to_hex(proof.leaf),
        index=proof.index,
        depth=proof.depth,
    )
    try:
        check_membership_proof(proof)
        summary.proof_ok = True
    except MerkleVerificationException as e:
        summary.error = e.to_error_model().model_dump()
        logger.debug("Proof rejected: %s", e)

    if args.root:
        summary.root_matches = parse_node(args.root) == proof.root

    logger.info("Proof for leaf %d verified: %s", proof.index, summary.all_ok)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if summary.all_ok else EXIT_VERIFICATION_FAILED
