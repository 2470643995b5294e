"""
Commitment Tree - Merkle accumulator and membership proofs.

This module provides:
- IncrementalMerkleTree: fixed-height, append-only tree with sparse storage
- MembershipProof: sibling path + side bits for one leaf
- build_zero_table: default values of empty subtrees
- verify_membership_proof: recompute a root from a proof

Usage:
    from core.merkle import (
        IncrementalMerkleTree, build_zero_table, verify_membership_proof,
        DEFAULT_TREE_HEIGHT, DEFAULT_ZERO_LEAF,
    )

    zeros = build_zero_table(DEFAULT_ZERO_LEAF, DEFAULT_TREE_HEIGHT)
    tree = IncrementalMerkleTree(DEFAULT_TREE_HEIGHT, zeros)
    for commitment in commitments:
        tree.insert(commitment)

    proof = tree.proof(tree.index_of(commitments[2]))
    assert verify_membership_proof(proof)
"""
from .merkle_proofs import (
    MembershipProof,
    compute_root_from_path,
    check_membership_proof,
    verify_membership_proof,
    MembershipProver,
    MembershipVerifier,
)
from .incremental_tree import IncrementalMerkleTree
from .zeros import (
    DEFAULT_TREE_HEIGHT,
    DEFAULT_ZERO_LEAF,
    POSEIDON2_BN254_ZEROS,
    build_zero_table,
    check_zero_table,
)


__all__ = [
    # Core types
    "IncrementalMerkleTree",
    "MembershipProof",
    # Zero table
    "DEFAULT_TREE_HEIGHT",
    "DEFAULT_ZERO_LEAF",
    "POSEIDON2_BN254_ZEROS",
    "build_zero_table",
    "check_zero_table",
    # Proof functions
    "compute_root_from_path",
    "check_membership_proof",
    "verify_membership_proof",
    # Convenience classes
    "MembershipProver",
    "MembershipVerifier",
]
