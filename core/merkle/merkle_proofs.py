"""
Commitment Tree - Membership Proofs
Proof model, root reconstruction and verification.

This module provides:
- MembershipProof: sibling path from a leaf up to the root
- compute_root_from_path: fold the hash up a path
- check_membership_proof: check a proof against its claimed root, raising
- verify_membership_proof: boolean form of the same check
- MembershipProver / MembershipVerifier: convenience wrappers

Path convention:
- path_elements[level] is the sibling of the path node at that level
- path_indices[level] is 0 when the path node is the left child,
  1 when it is the right child
"""
from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.crypto.hashing import HashFunction, NodeLike, field_hash, node_to_hex, parse_node
from core.schemas.errors import MerkleVerificationException


class MembershipProof(BaseModel):
    """
    Inclusion proof for a single leaf of an incremental Merkle tree.

    Attributes:
        root: Root the proof is against
        leaf: The committed leaf value
        index: 0-based position of the leaf
        path_elements: Sibling values from the leaf level upward
        path_indices: Side of the path node at each level (0 left, 1 right)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: int = Field(..., ge=0, description="Tree root at proof time")
    leaf: int = Field(..., ge=0, description="Leaf value being proven")
    index: int = Field(..., ge=0, description="Leaf position")
    path_elements: list[int] = Field(default_factory=list)
    path_indices: list[int] = Field(default_factory=list)

    @field_validator("path_elements")
    @classmethod
    def _elements_non_negative(cls, value: list[int]) -> list[int]:
        if any(element < 0 for element in value):
            raise ValueError("path elements must be non-negative")
        return value

    @field_validator("path_indices")
    @classmethod
    def _indices_are_bits(cls, value: list[int]) -> list[int]:
        if any(bit not in (0, 1) for bit in value):
            raise ValueError("path indices must be 0 or 1")
        return value

    @model_validator(mode="after")
    def _paths_same_length(self) -> "MembershipProof":
        if len(self.path_elements) != len(self.path_indices):
            raise ValueError(
                f"path_elements has {len(self.path_elements)} entries but "
                f"path_indices has {len(self.path_indices)}"
            )
        return self

    @property
    def depth(self) -> int:
        """Number of levels covered by the path."""
        return len(self.path_elements)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with canonical hex node encodings."""
        return {
            "root": node_to_hex(self.root),
            "leaf": node_to_hex(self.leaf),
            "index": self.index,
            "pathElements": [node_to_hex(e) for e in self.path_elements],
            "pathIndices": list(self.path_indices),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MembershipProof":
        """
        Parse a proof produced by to_dict().

        Node values may be in any encoding accepted by parse_node.
        """
        return cls(
            root=parse_node(data["root"]),
            leaf=parse_node(data["leaf"]),
            index=data["index"],
            path_elements=[parse_node(e) for e in data.get("pathElements", [])],
            path_indices=list(data.get("pathIndices", [])),
        )

    def to_circuit_inputs(self) -> dict[str, Any]:
        """
        Merkle part of the withdrawal circuit witness.

        The circuit takes the siblings as field strings and an is_even
        flag per level (True when the path node is the left child).
        """
        return {
            "root": node_to_hex(self.root),
            "merkle_proof": [node_to_hex(e) for e in self.path_elements],
            "is_even": [bit == 0 for bit in self.path_indices],
        }


def compute_root_from_path(
    leaf: int,
    path_elements: Sequence[int],
    path_indices: Sequence[int],
    hash_fn: HashFunction = field_hash,
) -> int:
    """
    Recompute the root implied by a leaf and its sibling path.

    Algorithm:
    1. Start with the leaf
    2. For each level (bottom-up):
       - path index 0: current = hash(current, sibling)
       - path index 1: current = hash(sibling, current)
    3. Return the final value

    Raises:
        ValueError: If the two sequences differ in length
    """
    if len(path_elements) != len(path_indices):
        raise ValueError("path_elements and path_indices must have equal length")

    current = leaf
    for sibling, side in zip(path_elements, path_indices):
        if side == 0:
            current = hash_fn(current, sibling)
        else:
            current = hash_fn(sibling, current)
    return current


def check_membership_proof(
    proof: MembershipProof,
    hash_fn: HashFunction = field_hash,
) -> None:
    """
    Verify a membership proof, raising on the first failed check.

    The path indices must spell out proof.index in little-endian bit
    order, and folding the hash up the path must reproduce proof.root.

    Args:
        proof: MembershipProof to verify
        hash_fn: Hash the tree was built with

    Raises:
        MerkleVerificationException: If the proof is invalid
    """
    if proof.index >> proof.depth:
        raise MerkleVerificationException(
            f"Index {proof.index} does not fit a path of depth {proof.depth}",
            leaf_index=proof.index,
        )

    for level, side in enumerate(proof.path_indices):
        if (proof.index >> level) & 1 != side:
            raise MerkleVerificationException(
                f"Path index at level {level} disagrees with leaf index {proof.index}",
                leaf_index=proof.index,
                details={"level": level},
            )

    computed = compute_root_from_path(
        proof.leaf, proof.path_elements, proof.path_indices, hash_fn
    )
    if computed != proof.root:
        raise MerkleVerificationException(
            f"Path reconstructs root {computed:#x}, proof claims {proof.root:#x}",
            leaf_index=proof.index,
        )


def verify_membership_proof(
    proof: MembershipProof,
    hash_fn: HashFunction = field_hash,
) -> bool:
    """
    Verify a membership proof.

    Returns:
        True if the proof is valid, False otherwise
    """
    try:
        check_membership_proof(proof, hash_fn)
    except MerkleVerificationException:
        return False
    return True


class MembershipProver:
    """
    Convenience class for generating membership proofs in one call.

    Example:
        >>> proof = MembershipProver.prove(leaves, leaf=leaves[1], height=4, zeros=zeros)
        >>> proof.index
        1
    """

    @staticmethod
    def prove(
        leaves: Sequence[NodeLike],
        leaf: NodeLike,
        height: int,
        zeros: Sequence[int],
        hash_fn: HashFunction = field_hash,
    ) -> MembershipProof:
        """
        Insert leaves into a fresh tree and prove the first occurrence of leaf.

        Raises:
            LeafNotFoundException: If leaf is not among leaves
        """
        # Local import to avoid a cycle with incremental_tree
        from core.merkle.incremental_tree import IncrementalMerkleTree

        tree = IncrementalMerkleTree(height, zeros, hash_fn=hash_fn)
        tree.initialize(leaves)
        return tree.proof(tree.index_of(leaf))

    @staticmethod
    def compute_root(
        leaves: Sequence[NodeLike],
        height: int,
        zeros: Sequence[int],
        hash_fn: HashFunction = field_hash,
    ) -> int:
        """Compute the root of a tree holding the given leaves."""
        from core.merkle.incremental_tree import IncrementalMerkleTree

        tree = IncrementalMerkleTree(height, zeros, hash_fn=hash_fn)
        tree.initialize(leaves)
        return tree.root()


class MembershipVerifier:
    """Convenience class for verifying membership proofs."""

    @staticmethod
    def verify(proof: MembershipProof, hash_fn: HashFunction = field_hash) -> bool:
        return verify_membership_proof(proof, hash_fn)

    @staticmethod
    def verify_leaf_in_root(
        leaf: NodeLike,
        index: int,
        path_elements: Sequence[NodeLike],
        root: NodeLike,
        hash_fn: HashFunction = field_hash,
    ) -> bool:
        """
        Verify a leaf is included in a root using raw components.

        Path indices are derived from index.
        """
        path = [parse_node(e) for e in path_elements]
        proof = MembershipProof(
            root=parse_node(root),
            leaf=parse_node(leaf),
            index=index,
            path_elements=path,
            path_indices=[(index >> level) & 1 for level in range(len(path))],
        )
        return verify_membership_proof(proof, hash_fn)


__all__ = [
    "MembershipProof",
    "compute_root_from_path",
    "check_membership_proof",
    "verify_membership_proof",
    "MembershipProver",
    "MembershipVerifier",
]
