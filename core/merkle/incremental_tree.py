"""
Commitment Tree - Incremental Merkle Tree
Append-only, fixed-height Merkle accumulator with sparse storage.

This module provides:
- IncrementalMerkleTree: insert, update, bulk initialize, root, proof

Storage Rules (Hard Contracts):
1. One list per level; level 0 holds the leaves, level `height` the root
2. Level L never holds more than ceil(leaf_count / 2**L) nodes
3. Any node past the end of its level list is implicitly zeros[L]
4. Every stored node at L > 0 equals hash(left, right) of its children
5. A mutation hashes its whole path before writing anything

Determinism Notes:
- Leaf order is insertion order; indices are never reused
- index_of resolves duplicate leaves to the lowest index
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from core.crypto.hashing import HashFunction, NodeLike, field_hash, parse_node
from core.merkle.merkle_proofs import MembershipProof
from core.schemas.errors import (
    ConfigurationException,
    LeafNotFoundException,
    NodeEncodingException,
    TreeFullException,
    TreeIndexException,
    TreeStateException,
)


logger = logging.getLogger(__name__)


class IncrementalMerkleTree:
    """
    Fixed-height binary Merkle tree whose empty subtrees are implied
    by a precomputed zero table.

    The tree is single-writer: mutations must not run concurrently with
    each other or with reads.

    Example:
        >>> zeros = build_zero_table(DEFAULT_ZERO_LEAF, 20)
        >>> tree = IncrementalMerkleTree(20, zeros)
        >>> tree.insert(commitment)
        0
        >>> proof = tree.proof(tree.index_of(commitment))
        >>> verify_membership_proof(proof)
        True
    """

    def __init__(
        self,
        height: int,
        zeros: Sequence[NodeLike],
        hash_fn: HashFunction = field_hash,
    ) -> None:
        """
        Args:
            height: Number of levels above the leaves (capacity is 2**height);
                0 gives a single-leaf tree whose root is the leaf
            zeros: Zero table with at least height + 1 entries
            hash_fn: Two-to-one hash used for every internal node

        Raises:
            ConfigurationException: If height is negative or the zero table is too short
        """
        if height < 0:
            raise ConfigurationException(
                f"Tree height must be non-negative, got {height}",
                details={"height": height},
            )
        if len(zeros) < height + 1:
            raise ConfigurationException(
                f"Not enough zero values for height {height}: "
                f"need {height + 1}, got {len(zeros)}",
                details={"height": height, "zero_count": len(zeros)},
            )

        self._height = height
        self._zeros: tuple[int, ...] = tuple(parse_node(z) for z in zeros[: height + 1])
        self._hash = hash_fn
        self._levels: list[list[int]] = [[] for _ in range(height + 1)]
        # Lowest index of each distinct leaf value; kept in sync on every write
        self._first_index: dict[int, int] = {}

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def height(self) -> int:
        return self._height

    @property
    def capacity(self) -> int:
        """Maximum number of leaves."""
        return 1 << self._height

    @property
    def zeros(self) -> tuple[int, ...]:
        return self._zeros

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0])

    def __len__(self) -> int:
        return self.leaf_count

    def leaves(self) -> list[int]:
        """Copy of the materialized leaves in index order."""
        return list(self._levels[0])

    def node(self, level: int, index: int) -> int:
        """
        Value of the node at (level, index), stored or implied.

        Raises:
            IndexError: If level or index is outside the tree
        """
        if not 0 <= level <= self._height:
            raise IndexError(f"Level {level} outside 0..{self._height}")
        if not 0 <= index < (1 << (self._height - level)):
            raise IndexError(f"Index {index} outside level {level}")
        return self._get(level, index)

    def _get(self, level: int, index: int) -> int:
        nodes = self._levels[level]
        if index < len(nodes):
            return nodes[index]
        return self._zeros[level]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def root(self) -> int:
        """Current root; zeros[height] while the tree is empty."""
        return self._get(self._height, 0)

    def index_of(self, leaf: NodeLike) -> int:
        """
        Lowest index holding the given leaf value, or -1.

        Values that cannot be a leaf (negative, malformed) are never
        stored and also give -1.
        """
        try:
            value = parse_node(leaf)
        except NodeEncodingException:
            return -1
        return self._first_index.get(value, -1)

    def proof(self, index: int) -> MembershipProof:
        """
        Build the membership proof for the leaf at index.

        Walks from the leaf to the root collecting the sibling at each
        level (stored value or zeros[level]) and the side of the path node.

        Raises:
            LeafNotFoundException: If no leaf is stored at index
        """
        if not 0 <= index < self.leaf_count:
            raise LeafNotFoundException(
                f"No leaf at index {index} (tree holds {self.leaf_count})",
                leaf_index=index,
            )

        path_elements: list[int] = []
        path_indices: list[int] = []
        current = index
        for level in range(self._height):
            path_elements.append(self._get(level, current ^ 1))
            path_indices.append(current & 1)
            current >>= 1

        return MembershipProof(
            root=self.root(),
            leaf=self._levels[0][index],
            index=index,
            path_elements=path_elements,
            path_indices=path_indices,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def initialize(self, leaves: Iterable[NodeLike]) -> None:
        """
        Bulk-load leaves into an empty tree and rebuild every level.

        Each level is computed once from the level below it, so the total
        number of hashes is about leaf_count rather than
        leaf_count * height.

        Raises:
            TreeStateException: If the tree already holds leaves
            TreeFullException: If there are more leaves than capacity
        """
        if self.leaf_count:
            raise TreeStateException(
                f"initialize() requires an empty tree, found {self.leaf_count} leaves",
                details={"leaf_count": self.leaf_count},
            )

        level_nodes = [parse_node(leaf) for leaf in leaves]
        if not level_nodes:
            return
        if len(level_nodes) > self.capacity:
            raise TreeFullException(
                f"{len(level_nodes)} leaves exceed tree capacity {self.capacity}",
                capacity=self.capacity,
            )

        levels = [level_nodes]
        for level in range(1, self._height + 1):
            below = levels[-1]
            zero = self._zeros[level - 1]
            parents = []
            for i in range(0, len(below), 2):
                right = below[i + 1] if i + 1 < len(below) else zero
                parents.append(self._hash(below[i], right))
            levels.append(parents)

        self._levels = levels
        for index, leaf in enumerate(level_nodes):
            self._first_index.setdefault(leaf, index)

        logger.info(
            "Initialized tree of height %d with %d leaves, root %#x",
            self._height, len(level_nodes), self.root(),
        )

    def insert(self, leaf: NodeLike) -> int:
        """
        Append a leaf at the next free index.

        Returns:
            The index assigned to the leaf

        Raises:
            TreeFullException: If the tree is at capacity
        """
        index = self.leaf_count
        self.update(index, leaf, is_insert=True)
        return index

    def update(self, index: int, leaf: NodeLike, is_insert: bool = False) -> int:
        """
        Write a leaf and recompute its path to the root in O(height).

        In insert mode index must equal leaf_count and the leaf count
        grows by one; otherwise index must name an existing leaf.

        Returns:
            The new root

        Raises:
            TreeIndexException: If index does not fit the requested mode
            TreeFullException: If inserting into a full tree
        """
        count = self.leaf_count
        if is_insert:
            if index >= self.capacity:
                raise TreeFullException(
                    f"Tree of height {self._height} is full ({self.capacity} leaves)",
                    capacity=self.capacity,
                )
            if index != count:
                raise TreeIndexException(
                    f"Insert must target the next free index {count}, got {index}; "
                    "use update for existing leaves",
                    leaf_index=index,
                    leaf_count=count,
                )
        elif not 0 <= index < count:
            raise TreeIndexException(
                f"No leaf at index {index} to update (tree holds {count}); "
                "use insert for new leaves",
                leaf_index=index,
                leaf_count=count,
            )

        value = parse_node(leaf)

        # Hash the whole path first so a failing hash leaves storage untouched
        writes: list[tuple[int, int, int]] = []
        current_value = value
        current = index
        for level in range(self._height):
            sibling = self._get(level, current ^ 1)
            writes.append((level, current, current_value))
            if current & 1:
                current_value = self._hash(sibling, current_value)
            else:
                current_value = self._hash(current_value, sibling)
            current >>= 1
        writes.append((self._height, 0, current_value))

        previous = None if is_insert else self._levels[0][index]
        for level, position, node_value in writes:
            nodes = self._levels[level]
            if position == len(nodes):
                nodes.append(node_value)
            else:
                nodes[position] = node_value

        self._reindex(index, previous, value)

        logger.debug(
            "%s leaf %d, root %#x",
            "Inserted" if is_insert else "Updated", index, current_value,
        )
        return current_value

    def _reindex(self, index: int, previous: int | None, value: int) -> None:
        if previous is not None and previous != value and self._first_index.get(previous) == index:
            del self._first_index[previous]
            # Fall back to a scan for the next occurrence of the displaced value
            for later, leaf in enumerate(self._levels[0]):
                if leaf == previous:
                    self._first_index[previous] = later
                    break

        known = self._first_index.get(value)
        if known is None or known > index:
            self._first_index[value] = index

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(height={self._height}, "
            f"leaf_count={self.leaf_count}, root={self.root():#x})"
        )


__all__ = [
    "IncrementalMerkleTree",
]
