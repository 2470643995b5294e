"""
Commitment Tree - Zero Values
Default node values for empty subtrees.

zero[0] is the value of an empty leaf, zero[i] = hash(zero[i-1], zero[i-1])
is the root of an empty subtree of height i. A tree of height h needs
h + 1 entries.
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import HashFunction, field_hash, hash_to_field, parse_node
from core.schemas.errors import ConfigurationException


DEFAULT_TREE_HEIGHT: int = 20

# Empty-leaf constant for the default field hash
DEFAULT_ZERO_LEAF: int = hash_to_field(b"zkpool")

# Zero table of the deployed withdrawal circuit (Poseidon2 over BN254, height 20).
# Only consistent with a Poseidon2 backend; the default field hash yields
# a different table.
POSEIDON2_BN254_ZEROS: tuple[int, ...] = tuple(
    parse_node(value)
    for value in (
        "0x2d2334c6c22cca4c9f7c82c1253d2ebcf562d24fc3d19fa96f2b239ea106c15c",
        "0x1444b7b1faf9e7bf63d87b30634e1d022f3d408227c527983ca77961bfa4ac73",
        "0x091a219e533afef19b2aed1d87b40f5153422e733dea6068395a7a2aa2aecd64",
        "0x057832b286ae039a1c749ccd317100c5a1bc4d43794b72487f13825d30f58f06",
        "0x24619cc86b779233b85d09c04ac7a21c7b5d8f979ce84d271838b2ab187601ff",
        "0x18661f1ca28e3ad5f397039bd84dd5c291e6ed6a0a87c2b50a17dbcde8fdfccf",
        "0x19df16e2249be09b76bda09870b31839e07b509f9ec05f5ac8c92a2058dc99db",
        "0x0abe57148ab0d6512e33af103d4555827be4a4a46e35513cb500c430b4485df0",
        "0x1b37e1c00a6e4e66990a4b30adfdf92ad9dfa0714d91f5d94994b9d5e700fbe4",
        "0x2201260545c384bb92d5a6e846d1aef9329ea69c80ce4318ea650261e2e58352",
        "0x07df604cb8325e038eb5edcffca622f59c79f67cd7c7322df2e5510255b89c32",
        "0x2a7bdb23ace4ad9d76072981377d0c77a0b30958964c10f95c6e301b129e26a5",
        "0x179178211f5b95688304740e1bf5d1f9f4a45a80dd537fba74fa318883c97698",
        "0x04e1a0fd20754512d4e35dc05bd85b8503f579c640a64d29535d0b12625629f8",
        "0x2977922cf63fcfabb42b3d645478cfa76529a1c51c3586233933824cf9d81b97",
        "0x16e5304428134ad42b3c0fa1b49d2f5dde4222e5aecedefae66c37ac2429b5b6",
        "0x30447c94987fccba088ca9766c10fc87b306ed6d47c1c42a948d426fcdf10f7e",
        "0x1075de1da1b02ad5f86d6357a9257bf69ef6b0db36a5cb4c9fad6671a2f0aeab",
        "0x1abf7816fbfcda20a989d8b8baf4cdb6558267024ad747ffce15e3dd139dced0",
        "0x1e26be9ad01cdb41aed15fd8cc2b251e5682dbc995ca6cce6c14fb2be3a50b1f",
        "0x189a1825ac285fa50c4c63435058c7a61e215faecf49adcfd12ad87ffe6fc81f",
    )
)


def build_zero_table(
    zero_leaf: int,
    height: int,
    hash_fn: HashFunction = field_hash,
) -> list[int]:
    """
    Compute the zero table for a tree of the given height.

    Args:
        zero_leaf: Value of an empty leaf
        height: Number of levels above the leaves
        hash_fn: Hash used by the tree

    Returns:
        List of height + 1 node values

    Raises:
        ConfigurationException: If height is negative
    """
    if height < 0:
        raise ConfigurationException(
            f"Tree height must be non-negative, got {height}",
            details={"height": height},
        )

    zeros = [zero_leaf]
    for _ in range(height):
        zeros.append(hash_fn(zeros[-1], zeros[-1]))
    return zeros


def check_zero_table(zeros: Sequence[int], hash_fn: HashFunction = field_hash) -> None:
    """
    Check that each zero entry is the hash of two copies of the one below.

    A table built with another hash gives roots that change when the
    empty-leaf value is inserted, and proofs no circuit accepts.

    Raises:
        ConfigurationException: On the first level that does not match
    """
    for level in range(1, len(zeros)):
        if hash_fn(zeros[level - 1], zeros[level - 1]) != zeros[level]:
            raise ConfigurationException(
                f"Zero table does not match the tree hash at level {level}; "
                "a fixed table such as poseidon2 needs its own hash backend",
                details={"level": level},
            )


__all__ = [
    "DEFAULT_TREE_HEIGHT",
    "DEFAULT_ZERO_LEAF",
    "POSEIDON2_BN254_ZEROS",
    "build_zero_table",
    "check_zero_table",
]
