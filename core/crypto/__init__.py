"""
Core cryptographic utilities.

Provides the hash capability injected into the commitment tree
and the canonical encodings for node values.
"""
from .hashing import (
    BN254_FIELD_MODULUS,
    NODE_BYTE_LENGTH,
    HashFunction,
    sha256,
    hash_to_field,
    field_hash,
    to_hex,
    from_hex,
    node_to_bytes,
    node_to_hex,
    parse_node,
)

__all__ = [
    "BN254_FIELD_MODULUS",
    "NODE_BYTE_LENGTH",
    "HashFunction",
    "sha256",
    "hash_to_field",
    "field_hash",
    "to_hex",
    "from_hex",
    "node_to_bytes",
    "node_to_hex",
    "parse_node",
]
