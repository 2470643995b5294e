"""
Commitment Tree - Hashing Utilities
Field-element hashing and node encodings for the commitment tree.

This module provides:
- SHA-256 hashing for raw bytes
- The HashFunction protocol the tree is parameterized over
- A default two-to-one field hash (SHA-256 reduced into the BN254 scalar field)
- Hex/bytes/int conversions for node values

Security/Determinism Notes:
- Node values are non-negative integers; the canonical wire form is a
  0x-prefixed, 64 digit, zero-padded hex string
- hash(left, right) is order sensitive; callers must never swap arguments
- Range checks against the field modulus are the caller's responsibility
  for leaves; hash outputs are always reduced
"""
from __future__ import annotations

import hashlib
from typing import Protocol, Union

from core.schemas.errors import NodeEncodingException


# Order of the BN254 (alt_bn128) scalar field
BN254_FIELD_MODULUS: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

# Width in bytes of an encoded node value
NODE_BYTE_LENGTH: int = 32

NodeLike = Union[int, str, bytes]


class HashFunction(Protocol):
    """Two-to-one compression function over node values."""

    def __call__(self, left: int, right: int) -> int: ...


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_to_field(data: bytes) -> int:
    """
    Hash raw bytes to an element of the BN254 scalar field.

    Rule: int.from_bytes(sha256(data), "big") mod p

    Args:
        data: Raw bytes to hash

    Returns:
        Integer in [0, BN254_FIELD_MODULUS)
    """
    return int.from_bytes(sha256(data), "big") % BN254_FIELD_MODULUS


def field_hash(left: int, right: int) -> int:
    """
    Default two-to-one hash for tree nodes.

    Both children are encoded as 32-byte big-endian words and the
    concatenation is hashed into the field:
    parent = sha256(enc(left) || enc(right)) mod p

    Args:
        left: Left child node value
        right: Right child node value

    Returns:
        Parent node value
    """
    return hash_to_field(node_to_bytes(left) + node_to_bytes(right))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        NodeEncodingException: If string doesn't start with 0x, has odd
                               length, or contains invalid hex characters
    """
    if not hex_string.startswith(("0x", "0X")):
        raise NodeEncodingException(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}...",
            value=hex_string,
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise NodeEncodingException(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}",
            value=hex_string,
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise NodeEncodingException(
            f"Invalid hex characters in string: {e}", value=hex_string
        ) from e


def node_to_bytes(value: int) -> bytes:
    """Encode a node value as a 32-byte big-endian word."""
    if value < 0:
        raise NodeEncodingException("Node values must be non-negative", value=value)
    try:
        return value.to_bytes(NODE_BYTE_LENGTH, "big")
    except OverflowError as e:
        raise NodeEncodingException(
            f"Node value does not fit in {NODE_BYTE_LENGTH} bytes", value=value
        ) from e


def node_to_hex(value: int) -> str:
    """
    Encode a node value in its canonical textual form.

    Example:
        >>> node_to_hex(255)
        '0x00000000000000000000000000000000000000000000000000000000000000ff'
    """
    return to_hex(node_to_bytes(value))


def parse_node(value: NodeLike) -> int:
    """
    Normalize a leaf or node value to its integer form.

    Accepted encodings:
    - int (non-negative, bool is rejected)
    - "0x"-prefixed hex string, any even or odd digit count up to 64 digits
    - decimal string
    - bytes of at most 32 bytes, big-endian

    Raises:
        NodeEncodingException: For any other type or malformed value
    """
    if isinstance(value, bool):
        raise NodeEncodingException("Booleans are not node values", value=value)

    if isinstance(value, int):
        result = value
    elif isinstance(value, (bytes, bytearray)):
        if len(value) > NODE_BYTE_LENGTH:
            raise NodeEncodingException(
                f"Node bytes must be at most {NODE_BYTE_LENGTH} long, got {len(value)}",
                value=value,
            )
        result = int.from_bytes(value, "big")
    elif isinstance(value, str):
        text = value.strip()
        is_hex = text.startswith(("0x", "0X"))
        if is_hex and len(text) > 2 + 2 * NODE_BYTE_LENGTH:
            raise NodeEncodingException("Hex node value exceeds 32 bytes", value=value)
        try:
            result = int(text[2:], 16) if is_hex else int(text, 10)
        except ValueError as e:
            raise NodeEncodingException(
                f"Cannot parse node value from {value!r}", value=value
            ) from e
    else:
        raise NodeEncodingException(
            f"Unsupported node value type: {type(value).__name__}", value=value
        )

    if result < 0:
        raise NodeEncodingException("Node values must be non-negative", value=value)
    if result.bit_length() > NODE_BYTE_LENGTH * 8:
        raise NodeEncodingException(
            f"Node value does not fit in {NODE_BYTE_LENGTH} bytes", value=value
        )
    return result


__all__ = [
    "BN254_FIELD_MODULUS",
    "NODE_BYTE_LENGTH",
    "NodeLike",
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
