"""
Commitment Tree Schemas
File: __init__.py

Purpose: Export the error taxonomy shared by the library and the CLI.
"""

from .errors import (
    ConfigurationException,
    ErrorCodes,
    LeafNotFoundException,
    MerkleVerificationException,
    NodeEncodingException,
    TreeError,
    TreeException,
    TreeFullException,
    TreeIndexException,
    TreeStateException,
)

__all__ = [
    "ErrorCodes",
    "TreeError",
    "TreeException",
    "ConfigurationException",
    "LeafNotFoundException",
    "TreeIndexException",
    "TreeFullException",
    "TreeStateException",
    "NodeEncodingException",
    "MerkleVerificationException",
]
