"""
Commitment Tree Schemas
File: errors.py

Purpose: Standard error taxonomy for the commitment tree.
Defines both Pydantic models for structured error reporting
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the project."""

    # Construction & Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Tree Access Errors
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    INDEX_MODE_VIOLATION = "INDEX_MODE_VIOLATION"
    TREE_FULL = "TREE_FULL"
    TREE_STATE_ERROR = "TREE_STATE_ERROR"

    # Encoding Errors
    NODE_ENCODING_ERROR = "NODE_ENCODING_ERROR"

    # Merkle & Commitment Errors
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class TreeError(BaseModel):
    """
    Base error model for structured error reporting.

    Used by the CLI to emit machine-readable failures without
    leaking tracebacks.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.LEAF_NOT_FOUND],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class TreeException(Exception):
    """
    Base exception for all commitment tree errors.

    Carries structured error information and can be converted
    to TreeError models for structured reporting.
    """

    def __init__(
        self,
        message: str,
        code: str = "TREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> TreeError:
        """Convert this exception to a TreeError model."""
        return TreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ConfigurationException(TreeException, ValueError):
    """Raised when the tree or runtime is configured inconsistently."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=details,
            retryable=False,
        )


class LeafNotFoundException(TreeException, LookupError):
    """Raised when a proof is requested for a leaf that was never written."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_NOT_FOUND,
            details=full_details,
            retryable=False,
        )


class TreeIndexException(TreeException, IndexError):
    """Raised when insert/update is called with an index that does not fit the mode."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        leaf_count: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        if leaf_count is not None:
            full_details["leaf_count"] = leaf_count
        super().__init__(
            message=message,
            code=ErrorCodes.INDEX_MODE_VIOLATION,
            details=full_details,
            retryable=False,
        )


class TreeFullException(TreeException):
    """Raised when a leaf would exceed the 2**height capacity."""

    def __init__(
        self,
        message: str,
        capacity: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if capacity is not None:
            full_details["capacity"] = capacity
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_FULL,
            details=full_details,
            retryable=False,
        )


class TreeStateException(TreeException):
    """Raised when an operation is not valid for the tree's current state."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_STATE_ERROR,
            details=details,
            retryable=False,
        )


class NodeEncodingException(TreeException, ValueError):
    """Raised when a value cannot be decoded into a node value."""

    def __init__(
        self,
        message: str,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if value is not None:
            full_details["value"] = repr(value)[:80]
        super().__init__(
            message=message,
            code=ErrorCodes.NODE_ENCODING_ERROR,
            details=full_details,
            retryable=False,
        )


class MerkleVerificationException(TreeException):
    """Exception raised when Merkle proof verification fails."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.MERKLE_PROOF_INVALID,
            details=full_details,
            retryable=False,
        )
