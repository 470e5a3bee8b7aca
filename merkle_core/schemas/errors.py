"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Error taxonomy for Merkle tree construction and verification.
Defines both Pydantic models for structured error reporting
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Tree construction
    INVALID_LEAF_COUNT = "INVALID_LEAF_COUNT"
    EMPTY_TREE = "EMPTY_TREE"

    # Hashing & serialization
    UNSUPPORTED_HASH_ALGORITHM = "UNSUPPORTED_HASH_ALGORITHM"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Runtime configuration
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Structured error model.

    Used where an error has to be reported as data rather than raised,
    e.g. the CLI's --json error output.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_LEAF_COUNT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "MerkleException":
        """Convert this error model to a raisable exception."""
        return MerkleException(
            code=self.code,
            message=self.message,
            details=self.details,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleException(Exception):
    """
    Base exception for all Merkle tree errors.

    Carries structured error information and can be converted
    to a MerkleError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidLeafCountException(MerkleException):
    """Raised when a leaf sequence length is not a power of two."""

    def __init__(
        self,
        leaf_count: int,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["leaf_count"] = leaf_count
        super().__init__(
            message=message or f"Leaf count must be a power of two, got {leaf_count}",
            code=ErrorCodes.INVALID_LEAF_COUNT,
            details=full_details,
        )
        self.leaf_count = leaf_count


class EmptyTreeException(MerkleException):
    """Raised when the root of a tree with no nodes is requested."""

    def __init__(self, message: str = "empty merkle tree") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_TREE)


class UnsupportedHashAlgorithmException(MerkleException):
    """Raised for unknown or variable-length hash algorithms."""

    def __init__(
        self,
        algorithm: str,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message=message or f"Unsupported hash algorithm: {algorithm!r}",
            code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
            details={"algorithm": algorithm},
        )


class CanonicalizationException(MerkleException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class ConfigurationException(MerkleException):
    """Exception raised for invalid runtime configuration values."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if key:
            full_details["key"] = key
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
        )
