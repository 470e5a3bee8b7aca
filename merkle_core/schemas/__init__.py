"""
Schemas, canonical serialization and the error taxonomy.
"""
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    to_canonical_bytes,
)
from .errors import (
    CanonicalizationException,
    ConfigurationException,
    EmptyTreeException,
    ErrorCodes,
    InvalidLeafCountException,
    MerkleError,
    MerkleException,
    UnsupportedHashAlgorithmException,
)

__all__ = [
    # Canonical serialization
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "to_canonical_bytes",
    # Errors
    "CanonicalizationException",
    "ConfigurationException",
    "EmptyTreeException",
    "ErrorCodes",
    "InvalidLeafCountException",
    "MerkleError",
    "MerkleException",
    "UnsupportedHashAlgorithmException",
]
