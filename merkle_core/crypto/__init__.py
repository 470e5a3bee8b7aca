"""
Core cryptographic utilities.

Provides the Hasher collaborator used by the Merkle tree engine.
"""
from .hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_HASHER,
    Hasher,
    HashlibHasher,
    get_hasher,
    sha256,
    hash_bytes,
    hash_leaf,
    hash_pair,
    hash_canonical,
    to_hex,
    from_hex,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_HASHER",
    "Hasher",
    "HashlibHasher",
    "get_hasher",
    "sha256",
    "hash_bytes",
    "hash_leaf",
    "hash_pair",
    "hash_canonical",
    "to_hex",
    "from_hex",
]
