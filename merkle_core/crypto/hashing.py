"""
Module 02 - Hashing Utilities
Digest functions consumed by the Merkle tree engine.

This module provides:
- The Hasher protocol (hash_leaf / hash_pair) the tree engine depends on
- HashlibHasher: a Hasher backed by any fixed-size hashlib algorithm
- SHA-256 module-level helpers and canonical object hashing
- Hex encoding/decoding with 0x prefix

Hashing Rules:
1. Leaf digest: H(block)
2. Pair digest: H(left + right), left then right, no separator
3. No domain separation between leaf and pair hashing
"""
from __future__ import annotations

import hashlib
from typing import Any, Protocol, runtime_checkable

from merkle_core.schemas.canonical import dumps_canonical
from merkle_core.schemas.errors import UnsupportedHashAlgorithmException


DEFAULT_ALGORITHM = "sha256"


def _normalize_algorithm(algorithm: str) -> str:
    """Map spellings like "SHA-256" or "SHA3-256" to hashlib names."""
    name = algorithm.strip().lower()
    compact = name.replace("-", "").replace("_", "")
    known = sorted(hashlib.algorithms_guaranteed) + sorted(hashlib.algorithms_available)
    for candidate in known:
        if candidate.lower().replace("-", "").replace("_", "") == compact:
            return candidate.lower()
    return name


@runtime_checkable
class Hasher(Protocol):
    """Digest primitive used to build Merkle trees."""

    name: str
    digest_size: int

    def hash_leaf(self, block: bytes) -> bytes:
        ...

    def hash_pair(self, left: bytes, right: bytes) -> bytes:
        ...


class HashlibHasher:
    """
    Hasher backed by a fixed-size hashlib algorithm.

    Args:
        algorithm: Any name accepted by hashlib.new() whose digest has a
            fixed size (sha256, sha512, sha3_256, blake2b, ...).

    Raises:
        UnsupportedHashAlgorithmException: If the algorithm is unknown or
            has a variable-length digest (shake_128, shake_256).

    Example:
        >>> hasher = HashlibHasher("sha256")
        >>> hasher.digest_size
        32
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        name = _normalize_algorithm(algorithm)
        try:
            sample = hashlib.new(name)
        except (ValueError, TypeError) as e:
            raise UnsupportedHashAlgorithmException(algorithm) from e

        if name.startswith("shake") or sample.digest_size == 0:
            raise UnsupportedHashAlgorithmException(
                algorithm,
                message=f"Hash algorithm {algorithm!r} has no fixed digest size",
            )

        self.name = name
        self.digest_size = sample.digest_size

    def hash_leaf(self, block: bytes) -> bytes:
        """Digest of a single block."""
        return hashlib.new(self.name, block).digest()

    def hash_pair(self, left: bytes, right: bytes) -> bytes:
        """Digest of two concatenated digests: H(left + right)."""
        return self.hash_leaf(left + right)

    def __repr__(self) -> str:
        return f"HashlibHasher({self.name!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashlibHasher):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


DEFAULT_HASHER = HashlibHasher(DEFAULT_ALGORITHM)


def get_hasher(algorithm: str | None = None) -> HashlibHasher:
    """Return a hasher for the given algorithm name (SHA-256 if None)."""
    if algorithm is None or algorithm.lower() == DEFAULT_ALGORITHM:
        return DEFAULT_HASHER
    return HashlibHasher(algorithm)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_bytes(data: bytes) -> bytes:
    """Alias for sha256()."""
    return sha256(data)


def hash_leaf(block: bytes) -> bytes:
    """SHA-256 leaf digest of a block."""
    return DEFAULT_HASHER.hash_leaf(block)


def hash_pair(left: bytes, right: bytes) -> bytes:
    """
    SHA-256 parent digest of two children.

    Equivalent to hash_leaf(left + right).
    """
    return DEFAULT_HASHER.hash_pair(left, right)


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: sha256(dumps_canonical(obj).encode("utf-8"))

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


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

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


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
