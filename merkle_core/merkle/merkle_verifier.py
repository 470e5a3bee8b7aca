"""
Module 03 - Merkle Builder / Verifier Convenience Wrappers
Thin wrappers around MerkleTree for cleaner call sites.

This module provides class-based interfaces:
- MerkleBuilder: Build trees and roots from blocks or structured objects
- MerkleVerifier: Check claimed roots (raw or hex) against leaf sets

Structured objects become blocks through canonical JSON, so
{"b": 2, "a": 1} and {"a": 1, "b": 2} commit to the same leaf.
"""
from __future__ import annotations

from typing import Any, Sequence

from merkle_core.crypto.hashing import Hasher, from_hex
from merkle_core.merkle.merkle_tree import MerkleTree, is_power_of_two
from merkle_core.schemas.canonical import to_canonical_bytes


class MerkleBuilder:
    """
    Convenience class for building Merkle trees.

    Example:
        >>> root = MerkleBuilder.compute_root([b"a", b"b"])
        >>> len(root)
        32
    """

    @staticmethod
    def build(
        leaves: Sequence[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> MerkleTree:
        """Build a tree over raw blocks. See MerkleTree.build."""
        return MerkleTree.build(leaves, hasher=hasher, max_workers=max_workers)

    @staticmethod
    def compute_root(
        leaves: Sequence[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> bytes:
        """Root digest for a sequence of raw blocks."""
        return MerkleTree.build(leaves, hasher=hasher, max_workers=max_workers).root()

    @staticmethod
    def blocks_from_objects(objects: Sequence[Any]) -> list[bytes]:
        """
        Convert objects to blocks via canonical JSON (UTF-8).

        Raises:
            CanonicalizationException: If an object cannot be serialized
        """
        return [to_canonical_bytes(obj) for obj in objects]

    @staticmethod
    def build_from_objects(
        objects: Sequence[Any],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> MerkleTree:
        """
        Build a tree whose blocks are the canonical JSON of each object.

        Raises:
            InvalidLeafCountException: If len(objects) is not a power of two
            CanonicalizationException: If an object cannot be serialized
        """
        blocks = MerkleBuilder.blocks_from_objects(objects)
        return MerkleTree.build(blocks, hasher=hasher, max_workers=max_workers)


class MerkleVerifier:
    """
    Convenience class for verifying claimed roots.

    Example:
        >>> tree = MerkleBuilder.build([b"a", b"b"])
        >>> MerkleVerifier.verify_hex(tree.root_hex(), [b"a", b"b"])
        True
    """

    @staticmethod
    def check_leaf_count(leaves: Sequence[Any]) -> bool:
        """
        Whether a leaf sequence has a buildable length.

        Lets callers turn a bad count into a plain False before calling
        verify(), which raises for it.
        """
        return is_power_of_two(len(leaves))

    @staticmethod
    def verify(
        root: bytes,
        leaves: Sequence[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> bool:
        """Rebuild from leaves and compare to the claimed root."""
        return MerkleTree.verify(root, leaves, hasher=hasher, max_workers=max_workers)

    @staticmethod
    def verify_hex(
        root_hex: str,
        leaves: Sequence[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> bool:
        """
        Verify a 0x-prefixed hex root.

        Raises:
            ValueError: If root_hex is not valid 0x-prefixed hex
        """
        return MerkleTree.verify(
            from_hex(root_hex), leaves, hasher=hasher, max_workers=max_workers
        )

    @staticmethod
    def verify_objects(
        root: bytes,
        objects: Sequence[Any],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> bool:
        """Verify a root built with MerkleBuilder.build_from_objects."""
        blocks = MerkleBuilder.blocks_from_objects(objects)
        return MerkleTree.verify(root, blocks, hasher=hasher, max_workers=max_workers)


__all__ = [
    "MerkleBuilder",
    "MerkleVerifier",
]
