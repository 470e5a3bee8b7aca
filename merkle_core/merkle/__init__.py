"""
Module 03 - Balanced Merkle Tree
Tree construction over power-of-two leaf sets and whole-tree verification.

This module provides:
- MerkleTree: build / root / verify plus read-only level views
- is_power_of_two, compute_tree_depth, merkle_parent, hash_level
- MerkleBuilder / MerkleVerifier: convenience wrappers

Tree Rules:
1. Leaf hashing: hash_leaf(block), order preserved
2. Parent hashing: hash_pair(left, right) = H(left + right)
3. Leaf count must be a power of two; no padding
4. Single leaf: root = hash_leaf(block)

Usage:
    from merkle_core.merkle import MerkleTree

    tree = MerkleTree.build([b"protein", b"powder", b"is", b"great"])
    assert MerkleTree.verify(tree.root(), [b"protein", b"powder", b"is", b"great"])
"""
from .merkle_tree import (
    MerkleTree,
    is_power_of_two,
    compute_tree_depth,
    merkle_parent,
    hash_level,
)

from .merkle_verifier import (
    MerkleBuilder,
    MerkleVerifier,
)


__all__ = [
    # Core type
    "MerkleTree",
    # Core functions
    "is_power_of_two",
    "compute_tree_depth",
    "merkle_parent",
    "hash_level",
    # Convenience classes
    "MerkleBuilder",
    "MerkleVerifier",
]
