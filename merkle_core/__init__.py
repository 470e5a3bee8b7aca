"""
Balanced Merkle tree construction and verification.

Usage:
    from merkle_core import MerkleTree

    leaves = [b"protein", b"powder", b"is", b"great"]
    tree = MerkleTree.build(leaves)
    assert MerkleTree.verify(tree.root(), leaves)
"""
from .crypto import Hasher, HashlibHasher, get_hasher
from .merkle import MerkleBuilder, MerkleTree, MerkleVerifier, is_power_of_two
from .schemas import EmptyTreeException, InvalidLeafCountException, MerkleException

__version__ = "0.1.0"

__all__ = [
    "Hasher",
    "HashlibHasher",
    "get_hasher",
    "MerkleTree",
    "MerkleBuilder",
    "MerkleVerifier",
    "is_power_of_two",
    "MerkleException",
    "InvalidLeafCountException",
    "EmptyTreeException",
]
