"""
Module 03 - Merkle Tree Implementation
Balanced Merkle tree construction and whole-tree verification.

This module provides:
- MerkleTree: immutable tree over a power-of-two number of blocks
- MerkleTree.build / MerkleTree.root / MerkleTree.verify
- Power-of-two and depth helpers
- Optional fork-join hashing within a level

Tree Rules (Hard Contracts):
1. Leaf count must be a power of two (1, 2, 4, ...); anything else
   raises InvalidLeafCountException. There is no padding.
2. Leaf digest: hasher.hash_leaf(block), input order preserved
3. Parent digest: hasher.hash_pair(left, right) for pairs (2i, 2i+1)
4. Nodes are stored flat, root level first: nodes[0] is the root and
   level k occupies nodes[2**k - 1 : 2**(k + 1) - 1]
5. A tree over N leaves has exactly 2N - 1 nodes

Determinism Notes:
- Leaves are never sorted; order is part of the commitment
- Parallel hashing (max_workers > 1) preserves order and yields the
  same nodes as sequential hashing
"""
from __future__ import annotations

import hmac
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from merkle_core.crypto.hashing import DEFAULT_ALGORITHM, DEFAULT_HASHER, Hasher, to_hex
from merkle_core.schemas.errors import EmptyTreeException, InvalidLeafCountException

logger = logging.getLogger(__name__)


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ...; False for zero and negatives."""
    return n > 0 and (n & (n - 1)) == 0


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of pair-reduction rounds above the leaf level: log2(num_leaves).

    A single leaf has depth 0, four leaves have depth 2.

    Raises:
        InvalidLeafCountException: If num_leaves is not a power of two
    """
    if not is_power_of_two(num_leaves):
        raise InvalidLeafCountException(num_leaves)
    return num_leaves.bit_length() - 1


def merkle_parent(left: bytes, right: bytes, hasher: Hasher | None = None) -> bytes:
    """
    Compute the parent digest of two child digests.

    Defaults to SHA-256: sha256(left + right)
    """
    return (hasher or DEFAULT_HASHER).hash_pair(left, right)


def hash_level(
    level: Sequence[bytes],
    hasher: Hasher | None = None,
    executor: Executor | None = None,
) -> list[bytes]:
    """
    Reduce one level to the level above it.

    Consecutive digests (2i, 2i+1) are paired positionally, so the level
    length must itself be a power of two greater than one.

    Args:
        level: Digests of the current level, left to right
        hasher: Hasher to use (SHA-256 if None)
        executor: Optional executor; pairs are hashed concurrently and
            joined before returning

    Returns:
        Parent digests, half as many as the input

    Raises:
        InvalidLeafCountException: If the level cannot be paired
    """
    if len(level) < 2 or not is_power_of_two(len(level)):
        raise InvalidLeafCountException(
            len(level),
            message=f"Cannot pair a level of {len(level)} digests",
        )

    hasher = hasher or DEFAULT_HASHER
    lefts = level[0::2]
    rights = level[1::2]

    if executor is None:
        return [hasher.hash_pair(left, right) for left, right in zip(lefts, rights)]
    return list(executor.map(hasher.hash_pair, lefts, rights))


def _build_levels(
    blocks: Sequence[bytes],
    hasher: Hasher,
    depth: int,
    executor: Executor | None,
) -> list[list[bytes]]:
    """Hash the leaves and every level above them, leaf level first."""
    if executor is None:
        current = [hasher.hash_leaf(block) for block in blocks]
    else:
        current = list(executor.map(hasher.hash_leaf, blocks))

    levels = [current]
    for _ in range(depth):
        current = hash_level(current, hasher, executor)
        levels.append(current)
    return levels


@dataclass(frozen=True)
class MerkleTree:
    """
    A balanced Merkle tree.

    Construct with MerkleTree.build(); the instance is read-only afterwards.

    Attributes:
        nodes: Every digest in the tree, all levels concatenated root first
        algorithm: Name of the hasher that produced the digests

    Example:
        >>> tree = MerkleTree.build([b"protein", b"powder", b"is", b"great"])
        >>> len(tree.nodes)
        7
        >>> MerkleTree.verify(tree.root(), [b"protein", b"powder", b"is", b"great"])
        True
    """
    nodes: tuple[bytes, ...] = ()
    algorithm: str = DEFAULT_ALGORITHM

    def __post_init__(self) -> None:
        """Validate the node layout."""
        object.__setattr__(self, "nodes", tuple(self.nodes))
        if self.nodes and not is_power_of_two(len(self.nodes) + 1):
            raise ValueError(
                f"Node count must be 2N - 1 for a power-of-two N, got {len(self.nodes)}"
            )

    # ------------------------------------------------------------------
    # Build / root / verify
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        leaves: Iterable[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> MerkleTree:
        """
        Build a tree over an ordered sequence of blocks.

        Algorithm:
        1. Hash every block with hasher.hash_leaf (deepest level)
        2. Repeat log2(N) times: pair consecutive digests and hash each
           pair with hasher.hash_pair
        3. Concatenate the levels root first

        Args:
            leaves: Ordered blocks; the count must be a power of two
            hasher: Hasher to use (SHA-256 if None)
            max_workers: Hash each level on a thread pool of this size.
                None or 1 hashes sequentially.

        Returns:
            Fully populated MerkleTree

        Raises:
            InvalidLeafCountException: If the number of leaves is not a
                power of two (including zero)
            ValueError: If max_workers is less than 1
        """
        blocks = list(leaves)
        depth = compute_tree_depth(len(blocks))
        hasher = hasher or DEFAULT_HASHER

        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        if max_workers is not None and max_workers > 1 and len(blocks) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                levels = _build_levels(blocks, hasher, depth, executor)
        else:
            levels = _build_levels(blocks, hasher, depth, None)

        nodes = tuple(digest for level in reversed(levels) for digest in level)
        tree = cls(nodes=nodes, algorithm=hasher.name)

        logger.debug(
            "Built Merkle tree: leaves=%d depth=%d algorithm=%s root=%s",
            len(blocks), depth, hasher.name, to_hex(nodes[0]),
        )
        return tree

    def root(self) -> bytes:
        """
        Return the root digest (node 0).

        Raises:
            EmptyTreeException: If the tree has no nodes
        """
        if not self.nodes:
            raise EmptyTreeException()
        return self.nodes[0]

    @staticmethod
    def verify(
        root: bytes,
        leaves: Iterable[bytes],
        hasher: Hasher | None = None,
        max_workers: int | None = None,
    ) -> bool:
        """
        Check a claimed root against a leaf set.

        Always rebuilds the whole tree from the leaves, in the given order,
        and compares roots byte for byte. A mismatch returns False.

        Raises:
            InvalidLeafCountException: If the number of leaves is not a
                power of two. The caller validates counts beforehand when
                a plain False is wanted instead.
        """
        rebuilt = MerkleTree.build(leaves, hasher=hasher, max_workers=max_workers).root()
        claimed = bytes(root)
        matched = hmac.compare_digest(rebuilt, claimed)
        if not matched:
            logger.debug(
                "Merkle root mismatch: claimed=%s rebuilt=%s",
                to_hex(claimed), to_hex(rebuilt),
            )
        return matched

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def leaf_count(self) -> int:
        return (len(self.nodes) + 1) // 2

    @property
    def depth(self) -> int:
        """Number of levels above the leaves (0 for a single leaf)."""
        return max(self.leaf_count.bit_length() - 1, 0)

    def level(self, index: int) -> tuple[bytes, ...]:
        """
        Digests of one level; 0 is the root level, depth is the leaf level.

        Raises:
            IndexError: If the level does not exist
        """
        if not self.nodes or index < 0 or index > self.depth:
            raise IndexError(
                f"Level {index} out of range for tree of depth {self.depth}"
            )
        return self.nodes[(1 << index) - 1:(1 << (index + 1)) - 1]

    @property
    def levels(self) -> tuple[tuple[bytes, ...], ...]:
        """All levels, root level first."""
        if not self.nodes:
            return ()
        return tuple(self.level(i) for i in range(self.depth + 1))

    @property
    def leaf_hashes(self) -> tuple[bytes, ...]:
        """The hashed leaves, in input order."""
        if not self.nodes:
            return ()
        return self.level(self.depth)

    def root_hex(self) -> str:
        return to_hex(self.root())

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary with 0x-hex digests."""
        return {
            "algorithm": self.algorithm,
            "leaf_count": self.leaf_count,
            "depth": self.depth,
            "node_count": self.node_count,
            "root": self.root_hex(),
            "levels": [[to_hex(d) for d in level] for level in self.levels],
        }

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        root = to_hex(self.nodes[0]) if self.nodes else None
        return (
            f"MerkleTree(algorithm={self.algorithm!r}, "
            f"leaf_count={self.leaf_count}, root={root!r})"
        )


__all__ = [
    "MerkleTree",
    "is_power_of_two",
    "compute_tree_depth",
    "merkle_parent",
    "hash_level",
]
