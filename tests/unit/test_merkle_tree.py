"""
Merkle Tree Unit Tests
Tests for merkle_core/merkle/merkle_tree.py

Covered:
1. Node layout - 2N - 1 nodes, root first, parent = H(left + right)
2. Single leaf - one node that is both root and hashed leaf
3. Round trip - verify(build(leaves).root(), leaves) is True
4. Sensitivity - one changed byte or swapped leaves changes the root
5. Invalid leaf counts raise InvalidLeafCountException
6. Parallel builds match sequential builds
"""
import hashlib
import logging

import pytest

from merkle_core.crypto.hashing import HashlibHasher, hash_leaf, hash_pair, sha256
from merkle_core.merkle.merkle_tree import (
    MerkleTree,
    compute_tree_depth,
    hash_level,
    is_power_of_two,
    merkle_parent,
)
from merkle_core.schemas.errors import (
    EmptyTreeException,
    ErrorCodes,
    InvalidLeafCountException,
)


class TestIsPowerOfTwo:
    """Tests for is_power_of_two()."""

    def test_powers_of_two(self):
        for n in [1, 2, 4, 8, 16, 1024, 2 ** 20]:
            assert is_power_of_two(n), n

    def test_non_powers_of_two(self):
        for n in [0, 3, 5, 6, 7, 12, 1023, -1, -2]:
            assert not is_power_of_two(n), n


class TestComputeTreeDepth:
    """Tests for compute_tree_depth()."""

    def test_depth_single_leaf(self):
        assert compute_tree_depth(1) == 0

    def test_depth_power_of_two(self):
        assert compute_tree_depth(2) == 1
        assert compute_tree_depth(4) == 2
        assert compute_tree_depth(8) == 3
        assert compute_tree_depth(1024) == 10

    def test_depth_non_power_of_two_raises(self):
        with pytest.raises(InvalidLeafCountException):
            compute_tree_depth(3)

        with pytest.raises(InvalidLeafCountException):
            compute_tree_depth(0)


class TestBuildLayout:
    """Tests for the flat root-first node layout."""

    @pytest.mark.parametrize("n", [1, 2, 4, 8, 16, 32])
    def test_node_count_is_2n_minus_1(self, make_leaves, n):
        tree = MerkleTree.build(make_leaves(n))

        assert len(tree.nodes) == 2 * n - 1
        assert tree.node_count == 2 * n - 1
        assert tree.leaf_count == n

    @pytest.mark.parametrize("n", [1, 2, 4, 8])
    def test_root_is_node_zero(self, make_leaves, n):
        tree = MerkleTree.build(make_leaves(n))

        assert tree.root() == tree.nodes[0]

    def test_leaf_level_is_last_and_in_input_order(self, make_leaves):
        leaves = make_leaves(8)
        tree = MerkleTree.build(leaves)

        assert list(tree.nodes[-8:]) == [sha256(leaf) for leaf in leaves]
        assert list(tree.leaf_hashes) == [sha256(leaf) for leaf in leaves]

    def test_every_parent_hashes_its_children(self, make_leaves):
        tree = MerkleTree.build(make_leaves(16))
        levels = tree.levels

        for k in range(len(levels) - 1):
            parents = levels[k]
            children = levels[k + 1]
            assert len(children) == 2 * len(parents)
            for i, parent in enumerate(parents):
                left, right = children[2 * i], children[2 * i + 1]
                assert parent == sha256(left + right)

    def test_two_leaves_manual(self):
        a, b = b"a", b"b"
        tree = MerkleTree.build([a, b])

        ha, hb = sha256(a), sha256(b)
        assert tree.nodes == (sha256(ha + hb), ha, hb)

    def test_four_leaves_manual(self):
        leaves = [b"w", b"x", b"y", b"z"]
        hw, hx, hy, hz = (sha256(leaf) for leaf in leaves)

        # Level 2: [hw, hx, hy, hz]
        # Level 1: [H(hw+hx), H(hy+hz)]
        # Level 0: [root]
        wx = sha256(hw + hx)
        yz = sha256(hy + hz)
        root = sha256(wx + yz)

        tree = MerkleTree.build(leaves)

        assert tree.nodes == (root, wx, yz, hw, hx, hy, hz)

    def test_accepts_generator(self, make_leaves):
        leaves = make_leaves(4)

        from_list = MerkleTree.build(leaves)
        from_gen = MerkleTree.build(leaf for leaf in leaves)

        assert from_list == from_gen

    def test_empty_blocks_are_valid_leaves(self):
        tree = MerkleTree.build([b"", b""])

        empty = sha256(b"")
        assert tree.root() == sha256(empty + empty)

    def test_build_is_deterministic(self, make_leaves):
        roots = {MerkleTree.build(make_leaves(8)).root() for _ in range(5)}

        assert len(roots) == 1

    def test_records_algorithm(self, make_leaves):
        assert MerkleTree.build(make_leaves(2)).algorithm == "sha256"


class TestSingleLeaf:
    """Tests for N = 1."""

    def test_single_leaf_one_node(self):
        tree = MerkleTree.build([b"only"])

        assert len(tree.nodes) == 1
        assert tree.depth == 0

    def test_single_leaf_root_is_hashed_leaf(self):
        tree = MerkleTree.build([b"only"])

        assert tree.root() == sha256(b"only")
        assert tree.leaf_hashes == (tree.root(),)

    def test_single_leaf_verifies(self):
        tree = MerkleTree.build([b"only"])

        assert MerkleTree.verify(tree.root(), [b"only"])
        assert not MerkleTree.verify(tree.root(), [b"other"])


class TestProteinScenario:
    """["protein", "powder", "is", "great"]: N = 4, depth = 2."""

    def test_seven_nodes(self, protein_tree):
        assert len(protein_tree.nodes) == 7
        assert protein_tree.depth == 2

    def test_node_zero_is_root(self, protein_tree):
        assert protein_tree.nodes[0] == protein_tree.root()

    def test_verify_same_leaves(self, protein_tree, protein_leaves):
        assert MerkleTree.verify(protein_tree.root(), protein_leaves)

    def test_root_matches_independent_computation(self, protein_tree, protein_leaves):
        h = [hashlib.sha256(leaf).digest() for leaf in protein_leaves]
        left = hashlib.sha256(h[0] + h[1]).digest()
        right = hashlib.sha256(h[2] + h[3]).digest()
        expected = hashlib.sha256(left + right).digest()

        assert protein_tree.root() == expected


class TestInvalidLeafCount:
    """Non-power-of-two leaf counts are rejected, never padded."""

    def test_three_leaves_raises(self):
        with pytest.raises(InvalidLeafCountException) as exc_info:
            MerkleTree.build([b"a", b"b", b"c"])

        assert exc_info.value.code == ErrorCodes.INVALID_LEAF_COUNT
        assert exc_info.value.leaf_count == 3
        assert exc_info.value.details["leaf_count"] == 3

    def test_empty_leaves_raises(self):
        with pytest.raises(InvalidLeafCountException, match="power of two"):
            MerkleTree.build([])

    @pytest.mark.parametrize("n", [3, 5, 6, 7, 9, 12])
    def test_various_bad_counts(self, make_leaves, n):
        with pytest.raises(InvalidLeafCountException):
            MerkleTree.build(make_leaves(n))

    def test_verify_inherits_error(self, protein_tree):
        with pytest.raises(InvalidLeafCountException):
            MerkleTree.verify(protein_tree.root(), [b"protein", b"powder", b"is"])

    def test_bad_max_workers_raises(self, make_leaves):
        with pytest.raises(ValueError, match="max_workers"):
            MerkleTree.build(make_leaves(4), max_workers=0)


class TestRoot:
    """Tests for MerkleTree.root()."""

    def test_empty_tree_raises(self):
        with pytest.raises(EmptyTreeException, match="empty merkle tree"):
            MerkleTree().root()

    def test_empty_tree_error_code(self):
        with pytest.raises(EmptyTreeException) as exc_info:
            MerkleTree().root()

        assert exc_info.value.code == ErrorCodes.EMPTY_TREE

    def test_root_is_immutable_bytes(self, protein_tree):
        assert isinstance(protein_tree.root(), bytes)
        assert len(protein_tree.root()) == 32

    def test_malformed_node_count_rejected(self):
        with pytest.raises(ValueError, match="2N - 1"):
            MerkleTree(nodes=(sha256(b"a"), sha256(b"b")))


class TestVerify:
    """Tests for MerkleTree.verify()."""

    @pytest.mark.parametrize("n", [1, 2, 4, 8, 16])
    def test_round_trip(self, make_leaves, n):
        leaves = make_leaves(n)
        tree = MerkleTree.build(leaves)

        assert MerkleTree.verify(tree.root(), leaves)

    def test_one_byte_change_in_any_leaf(self, make_leaves):
        leaves = make_leaves(8)
        root = MerkleTree.build(leaves).root()

        for i in range(len(leaves)):
            tampered = list(leaves)
            altered = bytearray(tampered[i])
            altered[0] ^= 0x01
            tampered[i] = bytes(altered)

            assert MerkleTree.build(tampered).root() != root
            assert not MerkleTree.verify(root, tampered), f"Tamper undetected at {i}"

    def test_swapped_leaves_fail(self, protein_tree, protein_leaves):
        swapped = list(protein_leaves)
        swapped[0], swapped[1] = swapped[1], swapped[0]

        assert not MerkleTree.verify(protein_tree.root(), swapped)

    def test_swapped_across_subtrees_fail(self, make_leaves):
        leaves = make_leaves(8)
        root = MerkleTree.build(leaves).root()
        swapped = list(leaves)
        swapped[1], swapped[6] = swapped[6], swapped[1]

        assert not MerkleTree.verify(root, swapped)

    def test_wrong_root_fails(self, protein_leaves):
        assert not MerkleTree.verify(sha256(b"wrong root"), protein_leaves)

    def test_truncated_root_fails(self, protein_tree, protein_leaves):
        assert not MerkleTree.verify(protein_tree.root()[:-1], protein_leaves)

    def test_extended_root_fails(self, protein_tree, protein_leaves):
        assert not MerkleTree.verify(protein_tree.root() + b"\x00", protein_leaves)

    def test_accepts_bytearray_root(self, protein_tree, protein_leaves):
        assert MerkleTree.verify(bytearray(protein_tree.root()), protein_leaves)

    def test_mismatch_logged_at_debug(self, protein_leaves, caplog):
        with caplog.at_level(logging.DEBUG, logger="merkle_core.merkle.merkle_tree"):
            assert not MerkleTree.verify(sha256(b"nope"), protein_leaves)

        assert "root mismatch" in caplog.text

    def test_hasher_mismatch_fails(self, protein_leaves):
        root = MerkleTree.build(protein_leaves, hasher=HashlibHasher("sha3_256")).root()

        assert not MerkleTree.verify(root, protein_leaves)
        assert MerkleTree.verify(root, protein_leaves, hasher=HashlibHasher("sha3_256"))


class TestParallelBuild:
    """Fork-join hashing must not change the digest sequence."""

    @pytest.mark.parametrize("n", [1, 2, 8, 64])
    def test_parallel_matches_sequential(self, make_leaves, n):
        leaves = make_leaves(n)

        sequential = MerkleTree.build(leaves)
        parallel = MerkleTree.build(leaves, max_workers=4)

        assert parallel.nodes == sequential.nodes

    def test_parallel_verify(self, make_leaves):
        leaves = make_leaves(32)
        root = MerkleTree.build(leaves).root()

        assert MerkleTree.verify(root, leaves, max_workers=8)


class TestAlternativeHashers:
    """Any fixed-size hasher drives the same construction."""

    @pytest.mark.parametrize(
        "algorithm,size",
        [("sha256", 32), ("sha512", 64), ("sha3_256", 32), ("blake2b", 64), ("blake2s", 32)],
    )
    def test_digest_size_follows_hasher(self, make_leaves, algorithm, size):
        tree = MerkleTree.build(make_leaves(4), hasher=HashlibHasher(algorithm))

        assert all(len(node) == size for node in tree.nodes)
        assert tree.algorithm == algorithm

    def test_custom_hasher_object(self, make_leaves):
        class XorFoldHasher:
            """Toy 1-byte hasher to check the Hasher contract is all that's used."""
            name = "xorfold"
            digest_size = 1

            def hash_leaf(self, block: bytes) -> bytes:
                acc = 0
                for byte in block:
                    acc ^= byte
                return bytes([acc])

            def hash_pair(self, left: bytes, right: bytes) -> bytes:
                return self.hash_leaf(left + right)

        tree = MerkleTree.build(make_leaves(4), hasher=XorFoldHasher())

        assert len(tree.nodes) == 7
        assert all(len(node) == 1 for node in tree.nodes)
        assert tree.algorithm == "xorfold"


class TestViews:
    """Tests for read-only level views and serialization."""

    def test_levels_root_first(self, protein_tree):
        levels = protein_tree.levels

        assert [len(level) for level in levels] == [1, 2, 4]
        assert levels[0] == (protein_tree.root(),)

    def test_level_out_of_range(self, protein_tree):
        with pytest.raises(IndexError):
            protein_tree.level(3)

        with pytest.raises(IndexError):
            protein_tree.level(-1)

    def test_empty_tree_views(self):
        tree = MerkleTree()

        assert tree.levels == ()
        assert tree.leaf_hashes == ()
        assert tree.leaf_count == 0
        assert tree.depth == 0
        assert len(tree) == 0

    def test_to_dict(self, protein_tree):
        data = protein_tree.to_dict()

        assert data["algorithm"] == "sha256"
        assert data["leaf_count"] == 4
        assert data["depth"] == 2
        assert data["node_count"] == 7
        assert data["root"] == "0x" + protein_tree.root().hex()
        assert data["levels"][0] == [data["root"]]
        assert len(data["levels"][2]) == 4

    def test_root_hex(self, protein_tree):
        assert protein_tree.root_hex() == "0x" + protein_tree.root().hex()

    def test_tree_is_frozen(self, protein_tree):
        with pytest.raises(AttributeError):
            protein_tree.nodes = ()

    def test_repr_is_short(self, protein_tree):
        text = repr(protein_tree)

        assert text.startswith("MerkleTree(")
        assert "leaf_count=4" in text


class TestMerkleParent:
    """Tests for merkle_parent()."""

    def test_equals_sha256_concat(self):
        left = sha256(b"left")
        right = sha256(b"right")

        assert merkle_parent(left, right) == sha256(left + right)

    def test_order_matters(self):
        a = sha256(b"a")
        b = sha256(b"b")

        assert merkle_parent(a, b) != merkle_parent(b, a)

    def test_matches_hash_pair(self):
        a = hash_leaf(b"a")
        b = hash_leaf(b"b")

        assert merkle_parent(a, b) == hash_pair(a, b)


class TestHashLevel:
    """Tests for hash_level()."""

    def test_halves_level(self):
        level = [sha256(bytes([i])) for i in range(8)]

        parents = hash_level(level)

        assert len(parents) == 4
        assert parents[0] == sha256(level[0] + level[1])
        assert parents[3] == sha256(level[6] + level[7])

    def test_rejects_unpairable_levels(self):
        with pytest.raises(InvalidLeafCountException):
            hash_level([sha256(b"a")] * 3)

        with pytest.raises(InvalidLeafCountException):
            hash_level([sha256(b"a")])
