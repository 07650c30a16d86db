"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py and core/merkle/merkle_proofs.py

Tests:
1. Empty and single-leaf trees
2. Odd-node promotion (never duplicated, never padded)
3. Root determinism and input-order independence
4. Proof generation and verification for every index
5. Direction flags and tamper detection
6. Tree structure agrees with the root
"""
import pytest

from fixtures import SCENARIO_PATHS, make_leaves

from core.canonical.builder import build_canonical_tree
from core.crypto.hashing import keccak256
from core.merkle.leaves import enumerate_leaves
from core.merkle.merkle_tree import (
    EMPTY_TREE_ROOT,
    MerkleProof,
    build_merkle_path,
    build_merkle_root,
    build_merkle_tree_structure,
    compute_root,
    compute_tree_depth,
    generate_proof,
    leaf_hashes,
    merkle_parent,
    verify_merkle_proof,
    verify_proof,
)
from core.merkle.merkle_proofs import MerkleProver, MerkleVerifier
from core.schemas.errors import EmptyLeafSetError, PathNotFoundError


def _h(label: str) -> bytes:
    return keccak256(label.encode())


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_empty_hashes_returns_keccak_empty(self):
        assert build_merkle_root([]) == keccak256(b"")
        assert build_merkle_root([]) == EMPTY_TREE_ROOT

    def test_empty_leaves_root(self):
        assert compute_root([]) == EMPTY_TREE_ROOT

    def test_proof_for_empty_leaves_raises(self):
        with pytest.raises(EmptyLeafSetError):
            generate_proof([], [15])

    def test_path_for_empty_hashes_raises(self):
        with pytest.raises(EmptyLeafSetError, match="empty"):
            build_merkle_path([], 0)


class TestSingleLeaf:
    """Tests for single leaf tree behavior."""

    def test_single_leaf_root_equals_leaf(self):
        leaves = make_leaves(1)
        assert compute_root(leaves) == leaves[0].leaf_hash

    def test_single_leaf_proof_empty(self):
        leaves = make_leaves(1)
        proof = generate_proof(leaves, [0])

        assert proof.proof == []
        assert proof.directions == []
        assert proof.index == 0
        assert verify_merkle_proof(proof, compute_root(leaves))


class TestPromotion:
    """The unpaired last node of a level is promoted unchanged."""

    def test_two_leaves(self):
        a, b = _h("a"), _h("b")
        assert build_merkle_root([a, b]) == merkle_parent(a, b)

    def test_three_leaves(self):
        a, b, c = _h("a"), _h("b"), _h("c")
        expected = merkle_parent(merkle_parent(a, b), c)

        assert build_merkle_root([a, b, c]) == expected

    def test_three_leaves_not_duplicated(self):
        a, b, c = _h("a"), _h("b"), _h("c")
        duplicated = merkle_parent(merkle_parent(a, b), merkle_parent(c, c))

        assert build_merkle_root([a, b, c]) != duplicated

    def test_five_leaves(self):
        a, b, c, d, e = (_h(x) for x in "abcde")
        expected = merkle_parent(
            merkle_parent(merkle_parent(a, b), merkle_parent(c, d)),
            e,
        )

        assert build_merkle_root([a, b, c, d, e]) == expected

    def test_six_leaves(self):
        """Promotion happens at an upper level too."""
        a, b, c, d, e, f = (_h(x) for x in "abcdef")
        expected = merkle_parent(
            merkle_parent(merkle_parent(a, b), merkle_parent(c, d)),
            merkle_parent(e, f),
        )

        assert build_merkle_root([a, b, c, d, e, f]) == expected

    def test_parent_order(self):
        a, b = _h("a"), _h("b")
        assert merkle_parent(a, b) == keccak256(a + b)
        assert build_merkle_root([a, b]) != build_merkle_root([b, a])


class TestRootDeterminism:
    """The root is a function of the leaf set, not its order."""

    def test_same_leaves_same_root(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        assert compute_root(leaves) == compute_root(leaves)

    def test_input_order_irrelevant(self):
        leaves = make_leaves(7)
        assert compute_root(leaves) == compute_root(list(reversed(leaves)))

    def test_value_change_changes_root(self):
        leaves = enumerate_leaves(build_canonical_tree({15: "USD"}))
        other = enumerate_leaves(build_canonical_tree({15: "EUR"}))
        assert compute_root(leaves) != compute_root(other)

    def test_tag_change_changes_root(self):
        leaves = enumerate_leaves(build_canonical_tree({15: "USD"}))
        other = enumerate_leaves(build_canonical_tree({16: "USD"}))
        assert compute_root(leaves) != compute_root(other)

    def test_entry_index_change_changes_root(self):
        """Same tag and value, moved from entry 0 to entry 1 of group 454."""
        leaves = enumerate_leaves(build_canonical_tree({454: [{455: "X"}, {}]}))
        other = enumerate_leaves(build_canonical_tree({454: [{}, {455: "X"}]}))

        assert [leaf.path for leaf in leaves] == [(454, 0, 455)]
        assert [leaf.path for leaf in other] == [(454, 1, 455)]
        assert leaves[0].value_bytes == other[0].value_bytes
        assert compute_root(leaves) != compute_root(other)

    def test_leaf_hashes_sorted(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        by_path = {leaf.path: leaf.leaf_hash for leaf in leaves}

        assert leaf_hashes(leaves) == [by_path[path] for path in SCENARIO_PATHS]

    def test_scenario_root(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        h = {leaf.path: leaf.leaf_hash for leaf in leaves}
        expected = merkle_parent(
            merkle_parent(
                merkle_parent(h[(15,)], h[(454, 0, 455)]),
                merkle_parent(h[(454, 0, 456)], h[(454, 1, 455)]),
            ),
            h[(454, 1, 456)],
        )

        assert compute_root(leaves) == expected


class TestProofVerification:
    """Proofs verify for every index of every size."""

    @pytest.mark.parametrize("count", range(1, 18))
    def test_every_index_verifies(self, count):
        leaves = make_leaves(count)
        root = compute_root(leaves)

        for tag in range(count):
            proof = generate_proof(leaves, [tag])
            assert proof.index == tag
            assert verify_proof(root, proof.path_encoded, proof.value_bytes, proof.proof, proof.directions)

    @pytest.mark.parametrize("count", range(1, 18))
    def test_proof_length_bounded_by_depth(self, count):
        leaves = make_leaves(count)
        for tag in range(count):
            proof = generate_proof(leaves, [tag])
            assert len(proof.proof) <= compute_tree_depth(count) - 1

    def test_scenario_promoted_leaf_proof(self, scenario_tree):
        """The last of five leaves is promoted twice, then joins as right child."""
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        h = {leaf.path: leaf.leaf_hash for leaf in leaves}

        proof = generate_proof(leaves, [454, 1, 456])

        assert proof.index == 4
        assert proof.directions == [True]
        assert proof.proof == [
            merkle_parent(
                merkle_parent(h[(15,)], h[(454, 0, 455)]),
                merkle_parent(h[(454, 0, 456)], h[(454, 1, 455)]),
            )
        ]

    def test_scenario_first_leaf_proof(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        h = {leaf.path: leaf.leaf_hash for leaf in leaves}

        proof = generate_proof(leaves, [15])

        assert proof.index == 0
        assert proof.value_bytes == b"USD"
        assert proof.path_encoded == bytes.fromhex("810f")
        assert proof.directions == [False, False, False]
        assert proof.proof == [
            h[(454, 0, 455)],
            merkle_parent(h[(454, 0, 456)], h[(454, 1, 455)]),
            h[(454, 1, 456)],
        ]

    def test_scenario_right_child_proof(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        h = {leaf.path: leaf.leaf_hash for leaf in leaves}

        proof = generate_proof(leaves, [454, 1, 455])

        assert proof.index == 3
        assert proof.directions == [True, True, False]
        assert proof.proof == [
            h[(454, 0, 456)],
            merkle_parent(h[(15,)], h[(454, 0, 455)]),
            h[(454, 1, 456)],
        ]

    def test_path_must_match_exactly(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))

        with pytest.raises(PathNotFoundError) as exc_info:
            generate_proof(leaves, [454, 1])

        assert exc_info.value.details["path"] == [454, 1]

    def test_unknown_path(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        with pytest.raises(PathNotFoundError):
            generate_proof(leaves, [55])

    def test_build_merkle_path_index_out_of_range(self):
        with pytest.raises(IndexError):
            build_merkle_path([_h("a")], 1)


class TestTamperDetection:
    """Any change to a proof input makes verification fail."""

    @pytest.fixture
    def proven(self):
        leaves = make_leaves(6)
        root = compute_root(leaves)
        return root, generate_proof(leaves, [2])

    def test_valid_baseline(self, proven):
        root, proof = proven
        assert verify_merkle_proof(proof, root)

    def test_tampered_value(self, proven):
        root, proof = proven
        assert not verify_proof(root, proof.path_encoded, b"tampered", proof.proof, proof.directions)

    def test_tampered_path(self, proven):
        root, proof = proven
        assert not verify_proof(root, bytes.fromhex("8103"), proof.value_bytes, proof.proof, proof.directions)

    def test_tampered_sibling(self, proven):
        root, proof = proven
        siblings = list(proof.proof)
        siblings[0] = _h("forged")
        assert not verify_proof(root, proof.path_encoded, proof.value_bytes, siblings, proof.directions)

    def test_flipped_direction(self, proven):
        root, proof = proven
        directions = list(proof.directions)
        directions[0] = not directions[0]
        assert not verify_proof(root, proof.path_encoded, proof.value_bytes, proof.proof, directions)

    def test_wrong_root(self, proven):
        _, proof = proven
        assert not verify_merkle_proof(proof, _h("other root"))

    def test_mismatched_lengths_rejected(self, proven):
        root, proof = proven
        assert not verify_proof(root, proof.path_encoded, proof.value_bytes, proof.proof, proof.directions[:-1])

    def test_dropped_step(self, proven):
        root, proof = proven
        assert not verify_proof(root, proof.path_encoded, proof.value_bytes, proof.proof[:-1], proof.directions[:-1])


class TestMerkleProof:
    """Tests for MerkleProof dataclass."""

    def test_mismatched_lists_raise(self):
        with pytest.raises(ValueError, match="direction"):
            MerkleProof(path_encoded=b"\x81\x0f", value_bytes=b"USD", proof=[_h("a")], directions=[])

    def test_negative_index_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            MerkleProof(path_encoded=b"\x81\x0f", value_bytes=b"USD", proof=[], directions=[], index=-1)

    def test_leaf_property(self):
        proof = MerkleProof(path_encoded=b"\x81\x0f", value_bytes=b"USD", proof=[], directions=[])
        assert proof.leaf == keccak256(b"\x81\x0fUSD")


class TestTreeDepth:
    """Tests for compute_tree_depth()."""

    @pytest.mark.parametrize("count,depth", [
        (0, 0),
        (1, 1),
        (2, 2),
        (3, 3),
        (4, 3),
        (5, 4),
        (8, 4),
        (9, 5),
    ])
    def test_depth(self, count, depth):
        assert compute_tree_depth(count) == depth


class TestTreeStructure:
    """Tests for build_merkle_tree_structure()."""

    @pytest.mark.parametrize("count", range(0, 10))
    def test_structure_hash_equals_root(self, count):
        leaves = make_leaves(count)
        structure = build_merkle_tree_structure(leaves)

        assert structure.hash == compute_root(leaves)
        assert structure.kind == "root"

    def test_scenario_structure(self, scenario_tree):
        leaves = enumerate_leaves(build_canonical_tree(scenario_tree))
        structure = build_merkle_tree_structure(leaves)

        # Right child of the root is the promoted fifth leaf
        assert structure.right.kind == "leaf"
        assert structure.right.path == (454, 1, 456)
        assert structure.left.kind == "internal"
        assert structure.left.left.left.path == (15,)

    def test_to_dict(self):
        leaves = make_leaves(2)
        d = build_merkle_tree_structure(leaves).to_dict()

        assert d["type"] == "root"
        assert d["hash"].startswith("0x")
        assert d["left"]["type"] == "leaf"
        assert d["left"]["path"] == [0]
        assert d["right"]["path"] == [1]

    def test_single_leaf_root_keeps_path(self):
        structure = build_merkle_tree_structure(make_leaves(1))

        assert structure.kind == "root"
        assert structure.path == (0,)


class TestConvenienceClasses:
    """Tests for MerkleProver and MerkleVerifier."""

    def test_prover_and_verifier(self, scenario_tree):
        root = MerkleProver.compute_root_from_tree(scenario_tree)
        proof = MerkleProver.prove_field(scenario_tree, [454, 0, 455])

        assert MerkleVerifier.verify(proof, root)
        assert MerkleVerifier.verify_components(
            root, proof.path_encoded, proof.value_bytes, proof.proof, proof.directions
        )

    def test_prover_root_matches_function(self):
        leaves = make_leaves(4)
        assert MerkleProver.compute_root(leaves) == compute_root(leaves)

    def test_prover_prove(self):
        leaves = make_leaves(3)
        proof = MerkleProver.prove(leaves, [1])
        assert proof.value_bytes == b"value-1"
