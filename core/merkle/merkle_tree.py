"""
Merkle Tree Implementation
Deterministic Merkle commitment over descriptor leaves, proof generation,
and proof verification.

This module provides:
- Canonical leaf ordering by path_encoded
- Merkle root computation with odd-node promotion
- Inclusion proof generation for a field path
- Proof verification with the explicit direction convention
- The full tree structure, for presentation

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = keccak256(path_encoded ++ value_bytes)
2. Leaf order: ascending byte-lexicographic path_encoded (a strict prefix
   sorts first)
3. Parent hashing: parent = keccak256(left ++ right)
4. Odd node: the unpaired last node of a level is promoted unchanged; it is
   never hashed with itself or with padding
5. Empty leaves: root = keccak256(b"")
6. Single leaf: root = leaf hash
7. Direction flag: True means the current node is the RIGHT child (sibling
   on the left, parent = H(sibling ++ node)); False means LEFT child
   (parent = H(node ++ sibling)). Promoted levels emit no proof step.

Rule 7 must match an external verifier bit for bit.

Determinism Notes:
- Leaves are always re-sorted here; input order never affects the root
- No randomness, no shared state
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Optional, Sequence

from core.crypto.hashing import hash_concat, hash_leaf, keccak256, to_hex
from core.merkle.leaves import Leaf
from core.schemas.errors import EmptyLeafSetError, PathNotFoundError
from core.schemas.tree import Path


# Empty tree sentinel: keccak256 of empty bytes
EMPTY_TREE_ROOT: bytes = keccak256(b"")


@dataclass(frozen=True)
class MerkleProof:
    """
    An inclusion proof for a single descriptor field.

    Self-describing: a verifier needs only these values plus the root.

    Attributes:
        path_encoded: Canonical CBOR of the field path (opaque to verifiers)
        value_bytes: Exact UTF-8 bytes of the field value
        proof: Sibling hashes from bottom to top
        directions: Parallel flags, True when the current node is the
                    right-hand child at that step
        path: The decoded field path, for callers
        index: Position of the leaf in the sorted leaf list
    """
    path_encoded: bytes
    value_bytes: bytes
    proof: list[bytes]
    directions: list[bool]
    path: Path = ()
    index: int = 0

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if len(self.proof) != len(self.directions):
            raise ValueError(
                f"Proof has {len(self.proof)} siblings but "
                f"{len(self.directions)} direction flags"
            )
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")

    @property
    def leaf(self) -> bytes:
        """The leaf hash this proof starts from."""
        return hash_leaf(self.path_encoded, self.value_bytes)


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes: keccak256(left ++ right)
    """
    return hash_concat(left, right)


def sort_leaves(leaves: Sequence[Leaf]) -> list[Leaf]:
    """
    Sort leaves into canonical order.

    Python bytes compare byte-lexicographically with a strict prefix
    sorting first, which is exactly the canonical leaf order.
    """
    return sorted(leaves, key=lambda leaf: leaf.path_encoded)


def leaf_hashes(leaves: Sequence[Leaf]) -> list[bytes]:
    """Leaf hashes in canonical (sorted) order."""
    return [leaf.leaf_hash for leaf in sort_leaves(leaves)]


def _next_level(level: Sequence[bytes]) -> list[bytes]:
    """Pair adjacent nodes left to right; promote an unpaired last node."""
    next_level: list[bytes] = []
    for i in range(0, len(level), 2):
        if i + 1 < len(level):
            next_level.append(merkle_parent(level[i], level[i + 1]))
        else:
            next_level.append(level[i])
    return next_level


def build_merkle_root(hashes: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from leaf hashes that are already in canonical order.

    Promotion Rule: an unpaired last node moves up unchanged.
    Example: [a, b, c] -> [parent(a,b), c] -> parent(parent(a,b), c)

    Args:
        hashes: Ordered leaf hashes (32 bytes each)

    Returns:
        32-byte Merkle root (keccak256(b"") when empty)
    """
    if len(hashes) == 0:
        return EMPTY_TREE_ROOT

    current_level: list[bytes] = list(hashes)
    while len(current_level) > 1:
        current_level = _next_level(current_level)

    return current_level[0]


def compute_root(leaves: Sequence[Leaf]) -> bytes:
    """
    Compute the Merkle root of a leaf set.

    The root is a pure function of the multiset of leaves: they are sorted
    by path_encoded before hashing, whatever order they arrive in.

    Args:
        leaves: Leaves from enumerate_leaves(), any order

    Returns:
        32-byte Merkle root
    """
    return build_merkle_root(leaf_hashes(leaves))


def build_merkle_path(hashes: Sequence[bytes], index: int) -> tuple[list[bytes], list[bool]]:
    """
    Collect the sibling hashes and direction flags for one leaf position.

    Args:
        hashes: Ordered leaf hashes
        index: 0-based position of the target leaf

    Returns:
        (siblings, directions), bottom-up

    Raises:
        EmptyLeafSetError: If hashes is empty
        IndexError: If index is out of range
    """
    if len(hashes) == 0:
        raise EmptyLeafSetError("Cannot generate proof for empty leaf list")
    if index < 0 or index >= len(hashes):
        raise IndexError(f"Leaf index {index} out of range for {len(hashes)} leaves")

    siblings: list[bytes] = []
    directions: list[bool] = []
    current_level: list[bytes] = list(hashes)
    current_index = index

    while len(current_level) > 1:
        is_right = current_index % 2 == 1
        sibling_index = current_index - 1 if is_right else current_index + 1

        # No sibling means this node is promoted: nothing to record
        if sibling_index < len(current_level):
            siblings.append(current_level[sibling_index])
            directions.append(is_right)

        current_level = _next_level(current_level)
        current_index = current_index // 2

    return siblings, directions


def generate_proof(leaves: Sequence[Leaf], target_path: Sequence[int]) -> MerkleProof:
    """
    Generate an inclusion proof for the field at target_path.

    The path must match a leaf exactly (full sequence equality, not prefix).

    Args:
        leaves: Leaves from enumerate_leaves(), any order
        target_path: e.g. [15] or [454, 1, 456]

    Returns:
        MerkleProof carrying path_encoded, value_bytes, proof and directions

    Raises:
        EmptyLeafSetError: If leaves is empty
        PathNotFoundError: If no leaf has exactly this path
    """
    if len(leaves) == 0:
        raise EmptyLeafSetError("No leaves available for proof generation")

    ordered = sort_leaves(leaves)
    target = tuple(target_path)

    index = next((i for i, leaf in enumerate(ordered) if leaf.path == target), None)
    if index is None:
        raise PathNotFoundError(
            f"Target path {list(target)} not found in leaves",
            path=target,
        )

    siblings, directions = build_merkle_path([leaf.leaf_hash for leaf in ordered], index)
    found = ordered[index]
    return MerkleProof(
        path_encoded=found.path_encoded,
        value_bytes=found.value_bytes,
        proof=siblings,
        directions=directions,
        path=found.path,
        index=index,
    )


def verify_proof(
    root: bytes,
    path_encoded: bytes,
    value_bytes: bytes,
    proof: Sequence[bytes],
    directions: Sequence[bool],
) -> bool:
    """
    Verify an inclusion proof against a root.

    Algorithm (identical to the on-chain verifier):
    1. node = keccak256(path_encoded ++ value_bytes)
    2. For each (sibling, direction):
       - True:  node = keccak256(sibling ++ node)   (sibling was left)
       - False: node = keccak256(node ++ sibling)   (sibling was right)
    3. Accept iff node == root

    Args:
        root: Claimed 32-byte Merkle root
        path_encoded: Opaque encoded path bytes
        value_bytes: Field value bytes
        proof: Sibling hashes, bottom-up
        directions: Parallel direction flags

    Returns:
        True if the proof is valid, False otherwise (including when proof and
        directions differ in length)
    """
    if len(proof) != len(directions):
        return False

    node = hash_leaf(path_encoded, value_bytes)
    for sibling, is_right in zip(proof, directions):
        if is_right:
            node = merkle_parent(sibling, node)
        else:
            node = merkle_parent(node, sibling)

    return node == bytes(root)


def verify_merkle_proof(proof: MerkleProof, root: bytes) -> bool:
    """Verify a MerkleProof object against a root."""
    return verify_proof(root, proof.path_encoded, proof.value_bytes, proof.proof, proof.directions)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the depth of a Merkle tree with the given number of leaves.

    Depth is the number of levels from leaves to root (inclusive).
    A single leaf has depth 1, two leaves depth 2, three or four depth 3.

    Args:
        num_leaves: Number of leaves in the tree

    Returns:
        Tree depth (0 for empty tree)
    """
    if num_leaves == 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        # Promotion carries the odd node up, so the count rounds up
        n = (n + 1) // 2
        depth += 1

    return depth


# =============================================================================
# Tree Structure (Presentation)
# =============================================================================

NodeKind = Literal["leaf", "internal", "root"]


@dataclass(frozen=True)
class MerkleNode:
    """
    A node of the materialized Merkle tree.

    Every node is just a hash; kind is for presentation only. Internal
    nodes own exactly two children; a promoted node is carried up as is.
    """
    hash: bytes
    kind: NodeKind
    path: Optional[Path] = None
    left: Optional["MerkleNode"] = None
    right: Optional["MerkleNode"] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"hash": to_hex(self.hash), "type": self.kind}
        if self.path is not None:
            d["path"] = list(self.path)
        if self.left is not None:
            d["left"] = self.left.to_dict()
        if self.right is not None:
            d["right"] = self.right.to_dict()
        return d


def build_merkle_tree_structure(leaves: Sequence[Leaf]) -> MerkleNode:
    """
    Build the complete tree with every intermediate hash.

    The returned node's hash always equals compute_root(leaves).

    Args:
        leaves: Leaves from enumerate_leaves(), any order

    Returns:
        Root MerkleNode (kind "root")
    """
    if len(leaves) == 0:
        return MerkleNode(hash=EMPTY_TREE_ROOT, kind="root")

    level: list[MerkleNode] = [
        MerkleNode(hash=leaf.leaf_hash, kind="leaf", path=leaf.path)
        for leaf in sort_leaves(leaves)
    ]

    while len(level) > 1:
        parents: list[MerkleNode] = []
        for i in range(0, len(level), 2):
            if i + 1 < len(level):
                left, right = level[i], level[i + 1]
                parents.append(MerkleNode(
                    hash=merkle_parent(left.hash, right.hash),
                    kind="internal",
                    left=left,
                    right=right,
                ))
            else:
                parents.append(level[i])
        level = parents

    return replace(level[0], kind="root")


__all__ = [
    "EMPTY_TREE_ROOT",
    "MerkleProof",
    "MerkleNode",
    "merkle_parent",
    "sort_leaves",
    "leaf_hashes",
    "build_merkle_root",
    "compute_root",
    "build_merkle_path",
    "generate_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    "build_merkle_tree_structure",
]
