"""
Merkle Proofs Convenience Wrappers
Thin class-based wrappers around the functions in merkle_tree.py.

This module provides:
- MerkleProver: Compute roots and generate proofs from leaves or field trees
- MerkleVerifier: Verify proofs from objects or raw components
"""
from __future__ import annotations

from typing import Any, Sequence

from core.canonical.builder import build_canonical_tree
from core.merkle.leaves import Leaf, enumerate_leaves
from core.merkle.merkle_tree import (
    MerkleProof,
    compute_root,
    generate_proof,
    verify_merkle_proof,
    verify_proof,
)


class MerkleProver:
    """
    Convenience class for computing roots and generating proofs.

    Example:
        >>> leaves = enumerate_leaves(build_canonical_tree({15: "USD"}))
        >>> proof = MerkleProver.prove(leaves, [15])
        >>> proof.value_bytes
        b'USD'
    """

    @staticmethod
    def prove(leaves: Sequence[Leaf], path: Sequence[int]) -> MerkleProof:
        """
        Generate a proof for the leaf at the given path.

        Raises:
            EmptyLeafSetError: If leaves is empty
            PathNotFoundError: If no leaf has this path
        """
        return generate_proof(leaves, path)

    @staticmethod
    def prove_field(field_tree: Any, path: Sequence[int]) -> MerkleProof:
        """
        Generate a proof straight from a parsed field tree.

        The tree is canonicalized and enumerated first.
        """
        leaves = enumerate_leaves(build_canonical_tree(field_tree))
        return generate_proof(leaves, path)

    @staticmethod
    def compute_root(leaves: Sequence[Leaf]) -> bytes:
        """Compute the 32-byte Merkle root for a leaf set."""
        return compute_root(leaves)

    @staticmethod
    def compute_root_from_tree(field_tree: Any) -> bytes:
        """Compute the 32-byte Merkle root for a parsed field tree."""
        return compute_root(enumerate_leaves(build_canonical_tree(field_tree)))


class MerkleVerifier:
    """
    Convenience class for verifying proofs.

    Verification needs no tree, schema or decoding: only the root and the
    proof's opaque bytes.

    Example:
        >>> proof = MerkleProver.prove(leaves, [15])
        >>> MerkleVerifier.verify(proof, root)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof, root: bytes) -> bool:
        """Verify a MerkleProof against a root."""
        return verify_merkle_proof(proof, root)

    @staticmethod
    def verify_components(
        root: bytes,
        path_encoded: bytes,
        value_bytes: bytes,
        proof: list[bytes],
        directions: list[bool],
    ) -> bool:
        """
        Verify a field inclusion from raw components.

        This is the exact computation an on-chain verifier performs.
        """
        return verify_proof(root, path_encoded, value_bytes, proof, directions)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
