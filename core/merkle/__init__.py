"""
Merkle Commitments over Descriptor Fields
Leaf enumeration, deterministic Merkle root construction, and field
inclusion proofs.

This module provides:
- Leaf / enumerate_leaves: One (path, value) leaf per scalar field
- compute_root: Root over canonically sorted leaves
- generate_proof / verify_proof: Inclusion proofs with direction flags
- build_merkle_tree_structure: Full tree for presentation

Canonical Commitment Rules:
1. Leaf hashing: keccak256(path_encoded ++ value_bytes)
2. Leaf order: byte-lexicographic on path_encoded
3. Parent hashing: keccak256(left ++ right)
4. Odd node: promoted unchanged to the next level
5. Empty tree: keccak256(b"")
6. Single leaf: root = leaf hash

Usage:
    from core.canonical import build_canonical_tree
    from core.merkle import enumerate_leaves, compute_root, generate_proof, verify_proof

    leaves = enumerate_leaves(build_canonical_tree(field_tree))
    root = compute_root(leaves)
    proof = generate_proof(leaves, [454, 1, 456])
    assert verify_proof(root, proof.path_encoded, proof.value_bytes,
                        proof.proof, proof.directions)
"""
from .leaves import (
    Leaf,
    enumerate_leaves,
)

from .merkle_tree import (
    EMPTY_TREE_ROOT,
    MerkleNode,
    MerkleProof,
    build_merkle_path,
    build_merkle_root,
    build_merkle_tree_structure,
    compute_root,
    compute_tree_depth,
    generate_proof,
    leaf_hashes,
    merkle_parent,
    sort_leaves,
    verify_merkle_proof,
    verify_proof,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "Leaf",
    "MerkleProof",
    "MerkleNode",
    "EMPTY_TREE_ROOT",
    # Core functions
    "enumerate_leaves",
    "merkle_parent",
    "sort_leaves",
    "leaf_hashes",
    "build_merkle_root",
    "build_merkle_path",
    "compute_root",
    "generate_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    "build_merkle_tree_structure",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
