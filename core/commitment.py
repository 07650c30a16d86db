"""
Descriptor Commitment Computation & Verification

Provides pure functions that run the full pipeline over one field tree:

    build_canonical_tree -> encode_canonical_tree -> enumerate_leaves -> compute_root

and convert results to and from their serializable records.

Every computation is independent: nothing is cached or shared, so separate
descriptors can be committed in parallel with no coordination. Errors are
raised to the caller; no partial commitment is ever returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

from core.canonical.builder import build_canonical_tree
from core.canonical.encoder import encode_canonical_tree
from core.crypto.hashing import HASH_SIZE, from_hex, to_hex
from core.merkle.leaves import Leaf, enumerate_leaves
from core.merkle.merkle_tree import (
    MerkleNode,
    MerkleProof,
    build_merkle_tree_structure,
    compute_root,
    generate_proof,
    sort_leaves,
    verify_proof,
)
from core.schemas.commitment import CommitmentRecord, LeafRecord, ProofRecord
from core.schemas.errors import DescriptorError, ErrorCodes
from core.schemas.tree import FieldMap
from core.schemas.verification import CheckResult, VerificationResult


@dataclass(frozen=True)
class DescriptorCommitment:
    """
    Everything derived from one field tree.

    Attributes:
        tree: Canonical tree
        cbor: Canonical CBOR of the whole tree
        leaves: Leaves in canonical (sorted) order
        root: 32-byte Merkle root
    """
    tree: FieldMap
    cbor: bytes
    leaves: tuple[Leaf, ...]
    root: bytes

    @property
    def root_hex(self) -> str:
        return to_hex(self.root)

    def prove(self, path: Sequence[int]) -> MerkleProof:
        """Generate a proof for one of this commitment's fields."""
        return generate_proof(self.leaves, path)

    def structure(self) -> MerkleNode:
        """The full Merkle tree, for presentation."""
        return build_merkle_tree_structure(self.leaves)

    def to_record(self) -> CommitmentRecord:
        return CommitmentRecord(
            root=to_hex(self.root),
            cbor=to_hex(self.cbor),
            leaves=[leaf_to_record(leaf) for leaf in self.leaves],
        )


# =============================================================================
# Pipeline
# =============================================================================


def commit_canonical_tree(tree: FieldMap) -> DescriptorCommitment:
    """
    Commit an already-canonical tree.

    Raises:
        EncodingError: If a value or key cannot be canonically encoded.
    """
    cbor = encode_canonical_tree(tree)
    leaves = tuple(sort_leaves(enumerate_leaves(tree)))
    return DescriptorCommitment(
        tree=tree,
        cbor=cbor,
        leaves=leaves,
        root=compute_root(leaves),
    )


def commit_field_tree(field_tree: Any) -> DescriptorCommitment:
    """
    Canonicalize, encode and commit a parsed field tree.

    Args:
        field_tree: Mapping or (tag, value) pairs from the parser

    Returns:
        DescriptorCommitment with tree, cbor, sorted leaves and root

    Raises:
        DuplicateFieldError: If a tag repeats within one mapping level.
        MalformedGroupError: If a group or value has an invalid shape.
        EncodingError: If a tag or value cannot be canonically encoded.
    """
    return commit_canonical_tree(build_canonical_tree(field_tree))


def prove_field(field_tree: Any, path: Sequence[int]) -> MerkleProof:
    """
    Generate an inclusion proof for one field of a parsed field tree.

    Raises:
        PathNotFoundError: If the tree has no scalar at path.
        EmptyLeafSetError: If the tree has no scalar fields at all.
    """
    return commit_field_tree(field_tree).prove(path)


# =============================================================================
# Record Conversion
# =============================================================================


def leaf_to_record(leaf: Leaf) -> LeafRecord:
    return LeafRecord(
        path=list(leaf.path),
        path_encoded=to_hex(leaf.path_encoded),
        value_bytes=to_hex(leaf.value_bytes),
        leaf_hash=to_hex(leaf.leaf_hash),
    )


def proof_to_record(proof: MerkleProof) -> ProofRecord:
    return ProofRecord(
        path=list(proof.path),
        path_encoded=to_hex(proof.path_encoded),
        value_bytes=to_hex(proof.value_bytes),
        proof=[to_hex(sibling) for sibling in proof.proof],
        directions=list(proof.directions),
    )


def proof_from_record(record: ProofRecord) -> MerkleProof:
    return MerkleProof(
        path_encoded=from_hex(record.path_encoded),
        value_bytes=from_hex(record.value_bytes),
        proof=[from_hex(sibling) for sibling in record.proof],
        directions=list(record.directions),
        path=tuple(record.path or ()),
    )


# =============================================================================
# Verification
# =============================================================================


def _root_bytes(root: Union[bytes, str]) -> bytes:
    return from_hex(root) if isinstance(root, str) else bytes(root)


def verify_field_proof(proof: Union[MerkleProof, ProofRecord], root: Union[bytes, str]) -> bool:
    """
    Verify a proof (object or record) against a root (bytes or 0x hex).
    """
    if isinstance(proof, ProofRecord):
        proof = proof_from_record(proof)
    return verify_proof(
        _root_bytes(root),
        proof.path_encoded,
        proof.value_bytes,
        proof.proof,
        proof.directions,
    )


def _invalid_root(message: str) -> DescriptorError:
    return DescriptorError(code=ErrorCodes.INVALID_ROOT, message=message)


def verify_proof_record(record: ProofRecord, root: str) -> VerificationResult:
    """
    Verify a proof record and report each check.

    Checks:
    - root_format: root is a 32-byte hex hash
    - proof_inclusion: recomputed root equals the claimed root

    Returns:
        VerificationResult (ok=False on any failed check; never raises for
        malformed roots)
    """
    checks: list[CheckResult] = []

    try:
        root_bytes = from_hex(root)
    except ValueError as e:
        message = f"Root is not valid hex: {e}"
        checks.append(CheckResult.failed("root_format", message))
        return VerificationResult.failure(checks, _invalid_root(message))

    if len(root_bytes) != HASH_SIZE:
        message = f"Root must be {HASH_SIZE} bytes, got {len(root_bytes)}"
        checks.append(CheckResult.failed("root_format", message, {"length": len(root_bytes)}))
        return VerificationResult.failure(checks, _invalid_root(message))
    checks.append(CheckResult.passed("root_format", "Root is a 32-byte hash"))

    included = verify_field_proof(record, root_bytes)
    details = {"path": record.path, "steps": len(record.proof)}
    if included:
        checks.append(CheckResult.passed("proof_inclusion", "Field is committed under root", details))
        return VerificationResult.success(checks)

    checks.append(CheckResult.failed("proof_inclusion", "Recomputed root does not match", details))
    return VerificationResult.failure(checks)


__all__ = [
    "DescriptorCommitment",
    "commit_canonical_tree",
    "commit_field_tree",
    "prove_field",
    "leaf_to_record",
    "proof_to_record",
    "proof_from_record",
    "verify_field_proof",
    "verify_proof_record",
]
