"""
Schemas & Canonicalization
File: commitment.py

Purpose: Serializable shapes of commitment and proof outputs.

All byte strings and hashes cross process boundaries as 0x-prefixed
lowercase hex. These records are what the anchoring layer stores and what
an external verifier is handed.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# 0x followed by 64 hex chars = 32 bytes
HEX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

# 0x followed by any whole number of bytes
HEX_BYTES_PATTERN = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")


def validate_hex_hash(value: str, field_name: str) -> str:
    """Validate that a value is a 32-byte hex hash with 0x prefix."""
    if not HEX_HASH_PATTERN.match(value):
        raise ValueError(
            f"{field_name} must be a 32-byte hex string with 0x prefix "
            f"(64 hex chars), got: {value[:20]}"
        )
    return value.lower()


def validate_hex_bytes(value: str, field_name: str) -> str:
    """Validate that a value is 0x-prefixed hex of whole bytes."""
    if not HEX_BYTES_PATTERN.match(value):
        raise ValueError(
            f"{field_name} must be 0x-prefixed hex of whole bytes, got: {value[:20]}"
        )
    return value.lower()


class LeafRecord(BaseModel):
    """One committed field: its path, encoded path, value and leaf hash."""

    model_config = ConfigDict(extra="forbid")

    path: list[int] = Field(
        ...,
        description="Tags and entry indices, e.g. [454, 1, 456]",
    )
    path_encoded: str = Field(
        ...,
        description="Canonical CBOR of path (0x-prefixed hex)",
    )
    value_bytes: str = Field(
        ...,
        description="Exact UTF-8 bytes of the value (0x-prefixed hex)",
    )
    leaf_hash: Optional[str] = Field(
        default=None,
        description="keccak256(path_encoded ++ value_bytes) (0x-prefixed, 32 bytes)",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: list[int]) -> list[int]:
        if any(element < 0 for element in v):
            raise ValueError(f"path elements must be non-negative, got {v}")
        return v

    @field_validator("path_encoded", "value_bytes")
    @classmethod
    def validate_bytes_fields(cls, v: str, info) -> str:
        return validate_hex_bytes(v, info.field_name)

    @field_validator("leaf_hash")
    @classmethod
    def validate_leaf_hash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_hex_hash(v, "leaf_hash")


class CommitmentRecord(BaseModel):
    """
    Commitment output for one descriptor.

    root commits to every leaf; cbor is the canonical encoding of the whole
    tree that the anchoring layer stores alongside it.
    """

    model_config = ConfigDict(extra="forbid")

    root: str = Field(
        ...,
        description="Merkle root (0x-prefixed, 32 bytes)",
    )
    cbor: str = Field(
        ...,
        description="Canonical CBOR of the whole tree (0x-prefixed hex)",
    )
    leaves: list[LeafRecord] = Field(
        default_factory=list,
        description="Leaves in canonical (sorted) order",
    )

    @field_validator("root")
    @classmethod
    def validate_root(cls, v: str) -> str:
        return validate_hex_hash(v, "root")

    @field_validator("cbor")
    @classmethod
    def validate_cbor(cls, v: str) -> str:
        return validate_hex_bytes(v, "cbor")


class ProofRecord(BaseModel):
    """
    Inclusion proof for one field, as handed to an external verifier.

    The verifier uses path_encoded as opaque bytes; path is informational.
    """

    model_config = ConfigDict(extra="forbid")

    path: Optional[list[int]] = Field(
        default=None,
        description="Decoded field path (informational)",
    )
    path_encoded: str = Field(
        ...,
        description="Canonical CBOR of the field path (0x-prefixed hex)",
    )
    value_bytes: str = Field(
        ...,
        description="Exact UTF-8 bytes of the value (0x-prefixed hex)",
    )
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling hashes, bottom-up (0x-prefixed, 32 bytes each)",
    )
    directions: list[bool] = Field(
        default_factory=list,
        description="True when the current node is the right-hand child",
    )

    @field_validator("path_encoded", "value_bytes")
    @classmethod
    def validate_bytes_fields(cls, v: str, info) -> str:
        return validate_hex_bytes(v, info.field_name)

    @field_validator("proof")
    @classmethod
    def validate_siblings(cls, v: list[str]) -> list[str]:
        return [validate_hex_hash(sibling, "proof") for sibling in v]

    @model_validator(mode="after")
    def validate_parallel_lists(self) -> "ProofRecord":
        if len(self.proof) != len(self.directions):
            raise ValueError(
                f"proof has {len(self.proof)} siblings but "
                f"directions has {len(self.directions)} flags"
            )
        return self


__all__ = [
    "HEX_HASH_PATTERN",
    "HEX_BYTES_PATTERN",
    "validate_hex_hash",
    "validate_hex_bytes",
    "LeafRecord",
    "CommitmentRecord",
    "ProofRecord",
]
