"""
Core cryptographic utilities.

Keccak-256 hashing helpers for leaf and parent commitments.
"""
from .hashing import (
    HASH_SIZE,
    keccak256,
    hash_bytes,
    hash_leaf,
    hash_concat,
    to_hex,
    from_hex,
)

__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hash_bytes",
    "hash_leaf",
    "hash_concat",
    "to_hex",
    "from_hex",
]
