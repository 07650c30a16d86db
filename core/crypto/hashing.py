"""
Hashing Utilities
Keccak-256 hashing for descriptor Merkle commitments.

This module provides:
- keccak256 hashing for raw bytes (the hash an EVM verifier recomputes)
- Leaf and parent hash helpers with the exact concatenation order
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as given; nothing is trimmed or normalized
- Keccak-256 is the pre-standard padding variant, NOT hashlib.sha3_256
- All operations are deterministic and stateless
"""
from __future__ import annotations

from eth_utils import keccak


# Digest width in bytes
HASH_SIZE = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=bytes(data))


def hash_bytes(data: bytes) -> bytes:
    """
    Alias for keccak256() - the commitment hash of raw bytes.
    """
    return keccak256(data)


def hash_leaf(path_encoded: bytes, value_bytes: bytes) -> bytes:
    """
    Compute a leaf hash.

    Rule: leaf = keccak256(path_encoded ++ value_bytes)

    Args:
        path_encoded: Canonical CBOR encoding of the leaf path
        value_bytes: Exact UTF-8 bytes of the field value

    Returns:
        32-byte leaf hash
    """
    return keccak256(bytes(path_encoded) + bytes(value_bytes))


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    Used for Merkle parent hashes: parent = keccak256(left ++ right)

    Args:
        left: Left child hash
        right: Right child hash

    Returns:
        32-byte Keccak-256 digest of the concatenation
    """
    return keccak256(bytes(left) + bytes(right))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to a lowercase hex string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + bytes(data).hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert a hex string (with 0x prefix) to bytes.

    Raises:
        ValueError: If the string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hash_bytes",
    "hash_leaf",
    "hash_concat",
    "to_hex",
    "from_hex",
]
