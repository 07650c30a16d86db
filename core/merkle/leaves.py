"""
Leaf Enumerator
Walks a canonical tree and emits one commitment leaf per scalar field.

Each leaf path is fully qualified: every enclosing group contributes its
tag and the zero-based entry index, e.g. (454, 1, 456). Empty groups
contribute no leaves. Output order is traversal order; the Merkle engine
re-sorts by path_encoded, so traversal order never affects the root.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.canonical.encoder import encode_path
from core.crypto.hashing import hash_leaf
from core.schemas.errors import EncodingError
from core.schemas.tree import FieldMap, Group, Path, Scalar


@dataclass(frozen=True)
class Leaf:
    """
    One committed (path, value) pair.

    Attributes:
        path: Tags and entry indices locating the scalar
        path_encoded: Canonical CBOR of path (array of unsigned integers)
        value_bytes: Exact UTF-8 bytes of the scalar text
    """
    path: Path
    path_encoded: bytes
    value_bytes: bytes

    @property
    def leaf_hash(self) -> bytes:
        """keccak256(path_encoded ++ value_bytes)"""
        return hash_leaf(self.path_encoded, self.value_bytes)

    @classmethod
    def from_field(cls, path: Sequence[int], value: str) -> "Leaf":
        """Build a leaf from a path and its scalar text."""
        path = tuple(path)
        try:
            value_bytes = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(
                f"Value at path {list(path)} is not representable as UTF-8: {e.reason}",
                path=path,
            ) from e
        return cls(path=path, path_encoded=encode_path(path), value_bytes=value_bytes)


def enumerate_leaves(tree: FieldMap) -> list[Leaf]:
    """
    Produce one Leaf per present scalar field of a canonical tree.

    Nesting depth is bounded only by memory (explicit stack, no recursion).
    Duplicate paths are not detected here; the tree builder rejects them.

    Args:
        tree: Canonical tree from build_canonical_tree()

    Returns:
        Leaves in traversal order (unsorted)
    """
    leaves: list[Leaf] = []
    # Stack of (map, path prefix) still to visit
    stack: list[tuple[FieldMap, Path]] = [(tree, ())]

    while stack:
        field_map, prefix = stack.pop()
        pending: list[tuple[FieldMap, Path]] = []
        for tag, node in field_map.fields:
            path = prefix + (tag,)
            if isinstance(node, Scalar):
                leaves.append(Leaf.from_field(path, node.value))
            elif isinstance(node, Group):
                for index, entry in enumerate(node.entries):
                    pending.append((entry, path + (index,)))
            else:
                raise EncodingError(
                    f"Unexpected node {type(node).__name__} at path {list(path)}",
                    path=path,
                )
        stack.extend(reversed(pending))

    return leaves


__all__ = [
    "Leaf",
    "enumerate_leaves",
]
