"""
Canonical Encoder
Deterministic CBOR serialization of field trees and leaf paths.

Canonical Encoding Rules (Hard Contracts):
1. FieldMap -> definite-length map (major type 5), keys as unsigned
   integers (major type 0) in strictly ascending numeric order
2. Scalar -> definite-length text string (major type 3) of its exact UTF-8
3. Group -> definite-length array (major type 4) of entry maps
4. Path -> definite-length array of unsigned integers, in the given order
5. Every argument uses its shortest form: values < 24 are immediate, then
   1, 2, 4 or 8 big-endian bytes. No indefinite lengths, no tags, no floats.

Given the same logical value there is exactly one valid encoding, so any
independent implementation reproduces these bytes.

Example:
    encode_path((15,))           -> 81 0f
    encode_path((454, 1, 456))   -> 83 19 01c6 01 19 01c8
"""
from __future__ import annotations

from typing import Any, Sequence

from core.canonical.builder import MAX_TAG
from core.schemas.errors import DuplicateFieldError, EncodingError
from core.schemas.tree import FieldMap, FieldNode, Group, Path, Scalar


# CBOR major types (high 3 bits of the initial byte)
MAJOR_UNSIGNED = 0
MAJOR_TEXT = 3
MAJOR_ARRAY = 4
MAJOR_MAP = 5

# Additional-information values selecting the argument width
AI_UINT8 = 24
AI_UINT16 = 25
AI_UINT32 = 26
AI_UINT64 = 27


def encode_head(major: int, argument: int) -> bytes:
    """
    Encode a CBOR initial byte plus argument in shortest form.

    Args:
        major: Major type (0-7)
        argument: Unsigned argument (integer value, length or count)

    Returns:
        1, 2, 3, 5 or 9 bytes

    Raises:
        EncodingError: If the argument is negative or does not fit in 64 bits
    """
    if argument < 0 or argument > MAX_TAG:
        raise EncodingError(f"CBOR argument out of range: {argument}")

    prefix = major << 5
    if argument < 24:
        return bytes([prefix | argument])
    if argument <= 0xFF:
        return bytes([prefix | AI_UINT8]) + argument.to_bytes(1, "big")
    if argument <= 0xFFFF:
        return bytes([prefix | AI_UINT16]) + argument.to_bytes(2, "big")
    if argument <= 0xFFFFFFFF:
        return bytes([prefix | AI_UINT32]) + argument.to_bytes(4, "big")
    return bytes([prefix | AI_UINT64]) + argument.to_bytes(8, "big")


def _check_uint(value: Any, path: Sequence[Any]) -> int:
    # bool is a subclass of int and must not pass as a tag
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"Expected a non-negative integer at path {list(path)}, got {value!r}",
            path=path,
        )
    if value < 0 or value > MAX_TAG:
        raise EncodingError(
            f"Integer out of canonical range at path {list(path)}: {value}",
            path=path,
        )
    return value


def encode_uint(value: int) -> bytes:
    """Encode an unsigned integer (major type 0)."""
    return encode_head(MAJOR_UNSIGNED, _check_uint(value, ()))


def encode_text(value: str, path: Sequence[Any] = ()) -> bytes:
    """Encode a text string (major type 3) carrying its exact UTF-8 bytes."""
    if not isinstance(value, str):
        raise EncodingError(
            f"Scalar at path {list(path)} must be str, got {type(value).__name__}",
            path=path,
        )
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(
            f"Value at path {list(path)} is not representable as UTF-8: {e.reason}",
            path=path,
        ) from e
    return encode_head(MAJOR_TEXT, len(data)) + data


def _map_parts(field_map: FieldMap, path: Path) -> tuple[bytes, list[tuple[int, FieldNode]]]:
    keyed: list[tuple[int, FieldNode]] = [
        (_check_uint(tag, path), node) for tag, node in field_map.fields
    ]
    # Emit in ascending numeric order no matter how the map was assembled
    keyed.sort(key=lambda item: item[0])
    for (previous, _), (tag, _) in zip(keyed, keyed[1:]):
        if tag == previous:
            raise DuplicateFieldError(
                f"Duplicate tag at path {list(path + (tag,))}",
                path=path + (tag,),
            )
    return encode_head(MAJOR_MAP, len(keyed)), keyed


def _encode_node(node: Any, path: Path) -> bytes:
    out = bytearray()
    # Pending work, popped from the end: raw bytes to emit or (node, path)
    stack: list[bytes | tuple[Any, Path]] = [(node, path)]

    while stack:
        item = stack.pop()
        if isinstance(item, bytes):
            out += item
            continue

        current, current_path = item
        if isinstance(current, Scalar):
            out += encode_text(current.value, current_path)
        elif isinstance(current, Group):
            for index, entry in enumerate(current.entries):
                if not isinstance(entry, FieldMap):
                    raise EncodingError(
                        f"Group entry at path {list(current_path + (index,))} is not a FieldMap",
                        path=current_path + (index,),
                    )
            out += encode_head(MAJOR_ARRAY, len(current.entries))
            for index in reversed(range(len(current.entries))):
                stack.append((current.entries[index], current_path + (index,)))
        elif isinstance(current, FieldMap):
            head, keyed = _map_parts(current, current_path)
            out += head
            for tag, child in reversed(keyed):
                stack.append((child, current_path + (tag,)))
                stack.append(encode_head(MAJOR_UNSIGNED, tag))
        else:
            raise EncodingError(
                f"Cannot encode {type(current).__name__} at path {list(current_path)}",
                path=current_path,
            )
    return bytes(out)


def encode_node(node: FieldNode | FieldMap) -> bytes:
    """
    Encode a single canonical node (Scalar, Group or FieldMap).

    Raises:
        EncodingError: If a value or key cannot be canonically encoded.
    """
    return _encode_node(node, ())


def encode_canonical_tree(tree: FieldMap) -> bytes:
    """
    Encode a whole canonical tree as canonical CBOR.

    Args:
        tree: Canonical tree from build_canonical_tree()

    Returns:
        Canonical CBOR bytes (an empty tree encodes as a0)

    Raises:
        EncodingError: If a value or key cannot be canonically encoded.
    """
    if not isinstance(tree, FieldMap):
        raise EncodingError(
            f"Canonical tree must be a FieldMap, got {type(tree).__name__}"
        )
    return _encode_node(tree, ())


def encode_path(path: Sequence[int]) -> bytes:
    """
    Encode a leaf path as a definite-length array of unsigned integers.

    Elements are emitted in the given order, never sorted.

    Raises:
        EncodingError: If an element is negative, non-integer or too large.
    """
    out = bytearray(encode_head(MAJOR_ARRAY, len(path)))
    for element in path:
        out += encode_head(MAJOR_UNSIGNED, _check_uint(element, path))
    return bytes(out)


__all__ = [
    "encode_head",
    "encode_uint",
    "encode_text",
    "encode_node",
    "encode_canonical_tree",
    "encode_path",
]
