"""
Canonicalization and deterministic encoding of FIX descriptor field trees.

This package provides:
- build_canonical_tree: Normalize a parsed field tree into a FieldMap
- encode_canonical_tree / encode_node / encode_path: Canonical CBOR bytes
- decode_canonical_tree / decode_path: Strict inverse, for inspection

Usage:
    from core.canonical import build_canonical_tree, encode_canonical_tree

    tree = build_canonical_tree({15: "USD", 454: [{455: "91282CEZ7", 456: "1"}]})
    cbor = encode_canonical_tree(tree)
"""
from .builder import (
    MAX_TAG,
    build_canonical_tree,
    normalize_tag,
)

from .encoder import (
    encode_canonical_tree,
    encode_head,
    encode_node,
    encode_path,
    encode_text,
    encode_uint,
)

from .json_loader import (
    build_tree_from_json,
    dumps_field_tree,
    field_map_to_jsonable,
    load_field_tree_json,
)

from .decoder import (
    decode_canonical_tree,
    decode_path,
)


__all__ = [
    # Builder
    "MAX_TAG",
    "build_canonical_tree",
    "normalize_tag",
    # Encoder
    "encode_canonical_tree",
    "encode_head",
    "encode_node",
    "encode_path",
    "encode_text",
    "encode_uint",
    # JSON input/output
    "build_tree_from_json",
    "dumps_field_tree",
    "field_map_to_jsonable",
    "load_field_tree_json",
    # Decoder
    "decode_canonical_tree",
    "decode_path",
]
