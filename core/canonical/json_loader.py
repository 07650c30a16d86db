"""
Field Tree JSON Loading

Reads a field tree from JSON text without losing duplicate keys.

json.loads keeps only the last of two equal keys. An object-pairs hook
sees every (key, value) pair; an object with a repeated key is handed to
the tree builder as its pair list, so the builder rejects the duplicate.
Keys like "15" and "015" are distinct here and collide in the builder.

Expected shape:
    {"15": "USD", "454": [{"455": "91282CEZ7", "456": "1"}]}

Explicit group nodes are accepted too:
    {"454": {"tag": 454, "entries": [{"455": "91282CEZ7"}]}}
"""
from __future__ import annotations

import json
from typing import Any

from core.canonical.builder import build_canonical_tree
from core.schemas.errors import MalformedGroupError
from core.schemas.tree import FieldMap, Group, Scalar


class _Pairs(list):
    """A decoded JSON object, as its (key, value) pairs in source order."""


def _convert(value: Any) -> Any:
    """
    Map decoded JSON to builder input: objects become dicts, or pair lists
    when a key repeats; arrays become tuples of entries.
    """
    if isinstance(value, _Pairs):
        pairs = [(key, _convert(item)) for key, item in value]
        if len({key for key, _ in pairs}) != len(pairs):
            return pairs
        return dict(pairs)
    if isinstance(value, list):
        return tuple(_convert(item) for item in value)
    return value


def load_field_tree_json(text: str) -> Any:
    """
    Parse JSON text into builder input, keeping duplicate keys.

    Raises:
        MalformedGroupError: If the text is not JSON or not an object.
    """
    try:
        decoded = json.loads(text, object_pairs_hook=_Pairs)
    except json.JSONDecodeError as e:
        raise MalformedGroupError(f"Field tree is not valid JSON: {e}") from e

    if not isinstance(decoded, _Pairs):
        raise MalformedGroupError("Field tree JSON must be an object at the top level")
    return _convert(decoded)


def build_tree_from_json(text: str) -> FieldMap:
    """Parse JSON text and build its canonical tree in one step."""
    return build_canonical_tree(load_field_tree_json(text))


def field_map_to_jsonable(tree: FieldMap) -> dict[str, Any]:
    """
    Convert a canonical tree to JSON-ready values: tags as string keys in
    ascending order, groups as lists of objects.
    """
    root: dict[str, Any] = {}
    stack: list[tuple[FieldMap, dict[str, Any]]] = [(tree, root)]
    while stack:
        field_map, out = stack.pop()
        for tag, node in field_map.fields:
            if isinstance(node, Scalar):
                out[str(tag)] = node.value
            elif isinstance(node, Group):
                entries: list[dict[str, Any]] = []
                for entry in node.entries:
                    target: dict[str, Any] = {}
                    entries.append(target)
                    stack.append((entry, target))
                out[str(tag)] = entries
    return root


def dumps_field_tree(tree: FieldMap, indent: int | None = 2) -> str:
    """Render a canonical tree as JSON text."""
    return json.dumps(field_map_to_jsonable(tree), indent=indent, ensure_ascii=False)


__all__ = [
    "load_field_tree_json",
    "build_tree_from_json",
    "field_map_to_jsonable",
    "dumps_field_tree",
]
