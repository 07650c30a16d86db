"""
Canonical Tree Builder

Normalizes a parsed FIX field tree into a canonical FieldMap:
- tags become ints and each mapping level is held in ascending tag order
- repeating groups become explicit Group nodes with entries in given order
- nothing is added or dropped; absent optional fields simply have no key

Accepted input (the parser boundary):
- Mapping of tag -> value, or an ordered sequence of (tag, value) pairs
- tags as int or ASCII decimal strings (JSON object keys)
- value: str (scalar), list/tuple of entries (group), or an explicit
  group node {"tag": <int>, "entries": [...]}
- Scalar / Group / FieldMap values pass through and are re-validated

Duplicate policy: a tag that appears twice in one mapping level (including
"15" and 15 in the same map) raises DuplicateFieldError. The first-wins
alternative is never applied.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable, Sequence

from core.schemas.errors import DuplicateFieldError, EncodingError, MalformedGroupError
from core.schemas.tree import FieldMap, FieldNode, Group, Path, Scalar

# Largest value a canonical unsigned integer can carry (8-byte argument)
MAX_TAG = 2**64 - 1

_DECIMAL_TAG = re.compile(r"[0-9]+")


def normalize_tag(key: Any, path: Path = ()) -> int:
    """
    Convert a field identifier to a non-negative int.

    Raises:
        EncodingError: If the key is not an int or decimal string, is
            negative, or exceeds the 64-bit unsigned range.
    """
    # bool is a subclass of int but is never a tag
    if isinstance(key, bool):
        raise EncodingError(f"Boolean is not a valid tag: {key!r}", path=path)

    if isinstance(key, int):
        tag = key
    elif isinstance(key, str) and _DECIMAL_TAG.fullmatch(key):
        tag = int(key)
    else:
        raise EncodingError(
            f"Tag must be a non-negative integer, got {key!r}",
            path=path,
            details={"key": repr(key)},
        )

    if tag < 0 or tag > MAX_TAG:
        raise EncodingError(
            f"Tag out of range for canonical encoding: {tag}",
            path=path,
            details={"key": tag},
        )
    return tag


def ensure_text(value: str, path: Path) -> str:
    """Check that a scalar is representable as UTF-8 text."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(
            f"Value at path {list(path)} is not representable as UTF-8: {e.reason}",
            path=path,
        ) from e
    return value


def _is_pair(item: Any) -> bool:
    return isinstance(item, (list, tuple)) and len(item) == 2


def _iter_pairs(source: Any, path: Path) -> Iterable[tuple[Any, Any]]:
    if isinstance(source, FieldMap):
        return source.fields
    if isinstance(source, Mapping):
        return source.items()
    if isinstance(source, (list, tuple)) and all(_is_pair(item) for item in source):
        return [(item[0], item[1]) for item in source]
    raise MalformedGroupError(
        f"Expected a field mapping at path {list(path)}, got {type(source).__name__}",
        path=path,
    )


def _is_group_node(value: Any) -> bool:
    return isinstance(value, Mapping) and "entries" in value and "tag" in value


def _scalar_or_entries(value: Any, path: Path) -> Scalar | Sequence[Any]:
    """Return the Scalar for a text value, or the raw entries of a group."""
    if isinstance(value, Scalar):
        return Scalar(ensure_text(value.value, path))

    if isinstance(value, str):
        return Scalar(ensure_text(value, path))

    if isinstance(value, Group):
        entries = value.entries
    elif _is_group_node(value):
        declared = value["tag"]
        if declared is not None and normalize_tag(declared, path) != path[-1]:
            raise MalformedGroupError(
                f"Group tag mismatch at path {list(path)}: declared {declared!r}",
                path=path,
            )
        entries = value["entries"]
    elif isinstance(value, (list, tuple)):
        entries = value
    elif isinstance(value, (bool, int, float, bytes, bytearray)) or value is None:
        raise EncodingError(
            f"Value at path {list(path)} must be text, got {type(value).__name__}",
            path=path,
        )
    else:
        raise MalformedGroupError(
            f"Invalid value at path {list(path)}: {type(value).__name__}",
            path=path,
        )

    if not isinstance(entries, (list, tuple)):
        raise MalformedGroupError(
            f"Group entries must be a sequence at path {list(path)}",
            path=path,
        )
    return entries


class _MapFrame:
    """A mapping level under construction."""

    def __init__(self, source: Any, path: Path) -> None:
        self.path = path
        self.pairs = iter(_iter_pairs(source, path))
        self.fields: dict[int, FieldNode] = {}
        self.open_tag: int | None = None

    def step(self) -> "_GroupFrame | None":
        for key, value in self.pairs:
            tag = normalize_tag(key, self.path)
            field_path = self.path + (tag,)
            if tag in self.fields:
                raise DuplicateFieldError(
                    f"Duplicate tag at path {list(field_path)}",
                    path=field_path,
                )
            built = _scalar_or_entries(value, field_path)
            if isinstance(built, Scalar):
                self.fields[tag] = built
                continue
            self.open_tag = tag
            return _GroupFrame(built, field_path)
        return None

    def accept(self, group: Group) -> None:
        self.fields[self.open_tag] = group
        self.open_tag = None

    def result(self) -> FieldMap:
        return FieldMap(fields=tuple(sorted(self.fields.items(), key=lambda item: item[0])))


class _GroupFrame:
    """A repeating group under construction; entries keep their given order."""

    def __init__(self, entries: Sequence[Any], path: Path) -> None:
        self.path = path
        self.entries = entries
        self.built: list[FieldMap] = []

    def step(self) -> _MapFrame | None:
        index = len(self.built)
        if index < len(self.entries):
            return _MapFrame(self.entries[index], self.path + (index,))
        return None

    def accept(self, entry: FieldMap) -> None:
        self.built.append(entry)

    def result(self) -> Group:
        return Group(entries=tuple(self.built))


def _build_map(source: Any, path: Path) -> FieldMap:
    # Explicit stack, no recursion
    stack: list[_MapFrame | _GroupFrame] = [_MapFrame(source, path)]
    while True:
        frame = stack[-1]
        child = frame.step()
        if child is not None:
            stack.append(child)
            continue
        stack.pop()
        value = frame.result()
        if not stack:
            return value
        stack[-1].accept(value)


def build_canonical_tree(field_tree: Any) -> FieldMap:
    """
    Build the canonical form of a parsed field tree.

    Args:
        field_tree: Mapping or (tag, value) pair sequence from the parser.

    Returns:
        FieldMap with every level in ascending tag order.

    Raises:
        DuplicateFieldError: If a tag repeats within one mapping level.
        MalformedGroupError: If a group or value has an invalid shape.
        EncodingError: If a tag or scalar cannot be canonically encoded.

    Example:
        >>> tree = build_canonical_tree({"454": [{"456": "1", "455": "X"}], 15: "USD"})
        >>> tree.tags()
        [15, 454]
    """
    return _build_map(field_tree, ())


__all__ = [
    "MAX_TAG",
    "normalize_tag",
    "ensure_text",
    "build_canonical_tree",
]
