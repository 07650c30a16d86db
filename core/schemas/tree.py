"""
Schemas & Canonicalization
File: tree.py

Purpose: Field tree node types.

A field tree node is either a Scalar (exact FIX text value) or a Group
(ordered repeating-group entries, each entry a FieldMap). A FieldMap built
by core.canonical.builder holds its fields in strictly ascending tag order;
group entry order is always preserved exactly as given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union


# Path: tags alternating with zero-based entry indices, e.g. (454, 1, 456)
Path = tuple[int, ...]


@dataclass(frozen=True)
class Scalar:
    """A scalar field value, kept as its exact original text."""
    value: str


@dataclass(frozen=True)
class Group:
    """A repeating group: an ordered sequence of entry maps."""
    entries: tuple["FieldMap", ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator["FieldMap"]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> "FieldMap":
        return self.entries[index]


FieldNode = Union[Scalar, Group]


@dataclass(frozen=True)
class FieldMap:
    """
    One mapping level of a field tree.

    Attributes:
        fields: (tag, node) pairs. Canonical maps hold them in strictly
                ascending tag order.
    """
    fields: tuple[tuple[int, FieldNode], ...] = ()

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[int]:
        return (tag for tag, _ in self.fields)

    def __contains__(self, tag: object) -> bool:
        return any(t == tag for t, _ in self.fields)

    def __getitem__(self, tag: int) -> FieldNode:
        for t, node in self.fields:
            if t == tag:
                return node
        raise KeyError(tag)

    def get(self, tag: int, default: Any = None) -> Any:
        try:
            return self[tag]
        except KeyError:
            return default

    def tags(self) -> list[int]:
        return [tag for tag, _ in self.fields]

    def items(self) -> list[tuple[int, FieldNode]]:
        return list(self.fields)

    def to_plain(self) -> dict[int, Any]:
        """
        Convert to plain Python values: str for scalars, list of dicts for
        groups. Dict insertion order follows the field order.
        """
        out: dict[int, Any] = {}
        for tag, node in self.fields:
            if isinstance(node, Scalar):
                out[tag] = node.value
            else:
                out[tag] = [entry.to_plain() for entry in node.entries]
        return out


__all__ = [
    "Path",
    "Scalar",
    "Group",
    "FieldNode",
    "FieldMap",
]
