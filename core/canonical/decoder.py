"""
Canonical Decoder
Strict inverse of core.canonical.encoder, for inspection tooling.

Only canonical bytes are accepted, so for every input that decodes:

    encode_canonical_tree(decode_canonical_tree(data)) == data

Rejected (DecodingError): non-shortest arguments, indefinite lengths,
semantic tags, floats/simple values, keys that are not unsigned integers,
keys out of ascending order or repeated, invalid UTF-8, truncated input
and trailing bytes. Nesting depth is not limited; maps and arrays are read
with an explicit stack.

Proof verification never decodes anything; path_encoded stays opaque bytes
on the verifying side.
"""
from __future__ import annotations

from core.canonical.encoder import MAJOR_ARRAY, MAJOR_MAP, MAJOR_TEXT, MAJOR_UNSIGNED
from core.schemas.errors import DecodingError
from core.schemas.tree import FieldMap, FieldNode, Group, Path, Scalar


_MAJOR_NAMES = {
    0: "unsigned integer",
    1: "negative integer",
    2: "byte string",
    3: "text string",
    4: "array",
    5: "map",
    6: "tag",
    7: "simple/float",
}

# Smallest argument each width may carry in shortest form
_MIN_FOR_WIDTH = {1: 24, 2: 0x100, 4: 0x10000, 8: 0x100000000}


class _Reader:
    """Cursor over canonical CBOR bytes."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, n: int) -> bytes:
        if self.offset + n > len(self.data):
            raise DecodingError(
                f"Unexpected end of input: need {n} bytes",
                offset=self.offset,
            )
        chunk = self.data[self.offset:self.offset + n]
        self.offset += n
        return chunk

    def read_head(self) -> tuple[int, int]:
        start = self.offset
        initial = self.take(1)[0]
        major = initial >> 5
        info = initial & 0x1F

        if info < 24:
            return major, info
        if info == 31:
            raise DecodingError("Indefinite-length items are not canonical", offset=start)
        if info > 27:
            raise DecodingError(f"Reserved additional information {info}", offset=start)

        width = 1 << (info - 24)
        argument = int.from_bytes(self.take(width), "big")
        if argument < _MIN_FOR_WIDTH[width]:
            raise DecodingError(
                f"Non-shortest encoding of argument {argument}",
                offset=start,
            )
        return major, argument

    def expect(self, major: int, what: str) -> int:
        start = self.offset
        actual, argument = self.read_head()
        if actual != major:
            raise DecodingError(
                f"Expected {what}, found {_MAJOR_NAMES[actual]}",
                offset=start,
            )
        return argument


def _read_text(reader: _Reader, length: int) -> str:
    start = reader.offset
    raw = reader.take(length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodingError(f"Invalid UTF-8 in text string: {e.reason}", offset=start) from e


class _MapState:
    """A map being read: remaining entries and the last key seen."""

    def __init__(self, count: int) -> None:
        self.remaining = count
        self.previous: int | None = None
        self.fields: list[tuple[int, FieldNode]] = []

    def accept(self, node: FieldNode) -> None:
        self.fields.append((self.previous, node))
        self.remaining -= 1

    def result(self) -> FieldMap:
        return FieldMap(fields=tuple(self.fields))


class _GroupState:
    """An array of entry maps being read."""

    def __init__(self, count: int) -> None:
        self.remaining = count
        self.entries: list[FieldMap] = []

    def accept(self, entry: FieldMap) -> None:
        self.entries.append(entry)
        self.remaining -= 1

    def result(self) -> Group:
        return Group(entries=tuple(self.entries))


def _read_key(reader: _Reader, state: _MapState) -> None:
    key_offset = reader.offset
    tag = reader.expect(MAJOR_UNSIGNED, "unsigned integer key")
    if state.previous is not None and tag <= state.previous:
        raise DecodingError(
            f"Map keys not in strictly ascending order: {tag} after {state.previous}",
            offset=key_offset,
        )
    state.previous = tag


def _read_map(reader: _Reader) -> FieldMap:
    stack: list[_MapState | _GroupState] = [_MapState(reader.expect(MAJOR_MAP, "map"))]

    while True:
        state = stack[-1]
        if state.remaining == 0:
            stack.pop()
            value = state.result()
            if not stack:
                return value
            stack[-1].accept(value)
            continue

        if isinstance(state, _GroupState):
            stack.append(_MapState(reader.expect(MAJOR_MAP, "map")))
            continue

        _read_key(reader, state)
        start = reader.offset
        major, argument = reader.read_head()
        if major == MAJOR_TEXT:
            state.accept(Scalar(_read_text(reader, argument)))
        elif major == MAJOR_ARRAY:
            stack.append(_GroupState(argument))
        else:
            raise DecodingError(
                f"Field value must be text string or array, found {_MAJOR_NAMES[major]}",
                offset=start,
            )


def _ensure_consumed(reader: _Reader) -> None:
    if reader.offset != len(reader.data):
        raise DecodingError(
            f"Trailing bytes after canonical item: {len(reader.data) - reader.offset}",
            offset=reader.offset,
        )


def decode_canonical_tree(data: bytes) -> FieldMap:
    """
    Decode canonical CBOR bytes back into a FieldMap.

    Args:
        data: Bytes produced by encode_canonical_tree()

    Returns:
        The canonical tree

    Raises:
        DecodingError: If the bytes are not a canonical tree encoding
    """
    reader = _Reader(bytes(data))
    tree = _read_map(reader)
    _ensure_consumed(reader)
    return tree


def decode_path(data: bytes) -> Path:
    """
    Decode a canonical path encoding (array of unsigned integers).

    Raises:
        DecodingError: If the bytes are not a canonical path encoding
    """
    reader = _Reader(bytes(data))
    length = reader.expect(MAJOR_ARRAY, "array")
    path = tuple(reader.expect(MAJOR_UNSIGNED, "unsigned integer") for _ in range(length))
    _ensure_consumed(reader)
    return path


__all__ = [
    "decode_canonical_tree",
    "decode_path",
]
