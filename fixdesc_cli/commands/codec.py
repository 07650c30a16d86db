"""
CLI Encode / Decode Commands

Usage:
    fixdesc encode tree.json [--out tree.cbor]
    fixdesc decode 0xa10f63555344          (hex string)
    fixdesc decode tree.cbor              (raw CBOR or hex text in a file)
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.canonical import decode_canonical_tree, encode_canonical_tree, field_map_to_jsonable
from core.crypto.hashing import to_hex
from core.schemas.errors import DescriptorException
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    json_indent,
    load_tree_file,
    wants_json,
)


logger = logging.getLogger(__name__)


def _parse_hex(text: str) -> bytes:
    cleaned = "".join(text.split())
    if cleaned.startswith(("0x", "0X")):
        cleaned = cleaned[2:]
    return bytes.fromhex(cleaned)


def read_cbor_input(source: str) -> bytes:
    """
    Resolve the decode argument to CBOR bytes.

    An existing file holding 0x-prefixed hex text is read as hex; any other
    file is raw CBOR. A non-file argument is parsed as hex.
    """
    path = Path(source)
    if path.is_file():
        data = path.read_bytes()
        head = data.lstrip()[:2]
        if head in (b"0x", b"0X"):
            return _parse_hex(data.decode("ascii"))
        return data
    return _parse_hex(source)


def encode_cmd(args: Namespace) -> int:
    """Print (or write) the canonical CBOR of a field tree."""
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Field tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        cbor = encode_canonical_tree(load_tree_file(tree_path))
    except DescriptorException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(cbor)
        logger.info(f"Wrote {len(cbor)} bytes of CBOR to: {out_path}")

    if wants_json(args):
        print(json.dumps({"cbor": to_hex(cbor), "size": len(cbor)}, indent=json_indent(args)))
    else:
        print(to_hex(cbor))
    return EXIT_SUCCESS


def decode_cmd(args: Namespace) -> int:
    """Strictly decode canonical CBOR and print the field tree as JSON."""
    try:
        data = read_cbor_input(args.source)
    except ValueError as e:
        print(f"Error: Input is neither a file nor valid hex: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    logger.info(f"Decoding {len(data)} bytes of CBOR")
    try:
        tree = decode_canonical_tree(data)
    except DescriptorException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(json.dumps(field_map_to_jsonable(tree), indent=json_indent(args), ensure_ascii=False))
    return EXIT_SUCCESS
