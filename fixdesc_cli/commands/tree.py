"""
CLI Tree Command

Show the full Merkle tree of a descriptor, with every intermediate hash.

Usage:
    fixdesc tree tree.json [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.commitment import commit_canonical_tree
from core.crypto.hashing import to_hex
from core.merkle import MerkleNode, compute_tree_depth
from core.schemas.errors import DescriptorException
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    json_indent,
    load_tree_file,
    wants_json,
)


logger = logging.getLogger(__name__)


def render_node(node: MerkleNode, depth: int = 0) -> list[str]:
    """Render a node and its children as indented lines."""
    label = node.kind
    if node.path is not None:
        label = f"{label} {'.'.join(str(p) for p in node.path)}"
    lines = [f"{'  ' * depth}{label}: {to_hex(node.hash)}"]
    for child in (node.left, node.right):
        if child is not None:
            lines.extend(render_node(child, depth + 1))
    return lines


def tree_cmd(args: Namespace) -> int:
    """Print the Merkle tree of a field tree file."""
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Field tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        commitment = commit_canonical_tree(load_tree_file(tree_path))
    except DescriptorException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    structure = commitment.structure()
    logger.info(
        f"Built tree of depth {compute_tree_depth(len(commitment.leaves))} "
        f"over {len(commitment.leaves)} leaves"
    )

    if wants_json(args):
        print(json.dumps(structure.to_dict(), indent=json_indent(args)))
    else:
        print("\n".join(render_node(structure)))
    return EXIT_SUCCESS
