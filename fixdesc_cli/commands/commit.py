"""
CLI Commit Command

Commit a descriptor field tree:
- Canonicalize and encode it as canonical CBOR
- Enumerate one leaf per scalar field
- Compute the Merkle root

Usage:
    fixdesc commit tree.json [--out commitment.json] [--leaves] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from core.commitment import DescriptorCommitment, commit_canonical_tree
from core.merkle import compute_tree_depth
from core.schemas.errors import DescriptorException
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    json_indent,
    load_tree_file,
    wants_json,
)


logger = logging.getLogger(__name__)


@dataclass
class CommitSummary:
    """Summary of a commitment for CLI output."""
    tree_path: str = ""
    root: str = ""
    cbor: str = ""
    cbor_size: int = 0
    leaf_count: int = 0
    depth: int = 0
    output_path: str | None = None
    leaves: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.output_path is None:
            del d["output_path"]
        if not d["leaves"]:
            del d["leaves"]
        return d


def build_summary(
    tree_path: str,
    commitment: DescriptorCommitment,
    include_leaves: bool = False,
) -> CommitSummary:
    """Build a CommitSummary from a commitment."""
    record = commitment.to_record()
    summary = CommitSummary(
        tree_path=tree_path,
        root=record.root,
        cbor=record.cbor,
        cbor_size=len(commitment.cbor),
        leaf_count=len(commitment.leaves),
        depth=compute_tree_depth(len(commitment.leaves)),
    )
    if include_leaves:
        summary.leaves = [leaf.model_dump() for leaf in record.leaves]
    return summary


def print_summary_human(summary: CommitSummary) -> None:
    """Print summary in human-readable format."""
    print(f"tree: {summary.tree_path}")
    print(f"root: {summary.root}")
    print(f"cbor_size: {summary.cbor_size}")
    print(f"leaves: {summary.leaf_count}")
    print(f"depth: {summary.depth}")
    if summary.output_path:
        print(f"output: {summary.output_path}")

    if summary.leaves:
        print(f"\nleaves ({len(summary.leaves)}):")
        for leaf in summary.leaves:
            path = ".".join(str(p) for p in leaf["path"])
            print(f"  {path} = {leaf['value_bytes']} -> {leaf['leaf_hash']}")


def print_summary_json(summary: CommitSummary, indent: int = 2) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=indent))


def commit_cmd(args: Namespace) -> int:
    """
    Execute the commit command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Field tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    logger.info(f"Committing field tree: {tree_path}")
    try:
        commitment = commit_canonical_tree(load_tree_file(tree_path))
    except DescriptorException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = build_summary(str(tree_path), commitment, include_leaves=args.leaves)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(
            commitment.to_record().model_dump_json(indent=json_indent(args)),
            encoding="utf-8",
        )
        summary.output_path = str(out_path)
        logger.info(f"Wrote commitment record to: {out_path}")

    if wants_json(args):
        print_summary_json(summary, indent=json_indent(args))
    else:
        print_summary_human(summary)

    logger.info(f"Committed {summary.leaf_count} leaves under root {summary.root}")
    return EXIT_SUCCESS
