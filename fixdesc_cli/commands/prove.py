"""
CLI Prove Command

Generate an inclusion proof for one field of a descriptor.

Usage:
    fixdesc prove tree.json --path 454,1,456 [--out proof.json] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from core.commitment import commit_canonical_tree, proof_to_record
from core.schemas.commitment import ProofRecord
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
class ProveSummary:
    """Summary of a generated proof for CLI output."""
    tree_path: str = ""
    root: str = ""
    index: int = 0
    leaf_count: int = 0
    proof: dict[str, Any] | None = None
    output_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.output_path is None:
            del d["output_path"]
        return d


def print_summary_human(summary: ProveSummary) -> None:
    """Print summary in human-readable format."""
    proof = summary.proof or {}
    path = ".".join(str(p) for p in proof.get("path") or [])
    print(f"tree: {summary.tree_path}")
    print(f"root: {summary.root}")
    print(f"field: {path}")
    print(f"path_encoded: {proof.get('path_encoded', '')}")
    print(f"value_bytes: {proof.get('value_bytes', '')}")
    print(f"leaf_index: {summary.index} of {summary.leaf_count}")

    siblings = proof.get("proof", [])
    directions = proof.get("directions", [])
    print(f"\nsteps ({len(siblings)}):")
    for sibling, is_right in zip(siblings, directions):
        side = "right" if is_right else "left"
        print(f"  [{side}] {sibling}")

    if summary.output_path:
        print(f"\noutput: {summary.output_path}")


def print_summary_json(summary: ProveSummary, indent: int = 2) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=indent))


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    tree_path = Path(args.tree_path)
    if not tree_path.exists():
        print(f"Error: Field tree not found: {tree_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    field_path = tuple(args.path)
    logger.info(f"Generating proof for {list(field_path)} in: {tree_path}")
    try:
        commitment = commit_canonical_tree(load_tree_file(tree_path))
        proof = commitment.prove(field_path)
    except DescriptorException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    record: ProofRecord = proof_to_record(proof)
    summary = ProveSummary(
        tree_path=str(tree_path),
        root=commitment.root_hex,
        index=proof.index,
        leaf_count=len(commitment.leaves),
        proof=record.model_dump(),
    )

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(record.model_dump_json(indent=json_indent(args)), encoding="utf-8")
        summary.output_path = str(out_path)
        logger.info(f"Wrote proof record to: {out_path}")

    if wants_json(args):
        print_summary_json(summary, indent=json_indent(args))
    else:
        print_summary_human(summary)
    return EXIT_SUCCESS
