"""
CLI Verify Command

Verify a field inclusion proof offline against a Merkle root.

Usage:
    fixdesc verify proof.json --root 0x... [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.commitment import verify_proof_record
from core.schemas.commitment import ProofRecord
from core.schemas.verification import VerificationResult
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    json_indent,
    wants_json,
)


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    proof_path: str = ""
    root: str = ""
    path: list[int] | None = None
    steps: int = 0
    ok: bool = False
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.path is None:
            del d["path"]
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d


def load_proof_record(path: Path) -> ProofRecord:
    """Load and validate a proof record JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return ProofRecord.model_validate_json(f.read())


def build_summary(
    proof_path: str,
    root: str,
    record: ProofRecord,
    result: VerificationResult,
    debug: bool = False,
) -> VerifySummary:
    """Build a VerifySummary from a verification result."""
    summary = VerifySummary(
        proof_path=proof_path,
        root=root,
        path=record.path,
        steps=len(record.proof),
        ok=result.ok,
        errors=result.get_error_messages(),
    )
    if debug:
        summary.checks = [
            {"check_id": check.check_id, "ok": check.ok, "message": check.message}
            for check in result.checks
        ]
    return summary


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"proof: {summary.proof_path}")
    if summary.path is not None:
        print(f"field: {'.'.join(str(p) for p in summary.path)}")
    print(f"root: {summary.root}")
    print(f"steps: {summary.steps}")
    print(f"ok: {str(summary.ok).lower()}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors:
            print(f"  ✗ {err}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}: {check['message']}")


def print_summary_json(summary: VerifySummary, indent: int = 2) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=indent))


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (1 for a malformed root, 2 when the proof is rejected)
    """
    proof_path = Path(args.proof_path)
    if not proof_path.exists():
        print(f"Error: Proof not found: {proof_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        record = load_proof_record(proof_path)
    except ValidationError as e:
        print(f"Error: Invalid proof record: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    logger.info(f"Verifying proof {proof_path} against root {args.root}")
    result = verify_proof_record(record, args.root)
    summary = build_summary(str(proof_path), args.root, record, result, debug=args.debug)

    if wants_json(args):
        print_summary_json(summary, indent=json_indent(args))
    else:
        print_summary_human(summary)

    if summary.ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    root_check = result.get_check("root_format")
    if root_check is not None and not root_check.ok:
        logger.error(f"Malformed root: {root_check.message}")
        return EXIT_RUNTIME_ERROR

    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
