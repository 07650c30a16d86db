"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m fixdesc_cli commit <tree.json> [--out PATH] [--leaves] [--json]
    python -m fixdesc_cli encode <tree.json> [--out PATH] [--json]
    python -m fixdesc_cli decode <hex-or-file>
    python -m fixdesc_cli prove <tree.json> --path 454,1,456 [--out PATH] [--json]
    python -m fixdesc_cli verify <proof.json> --root 0x... [--json] [--debug]
    python -m fixdesc_cli tree <tree.json> [--json]
    python -m fixdesc_cli config --init

Environment Variables:
    FIXDESC_LOG_LEVEL           Log level (default: INFO)
    FIXDESC_LOG_FILE            Also write logs to this file
    FIXDESC_OUTPUT_FORMAT       Default output format: human or json
    FIXDESC_JSON_INDENT         Indent for JSON output (default: 2)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from fixdesc_cli import __version__
from fixdesc_cli.commands import codec, commit, prove, tree, verify
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    parse_field_path,
)
from fixdesc_cli.config import load_config, get_default_config_template


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="fixdesc",
        description="FIX descriptor commitments - encode field trees, compute Merkle roots, prove and verify fields.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./fixdesc.json or ~/.config/fixdesc/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- commit command ---
    commit_parser = subparsers.add_parser(
        "commit",
        help="Compute the canonical CBOR and Merkle root of a field tree",
        description="Canonicalize a field tree, encode it and commit every scalar field under one root.",
    )
    commit_parser.add_argument(
        "tree_path",
        type=str,
        help="Path to field tree JSON (tags as keys, groups as lists of objects)",
    )
    commit_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the commitment record (root, cbor, leaves) to this JSON file",
    )
    commit_parser.add_argument(
        "--leaves",
        action="store_true",
        default=False,
        help="Include every leaf in the output",
    )
    _add_output_flags(commit_parser)
    commit_parser.set_defaults(func=commit.commit_cmd)

    # --- encode command ---
    encode_parser = subparsers.add_parser(
        "encode",
        help="Print the canonical CBOR of a field tree",
    )
    encode_parser.add_argument("tree_path", type=str, help="Path to field tree JSON")
    encode_parser.add_argument("--out", "-o", type=str, default=None, help="Write raw CBOR bytes to this file")
    _add_output_flags(encode_parser)
    encode_parser.set_defaults(func=codec.encode_cmd)

    # --- decode command ---
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode canonical CBOR back into a field tree",
        description="Strictly decode canonical CBOR; non-canonical input is rejected.",
    )
    decode_parser.add_argument(
        "source",
        type=str,
        help="Hex string (0x optional) or a file with raw CBOR or 0x hex",
    )
    decode_parser.set_defaults(func=codec.decode_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one field",
    )
    prove_parser.add_argument("tree_path", type=str, help="Path to field tree JSON")
    prove_parser.add_argument(
        "--path", "-p",
        type=parse_field_path,
        required=True,
        help="Field path as comma-separated tags and entry indices, e.g. 454,1,456",
    )
    prove_parser.add_argument("--out", "-o", type=str, default=None, help="Write the proof record to this JSON file")
    _add_output_flags(prove_parser)
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof record against a Merkle root",
        description="Recompute the root from a proof record; exit 2 when it does not match.",
    )
    verify_parser.add_argument("proof_path", type=str, help="Path to proof record JSON")
    verify_parser.add_argument(
        "--root", "-r",
        type=str,
        required=True,
        help="Expected Merkle root (0x-prefixed, 32 bytes)",
    )
    _add_output_flags(verify_parser)
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include detailed checks",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- tree command ---
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the full Merkle tree with intermediate hashes",
    )
    tree_parser.add_argument("tree_path", type=str, help="Path to field tree JSON")
    _add_output_flags(tree_parser)
    tree_parser.set_defaults(func=tree.tree_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="fixdesc.json",
        help="Path for config file (default: fixdesc.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (FIXDESC_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(asdict(args.cli_config), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: fixdesc config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
