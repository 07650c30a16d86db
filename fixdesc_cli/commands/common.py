"""
Helpers shared by the CLI commands: exit codes, input loading and output
format selection.
"""

from __future__ import annotations

import argparse
from argparse import Namespace
from pathlib import Path

from core.canonical import build_tree_from_json
from core.schemas.tree import FieldMap


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def load_tree_file(path: Path) -> FieldMap:
    """Read a field tree JSON file and build its canonical tree."""
    with open(path, "r", encoding="utf-8") as f:
        return build_tree_from_json(f.read())


def parse_field_path(text: str) -> tuple[int, ...]:
    """argparse type for a field path like "454,1,456"."""
    parts = [part.strip() for part in text.split(",")]
    if not parts or any(not part.isdigit() for part in parts):
        raise argparse.ArgumentTypeError(
            f"field path must be comma-separated non-negative integers, got {text!r}"
        )
    return tuple(int(part) for part in parts)


def wants_json(args: Namespace) -> bool:
    """--json on the command line, or json as the configured default."""
    if getattr(args, "json", False):
        return True
    config = getattr(args, "cli_config", None)
    return config is not None and config.default_output_format == "json"


def json_indent(args: Namespace) -> int:
    config = getattr(args, "cli_config", None)
    return config.json_indent if config is not None else 2
