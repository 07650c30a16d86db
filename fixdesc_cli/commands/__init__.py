"""
CLI command modules.
"""

from fixdesc_cli.commands import codec, commit, prove, tree, verify

__all__ = ["codec", "commit", "prove", "tree", "verify"]
