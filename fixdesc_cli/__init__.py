"""
FIX Descriptor CLI

Command-line interface for committing FIX descriptor field trees.

Usage:
    python -m fixdesc_cli commit tree.json --out commitment.json
    python -m fixdesc_cli prove tree.json --path 454,1,456 --out proof.json
    python -m fixdesc_cli verify proof.json --root 0x...
    python -m fixdesc_cli tree tree.json
"""

__version__ = "0.1.0"
