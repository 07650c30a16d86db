"""
Module execution entry point.

Allows running with: python -m fixdesc_cli
"""

import sys
from fixdesc_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
